"""Tagged tool results.

Tools return either an opaque value or a pending-confirmation envelope::

    {"status": "pending_confirmation", "actionType": "delete",
     "description": "Delete 'Old notes'", "cardId": "c1", ...}

``classify_tool_result`` decides which one a raw return value is, once, at
the tool boundary. Consumers branch on the type instead of re-inspecting
dictionaries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from ..schemas.domain import ActionType

logger = logging.getLogger(__name__)

PENDING_CONFIRMATION = "pending_confirmation"


@dataclass(frozen=True)
class PlainResult:
    """A tool result that is recorded but never needs approval."""

    value: Any = None

    @property
    def raw(self) -> Any:
        return self.value


@dataclass(frozen=True)
class PendingConfirmation:
    """
    A tool result describing an effect a human must approve.

    Attributes:
        action_type: The declared kind of effect, or None when the tool did
            not declare a recognised one.
        description: Human-readable description provided by the tool.
        payload: The entire envelope as returned by the tool.
    """

    action_type: Optional[ActionType]
    description: Optional[str]
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def raw(self) -> Dict[str, Any]:
        return self.payload


ToolOutcome = Union[PlainResult, PendingConfirmation]


def _parse_action_type(value: Any) -> Optional[ActionType]:
    if value is None:
        return None
    try:
        return ActionType(value)
    except ValueError:
        logger.debug(f"Unrecognised actionType in pending confirmation: {value!r}")
        return None


def classify_tool_result(raw: Any) -> ToolOutcome:
    """Classify a raw tool return value as plain or pending confirmation."""
    if isinstance(raw, (PlainResult, PendingConfirmation)):
        return raw
    if isinstance(raw, Mapping) and raw.get("status") == PENDING_CONFIRMATION:
        payload = dict(raw)
        description = payload.get("description")
        return PendingConfirmation(
            action_type=_parse_action_type(payload.get("actionType")),
            description=str(description) if description else None,
            payload=payload,
        )
    return PlainResult(raw)


def pending_confirmation(action_type: ActionType | str, description: str, **data: Any) -> Dict[str, Any]:
    """Build a pending-confirmation envelope for a tool to return."""
    kind = action_type.value if isinstance(action_type, ActionType) else str(action_type)
    return {"status": PENDING_CONFIRMATION, "actionType": kind, "description": description, **data}
