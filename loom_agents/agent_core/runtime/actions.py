"""Promotion of pending-confirmation tool results into actions.

This is the only path by which potentially destructive effects (delete,
rename, branch or document creation) reach a human approver instead of being
applied unattended.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..schemas.domain import Action, Step
from ..tools.results import PendingConfirmation, ToolOutcome

logger = logging.getLogger(__name__)


class ActionCollector:
    """Accumulate one ``Action`` per pending-confirmation step of a run."""

    def __init__(self) -> None:
        self._actions: List[Action] = []

    @property
    def actions(self) -> List[Action]:
        return list(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def collect(self, step: Step, outcome: ToolOutcome) -> Optional[Action]:
        """
        Record an action if ``outcome`` asks for confirmation.

        Args:
            step: The step the outcome belongs to.
            outcome: The classified tool result of ``step``.

        Returns:
            The new action, or None for plain results.
        """
        if not isinstance(outcome, PendingConfirmation):
            return None

        action = Action(
            type=outcome.action_type,
            description=outcome.description or f"{step.tool_name} action",
            approved=False,
            data=dict(outcome.payload),
        )
        self._actions.append(action)
        logger.debug(
            f"Collected pending action: id={action.id}, type={action.type}, step={step.index}, tool={step.tool_name}"
        )
        return action
