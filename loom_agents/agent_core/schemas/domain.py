"""Domain enums and models for guardrailed agent runs.

These types are the stable interface between the runtime engine and its
callers (request handlers, UI progress streams). They are serializable with
``model_dump(by_alias=True)`` so a handler can return them directly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field, model_validator

from .base import BaseSchema


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class RunStatus(str, Enum):
    """Terminal status reported to the caller of a run."""

    success = "success"
    error = "error"
    cancelled = "cancelled"
    timeout = "timeout"


class ErrorKind(str, Enum):
    """
    Machine-oriented reason for a non-successful run.

    ``cancelled``, ``timeout`` and ``loop_detected`` are recoverable by the
    caller (retry with adjusted parameters or after user action).
    ``cost_exceeded`` signals a mismatch between configuration and usage.
    ``generic_error`` carries the raw underlying message.
    """

    cancelled = "cancelled"
    timeout = "timeout"
    loop_detected = "loop_detected"
    cost_exceeded = "cost_exceeded"
    generic_error = "generic_error"


class RunPhase(str, Enum):
    """Lifecycle of a single ``execute()`` call."""

    not_started = "not_started"
    running = "running"
    succeeded = "succeeded"
    timed_out = "timed_out"
    loop_detected = "loop_detected"
    cancelled = "cancelled"
    cost_exceeded = "cost_exceeded"
    errored = "errored"

    @property
    def is_terminal(self) -> bool:
        return self not in (RunPhase.not_started, RunPhase.running)


class ActionType(str, Enum):
    """Kinds of effects that must be approved by a human before they are applied."""

    delete = "delete"
    rename = "rename"
    create_branch = "create_branch"
    create_document = "create_document"


class Step(BaseSchema):
    """
    One recorded tool call and its result.

    Steps are append-only and strictly chronological within a run; ``index``
    is the position in the run's step list.
    """

    index: int = Field(ge=0)
    tool_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    timestamp: datetime = Field(default_factory=_utc_now)


class Action(BaseSchema):
    """
    A proposed effect awaiting human approval.

    Built from a tool result carrying the pending-confirmation marker. The
    engine never approves or mutates an action after creating it.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: Optional[ActionType] = None
    description: str
    approved: bool = False
    data: Dict[str, Any] = Field(default_factory=dict)


class TokenUsage(BaseSchema):
    """Token accounting for a run; all counts are zero when unavailable."""

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)

    @classmethod
    def from_counts(cls, prompt_tokens: Any, completion_tokens: Any) -> "TokenUsage":
        """Build usage from possibly-missing provider counts."""
        prompt = _non_negative_int(prompt_tokens)
        completion = _non_negative_int(completion_tokens)
        return cls(prompt_tokens=prompt, completion_tokens=completion, total_tokens=prompt + completion)

    @classmethod
    def zero(cls) -> "TokenUsage":
        return cls()


def _non_negative_int(value: Any) -> int:
    try:
        n = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(n, 0)


class RunResult(BaseSchema):
    """
    The single value returned by every agent run, whichever path ended it.

    ``error`` and ``error_kind`` are present iff ``status`` is not
    ``success``. ``summary`` is always human-readable prose and never equal to
    ``error``.
    """

    status: RunStatus
    actions: List[Action] = Field(default_factory=list)
    steps: List[Step] = Field(default_factory=list)
    summary: str = Field(min_length=1)
    usage: TokenUsage = Field(default_factory=TokenUsage)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    cost_usd: Optional[float] = Field(default=None, ge=0.0)

    @model_validator(mode="after")
    def _check_error_matches_status(self) -> "RunResult":
        if self.status == RunStatus.success:
            if self.error is not None or self.error_kind is not None:
                raise ValueError("successful runs must not carry an error")
        elif not self.error or self.error_kind is None:
            raise ValueError(f"status={self.status.value} requires error and error_kind")
        return self
