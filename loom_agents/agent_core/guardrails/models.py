from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..schemas.domain import ErrorKind


@dataclass(frozen=True)
class StepDecision:
    """
    Verdict of the per-step hook.

    The model call keeps going while ``proceed`` is True. On an abort the
    call stops at the next opportunity and ``reason`` says which guardrail
    tripped.

    Attributes:
        proceed: Whether the model call may continue.
        reason: The guardrail that stopped the run, when ``proceed`` is False.
    """

    proceed: bool
    reason: Optional[ErrorKind] = None

    @classmethod
    def go(cls) -> "StepDecision":
        return _CONTINUE

    @classmethod
    def abort(cls, reason: ErrorKind) -> "StepDecision":
        return cls(proceed=False, reason=reason)


_CONTINUE = StepDecision(proceed=True)


@dataclass(frozen=True)
class BudgetVerdict:
    """
    Result of comparing a run's estimated cost against its ceiling.

    Attributes:
        cost_usd: Estimated cost of the run.
        max_cost_usd: The configured ceiling.
        exceeded: True iff ``cost_usd > max_cost_usd``.
    """

    cost_usd: float
    max_cost_usd: float
    exceeded: bool
