from __future__ import annotations

"""Runtime dependency bundle, per-run state and LangGraph state types.

The runtime engine is dependency-injected.

- ``EngineDeps`` collects the collaborators the engine needs (model call,
  pricing table, clock).
- ``RunState`` is the mutable, per-run record of progress. It is created by
  ``AgentRunner.execute`` and never shared between runs, so it needs no
  locking.
- ``_GraphState`` is the state passed between LangGraph nodes.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, NotRequired, Optional, Required, TypedDict

from ..guardrails.loop_detection import DEFAULT_WINDOW_SIZE, ToolCallRecord
from ..guardrails.models import BudgetVerdict
from ..guardrails.pricing import DEFAULT_PRICING_TABLE, PricingTable
from ..model_call.base import ModelCall
from ..schemas.config import RunConfig
from ..schemas.domain import ErrorKind, RunPhase, RunResult, Step, TokenUsage
from ..tools.definitions import ToolSet
from .actions import ActionCollector
from .cancellation import CancellationToken

StepCallback = Callable[[Step], None]

_TERMINAL: FrozenSet[RunPhase] = frozenset(p for p in RunPhase if p.is_terminal)

_ALLOWED_TRANSITIONS: Dict[RunPhase, FrozenSet[RunPhase]] = {
    RunPhase.not_started: frozenset({RunPhase.running, RunPhase.cancelled}),
    RunPhase.running: _TERMINAL,
}

_ABORT_PHASES: Dict[ErrorKind, RunPhase] = {
    ErrorKind.loop_detected: RunPhase.loop_detected,
    ErrorKind.timeout: RunPhase.timed_out,
    ErrorKind.cancelled: RunPhase.cancelled,
    ErrorKind.cost_exceeded: RunPhase.cost_exceeded,
    ErrorKind.generic_error: RunPhase.errored,
}


def phase_for_abort(reason: ErrorKind) -> RunPhase:
    """Map the reason a step hook aborted with onto the run's terminal phase."""
    return _ABORT_PHASES[reason]


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``AgentRunner``.

    Attributes:
        model_call: The model call capability invoked once per run.
        pricing: Pricing table used by the budget check.
        clock: Monotonic clock in seconds; injectable for tests.
        loop_window: Window size used by the loop detector.
        cancel_grace_seconds: How long a discarded model call is given to
            unwind after the timer wins the race.
    """

    model_call: ModelCall
    pricing: PricingTable = DEFAULT_PRICING_TABLE
    clock: Callable[[], float] = time.monotonic
    loop_window: int = DEFAULT_WINDOW_SIZE
    cancel_grace_seconds: float = 0.05


@dataclass
class RunState:
    """Mutable progress of one agent run.

    ``steps`` and ``history`` are append-only and in call order. ``phase``
    follows ``NotStarted -> Running -> terminal``; terminal phases are final.
    """

    run_id: str
    config: RunConfig
    started_at: float
    steps: List[Step] = field(default_factory=list)
    history: List[ToolCallRecord] = field(default_factory=list)
    actions: ActionCollector = field(default_factory=ActionCollector)
    phase: RunPhase = RunPhase.not_started
    abort_reason: Optional[ErrorKind] = None
    usage: Optional[TokenUsage] = None
    final_text: str = ""
    error_message: Optional[str] = None
    cancel_reason: Optional[str] = None
    budget: Optional[BudgetVerdict] = None
    started_model_call: bool = False
    model_task: Optional[asyncio.Future] = None

    @property
    def is_finished(self) -> bool:
        return self.phase.is_terminal

    def transition(self, phase: RunPhase) -> None:
        """Move to ``phase``.

        Raises:
            RuntimeError: If the transition is not allowed, notably out of a
                terminal phase.
        """
        allowed = _ALLOWED_TRANSITIONS.get(self.phase, frozenset())
        if phase not in allowed:
            raise RuntimeError(f"illegal run transition: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def elapsed_ms(self, now: float) -> float:
        return (now - self.started_at) * 1000


@dataclass(frozen=True)
class RunInputs:
    """Caller-supplied inputs of one ``execute()`` call."""

    system_prompt: str
    user_prompt: str
    tools: ToolSet
    cancellation_token: Optional[CancellationToken] = None
    on_step: Optional[StepCallback] = None


class _GraphState(TypedDict):
    """LangGraph state for a single engine run.

    Required keys:

    - ``run``: the mutable ``RunState``.
    - ``inputs``: the caller-supplied ``RunInputs``.

    Optional keys:

    - ``result``: the assembled ``RunResult``, set by the finish node.
    """

    run: Required[RunState]
    inputs: Required[RunInputs]
    result: NotRequired[RunResult]
