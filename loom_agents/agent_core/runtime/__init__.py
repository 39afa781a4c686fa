"""Runtime engine for guardrailed agent runs.

- ``AgentRunner`` executes a run through a LangGraph state machine.
- ``EngineDeps`` bundles its collaborators (model call, pricing, clock).
- ``CancellationToken`` lets callers stop a run cooperatively.
- ``ActionCollector`` and ``ResultAssembler`` build the run's result.
"""

from .actions import ActionCollector
from .cancellation import CancellationToken
from .engine import AgentRunner
from .models import EngineDeps, RunInputs, RunState, StepCallback, phase_for_abort
from .result import DEFAULT_SUCCESS_SUMMARY, ResultAssembler

__all__ = [
    "ActionCollector",
    "AgentRunner",
    "CancellationToken",
    "DEFAULT_SUCCESS_SUMMARY",
    "EngineDeps",
    "ResultAssembler",
    "RunInputs",
    "RunState",
    "StepCallback",
    "phase_for_abort",
]
