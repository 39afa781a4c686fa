"""Normalization of every run outcome into a single ``RunResult``.

Whatever ended the run (success, timeout, loop, cancellation, budget or an
unexpected error), the caller receives the same shape: a status, the steps
and actions collected so far, prose in ``summary`` and, for failures, a
machine-oriented ``error`` string prefixed with the error kind.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..guardrails.budget import format_usd
from ..schemas.domain import ErrorKind, RunPhase, RunResult, RunStatus, TokenUsage
from .models import RunState

DEFAULT_SUCCESS_SUMMARY = "Agent completed successfully."

_PHASE_OUTCOMES: Dict[RunPhase, Tuple[RunStatus, Optional[ErrorKind]]] = {
    RunPhase.succeeded: (RunStatus.success, None),
    RunPhase.timed_out: (RunStatus.timeout, ErrorKind.timeout),
    RunPhase.loop_detected: (RunStatus.error, ErrorKind.loop_detected),
    RunPhase.cancelled: (RunStatus.cancelled, ErrorKind.cancelled),
    RunPhase.cost_exceeded: (RunStatus.error, ErrorKind.cost_exceeded),
    RunPhase.errored: (RunStatus.error, ErrorKind.generic_error),
}


def _seconds(timeout_ms: int) -> str:
    return f"{timeout_ms / 1000:g}s"


class ResultAssembler:
    """Build the terminal ``RunResult`` for a finished ``RunState``."""

    def assemble(self, run: RunState) -> RunResult:
        """
        Produce the run's result.

        Raises:
            RuntimeError: If the run has not reached a terminal phase.
        """
        if run.phase not in _PHASE_OUTCOMES:
            raise RuntimeError(f"cannot assemble result for unfinished run in phase {run.phase.value}")

        status, kind = _PHASE_OUTCOMES[run.phase]
        summary, error = self._describe(run, kind)
        return RunResult(
            status=status,
            actions=run.actions.actions,
            steps=list(run.steps),
            summary=summary,
            usage=run.usage or TokenUsage.zero(),
            error=error,
            error_kind=kind,
            cost_usd=run.budget.cost_usd if run.budget is not None else None,
        )

    def _describe(self, run: RunState, kind: Optional[ErrorKind]) -> Tuple[str, Optional[str]]:
        if kind is None:
            return (run.final_text.strip() or DEFAULT_SUCCESS_SUMMARY), None

        if kind == ErrorKind.timeout:
            secs = _seconds(run.config.timeout_ms)
            return (
                f"Agent timed out after {secs}. Partial results may be available.",
                f"{kind.value}: agent execution timed out after {secs}",
            )

        if kind == ErrorKind.loop_detected:
            return (
                "Agent detected in a loop (repeating same tool calls). Stopped automatically.",
                f"{kind.value}: agent was repeating the same tool calls",
            )

        if kind == ErrorKind.cancelled:
            started = run.started_model_call
            summary = "Agent was cancelled by user." if started else "Agent cancelled before starting."
            return summary, f"{kind.value}: {run.cancel_reason or 'agent run was cancelled'}"

        if kind == ErrorKind.cost_exceeded:
            cost = format_usd(run.budget.cost_usd if run.budget else 0.0)
            ceiling = format_usd(run.config.max_cost_usd)
            return (
                f"Agent exceeded cost budget ({cost} > {ceiling}).",
                f"{kind.value}: cost budget exceeded: {cost} > {ceiling}",
            )

        message = run.error_message or "unknown error"
        return f"Agent encountered an error: {message}", message
