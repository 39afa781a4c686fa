"""Model call capability consumed by the runtime engine.

The engine invokes exactly one model call per run. The call runs the whole
multi-step, tool-calling conversation and reports each completed tool call
through ``ModelCallRequest.on_step``. The hook answers with a
``StepDecision``; on an abort the call stops cooperatively and returns, so no
exception is used to unwind across the async boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Protocol

from ..guardrails.models import StepDecision
from ..schemas.domain import TokenUsage
from ..tools.definitions import ToolSet
from ..tools.results import ToolOutcome
from .model_configs import SamplingParams

if TYPE_CHECKING:
    from ..runtime.cancellation import CancellationToken


class CallStopReason(str, Enum):
    """Why a model call returned."""

    completed = "completed"  # The model produced its final answer.
    step_limit = "step_limit"  # The step cap was reached before a final answer.
    aborted = "aborted"  # The step hook asked the call to stop.
    cancelled = "cancelled"  # The cancellation token was triggered.


@dataclass(frozen=True)
class ToolCallReport:
    """One completed tool call as observed by the model call.

    Attributes:
        tool_name: Name of the invoked tool.
        args: Arguments the model supplied.
        outcome: The tool's result, classified at the tool boundary.
        tool_call_id: Provider-assigned id of the call, when available.
    """

    tool_name: str
    args: Dict[str, Any]
    outcome: ToolOutcome
    tool_call_id: Optional[str] = None


StepHook = Callable[[ToolCallReport], StepDecision]


@dataclass(frozen=True)
class ModelCallRequest:
    """Everything a model call needs for one run."""

    model_id: str
    api_key: str
    system_prompt: str
    user_prompt: str
    sampling: SamplingParams
    tools: ToolSet
    max_steps: int
    on_step: StepHook
    cancellation_token: Optional["CancellationToken"] = None

    @property
    def cancelled(self) -> bool:
        return self.cancellation_token is not None and self.cancellation_token.cancelled


@dataclass(frozen=True)
class ModelCallResponse:
    """Final text and usage of a model call."""

    text: str = ""
    usage: TokenUsage = field(default_factory=TokenUsage.zero)
    stop_reason: CallStopReason = CallStopReason.completed


class ModelCall(Protocol):
    """Protocol for model call implementations."""

    async def invoke(self, request: ModelCallRequest) -> ModelCallResponse: ...
