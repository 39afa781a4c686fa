"""Integration tests for the Pydantic AI model call.

The language model is replaced by a ``FunctionModel`` that replays a script of
tool calls, so the real ``Agent.iter`` graph, tool execution and usage
accounting are exercised without any network access.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

import pytest
from pydantic import BaseModel
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    RetryPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from loom_agents.agent_core.guardrails.models import StepDecision
from loom_agents.agent_core.guardrails.pricing import ModelPricing, PricingTable
from loom_agents.agent_core.model_call.base import CallStopReason, ModelCallRequest, ToolCallReport
from loom_agents.agent_core.model_call.model_configs import DEFAULT_MODEL_CONFIG
from loom_agents.agent_core.model_call.pydantic_ai_call import PydanticAIModelCall, _usage_of
from loom_agents.agent_core.runtime.cancellation import CancellationToken
from loom_agents.agent_core.runtime.engine import AgentRunner
from loom_agents.agent_core.runtime.models import EngineDeps
from loom_agents.agent_core.schemas.config import RunConfig
from loom_agents.agent_core.schemas.domain import ActionType, ErrorKind, RunStatus
from loom_agents.agent_core.tools.definitions import ToolDefinition, ToolSet
from loom_agents.agent_core.tools.results import PendingConfirmation, PlainResult, pending_confirmation


class _CardInput(BaseModel):
    card_id: str


class _NoInput(BaseModel):
    pass


def _completed_calls(messages: List[ModelMessage]) -> int:
    return sum(
        1
        for m in messages
        if isinstance(m, ModelRequest)
        for p in m.parts
        if isinstance(p, (ToolReturnPart, RetryPromptPart))
    )


def _scripted_model(plan: List[Tuple[str, Dict[str, Any]]], final_text: str = "Board tidied.") -> FunctionModel:
    def _respond(messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        done = _completed_calls(messages)
        if done < len(plan):
            name, args = plan[done]
            return ModelResponse(parts=[ToolCallPart(tool_name=name, args=args, tool_call_id=f"call-{done}")])
        return ModelResponse(parts=[TextPart(content=final_text)])

    return FunctionModel(_respond)


def _looping_model() -> FunctionModel:
    def _respond(messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        n = _completed_calls(messages)
        return ModelResponse(parts=[ToolCallPart(tool_name="list_cards", args={}, tool_call_id=f"call-{n}")])

    return FunctionModel(_respond)


class _Board:
    def __init__(self) -> None:
        self.calls: List[str] = []

    def tools(self) -> ToolSet:
        return ToolSet(
            [
                ToolDefinition(name="list_cards", description="List cards", input_schema=_NoInput, handler=self._list),
                ToolDefinition(
                    name="delete_card", description="Delete a card", input_schema=_CardInput, handler=self._delete
                ),
                ToolDefinition(
                    name="summarize_card", description="Summarize a card", input_schema=_CardInput, handler=self._summarize
                ),
            ]
        )

    def _list(self, payload: _NoInput) -> Dict[str, Any]:
        self.calls.append("list_cards")
        return {"cards": ["c1", "c2"]}

    async def _delete(self, payload: _CardInput) -> Dict[str, Any]:
        self.calls.append("delete_card")
        return pending_confirmation(ActionType.delete, f"Delete card {payload.card_id}", cardId=payload.card_id)

    def _summarize(self, payload: _CardInput) -> str:
        self.calls.append("summarize_card")
        return f"summary of {payload.card_id}"


_PLAN = [
    ("list_cards", {}),
    ("delete_card", {"card_id": "c1"}),
    ("summarize_card", {"card_id": "c2"}),
]


def _request(
    tools: ToolSet,
    on_step,
    *,
    max_steps: int = 10,
    token: Optional[CancellationToken] = None,
) -> ModelCallRequest:
    return ModelCallRequest(
        model_id="test-model",
        api_key="",
        system_prompt="You tidy canvases.",
        user_prompt="Clean up the board",
        sampling=DEFAULT_MODEL_CONFIG,
        tools=tools,
        max_steps=max_steps,
        on_step=on_step,
        cancellation_token=token,
    )


@pytest.mark.asyncio
async def test_reports_each_tool_call_in_order() -> None:
    board = _Board()
    reports: List[ToolCallReport] = []

    def _hook(report: ToolCallReport) -> StepDecision:
        reports.append(report)
        return StepDecision.go()

    call = PydanticAIModelCall(model=_scripted_model(_PLAN))
    response = await call.invoke(_request(board.tools(), _hook))

    assert response.stop_reason == CallStopReason.completed
    assert response.text == "Board tidied."
    assert [r.tool_name for r in reports] == ["list_cards", "delete_card", "summarize_card"]
    assert [r.tool_call_id for r in reports] == ["call-0", "call-1", "call-2"]
    assert reports[1].args == {"card_id": "c1"}

    assert isinstance(reports[0].outcome, PlainResult)
    assert reports[0].outcome.raw == {"cards": ["c1", "c2"]}
    assert isinstance(reports[1].outcome, PendingConfirmation)
    assert reports[1].outcome.action_type == ActionType.delete
    assert reports[2].outcome.raw == "summary of c2"

    assert response.usage.total_tokens > 0
    assert response.usage.total_tokens == response.usage.prompt_tokens + response.usage.completion_tokens


@pytest.mark.asyncio
async def test_abort_stops_before_the_next_tool_call() -> None:
    board = _Board()
    seen: List[str] = []

    def _hook(report: ToolCallReport) -> StepDecision:
        seen.append(report.tool_name)
        if len(seen) == 2:
            return StepDecision.abort(ErrorKind.loop_detected)
        return StepDecision.go()

    response = await PydanticAIModelCall(model=_scripted_model(_PLAN)).invoke(_request(board.tools(), _hook))

    assert response.stop_reason == CallStopReason.aborted
    assert seen == ["list_cards", "delete_card"]
    assert board.calls == ["list_cards", "delete_card"]


@pytest.mark.asyncio
async def test_step_limit_caps_model_requests() -> None:
    board = _Board()
    seen: List[str] = []

    def _hook(report: ToolCallReport) -> StepDecision:
        seen.append(report.tool_name)
        return StepDecision.go()

    response = await PydanticAIModelCall(model=_looping_model()).invoke(
        _request(board.tools(), _hook, max_steps=2)
    )

    assert response.stop_reason == CallStopReason.step_limit
    assert len(seen) == 2
    assert response.text == ""


@pytest.mark.asyncio
async def test_cancellation_is_checked_between_nodes() -> None:
    board = _Board()
    token = CancellationToken()

    def _hook(report: ToolCallReport) -> StepDecision:
        token.cancel("stop")
        return StepDecision.go()

    response = await PydanticAIModelCall(model=_scripted_model(_PLAN)).invoke(
        _request(board.tools(), _hook, token=token)
    )

    assert response.stop_reason == CallStopReason.cancelled
    assert board.calls == ["list_cards"]


@pytest.mark.asyncio
async def test_invalid_arguments_are_sent_back_as_retry() -> None:
    board = _Board()
    reports: List[ToolCallReport] = []

    def _hook(report: ToolCallReport) -> StepDecision:
        reports.append(report)
        return StepDecision.go()

    plan = [("delete_card", {"wrong": "c1"}), ("delete_card", {"card_id": "c1"})]
    response = await PydanticAIModelCall(model=_scripted_model(plan)).invoke(_request(board.tools(), _hook))

    assert response.stop_reason == CallStopReason.completed
    assert [r.outcome.raw is None for r in reports] == [True, False]
    assert board.calls == ["delete_card"]


@pytest.mark.asyncio
async def test_model_factory_is_used_when_no_model_is_given() -> None:
    created: List[Tuple[str, str]] = []

    def _factory(model_id: str, api_key: str) -> FunctionModel:
        created.append((model_id, api_key))
        return _scripted_model([])

    response = await PydanticAIModelCall(model_factory=_factory).invoke(
        _request(ToolSet(), lambda report: StepDecision.go())
    )

    assert created == [("test-model", "")]
    assert response.text == "Board tidied."


@pytest.mark.asyncio
async def test_runner_end_to_end_with_pydantic_ai() -> None:
    board = _Board()
    deps = EngineDeps(
        model_call=PydanticAIModelCall(model=_scripted_model(_PLAN)),
        pricing=PricingTable({"test-model": ModelPricing(10.0, 10.0)}),
    )
    config = RunConfig(max_steps=10, timeout_ms=60_000, max_cost_usd=0.50, model_id="test-model")

    result = await AgentRunner(deps).execute(
        system_prompt="You tidy canvases.",
        user_prompt="Clean up the board",
        tools=board.tools(),
        config=config,
    )

    assert result.status == RunStatus.success
    assert result.summary == "Board tidied."
    assert [s.tool_name for s in result.steps] == ["list_cards", "delete_card", "summarize_card"]
    assert len(result.actions) == 1
    assert result.actions[0].type == ActionType.delete
    assert result.actions[0].data["cardId"] == "c1"
    assert result.usage.total_tokens > 0
    assert result.cost_usd is not None and result.cost_usd < 0.50


@pytest.mark.asyncio
async def test_runner_stops_a_looping_pydantic_ai_agent() -> None:
    deps = EngineDeps(model_call=PydanticAIModelCall(model=_looping_model()))
    config = RunConfig(max_steps=20, model_id="test-model")

    result = await AgentRunner(deps).execute(
        system_prompt="s", user_prompt="u", tools=_Board().tools(), config=config
    )

    assert result.status == RunStatus.error
    assert result.error_kind == ErrorKind.loop_detected
    assert len(result.steps) == 6


@pytest.mark.asyncio
async def test_runner_succeeds_on_a_text_only_answer() -> None:
    def answer(messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart("done")])

    deps = EngineDeps(model_call=PydanticAIModelCall(model=FunctionModel(answer)))
    config = RunConfig(model_id="test-model")

    result = await AgentRunner(deps).execute(system_prompt="s", user_prompt="u", config=config)

    assert result.status == RunStatus.success, result.error
    assert result.summary == "done"
    assert result.steps == []
    assert result.usage.total_tokens > 0


@pytest.mark.parametrize(
    "agent_run",
    [
        SimpleNamespace(usage=SimpleNamespace(input_tokens=12, output_tokens=3)),
        SimpleNamespace(usage=lambda: SimpleNamespace(input_tokens=12, output_tokens=3)),
        SimpleNamespace(usage=lambda: SimpleNamespace(request_tokens=12, response_tokens=3)),
    ],
    ids=["property", "method", "legacy-field-names"],
)
def test_usage_is_read_from_either_api_shape(agent_run: Any) -> None:
    usage = _usage_of(agent_run)

    assert usage.prompt_tokens == 12
    assert usage.completion_tokens == 3
    assert usage.total_tokens == 15
