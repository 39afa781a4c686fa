"""Pydantic AI implementation of the ``ModelCall`` protocol.

The whole multi-step conversation runs inside one ``Agent.iter`` loop. Each
node is inspected as it is produced:

- a ``CallToolsNode`` carries the model's tool calls and any text it wrote;
- the following ``ModelRequestNode`` carries the tool returns, which are
  reported to the step hook in call order before the next model request is
  made.

Step limits, cooperative aborts and cancellation are all enforced between
nodes by leaving the loop, so the underlying provider request is never left
half-consumed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError
from pydantic_ai import Agent, ModelRetry, ModelSettings, Tool
from pydantic_ai.messages import RetryPromptPart, TextPart, ToolCallPart, ToolReturnPart
from pydantic_ai.models import Model

from ..schemas.domain import TokenUsage
from ..tools.definitions import ToolDefinition, ToolSet
from ..tools.results import classify_tool_result
from .base import CallStopReason, ModelCallRequest, ModelCallResponse, ToolCallReport
from .providers import create_model

logger = logging.getLogger(__name__)

ModelFactory = Callable[[str, str], Model]


def _as_pydantic_ai_tool(definition: ToolDefinition) -> Tool:
    async def _run(**kwargs: Any) -> Any:
        try:
            return await definition.invoke(kwargs)
        except ValidationError as e:
            raise ModelRetry(f"Invalid arguments for tool '{definition.name}': {e}") from e

    return Tool.from_schema(
        _run,
        name=definition.name,
        description=definition.description,
        json_schema=definition.get_input_schema_json(),
    )


def _usage_of(agent_run: Any) -> TokenUsage:
    # ``AgentRun.usage`` is a method in early 1.x releases and a property later.
    usage = agent_run.usage
    if callable(usage):
        usage = usage()
    prompt = getattr(usage, "input_tokens", None)
    if prompt is None:
        prompt = getattr(usage, "request_tokens", 0)
    completion = getattr(usage, "output_tokens", None)
    if completion is None:
        completion = getattr(usage, "response_tokens", 0)
    return TokenUsage.from_counts(prompt, completion)


class PydanticAIModelCall:
    """
    Run a tool-calling conversation with a Pydantic AI ``Agent``.

    Args:
        model: A ready Pydantic AI model to use for every request. When
            omitted, a model is built per request from its model id and API
            key with ``model_factory``.
        model_factory: Builds a model from ``(model_id, api_key)``.
    """

    def __init__(self, model: Optional[Model] = None, model_factory: ModelFactory = create_model) -> None:
        self._model = model
        self._model_factory = model_factory

    def _resolve_model(self, request: ModelCallRequest) -> Model:
        if self._model is not None:
            return self._model
        return self._model_factory(request.model_id, request.api_key)

    def _build_agent(self, request: ModelCallRequest) -> Agent:
        return Agent(
            self._resolve_model(request),
            system_prompt=request.system_prompt,
            tools=[_as_pydantic_ai_tool(t) for t in request.tools],
            model_settings=ModelSettings(
                temperature=request.sampling.temperature,
                max_tokens=request.sampling.max_tokens,
            ),
        )

    async def invoke(self, request: ModelCallRequest) -> ModelCallResponse:
        agent = self._build_agent(request)
        pending: Dict[str, Tuple[str, Dict[str, Any]]] = {}
        texts: List[str] = []
        requests_made = 0
        stop = CallStopReason.completed

        async with agent.iter(request.user_prompt) as agent_run:
            async for node in agent_run:
                if request.cancelled:
                    stop = CallStopReason.cancelled
                    break

                if Agent.is_call_tools_node(node):
                    for part in node.model_response.parts:
                        if isinstance(part, ToolCallPart):
                            pending[part.tool_call_id] = (part.tool_name, part.args_as_dict())
                        elif isinstance(part, TextPart) and part.content:
                            texts.append(part.content)

                elif Agent.is_model_request_node(node):
                    if not self._report_tool_returns(node.request.parts, pending, request):
                        stop = CallStopReason.aborted
                        break
                    if requests_made >= request.max_steps:
                        logger.debug(f"Step limit reached: max_steps={request.max_steps}")
                        stop = CallStopReason.step_limit
                        break
                    requests_made += 1

            usage = _usage_of(agent_run)
            result = agent_run.result

        if result is not None and result.output is not None:
            text = str(result.output)
        else:
            text = texts[-1] if texts else ""

        logger.debug(
            f"Model call finished: model={request.model_id}, stop={stop.value}, "
            f"requests={requests_made}, tokens={usage.total_tokens}"
        )
        return ModelCallResponse(text=text, usage=usage, stop_reason=stop)

    def _report_tool_returns(
        self,
        parts: Any,
        pending: Dict[str, Tuple[str, Dict[str, Any]]],
        request: ModelCallRequest,
    ) -> bool:
        """Report completed tool calls to the step hook; False once it aborts."""
        for part in parts:
            if isinstance(part, ToolReturnPart):
                content = part.content
            elif isinstance(part, RetryPromptPart) and part.tool_name:
                content = None
            else:
                continue

            tool_name, args = pending.pop(part.tool_call_id, (part.tool_name, {}))
            report = ToolCallReport(
                tool_name=tool_name,
                args=args,
                outcome=classify_tool_result(content),
                tool_call_id=part.tool_call_id,
            )
            decision = request.on_step(report)
            if not decision.proceed:
                logger.debug(f"Step hook aborted the model call: reason={decision.reason}")
                return False
        return True


__all__ = ["PydanticAIModelCall", "ModelFactory"]
