from __future__ import annotations

"""LangGraph runtime engine.

``AgentRunner`` runs one guardrailed agent run: a single multi-step model
call whose tool calls are observed, checked and recorded as they complete.

Execution model
---------------

- The engine runs a LangGraph state machine over a ``_GraphState`` holding the
  mutable ``RunState``.
- ``start`` refuses runs whose cancellation token is already triggered.
- ``call_model`` invokes the model call once and races it against the run's
  timeout and its cancellation token.
- ``check_budget`` prices the reported usage once the call has completed.
- ``finish`` turns whatever terminal phase was reached into a ``RunResult``.

Per-step guardrails
-------------------

Every completed tool call reaches ``_handle_step``, which records the step,
notifies the caller, collects pending-confirmation actions and then checks
the loop detector and the elapsed time. A tripped guardrail answers with an
abort ``StepDecision``; the model call stops cooperatively and the engine maps
the abort reason onto the run's terminal phase.

``execute`` never raises for run failures: every outcome, including
unexpected exceptions, is returned as a ``RunResult``.
"""

import asyncio
import logging
from typing import Optional
from uuid import uuid4

from langgraph.graph import END, StateGraph

from loom_agents.core.monitoring import log_agent_completion, log_agent_run, log_error, log_llm_call

from ..guardrails.budget import check_budget, estimate_cost_usd, format_usd
from ..guardrails.loop_detection import ToolCallRecord, is_looping
from ..guardrails.models import StepDecision
from ..model_call.base import CallStopReason, ModelCallRequest, ModelCallResponse, ToolCallReport
from ..model_call.model_configs import get_model_config
from ..schemas.config import DEFAULT_RUN_CONFIG, RunConfig
from ..schemas.domain import ErrorKind, RunPhase, RunResult, Step
from ..tools.definitions import ToolSet
from .cancellation import CancellationToken
from .models import EngineDeps, RunInputs, RunState, StepCallback, _GraphState, phase_for_abort
from .result import ResultAssembler

logger = logging.getLogger(__name__)


def _describe_exception(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _retrieve_exception(task: "asyncio.Future") -> None:
    if not task.cancelled():
        task.exception()


class AgentRunner:
    """Execute guardrailed agent runs.

    The runner holds no per-run state and may serve many concurrent
    ``execute`` calls; each call gets its own ``RunState``.
    """

    def __init__(self, deps: EngineDeps) -> None:
        """
        Initialize the AgentRunner.

        Args:
            deps: The runtime dependencies (model call, pricing, clock).
        """
        self._deps = deps
        self._assembler = ResultAssembler()
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("call_model", self._node_call_model)
        g.add_node("check_budget", self._node_check_budget)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("start")
        g.add_conditional_edges(
            "start",
            self._route_after_start,
            {"call_model": "call_model", "finish": "finish"},
        )
        g.add_conditional_edges(
            "call_model",
            self._route_after_call_model,
            {"check_budget": "check_budget", "finish": "finish"},
        )
        g.add_edge("check_budget", "finish")
        g.add_edge("finish", END)
        return g.compile()

    async def execute(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        tools: Optional[ToolSet] = None,
        config: Optional[RunConfig] = None,
        cancellation_token: Optional[CancellationToken] = None,
        on_step: Optional[StepCallback] = None,
    ) -> RunResult:
        """Run an agent under guardrails.

        Args:
            system_prompt: System instructions for the model.
            user_prompt: The user's request.
            tools: Tools offered to the model.
            config: Guardrail limits and model selection.
            cancellation_token: Token the caller may trigger to stop the run.
            on_step: Called synchronously with each recorded ``Step``; an
                exception raised here ends the run as a generic error.

        Returns:
            The run's ``RunResult``, whichever path ended it.
        """
        run = RunState(
            run_id=uuid4().hex,
            config=config or DEFAULT_RUN_CONFIG,
            started_at=self._deps.clock(),
        )
        inputs = RunInputs(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            tools=tools if tools is not None else ToolSet(),
            cancellation_token=cancellation_token,
            on_step=on_step,
        )
        state: _GraphState = {"run": run, "inputs": inputs}

        try:
            final = await self._graph.ainvoke(state)
            return final["result"]
        except asyncio.CancelledError:
            if run.model_task is not None and not run.model_task.done():
                run.model_task.cancel()
            raise
        except Exception as e:
            logger.error(f"Agent run {run.run_id} failed outside the model call: {e}", exc_info=True)
            return self._fail(run, e)

    def _fail(self, run: RunState, exc: BaseException) -> RunResult:
        if not run.is_finished:
            if run.phase == RunPhase.not_started:
                run.transition(RunPhase.running)
            run.error_message = _describe_exception(exc)
            run.transition(RunPhase.errored)
        log_error(type(exc).__name__, _describe_exception(exc), {"run_id": run.run_id})
        return self._assembler.assemble(run)

    async def _node_start(self, state: _GraphState) -> _GraphState:
        run = state["run"]
        token = state["inputs"].cancellation_token
        if token is not None and token.cancelled:
            run.cancel_reason = token.reason
            run.transition(RunPhase.cancelled)
            logger.info(f"Agent run {run.run_id} cancelled before starting")
            return state

        run.transition(RunPhase.running)
        cfg = run.config
        logger.info(
            f"Agent run {run.run_id} started: model={cfg.model_id}, max_steps={cfg.max_steps}, "
            f"timeout_ms={cfg.timeout_ms}, max_cost_usd={cfg.max_cost_usd}"
        )
        log_agent_run(run.run_id, cfg.model_id, cfg.max_steps, cfg.timeout_ms, cfg.max_cost_usd)
        return state

    async def _node_call_model(self, state: _GraphState) -> _GraphState:
        run = state["run"]
        inputs = state["inputs"]
        token = inputs.cancellation_token
        cfg = run.config

        request = ModelCallRequest(
            model_id=cfg.model_id,
            api_key=cfg.api_key.get_secret_value(),
            system_prompt=inputs.system_prompt,
            user_prompt=inputs.user_prompt,
            sampling=get_model_config(cfg.model_id),
            tools=inputs.tools,
            max_steps=cfg.max_steps,
            on_step=lambda report: self._handle_step(run, inputs, report),
            cancellation_token=token,
        )

        task = asyncio.ensure_future(self._deps.model_call.invoke(request))
        run.model_task = task
        run.started_model_call = True

        waiters = {task}
        cancel_waiter: Optional[asyncio.Future] = None
        if token is not None:
            cancel_waiter = asyncio.ensure_future(token.wait())
            waiters.add(cancel_waiter)

        remaining = max(cfg.timeout_seconds - (self._deps.clock() - run.started_at), 0.0)
        try:
            done, _ = await asyncio.wait(waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_waiter is not None and not cancel_waiter.done():
                cancel_waiter.cancel()

        if task not in done:
            await self._discard(task)
            if run.abort_reason is not None:
                run.transition(phase_for_abort(run.abort_reason))
                logger.warning(f"Agent run {run.run_id} stopped by guardrail: {run.abort_reason.value}")
            elif token is not None and token.cancelled:
                run.cancel_reason = token.reason
                run.transition(RunPhase.cancelled)
                logger.info(f"Agent run {run.run_id} cancelled during the model call")
            else:
                run.transition(RunPhase.timed_out)
                logger.warning(f"Agent run {run.run_id} timed out after {cfg.timeout_ms}ms")
            return state

        try:
            response: ModelCallResponse = task.result()
        except asyncio.CancelledError:
            run.cancel_reason = token.reason if token is not None else None
            run.transition(RunPhase.cancelled)
            return state
        except Exception as e:
            if token is not None and token.cancelled:
                run.cancel_reason = token.reason
                run.transition(RunPhase.cancelled)
                return state
            run.error_message = _describe_exception(e)
            run.transition(RunPhase.errored)
            logger.error(f"Agent run {run.run_id} failed: {run.error_message}", exc_info=True)
            log_error(type(e).__name__, run.error_message, {"run_id": run.run_id, "model_id": cfg.model_id})
            return state

        if run.abort_reason is not None:
            run.usage = response.usage
            run.transition(phase_for_abort(run.abort_reason))
            logger.warning(f"Agent run {run.run_id} stopped by guardrail: {run.abort_reason.value}")
            return state

        if response.stop_reason == CallStopReason.cancelled or (token is not None and token.cancelled):
            run.usage = response.usage
            run.cancel_reason = token.reason if token is not None else None
            run.transition(RunPhase.cancelled)
            logger.info(f"Agent run {run.run_id} cancelled during the model call")
            return state

        run.usage = response.usage
        run.final_text = response.text
        if response.stop_reason == CallStopReason.step_limit:
            logger.info(f"Agent run {run.run_id} reached its step limit of {cfg.max_steps}")
        return state

    async def _discard(self, task: "asyncio.Future") -> None:
        """Cancel a model call that lost the race and give it a moment to unwind."""
        task.cancel()
        task.add_done_callback(_retrieve_exception)
        await asyncio.wait({task}, timeout=self._deps.cancel_grace_seconds)

    async def _node_check_budget(self, state: _GraphState) -> _GraphState:
        run = state["run"]
        cfg = run.config
        usage = run.usage
        if usage is None:
            raise RuntimeError(f"Agent run {run.run_id} reached the budget check without usage")

        cost = estimate_cost_usd(cfg.model_id, usage.prompt_tokens, usage.completion_tokens, self._deps.pricing)
        run.budget = check_budget(cost, cfg.max_cost_usd)
        log_llm_call(cfg.model_id, usage.total_tokens, cost)

        if run.budget.exceeded:
            logger.warning(
                f"Agent run {run.run_id} exceeded its cost budget: "
                f"{format_usd(cost)} > {format_usd(cfg.max_cost_usd)}"
            )
            run.transition(RunPhase.cost_exceeded)
        else:
            run.transition(RunPhase.succeeded)
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        run = state["run"]
        result = self._assembler.assemble(run)
        state["result"] = result

        duration_ms = run.elapsed_ms(self._deps.clock())
        logger.info(
            f"Agent run {run.run_id} finished: status={result.status.value}, "
            f"steps={len(result.steps)}, actions={len(result.actions)}, duration_ms={duration_ms:.0f}"
        )
        log_agent_completion(run.run_id, result.status.value, duration_ms, len(result.steps), len(result.actions))
        return state

    def _route_after_start(self, state: _GraphState) -> str:
        return "finish" if state["run"].is_finished else "call_model"

    def _route_after_call_model(self, state: _GraphState) -> str:
        return "finish" if state["run"].is_finished else "check_budget"

    def _handle_step(self, run: RunState, inputs: RunInputs, report: ToolCallReport) -> StepDecision:
        """Record one completed tool call and evaluate the per-step guardrails."""
        if run.is_finished or run.abort_reason is not None:
            return StepDecision.abort(run.abort_reason or ErrorKind.cancelled)

        step = Step(
            index=len(run.steps),
            tool_name=report.tool_name,
            args=dict(report.args),
            result=report.outcome.raw,
        )
        run.steps.append(step)

        if inputs.on_step is not None:
            inputs.on_step(step)

        run.actions.collect(step, report.outcome)
        run.history.append(ToolCallRecord.of(report.tool_name, report.args))

        if is_looping(run.history, self._deps.loop_window):
            logger.warning(f"Agent run {run.run_id} is repeating tool calls; stopping at step {step.index}")
            run.abort_reason = ErrorKind.loop_detected
            return StepDecision.abort(ErrorKind.loop_detected)

        if run.elapsed_ms(self._deps.clock()) > run.config.timeout_ms:
            run.abort_reason = ErrorKind.timeout
            return StepDecision.abort(ErrorKind.timeout)

        return StepDecision.go()
