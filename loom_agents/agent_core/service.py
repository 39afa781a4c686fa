from __future__ import annotations

"""High-level entry point for guardrailed agent runs.

``AgentService`` provides an application-friendly API for executing agent runs
without needing to manually wire the runtime engine.

Workflow
--------

- ``run``:

  1. Resolves the ``RunConfig``: the caller's config, or one built from the
     application settings with any keyword overrides applied.
  2. Delegates to ``AgentRunner.execute`` and returns its ``RunResult``.

``AgentService`` is intentionally thin: guardrail semantics live in the
engine.
"""

from dataclasses import dataclass
from typing import Any, Optional

from loom_agents.core.config import Settings

from .guardrails.pricing import DEFAULT_PRICING_TABLE, PricingTable
from .model_call.base import ModelCall
from .runtime import AgentRunner, CancellationToken, EngineDeps, StepCallback
from .schemas.config import RunConfig
from .schemas.domain import RunResult
from .tools.definitions import ToolSet


@dataclass(frozen=True)
class AgentServiceDeps:
    """Dependency bundle for ``AgentService``.

    This allows applications and tests to inject:

    - the runtime engine dependencies (model call, pricing, clock),
    - the settings used to build run configurations.
    """

    engine_deps: EngineDeps
    settings: Optional[Settings] = None


class AgentService:
    """Run agents with configuration resolved from application settings."""

    def __init__(self, *, deps: AgentServiceDeps) -> None:
        self._deps = deps
        self._runner = AgentRunner(deps.engine_deps)

    def resolve_config(self, config: Optional[RunConfig] = None, **overrides: Any) -> RunConfig:
        """Return ``config`` as is, or build one from settings and ``overrides``."""
        if config is not None:
            return config
        return RunConfig.from_settings(self._deps.settings, **overrides)

    async def run(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        tools: Optional[ToolSet] = None,
        config: Optional[RunConfig] = None,
        cancellation_token: Optional[CancellationToken] = None,
        on_step: Optional[StepCallback] = None,
        **overrides: Any,
    ) -> RunResult:
        """
        Execute one agent run.

        Args:
            system_prompt: System instructions for the model.
            user_prompt: The user's request.
            tools: Tools offered to the model.
            config: Explicit run configuration; when given, ``overrides`` are ignored.
            cancellation_token: Token the caller may trigger to stop the run.
            on_step: Called with each recorded step.
            **overrides: ``RunConfig`` fields (``model_id``, ``api_key``,
                ``max_steps`` ...) overriding the settings.

        Returns:
            The run's ``RunResult``.
        """
        return await self._runner.execute(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            tools=tools,
            config=self.resolve_config(config, **overrides),
            cancellation_token=cancellation_token,
            on_step=on_step,
        )


def create_agent_service(
    model_call: Optional[ModelCall] = None,
    pricing: Optional[PricingTable] = None,
    settings: Optional[Settings] = None,
) -> AgentService:
    """
    Build an ``AgentService`` with default collaborators.

    Args:
        model_call: Model call to use; defaults to ``PydanticAIModelCall``.
        pricing: Pricing table for the budget check.
        settings: Settings for run configuration; defaults to the module settings.
    """
    if model_call is None:
        from .model_call.pydantic_ai_call import PydanticAIModelCall

        model_call = PydanticAIModelCall()

    engine_deps = EngineDeps(model_call=model_call, pricing=pricing or DEFAULT_PRICING_TABLE)
    return AgentService(deps=AgentServiceDeps(engine_deps=engine_deps, settings=settings))
