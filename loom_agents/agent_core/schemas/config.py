from __future__ import annotations

"""Run configuration schema.

``RunConfig`` carries the guardrail limits and model selection for exactly one
agent run. It is immutable: the engine reads it, never changes it.
"""

from typing import Any, Optional

from pydantic import ConfigDict, Field, SecretStr

from .base import BaseSchema


class RunConfig(BaseSchema):
    """
    Guardrail limits and model selection for a single agent run.

    Attributes:
        max_steps: Maximum number of model steps (tool-calling rounds).
        timeout_ms: Wall-clock budget for the whole run in milliseconds.
        max_cost_usd: Spend ceiling checked against the run's measured usage.
        model_id: Model identifier, optionally prefixed with a provider
            (``anthropic/claude-sonnet-4-5``).
        api_key: Provider API key; never rendered in ``repr`` or logs.
    """

    model_config = ConfigDict(frozen=True)

    max_steps: int = Field(default=10, ge=1)
    timeout_ms: int = Field(default=60_000, gt=0)
    max_cost_usd: float = Field(default=0.50, ge=0.0)
    model_id: str = Field(default="claude-sonnet-4-5", min_length=1)
    api_key: SecretStr = Field(default=SecretStr(""))

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_settings(cls, config: Any = None, *, api_key: Optional[str] = None, **overrides: Any) -> "RunConfig":
        """
        Build a config from application settings, applying explicit overrides.

        When ``api_key`` is not given, the key configured for the model's
        provider (``AI_PROVIDER__<PROVIDER>__API_KEY``) is used.

        Args:
            config: A ``Settings`` instance; defaults to the module-level settings.
            api_key: Explicit provider API key.
            **overrides: Any ``RunConfig`` field (``max_steps``, ``model_id`` ...).
        """
        from loom_agents.core.config import settings as default_settings

        from ..model_call.model_configs import detect_provider, split_model_id

        cfg = config or default_settings
        model_id = overrides.pop("model_id", None) or cfg.default_model
        if api_key is None:
            _, model_name = split_model_id(model_id)
            api_key = cfg.ai_provider.api_key_for(detect_provider(model_name)) or ""

        values: dict[str, Any] = {
            "max_steps": cfg.max_steps,
            "timeout_ms": cfg.timeout_ms,
            "max_cost_usd": cfg.max_cost_usd,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(model_id=model_id, api_key=SecretStr(api_key), **values)


DEFAULT_RUN_CONFIG = RunConfig()
