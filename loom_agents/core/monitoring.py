"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for monitoring and
tracing of agent runs, including:
- Agent run start/completion records with guardrail outcome
- LLM usage and estimated cost per run
- Error tracking

All helpers are no-ops until ``initialize_logfire`` has successfully
configured Logfire, so library users and tests never emit telemetry by
accident.
"""

import logging
from typing import Optional

from loom_agents.core.config import Settings, settings

logger = logging.getLogger(__name__)

_logfire_ready = False


def initialize_logfire(config: Settings | None = None) -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    The initialization is conditional on ``settings.logfire.enabled`` and a
    configured token. Pydantic AI instrumentation is enabled when
    ``settings.logfire.trace_pydantic_ai`` is set.

    Args:
        config: Settings to read from; defaults to the module-level ``settings``.

    Returns:
        True when Logfire is configured and the ``log_*`` helpers are active.
    """
    global _logfire_ready
    cfg = (config or settings).logfire

    if not cfg.enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE__ENABLED=true to enable.")
        return False

    if cfg.token is None:
        logger.warning(
            "Logfire is enabled but LOGFIRE__TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE__TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire

        logfire.configure(
            token=cfg.token.get_secret_value(),
            service_name=cfg.service_name,
            environment=cfg.environment,
        )

        if cfg.trace_pydantic_ai:
            try:
                logfire.instrument_pydantic_ai()
                logger.info("Logfire: Pydantic AI instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument Pydantic AI: {e}")

        _logfire_ready = True
        logger.info(f"Logfire monitoring initialized: service={cfg.service_name}, environment={cfg.environment}")

    except ImportError:
        logger.warning("Logfire is enabled but 'logfire' package is not installed. Install it with: pip install logfire")
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)

    return _logfire_ready


def is_logfire_enabled() -> bool:
    """Return whether Logfire has been configured for this process."""
    return _logfire_ready


def log_agent_run(run_id: str, model_id: str, max_steps: int, timeout_ms: int, max_cost_usd: float) -> None:
    """
    Log the start of an agent run with its guardrail configuration.

    Args:
        run_id: The unique identifier for the run
        model_id: The model the run is going to call
        max_steps: Step cap for the run
        timeout_ms: Wall-clock timeout for the run
        max_cost_usd: Cost ceiling for the run
    """
    if not _logfire_ready:
        return
    try:
        import logfire

        logfire.info(
            "Agent run started",
            run_id=run_id,
            model_id=model_id,
            max_steps=max_steps,
            timeout_ms=timeout_ms,
            max_cost_usd=max_cost_usd,
        )
    except Exception:
        logger.debug(f"Could not log agent run to Logfire: run_id={run_id}")


def log_agent_completion(run_id: str, status: str, duration_ms: float, steps: int, actions: int) -> None:
    """
    Log the completion of an agent run.

    Args:
        run_id: The unique identifier for the run
        status: The terminal status (success, error, cancelled, timeout)
        duration_ms: The duration of the run in milliseconds
        steps: Number of recorded tool-call steps
        actions: Number of collected pending actions
    """
    if not _logfire_ready:
        return
    try:
        import logfire

        logfire.info(
            "Agent run completed",
            run_id=run_id,
            status=status,
            duration_ms=duration_ms,
            steps=steps,
            actions=actions,
        )
    except Exception:
        logger.debug(f"Could not log agent completion to Logfire: run_id={run_id}")


def log_llm_call(model: str, tokens_used: int, cost_usd: Optional[float] = None) -> None:
    """
    Log an LLM model call with usage metrics.

    Args:
        model: The model name
        tokens_used: Total tokens used in the call
        cost_usd: The estimated cost in USD (optional)
    """
    if not _logfire_ready:
        return
    try:
        import logfire

        logfire.info(
            "LLM call completed",
            model=model,
            tokens_used=tokens_used,
            cost_usd=cost_usd,
        )
    except Exception:
        logger.debug(f"Could not log LLM call to Logfire: model={model}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if not _logfire_ready:
        return
    try:
        import logfire

        logfire.error(
            f"{error_type}: {error_message}",
            **(context or {}),
        )
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")
