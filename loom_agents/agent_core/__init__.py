"""Guardrailed agent execution engine.

This package contains the "engine room" of loom-agents.

Design overview
---------------

An agent run is a single multi-step, tool-calling model call wrapped in
guardrails:

- a step cap, enforced by the model call;
- a wall-clock timeout, raced against the call and re-checked after every step;
- loop detection over the recent tool-call history;
- a cost budget, checked once from the reported usage;
- cooperative cancellation through a ``CancellationToken``.

Tool results that ask for human confirmation are promoted into ``Action``
proposals; nothing destructive is applied by the engine itself. Whatever
ends the run, the caller receives one ``RunResult``.

Typical usage
-------------

Most applications should use ``agent_core.service.AgentService``:

1. Build a ``ToolSet`` for the agent.
2. Call ``AgentService.run`` with prompts and optional config overrides.
3. Present ``RunResult.actions`` to the user for approval.
"""

from .runtime import AgentRunner, CancellationToken, EngineDeps
from .schemas.config import RunConfig
from .schemas.domain import (
    Action,
    ActionType,
    ErrorKind,
    RunResult,
    RunStatus,
    Step,
    TokenUsage,
)
from .service import AgentService, AgentServiceDeps, create_agent_service
from .tools import ToolDefinition, ToolSet

__all__ = [
    "Action",
    "ActionType",
    "AgentRunner",
    "AgentService",
    "AgentServiceDeps",
    "CancellationToken",
    "EngineDeps",
    "ErrorKind",
    "RunConfig",
    "RunResult",
    "RunStatus",
    "Step",
    "TokenUsage",
    "ToolDefinition",
    "ToolSet",
    "create_agent_service",
]
