"""Schemas and DTOs for the agent core."""

from .config import DEFAULT_RUN_CONFIG, RunConfig
from .domain import (
    Action,
    ActionType,
    ErrorKind,
    RunPhase,
    RunResult,
    RunStatus,
    Step,
    TokenUsage,
)

__all__ = [
    "Action",
    "ActionType",
    "DEFAULT_RUN_CONFIG",
    "ErrorKind",
    "RunConfig",
    "RunPhase",
    "RunResult",
    "RunStatus",
    "Step",
    "TokenUsage",
]
