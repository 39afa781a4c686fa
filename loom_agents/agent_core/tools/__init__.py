"""Agent tool boundary.

This module provides the tool definitions handed to a run and the tagged
result types tool return values are classified into.
"""

from .definitions import EmptyInput, ToolDefinition, ToolSet
from .results import (
    PENDING_CONFIRMATION,
    PendingConfirmation,
    PlainResult,
    ToolOutcome,
    classify_tool_result,
    pending_confirmation,
)

__all__ = [
    # Definitions
    "EmptyInput",
    "ToolDefinition",
    "ToolSet",
    # Results
    "PENDING_CONFIRMATION",
    "PendingConfirmation",
    "PlainResult",
    "ToolOutcome",
    "classify_tool_result",
    "pending_confirmation",
]
