"""Tool definitions offered to an agent run.

A tool is a named capability with an input schema and a handler. The model
call exposes every tool of a ``ToolSet`` to the language model; the engine
itself never invokes tools, it only observes their results.
"""

import inspect
from typing import Any, Callable, Dict, Iterator, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from loom_agents.core.logging_config import get_logger

logger = get_logger(__name__)


class EmptyInput(BaseModel):
    """Input schema for tools that take no arguments."""


class ToolDefinition(BaseModel):
    """Pydantic model for tool definitions.

    Provides a structured, validated way to define agent tools with a clear
    input schema and a handler function. The handler receives the validated
    input model and may be sync or async; it returns either an opaque value or
    a pending-confirmation envelope.
    """

    name: str = Field(..., min_length=1, description="Unique identifier for the tool")
    description: str = Field(..., description="Human-readable description of what the tool does")
    input_schema: Type[BaseModel] = Field(
        default=EmptyInput, description="Pydantic model class for input validation"
    )
    handler: Optional[Callable[[Any], Any]] = Field(
        default=None,
        description="Handler function that executes the tool (can be set later)",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert tool definition to dictionary format.

        Returns:
            Dictionary representation of tool definition with JSON schema
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.get_input_schema_json(),
        }

    def get_input_schema_json(self) -> Dict[str, Any]:
        """Get the input schema as JSON schema."""
        return self.input_schema.model_json_schema()

    def set_handler(self, handler: Callable[[Any], Any]) -> None:
        self.handler = handler

    def has_handler(self) -> bool:
        return self.handler is not None

    async def invoke(self, args: Dict[str, Any]) -> Any:
        """Validate ``args`` and run the handler.

        Args:
            args: Raw arguments as produced by the model.

        Returns:
            The handler's return value; pydantic models are dumped to dicts.

        Raises:
            RuntimeError: If no handler has been set.
            pydantic.ValidationError: If ``args`` do not match ``input_schema``.
        """
        if self.handler is None:
            raise RuntimeError(f"Tool '{self.name}' has no handler")

        payload = self.input_schema.model_validate(args)
        result = self.handler(payload)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseModel):
            result = result.model_dump(mode="json")
        return result


class ToolSet:
    """
    In-memory mapping of tool names to definitions.

    Notes:
        - ``register`` overwrites any existing tool with the same name.
        - ``get`` raises ``KeyError`` if the tool is missing.
        - Iteration yields tools in registration order.
    """

    def __init__(self, tools: Optional[List[ToolDefinition]] = None) -> None:
        self._tools: Dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        if tool.name in self._tools:
            logger.debug(f"Replacing tool definition: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition:
        return self._tools[name]

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> List[str]:
        return list(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)
