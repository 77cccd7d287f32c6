"""Tool registry presented to the language model on every classification call.

The registry is immutable after construction and is shared process-wide
without synchronization.
"""

from collections.abc import Iterable, Iterator
from typing import Any

from operator_agent.telemetry import get_logger
from operator_agent.tools.types import ToolDefinition

log = get_logger(__name__)


class ToolRegistry:
    """Static catalogue of structured capabilities.

    Tools are kept in registration order, which is also the order they are
    presented to the model.
    """

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        """Build the registry.

        Args:
            tools: Tool definitions to register.

        Raises:
            ValueError: If two tools share a name.
        """
        registered: dict[str, ToolDefinition] = {}
        for tool_def in tools:
            if tool_def.name in registered:
                raise ValueError(f"Tool '{tool_def.name}' is already registered")
            registered[tool_def.name] = tool_def
        self._tools = registered
        log.debug("tool_registry_initialized", tool_names=list(registered))

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def get_tool(self, name: str) -> ToolDefinition | None:
        """Retrieve a tool definition by name, or None if unknown."""
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDefinition]:
        """List all tool definitions in registration order."""
        return list(self._tools.values())

    def list_tool_names(self) -> list[str]:
        """List names of all registered tools."""
        return list(self._tools.keys())

    def get_tool_definitions_for_llm(self) -> list[dict[str, Any]]:
        """Get tool definitions in OpenAI function calling format.

        Returns:
            List of {"type": "function", "function": {...}} entries.
        """
        result = []
        for tool_def in self._tools.values():
            properties: dict[str, Any] = {}
            for param in tool_def.parameters:
                schema: dict[str, Any] = {"type": param.type}
                if param.description:
                    schema["description"] = param.description
                properties[param.name] = schema

            result.append(
                {
                    "type": "function",
                    "function": {
                        "name": tool_def.name,
                        "description": tool_def.description,
                        "parameters": {
                            "type": "object",
                            "properties": properties,
                            "required": [
                                param.name for param in tool_def.parameters if param.required
                            ],
                        },
                    },
                }
            )
        return result
