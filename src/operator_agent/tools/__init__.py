"""Tool registry: the structured capabilities offered to the language model."""

from operator_agent.tools.catalog import CAPABILITY_TOOLS, Capability, get_default_registry
from operator_agent.tools.registry import ToolRegistry
from operator_agent.tools.types import ToolDefinition, ToolParameter

__all__ = [
    "Capability",
    "CAPABILITY_TOOLS",
    "ToolRegistry",
    "ToolDefinition",
    "ToolParameter",
    "get_default_registry",
]
