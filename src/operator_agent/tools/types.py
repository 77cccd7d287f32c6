"""Type definitions for the tool registry.

Tool definitions are immutable: the registry is built once at startup and
shared by every classification call.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ToolParameter(BaseModel):
    """Parameter definition for a tool."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Parameter name")
    type: Literal["string", "number", "integer", "boolean"] = Field(
        ..., description="Primitive parameter type"
    )
    description: str = Field("", description="Parameter description for LLM")
    required: bool = Field(True, description="Whether parameter is required")


class ToolDefinition(BaseModel):
    """OpenAI-style tool definition for LLM function calling."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Tool name exposed to the model")
    description: str = Field(..., description="Clear description for LLM")
    parameters: tuple[ToolParameter, ...] = Field(
        default_factory=tuple, description="Tool parameters"
    )

    @property
    def required_parameters(self) -> frozenset[str]:
        """Names of the parameters the model must supply."""
        return frozenset(param.name for param in self.parameters if param.required)

    def get_parameter(self, name: str) -> ToolParameter | None:
        """Look up a parameter by name."""
        for param in self.parameters:
            if param.name == name:
                return param
        return None
