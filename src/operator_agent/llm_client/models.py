"""Pydantic models for the model catalogue (config/models.yaml)."""

from pydantic import BaseModel, Field


class ModelDefinition(BaseModel):
    """Configuration for a single model role.

    Attributes:
        id: Model identifier sent to the service (e.g., "gemini-1.5-pro-latest").
        endpoint: Optional base URL override for this model. If None, the
            client's base URL is used.
        default_timeout: Request timeout in seconds for this role.
        temperature: Default sampling temperature (None uses backend default).
        max_tokens: Optional cap on generated tokens.
        supports_function_calling: Whether tools may be attached to requests.
    """

    id: str = Field(..., description="Model identifier")
    endpoint: str | None = Field(None, description="Optional base URL override")
    default_timeout: int = Field(60, ge=1, description="Default timeout in seconds")
    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Default sampling temperature"
    )
    max_tokens: int | None = Field(default=None, ge=1, description="Maximum generated tokens")
    supports_function_calling: bool = Field(
        True, description="Whether model supports native function calling"
    )


class ModelConfig(BaseModel):
    """Complete model catalogue, keyed by ModelRole value."""

    models: dict[str, ModelDefinition] = Field(..., description="Model configurations by role")
