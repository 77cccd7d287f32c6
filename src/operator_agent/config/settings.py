"""Application configuration settings.

This module provides the AppConfig class and its loader. The three
secrets (platform token, operator id, language-model credential) are required;
load_app_config() refuses to return a config without them.
"""

from pathlib import Path

import structlog
from pydantic import AliasChoices, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from operator_agent.config.env_loader import Environment, get_environment, load_env_files
from operator_agent.config.validators import (
    resolve_path,
    validate_log_format,
    validate_log_level,
    validate_snowflake,
)
from operator_agent.errors import ConfigurationError

log = structlog.get_logger(__name__)

REQUIRED_SECRETS: dict[str, str] = {
    "discord_token": "DISCORD_TOKEN",
    "owner_id": "OWNER_ID",
    "llm_api_key": "LLM_API_KEY",
}


class AppConfig(BaseSettings):
    """Unified application configuration.

    Loads configuration from environment variables and defaults, validated by
    Pydantic. Secrets are read from their bare names (DISCORD_TOKEN, OWNER_ID,
    LLM_API_KEY) or with the AGENT_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=(),  # model_config_path
    )

    # Environment
    environment: Environment = Field(
        default_factory=get_environment, description="Current environment"
    )

    # Secrets
    discord_token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("DISCORD_TOKEN", "AGENT_DISCORD_TOKEN", "discord_token"),
        description="Discord bot token",
    )
    owner_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OWNER_ID", "AGENT_OWNER_ID", "owner_id"),
        description="Discord user id of the single authorized operator",
    )
    llm_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "LLM_API_KEY", "AGENT_LLM_API_KEY", "GEMINI_API_KEY", "llm_api_key"
        ),
        description="Credential for the language-model service",
    )

    # Telemetry
    log_dir: Path = Field(default=Path("telemetry/logs"), description="Log directory path")
    log_level: str = Field(
        default="INFO",
        alias="APP_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="console",
        alias="APP_LOG_FORMAT",
        description="Console log rendering (console or json); the log file is always JSON",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("owner_id", mode="before")
    @classmethod
    def validate_owner_id(cls, v: str | int | None) -> str | None:
        """Normalize the operator id to a digit string."""
        return validate_snowflake(v)

    @field_validator("log_dir", "model_config_path", mode="before")
    @classmethod
    def resolve_paths(cls, v: Path | str) -> Path:
        """Resolve relative paths to absolute."""
        return resolve_path(v)

    # LLM Client
    llm_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai",
        description="Base URL of the OpenAI-compatible language-model API",
    )
    llm_timeout_seconds: int = Field(
        default=60, ge=1, description="Request timeout when a model role sets none"
    )
    model_config_path: Path = Field(
        default=Path("config/models.yaml"), description="Path to model catalogue file"
    )

    # Sessions
    session_ttl_seconds: float = Field(
        default=600.0, gt=0, description="Sliding inactivity window before a session expires"
    )

    # Synthesized actions
    execution_timeout_seconds: float | None = Field(
        default=60.0,
        gt=0,
        description="Upper bound on a synthesized action's run time (None disables the bound)",
    )

    # Attachments
    attachment_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout for attachment downloads"
    )
    attachment_max_bytes: int = Field(
        default=20 * 1024 * 1024, ge=1, description="Largest attachment accepted for description"
    )

    # Media
    media_leave_on_empty_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Leave the voice channel after it has been empty this long",
    )
    queue_display_limit: int = Field(
        default=10, ge=1, le=25, description="Upcoming tracks listed by the queue display"
    )

    def missing_secrets(self) -> list[str]:
        """Return environment names of required secrets that are unset or blank."""
        missing = []
        for field_name, env_name in REQUIRED_SECRETS.items():
            value = getattr(self, field_name)
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            if not value or not str(value).strip():
                missing.append(env_name)
        return missing


def load_app_config(load_env: bool = True, **overrides: object) -> AppConfig:
    """Load and validate application configuration.

    This function:
    1. Loads .env files in priority order (via env_loader)
    2. Creates AppConfig instance (reads from environment variables)
    3. Checks that every required secret is present

    Args:
        load_env: Whether to read .env files before building the config.
        **overrides: Explicit field values, taking precedence over the environment.

    Returns:
        Validated AppConfig instance.

    Raises:
        ConfigurationError: If validation fails or a required secret is missing.
    """
    log.info("loading_app_config", environment=get_environment().value)

    if load_env:
        load_env_files()

    try:
        config = AppConfig(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        log.error("app_config_load_failed", error=str(e), error_type=type(e).__name__)
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    missing = config.missing_secrets()
    if missing:
        log.error("app_config_missing_secrets", missing=missing)
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}", missing=missing
        )

    log.info(
        "app_config_loaded",
        environment=config.environment.value,
        log_level=config.log_level,
        llm_base_url=config.llm_base_url,
        session_ttl_seconds=config.session_ttl_seconds,
    )
    return config
