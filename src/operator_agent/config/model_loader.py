"""Load and validate the model catalogue from YAML.

The catalogue maps each model role (conversation, coding, vision) to the model
id and call parameters used for it.
"""

from pathlib import Path

import structlog
from pydantic import ValidationError

from operator_agent.config.loader import ConfigLoadError, load_yaml_file
from operator_agent.config.validators import resolve_path
from operator_agent.llm_client.models import ModelConfig

log = structlog.get_logger(__name__)

DEFAULT_MODEL_CONFIG_PATH = Path("config/models.yaml")


class ModelConfigError(ConfigLoadError):
    """Raised when model configuration cannot be loaded or is invalid."""

    pass


def load_model_config(config_path: Path | str | None = None) -> ModelConfig:
    """Load and validate model configuration from a YAML file.

    Args:
        config_path: Path to models.yaml. Relative paths resolve against the
            project root. Defaults to config/models.yaml.

    Returns:
        Validated ModelConfig object.

    Raises:
        ModelConfigError: If configuration cannot be loaded, parsed, or validated.

    Example:
        >>> config = load_model_config()
        >>> config.models["conversation"].id
        'gemini-1.5-pro-latest'
    """
    config_path = resolve_path(config_path or DEFAULT_MODEL_CONFIG_PATH)

    if not config_path.is_file():
        raise ModelConfigError(f"Model config file not found: {config_path}")

    log.info("loading_model_config", config_path=str(config_path))

    try:
        content = load_yaml_file(config_path, error_class=ModelConfigError)
    except ConfigLoadError as e:
        raise ModelConfigError(f"Failed to load model config file: {e}") from None

    if not content:
        log.warning("model_config_empty", config_path=str(config_path))
        return ModelConfig(models={})

    try:
        config = ModelConfig.model_validate(content)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            error_messages.append(f"{field_path}: {error['msg']}")
        error_summary = "\n".join(error_messages)
        raise ModelConfigError(f"Model configuration validation failed:\n{error_summary}") from None

    log.info(
        "model_config_loaded",
        models_count=len(config.models),
        roles=sorted(config.models),
    )
    return config
