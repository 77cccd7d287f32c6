"""Unified configuration management for the operator agent.

Environment variables and .env files feed AppConfig; the model catalogue is
loaded from YAML. Nothing here is built at import time: the secrets are
required, so the CLI loads the settings once at startup.
"""

from operator_agent.config.env_loader import Environment, get_environment
from operator_agent.config.model_loader import ModelConfigError, load_model_config
from operator_agent.config.settings import (
    REQUIRED_SECRETS,
    AppConfig,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "REQUIRED_SECRETS",
    "load_app_config",
    "Environment",
    "get_environment",
    "load_model_config",
    "ModelConfigError",
]
