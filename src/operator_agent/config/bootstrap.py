"""Bootstrap configuration helpers (pre-settings).

Used by telemetry before the settings object exists. Keep this module free of
telemetry imports to avoid circular imports.
"""

from __future__ import annotations

import os
from pathlib import Path

from operator_agent.config.validators import resolve_path, validate_log_level


def get_bootstrap_log_level(default: str = "INFO") -> str:
    """Get logging level from environment without importing settings.

    Args:
        default: Default log level if not set or invalid.

    Returns:
        Uppercased, validated log level string.
    """
    value = os.getenv("APP_LOG_LEVEL", default)
    try:
        return validate_log_level(value)
    except ValueError:
        return validate_log_level(default)


def get_bootstrap_log_dir(default: str = "telemetry/logs") -> Path:
    """Get the log directory from AGENT_LOG_DIR, resolved against the project root."""
    return resolve_path(os.getenv("AGENT_LOG_DIR", default))
