"""Structured logging configuration using structlog.

Configures structlog over the standard library so that our own events and
third-party loggers (discord.py, httpx) share the same handlers:
- JSON lines to a rotating file
- Pretty-printed console output on stderr
- UTC timestamps
- A component field taken from the logger name
"""

import logging
import logging.handlers
import pathlib
import sys
from datetime import datetime, timezone
from typing import Any

import structlog


def _get_log_level() -> str:
    """Get log level from the environment.

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    # Bootstrap from environment to avoid circular imports during startup.
    from operator_agent.config.bootstrap import get_bootstrap_log_level  # noqa: PLC0415

    return get_bootstrap_log_level()


def _get_log_dir() -> pathlib.Path:
    """Get log directory path (AGENT_LOG_DIR or telemetry/logs)."""
    from operator_agent.config.bootstrap import get_bootstrap_log_dir  # noqa: PLC0415

    return get_bootstrap_log_dir()


def _add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add UTC timestamp to a foreign (stdlib) log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_component(
    logger: logging.Logger | None, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add a component field taken from the last dotted part of the logger name.

    "operator_agent.orchestrator.router" becomes "router"; third-party loggers
    such as "discord.gateway" become "gateway".
    """
    # ProcessorFormatter passes no logger for stdlib records; add_logger_name
    # has already copied the record name into the event dict.
    name = event_dict.get("logger") or getattr(logger, "name", None)
    event_dict["component"] = name.split(".")[-1] if name else "unknown"
    return event_dict


# Applied to records that did not come through structlog (discord.py, httpx).
FOREIGN_PRE_CHAIN: list[Any] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    _add_timestamp,
    _add_component,
]


def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer, foreign_pre_chain=FOREIGN_PRE_CHAIN
    )


def _configure_file_handler(log_dir: pathlib.Path) -> logging.handlers.RotatingFileHandler:
    """Rotating JSON-lines handler writing to <log_dir>/current.jsonl."""
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_dir / "current.jsonl"),
        maxBytes=50 * 1024 * 1024,  # 50 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def _configure_console_handler(log_format: str = "console") -> logging.StreamHandler[Any]:
    """Stderr handler; "json" renders JSON lines, "console" pretty-prints."""
    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    handler.setFormatter(_formatter(renderer))
    return handler


def configure_logging(
    log_level: str | None = None,
    log_dir: pathlib.Path | None = None,
    log_format: str = "console",
) -> None:
    """Configure structlog for structured logging.

    Call once at application startup with the loaded settings. get_logger()
    calls it lazily, from the environment, when nothing has been configured yet.

    Args:
        log_level: Console log level (APP_LOG_LEVEL when None).
        log_dir: Directory for current.jsonl (AGENT_LOG_DIR when None).
        log_format: Console rendering, "console" or "json". The file is always JSON.
    """
    log_level = log_level or _get_log_level()
    log_dir = log_dir or _get_log_dir()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # Silence noisy third-party loggers.
    logging.getLogger("discord").setLevel(logging.INFO)
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
    logging.getLogger("discord.voice_state").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    configured_level = getattr(logging, log_level, logging.INFO)

    file_handler = _configure_file_handler(log_dir)
    file_handler.setLevel(logging.INFO)
    root_logger.addHandler(file_handler)

    console_handler = _configure_console_handler(log_format)
    console_handler.setLevel(configured_level)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            _add_component,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:  # Returns structlog.stdlib.BoundLogger
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger instance.

    Example:
        >>> from operator_agent.telemetry import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("session_created", operator_id="123")
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)
