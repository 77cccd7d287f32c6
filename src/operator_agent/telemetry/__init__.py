"""Telemetry: structured logging, event names, and trace correlation."""

from operator_agent.telemetry.events import (
    ATTACHMENT_DESCRIBED,
    ATTACHMENT_FETCH_FAILED,
    BOT_READY,
    CAPABILITY_DISPATCHED,
    DISPATCH_ERROR,
    EVENT_HANDLER_FAILED,
    EXECUTION_COMPLETED,
    EXECUTION_FAILED,
    EXECUTION_STARTED,
    EXTRA_TOOL_CALLS_DROPPED,
    INTENT_FAILED,
    INTENT_RESOLVED,
    MESSAGE_IGNORED,
    MESSAGE_RECEIVED,
    MODEL_CALL_COMPLETED,
    MODEL_CALL_ERROR,
    MODEL_CALL_STARTED,
    PLAYER_CONNECTION_ERROR,
    PLAYER_ERROR,
    PRECONDITION_FAILED,
    QUEUE_DELETED,
    REPLY_FAILED,
    REPLY_SENT,
    SESSION_CREATED,
    SESSION_EXPIRED,
    SESSION_REFRESHED,
    SESSION_STORE_CLEARED,
    SYNTHESIS_COMPLETED,
    SYNTHESIS_FAILED,
    SYNTHESIS_REJECTED,
    TRACK_FINISHED,
    TRACK_RESOLVED,
    TRACK_STARTED,
    TYPING_INDICATOR_FAILED,
)
from operator_agent.telemetry.logger import configure_logging, get_logger
from operator_agent.telemetry.trace import TraceContext

__all__ = [
    "TraceContext",
    "get_logger",
    "configure_logging",
    "BOT_READY",
    "MESSAGE_RECEIVED",
    "MESSAGE_IGNORED",
    "REPLY_SENT",
    "REPLY_FAILED",
    "TYPING_INDICATOR_FAILED",
    "EVENT_HANDLER_FAILED",
    "SESSION_CREATED",
    "SESSION_REFRESHED",
    "SESSION_EXPIRED",
    "SESSION_STORE_CLEARED",
    "MODEL_CALL_STARTED",
    "MODEL_CALL_COMPLETED",
    "MODEL_CALL_ERROR",
    "INTENT_RESOLVED",
    "INTENT_FAILED",
    "EXTRA_TOOL_CALLS_DROPPED",
    "CAPABILITY_DISPATCHED",
    "DISPATCH_ERROR",
    "PRECONDITION_FAILED",
    "SYNTHESIS_COMPLETED",
    "SYNTHESIS_FAILED",
    "SYNTHESIS_REJECTED",
    "EXECUTION_STARTED",
    "EXECUTION_COMPLETED",
    "EXECUTION_FAILED",
    "ATTACHMENT_FETCH_FAILED",
    "ATTACHMENT_DESCRIBED",
    "TRACK_RESOLVED",
    "TRACK_STARTED",
    "TRACK_FINISHED",
    "PLAYER_ERROR",
    "PLAYER_CONNECTION_ERROR",
    "QUEUE_DELETED",
]
