"""Semantic event constants for structured logging.

All log events use these constants rather than magic strings so the JSON log
stream can be queried reliably.
"""

# Platform events
BOT_READY = "bot_ready"
MESSAGE_RECEIVED = "message_received"
MESSAGE_IGNORED = "message_ignored"
REPLY_SENT = "reply_sent"
REPLY_FAILED = "reply_failed"
TYPING_INDICATOR_FAILED = "typing_indicator_failed"
EVENT_HANDLER_FAILED = "event_handler_failed"

# Session events
SESSION_CREATED = "session_created"
SESSION_REFRESHED = "session_refreshed"
SESSION_EXPIRED = "session_expired"
SESSION_STORE_CLEARED = "session_store_cleared"

# LLM client events
MODEL_CALL_STARTED = "model_call_started"
MODEL_CALL_COMPLETED = "model_call_completed"
MODEL_CALL_ERROR = "model_call_error"

# Routing events
INTENT_RESOLVED = "intent_resolved"
INTENT_FAILED = "intent_failed"
EXTRA_TOOL_CALLS_DROPPED = "extra_tool_calls_dropped"

# Dispatch events
CAPABILITY_DISPATCHED = "capability_dispatched"
DISPATCH_ERROR = "dispatch_error"
PRECONDITION_FAILED = "precondition_failed"

# Action synthesis and execution events
SYNTHESIS_COMPLETED = "synthesis_completed"
SYNTHESIS_FAILED = "synthesis_failed"
SYNTHESIS_REJECTED = "synthesis_rejected"
EXECUTION_STARTED = "execution_started"
EXECUTION_COMPLETED = "execution_completed"
EXECUTION_FAILED = "execution_failed"

# Multimodal events
ATTACHMENT_FETCH_FAILED = "attachment_fetch_failed"
ATTACHMENT_DESCRIBED = "attachment_described"

# Media events
TRACK_RESOLVED = "track_resolved"
TRACK_STARTED = "track_started"
TRACK_FINISHED = "track_finished"
PLAYER_ERROR = "player_error"
PLAYER_CONNECTION_ERROR = "player_connection_error"
QUEUE_DELETED = "queue_deleted"
