"""Trace context for correlating the log lines of one inbound event."""

import uuid
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TraceContext:
    """Lightweight, immutable trace context.

    One trace is started per inbound platform event and handed to every model
    call and handler that event triggers.

    Attributes:
        trace_id: Unique identifier for the event being handled (UUID string).
        operator_id: Identity of the operator who sent the event, when known.
        parent_span_id: Span that spawned this context, for nested operations.
    """

    trace_id: str
    operator_id: str | None = None
    parent_span_id: str | None = field(default=None, compare=False)

    @classmethod
    def new_trace(cls, operator_id: str | None = None) -> "TraceContext":
        """Start a new trace for an inbound event."""
        return cls(trace_id=str(uuid.uuid4()), operator_id=operator_id)

    def new_span(self) -> tuple["TraceContext", str]:
        """Create a child span within this trace.

        Returns:
            A tuple of (child context, new span_id).
        """
        span_id = uuid.uuid4().hex[:16]
        child = TraceContext(
            trace_id=self.trace_id, operator_id=self.operator_id, parent_span_id=span_id
        )
        return child, span_id

    def log_fields(self) -> dict[str, str]:
        """Fields to bind onto log calls made under this trace."""
        fields = {"trace_id": self.trace_id}
        if self.operator_id is not None:
            fields["operator_id"] = self.operator_id
        if self.parent_span_id is not None:
            fields["span_id"] = self.parent_span_id
        return fields
