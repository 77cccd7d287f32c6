"""Error taxonomy for the operator agent.

Each per-event failure is caught at the boundary of the handler that produced
it and turned into a single reply to the operator. Only ConfigurationError is
fatal, and only at startup.
"""


class OperatorAgentError(Exception):
    """Base exception for all operator agent errors."""

    pass


class ConfigurationError(OperatorAgentError):
    """Raised when required configuration is missing or invalid at startup."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        """Initialize configuration error.

        Args:
            message: Human-readable description.
            missing: Names of the required settings that were absent.
        """
        super().__init__(message)
        self.missing = missing or []


class ModelUnavailable(OperatorAgentError):
    """Raised when the language-model service fails, times out, or returns garbage."""

    pass


class DispatchError(OperatorAgentError):
    """Raised when a structured call names an unknown or malformed capability."""

    def __init__(self, message: str, tool_name: str | None = None) -> None:
        """Initialize dispatch error.

        Args:
            message: Human-readable description.
            tool_name: Name of the offending tool call, if known.
        """
        super().__init__(message)
        self.tool_name = tool_name


class PreconditionFailed(OperatorAgentError):
    """Raised when a capability's precondition does not hold.

    The message is the operator-facing reply.
    """

    pass


class SynthesisRejected(OperatorAgentError):
    """Raised when synthesized code fails the safety filter."""

    def __init__(self, message: str, violations: list[str] | None = None) -> None:
        """Initialize rejection.

        Args:
            message: Human-readable description.
            violations: Every denylisted reference found in the candidate.
        """
        super().__init__(message)
        self.violations = violations or []


class ExecutionFailed(OperatorAgentError):
    """Raised when synthesized code throws or exceeds its time limit."""

    pass


class AttachmentFetchFailed(OperatorAgentError):
    """Raised when an attachment cannot be downloaded or has an unsupported type."""

    pass
