"""Action synthesis, safety screening, and execution of administrative requests."""

from operator_agent.actions.engine import (
    SAFE_BUILTINS,
    ExecutionEngine,
    ExecutionOutcome,
    ExecutionUnit,
    format_execution_error,
)
from operator_agent.actions.runner import SYNTHESIS_FAILURE_REPLY, ActionRunner
from operator_agent.actions.safety import SafetyFilter, Violation
from operator_agent.actions.synthesizer import ActionSynthesizer, strip_code_fences

__all__ = [
    "ActionRunner",
    "ActionSynthesizer",
    "ExecutionEngine",
    "ExecutionOutcome",
    "ExecutionUnit",
    "SafetyFilter",
    "Violation",
    "SAFE_BUILTINS",
    "SYNTHESIS_FAILURE_REPLY",
    "format_execution_error",
    "strip_code_fences",
]
