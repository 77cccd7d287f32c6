"""Orchestrator: sessions, intent routing, and capability dispatch."""

from operator_agent.orchestrator.dispatcher import CapabilityDispatcher, parse_call
from operator_agent.orchestrator.orchestrator import (
    INTENT_FAILURE_REPLY,
    Orchestrator,
    split_message,
)
from operator_agent.orchestrator.prompts import CONVERSATION_SYSTEM_PROMPT
from operator_agent.orchestrator.router import IntentRouter
from operator_agent.orchestrator.session import Session, SessionStore, Turn
from operator_agent.orchestrator.types import (
    CapabilityCall,
    ExecuteCommand,
    FreeText,
    IntentResolution,
    PlayMusic,
    ShowQueue,
    SkipTrack,
    StopPlayback,
    StructuredCall,
    TogglePause,
)

__all__ = [
    "Orchestrator",
    "IntentRouter",
    "CapabilityDispatcher",
    "SessionStore",
    "Session",
    "Turn",
    "parse_call",
    "split_message",
    "CONVERSATION_SYSTEM_PROMPT",
    "INTENT_FAILURE_REPLY",
    "IntentResolution",
    "StructuredCall",
    "FreeText",
    "CapabilityCall",
    "PlayMusic",
    "SkipTrack",
    "StopPlayback",
    "ShowQueue",
    "TogglePause",
    "ExecuteCommand",
]
