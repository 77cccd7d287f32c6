"""Core types for the orchestrator.

- IntentResolution: the router's verdict, a StructuredCall or FreeText
- CapabilityCall: the closed set of capability variants a StructuredCall
  parses into
"""

from dataclasses import dataclass, field
from typing import Any, TypeAlias


@dataclass(frozen=True)
class StructuredCall:
    """A tool call chosen by the model.

    Attributes:
        name: Tool name as emitted by the model.
        arguments: Decoded argument mapping.
        call_id: Identifier the model gave the call, if any.
    """

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    call_id: str | None = None


@dataclass(frozen=True)
class FreeText:
    """A conversational reply. Empty text is a no-op reply."""

    text: str


IntentResolution: TypeAlias = StructuredCall | FreeText


@dataclass(frozen=True)
class PlayMusic:
    """Search for a track and play or enqueue it."""

    query: str


@dataclass(frozen=True)
class SkipTrack:
    """Skip the current track."""


@dataclass(frozen=True)
class StopPlayback:
    """Stop, clear the queue, and leave the voice channel."""


@dataclass(frozen=True)
class ShowQueue:
    """Show the current track and upcoming queue."""


@dataclass(frozen=True)
class TogglePause:
    """Pause if playing, resume if paused."""


@dataclass(frozen=True)
class ExecuteCommand:
    """Open-ended administrative action, carried out by synthesized code."""

    description: str


CapabilityCall: TypeAlias = (
    PlayMusic | SkipTrack | StopPlayback | ShowQueue | TogglePause | ExecuteCommand
)
