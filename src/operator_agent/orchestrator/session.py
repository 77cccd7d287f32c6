"""Per-operator session storage with a sliding expiry window.

Sessions live only in memory. Each session owns exactly one expiry timer on
the running event loop; touch() cancels and reschedules it, and when it fires
the session is dropped so the next utterance starts a fresh conversation.

Mutations are plain statements between suspension points, so the single
event-loop thread serializes them; concurrent handlers for the same operator
interleave and the last write wins.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from operator_agent.telemetry import (
    SESSION_CREATED,
    SESSION_EXPIRED,
    SESSION_REFRESHED,
    SESSION_STORE_CLEARED,
    get_logger,
)

log = get_logger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 600.0


@dataclass(frozen=True)
class Turn:
    """One conversation turn."""

    role: str
    text: str


@dataclass
class Session:
    """A single operator's conversation state.

    Attributes:
        operator_id: Identity of the operator owning the session.
        turns: Conversation turns in insertion order.
        conversation: Model-facing chat history (OpenAI-style messages). The
            intent router owns its contents.
        created_at: UTC timestamp when the session was created.
        last_active_at: UTC timestamp of the last touch.
    """

    operator_id: str
    turns: list[Turn] = field(default_factory=list)
    conversation: list[dict[str, Any]] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_active_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    expiry: asyncio.TimerHandle | None = field(default=None, repr=False, compare=False)


class SessionStore:
    """Keyed mapping from operator identity to Session.

    At most one live session exists per operator. Created at startup, passed
    to the orchestrator, and cleared at shutdown.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS) -> None:
        """Initialize an empty store.

        Args:
            ttl_seconds: Inactivity window after which a session expires.

        Raises:
            ValueError: If ttl_seconds is not positive.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, operator_id: object) -> bool:
        return operator_id in self._sessions

    def get(self, operator_id: str) -> Session | None:
        """Return the live session for an operator, or None."""
        return self._sessions.get(operator_id)

    def get_or_create(self, operator_id: str) -> Session:
        """Fetch the operator's session, creating and arming a new one if absent.

        Idempotent: repeated calls return the same Session until it expires.
        """
        session = self._sessions.get(operator_id)
        if session is not None:
            return session

        session = Session(operator_id=operator_id)
        self._sessions[operator_id] = session
        self._schedule_expiry(session)
        log.info(SESSION_CREATED, operator_id=operator_id, ttl_seconds=self.ttl_seconds)
        return session

    def append_turn(self, session: Session, role: str, text: str) -> Turn:
        """Append a turn to the session history.

        Args:
            session: Session to mutate.
            role: "user" or "assistant".
            text: Turn text.

        Returns:
            The appended Turn.
        """
        turn = Turn(role=role, text=text)
        session.turns.append(turn)
        return turn

    def withdraw_turn(self, session: Session, turn: Turn) -> None:
        """Remove a turn that was never answered.

        Matches by identity, so an equal turn appended concurrently is kept.
        """
        for idx in range(len(session.turns) - 1, -1, -1):
            if session.turns[idx] is turn:
                del session.turns[idx]
                return

    def touch(self, session: Session) -> None:
        """Reset the session's expiry timer and mark it active.

        A session that expired while a handler still held it is reinstated,
        unless a newer session has replaced it in the meantime.
        """
        current = self._sessions.get(session.operator_id)
        if current is None:
            self._sessions[session.operator_id] = session
        elif current is not session:
            log.debug("stale_session_touch_ignored", operator_id=session.operator_id)
            return

        session.last_active_at = datetime.now(UTC)
        self._schedule_expiry(session)
        log.debug(SESSION_REFRESHED, operator_id=session.operator_id, turns=len(session.turns))

    def expire(self, operator_id: str) -> bool:
        """Drop an operator's session immediately.

        Returns:
            True if a session was removed.
        """
        session = self._sessions.pop(operator_id, None)
        if session is None:
            return False
        if session.expiry is not None:
            session.expiry.cancel()
            session.expiry = None
        log.info(SESSION_EXPIRED, operator_id=operator_id, turns=len(session.turns))
        return True

    def clear(self) -> None:
        """Cancel every timer and drop every session (shutdown)."""
        count = len(self._sessions)
        for session in self._sessions.values():
            if session.expiry is not None:
                session.expiry.cancel()
                session.expiry = None
        self._sessions.clear()
        log.info(SESSION_STORE_CLEARED, sessions=count)

    def _schedule_expiry(self, session: Session) -> None:
        if session.expiry is not None:
            session.expiry.cancel()
        loop = asyncio.get_running_loop()
        session.expiry = loop.call_later(self.ttl_seconds, self._on_timer, session)

    def _on_timer(self, session: Session) -> None:
        # Only the timer of the live session may remove it
        if self._sessions.get(session.operator_id) is session:
            session.expiry = None
            self.expire(session.operator_id)
