"""
Session Manager - Keeps one independent world state per play-through.

LIFECYCLE:
1. Caller sets up a game (GameLoop.initialize_game) → create session
2. During the game:
   - draw() reconciles pools and draws the next event
   - play() resolves it with the player's choice
   - the stored state is replaced after every successful step
3. Game ends → session marked over, state kept until end_session()

PERSISTENCE RULES:
- Sessions live in memory only
- Callers that save games serialize the WorldState themselves
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time
import uuid

from ..engine_core.result import EngineResult, ErrorCode
from ..engine_core.state import WorldState
from .game_loop import GameLoop

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game reached an ending
    ABANDONED = "abandoned"  # Ended before an ending


@dataclass
class Session:
    """
    One play-through.

    world_state is the authoritative state; it is replaced, never
    mutated, after each step.
    """
    session_id: str
    created_at: float
    world_state: WorldState | None = None
    state: SessionState = SessionState.ACTIVE
    updated_at: float | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state == SessionState.ACTIVE


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions around initialized world states
    - Route draws and choices through the game loop
    - Clean up finished sessions
    """

    def __init__(self, loop: GameLoop | None = None):
        self.loop = loop or GameLoop()
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        world_state: WorldState,
        metadata: dict[str, Any] | None = None,
    ) -> Session:
        """Register a new session holding world_state."""
        session = Session(
            session_id=str(uuid.uuid4()),
            created_at=time.time(),
            world_state=world_state,
            state=SessionState.GAME_OVER if world_state.game_over else SessionState.ACTIVE,
            metadata=dict(metadata or {}),
        )
        self._sessions[session.session_id] = session
        logger.debug("Created session %s", session.session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def update_session(self, session_id: str, world_state: WorldState) -> Session | None:
        """Replace a session's world state. Returns None for an unknown ID."""
        session = self._sessions.get(session_id)
        if session is None:
            return None

        session.world_state = world_state
        session.updated_at = time.time()
        if world_state.game_over:
            session.state = SessionState.GAME_OVER
        return session

    def draw(self, session_id: str) -> EngineResult:
        """Draw the next event for a session."""
        session = self._sessions.get(session_id)
        if session is None or session.world_state is None:
            return EngineResult.failure(
                f"Session {session_id} not found",
                error_code=ErrorCode.SESSION_NOT_FOUND,
            )

        result = self.loop.next_event(session.world_state)
        if result.success:
            self.update_session(session_id, result.state)
        return result

    def play(self, session_id: str, option_id: str) -> EngineResult:
        """Resolve a session's current event with the chosen option."""
        session = self._sessions.get(session_id)
        if session is None or session.world_state is None:
            return EngineResult.failure(
                f"Session {session_id} not found",
                error_code=ErrorCode.SESSION_NOT_FOUND,
            )

        result = self.loop.play_turn(session.world_state, option_id)
        if result.success:
            self.update_session(session_id, result.state)
        return result

    def end_session(self, session_id: str, reason: str = "completed") -> Session | None:
        """
        End a session and drop it from memory.

        Returns the removed session, or None if the ID was unknown.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None

        if reason == "completed" or (session.world_state and session.world_state.game_over):
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.debug("Ended session %s (%s)", session_id, reason)
        return session

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Drop finished sessions older than max_age_seconds.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
