"""
Engine Results - Structured success/failure values for the orchestration layer.

Failures are returned, not raised, so a batch of games can keep
going past one bad configuration.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Structured error codes."""
    NO_CHARACTERS = "NO_CHARACTERS"
    NO_ELIGIBLE_EVENT = "NO_ELIGIBLE_EVENT"
    NO_CURRENT_EVENT = "NO_CURRENT_EVENT"
    GAME_OVER = "GAME_OVER"
    INVALID_CONFIG = "INVALID_CONFIG"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    HANDLER_ERROR = "HANDLER_ERROR"


@dataclass
class EngineResult:
    """
    Result of an orchestration step.

    Contains:
    - Whether the step succeeded
    - The new authoritative state (on success)
    - A human-readable reason (on failure)
    - The drawn event, when the step drew one
    """
    success: bool
    state: Any | None = None  # WorldState
    reason: str | None = None
    error_code: ErrorCode | None = None

    event: Any | None = None  # EventCard
    changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        reason: str,
        error_code: ErrorCode | None = None,
        state: Any | None = None,
    ) -> EngineResult:
        """Create a failure result."""
        return cls(success=False, reason=reason, error_code=error_code, state=state)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        event: Any | None = None,
        changes: list[str] | None = None,
    ) -> EngineResult:
        """Create a success result with new state."""
        return cls(success=True, state=state, event=event, changes=changes or [])
