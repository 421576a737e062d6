"""
Session Module - Runs games on top of the engine core.

A session represents one reign:
- Created once a game has been dealt from a config provider
- Holds the current world state
- Draws events and resolves the player's choices
- Ends when the game reaches an ending or the player quits

Sessions are in-memory only. Callers that want save files
serialize the WorldState themselves.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
]
