"""
History Recorder - Append-only log of resolved events.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import time

from .state import GameHistoryEntry

if TYPE_CHECKING:
    from .event import EventCard, EventOption
    from .state import WorldState


class HistoryRecorder:
    """Builds history entries and appends them to a state."""

    def record(
        self,
        state: WorldState,
        event: EventCard,
        option: EventOption,
        relationship_changes: dict[str, float] | None = None,
        character_discoveries: list[str] | None = None,
    ) -> WorldState:
        """Return a state whose history ends with one new entry for this resolution."""
        entry = GameHistoryEntry(
            event_id=event.event_id,
            event_title=event.title,
            turn=state.current_turn,
            option_id=option.option_id,
            chosen_action=option.description,
            effects=tuple(option.effects),
            timestamp=time.time(),
            relationship_changes=tuple(relationship_changes.items()) if relationship_changes else None,
            character_discoveries=tuple(character_discoveries) if character_discoveries else None,
            importance=event.importance.value,
        )
        return state._copy_with(history=state.history + (entry,))
