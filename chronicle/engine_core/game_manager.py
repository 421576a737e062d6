"""
Game State Manager - New games, end-of-turn bookkeeping and endings.

Design principles:
- Pure functions: (state, ...) -> new state
- Game-over causes are checked in a fixed order; the first match wins
- History is only ever written through record_game_event()
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING
import logging
import random
import time

from ..config import DEFAULT_CONFIG, EngineConfig, get_difficulty
from .state import (
    STAT_MIN,
    AttributeVector,
    CardPools,
    CourtPolitics,
    TERMINAL_ATTRIBUTES,
    WorldState,
    clamp,
)
from .history import HistoryRecorder

if TYPE_CHECKING:
    from .event import EventCard, EventOption

logger = logging.getLogger(__name__)


class GameOverCause(Enum):
    HEALTH = "health"
    POWER = "power"
    WEALTH = "wealth"
    MILITARY = "military"
    POPULARITY = "popularity"
    AGE = "age"
    EXHAUSTION = "exhaustion"


_CAUSE_REASONS: dict[GameOverCause, str] = {
    GameOverCause.HEALTH: "The emperor succumbed to failing health",
    GameOverCause.POWER: "The emperor lost all authority and was forced to abdicate",
    GameOverCause.WEALTH: "The treasury ran dry and the regime collapsed",
    GameOverCause.MILITARY: "The army mutinied and overthrew the emperor",
    GameOverCause.POPULARITY: "The people rose in revolt and the dynasty fell",
    GameOverCause.EXHAUSTION: "The court settled into peace and the emperor abdicated in quiet",
}


@dataclass(frozen=True)
class GameOverCheck:
    """Outcome of a game-over check."""
    over: bool
    reason: str | None = None
    cause: GameOverCause | None = None


_NOT_OVER = GameOverCheck(over=False)


@dataclass
class GameStateManager:
    """
    Creates and advances world states.

    Stateless apart from its config and history recorder.
    """
    config: EngineConfig = DEFAULT_CONFIG
    recorder: HistoryRecorder | None = None

    def __post_init__(self):
        if self.recorder is None:
            self.recorder = HistoryRecorder()

    def create_new_game(
        self,
        difficulty: str = "normal",
        rng: random.Random | None = None,
    ) -> WorldState:
        """
        Create a fresh world state.

        Starting age is drawn uniformly from the configured range; every
        other emperor stat starts at its configured value. Pools, history,
        characters and factions start empty. Unknown difficulty names are
        stored as "normal".
        """
        difficulty = get_difficulty(difficulty).name
        source = rng if rng is not None else random
        age = source.randint(self.config.min_initial_age, self.config.max_initial_age)
        emperor = AttributeVector(**self.config.initial_emperor_stats, age=age)

        logger.debug("New %s game, emperor aged %d", difficulty, age)
        return WorldState(
            emperor=emperor,
            card_pools=CardPools(),
            court_politics=CourtPolitics(**self.config.initial_court_politics),
            difficulty=difficulty,
            current_turn=1,
            game_over=False,
        )

    def check_game_over(self, state: WorldState) -> GameOverCheck:
        """
        Check whether the game has ended.

        Order: health, power, wealth, military, popularity, age, then
        an exhausted deck (active and pending both empty).
        """
        emperor = state.emperor

        for attribute in TERMINAL_ATTRIBUTES:
            if emperor.get(attribute) <= STAT_MIN:
                cause = GameOverCause(attribute)
                return GameOverCheck(over=True, reason=_CAUSE_REASONS[cause], cause=cause)

        if emperor.age >= self.config.max_age:
            return GameOverCheck(
                over=True,
                reason=f"The emperor died peacefully at the age of {emperor.age:g}",
                cause=GameOverCause.AGE,
            )

        pools = state.card_pools
        if not pools.active and not pools.pending:
            return GameOverCheck(
                over=True,
                reason=_CAUSE_REASONS[GameOverCause.EXHAUSTION],
                cause=GameOverCause.EXHAUSTION,
            )

        return _NOT_OVER

    def process_turn_end(self, state: WorldState) -> WorldState:
        """
        Close the current turn.

        Ages the emperor by one year, advances the turn counter, clears
        the current event and re-derives court stability and efficiency.
        """
        return state._copy_with(
            emperor=state.emperor.adjusted("age", 1),
            current_turn=state.current_turn + 1,
            current_event=None,
            court_politics=self._recompute_court_politics(state),
        )

    def _recompute_court_politics(self, state: WorldState) -> CourtPolitics:
        # A single dominant faction destabilizes the court
        influences = [f.influence for f in state.factions]
        max_influence = max(influences + [0])
        avg_influence = sum(influences) / len(influences) if influences else 50

        court = state.court_politics
        stability = clamp(100 - (max_influence - avg_influence), 0, 100)
        efficiency = clamp(stability - court.corruption * 0.5, 0, 100)
        return replace(court, stability=stability, efficiency=efficiency)

    def record_game_event(
        self,
        state: WorldState,
        event: EventCard,
        option: EventOption,
        relationship_changes: dict[str, float] | None = None,
        character_discoveries: list[str] | None = None,
    ) -> WorldState:
        """Append a resolved event to the state's history."""
        return self.recorder.record(
            state,
            event,
            option,
            relationship_changes=relationship_changes,
            character_discoveries=character_discoveries,
        )

    def end_game(self, state: WorldState, reason: str) -> WorldState:
        """Mark the game as over."""
        logger.info("Game over on turn %d: %s", state.current_turn, reason)
        return state._copy_with(
            game_over=True,
            game_over_reason=reason,
            end_time=time.time(),
        )


# Convenience functions

def create_new_game(difficulty: str = "normal", rng: random.Random | None = None) -> WorldState:
    return GameStateManager().create_new_game(difficulty, rng=rng)


def check_game_over(state: WorldState) -> GameOverCheck:
    return GameStateManager().check_game_over(state)


def process_turn_end(state: WorldState) -> WorldState:
    return GameStateManager().process_turn_end(state)


def record_game_event(
    state: WorldState,
    event: EventCard,
    option: EventOption,
    relationship_changes: dict[str, float] | None = None,
    character_discoveries: list[str] | None = None,
) -> WorldState:
    return GameStateManager().record_game_event(
        state, event, option, relationship_changes, character_discoveries
    )
