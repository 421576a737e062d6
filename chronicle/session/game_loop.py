"""
Game Loop - Drives one game from setup to its ending.

The loop:
1. Deal characters and their event cards from a provider
2. Promote pending cards whose activation conditions now hold
3. Draw the next event from the active pool
4. Caller picks an option
5. Apply its effects, record history, discard the card
6. Close the turn and check for the end of the game
7. Repeat from 2

Every step returns an EngineResult. Failures are reported, not raised.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging
import random

from ..config import DEFAULT_CONFIG, EngineConfig
from ..data.converter import ConfigConverter, ConfigValidationError
from ..engine_core.card_pool import CardPoolManager
from ..engine_core.effect_resolver import EffectResolver, summarize_relationship_changes
from ..engine_core.game_manager import GameStateManager
from ..engine_core.result import EngineResult, ErrorCode

if TYPE_CHECKING:
    from ..data.provider import ConfigProvider
    from ..data.schemas import CharacterConfig, EventConfig
    from ..engine_core.event import EventCard
    from ..engine_core.state import WorldState

logger = logging.getLogger(__name__)


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop()
        result = loop.initialize_game(provider, difficulty="normal")
        state = result.state

        while not state.game_over:
            drawn = loop.next_event(state)
            if not drawn.success:
                break
            option_id = ask_player(drawn.event)
            state = loop.play_turn(drawn.state, option_id).state

    Pass a seeded random.Random for reproducible games.
    """

    def __init__(self, rng: random.Random | None = None, config: EngineConfig = DEFAULT_CONFIG):
        self.rng = rng
        self.config = config
        self.pools = CardPoolManager(rng=rng, default_weight=config.default_event_weight)
        self.resolver = EffectResolver()
        self.manager = GameStateManager(config=config)
        self.converter = ConfigConverter(rng=rng)

    def initialize_game(
        self,
        provider: ConfigProvider,
        difficulty: str = "normal",
        min_characters: int | None = None,
        max_characters: int | None = None,
    ) -> EngineResult:
        """
        Set up a new game.

        Deals a random cast, loads each character's own events plus the
        events of the common cards it references, and places every card:
        cards with activation conditions wait in pending, the rest start
        active. An event ID already dealt for another character is skipped.
        """
        try:
            all_characters = provider.load_all_characters()
            if not all_characters:
                logger.warning("Provider has no characters")
                return EngineResult.failure(
                    "No characters available to start a game",
                    error_code=ErrorCode.NO_CHARACTERS,
                )

            state = self.manager.create_new_game(difficulty, rng=self.rng)
            selected = self.converter.select_random_characters(
                all_characters,
                min_characters if min_characters is not None else self.config.min_characters,
                max_characters if max_characters is not None else self.config.max_characters,
            )

            common_cards = provider.load_all_common_cards()
            characters = []
            cards: list[EventCard] = []
            dealt: set[str] = set()

            for config in selected:
                event_ids = self.converter.merge_character_and_common_events(config, common_cards)
                character = self.converter.to_character(config)._copy_with(event_ids=event_ids)
                characters.append(character)

                for record in self._event_records(provider, config, event_ids):
                    if record.id in dealt:
                        logger.debug("Event %s already dealt, skipping for %s", record.id, config.id)
                        continue
                    dealt.add(record.id)
                    cards.append(self.converter.to_event_card(record, config.id))

            factions = [self.converter.to_faction(f) for f in provider.load_all_factions()]
            state = state._copy_with(active_characters=characters, factions=factions)
            state = self.pools.distribute(state, cards)
        except ConfigValidationError as e:
            logger.warning("Invalid configuration: %s", "; ".join(e.errors))
            return EngineResult.failure(
                f"Invalid configuration: {'; '.join(e.errors)}",
                error_code=ErrorCode.INVALID_CONFIG,
            )
        except Exception as e:
            logger.exception("Failed to initialize game")
            return EngineResult.failure(str(e), error_code=ErrorCode.HANDLER_ERROR)

        logger.info(
            "Initialized %s game: %d characters, %d events",
            difficulty, len(characters), len(cards),
        )
        return EngineResult.success_with_state(
            state,
            changes=[f"Dealt {c.character_id}" for c in characters],
        )

    def _event_records(
        self,
        provider: ConfigProvider,
        character: CharacterConfig,
        event_ids: list[str],
    ) -> list[EventConfig]:
        # Own events are all dealt; common card events only when listed
        records = list(provider.load_character_events(character.id))
        known = {r.id for r in records}
        wanted = set(event_ids)
        for card_id in character.common_card_ids:
            for record in provider.load_common_card_events(card_id):
                if record.id in wanted and record.id not in known:
                    known.add(record.id)
                    records.append(record)
        return records

    def next_event(self, state: WorldState) -> EngineResult:
        """
        Reconcile the pending pool and draw the next event.

        On success the result carries the drawn card and a state with
        current_event set to it.
        """
        if state.game_over:
            return EngineResult.failure("Game is over", error_code=ErrorCode.GAME_OVER, state=state)

        state = self.pools.reconcile_pending(state)
        event = self.pools.select_next(state)
        if event is None:
            return EngineResult.failure(
                "No eligible event to draw",
                error_code=ErrorCode.NO_ELIGIBLE_EVENT,
                state=state,
            )

        logger.debug("Turn %d drew %s", state.current_turn, event.event_id)
        return EngineResult.success_with_state(state._copy_with(current_event=event), event=event)

    def play_turn(self, state: WorldState, option_id: str) -> EngineResult:
        """
        Resolve the current event with the chosen option and close the turn.

        An unknown option_id falls back to the event's first option.
        The input state is never modified; on failure the result
        carries it unchanged.
        """
        if state.game_over:
            return EngineResult.failure("Game is over", error_code=ErrorCode.GAME_OVER, state=state)

        event = state.current_event
        if event is None:
            return EngineResult.failure(
                "No current event to resolve",
                error_code=ErrorCode.NO_CURRENT_EVENT,
                state=state,
            )
        if not event.options:
            return EngineResult.failure(
                f"Event {event.event_id} has no options",
                error_code=ErrorCode.HANDLER_ERROR,
                state=state,
            )

        option = event.get_option(option_id)
        if option is None:
            logger.warning(
                "Unknown option %r for %s, using %s",
                option_id, event.event_id, event.options[0].option_id,
            )
            option = event.options[0]

        try:
            self_id = event.character_id
            new_state = self.resolver.apply(state, option, self_id=self_id)
            new_state = self.manager.record_game_event(
                new_state,
                event,
                option,
                relationship_changes=summarize_relationship_changes(option, self_id) or None,
                character_discoveries=list(option.character_clues) or None,
            )
            new_state = self.pools.discard(new_state, event.event_id)
            new_state = self.manager.process_turn_end(new_state)

            changes = [f"Resolved {event.event_id} with {option.option_id}"]
            check = self.manager.check_game_over(new_state)
            if check.over:
                new_state = self.manager.end_game(new_state, check.reason)
                changes.append(f"Game over: {check.reason}")
        except Exception as e:
            logger.exception("Failed to resolve %s", event.event_id)
            return EngineResult.failure(str(e), error_code=ErrorCode.HANDLER_ERROR, state=state)

        return EngineResult.success_with_state(new_state, event=event, changes=changes)
