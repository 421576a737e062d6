"""
Pytest fixtures for Crown Chronicle tests.
"""

import random

import pytest

from ..engine_core.conditions import ConditionSet
from ..engine_core.event import AttributeEffect, EventCard, EventOption
from ..engine_core.state import (
    AttributeVector,
    CardPools,
    Character,
    CharacterRelationship,
    Faction,
    GameHistoryEntry,
    RelationType,
    WorldState,
)
from ..data.provider import MemoryConfigProvider


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible draws."""
    return random.Random(1234)


@pytest.fixture
def make_card():
    """Factory for event cards with a single no-op option by default."""

    def _make(
        event_id: str,
        weight: float | None = None,
        activation: ConditionSet | None = None,
        removal: ConditionSet | None = None,
        trigger: ConditionSet | None = None,
        character_id: str | None = None,
        options: tuple[EventOption, ...] | None = None,
        dynamic_weight=None,
    ) -> EventCard:
        if options is None:
            options = (EventOption(option_id=f"{event_id}_a", description="Accept"),)
        return EventCard(
            event_id=event_id,
            title=event_id.replace("_", " ").title(),
            options=options,
            character_id=character_id,
            activation_conditions=activation,
            removal_conditions=removal,
            trigger_conditions=trigger,
            weight=weight,
            dynamic_weight=dynamic_weight or {},
        )

    return _make


@pytest.fixture
def characters() -> list[Character]:
    """A chancellor and a general who distrust each other."""
    chancellor = Character(
        character_id="chancellor",
        name="Wei Zheng",
        role="Chancellor",
        category="civil",
        attributes=AttributeVector(health=70, power=60, wealth=40, military=10, popularity=55, age=52),
        relationship_network=[
            CharacterRelationship(
                target_character_id="general",
                relation_type=RelationType.ENEMY,
                relationship_strength=-40,
            ),
        ],
        faction_id="scholars",
    )
    general = Character(
        character_id="general",
        name="Li Jing",
        role="Grand General",
        category="military",
        attributes=AttributeVector(health=80, power=45, wealth=30, military=85, popularity=40, age=44),
        faction_id="army",
    )
    return [chancellor, general]


@pytest.fixture
def factions() -> list[Faction]:
    return [
        Faction(
            faction_id="scholars",
            name="Scholar Officials",
            influence=60,
            leader_character_id="chancellor",
            member_character_ids=["chancellor"],
        ),
        Faction(
            faction_id="army",
            name="Northern Army",
            influence=40,
            leader_character_id="general",
            member_character_ids=["general"],
        ),
    ]


@pytest.fixture
def make_state():
    """Factory for world states with given pools and emperor stats."""

    def _make(
        pending=(),
        active=(),
        discarded=(),
        emperor: AttributeVector | None = None,
        characters=(),
        factions=(),
        history_ids=(),
        difficulty: str = "normal",
    ) -> WorldState:
        history = tuple(
            GameHistoryEntry(
                event_id=event_id,
                event_title=event_id,
                turn=turn,
                option_id="a",
                chosen_action="a",
            )
            for turn, event_id in enumerate(history_ids, start=1)
        )
        return WorldState(
            emperor=emperor or AttributeVector(age=20),
            active_characters=list(characters),
            card_pools=CardPools(
                pending=list(pending),
                active=list(active),
                discarded=list(discarded),
            ),
            history=history,
            factions=list(factions),
            difficulty=difficulty,
        )

    return _make


@pytest.fixture
def power_option() -> EventOption:
    """Option that costs the emperor 1000 power."""
    return EventOption(
        option_id="purge",
        description="Purge the court",
        effects=(AttributeEffect.player("power", -1000),),
    )


@pytest.fixture
def raw_characters() -> list[dict]:
    """Character records as they appear in content files."""
    return [
        {
            "id": "empress",
            "name": "Empress Dowager",
            "displayName": "The Empress Dowager",
            "role": "Regent",
            "category": "royal",
            "initialAttributes": {
                "health": 60, "power": 80, "wealth": 70,
                "military": 20, "popularity": 50, "age": 58,
            },
            "initialRelationshipWithEmperor": {"affection": 30, "trust": -10},
            "traits": ["ambitious"],
            "hiddenTraits": ["schemer"],
            "backgroundClues": {"letter": "A sealed letter", "ring": "A jade ring"},
            "eventIds": ["regency_dispute"],
            "commonCardIds": ["court_rituals"],
        },
        {
            "id": "eunuch",
            "name": "Chief Eunuch",
            "role": "Steward",
            "category": "servant",
            "initialAttributes": {
                "health": 50, "power": 40, "wealth": 60,
                "military": 5, "popularity": 20, "age": 45,
            },
            "conditions": {"excludeCharacters": ["empress"]},
        },
    ]


@pytest.fixture
def raw_events() -> dict[str, list[dict]]:
    """Event records keyed by owning character."""
    return {
        "empress": [
            {
                "id": "regency_dispute",
                "title": "Regency Dispute",
                "speaker": "Empress Dowager",
                "options": [
                    {
                        "id": "yield",
                        "description": "Let her rule a while longer",
                        "effects": [
                            {"target": "player", "attribute": "power", "offset": -10},
                            {"target": "self", "attribute": "affection", "offset": 15},
                        ],
                    },
                    {
                        "id": "refuse",
                        "description": "Take the seal",
                        "effects": [{"target": "player", "attribute": "power", "offset": 10}],
                        "characterClues": ["letter"],
                    },
                ],
                "weight": 3,
            },
            {
                "id": "old_grudge",
                "title": "An Old Grudge",
                "options": [{"id": "ignore", "description": "Ignore it"}],
                "activationConditions": {"requiredEvents": ["regency_dispute"]},
            },
        ],
        "eunuch": [
            {
                "id": "palace_accounts",
                "title": "Palace Accounts",
                "choices": [{"text": "Audit the books"}],
            },
        ],
    }


@pytest.fixture
def raw_common_cards() -> list[dict]:
    return [{"id": "court_rituals", "name": "Court Rituals", "eventIds": ["spring_rite", "regency_dispute"]}]


@pytest.fixture
def raw_common_events() -> dict[str, list[dict]]:
    return {
        "court_rituals": [
            {
                "id": "spring_rite",
                "title": "Spring Rite",
                "options": [
                    {
                        "id": "attend",
                        "description": "Lead the rite",
                        "effects": [{"target": "player", "attribute": "popularity", "offset": 5}],
                    },
                ],
            },
        ],
    }


@pytest.fixture
def provider(raw_characters, raw_events, raw_common_cards, raw_common_events) -> MemoryConfigProvider:
    """In-memory provider holding the sample content."""
    return MemoryConfigProvider(
        characters=raw_characters,
        events=raw_events,
        common_cards=raw_common_cards,
        common_card_events=raw_common_events,
        factions=[{"id": "regents", "name": "Regent's Circle", "influence": 70}],
    )
