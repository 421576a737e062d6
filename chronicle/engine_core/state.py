"""
World State - The aggregate the engine operates on.

Design principles:
- Immutable-friendly: operations return new state, sharing unchanged parts
- Serializable: dataclasses.asdict() yields plain data for save files
- Bounded: every attribute write goes through clamp()
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace, asdict
from typing import Any, TYPE_CHECKING
from enum import Enum
import time

if TYPE_CHECKING:
    from .event import EventCard, AttributeEffect


STAT_MIN = 0
STAT_MAX = 100
RELATIONSHIP_MIN = -100
RELATIONSHIP_MAX = 100
FACTION_INFLUENCE_MIN = 0
FACTION_INFLUENCE_MAX = 100


def clamp(value: float, low: float | None, high: float | None) -> float:
    """Clamp value into [low, high]; a None bound is open."""
    if low is not None and value < low:
        return low
    if high is not None and value > high:
        return high
    return value


class PoolName(Enum):
    """The three card pools."""
    PENDING = "pending"
    ACTIVE = "active"
    DISCARDED = "discarded"


# =============================================================================
# Attributes
# =============================================================================

# Age only has a floor
ATTRIBUTE_BOUNDS: dict[str, tuple[int | None, int | None]] = {
    "health": (STAT_MIN, STAT_MAX),
    "power": (STAT_MIN, STAT_MAX),
    "wealth": (STAT_MIN, STAT_MAX),
    "military": (STAT_MIN, STAT_MAX),
    "popularity": (STAT_MIN, STAT_MAX),
    "age": (0, None),
}

# Game-over checks walk these in order
TERMINAL_ATTRIBUTES = ("health", "power", "wealth", "military", "popularity")


@dataclass
class AttributeVector:
    """
    Six-field stat block shared by the emperor and every character.
    """
    health: float = 50
    power: float = 50
    wealth: float = 50
    military: float = 50
    popularity: float = 50
    age: float = 30

    def get(self, attribute: str) -> float | None:
        """Get an attribute by name, None if it is not a field."""
        if attribute not in ATTRIBUTE_BOUNDS:
            return None
        return getattr(self, attribute)

    def adjusted(self, attribute: str, delta: float) -> AttributeVector:
        """Return a new vector with delta applied and the result clamped."""
        if attribute not in ATTRIBUTE_BOUNDS:
            return self
        low, high = ATTRIBUTE_BOUNDS[attribute]
        new_value = clamp(getattr(self, attribute) + delta, low, high)
        return replace(self, **{attribute: new_value})

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


RELATIONSHIP_BOUNDS: dict[str, tuple[int, int]] = {
    "affection": (RELATIONSHIP_MIN, RELATIONSHIP_MAX),
    "trust": (RELATIONSHIP_MIN, RELATIONSHIP_MAX),
    "fear": (STAT_MIN, STAT_MAX),
    "respect": (STAT_MIN, STAT_MAX),
    "dependency": (STAT_MIN, STAT_MAX),
    "threat": (STAT_MIN, STAT_MAX),
}


@dataclass
class RelationshipWithEmperor:
    """
    How a character feels about the emperor.

    affection and trust are signed; the rest are 0-100.
    """
    affection: float = 0
    trust: float = 0
    fear: float = 0
    respect: float = 50
    dependency: float = 0
    threat: float = 0

    def get(self, field_name: str) -> float | None:
        if field_name not in RELATIONSHIP_BOUNDS:
            return None
        return getattr(self, field_name)

    def adjusted(self, field_name: str, delta: float) -> RelationshipWithEmperor:
        """Return a new record with delta applied under the field's own bound."""
        if field_name not in RELATIONSHIP_BOUNDS:
            return self
        low, high = RELATIONSHIP_BOUNDS[field_name]
        new_value = clamp(getattr(self, field_name) + delta, low, high)
        return replace(self, **{field_name: new_value})


@dataclass
class CharacterStatusFlags:
    """Boolean status markers on a character."""
    alive: bool = True
    in_court: bool = True
    in_exile: bool = False
    imprisoned: bool = False
    promoted: bool = False
    demoted: bool = False
    suspicious: bool = False
    plotting: bool = False

    def get(self, flag: str) -> bool | None:
        if flag not in {f.name for f in fields(self)}:
            return None
        return getattr(self, flag)

    def with_flags(self, **changes: bool) -> CharacterStatusFlags:
        """Return new flags, ignoring unknown flag names."""
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in changes.items() if k in known})


class RelationType(Enum):
    """Kinds of character-to-character relationships."""
    ALLY = "ally"
    ENEMY = "enemy"
    NEUTRAL = "neutral"
    SUPERIOR = "superior"
    SUBORDINATE = "subordinate"
    FAMILY = "family"


@dataclass
class CharacterRelationship:
    """A directed relationship from one character to another."""
    target_character_id: str
    relation_type: RelationType = RelationType.NEUTRAL
    relationship_strength: float = 0  # -100 to 100
    secret_level: float = 0
    historical_basis: str = ""


# =============================================================================
# Characters, factions, court
# =============================================================================

@dataclass
class Character:
    """
    A character dealt into the current game.

    Characters own their own AttributeVector, independent of the emperor.
    """
    character_id: str
    name: str
    display_name: str = ""
    role: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = field(default_factory=list)

    attributes: AttributeVector = field(default_factory=AttributeVector)
    relationship_with_emperor: RelationshipWithEmperor = field(default_factory=RelationshipWithEmperor)
    relationship_network: list[CharacterRelationship] = field(default_factory=list)
    faction_id: str | None = None
    status_flags: CharacterStatusFlags = field(default_factory=CharacterStatusFlags)

    revealed_traits: list[str] = field(default_factory=list)
    hidden_traits: list[str] = field(default_factory=list)
    discovered_clues: list[str] = field(default_factory=list)
    total_clues: int = 0

    event_ids: list[str] = field(default_factory=list)
    common_card_ids: list[str] = field(default_factory=list)

    def get_relationship(self, target_id: str) -> CharacterRelationship | None:
        """Get this character's relationship toward another, if any."""
        for rel in self.relationship_network:
            if rel.target_character_id == target_id:
                return rel
        return None

    def _copy_with(self, **kwargs) -> Character:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


@dataclass
class Faction:
    """A court faction."""
    faction_id: str
    name: str
    influence: float = 50  # 0-100
    leader_character_id: str | None = None
    member_character_ids: list[str] = field(default_factory=list)
    agenda: str = ""


@dataclass
class CourtPolitics:
    """Aggregate court indicators, re-derived at the end of every turn."""
    tension: float = 30
    stability: float = 70
    corruption: float = 20
    efficiency: float = 60


# =============================================================================
# Pools and history
# =============================================================================

@dataclass
class CardPools:
    """
    The pending/active/discarded partition of every known event card.

    A card identity lives in exactly one list.
    """
    pending: list[EventCard] = field(default_factory=list)
    active: list[EventCard] = field(default_factory=list)
    discarded: list[EventCard] = field(default_factory=list)

    def get_pool(self, pool: PoolName) -> list[EventCard]:
        return getattr(self, pool.value)

    def locate(self, event_id: str) -> PoolName | None:
        """Find which pool holds the card, None if unknown."""
        for pool in PoolName:
            if any(card.event_id == event_id for card in self.get_pool(pool)):
                return pool
        return None

    @property
    def total(self) -> int:
        return len(self.pending) + len(self.active) + len(self.discarded)


@dataclass(frozen=True)
class GameHistoryEntry:
    """
    One resolved event. Never mutated after it is appended.
    """
    event_id: str
    event_title: str
    turn: int
    option_id: str
    chosen_action: str
    effects: tuple[AttributeEffect, ...] = ()
    timestamp: float = 0.0
    relationship_changes: tuple[tuple[str, float], ...] | None = None  # (key, delta) pairs
    character_discoveries: tuple[str, ...] | None = None
    importance: str = "normal"


# =============================================================================
# World state
# =============================================================================

@dataclass
class WorldState:
    """
    Complete game state at a point in time.

    The caller always replaces its reference with the value an
    operation returns.
    """
    emperor: AttributeVector = field(default_factory=AttributeVector)
    active_characters: list[Character] = field(default_factory=list)
    card_pools: CardPools = field(default_factory=CardPools)
    history: tuple[GameHistoryEntry, ...] = ()
    current_event: EventCard | None = None

    factions: list[Faction] = field(default_factory=list)
    court_politics: CourtPolitics = field(default_factory=CourtPolitics)

    difficulty: str = "normal"
    current_turn: int = 1
    game_over: bool = False
    game_over_reason: str | None = None
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None

    # Free-form data for callers (save slot names, UI hints)
    metadata: dict[str, Any] = field(default_factory=dict)

    def get_character(self, character_id: str | None) -> Character | None:
        """Get an active character by ID."""
        if character_id is None:
            return None
        for c in self.active_characters:
            if c.character_id == character_id:
                return c
        return None

    def with_character(self, character: Character) -> WorldState:
        """Return new state with an updated character."""
        new_characters = [
            character if c.character_id == character.character_id else c
            for c in self.active_characters
        ]
        return self._copy_with(active_characters=new_characters)

    def get_faction(self, name_or_id: str) -> Faction | None:
        """Get a faction by ID or display name."""
        for f in self.factions:
            if f.faction_id == name_or_id or f.name == name_or_id:
                return f
        return None

    def past_event_ids(self) -> set[str]:
        """IDs of every event already resolved."""
        return {entry.event_id for entry in self.history}

    def _copy_with(self, **kwargs) -> WorldState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
