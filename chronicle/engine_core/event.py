"""
Event Cards - Card templates, options and their effects.

Cards are frozen once converted from configuration. Only their
pool membership changes during a game.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .conditions import ConditionSet


class EffectTarget(Enum):
    """Who an attribute delta lands on."""
    PLAYER = "player"  # The emperor
    SELF = "self"  # The character who owns the card
    CHARACTER = "character"  # A character named by ID


class Importance(Enum):
    NORMAL = "normal"
    MAJOR = "major"
    CRITICAL = "critical"


@dataclass(frozen=True)
class AttributeEffect:
    """A signed delta on one attribute of one target."""
    target: EffectTarget
    attribute: str
    offset: float
    character_id: str | None = None  # Only for EffectTarget.CHARACTER

    @classmethod
    def player(cls, attribute: str, offset: float) -> AttributeEffect:
        """Factory for an emperor delta."""
        return cls(target=EffectTarget.PLAYER, attribute=attribute, offset=offset)

    @classmethod
    def on_self(cls, attribute: str, offset: float) -> AttributeEffect:
        """Factory for a delta on the card's own character."""
        return cls(target=EffectTarget.SELF, attribute=attribute, offset=offset)

    @classmethod
    def on_character(cls, character_id: str, attribute: str, offset: float) -> AttributeEffect:
        """Factory for a delta on a named character."""
        return cls(
            target=EffectTarget.CHARACTER,
            attribute=attribute,
            offset=offset,
            character_id=character_id,
        )


@dataclass(frozen=True)
class CharacterEffect:
    """
    Changes to a named character beyond plain attribute deltas.

    relationship_changes use per-field bounds (affection and trust
    are signed), status_changes overwrite flags.
    """
    character_id: str
    attribute_changes: dict[str, float] = field(default_factory=dict)
    relationship_changes: dict[str, float] = field(default_factory=dict)
    status_changes: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class InterCharacterEffect:
    """Shift in the relationship from character1 toward character2."""
    character1: str
    character2: str
    relationship_change: float
    reason: str = ""


@dataclass(frozen=True)
class FactionEffect:
    """Shift in a faction's influence."""
    faction: str
    influence_change: float


@dataclass(frozen=True)
class EventOption:
    """
    One choice presented to the player.

    Effects are applied together or not at all.
    """
    option_id: str
    description: str
    effects: tuple[AttributeEffect, ...] = ()
    character_effects: tuple[CharacterEffect, ...] = ()
    inter_character_effects: tuple[InterCharacterEffect, ...] = ()
    faction_effects: tuple[FactionEffect, ...] = ()
    character_clues: tuple[str, ...] = ()
    consequences: str = ""


@dataclass(frozen=True)
class WeightBand:
    """Inclusive [low, high] range of an attribute and its weight multiplier."""
    low: float
    high: float
    multiplier: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class EventCard:
    """
    An event card template.

    character_id is the card's "self" character: self-targeted
    conditions and effects resolve against it.
    """
    event_id: str
    title: str
    options: tuple[EventOption, ...] = ()
    character_id: str | None = None
    description: str = ""
    speaker: str = ""
    dialogue: str = ""

    activation_conditions: ConditionSet | None = None
    removal_conditions: ConditionSet | None = None
    trigger_conditions: ConditionSet | None = None

    weight: float | None = None
    dynamic_weight: dict[str, tuple[WeightBand, ...]] = field(default_factory=dict)
    importance: Importance = Importance.NORMAL

    def get_option(self, option_id: str) -> EventOption | None:
        """Get an option by ID."""
        for option in self.options:
            if option.option_id == option_id:
                return option
        return None
