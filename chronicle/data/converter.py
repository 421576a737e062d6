"""
Config Converter - Turns validated content records into engine types.

Handles:
- Characters, factions and event cards
- Condition records, including legacy "minHealth"-style keys
- Merging a character's own events with its common cards
- Dealing a random, mutually compatible cast of characters
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence
import logging
import random

from pydantic import ValidationError

from ..config import DEFAULT_CONFIG
from ..engine_core.conditions import (
    AttributeRequirement,
    CharacterCondition,
    Comparator,
    ConditionSet,
    ConditionTarget,
    FactionRequirement,
    InterCharacterCondition,
    parse_attribute_requirements,
)
from ..engine_core.event import (
    AttributeEffect,
    CharacterEffect,
    EffectTarget,
    EventCard,
    EventOption,
    FactionEffect,
    Importance,
    InterCharacterEffect,
    WeightBand,
)
from ..engine_core.state import (
    AttributeVector,
    Character,
    CharacterRelationship,
    Faction,
    RelationshipWithEmperor,
    RelationType,
)
from .schemas import (
    CharacterConfig,
    CommonCardConfig,
    ConditionConfig,
    EventConfig,
    FactionConfig,
    OptionConfig,
)

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when a content record fails structural validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Config validation failed with {len(errors)} error(s)")


def _validation_messages(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    ]


def parse_character_config(raw: Mapping[str, Any]) -> CharacterConfig:
    """Validate a raw character record."""
    try:
        return CharacterConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(_validation_messages(e)) from e


def parse_event_config(raw: Mapping[str, Any]) -> EventConfig:
    """Validate a raw event record. An event needs at least one option."""
    try:
        config = EventConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(_validation_messages(e)) from e
    if not config.options:
        raise ConfigValidationError([f"options: event {config.id} has no options"])
    return config


def parse_common_card_config(raw: Mapping[str, Any]) -> CommonCardConfig:
    """Validate a raw common card record."""
    try:
        return CommonCardConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(_validation_messages(e)) from e


@dataclass
class ConfigConverter:
    """
    Converts content records into engine types.

    rng drives character selection; the default is the
    process-global generator.
    """
    rng: random.Random | None = None

    @property
    def _random(self):
        return self.rng if self.rng is not None else random

    # -------------------------------------------------------------------------
    # Characters and factions
    # -------------------------------------------------------------------------

    def to_character(self, config: CharacterConfig) -> Character:
        """Build a fresh in-game character from its record."""
        attrs = config.initial_attributes
        relationship = config.initial_relationship_with_emperor

        network = []
        for link in config.relationship_network:
            network.append(CharacterRelationship(
                target_character_id=link.target_character_id,
                relation_type=_relation_type(link.relation_type),
                relationship_strength=link.relationship_strength,
                secret_level=link.secret_level,
                historical_basis=link.historical_basis,
            ))

        return Character(
            character_id=config.id,
            name=config.name,
            display_name=config.display_name or config.name,
            role=config.role,
            description=config.description,
            category=config.category,
            tags=list(config.tags),
            attributes=AttributeVector(**attrs.model_dump()),
            relationship_with_emperor=(
                RelationshipWithEmperor(**relationship.model_dump())
                if relationship is not None
                else RelationshipWithEmperor()
            ),
            relationship_network=network,
            faction_id=config.faction_id,
            hidden_traits=list(config.traits) + list(config.hidden_traits),
            total_clues=len(config.background_clues),
            event_ids=list(config.event_ids),
            common_card_ids=list(config.common_card_ids),
        )

    def to_faction(self, config: FactionConfig) -> Faction:
        return Faction(
            faction_id=config.id,
            name=config.name,
            influence=config.influence,
            leader_character_id=config.leader_character_id,
            member_character_ids=list(config.member_character_ids),
            agenda=config.agenda,
        )

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def to_event_card(self, config: EventConfig, character_id: str | None = None) -> EventCard:
        """
        Build a frozen event card.

        character_id becomes the card's "self" character. Options
        without an id get "<event_id>_<n>", numbered from 1.
        """
        options = tuple(
            self._to_option(option, f"{config.id}_{index}")
            for index, option in enumerate(config.options, start=1)
        )

        dynamic_weight = {
            attribute: tuple(
                WeightBand(low=band.range[0], high=band.range[1], multiplier=band.multiplier)
                for band in bands
            )
            for attribute, bands in config.dynamic_weight.items()
        }

        return EventCard(
            event_id=config.id,
            title=config.title,
            options=options,
            character_id=character_id,
            description=config.description,
            speaker=config.speaker,
            dialogue=config.dialogue,
            activation_conditions=self.parse_conditions(config.activation_conditions),
            removal_conditions=self.parse_conditions(config.removal_conditions),
            trigger_conditions=self.parse_conditions(config.trigger_conditions),
            weight=config.weight,
            dynamic_weight=dynamic_weight,
            importance=Importance(config.importance.value),
        )

    def _to_option(self, config: OptionConfig, fallback_id: str) -> EventOption:
        effects = []
        for effect in config.effects:
            effects.append(AttributeEffect(
                target=EffectTarget(effect.target.value),
                attribute=effect.attribute,
                offset=effect.offset,
                character_id=effect.character_id,
            ))

        return EventOption(
            option_id=config.id or fallback_id,
            description=config.description,
            effects=tuple(effects),
            character_effects=tuple(
                CharacterEffect(
                    character_id=ce.character_id,
                    attribute_changes=dict(ce.attribute_changes),
                    relationship_changes=dict(ce.relationship_changes),
                    status_changes=dict(ce.status_changes),
                )
                for ce in config.character_effects
            ),
            inter_character_effects=tuple(
                InterCharacterEffect(
                    character1=ie.character1,
                    character2=ie.character2,
                    relationship_change=ie.relationship_change,
                    reason=ie.reason,
                )
                for ie in config.inter_character_effects
            ),
            faction_effects=tuple(
                FactionEffect(faction=fe.faction, influence_change=fe.influence_change)
                for fe in config.faction_effects
            ),
            character_clues=tuple(config.character_clues),
            consequences=config.consequences,
        )

    def parse_conditions(self, config: ConditionConfig | None) -> ConditionSet | None:
        """
        Convert a condition record to a ConditionSet.

        Returns None for a missing or empty record, so an empty removal
        block never removes a card.

        Raises:
            ConfigValidationError: on an unknown target or relation type
        """
        if config is None:
            return None

        errors: list[str] = []
        requirements: list[AttributeRequirement] = []

        for cond in config.attribute_conditions:
            try:
                target = ConditionTarget(cond.target)
            except ValueError:
                errors.append(f"attributeConditions: unknown target {cond.target!r}")
                continue
            if cond.min is not None:
                requirements.append(AttributeRequirement(cond.attribute, Comparator.MIN, cond.min, target))
            if cond.max is not None:
                requirements.append(AttributeRequirement(cond.attribute, Comparator.MAX, cond.max, target))

        requirements.extend(parse_attribute_requirements(config.legacy_bounds()))
        requirements.extend(parse_attribute_requirements(config.attribute_requirements))
        requirements.extend(
            parse_attribute_requirements(config.self_attribute_requirements, ConditionTarget.SELF)
        )

        inter_relations = []
        for rel in config.inter_character_relations:
            relation_type = None
            if rel.relation_type is not None:
                try:
                    relation_type = RelationType(rel.relation_type)
                except ValueError:
                    errors.append(f"interCharacterRelations: unknown relation type {rel.relation_type!r}")
                    continue
            inter_relations.append(InterCharacterCondition(
                character1=rel.character1,
                character2=rel.character2,
                min_strength=rel.min_strength,
                max_strength=rel.max_strength,
                relation_type=relation_type,
            ))

        if errors:
            raise ConfigValidationError(errors)

        conditions = ConditionSet(
            attribute_requirements=tuple(requirements),
            required_events=tuple(config.required_events),
            excluded_events=tuple(config.excluded_events),
            character_conditions=tuple(
                CharacterCondition(
                    character_id=cc.character_id,
                    alive=cc.alive,
                    attribute_requirements=parse_attribute_requirements(cc.attribute_requirements),
                    relationship_requirements=parse_attribute_requirements(cc.relationship_requirements),
                    status_flags=dict(cc.status_flags),
                )
                for cc in config.character_conditions
            ),
            inter_character_relations=tuple(inter_relations),
            faction_requirements=tuple(
                FactionRequirement(
                    faction=fr.faction,
                    min_influence=fr.min_influence,
                    max_influence=fr.max_influence,
                    leader_present=fr.leader_present,
                )
                for fr in config.faction_requirements
            ),
        )
        return None if conditions.is_empty else conditions

    # -------------------------------------------------------------------------
    # Dealing characters
    # -------------------------------------------------------------------------

    def merge_character_and_common_events(
        self,
        character: Character | CharacterConfig,
        common_cards: Iterable[CommonCardConfig],
    ) -> list[str]:
        """
        Event IDs a character brings into a game.

        The character's own event IDs come first, then those of each
        referenced common card in reference order. Duplicates are dropped.
        Unknown common card IDs are skipped.
        """
        cards_by_id = {card.id: card for card in common_cards}
        merged = dict.fromkeys(character.event_ids)
        for card_id in character.common_card_ids:
            card = cards_by_id.get(card_id)
            if card is None:
                logger.debug("Character %s references unknown common card %r", _id_of(character), card_id)
                continue
            merged.update(dict.fromkeys(card.event_ids))
        return list(merged)

    def select_random_characters(
        self,
        characters: Sequence[CharacterConfig],
        min_count: int | None = None,
        max_count: int | None = None,
        preferred_categories: Sequence[str] = (),
    ) -> list[CharacterConfig]:
        """
        Deal a random cast.

        The target size is drawn uniformly from [min_count, max_count] and
        capped at the number available; if that covers everyone, everyone
        is returned. One character of each preferred category is seated
        first, then the rest are drawn at random. A character whose
        exclude list names someone already seated is passed over, so the
        cast can come up short.
        """
        if min_count is None:
            min_count = DEFAULT_CONFIG.min_characters
        if max_count is None:
            max_count = DEFAULT_CONFIG.max_characters

        available = list(characters)
        target = min(self._random.randint(min_count, max(min_count, max_count)), len(available))
        if len(available) <= target:
            return available

        selected: list[CharacterConfig] = []

        for category in preferred_categories:
            if len(selected) >= target:
                break
            group = [c for c in available if c.category == category]
            if not group:
                continue
            choice = self._random.choice(group)
            available.remove(choice)
            if _is_compatible(choice, selected):
                selected.append(choice)

        while len(selected) < target and available:
            choice = available.pop(self._random.randrange(len(available)))
            if _is_compatible(choice, selected):
                selected.append(choice)
            else:
                logger.debug("Passed over %s: excluded by the current cast", choice.id)

        return selected


def _is_compatible(candidate: CharacterConfig, selected: list[CharacterConfig]) -> bool:
    if candidate.conditions is None or not candidate.conditions.exclude_characters:
        return True
    excluded = set(candidate.conditions.exclude_characters)
    return not any(c.id in excluded for c in selected)


def _relation_type(value: str) -> RelationType:
    try:
        return RelationType(value)
    except ValueError:
        logger.warning("Unknown relation type %r, treating as neutral", value)
        return RelationType.NEUTRAL


def _id_of(character: Character | CharacterConfig) -> str:
    return getattr(character, "character_id", None) or getattr(character, "id", "?")
