"""
Effect Resolver - Applies a chosen option's effects to the world state.

Handles:
- Emperor attribute deltas (clamped to 0-100, age floored at 0)
- Deltas on the card's own character or on a named character
- Relationship fields, each clamped to its own bound
- Status flags, inter-character relationships, faction influence
- Clue discovery

The resolver never mutates its input. It builds replacement
objects and returns a new state only once every effect has been
applied, so callers see all of an option's effects or none.
"""

from __future__ import annotations
from dataclasses import replace
from typing import TYPE_CHECKING
import logging

from .state import (
    ATTRIBUTE_BOUNDS,
    FACTION_INFLUENCE_MAX,
    FACTION_INFLUENCE_MIN,
    RELATIONSHIP_MAX,
    RELATIONSHIP_MIN,
    RELATIONSHIP_BOUNDS,
    CharacterRelationship,
    RelationType,
    clamp,
)
from .event import EffectTarget

if TYPE_CHECKING:
    from .event import EventOption, CharacterEffect
    from .state import WorldState, Character, Faction

logger = logging.getLogger(__name__)


class EffectResolver:
    """
    Applies option effects.

    Stateless. Player deltas are applied as given on every difficulty.
    """

    def apply(
        self,
        state: WorldState,
        option: EventOption,
        self_id: str | None = None,
    ) -> WorldState:
        """
        Apply every effect of an option.

        Args:
            state: Current world state (left untouched)
            option: The chosen option
            self_id: Character that "self" effects resolve to

        Returns:
            New world state
        """
        emperor = state.emperor
        characters: dict[str, Character] = {c.character_id: c for c in state.active_characters}
        factions: dict[str, Faction] = {f.faction_id: f for f in state.factions}

        for effect in option.effects:
            if effect.target == EffectTarget.PLAYER:
                emperor = emperor.adjusted(effect.attribute, effect.offset)
                continue

            target_id = self_id if effect.target == EffectTarget.SELF else effect.character_id
            character = characters.get(target_id) if target_id else None
            if character is None:
                logger.debug("Dropped %s effect on unknown character %r", effect.attribute, target_id)
                continue
            characters[character.character_id] = _adjust_character_field(
                character, effect.attribute, effect.offset
            )

        for char_effect in option.character_effects:
            character = characters.get(char_effect.character_id)
            if character is None:
                logger.debug("Dropped character effect on unknown %r", char_effect.character_id)
                continue
            characters[character.character_id] = _apply_character_effect(character, char_effect)

        for inter in option.inter_character_effects:
            first = characters.get(inter.character1)
            if first is None or inter.character2 not in characters:
                logger.debug(
                    "Dropped relationship change %r -> %r", inter.character1, inter.character2
                )
                continue
            characters[first.character_id] = _shift_relationship(
                first, inter.character2, inter.relationship_change
            )

        for faction_effect in option.faction_effects:
            faction = _find_faction(factions, faction_effect.faction)
            if faction is None:
                logger.debug("Dropped influence change on unknown faction %r", faction_effect.faction)
                continue
            new_influence = clamp(
                faction.influence + faction_effect.influence_change,
                FACTION_INFLUENCE_MIN,
                FACTION_INFLUENCE_MAX,
            )
            factions[faction.faction_id] = replace(faction, influence=new_influence)

        if option.character_clues:
            clue_holder = characters.get(self_id) if self_id else None
            if clue_holder is not None:
                characters[clue_holder.character_id] = _discover_clues(clue_holder, option.character_clues)

        return state._copy_with(
            emperor=emperor,
            active_characters=[characters.get(c.character_id, c) for c in state.active_characters],
            factions=[factions.get(f.faction_id, f) for f in state.factions],
        )


def _adjust_character_field(character: Character, field_name: str, delta: float) -> Character:
    """Route a delta to the attribute or relationship field it names."""
    if field_name in ATTRIBUTE_BOUNDS:
        return character._copy_with(attributes=character.attributes.adjusted(field_name, delta))
    if field_name in RELATIONSHIP_BOUNDS:
        return character._copy_with(
            relationship_with_emperor=character.relationship_with_emperor.adjusted(field_name, delta)
        )
    logger.debug("Unknown character field %r", field_name)
    return character


def _apply_character_effect(character: Character, effect: CharacterEffect) -> Character:
    attributes = character.attributes
    for attribute, delta in effect.attribute_changes.items():
        attributes = attributes.adjusted(attribute, delta)

    relationship = character.relationship_with_emperor
    for field_name, delta in effect.relationship_changes.items():
        relationship = relationship.adjusted(field_name, delta)

    status_flags = character.status_flags
    if effect.status_changes:
        status_flags = status_flags.with_flags(**effect.status_changes)

    return character._copy_with(
        attributes=attributes,
        relationship_with_emperor=relationship,
        status_flags=status_flags,
    )


def _shift_relationship(character: Character, target_id: str, change: float) -> Character:
    """Shift strength toward target_id, creating a neutral link when missing."""
    network = []
    found = False
    for rel in character.relationship_network:
        if rel.target_character_id == target_id:
            found = True
            rel = replace(
                rel,
                relationship_strength=clamp(
                    rel.relationship_strength + change,
                    RELATIONSHIP_MIN,
                    RELATIONSHIP_MAX,
                ),
            )
        network.append(rel)

    if not found:
        network.append(CharacterRelationship(
            target_character_id=target_id,
            relation_type=RelationType.NEUTRAL,
            relationship_strength=clamp(
                change, RELATIONSHIP_MIN, RELATIONSHIP_MAX
            ),
        ))

    return character._copy_with(relationship_network=network)


def _discover_clues(character: Character, clues: tuple[str, ...]) -> Character:
    discovered = list(character.discovered_clues)
    for clue in clues:
        if clue not in discovered:
            discovered.append(clue)
    return character._copy_with(discovered_clues=discovered)


def _find_faction(factions: dict[str, Faction], name_or_id: str) -> Faction | None:
    if name_or_id in factions:
        return factions[name_or_id]
    for faction in factions.values():
        if faction.name == name_or_id:
            return faction
    return None


def summarize_relationship_changes(
    option: EventOption, self_id: str | None = None
) -> dict[str, float]:
    """
    Flatten an option's relationship deltas for the history log.

    Keys are "<character_id>.<field>" for emperor relationships and
    "<character1>-><character2>" for inter-character links.
    """
    changes: dict[str, float] = {}
    for effect in option.effects:
        if effect.attribute not in RELATIONSHIP_BOUNDS:
            continue
        target_id = self_id if effect.target == EffectTarget.SELF else effect.character_id
        if target_id:
            key = f"{target_id}.{effect.attribute}"
            changes[key] = changes.get(key, 0) + effect.offset
    for char_effect in option.character_effects:
        for field_name, delta in char_effect.relationship_changes.items():
            key = f"{char_effect.character_id}.{field_name}"
            changes[key] = changes.get(key, 0) + delta
    for inter in option.inter_character_effects:
        key = f"{inter.character1}->{inter.character2}"
        changes[key] = changes.get(key, 0) + inter.relationship_change
    return changes


def apply_choice_effects(
    state: WorldState,
    option: EventOption,
    self_id: str | None = None,
) -> WorldState:
    """
    Convenience function to apply an option.

    Creates an EffectResolver and applies the option.
    """
    return EffectResolver().apply(state, option, self_id=self_id)
