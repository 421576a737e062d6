"""
Condition Evaluator - Predicates that gate card activation, removal and draws.

A ConditionSet is a conjunction of:
- Attribute requirements: {attribute, comparator, value} triples
  against the emperor or the card's own ("self") character
- Required / excluded events from history
- Character, inter-character and faction sub-conditions

Comparison direction is always explicit. Legacy content keys such as
"minHealth" or "maxPower" are turned into triples once, by
parse_attribute_requirements(), when configuration is converted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, TYPE_CHECKING
import logging

from .state import RelationType

if TYPE_CHECKING:
    from .state import WorldState, Character, AttributeVector

logger = logging.getLogger(__name__)


class Comparator(Enum):
    """Direction of an attribute requirement."""
    MIN = "min"  # value >= bound
    MAX = "max"  # value <= bound
    EQ = "eq"  # value == bound


class ConditionTarget(Enum):
    """Whose attributes a requirement reads."""
    PLAYER = "player"
    SELF = "self"


@dataclass(frozen=True)
class AttributeRequirement:
    """A single bound on one attribute."""
    attribute: str
    comparator: Comparator
    value: float
    target: ConditionTarget = ConditionTarget.PLAYER

    def is_met(self, actual: float | None) -> bool:
        """Check a resolved value against the bound. Missing values fail."""
        if actual is None:
            return False
        if self.comparator == Comparator.MIN:
            return actual >= self.value
        if self.comparator == Comparator.MAX:
            return actual <= self.value
        return actual == self.value


@dataclass(frozen=True)
class CharacterCondition:
    """Requirements on one named character."""
    character_id: str
    alive: bool | None = None
    attribute_requirements: tuple[AttributeRequirement, ...] = ()
    relationship_requirements: tuple[AttributeRequirement, ...] = ()
    status_flags: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class InterCharacterCondition:
    """Requirements on the relationship from character1 toward character2."""
    character1: str
    character2: str
    min_strength: float | None = None
    max_strength: float | None = None
    relation_type: RelationType | None = None


@dataclass(frozen=True)
class FactionRequirement:
    """Requirements on a faction's standing."""
    faction: str
    min_influence: float | None = None
    max_influence: float | None = None
    leader_present: bool = False


@dataclass(frozen=True)
class ConditionSet:
    """
    Conjunctive predicate bundle attached to an event card.

    An empty set is vacuously true.
    """
    attribute_requirements: tuple[AttributeRequirement, ...] = ()
    required_events: tuple[str, ...] = ()
    excluded_events: tuple[str, ...] = ()
    character_conditions: tuple[CharacterCondition, ...] = ()
    inter_character_relations: tuple[InterCharacterCondition, ...] = ()
    faction_requirements: tuple[FactionRequirement, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.attribute_requirements
            or self.required_events
            or self.excluded_events
            or self.character_conditions
            or self.inter_character_relations
            or self.faction_requirements
        )


def parse_attribute_requirements(
    requirements: Mapping[str, Any] | None,
    target: ConditionTarget = ConditionTarget.PLAYER,
) -> tuple[AttributeRequirement, ...]:
    """
    Turn prefix-keyed content ({"minHealth": 30, "maxPower": 80, "age": 40})
    into explicit requirement triples.

    A key starting with "min" or "max" bounds the remaining attribute name;
    any other key requires an exact match. None values are skipped.
    """
    if not requirements:
        return ()

    parsed = []
    for key, value in requirements.items():
        if value is None:
            continue
        lowered = key.lower()
        if lowered.startswith("min"):
            comparator = Comparator.MIN
            attribute = lowered[3:].lstrip("_")
        elif lowered.startswith("max"):
            comparator = Comparator.MAX
            attribute = lowered[3:].lstrip("_")
        else:
            comparator = Comparator.EQ
            attribute = lowered
        parsed.append(AttributeRequirement(
            attribute=attribute,
            comparator=comparator,
            value=value,
            target=target,
        ))
    return tuple(parsed)


@dataclass
class ConditionContext:
    """
    Context for evaluating a condition set.

    self_id names the character that owns the card being checked.
    """
    state: WorldState
    self_id: str | None = None
    _past_events: set[str] | None = None

    @property
    def past_events(self) -> set[str]:
        if self._past_events is None:
            self._past_events = self.state.past_event_ids()
        return self._past_events

    def resolve_target(self, target: ConditionTarget) -> AttributeVector | None:
        """Get the attribute vector a requirement reads, None if unresolvable."""
        if target == ConditionTarget.PLAYER:
            return self.state.emperor
        character = self.state.get_character(self.self_id)
        if character is None:
            return None
        return character.attributes


class ConditionEvaluator:
    """
    Evaluates ConditionSets against a world state.

    Stateless. Every check short-circuits on the first failure.
    """

    def evaluate(self, conditions: ConditionSet | None, context: ConditionContext) -> bool:
        """True when every sub-check passes (or there are none)."""
        if conditions is None or conditions.is_empty:
            return True

        return (
            self._check_attributes(conditions.attribute_requirements, context)
            and self._check_history(conditions, context)
            and self._check_characters(conditions.character_conditions, context)
            and self._check_inter_character(conditions.inter_character_relations, context)
            and self._check_factions(conditions.faction_requirements, context)
        )

    def _check_attributes(
        self, requirements: tuple[AttributeRequirement, ...], context: ConditionContext
    ) -> bool:
        for req in requirements:
            vector = context.resolve_target(req.target)
            if vector is None:
                # A self-scoped condition cannot pass without a self
                logger.debug("Unresolved %s target for %s", req.target.value, req.attribute)
                return False
            if not req.is_met(vector.get(req.attribute)):
                return False
        return True

    def _check_history(self, conditions: ConditionSet, context: ConditionContext) -> bool:
        if conditions.required_events:
            if not all(e in context.past_events for e in conditions.required_events):
                return False
        if conditions.excluded_events:
            if any(e in context.past_events for e in conditions.excluded_events):
                return False
        return True

    def _check_characters(
        self, conditions: tuple[CharacterCondition, ...], context: ConditionContext
    ) -> bool:
        for cond in conditions:
            character = context.state.get_character(cond.character_id)
            if character is None:
                return False
            if not self._check_character(cond, character):
                return False
        return True

    def _check_character(self, cond: CharacterCondition, character: Character) -> bool:
        if cond.alive is not None and character.status_flags.alive != cond.alive:
            return False

        for req in cond.attribute_requirements:
            if not req.is_met(character.attributes.get(req.attribute)):
                return False

        for req in cond.relationship_requirements:
            if not req.is_met(character.relationship_with_emperor.get(req.attribute)):
                return False

        for flag, expected in cond.status_flags.items():
            if character.status_flags.get(flag) != expected:
                return False

        return True

    def _check_inter_character(
        self, relations: tuple[InterCharacterCondition, ...], context: ConditionContext
    ) -> bool:
        for rel_cond in relations:
            first = context.state.get_character(rel_cond.character1)
            second = context.state.get_character(rel_cond.character2)
            if first is None or second is None:
                return False

            relationship = first.get_relationship(rel_cond.character2)
            if relationship is None:
                return False

            strength = relationship.relationship_strength
            if rel_cond.min_strength is not None and strength < rel_cond.min_strength:
                return False
            if rel_cond.max_strength is not None and strength > rel_cond.max_strength:
                return False
            if rel_cond.relation_type is not None and relationship.relation_type != rel_cond.relation_type:
                return False
        return True

    def _check_factions(
        self, requirements: tuple[FactionRequirement, ...], context: ConditionContext
    ) -> bool:
        for req in requirements:
            faction = context.state.get_faction(req.faction)
            if faction is None:
                return False
            if req.min_influence is not None and faction.influence < req.min_influence:
                return False
            if req.max_influence is not None and faction.influence > req.max_influence:
                return False
            if req.leader_present and faction.leader_character_id:
                leader = context.state.get_character(faction.leader_character_id)
                if leader is None:
                    return False
                if not (leader.status_flags.alive and leader.status_flags.in_court):
                    return False
        return True


_EVALUATOR = ConditionEvaluator()


def evaluate_conditions(
    conditions: ConditionSet | None,
    state: WorldState,
    self_id: str | None = None,
) -> bool:
    """
    Evaluate a condition set in a world state.

    Args:
        conditions: Conditions to check; None means no constraint
        state: Current world state
        self_id: Character the "self" target resolves to

    Returns:
        True if every present check passes
    """
    context = ConditionContext(state=state, self_id=self_id)
    return _EVALUATOR.evaluate(conditions, context)


def check_activation(conditions: ConditionSet | None, state: WorldState, self_id: str | None = None) -> bool:
    """Activation: absent conditions always activate."""
    return evaluate_conditions(conditions, state, self_id)


def check_trigger(conditions: ConditionSet | None, state: WorldState, self_id: str | None = None) -> bool:
    """Trigger: absent conditions always allow the draw."""
    return evaluate_conditions(conditions, state, self_id)


def check_removal(conditions: ConditionSet | None, state: WorldState, self_id: str | None = None) -> bool:
    """Removal: absent conditions never remove."""
    if conditions is None or conditions.is_empty:
        return False
    return evaluate_conditions(conditions, state, self_id)
