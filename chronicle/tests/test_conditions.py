"""
Tests for condition evaluation.

Tests:
- Attribute bounds on the emperor and on the card's character
- History requirements
- Character, inter-character and faction conditions
- Activation / trigger / removal defaults
"""

import pytest

from ..engine_core.conditions import (
    AttributeRequirement,
    CharacterCondition,
    Comparator,
    ConditionSet,
    ConditionTarget,
    FactionRequirement,
    InterCharacterCondition,
    check_activation,
    check_removal,
    check_trigger,
    evaluate_conditions,
    parse_attribute_requirements,
)
from ..engine_core.state import AttributeVector, CharacterStatusFlags, RelationType


def _min(attribute, value, target=ConditionTarget.PLAYER):
    return AttributeRequirement(attribute, Comparator.MIN, value, target)


def _max(attribute, value, target=ConditionTarget.PLAYER):
    return AttributeRequirement(attribute, Comparator.MAX, value, target)


class TestAttributeRequirements:
    """Tests for attribute bounds."""

    def test_min_bound_is_inclusive(self, make_state):
        """A MIN bound passes when the value equals it."""
        state = make_state(emperor=AttributeVector(health=30))
        conditions = ConditionSet(attribute_requirements=(_min("health", 30),))

        assert evaluate_conditions(conditions, state)

    def test_min_bound_fails_below(self, make_state):
        """A MIN bound fails one point below."""
        state = make_state(emperor=AttributeVector(health=29))
        conditions = ConditionSet(attribute_requirements=(_min("health", 30),))

        assert not evaluate_conditions(conditions, state)

    def test_max_bound(self, make_state):
        """A MAX bound caps the value."""
        state = make_state(emperor=AttributeVector(power=81))
        conditions = ConditionSet(attribute_requirements=(_max("power", 80),))

        assert not evaluate_conditions(conditions, state)

    def test_all_requirements_must_hold(self, make_state):
        """Requirements are a conjunction."""
        state = make_state(emperor=AttributeVector(health=50, power=90))
        conditions = ConditionSet(attribute_requirements=(_min("health", 30), _max("power", 80)))

        assert not evaluate_conditions(conditions, state)

    def test_unknown_attribute_fails(self, make_state):
        """A bound on an attribute that does not exist cannot pass."""
        state = make_state()
        conditions = ConditionSet(attribute_requirements=(_min("charisma", 0),))

        assert not evaluate_conditions(conditions, state)

    def test_self_target_reads_card_character(self, make_state, characters):
        """SELF requirements read the owning character's attributes."""
        state = make_state(characters=characters)
        conditions = ConditionSet(
            attribute_requirements=(_min("military", 80, ConditionTarget.SELF),)
        )

        assert evaluate_conditions(conditions, state, self_id="general")
        assert not evaluate_conditions(conditions, state, self_id="chancellor")

    def test_self_target_without_character_fails(self, make_state):
        """A SELF requirement fails when the card has no resolvable character."""
        state = make_state()
        conditions = ConditionSet(
            attribute_requirements=(_min("health", 0, ConditionTarget.SELF),)
        )

        assert not evaluate_conditions(conditions, state, self_id=None)
        assert not evaluate_conditions(conditions, state, self_id="nobody")


class TestParseAttributeRequirements:
    """Tests for converting prefix-keyed content into explicit bounds."""

    def test_prefixes_become_comparators(self):
        """minX / maxX / X map to MIN / MAX / EQ."""
        parsed = parse_attribute_requirements({"minHealth": 30, "maxPower": 80, "age": 40})

        assert AttributeRequirement("health", Comparator.MIN, 30) in parsed
        assert AttributeRequirement("power", Comparator.MAX, 80) in parsed
        assert AttributeRequirement("age", Comparator.EQ, 40) in parsed

    def test_snake_case_keys(self):
        """min_health is read like minHealth."""
        parsed = parse_attribute_requirements({"min_health": 10})

        assert parsed == (AttributeRequirement("health", Comparator.MIN, 10),)

    def test_none_values_skipped(self):
        """Keys with no value add no requirement."""
        assert parse_attribute_requirements({"minHealth": None}) == ()
        assert parse_attribute_requirements(None) == ()


class TestHistoryRequirements:
    """Tests for required and excluded events."""

    def test_required_event_missing(self, make_state):
        """A required event that never happened blocks the check."""
        state = make_state(history_ids=["coronation"])
        conditions = ConditionSet(required_events=("coronation", "wedding"))

        assert not evaluate_conditions(conditions, state)

    def test_required_events_present(self, make_state):
        """All required events in history pass."""
        state = make_state(history_ids=["coronation", "wedding"])
        conditions = ConditionSet(required_events=("coronation", "wedding"))

        assert evaluate_conditions(conditions, state)

    def test_excluded_event_present(self, make_state):
        """Any excluded event in history fails the check."""
        state = make_state(history_ids=["rebellion"])
        conditions = ConditionSet(excluded_events=("rebellion",))

        assert not evaluate_conditions(conditions, state)


class TestCharacterConditions:
    """Tests for character, inter-character and faction sub-conditions."""

    def test_character_must_be_present(self, make_state, characters):
        """A condition on an absent character fails."""
        state = make_state(characters=characters)
        conditions = ConditionSet(character_conditions=(CharacterCondition(character_id="empress"),))

        assert not evaluate_conditions(conditions, state)

    def test_character_alive_flag(self, make_state, characters):
        """The alive requirement compares against the status flag."""
        dead_general = characters[1]._copy_with(status_flags=CharacterStatusFlags(alive=False))
        state = make_state(characters=[characters[0], dead_general])
        conditions = ConditionSet(
            character_conditions=(CharacterCondition(character_id="general", alive=True),)
        )

        assert not evaluate_conditions(conditions, state)

    def test_character_relationship_requirement(self, make_state, characters):
        """Relationship bounds read the character's feelings toward the emperor."""
        state = make_state(characters=characters)
        conditions = ConditionSet(character_conditions=(
            CharacterCondition(
                character_id="chancellor",
                relationship_requirements=(AttributeRequirement("respect", Comparator.MIN, 40),),
            ),
        ))

        assert evaluate_conditions(conditions, state)

    def test_inter_character_strength_and_type(self, make_state, characters):
        """Inter-character checks read strength and relation type."""
        state = make_state(characters=characters)
        enemies = ConditionSet(inter_character_relations=(
            InterCharacterCondition(
                "chancellor", "general", max_strength=-20, relation_type=RelationType.ENEMY
            ),
        ))
        allies = ConditionSet(inter_character_relations=(
            InterCharacterCondition("chancellor", "general", relation_type=RelationType.ALLY),
        ))

        assert evaluate_conditions(enemies, state)
        assert not evaluate_conditions(allies, state)

    def test_inter_character_missing_link(self, make_state, characters):
        """No recorded relationship fails the check."""
        state = make_state(characters=characters)
        conditions = ConditionSet(inter_character_relations=(
            InterCharacterCondition("general", "chancellor", min_strength=-100),
        ))

        assert not evaluate_conditions(conditions, state)

    def test_faction_influence_by_name(self, make_state, characters, factions):
        """Factions can be referenced by display name."""
        state = make_state(characters=characters, factions=factions)
        conditions = ConditionSet(faction_requirements=(
            FactionRequirement("Scholar Officials", min_influence=50, leader_present=True),
        ))

        assert evaluate_conditions(conditions, state)

    def test_faction_leader_absent(self, make_state, factions):
        """leader_present fails when the leader is not dealt in."""
        state = make_state(factions=factions)
        conditions = ConditionSet(faction_requirements=(
            FactionRequirement("army", leader_present=True),
        ))

        assert not evaluate_conditions(conditions, state)


class TestDefaults:
    """Tests for missing and empty condition sets."""

    @pytest.mark.parametrize("conditions", [None, ConditionSet()])
    def test_activation_and_trigger_default_true(self, make_state, conditions):
        """No conditions always activate and always allow the draw."""
        state = make_state()

        assert check_activation(conditions, state)
        assert check_trigger(conditions, state)

    @pytest.mark.parametrize("conditions", [None, ConditionSet()])
    def test_removal_default_false(self, make_state, conditions):
        """No conditions never remove."""
        assert not check_removal(conditions, make_state())

    def test_removal_fires_when_met(self, make_state):
        """A non-empty removal set removes when it holds."""
        state = make_state(history_ids=["exile"])

        assert check_removal(ConditionSet(required_events=("exile",)), state)
