"""
Tests for content records and their conversion.

Tests:
- Schema parsing of camelCase records
- Character, faction and event conversion
- Condition conversion, including legacy keys
- Event merging and character selection
- Provider validation predicates
"""

import random

import pytest
from pydantic import ValidationError

from ..data.converter import (
    ConfigConverter,
    ConfigValidationError,
    parse_character_config,
    parse_common_card_config,
    parse_event_config,
)
from ..data.provider import MemoryConfigProvider
from ..data.schemas import CharacterConfig, CommonCardConfig, ConditionConfig
from ..engine_core.conditions import AttributeRequirement, Comparator, ConditionTarget
from ..engine_core.event import EffectTarget, Importance
from ..engine_core.state import RelationType


class TestSchemas:
    """Tests for parsing raw records."""

    def test_character_camel_case(self, raw_characters):
        """camelCase keys populate snake_case fields."""
        config = parse_character_config(raw_characters[0])

        assert config.display_name == "The Empress Dowager"
        assert config.initial_attributes.power == 80
        assert config.common_card_ids == ["court_rituals"]

    def test_character_missing_name(self):
        """A record without a name is rejected with messages."""
        with pytest.raises(ConfigValidationError) as exc_info:
            parse_character_config({"id": "nameless"})

        assert any("name" in message for message in exc_info.value.errors)

    def test_event_needs_options(self):
        """An event with no options is rejected."""
        with pytest.raises(ConfigValidationError):
            parse_event_config({"id": "empty", "title": "Empty"})

    def test_event_choices_alias(self, raw_events):
        """Options may be given under "choices" with "text" descriptions."""
        config = parse_event_config(raw_events["eunuch"][0])

        assert config.options[0].description == "Audit the books"

    def test_common_card_requires_event_ids(self):
        """Common cards must list their events."""
        with pytest.raises(ConfigValidationError):
            parse_common_card_config({"id": "c", "name": "C"})

    def test_legacy_condition_keys_kept(self):
        """Top-level minX/maxX keys survive as legacy bounds."""
        config = ConditionConfig.model_validate({"minHealth": 20, "maxPower": 70, "note": "x"})

        assert config.legacy_bounds() == {"minHealth": 20, "maxPower": 70}


class TestCharacterConversion:
    """Tests for building characters and factions."""

    def test_to_character(self, raw_characters):
        """Records become fresh characters with their starting values."""
        character = ConfigConverter().to_character(parse_character_config(raw_characters[0]))

        assert character.character_id == "empress"
        assert character.attributes.age == 58
        assert character.relationship_with_emperor.affection == 30
        assert character.relationship_with_emperor.respect == 50
        assert character.hidden_traits == ["ambitious", "schemer"]
        assert character.total_clues == 2
        assert character.discovered_clues == []

    def test_display_name_falls_back_to_name(self, raw_characters):
        """A missing display name uses the plain name."""
        character = ConfigConverter().to_character(parse_character_config(raw_characters[1]))

        assert character.display_name == "Chief Eunuch"

    def test_relationship_network(self):
        """Links keep their type; unknown types become neutral."""
        config = CharacterConfig.model_validate({
            "id": "a",
            "name": "A",
            "relationshipNetwork": [
                {"targetCharacterId": "b", "relationType": "family", "relationshipStrength": 60},
                {"targetCharacterId": "c", "relationType": "rival"},
            ],
        })

        character = ConfigConverter().to_character(config)

        assert character.get_relationship("b").relation_type == RelationType.FAMILY
        assert character.get_relationship("b").relationship_strength == 60
        assert character.get_relationship("c").relation_type == RelationType.NEUTRAL


class TestEventConversion:
    """Tests for building event cards."""

    def test_to_event_card(self, raw_events):
        """Options, effects and weights carry over; the owner becomes self."""
        card = ConfigConverter().to_event_card(parse_event_config(raw_events["empress"][0]), "empress")

        assert card.character_id == "empress"
        assert card.weight == 3
        assert [o.option_id for o in card.options] == ["yield", "refuse"]
        assert card.options[0].effects[1].target == EffectTarget.SELF
        assert card.options[1].character_clues == ("letter",)
        assert card.importance == Importance.NORMAL

    def test_generated_option_ids(self, raw_events):
        """Options without ids are numbered from 1."""
        card = ConfigConverter().to_event_card(parse_event_config(raw_events["eunuch"][0]))

        assert card.options[0].option_id == "palace_accounts_1"

    def test_dynamic_weight_bands(self):
        """Range pairs become ordered weight bands."""
        config = parse_event_config({
            "id": "famine",
            "title": "Famine",
            "options": [{"id": "x"}],
            "dynamicWeight": {"wealth": [{"range": [0, 30], "multiplier": 3}]},
        })

        card = ConfigConverter().to_event_card(config)

        band = card.dynamic_weight["wealth"][0]
        assert (band.low, band.high, band.multiplier) == (0, 30, 3)

    def test_activation_conditions(self, raw_events):
        """Required events become part of the activation set."""
        card = ConfigConverter().to_event_card(parse_event_config(raw_events["empress"][1]), "empress")

        assert card.activation_conditions.required_events == ("regency_dispute",)
        assert card.removal_conditions is None


class TestParseConditions:
    """Tests for condition conversion."""

    def test_missing_and_empty_become_none(self):
        """No record, or an empty one, means no condition set."""
        converter = ConfigConverter()

        assert converter.parse_conditions(None) is None
        assert converter.parse_conditions(ConditionConfig()) is None

    def test_all_bound_styles(self):
        """Structured, prefixed and legacy bounds all become requirements."""
        config = ConditionConfig.model_validate({
            "attributeConditions": [{"target": "self", "attribute": "power", "min": 10, "max": 90}],
            "attributeRequirements": {"maxAge": 60},
            "selfAttributeRequirements": {"minHealth": 5},
            "minWealth": 20,
        })

        conditions = ConfigConverter().parse_conditions(config)
        reqs = set(conditions.attribute_requirements)

        assert AttributeRequirement("power", Comparator.MIN, 10, ConditionTarget.SELF) in reqs
        assert AttributeRequirement("power", Comparator.MAX, 90, ConditionTarget.SELF) in reqs
        assert AttributeRequirement("age", Comparator.MAX, 60) in reqs
        assert AttributeRequirement("health", Comparator.MIN, 5, ConditionTarget.SELF) in reqs
        assert AttributeRequirement("wealth", Comparator.MIN, 20) in reqs

    def test_nested_conditions(self):
        """Character, relation and faction blocks convert."""
        config = ConditionConfig.model_validate({
            "characterConditions": [
                {"characterId": "general", "alive": True, "relationshipRequirements": {"minTrust": 20}},
            ],
            "interCharacterRelations": [
                {"character1": "a", "character2": "b", "relationType": "enemy", "maxStrength": -10},
            ],
            "factionRequirements": [{"faction": "army", "minInfluence": 40}],
        })

        conditions = ConfigConverter().parse_conditions(config)

        cc = conditions.character_conditions[0]
        assert cc.alive is True
        assert cc.relationship_requirements == (AttributeRequirement("trust", Comparator.MIN, 20),)
        assert conditions.inter_character_relations[0].relation_type == RelationType.ENEMY
        assert conditions.faction_requirements[0].min_influence == 40

    def test_unknown_target_rejected(self):
        """An attribute condition on an unknown target raises."""
        config = ConditionConfig.model_validate({
            "attributeConditions": [{"target": "court", "attribute": "power", "min": 1}],
        })

        with pytest.raises(ConfigValidationError):
            ConfigConverter().parse_conditions(config)


class TestMergeEvents:
    """Tests for combining a character's events with common cards."""

    def test_union_keeps_order_and_drops_duplicates(self, raw_characters, raw_common_cards):
        """Own events first, then common card events, each once."""
        config = parse_character_config(raw_characters[0])
        common = [CommonCardConfig.model_validate(c) for c in raw_common_cards]

        merged = ConfigConverter().merge_character_and_common_events(config, common)

        assert merged == ["regency_dispute", "spring_rite"]

    def test_unknown_common_card_skipped(self):
        """References to missing common cards add nothing."""
        config = CharacterConfig(id="a", name="A", event_ids=["x"], common_card_ids=["missing"])

        assert ConfigConverter().merge_character_and_common_events(config, []) == ["x"]


class TestSelectCharacters:
    """Tests for dealing a random cast."""

    def _cast(self, count, overrides=None):
        overrides = overrides or {}
        return [
            CharacterConfig(id=f"c{i}", name=f"C{i}", **overrides.get(i, {}))
            for i in range(count)
        ]

    def test_count_within_range(self):
        """The cast size lies in [min, max]."""
        converter = ConfigConverter(rng=random.Random(5))
        cast = self._cast(10)

        for _ in range(50):
            selected = converter.select_random_characters(cast, 3, 5)
            assert 3 <= len(selected) <= 5
            assert len({c.id for c in selected}) == len(selected)

    def test_small_pool_returns_everyone(self):
        """Fewer characters than the minimum deals them all."""
        cast = self._cast(2)

        assert ConfigConverter().select_random_characters(cast, 3, 5) == cast

    def test_excluded_characters_never_together(self):
        """Characters that exclude each other are never dealt together."""
        cast = self._cast(6, {
            0: {"conditions": {"excludeCharacters": ["c1"]}},
            1: {"conditions": {"excludeCharacters": ["c0"]}},
        })
        converter = ConfigConverter(rng=random.Random(11))

        for _ in range(100):
            ids = {c.id for c in converter.select_random_characters(cast, 5, 5)}
            assert not {"c0", "c1"} <= ids

    def test_preferred_categories_seated(self):
        """One character of each preferred category is seated first."""
        cast = self._cast(8, {7: {"category": "royal"}})
        converter = ConfigConverter(rng=random.Random(3))

        selected = converter.select_random_characters(cast, 3, 3, preferred_categories=["royal"])

        assert selected[0].id == "c7"


class TestProviderValidation:
    """Tests for the provider's structural predicates."""

    def test_validate_predicates(self, provider, raw_characters, raw_events):
        """Valid records pass, broken ones fail, nothing raises."""
        assert provider.validate_character_config(raw_characters[0])
        assert not provider.validate_character_config({"id": "x"})
        assert provider.validate_event_config(raw_events["empress"][0])
        assert not provider.validate_event_config({"id": "e", "title": "E", "options": []})
        assert provider.validate_common_card_config({"id": "c", "name": "C", "eventIds": []})
        assert not provider.validate_common_card_config({"id": "c", "name": "C", "eventIds": "x"})

    def test_memory_provider_lookups(self, provider):
        """Unknown owners give empty lists."""
        assert provider.load_character_events("nobody") == []
        assert provider.load_common_card_events("nothing") == []
        assert provider.load_character("empress").name == "Empress Dowager"
        assert len(provider.load_all_factions()) == 1

    def test_memory_provider_rejects_bad_records(self):
        """Raw records are validated on construction."""
        with pytest.raises(ValidationError):
            MemoryConfigProvider(characters=[{"id": "broken"}])
