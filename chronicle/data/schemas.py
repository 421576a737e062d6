"""
Configuration Records - Pydantic models for character, event and common-card content.

Content files use camelCase keys ("initialAttributes", "eventIds");
every model accepts those keys and the snake_case field names alike.
Unknown keys are ignored, except on ConditionConfig where legacy
"minHealth"/"maxPower" style keys are kept for the converter.
"""

from enum import Enum
from typing import Optional, Any
from pydantic import AliasChoices, BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class EffectTargetName(str, Enum):
    """Targets accepted in option effects."""
    PLAYER = "player"
    SELF = "self"
    CHARACTER = "character"


class ImportanceName(str, Enum):
    NORMAL = "normal"
    MAJOR = "major"
    CRITICAL = "critical"


# =============================================================================
# Attributes and relationships
# =============================================================================

class AttributesConfig(BaseModel):
    """Starting attribute block of a character."""
    health: float = 50
    power: float = 50
    wealth: float = 50
    military: float = 50
    popularity: float = 50
    age: float = 30

    model_config = {"populate_by_name": True}


class RelationshipConfig(BaseModel):
    """Starting relationship of a character with the emperor."""
    affection: float = 0
    trust: float = 0
    fear: float = 0
    respect: float = 50
    dependency: float = 0
    threat: float = 0

    model_config = {"populate_by_name": True}


class RelationshipLinkConfig(BaseModel):
    """A directed character-to-character relationship."""
    target_character_id: str = Field(alias="targetCharacterId")
    relation_type: str = Field("neutral", alias="relationType")
    relationship_strength: float = Field(0, alias="relationshipStrength")
    secret_level: float = Field(0, alias="secretLevel")
    historical_basis: str = Field("", alias="historicalBasis")

    model_config = {"populate_by_name": True}


class SelectionConditionsConfig(BaseModel):
    """Constraints on dealing a character into a game."""
    exclude_characters: list[str] = Field(default_factory=list, alias="excludeCharacters")

    model_config = {"populate_by_name": True}


class CharacterConfig(BaseModel):
    """A character record as authored in content files."""
    id: str
    name: str
    display_name: str = Field("", alias="displayName")
    role: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)

    initial_attributes: AttributesConfig = Field(
        default_factory=AttributesConfig, alias="initialAttributes"
    )
    initial_relationship_with_emperor: Optional[RelationshipConfig] = Field(
        None, alias="initialRelationshipWithEmperor"
    )
    relationship_network: list[RelationshipLinkConfig] = Field(
        default_factory=list, alias="relationshipNetwork"
    )
    faction_id: Optional[str] = Field(None, alias="factionId")

    traits: list[str] = Field(default_factory=list)
    hidden_traits: list[str] = Field(default_factory=list, alias="hiddenTraits")
    background_clues: dict[str, Any] = Field(default_factory=dict, alias="backgroundClues")

    event_ids: list[str] = Field(default_factory=list, alias="eventIds")
    common_card_ids: list[str] = Field(default_factory=list, alias="commonCardIds")
    conditions: Optional[SelectionConditionsConfig] = None

    model_config = {"populate_by_name": True}


# =============================================================================
# Conditions
# =============================================================================

class AttributeConditionConfig(BaseModel):
    """Range check on one attribute of the emperor or the card's character."""
    target: str = "player"
    attribute: str
    min: Optional[float] = None
    max: Optional[float] = None

    model_config = {"populate_by_name": True}


class CharacterConditionConfig(BaseModel):
    character_id: str = Field(alias="characterId")
    alive: Optional[bool] = None
    attribute_requirements: dict[str, float] = Field(
        default_factory=dict, alias="attributeRequirements"
    )
    relationship_requirements: dict[str, float] = Field(
        default_factory=dict, alias="relationshipRequirements"
    )
    status_flags: dict[str, bool] = Field(default_factory=dict, alias="statusFlags")

    model_config = {"populate_by_name": True}


class InterCharacterConditionConfig(BaseModel):
    character1: str
    character2: str
    min_strength: Optional[float] = Field(None, alias="minStrength")
    max_strength: Optional[float] = Field(None, alias="maxStrength")
    relation_type: Optional[str] = Field(None, alias="relationType")

    model_config = {"populate_by_name": True}


class FactionRequirementConfig(BaseModel):
    faction: str
    min_influence: Optional[float] = Field(None, alias="minInfluence")
    max_influence: Optional[float] = Field(None, alias="maxInfluence")
    leader_present: bool = Field(False, alias="leaderPresent")

    model_config = {"populate_by_name": True}


class ConditionConfig(BaseModel):
    """
    Activation, removal or trigger conditions of an event.

    Emperor bounds may be given three ways:
    - attributeConditions: [{target, attribute, min, max}]
    - attributeRequirements: {"minHealth": 30, "age": 40}
    - top-level legacy keys: {"minHealth": 30, "maxPower": 80}
    """
    attribute_conditions: list[AttributeConditionConfig] = Field(
        default_factory=list, alias="attributeConditions"
    )
    attribute_requirements: dict[str, float] = Field(
        default_factory=dict, alias="attributeRequirements"
    )
    self_attribute_requirements: dict[str, float] = Field(
        default_factory=dict, alias="selfAttributeRequirements"
    )
    required_events: list[str] = Field(default_factory=list, alias="requiredEvents")
    excluded_events: list[str] = Field(default_factory=list, alias="excludedEvents")
    character_conditions: list[CharacterConditionConfig] = Field(
        default_factory=list, alias="characterConditions"
    )
    inter_character_relations: list[InterCharacterConditionConfig] = Field(
        default_factory=list, alias="interCharacterRelations"
    )
    faction_requirements: list[FactionRequirementConfig] = Field(
        default_factory=list, alias="factionRequirements"
    )

    model_config = {"populate_by_name": True, "extra": "allow"}

    def legacy_bounds(self) -> dict[str, float]:
        """Top-level min*/max* keys that were not declared fields."""
        extra = self.model_extra or {}
        return {
            key: value
            for key, value in extra.items()
            if key.lower().startswith(("min", "max")) and isinstance(value, (int, float))
        }


# =============================================================================
# Events
# =============================================================================

class EffectConfig(BaseModel):
    """A delta on one attribute of one target."""
    target: EffectTargetName = EffectTargetName.PLAYER
    attribute: str
    offset: float
    character_id: Optional[str] = Field(None, alias="characterId")

    model_config = {"populate_by_name": True}


class CharacterEffectConfig(BaseModel):
    character_id: str = Field(alias="characterId")
    attribute_changes: dict[str, float] = Field(default_factory=dict, alias="attributeChanges")
    relationship_changes: dict[str, float] = Field(
        default_factory=dict, alias="relationshipChanges"
    )
    status_changes: dict[str, bool] = Field(default_factory=dict, alias="statusChanges")

    model_config = {"populate_by_name": True}


class InterCharacterEffectConfig(BaseModel):
    character1: str
    character2: str
    relationship_change: float = Field(alias="relationshipChange")
    reason: str = ""

    model_config = {"populate_by_name": True}


class FactionEffectConfig(BaseModel):
    faction: str
    influence_change: float = Field(alias="influenceChange")

    model_config = {"populate_by_name": True}


class OptionConfig(BaseModel):
    """One choice of an event. A missing id is generated at conversion."""
    id: Optional[str] = Field(None, validation_alias=AliasChoices("id", "optionId", "option_id"))
    description: str = Field("", validation_alias=AliasChoices("description", "text", "reply"))
    effects: list[EffectConfig] = Field(default_factory=list)
    character_effects: list[CharacterEffectConfig] = Field(
        default_factory=list, alias="characterEffects"
    )
    inter_character_effects: list[InterCharacterEffectConfig] = Field(
        default_factory=list, alias="interCharacterEffects"
    )
    faction_effects: list[FactionEffectConfig] = Field(default_factory=list, alias="factionEffects")
    character_clues: list[str] = Field(default_factory=list, alias="characterClues")
    consequences: str = ""

    model_config = {"populate_by_name": True}


class WeightBandConfig(BaseModel):
    """An inclusive attribute range and its weight multiplier."""
    range: tuple[float, float]
    multiplier: float

    model_config = {"populate_by_name": True}


class EventConfig(BaseModel):
    """An event record as authored in content files."""
    id: str
    title: str
    description: str = ""
    speaker: str = ""
    dialogue: str = ""
    options: list[OptionConfig] = Field(
        default_factory=list, validation_alias=AliasChoices("options", "choices")
    )

    activation_conditions: Optional[ConditionConfig] = Field(None, alias="activationConditions")
    removal_conditions: Optional[ConditionConfig] = Field(None, alias="removalConditions")
    trigger_conditions: Optional[ConditionConfig] = Field(None, alias="triggerConditions")

    weight: Optional[float] = None
    dynamic_weight: dict[str, list[WeightBandConfig]] = Field(
        default_factory=dict, alias="dynamicWeight"
    )
    importance: ImportanceName = ImportanceName.NORMAL

    model_config = {"populate_by_name": True}


class CommonCardConfig(BaseModel):
    """A bundle of events shared by every character that references it."""
    id: str
    name: str
    description: str = ""
    event_ids: list[str] = Field(alias="eventIds")

    model_config = {"populate_by_name": True}


class FactionConfig(BaseModel):
    id: str
    name: str
    influence: float = 50
    leader_character_id: Optional[str] = Field(None, alias="leaderCharacterId")
    member_character_ids: list[str] = Field(default_factory=list, alias="memberCharacterIds")
    agenda: str = ""

    model_config = {"populate_by_name": True}
