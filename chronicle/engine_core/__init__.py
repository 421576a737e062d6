"""
Engine Core - Card pools, condition checks and state transitions.

The engine is the runtime that:
1. Moves event cards between pending, active and discarded pools
2. Evaluates activation, removal and trigger conditions
3. Draws the next event by weighted random selection
4. Applies a chosen option's effects
5. Closes turns, records history and detects the end of the game
"""

from .state import (
    WorldState,
    AttributeVector,
    RelationshipWithEmperor,
    CharacterStatusFlags,
    CharacterRelationship,
    RelationType,
    Character,
    Faction,
    CourtPolitics,
    CardPools,
    PoolName,
    GameHistoryEntry,
    clamp,
)
from .conditions import (
    Comparator,
    ConditionTarget,
    AttributeRequirement,
    CharacterCondition,
    InterCharacterCondition,
    FactionRequirement,
    ConditionSet,
    ConditionEvaluator,
    evaluate_conditions,
    parse_attribute_requirements,
)
from .event import (
    EffectTarget,
    Importance,
    AttributeEffect,
    CharacterEffect,
    InterCharacterEffect,
    FactionEffect,
    EventOption,
    WeightBand,
    EventCard,
)
from .weight import calculate_weight
from .card_pool import CardPoolManager, PoolStatus
from .effect_resolver import EffectResolver, apply_choice_effects
from .history import HistoryRecorder
from .game_manager import GameStateManager, GameOverCheck, GameOverCause
from .result import EngineResult, ErrorCode

__all__ = [
    "WorldState",
    "AttributeVector",
    "RelationshipWithEmperor",
    "CharacterStatusFlags",
    "CharacterRelationship",
    "RelationType",
    "Character",
    "Faction",
    "CourtPolitics",
    "CardPools",
    "PoolName",
    "GameHistoryEntry",
    "clamp",
    "Comparator",
    "ConditionTarget",
    "AttributeRequirement",
    "CharacterCondition",
    "InterCharacterCondition",
    "FactionRequirement",
    "ConditionSet",
    "ConditionEvaluator",
    "evaluate_conditions",
    "parse_attribute_requirements",
    "EffectTarget",
    "Importance",
    "AttributeEffect",
    "CharacterEffect",
    "InterCharacterEffect",
    "FactionEffect",
    "EventOption",
    "WeightBand",
    "EventCard",
    "calculate_weight",
    "CardPoolManager",
    "PoolStatus",
    "EffectResolver",
    "apply_choice_effects",
    "HistoryRecorder",
    "GameStateManager",
    "GameOverCheck",
    "GameOverCause",
    "EngineResult",
    "ErrorCode",
]
