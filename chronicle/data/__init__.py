"""
Data Module - Content records and their conversion into engine types.

Content (characters, events, common cards, factions) is authored as
plain records, validated with pydantic, then converted once into the
frozen engine types the core operates on.
"""

from .schemas import (
    CharacterConfig,
    EventConfig,
    OptionConfig,
    EffectConfig,
    ConditionConfig,
    CommonCardConfig,
    FactionConfig,
)
from .converter import (
    ConfigConverter,
    ConfigValidationError,
    parse_character_config,
    parse_event_config,
    parse_common_card_config,
)
from .provider import ConfigProvider, MemoryConfigProvider

__all__ = [
    "CharacterConfig",
    "EventConfig",
    "OptionConfig",
    "EffectConfig",
    "ConditionConfig",
    "CommonCardConfig",
    "FactionConfig",
    "ConfigConverter",
    "ConfigValidationError",
    "parse_character_config",
    "parse_event_config",
    "parse_common_card_config",
    "ConfigProvider",
    "MemoryConfigProvider",
]
