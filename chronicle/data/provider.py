"""
Config Providers - Where a game's content records come from.

The engine never reads files. A provider hands it validated records;
MemoryConfigProvider serves records held in memory, which is what
tests and embedding applications use.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from .schemas import CharacterConfig, CommonCardConfig, EventConfig, FactionConfig


class ConfigProvider(ABC):
    """
    Abstract source of content records.

    Subclasses implement the loaders. The validate_* predicates run
    structural checks on raw records and never raise.
    """

    @abstractmethod
    def load_all_characters(self) -> list[CharacterConfig]:
        """All characters that may be dealt into a game."""
        ...

    @abstractmethod
    def load_character_events(self, character_id: str) -> list[EventConfig]:
        """Events owned by one character. Unknown IDs give an empty list."""
        ...

    @abstractmethod
    def load_all_common_cards(self) -> list[CommonCardConfig]:
        """All common cards."""
        ...

    def load_common_card_events(self, common_card_id: str) -> list[EventConfig]:
        """Event records bundled with a common card."""
        return []

    def load_all_factions(self) -> list[FactionConfig]:
        """Court factions present from the start of the game."""
        return []

    def validate_character_config(self, config: Mapping[str, Any]) -> bool:
        return _is_valid(CharacterConfig, config)

    def validate_event_config(self, config: Mapping[str, Any]) -> bool:
        if not _is_valid(EventConfig, config):
            return False
        return bool(EventConfig.model_validate(config).options)

    def validate_common_card_config(self, config: Mapping[str, Any]) -> bool:
        return _is_valid(CommonCardConfig, config)


def _is_valid(model: type, config: Mapping[str, Any]) -> bool:
    try:
        model.model_validate(config)
    except ValidationError:
        return False
    return True


class MemoryConfigProvider(ConfigProvider):
    """
    Provider backed by in-memory records.

    Accepts model instances or raw mappings; raw mappings are
    validated on construction.
    """

    def __init__(
        self,
        characters: Iterable[CharacterConfig | Mapping[str, Any]] = (),
        events: Mapping[str, Iterable[EventConfig | Mapping[str, Any]]] | None = None,
        common_cards: Iterable[CommonCardConfig | Mapping[str, Any]] = (),
        common_card_events: Mapping[str, Iterable[EventConfig | Mapping[str, Any]]] | None = None,
        factions: Iterable[FactionConfig | Mapping[str, Any]] = (),
    ):
        self._characters = [_coerce(CharacterConfig, c) for c in characters]
        self._events = {
            owner: [_coerce(EventConfig, e) for e in records]
            for owner, records in (events or {}).items()
        }
        self._common_cards = [_coerce(CommonCardConfig, c) for c in common_cards]
        self._common_card_events = {
            owner: [_coerce(EventConfig, e) for e in records]
            for owner, records in (common_card_events or {}).items()
        }
        self._factions = [_coerce(FactionConfig, f) for f in factions]

    def load_all_characters(self) -> list[CharacterConfig]:
        return list(self._characters)

    def load_character(self, character_id: str) -> CharacterConfig | None:
        for character in self._characters:
            if character.id == character_id:
                return character
        return None

    def load_character_events(self, character_id: str) -> list[EventConfig]:
        return list(self._events.get(character_id, []))

    def load_all_common_cards(self) -> list[CommonCardConfig]:
        return list(self._common_cards)

    def load_common_card_events(self, common_card_id: str) -> list[EventConfig]:
        return list(self._common_card_events.get(common_card_id, []))

    def load_all_factions(self) -> list[FactionConfig]:
        return list(self._factions)


def _coerce(model: type, record: Any) -> Any:
    if isinstance(record, model):
        return record
    return model.model_validate(record)
