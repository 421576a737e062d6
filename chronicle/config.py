"""
Engine Configuration - Constants the engine reads at runtime.

Defaults match the shipped content balance. Selected values can be
overridden from the environment:

    CHRONICLE_MAX_AGE              Age at which the emperor dies of old age
    CHRONICLE_MIN_INITIAL_AGE      Lower bound of the starting age
    CHRONICLE_MAX_INITIAL_AGE      Upper bound of the starting age
    CHRONICLE_DEFAULT_WEIGHT       Draw weight for cards without one
    CHRONICLE_MIN_CHARACTERS       Fewest characters dealt into a game
    CHRONICLE_MAX_CHARACTERS       Most characters dealt into a game
"""

from __future__ import annotations
from dataclasses import dataclass, field
import os


@dataclass(frozen=True)
class DifficultySettings:
    """
    A selectable difficulty level.

    Descriptive only: effects and game-over checks are the same on
    every level.
    """
    name: str
    description: str = ""


DIFFICULTIES: dict[str, DifficultySettings] = {
    "easy": DifficultySettings(name="easy", description="For newcomers"),
    "normal": DifficultySettings(name="normal", description="The standard reign"),
    "hard": DifficultySettings(name="hard", description="For seasoned rulers"),
}


def get_difficulty(name: str | None) -> DifficultySettings:
    """Look up difficulty settings, falling back to normal."""
    return DIFFICULTIES.get(name or "normal", DIFFICULTIES["normal"])


def _default_emperor_stats() -> dict[str, int]:
    return {
        "health": 50,
        "power": 50,
        "wealth": 50,
        "military": 50,
        "popularity": 50,
    }


def _default_court_politics() -> dict[str, int]:
    return {
        "tension": 30,
        "stability": 70,
        "corruption": 20,
        "efficiency": 60,
    }


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine-wide constants.

    Attribute bounds are fixed and live with the state types.
    """
    initial_emperor_stats: dict[str, int] = field(default_factory=_default_emperor_stats)
    min_initial_age: int = 18
    max_initial_age: int = 25
    max_age: int = 80

    default_event_weight: float = 1.0

    min_characters: int = 3
    max_characters: int = 5

    initial_court_politics: dict[str, int] = field(default_factory=_default_court_politics)

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config, overriding defaults from CHRONICLE_* variables."""
        base = cls()
        return cls(
            max_age=_env_int("CHRONICLE_MAX_AGE", base.max_age),
            min_initial_age=_env_int("CHRONICLE_MIN_INITIAL_AGE", base.min_initial_age),
            max_initial_age=_env_int("CHRONICLE_MAX_INITIAL_AGE", base.max_initial_age),
            default_event_weight=_env_float("CHRONICLE_DEFAULT_WEIGHT", base.default_event_weight),
            min_characters=_env_int("CHRONICLE_MIN_CHARACTERS", base.min_characters),
            max_characters=_env_int("CHRONICLE_MAX_CHARACTERS", base.max_characters),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


DEFAULT_CONFIG = EngineConfig.from_env()
