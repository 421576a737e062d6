"""
Tests for engine configuration.
"""

import pytest

from ..config import DIFFICULTIES, EngineConfig, get_difficulty


class TestDifficulty:
    """Tests for difficulty lookup."""

    def test_known_levels(self):
        """Each level is found under its own name."""
        for name in ("easy", "normal", "hard"):
            assert get_difficulty(name) is DIFFICULTIES[name]
            assert get_difficulty(name).name == name

    @pytest.mark.parametrize("name", [None, "", "nightmare"])
    def test_unknown_falls_back_to_normal(self, name):
        """Anything unrecognized is treated as normal."""
        assert get_difficulty(name).name == "normal"


class TestEngineConfig:
    """Tests for environment overrides."""

    def test_defaults(self, monkeypatch):
        """Without overrides the shipped balance is used."""
        for var in ("CHRONICLE_MAX_AGE", "CHRONICLE_DEFAULT_WEIGHT", "CHRONICLE_MIN_CHARACTERS"):
            monkeypatch.delenv(var, raising=False)

        config = EngineConfig.from_env()

        assert config.max_age == 80
        assert config.default_event_weight == 1.0
        assert (config.min_characters, config.max_characters) == (3, 5)
        assert config.initial_emperor_stats["health"] == 50

    def test_env_overrides(self, monkeypatch):
        """CHRONICLE_* variables override selected values."""
        monkeypatch.setenv("CHRONICLE_MAX_AGE", "70")
        monkeypatch.setenv("CHRONICLE_DEFAULT_WEIGHT", "2.5")

        config = EngineConfig.from_env()

        assert config.max_age == 70
        assert config.default_event_weight == 2.5

    def test_bad_value_rejected(self, monkeypatch):
        """A non-numeric override raises ValueError naming the variable."""
        monkeypatch.setenv("CHRONICLE_MAX_AGE", "old")

        with pytest.raises(ValueError, match="CHRONICLE_MAX_AGE"):
            EngineConfig.from_env()

    def test_blank_value_ignored(self, monkeypatch):
        """An empty variable keeps the default."""
        monkeypatch.setenv("CHRONICLE_MIN_CHARACTERS", " ")

        assert EngineConfig.from_env().min_characters == 3
