"""Tests for application configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from somnium.config import Settings, get_settings


class TestSettingsDefaults:
    """Tests for default configuration values."""

    def test_default_hint_settings(self):
        settings = Settings(_env_file=None)

        assert settings.hint_cooldown_seconds == 30.0
        assert settings.hint_after_attempts == 3

    def test_default_milestones(self):
        """Score milestones should follow the classic adventure ladder."""
        settings = Settings(_env_file=None)

        assert settings.score_milestones == [100, 250, 500, 1000]

    def test_default_ending_ids(self):
        settings = Settings(_env_file=None)

        assert settings.default_ending == "default"
        assert settings.failure_ending == "failure"

    def test_default_debug_is_false(self):
        """Debug mode should be off by default."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.debug is False
        assert settings.log_level == "WARNING"
        assert settings.world_file is None


class TestSettingsEnvironment:
    """Tests for environment variable loading."""

    def test_env_overrides_defaults(self):
        """Environment variables should override default values."""
        with patch.dict(
            os.environ,
            {
                "HINT_COOLDOWN_SECONDS": "5",
                "VERB_WINDOW": "2",
                "DEBUG": "true",
                "WORLD_FILE": "worlds/manor.yaml",
            },
            clear=False,
        ):
            settings = Settings(_env_file=None)

        assert settings.hint_cooldown_seconds == 5.0
        assert settings.verb_window == 2
        assert settings.debug is True
        assert settings.world_file == "worlds/manor.yaml"

    def test_list_settings_from_json(self):
        with patch.dict(os.environ, {"SCORE_MILESTONES": "[50, 150]"}, clear=False):
            settings = Settings(_env_file=None)

        assert settings.score_milestones == [50, 150]

    def test_log_level_must_be_valid(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}, clear=False):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestGetSettings:
    """Tests for the get_settings function."""

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()

        first = get_settings()
        second = get_settings()

        assert isinstance(first, Settings)
        assert first is second
        get_settings.cache_clear()
