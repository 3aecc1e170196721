"""
Unit tests for toolplan/core/config.py - Settings Class and Singleton.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestSettingsDefaults:
    """Defaults match the documented planner and executor behavior."""

    def test_settings_extends_base_settings(self):
        from pydantic_settings import BaseSettings

        from toolplan.core.config import Settings

        assert issubclass(Settings, BaseSettings)

    def test_planner_defaults(self):
        """Planner uses gemini-1.5-pro at temperature 0.2 with an 8000-char body cap."""
        from toolplan.core.config import Settings

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.gemini_model == "gemini-1.5-pro"
        assert settings.planner_temperature == 0.2
        assert settings.email_body_max_chars == 8000
        assert settings.schema_max_depth == 6
        assert settings.strict_argument_names is False

    def test_executor_defaults(self):
        from toolplan.core.config import Settings

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.tool_timeout_seconds == 30.0
        assert settings.tool_gateway_api_key.get_secret_value() == ""
        assert settings.audit_backend == "logging"

    def test_api_key_is_secret(self):
        """SecretStr keeps the key out of repr."""
        from toolplan.core.config import Settings

        with patch.dict(os.environ, {"TOOLPLAN_GEMINI_API_KEY": "AIza-secret"}, clear=True):
            settings = Settings()

        assert "AIza-secret" not in repr(settings)
        assert settings.gemini_api_key.get_secret_value() == "AIza-secret"


class TestSettingsEnvironment:
    """Environment variables with the TOOLPLAN_ prefix override defaults."""

    def test_env_prefix(self):
        from toolplan.core.config import Settings

        env = {
            "TOOLPLAN_TOOL_TIMEOUT_SECONDS": "5",
            "TOOLPLAN_STRICT_ARGUMENT_NAMES": "true",
            "TOOLPLAN_AUDIT_BACKEND": "redis",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()

        assert settings.tool_timeout_seconds == 5.0
        assert settings.strict_argument_names is True
        assert settings.audit_backend == "redis"

    def test_log_level_is_normalized(self):
        from toolplan.core.config import Settings

        with patch.dict(os.environ, {"TOOLPLAN_LOG_LEVEL": "debug"}, clear=True):
            assert Settings().log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        from toolplan.core.config import Settings

        with patch.dict(os.environ, {"TOOLPLAN_LOG_LEVEL": "chatty"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_invalid_redis_url_rejected(self):
        from toolplan.core.config import Settings

        with patch.dict(os.environ, {"TOOLPLAN_REDIS_URL": "http://localhost"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_unknown_audit_backend_rejected(self):
        from toolplan.core.config import Settings

        with patch.dict(os.environ, {"TOOLPLAN_AUDIT_BACKEND": "postgres"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()


class TestGetSettings:
    """get_settings() is a cached singleton."""

    def test_returns_same_instance(self):
        from toolplan.core.config import get_settings

        assert get_settings() is get_settings()

    def test_cache_clear_rebuilds(self):
        from toolplan.core.config import get_settings

        first = get_settings()
        get_settings.cache_clear()
        assert get_settings() is not first
