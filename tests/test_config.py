"""Settings parsing from RIDING_* environment variables."""

from __future__ import annotations

import pytest

from riding_resolver.config import Settings
from riding_resolver.exceptions import ConfigurationError, InputError


class TestSettingsFromEnv:
    def test_defaults_when_unset(self):
        settings = Settings.from_env({})
        assert settings == Settings()
        assert settings.headless is False

    def test_overrides(self):
        settings = Settings.from_env(
            {
                "RIDING_HEADLESS": "true",
                "RIDING_POLL_ATTEMPTS": "5",
                "RIDING_HTTP_TIMEOUT_S": "2.5",
                "RIDING_REPRESENT_URL": "https://represent.example/",
                "RIDING_CORS_ORIGINS": "http://localhost:5173, https://crm.example",
                "RIDING_LOG_LEVEL": "debug",
            }
        )
        assert settings.headless is True
        assert settings.poll_attempts == 5
        assert settings.http_timeout_s == 2.5
        assert settings.represent_url == "https://represent.example"
        assert settings.cors_origins == ("http://localhost:5173", "https://crm.example")
        assert settings.log_level == "DEBUG"

    def test_headless_false_values(self):
        assert Settings.from_env({"RIDING_HEADLESS": "0"}).headless is False

    def test_invalid_integer_raises(self):
        with pytest.raises(ConfigurationError, match="RIDING_POLL_ATTEMPTS"):
            Settings.from_env({"RIDING_POLL_ATTEMPTS": "lots"})

    def test_invalid_float_is_not_an_input_error(self):
        with pytest.raises(ConfigurationError) as excinfo:
            Settings.from_env({"RIDING_HTTP_TIMEOUT_S": "soon"})
        assert not isinstance(excinfo.value, InputError)
        assert excinfo.value.code == "CONFIG_INVALID"
        assert excinfo.value.details["variable"] == "RIDING_HTTP_TIMEOUT_S"
