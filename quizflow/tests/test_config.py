"""
Unit tests for application configuration.
"""

import pytest
from pydantic import ValidationError

from quizflow.config import Settings
from quizflow.engine.plan import RuntimeTuning


class TestSettings:
    """Test the Settings configuration class"""

    def test_default_values(self, monkeypatch):
        for name in ("TIMER_WARNING_THRESHOLD_SECONDS", "TIER_TOP_PERCENT", "DEFAULT_LOCALE", "LEAD_SINK_URL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.timer_warning_threshold_seconds == 30
        assert settings.timer_danger_threshold_seconds == 10
        assert (settings.tier_top_percent, settings.tier_second_percent, settings.tier_third_percent) == (90, 70, 50)
        assert settings.answer_feedback_delay_seconds == 1.0
        assert settings.matching_advance_delay_seconds == 1.5
        assert settings.default_locale == "en"
        assert settings.lead_sink_url is None
        assert isinstance(settings.debug, bool)

    def test_environment_variables(self, monkeypatch):
        """Environment variables override defaults"""
        monkeypatch.setenv("TIER_TOP_PERCENT", "95")
        monkeypatch.setenv("DEFAULT_LOCALE", "ru")
        monkeypatch.setenv("LEAD_SINK_URL", "http://leads.test/leads")
        monkeypatch.setenv("DEBUG", "true")

        settings = Settings(_env_file=None)
        assert settings.tier_top_percent == 95
        assert settings.default_locale == "ru"
        assert settings.lead_sink_url == "http://leads.test/leads"
        assert settings.debug is True

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, tier_top_percent=150)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, default_locale="de")
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="VERBOSE")


class TestRuntimeTuning:
    """Test tuning derived from settings"""

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            timer_warning_threshold_seconds=45,
            tier_second_percent=75,
            answer_feedback_delay_seconds=2.0,
            lead_endpoint="/leads",
            default_locale="ru",
        )
        tuning = RuntimeTuning.from_settings(settings)
        assert tuning.warning_threshold == 45
        assert tuning.tiers.second == 75
        assert tuning.feedback_delay == 2.0
        assert tuning.lead_endpoint == "/leads"
        assert tuning.locale == "ru"

    def test_locale_override(self):
        tuning = RuntimeTuning.from_settings(Settings(_env_file=None), locale="ru")
        assert tuning.locale == "ru"
