"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from grievance_tracker.config.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ESCALATION_SCHEDULER_MODE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.ESCALATION_SCHEDULER_MODE == "inline"
        assert settings.ESCALATION_SWEEP_INTERVAL_SECONDS == 3600
        assert settings.email_enabled is False

    def test_values_are_normalised(self, monkeypatch):
        monkeypatch.setenv("ESCALATION_SCHEDULER_MODE", " Celery ")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "Production")
        settings = Settings(_env_file=None)

        assert settings.ESCALATION_SCHEDULER_MODE == "celery"
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.is_production

    def test_rejects_unknown_scheduler_mode(self, monkeypatch):
        monkeypatch.setenv("ESCALATION_SCHEDULER_MODE", "cron")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_rejects_non_positive_interval(self, monkeypatch):
        monkeypatch.setenv("ESCALATION_SWEEP_INTERVAL_SECONDS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
