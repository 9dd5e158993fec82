# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""Unit tests for settings loading."""

import pytest

from pipeguard.core.config import Settings, get_settings, reload_settings
from pipeguard.core.enums import Environment


class TestSettings:
    """Test suite for Settings."""

    def test_defaults(self, settings):
        assert settings.auto_remediation_enabled is True
        assert settings.features.enable_narrative_generation is False
        assert settings.remediation.backoff_base_seconds == 2.0
        assert settings.remediation.backoff_jitter is False
        assert settings.analysis.flaky_min_runs == 10
        assert settings.analysis.default_deploy_branch == "main"
        assert settings.narrative.api_key is None
        assert settings.jobs.workers == 2
        assert settings.jobs.max_finished == 1000
        assert settings.is_production is False

    def test_environment_overrides(self, monkeypatch):
        """Test nested settings read their own environment variables."""
        monkeypatch.setenv("ENABLE_AUTO_REMEDIATION", "false")
        monkeypatch.setenv("REMEDIATION_BACKOFF_BASE_SECONDS", "0.5")
        monkeypatch.setenv("FLAKY_MIN_RUNS", "20")
        monkeypatch.setenv("ENVIRONMENT", "prod")

        settings = Settings()

        assert settings.auto_remediation_enabled is False
        assert settings.remediation.backoff_base_seconds == 0.5
        assert settings.analysis.flaky_min_runs == 20
        assert settings.environment == Environment.PRODUCTION
        assert settings.is_production is True

    def test_invalid_value_rejected(self, monkeypatch):
        monkeypatch.setenv("FLAKY_MIN_RUNS", "0")

        with pytest.raises(ValueError):
            Settings()

    def test_get_settings_is_cached(self, monkeypatch):
        """Test reload_settings picks up a changed environment."""
        first = reload_settings()
        assert get_settings() is first

        monkeypatch.setenv("DEFAULT_DEPLOY_BRANCH", "release")
        reloaded = reload_settings()

        assert reloaded is not first
        assert reloaded.analysis.default_deploy_branch == "release"

        monkeypatch.delenv("DEFAULT_DEPLOY_BRANCH")
        reload_settings()
