# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from pipeguard.core.enums import Environment, LogLevel


class FeatureFlagSettings(BaseSettings):
    """Feature flags configuration."""

    enable_auto_remediation: bool = Field(default=True, alias="ENABLE_AUTO_REMEDIATION")
    enable_narrative_generation: bool = Field(default=False, alias="ENABLE_NARRATIVE_GENERATION")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class RemediationSettings(BaseSettings):
    """Orchestrator backoff configuration."""

    backoff_base_seconds: float = Field(default=2.0, ge=0.0, alias="REMEDIATION_BACKOFF_BASE_SECONDS")
    backoff_max_seconds: float = Field(default=300.0, ge=0.0, alias="REMEDIATION_BACKOFF_MAX_SECONDS")
    backoff_jitter: bool = Field(default=False, alias="REMEDIATION_BACKOFF_JITTER")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class AnalysisSettings(BaseSettings):
    """Historical analyzer configuration."""

    flaky_min_runs: int = Field(default=10, ge=1, alias="FLAKY_MIN_RUNS")
    default_deploy_branch: str = Field(default="main", alias="DEFAULT_DEPLOY_BRANCH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class NarrativeSettings(BaseSettings):
    """Narrative text generation configuration."""

    api_url: str = Field(default="https://api.openai.com/v1/chat/completions", alias="NARRATIVE_API_URL")
    api_key: Optional[str] = Field(default=None, alias="NARRATIVE_API_KEY")
    model: str = Field(default="gpt-4o-mini", alias="NARRATIVE_MODEL")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, alias="NARRATIVE_TEMPERATURE")
    max_tokens: int = Field(default=100, ge=1, alias="NARRATIVE_MAX_TOKENS")
    timeout: int = Field(default=30, ge=1, le=300, alias="NARRATIVE_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class NotificationSettings(BaseSettings):
    """Slack and email notification configuration."""

    slack_webhook_url: Optional[str] = Field(default=None, alias="SLACK_WEBHOOK_URL")
    email_service_url: Optional[str] = Field(default=None, alias="EMAIL_SERVICE_URL")
    email_service_api_key: Optional[str] = Field(default=None, alias="EMAIL_SERVICE_API_KEY")
    timeout: int = Field(default=10, ge=1, le=120, alias="NOTIFICATION_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class JobQueueSettings(BaseSettings):
    """Background job queue configuration."""

    workers: int = Field(default=2, ge=1, le=32, alias="JOB_QUEUE_WORKERS")
    max_size: int = Field(default=0, ge=0, alias="JOB_QUEUE_MAX_SIZE")
    max_finished: int = Field(default=1000, ge=1, alias="JOB_QUEUE_MAX_FINISHED")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """
    Main application settings loaded from environment variables.

    All settings can be overridden by environment variables or a .env file.

    Example:
        ENVIRONMENT=prod
        ENABLE_AUTO_REMEDIATION=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (dev, staging, prod)"
    )

    app_name: str = Field(default="PipeGuard", alias="APP_NAME")
    version: str = Field(default="0.1.0", description="Application version")

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level"
    )

    debug: bool = Field(default=False, description="Enable debug mode", alias="DEBUG")

    # Sub-settings
    features: FeatureFlagSettings = Field(default_factory=FeatureFlagSettings)
    remediation: RemediationSettings = Field(default_factory=RemediationSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    narrative: NarrativeSettings = Field(default_factory=NarrativeSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    jobs: JobQueueSettings = Field(default_factory=JobQueueSettings)

    # Properties
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    @property
    def auto_remediation_enabled(self) -> bool:
        """Check the global auto-remediation switch."""
        return self.features.enable_auto_remediation


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    This function is cached to ensure settings are only loaded once.

    Returns:
        Settings instance
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Reload settings from environment.

    Useful for testing or hot-reloading configuration.

    Returns:
        New Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
