# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from enum import Enum

class BuildStatus(str, Enum):
    """ Status of a pipeline run as reported by the CI provider. """
    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    PENDING = "pending"
    UNKNOWN = "unknown"

class CIProvider(str, Enum):
    """ CI/CD platform that produced the pipeline run. """
    GITHUB_ACTIONS = "github_actions"
    GITLAB_CI = "gitlab_ci"
    JENKINS = "jenkins"
    CIRCLE_CI = "circle_ci"
    AZURE_DEVOPS = "azure_devops"

    @property
    def display_name(self) -> str:
        """ Human-readable provider name. """
        return _PROVIDER_DISPLAY_NAMES[self]

_PROVIDER_DISPLAY_NAMES = {
    CIProvider.GITHUB_ACTIONS: "GitHub Actions",
    CIProvider.GITLAB_CI: "GitLab CI",
    CIProvider.JENKINS: "Jenkins",
    CIProvider.CIRCLE_CI: "CircleCI",
    CIProvider.AZURE_DEVOPS: "Azure DevOps",
}

class FailureCategory(str, Enum):
    """ Classification of a failed pipeline run. """
    TRANSIENT = "transient"
    TIMEOUT = "timeout"
    FLAKY_TEST = "flaky_test"
    RESOURCE_LIMIT = "resource_limit"
    DEPLOYMENT = "deployment"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"

class ActionType(str, Enum):
    """ Type of remediation action to execute """

    # Pipeline control
    RERUN_PIPELINE = "rerun_pipeline"
    RERUN_FAILED_JOBS = "rerun_failed_jobs"
    CANCEL_PIPELINE = "cancel_pipeline"
    RETRY_WITH_DEBUG = "retry_with_debug"

    # Deployment
    ROLLBACK_DEPLOYMENT = "rollback_deployment"

    # Notification
    NOTIFY_SLACK = "notify_slack"
    NOTIFY_EMAIL = "notify_email"

class RemediationSeverity(str, Enum):
    """ Severity level of a remediation proposal. """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class CascadeRiskLevel(str, Enum):
    """ Downstream impact level of a failed pipeline. """
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class PredictionRiskLevel(str, Enum):
    """ Tier of a predicted failure risk percentage. """
    NONE = "none"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_percentage(cls, risk_percentage: float) -> "PredictionRiskLevel":
        """ Convert a 0-100 risk percentage to a tier """
        if risk_percentage >= 90:
            return cls.CRITICAL
        elif risk_percentage >= 80:
            return cls.HIGH
        elif risk_percentage >= 70:
            return cls.MODERATE
        else:
            return cls.NONE

class PatternType(str, Enum):
    """ Kind of instability pattern found in run history. """
    ALTERNATING = "alternating"
    INTERMITTENT = "intermittent"
    ENVIRONMENT = "environment"

class TimeWindowType(str, Enum):
    """ Classification of a deployment time window. """
    OPTIMAL = "optimal"
    RISKY = "risky"

class JobStatus(str, Enum):
    """ Lifecycle state of a background job. """
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

class Environment(str, Enum):
    """ Deployment environment """
    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"
    TEST = "test"

class LogLevel(str, Enum):
    """ Logging levels. """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

# Helper functions for enum operations

def get_all_failure_categories() -> list[str]:
    """ Get list of all failure category values. """
    return [category.value for category in FailureCategory]

def is_pipeline_control_action(action_type: ActionType) -> bool:
    """ Check if the action mutates a pipeline on the CI provider. """
    return action_type in [
        ActionType.RERUN_PIPELINE,
        ActionType.RERUN_FAILED_JOBS,
        ActionType.CANCEL_PIPELINE,
        ActionType.RETRY_WITH_DEBUG,
        ActionType.ROLLBACK_DEPLOYMENT,
    ]

def is_critical_severity(severity: RemediationSeverity) -> bool:
    """ Check if severity is critical or high """
    return severity in [RemediationSeverity.CRITICAL, RemediationSeverity.HIGH]
