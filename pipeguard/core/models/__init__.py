# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from pipeguard.core.models.pipeline import PipelineRun, Commit
from pipeguard.core.models.remediation import (
    RemediationAction,
    RemediationProposal,
    ActionResult,
    RemediationResult,
)
from pipeguard.core.models.analysis import (
    CascadeRisk,
    FlakinessPattern,
    FlakyTestReport,
    SuspiciousCommit,
    ChangelogAnalysis,
    TimeWindow,
    DeploymentRecommendation,
    DeploymentDecision,
)

__all__ = [
    "PipelineRun",
    "Commit",
    "RemediationAction",
    "RemediationProposal",
    "ActionResult",
    "RemediationResult",
    "CascadeRisk",
    "FlakinessPattern",
    "FlakyTestReport",
    "SuspiciousCommit",
    "ChangelogAnalysis",
    "TimeWindow",
    "DeploymentRecommendation",
    "DeploymentDecision",
]
