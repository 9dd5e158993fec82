# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from pipeguard.services.analysis.cascade import CascadeRiskAnalyzer
from pipeguard.services.analysis.flaky import FlakyTestDetector
from pipeguard.services.analysis.changelog import ChangelogAnalyzer
from pipeguard.services.analysis.deployment_window import DeploymentWindowAdvisor

__all__ = [
    "CascadeRiskAnalyzer",
    "FlakyTestDetector",
    "ChangelogAnalyzer",
    "DeploymentWindowAdvisor",
]
