# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from pipeguard.services.classifier import FailureClassifier
from pipeguard.services.proposals import ProposalGenerator
from pipeguard.services.consent import ConsentGate
from pipeguard.services.orchestrator import RemediationOrchestrator
from pipeguard.services.jobs import BackgroundJobQueue, Job
from pipeguard.services.remediation import AutoRemediationService

__all__ = [
    "FailureClassifier",
    "ProposalGenerator",
    "ConsentGate",
    "RemediationOrchestrator",
    "BackgroundJobQueue",
    "Job",
    "AutoRemediationService",
]
