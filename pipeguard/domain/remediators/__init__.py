# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from pipeguard.domain.remediators.base import ActionExecutor, BaseRemediator
from pipeguard.domain.remediators.callback import CallbackRemediator, UnsupportedActionRemediator
from pipeguard.domain.remediators.notifications import EmailNotifyRemediator, SlackWebhookRemediator
from pipeguard.domain.remediators.factory import RemediatorExecutor, RemediatorFactory

__all__ = [
    "ActionExecutor",
    "BaseRemediator",
    "CallbackRemediator",
    "UnsupportedActionRemediator",
    "EmailNotifyRemediator",
    "SlackWebhookRemediator",
    "RemediatorExecutor",
    "RemediatorFactory",
]
