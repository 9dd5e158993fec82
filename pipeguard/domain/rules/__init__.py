# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from pipeguard.domain.rules.base import (
    ClassificationRule,
    contains_all,
    contains_any,
    either,
    first_match,
)
from pipeguard.domain.rules.failure import DEFAULT_RULES

__all__ = [
    "ClassificationRule",
    "contains_all",
    "contains_any",
    "either",
    "first_match",
    "DEFAULT_RULES",
]
