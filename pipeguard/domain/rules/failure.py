# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Failure Classification Rules

Ordered table of log markers. Evaluated top to bottom, first match wins.
"""

from pipeguard.core.enums import FailureCategory
from pipeguard.domain.rules.base import (
    ClassificationRule,
    contains_all,
    contains_any,
    either,
)

TRANSIENT_RULE = ClassificationRule(
    name="transient_network",
    predicate=contains_any(
        "connection refused",
        "connection timed out",
        "temporarily unavailable",
        "503 service unavailable",
        "502 bad gateway",
    ),
    category=FailureCategory.TRANSIENT,
)

TIMEOUT_RULE = ClassificationRule(
    name="timeout",
    predicate=contains_any("timeout", "timed out"),
    category=FailureCategory.TIMEOUT,
)

FLAKY_TEST_RULE = ClassificationRule(
    name="flaky_test",
    predicate=either(
        contains_any("flaky"),
        contains_all("test", "intermittent"),
    ),
    category=FailureCategory.FLAKY_TEST,
)

RESOURCE_LIMIT_RULE = ClassificationRule(
    name="resource_limit",
    predicate=contains_any("out of memory", "oom", "no space left", "disk full"),
    category=FailureCategory.RESOURCE_LIMIT,
)

DEPLOYMENT_RULE = ClassificationRule(
    name="deployment",
    predicate=either(
        contains_all("deployment", "failed"),
        contains_any("rollout failed"),
    ),
    category=FailureCategory.DEPLOYMENT,
)

PERMANENT_RULE = ClassificationRule(
    name="permanent_build",
    predicate=contains_any("compilation failed", "build failed", "syntax error"),
    category=FailureCategory.PERMANENT,
)

DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    TRANSIENT_RULE,
    TIMEOUT_RULE,
    FLAKY_TEST_RULE,
    RESOURCE_LIMIT_RULE,
    DEPLOYMENT_RULE,
    PERMANENT_RULE,
)
