# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from typing import Optional, Sequence

import structlog

from pipeguard.core.enums import FailureCategory
from pipeguard.domain.rules.base import ClassificationRule, first_match
from pipeguard.domain.rules.failure import DEFAULT_RULES

logger = structlog.get_logger(__name__)

UNKNOWN_RULE_NAME = "unknown"


class FailureClassifier:
    """
    Maps raw build logs to a single failure category.

    Total and deterministic: every input, including None and empty text,
    yields exactly one category.
    """

    def __init__(self, rules: Optional[Sequence[ClassificationRule]] = None):
        self.rules: tuple[ClassificationRule, ...] = tuple(
            rules if rules is not None else DEFAULT_RULES
        )

    def classify(self, logs: Optional[str]) -> FailureCategory:
        """
        Classify build logs.

        Args:
            logs: Raw log text, possibly empty

        Returns:
            Matching failure category, UNKNOWN if nothing matched
        """
        category, _ = self.classify_with_rule(logs)
        return category

    def classify_with_rule(self, logs: Optional[str]) -> tuple[FailureCategory, str]:
        """
        Classify build logs and report which rule matched.

        Args:
            logs: Raw log text, possibly empty

        Returns:
            Tuple of (category, rule name)
        """
        if not logs:
            return FailureCategory.UNKNOWN, UNKNOWN_RULE_NAME

        rule = first_match(self.rules, logs.lower())
        if rule is None:
            return FailureCategory.UNKNOWN, UNKNOWN_RULE_NAME

        logger.debug(
            "failure_classified",
            category=rule.category.value,
            rule=rule.name,
        )
        return rule.category, rule.name
