# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""Unit tests for the failure classifier and its rules."""

import pytest

from pipeguard.core.enums import FailureCategory, get_all_failure_categories
from pipeguard.domain.rules import ClassificationRule, DEFAULT_RULES, contains_any
from pipeguard.services.classifier import FailureClassifier


class TestFailureClassifier:
    """Test suite for FailureClassifier."""

    @pytest.fixture
    def classifier(self) -> FailureClassifier:
        """Fixture for a classifier with the default rules."""
        return FailureClassifier()

    @pytest.mark.parametrize(
        "logs, expected",
        [
            ("ERROR: Connection refused by registry", FailureCategory.TRANSIENT),
            ("upstream returned 502 Bad Gateway", FailureCategory.TRANSIENT),
            ("Service temporarily unavailable", FailureCategory.TRANSIENT),
            ("Job exceeded the maximum timeout", FailureCategory.TIMEOUT),
            ("step timed out after 60m", FailureCategory.TIMEOUT),
            ("marked as flaky by the runner", FailureCategory.FLAKY_TEST),
            ("test suite: intermittent failure in test_login", FailureCategory.FLAKY_TEST),
            ("Killed: out of memory", FailureCategory.RESOURCE_LIMIT),
            ("write error: no space left on device", FailureCategory.RESOURCE_LIMIT),
            ("Deployment to prod failed", FailureCategory.DEPLOYMENT),
            ("kubectl: rollout failed", FailureCategory.DEPLOYMENT),
            ("Compilation failed with 3 errors", FailureCategory.PERMANENT),
            ("SyntaxError: syntax error near line 4", FailureCategory.PERMANENT),
            ("something odd happened", FailureCategory.UNKNOWN),
        ],
    )
    def test_classify_categories(self, classifier: FailureClassifier, logs: str, expected: FailureCategory):
        """Test each category is reached by its markers."""
        assert classifier.classify(logs) == expected

    def test_empty_and_missing_logs_are_unknown(self, classifier: FailureClassifier):
        """Test empty or missing logs classify as unknown."""
        assert classifier.classify("") == FailureCategory.UNKNOWN
        assert classifier.classify(None) == FailureCategory.UNKNOWN

    def test_connection_timed_out_is_transient_not_timeout(self, classifier: FailureClassifier):
        """Test earlier rules win over later ones."""
        assert classifier.classify("connection timed out") == FailureCategory.TRANSIENT

    def test_timeout_wins_over_flaky(self, classifier: FailureClassifier):
        """Test timeout is checked before flaky tests."""
        assert classifier.classify("flaky test timed out") == FailureCategory.TIMEOUT

    def test_oom_substring_matches(self, classifier: FailureClassifier):
        """Test the oom marker matches as a plain substring."""
        assert classifier.classify("container OOMKilled") == FailureCategory.RESOURCE_LIMIT

    def test_test_without_intermittent_is_not_flaky(self, classifier: FailureClassifier):
        """Test the flaky rule needs both markers when 'flaky' is absent."""
        assert classifier.classify("test assertion error") == FailureCategory.UNKNOWN

    def test_classification_is_deterministic(self, classifier: FailureClassifier):
        """Test identical input yields identical output."""
        logs = "503 Service Unavailable while pulling image"
        results = {classifier.classify(logs) for _ in range(5)}
        assert results == {FailureCategory.TRANSIENT}

    def test_every_result_is_a_known_category(self, classifier: FailureClassifier):
        """Test classification output stays within the category set."""
        samples = ["", "timeout", "disk full", "build failed", "???", "flaky"]
        for logs in samples:
            assert classifier.classify(logs).value in get_all_failure_categories()

    def test_classify_with_rule_reports_rule_name(self, classifier: FailureClassifier):
        """Test the matching rule name is returned."""
        category, rule = classifier.classify_with_rule("Connection refused")
        assert category == FailureCategory.TRANSIENT
        assert rule == "transient_network"

        category, rule = classifier.classify_with_rule("nothing relevant")
        assert category == FailureCategory.UNKNOWN
        assert rule == "unknown"

    def test_custom_rules(self):
        """Test injected rules replace the default table."""
        rules = [
            ClassificationRule(
                name="quota",
                predicate=contains_any("quota exceeded"),
                category=FailureCategory.RESOURCE_LIMIT,
            )
        ]
        classifier = FailureClassifier(rules=rules)

        assert classifier.classify("API quota exceeded") == FailureCategory.RESOURCE_LIMIT
        assert classifier.classify("connection refused") == FailureCategory.UNKNOWN

    def test_default_rule_order(self):
        """Test the default table is ordered by priority."""
        assert [rule.category for rule in DEFAULT_RULES] == [
            FailureCategory.TRANSIENT,
            FailureCategory.TIMEOUT,
            FailureCategory.FLAKY_TEST,
            FailureCategory.RESOURCE_LIMIT,
            FailureCategory.DEPLOYMENT,
            FailureCategory.PERMANENT,
        ]
