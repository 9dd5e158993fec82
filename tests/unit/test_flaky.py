# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""Unit tests for the flaky test detector."""

from datetime import timedelta

import pytest

from pipeguard.adapters.history import InMemoryHistoryStore
from pipeguard.core.enums import BuildStatus, CIProvider, PatternType
from pipeguard.services.analysis.flaky import FlakyTestDetector

S = BuildStatus.SUCCESS
F = BuildStatus.FAILURE


class TestFlakyTestDetector:
    """Test suite for FlakyTestDetector."""

    @pytest.fixture
    def detector(self, settings) -> FlakyTestDetector:
        """Fixture for a detector with default settings."""
        return FlakyTestDetector(settings=settings)

    @pytest.fixture
    def make_history(self, make_run, base_time):
        """Factory building a run history from a status sequence."""

        def _make_history(statuses, repository_name="svc-a", branch="main", provider=CIProvider.GITHUB_ACTIONS):
            return [
                make_run(
                    id=f"{repository_name}-{branch}-{i}",
                    repository_name=repository_name,
                    branch=branch,
                    status=status,
                    started_at=base_time + timedelta(hours=i),
                    finished_at=base_time + timedelta(hours=i, minutes=10),
                    provider=provider,
                )
                for i, status in enumerate(statuses)
            ]

        return _make_history

    def test_alternating_history_is_flaky(self, detector, make_history, base_time):
        """Test a strictly alternating history scores as highly flaky."""
        history = make_history([S, F] * 5)

        reports = detector.detect(history)

        assert len(reports) == 1
        report = reports[0]
        assert report.is_flaky is True
        assert report.flakiness_score >= 70
        assert report.flakiness_score == 100.0
        assert report.failures == 5
        assert report.successes == 5
        assert report.failure_rate == pytest.approx(0.5)
        assert report.recommendation.startswith("CRITICAL")
        assert report.confidence == pytest.approx((0.65 + 1.0) / 2)
        assert report.last_failure == base_time + timedelta(hours=9, minutes=10)

        pattern_types = {pattern.type for pattern in report.patterns}
        assert PatternType.ALTERNATING in pattern_types
        assert PatternType.INTERMITTENT in pattern_types

    def test_all_successes_score_zero(self, detector, make_history):
        """Test a stable history is not reported unless asked."""
        history = make_history([S] * 20)

        assert detector.detect(history) == []

        reports = detector.detect(history, include_stable=True)
        assert reports[0].flakiness_score == 0.0
        assert reports[0].is_flaky is False
        assert reports[0].last_failure is None
        assert reports[0].recommendation.startswith("LOW")

    def test_all_failures_is_not_flaky(self, detector, make_history):
        """Test a consistently failing history is broken, not flaky."""
        reports = detector.detect(make_history([F] * 10), include_stable=True)

        assert reports[0].flakiness_score == 0.0

    def test_small_groups_are_skipped(self, detector, make_history):
        """Test groups below the minimum run count are ignored."""
        history = make_history([S, F] * 4)

        assert detector.detect(history, include_stable=True) == []
        assert len(detector.detect(history, min_runs=8)) == 1

    def test_groups_by_repository_and_branch(self, detector, make_history):
        """Test each repository/branch pair is scored separately."""
        history = (
            make_history([S, F] * 5, branch="main")
            + make_history([S] * 10, branch="develop")
            + make_history([S, F] * 5, repository_name="svc-b")
        )

        reports = detector.detect(history, include_stable=True)
        assert {(r.repository, r.branch) for r in reports} == {
            ("svc-a", "main"),
            ("svc-a", "develop"),
            ("svc-b", "main"),
        }
        assert reports[-1].branch == "develop"

        filtered = detector.detect(history, repository="svc-b")
        assert [r.repository for r in filtered] == ["svc-b"]

    def test_input_order_does_not_matter(self, detector, make_history):
        """Test runs are ordered by start time before scoring."""
        history = make_history([S, F] * 5)

        forward = detector.detect(history)[0]
        backward = detector.detect(list(reversed(history)))[0]

        assert forward.flakiness_score == backward.flakiness_score

    def test_environment_pattern(self, detector, make_history):
        """Test failures concentrated on one provider are reported."""
        report = detector.detect(make_history([S, F] * 5, provider=CIProvider.JENKINS))[0]

        environment = [p for p in report.patterns if p.type == PatternType.ENVIRONMENT]
        assert len(environment) == 1
        assert environment[0].description == "Failures concentrated on Jenkins"
        assert environment[0].confidence == 1.0

    def test_metric_helpers(self):
        """Test the status sequence metrics."""
        statuses = [S, S, F, S, F, F, F, S]

        assert FlakyTestDetector.alternation_rate(statuses) == pytest.approx(4 / 7)
        assert FlakyTestDetector.intermittent_failures(statuses) == 1
        assert FlakyTestDetector.longest_streak(statuses) == 3
        assert FlakyTestDetector.longest_streak([]) == 0
        assert FlakyTestDetector.alternation_rate([S]) == 0.0

    @pytest.mark.parametrize(
        "score, prefix",
        [(80, "CRITICAL"), (60, "HIGH"), (40, "MEDIUM"), (39.9, "LOW")],
    )
    def test_recommendation_tiers(self, score, prefix):
        assert FlakyTestDetector.recommendation(score).startswith(prefix)

    @pytest.mark.asyncio
    async def test_detect_from_store(self, settings, make_history):
        """Test detection against a history store snapshot."""
        store = InMemoryHistoryStore(runs=make_history([S, F] * 5))
        detector = FlakyTestDetector(history_store=store, settings=settings)

        reports = await detector.detect_from_store()

        assert len(reports) == 1
