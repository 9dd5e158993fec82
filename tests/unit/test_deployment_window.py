# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""Unit tests for the deployment window advisor."""

from datetime import timedelta, timezone

import pytest

from pipeguard.adapters.history import InMemoryHistoryStore
from pipeguard.core.enums import BuildStatus, TimeWindowType
from pipeguard.core.models.analysis import TimeWindow
from pipeguard.services.analysis.deployment_window import DeploymentWindowAdvisor


def _window(day: int, name: str, hour: int) -> TimeWindow:
    return TimeWindow(
        day_of_week=day,
        day_name=name,
        start_hour=hour,
        end_hour=hour + 1,
        success_rate=100.0,
        type=TimeWindowType.OPTIMAL,
    )


class TestDeploymentWindowAdvisor:
    """Test suite for DeploymentWindowAdvisor."""

    @pytest.fixture
    def advisor(self, settings) -> DeploymentWindowAdvisor:
        return DeploymentWindowAdvisor(settings=settings)

    @pytest.fixture
    def history(self, make_run, base_time):
        """
        Ten green Monday 10:00 runs and five red Friday 16:00 runs.
        """
        monday = [
            make_run(
                id=f"mon-{i}",
                status=BuildStatus.SUCCESS,
                started_at=base_time - timedelta(weeks=i),
            )
            for i in range(10)
        ]
        friday = [
            make_run(
                id=f"fri-{i}",
                status=BuildStatus.FAILURE,
                started_at=base_time + timedelta(days=4, hours=6) - timedelta(weeks=i),
            )
            for i in range(5)
        ]
        return monday + friday

    def test_empty_history(self, advisor):
        """Test no history yields no windows and zero confidence."""
        recommendation = advisor.analyze([], "svc-a")

        assert recommendation.optimal_windows == []
        assert recommendation.risk_windows == []
        assert recommendation.confidence == 0.0
        assert recommendation.recommendation == "No historical data available for analysis"
        assert recommendation.branch == "main"

    def test_optimal_and_risky_windows(self, advisor, history):
        """Test windows come from the day and hour buckets."""
        recommendation = advisor.analyze(history, "svc-a")

        assert [(w.day_name, w.start_hour) for w in recommendation.optimal_windows] == [("Monday", 10)]
        assert [(w.day_name, w.start_hour) for w in recommendation.risk_windows] == [("Friday", 16)]
        assert recommendation.optimal_windows[0].success_rate == 100.0
        assert recommendation.risk_windows[0].success_rate == 0.0
        assert recommendation.confidence == 0.60
        assert recommendation.recommendation == (
            "Best deployment times:\n"
            "  - Monday 10:00-11:00 (100.0% success)\n"
            "\n"
            "Avoid deploying during:\n"
            "  - Friday 16:00-17:00 (0.0% success)"
        )

    def test_other_branches_ignored(self, advisor, history):
        recommendation = advisor.analyze(history, "svc-a", branch="develop")

        assert recommendation.confidence == 0.0

    def test_untimed_runs_count_toward_confidence_only(self, advisor, make_run):
        """Test runs without a start time are not bucketed."""
        runs = [make_run(id=f"u{i}", started_at=None, status=BuildStatus.SUCCESS) for i in range(10)]

        recommendation = advisor.analyze(runs, "svc-a")

        assert recommendation.confidence == 0.60
        assert recommendation.optimal_windows == []
        assert recommendation.recommendation == "No clear patterns detected. Deploy anytime with caution."

    def test_deny_in_risky_window(self, advisor, history, base_time):
        """Test a risky window denies deployment and suggests the next slot."""
        friday = base_time + timedelta(days=4, hours=6, minutes=20)

        decision = advisor.should_deploy_now(history, "svc-a", now=friday)

        assert decision.should_deploy is False
        assert decision.reason == "Current time is in a high-risk deployment window"
        assert decision.next_optimal_time == "Next Monday at 10:00"
        assert [w.day_name for w in decision.alternative_windows] == ["Monday"]
        assert decision.permissive_fallback is False

    def test_naive_now_is_read_as_utc(self, advisor, history, base_time):
        friday = (base_time + timedelta(days=4, hours=6, minutes=20)).replace(tzinfo=None)

        decision = advisor.should_deploy_now(history, "svc-a", now=friday)

        assert decision.should_deploy is False

    def test_offset_timestamps_bucket_in_utc(self, advisor, make_run, base_time):
        """Test runs recorded with a UTC offset land in their UTC hour."""
        plus_two = timezone(timedelta(hours=2))
        runs = [
            make_run(
                id=f"r{i}",
                status=BuildStatus.SUCCESS,
                started_at=(base_time - timedelta(weeks=i)).astimezone(plus_two),
            )
            for i in range(10)
        ]

        recommendation = advisor.analyze(runs, "svc-a")

        assert [(w.day_name, w.start_hour) for w in recommendation.optimal_windows] == [("Monday", 10)]

    def test_allow_in_optimal_window(self, advisor, history, base_time):
        decision = advisor.should_deploy_now(history, "svc-a", now=base_time + timedelta(minutes=30))

        assert decision.should_deploy is True
        assert decision.reason == "Current time is in an optimal deployment window"
        assert decision.next_optimal_time is None
        assert decision.permissive_fallback is False

    def test_permissive_fallback_is_flagged(self, advisor, history, base_time):
        """Test the default allow is marked when history is inconclusive."""
        decision = advisor.should_deploy_now(history, "svc-a", now=base_time + timedelta(hours=5))

        assert decision.should_deploy is True
        assert decision.permissive_fallback is True
        assert decision.reason == "No historical patterns suggest high risk"

    def test_empty_history_is_permissive(self, advisor, base_time):
        decision = advisor.should_deploy_now([], "svc-a", now=base_time)

        assert decision.should_deploy is True
        assert decision.permissive_fallback is True
        assert decision.confidence == 0.0

    def test_confident_history_allows_without_fallback(self, advisor, make_run, base_time):
        """Test strong history outside any window allows deployment."""
        runs = [
            make_run(
                id=f"r{i}",
                status=BuildStatus.SUCCESS,
                started_at=base_time - timedelta(weeks=i, hours=i % 4),
            )
            for i in range(50)
        ]

        decision = advisor.should_deploy_now(runs, "svc-a", now=base_time + timedelta(days=2))

        assert decision.should_deploy is True
        assert decision.reason == "Deployment conditions are favorable"
        assert decision.permissive_fallback is False

    @pytest.mark.parametrize(
        "day, hour, expected",
        [
            (0, 8, "Today at 10:00"),
            (0, 11, "Wednesday at 14:00"),
            (3, 9, "Next Monday at 10:00"),
        ],
    )
    def test_next_optimal_time(self, base_time, day, hour, expected):
        windows = [_window(0, "Monday", 10), _window(2, "Wednesday", 14)]
        now = base_time.replace(hour=hour) + timedelta(days=day)

        assert DeploymentWindowAdvisor.next_optimal_time(windows, now) == expected

    def test_next_optimal_time_without_windows(self, base_time):
        assert DeploymentWindowAdvisor.next_optimal_time([], base_time) == "No optimal time found"

    @pytest.mark.parametrize(
        "count, expected",
        [(100, 0.95), (50, 0.85), (30, 0.75), (10, 0.60), (9, 0.40)],
    )
    def test_confidence_tiers(self, count, expected):
        assert DeploymentWindowAdvisor.confidence(count) == expected

    @pytest.mark.asyncio
    async def test_from_store(self, settings, history, base_time):
        advisor = DeploymentWindowAdvisor(history_store=InMemoryHistoryStore(runs=history), settings=settings)

        recommendation = await advisor.analyze_from_store("svc-a")
        decision = await advisor.should_deploy_now_from_store("svc-a", now=base_time)

        assert len(recommendation.optimal_windows) == 1
        assert decision.should_deploy is True
