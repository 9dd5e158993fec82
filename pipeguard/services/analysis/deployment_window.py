# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Deployment Window Advisor

Buckets historical runs by weekday and hour to find recurring windows where
deployments tend to succeed or fail, and decides whether to deploy now.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

import structlog

from pipeguard.adapters.history.base import HistoryStore
from pipeguard.core.config import Settings, get_settings
from pipeguard.core.enums import BuildStatus, TimeWindowType
from pipeguard.core.models.analysis import (
    DeploymentDecision,
    DeploymentRecommendation,
    TimeWindow,
)
from pipeguard.core.models.pipeline import PipelineRun, as_utc

logger = structlog.get_logger(__name__)

MAX_OPTIMAL_WINDOWS = 10
MAX_RISK_WINDOWS = 5
MAX_ALTERNATIVE_WINDOWS = 3
FAVORABLE_CONFIDENCE = 0.7


@dataclass
class _Bucket:
    total: int = 0
    failures: int = 0

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 100.0
        return (self.total - self.failures) / self.total * 100


class DeploymentWindowAdvisor:

    def __init__(
        self,
        history_store: Optional[HistoryStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.history_store = history_store
        self.default_branch = (settings or get_settings()).analysis.default_deploy_branch

    def analyze(
        self,
        history: Sequence[PipelineRun],
        repository: str,
        branch: Optional[str] = None,
    ) -> DeploymentRecommendation:
        """
        Find optimal and risky deployment windows for a repository branch.

        Args:
            history: Run history snapshot
            repository: Repository name
            branch: Branch name (defaults to settings)

        Returns:
            DeploymentRecommendation
        """
        branch = branch or self.default_branch
        runs = [
            run for run in history
            if run.repository_name == repository and run.branch == branch
        ]

        if not runs:
            logger.info("deployment_windows_no_history", repository=repository, branch=branch)
            return DeploymentRecommendation(
                repository=repository,
                branch=branch,
                optimal_windows=[],
                risk_windows=[],
                recommendation="No historical data available for analysis",
                confidence=0.0,
            )

        hours, days = self._bucket(runs)
        optimal = self._optimal_windows(hours, days)
        risky = self._risk_windows(hours, days)

        recommendation = DeploymentRecommendation(
            repository=repository,
            branch=branch,
            optimal_windows=optimal,
            risk_windows=risky,
            recommendation=self.recommendation_text(optimal, risky),
            confidence=self.confidence(len(runs)),
        )

        logger.info(
            "deployment_windows_analyzed",
            repository=repository,
            branch=branch,
            runs=len(runs),
            optimal=len(optimal),
            risky=len(risky),
            confidence=recommendation.confidence,
        )
        return recommendation

    async def analyze_from_store(
        self,
        repository: str,
        branch: Optional[str] = None,
    ) -> DeploymentRecommendation:
        history = await self._load_history()
        return self.analyze(history, repository, branch)

    def should_deploy_now(
        self,
        history: Sequence[PipelineRun],
        repository: str,
        branch: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DeploymentDecision:
        """
        Decide whether deploying at the given moment is advisable.

        Risky windows deny, optimal windows allow, confident history allows,
        and anything else is allowed by default. The default allow is flagged
        on the decision as a permissive fallback.

        Args:
            history: Run history snapshot
            repository: Repository name
            branch: Branch name (defaults to settings)
            now: Moment to evaluate (defaults to current UTC time; naive values
                are read as UTC)

        Returns:
            DeploymentDecision
        """
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)
        recommendation = self.analyze(history, repository, branch)
        day, hour = now.weekday(), now.hour

        in_risky = any(window.contains(day, hour) for window in recommendation.risk_windows)
        in_optimal = any(window.contains(day, hour) for window in recommendation.optimal_windows)
        permissive = False

        if in_risky:
            should_deploy = False
            reason = "Current time is in a high-risk deployment window"
        elif in_optimal:
            should_deploy = True
            reason = "Current time is in an optimal deployment window"
        elif recommendation.confidence > FAVORABLE_CONFIDENCE:
            should_deploy = True
            reason = "Deployment conditions are favorable"
        else:
            should_deploy = True
            permissive = True
            reason = "No historical patterns suggest high risk"
            logger.warning(
                "deployment_permissive_fallback",
                repository=repository,
                branch=recommendation.branch,
                confidence=recommendation.confidence,
            )

        next_optimal = None
        if not should_deploy and recommendation.optimal_windows:
            next_optimal = self.next_optimal_time(recommendation.optimal_windows, now)

        return DeploymentDecision(
            should_deploy=should_deploy,
            confidence=recommendation.confidence,
            reason=reason,
            next_optimal_time=next_optimal,
            alternative_windows=recommendation.optimal_windows[:MAX_ALTERNATIVE_WINDOWS],
            permissive_fallback=permissive,
        )

    async def should_deploy_now_from_store(
        self,
        repository: str,
        branch: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DeploymentDecision:
        history = await self._load_history()
        return self.should_deploy_now(history, repository, branch, now)

    @staticmethod
    def confidence(sample_count: int) -> float:
        if sample_count >= 100:
            return 0.95
        elif sample_count >= 50:
            return 0.85
        elif sample_count >= 30:
            return 0.75
        elif sample_count >= 10:
            return 0.60
        else:
            return 0.40

    @staticmethod
    def next_optimal_time(windows: Sequence[TimeWindow], now: datetime) -> str:
        """
        Describe the next optimal window after now.

        Looks at later hours today, then later days this week, then the
        earliest day next week.
        """
        day, hour = now.weekday(), now.hour

        later_today = [w for w in windows if w.day_of_week == day and w.start_hour > hour]
        if later_today:
            window = min(later_today, key=lambda w: w.start_hour)
            return f"Today at {window.start_hour}:00"

        later_this_week = [w for w in windows if w.day_of_week > day]
        if later_this_week:
            window = min(later_this_week, key=lambda w: w.day_of_week)
            return f"{window.day_name} at {window.start_hour}:00"

        if windows:
            window = min(windows, key=lambda w: w.day_of_week)
            return f"Next {window.day_name} at {window.start_hour}:00"

        return "No optimal time found"

    @staticmethod
    def recommendation_text(
        optimal: Sequence[TimeWindow],
        risky: Sequence[TimeWindow],
    ) -> str:
        lines: list[str] = []

        if optimal:
            lines.append("Best deployment times:")
            lines.extend(
                f"  - {window.label()} ({window.success_rate:.1f}% success)"
                for window in optimal[:3]
            )

        if risky:
            if lines:
                lines.append("")
            lines.append("Avoid deploying during:")
            lines.extend(
                f"  - {window.label()} ({window.success_rate:.1f}% success)"
                for window in risky[:3]
            )

        if not optimal and not risky:
            lines.append("No clear patterns detected. Deploy anytime with caution.")

        return "\n".join(lines)

    def _bucket(self, runs: Sequence[PipelineRun]) -> tuple[dict[int, _Bucket], dict[int, _Bucket]]:
        hours: dict[int, _Bucket] = {}
        days: dict[int, _Bucket] = {}

        for run in runs:
            # Untimed runs still count toward confidence
            if run.started_at is None:
                continue

            failed = run.status == BuildStatus.FAILURE
            for key, buckets in ((run.started_at.hour, hours), (run.started_at.weekday(), days)):
                bucket = buckets.setdefault(key, _Bucket())
                bucket.total += 1
                if failed:
                    bucket.failures += 1

        return hours, days

    def _optimal_windows(
        self,
        hours: dict[int, _Bucket],
        days: dict[int, _Bucket],
    ) -> list[TimeWindow]:
        good_hours = [
            (hour, bucket) for hour, bucket in sorted(hours.items())
            if bucket.success_rate >= 90 and bucket.total >= 5
        ]
        good_days = [
            (day, bucket) for day, bucket in sorted(days.items())
            if bucket.success_rate >= 85 and bucket.total >= 10
        ]

        windows = self._combine(good_days, good_hours, TimeWindowType.OPTIMAL)
        windows.sort(key=lambda window: window.success_rate, reverse=True)
        return windows[:MAX_OPTIMAL_WINDOWS]

    def _risk_windows(
        self,
        hours: dict[int, _Bucket],
        days: dict[int, _Bucket],
    ) -> list[TimeWindow]:
        risky_hours = [
            (hour, bucket) for hour, bucket in sorted(hours.items())
            if bucket.success_rate < 70 and bucket.total >= 3
        ]
        risky_days = [
            (day, bucket) for day, bucket in sorted(days.items())
            if bucket.success_rate < 75 and bucket.total >= 5
        ]

        windows = self._combine(risky_days, risky_hours, TimeWindowType.RISKY)
        windows.sort(key=lambda window: window.success_rate)
        return windows[:MAX_RISK_WINDOWS]

    @staticmethod
    def _combine(
        days: list[tuple[int, _Bucket]],
        hours: list[tuple[int, _Bucket]],
        window_type: TimeWindowType,
    ) -> list[TimeWindow]:
        return [
            TimeWindow(
                day_of_week=day,
                day_name=calendar.day_name[day],
                start_hour=hour,
                end_hour=hour + 1,
                success_rate=(day_bucket.success_rate + hour_bucket.success_rate) / 2,
                type=window_type,
            )
            for day, day_bucket in days
            for hour, hour_bucket in hours
        ]

    async def _load_history(self) -> list[PipelineRun]:
        if self.history_store is None:
            raise ValueError("A history store is required to analyze from store")
        return await self.history_store.list_all()
