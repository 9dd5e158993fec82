# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Flaky Test Detector

Scores each repository/branch run history for instability. Groups with too
few runs are skipped rather than scored on weak evidence.
"""

from typing import Optional, Sequence

import structlog

from pipeguard.adapters.history.base import HistoryStore
from pipeguard.core.config import Settings, get_settings
from pipeguard.core.enums import BuildStatus, PatternType
from pipeguard.core.models.analysis import FlakinessPattern, FlakyTestReport
from pipeguard.core.models.pipeline import PipelineRun
from pipeguard.services.analysis.common import group_runs, sort_by_start

logger = structlog.get_logger(__name__)

FLAKINESS_THRESHOLD = 40.0
ALTERNATION_THRESHOLD = 0.6
ENVIRONMENT_THRESHOLD = 0.7
MIN_ALTERNATING_RUNS = 4
MIN_INTERMITTENT_RUNS = 5


class FlakyTestDetector:

    def __init__(
        self,
        history_store: Optional[HistoryStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.history_store = history_store
        self.min_runs = (settings or get_settings()).analysis.flaky_min_runs

    def detect(
        self,
        history: Sequence[PipelineRun],
        repository: Optional[str] = None,
        min_runs: Optional[int] = None,
        include_stable: bool = False,
    ) -> list[FlakyTestReport]:
        """
        Detect flaky repository/branch groups.

        Args:
            history: Run history snapshot
            repository: Only analyze this repository
            min_runs: Minimum runs per group (defaults to settings)
            include_stable: Also return groups that are not flaky

        Returns:
            Reports sorted by descending flakiness score
        """
        min_runs = min_runs if min_runs is not None else self.min_runs

        runs = [
            run for run in history
            if repository is None or run.repository_name == repository
        ]
        groups = group_runs(runs, key=lambda run: (run.repository_name, run.branch))

        reports = []
        for (repo, branch), group in groups.items():
            if len(group) < min_runs:
                logger.debug(
                    "flaky_group_skipped",
                    repository=repo,
                    branch=branch,
                    runs=len(group),
                    min_runs=min_runs,
                )
                continue

            report = self.analyze_group(repo, branch, group)
            if report.is_flaky or include_stable:
                reports.append(report)

        reports.sort(key=lambda report: report.flakiness_score, reverse=True)

        logger.info(
            "flaky_detection_complete",
            repository=repository,
            groups=len(groups),
            reported=len(reports),
        )
        return reports

    async def detect_from_store(
        self,
        repository: Optional[str] = None,
        min_runs: Optional[int] = None,
        include_stable: bool = False,
    ) -> list[FlakyTestReport]:
        if self.history_store is None:
            raise ValueError("A history store is required to detect from store")

        history = await self.history_store.list_all()
        return self.detect(history, repository, min_runs, include_stable)

    def analyze_group(
        self,
        repository: str,
        branch: str,
        runs: Sequence[PipelineRun],
    ) -> FlakyTestReport:
        """
        Score a single repository/branch group.

        Args:
            repository: Repository name
            branch: Branch name
            runs: Runs of the group, any order

        Returns:
            FlakyTestReport
        """
        ordered = sort_by_start(runs)
        statuses = [run.status for run in ordered]

        total = len(ordered)
        failures = sum(1 for status in statuses if status == BuildStatus.FAILURE)
        successes = sum(1 for status in statuses if status == BuildStatus.SUCCESS)
        failure_rate = failures / total if total else 0.0

        alternation_rate = self.alternation_rate(statuses)
        has_alternating = (
            total >= MIN_ALTERNATING_RUNS and alternation_rate > ALTERNATION_THRESHOLD
        )

        intermittent_count = self.intermittent_failures(statuses)
        has_intermittent = total >= MIN_INTERMITTENT_RUNS and intermittent_count >= 2

        longest_streak = self.longest_streak(statuses)

        score = self.flakiness_score(failure_rate, has_alternating, has_intermittent, longest_streak)

        patterns = []
        if has_alternating:
            patterns.append(FlakinessPattern(
                type=PatternType.ALTERNATING,
                description=f"Status changed on {alternation_rate:.0%} of consecutive runs",
                confidence=alternation_rate,
            ))
        if has_intermittent:
            patterns.append(FlakinessPattern(
                type=PatternType.INTERMITTENT,
                description=f"{intermittent_count} isolated failures between successful runs",
                confidence=min(1.0, intermittent_count / max(failures, 1)),
            ))
        environment = self._environment_pattern(ordered, failures)
        if environment is not None:
            patterns.append(environment)

        last_failure = None
        for run in reversed(ordered):
            if run.status == BuildStatus.FAILURE:
                last_failure = run.finished_at
                break

        return FlakyTestReport(
            repository=repository,
            branch=branch,
            total_runs=total,
            failures=failures,
            successes=successes,
            failure_rate=failure_rate,
            flakiness_score=score,
            is_flaky=score >= FLAKINESS_THRESHOLD,
            confidence=self.confidence(total, score),
            patterns=patterns,
            recommendation=self.recommendation(score),
            last_failure=last_failure,
        )

    @staticmethod
    def alternation_rate(statuses: Sequence[BuildStatus]) -> float:
        """ Fraction of adjacent pairs whose status differs. """
        if len(statuses) < 2:
            return 0.0
        changes = sum(1 for current, following in zip(statuses, statuses[1:]) if current != following)
        return changes / (len(statuses) - 1)

    @staticmethod
    def intermittent_failures(statuses: Sequence[BuildStatus]) -> int:
        """ Count failures with a success immediately before and after. """
        count = 0
        for index in range(1, len(statuses) - 1):
            if (
                statuses[index] == BuildStatus.FAILURE
                and statuses[index - 1] == BuildStatus.SUCCESS
                and statuses[index + 1] == BuildStatus.SUCCESS
            ):
                count += 1
        return count

    @staticmethod
    def longest_streak(statuses: Sequence[BuildStatus]) -> int:
        """ Length of the longest run of identical consecutive statuses. """
        if not statuses:
            return 0

        longest = current = 1
        for previous, status in zip(statuses, statuses[1:]):
            current = current + 1 if status == previous else 1
            longest = max(longest, current)
        return longest

    @staticmethod
    def flakiness_score(
        failure_rate: float,
        has_alternating: bool,
        has_intermittent: bool,
        longest_streak: int,
    ) -> float:
        score = 0.0

        # Failure rate in the unstable band
        if 0.1 <= failure_rate <= 0.9:
            score += 40.0
        if has_alternating:
            score += 30.0
        if has_intermittent:
            score += 20.0
        if longest_streak < 3:
            score += 10.0

        return max(0.0, min(100.0, score))

    @staticmethod
    def confidence(total_runs: int, score: float) -> float:
        if total_runs >= 50:
            sample_confidence = 0.95
        elif total_runs >= 30:
            sample_confidence = 0.85
        elif total_runs >= 20:
            sample_confidence = 0.75
        elif total_runs >= 10:
            sample_confidence = 0.65
        else:
            sample_confidence = 0.50

        return (sample_confidence + score / 100.0) / 2

    @staticmethod
    def recommendation(score: float) -> str:
        if score >= 80:
            return "CRITICAL: Quarantine this test immediately. It's highly unreliable."
        elif score >= 60:
            return "HIGH: Investigate and fix this test. Consider retrying logic."
        elif score >= 40:
            return "MEDIUM: Monitor closely. May need stabilization."
        else:
            return "LOW: Test appears stable but shows some variation."

    def _environment_pattern(
        self,
        runs: Sequence[PipelineRun],
        failures: int,
    ) -> Optional[FlakinessPattern]:
        if failures == 0:
            return None

        by_provider = group_runs(
            (run for run in runs if run.status == BuildStatus.FAILURE),
            key=lambda run: run.provider,
        )
        for provider, provider_failures in by_provider.items():
            share = len(provider_failures) / failures
            if share > ENVIRONMENT_THRESHOLD:
                return FlakinessPattern(
                    type=PatternType.ENVIRONMENT,
                    description=f"Failures concentrated on {provider.display_name}",
                    confidence=share,
                )
        return None
