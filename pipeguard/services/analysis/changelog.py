# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Changelog Correlation Analyzer

Ranks the commits preceding a failed run by how likely each one caused it.
Scores and root-cause selection are deterministic; a narrative generator may
only rephrase the analysis text.
"""

from typing import Optional, Sequence

import structlog

from pipeguard.adapters.ai.base import NarrativeGenerator, generate_with_fallback
from pipeguard.adapters.ai.prompts import build_changelog_analysis_prompt
from pipeguard.adapters.history.base import HistoryStore
from pipeguard.core.enums import BuildStatus
from pipeguard.core.models.analysis import ChangelogAnalysis, SuspiciousCommit
from pipeguard.core.models.pipeline import Commit, PipelineRun

logger = structlog.get_logger(__name__)

SUSPICION_THRESHOLD = 30.0
MAX_SIMILAR_FAILURES = 5

CONFIG_EXTENSIONS = (".yml", ".yaml", ".json", ".properties")
DEPENDENCY_MANIFESTS = ("package.json", "build.gradle", "pom.xml", "requirements.txt")

# Narrower sets that are reported as reasons
REASON_CONFIG_EXTENSIONS = (".yml", ".yaml")
REASON_DEPENDENCY_MANIFESTS = ("package.json", "build.gradle")

# (markers, score delta)
MESSAGE_FACTORS: list[tuple[tuple[str, ...], float]] = [
    (("refactor",), 10.0),
    (("experimental",), 20.0),
    (("wip", "work in progress"), 25.0),
    (("fix",), -5.0),
    (("typo",), -10.0),
]


def _touches(commit: Commit, manifests: tuple[str, ...]) -> bool:
    return any(manifest in path for path in commit.files for manifest in manifests)


class ChangelogAnalyzer:

    def __init__(
        self,
        history_store: Optional[HistoryStore] = None,
        narrative: Optional[NarrativeGenerator] = None,
    ):
        self.history_store = history_store
        self.narrative = narrative

    async def analyze(
        self,
        pipeline: PipelineRun,
        commits: Sequence[Commit],
    ) -> ChangelogAnalysis:
        """
        Correlate candidate commits with a failed pipeline.

        Args:
            pipeline: Failed pipeline run
            commits: Commits that landed before the run

        Returns:
            ChangelogAnalysis read-model
        """
        if not commits:
            logger.info("changelog_no_commits", pipeline_id=pipeline.id)
            return ChangelogAnalysis(
                pipeline=pipeline,
                commits=[],
                suspicious_commits=[],
                root_cause_commit=None,
                confidence=0.0,
                analysis="No commits to analyze",
                recommendation="Check if commit data is available",
            )

        commits = list(commits)
        suspicious = self.find_suspicious(commits, pipeline)
        root_cause = suspicious[0] if suspicious else None
        similar_failures = await self._count_similar_failures(pipeline)

        template = self.template_analysis(suspicious)
        analysis = await generate_with_fallback(
            self.narrative,
            build_changelog_analysis_prompt(pipeline, commits),
            template,
        )

        result = ChangelogAnalysis(
            pipeline=pipeline,
            commits=commits,
            suspicious_commits=suspicious,
            root_cause_commit=root_cause,
            confidence=self.confidence(suspicious, root_cause),
            analysis=analysis,
            recommendation=self.recommendation(root_cause, suspicious),
            similar_failures=similar_failures,
        )

        logger.info(
            "changelog_analyzed",
            pipeline_id=pipeline.id,
            commits=len(commits),
            suspicious=len(suspicious),
            root_cause=root_cause.commit.short_sha if root_cause else None,
            confidence=result.confidence,
        )
        return result

    def find_suspicious(
        self,
        commits: Sequence[Commit],
        pipeline: PipelineRun,
    ) -> list[SuspiciousCommit]:
        """
        Score commits and keep those at or above the threshold.

        Sorted by descending score; ties keep input order.
        """
        suspicious = []
        for commit in commits:
            score, reasons = self.score_commit(commit, pipeline)
            if score >= SUSPICION_THRESHOLD:
                suspicious.append(SuspiciousCommit(commit=commit, suspicion_score=score, reasons=reasons))

        suspicious.sort(key=lambda s: s.suspicion_score, reverse=True)
        return suspicious

    def score_commit(self, commit: Commit, pipeline: PipelineRun) -> tuple[float, list[str]]:
        """
        Compute the suspicion score of one commit.

        Recency, "experimental" and the wider file sets move the score but
        are not reported as reasons.

        Args:
            commit: Commit to score
            pipeline: Failed pipeline run

        Returns:
            Tuple of (score clamped to [0, 100], reasons)
        """
        score = 0.0

        if commit.files_changed > 10:
            score += 20.0
        if commit.total_lines_changed > 500:
            score += 15.0

        # Recency is unknown without a start time
        if pipeline.started_at is not None:
            hours = int((pipeline.started_at - commit.timestamp).total_seconds() / 3600)
            if hours < 1:
                score += 30.0
            elif hours < 24:
                score += 15.0

        message = commit.message.lower()
        for markers, delta in MESSAGE_FACTORS:
            if any(marker in message for marker in markers):
                score += delta

        if any(path.endswith(CONFIG_EXTENSIONS) for path in commit.files):
            score += 15.0
        if _touches(commit, DEPENDENCY_MANIFESTS):
            score += 20.0

        return max(0.0, min(100.0, score)), self.suspicion_reasons(commit)

    @staticmethod
    def suspicion_reasons(commit: Commit) -> list[str]:
        reasons = []

        if commit.files_changed > 10:
            reasons.append(f"Large commit ({commit.files_changed} files changed)")
        if commit.total_lines_changed > 500:
            reasons.append(f"Significant code changes (+{commit.lines_added} / -{commit.lines_deleted})")

        message = commit.message.lower()
        if "wip" in message:
            reasons.append("Work in progress commit")
        if "refactor" in message:
            reasons.append("Code refactoring")

        if any(path.endswith(REASON_CONFIG_EXTENSIONS) for path in commit.files):
            reasons.append("Configuration file changes")
        if _touches(commit, REASON_DEPENDENCY_MANIFESTS):
            reasons.append("Dependency updates")

        return reasons

    @staticmethod
    def confidence(
        suspicious: Sequence[SuspiciousCommit],
        root_cause: Optional[SuspiciousCommit],
    ) -> float:
        if not suspicious:
            return 0.0
        if root_cause is None:
            return 0.3

        score_confidence = root_cause.suspicion_score / 100.0
        reasons_confidence = min(1.0, len(root_cause.reasons) / 5.0)
        return max(0.0, min(1.0, (score_confidence + reasons_confidence) / 2))

    @staticmethod
    def template_analysis(suspicious: Sequence[SuspiciousCommit]) -> str:
        if not suspicious:
            return "No suspicious commits identified. The failure may be due to external factors."

        top = suspicious[0]
        lines = [
            "Most likely cause:",
            f"Commit: {top.commit.message}",
            f"By: {top.commit.author}",
            "",
            "Suspicion factors:",
        ]
        lines.extend(f"- {reason}" for reason in top.reasons)
        return "\n".join(lines)

    @staticmethod
    def recommendation(
        root_cause: Optional[SuspiciousCommit],
        suspicious: Sequence[SuspiciousCommit],
    ) -> str:
        if root_cause is None:
            return "Review recent changes and check for external factors like infrastructure issues."

        files = ", ".join(root_cause.commit.files[:3]) or "(no file list)"
        lines = [
            "Recommended actions:",
            f"1. Review commit: {root_cause.commit.short_sha}",
            f"2. Check files: {files}",
            "3. Consider reverting if issue persists",
        ]
        if len(suspicious) > 1:
            lines.append(f"4. Also review {len(suspicious) - 1} other suspicious commits")
        return "\n".join(lines)

    async def _count_similar_failures(self, pipeline: PipelineRun) -> int:
        if self.history_store is None:
            return 0

        try:
            history = await self.history_store.list_all()
        except Exception as e:
            logger.warning("changelog_history_unavailable", pipeline_id=pipeline.id, error=str(e))
            return 0

        similar = [
            run for run in history
            if run.id != pipeline.id
            and run.status == BuildStatus.FAILURE
            and run.repository_name == pipeline.repository_name
            and run.branch == pipeline.branch
        ]
        return len(similar[:MAX_SIMILAR_FAILURES])
