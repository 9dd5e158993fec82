# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Cascade Risk Analyzer

Estimates how a failed run affects pipelines still running after it in the
same repository.
"""

from datetime import timedelta
from typing import Optional, Sequence

import structlog

from pipeguard.adapters.history.base import HistoryStore
from pipeguard.core.enums import BuildStatus, CascadeRiskLevel
from pipeguard.core.models.analysis import CascadeRisk
from pipeguard.core.models.pipeline import PipelineRun
from pipeguard.services.analysis.common import start_key

logger = structlog.get_logger(__name__)

DEFAULT_DURATION = timedelta(minutes=5)

CASCADE_RECOMMENDATIONS: dict[CascadeRiskLevel, list[str]] = {
    CascadeRiskLevel.CRITICAL: [
        "Cancel downstream pipelines immediately",
        "Block production deployments",
        "Notify team leads and stakeholders",
        "Prepare rollback plan",
    ],
    CascadeRiskLevel.HIGH: [
        "Pause downstream builds",
        "Investigate root cause before proceeding",
        "Review impact on dependent services",
    ],
    CascadeRiskLevel.MEDIUM: [
        "Monitor downstream builds closely",
        "Consider pausing non-critical deployments",
    ],
    CascadeRiskLevel.LOW: [
        "Document failure for future reference",
        "Safe to continue with caution",
    ],
    CascadeRiskLevel.NONE: [
        "No downstream impact detected",
    ],
}


class CascadeRiskAnalyzer:

    def __init__(self, history_store: Optional[HistoryStore] = None):
        self.history_store = history_store

    def analyze(self, pipeline: PipelineRun, history: Sequence[PipelineRun]) -> CascadeRisk:
        """
        Analyze cascade risk against a history snapshot.

        Args:
            pipeline: Failed pipeline run
            history: All known runs

        Returns:
            CascadeRisk read-model
        """
        downstream = self.find_downstream(pipeline, history)
        critical = [run for run in downstream if run.is_protected_branch()]
        risk_level = self._risk_level(len(downstream), len(critical))

        risk = CascadeRisk(
            pipeline=pipeline,
            risk_level=risk_level,
            affected_pipelines=downstream,
            affected_count=len(downstream),
            critical_count=len(critical),
            recommendations=list(CASCADE_RECOMMENDATIONS[risk_level]),
            estimated_impact_minutes=self.estimate_impact_minutes(downstream),
        )

        logger.info(
            "cascade_risk_analyzed",
            pipeline_id=pipeline.id,
            risk_level=risk_level.value,
            affected_count=risk.affected_count,
            critical_count=risk.critical_count,
        )
        return risk

    async def analyze_from_store(self, pipeline: PipelineRun) -> CascadeRisk:
        """ Analyze using a fresh snapshot from the history store. """
        if self.history_store is None:
            raise ValueError("A history store is required to analyze from store")

        history = await self.history_store.list_all()
        return self.analyze(pipeline, history)

    def find_downstream(
        self,
        pipeline: PipelineRun,
        history: Sequence[PipelineRun],
    ) -> list[PipelineRun]:
        """
        Runs in the same repository that started later and are still running.
        """
        failed_start = start_key(pipeline)
        return [
            run for run in history
            if run.repository_name == pipeline.repository_name
            and start_key(run) > failed_start
            and run.status == BuildStatus.RUNNING
        ]

    def estimate_impact_minutes(self, downstream: Sequence[PipelineRun]) -> int:
        """ Sum of whole minutes of each downstream duration, 5 minutes if unknown. """
        total = 0
        for run in downstream:
            duration = run.duration if run.duration is not None else DEFAULT_DURATION
            total += int(duration.total_seconds() // 60)
        return total

    def is_blocking(self, pipeline: PipelineRun, history: Sequence[PipelineRun]) -> bool:
        risk = self.analyze(pipeline, history)
        return risk.risk_level in (CascadeRiskLevel.CRITICAL, CascadeRiskLevel.HIGH)

    def blocked_pipelines(
        self,
        pipeline: PipelineRun,
        history: Sequence[PipelineRun],
    ) -> list[PipelineRun]:
        return self.analyze(pipeline, history).affected_pipelines

    def _risk_level(self, affected_count: int, critical_count: int) -> CascadeRiskLevel:
        if critical_count > 0:
            return CascadeRiskLevel.CRITICAL
        elif affected_count > 5:
            return CascadeRiskLevel.HIGH
        elif affected_count > 2:
            return CascadeRiskLevel.MEDIUM
        elif affected_count > 0:
            return CascadeRiskLevel.LOW
        else:
            return CascadeRiskLevel.NONE
