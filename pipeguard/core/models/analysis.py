# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Read-models produced by the historical analyzers.

These are computed on demand from history snapshots and never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pipeguard.core.enums import CascadeRiskLevel, PatternType, TimeWindowType
from pipeguard.core.models.pipeline import Commit, PipelineRun

@dataclass
class CascadeRisk:
    """ Estimated downstream impact of one failed pipeline. """
    pipeline: PipelineRun
    risk_level: CascadeRiskLevel
    affected_pipelines: list[PipelineRun] = field(default_factory=list)
    affected_count: int = 0
    critical_count: int = 0
    recommendations: list[str] = field(default_factory=list)
    estimated_impact_minutes: int = 0

    def to_dict(self) -> dict:
        return {
            "pipeline_id": self.pipeline.id,
            "risk_level": self.risk_level.value,
            "affected_pipeline_ids": [p.id for p in self.affected_pipelines],
            "affected_count": self.affected_count,
            "critical_count": self.critical_count,
            "recommendations": self.recommendations,
            "estimated_impact_minutes": self.estimated_impact_minutes,
        }

@dataclass
class FlakinessPattern:
    type: PatternType
    description: str
    confidence: float

@dataclass
class FlakyTestReport:
    """ Stability analysis of one repository/branch run history. """
    repository: str
    branch: str
    total_runs: int
    failures: int
    successes: int
    failure_rate: float
    flakiness_score: float
    is_flaky: bool
    confidence: float
    patterns: list[FlakinessPattern] = field(default_factory=list)
    recommendation: str = ""
    last_failure: Optional[datetime] = None

    def to_dict(self) -> dict:
        """ Convert to dictionary. """
        return {
            "repository": self.repository,
            "branch": self.branch,
            "total_runs": self.total_runs,
            "failures": self.failures,
            "successes": self.successes,
            "failure_rate": self.failure_rate,
            "flakiness_score": self.flakiness_score,
            "is_flaky": self.is_flaky,
            "confidence": self.confidence,
            "patterns": [
                {"type": p.type.value, "description": p.description, "confidence": p.confidence}
                for p in self.patterns
            ],
            "recommendation": self.recommendation,
            "last_failure": self.last_failure.isoformat() if self.last_failure else None,
        }

@dataclass
class SuspiciousCommit:
    commit: Commit
    suspicion_score: float
    reasons: list[str] = field(default_factory=list)

@dataclass
class ChangelogAnalysis:
    """ Correlation of recent commits with a pipeline failure. """
    pipeline: PipelineRun
    commits: list[Commit]
    suspicious_commits: list[SuspiciousCommit]
    root_cause_commit: Optional[SuspiciousCommit]
    confidence: float
    analysis: str
    recommendation: str
    similar_failures: int = 0

    def to_dict(self) -> dict:
        """ Convert to dictionary """
        root = self.root_cause_commit
        return {
            "pipeline_id": self.pipeline.id,
            "commit_count": len(self.commits),
            "suspicious_commits": [
                {
                    "sha": s.commit.sha,
                    "suspicion_score": s.suspicion_score,
                    "reasons": s.reasons,
                }
                for s in self.suspicious_commits
            ],
            "root_cause_sha": root.commit.sha if root else None,
            "confidence": self.confidence,
            "analysis": self.analysis,
            "recommendation": self.recommendation,
            "similar_failures": self.similar_failures,
        }

@dataclass
class TimeWindow:
    """ A recurring one-hour slot on a given weekday. """
    day_of_week: int
    day_name: str
    start_hour: int
    end_hour: int
    success_rate: float
    type: TimeWindowType

    def contains(self, day_of_week: int, hour: int) -> bool:
        """ Check if a weekday/hour falls inside this window """
        return (
            day_of_week == self.day_of_week
            and self.start_hour <= hour < self.end_hour
        )

    def label(self) -> str:
        return f"{self.day_name} {self.start_hour}:00-{self.end_hour}:00"

@dataclass
class DeploymentRecommendation:
    repository: str
    branch: str
    optimal_windows: list[TimeWindow] = field(default_factory=list)
    risk_windows: list[TimeWindow] = field(default_factory=list)
    recommendation: str = ""
    confidence: float = 0.0

@dataclass
class DeploymentDecision:
    """ Whether to deploy right now, and why. """
    should_deploy: bool
    confidence: float
    reason: str
    next_optimal_time: Optional[str] = None
    alternative_windows: list[TimeWindow] = field(default_factory=list)
    permissive_fallback: bool = False
