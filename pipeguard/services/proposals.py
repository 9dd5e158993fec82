# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Proposal Generator

Turns a failure category into a fixed remediation proposal. Pure: no I/O
and no failure modes. Every generated action requires confirmation.
"""

from typing import Callable, Optional

import structlog

from pipeguard.core.enums import ActionType, FailureCategory, RemediationSeverity
from pipeguard.core.models.pipeline import PipelineRun
from pipeguard.core.models.remediation import RemediationAction, RemediationProposal

logger = structlog.get_logger(__name__)

MAX_AUTO_RETRIES = 3
TIMEOUT_RETRIES = 2


class ProposalGenerator:

    def __init__(self):
        self._templates: dict[FailureCategory, Callable[[PipelineRun], RemediationProposal]] = {
            FailureCategory.TRANSIENT: self._propose_transient,
            FailureCategory.TIMEOUT: self._propose_timeout,
            FailureCategory.FLAKY_TEST: self._propose_flaky_test,
            FailureCategory.DEPLOYMENT: self._propose_deployment,
            FailureCategory.RESOURCE_LIMIT: self._propose_resource_limit,
            FailureCategory.PERMANENT: self._propose_permanent,
            FailureCategory.UNKNOWN: self._propose_unknown,
        }

    def generate(self, category: FailureCategory, pipeline: PipelineRun) -> RemediationProposal:
        """
        Build the proposal for a failure category.

        Args:
            category: Classified failure category
            pipeline: Failed pipeline run

        Returns:
            RemediationProposal awaiting consent
        """
        template = self._templates.get(category, self._propose_unknown)
        proposal = template(pipeline)

        logger.info(
            "remediation_proposal_generated",
            pipeline_id=pipeline.id,
            category=category.value,
            action_count=len(proposal.actions),
            severity=proposal.severity.value,
            confidence=proposal.confidence,
        )
        return proposal

    def _rerun_action(
        self,
        action_id: str,
        pipeline: PipelineRun,
        description: str,
        reason: str,
        attempt: Optional[int] = None,
    ) -> RemediationAction:
        parameters = {"auto_retry": "true"}
        if attempt is not None:
            parameters["attempt"] = str(attempt)
        parameters["reason"] = reason

        return RemediationAction(
            id=action_id,
            type=ActionType.RERUN_PIPELINE,
            pipeline=pipeline,
            description=description,
            requires_confirmation=True,
            parameters=parameters,
        )

    def _propose_transient(self, pipeline: PipelineRun) -> RemediationProposal:
        actions = [
            self._rerun_action(
                f"auto-retry-{pipeline.id}-{attempt}",
                pipeline,
                f"Retry build (attempt {attempt}/{MAX_AUTO_RETRIES}) - Transient failure detected",
                "Transient network/service failure",
                attempt=attempt,
            )
            for attempt in range(1, MAX_AUTO_RETRIES + 1)
        ]

        return RemediationProposal(
            pipeline=pipeline,
            category=FailureCategory.TRANSIENT,
            failure_type="Transient Failure",
            reason="Network or service temporarily unavailable. Retrying may resolve the issue.",
            actions=tuple(actions),
            severity=RemediationSeverity.LOW,
            confidence=0.85,
            estimated_time="2-5 minutes",
        )

    def _propose_timeout(self, pipeline: PipelineRun) -> RemediationProposal:
        actions = [
            self._rerun_action(
                f"timeout-retry-{pipeline.id}-{attempt}",
                pipeline,
                f"Retry build with extended timeout (attempt {attempt}/{TIMEOUT_RETRIES})",
                "Timeout - may succeed on retry",
                attempt=attempt,
            )
            for attempt in range(1, TIMEOUT_RETRIES + 1)
        ]

        return RemediationProposal(
            pipeline=pipeline,
            category=FailureCategory.TIMEOUT,
            failure_type="Timeout",
            reason="Build timed out. The issue may be transient or the build may need optimization.",
            actions=tuple(actions),
            severity=RemediationSeverity.MEDIUM,
            confidence=0.60,
            estimated_time="5-15 minutes",
        )

    def _propose_flaky_test(self, pipeline: PipelineRun) -> RemediationProposal:
        action = self._rerun_action(
            f"flaky-retry-{pipeline.id}",
            pipeline,
            "Re-run flaky tests",
            "Flaky test detected",
        )

        return RemediationProposal(
            pipeline=pipeline,
            category=FailureCategory.FLAKY_TEST,
            failure_type="Flaky Test",
            reason="Intermittent test failure detected. Re-running may pass the build.",
            actions=(action,),
            severity=RemediationSeverity.LOW,
            confidence=0.70,
            estimated_time="1-3 minutes",
        )

    def _propose_deployment(self, pipeline: PipelineRun) -> RemediationProposal:
        action = RemediationAction(
            id=f"rollback-{pipeline.id}",
            type=ActionType.ROLLBACK_DEPLOYMENT,
            pipeline=pipeline,
            description="Rollback to last successful deployment",
            requires_confirmation=True,
            parameters={"reason": "Deployment failure - rollback recommended"},
        )

        return RemediationProposal(
            pipeline=pipeline,
            category=FailureCategory.DEPLOYMENT,
            failure_type="Deployment Failure",
            reason=(
                "Deployment failed. Rolling back to the last stable version is "
                "recommended to restore service."
            ),
            actions=(action,),
            severity=RemediationSeverity.CRITICAL,
            confidence=0.95,
            estimated_time="3-10 minutes",
            warning="This will revert your deployment to the previous version",
        )

    def _propose_resource_limit(self, pipeline: PipelineRun) -> RemediationProposal:
        return RemediationProposal(
            pipeline=pipeline,
            category=FailureCategory.RESOURCE_LIMIT,
            failure_type="Resource Limit",
            reason=(
                "Build failed due to resource limits (memory/disk). Manual "
                "configuration changes may be required."
            ),
            actions=(),
            severity=RemediationSeverity.HIGH,
            confidence=0.90,
            estimated_time="Manual intervention required",
            warning=(
                "This requires infrastructure changes. Consider:\n"
                "- Increasing memory allocation\n"
                "- Adding disk space\n"
                "- Optimizing resource usage"
            ),
        )

    def _propose_permanent(self, pipeline: PipelineRun) -> RemediationProposal:
        return RemediationProposal(
            pipeline=pipeline,
            category=FailureCategory.PERMANENT,
            failure_type="Permanent Failure",
            reason="Build failed due to compilation or code errors. Code changes required to fix.",
            actions=(),
            severity=RemediationSeverity.HIGH,
            confidence=0.95,
            estimated_time="Requires code fix",
            warning="Auto-remediation not possible. Please review and fix the code errors.",
        )

    def _propose_unknown(self, pipeline: PipelineRun) -> RemediationProposal:
        action = self._rerun_action(
            f"unknown-retry-{pipeline.id}",
            pipeline,
            "Retry build (unknown failure type)",
            "Unknown failure - conservative retry",
        )

        return RemediationProposal(
            pipeline=pipeline,
            category=FailureCategory.UNKNOWN,
            failure_type="Unknown",
            reason=(
                "Unable to classify failure type. A single retry may help if "
                "the issue was transient."
            ),
            actions=(action,),
            severity=RemediationSeverity.MEDIUM,
            confidence=0.50,
            estimated_time="2-5 minutes",
        )
