# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Auto-Remediation Service

Entry points tying classification, proposal generation, the consent gate
and the orchestrator together. Actions are proposed, never executed, until
a human approves them.
"""

from typing import Optional

import structlog

from pipeguard.adapters.history.base import HistoryStore
from pipeguard.core.config import Settings, get_settings
from pipeguard.core.enums import (
    BuildStatus,
    PredictionRiskLevel,
    is_critical_severity,
)
from pipeguard.core.models.pipeline import PipelineRun
from pipeguard.core.models.remediation import RemediationProposal, RemediationResult
from pipeguard.domain.remediators.base import ActionExecutor
from pipeguard.services.classifier import FailureClassifier
from pipeguard.services.consent import ConsentGate
from pipeguard.services.jobs import BackgroundJobQueue
from pipeguard.services.orchestrator import RemediationOrchestrator
from pipeguard.services.proposals import ProposalGenerator

logger = structlog.get_logger(__name__)

NO_PENDING_MESSAGE = "No pending remediation found"
DECLINED_MESSAGE = "User declined remediation"


class AutoRemediationService:
    """
    Evaluates failed pipelines and executes remediation only with consent.

    Example:
        ```python
        service = AutoRemediationService(history_store=store, executor=executor)
        proposal = await service.evaluate_and_propose(pipeline)
        result = await service.execute_with_consent(pipeline.id, approved=True)
        ```
    """

    def __init__(
        self,
        history_store: HistoryStore,
        executor: ActionExecutor,
        settings: Optional[Settings] = None,
        classifier: Optional[FailureClassifier] = None,
        generator: Optional[ProposalGenerator] = None,
        gate: Optional[ConsentGate] = None,
        orchestrator: Optional[RemediationOrchestrator] = None,
        job_queue: Optional[BackgroundJobQueue] = None,
    ):
        """
        Initialize the service.

        Args:
            history_store: Source of pipeline runs and logs
            executor: Performs individual actions
            settings: Application settings
            classifier: Failure classifier (defaults to the built-in rules)
            generator: Proposal generator
            gate: Consent gate holding pending proposals
            orchestrator: Orchestrator (defaults to one wrapping executor)
            job_queue: Queue used by submit_consent()
        """
        self.settings = settings or get_settings()
        self.history_store = history_store
        self.executor = executor
        self.classifier = classifier or FailureClassifier()
        self.generator = generator or ProposalGenerator()
        self.gate = gate or ConsentGate()
        self.orchestrator = orchestrator or RemediationOrchestrator(executor, settings=self.settings)
        self.job_queue = job_queue

    async def evaluate_and_propose(self, pipeline: PipelineRun) -> Optional[RemediationProposal]:
        """
        Classify a failed pipeline and store a proposal awaiting consent.

        Args:
            pipeline: Pipeline run to evaluate

        Returns:
            The stored proposal, or None when disabled or not a failure
        """
        if not self.settings.auto_remediation_enabled:
            logger.debug("auto_remediation_disabled", pipeline_id=pipeline.id)
            return None

        if pipeline.status != BuildStatus.FAILURE:
            logger.debug(
                "auto_remediation_skipped",
                pipeline_id=pipeline.id,
                status=pipeline.status.value,
            )
            return None

        logger.info(
            "auto_remediation_evaluating",
            pipeline_id=pipeline.id,
            pipeline=pipeline.display_name,
        )

        logs = await self._fetch_logs(pipeline)
        category, rule = self.classifier.classify_with_rule(logs)
        proposal = self.generator.generate(category, pipeline)
        await self.gate.propose(proposal)

        log_method = logger.warning if is_critical_severity(proposal.severity) else logger.info
        log_method(
            "auto_remediation_proposed",
            pipeline_id=pipeline.id,
            category=category.value,
            rule=rule,
            severity=proposal.severity.value,
            manual_only=proposal.is_manual_only(),
        )
        return proposal

    async def execute_with_consent(self, pipeline_id: str, approved: bool) -> RemediationResult:
        """
        Consume the pending proposal and act on the consent decision.

        The proposal is removed whether approved or declined.

        Args:
            pipeline_id: Pipeline identifier
            approved: Human consent decision

        Returns:
            RemediationResult
        """
        proposal = await self.gate.consume(pipeline_id)

        if proposal is None:
            logger.warning("remediation_not_pending", pipeline_id=pipeline_id)
            return RemediationResult.failure(NO_PENDING_MESSAGE)

        if not approved:
            logger.info(
                "remediation_declined",
                pipeline_id=pipeline_id,
                repository=proposal.pipeline.repository_name,
            )
            return RemediationResult.failure(DECLINED_MESSAGE)

        logger.info(
            "remediation_approved",
            pipeline_id=pipeline_id,
            repository=proposal.pipeline.repository_name,
            action_count=len(proposal.actions),
        )
        return await self.orchestrator.execute(proposal.actions)

    def submit_consent(self, pipeline_id: str, approved: bool) -> str:
        """
        Run execute_with_consent on the background job queue.

        Args:
            pipeline_id: Pipeline identifier
            approved: Human consent decision

        Returns:
            Job id

        Raises:
            ValueError: If the service has no job queue
            JobQueueNotRunningError: If the job queue is not started
        """
        if self.job_queue is None:
            raise ValueError("A job queue is required for background consent execution")

        job_id = self.job_queue.submit(
            lambda: self.execute_with_consent(pipeline_id, approved),
            name=f"consent-{pipeline_id}",
        )

        logger.info(
            "remediation_consent_submitted",
            pipeline_id=pipeline_id,
            approved=approved,
            job_id=job_id,
        )
        return job_id

    async def evaluate_by_id(self, pipeline_id: str) -> Optional[RemediationProposal]:
        """ Look up a run in the history store and evaluate it. """
        pipeline = await self.history_store.get_by_id(pipeline_id)
        if pipeline is None:
            logger.warning("pipeline_not_found", pipeline_id=pipeline_id)
            return None
        return await self.evaluate_and_propose(pipeline)

    def handle_high_risk_prediction(
        self,
        pipeline: PipelineRun,
        risk_percentage: float,
    ) -> PredictionRiskLevel:
        """
        Log a predicted failure risk at the matching tier.

        Never executes actions.

        Args:
            pipeline: Pipeline the prediction applies to
            risk_percentage: Predicted failure risk, clamped to [0, 100]

        Returns:
            Risk tier
        """
        risk = max(0.0, min(100.0, float(risk_percentage)))
        level = PredictionRiskLevel.from_percentage(risk)

        context = {
            "pipeline_id": pipeline.id,
            "repository": pipeline.repository_name,
            "risk_percentage": int(risk),
            "risk_level": level.value,
        }

        if level == PredictionRiskLevel.CRITICAL:
            logger.warning("high_risk_prediction", advice="Consider blocking deployment", **context)
        elif level == PredictionRiskLevel.HIGH:
            logger.warning("high_risk_prediction", advice="Increased monitoring recommended", **context)
        elif level == PredictionRiskLevel.MODERATE:
            logger.info("high_risk_prediction", advice="Watch closely", **context)
        else:
            logger.debug("risk_prediction_below_threshold", **context)

        return level

    async def _fetch_logs(self, pipeline: PipelineRun) -> str:
        try:
            return await self.history_store.fetch_logs(pipeline) or ""
        except Exception as e:
            logger.warning("log_fetch_failed", pipeline_id=pipeline.id, error=str(e))
            return ""
