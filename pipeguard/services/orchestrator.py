# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Remediation Orchestrator

Executes an approved action list in order with continue-on-error semantics
and exponential backoff between consecutive reruns.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

import structlog

from pipeguard.core.config import Settings, get_settings
from pipeguard.core.enums import ActionType
from pipeguard.core.models.remediation import (
    ActionResult,
    RemediationAction,
    RemediationResult,
)
from pipeguard.domain.remediators.base import ActionExecutor
from pipeguard.exceptions import PipeGuardException
from pipeguard.utils.retry import calculate_backoff

logger = structlog.get_logger(__name__)

SUCCESS_MESSAGE = "All remediation actions completed successfully"
FAILURE_MESSAGE = "Some remediation actions failed"
MANUAL_ONLY_MESSAGE = "No automated actions to execute; manual intervention required"

Sleeper = Callable[[float], Awaitable[None]]


class RemediationOrchestrator:
    """
    Runs remediation actions sequentially against an action executor.

    - Every action is attempted; a failure never aborts the rest.
    - Executor exceptions are recorded as failed results.
    - After a rerun that is not the last action, waits base * 2^index seconds.
    - A dispatched action is shielded from caller cancellation; only actions
      not yet dispatched are skipped.
    """

    def __init__(
        self,
        executor: ActionExecutor,
        settings: Optional[Settings] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.executor = executor
        self.settings = settings or get_settings()
        self._sleep = sleep

    def backoff_delay(self, index: int) -> float:
        """
        Delay after the rerun at 0-based position index.

        With default settings: 2s after the first, 4s after the second.
        """
        remediation = self.settings.remediation
        return calculate_backoff(
            index,
            base_delay=remediation.backoff_base_seconds,
            max_delay=remediation.backoff_max_seconds,
            jitter=remediation.backoff_jitter,
        )

    async def execute(self, actions: Sequence[RemediationAction]) -> RemediationResult:
        """
        Execute actions in order.

        Args:
            actions: Ordered, approved actions

        Returns:
            RemediationResult whose success is the AND of every action result
        """
        if not actions:
            logger.info("remediation_manual_only")
            return RemediationResult(
                success=True,
                message=MANUAL_ONLY_MESSAGE,
                actions_taken=[],
            )

        results: list[ActionResult] = []
        total = len(actions)

        for index, action in enumerate(actions):
            logger.info(
                "remediation_action_start",
                action_id=action.id,
                action_type=action.type.value,
                position=index + 1,
                total=total,
            )

            result = await self._dispatch(action)
            results.append(result)

            if not result.success:
                logger.warning(
                    "remediation_action_failed",
                    action_id=action.id,
                    message=result.message,
                )

            if action.type == ActionType.RERUN_PIPELINE and index < total - 1:
                delay = self.backoff_delay(index)
                logger.debug("remediation_backoff", action_id=action.id, delay_seconds=delay)
                await self._sleep(delay)

        success = all(result.success for result in results)

        logger.info(
            "remediation_actions_complete",
            success=success,
            total=total,
            failed=sum(1 for result in results if not result.success),
        )

        return RemediationResult(
            success=success,
            message=SUCCESS_MESSAGE if success else FAILURE_MESSAGE,
            actions_taken=results,
        )

    async def _dispatch(self, action: RemediationAction) -> ActionResult:
        task = asyncio.ensure_future(self.executor.execute(action))

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.warning(
                "remediation_caller_cancelled",
                action_id=action.id,
                detail="dispatched action left running",
            )
            task.add_done_callback(lambda t: self._log_detached(action, t))
            raise
        except Exception as e:
            logger.error(
                "remediation_action_error",
                action_id=action.id,
                action_type=action.type.value,
                error=str(e),
                exc_info=True,
            )
            return self._error_result(action, e)

    def _error_result(self, action: RemediationAction, error: Exception) -> ActionResult:
        details = {
            "error": str(error),
            "action_id": action.id,
        }
        if isinstance(error, PipeGuardException):
            details["error_code"] = error.error_code

        return ActionResult(
            success=False,
            message=f"Failed: {error}",
            details=details,
        )

    def _log_detached(self, action: RemediationAction, task: "asyncio.Future[ActionResult]") -> None:
        if task.cancelled():
            logger.warning("remediation_detached_cancelled", action_id=action.id)
            return

        error = task.exception()
        if error is not None:
            logger.error("remediation_detached_failed", action_id=action.id, error=str(error))
        else:
            logger.info(
                "remediation_detached_complete",
                action_id=action.id,
                success=task.result().success,
            )
