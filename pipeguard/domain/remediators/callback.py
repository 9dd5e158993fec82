# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Callback and Unsupported Remediators

Provider-bound actions (rerun, cancel, rollback) need credentials the core
does not own, so integrators supply them as async callables.
"""

from typing import Awaitable, Callable, Optional

from pipeguard.core.config import Settings
from pipeguard.core.enums import ActionType
from pipeguard.core.models.remediation import ActionResult, RemediationAction
from pipeguard.domain.remediators.base import BaseRemediator
from pipeguard.exceptions import ActionExecutionError

ActionCallback = Callable[[RemediationAction], Awaitable[ActionResult]]


class CallbackRemediator(BaseRemediator):
    """
    Remediator delegating to an integrator-supplied coroutine function.

    Exceptions raised by the callback propagate to the orchestrator, which
    records them as failed results. A callback returning anything other than
    an ActionResult raises ActionExecutionError.
    """

    def __init__(
        self,
        action_type: ActionType,
        callback: ActionCallback,
        settings: Optional[Settings] = None,
    ):
        super().__init__(settings)
        self.action_type = action_type
        self.callback = callback

    def get_action_type(self) -> ActionType:
        return self.action_type

    async def execute(self, action: RemediationAction) -> ActionResult:
        self._log_execution_start(action)
        result = await self.callback(action)
        if not isinstance(result, ActionResult):
            raise ActionExecutionError(
                action.id,
                action.type.value,
                f"callback returned {type(result).__name__}, expected ActionResult",
            )
        self._log_execution_complete(action, result)
        return result


class UnsupportedActionRemediator(BaseRemediator):
    """
    Returned for action types nobody registered a remediator for.

    Always yields a failed result without side effects.
    """

    def __init__(self, action_type: ActionType, settings: Optional[Settings] = None):
        super().__init__(settings)
        self.action_type = action_type

    def get_action_type(self) -> ActionType:
        return self.action_type

    async def execute(self, action: RemediationAction) -> ActionResult:
        result = self._create_failure_result(
            action,
            message=f"No remediator registered for action type: {action.type.value}",
            action_type=action.type.value,
        )
        self._log_execution_complete(action, result)
        return result
