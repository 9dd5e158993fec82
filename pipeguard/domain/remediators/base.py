# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Base Remediator Abstract Class

Defines the executor interface the orchestrator dispatches to, and the base
class for remediators that each handle one action type.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pipeguard.core.config import Settings, get_settings
from pipeguard.core.enums import ActionType
from pipeguard.core.models.remediation import ActionResult, RemediationAction
from pipeguard.exceptions import InvalidActionParametersError
from pipeguard.utils.logging import get_logger

logger = get_logger(__name__)


class ActionExecutor(ABC):
    """
    Performs one remediation action against a CI provider or notifier.

    Must be safe to call repeatedly for rerun actions; the orchestrator may
    dispatch the same rerun more than once.
    """

    @abstractmethod
    async def execute(self, action: RemediationAction) -> ActionResult:
        """
        Execute a single action.

        Args:
            action: Action to perform

        Returns:
            ActionResult describing the outcome
        """
        pass


class BaseRemediator(ABC):
    """
    Abstract base class for all remediators.

    Subclasses must implement:
    - get_action_type(): Return the action type this remediator handles
    - execute(): Perform the actual remediation

    Optional overrides:
    - required_parameters: Parameter names checked by validate_parameters()

    Example:
        ```python
        class SlackWebhookRemediator(BaseRemediator):
            def get_action_type(self) -> ActionType:
                return ActionType.NOTIFY_SLACK

            async def execute(self, action: RemediationAction) -> ActionResult:
                ...
        ```
    """

    required_parameters: tuple[str, ...] = ()

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize remediator.

        Args:
            settings: Application settings (injected dependency)
        """
        self.settings = settings or get_settings()
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    def get_action_type(self) -> ActionType:
        """
        Get the action type this remediator handles.

        Returns:
            ActionType enum value
        """
        pass

    @abstractmethod
    async def execute(self, action: RemediationAction) -> ActionResult:
        """
        Execute the remediation action.

        Args:
            action: Action with its parameters

        Returns:
            ActionResult with outcome and details
        """
        pass

    def validate_parameters(self, action: RemediationAction) -> None:
        """
        Check that every required parameter is present and non-empty.

        Args:
            action: Action to validate

        Raises:
            InvalidActionParametersError: If parameters are missing
        """
        missing = [
            name for name in self.required_parameters
            if not action.get_parameter(name)
        ]
        if missing:
            raise InvalidActionParametersError(action.id, missing)

    def can_handle(self, action: RemediationAction) -> bool:
        return action.type == self.get_action_type()

    def _create_success_result(
        self,
        action: RemediationAction,
        message: str,
        **details: Any,
    ) -> ActionResult:
        """
        Helper to create a successful action result.

        Args:
            action: Executed action
            message: Success message
            **details: Additional details

        Returns:
            ActionResult indicating success
        """
        return ActionResult(
            success=True,
            message=message,
            details={"action_id": action.id, **details},
        )

    def _create_failure_result(
        self,
        action: RemediationAction,
        message: str,
        error_message: Optional[str] = None,
        **details: Any,
    ) -> ActionResult:
        """
        Helper to create a failed action result.

        Args:
            action: Action that failed
            message: Failure message
            error_message: Detailed error message
            **details: Additional details

        Returns:
            ActionResult indicating failure
        """
        result_details = {"action_id": action.id, **details}
        if error_message:
            result_details["error"] = error_message

        return ActionResult(
            success=False,
            message=message,
            details=result_details,
        )

    def _log_execution_start(self, action: RemediationAction) -> None:
        self.logger.info(
            "remediation_execution_start",
            action_id=action.id,
            action_type=action.type.value,
            pipeline_id=action.pipeline.id,
            parameters=action.parameters,
        )

    def _log_execution_complete(
        self,
        action: RemediationAction,
        result: ActionResult,
    ) -> None:
        log_level = "info" if result.success else "error"
        log_method = getattr(self.logger, log_level)

        log_method(
            "remediation_execution_complete",
            action_id=action.id,
            action_type=action.type.value,
            success=result.success,
            message=result.message,
        )

    async def __call__(self, action: RemediationAction) -> ActionResult:
        """
        Make remediator callable.

        Allows using: result = await remediator(action)
        """
        return await self.execute(action)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.get_action_type().value})"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} action_type={self.get_action_type().value}>"
