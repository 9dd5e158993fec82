# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Remediator Factory

Factory for creating remediator instances based on action type, and the
action executor that dispatches through it.
"""

from typing import Optional, Union

from pipeguard.core.config import Settings
from pipeguard.core.enums import ActionType, is_pipeline_control_action
from pipeguard.core.models.remediation import ActionResult, RemediationAction
from pipeguard.domain.remediators.base import ActionExecutor, BaseRemediator
from pipeguard.domain.remediators.callback import (
    ActionCallback,
    CallbackRemediator,
    UnsupportedActionRemediator,
)
from pipeguard.domain.remediators.notifications import (
    EmailNotifyRemediator,
    SlackWebhookRemediator,
)
from pipeguard.exceptions import InvalidActionParametersError, RemediatorNotRegisteredError
from pipeguard.utils.logging import get_logger

logger = get_logger(__name__)


class RemediatorFactory:
    """
    Maps action types to remediators.

    Notification remediators are registered by default. Pipeline control
    actions stay unregistered until an integrator supplies them.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings

        self._remediators: dict[ActionType, Union[type, BaseRemediator]] = {
            ActionType.NOTIFY_SLACK: SlackWebhookRemediator,
            ActionType.NOTIFY_EMAIL: EmailNotifyRemediator,
        }

    def create(self, action_type: ActionType) -> BaseRemediator:
        entry = self._remediators.get(action_type)

        if entry is None:
            logger.warning(
                "remediator_not_registered",
                action_type=action_type.value,
                provider_bound=is_pipeline_control_action(action_type),
            )
            return UnsupportedActionRemediator(action_type, self.settings)

        if isinstance(entry, BaseRemediator):
            return entry

        return entry(self.settings)

    def get(self, action_type: ActionType) -> BaseRemediator:
        """
        Get a registered remediator.

        Raises:
            RemediatorNotRegisteredError: If nothing handles the action type
        """
        if action_type not in self._remediators:
            raise RemediatorNotRegisteredError(action_type.value)
        return self.create(action_type)

    def register(
        self,
        action_type: ActionType,
        remediator_class: type,
    ):
        self._remediators[action_type] = remediator_class

    def register_instance(self, remediator: BaseRemediator):
        self._remediators[remediator.get_action_type()] = remediator

    def register_callback(self, action_type: ActionType, callback: ActionCallback):
        """
        Register an async callable for an action type.

        Args:
            action_type: Action type handled by the callback
            callback: Coroutine function taking the action and returning an ActionResult
        """
        self.register_instance(CallbackRemediator(action_type, callback, self.settings))
        logger.info("remediator_callback_registered", action_type=action_type.value)

    def is_registered(self, action_type: ActionType) -> bool:
        return action_type in self._remediators

    def registered_types(self) -> list[ActionType]:
        return list(self._remediators.keys())


class RemediatorExecutor(ActionExecutor):
    """
    Action executor dispatching each action to the remediator for its type.

    Parameter validation failures become failed results. Anything a
    remediator raises propagates to the caller.
    """

    def __init__(
        self,
        factory: Optional[RemediatorFactory] = None,
        settings: Optional[Settings] = None,
    ):
        self.factory = factory or RemediatorFactory(settings)

    async def execute(self, action: RemediationAction) -> ActionResult:
        remediator = self.factory.create(action.type)

        try:
            remediator.validate_parameters(action)
        except InvalidActionParametersError as e:
            logger.warning(
                "action_parameters_invalid",
                action_id=action.id,
                missing=e.details.get("missing"),
            )
            return ActionResult(
                success=False,
                message=e.message,
                details={"action_id": action.id, **e.to_dict()},
            )

        return await remediator(action)
