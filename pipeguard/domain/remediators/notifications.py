# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Notification Remediators

Slack incoming-webhook and email-service notifiers. Both post JSON over
httpx and retry transport errors with tenacity.
"""

from typing import Any, Dict, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from pipeguard.core.config import Settings
from pipeguard.core.enums import ActionType
from pipeguard.core.models.remediation import ActionResult, RemediationAction
from pipeguard.domain.remediators.base import BaseRemediator
from pipeguard.exceptions import InvalidActionParametersError


class HttpNotificationRemediator(BaseRemediator):
    """
    Base class for remediators that deliver a notification over HTTP.

    A preconfigured client may be injected; otherwise a short-lived client is
    opened per request.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(settings)
        self.timeout = self.settings.notifications.timeout
        self._client = client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _post(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=payload, headers=headers)

        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
            return await client.post(url, json=payload, headers=headers)

    def _build_message(self, action: RemediationAction) -> str:
        custom = action.get_parameter("message")
        if custom:
            return custom

        pipeline = action.pipeline
        return (
            f"PipeGuard: {pipeline.display_name} on {pipeline.branch} "
            f"({pipeline.status.value}). {action.description}"
        )

    async def _deliver(
        self,
        action: RemediationAction,
        url: str,
        payload: Dict[str, Any],
        channel: str,
        success_message: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> ActionResult:
        try:
            response = await self._post(url, payload, headers)
        except httpx.HTTPError as e:
            result = self._create_failure_result(
                action,
                message=f"{channel.capitalize()} notification failed",
                error_message=str(e),
                channel=channel,
            )
            self._log_execution_complete(action, result)
            return result

        if response.status_code >= 400:
            result = self._create_failure_result(
                action,
                message=f"{channel.capitalize()} notification failed: {response.status_code}",
                error_message=response.text,
                channel=channel,
                status_code=response.status_code,
            )
        else:
            result = self._create_success_result(
                action,
                message=success_message,
                channel=channel,
            )

        self._log_execution_complete(action, result)
        return result


class SlackWebhookRemediator(HttpNotificationRemediator):
    """
    Posts a message to a Slack incoming webhook.

    Optional parameters:
    - webhookUrl: Webhook URL (falls back to SLACK_WEBHOOK_URL)
    - message: Message text (defaults to a pipeline summary)
    """

    def get_action_type(self) -> ActionType:
        return ActionType.NOTIFY_SLACK

    async def execute(self, action: RemediationAction) -> ActionResult:
        self._log_execution_start(action)

        webhook_url = action.get_parameter("webhookUrl") or self.settings.notifications.slack_webhook_url
        if not webhook_url:
            result = self._create_failure_result(
                action,
                message="Slack webhook URL not configured",
                channel="slack",
            )
            self._log_execution_complete(action, result)
            return result

        return await self._deliver(
            action,
            url=webhook_url,
            payload={"text": self._build_message(action)},
            channel="slack",
            success_message="Slack notification sent",
        )


class EmailNotifyRemediator(HttpNotificationRemediator):
    """
    Sends an email through an HTTP email service.

    Required parameters:
    - recipients: Comma-separated recipient addresses
    """

    required_parameters = ("recipients",)

    def get_action_type(self) -> ActionType:
        return ActionType.NOTIFY_EMAIL

    async def execute(self, action: RemediationAction) -> ActionResult:
        self._log_execution_start(action)

        try:
            self.validate_parameters(action)
        except InvalidActionParametersError:
            result = self._create_failure_result(
                action,
                message="Email recipients not specified",
                channel="email",
            )
            self._log_execution_complete(action, result)
            return result

        notifications = self.settings.notifications
        if not notifications.email_service_url:
            result = self._create_failure_result(
                action,
                message="Email service URL not configured",
                channel="email",
            )
            self._log_execution_complete(action, result)
            return result

        recipients = action.get_parameter("recipients")
        headers = {"Content-Type": "application/json"}
        if notifications.email_service_api_key:
            headers["Authorization"] = f"Bearer {notifications.email_service_api_key}"

        payload = {
            "to": [address.strip() for address in recipients.split(",") if address.strip()],
            "subject": action.get_parameter(
                "subject",
                f"[PipeGuard] {action.pipeline.display_name} needs attention",
            ),
            "body": self._build_message(action),
        }

        return await self._deliver(
            action,
            url=notifications.email_service_url,
            payload=payload,
            channel="email",
            success_message=f"Email notification sent to {recipients}",
            headers=headers,
        )
