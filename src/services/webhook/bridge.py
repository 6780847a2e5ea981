"""Relay between the campaign endpoints and the workflow automation webhook."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import httpx
from loguru import logger as log

from common import global_config

MOCK_PUBLISHED_PLATFORMS = ["facebook", "instagram"]


class WebhookRelayError(Exception):
    """Raised when the workflow webhook call fails."""


class WorkflowWebhookBridge:
    def __init__(
        self,
        base_url: str = global_config.webhook.base_url,
        secret: str = global_config.WEBHOOK_SECRET,
        client: Optional[httpx.AsyncClient] = None,
        create_path: str = global_config.webhook.create_path,
        publish_delay_seconds: float = global_config.webhook.publish_delay_seconds,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.secret = secret
        self.client = client or httpx.AsyncClient(
            timeout=global_config.webhook.request_timeout_seconds
        )
        self.create_path = create_path
        self.publish_delay_seconds = publish_delay_seconds
        self.sleep = sleep

    @property
    def create_url(self) -> str:
        return f"{self.base_url}/{self.create_path}"

    async def create_campaign(self, body: Any) -> Any:
        """Forward the campaign body to the webhook and return its JSON verbatim."""
        try:
            response = await self.client.post(
                self.create_url,
                json=body,
                headers={"Authorization": f"Bearer {self.secret}"},
            )
        except httpx.HTTPError as e:
            raise WebhookRelayError(f"Webhook request failed: {e}") from e

        if not response.is_success:
            log.error(f"Webhook error response: {response.text}")
            raise WebhookRelayError(
                f"Webhook request failed: {response.status_code} - {response.text}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise WebhookRelayError(f"Webhook returned invalid JSON: {e}") from e

    async def publish_campaign(self, campaign_id: Any, schedule: Any) -> dict[str, Any]:
        """
        Mock publish: no external system is called.

        Waits for the configured delay and reports success on two platforms.
        """
        log.info(f"Received publish request for campaign {campaign_id}")
        await self.sleep(self.publish_delay_seconds)

        message = (
            "Campaign published successfully!"
            if schedule == "now"
            else f"Campaign scheduled for {schedule}"
        )
        return {
            "success": True,
            "campaign_id": campaign_id,
            "published_at": datetime.now(timezone.utc).isoformat(),
            "platforms": list(MOCK_PUBLISHED_PLATFORMS),
            "message": message,
        }
