"""
Guardian notification channels.

Handles delivery of emergency alerts. Real SMS/voice dispatch lives behind
the webhook; this module only knows how to hand an alert over.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from config import Settings
from src.core.domain import Guardian
from src.core.emergency import NotificationChannel


class LogNotificationChannel:
    """Writes the alert to the log. Used when no webhook is configured."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def notify(self, guardian: Guardian, message: str) -> bool:
        contact = guardian.phone or guardian.email or "no contact details"
        logger.warning(f"ALERT -> {guardian.name} ({contact}): {message}")
        self.sent.append((guardian.name, message))
        return True


class WebhookNotificationChannel:
    """POSTs one JSON alert per guardian to a webhook."""

    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the webhook channel.

        Args:
            webhook_url: Endpoint that relays alerts to SMS/voice/email
            timeout_seconds: Per-request timeout
            client: Optional preconfigured client (tests pass a mock transport)
        """
        self.webhook_url = webhook_url
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    @staticmethod
    def build_payload(guardian: Guardian, message: str) -> dict[str, Any]:
        return {
            "guardian": {
                "name": guardian.name,
                "phone": guardian.phone,
                "email": guardian.email,
            },
            "message": message,
            "kind": "emergency",
        }

    async def notify(self, guardian: Guardian, message: str) -> bool:
        try:
            response = await self.client.post(self.webhook_url, json=self.build_payload(guardian, message))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Alert webhook returned {e.response.status_code} for {guardian.name}")
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Alert webhook unreachable for {guardian.name}: {e}")
            return False
        return True


def create_notification_channel(settings: Settings) -> NotificationChannel:
    """Pick the channel implied by configuration."""
    if settings.has_webhook_configured():
        logger.info("Guardian alerts will be sent to the configured webhook")
        return WebhookNotificationChannel(
            settings.notification_webhook_url,
            timeout_seconds=settings.notification_timeout_seconds,
        )
    return LogNotificationChannel()
