"""
Unit tests for guardian notification channels.
"""

import httpx
import pytest

from config import Settings
from src.core.domain import Guardian
from src.integrations.notifications import (
    LogNotificationChannel,
    WebhookNotificationChannel,
    create_notification_channel,
)

GUARDIAN = Guardian(name="Ana", phone="+15550001", email="ana@example.com")


def _webhook(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookNotificationChannel("https://alerts.example.com/hook", client=client)


class TestWebhookChannel:
    @pytest.mark.asyncio
    async def test_posts_guardian_payload(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(202)

        channel = _webhook(handler)
        assert await channel.notify(GUARDIAN, "help") is True
        await channel.close()

        body = seen[0].read()
        assert b'"name":"Ana"' in body.replace(b" ", b"")
        assert b'"message":"help"' in body.replace(b" ", b"")

    @pytest.mark.asyncio
    async def test_http_error_status_is_failure(self):
        channel = _webhook(lambda request: httpx.Response(503))

        assert await channel.notify(GUARDIAN, "help") is False
        await channel.close()

    @pytest.mark.asyncio
    async def test_transport_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        channel = _webhook(handler)

        assert await channel.notify(GUARDIAN, "help") is False
        await channel.close()


class TestLogChannel:
    @pytest.mark.asyncio
    async def test_records_alert(self):
        channel = LogNotificationChannel()

        assert await channel.notify(GUARDIAN, "help") is True
        assert channel.sent == [("Ana", "help")]


def test_factory_picks_channel_from_settings():
    assert isinstance(
        create_notification_channel(Settings(_env_file=None, notification_webhook_url=None)),
        LogNotificationChannel,
    )
    assert isinstance(
        create_notification_channel(Settings(_env_file=None, notification_webhook_url="https://x.example/hook")),
        WebhookNotificationChannel,
    )
