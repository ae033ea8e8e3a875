"""
External integrations for the Vigilant engine.

Modules:
- gemini_oracle: Gemini-backed fatigue advisory oracle
- notifications: guardian alert channels (log, webhook)
"""
from .gemini_oracle import GeminiOracle, create_oracle
from .notifications import LogNotificationChannel, WebhookNotificationChannel, create_notification_channel

__all__ = [
    "GeminiOracle",
    "LogNotificationChannel",
    "WebhookNotificationChannel",
    "create_notification_channel",
    "create_oracle",
]
