"""Outbound notifications."""
from notifications.telegram import NotificationError, notify_error, send_telegram_message

__all__ = [
    "NotificationError",
    "notify_error",
    "send_telegram_message",
]
