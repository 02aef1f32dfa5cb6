"""Notification channel adapters."""

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.channels.email import EmailChannel, EmailTransport
from infrastructure.notifications.channels.whatsapp import WhatsAppChannel

__all__ = [
    "NotificationChannel",
    "EmailChannel",
    "EmailTransport",
    "WhatsAppChannel",
]
