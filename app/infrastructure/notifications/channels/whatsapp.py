"""WhatsApp channel adapter using the Gupshup gateway."""

import json
from typing import TYPE_CHECKING

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.exceptions import WhatsAppError
from infrastructure.notifications.models import (
    ChannelName,
    ChannelStatus,
    NotificationRecord,
)
from infrastructure.notifications.store import NotificationStore
from infrastructure.notifications.templates import TemplateResolver
from infrastructure.operations import OperationResult

if TYPE_CHECKING:
    from integrations.gupshup.client import GupshupClient

logger = structlog.get_logger()


class WhatsAppChannel(NotificationChannel):
    """WhatsApp template notification channel.

    Only notification types with an approved template are sent. Any other
    type is recorded as ``failed`` without contacting the gateway.
    """

    def __init__(
        self,
        resolver: TemplateResolver,
        store: NotificationStore,
        gateway: "GupshupClient",
    ):
        super().__init__(resolver, store)
        self._gateway = gateway

    @property
    def channel_name(self) -> ChannelName:
        return ChannelName.WHATSAPP

    def deliver(self, record: NotificationRecord) -> ChannelStatus:
        content = self._resolver.resolve_whatsapp(
            record.type, record.recipient_name, record.metadata
        )
        if content.template_key is None:
            logger.warning("whatsapp_template_missing", notification_type=record.type)
            return ChannelStatus.failed(
                f"No WhatsApp template for notification type '{record.type}'"
            )

        result = self._gateway.send_template(
            record.recipient_phone,
            self._gateway.template_id(content.template_key),
            content.params,
        )
        return ChannelStatus.sent(
            provider_message_id=result.message_id,
            provider_status=result.status,
        )

    def describe_error(self, error: Exception) -> str:
        message = super().describe_error(error)
        if isinstance(error, WhatsAppError) and error.payload is not None:
            payload = (
                error.payload
                if isinstance(error.payload, str)
                else json.dumps(error.payload, default=str)
            )
            return f"{message} (provider response: {payload})"
        return message

    def health_check(self) -> OperationResult:
        status = self._gateway.describe()
        message = (
            "Gupshup gateway live"
            if status["enabled"]
            else "Gupshup gateway in simulation mode"
        )
        return OperationResult.success(message=message, data=status)
