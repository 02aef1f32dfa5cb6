"""Email channel adapter."""

from typing import Any, Dict, Protocol

import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.exceptions import InvalidEmailAddressError
from infrastructure.notifications.models import (
    ChannelName,
    ChannelStatus,
    NotificationRecord,
)
from infrastructure.notifications.store import NotificationStore
from infrastructure.notifications.templates import TemplateResolver
from infrastructure.operations import OperationResult

logger = structlog.get_logger()

_email_address = TypeAdapter(EmailStr)


def validate_email_address(address: str) -> str:
    """Return the normalized mailbox or raise InvalidEmailAddressError."""
    try:
        return _email_address.validate_python(address)
    except ValidationError as e:
        raise InvalidEmailAddressError(
            f"Invalid recipient email address: {address}"
        ) from e


class EmailTransport(Protocol):
    """Anything that can send one HTML email and return its message id."""

    @property
    def is_configured(self) -> bool: ...

    def send(self, to_address: str, subject: str, html_body: str) -> Any: ...

    def describe(self) -> Dict[str, Any]: ...


class EmailChannel(NotificationChannel):
    """Email notification channel.

    Unknown notification types are rendered with the generic template, so
    a failure here comes from the recipient address or the transport.
    """

    def __init__(
        self,
        resolver: TemplateResolver,
        store: NotificationStore,
        transport: EmailTransport,
    ):
        super().__init__(resolver, store)
        self._transport = transport
        logger.info(
            "initialized_email_channel",
            backend="smtp",
            configured=transport.is_configured,
        )

    @property
    def channel_name(self) -> ChannelName:
        return ChannelName.EMAIL

    def deliver(self, record: NotificationRecord) -> ChannelStatus:
        address = validate_email_address(record.recipient_email)
        content = self._resolver.resolve_email(
            record.type, record.recipient_name, record.metadata
        )
        result = self._transport.send(
            address, content.subject, content.html_body
        )
        return ChannelStatus.sent(provider_message_id=result.message_id)

    def health_check(self) -> OperationResult:
        if not self._transport.is_configured:
            return OperationResult.permanent_error(
                message="SMTP host or credentials are not configured",
                error_code="EMAIL_NOT_CONFIGURED",
            )
        return OperationResult.success(
            message="SMTP transport configured", data=self._transport.describe()
        )
