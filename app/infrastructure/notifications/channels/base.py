"""Notification channel abstract base class.

All channel adapters (Email, WhatsApp) implement this interface.
"""

from abc import ABC, abstractmethod

import structlog

from infrastructure.notifications.exceptions import NotificationError
from infrastructure.notifications.models import (
    ChannelName,
    ChannelStatus,
    NotificationRecord,
)
from infrastructure.notifications.store import NotificationStore
from infrastructure.notifications.templates import TemplateResolver
from infrastructure.operations import OperationResult

logger = structlog.get_logger()


class NotificationChannel(ABC):
    """Abstract base class for channel adapters.

    An adapter renders content for its channel, hands it to its transport
    and writes exactly one terminal state for its channel on the record.
    ``send()`` never raises: delivery errors become a ``failed`` state and
    store errors while persisting the outcome are logged.

    Example Implementation:
        class PushChannel(NotificationChannel):

            @property
            def channel_name(self) -> ChannelName:
                return ChannelName.PUSH

            def deliver(self, record: NotificationRecord) -> ChannelStatus:
                message_id = self._push.send(record.recipient_id, ...)
                return ChannelStatus.sent(provider_message_id=message_id)
    """

    def __init__(self, resolver: TemplateResolver, store: NotificationStore):
        self._resolver = resolver
        self._store = store

    @property
    @abstractmethod
    def channel_name(self) -> ChannelName:
        """Channel identifier used as the status key on the record."""

    @abstractmethod
    def deliver(self, record: NotificationRecord) -> ChannelStatus:
        """Render and send the notification for this channel.

        May raise; ``send()`` converts any exception into a ``failed`` state.

        Returns:
            Terminal ChannelStatus (sent or failed)
        """

    @abstractmethod
    def health_check(self) -> OperationResult:
        """Report whether the underlying transport can deliver."""

    def describe_error(self, error: Exception) -> str:
        """Error text stored on the record for a failed delivery."""
        return str(error) or error.__class__.__name__

    def send(self, record: NotificationRecord) -> ChannelStatus:
        """Deliver and persist the outcome for this channel.

        Args:
            record: The freshly created record (this channel is pending)

        Returns:
            The terminal ChannelStatus that was persisted (or attempted)
        """
        channel = self.channel_name.value
        try:
            status = self.deliver(record)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "channel_delivery_failed",
                channel=channel,
                error=str(e),
                error_type=e.__class__.__name__,
            )
            status = ChannelStatus.failed(self.describe_error(e))

        try:
            self._store.update_channel_state(record.id, self.channel_name, status)
        except NotificationError as e:
            logger.error(
                "channel_state_persist_failed",
                channel=channel,
                state=status.state.value,
                error=str(e),
            )
        else:
            logger.info(
                "channel_state_recorded",
                channel=channel,
                state=status.state.value,
                provider_message_id=status.provider_message_id,
            )
        return status
