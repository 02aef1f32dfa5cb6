"""Notification engine exceptions.

Store errors are raised by NotificationStore implementations. Integration
errors are raised by the WhatsApp gateway and the SMTP transport and are
converted to a ``failed`` channel state by the adapters.
"""

from typing import Any, Optional


class NotificationError(Exception):
    """Base class for notification engine errors."""


class NotificationStoreError(NotificationError):
    """The audit store could not be reached or rejected the write."""


class NotificationNotFoundError(NotificationError):
    """No audit record exists for the requested id."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Notification record not found: {record_id}")


class ChannelStateConflictError(NotificationError):
    """A channel state update targeted a channel that is no longer pending."""

    def __init__(self, record_id: str, channel: str):
        self.record_id = record_id
        self.channel = channel
        super().__init__(
            f"Channel '{channel}' of notification {record_id} is already terminal"
        )


class WhatsAppError(NotificationError):
    """Base class for WhatsApp gateway errors.

    Attributes:
        payload: Raw provider response, when one was received
    """

    def __init__(self, message: str, payload: Optional[Any] = None):
        self.payload = payload
        super().__init__(message)


class InvalidPhoneNumberError(WhatsAppError):
    """Phone number has no digits after canonicalization."""


class WhatsAppTransportError(WhatsAppError):
    """HTTP or network failure talking to the WhatsApp provider."""


class WhatsAppProviderError(WhatsAppError):
    """Provider was reached but did not accept the message."""


class EmailTransportError(NotificationError):
    """SMTP session or delivery failure."""


class EmailConfigurationError(EmailTransportError):
    """SMTP host or credentials are not configured."""


class InvalidEmailAddressError(NotificationError):
    """Recipient email address is not a valid mailbox (never hits SMTP)."""
