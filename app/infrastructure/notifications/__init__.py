"""Multi-channel notification engine.

Public API:
    NotificationService: DI facade (send, submit, monitoring)
    NotificationDispatcher: Concurrent per-channel delivery
    NotificationStore: Audit store interface and implementations
    Models: Recipient, DeliveryOptions, NotificationRecord, ChannelStatus, ...

Example:
    from infrastructure.services import get_notification_service

    service = get_notification_service()
    record = service.send(
        {"name": "Alice", "email": "alice@example.com"},
        "welcome",
        options={"email": True, "whatsapp": True},
    )
"""

from infrastructure.notifications.exceptions import (
    ChannelStateConflictError,
    EmailConfigurationError,
    EmailTransportError,
    InvalidEmailAddressError,
    InvalidPhoneNumberError,
    NotificationError,
    NotificationNotFoundError,
    NotificationStoreError,
    WhatsAppError,
    WhatsAppProviderError,
    WhatsAppTransportError,
)
from infrastructure.notifications.models import (
    ChannelName,
    ChannelState,
    ChannelStatus,
    DeliveryOptions,
    NotificationRecord,
    NotificationRequest,
    NotificationType,
    Recipient,
    RequestedChannel,
)
from infrastructure.notifications.store import (
    DynamoDBNotificationStore,
    InMemoryNotificationStore,
    NotificationStore,
)
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.service import NotificationService

__all__ = [
    # Service
    "NotificationService",
    "NotificationDispatcher",
    # Store
    "NotificationStore",
    "DynamoDBNotificationStore",
    "InMemoryNotificationStore",
    # Models
    "ChannelName",
    "ChannelState",
    "ChannelStatus",
    "DeliveryOptions",
    "NotificationRecord",
    "NotificationRequest",
    "NotificationType",
    "Recipient",
    "RequestedChannel",
    # Errors
    "NotificationError",
    "NotificationStoreError",
    "NotificationNotFoundError",
    "ChannelStateConflictError",
    "WhatsAppError",
    "InvalidPhoneNumberError",
    "WhatsAppTransportError",
    "WhatsAppProviderError",
    "EmailTransportError",
    "EmailConfigurationError",
    "InvalidEmailAddressError",
]
