"""Notification service for dependency injection.

Provides a class-based interface to the notification engine for easier DI
and testing, plus fire-and-forget submission for callers that notify as a
side effect of their own work.
"""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional, Union, TYPE_CHECKING

import structlog

from infrastructure.notifications.channels.email import EmailChannel, EmailTransport
from infrastructure.notifications.channels.whatsapp import WhatsAppChannel
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.models import (
    ChannelName,
    DeliveryOptions,
    NotificationRecord,
    NotificationType,
    Recipient,
)
from infrastructure.notifications.store import (
    DynamoDBNotificationStore,
    InMemoryNotificationStore,
    NotificationStore,
)
from infrastructure.notifications.templates import EmailTemplates, TemplateResolver

if TYPE_CHECKING:
    from infrastructure.configuration import Settings
    from integrations.gupshup.client import GupshupClient, WhatsAppSendResult

logger = structlog.get_logger()


def build_notification_store(settings: "Settings") -> NotificationStore:
    """Create the audit store selected by NOTIFICATION_STORE_BACKEND."""
    notifications = settings.notifications
    if notifications.NOTIFICATION_STORE_BACKEND == "memory":
        logger.warning("notification_store_in_memory")
        return InMemoryNotificationStore()

    from infrastructure.clients.aws import DynamoDBClient, SessionProvider

    session_provider = SessionProvider(
        region=settings.aws.AWS_REGION,
        service_role_map=settings.aws.SERVICE_ROLE_MAP,
        endpoint_url=settings.aws.DYNAMODB_ENDPOINT_URL,
    )
    return DynamoDBNotificationStore(
        DynamoDBClient(
            session_provider,
            default_role_arn=session_provider.get_role_arn_for_service("dynamodb"),
        ),
        table_name=notifications.NOTIFICATION_LOG_TABLE,
        retention_days=notifications.NOTIFICATION_LOG_RETENTION_DAYS,
    )


class NotificationService:
    """Class-based notification service.

    Wraps the NotificationDispatcher with a service interface. Collaborators
    not passed in are built from settings.

    Usage:
        # Via dependency injection
        from infrastructure.services import NotificationServiceDep

        @router.post("/enroll")
        def enroll(student: Student, notifications: NotificationServiceDep):
            enroll_student(student)
            notifications.submit(student.as_recipient(), "enrollment")

        # Direct instantiation
        service = NotificationService(settings)
        record = service.send({"name": "Alice", "email": "a@x.com"}, "welcome")
    """

    def __init__(
        self,
        settings: "Settings",
        store: Optional[NotificationStore] = None,
        gateway: Optional["GupshupClient"] = None,
        email_transport: Optional[EmailTransport] = None,
        resolver: Optional[TemplateResolver] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        notifications = settings.notifications
        tz = notifications.NOTIFICATION_TIMEZONE

        self._settings = settings
        self._store = store or (
            dispatcher.store if dispatcher else build_notification_store(settings)
        )
        if gateway is None:
            # Import here to avoid circular dependency at module level
            from integrations.gupshup.client import GupshupClient

            gateway = GupshupClient(settings.gupshup, timezone=tz)
        if email_transport is None:
            from integrations.smtp.client import SmtpEmailTransport

            email_transport = SmtpEmailTransport(settings.smtp)
        self._gateway = gateway
        self._email_transport = email_transport

        if dispatcher is None:
            resolver = resolver or TemplateResolver(
                EmailTemplates(
                    brand_name=notifications.BRAND_NAME,
                    support_email=notifications.SUPPORT_EMAIL,
                    client_url=notifications.CLIENT_URL,
                    timezone=tz,
                ),
                timezone=tz,
            )
            dispatcher = NotificationDispatcher(
                store=self._store,
                channels={
                    ChannelName.EMAIL: EmailChannel(
                        resolver, self._store, self._email_transport
                    ),
                    ChannelName.WHATSAPP: WhatsAppChannel(
                        resolver, self._store, self._gateway
                    ),
                },
                max_workers=notifications.NOTIFICATION_MAX_WORKERS,
            )
        self._dispatcher = dispatcher

        self._background_workers = notifications.NOTIFICATION_BACKGROUND_WORKERS
        self._background: Optional[ThreadPoolExecutor] = None
        self._background_lock = Lock()
        self._closed = False

    @property
    def store(self) -> NotificationStore:
        return self._store

    @property
    def gateway(self) -> "GupshupClient":
        return self._gateway

    def send(
        self,
        recipient: Union[Recipient, Mapping[str, Any]],
        notification_type: Union[NotificationType, str],
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[Union[DeliveryOptions, Mapping[str, Any]]] = None,
    ) -> NotificationRecord:
        """Deliver synchronously; see NotificationDispatcher.send."""
        return self._dispatcher.send(recipient, notification_type, data, options)

    def submit(
        self,
        recipient: Union[Recipient, Mapping[str, Any]],
        notification_type: Union[NotificationType, str],
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[Union[DeliveryOptions, Mapping[str, Any]]] = None,
    ) -> bool:
        """Fire-and-forget delivery on the background executor.

        Never raises. Failures, including an unavailable store, are logged
        by the worker.

        Returns:
            True if the job was queued, False if the service is shut down
        """
        try:
            executor = self._get_or_create_executor()
            if executor is None:
                logger.error(
                    "notification_executor_unavailable",
                    notification_type=str(notification_type),
                )
                return False
            context = contextvars.copy_context()
            executor.submit(
                context.run,
                self._background_worker,
                recipient,
                notification_type,
                data,
                options,
            )
            return True
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "failed_to_submit_notification",
                notification_type=str(notification_type),
            )
            return False

    def _background_worker(
        self, recipient, notification_type, data, options
    ) -> None:
        """Worker wrapper that logs every failure."""
        try:
            self._dispatcher.send(recipient, notification_type, data, options)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception(
                "background_notification_failed",
                notification_type=str(notification_type),
                error=str(e),
            )

    def _get_or_create_executor(self) -> Optional[ThreadPoolExecutor]:
        with self._background_lock:
            if self._closed:
                return None
            if self._background is None:
                self._background = ThreadPoolExecutor(
                    max_workers=self._background_workers,
                    thread_name_prefix="notification-background",
                )
                logger.debug(
                    "created_background_notification_executor",
                    max_workers=self._background_workers,
                )
            return self._background

    def get_record(self, record_id: str) -> NotificationRecord:
        return self._store.get_by_id(record_id)

    def list_recent(self, limit: Optional[int] = None) -> List[NotificationRecord]:
        """Most recent records, newest first, capped at NOTIFICATION_RECENT_LIMIT."""
        cap = self._settings.notifications.NOTIFICATION_RECENT_LIMIT
        effective = cap if limit is None else max(0, min(limit, cap))
        return self._store.list_recent(effective)

    def send_test_whatsapp(self, phone: str) -> "WhatsAppSendResult":
        """Send the WhatsApp connectivity test template (raises on failure)."""
        return self._gateway.send_test_message(
            phone,
            source_label=f"{self._settings.notifications.BRAND_NAME} Engineering Hub",
        )

    def status(self) -> Dict[str, Any]:
        """Channel and store status for monitoring."""
        return {
            "whatsapp": self._gateway.describe(),
            "email": self._email_transport.describe(),
            "store": {"backend": getattr(self._store, "backend", "unknown")},
            "channels": self._dispatcher.health_check(),
        }

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting background work and shut both executors down.

        With ``wait=False`` background jobs that have not started yet are
        cancelled. Idempotent.
        """
        with self._background_lock:
            executor, self._background = self._background, None
            already_closed = self._closed
            self._closed = True
        if executor is not None:
            executor.shutdown(wait=wait, cancel_futures=not wait)
        if not already_closed:
            self._dispatcher.close(wait_for_pending=wait)
            logger.info("notification_service_shut_down", wait=wait)
