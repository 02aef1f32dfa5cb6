"""Notification dispatcher with concurrent per-channel delivery.

Creates the audit record, fans the eligible channels out on a thread pool,
waits for every channel to settle and returns the record as stored.

Usage Example:
    from infrastructure.notifications import NotificationDispatcher

    dispatcher = NotificationDispatcher(
        store=store,
        channels={
            ChannelName.EMAIL: email_channel,
            ChannelName.WHATSAPP: whatsapp_channel,
        },
    )

    record = dispatcher.send(
        {"name": "Bob", "phone": "9999999999"},
        "exam",
        {"examTitle": "Midterm", "courseTitle": "CS101"},
        {"email": False, "whatsapp": True},
    )
    record.status.whatsapp.state  # ChannelState.SENT
"""

import contextvars
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Dict, Mapping, Optional, Union

import structlog

from infrastructure.logging import bind_notification_context
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.exceptions import NotificationError
from infrastructure.notifications.models import (
    ChannelName,
    ChannelState,
    ChannelStatus,
    DeliveryOptions,
    NotificationRecord,
    NotificationType,
    Recipient,
    coerce_metadata,
)
from infrastructure.notifications.store import NotificationStore

logger = structlog.get_logger()


class NotificationDispatcher:
    """Multi-channel notification dispatcher.

    Guarantees:
    - The record is persisted before any channel is attempted; a failure to
      create it is the only error raised to the caller.
    - Channels run concurrently and independently; one channel's failure
      never affects the other.
    - When ``send()`` returns, no eligible channel is left ``pending``.

    Attributes:
        channels: Mapping of channel name to adapter
        store: Audit store shared with the adapters
        max_workers: Size of the channel thread pool
    """

    def __init__(
        self,
        store: NotificationStore,
        channels: Mapping[ChannelName, NotificationChannel],
        max_workers: int = 8,
    ):
        self.store = store
        self.channels: Dict[ChannelName, NotificationChannel] = {
            ChannelName(name): channel for name, channel in channels.items()
        }
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notification-channel"
        )

        logger.info(
            "initialized_notification_dispatcher",
            channels=[name.value for name in self.channels],
            max_workers=max_workers,
            store=getattr(store, "backend", type(store).__name__),
        )

    def send(
        self,
        recipient: Union[Recipient, Mapping[str, Any]],
        notification_type: Union[NotificationType, str],
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[Union[DeliveryOptions, Mapping[str, Any]]] = None,
    ) -> NotificationRecord:
        """Deliver one notification over every eligible channel.

        Args:
            recipient: Recipient or mapping with ``name`` and optional
                ``id``/``email``/``phone``
            notification_type: NotificationType or any string (unknown types
                render with the generic template)
            data: Event data for the templates; values are stringified
            options: Requested channels (default: both)

        Returns:
            The record reloaded from the store after all channels settled

        Raises:
            pydantic.ValidationError: Invalid recipient or options
            NotificationStoreError: The initial record could not be created
        """
        if not isinstance(recipient, Recipient):
            recipient = Recipient.model_validate(recipient)
        if options is None:
            options = DeliveryOptions()
        elif not isinstance(options, DeliveryOptions):
            options = DeliveryOptions.model_validate(options)
        type_value = (
            notification_type.value
            if isinstance(notification_type, NotificationType)
            else str(notification_type)
        )

        record = NotificationRecord.create(
            recipient=recipient,
            notification_type=type_value,
            metadata=coerce_metadata(data),
            options=options,
        )
        self.store.create(record)

        with bind_notification_context(record.id, type_value):
            logger.info(
                "notification_dispatch_started",
                requested=record.channel.value,
                email_state=record.status.email.state.value,
                whatsapp_state=record.status.whatsapp.state.value,
            )
            outcomes = self._run_channels(record)
            final = self._reload(record, outcomes)
            logger.info(
                "notification_dispatch_completed",
                email_state=final.status.email.state.value,
                whatsapp_state=final.status.whatsapp.state.value,
            )
        return final

    def _run_channels(
        self, record: NotificationRecord
    ) -> Dict[ChannelName, ChannelStatus]:
        """Run every pending channel and wait for all of them to settle."""
        futures: Dict[Future, ChannelName] = {}
        outcomes: Dict[ChannelName, ChannelStatus] = {}

        for channel_name in record.pending_channels:
            channel = self.channels.get(channel_name)
            if channel is None:
                logger.error("channel_not_configured", channel=channel_name.value)
                outcomes[channel_name] = self._fail_channel(
                    record.id, channel_name, "No adapter configured for channel"
                )
                continue
            # Each worker gets a copy of the logging context (notification id)
            context = contextvars.copy_context()
            try:
                future = self._executor.submit(context.run, channel.send, record)
            except RuntimeError as e:
                # Executor already shut down
                logger.error(
                    "channel_task_rejected", channel=channel_name.value, error=str(e)
                )
                outcomes[channel_name] = self._fail_channel(
                    record.id, channel_name, "Dispatcher is shut down"
                )
                continue
            futures[future] = channel_name

        if not futures:
            return outcomes

        done, _ = wait(futures, return_when=ALL_COMPLETED)
        for future in done:
            channel_name = futures[future]
            error = future.exception()
            if error is None:
                outcomes[channel_name] = future.result()
                continue
            logger.error(
                "channel_task_crashed",
                channel=channel_name.value,
                error=str(error),
                error_type=error.__class__.__name__,
            )
            outcomes[channel_name] = self._fail_channel(
                record.id, channel_name, f"Channel task crashed: {error}"
            )
        return outcomes

    def _fail_channel(
        self, record_id: str, channel_name: ChannelName, error: str
    ) -> ChannelStatus:
        status = ChannelStatus.failed(error)
        try:
            self.store.update_channel_state(record_id, channel_name, status)
        except NotificationError as e:
            logger.error(
                "channel_state_persist_failed",
                channel=channel_name.value,
                state=status.state.value,
                error=str(e),
            )
        return status

    def _reload(
        self,
        record: NotificationRecord,
        outcomes: Dict[ChannelName, ChannelStatus],
    ) -> NotificationRecord:
        """Reload the stored record; fall back to the local outcomes."""
        try:
            return self.store.get_by_id(record.id)
        except NotificationError as e:
            logger.error("notification_reload_failed", error=str(e))

        fallback = record.model_copy(deep=True)
        for channel_name, status in outcomes.items():
            if fallback.status.for_channel(channel_name).state == ChannelState.PENDING:
                setattr(fallback.status, channel_name.value, status)
        return fallback

    def health_check(self) -> Dict[str, bool]:
        """Check health of all channels.

        Returns:
            Dict mapping channel name to health status (True=healthy)
        """
        health_status = {}
        for channel_name, channel in self.channels.items():
            try:
                health_status[channel_name.value] = channel.health_check().is_success
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "channel_health_check_failed",
                    channel=channel_name.value,
                    error=str(e),
                )
                health_status[channel_name.value] = False
        return health_status

    def close(self, wait_for_pending: bool = True) -> None:
        """Shut down the channel thread pool.

        Later ``send()`` calls still create the record; their eligible
        channels are recorded ``failed``.
        """
        self._executor.shutdown(wait=wait_for_pending)
        logger.debug("notification_dispatcher_closed")
