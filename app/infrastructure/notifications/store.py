"""Notification audit store.

Persists one NotificationRecord per request and applies per-channel state
updates. Updates are field-scoped: a channel write touches only that
channel's sub-document and only succeeds while the channel is ``pending``,
so the two channel workers of one record can never overwrite each other.
"""

import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Union

import structlog
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer  # type: ignore

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.notifications.exceptions import (
    ChannelStateConflictError,
    NotificationNotFoundError,
    NotificationStoreError,
)
from infrastructure.notifications.models import (
    ChannelName,
    ChannelState,
    ChannelStatus,
    NotificationRecord,
)
from infrastructure.operations import OperationResult

logger = structlog.get_logger()

RECORD_KIND = "notification"
RECENT_INDEX = "record_kind-created_at-index"
TTL_ATTRIBUTE = "expires_at"

_TERMINAL_TARGETS = (ChannelState.SENT, ChannelState.FAILED)


def _validate_target(status: ChannelStatus) -> None:
    if status.state not in _TERMINAL_TARGETS:
        raise ValueError(
            f"Channel state can only move to sent or failed, got {status.state.value}"
        )


class NotificationStore(ABC):
    """Abstract audit store."""

    backend: str = "abstract"

    @abstractmethod
    def create(self, record: NotificationRecord) -> str:
        """Persist a new record and return its id.

        Raises:
            NotificationStoreError: The record could not be written
        """

    @abstractmethod
    def update_channel_state(
        self,
        record_id: str,
        channel: Union[ChannelName, str],
        status: ChannelStatus,
    ) -> None:
        """Move one channel from ``pending`` to a terminal state.

        Raises:
            NotificationNotFoundError: No record with this id
            ChannelStateConflictError: The channel is no longer pending
            NotificationStoreError: The store could not be reached
        """

    @abstractmethod
    def get_by_id(self, record_id: str) -> NotificationRecord:
        """Load a record.

        Raises:
            NotificationNotFoundError: No record with this id
            NotificationStoreError: The store could not be reached
        """

    @abstractmethod
    def list_recent(self, limit: int = 100) -> List[NotificationRecord]:
        """Most recent records, newest first."""


class InMemoryNotificationStore(NotificationStore):
    """Process-local store for development and tests.

    All reads and writes happen under one lock, so a channel update is a
    read-modify-write of that channel only and cannot lose the other
    channel's concurrent update.
    """

    backend = "memory"

    def __init__(self):
        self._records: Dict[str, NotificationRecord] = {}
        self._lock = threading.Lock()

    def create(self, record: NotificationRecord) -> str:
        with self._lock:
            if record.id in self._records:
                raise NotificationStoreError(f"Duplicate notification id {record.id}")
            self._records[record.id] = record.model_copy(deep=True)
        return record.id

    def update_channel_state(
        self,
        record_id: str,
        channel: Union[ChannelName, str],
        status: ChannelStatus,
    ) -> None:
        _validate_target(status)
        channel = ChannelName(channel)
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise NotificationNotFoundError(record_id)
            if record.status.for_channel(channel).state != ChannelState.PENDING:
                raise ChannelStateConflictError(record_id, channel.value)
            setattr(record.status, channel.value, status.model_copy(deep=True))
            record.updated_at = datetime.now(timezone.utc)

    def get_by_id(self, record_id: str) -> NotificationRecord:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise NotificationNotFoundError(record_id)
            return record.model_copy(deep=True)

    def list_recent(self, limit: int = 100) -> List[NotificationRecord]:
        with self._lock:
            records = sorted(
                self._records.values(), key=lambda r: r.created_at, reverse=True
            )
            return [r.model_copy(deep=True) for r in records[: max(limit, 0)]]


class DynamoDBNotificationStore(NotificationStore):
    """DynamoDB-backed audit store.

    Table layout:
        - partition key ``id`` (S)
        - GSI ``record_kind-created_at-index``: ``record_kind`` (S, constant
          ``notification``) / ``created_at`` (S, ISO 8601 UTC) for the
          newest-first listing
        - TTL attribute ``expires_at`` (N, epoch seconds)

    Args:
        dynamodb: DynamoDB client
        table_name: Table holding the records
        retention_days: Days before DynamoDB expires a record (0 disables TTL)
    """

    backend = "dynamodb"

    def __init__(
        self,
        dynamodb: DynamoDBClient,
        table_name: str = "notification_logs",
        retention_days: int = 180,
    ):
        self._dynamodb = dynamodb
        self._table_name = table_name
        self._retention_days = retention_days
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    @property
    def table_name(self) -> str:
        return self._table_name

    def _serialize(self, value: Any) -> Dict[str, Any]:
        return self._serializer.serialize(value)

    def _to_item(self, record: NotificationRecord) -> Dict[str, Any]:
        document = record.model_dump(mode="json")
        document["record_kind"] = RECORD_KIND
        if self._retention_days > 0:
            document[TTL_ATTRIBUTE] = int(time.time()) + self._retention_days * 86400
        return {key: self._serialize(value) for key, value in document.items()}

    def _from_item(self, item: Dict[str, Any]) -> NotificationRecord:
        document = {key: self._deserializer.deserialize(v) for key, v in item.items()}
        document.pop("record_kind", None)
        document.pop(TTL_ATTRIBUTE, None)
        return NotificationRecord.model_validate(document)

    def _store_error(
        self, action: str, result: OperationResult
    ) -> NotificationStoreError:
        logger.error(
            "notification_store_error",
            action=action,
            table=self._table_name,
            status=result.status.value,
            error_code=result.error_code,
            error=result.message,
        )
        return NotificationStoreError(f"Failed to {action}: {result.message}")

    def create(self, record: NotificationRecord) -> str:
        result = self._dynamodb.put_item(
            self._table_name,
            Item=self._to_item(record),
            ConditionExpression="attribute_not_exists(id)",
        )
        if not result.is_success:
            raise self._store_error("create notification record", result)
        logger.info(
            "notification_record_created",
            notification_id=record.id,
            channel=record.channel.value,
        )
        return record.id

    def update_channel_state(
        self,
        record_id: str,
        channel: Union[ChannelName, str],
        status: ChannelStatus,
    ) -> None:
        _validate_target(status)
        channel = ChannelName(channel)
        now = datetime.now(timezone.utc).isoformat()

        result = self._dynamodb.update_item(
            self._table_name,
            Key={"id": {"S": record_id}},
            UpdateExpression="SET #status.#channel = :status, updated_at = :now",
            ConditionExpression=(
                "attribute_exists(id) AND #status.#channel.#state = :pending"
            ),
            ExpressionAttributeNames={
                "#status": "status",
                "#channel": channel.value,
                "#state": "state",
            },
            ExpressionAttributeValues={
                ":status": self._serialize(status.model_dump(mode="json")),
                ":now": {"S": now},
                ":pending": {"S": ChannelState.PENDING.value},
            },
        )
        if result.is_success:
            return

        if result.error_code == "ConditionalCheckFailedException":
            # Either the record is missing or the channel already left pending
            self.get_by_id(record_id)
            raise ChannelStateConflictError(record_id, channel.value)

        raise self._store_error("update channel state", result)

    def get_by_id(self, record_id: str) -> NotificationRecord:
        result = self._dynamodb.get_item(
            self._table_name,
            Key={"id": {"S": record_id}},
            ConsistentRead=True,
        )
        if not result.is_success:
            raise self._store_error("load notification record", result)

        item = (result.data or {}).get("Item")
        if not item:
            raise NotificationNotFoundError(record_id)
        return self._from_item(item)

    def list_recent(self, limit: int = 100) -> List[NotificationRecord]:
        if limit <= 0:
            return []
        result = self._dynamodb.query(
            self._table_name,
            KeyConditionExpression="record_kind = :kind",
            IndexName=RECENT_INDEX,
            ExpressionAttributeValues={":kind": {"S": RECORD_KIND}},
            ScanIndexForward=False,
            Limit=limit,
        )
        if not result.is_success:
            raise self._store_error("list notification records", result)
        return [self._from_item(item) for item in (result.data or {}).get("Items", [])]

    def healthcheck(self) -> OperationResult:
        return self._dynamodb.healthcheck(self._table_name)
