"""Unit tests for DynamoDBNotificationStore.

The DynamoDB client is mocked; assertions check the request shapes
(conditional writes, field-scoped updates, GSI query) and the mapping of
OperationResult failures to store exceptions.
"""

from unittest.mock import MagicMock

import pytest
from boto3.dynamodb.types import TypeSerializer

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
)
from infrastructure.notifications.store import (
    RECENT_INDEX,
    RECORD_KIND,
    TTL_ATTRIBUTE,
    DynamoDBNotificationStore,
)
from infrastructure.operations import OperationResult, OperationStatus
from tests.factories.notifications import make_notification_record


@pytest.fixture
def dynamodb():
    return MagicMock(spec=DynamoDBClient)


@pytest.fixture
def store(dynamodb):
    return DynamoDBNotificationStore(
        dynamodb, table_name="notification_logs", retention_days=30
    )


def _item_for(store, record):
    return store._to_item(record)  # pylint: disable=protected-access


@pytest.mark.unit
class TestDynamoDBStoreCreate:
    def test_create_puts_conditional_item(self, store, dynamodb):
        dynamodb.put_item.return_value = OperationResult.success(data={})
        record = make_notification_record(metadata={"topic": "AI"})

        assert store.create(record) == record.id

        args, kwargs = dynamodb.put_item.call_args
        assert args[0] == "notification_logs"
        assert kwargs["ConditionExpression"] == "attribute_not_exists(id)"
        item = kwargs["Item"]
        assert item["id"] == {"S": record.id}
        assert item["record_kind"] == {"S": RECORD_KIND}
        assert "N" in item[TTL_ATTRIBUTE]
        assert item["status"]["M"]["email"]["M"]["state"] == {"S": "pending"}
        assert item["metadata"]["M"]["topic"] == {"S": "AI"}

    def test_create_without_retention_has_no_ttl(self, dynamodb):
        store = DynamoDBNotificationStore(dynamodb, retention_days=0)
        item = _item_for(store, make_notification_record())
        assert TTL_ATTRIBUTE not in item

    def test_create_failure_raises_store_error(self, store, dynamodb):
        dynamodb.put_item.return_value = OperationResult.transient_error(
            message="throttled", error_code="ThrottlingException"
        )
        with pytest.raises(NotificationStoreError):
            store.create(make_notification_record())


@pytest.mark.unit
class TestDynamoDBStoreUpdate:
    def test_update_is_field_scoped_and_conditional(self, store, dynamodb):
        dynamodb.update_item.return_value = OperationResult.success(data={})

        store.update_channel_state(
            "rec-1", ChannelName.WHATSAPP, ChannelStatus.sent("sim_1", "simulated")
        )

        _, kwargs = dynamodb.update_item.call_args
        assert kwargs["Key"] == {"id": {"S": "rec-1"}}
        assert kwargs["UpdateExpression"] == (
            "SET #status.#channel = :status, updated_at = :now"
        )
        assert "#status.#channel.#state = :pending" in kwargs["ConditionExpression"]
        assert kwargs["ExpressionAttributeNames"]["#channel"] == "whatsapp"
        values = kwargs["ExpressionAttributeValues"]
        assert values[":pending"] == {"S": "pending"}
        assert values[":status"]["M"]["state"] == {"S": "sent"}
        assert values[":status"]["M"]["provider_message_id"] == {"S": "sim_1"}

    def test_condition_failure_on_existing_record_is_conflict(self, store, dynamodb):
        record = make_notification_record()
        dynamodb.update_item.return_value = OperationResult.permanent_error(
            message="condition failed",
            error_code="ConditionalCheckFailedException",
        )
        dynamodb.get_item.return_value = OperationResult.success(
            data={"Item": _item_for(store, record)}
        )

        with pytest.raises(ChannelStateConflictError):
            store.update_channel_state(
                record.id, ChannelName.EMAIL, ChannelStatus.failed("late")
            )

    def test_condition_failure_on_missing_record_is_not_found(self, store, dynamodb):
        dynamodb.update_item.return_value = OperationResult.permanent_error(
            message="condition failed",
            error_code="ConditionalCheckFailedException",
        )
        dynamodb.get_item.return_value = OperationResult.success(data={})

        with pytest.raises(NotificationNotFoundError):
            store.update_channel_state(
                "missing", ChannelName.EMAIL, ChannelStatus.sent("m")
            )

    def test_other_failures_raise_store_error(self, store, dynamodb):
        dynamodb.update_item.return_value = OperationResult.transient_error(
            message="boom", error_code="AWS_TRANSPORT_ERROR"
        )
        with pytest.raises(NotificationStoreError):
            store.update_channel_state(
                "rec-1", ChannelName.EMAIL, ChannelStatus.sent("m")
            )

    def test_non_terminal_target_rejected_without_call(self, store, dynamodb):
        with pytest.raises(ValueError):
            store.update_channel_state(
                "rec-1", ChannelName.EMAIL, ChannelStatus.pending()
            )
        dynamodb.update_item.assert_not_called()


@pytest.mark.unit
class TestDynamoDBStoreRead:
    def test_get_by_id_round_trips_item(self, store, dynamodb):
        record = make_notification_record(metadata={"score": "42"})
        dynamodb.get_item.return_value = OperationResult.success(
            data={"Item": _item_for(store, record)}
        )

        loaded = store.get_by_id(record.id)

        assert loaded == record
        _, kwargs = dynamodb.get_item.call_args
        assert kwargs["ConsistentRead"] is True

    def test_get_by_id_missing(self, store, dynamodb):
        dynamodb.get_item.return_value = OperationResult.success(data={})
        with pytest.raises(NotificationNotFoundError):
            store.get_by_id("missing")

    def test_get_by_id_failure(self, store, dynamodb):
        dynamodb.get_item.return_value = OperationResult.error(
            status=OperationStatus.NOT_FOUND,
            message="table missing",
            error_code="ResourceNotFoundException",
        )
        with pytest.raises(NotificationStoreError) as exc:
            store.get_by_id("rec-1")
        assert not isinstance(exc.value, NotificationNotFoundError)

    def test_list_recent_queries_index_newest_first(self, store, dynamodb):
        newer = make_notification_record(created_offset_seconds=10)
        older = make_notification_record()
        dynamodb.query.return_value = OperationResult.success(
            data={"Items": [_item_for(store, newer), _item_for(store, older)]}
        )

        listed = store.list_recent(25)

        assert [r.id for r in listed] == [newer.id, older.id]
        _, kwargs = dynamodb.query.call_args
        assert kwargs["IndexName"] == RECENT_INDEX
        assert kwargs["ScanIndexForward"] is False
        assert kwargs["Limit"] == 25
        assert kwargs["ExpressionAttributeValues"] == {
            ":kind": TypeSerializer().serialize(RECORD_KIND)
        }

    def test_list_recent_zero_limit_skips_query(self, store, dynamodb):
        assert store.list_recent(0) == []
        dynamodb.query.assert_not_called()

    def test_list_recent_failure(self, store, dynamodb):
        dynamodb.query.return_value = OperationResult.transient_error("boom")
        with pytest.raises(NotificationStoreError):
            store.list_recent()

    def test_loaded_record_states(self, store, dynamodb):
        record = make_notification_record(email=False)
        dynamodb.get_item.return_value = OperationResult.success(
            data={"Item": _item_for(store, record)}
        )
        loaded = store.get_by_id(record.id)
        assert loaded.status.email.state == ChannelState.SKIPPED
        assert loaded.status.whatsapp.state == ChannelState.PENDING
