import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from infrastructure.clients.aws import client as aws_client
from infrastructure.operations.status import OperationStatus


def _client_error(code, message="error", **extra):
    response = {"Error": {"Code": code, "Message": message}}
    response.update(extra)
    return ClientError(response, operation_name="Op")


@pytest.mark.unit
class TestMapClientError:
    def test_calculate_retry_delay(self):
        assert aws_client._calculate_retry_delay(0) == pytest.approx(0.5)
        assert aws_client._calculate_retry_delay(1) == pytest.approx(1.0)
        assert aws_client._calculate_retry_delay(
            3, backoff_factor=1.0
        ) == pytest.approx(8.0)

    @pytest.mark.parametrize(
        "code",
        ["ThrottlingException", "ProvisionedThroughputExceededException"],
    )
    def test_throttling_is_transient(self, code):
        res = aws_client._map_client_error(_client_error(code, RetryAfter="2"))
        assert res.status == OperationStatus.TRANSIENT_ERROR
        assert res.retry_after == 2

    def test_unauthorized(self):
        res = aws_client._map_client_error(_client_error("AccessDeniedException"))
        assert res.status == OperationStatus.UNAUTHORIZED

    def test_missing_table_is_not_found(self):
        res = aws_client._map_client_error(_client_error("ResourceNotFoundException"))
        assert res.status == OperationStatus.NOT_FOUND

    def test_conditional_check_keeps_code(self):
        res = aws_client._map_client_error(
            _client_error("ConditionalCheckFailedException", "condition failed")
        )
        assert res.status == OperationStatus.PERMANENT_ERROR
        assert res.error_code == "ConditionalCheckFailedException"
        assert res.message == "condition failed"


@pytest.mark.unit
class TestExecuteAwsApiCall:
    def test_success(self, monkeypatch, make_fake_client):
        fake = make_fake_client(api_responses={"describe_table": {"Table": {}}})
        monkeypatch.setattr(aws_client, "get_boto3_client", lambda *a, **k: fake)

        res = aws_client.execute_aws_api_call(
            "dynamodb", "describe_table", max_retries=0, TableName="t"
        )

        assert res.is_success
        assert res.data == {"Table": {}}
        assert fake.calls == [("describe_table", {"TableName": "t"})]

    def test_transient_error_is_retried(self, monkeypatch, make_fake_client):
        calls = {"count": 0}

        def flaky(**kwargs):
            calls["count"] += 1
            if calls["count"] < 2:
                raise _client_error("ProvisionedThroughputExceededException")
            return {"ok": True}

        fake = make_fake_client(api_responses={"put_item": flaky})
        monkeypatch.setattr(aws_client, "get_boto3_client", lambda *a, **k: fake)
        monkeypatch.setattr(aws_client.time, "sleep", lambda _s: None)

        res = aws_client.execute_aws_api_call(
            "dynamodb", "put_item", max_retries=2, backoff_factor=0
        )

        assert res.is_success
        assert calls["count"] == 2

    def test_retries_exhausted(self, monkeypatch, make_fake_client):
        def throttled(**kwargs):
            raise _client_error("ThrottlingException")

        fake = make_fake_client(api_responses={"query": throttled})
        monkeypatch.setattr(aws_client, "get_boto3_client", lambda *a, **k: fake)
        monkeypatch.setattr(aws_client.time, "sleep", lambda _s: None)

        res = aws_client.execute_aws_api_call("dynamodb", "query", max_retries=2)

        assert res.status == OperationStatus.TRANSIENT_ERROR
        assert len(fake.calls) == 3

    def test_permanent_error_is_not_retried(self, monkeypatch, make_fake_client):
        def failed_condition(**kwargs):
            raise _client_error("ConditionalCheckFailedException")

        fake = make_fake_client(api_responses={"update_item": failed_condition})
        monkeypatch.setattr(aws_client, "get_boto3_client", lambda *a, **k: fake)

        res = aws_client.execute_aws_api_call("dynamodb", "update_item", max_retries=3)

        assert res.error_code == "ConditionalCheckFailedException"
        assert len(fake.calls) == 1

    def test_transport_error(self, monkeypatch, make_fake_client):
        def unreachable(**kwargs):
            raise EndpointConnectionError(endpoint_url="http://localhost:8000")

        fake = make_fake_client(api_responses={"get_item": unreachable})
        monkeypatch.setattr(aws_client, "get_boto3_client", lambda *a, **k: fake)

        res = aws_client.execute_aws_api_call("dynamodb", "get_item")

        assert res.status == OperationStatus.TRANSIENT_ERROR
        assert res.error_code == "AWS_TRANSPORT_ERROR"
