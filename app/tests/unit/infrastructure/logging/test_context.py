"""Unit tests for infrastructure.logging.context module.

Tests cover:
- bind_request_context() context manager
- bind_notification_context() context manager
- get_correlation_id()
- clear_request_context()
- Context propagation into worker threads
"""

import contextvars
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest
import structlog

from infrastructure.logging.context import (
    bind_notification_context,
    bind_request_context,
    clear_request_context,
    get_correlation_id,
)


@pytest.fixture(autouse=True)
def _clean_context():
    clear_request_context()
    yield
    clear_request_context()


@pytest.mark.unit
class TestBindRequestContext:
    """Test suite for bind_request_context context manager."""

    def test_auto_generates_correlation_id(self):
        """Correlation ID is auto-generated if not provided."""
        with bind_request_context() as correlation_id:
            assert get_correlation_id() == correlation_id
            uuid.UUID(correlation_id)

    def test_uses_provided_correlation_id(self):
        with bind_request_context(correlation_id="req-123") as correlation_id:
            assert correlation_id == "req-123"
            assert get_correlation_id() == "req-123"

    def test_binds_request_fields_and_extra(self):
        with bind_request_context(
            request_path="/api/v1/notifications/send",
            request_method="POST",
            client="admin-console",
        ):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["request_path"] == "/api/v1/notifications/send"
            assert ctx["request_method"] == "POST"
            assert ctx["client"] == "admin-console"

    def test_context_is_removed_on_exit(self):
        with bind_request_context(correlation_id="req-1", request_path="/health"):
            pass
        assert structlog.contextvars.get_contextvars() == {}

    def test_context_is_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with bind_request_context(correlation_id="req-1"):
                raise RuntimeError("boom")
        assert get_correlation_id() is None


@pytest.mark.unit
class TestBindNotificationContext:
    def test_binds_notification_fields(self):
        with bind_notification_context("rec-1", "welcome", channel="email"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx == {
                "notification_id": "rec-1",
                "notification_type": "welcome",
                "channel": "email",
            }
        assert structlog.contextvars.get_contextvars() == {}

    def test_type_is_optional(self):
        with bind_notification_context("rec-1"):
            assert "notification_type" not in structlog.contextvars.get_contextvars()

    def test_nested_in_request_context(self):
        with bind_request_context(correlation_id="req-9"):
            with bind_notification_context("rec-1"):
                ctx = structlog.contextvars.get_contextvars()
                assert ctx["correlation_id"] == "req-9"
                assert ctx["notification_id"] == "rec-1"
            assert "notification_id" not in structlog.contextvars.get_contextvars()

    def test_copied_context_reaches_worker_threads(self):
        def _read():
            return structlog.contextvars.get_contextvars().get("notification_id")

        with ThreadPoolExecutor(max_workers=1) as executor:
            with bind_notification_context("rec-7"):
                context = contextvars.copy_context()
                assert executor.submit(context.run, _read).result() == "rec-7"


@pytest.mark.unit
class TestClearRequestContext:
    def test_clears_everything(self):
        structlog.contextvars.bind_contextvars(correlation_id="x", notification_id="y")
        clear_request_context()
        assert structlog.contextvars.get_contextvars() == {}
