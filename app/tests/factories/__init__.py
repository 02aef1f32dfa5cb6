"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    make_channel_status,
    make_notification_record,
    make_recipient,
    make_recipient_data,
)

__all__ = [
    "make_channel_status",
    "make_notification_record",
    "make_recipient",
    "make_recipient_data",
]
