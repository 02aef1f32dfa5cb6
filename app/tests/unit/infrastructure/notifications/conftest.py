"""Fixtures for notification engine tests."""

import pytest

from infrastructure.notifications.channels import EmailChannel, WhatsAppChannel
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.models import ChannelName


@pytest.fixture
def email_channel(resolver, memory_store, mock_email_transport):
    return EmailChannel(resolver, memory_store, mock_email_transport)


@pytest.fixture
def whatsapp_channel(resolver, memory_store, simulated_gateway):
    return WhatsAppChannel(resolver, memory_store, simulated_gateway)


@pytest.fixture
def dispatcher(memory_store, email_channel, whatsapp_channel):
    """Dispatcher over the in-memory store with a simulated WhatsApp gateway."""
    dispatcher = NotificationDispatcher(
        store=memory_store,
        channels={
            ChannelName.EMAIL: email_channel,
            ChannelName.WHATSAPP: whatsapp_channel,
        },
        max_workers=4,
    )
    yield dispatcher
    dispatcher.close()
