"""
Fixtures for integration tests.

Integration tests run the full application (lifespan, middleware, routes,
dispatcher, store) and mock only at the system boundaries: the SMTP
transport and, through simulation mode, the WhatsApp gateway.
"""

from contextlib import contextmanager
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import get_limiter
from infrastructure.notifications import NotificationService
from infrastructure.services.providers import get_notification_service, get_settings
from server.server import create_app


@pytest.fixture
def integration_service(
    settings, memory_store, simulated_gateway, mock_email_transport
):
    service = NotificationService(
        settings=settings,
        store=memory_store,
        gateway=simulated_gateway,
        email_transport=mock_email_transport,
    )
    yield service
    service.shutdown()


@pytest.fixture
def running_app(settings, integration_service):
    """Factory entering the application lifespan with in-process collaborators.

    Example:
        with running_app() as client:
            client.get("/health")
    """

    @contextmanager
    def _running_app():
        get_limiter().reset()
        with patch("server.lifespan.get_settings", return_value=settings), patch(
            "server.lifespan.get_notification_service",
            return_value=integration_service,
        ):
            app = create_app()
            app.dependency_overrides[get_settings] = lambda: settings
            app.dependency_overrides[get_notification_service] = (
                lambda: integration_service
            )
            with TestClient(app) as client:
                yield client

    return _running_app


@pytest.fixture
def app_with_lifespan(running_app):
    """TestClient with startup complete."""
    with running_app() as client:
        yield client
