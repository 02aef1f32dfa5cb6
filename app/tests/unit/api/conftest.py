"""Fixtures for API route tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import get_limiter, setup_rate_limiter
from api.router import api_router
from infrastructure.notifications import NotificationService
from infrastructure.services.providers import get_notification_service, get_settings


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter = get_limiter()
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def notification_service(settings, memory_store, simulated_gateway, mock_email_transport):
    service = NotificationService(
        settings=settings,
        store=memory_store,
        gateway=simulated_gateway,
        email_transport=mock_email_transport,
    )
    yield service
    service.shutdown()


@pytest.fixture
def api_app(settings, notification_service) -> FastAPI:
    """API routes with the service and settings providers overridden."""
    app = FastAPI()
    setup_rate_limiter(app)
    app.include_router(api_router)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_notification_service] = lambda: notification_service
    return app


@pytest.fixture
def client(api_app) -> TestClient:
    return TestClient(api_app)
