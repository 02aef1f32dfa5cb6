"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.notifications.service import (
    NotificationService,
    build_notification_store,
)
from infrastructure.notifications.store import NotificationStore
from integrations.gupshup.client import GupshupClient
from integrations.smtp.client import SmtpEmailTransport


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/config")
        def get_config(settings: SettingsDep):
            return settings.model_dump()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_notification_store() -> NotificationStore:
    """Audit store selected by NOTIFICATION_STORE_BACKEND."""
    return build_notification_store(get_settings())


@lru_cache
def get_whatsapp_gateway() -> GupshupClient:
    """Gupshup client; runs in simulation mode without credentials."""
    settings = get_settings()
    return GupshupClient(
        settings.gupshup, timezone=settings.notifications.NOTIFICATION_TIMEZONE
    )


@lru_cache
def get_email_transport() -> SmtpEmailTransport:
    return SmtpEmailTransport(get_settings().smtp)


@lru_cache
def get_notification_service() -> NotificationService:
    """
    Get application-scoped notification service singleton.

    The service owns the channel and background thread pools; the server
    lifespan hook calls ``shutdown()`` on it.

    Usage:
        @router.post("/notify")
        def notify(service: NotificationServiceDep, request: NotificationRequest):
            return service.send(request.recipient, request.type, request.data)
    """
    return NotificationService(
        settings=get_settings(),
        store=get_notification_store(),
        gateway=get_whatsapp_gateway(),
        email_transport=get_email_transport(),
    )
