"""Infrastructure configuration module - public API.

Centralized configuration for the notification service using Pydantic
BaseSettings with domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()
    api_key = settings.gupshup.GUPSHUP_API_KEY
    table = settings.notifications.NOTIFICATION_LOG_TABLE
    ```
"""

from infrastructure.configuration.settings import Settings, settings

__all__ = ["Settings", "settings"]
