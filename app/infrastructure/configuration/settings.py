"""Notification service configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    AwsSettings,
    GupshupSettings,
    SmtpSettings,
)

# Infrastructure settings
from infrastructure.configuration.infrastructure import (
    NotificationSettings,
    ServerSettings,
)


class Settings(BaseSettings):
    """Notification service configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: External gateways (Gupshup, SMTP, AWS)
    - **Infrastructure**: Core engine configuration (notifications, server)

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        # Access integration settings
        if settings.gupshup.is_configured:
            ...

        # Access infrastructure settings
        table = settings.notifications.NOTIFICATION_LOG_TABLE
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    aws: AwsSettings
    gupshup: GupshupSettings
    smtp: SmtpSettings

    # Infrastructure settings
    notifications: NotificationSettings
    server: ServerSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "aws": AwsSettings,
            "gupshup": GupshupSettings,
            "smtp": SmtpSettings,
            # Infrastructure
            "notifications": NotificationSettings,
            "server": ServerSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the singleton settings instance
settings = Settings()
