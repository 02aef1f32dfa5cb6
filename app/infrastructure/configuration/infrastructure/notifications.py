"""Notification engine infrastructure settings."""

from typing import Literal

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class NotificationSettings(InfrastructureSettings):
    """Notification dispatcher, audit store and rendering configuration.

    Environment Variables:
        NOTIFICATION_STORE_BACKEND: ``dynamodb`` or ``memory`` (default: dynamodb)
        NOTIFICATION_LOG_TABLE: DynamoDB table holding notification records
        NOTIFICATION_LOG_RETENTION_DAYS: TTL applied to stored records
        NOTIFICATION_MAX_WORKERS: Threads used to fan out channel sends
        NOTIFICATION_BACKGROUND_WORKERS: Threads used for fire-and-forget dispatch
        NOTIFICATION_RECENT_LIMIT: Upper bound for the monitoring listing
        BRAND_NAME: Product name used in subjects and email layout
        SUPPORT_EMAIL: Contact address printed in the email footer
        CLIENT_URL: Public web client URL used for call-to-action links
        NOTIFICATION_TIMEZONE: Timezone used when rendering dates

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        backend = settings.notifications.NOTIFICATION_STORE_BACKEND
        ```
    """

    NOTIFICATION_STORE_BACKEND: Literal["dynamodb", "memory"] = Field(
        default="dynamodb", alias="NOTIFICATION_STORE_BACKEND"
    )
    NOTIFICATION_LOG_TABLE: str = Field(
        default="notification_logs", alias="NOTIFICATION_LOG_TABLE"
    )
    NOTIFICATION_LOG_RETENTION_DAYS: int = Field(
        default=180, alias="NOTIFICATION_LOG_RETENTION_DAYS"
    )
    NOTIFICATION_MAX_WORKERS: int = Field(default=8, alias="NOTIFICATION_MAX_WORKERS")
    NOTIFICATION_BACKGROUND_WORKERS: int = Field(
        default=4, alias="NOTIFICATION_BACKGROUND_WORKERS"
    )
    NOTIFICATION_RECENT_LIMIT: int = Field(
        default=100, alias="NOTIFICATION_RECENT_LIMIT"
    )

    BRAND_NAME: str = Field(default="SkillDad", alias="BRAND_NAME")
    SUPPORT_EMAIL: str = Field(default="support@skilldad.com", alias="SUPPORT_EMAIL")
    CLIENT_URL: str = Field(default="http://localhost:5173", alias="CLIENT_URL")
    NOTIFICATION_TIMEZONE: str = Field(
        default="Asia/Kolkata", alias="NOTIFICATION_TIMEZONE"
    )
