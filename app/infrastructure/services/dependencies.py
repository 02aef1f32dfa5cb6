"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated
from fastapi import Depends
from infrastructure.configuration import Settings
from infrastructure.notifications.service import NotificationService
from infrastructure.services.providers import (
    get_settings,
    get_notification_service,
)

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Notification engine facade: send, submit, logs and status
NotificationServiceDep = Annotated[
    NotificationService, Depends(get_notification_service)
]

__all__ = [
    "SettingsDep",
    "NotificationServiceDep",
]
