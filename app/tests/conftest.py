import sys
from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

# Ensure the application package root is on sys.path so importing application
# modules (e.g. `infrastructure.notifications`) works during pytest collection
# regardless of the directory pytest is invoked from.
project_root = str(Path(__file__).resolve().parents[1])
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest  # noqa: E402

from infrastructure.configuration import Settings  # noqa: E402
from infrastructure.configuration.infrastructure import (  # noqa: E402
    NotificationSettings,
)
from infrastructure.configuration.integrations import (  # noqa: E402
    GupshupSettings,
    SmtpSettings,
)
from infrastructure.notifications.store import InMemoryNotificationStore  # noqa: E402
from infrastructure.notifications.templates import TemplateResolver  # noqa: E402
from integrations.gupshup.client import GupshupClient  # noqa: E402
from tests.factories.notifications import make_recipient_data  # noqa: E402


@pytest.fixture
def notification_settings() -> NotificationSettings:
    return NotificationSettings(
        NOTIFICATION_STORE_BACKEND="memory",
        NOTIFICATION_MAX_WORKERS=4,
        NOTIFICATION_BACKGROUND_WORKERS=2,
        NOTIFICATION_RECENT_LIMIT=100,
        BRAND_NAME="SkillDad",
        SUPPORT_EMAIL="support@skilldad.example",
        CLIENT_URL="https://app.skilldad.example",
        NOTIFICATION_TIMEZONE="Asia/Kolkata",
    )


@pytest.fixture
def gupshup_settings() -> GupshupSettings:
    """Gupshup settings without credentials (simulation mode)."""
    return GupshupSettings(GUPSHUP_API_KEY=None, GUPSHUP_SOURCE=None)


@pytest.fixture
def live_gupshup_settings() -> GupshupSettings:
    return GupshupSettings(
        GUPSHUP_API_KEY="test-api-key",
        GUPSHUP_SOURCE="917834811114",
        GUPSHUP_API_URL="https://gupshup.example/wa/api/v1/template/msg",
    )


@pytest.fixture
def smtp_settings() -> SmtpSettings:
    return SmtpSettings(
        EMAIL_HOST="smtp.example.com",
        EMAIL_PORT=587,
        EMAIL_USER="mailer@skilldad.example",
        EMAIL_PASSWORD="hunter2",
        EMAIL_FROM="noreply@skilldad.example",
    )


@pytest.fixture
def settings(notification_settings, gupshup_settings, smtp_settings) -> Settings:
    """Settings wired for in-process tests: memory store, simulated WhatsApp."""
    return Settings(
        PREFIX="test-",
        notifications=notification_settings,
        gupshup=gupshup_settings,
        smtp=smtp_settings,
    )


@pytest.fixture
def memory_store() -> InMemoryNotificationStore:
    return InMemoryNotificationStore()


@pytest.fixture
def resolver() -> TemplateResolver:
    return TemplateResolver()


@pytest.fixture
def simulated_gateway(gupshup_settings) -> GupshupClient:
    return GupshupClient(gupshup_settings)


@pytest.fixture
def mock_email_transport():
    """Email transport double that accepts every message.

    Sent messages are recorded on ``transport.sent``.
    """
    transport = MagicMock()
    transport.is_configured = True
    transport.sent = []

    def _send(to_address, subject, html_body):
        transport.sent.append(
            {"to": to_address, "subject": subject, "html_body": html_body}
        )
        result = MagicMock()
        result.message_id = f"<msg-{len(transport.sent)}@skilldad.example>"
        return result

    transport.send.side_effect = _send
    transport.describe.return_value = {"provider": "smtp", "enabled": True}
    return transport


@pytest.fixture
def recipient_factory():
    """Factory for recipient payloads.

    Example:
        recipient = recipient_factory(email=None, phone="+91 99999 99999")
    """

    def _factory(
        name: str = "Asha Rao",
        email: Optional[str] = "asha@example.com",
        phone: Optional[str] = "+91 98765 43210",
        id: Optional[str] = "user-1",  # pylint: disable=redefined-builtin
    ) -> Dict[str, Any]:
        return make_recipient_data(name=name, email=email, phone=phone, id=id)

    return _factory
