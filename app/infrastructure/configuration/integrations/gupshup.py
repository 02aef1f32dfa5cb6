"""Gupshup WhatsApp integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class GupshupSettings(IntegrationSettings):
    """Gupshup template-messaging API configuration.

    When either GUPSHUP_API_KEY or GUPSHUP_SOURCE is unset the WhatsApp
    gateway runs in simulation mode and never touches the network.

    Environment Variables:
        GUPSHUP_API_KEY: API key sent in the ``apikey`` header
        GUPSHUP_SOURCE: Registered WhatsApp source number (digits, with country code)
        GUPSHUP_API_URL: Template message endpoint
        GUPSHUP_TIMEOUT_SECONDS: HTTP timeout for a single send
        GUPSHUP_TEMPLATE_*: Template ids approved in the Gupshup dashboard

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        if settings.gupshup.is_configured:
            ...
        ```
    """

    GUPSHUP_API_KEY: str | None = Field(default=None, alias="GUPSHUP_API_KEY")
    GUPSHUP_SOURCE: str | None = Field(default=None, alias="GUPSHUP_SOURCE")
    GUPSHUP_API_URL: str = Field(
        default="https://api.gupshup.io/wa/api/v1/template/msg",
        alias="GUPSHUP_API_URL",
    )
    GUPSHUP_TIMEOUT_SECONDS: int = Field(default=30, alias="GUPSHUP_TIMEOUT_SECONDS")

    GUPSHUP_TEMPLATE_WELCOME: str = Field(
        default="welcome_onboarding", alias="GUPSHUP_TEMPLATE_WELCOME"
    )
    GUPSHUP_TEMPLATE_LIVE: str = Field(
        default="live_session_scheduled", alias="GUPSHUP_TEMPLATE_LIVE"
    )
    GUPSHUP_TEMPLATE_LIVE_UPDATE: str = Field(
        default="live_session_updated", alias="GUPSHUP_TEMPLATE_LIVE_UPDATE"
    )
    GUPSHUP_TEMPLATE_EXAM: str = Field(
        default="exam_scheduled", alias="GUPSHUP_TEMPLATE_EXAM"
    )
    GUPSHUP_TEMPLATE_RESULT: str = Field(
        default="exam_result", alias="GUPSHUP_TEMPLATE_RESULT"
    )
    GUPSHUP_TEMPLATE_CERT: str = Field(
        default="course_completed", alias="GUPSHUP_TEMPLATE_CERT"
    )
    GUPSHUP_TEMPLATE_TEST: str = Field(
        default="test_notification_v1", alias="GUPSHUP_TEMPLATE_TEST"
    )

    @property
    def is_configured(self) -> bool:
        """True when both the API key and the source number are set."""
        return bool(self.GUPSHUP_API_KEY and self.GUPSHUP_SOURCE)

    @property
    def TEMPLATE_IDS(self) -> dict[str, str]:
        """Logical template key -> Gupshup template id."""
        return {
            "welcome": self.GUPSHUP_TEMPLATE_WELCOME,
            "live_session_scheduled": self.GUPSHUP_TEMPLATE_LIVE,
            "live_session_updated": self.GUPSHUP_TEMPLATE_LIVE_UPDATE,
            "exam_scheduled": self.GUPSHUP_TEMPLATE_EXAM,
            "exam_result": self.GUPSHUP_TEMPLATE_RESULT,
            "course_completed": self.GUPSHUP_TEMPLATE_CERT,
            "test_notification": self.GUPSHUP_TEMPLATE_TEST,
        }
