"""SMTP email integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class SmtpSettings(IntegrationSettings):
    """SMTP transport configuration.

    Port 465 uses implicit SSL, any other port uses STARTTLS.

    Environment Variables:
        EMAIL_HOST: SMTP server host
        EMAIL_PORT: SMTP server port (default: 587)
        EMAIL_USER: SMTP username
        EMAIL_PASSWORD: SMTP password
        EMAIL_FROM: Sender address (defaults to EMAIL_USER)
        EMAIL_FROM_NAME: Display name of the sender
        SMTP_TIMEOUT_SECONDS: Socket timeout for the SMTP session
    """

    EMAIL_HOST: str | None = Field(default=None, alias="EMAIL_HOST")
    EMAIL_PORT: int = Field(default=587, alias="EMAIL_PORT")
    EMAIL_USER: str | None = Field(default=None, alias="EMAIL_USER")
    EMAIL_PASSWORD: str | None = Field(default=None, alias="EMAIL_PASSWORD")
    EMAIL_FROM: str | None = Field(default=None, alias="EMAIL_FROM")
    EMAIL_FROM_NAME: str = Field(default="SkillDad", alias="EMAIL_FROM_NAME")
    SMTP_TIMEOUT_SECONDS: int = Field(default=30, alias="SMTP_TIMEOUT_SECONDS")

    @property
    def is_configured(self) -> bool:
        """True when host and credentials are all present."""
        return bool(self.EMAIL_HOST and self.EMAIL_USER and self.EMAIL_PASSWORD)

    @property
    def sender_address(self) -> str | None:
        return self.EMAIL_FROM or self.EMAIL_USER
