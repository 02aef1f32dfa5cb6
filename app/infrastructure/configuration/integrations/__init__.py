"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.gupshup import GupshupSettings
from infrastructure.configuration.integrations.smtp import SmtpSettings

__all__ = [
    "AwsSettings",
    "GupshupSettings",
    "SmtpSettings",
]
