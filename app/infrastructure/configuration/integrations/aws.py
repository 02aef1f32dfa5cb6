"""AWS integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class AwsSettings(IntegrationSettings):
    """AWS configuration settings.

    Environment Variables:
        AWS_REGION: AWS region for services (default: ap-south-1)
        DYNAMODB_ENDPOINT_URL: Custom DynamoDB endpoint (LocalStack, dynamodb-local)
        NOTIFICATION_LOG_ROLE_ARN: Optional role to assume for the audit table

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        region = settings.aws.AWS_REGION
        ```
    """

    AWS_REGION: str = Field(default="ap-south-1", alias="AWS_REGION")
    DYNAMODB_ENDPOINT_URL: str | None = Field(
        default=None, alias="DYNAMODB_ENDPOINT_URL"
    )
    NOTIFICATION_LOG_ROLE_ARN: str | None = Field(
        default=None, alias="NOTIFICATION_LOG_ROLE_ARN"
    )

    @property
    def SERVICE_ROLE_MAP(self) -> dict[str, str]:
        """Mapping of service names to the role ARNs assumed for them."""
        if not self.NOTIFICATION_LOG_ROLE_ARN:
            return {}
        return {"dynamodb": self.NOTIFICATION_LOG_ROLE_ARN}
