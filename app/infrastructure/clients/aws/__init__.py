"""Infrastructure AWS clients public API.

DI-friendly AWS clients built on a shared SessionProvider:

    from infrastructure.clients.aws import DynamoDBClient, SessionProvider

    provider = SessionProvider(region="ap-south-1")
    dynamodb = DynamoDBClient(provider)
    result = dynamodb.get_item("notification_logs", {"id": {"S": "123"}})
    if result.is_success:
        item = result.data.get("Item")

Infrastructure services are obtained through `infrastructure/services/`.
"""

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.session_provider import SessionProvider

__all__ = [
    "SessionProvider",
    "DynamoDBClient",
]
