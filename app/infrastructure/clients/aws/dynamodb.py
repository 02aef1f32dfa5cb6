"""DynamoDB client for AWS operations.

Thin wrapper over the low-level DynamoDB API. All methods return
OperationResult; items are passed in DynamoDB attribute-value format.
"""

from typing import Any, Dict, Optional

import structlog

from infrastructure.clients.aws.client import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class DynamoDBClient:
    """Client for DynamoDB operations.

    Args:
        session_provider: SessionProvider instance for credential/config management
        default_role_arn: Role assumed when a call does not pass one explicitly
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        default_role_arn: Optional[str] = None,
    ) -> None:
        self._session_provider = session_provider
        self._default_role_arn = default_role_arn
        self._service_name = "dynamodb"

    def _client_kwargs(self, role_arn: Optional[str]) -> Dict[str, Any]:
        return self._session_provider.build_client_kwargs(
            service_name=self._service_name,
            role_arn=role_arn or self._default_role_arn,
        )

    def get_item(
        self,
        table_name: str,
        Key: Dict[str, Any],
        role_arn: Optional[str] = None,
        **kwargs,
    ) -> OperationResult:
        """Get an item by primary key.

        Returns:
            OperationResult whose data is the raw response; ``Item`` is
            absent when the key does not exist.
        """
        return execute_aws_api_call(
            self._service_name,
            "get_item",
            TableName=table_name,
            Key=Key,
            **self._client_kwargs(role_arn),
            **kwargs,
        )

    def put_item(
        self,
        table_name: str,
        Item: Dict[str, Any],
        role_arn: Optional[str] = None,
        **kwargs,
    ) -> OperationResult:
        """Put an item (ConditionExpression and friends go in kwargs)."""
        return execute_aws_api_call(
            self._service_name,
            "put_item",
            TableName=table_name,
            Item=Item,
            **self._client_kwargs(role_arn),
            **kwargs,
        )

    def update_item(
        self,
        table_name: str,
        Key: Dict[str, Any],
        role_arn: Optional[str] = None,
        **kwargs,
    ) -> OperationResult:
        """Update an item in place.

        Args:
            table_name: Name of the DynamoDB table
            Key: Primary key of the item
            role_arn: Optional role ARN
            **kwargs: UpdateExpression, ConditionExpression, ReturnValues, etc.

        Returns:
            OperationResult; a failed condition surfaces as a permanent error
            with ``error_code == "ConditionalCheckFailedException"``.
        """
        return execute_aws_api_call(
            self._service_name,
            "update_item",
            TableName=table_name,
            Key=Key,
            **self._client_kwargs(role_arn),
            **kwargs,
        )

    def query(
        self,
        table_name: str,
        KeyConditionExpression: Any,
        role_arn: Optional[str] = None,
        **kwargs,
    ) -> OperationResult:
        """Query items by key condition (IndexName, Limit, etc. in kwargs)."""
        return execute_aws_api_call(
            self._service_name,
            "query",
            TableName=table_name,
            KeyConditionExpression=KeyConditionExpression,
            **self._client_kwargs(role_arn),
            **kwargs,
        )

    def healthcheck(
        self, table_name: str, role_arn: Optional[str] = None
    ) -> OperationResult:
        """Cheap reachability check using ``describe_table``."""
        return execute_aws_api_call(
            self._service_name,
            "describe_table",
            max_retries=0,
            TableName=table_name,
            **self._client_kwargs(role_arn),
        )
