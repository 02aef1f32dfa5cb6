"""Base AWS client utilities for infrastructure clients.

Provides `get_boto3_client` and `execute_aws_api_call` with the
OperationResult pattern. Configuration is passed in by callers; nothing
here reads settings at import time.
"""

import time
from typing import Any, Dict, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore
import structlog

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

logger = structlog.get_logger()

TRANSIENT_ERROR_CODES = (
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "ProvisionedThroughputExceededException",
    "InternalServerError",
    "ServiceUnavailable",
)

UNAUTHORIZED_ERROR_CODES = (
    "AccessDeniedException",
    "UnauthorizedOperation",
    "UnrecognizedClientException",
)


def get_boto3_client(
    service_name: str,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    role_arn: Optional[str] = None,
    session_name: str = "NotificationServiceSession",
) -> BaseClient:
    """Create a boto3 client for the given service.

    Args:
        service_name: AWS service name (e.g., 'dynamodb')
        session_config: Optional boto3 session kwargs (e.g., region_name)
        client_config: Optional client kwargs (e.g., endpoint_url)
        role_arn: Optional role to assume before creating the client
        session_name: Name for the assumed role session

    Returns:
        botocore client instance
    """
    session_config = session_config or {}
    client_config = client_config or {}

    if role_arn:
        sts = boto3.client("sts")
        assumed = sts.assume_role(RoleArn=role_arn, RoleSessionName=session_name)
        creds = assumed["Credentials"]
        session = boto3.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            **session_config,
        )
    else:
        session = boto3.Session(**session_config)

    return session.client(service_name, **client_config)


def _calculate_retry_delay(attempt: int, backoff_factor: float = 0.5) -> float:
    return backoff_factor * (2**attempt)


def _map_client_error(e: ClientError) -> OperationResult:
    """Translate a botocore ClientError into an OperationResult.

    The AWS error code is preserved as ``error_code`` so callers can branch
    on conditions such as ``ConditionalCheckFailedException``.
    """
    error_code = e.response.get("Error", {}).get("Code")
    error_message = e.response.get("Error", {}).get("Message", str(e))

    if error_code in TRANSIENT_ERROR_CODES:
        retry_after = None
        try:
            retry_after = int(e.response.get("RetryAfter", 0)) or None
        except (TypeError, ValueError):
            retry_after = None
        return OperationResult.transient_error(
            message=error_message, error_code=error_code, retry_after=retry_after
        )

    if error_code in UNAUTHORIZED_ERROR_CODES:
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED, message=error_message, error_code=error_code
        )

    if error_code == "ResourceNotFoundException":
        return OperationResult.error(
            OperationStatus.NOT_FOUND, message=error_message, error_code=error_code
        )

    return OperationResult.permanent_error(message=error_message, error_code=error_code)


def execute_aws_api_call(
    service_name: str,
    method: str,
    role_arn: Optional[str] = None,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    max_retries: int = 3,
    backoff_factor: float = 0.5,
    **kwargs,
) -> OperationResult:
    """Execute an AWS API call with retries and standardized results.

    Transient errors (throttling, provisioned throughput) are retried with
    exponential backoff. Everything else returns immediately.

    Args mirror `boto3` call parameters; the function returns an
    `OperationResult` object for consistent downstream handling.
    """
    last_exc: Optional[Exception] = None

    for attempt in range(max_retries + 1):
        try:
            client = get_boto3_client(
                service_name,
                session_config=session_config,
                client_config=client_config,
                role_arn=role_arn,
            )
            response = getattr(client, method)(**kwargs)
            return OperationResult.success(
                data=response, message=f"{service_name}.{method} succeeded"
            )

        except ClientError as e:
            last_exc = e
            mapped = _map_client_error(e)

            if (
                mapped.status == OperationStatus.TRANSIENT_ERROR
                and attempt < max_retries
            ):
                delay = _calculate_retry_delay(attempt, backoff_factor)
                logger.warning(
                    "aws_api_retry",
                    service=service_name,
                    method=method,
                    attempt=attempt + 1,
                    error=str(e),
                    delay=delay,
                )
                time.sleep(delay)
                continue

            log = (
                logger.info
                if mapped.error_code == "ConditionalCheckFailedException"
                else logger.error
            )
            log(
                "aws_api_error_final",
                service=service_name,
                method=method,
                code=mapped.error_code,
                error=str(e),
            )
            return mapped

        except (BotoCoreError, Exception) as e:  # pylint: disable=broad-except
            last_exc = e
            logger.error(
                "aws_api_unexpected_error",
                service=service_name,
                method=method,
                error=str(e),
            )
            return OperationResult.transient_error(
                message=str(e), error_code="AWS_TRANSPORT_ERROR"
            )

    return OperationResult.permanent_error(
        message=str(last_exc) if last_exc else "unknown_error"
    )
