from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from api.dependencies.rate_limits import get_limiter
from infrastructure.logging import get_module_logger
from infrastructure.notifications import (
    NotificationNotFoundError,
    NotificationRecord,
    NotificationRequest,
    NotificationStoreError,
    WhatsAppError,
)
from infrastructure.services import NotificationServiceDep

logger = get_module_logger()
router = APIRouter(prefix="/notifications", tags=["Notifications"])
limiter = get_limiter()

MAX_LOGS_LIMIT = 100


class TestWhatsAppRequest(BaseModel):
    phone: str = Field(..., min_length=1)


class DispatchAccepted(BaseModel):
    queued: bool


@router.get("/logs", response_model=List[NotificationRecord])
@limiter.limit("60/minute")
def list_logs(
    request: Request,  # pylint: disable=unused-argument
    service: NotificationServiceDep,
    limit: int = Query(default=MAX_LOGS_LIMIT, ge=1, le=MAX_LOGS_LIMIT),
):
    """Most recent notification records, newest first."""
    try:
        return service.list_recent(limit)
    except NotificationStoreError as e:
        logger.error("notification_logs_unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification log store unavailable",
        ) from e


@router.get("/logs/{record_id}", response_model=NotificationRecord)
@limiter.limit("60/minute")
def get_log(
    record_id: str,
    request: Request,  # pylint: disable=unused-argument
    service: NotificationServiceDep,
):
    """Fetch one notification record with its per-channel statuses."""
    try:
        return service.get_record(record_id)
    except NotificationNotFoundError as e:
        raise HTTPException(status_code=404, detail="Notification not found") from e
    except NotificationStoreError as e:
        logger.error(
            "notification_log_unavailable", record_id=record_id, error=str(e)
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification log store unavailable",
        ) from e


@router.get("/status")
@limiter.limit("30/minute")
def get_status(
    request: Request,  # pylint: disable=unused-argument
    service: NotificationServiceDep,
) -> Dict[str, Any]:
    """Channel configuration (WhatsApp simulation mode, email) and store backend."""
    return service.status()


@router.post("/test-whatsapp")
@limiter.limit("5/minute")
def test_whatsapp(
    request: Request,  # pylint: disable=unused-argument
    body: TestWhatsAppRequest,
    service: NotificationServiceDep,
) -> Dict[str, Any]:
    """Send the connectivity test template to a phone number.

    Returns the gateway response. Provider or transport failures are
    reported as 502 with the provider payload when one was received.
    """
    try:
        result = service.send_test_whatsapp(body.phone)
    except WhatsAppError as e:
        logger.warning("test_whatsapp_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(e), "provider_response": e.payload},
        ) from e
    return {"success": True, "result": result.model_dump()}


@router.post("/send", response_model=NotificationRecord)
@limiter.limit("30/minute")
def send_notification(
    request: Request,  # pylint: disable=unused-argument
    body: NotificationRequest,
    service: NotificationServiceDep,
):
    """Deliver a notification synchronously and return its audit record.

    Channel failures are reported inside the record. Only a failure to
    create the record itself is an error (503).
    """
    try:
        return service.send(body.recipient, body.type, body.data, body.options)
    except NotificationStoreError as e:
        logger.error(
            "notification_send_store_failure",
            notification_type=body.type,
            error=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification could not be recorded",
        ) from e


@router.post(
    "/dispatch",
    response_model=DispatchAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit("60/minute")
def dispatch_notification(
    request: Request,  # pylint: disable=unused-argument
    body: NotificationRequest,
    service: NotificationServiceDep,
):
    """Queue a notification for background delivery."""
    queued = service.submit(body.recipient, body.type, body.data, body.options)
    if not queued:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification service is shutting down",
        )
    return DispatchAccepted(queued=True)
