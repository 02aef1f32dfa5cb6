"""Notification engine core models.

Channel-agnostic request and audit-record models shared by the dispatcher,
the channel adapters and the audit store.

Uses Pydantic BaseModel for:
- Boundary validation of caller input before anything is persisted
- JSON-ready serialization of audit records (API and store)
"""

import json
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NotificationType(str, Enum):
    """Known notification event types.

    ``send()`` also accepts arbitrary strings; those are stored verbatim and
    rendered with the generic fallback template.
    """

    WELCOME = "welcome"
    LIVE_SESSION = "liveSession"
    LIVE_SESSION_UPDATE = "liveSessionUpdate"
    EXAM = "exam"
    EXAM_RESULT = "examResult"
    ENROLLMENT = "enrollment"
    SUPPORT = "support"
    REMINDER = "reminder"
    CUSTOM = "custom"
    COURSE_COMPLETION = "courseCompletion"


class ChannelName(str, Enum):
    EMAIL = "email"
    WHATSAPP = "whatsapp"


class ChannelState(str, Enum):
    """Per-channel delivery state.

    ``pending`` is the only non-terminal state; the only transitions are
    pending -> sent and pending -> failed.
    """

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self is not ChannelState.PENDING


class RequestedChannel(str, Enum):
    """Which channels the caller asked for, regardless of outcome.

    A request with neither channel enabled is labelled ``whatsapp``; both
    channels are then ``skipped`` on the record.
    """

    BOTH = "both"
    EMAIL = "email"
    WHATSAPP = "whatsapp"

    @classmethod
    def from_options(cls, options: "DeliveryOptions") -> "RequestedChannel":
        if options.email and options.whatsapp:
            return cls.BOTH
        if options.email:
            return cls.EMAIL
        return cls.WHATSAPP


class Recipient(BaseModel):
    """Notification recipient snapshot.

    Attributes:
        id: Opaque caller-side user id (optional)
        name: Display name used in templates (required, non-blank)
        email: Email address (optional; syntax is checked by the email
            channel so a bad address fails only that channel)
        phone: Phone number in any human format (optional, canonicalized
            to digits by the WhatsApp gateway)

    Example:
        recipient = Recipient(name="Alice", email="alice@example.com")
    """

    id: Optional[str] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        """Accept numeric ids from callers."""
        if v is None:
            return None
        return str(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure name is not empty."""
        if not v or not v.strip():
            raise ValueError("Recipient name cannot be empty")
        return v.strip()

    @field_validator("email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat blank destinations as absent."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class DeliveryOptions(BaseModel):
    """Channels requested by the caller."""

    email: bool = True
    whatsapp: bool = True


def coerce_metadata(data: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Flatten caller event data into a key -> string map.

    bool -> ``true``/``false``, datetime/date -> ISO 8601, containers ->
    JSON, everything else -> ``str()``. ``None`` values are dropped.
    """
    if not data:
        return {}

    metadata: Dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, bool):
            metadata[str(key)] = "true" if value else "false"
        elif isinstance(value, (datetime, date)):
            metadata[str(key)] = value.isoformat()
        elif isinstance(value, (dict, list, tuple)):
            metadata[str(key)] = json.dumps(value, default=str)
        else:
            metadata[str(key)] = str(value)
    return metadata


class NotificationRequest(BaseModel):
    """Caller-supplied send request (HTTP body and programmatic callers).

    Example:
        request = NotificationRequest(
            recipient={"name": "Bob", "phone": "+91 99999 99999"},
            type="exam",
            data={"examTitle": "Midterm", "courseTitle": "CS101"},
            options={"email": False, "whatsapp": True},
        )
    """

    recipient: Recipient
    type: str
    data: Dict[str, str] = Field(default_factory=dict)
    options: DeliveryOptions = Field(default_factory=DeliveryOptions)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Notification type cannot be empty")
        return v.strip()

    @field_validator("data", mode="before")
    @classmethod
    def validate_data(cls, v: Any) -> Dict[str, str]:
        if v is not None and not isinstance(v, Mapping):
            raise ValueError("Notification data must be an object")
        return coerce_metadata(v)


class ChannelStatus(BaseModel):
    """Delivery outcome of one channel.

    Attributes:
        state: Current ChannelState
        provider_message_id: Id assigned by the email server or WhatsApp gateway
        provider_status: Raw gateway status (``submitted``, ``simulated``, ...)
        error: Failure description when ``state`` is ``failed``
        timestamp: When the terminal state was reached
    """

    state: ChannelState
    provider_message_id: Optional[str] = None
    provider_status: Optional[str] = None
    error: Optional[str] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def pending(cls) -> "ChannelStatus":
        return cls(state=ChannelState.PENDING)

    @classmethod
    def skipped(cls) -> "ChannelStatus":
        return cls(state=ChannelState.SKIPPED)

    @classmethod
    def sent(
        cls,
        provider_message_id: Optional[str] = None,
        provider_status: Optional[str] = None,
    ) -> "ChannelStatus":
        return cls(
            state=ChannelState.SENT,
            provider_message_id=provider_message_id,
            provider_status=provider_status,
            timestamp=utc_now(),
        )

    @classmethod
    def failed(cls, error: str) -> "ChannelStatus":
        return cls(state=ChannelState.FAILED, error=error, timestamp=utc_now())


class ChannelStatuses(BaseModel):
    email: ChannelStatus
    whatsapp: ChannelStatus

    def for_channel(self, channel: ChannelName) -> ChannelStatus:
        return getattr(self, ChannelName(channel).value)


class NotificationRecord(BaseModel):
    """Persisted audit record of one notification request.

    The recipient fields are a snapshot taken at send time and are never
    updated afterwards. Each channel's status is written at most once after
    creation, by that channel's adapter.

    Example:
        record = NotificationRecord.create(
            recipient=Recipient(name="Alice", email="alice@example.com"),
            notification_type="welcome",
            metadata={},
            options=DeliveryOptions(whatsapp=False),
        )
        record.status.email.state  # ChannelState.PENDING
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    recipient_id: Optional[str] = None
    recipient_name: str
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    type: str
    metadata: Dict[str, str] = Field(default_factory=dict)
    channel: RequestedChannel
    status: ChannelStatuses

    @classmethod
    def create(
        cls,
        recipient: Recipient,
        notification_type: str,
        metadata: Dict[str, str],
        options: DeliveryOptions,
    ) -> "NotificationRecord":
        """Build the initial record with per-channel eligibility applied.

        A channel starts ``pending`` only when it was requested and the
        recipient has a destination for it; otherwise it is ``skipped``.
        """
        email_eligible = bool(options.email and recipient.email)
        whatsapp_eligible = bool(options.whatsapp and recipient.phone)
        now = utc_now()
        return cls(
            created_at=now,
            updated_at=now,
            recipient_id=recipient.id,
            recipient_name=recipient.name,
            recipient_email=recipient.email,
            recipient_phone=recipient.phone,
            type=notification_type,
            metadata=dict(metadata),
            channel=RequestedChannel.from_options(options),
            status=ChannelStatuses(
                email=(
                    ChannelStatus.pending()
                    if email_eligible
                    else ChannelStatus.skipped()
                ),
                whatsapp=(
                    ChannelStatus.pending()
                    if whatsapp_eligible
                    else ChannelStatus.skipped()
                ),
            ),
        )

    @property
    def pending_channels(self) -> List[ChannelName]:
        return [
            channel
            for channel in ChannelName
            if self.status.for_channel(channel).state == ChannelState.PENDING
        ]


class EmailContent(BaseModel):
    """Rendered email: subject line and HTML body."""

    subject: str
    html_body: str


class WhatsAppContent(BaseModel):
    """Rendered WhatsApp template call.

    ``template_key`` is a logical key (``exam_scheduled``, ...) mapped to a
    provider template id by the adapter. ``None`` means the type has no
    WhatsApp template.
    """

    template_key: Optional[str] = None
    params: List[str] = Field(default_factory=list)
