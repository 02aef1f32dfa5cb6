"""Gupshup WhatsApp template-messaging client.

Sends pre-approved WhatsApp templates through the Gupshup REST API. When
the API key or source number is not configured the client runs in
simulation mode: nothing leaves the process and a synthetic ``sim_`` message
id is returned, so the rest of the engine behaves exactly as in production.
"""

import json
import re
import uuid
from typing import Any, Dict, List, Optional, Sequence

import requests
from pydantic import BaseModel

from infrastructure.configuration.integrations.gupshup import GupshupSettings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.exceptions import (
    InvalidPhoneNumberError,
    WhatsAppProviderError,
    WhatsAppTransportError,
)
from infrastructure.notifications.templates import whatsapp as templates
from infrastructure.notifications.templates.formatting import DEFAULT_TIMEZONE

logger = get_module_logger()

ACCEPTED_STATUSES = frozenset({"submitted", "success"})
SIMULATED_STATUS = "simulated"


class WhatsAppSendResult(BaseModel):
    """Outcome of an accepted (or simulated) template send."""

    message_id: Optional[str] = None
    status: str
    simulated: bool = False
    raw: Optional[Dict[str, Any]] = None


class GupshupClient:
    """Client for the Gupshup template message endpoint.

    Args:
        settings: Gupshup settings (credentials, endpoint, template ids)
        timezone: Timezone used when helpers format dates
        session: Optional requests session (connection reuse, tests)
    """

    def __init__(
        self,
        settings: GupshupSettings,
        timezone: str = DEFAULT_TIMEZONE,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings
        self._timezone = timezone
        self._session = session or requests.Session()
        logger.info(
            "initialized_whatsapp_gateway",
            provider="gupshup",
            simulation=not self.is_enabled,
        )

    @property
    def is_enabled(self) -> bool:
        """True when live sends are possible (API key and source both set)."""
        return self._settings.is_configured

    @staticmethod
    def normalize_phone(phone: Optional[Any]) -> str:
        """Strip everything but digits: ``+91 99999-99999`` -> ``919999999999``."""
        if phone is None:
            return ""
        return re.sub(r"\D", "", str(phone))

    def template_id(self, template_key: str) -> str:
        """Configured provider template id for a logical template key."""
        return self._settings.TEMPLATE_IDS.get(template_key, template_key)

    def send_template(
        self, phone: Optional[str], template_id: str, params: Sequence[Any] = ()
    ) -> WhatsAppSendResult:
        """Send a template message.

        Args:
            phone: Destination in any format; canonicalized to digits
            template_id: Provider template id
            params: Ordered template parameters (stringified, None -> "")

        Returns:
            WhatsAppSendResult for an accepted or simulated send

        Raises:
            InvalidPhoneNumberError: No digits in ``phone`` (never hits the network)
            WhatsAppTransportError: HTTP error or network failure
            WhatsAppProviderError: Provider answered with a non-accepted status
        """
        destination = self.normalize_phone(phone)
        if not destination:
            logger.warning("whatsapp_invalid_phone", template_id=template_id)
            raise InvalidPhoneNumberError("Phone number is empty after normalization")

        string_params = ["" if p is None else str(p) for p in params]

        if not self.is_enabled:
            message_id = f"sim_{uuid.uuid4().hex[:12]}"
            logger.info(
                "whatsapp_simulated_send",
                template_id=template_id,
                destination=destination,
                params=string_params,
                message_id=message_id,
            )
            return WhatsAppSendResult(
                message_id=message_id, status=SIMULATED_STATUS, simulated=True
            )

        return self._post_template(destination, template_id, string_params)

    def _post_template(
        self, destination: str, template_id: str, params: List[str]
    ) -> WhatsAppSendResult:
        form = {
            "source": self._settings.GUPSHUP_SOURCE,
            "destination": destination,
            "template": json.dumps({"id": template_id, "params": params}),
        }
        headers = {
            "apikey": self._settings.GUPSHUP_API_KEY,
            "Content-Type": "application/x-www-form-urlencoded",
        }

        try:
            response = self._session.post(
                self._settings.GUPSHUP_API_URL,
                data=form,
                headers=headers,
                timeout=self._settings.GUPSHUP_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            payload = _response_payload(e.response)
            logger.error(
                "whatsapp_http_error",
                template_id=template_id,
                destination=destination,
                status_code=e.response.status_code if e.response is not None else None,
                payload=payload,
            )
            raise WhatsAppTransportError(
                f"Gupshup HTTP error: {e}", payload=payload
            ) from e
        except requests.RequestException as e:
            logger.error(
                "whatsapp_transport_error",
                template_id=template_id,
                destination=destination,
                error=str(e),
            )
            raise WhatsAppTransportError(f"Gupshup request failed: {e}") from e

        payload = _response_payload(response)
        if not isinstance(payload, dict):
            logger.error(
                "whatsapp_provider_rejected",
                template_id=template_id,
                destination=destination,
                payload=payload,
            )
            raise WhatsAppProviderError(
                "Gupshup returned a non-JSON response", payload=payload
            )

        status = payload.get("status")
        if status not in ACCEPTED_STATUSES:
            logger.error(
                "whatsapp_provider_rejected",
                template_id=template_id,
                destination=destination,
                payload=payload,
            )
            raise WhatsAppProviderError(
                payload.get("message") or "Gupshup submission failed",
                payload=payload,
            )

        logger.info(
            "whatsapp_template_sent",
            template_id=template_id,
            destination=destination,
            provider_status=status,
        )
        return WhatsAppSendResult(
            message_id=payload.get("messageId") or payload.get("id"),
            status=status,
            raw=payload,
        )

    def notify_live_session_scheduled(
        self, name: str, phone: str, topic: str, start_time: Optional[str]
    ) -> WhatsAppSendResult:
        return self.send_template(
            phone,
            self.template_id(templates.LIVE_SESSION_SCHEDULED),
            templates.live_session_scheduled_params(
                name, topic, start_time, self._timezone
            ),
        )

    def notify_live_session_updated(
        self, name: str, phone: str, topic: str
    ) -> WhatsAppSendResult:
        return self.send_template(
            phone,
            self.template_id(templates.LIVE_SESSION_UPDATED),
            templates.live_session_updated_params(name, topic),
        )

    def notify_exam_scheduled(
        self,
        name: str,
        phone: str,
        exam_title: str,
        course_title: str,
        scheduled_date: Optional[str],
    ) -> WhatsAppSendResult:
        return self.send_template(
            phone,
            self.template_id(templates.EXAM_SCHEDULED),
            templates.exam_scheduled_params(
                name, exam_title, course_title, scheduled_date, self._timezone
            ),
        )

    def notify_exam_result(
        self,
        name: str,
        phone: str,
        exam_title: str,
        score: Any,
        percentage: Any,
        passed: bool,
    ) -> WhatsAppSendResult:
        return self.send_template(
            phone,
            self.template_id(templates.EXAM_RESULT),
            templates.exam_result_params(
                name,
                exam_title,
                None if score is None else str(score),
                None if percentage is None else str(percentage),
                passed,
            ),
        )

    def notify_course_completion(
        self, name: str, phone: str, course_title: str
    ) -> WhatsAppSendResult:
        return self.send_template(
            phone,
            self.template_id(templates.COURSE_COMPLETED),
            templates.course_completion_params(name, course_title),
        )

    def send_test_message(
        self,
        phone: str,
        name: str = "Admin Test User",
        source_label: str = "SkillDad Engineering Hub",
    ) -> WhatsAppSendResult:
        """Send the connectivity test template used by the admin endpoint."""
        return self.send_template(
            phone,
            self.template_id(templates.TEST_NOTIFICATION),
            [name, source_label],
        )

    def describe(self) -> Dict[str, Any]:
        """Gateway status for monitoring."""
        return {
            "provider": "gupshup",
            "enabled": self.is_enabled,
            "simulation": not self.is_enabled,
            "base_url": self._settings.GUPSHUP_API_URL,
        }


def _response_payload(response: Optional[requests.Response]) -> Any:
    """Decoded JSON body, else the raw text, else None."""
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
