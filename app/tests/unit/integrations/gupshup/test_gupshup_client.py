"""Unit tests for the Gupshup WhatsApp client.

The requests session is mocked; no network traffic is generated.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from infrastructure.notifications.exceptions import (
    InvalidPhoneNumberError,
    WhatsAppProviderError,
    WhatsAppTransportError,
)
from integrations.gupshup.client import GupshupClient


def _response(payload=None, status_code=200, text=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    if payload is None:
        response.json.side_effect = ValueError("no json")
        response.text = text or ""
    else:
        response.json.return_value = payload
        response.text = json.dumps(payload)
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Server Error", response=response
        )
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def live_client(live_gupshup_settings, session):
    return GupshupClient(live_gupshup_settings, session=session)


@pytest.mark.unit
class TestNormalizePhone:
    @pytest.mark.parametrize(
        "phone,expected",
        [
            ("+91 98765-43210", "919876543210"),
            ("(999) 999 9999", "9999999999"),
            (9999999999, "9999999999"),
            ("", ""),
            (None, ""),
            ("abc", ""),
        ],
    )
    def test_normalize(self, phone, expected):
        assert GupshupClient.normalize_phone(phone) == expected


@pytest.mark.unit
class TestSimulationMode:
    def test_is_disabled_without_credentials(self, simulated_gateway):
        assert simulated_gateway.is_enabled is False
        assert simulated_gateway.describe()["simulation"] is True

    def test_simulated_send(self, gupshup_settings, session):
        client = GupshupClient(gupshup_settings, session=session)

        result = client.send_template("+91 99999 99999", "welcome_onboarding", ["A"])

        assert result.simulated is True
        assert result.status == "simulated"
        assert result.message_id.startswith("sim_")
        assert len(result.message_id) == len("sim_") + 12
        session.post.assert_not_called()

    def test_simulated_ids_are_unique(self, simulated_gateway):
        ids = {
            simulated_gateway.send_template("9999999999", "t").message_id
            for _ in range(20)
        }
        assert len(ids) == 20

    def test_empty_phone_fails_even_in_simulation(self, simulated_gateway):
        with pytest.raises(InvalidPhoneNumberError):
            simulated_gateway.send_template("  ", "welcome_onboarding")


@pytest.mark.unit
class TestLiveSend:
    def test_posts_form_encoded_template(self, live_client, session):
        session.post.return_value = _response(
            {"status": "submitted", "messageId": "gs-1"}
        )

        result = live_client.send_template(
            "+91 98765 43210", "exam_scheduled", ["Bob", None, 42]
        )

        assert result.message_id == "gs-1"
        assert result.status == "submitted"
        assert result.simulated is False
        args, kwargs = session.post.call_args
        assert args[0] == "https://gupshup.example/wa/api/v1/template/msg"
        assert kwargs["headers"]["apikey"] == "test-api-key"
        assert kwargs["data"]["source"] == "917834811114"
        assert kwargs["data"]["destination"] == "919876543210"
        assert json.loads(kwargs["data"]["template"]) == {
            "id": "exam_scheduled",
            "params": ["Bob", "", "42"],
        }
        assert kwargs["timeout"] == 30

    def test_accepts_success_status_and_id_field(self, live_client, session):
        session.post.return_value = _response({"status": "success", "id": "gs-2"})
        assert live_client.send_template("9999999999", "t").message_id == "gs-2"

    def test_http_error_keeps_payload(self, live_client, session):
        session.post.return_value = _response(
            {"status": "error", "message": "Invalid template"}, status_code=400
        )

        with pytest.raises(WhatsAppTransportError) as exc:
            live_client.send_template("9999999999", "t")

        assert exc.value.payload == {"status": "error", "message": "Invalid template"}

    def test_network_error(self, live_client, session):
        session.post.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(WhatsAppTransportError) as exc:
            live_client.send_template("9999999999", "t")

        assert exc.value.payload is None

    def test_rejected_status(self, live_client, session):
        session.post.return_value = _response(
            {"status": "error", "message": "Template not approved"}
        )

        with pytest.raises(WhatsAppProviderError) as exc:
            live_client.send_template("9999999999", "t")

        assert str(exc.value) == "Template not approved"

    def test_non_json_response(self, live_client, session):
        session.post.return_value = _response(text="<html>oops</html>")

        with pytest.raises(WhatsAppProviderError) as exc:
            live_client.send_template("9999999999", "t")

        assert exc.value.payload == "<html>oops</html>"


@pytest.mark.unit
class TestHelpers:
    def test_template_id_uses_configured_ids(self, live_client):
        assert live_client.template_id("test_notification") == "test_notification_v1"
        assert live_client.template_id("unmapped") == "unmapped"

    def test_notify_exam_result(self, live_client, session):
        session.post.return_value = _response({"status": "submitted", "messageId": "x"})

        live_client.notify_exam_result("Bob", "9999999999", "Final", 42, 85.5, True)

        template = json.loads(session.post.call_args.kwargs["data"]["template"])
        assert template == {
            "id": "exam_result",
            "params": ["Bob", "Final", "42", "85.50%", "PASSED"],
        }

    def test_notify_live_session_scheduled(self, live_client, session):
        session.post.return_value = _response({"status": "submitted", "messageId": "x"})

        live_client.notify_live_session_scheduled(
            "Bob", "9999999999", "AI", "2026-10-19T10:00:00Z"
        )

        template = json.loads(session.post.call_args.kwargs["data"]["template"])
        assert template["params"] == ["Bob", "AI", "19 Oct 2026, 3:30 pm"]

    def test_notify_live_session_updated(self, live_client, session):
        session.post.return_value = _response({"status": "submitted", "messageId": "x"})

        result = live_client.notify_live_session_updated("Bob", "+91 99999 99999", "AI")

        data = session.post.call_args.kwargs["data"]
        assert data["destination"] == "919999999999"
        assert json.loads(data["template"]) == {
            "id": "live_session_updated",
            "params": ["Bob", "AI", 'Session "AI" has been recalibrated.'],
        }
        assert result.message_id == "x"

    def test_notify_exam_scheduled(self, live_client, session):
        session.post.return_value = _response({"status": "submitted", "messageId": "x"})

        live_client.notify_exam_scheduled(
            "Bob", "9999999999", "Midterm", "CS101", "2026-10-19T10:00:00Z"
        )

        template = json.loads(session.post.call_args.kwargs["data"]["template"])
        assert template == {
            "id": "exam_scheduled",
            "params": ["Bob", "Midterm", "CS101", "19 Oct 2026, 3:30 pm"],
        }

    def test_notify_course_completion(self, live_client, session):
        session.post.return_value = _response({"status": "submitted", "messageId": "x"})

        live_client.notify_course_completion("Bob", "9999999999", "CS101")

        template = json.loads(session.post.call_args.kwargs["data"]["template"])
        assert template == {"id": "course_completed", "params": ["Bob", "CS101"]}

    def test_send_test_message(self, live_client, session):
        session.post.return_value = _response({"status": "submitted", "messageId": "x"})

        live_client.send_test_message("9999999999")

        template = json.loads(session.post.call_args.kwargs["data"]["template"])
        assert template == {
            "id": "test_notification_v1",
            "params": ["Admin Test User", "SkillDad Engineering Hub"],
        }

    def test_describe(self, live_client):
        assert live_client.describe() == {
            "provider": "gupshup",
            "enabled": True,
            "simulation": False,
            "base_url": "https://gupshup.example/wa/api/v1/template/msg",
        }
