"""WhatsApp template parameter builders.

Each builder returns the ordered parameter list for one approved template.
The Gupshup helpers and the TemplateResolver share them so both paths
send identical parameters.
"""

from typing import Callable, Dict, List, Optional

from infrastructure.notifications.models import NotificationType, WhatsAppContent
from infrastructure.notifications.templates.formatting import (
    DEFAULT_TIMEZONE,
    format_datetime,
    format_percentage,
    parse_bool,
    result_label,
)

# Logical template keys, mapped to provider template ids by GupshupSettings
WELCOME = "welcome"
LIVE_SESSION_SCHEDULED = "live_session_scheduled"
LIVE_SESSION_UPDATED = "live_session_updated"
EXAM_SCHEDULED = "exam_scheduled"
EXAM_RESULT = "exam_result"
COURSE_COMPLETED = "course_completed"
TEST_NOTIFICATION = "test_notification"


def welcome_params(name: str) -> List[str]:
    return [name]


def live_session_scheduled_params(
    name: str, topic: str, start_time: Optional[str], tz: str = DEFAULT_TIMEZONE
) -> List[str]:
    return [name, topic, format_datetime(start_time, tz)]


def live_session_updated_params(name: str, topic: str) -> List[str]:
    return [name, topic, f'Session "{topic}" has been recalibrated.']


def exam_scheduled_params(
    name: str,
    exam_title: str,
    course_title: str,
    scheduled_date: Optional[str],
    tz: str = DEFAULT_TIMEZONE,
) -> List[str]:
    return [name, exam_title, course_title, format_datetime(scheduled_date, tz)]


def exam_result_params(
    name: str,
    exam_title: str,
    score: Optional[str],
    percentage: Optional[str],
    passed: bool,
) -> List[str]:
    return [
        name,
        exam_title,
        "" if score is None else str(score),
        format_percentage(percentage),
        result_label(passed),
    ]


def course_completion_params(name: str, course_title: str) -> List[str]:
    return [name, course_title]


def _welcome(name: str, data: Dict[str, str], tz: str) -> WhatsAppContent:
    return WhatsAppContent(template_key=WELCOME, params=welcome_params(name))


def _live_session(name: str, data: Dict[str, str], tz: str) -> WhatsAppContent:
    return WhatsAppContent(
        template_key=LIVE_SESSION_SCHEDULED,
        params=live_session_scheduled_params(
            name, data.get("topic", ""), data.get("startTime"), tz
        ),
    )


def _live_session_update(name: str, data: Dict[str, str], tz: str) -> WhatsAppContent:
    return WhatsAppContent(
        template_key=LIVE_SESSION_UPDATED,
        params=live_session_updated_params(name, data.get("topic", "")),
    )


def _exam(name: str, data: Dict[str, str], tz: str) -> WhatsAppContent:
    return WhatsAppContent(
        template_key=EXAM_SCHEDULED,
        params=exam_scheduled_params(
            name,
            data.get("examTitle", ""),
            data.get("courseTitle", ""),
            data.get("scheduledDate"),
            tz,
        ),
    )


def _exam_result(name: str, data: Dict[str, str], tz: str) -> WhatsAppContent:
    return WhatsAppContent(
        template_key=EXAM_RESULT,
        params=exam_result_params(
            name,
            data.get("examTitle", ""),
            data.get("score"),
            data.get("percentage"),
            parse_bool(data.get("passed")),
        ),
    )


def _course_completion(name: str, data: Dict[str, str], tz: str) -> WhatsAppContent:
    return WhatsAppContent(
        template_key=COURSE_COMPLETED,
        params=course_completion_params(name, data.get("courseTitle", "")),
    )


WHATSAPP_BUILDERS: Dict[str, Callable[[str, Dict[str, str], str], WhatsAppContent]] = {
    NotificationType.WELCOME.value: _welcome,
    NotificationType.LIVE_SESSION.value: _live_session,
    NotificationType.LIVE_SESSION_UPDATE.value: _live_session_update,
    NotificationType.EXAM.value: _exam,
    NotificationType.EXAM_RESULT.value: _exam_result,
    NotificationType.COURSE_COMPLETION.value: _course_completion,
}
