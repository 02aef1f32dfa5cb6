"""HTML email templates.

Every template shares one branded layout. Values interpolated into the
markup are HTML-escaped.
"""

from datetime import datetime
from html import escape
from typing import Dict, Optional, Tuple

from infrastructure.notifications.models import EmailContent
from infrastructure.notifications.templates.formatting import (
    DEFAULT_TIMEZONE,
    format_datetime,
    format_datetime_long,
    format_percentage,
    parse_bool,
    parse_changes,
    result_label,
)

STYLES = {
    "container": "font-family: Inter, -apple-system, 'Segoe UI', Roboto, sans-serif; padding: 40px 20px; color: #1F2937; background-color: #F9FAFB; line-height: 1.6;",
    "card": "max-width: 600px; margin: 0 auto; background-color: #FFFFFF; border: 1px solid #E5E7EB; border-radius: 16px; overflow: hidden;",
    "header": "padding: 32px 40px; background: linear-gradient(135deg, #7C3AED 0%, #C026D3 100%); text-align: center; color: #FFFFFF;",
    "body": "padding: 40px;",
    "footer": "padding: 32px; background-color: #F3F4F6; text-align: center; font-size: 13px; color: #6B7280;",
    "button": "display: inline-block; padding: 14px 32px; background-color: #7C3AED; color: #FFFFFF; text-decoration: none; border-radius: 10px; font-weight: 700; margin-top: 24px;",
    "h1": "margin: 0; font-size: 28px; font-weight: 800;",
    "h2": "margin: 0 0 16px 0; font-size: 20px; font-weight: 700; color: #111827;",
    "p": "margin: 0 0 16px 0; font-size: 16px; color: #4B5563;",
    "highlight": "background-color: #F5F3FF; border: 1px solid #DDD6FE; padding: 24px; border-radius: 12px; margin: 24px 0;",
    "key": "color: #7C3AED;",
}

Button = Tuple[str, str]


class EmailTemplates:
    """Branded email renderer.

    Args:
        brand_name: Product name shown in the header and default subject
        support_email: Contact address shown in the footer
        client_url: Base URL of the web client used for button links
        timezone: Timezone used when rendering dates
    """

    def __init__(
        self,
        brand_name: str = "SkillDad",
        support_email: str = "support@skilldad.com",
        client_url: str = "http://localhost:5173",
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self.brand_name = brand_name
        self.support_email = support_email
        self.client_url = client_url.rstrip("/")
        self.timezone = timezone

    def client_link(self, path: str = "") -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.client_url}/{path.lstrip('/')}"

    def _p(self, html: str) -> str:
        return f'<p style="{STYLES["p"]}">{html}</p>'

    def _greeting(self, name: str) -> str:
        return self._p(f"Hello <strong>{escape(name)}</strong>,")

    def _fact(self, label: str, value: str) -> str:
        return (
            f'<p style="margin: 0 0 4px 0;"><strong style="{STYLES["key"]}">'
            f"{escape(label)}:</strong> {escape(value)}</p>"
        )

    def _highlight(self, inner: str) -> str:
        return f'<div style="{STYLES["highlight"]}">{inner}</div>'

    def layout(self, title: str, content: str, button: Optional[Button] = None) -> str:
        button_html = ""
        if button:
            text, url = button
            button_html = (
                '<div style="text-align: center; margin-top: 8px;">'
                f'<a href="{escape(url, quote=True)}" style="{STYLES["button"]}">'
                f"{escape(text)}</a></div>"
            )
        year = datetime.now().year
        return (
            f'<div style="{STYLES["container"]}">'
            f'<div style="{STYLES["card"]}">'
            f'<div style="{STYLES["header"]}">'
            f'<h1 style="{STYLES["h1"]}">{escape(self.brand_name)}</h1>'
            '<p style="margin: 4px 0 0 0; font-size: 14px;">Transforming Your Skills</p>'
            "</div>"
            f'<div style="{STYLES["body"]}">'
            f'<h2 style="{STYLES["h2"]}">{escape(title)}</h2>'
            f"{content}{button_html}"
            "</div>"
            f'<div style="{STYLES["footer"]}">'
            f'<p style="margin: 0 0 12px 0;">&copy; {year} {escape(self.brand_name)}. All rights reserved.</p>'
            f'<p style="margin: 0;">Questions? Contact us at {escape(self.support_email)}</p>'
            "</div></div></div>"
        )

    def welcome(self, name: str, data: Dict[str, str]) -> EmailContent:
        role = data.get("role") or "Student"
        content = self._greeting(name) + self._p(
            f"Welcome aboard. Your <strong>{escape(role)}</strong> account is "
            "ready and your dashboard is waiting."
        )
        return EmailContent(
            subject="Integration Successful",
            html_body=self.layout(
                "Integration Successful",
                content,
                ("Launch Dashboard", self.client_link("/login")),
            ),
        )

    def live_session(self, name: str, data: Dict[str, str]) -> EmailContent:
        facts = self._fact("Topic", data.get("topic", "")) + self._fact(
            "Time", format_datetime(data.get("startTime"), self.timezone)
        )
        if data.get("description"):
            facts += self._p(escape(data["description"]))
        content = (
            self._greeting(name)
            + self._p("A new live session has been scheduled for your study track.")
            + self._highlight(facts)
        )
        return EmailContent(
            subject="New Live Session Scheduled",
            html_body=self.layout(
                "New Live Session Scheduled",
                content,
                ("View Session Details", self.client_link("/dashboard/live-classes")),
            ),
        )

    def live_session_update(self, name: str, data: Dict[str, str]) -> EmailContent:
        changes = parse_changes(data)
        lines = ["The following details have changed:"]
        if changes["topicChanged"]:
            lines.append(f"&bull; Topic: {escape(data.get('topic', ''))}")
        if changes["timeChanged"]:
            when = format_datetime(data.get("startTime"), self.timezone)
            lines.append(f"&bull; New Time: {escape(when)}")
        if changes["linkChanged"]:
            lines.append("&bull; The access link has been updated.")
        content = (
            self._greeting(name)
            + self._p("Your scheduled live session has been updated.")
            + self._highlight(f'<p style="margin: 0;">{"<br/>".join(lines)}</p>')
        )
        return EmailContent(
            subject="Session Recalibration",
            html_body=self.layout(
                "Session Recalibration",
                content,
                ("Review Schedule", self.client_link("/dashboard/live-classes")),
            ),
        )

    def exam(self, name: str, data: Dict[str, str]) -> EmailContent:
        exam_title = data.get("examTitle", "")
        facts = self._fact("Exam", exam_title) + self._fact(
            "Scheduled Time",
            format_datetime_long(data.get("scheduledDate"), self.timezone),
        )
        content = (
            self._greeting(name)
            + self._p(
                "A new exam has been scheduled for your course: "
                f"<strong>{escape(data.get('courseTitle', ''))}</strong>."
            )
            + self._highlight(facts)
            + self._p("Prepare well and be online at the scheduled time.")
        )
        return EmailContent(
            subject=f"Exam Protocol: {exam_title}",
            html_body=self.layout(
                "New Exam Scheduled",
                content,
                ("View My Exams", self.client_link("/dashboard/exams")),
            ),
        )

    def exam_result(self, name: str, data: Dict[str, str]) -> EmailContent:
        exam_title = data.get("examTitle", "")
        passed = parse_bool(data.get("passed"))
        colour = "#059669" if passed else "#DC2626"
        facts = (
            self._fact("Score", data.get("score", ""))
            + self._fact("Percentage", format_percentage(data.get("percentage")))
            + f'<p style="margin: 8px 0 0 0; font-size: 18px; font-weight: 800; color: {colour};">'
            f"STATUS: {result_label(passed)}</p>"
        )
        content = (
            self._greeting(name)
            + self._p(
                f"Your results for <strong>{escape(exam_title)}</strong> are now available."
            )
            + self._highlight(facts)
        )
        subject = f"Victory! You passed {exam_title}" if passed else f"Result: {exam_title}"
        return EmailContent(
            subject=subject,
            html_body=self.layout(
                "Exam Results Available",
                content,
                ("View Result Breakdown", self.client_link("/dashboard/exams")),
            ),
        )

    def course_completion(self, name: str, data: Dict[str, str]) -> EmailContent:
        course_title = data.get("courseTitle", "")
        content = self._p(
            f"Congratulations <strong>{escape(name)}</strong>!"
        ) + self._p(
            f"You have completed the course: <strong>{escape(course_title)}</strong>. "
            "Your certificate is available in your student portal."
        )
        return EmailContent(
            subject="Course Completion Confirmed!",
            html_body=self.layout(
                "Course Completion Confirmed!",
                content,
                (
                    "Download Certificate",
                    self.client_link(data.get("certUrl") or "/dashboard/certificates"),
                ),
            ),
        )

    def support(self, name: str, data: Dict[str, str]) -> EmailContent:
        facts = f'<p style="margin: 0; font-style: italic;">"{escape(data.get("response", ""))}"</p>'
        content = (
            self._greeting(name)
            + self._p(
                "An administrator has processed your inquiry regarding: "
                f"<strong>{escape(data.get('subject', ''))}</strong>"
            )
            + self._highlight(facts)
            + self._p(f"<strong>Current Status:</strong> {escape(data.get('status', ''))}")
        )
        return EmailContent(
            subject="Support Update",
            html_body=self.layout("Support Update", content),
        )

    def custom(self, name: str, data: Dict[str, str]) -> EmailContent:
        """Caller-authored subject and message; generic text when absent."""
        if not data.get("message"):
            return self.generic(name)
        content = self._greeting(name) + self._p(escape(data["message"]))
        subject = data.get("subject") or f"{self.brand_name} Notification"
        return EmailContent(subject=subject, html_body=self.layout(subject, content))

    def generic(self, name: str) -> EmailContent:
        return EmailContent(
            subject=f"{self.brand_name} Notification",
            html_body=(
                f"<p>Hello {escape(name)}, you have a new notification "
                f"from {escape(self.brand_name)}.</p>"
            ),
        )
