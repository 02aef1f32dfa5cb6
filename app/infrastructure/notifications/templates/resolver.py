"""Template resolution for notification channels."""

from typing import Dict, Optional, Union

import structlog

from infrastructure.notifications.models import (
    ChannelName,
    EmailContent,
    NotificationType,
    WhatsAppContent,
)
from infrastructure.notifications.templates.email import EmailTemplates
from infrastructure.notifications.templates.formatting import DEFAULT_TIMEZONE
from infrastructure.notifications.templates.whatsapp import WHATSAPP_BUILDERS

logger = structlog.get_logger()


class TemplateResolver:
    """Maps (channel, type, recipient name, event data) to rendered content.

    Resolution never raises. Unknown types get the generic email and a
    WhatsApp content without a template key; a rendering error in a known
    template is logged and also falls back.

    Args:
        email_templates: Branded email renderer
        timezone: Timezone used for dates in WhatsApp parameters
    """

    def __init__(
        self,
        email_templates: Optional[EmailTemplates] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self.email_templates = email_templates or EmailTemplates(timezone=timezone)
        self.timezone = timezone
        templates = self.email_templates
        self._email_builders = {
            NotificationType.WELCOME.value: templates.welcome,
            NotificationType.LIVE_SESSION.value: templates.live_session,
            NotificationType.LIVE_SESSION_UPDATE.value: templates.live_session_update,
            NotificationType.EXAM.value: templates.exam,
            NotificationType.EXAM_RESULT.value: templates.exam_result,
            NotificationType.COURSE_COMPLETION.value: templates.course_completion,
            NotificationType.SUPPORT.value: templates.support,
            NotificationType.CUSTOM.value: templates.custom,
        }

    def resolve_email(
        self, notification_type: str, name: str, data: Optional[Dict[str, str]] = None
    ) -> EmailContent:
        builder = self._email_builders.get(notification_type)
        if builder is None:
            return self.email_templates.generic(name)
        try:
            return builder(name, data or {})
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "email_template_render_failed",
                notification_type=notification_type,
                error=str(e),
            )
            return self.email_templates.generic(name)

    def resolve_whatsapp(
        self, notification_type: str, name: str, data: Optional[Dict[str, str]] = None
    ) -> WhatsAppContent:
        builder = WHATSAPP_BUILDERS.get(notification_type)
        if builder is None:
            return WhatsAppContent(template_key=None, params=[name])
        try:
            return builder(name, data or {}, self.timezone)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "whatsapp_template_render_failed",
                notification_type=notification_type,
                error=str(e),
            )
            return WhatsAppContent(template_key=None, params=[name])

    def resolve(
        self,
        channel: Union[ChannelName, str],
        notification_type: str,
        name: str,
        data: Optional[Dict[str, str]] = None,
    ) -> Union[EmailContent, WhatsAppContent]:
        if ChannelName(channel) is ChannelName.EMAIL:
            return self.resolve_email(notification_type, name, data)
        return self.resolve_whatsapp(notification_type, name, data)
