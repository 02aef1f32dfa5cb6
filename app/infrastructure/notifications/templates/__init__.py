"""Channel content rendering.

Exports:
    TemplateResolver: Resolves (channel, type, name, data) to content
    EmailTemplates: Branded HTML email renderer
"""

from infrastructure.notifications.templates.email import EmailTemplates
from infrastructure.notifications.templates.resolver import TemplateResolver

__all__ = ["TemplateResolver", "EmailTemplates"]
