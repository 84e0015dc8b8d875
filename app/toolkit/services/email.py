"""
Email service for centralized email sending.

This module provides the EmailService class, the default EmailSender:
- Django template rendering for HTML and plain text
- Subject lines rendered from a template as well
- Failures reported as EmailResult instead of raised

Templates:
    Each template id resolves to three files found through the app template
    loaders:
        emails/{template_id}_subject.txt
        emails/{template_id}.html
        emails/{template_id}.txt      (optional, falls back to stripped HTML)

Configuration:
    Email settings are read from Django settings:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT
    - DEFAULT_FROM_EMAIL

Usage:
    from toolkit.services.email import EmailService

    result = EmailService().send_email(
        ["seller@example.com"],
        "payouts/invoice_generated",
        {"invoice_number": "PI-20250107-CAMPUS-001"},
    )
"""

from __future__ import annotations

import logging
from smtplib import SMTPException
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from toolkit.protocols import EmailResult

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class EmailService:
    """
    Centralized email sending with template support.

    Implements toolkit.protocols.EmailSender.
    """

    def __init__(self, from_email: str | None = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send_email(
        self,
        recipients: list[str],
        template_id: str,
        template_data: dict[str, Any],
    ) -> EmailResult:
        recipients = [r for r in recipients if r]
        if not recipients:
            return EmailResult(success=False, error="No recipients")

        try:
            subject, text_content, html_content = self.render(template_id, template_data)
        except TemplateDoesNotExist as exc:
            logger.error(f"Email template missing for {template_id}: {exc}")
            return EmailResult(success=False, error=f"Template not found: {template_id}")

        email = EmailMultiAlternatives(
            subject=subject,
            body=text_content,
            from_email=self.from_email,
            to=recipients,
        )
        email.attach_alternative(html_content, "text/html")

        try:
            email.send(fail_silently=False)
        except (SMTPException, OSError) as exc:
            logger.error(
                f"Failed to send email {template_id} to {recipients}: {exc}",
                extra={"template_id": template_id},
            )
            return EmailResult(success=False, error=str(exc))

        logger.info(
            f"Email sent to {len(recipients)} recipient(s): {subject}",
            extra={"template_id": template_id},
        )
        return EmailResult(success=True)

    @staticmethod
    def render(template_id: str, context: dict[str, Any]) -> tuple[str, str, str]:
        """Return (subject, text, html) for a template id."""
        subject = render_to_string(f"emails/{template_id}_subject.txt", context)
        # Header injection guard: subjects must be a single line
        subject = " ".join(subject.split())
        html_content = render_to_string(f"emails/{template_id}.html", context)
        try:
            text_content = render_to_string(f"emails/{template_id}.txt", context)
        except TemplateDoesNotExist:
            text_content = strip_tags(html_content)
        return subject, text_content, html_content
