"""
Tests for EmailService.
"""

from smtplib import SMTPException
from unittest.mock import patch

from toolkit.protocols import EmailSender
from toolkit.services.email import EmailService

CONTEXT = {
    "customer_name": "Ana",
    "order_number": "ORD-20250103-ABC123",
    "status": "READY",
    "status_label": "Ready for pickup",
    "organization_name": "Campus Store",
    "order_url": "http://localhost:3000/orders/1",
}


class TestEmailService:
    def test_sends_rendered_template(self, mailoutbox):
        result = EmailService().send_email(["ana@example.com"], "orders/status_update", CONTEXT)

        assert result.success
        assert len(mailoutbox) == 1
        message = mailoutbox[0]
        assert message.subject == "Order ORD-20250103-ABC123 is now Ready for pickup"
        assert "Ready for pickup" in message.body
        assert message.alternatives[0][1] == "text/html"

    def test_blank_recipients_are_dropped(self, mailoutbox):
        result = EmailService().send_email(["", None], "orders/status_update", CONTEXT)

        assert not result.success
        assert result.error == "No recipients"
        assert mailoutbox == []

    def test_missing_template(self, mailoutbox):
        result = EmailService().send_email(["ana@example.com"], "orders/nope", CONTEXT)

        assert not result.success
        assert result.error == "Template not found: orders/nope"

    def test_smtp_failure_is_reported(self):
        with patch(
            "toolkit.services.email.EmailMultiAlternatives.send",
            side_effect=SMTPException("relay refused"),
        ):
            result = EmailService().send_email(
                ["ana@example.com"], "orders/status_update", CONTEXT
            )

        assert not result.success
        assert result.error == "relay refused"

    def test_satisfies_protocol(self):
        assert isinstance(EmailService(), EmailSender)
