"""
Protocol definitions (interfaces) for external collaborators.

The settlement core talks to PDF rendering, outbound email and binary
object storage only through these narrow contracts. Default
implementations live in toolkit.services; tests substitute fakes.

Available Protocols:
    InvoicePdfRenderer: Render a payout invoice snapshot to PDF bytes
    EmailSender: Send a templated email to a list of recipients
    ObjectStorage: Persist bytes under a key and return a URL

Usage:
    from toolkit.protocols import EmailSender

    def notify(sender: EmailSender, emails: list[str]):
        result = sender.send_email(emails, "payouts/invoice_generated", {...})
        if not result.success:
            logger.warning(result.error)

Note:
    - Protocols are primarily for type checking
    - @runtime_checkable allows isinstance() checks
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Any


@dataclass(frozen=True)
class EmailResult:
    """Outcome of one send_email() call."""

    success: bool
    error: str | None = None


@runtime_checkable
class InvoicePdfRenderer(Protocol):
    """
    Protocol for invoice PDF rendering.

    Must be a pure function of ``invoice_data``; renderers never touch the
    database.
    """

    def render_invoice_pdf(self, invoice_data: dict[str, Any]) -> bytes:
        """
        Render invoice data to a PDF document.

        Args:
            invoice_data: Invoice snapshot (see PayoutInvoice.to_render_data)

        Returns:
            PDF file content
        """
        ...


@runtime_checkable
class EmailSender(Protocol):
    """
    Protocol for outbound email.

    Example:
        class ConsoleEmailSender:
            def send_email(self, recipients, template_id, template_data):
                print(recipients, template_id)
                return EmailResult(success=True)
    """

    def send_email(
        self,
        recipients: list[str],
        template_id: str,
        template_data: dict[str, Any],
    ) -> EmailResult:
        """
        Send one email to every recipient.

        Args:
            recipients: Destination addresses
            template_id: Template path without extension, e.g. "orders/status_update"
            template_data: Template context

        Returns:
            EmailResult; failures are reported, never raised
        """
        ...


@runtime_checkable
class ObjectStorage(Protocol):
    """Protocol for binary object storage."""

    def store(self, content: bytes, key: str) -> str:
        """
        Persist content under key.

        Returns:
            Public or signed URL of the stored object
        """
        ...
