"""
Best-effort side effects of payout invoices.

PDF rendering, storage upload and seller emails run after the invoice is
committed. A failure here is logged and reported in a SideEffectResult but
never rolls back or alters the invoice amounts.

Collaborators are injected (toolkit.protocols) and default to the ReportLab
renderer, Django default_storage and the template EmailService.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings

from payouts.models import PayoutSettings
from toolkit.services import DefaultStorageBackend, EmailService, ReportLabInvoiceRenderer

if TYPE_CHECKING:
    from payouts.models import PayoutInvoice
    from toolkit.protocols import EmailSender, InvoicePdfRenderer, ObjectStorage

logger = logging.getLogger(__name__)

INVOICE_EMAIL_TEMPLATE = "payouts/invoice_generated"
PAYMENT_EMAIL_TEMPLATE = "payouts/invoice_paid"


@dataclass
class SideEffectResult:
    success: bool
    skipped: bool = False
    error: str | None = None
    url: str | None = None

    def to_dict(self) -> dict:
        return {"success": self.success, "skipped": self.skipped, "error": self.error, "url": self.url}


def invoice_storage_key(invoice: PayoutInvoice) -> str:
    return f"{settings.PAYOUT_INVOICE_STORAGE_PREFIX}/{invoice.invoice_number}.pdf"


def render_and_store_invoice_pdf(
    invoice: PayoutInvoice,
    renderer: InvoicePdfRenderer | None = None,
    storage: ObjectStorage | None = None,
) -> SideEffectResult:
    """Render the invoice PDF, upload it and record its key and URL."""
    renderer = renderer or ReportLabInvoiceRenderer()
    storage = storage or DefaultStorageBackend()
    key = invoice_storage_key(invoice)

    try:
        content = renderer.render_invoice_pdf(invoice.to_render_data())
        url = storage.store(content, key)
    except Exception as exc:
        logger.exception(
            f"Invoice PDF failed for {invoice.invoice_number}: {exc}",
            extra={"invoice_id": str(invoice.pk)},
        )
        return SideEffectResult(success=False, error=str(exc))

    invoice.pdf_file = key
    invoice.pdf_url = url
    invoice.save(update_fields=["pdf_file", "pdf_url", "updated_at"])
    logger.info(
        f"Invoice PDF stored for {invoice.invoice_number}",
        extra={"invoice_id": str(invoice.pk), "key": key},
    )
    return SideEffectResult(success=True, url=url)


def _email_context(invoice: PayoutInvoice) -> dict:
    return {
        **invoice.to_render_data(),
        "organization_name": invoice.organization.name,
        "pdf_url": invoice.pdf_url,
        "payment_reference": invoice.payment_reference,
        "paid_at": invoice.paid_at,
    }


def _send(
    invoice: PayoutInvoice, template_id: str, enabled: bool, sender: EmailSender | None
) -> SideEffectResult:
    if not (settings.PAYOUT_EMAILS_ENABLED and enabled):
        return SideEffectResult(success=True, skipped=True)

    recipients = invoice.organization.manager_emails()
    if not recipients:
        logger.warning(
            f"No managers to email for invoice {invoice.invoice_number}",
            extra={"invoice_id": str(invoice.pk)},
        )
        return SideEffectResult(success=False, error="No recipients")

    result = (sender or EmailService()).send_email(recipients, template_id, _email_context(invoice))
    if not result.success:
        logger.warning(
            f"Payout email {template_id} failed for {invoice.invoice_number}: {result.error}",
            extra={"invoice_id": str(invoice.pk)},
        )
    return SideEffectResult(success=result.success, error=result.error)


def send_invoice_email(invoice: PayoutInvoice, sender: EmailSender | None = None) -> SideEffectResult:
    """Tell the organization's managers a new invoice was generated."""
    return _send(
        invoice, INVOICE_EMAIL_TEMPLATE, PayoutSettings.load().send_invoice_emails, sender
    )


def send_payment_email(invoice: PayoutInvoice, sender: EmailSender | None = None) -> SideEffectResult:
    """Tell the organization's managers their payout was sent."""
    return _send(
        invoice, PAYMENT_EMAIL_TEMPLATE, PayoutSettings.load().send_payment_emails, sender
    )
