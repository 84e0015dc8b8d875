"""
Celery tasks for payouts app.

- generate_weekly_payout_invoices: Beat job, Wednesday 00:05 UTC
- process_invoice_side_effects: PDF + upload + "invoice generated" email
- send_payout_payment_email: "payout sent" email after mark_invoice_paid

Usage:
    from payouts.tasks import generate_weekly_payout_invoices

    generate_weekly_payout_invoices.delay()
"""

import logging

from celery import shared_task
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from payouts.generator import PayoutInvoiceGenerator
from payouts.models import PayoutInvoice, PayoutSettings
from payouts.periods import weekly_period
from payouts.side_effects import (
    render_and_store_invoice_pdf,
    send_invoice_email,
    send_payment_email,
)

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=False)
def generate_weekly_payout_invoices(
    self, period_start: str | None = None, period_end: str | None = None
) -> dict:
    """
    Generate invoices for the last completed weekly period.

    Args:
        period_start, period_end: Optional ISO datetimes overriding the
            computed period (manual re-runs)

    Returns:
        PayoutRunSummary.to_dict()
    """
    if period_start and period_end:
        start, end = parse_datetime(period_start), parse_datetime(period_end)
    else:
        start, end = weekly_period(timezone.now(), PayoutSettings.load().cutoff_day_of_week)

    summary = PayoutInvoiceGenerator.generate_payout_invoices(start, end)

    for invoice_id in summary.invoice_ids:
        process_invoice_side_effects.delay(invoice_id)

    logger.info(
        f"Weekly payout run {summary.status}: {summary.invoices_generated} invoice(s)",
        extra={"task_id": self.request.id},
    )
    return summary.to_dict()


@shared_task(bind=True, ignore_result=False)
def process_invoice_side_effects(self, invoice_id: str) -> dict:
    """Render, store and email one generated invoice."""
    invoice = PayoutInvoice.objects.select_related("organization").filter(pk=invoice_id).first()
    if invoice is None:
        logger.warning(f"Payout invoice {invoice_id} not found for side effects")
        return {"success": False, "error": "Invoice not found"}

    pdf = render_and_store_invoice_pdf(invoice)
    email = send_invoice_email(invoice)
    return {"success": pdf.success and email.success, "pdf": pdf.to_dict(), "email": email.to_dict()}


@shared_task(bind=True, ignore_result=False)
def send_payout_payment_email(self, invoice_id: str) -> dict:
    invoice = PayoutInvoice.objects.select_related("organization").filter(pk=invoice_id).first()
    if invoice is None:
        logger.warning(f"Payout invoice {invoice_id} not found for payment email")
        return {"success": False, "error": "Invoice not found"}
    return send_payment_email(invoice).to_dict()
