"""
Celery tasks for refunds app.

- send_refund_request_email: Notify organization managers of a new request,
  or the customer of the review outcome

Emails are best effort: a failed send is logged and reported in the task
result, never retried.
"""

import logging

from celery import shared_task
from django.conf import settings

from toolkit.services.email import EmailService

logger = logging.getLogger(__name__)

TEMPLATES = {
    "received": "refunds/request_received",
    "approved": "refunds/approved",
    "rejected": "refunds/rejected",
}


@shared_task(bind=True, ignore_result=False)
def send_refund_request_email(self, refund_request_id: str, kind: str) -> dict:
    """
    Send a refund request email.

    Args:
        refund_request_id: UUID of the refund request
        kind: "received" (to managers), "approved" or "rejected" (to the customer)

    Returns:
        {"success": bool, "error": str | None}
    """
    from refunds.models import RefundRequest

    if kind not in TEMPLATES:
        return {"success": False, "error": f"Unknown email kind: {kind}"}

    refund_request = (
        RefundRequest.objects.select_related(
            "order", "organization", "requested_by", "voucher"
        )
        .filter(pk=refund_request_id)
        .first()
    )
    if refund_request is None:
        logger.warning(f"Refund request {refund_request_id} not found for {kind} email")
        return {"success": False, "error": "Refund request not found"}

    customer = refund_request.requested_by
    if kind == "received":
        organization = refund_request.organization
        recipients = organization.manager_emails() if organization else []
    else:
        recipients = [customer.email]

    voucher = refund_request.voucher
    result = EmailService().send_email(
        recipients,
        TEMPLATES[kind],
        {
            "customer_name": customer.first_name or customer.email,
            "customer_email": customer.email,
            "order_number": refund_request.order.order_number,
            "organization_name": refund_request.organization_info.get("name", ""),
            "reason": refund_request.get_reason_display(),
            "customer_message": refund_request.customer_message,
            "admin_message": refund_request.admin_message,
            "refund_amount": refund_request.refund_amount,
            "voucher_code": voucher.code if voucher else "",
            "order_url": f"{settings.FRONTEND_URL}/orders/{refund_request.order_id}",
        },
    )
    if not result.success:
        logger.warning(
            f"Refund {kind} email failed for request {refund_request_id}: {result.error}",
            extra={"refund_request_id": refund_request_id},
        )
    return {"success": result.success, "error": result.error}
