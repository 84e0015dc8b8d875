"""
Celery tasks for payment processing.

- process_webhook_event: Dispatch one stored webhook delivery
- retry_failed_webhooks: Beat job re-queueing failed deliveries
- expire_stale_checkout_sessions: Beat job expiring unpaid grouped checkouts
- send_payment_confirmation_email: Receipt email after a payment is recorded

Usage:
    from payments.tasks import process_webhook_event

    process_webhook_event.delay(str(webhook_event.id))
"""

from __future__ import annotations

import logging
from uuid import UUID

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from orders.models import CheckoutSession
from orders.states import CheckoutSessionStatus
from payments.models import Payment, WebhookEvent
from payments.states import WebhookEventStatus
from toolkit.services.email import EmailService

logger = logging.getLogger(__name__)

RETRY_BATCH_SIZE = 100


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": 5},
    acks_late=True,
)
def process_webhook_event(self, webhook_event_id: str) -> dict:
    """
    Process a stored webhook delivery.

    Handler failures mark the event FAILED for retry_failed_webhooks;
    unexpected exceptions are re-raised so Celery retries with backoff.

    Returns:
        Dict with processing status
    """
    from payments.webhooks.handlers import dispatch_webhook

    if isinstance(webhook_event_id, str):
        webhook_event_id = UUID(webhook_event_id)

    try:
        webhook_event = WebhookEvent.objects.get(id=webhook_event_id)
    except WebhookEvent.DoesNotExist:
        logger.error("WebhookEvent not found", extra={"webhook_event_id": str(webhook_event_id)})
        return {"status": "not_found", "webhook_event_id": str(webhook_event_id)}

    if webhook_event.is_processed:
        return {"status": "already_processed", "webhook_event_id": str(webhook_event_id)}

    webhook_event.mark_processing()
    webhook_event.save()

    try:
        with transaction.atomic():
            result = dispatch_webhook(webhook_event)
    except Exception as e:
        webhook_event.mark_failed(f"{type(e).__name__}: {e}")
        webhook_event.save()
        logger.exception(
            "Webhook processing failed with exception",
            extra={
                "webhook_event_id": str(webhook_event_id),
                "gateway_event_id": webhook_event.gateway_event_id,
            },
        )
        raise

    if result.success:
        webhook_event.mark_processed(result.data.reason if result.data else "")
        webhook_event.save()
        logger.info(
            "Webhook processed successfully",
            extra={
                "webhook_event_id": str(webhook_event_id),
                "gateway_event_id": webhook_event.gateway_event_id,
            },
        )
        return {
            "status": "processed",
            "webhook_event_id": str(webhook_event_id),
            "outcome": result.data.to_dict() if result.data else None,
        }

    webhook_event.mark_failed(result.error or "Handler returned failure")
    webhook_event.save()
    logger.warning(
        f"Webhook handler failed: {result.error}",
        extra={
            "webhook_event_id": str(webhook_event_id),
            "gateway_event_id": webhook_event.gateway_event_id,
            "error_code": result.error_code,
        },
    )
    return {
        "status": "handler_failed",
        "webhook_event_id": str(webhook_event_id),
        "error": result.error,
    }


@shared_task
def retry_failed_webhooks() -> dict:
    """Re-queue FAILED deliveries that have attempts left."""
    failed = WebhookEvent.objects.filter(
        status=WebhookEventStatus.FAILED,
        retry_count__lt=settings.PAYMENT_WEBHOOK_MAX_RETRIES,
    ).order_by("created_at")[:RETRY_BATCH_SIZE]

    queued_count = 0
    for webhook in failed:
        process_webhook_event.delay(str(webhook.id))
        queued_count += 1

    if queued_count:
        logger.info(f"Queued {queued_count} failed webhooks for retry")
    return {"queued_count": queued_count}


@shared_task
def expire_stale_checkout_sessions() -> dict:
    """Mark PENDING grouped checkouts whose hosted checkout expired as EXPIRED."""
    expired_count = CheckoutSession.objects.filter(
        status=CheckoutSessionStatus.PENDING,
        expires_at__lt=timezone.now(),
    ).update(status=CheckoutSessionStatus.EXPIRED, updated_at=timezone.now())

    if expired_count:
        logger.info(f"Expired {expired_count} stale checkout sessions")
    return {"expired_count": expired_count}


@shared_task(bind=True, ignore_result=False)
def send_payment_confirmation_email(self, payment_id: str) -> dict:
    """
    Send the payment receipt to the customer.

    Best effort: failures are logged and returned, never retried.
    """
    payment = (
        Payment.objects.select_related("order", "order__organization", "customer")
        .filter(pk=payment_id)
        .first()
    )
    if payment is None:
        logger.warning(f"Payment {payment_id} not found for confirmation email")
        return {"success": False, "error": "Payment not found"}

    email = (payment.customer_info or {}).get("email") or (
        payment.customer.email if payment.customer else None
    )
    if not email:
        return {"success": False, "error": "No recipients"}

    order = payment.order
    result = EmailService().send_email(
        [email],
        "payments/payment_received",
        {
            "customer_name": (payment.customer_info or {}).get("first_name") or email,
            "order_number": order.order_number,
            "organization_name": order.organization.name if order.organization else "",
            "amount": payment.amount,
            "currency": payment.currency,
            "reference_no": payment.reference_no,
            "payment_date": payment.payment_date,
            "order_url": f"{settings.FRONTEND_URL}/orders/{order.pk}",
        },
    )
    if not result.success:
        logger.warning(
            f"Payment confirmation email failed for {payment.reference_no}: {result.error}",
            extra={"payment_id": payment_id},
        )
    return {"success": result.success, "error": result.error}
