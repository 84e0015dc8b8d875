"""
Webhook endpoint for the payment gateway.

The view:
1. Verifies the webhook signature
2. Creates/retrieves the WebhookEvent record (idempotent)
3. Queues the event for async processing
4. Returns immediately

Usage:
    from payments.webhooks.views import paymongo_webhook

    urlpatterns = [
        path("webhooks/paymongo/", paymongo_webhook, name="paymongo_webhook"),
    ]
"""

from __future__ import annotations

import json
import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import PaymongoAdapter
from payments.exceptions import InvalidWebhookPayload, WebhookSignatureError
from payments.models import WebhookEvent
from payments.states import WebhookEventStatus

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def paymongo_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive and queue PayMongo webhook events.

    Returns:
        HttpResponse with status:
        - 200: Event accepted (new or duplicate)
        - 400: Body is not a PayMongo event
        - 401: Missing or invalid signature
        - 500: Webhook secret not configured
    """
    secret = settings.PAYMENT_WEBHOOK_SECRET
    if not secret:
        logger.error("PAYMENT_WEBHOOK_SECRET is not configured")
        return HttpResponse("Webhook secret not configured", status=500)

    signature = request.headers.get("Paymongo-Signature", "")
    if not signature:
        logger.warning("Webhook received without Paymongo-Signature header")
        return HttpResponse("Missing signature", status=401)

    # Step 1: Verify signature
    try:
        PaymongoAdapter.verify_signature(
            request.body,
            signature,
            secret,
            tolerance_seconds=settings.PAYMENT_WEBHOOK_TOLERANCE_SECONDS,
        )
    except WebhookSignatureError as e:
        logger.warning("Webhook signature verification failed", extra={"error": e.message})
        return HttpResponse("Invalid signature", status=401)

    # Step 2: Parse
    try:
        payload = json.loads(request.body)
        event = PaymongoAdapter.parse_event(payload)
    except (ValueError, InvalidWebhookPayload) as e:
        logger.warning("Webhook body rejected", extra={"error": str(e)})
        return HttpResponse("Invalid payload", status=400)

    logger.info(
        f"Received webhook: {event.event_type}",
        extra={"gateway_event_id": event.event_id, "event_type": event.event_type},
    )

    # Step 3: Create/get WebhookEvent (idempotent)
    webhook_event, created = WebhookEvent.objects.get_or_create(
        gateway_event_id=event.event_id,
        defaults={
            "event_type": event.event_type,
            "payload": payload,
            "status": WebhookEventStatus.PENDING,
        },
    )

    if not created and webhook_event.is_processed:
        logger.info(
            "Webhook already processed, returning success",
            extra={"gateway_event_id": event.event_id},
        )
        return HttpResponse("Already processed", status=200)

    # Step 4: Queue for async processing
    from payments.tasks import process_webhook_event

    process_webhook_event.delay(str(webhook_event.id))
    logger.info(
        "Webhook queued for processing",
        extra={"gateway_event_id": event.event_id, "webhook_event_id": str(webhook_event.id)},
    )
    return HttpResponse("Accepted", status=200)
