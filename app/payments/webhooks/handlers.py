"""
Webhook event handlers.

Maps gateway event types to handler functions. Every payment event goes
through PaymentWebhookProcessor; the registry keeps routing separate from
handling so new event types need only a decorated function.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    @register_handler("source.chargeable")
    def handle_source(webhook_event: WebhookEvent) -> ServiceResult:
        ...

    result = dispatch_webhook(webhook_event)
"""

from __future__ import annotations

import logging
from typing import Callable

from core.services import ServiceResult
from payments.adapters import PaymongoAdapter
from payments.models import WebhookEvent
from payments.processor import PaymentWebhookProcessor, WebhookOutcome
from payments.states import CHECKOUT_SESSION_PAID, PAYMENT_FAILED, PAYMENT_PAID

logger = logging.getLogger(__name__)


WEBHOOK_HANDLERS: dict[str, Callable[[WebhookEvent], ServiceResult]] = {}


def register_handler(*event_types: str) -> Callable:
    """Register the decorated function for one or more event types."""

    def decorator(func: Callable[[WebhookEvent], ServiceResult]) -> Callable:
        for event_type in event_types:
            WEBHOOK_HANDLERS[event_type] = func
        return func

    return decorator


def dispatch_webhook(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Dispatch a stored event to its handler.

    Unregistered event types succeed with no data so the gateway stops
    redelivering events we do not care about.
    """
    handler = WEBHOOK_HANDLERS.get(webhook_event.event_type)
    if not handler:
        logger.info(
            f"No handler registered for event type: {webhook_event.event_type}",
            extra={"gateway_event_id": webhook_event.gateway_event_id},
        )
        return ServiceResult.ok(None)
    return handler(webhook_event)


@register_handler(CHECKOUT_SESSION_PAID, PAYMENT_PAID, PAYMENT_FAILED)
def handle_payment_event(webhook_event: WebhookEvent) -> ServiceResult[WebhookOutcome]:
    """
    Apply a paid or failed payment event.

    Unknown orders and sessions are failures so the retry worker gets
    another chance once the order is visible.
    """
    event = PaymongoAdapter.parse_event(webhook_event.payload)
    outcome = PaymentWebhookProcessor.handle_payment_webhook(event)
    if not outcome.processed:
        return ServiceResult.failure(outcome.reason, error_code="WEBHOOK_NOT_PROCESSED")
    return ServiceResult.ok(outcome)
