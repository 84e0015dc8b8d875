"""
Payment domain models.

- Payment: One confirmed payment per order and gateway payment id
- WebhookEvent: Gateway delivery log for idempotent processing
"""

from payments.models.payment import Payment
from payments.models.webhook_event import WebhookEvent

__all__ = [
    "Payment",
    "WebhookEvent",
]
