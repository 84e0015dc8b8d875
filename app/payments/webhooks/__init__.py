"""
Webhook handling for payment gateway events.

Deliveries are verified, stored idempotently and processed asynchronously
via Celery tasks.

Usage:
    # In urls.py
    from payments.webhooks.views import paymongo_webhook

    urlpatterns = [
        path("webhooks/paymongo/", paymongo_webhook, name="paymongo_webhook"),
    ]
"""

from payments.webhooks.handlers import dispatch_webhook, register_handler
from payments.webhooks.views import paymongo_webhook

__all__ = [
    "dispatch_webhook",
    "paymongo_webhook",
    "register_handler",
]
