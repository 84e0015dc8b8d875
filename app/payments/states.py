"""
Enums for payment models.

Payment record status:
    VERIFIED → REFUNDED (approved refund request)
    FAILED is recorded for audit only

Webhook event status:
    PENDING → PROCESSING → PROCESSED
    PROCESSING → FAILED → PROCESSING (retry)
"""

from django.db import models


class PaymentRecordStatus(models.TextChoices):
    VERIFIED = "VERIFIED", "Verified"
    REFUNDED = "REFUNDED", "Refunded"
    FAILED = "FAILED", "Failed"


class ReconciliationStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    MATCHED = "MATCHED", "Matched"
    DISCREPANCY = "DISCREPANCY", "Discrepancy"


class PaymentProvider(models.TextChoices):
    PAYMONGO = "PAYMONGO", "PayMongo"


class WebhookEventStatus(models.TextChoices):
    """
    Processing status of a stored webhook delivery.

    Terminal state: PROCESSED
    """

    PENDING = "PENDING", "Pending"
    PROCESSING = "PROCESSING", "Processing"
    PROCESSED = "PROCESSED", "Processed"
    FAILED = "FAILED", "Failed"


# Gateway event types the processor understands
CHECKOUT_SESSION_PAID = "checkout_session.payment.paid"
PAYMENT_PAID = "payment.paid"
PAYMENT_FAILED = "payment.failed"

PAID_EVENT_TYPES = (CHECKOUT_SESSION_PAID, PAYMENT_PAID)
