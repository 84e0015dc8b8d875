"""
Enums for payout models.

Invoice status:
    PENDING → PAID (mark_invoice_paid)
    PAID → PENDING (revert_payout_status, reason required)
    Generated directly as PAID when the period closed with a negative balance

Adjustment status:
    PENDING → APPLIED when folded into an invoice
"""

from django.db import models


class InvoiceStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PROCESSING = "PROCESSING", "Processing"
    PAID = "PAID", "Paid"
    CANCELLED = "CANCELLED", "Cancelled"


class AdjustmentType(models.TextChoices):
    CANCELLATION = "CANCELLATION", "Cancellation"
    REFUND = "REFUND", "Refund"
    CARRY_OVER = "CARRY_OVER", "Carry over"
    MANUAL = "MANUAL", "Manual"


class AdjustmentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPLIED = "APPLIED", "Applied"


class RunStatus(models.TextChoices):
    SUCCESS = "SUCCESS", "Success"
    PARTIAL = "PARTIAL", "Partial"
    FAILED = "FAILED", "Failed"
