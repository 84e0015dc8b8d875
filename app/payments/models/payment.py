"""
Payment model: one row per settled order payment.

A grouped checkout produces one Payment per linked order, each carrying
its proportional share of the gateway amount. ``(order, transaction_id)``
is unique so replayed webhooks cannot double-book a payment.

Usage:
    from payments.models import Payment

    Payment.objects.filter(transaction_id=event.payment_id).exists()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.states import PaymentProvider, PaymentRecordStatus, ReconciliationStatus


class Payment(UUIDPrimaryKeyMixin, BaseModel):
    """
    Confirmed payment for a single order.

    Fields:
        amount: Share of the gateway amount booked to this order
        processing_fee: Share of the gateway fee
        net_amount: amount - processing_fee
        transaction_id: Gateway payment id (idempotency anchor)
        reference_no: Human-facing reference, ``PAYMONGO-<payment id>``
        status_history: Append-only list of {status, reason, at}
        order_info / customer_info: Snapshots at payment time
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payments",
        help_text="Order this payment settles",
    )
    checkout_session = models.ForeignKey(
        "orders.CheckoutSession",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
        help_text="Grouped checkout the payment came through",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
        help_text="Paying customer",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount booked to the order",
    )
    processing_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text="Gateway fee share",
    )
    net_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount after gateway fee",
    )
    currency = models.CharField(
        max_length=3,
        default="PHP",
    )

    # ==========================================================================
    # Gateway references
    # ==========================================================================

    payment_status = models.CharField(
        max_length=20,
        choices=PaymentRecordStatus.choices,
        default=PaymentRecordStatus.VERIFIED,
        db_index=True,
    )
    payment_provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        default=PaymentProvider.PAYMONGO,
    )
    transaction_id = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Gateway payment id",
    )
    reference_no = models.CharField(
        max_length=120,
        help_text="Reference shown to customers and operators",
    )
    gateway_checkout_id = models.CharField(
        max_length=100,
        blank=True,
        help_text="Gateway checkout session id",
    )
    reconciliation_status = models.CharField(
        max_length=20,
        choices=ReconciliationStatus.choices,
        default=ReconciliationStatus.PENDING,
    )
    payment_date = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the gateway confirmed the payment",
    )

    # ==========================================================================
    # Snapshots and history
    # ==========================================================================

    status_history = models.JSONField(default=list, blank=True)
    order_info = models.JSONField(default=dict, blank=True)
    customer_info = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Raw gateway attributes kept for reconciliation",
    )

    class Meta:
        ordering = ["-payment_date"]
        verbose_name = "payment"
        verbose_name_plural = "payments"
        constraints = [
            models.UniqueConstraint(
                fields=["order", "transaction_id"],
                name="unique_payment_per_order_transaction",
            ),
        ]

    def __str__(self):
        return f"{self.reference_no} ({self.amount})"

    def append_history(self, status: str, reason: str, actor_name: str = "System") -> None:
        """Append a status entry. Does not save."""
        self.status_history = [
            *self.status_history,
            {
                "status": status,
                "reason": reason,
                "changed_by": actor_name,
                "changed_at": timezone.now().isoformat(),
            },
        ]
