"""
Order models.

- Order: One organization's share of a customer checkout
- OrderItem: Line item with a frozen product title and unit price
- OrderStatusEvent: Append-only status log (source of truth for history)
- CheckoutSession: Gateway checkout grouping several orders

State Machine (django-fsm):
    Order.status transitions are declared on the model; OrderStateMachine in
    orders.services decides which one to call and records history. Payment
    status is a plain field guarded by the service.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django_fsm import RETURN_VALUE, FSMField, transition

from core.helpers import generate_code
from core.managers import SoftDeleteManager
from core.model_mixins import OptimisticLockMixin, SoftDeleteMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel
from orders.states import (
    OPEN_ORDER_STATUSES,
    CancellationReason,
    CheckoutSessionStatus,
    OrderStatus,
    PaymentStatus,
)
from vouchers.states import DiscountType

ORDER_NUMBER_ATTEMPTS = 10


class Order(UUIDPrimaryKeyMixin, SoftDeleteMixin, OptimisticLockMixin, BaseModel):
    """
    Customer order for one organization.

    Lifecycle:
        Created PENDING/PENDING by CheckoutService, mutated only through
        OrderStateMachine, never physically deleted.

    Fields:
        order_number: ORD-YYYYMMDD-XXXXXX, also the gateway external id
        status: Fulfilment status (FSM)
        payment_status: PENDING, DOWNPAYMENT, PAID or REFUNDED
        total_amount: Amount the customer pays (after discounts)
        voucher_discount: Portion of discount_amount granted by a voucher
        paid_at: Stamped once on the first transition into PAID
        payout_invoice: Invoice that settled this order with the seller
    """

    order_number = models.CharField(
        max_length=32,
        unique=True,
        editable=False,
        help_text="Human-readable order number",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Selling organization (null for platform orders)",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
        help_text="Ordering customer",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        help_text="Fulfilment status",
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
        help_text="Payment status",
    )
    cancellation_reason = models.CharField(
        max_length=20,
        choices=CancellationReason.choices,
        blank=True,
        help_text="Set only when the order is cancelled",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Amount due after discounts",
    )
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Total discount applied",
    )
    voucher_discount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Discount granted by the applied voucher",
    )
    voucher_code = models.CharField(
        max_length=30,
        blank=True,
        help_text="Code of the applied voucher",
    )
    voucher_snapshot = models.JSONField(
        default=dict,
        blank=True,
        help_text="Applied voucher terms at order time",
    )
    item_count = models.PositiveIntegerField(
        default=0,
        help_text="Total quantity across line items",
    )

    # ==========================================================================
    # Snapshots and timestamps
    # ==========================================================================

    customer_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Customer details at order time",
    )
    notes = models.TextField(
        blank=True,
        help_text="Customer notes",
    )
    order_date = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the order was placed",
    )
    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="First time payment_status became PAID",
    )

    # ==========================================================================
    # Gateway checkout
    # ==========================================================================

    checkout_id = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        help_text="Gateway checkout session id",
    )
    checkout_url = models.URLField(
        max_length=500,
        blank=True,
        help_text="Hosted checkout URL",
    )
    checkout_expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the hosted checkout expires",
    )

    payout_invoice = models.ForeignKey(
        "payouts.PayoutInvoice",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Payout invoice that includes this order",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-order_date"]
        verbose_name = "order"
        verbose_name_plural = "orders"
        indexes = [
            models.Index(fields=["organization", "payment_status", "paid_at"]),
            models.Index(fields=["customer", "-order_date"]),
        ]

    def __str__(self):
        return self.order_number

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = self.generate_order_number()
        super().save(*args, **kwargs)

    @classmethod
    def generate_order_number(cls) -> str:
        date_part = timezone.now().strftime("%Y%m%d")
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            candidate = f"ORD-{date_part}-{generate_code(6)}"
            if not cls.all_objects.filter(order_number=candidate).exists():
                return candidate
        raise RuntimeError("Could not generate a unique order number")

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(field=status, source=OrderStatus.PENDING, target=OrderStatus.PROCESSING)
    def start_processing(self):
        """PENDING -> PROCESSING, on payment or seller acceptance."""

    @transition(field=status, source=OrderStatus.PROCESSING, target=OrderStatus.READY)
    def mark_ready(self):
        """PROCESSING -> READY, ready for pickup or delivery."""

    @transition(field=status, source=OrderStatus.READY, target=OrderStatus.DELIVERED)
    def mark_delivered(self):
        """READY -> DELIVERED. Final."""

    @transition(field=status, source=list(OPEN_ORDER_STATUSES), target=OrderStatus.CANCELLED)
    def cancel(self, reason: str = CancellationReason.OTHERS):
        """
        Cancel an open order.

        Transition: PENDING/PROCESSING/READY -> CANCELLED
        """
        self.cancellation_reason = reason

    @transition(field=status, source="*", target=RETURN_VALUE(*OrderStatus.values))
    def override_status(self, new_status: str) -> str:
        """
        Corrective override by a system admin, from any status.

        Leaving CANCELLED clears the cancellation reason.
        """
        if new_status != OrderStatus.CANCELLED:
            self.cancellation_reason = ""
        return new_status

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_finalized(self) -> bool:
        return self.status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @property
    def paid_with_refund_voucher(self) -> bool:
        return (self.voucher_snapshot or {}).get("discount_type") == DiscountType.REFUND

    @property
    def seller_credit_amount(self) -> Decimal:
        """Amount owed to the seller; refund vouchers are platform-funded."""
        if self.paid_with_refund_voucher:
            return self.total_amount + self.voucher_discount
        return self.total_amount

    def recent_status_history(self, n: int | None = None):
        """Most recent status events first, bounded to n entries."""
        n = n or settings.ORDER_RECENT_HISTORY_SIZE
        return list(self.status_events.select_related("actor").order_by("-created_at", "-id")[:n])

    def snapshot(self) -> dict:
        """Frozen order state embedded into refund requests and payments."""
        return {
            "id": str(self.pk),
            "order_number": self.order_number,
            "organization_id": str(self.organization_id) if self.organization_id else None,
            "status": self.status,
            "payment_status": self.payment_status,
            "total_amount": str(self.total_amount),
            "discount_amount": str(self.discount_amount),
            "voucher_code": self.voucher_code,
            "item_count": self.item_count,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }


class OrderItem(UUIDPrimaryKeyMixin, BaseModel):
    """Line item of an order."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Parent order",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
        help_text="Ordered product",
    )
    variant = models.ForeignKey(
        "catalog.ProductVariant",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_items",
        help_text="Ordered variant, if any",
    )
    product_title = models.CharField(
        max_length=255,
        help_text="Product title at order time",
    )
    variant_label = models.CharField(
        max_length=150,
        blank=True,
        help_text="Variant name and size at order time",
    )
    quantity = models.PositiveIntegerField(
        help_text="Ordered quantity",
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Unit price at order time",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name = "order item"
        verbose_name_plural = "order items"

    def __str__(self):
        return f"{self.quantity} x {self.product_title}"

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class OrderStatusEvent(BaseModel):
    """
    One entry of an order's status history.

    Rows are only ever inserted. Order.recent_status_history() derives the
    bounded most-recent-first view.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="status_events",
        help_text="Order the event belongs to",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        help_text="Order status after the change",
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        help_text="Payment status after the change",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="User who made the change (null for system)",
    )
    actor_name = models.CharField(
        max_length=255,
        default="System",
        help_text="Display name of the actor at the time",
    )
    reason = models.CharField(
        max_length=255,
        blank=True,
        help_text="Short description of the change",
    )
    note = models.TextField(
        blank=True,
        help_text="Free-form note from the actor",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "order status event"
        verbose_name_plural = "order status events"

    def __str__(self):
        return f"{self.order_id}: {self.status}/{self.payment_status}"


class CheckoutSession(UUIDPrimaryKeyMixin, BaseModel):
    """
    Grouped checkout covering orders from several organizations.

    ``checkout_id`` is the external id sent to the gateway
    (``checkout-XXXXXXXXXXXX``); webhooks carrying it are fanned out to
    every linked order.
    """

    checkout_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="External id sent to the gateway",
    )
    gateway_checkout_id = models.CharField(
        max_length=100,
        blank=True,
        help_text="Checkout session id assigned by the gateway",
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="checkout_sessions",
        help_text="Paying customer",
    )
    orders = models.ManyToManyField(
        Order,
        related_name="checkout_sessions",
        help_text="Orders paid together",
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Sum of the linked order totals",
    )
    status = models.CharField(
        max_length=20,
        choices=CheckoutSessionStatus.choices,
        default=CheckoutSessionStatus.PENDING,
        db_index=True,
        help_text="Session status",
    )
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the hosted checkout expires",
    )
    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the grouped payment was confirmed",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "checkout session"
        verbose_name_plural = "checkout sessions"

    def __str__(self):
        return self.checkout_id

    @classmethod
    def generate_checkout_id(cls) -> str:
        return f"checkout-{generate_code(12).lower()}"
