"""
Voucher models.

- Voucher: Promotional or refund discount code
- VoucherUsage: Immutable record of one redemption
- VoucherRefundRequest: Customer request to exchange an unused SELLER
  refund voucher for cash

Codes are stored upper-case and looked up case-insensitively by normalizing
input the same way. REFUND vouchers are platform-wide, single-use and
assigned to exactly one customer.
"""

from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django_fsm import FSMField, transition

from core.managers import SoftDeleteManager
from core.model_mixins import SoftDeleteMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel
from vouchers.states import CancellationInitiator, DiscountType, VoucherRefundRequestStatus


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


class Voucher(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel):
    """
    Discount voucher.

    Lifecycle:
        Created by an organization manager or system admin (promotional) or
        by the voucher engine (REFUND). After creation only ``used_count``
        changes; vouchers are never physically deleted.
    """

    # ==========================================================================
    # Identity
    # ==========================================================================

    code = models.CharField(
        max_length=30,
        unique=True,
        help_text="Upper-case redemption code",
    )
    name = models.CharField(
        max_length=200,
        help_text="Display name",
    )
    description = models.TextField(
        blank=True,
        help_text="Customer-facing description",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="vouchers",
        help_text="Owning organization; null for platform-wide vouchers",
    )

    # ==========================================================================
    # Discount
    # ==========================================================================

    discount_type = models.CharField(
        max_length=20,
        choices=DiscountType.choices,
        help_text="How the discount is computed",
    )
    discount_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Percentage (0-100) or amount depending on discount_type",
    )
    min_order_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Minimum order amount required to apply the voucher",
    )
    max_discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Cap for PERCENTAGE discounts",
    )
    free_item_product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Product granted by FREE_ITEM vouchers",
    )

    # ==========================================================================
    # Usage Limits
    # ==========================================================================

    usage_limit = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Total redemptions allowed; null for unlimited",
    )
    usage_limit_per_user = models.PositiveIntegerField(
        null=True,
        blank=True,
        default=1,
        help_text="Redemptions allowed per customer; null for unlimited",
    )
    used_count = models.PositiveIntegerField(
        default=0,
        help_text="Committed redemptions",
    )

    # ==========================================================================
    # Validity
    # ==========================================================================

    valid_from = models.DateTimeField(
        default=timezone.now,
        help_text="Start of the validity window",
    )
    valid_until = models.DateTimeField(
        null=True,
        blank=True,
        help_text="End of the validity window; null never expires",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive vouchers cannot be redeemed",
    )

    # ==========================================================================
    # Refund Vouchers
    # ==========================================================================

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="assigned_vouchers",
        help_text="Only redeemer of a REFUND voucher",
    )
    cancellation_initiator = models.CharField(
        max_length=10,
        choices=CancellationInitiator.choices,
        blank=True,
        help_text="Who initiated the cancellation behind a REFUND voucher",
    )
    monetary_refund_eligible_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Earliest time a SELLER refund voucher may be paid out in cash",
    )
    monetary_refund_requested_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the pending cash refund request was filed; cleared on rejection",
    )
    source_order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="refund_vouchers",
        help_text="Order whose cancellation produced this REFUND voucher",
    )
    source_refund_request = models.ForeignKey(
        "refunds.RefundRequest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Refund request approved into this voucher",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_vouchers",
        help_text="User who created the voucher",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "voucher"
        verbose_name_plural = "vouchers"
        indexes = [
            models.Index(fields=["organization", "is_active"]),
            models.Index(fields=["assigned_to", "discount_type"]),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(usage_limit__isnull=True)
                | models.Q(used_count__lte=models.F("usage_limit")),
                name="voucher_used_count_within_limit",
            ),
        ]

    def __str__(self):
        return self.code

    def save(self, *args, **kwargs):
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)

    @property
    def is_refund(self) -> bool:
        return self.discount_type == DiscountType.REFUND

    @property
    def monetary_refund_available_at(self):
        """
        When an unused SELLER refund voucher can be exchanged for cash.

        Vouchers issued without a stored date fall back to created_at plus
        the configured delay. None for every other voucher.
        """
        if not self.is_refund or self.cancellation_initiator != CancellationInitiator.SELLER:
            return None
        if self.monetary_refund_eligible_at is not None:
            return self.monetary_refund_eligible_at
        return self.created_at + timedelta(days=settings.SELLER_REFUND_MONETARY_DELAY_DAYS)

    @property
    def is_monetarily_eligible(self) -> bool:
        """Evaluated lazily against the current time; never set by a timer."""
        available_at = self.monetary_refund_available_at
        return (
            available_at is not None
            and self.used_count == 0
            and timezone.now() >= available_at
        )

    def snapshot(self) -> dict:
        """Frozen voucher terms stored with each redemption."""
        return {
            "id": str(self.pk),
            "code": self.code,
            "name": self.name,
            "discount_type": self.discount_type,
            "discount_value": str(self.discount_value),
            "max_discount_amount": (
                str(self.max_discount_amount) if self.max_discount_amount is not None else None
            ),
            "organization_id": str(self.organization_id) if self.organization_id else None,
        }


class VoucherUsage(UUIDPrimaryKeyMixin, BaseModel):
    """
    Immutable record of one voucher redemption.

    ``single_use`` is copied from ``usage_limit_per_user == 1`` at redemption
    time and backs a partial unique constraint on (voucher, user).
    """

    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name="usages",
        help_text="Redeemed voucher",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="voucher_usages",
        help_text="Order the voucher was applied to",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="voucher_usages",
        help_text="Redeeming customer",
    )
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Discount granted by this redemption",
    )
    voucher_snapshot = models.JSONField(
        default=dict,
        help_text="Voucher terms at redemption time",
    )
    single_use = models.BooleanField(
        default=False,
        help_text="Whether the voucher allowed one redemption per user",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "voucher usage"
        verbose_name_plural = "voucher usages"
        constraints = [
            models.UniqueConstraint(
                fields=["voucher", "user"],
                condition=models.Q(single_use=True),
                name="unique_single_use_voucher_per_user",
            ),
        ]

    def __str__(self):
        return f"{self.voucher.code} by {self.user_id}"


class VoucherRefundRequest(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel):
    """
    Request to exchange a SELLER refund voucher for a bank transfer.

    State Machine (django-fsm):
        PENDING → APPROVED (voucher deactivated) / REJECTED (voucher can be
        requested again). Both are final. At most one PENDING request may
        exist per voucher.
    """

    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name="refund_requests",
        help_text="Refund voucher to exchange",
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="voucher_refund_requests",
        help_text="Customer the voucher is assigned to",
    )

    # ==========================================================================
    # Request
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Voucher value at request time",
    )
    customer_message = models.TextField(
        blank=True,
        help_text="Free-form note from the customer",
    )
    bank_details = models.JSONField(
        default=dict,
        blank=True,
        help_text="account_name, account_number and bank_name for the transfer",
    )
    voucher_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Voucher snapshot at request time",
    )
    customer_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Customer snapshot at request time",
    )
    source_order_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Snapshot of the cancelled order behind the voucher",
    )

    # ==========================================================================
    # Review
    # ==========================================================================

    status = FSMField(
        default=VoucherRefundRequestStatus.PENDING,
        choices=VoucherRefundRequestStatus.choices,
        db_index=True,
        help_text="Review status",
    )
    admin_message = models.TextField(
        blank=True,
        help_text="Reviewer's message to the customer",
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_voucher_refund_requests",
        help_text="System admin who approved or rejected the request",
    )
    reviewed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the request was reviewed",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "voucher refund request"
        verbose_name_plural = "voucher refund requests"
        indexes = [
            models.Index(fields=["requested_by", "-created_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["voucher"],
                condition=models.Q(status=VoucherRefundRequestStatus.PENDING, is_deleted=False),
                name="unique_pending_refund_request_per_voucher",
            ),
        ]

    def __str__(self):
        return f"Cash refund {self.voucher_info.get('code', self.voucher_id)} ({self.status})"

    @transition(
        field=status,
        source=VoucherRefundRequestStatus.PENDING,
        target=VoucherRefundRequestStatus.APPROVED,
    )
    def approve(self):
        """PENDING -> APPROVED. Final."""

    @transition(
        field=status,
        source=VoucherRefundRequestStatus.PENDING,
        target=VoucherRefundRequestStatus.REJECTED,
    )
    def reject(self):
        """PENDING -> REJECTED. Final."""
