"""
Payout models.

- PayoutInvoice: One organization's settlement for one weekly period
- PayoutAdjustment: Signed debit/credit folded into the next invoice
- PayoutSettings: Platform-wide payout configuration (single row)

Idempotency:
    (organization, period_start) is unique on PayoutInvoice, so re-running
    generation for a period never creates a second invoice.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payouts.states import AdjustmentStatus, AdjustmentType, InvoiceStatus, RunStatus

ZERO = Decimal("0.00")


def money_field(help_text: str, **kwargs) -> models.DecimalField:
    return models.DecimalField(
        max_digits=14, decimal_places=2, default=ZERO, help_text=help_text, **kwargs
    )


class PayoutInvoice(UUIDPrimaryKeyMixin, BaseModel):
    """
    Weekly payout invoice for one organization.

    Amounts:
        gross_amount: Seller credit of all included orders
        platform_fee_amount: round2(gross * platform_fee_percentage / 100)
        total_adjustment_amount: Sum of the pending adjustments consumed
        net_amount: max(0, gross - fee + adjustments)

    Snapshots (frozen at generation time):
        order_summary, product_summary, adjustment_summary, organization_info
    """

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        related_name="payout_invoices",
        help_text="Paid-out organization",
    )
    invoice_number = models.CharField(
        max_length=40,
        unique=True,
        help_text="PI-YYYYMMDD-SLUG-NNN",
    )
    period_start = models.DateTimeField(
        help_text="Start of the settlement period (inclusive)",
    )
    period_end = models.DateTimeField(
        help_text="End of the settlement period (inclusive)",
    )

    # ==========================================================================
    # Amounts
    # ==========================================================================

    gross_amount = money_field("Seller credit of included orders")
    platform_fee_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        help_text="Fee percentage applied",
    )
    platform_fee_amount = money_field("Platform fee")
    total_adjustment_amount = money_field("Sum of consumed adjustments")
    adjustment_count = models.PositiveIntegerField(
        default=0,
        help_text="Number of consumed adjustments",
    )
    total_voucher_discount = money_field("Seller-funded voucher discounts on included orders")
    net_amount = money_field("Amount to pay out")
    order_count = models.PositiveIntegerField(
        default=0,
        help_text="Number of included orders",
    )
    item_count = models.PositiveIntegerField(
        default=0,
        help_text="Units across included orders",
    )

    # ==========================================================================
    # Snapshots
    # ==========================================================================

    order_summary = models.JSONField(default=list, blank=True)
    product_summary = models.JSONField(default=list, blank=True)
    adjustment_summary = models.JSONField(default=list, blank=True)
    organization_info = models.JSONField(default=dict, blank=True)

    # ==========================================================================
    # Status
    # ==========================================================================

    status = models.CharField(
        max_length=20,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.PENDING,
        db_index=True,
        help_text="Invoice status",
    )
    status_history = models.JSONField(
        default=list,
        blank=True,
        help_text="Append-only list of status changes",
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Operator who confirmed the payout",
    )
    payment_reference = models.CharField(max_length=255, blank=True)
    payment_notes = models.TextField(blank=True)

    # ==========================================================================
    # Side effects
    # ==========================================================================

    pdf_file = models.CharField(
        max_length=500,
        blank=True,
        help_text="Storage key of the rendered PDF",
    )
    pdf_url = models.URLField(
        max_length=1000,
        blank=True,
        help_text="URL returned by object storage",
    )

    class Meta:
        ordering = ["-period_start", "invoice_number"]
        verbose_name = "payout invoice"
        verbose_name_plural = "payout invoices"
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "period_start"],
                name="unique_payout_invoice_per_period",
            ),
        ]

    def __str__(self):
        return self.invoice_number

    def append_history(self, status: str, reason: str, actor=None) -> None:
        """Append a status change; the caller saves."""
        self.status_history = [
            *(self.status_history or []),
            {
                "status": status,
                "reason": reason,
                "changed_at": timezone.now().isoformat(),
                "changed_by": str(actor.pk) if actor is not None else None,
                "changed_by_name": (actor.get_full_name() or actor.email) if actor else "System",
            },
        ]

    def to_render_data(self) -> dict:
        """Snapshot passed to the InvoicePdfRenderer and email templates."""
        return {
            "invoice_number": self.invoice_number,
            "period_start": self.period_start.date().isoformat(),
            "period_end": self.period_end.date().isoformat(),
            "status": self.status,
            "organization": self.organization_info,
            "gross_amount": str(self.gross_amount),
            "platform_fee_percentage": str(self.platform_fee_percentage),
            "platform_fee_amount": str(self.platform_fee_amount),
            "total_adjustment_amount": str(self.total_adjustment_amount),
            "total_voucher_discount": str(self.total_voucher_discount),
            "net_amount": str(self.net_amount),
            "order_count": self.order_count,
            "item_count": self.item_count,
            "orders": self.order_summary,
            "products": self.product_summary,
            "adjustments": self.adjustment_summary,
        }


class PayoutAdjustment(UUIDPrimaryKeyMixin, BaseModel):
    """
    Signed amount applied to an organization's next invoice.

    Negative amounts are debits (cancellations after payout, carried-over
    negative balances); positive amounts are credits.
    """

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        related_name="payout_adjustments",
        help_text="Organization the adjustment applies to",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payout_adjustments",
        help_text="Order that caused the adjustment, if any",
    )
    original_invoice = models.ForeignKey(
        PayoutInvoice,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="originated_adjustments",
        help_text="Invoice the adjustment originates from",
    )
    type = models.CharField(
        max_length=20,
        choices=AdjustmentType.choices,
        help_text="Adjustment type",
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Signed amount; negative reduces the next payout",
    )
    reason = models.TextField(
        help_text="Human-readable reason",
    )
    status = models.CharField(
        max_length=10,
        choices=AdjustmentStatus.choices,
        default=AdjustmentStatus.PENDING,
        db_index=True,
        help_text="PENDING until folded into an invoice",
    )
    applied_invoice = models.ForeignKey(
        PayoutInvoice,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="applied_adjustments",
        help_text="Invoice that consumed the adjustment",
    )
    applied_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name = "payout adjustment"
        verbose_name_plural = "payout adjustments"
        indexes = [
            models.Index(fields=["organization", "status"]),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} ({self.status})"

    def summary(self) -> dict:
        return {
            "id": str(self.pk),
            "type": self.type,
            "amount": str(self.amount),
            "reason": self.reason,
            "order_id": str(self.order_id) if self.order_id else None,
        }


class PayoutSettings(BaseModel):
    """
    Platform payout configuration, stored as a single row.

    Days of week use 0 = Sunday ... 6 = Saturday.
    """

    SINGLETON_PK = 1

    default_platform_fee_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("15.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text="Fee applied to organizations without a custom fee",
    )
    cutoff_day_of_week = models.PositiveSmallIntegerField(
        default=3,
        validators=[MaxValueValidator(6)],
        help_text="Day the weekly period starts (3 = Wednesday)",
    )
    payout_day_of_week = models.PositiveSmallIntegerField(
        default=5,
        validators=[MaxValueValidator(6)],
        help_text="Day payouts are sent (5 = Friday)",
    )
    minimum_payout_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Organizations grossing less are skipped for the period",
    )
    send_invoice_emails = models.BooleanField(default=True)
    send_payment_emails = models.BooleanField(default=True)

    last_run_at = models.DateTimeField(null=True, blank=True)
    last_run_status = models.CharField(max_length=10, choices=RunStatus.choices, blank=True)
    last_run_invoices_generated = models.PositiveIntegerField(default=0)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = "payout settings"
        verbose_name_plural = "payout settings"

    def __str__(self):
        return "Payout settings"

    @classmethod
    def load(cls) -> PayoutSettings:
        """
        Return the settings row, or unsaved defaults when none exists yet.

        Reading never writes; the row is created by the first update or
        generation run.
        """
        instance = cls.objects.filter(pk=cls.SINGLETON_PK).first()
        if instance is None:
            instance = cls(
                pk=cls.SINGLETON_PK,
                default_platform_fee_percentage=Decimal(settings.PLATFORM_FEE_PERCENT),
            )
        return instance

    @classmethod
    def get_or_create_row(cls) -> tuple[PayoutSettings, bool]:
        return cls.objects.get_or_create(
            pk=cls.SINGLETON_PK,
            defaults={
                "default_platform_fee_percentage": Decimal(settings.PLATFORM_FEE_PERCENT),
            },
        )
