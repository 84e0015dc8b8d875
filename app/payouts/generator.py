"""
Payout Invoice Generator.

One idempotent batch function settles every organization for a period;
the weekly Celery beat job and the manual admin endpoint are both thin
callers of PayoutInvoiceGenerator.generate_payout_invoices().

Per organization, inside its own savepoint:
    1. Skip if an invoice exists for (organization, period_start)
    2. Collect PAID, not-cancelled, not-yet-invoiced orders paid by the end
       of the period; orders held back by the minimum payout roll forward
    3. Skip when there are no orders or gross is below the minimum payout
    4. gross, fee and pending adjustments → net = max(0, gross - fee + adj)
    5. Negative balance → invoice PAID with net 0 and a CARRY_OVER adjustment
    6. Stamp orders with the invoice, mark adjustments APPLIED

Operator actions (system admins only):
    mark_invoice_paid, revert_payout_status, update_org_platform_fee,
    update_payout_settings

Usage:
    from payouts.generator import PayoutInvoiceGenerator
    from payouts.periods import weekly_period

    start, end = weekly_period(timezone.now())
    summary = PayoutInvoiceGenerator.generate_payout_invoices(start, end)
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from audit.models import AuditLog
from audit.services import log_action
from core.exceptions import PermissionDeniedError, ValidationError
from core.helpers import round2
from core.services import BaseService
from orders.models import Order
from orders.states import OrderStatus, PaymentStatus
from organizations.models import Organization
from organizations.permissions import is_system_admin
from payouts.exceptions import InvoiceStateConflict, RevertReasonRequired
from payouts.models import PayoutAdjustment, PayoutInvoice, PayoutSettings
from payouts.states import AdjustmentStatus, AdjustmentType, InvoiceStatus, RunStatus

if TYPE_CHECKING:
    from datetime import datetime

    from authentication.models import User

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
SETTINGS_FIELDS = (
    "default_platform_fee_percentage",
    "cutoff_day_of_week",
    "payout_day_of_week",
    "minimum_payout_amount",
    "send_invoice_emails",
    "send_payment_emails",
)


@dataclass
class PayoutRunSummary:
    """Outcome of one generation run; failures never abort the batch."""

    period_start: datetime
    period_end: datetime
    invoice_ids: list[str] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    @property
    def invoices_generated(self) -> int:
        return len(self.invoice_ids)

    @property
    def status(self) -> str:
        if not self.failed:
            return RunStatus.SUCCESS
        if self.invoice_ids:
            return RunStatus.PARTIAL
        return RunStatus.FAILED

    def to_dict(self) -> dict:
        return {
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "status": self.status,
            "invoices_generated": self.invoices_generated,
            "invoice_ids": self.invoice_ids,
            "skipped": self.skipped,
            "failed": self.failed,
        }


class PayoutInvoiceGenerator(BaseService):
    """Weekly seller settlement and operator payout actions."""

    # ==========================================================================
    # Generation
    # ==========================================================================

    @classmethod
    def generate_payout_invoices(
        cls, period_start: datetime, period_end: datetime
    ) -> PayoutRunSummary:
        """
        Generate one invoice per eligible organization for the period.

        Safe to re-run: organizations already invoiced for period_start are
        skipped. Each organization is processed in its own savepoint so one
        failure is logged and recorded without aborting the batch.
        """
        if period_end <= period_start:
            raise ValidationError("Period end must be after period start", error_code="INVALID_PERIOD")

        payout_settings = PayoutSettings.load()
        summary = PayoutRunSummary(period_start=period_start, period_end=period_end)
        logger = cls.get_logger()

        logger.info(
            "Payout generation started",
            extra={"period_start": period_start.isoformat(), "period_end": period_end.isoformat()},
        )

        for organization in Organization.objects.order_by("name"):
            try:
                with transaction.atomic():
                    invoice, skip_reason = cls._generate_for_organization(
                        organization, period_start, period_end, payout_settings
                    )
            except IntegrityError:
                # Concurrent run created the invoice first
                summary.skipped.append(
                    {"organization_id": str(organization.pk), "reason": "Invoice already exists"}
                )
                continue
            except Exception as exc:
                logger.exception(
                    f"Payout generation failed for {organization.name}: {exc}",
                    extra={"organization_id": str(organization.pk)},
                )
                summary.failed.append({"organization_id": str(organization.pk), "error": str(exc)})
                continue

            if invoice is None:
                summary.skipped.append(
                    {"organization_id": str(organization.pk), "reason": skip_reason}
                )
            else:
                summary.invoice_ids.append(str(invoice.pk))

        cls._record_run(summary)
        logger.info(
            "Payout generation finished",
            extra={
                "status": summary.status,
                "invoices_generated": summary.invoices_generated,
                "failed": len(summary.failed),
            },
        )
        return summary

    @classmethod
    def _generate_for_organization(
        cls,
        organization: Organization,
        period_start: datetime,
        period_end: datetime,
        payout_settings: PayoutSettings,
    ) -> tuple[PayoutInvoice | None, str | None]:
        # Step 1: Idempotency
        if PayoutInvoice.objects.filter(
            organization=organization, period_start=period_start
        ).exists():
            return None, "Invoice already exists"

        # Step 2: Orders
        orders = list(
            Order.objects.filter(
                organization=organization,
                payment_status=PaymentStatus.PAID,
                payout_invoice__isnull=True,
            )
            .exclude(status=OrderStatus.CANCELLED)
            .filter(
                Q(paid_at__lte=period_end)
                | Q(paid_at__isnull=True, order_date__lte=period_end)
            )
            .prefetch_related("items")
            .order_by("paid_at", "order_date")
        )

        # Step 3: Thresholds
        if not orders:
            return None, "No paid orders in period"
        gross = round2(sum((o.seller_credit_amount for o in orders), ZERO))
        if gross < payout_settings.minimum_payout_amount:
            return None, "Below minimum payout amount"

        # Step 4: Amounts
        fee_percentage = (
            organization.platform_fee_percentage
            if organization.platform_fee_percentage is not None
            else payout_settings.default_platform_fee_percentage
        )
        fee = round2(gross * Decimal(fee_percentage) / HUNDRED)
        adjustments = list(
            PayoutAdjustment.objects.filter(
                organization=organization, status=AdjustmentStatus.PENDING
            ).order_by("created_at")
        )
        adjustment_total = round2(sum((a.amount for a in adjustments), ZERO))
        raw_net = gross - fee + adjustment_total
        voucher_discount = round2(
            sum((o.voucher_discount for o in orders if not o.paid_with_refund_voucher), ZERO)
        )

        # Step 5: Invoice
        invoice_number = cls._next_invoice_number(organization, period_end)
        carry_over = raw_net < 0
        invoice = PayoutInvoice(
            organization=organization,
            invoice_number=invoice_number,
            period_start=period_start,
            period_end=period_end,
            gross_amount=gross,
            platform_fee_percentage=fee_percentage,
            platform_fee_amount=fee,
            total_adjustment_amount=adjustment_total,
            adjustment_count=len(adjustments),
            total_voucher_discount=voucher_discount,
            net_amount=ZERO if carry_over else raw_net,
            order_count=len(orders),
            item_count=sum(o.item_count for o in orders),
            order_summary=[cls._order_summary(o) for o in orders],
            product_summary=cls._product_summary(orders),
            adjustment_summary=[a.summary() for a in adjustments],
            organization_info=organization.snapshot(),
            status=InvoiceStatus.PAID if carry_over else InvoiceStatus.PENDING,
        )
        invoice.append_history(InvoiceStatus.PENDING, "Invoice generated by system")
        if carry_over:
            invoice.append_history(
                InvoiceStatus.PAID, "Negative balance carried forward to the next period"
            )
        invoice.save()

        # Step 6: Carry-over
        if carry_over:
            PayoutAdjustment.objects.create(
                organization=organization,
                original_invoice=invoice,
                type=AdjustmentType.CARRY_OVER,
                amount=raw_net,
                status=AdjustmentStatus.PENDING,
                reason=f"Negative balance carried forward from Invoice #{invoice_number}",
            )

        # Step 7: Link orders and consume adjustments
        now = timezone.now()
        Order.all_objects.filter(pk__in=[o.pk for o in orders]).update(
            payout_invoice=invoice, version=F("version") + 1, updated_at=now
        )
        PayoutAdjustment.objects.filter(pk__in=[a.pk for a in adjustments]).update(
            status=AdjustmentStatus.APPLIED, applied_invoice=invoice, applied_at=now, updated_at=now
        )

        log_action(
            "payout.invoice_generated",
            f"Payout invoice {invoice_number} generated",
            organization=organization,
            log_type=AuditLog.LogType.SYSTEM_EVENT,
            metadata={
                "invoice_id": invoice.id,
                "invoice_number": invoice_number,
                "gross_amount": gross,
                "platform_fee_amount": fee,
                "net_amount": invoice.net_amount,
                "carry_over_amount": raw_net if carry_over else None,
            },
        )
        cls.get_logger().info(
            "Payout invoice generated",
            extra={
                "invoice_number": invoice_number,
                "organization_id": str(organization.pk),
                "net_amount": str(invoice.net_amount),
            },
        )
        return invoice, None

    @staticmethod
    def _next_invoice_number(organization: Organization, period_end: datetime) -> str:
        sequence = PayoutInvoice.objects.filter(organization=organization).count() + 1
        slug = (organization.slug or "ORG").upper()[:10]
        return f"PI-{period_end:%Y%m%d}-{slug}-{sequence:03d}"

    @staticmethod
    def _order_summary(order: Order) -> dict:
        return {
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "paid_at": order.paid_at.isoformat() if order.paid_at else None,
            "total_amount": str(order.total_amount),
            "seller_credit": str(order.seller_credit_amount),
            "voucher_discount": str(order.voucher_discount),
            "voucher_code": order.voucher_code,
            "item_count": order.item_count,
        }

    @staticmethod
    def _product_summary(orders: list[Order]) -> list[dict]:
        products: OrderedDict[str, dict] = OrderedDict()
        for order in orders:
            for item in order.items.all():
                entry = products.setdefault(
                    str(item.product_id),
                    {"product_id": str(item.product_id), "title": item.product_title, "quantity": 0, "amount": ZERO},
                )
                entry["quantity"] += item.quantity
                entry["amount"] += item.line_total
        return [{**entry, "amount": str(round2(entry["amount"]))} for entry in products.values()]

    @staticmethod
    def _record_run(summary: PayoutRunSummary) -> None:
        payout_settings, _ = PayoutSettings.get_or_create_row()
        payout_settings.last_run_at = timezone.now()
        payout_settings.last_run_status = summary.status
        payout_settings.last_run_invoices_generated = summary.invoices_generated
        payout_settings.save(
            update_fields=[
                "last_run_at",
                "last_run_status",
                "last_run_invoices_generated",
                "updated_at",
            ]
        )

    # ==========================================================================
    # Operator actions
    # ==========================================================================

    @classmethod
    def mark_invoice_paid(
        cls,
        invoice: PayoutInvoice,
        actor: User,
        payment_reference: str | None = None,
        payment_notes: str | None = None,
    ) -> PayoutInvoice:
        """
        Confirm that the payout was sent.

        Raises:
            PermissionDeniedError: Actor is not a system admin
            InvoiceStateConflict: Invoice already PAID or CANCELLED
        """
        cls._require_admin(actor, "Only system admins can mark invoices as paid")
        if invoice.status == InvoiceStatus.PAID:
            raise InvoiceStateConflict("Invoice is already marked as paid")
        if invoice.status == InvoiceStatus.CANCELLED:
            raise InvoiceStateConflict("Cancelled invoices cannot be marked as paid")

        with cls.atomic():
            invoice.status = InvoiceStatus.PAID
            invoice.paid_at = timezone.now()
            invoice.paid_by = actor
            invoice.payment_reference = payment_reference or ""
            invoice.payment_notes = payment_notes or ""
            invoice.append_history(InvoiceStatus.PAID, "Payout sent", actor)
            invoice.save()

            log_action(
                "payout.invoice_paid",
                f"Payout invoice {invoice.invoice_number} marked as paid",
                actor=actor,
                organization=invoice.organization,
                severity=AuditLog.Severity.MEDIUM,
                metadata={
                    "invoice_id": invoice.id,
                    "invoice_number": invoice.invoice_number,
                    "net_amount": invoice.net_amount,
                    "payment_reference": invoice.payment_reference,
                },
            )

            from payouts.tasks import send_payout_payment_email

            invoice_id = str(invoice.pk)
            transaction.on_commit(lambda: send_payout_payment_email.delay(invoice_id))

        cls.get_logger().info(
            "Payout invoice marked paid",
            extra={"invoice_number": invoice.invoice_number, "actor_id": str(actor.pk)},
        )
        return invoice

    @classmethod
    def revert_payout_status(cls, invoice: PayoutInvoice, actor: User, reason: str) -> PayoutInvoice:
        """
        Revert a PAID invoice to PENDING, clearing payment confirmation.

        Raises:
            PermissionDeniedError, RevertReasonRequired, InvoiceStateConflict
        """
        cls._require_admin(actor, "Only system admins can revert payouts")
        if not reason or not reason.strip():
            raise RevertReasonRequired("A reason is required to revert a payout")
        if invoice.status != InvoiceStatus.PAID:
            raise InvoiceStateConflict("Only paid invoices can be reverted")

        with cls.atomic():
            invoice.status = InvoiceStatus.PENDING
            invoice.paid_at = None
            invoice.paid_by = None
            invoice.payment_reference = ""
            invoice.payment_notes = ""
            invoice.append_history(InvoiceStatus.PENDING, f"Reverted: {reason.strip()}", actor)
            invoice.save()

            log_action(
                "payout.invoice_reverted",
                f"Payout invoice {invoice.invoice_number} reverted to pending",
                actor=actor,
                organization=invoice.organization,
                severity=AuditLog.Severity.HIGH,
                metadata={
                    "invoice_id": invoice.id,
                    "invoice_number": invoice.invoice_number,
                    "reason": reason.strip(),
                },
            )
        return invoice

    @classmethod
    def update_org_platform_fee(
        cls, organization: Organization, actor: User, percentage: Decimal | None
    ) -> Organization:
        """Set a custom fee (0-100) or None to fall back to the platform default."""
        cls._require_admin(actor, "Only system admins can change platform fees")
        if percentage is not None:
            percentage = Decimal(str(percentage))
            if not (0 <= percentage <= 100):
                raise ValidationError(
                    "Platform fee must be between 0 and 100", error_code="INVALID_PERCENTAGE"
                )

        previous = organization.platform_fee_percentage
        with cls.atomic():
            organization.platform_fee_percentage = percentage
            organization.save(update_fields=["platform_fee_percentage", "updated_at"])
            log_action(
                "organization.platform_fee_updated",
                f"Platform fee for {organization.name} set to "
                f"{percentage if percentage is not None else 'default'}",
                actor=actor,
                organization=organization,
                metadata={"previous": previous, "percentage": percentage},
            )
        return organization

    @classmethod
    def update_payout_settings(cls, actor: User, **fields) -> tuple[PayoutSettings, bool]:
        """
        Update the platform payout settings, creating the row on first use.

        Returns:
            (settings, is_new)
        """
        cls._require_admin(actor, "Only system admins can change payout settings")
        unknown = set(fields) - set(SETTINGS_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown settings: {', '.join(sorted(unknown))}", error_code="UNKNOWN_SETTING"
            )

        fee = fields.get("default_platform_fee_percentage")
        if fee is not None and not (0 <= Decimal(str(fee)) <= 100):
            raise ValidationError(
                "Platform fee must be between 0 and 100", error_code="INVALID_PERCENTAGE"
            )
        for day_field in ("cutoff_day_of_week", "payout_day_of_week"):
            day = fields.get(day_field)
            if day is not None and not (0 <= int(day) <= 6):
                raise ValidationError(
                    f"{day_field} must be between 0 and 6", error_code="INVALID_DAY"
                )
        minimum = fields.get("minimum_payout_amount")
        if minimum is not None and Decimal(str(minimum)) < 0:
            raise ValidationError(
                "Minimum payout amount cannot be negative", error_code="INVALID_AMOUNT"
            )

        with cls.atomic():
            payout_settings, is_new = PayoutSettings.get_or_create_row()
            for name, value in fields.items():
                if value is not None:
                    setattr(payout_settings, name, value)
            payout_settings.updated_by = actor
            payout_settings.save()
            log_action(
                "payout.settings_updated",
                "Payout settings updated",
                actor=actor,
                metadata={k: v for k, v in fields.items() if v is not None},
            )
        return payout_settings, is_new

    @staticmethod
    def _require_admin(actor: User, message: str) -> None:
        if not is_system_admin(actor):
            raise PermissionDeniedError(message)
