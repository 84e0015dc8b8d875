"""
Tests for PayoutInvoiceGenerator.

- generate_payout_invoices: amounts, idempotency, carry-over, thresholds
- mark_invoice_paid / revert_payout_status
- update_org_platform_fee / update_payout_settings
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from core.exceptions import PermissionDeniedError, ValidationError
from orders.services import OrderStateMachine
from orders.states import CancellationReason
from orders.tests.factories import OrderFactory
from organizations.tests.factories import OrganizationFactory
from payouts.exceptions import InvoiceStateConflict, RevertReasonRequired
from payouts.generator import PayoutInvoiceGenerator
from payouts.models import PayoutAdjustment, PayoutInvoice, PayoutSettings
from payouts.states import AdjustmentStatus, AdjustmentType, InvoiceStatus, RunStatus
from payouts.tests.conftest import PAID_IN_PERIOD, PERIOD_END, PERIOD_START
from payouts.tests.factories import PayoutAdjustmentFactory, PayoutInvoiceFactory
from vouchers.states import DiscountType


def paid_order(organization, total="1000.00", **kwargs):
    kwargs.setdefault("paid_at", PAID_IN_PERIOD)
    return OrderFactory(
        organization=organization,
        paid=True,
        total_amount=Decimal(total),
        **kwargs,
    )


class TestGeneratePayoutInvoices:
    """Tests for the weekly batch."""

    def test_creates_invoice_with_default_fee(self, organization, period):
        """1000 gross at the default 15% should pay out 850."""
        order = paid_order(organization)

        summary = PayoutInvoiceGenerator.generate_payout_invoices(*period)

        assert summary.status == RunStatus.SUCCESS
        assert summary.invoices_generated == 1
        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.gross_amount == Decimal("1000.00")
        assert invoice.platform_fee_percentage == Decimal("15.00")
        assert invoice.platform_fee_amount == Decimal("150.00")
        assert invoice.net_amount == Decimal("850.00")
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.order_count == 1
        assert invoice.order_summary[0]["order_number"] == order.order_number
        assert invoice.status_history[0]["reason"] == "Invoice generated by system"
        order.refresh_from_db()
        assert order.payout_invoice_id == invoice.id

    def test_invoice_number_format(self, organization, period):
        paid_order(organization)

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.invoice_number == "PI-20250107-CAMPUS-STO-001"

    def test_uses_custom_organization_fee(self, db, period):
        organization = OrganizationFactory(platform_fee_percentage=Decimal("10.00"))
        paid_order(organization)

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.platform_fee_amount == Decimal("100.00")
        assert invoice.net_amount == Decimal("900.00")

    def test_rerun_does_not_duplicate(self, organization, period):
        """Running the same period twice should skip the invoiced organization."""
        paid_order(organization)
        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        summary = PayoutInvoiceGenerator.generate_payout_invoices(*period)

        assert summary.invoices_generated == 0
        assert summary.skipped[0]["reason"] == "Invoice already exists"
        assert PayoutInvoice.objects.filter(organization=organization).count() == 1

    def test_skips_organization_without_orders(self, organization, period):
        summary = PayoutInvoiceGenerator.generate_payout_invoices(*period)

        assert summary.invoices_generated == 0
        assert summary.skipped == [
            {"organization_id": str(organization.pk), "reason": "No paid orders in period"}
        ]

    def test_ignores_unpaid_and_out_of_period_orders(self, organization, period):
        OrderFactory(organization=organization)
        paid_order(organization, paid_at=PERIOD_END.replace(day=8))
        included = paid_order(organization, total="400.00")

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.order_count == 1
        assert invoice.gross_amount == Decimal("400.00")
        assert invoice.order_summary[0]["order_id"] == str(included.pk)

    def test_falls_back_to_order_date_without_paid_at(self, organization, period):
        OrderFactory(
            organization=organization,
            paid=True,
            paid_at=None,
            order_date=PAID_IN_PERIOD,
        )

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        assert PayoutInvoice.objects.filter(organization=organization).exists()

    def test_refund_voucher_orders_credit_full_value(self, organization, period):
        """Refund vouchers are platform-funded, so the seller gets the pre-voucher value."""
        paid_order(
            organization,
            total="700.00",
            voucher_discount=Decimal("300.00"),
            discount_amount=Decimal("300.00"),
            voucher_snapshot={"discount_type": DiscountType.REFUND},
        )

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.gross_amount == Decimal("1000.00")
        assert invoice.total_voucher_discount == Decimal("0.00")

    def test_negative_balance_is_carried_over(self, organization, period):
        """-2000 pending against 850 net should close the invoice and carry -1150."""
        paid_order(organization)
        pending = PayoutAdjustmentFactory(organization=organization, amount=Decimal("-2000.00"))

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.net_amount == Decimal("0.00")
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.total_adjustment_amount == Decimal("-2000.00")

        pending.refresh_from_db()
        assert pending.status == AdjustmentStatus.APPLIED
        assert pending.applied_invoice_id == invoice.id

        carry_over = PayoutAdjustment.objects.get(type=AdjustmentType.CARRY_OVER)
        assert carry_over.amount == Decimal("-1150.00")
        assert carry_over.status == AdjustmentStatus.PENDING
        assert carry_over.original_invoice_id == invoice.id
        assert carry_over.reason == (
            f"Negative balance carried forward from Invoice #{invoice.invoice_number}"
        )

    def test_positive_adjustment_increases_net(self, organization, period):
        paid_order(organization)
        PayoutAdjustmentFactory(organization=organization, amount=Decimal("50.00"))

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.net_amount == Decimal("900.00")
        assert invoice.adjustment_count == 1

    def test_skips_below_minimum_payout(self, organization, period):
        PayoutSettings.objects.create(pk=PayoutSettings.SINGLETON_PK, minimum_payout_amount=Decimal("2000"))
        paid_order(organization)

        summary = PayoutInvoiceGenerator.generate_payout_invoices(*period)

        assert summary.skipped[0]["reason"] == "Below minimum payout amount"
        assert not PayoutInvoice.objects.exists()

    def test_below_minimum_orders_roll_into_next_period(self, organization, period):
        """1000 in week one is held back, then paid out with week two's 1000."""
        PayoutSettings.objects.create(pk=PayoutSettings.SINGLETON_PK, minimum_payout_amount=Decimal("1500"))
        first = paid_order(organization)
        second = paid_order(organization, paid_at=PAID_IN_PERIOD + timedelta(days=7))

        PayoutInvoiceGenerator.generate_payout_invoices(*period)
        assert not PayoutInvoice.objects.exists()

        next_start, next_end = PERIOD_START + timedelta(days=7), PERIOD_END + timedelta(days=7)
        summary = PayoutInvoiceGenerator.generate_payout_invoices(next_start, next_end)

        assert summary.invoices_generated == 1
        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.period_start == next_start
        assert invoice.order_count == 2
        assert invoice.gross_amount == Decimal("2000.00")
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.payout_invoice_id == invoice.id
        assert second.payout_invoice_id == invoice.id

    def test_cancelled_paid_order_is_not_paid_out(self, organization, org_manager, period):
        """The customer holds a refund voucher, so the seller is not credited."""
        cancelled = paid_order(organization)
        kept = paid_order(organization, total="400.00")
        OrderStateMachine.cancel_order(
            cancelled, org_manager, CancellationReason.OUT_OF_STOCK
        )

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        invoice = PayoutInvoice.objects.get(organization=organization)
        assert invoice.order_count == 1
        assert invoice.gross_amount == Decimal("400.00")
        assert invoice.order_summary[0]["order_id"] == str(kept.pk)
        cancelled.refresh_from_db()
        assert cancelled.payout_invoice_id is None

    def test_only_cancelled_orders_means_no_invoice(self, organization, org_manager, period):
        order = paid_order(organization)
        OrderStateMachine.cancel_order(order, org_manager, CancellationReason.OUT_OF_STOCK)

        summary = PayoutInvoiceGenerator.generate_payout_invoices(*period)

        assert summary.invoices_generated == 0
        assert summary.skipped[0]["reason"] == "No paid orders in period"

    def test_one_failure_does_not_abort_batch(self, organization, period, monkeypatch):
        """A failing organization should be recorded while others still get invoiced."""
        broken = OrganizationFactory(name="Broken Store")
        paid_order(organization)
        paid_order(broken)
        original = PayoutInvoiceGenerator._next_invoice_number

        def flaky_number(org, period_end):
            if org.pk == broken.pk:
                raise RuntimeError("numbering unavailable")
            return original(org, period_end)

        monkeypatch.setattr(PayoutInvoiceGenerator, "_next_invoice_number", staticmethod(flaky_number))

        summary = PayoutInvoiceGenerator.generate_payout_invoices(*period)

        assert summary.status == RunStatus.PARTIAL
        assert summary.invoices_generated == 1
        assert summary.failed[0]["organization_id"] == str(broken.pk)
        assert not PayoutInvoice.objects.filter(organization=broken).exists()

    def test_records_last_run(self, organization, period):
        paid_order(organization)

        PayoutInvoiceGenerator.generate_payout_invoices(*period)

        payout_settings = PayoutSettings.objects.get(pk=PayoutSettings.SINGLETON_PK)
        assert payout_settings.last_run_status == RunStatus.SUCCESS
        assert payout_settings.last_run_invoices_generated == 1
        assert payout_settings.last_run_at is not None

    def test_rejects_inverted_period(self, db):
        with pytest.raises(ValidationError):
            PayoutInvoiceGenerator.generate_payout_invoices(PERIOD_END, PERIOD_START)


class TestMarkInvoicePaid:
    """Tests for mark_invoice_paid()."""

    def test_marks_pending_invoice_paid(self, superuser, organization):
        invoice = PayoutInvoiceFactory(organization=organization)

        PayoutInvoiceGenerator.mark_invoice_paid(invoice, superuser, payment_reference="BANK-123")

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.paid_by == superuser
        assert invoice.paid_at is not None
        assert invoice.payment_reference == "BANK-123"
        assert invoice.status_history[-1]["status"] == InvoiceStatus.PAID

    def test_rejects_already_paid(self, superuser, organization):
        invoice = PayoutInvoiceFactory(organization=organization, status=InvoiceStatus.PAID)

        with pytest.raises(InvoiceStateConflict, match="Invoice is already marked as paid"):
            PayoutInvoiceGenerator.mark_invoice_paid(invoice, superuser)

    def test_requires_system_admin(self, org_manager, organization):
        invoice = PayoutInvoiceFactory(organization=organization)

        with pytest.raises(PermissionDeniedError):
            PayoutInvoiceGenerator.mark_invoice_paid(invoice, org_manager)


class TestRevertPayoutStatus:
    """Tests for revert_payout_status()."""

    def test_reverts_paid_invoice(self, superuser, organization):
        invoice = PayoutInvoiceFactory(
            organization=organization,
            status=InvoiceStatus.PAID,
            payment_reference="BANK-123",
            paid_by=superuser,
        )

        PayoutInvoiceGenerator.revert_payout_status(invoice, superuser, "Bank transfer bounced")

        invoice.refresh_from_db()
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.paid_at is None
        assert invoice.paid_by is None
        assert invoice.payment_reference == ""
        assert invoice.status_history[-1]["reason"] == "Reverted: Bank transfer bounced"

    def test_requires_reason(self, superuser, organization):
        invoice = PayoutInvoiceFactory(organization=organization, status=InvoiceStatus.PAID)

        with pytest.raises(RevertReasonRequired):
            PayoutInvoiceGenerator.revert_payout_status(invoice, superuser, "   ")

    def test_rejects_pending_invoice(self, superuser, organization):
        invoice = PayoutInvoiceFactory(organization=organization)

        with pytest.raises(InvoiceStateConflict):
            PayoutInvoiceGenerator.revert_payout_status(invoice, superuser, "Mistake")


class TestPlatformFeeAndSettings:
    """Tests for update_org_platform_fee() and update_payout_settings()."""

    def test_sets_and_clears_custom_fee(self, superuser, organization):
        PayoutInvoiceGenerator.update_org_platform_fee(organization, superuser, Decimal("12.5"))
        organization.refresh_from_db()
        assert organization.platform_fee_percentage == Decimal("12.50")

        PayoutInvoiceGenerator.update_org_platform_fee(organization, superuser, None)
        organization.refresh_from_db()
        assert organization.platform_fee_percentage is None

    def test_rejects_fee_over_100(self, superuser, organization):
        with pytest.raises(ValidationError):
            PayoutInvoiceGenerator.update_org_platform_fee(organization, superuser, Decimal("101"))

    def test_settings_created_on_first_update(self, superuser):
        payout_settings, is_new = PayoutInvoiceGenerator.update_payout_settings(
            superuser, minimum_payout_amount=Decimal("500.00")
        )
        assert is_new is True
        assert payout_settings.minimum_payout_amount == Decimal("500.00")

        _, is_new = PayoutInvoiceGenerator.update_payout_settings(superuser, cutoff_day_of_week=2)
        assert is_new is False

    def test_rejects_invalid_day(self, superuser):
        with pytest.raises(ValidationError):
            PayoutInvoiceGenerator.update_payout_settings(superuser, cutoff_day_of_week=7)

    def test_load_does_not_create_row(self, db):
        payout_settings = PayoutSettings.load()

        assert payout_settings.default_platform_fee_percentage == Decimal("15")
        assert not PayoutSettings.objects.exists()
