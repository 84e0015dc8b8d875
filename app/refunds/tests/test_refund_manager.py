"""
Tests for RefundRequestManager.

Tests cover:
- Request preconditions, checked in order, and the 24-hour window
- Approval: voucher, cancellation, refunded payments, audit
- Rejection and repeated review
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from audit.models import AuditLog
from core.exceptions import PermissionDeniedError, ValidationError
from orders.models import Order
from orders.services import OrderStateMachine
from orders.states import CancellationReason, OrderStatus, PaymentStatus
from orders.tests.factories import OrderFactory
from payments.models import Payment
from payments.states import PaymentRecordStatus
from payouts.models import PayoutAdjustment
from payouts.states import AdjustmentType
from payouts.tests.factories import PayoutInvoiceFactory
from refunds.exceptions import (
    AlreadyApproved,
    AlreadyCancelled,
    AlreadyDelivered,
    AlreadyRejected,
    DuplicatePending,
    NotOwner,
    NotPaid,
    WindowExpired,
)
from refunds.models import RefundRequest
from refunds.services import RefundRequestManager
from refunds.states import RefundReason, RefundRequestStatus
from refunds.tests.conftest import PAID_AT, REVIEW_MESSAGE
from refunds.tests.factories import RefundRequestFactory
from vouchers.models import Voucher
from vouchers.states import CancellationInitiator, DiscountType


def request_refund(order, actor, at=PAID_AT + timedelta(hours=1), **kwargs):
    return RefundRequestManager.create_refund_request(
        order, actor, RefundReason.WRONG_SIZE, now=at, **kwargs
    )


class TestCreateRefundRequest:
    """Tests for create_refund_request()."""

    def test_creates_pending_request_with_snapshots(self, paid_order, customer, organization):
        refund = request_refund(paid_order, customer, customer_message="  Too small  ")

        assert refund.status == RefundRequestStatus.PENDING
        assert refund.refund_amount == paid_order.total_amount
        assert refund.customer_message == "Too small"
        assert refund.organization == organization
        assert refund.order_info["order_number"] == paid_order.order_number
        assert refund.customer_info["email"] == customer.email
        assert refund.organization_info["name"] == "Campus Store"

    def test_writes_audit_entry(self, paid_order, customer):
        request_refund(paid_order, customer)

        entry = AuditLog.objects.get(action="refund.requested")
        assert entry.severity == AuditLog.Severity.MEDIUM
        assert entry.metadata["order_number"] == paid_order.order_number

    def test_emails_organization_managers(
        self, paid_order, customer, org_manager, mailoutbox, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            request_refund(paid_order, customer)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [org_manager.email]
        assert paid_order.order_number in mailoutbox[0].subject

    def test_other_customer_is_not_owner(self, paid_order):
        from authentication.tests.factories import UserFactory

        with pytest.raises(NotOwner):
            request_refund(paid_order, UserFactory())

    def test_unpaid_order(self, customer, organization):
        order = OrderFactory(customer=customer, organization=organization)

        with pytest.raises(NotPaid):
            request_refund(order, customer)

    def test_delivered_order(self, paid_order, customer):
        paid_order.status = OrderStatus.DELIVERED
        paid_order.save()

        with pytest.raises(AlreadyDelivered):
            request_refund(paid_order, customer)

    def test_cancelled_order(self, paid_order, customer):
        paid_order.status = OrderStatus.CANCELLED
        paid_order.save()

        with pytest.raises(AlreadyCancelled):
            request_refund(paid_order, customer)

    def test_ownership_is_checked_before_payment(self, customer, organization):
        from authentication.tests.factories import UserFactory

        order = OrderFactory(customer=customer, organization=organization)

        with pytest.raises(NotOwner):
            request_refund(order, UserFactory())

    @pytest.mark.parametrize(
        "elapsed",
        [timedelta(hours=23, minutes=59), timedelta(hours=24)],
        ids=["just-inside", "exact-boundary"],
    )
    def test_request_inside_window_is_accepted(self, paid_order, customer, elapsed):
        refund = request_refund(paid_order, customer, at=PAID_AT + elapsed)

        assert refund.status == RefundRequestStatus.PENDING

    def test_request_after_window_expires(self, paid_order, customer):
        with pytest.raises(WindowExpired):
            request_refund(paid_order, customer, at=PAID_AT + timedelta(hours=24, seconds=1))

    def test_window_uses_latest_verified_payment(self, paid_order, customer):
        from payments.tests.factories import PaymentFactory

        PaymentFactory(order=paid_order, payment_date=PAID_AT + timedelta(hours=10))

        refund = request_refund(paid_order, customer, at=PAID_AT + timedelta(hours=30))

        assert refund.status == RefundRequestStatus.PENDING

    def test_second_pending_request_is_duplicate(self, paid_order, customer):
        request_refund(paid_order, customer)

        with pytest.raises(DuplicatePending):
            request_refund(paid_order, customer)
        assert RefundRequest.objects.filter(order=paid_order).count() == 1

    def test_new_request_allowed_after_rejection(self, paid_order, customer):
        RefundRequestFactory(order=paid_order, status=RefundRequestStatus.REJECTED)

        refund = request_refund(paid_order, customer)

        assert refund.status == RefundRequestStatus.PENDING

    def test_message_too_long(self, paid_order, customer):
        with pytest.raises(ValidationError):
            request_refund(paid_order, customer, customer_message="x" * 2001)


class TestApproveRefundRequest:
    """Tests for approve_refund_request()."""

    @pytest.fixture
    def refund(self, paid_order, customer):
        return request_refund(paid_order, customer)

    def test_cancels_order_and_issues_customer_voucher(self, refund, org_manager, paid_order):
        RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        refund.refresh_from_db()
        assert refund.status == RefundRequestStatus.APPROVED
        assert refund.reviewed_by == org_manager
        assert refund.reviewed_at is not None
        assert refund.admin_message == REVIEW_MESSAGE

        voucher = refund.voucher
        assert voucher.discount_type == DiscountType.REFUND
        assert voucher.discount_value == paid_order.total_amount
        assert voucher.assigned_to == paid_order.customer
        assert voucher.cancellation_initiator == CancellationInitiator.CUSTOMER
        assert voucher.monetary_refund_eligible_at is None
        assert voucher.source_refund_request == refund

        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.CANCELLED
        assert paid_order.cancellation_reason == CancellationReason.CUSTOMER_REQUEST
        assert paid_order.payment_status == PaymentStatus.REFUNDED

    def test_issues_exactly_one_voucher(self, refund, org_manager, paid_order):
        RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        assert Voucher.objects.filter(source_order=paid_order).count() == 1

    def test_marks_payments_refunded(self, refund, org_manager, paid_order):
        RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        payment = Payment.objects.get(order=paid_order)
        assert payment.payment_status == PaymentRecordStatus.REFUNDED
        assert payment.status_history[-1]["reason"] == "Refund request approved"

    def test_writes_high_severity_audit(self, refund, org_manager):
        RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        entry = AuditLog.objects.get(action="refund.approved")
        assert entry.severity == AuditLog.Severity.HIGH
        assert entry.metadata["voucher_code"] == refund.voucher.code

    def test_invoiced_order_books_cancellation_adjustment(self, refund, superuser, paid_order):
        invoice = PayoutInvoiceFactory(organization=paid_order.organization)
        paid_order.payout_invoice = invoice
        paid_order.save()

        RefundRequestManager.approve_refund_request(refund, superuser, REVIEW_MESSAGE)

        adjustment = PayoutAdjustment.objects.get(order=paid_order)
        assert adjustment.type == AdjustmentType.CANCELLATION
        assert adjustment.amount == -paid_order.total_amount

    def test_emails_customer(
        self, refund, org_manager, customer, mailoutbox, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        assert [m.to for m in mailoutbox] == [[customer.email]]
        refund.refresh_from_db()
        assert refund.voucher.code in mailoutbox[0].body

    def test_customer_cannot_approve(self, refund, customer):
        with pytest.raises(PermissionDeniedError):
            RefundRequestManager.approve_refund_request(refund, customer, REVIEW_MESSAGE)

    def test_manager_of_other_organization_cannot_approve(self, refund):
        from organizations.tests.factories import OrganizationMemberFactory

        outsider = OrganizationMemberFactory().user

        with pytest.raises(PermissionDeniedError):
            RefundRequestManager.approve_refund_request(refund, outsider, REVIEW_MESSAGE)

    def test_short_admin_message(self, refund, org_manager):
        with pytest.raises(ValidationError):
            RefundRequestManager.approve_refund_request(refund, org_manager, "ok")

    def test_second_approval_raises(self, refund, org_manager):
        RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        with pytest.raises(AlreadyApproved):
            RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)
        assert Voucher.objects.count() == 1

    def test_order_cancelled_by_seller_while_pending(self, refund, org_manager, paid_order):
        """The seller's voucher already covers the order, so approval must not add a second one."""
        OrderStateMachine.cancel_order(paid_order, org_manager, CancellationReason.OUT_OF_STOCK)
        refund = RefundRequest.objects.get(pk=refund.pk)

        with pytest.raises(AlreadyCancelled):
            RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        voucher = Voucher.objects.get(source_order=paid_order)
        assert voucher.cancellation_initiator == CancellationInitiator.SELLER
        refund.refresh_from_db()
        assert refund.status == RefundRequestStatus.PENDING
        assert refund.voucher is None

    def test_pending_request_on_cancelled_order_can_be_rejected(
        self, refund, org_manager, paid_order
    ):
        OrderStateMachine.cancel_order(paid_order, org_manager, CancellationReason.OUT_OF_STOCK)
        refund = RefundRequest.objects.get(pk=refund.pk)

        RefundRequestManager.reject_refund_request(refund, org_manager, "Seller already cancelled")

        refund.refresh_from_db()
        assert refund.status == RefundRequestStatus.REJECTED

    def test_order_delivered_while_pending(self, refund, org_manager, paid_order):
        Order.objects.filter(pk=paid_order.pk).update(status=OrderStatus.DELIVERED)
        refund = RefundRequest.objects.get(pk=refund.pk)

        with pytest.raises(AlreadyDelivered):
            RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)
        assert not Voucher.objects.exists()


class TestRejectRefundRequest:
    """Tests for reject_refund_request()."""

    def test_rejects_and_leaves_order_untouched(self, paid_order, customer, org_manager):
        refund = request_refund(paid_order, customer)

        RefundRequestManager.reject_refund_request(
            refund, org_manager, "Item shows signs of use"
        )

        refund.refresh_from_db()
        assert refund.status == RefundRequestStatus.REJECTED
        assert refund.admin_message == "Item shows signs of use"
        assert refund.voucher is None
        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.PROCESSING
        assert paid_order.payment_status == PaymentStatus.PAID
        assert not Voucher.objects.exists()

    def test_rejecting_approved_request(self, paid_order, customer, org_manager):
        refund = request_refund(paid_order, customer)
        RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        with pytest.raises(AlreadyApproved):
            RefundRequestManager.reject_refund_request(refund, org_manager, REVIEW_MESSAGE)

    def test_approving_rejected_request(self, org_manager, organization):
        refund = RefundRequestFactory(
            order__organization=organization, status=RefundRequestStatus.REJECTED
        )

        with pytest.raises(AlreadyRejected):
            RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)
        assert refund.order.status == OrderStatus.PROCESSING

    def test_refund_amount_is_frozen(self, paid_order, customer, org_manager):
        refund = request_refund(paid_order, customer)
        paid_order.total_amount = Decimal("1.00")
        paid_order.save()
        refund.refresh_from_db()

        RefundRequestManager.approve_refund_request(refund, org_manager, REVIEW_MESSAGE)

        assert refund.voucher.discount_value == Decimal("1000.00")
