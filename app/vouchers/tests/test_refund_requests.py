"""
Tests for VoucherRefundRequestManager.

Tests cover:
- Eligibility: owner, REFUND type, SELLER initiator, unused, waiting period
- Approval deactivates the voucher; a used voucher cannot be approved
- Rejection lets the customer ask again
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from audit.models import AuditLog
from authentication.tests.factories import UserFactory
from core.exceptions import PermissionDeniedError, ValidationError
from orders.tests.factories import OrderFactory
from vouchers.exceptions import (
    DuplicateRefundRequest,
    NotMonetarilyEligible,
    NotRefundVoucher,
    NotVoucherOwner,
    RefundRequestReviewed,
    VoucherAlreadyUsed,
)
from vouchers.models import VoucherRefundRequest
from vouchers.services import VoucherEngine, VoucherRefundRequestManager
from vouchers.states import CancellationInitiator, VoucherErrorCode, VoucherRefundRequestStatus
from vouchers.tests.factories import (
    SellerRefundVoucherFactory,
    VoucherFactory,
    VoucherRefundRequestFactory,
)

REVIEW_MESSAGE = "Transfer scheduled for Friday"
BANK_DETAILS = {
    "account_name": "Juan Dela Cruz",
    "account_number": "0012-3456-7890",
    "bank_name": "BPI",
}


def request_cash(voucher, actor, **kwargs):
    return VoucherRefundRequestManager.create_refund_request(voucher, actor, **kwargs)


@pytest.fixture
def voucher(customer):
    return SellerRefundVoucherFactory(assigned_to=customer)


class TestMonetaryEligibility:
    """Tests for Voucher.is_monetarily_eligible."""

    def test_falls_back_to_creation_time_plus_delay(self, customer, settings):
        settings.SELLER_REFUND_MONETARY_DELAY_DAYS = 14
        voucher = SellerRefundVoucherFactory(assigned_to=customer, monetary_refund_eligible_at=None)

        assert voucher.monetary_refund_available_at == voucher.created_at + timedelta(days=14)
        assert not voucher.is_monetarily_eligible

    def test_used_voucher_is_not_eligible(self, voucher):
        voucher.used_count = 1

        assert not voucher.is_monetarily_eligible

    def test_customer_voucher_has_no_availability(self, customer):
        voucher = SellerRefundVoucherFactory(
            assigned_to=customer, cancellation_initiator=CancellationInitiator.CUSTOMER
        )

        assert voucher.monetary_refund_available_at is None


class TestCreateVoucherRefundRequest:
    """Tests for create_refund_request()."""

    def test_creates_pending_request_with_snapshots(self, voucher, customer):
        order = OrderFactory(customer=customer, paid=True)
        voucher.source_order = order
        voucher.save()

        refund_request = request_cash(voucher, customer, customer_message="  Please transfer  ")

        assert refund_request.status == VoucherRefundRequestStatus.PENDING
        assert refund_request.amount == Decimal("500.00")
        assert refund_request.customer_message == "Please transfer"
        assert refund_request.bank_details == {}
        assert refund_request.voucher_info["code"] == voucher.code
        assert refund_request.customer_info["email"] == customer.email
        assert refund_request.source_order_info["order_number"] == order.order_number
        voucher.refresh_from_db()
        assert voucher.monetary_refund_requested_at is not None

    def test_writes_audit_entry(self, voucher, customer):
        request_cash(voucher, customer)

        entry = AuditLog.objects.get(action="voucher.refund_requested")
        assert entry.severity == AuditLog.Severity.MEDIUM
        assert entry.metadata["voucher_id"] == str(voucher.id)

    def test_stores_bank_details(self, voucher, customer):
        refund_request = request_cash(voucher, customer, bank_details=BANK_DETAILS)

        assert refund_request.bank_details == BANK_DETAILS

    def test_incomplete_bank_details(self, voucher, customer):
        with pytest.raises(ValidationError) as exc_info:
            request_cash(voucher, customer, bank_details={"bank_name": "BPI"})

        assert exc_info.value.error_code == "INVALID_BANK_DETAILS"
        assert not VoucherRefundRequest.objects.exists()

    def test_other_customer_is_not_owner(self, voucher):
        with pytest.raises(NotVoucherOwner):
            request_cash(voucher, UserFactory())

    def test_promotional_voucher_is_rejected(self, customer):
        promo = VoucherFactory(assigned_to=customer)

        with pytest.raises(NotRefundVoucher):
            request_cash(promo, customer)

    def test_customer_initiated_voucher_is_not_eligible(self, customer):
        voucher = SellerRefundVoucherFactory(
            assigned_to=customer, cancellation_initiator=CancellationInitiator.CUSTOMER
        )

        with pytest.raises(NotMonetarilyEligible):
            request_cash(voucher, customer)

    def test_used_voucher(self, customer):
        voucher = SellerRefundVoucherFactory(assigned_to=customer, used_count=1)

        with pytest.raises(VoucherAlreadyUsed):
            request_cash(voucher, customer)

    def test_waiting_period_reports_days_remaining(self, customer):
        now = timezone.now()
        voucher = SellerRefundVoucherFactory(
            assigned_to=customer, monetary_refund_eligible_at=now + timedelta(days=2, hours=1)
        )

        with pytest.raises(NotMonetarilyEligible) as exc_info:
            request_cash(voucher, customer, now=now)

        assert exc_info.value.details["days_remaining"] == 3

    def test_request_at_exact_availability_is_accepted(self, customer):
        now = timezone.now()
        voucher = SellerRefundVoucherFactory(assigned_to=customer, monetary_refund_eligible_at=now)

        refund_request = request_cash(voucher, customer, now=now)

        assert refund_request.status == VoucherRefundRequestStatus.PENDING

    def test_fallback_availability_after_delay(self, customer, settings):
        settings.SELLER_REFUND_MONETARY_DELAY_DAYS = 14
        voucher = SellerRefundVoucherFactory(assigned_to=customer, monetary_refund_eligible_at=None)

        with pytest.raises(NotMonetarilyEligible):
            request_cash(voucher, customer)

        refund_request = request_cash(
            voucher, customer, now=voucher.created_at + timedelta(days=14)
        )
        assert refund_request.status == VoucherRefundRequestStatus.PENDING

    def test_second_pending_request_is_duplicate(self, voucher, customer):
        request_cash(voucher, customer)

        with pytest.raises(DuplicateRefundRequest):
            request_cash(voucher, customer)
        assert VoucherRefundRequest.objects.filter(voucher=voucher).count() == 1

    def test_new_request_allowed_after_rejection(self, voucher, customer, superuser):
        first = request_cash(voucher, customer)
        VoucherRefundRequestManager.reject_refund_request(first, superuser, REVIEW_MESSAGE)

        second = request_cash(voucher, customer)

        assert second.status == VoucherRefundRequestStatus.PENDING

    def test_approved_voucher_cannot_be_requested_again(self, voucher, customer, superuser):
        first = request_cash(voucher, customer)
        VoucherRefundRequestManager.approve_refund_request(first, superuser, REVIEW_MESSAGE)
        voucher.refresh_from_db()

        with pytest.raises(NotMonetarilyEligible):
            request_cash(voucher, customer)


class TestApproveVoucherRefundRequest:
    """Tests for approve_refund_request()."""

    @pytest.fixture
    def refund_request(self, voucher, customer):
        return request_cash(voucher, customer, bank_details=BANK_DETAILS)

    def test_approves_and_deactivates_voucher(self, refund_request, voucher, superuser):
        VoucherRefundRequestManager.approve_refund_request(
            refund_request, superuser, f"  {REVIEW_MESSAGE}  "
        )

        refund_request.refresh_from_db()
        assert refund_request.status == VoucherRefundRequestStatus.APPROVED
        assert refund_request.admin_message == REVIEW_MESSAGE
        assert refund_request.reviewed_by == superuser
        assert refund_request.reviewed_at is not None
        voucher.refresh_from_db()
        assert voucher.is_active is False

    def test_approved_voucher_cannot_be_redeemed(self, refund_request, voucher, customer, superuser):
        VoucherRefundRequestManager.approve_refund_request(refund_request, superuser, REVIEW_MESSAGE)

        result = VoucherEngine.validate_voucher(voucher.code, Decimal("1000.00"), user=customer)

        assert not result.valid
        assert result.error_code == VoucherErrorCode.INACTIVE

    def test_writes_high_severity_audit(self, refund_request, superuser):
        VoucherRefundRequestManager.approve_refund_request(refund_request, superuser, REVIEW_MESSAGE)

        entry = AuditLog.objects.get(action="voucher.refund_approved")
        assert entry.severity == AuditLog.Severity.HIGH

    def test_organization_manager_cannot_approve(self, refund_request, org_manager):
        with pytest.raises(PermissionDeniedError):
            VoucherRefundRequestManager.approve_refund_request(
                refund_request, org_manager, REVIEW_MESSAGE
            )

    def test_voucher_used_while_pending(self, refund_request, voucher, superuser):
        voucher.used_count = 1
        voucher.save()

        with pytest.raises(VoucherAlreadyUsed):
            VoucherRefundRequestManager.approve_refund_request(
                refund_request, superuser, REVIEW_MESSAGE
            )

        refund_request.refresh_from_db()
        assert refund_request.status == VoucherRefundRequestStatus.PENDING
        voucher.refresh_from_db()
        assert voucher.is_active is True

    def test_short_admin_message(self, refund_request, superuser):
        with pytest.raises(ValidationError):
            VoucherRefundRequestManager.approve_refund_request(refund_request, superuser, "ok")

    def test_second_approval_raises(self, refund_request, superuser):
        VoucherRefundRequestManager.approve_refund_request(refund_request, superuser, REVIEW_MESSAGE)

        with pytest.raises(RefundRequestReviewed) as exc_info:
            VoucherRefundRequestManager.approve_refund_request(
                refund_request, superuser, REVIEW_MESSAGE
            )
        assert exc_info.value.error_code == "ALREADY_APPROVED"


class TestRejectVoucherRefundRequest:
    """Tests for reject_refund_request()."""

    def test_rejects_and_keeps_voucher_usable(self, voucher, customer, superuser):
        refund_request = request_cash(voucher, customer)

        VoucherRefundRequestManager.reject_refund_request(
            refund_request, superuser, "Bank details could not be verified"
        )

        refund_request.refresh_from_db()
        assert refund_request.status == VoucherRefundRequestStatus.REJECTED
        voucher.refresh_from_db()
        assert voucher.is_active is True
        assert voucher.monetary_refund_requested_at is None
        entry = AuditLog.objects.get(action="voucher.refund_rejected")
        assert entry.severity == AuditLog.Severity.MEDIUM

    def test_approving_rejected_request(self, superuser):
        refund_request = VoucherRefundRequestFactory(status=VoucherRefundRequestStatus.REJECTED)

        with pytest.raises(RefundRequestReviewed) as exc_info:
            VoucherRefundRequestManager.approve_refund_request(
                refund_request, superuser, REVIEW_MESSAGE
            )
        assert exc_info.value.error_code == "ALREADY_REJECTED"
        refund_request.voucher.refresh_from_db()
        assert refund_request.voucher.is_active is True
