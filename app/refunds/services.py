"""
Refund request services.

RefundRequestManager owns the refund request lifecycle:

- create_refund_request(): customer asks to cancel a paid order
- approve_refund_request(): reviewer cancels the order and issues a
  CUSTOMER refund voucher
- reject_refund_request(): reviewer declines; the order is untouched

Reviewers are managers of the order's organization or platform operators.

Usage:
    from refunds.services import RefundRequestManager

    refund = RefundRequestManager.create_refund_request(
        order, request.user, RefundReason.WRONG_SIZE, customer_message="Too small"
    )
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from audit.models import AuditLog
from audit.services import log_action
from core.exceptions import PermissionDeniedError, ValidationError
from core.services import BaseService
from orders.models import Order
from orders.services import OrderStateMachine, actor_display_name
from orders.states import CancellationReason, OrderStatus, PaymentStatus
from organizations.permissions import can_manage_organization
from payments.models import Payment
from payments.states import PaymentRecordStatus
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
from refunds.states import RefundReason, RefundRequestStatus
from vouchers.services import VoucherEngine
from vouchers.states import CancellationInitiator

if TYPE_CHECKING:
    from datetime import datetime

    from authentication.models import User

CUSTOMER_MESSAGE_MAX_LENGTH = 2000
ADMIN_MESSAGE_MIN_LENGTH = 10
ADMIN_MESSAGE_MAX_LENGTH = 1000


def can_review_refund(user: User | None, refund_request: RefundRequest) -> bool:
    return can_manage_organization(user, refund_request.order.organization)


class RefundRequestManager(BaseService):
    """Customer refund requests and their review."""

    @classmethod
    def create_refund_request(
        cls,
        order: Order,
        actor: User,
        reason: str,
        customer_message: str | None = None,
        now: datetime | None = None,
    ) -> RefundRequest:
        """
        File a refund request for a paid, undelivered order.

        The window runs for REFUND_REQUEST_WINDOW_HOURS from the latest
        verified payment; a request at exactly the boundary is accepted.

        Raises:
            NotOwner, NotPaid, AlreadyDelivered, AlreadyCancelled,
            WindowExpired, DuplicatePending, ValidationError
        """
        now = now or timezone.now()
        if reason not in RefundReason.values:
            raise ValidationError(f"Unknown refund reason: {reason}", error_code="INVALID_REASON")
        customer_message = (customer_message or "").strip()
        if len(customer_message) > CUSTOMER_MESSAGE_MAX_LENGTH:
            raise ValidationError(
                f"Message must be at most {CUSTOMER_MESSAGE_MAX_LENGTH} characters",
                error_code="MESSAGE_TOO_LONG",
            )

        details = {"order_id": str(order.pk)}
        if order.customer_id != actor.pk:
            raise NotOwner("You can only request refunds for your own orders", details=details)
        if order.payment_status != PaymentStatus.PAID:
            raise NotPaid("Only paid orders can be refunded", details=details)
        if order.status == OrderStatus.DELIVERED:
            raise AlreadyDelivered("Delivered orders cannot be refunded", details=details)
        if order.status == OrderStatus.CANCELLED:
            raise AlreadyCancelled("This order is already cancelled", details=details)

        paid_at = cls._latest_payment_date(order)
        window = timedelta(hours=settings.REFUND_REQUEST_WINDOW_HOURS)
        if paid_at is None or now - paid_at > window:
            raise WindowExpired(
                f"Refund requests must be made within {settings.REFUND_REQUEST_WINDOW_HOURS} "
                "hours of payment",
                details={**details, "paid_at": paid_at.isoformat() if paid_at else None},
            )

        if RefundRequest.objects.filter(order=order, status=RefundRequestStatus.PENDING).exists():
            raise DuplicatePending(
                "A refund request for this order is already pending", details=details
            )

        try:
            with cls.atomic():
                refund_request = RefundRequest.objects.create(
                    order=order,
                    organization=order.organization,
                    requested_by=actor,
                    reason=reason,
                    customer_message=customer_message,
                    refund_amount=order.total_amount,
                    order_info=order.snapshot(),
                    customer_info=actor.snapshot(),
                    organization_info=cls._organization_info(order),
                )
                log_action(
                    "refund.requested",
                    f"Refund requested for order {order.order_number}",
                    actor=actor,
                    organization=order.organization,
                    severity=AuditLog.Severity.MEDIUM,
                    metadata={
                        "refund_request_id": refund_request.id,
                        "order_id": order.id,
                        "order_number": order.order_number,
                        "reason": reason,
                        "refund_amount": refund_request.refund_amount,
                    },
                )
                cls._queue_email(refund_request, "received")
        except IntegrityError as exc:
            raise DuplicatePending(
                "A refund request for this order is already pending", details=details
            ) from exc

        cls.get_logger().info(
            "Refund request created",
            extra={"refund_request_id": str(refund_request.id), "order_id": str(order.id)},
        )
        return refund_request

    @classmethod
    def approve_refund_request(
        cls,
        refund_request: RefundRequest,
        actor: User,
        admin_message: str,
    ) -> RefundRequest:
        """
        Approve a pending request.

        Issues a CUSTOMER refund voucher for the requested amount, cancels
        the order (CUSTOMER_REQUEST), moves its payment status to REFUNDED
        and marks its verified payments REFUNDED, all in one transaction.

        Raises:
            PermissionDeniedError, AlreadyApproved, AlreadyRejected,
            ValidationError, AlreadyCancelled, AlreadyDelivered
        """
        admin_message = cls._validate_review(refund_request, actor, admin_message)
        order = refund_request.order
        details = {"refund_request_id": str(refund_request.id), "order_id": str(order.id)}
        if order.status == OrderStatus.CANCELLED:
            raise AlreadyCancelled("This order is already cancelled", details=details)
        if order.status == OrderStatus.DELIVERED:
            raise AlreadyDelivered("Delivered orders cannot be refunded", details=details)

        with cls.atomic():
            # Step 1: Voucher
            voucher = VoucherEngine.issue_refund_voucher(
                order=order,
                amount=refund_request.refund_amount,
                assigned_to=refund_request.requested_by,
                created_by=actor,
                cancellation_initiator=CancellationInitiator.CUSTOMER,
                refund_request=refund_request,
            )

            # Step 2: Request
            refund_request.approve()
            refund_request.admin_message = admin_message
            refund_request.reviewed_by = actor
            refund_request.reviewed_at = timezone.now()
            refund_request.voucher = voucher
            refund_request.save()

            # Step 3: Order
            OrderStateMachine.cancel_order(
                order,
                actor,
                CancellationReason.CUSTOMER_REQUEST,
                note=f"Refund request approved: {admin_message}",
                initiator=CancellationInitiator.CUSTOMER,
            )
            if order.payment_status != PaymentStatus.REFUNDED:
                OrderStateMachine.update_order(
                    order,
                    actor,
                    payment_status=PaymentStatus.REFUNDED,
                    note="Refund request approved",
                )

            # Step 4: Payments
            refunded_payments = cls._mark_payments_refunded(order, actor)

            log_action(
                "refund.approved",
                f"Refund request for order {order.order_number} approved",
                actor=actor,
                organization=order.organization,
                severity=AuditLog.Severity.HIGH,
                metadata={
                    "refund_request_id": refund_request.id,
                    "order_id": order.id,
                    "order_number": order.order_number,
                    "voucher_id": voucher.id,
                    "voucher_code": voucher.code,
                    "refund_amount": refund_request.refund_amount,
                    "refunded_payments": refunded_payments,
                },
            )
            cls._queue_email(refund_request, "approved")

        cls.get_logger().info(
            "Refund request approved",
            extra={
                "refund_request_id": str(refund_request.id),
                "order_id": str(order.id),
                "voucher_id": str(voucher.id),
            },
        )
        return refund_request

    @classmethod
    def reject_refund_request(
        cls,
        refund_request: RefundRequest,
        actor: User,
        admin_message: str,
    ) -> RefundRequest:
        """
        Reject a pending request. The order is left as it is.

        Raises:
            PermissionDeniedError, AlreadyApproved, AlreadyRejected,
            ValidationError
        """
        admin_message = cls._validate_review(refund_request, actor, admin_message)
        order = refund_request.order

        with cls.atomic():
            refund_request.reject()
            refund_request.admin_message = admin_message
            refund_request.reviewed_by = actor
            refund_request.reviewed_at = timezone.now()
            refund_request.save()

            log_action(
                "refund.rejected",
                f"Refund request for order {order.order_number} rejected",
                actor=actor,
                organization=order.organization,
                severity=AuditLog.Severity.MEDIUM,
                metadata={
                    "refund_request_id": refund_request.id,
                    "order_id": order.id,
                    "order_number": order.order_number,
                },
            )
            cls._queue_email(refund_request, "rejected")

        cls.get_logger().info(
            "Refund request rejected",
            extra={"refund_request_id": str(refund_request.id), "order_id": str(order.id)},
        )
        return refund_request

    # ==========================================================================
    # Internals
    # ==========================================================================

    @staticmethod
    def _validate_review(refund_request: RefundRequest, actor: User, admin_message: str) -> str:
        if not can_review_refund(actor, refund_request):
            raise PermissionDeniedError("You don't have permission to review this refund request")
        if refund_request.status == RefundRequestStatus.APPROVED:
            raise AlreadyApproved(
                "This refund request was already approved",
                details={"refund_request_id": str(refund_request.pk)},
            )
        if refund_request.status == RefundRequestStatus.REJECTED:
            raise AlreadyRejected(
                "This refund request was already rejected",
                details={"refund_request_id": str(refund_request.pk)},
            )

        admin_message = (admin_message or "").strip()
        if not ADMIN_MESSAGE_MIN_LENGTH <= len(admin_message) <= ADMIN_MESSAGE_MAX_LENGTH:
            raise ValidationError(
                f"Message must be between {ADMIN_MESSAGE_MIN_LENGTH} and "
                f"{ADMIN_MESSAGE_MAX_LENGTH} characters",
                error_code="INVALID_ADMIN_MESSAGE",
            )
        return admin_message

    @staticmethod
    def _organization_info(order: Order) -> dict:
        if order.organization is None:
            return {}
        return {
            "id": str(order.organization.pk),
            "name": order.organization.name,
            "slug": order.organization.slug,
        }

    @staticmethod
    def _latest_payment_date(order: Order):
        """Latest verified payment, falling back to the order's paid_at."""
        payment = (
            Payment.objects.filter(order=order, payment_status=PaymentRecordStatus.VERIFIED)
            .order_by("-payment_date")
            .first()
        )
        if payment is not None:
            return payment.payment_date
        return order.paid_at

    @staticmethod
    def _mark_payments_refunded(order: Order, actor: User) -> int:
        payments = Payment.objects.select_for_update().filter(
            order=order, payment_status=PaymentRecordStatus.VERIFIED
        )
        count = 0
        for payment in payments:
            payment.payment_status = PaymentRecordStatus.REFUNDED
            payment.append_history(
                PaymentRecordStatus.REFUNDED,
                "Refund request approved",
                actor_name=actor_display_name(actor),
            )
            payment.save(update_fields=["payment_status", "status_history", "updated_at"])
            count += 1
        return count

    @staticmethod
    def _queue_email(refund_request: RefundRequest, kind: str) -> None:
        from refunds.tasks import send_refund_request_email

        refund_request_id = str(refund_request.pk)
        transaction.on_commit(lambda: send_refund_request_email.delay(refund_request_id, kind))
