"""
Payment webhook processor.

Single entry point for gateway payment events, safe under at-least-once
delivery:

- Paid events create one Payment per order (proportional shares for a
  grouped checkout) and move each order to PAID/PROCESSING
- Failed events cancel the affected unpaid orders as a system
  cancellation; grouped failures also expire the checkout session
- Replays are reported as processed no-ops, never as errors

Usage:
    from payments.adapters import PaymongoAdapter
    from payments.processor import PaymentWebhookProcessor

    outcome = PaymentWebhookProcessor.handle_payment_webhook(
        PaymongoAdapter.parse_event(payload)
    )
    if not outcome.processed:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import transaction
from django.utils import timezone

from audit.models import AuditLog
from audit.services import log_action
from core.helpers import allocate_proportionally, from_minor_units
from core.services import BaseService
from orders.models import CheckoutSession, Order
from orders.services import OrderStateMachine
from orders.states import CancellationReason, CheckoutSessionStatus, OrderStatus, PaymentStatus
from payments.adapters import CHECKOUT_ID_PREFIX
from payments.models import Payment
from payments.states import (
    PAID_EVENT_TYPES,
    PAYMENT_FAILED,
    PaymentProvider,
    PaymentRecordStatus,
    ReconciliationStatus,
)
from vouchers.states import CancellationInitiator

if TYPE_CHECKING:
    from payments.adapters import PaymentEvent

ZERO = Decimal("0.00")
UNPAID_STATUSES = (PaymentStatus.PENDING, PaymentStatus.DOWNPAYMENT)
CLOSED_SESSION_STATUSES = (CheckoutSessionStatus.EXPIRED, CheckoutSessionStatus.CANCELLED)


@dataclass
class WebhookOutcome:
    """
    Result of one webhook.

    ``processed`` is True for handled events and for harmless replays;
    ``reason`` says which.
    """

    processed: bool
    reason: str
    order_ids: list[str] = field(default_factory=list)
    payment_ids: list[str] = field(default_factory=list)
    cancelled_order_ids: list[str] = field(default_factory=list)
    checkout_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "reason": self.reason,
            "order_ids": self.order_ids,
            "payment_ids": self.payment_ids,
            "cancelled_order_ids": self.cancelled_order_ids,
            "checkout_id": self.checkout_id,
        }


class PaymentWebhookProcessor(BaseService):
    """Applies gateway payment events to orders and payments."""

    @classmethod
    def handle_payment_webhook(cls, event: PaymentEvent) -> WebhookOutcome:
        if event.event_type in PAID_EVENT_TYPES:
            outcome = cls._handle_paid(event)
        elif event.event_type == PAYMENT_FAILED:
            outcome = cls._handle_failed(event)
        else:
            outcome = WebhookOutcome(processed=False, reason="Unhandled event type")

        cls.get_logger().info(
            f"Webhook {event.event_type}: {outcome.reason}",
            extra={
                "event_id": event.event_id,
                "external_id": event.external_id,
                "payment_id": event.payment_id,
                "processed": outcome.processed,
            },
        )
        return outcome

    # ==========================================================================
    # Paid
    # ==========================================================================

    @classmethod
    def _handle_paid(cls, event: PaymentEvent) -> WebhookOutcome:
        external_id = cls._external_id(event)
        if not external_id:
            return WebhookOutcome(processed=False, reason="No external ID")

        session = None
        if external_id.startswith(CHECKOUT_ID_PREFIX):
            session = CheckoutSession.objects.filter(checkout_id=external_id).first()
            if session is None:
                return WebhookOutcome(processed=False, reason="Checkout session not found")
            orders = list(session.orders.order_by("created_at", "order_number"))
        else:
            order = Order.objects.filter(order_number=external_id).first()
            if order is None:
                return WebhookOutcome(processed=False, reason="Order not found")
            orders = [order]
        if not orders:
            return WebhookOutcome(processed=False, reason="No valid orders found")

        # Step 1: Idempotency anchor
        if Payment.objects.filter(order__in=orders, transaction_id=event.payment_id).exists():
            return WebhookOutcome(
                processed=True,
                reason="Payment already exists",
                checkout_id=session.checkout_id if session else None,
            )

        # Step 2: Proportional shares, remainder on the last order
        weights = [o.total_amount for o in orders]
        amounts = allocate_proportionally(event.amount_minor, weights)
        fees = allocate_proportionally(event.fee_minor, weights)

        reason = "Payment confirmed via webhook"
        if session is not None:
            reason = "Payment confirmed via webhook (grouped payment)"
        now = timezone.now()
        payments = []

        with cls.atomic():
            # Step 3: Payment rows and order transitions
            for order, amount_minor, fee_minor in zip(orders, amounts, fees):
                amount = from_minor_units(amount_minor)
                fee = from_minor_units(fee_minor)
                payment = Payment(
                    order=order,
                    checkout_session=session,
                    customer_id=order.customer_id,
                    amount=amount,
                    processing_fee=fee,
                    net_amount=max(ZERO, amount - fee),
                    currency=event.currency,
                    payment_status=PaymentRecordStatus.VERIFIED,
                    payment_provider=PaymentProvider.PAYMONGO,
                    transaction_id=event.payment_id,
                    reference_no=f"PAYMONGO-{event.payment_id}",
                    gateway_checkout_id=event.gateway_checkout_id,
                    reconciliation_status=(
                        ReconciliationStatus.MATCHED
                        if amount == order.total_amount
                        else ReconciliationStatus.DISCREPANCY
                    ),
                    payment_date=now,
                    order_info=order.snapshot(),
                    customer_info=order.customer_info,
                    metadata=event.raw,
                )
                payment.append_history(PaymentRecordStatus.VERIFIED, reason, actor_name="Payment System")
                payment.save()
                payments.append(payment)

                OrderStateMachine.record_payment(order, reason)

            # Step 4: Session
            if session is not None:
                session.status = CheckoutSessionStatus.PAID
                session.paid_at = now
                if event.gateway_checkout_id:
                    session.gateway_checkout_id = event.gateway_checkout_id
                session.save(update_fields=["status", "paid_at", "gateway_checkout_id", "updated_at"])

            # Step 5: Audit
            for order, payment in zip(orders, payments):
                log_action(
                    "payment.received",
                    f"Payment of PHP {payment.amount} received for order {order.order_number}",
                    organization=order.organization,
                    log_type=AuditLog.LogType.SYSTEM_EVENT,
                    severity=AuditLog.Severity.HIGH,
                    metadata={
                        "order_id": order.id,
                        "order_number": order.order_number,
                        "payment_id": payment.id,
                        "transaction_id": event.payment_id,
                        "amount": payment.amount,
                        "checkout_id": session.checkout_id if session else None,
                    },
                )

            payment_ids = [str(p.pk) for p in payments]
            transaction.on_commit(lambda: cls._queue_confirmation_emails(payment_ids))

        return WebhookOutcome(
            processed=True,
            reason="Payment recorded",
            order_ids=[str(o.pk) for o in orders],
            payment_ids=payment_ids,
            checkout_id=session.checkout_id if session else None,
        )

    # ==========================================================================
    # Failed
    # ==========================================================================

    @classmethod
    def _handle_failed(cls, event: PaymentEvent) -> WebhookOutcome:
        external_id = cls._external_id(event)
        if not external_id:
            return WebhookOutcome(processed=False, reason="No external ID")

        if external_id.startswith(CHECKOUT_ID_PREFIX):
            session = CheckoutSession.objects.filter(checkout_id=external_id).first()
            if session is None:
                return WebhookOutcome(processed=False, reason="Checkout session not found")
            if session.status in CLOSED_SESSION_STATUSES:
                return WebhookOutcome(
                    processed=True, reason="Session already processed", checkout_id=session.checkout_id
                )

            cancelled = []
            with cls.atomic():
                for order in session.orders.order_by("created_at", "order_number"):
                    if order.is_finalized or order.payment_status not in UNPAID_STATUSES:
                        continue
                    cls._cancel_for_failure(order, event, session)
                    cancelled.append(str(order.pk))

                session.status = CheckoutSessionStatus.EXPIRED
                session.save(update_fields=["status", "updated_at"])

            return WebhookOutcome(
                processed=True,
                reason="Payment failed",
                cancelled_order_ids=cancelled,
                checkout_id=session.checkout_id,
            )

        order = Order.objects.filter(order_number=external_id).first()
        if order is None:
            return WebhookOutcome(processed=False, reason="Order not found")
        if order.status == OrderStatus.CANCELLED:
            return WebhookOutcome(processed=True, reason="Order already cancelled")
        if order.is_finalized or order.payment_status not in UNPAID_STATUSES:
            return WebhookOutcome(processed=True, reason="Order not pending")

        with cls.atomic():
            cls._cancel_for_failure(order, event, None)

        return WebhookOutcome(
            processed=True, reason="Payment failed", cancelled_order_ids=[str(order.pk)]
        )

    @staticmethod
    def _cancel_for_failure(order: Order, event: PaymentEvent, session: CheckoutSession | None) -> None:
        OrderStateMachine.cancel_order(
            order,
            None,
            CancellationReason.PAYMENT_FAILED,
            note=f"Gateway payment {event.payment_id} failed",
            initiator=CancellationInitiator.CUSTOMER,
        )
        log_action(
            "payment.failed",
            f"Payment failed for order {order.order_number}",
            organization=order.organization,
            log_type=AuditLog.LogType.SYSTEM_EVENT,
            severity=AuditLog.Severity.MEDIUM,
            metadata={
                "order_id": order.id,
                "order_number": order.order_number,
                "transaction_id": event.payment_id,
                "checkout_id": session.checkout_id if session else None,
            },
        )

    # ==========================================================================
    # Internals
    # ==========================================================================

    @staticmethod
    def _external_id(event: PaymentEvent) -> str:
        """
        External id of the event.

        A payment naming several orders only in its description is matched
        to the checkout session that holds all of them.
        """
        if event.external_id:
            return event.external_id
        if len(event.order_numbers) < 2:
            return ""
        wanted = set(event.order_numbers)
        sessions = CheckoutSession.objects.filter(
            orders__order_number=event.order_numbers[0]
        ).prefetch_related("orders")
        for session in sessions:
            if wanted <= {o.order_number for o in session.orders.all()}:
                return session.checkout_id
        return ""

    @staticmethod
    def _queue_confirmation_emails(payment_ids: list[str]) -> None:
        from payments.tasks import send_payment_confirmation_email

        for payment_id in payment_ids:
            send_payment_confirmation_email.delay(payment_id)
