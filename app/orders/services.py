"""
Order services.

- OrderStateMachine: Status and payment-status transitions, cancellation
  with inventory restoration, seller refund vouchers, payout adjustments
- CheckoutService: Turns cart lines into one order per organization and
  commits voucher redemptions

Usage:
    from orders.services import OrderStateMachine

    OrderStateMachine.update_order(order, request.user, status=OrderStatus.READY)
    OrderStateMachine.cancel_order(
        order, request.user, CancellationReason.OUT_OF_STOCK, initiator=CancellationInitiator.SELLER
    )
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django_fsm import can_proceed

from audit.models import AuditLog
from audit.services import log_action
from carts.models import CartItem
from catalog.models import Product, ProductVariant
from core.exceptions import PermissionDeniedError, ValidationError
from core.helpers import round2
from core.services import BaseService
from orders.exceptions import FinalizedOrder, InvalidPaymentTransition, InvalidTransition, StaleOrder
from orders.models import CheckoutSession, Order, OrderItem, OrderStatusEvent
from orders.states import CancellationReason, OrderStatus, PaymentStatus
from organizations.permissions import (
    is_organization_manager,
    is_platform_operator,
    is_system_admin,
)
from payouts.models import PayoutAdjustment
from payouts.states import AdjustmentStatus, AdjustmentType
from vouchers.services import VoucherEngine
from vouchers.states import CancellationInitiator, DiscountType

if TYPE_CHECKING:
    from authentication.models import User

STATUS_TRANSITIONS = {
    OrderStatus.PROCESSING: "start_processing",
    OrderStatus.READY: "mark_ready",
    OrderStatus.DELIVERED: "mark_delivered",
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.DOWNPAYMENT, PaymentStatus.PAID},
    PaymentStatus.DOWNPAYMENT: {PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
}

NOTIFY_STATUSES = (OrderStatus.READY, OrderStatus.DELIVERED)
CORRECTIVE_OVERRIDE = "Corrective override"


def can_manage_order(user: User | None, order: Order) -> bool:
    """Organization managers, platform operators, or the customer of a platform order."""
    if user is None or not user.is_active:
        return False
    if is_platform_operator(user):
        return True
    if order.organization_id is None:
        return order.customer_id == user.pk
    return is_organization_manager(user, order.organization)


def actor_display_name(user: User | None) -> str:
    if user is None:
        return "System"
    return user.get_full_name() or user.email


class OrderStateMachine(BaseService):
    """
    Legal order transitions and their side effects.

    Every change appends an OrderStatusEvent. Callers pass an ``actor``;
    ``None`` means the system (webhooks, scheduled jobs) and skips
    permission checks.
    """

    @classmethod
    def update_order(
        cls,
        order: Order,
        actor: User,
        status: str | None = None,
        payment_status: str | None = None,
        cancellation_reason: str | None = None,
        note: str | None = None,
        expected_version: int | None = None,
    ) -> Order:
        """
        Change an order's status and/or payment status.

        Status must follow PENDING → PROCESSING → READY → DELIVERED; CANCELLED
        is delegated to cancel_order(). Finalized orders can only be changed
        by a system admin, recorded as a corrective override.

        Raises:
            PermissionDeniedError, InvalidTransition, InvalidPaymentTransition,
            FinalizedOrder, StaleOrder, ValidationError
        """
        if not can_manage_order(actor, order):
            raise PermissionDeniedError("You don't have permission to update this order")
        if status is None and payment_status is None:
            raise ValidationError("Nothing to update", error_code="NO_CHANGES")
        if status is not None and status not in OrderStatus.values:
            raise ValidationError(f"Unknown order status: {status}", error_code="INVALID_STATUS")
        if payment_status is not None and payment_status not in PaymentStatus.values:
            raise ValidationError(
                f"Unknown payment status: {payment_status}", error_code="INVALID_PAYMENT_STATUS"
            )

        with cls.atomic():
            if expected_version is not None and not order.check_version(expected_version):
                raise StaleOrder(
                    "Order was modified by someone else. Reload and try again.",
                    details={"order_id": str(order.pk)},
                )

            previous_status = order.status
            reasons: list[str] = []

            # Step 1: Status
            if status is not None and status != order.status:
                if order.is_finalized:
                    if not is_system_admin(actor):
                        raise FinalizedOrder(
                            f"Order {order.order_number} is {order.status.lower()} and can no longer change",
                            details={"order_id": str(order.pk), "status": order.status},
                        )
                    order.override_status(status)
                    if status == OrderStatus.CANCELLED:
                        order.cancellation_reason = cancellation_reason or CancellationReason.OTHERS
                    reasons.append(CORRECTIVE_OVERRIDE)
                elif status == OrderStatus.CANCELLED:
                    cls.cancel_order(
                        order,
                        actor,
                        cancellation_reason or CancellationReason.OTHERS,
                        note=note,
                        initiator=CancellationInitiator.SELLER,
                    )
                else:
                    method = getattr(order, STATUS_TRANSITIONS.get(status, ""), None)
                    if method is None or not can_proceed(method):
                        raise InvalidTransition(
                            f"Cannot change status from {order.status} to {status}",
                            details={"from": order.status, "to": status},
                        )
                    method()
                    reasons.append(f"Status changed to {status}")

            # Step 2: Payment status
            if payment_status is not None and payment_status != order.payment_status:
                cls._apply_payment_status(order, payment_status)
                reasons.append(f"Payment status changed to {payment_status}")

            if not reasons:
                return order

            order.save()
            cls._record_event(order, actor, "; ".join(reasons), note)
            log_action(
                "order.updated",
                f"Order {order.order_number} updated: {'; '.join(reasons)}",
                actor=actor,
                organization=order.organization,
                severity=(
                    AuditLog.Severity.HIGH
                    if CORRECTIVE_OVERRIDE in reasons
                    else AuditLog.Severity.LOW
                ),
                metadata={
                    "order_id": order.id,
                    "order_number": order.order_number,
                    "previous_status": previous_status,
                    "status": order.status,
                    "payment_status": order.payment_status,
                },
            )

            if order.status != previous_status and order.status in NOTIFY_STATUSES:
                cls._queue_status_email(order)

        cls.get_logger().info(
            "Order updated",
            extra={
                "order_id": str(order.id),
                "status": order.status,
                "payment_status": order.payment_status,
            },
        )
        return order

    @classmethod
    def cancel_order(
        cls,
        order: Order,
        actor: User | None,
        reason: str,
        note: str | None = None,
        initiator: str = CancellationInitiator.SELLER,
    ) -> Order:
        """
        Cancel an order.

        Restores STOCK inventory, issues a SELLER refund voucher for paid
        orders cancelled by the seller, and books a CANCELLATION payout
        adjustment when the order was already invoiced. Cancelling an
        already-cancelled order is a no-op.

        Args:
            actor: Acting user, or None for system cancellations
            reason: CancellationReason value
            initiator: CancellationInitiator; CUSTOMER never issues a voucher here

        Raises:
            FinalizedOrder: If the order was delivered
        """
        if actor is not None and not cls._can_cancel(actor, order, initiator):
            raise PermissionDeniedError("You don't have permission to cancel this order")
        if reason not in CancellationReason.values:
            raise ValidationError(
                f"Unknown cancellation reason: {reason}", error_code="INVALID_REASON"
            )
        if order.status == OrderStatus.CANCELLED:
            return order
        if order.status == OrderStatus.DELIVERED:
            raise FinalizedOrder(
                "Cannot cancel a delivered order",
                details={"order_id": str(order.pk)},
            )

        was_paid = order.payment_status == PaymentStatus.PAID

        with cls.atomic():
            # Step 1: Transition
            order.cancel(reason=reason)
            order.save()

            # Step 2: Inventory
            restored = cls._restore_inventory(order)

            # Step 3: History
            cls._record_event(order, actor, f"Order cancelled ({reason})", note)

            # Step 4: Seller refund voucher
            voucher = None
            if was_paid and initiator == CancellationInitiator.SELLER:
                voucher = VoucherEngine.issue_refund_voucher(
                    order=order,
                    amount=order.total_amount,
                    assigned_to=order.customer,
                    created_by=actor,
                    cancellation_initiator=CancellationInitiator.SELLER,
                )

            # Step 5: Already settled with the seller
            if was_paid and order.payout_invoice_id and order.organization_id:
                PayoutAdjustment.objects.create(
                    organization=order.organization,
                    order=order,
                    original_invoice=order.payout_invoice,
                    type=AdjustmentType.CANCELLATION,
                    amount=-order.seller_credit_amount,
                    status=AdjustmentStatus.PENDING,
                    reason=(
                        f"Order {order.order_number} cancelled after "
                        f"Invoice #{order.payout_invoice.invoice_number}"
                    ),
                )

            # Step 6: Audit
            log_action(
                "order.cancelled",
                f"Order {order.order_number} cancelled ({reason})",
                actor=actor,
                organization=order.organization,
                metadata={
                    "order_id": order.id,
                    "order_number": order.order_number,
                    "reason": reason,
                    "initiator": initiator,
                    "restored_items": restored,
                    "refund_voucher_code": voucher.code if voucher else None,
                },
            )

        cls.get_logger().info(
            "Order cancelled",
            extra={
                "order_id": str(order.id),
                "reason": reason,
                "initiator": initiator,
                "restored_items": restored,
            },
        )
        return order

    @classmethod
    def record_payment(cls, order: Order, reason: str) -> Order:
        """
        System path used by the webhook processor.

        Moves payment status to PAID (stamping paid_at once) and a PENDING
        order to PROCESSING in a single save.

        Raises:
            InvalidPaymentTransition: If the order was refunded
        """
        changed = False
        if order.payment_status != PaymentStatus.PAID:
            cls._apply_payment_status(order, PaymentStatus.PAID)
            changed = True
        if can_proceed(order.start_processing):
            order.start_processing()
            changed = True
        if changed:
            order.save()
            cls._record_event(order, None, reason, None)
        return order

    # ==========================================================================
    # Internals
    # ==========================================================================

    @staticmethod
    def _can_cancel(actor: User, order: Order, initiator: str) -> bool:
        if can_manage_order(actor, order):
            return True
        # Customers may withdraw their own unpaid orders
        return (
            initiator == CancellationInitiator.CUSTOMER
            and order.customer_id == actor.pk
            and order.payment_status != PaymentStatus.PAID
        )

    @staticmethod
    def _apply_payment_status(order: Order, payment_status: str) -> None:
        allowed = PAYMENT_TRANSITIONS.get(order.payment_status, set())
        if payment_status not in allowed:
            raise InvalidPaymentTransition(
                f"Cannot change payment status from {order.payment_status} to {payment_status}",
                details={"from": order.payment_status, "to": payment_status},
            )
        order.payment_status = payment_status
        if payment_status == PaymentStatus.PAID and order.paid_at is None:
            order.paid_at = timezone.now()

    @staticmethod
    def _restore_inventory(order: Order) -> int:
        """Add quantities back for STOCK products; PREORDER items are unlimited."""
        restored = 0
        for item in order.items.select_related("product"):
            if not item.product.tracks_inventory:
                continue
            Product.all_objects.filter(pk=item.product_id).update(
                inventory=F("inventory") + item.quantity
            )
            if item.variant_id:
                ProductVariant.objects.filter(pk=item.variant_id).update(
                    inventory=F("inventory") + item.quantity
                )
            restored += item.quantity
        return restored

    @staticmethod
    def _record_event(order: Order, actor: User | None, reason: str, note: str | None) -> None:
        OrderStatusEvent.objects.create(
            order=order,
            status=order.status,
            payment_status=order.payment_status,
            actor=actor,
            actor_name=actor_display_name(actor),
            reason=reason[:255],
            note=note or "",
        )

    @staticmethod
    def _queue_status_email(order: Order) -> None:
        from orders.tasks import send_order_status_email

        order_id, status = str(order.pk), order.status
        transaction.on_commit(lambda: send_order_status_email.delay(order_id, status))


@dataclass
class CheckoutResult:
    """Orders created by one checkout and the id the gateway should use."""

    orders: list[Order]
    checkout_session: CheckoutSession | None = None
    voucher_discount: Decimal = Decimal("0.00")

    @property
    def external_id(self) -> str:
        if self.checkout_session is not None:
            return self.checkout_session.checkout_id
        return self.orders[0].order_number

    @property
    def total_amount(self) -> Decimal:
        return sum((o.total_amount for o in self.orders), Decimal("0.00"))


class CheckoutService(BaseService):
    """Creates orders from cart lines, one per organization."""

    @classmethod
    def create_order_from_cart(
        cls,
        user: User,
        item_ids: list | None = None,
        voucher_code: str | None = None,
        notes: str = "",
    ) -> CheckoutResult:
        """
        Check out the selected cart lines (all lines when item_ids is None).

        A voucher applies to a single order: the one for the voucher's
        organization, or for platform-wide vouchers the largest order.

        Raises:
            ValidationError: Empty selection, unavailable product, insufficient
                stock or invalid voucher (error_code from the voucher taxonomy)
        """
        queryset = CartItem.objects.filter(cart__user=user).select_related(
            "product", "product__organization", "variant"
        )
        if item_ids is not None:
            queryset = queryset.filter(pk__in=item_ids)
        cart_items = list(queryset)
        if not cart_items:
            raise ValidationError("No cart items selected", error_code="EMPTY_CART")

        # Step 1: Availability
        for item in cart_items:
            product = item.product
            if not product.is_active or product.is_deleted:
                raise ValidationError(
                    f"{product.title} is no longer available", error_code="PRODUCT_UNAVAILABLE"
                )
            if product.tracks_inventory:
                on_hand = item.variant.inventory if item.variant_id else product.inventory
                if on_hand < item.quantity:
                    raise ValidationError(
                        f"Only {max(on_hand, 0)} of {product.title} left in stock",
                        error_code="OUT_OF_STOCK",
                    )

        # Step 2: Group by organization
        groups: dict = defaultdict(list)
        for item in cart_items:
            groups[item.product.organization_id].append(item)
        subtotals = {
            org_id: round2(sum(i.unit_price * i.quantity for i in items))
            for org_id, items in groups.items()
        }

        # Step 3: Voucher
        voucher = None
        voucher_org_id = None
        discount = Decimal("0.00")
        if voucher_code:
            voucher, voucher_org_id, discount = cls._resolve_voucher(
                voucher_code, user, groups, subtotals
            )

        now = timezone.now()
        expires_at = now + timedelta(minutes=settings.CHECKOUT_SESSION_TTL_MINUTES)

        with cls.atomic():
            orders = []
            for org_id, items in groups.items():
                subtotal = subtotals[org_id]
                uses_voucher = voucher is not None and org_id == voucher_org_id
                applied = discount if uses_voucher else Decimal("0.00")
                order = Order.objects.create(
                    organization=items[0].product.organization,
                    customer=user,
                    total_amount=round2(subtotal - applied),
                    discount_amount=applied,
                    voucher_discount=applied,
                    voucher_code=voucher.code if uses_voucher else "",
                    voucher_snapshot=voucher.snapshot() if uses_voucher else {},
                    item_count=sum(i.quantity for i in items),
                    customer_info=user.snapshot(),
                    notes=notes,
                    order_date=now,
                    checkout_expires_at=expires_at,
                )
                for item in items:
                    cls._create_line(order, item)
                OrderStateMachine._record_event(order, user, "Order placed", None)

                if uses_voucher:
                    VoucherEngine.redeem(voucher, order, user, applied)
                orders.append(order)

            session = None
            if len(orders) > 1:
                session = CheckoutSession.objects.create(
                    checkout_id=CheckoutSession.generate_checkout_id(),
                    customer=user,
                    total_amount=sum((o.total_amount for o in orders), Decimal("0.00")),
                    expires_at=expires_at,
                )
                session.orders.set(orders)

            CartItem.objects.filter(pk__in=[i.pk for i in cart_items]).delete()

            log_action(
                "order.created",
                f"Checkout created {len(orders)} order(s)",
                actor=user,
                log_type=AuditLog.LogType.USER_ACTION,
                metadata={
                    "order_ids": [o.id for o in orders],
                    "order_numbers": [o.order_number for o in orders],
                    "checkout_id": session.checkout_id if session else None,
                    "voucher_code": voucher.code if voucher else None,
                },
            )

        cls.get_logger().info(
            "Checkout completed",
            extra={
                "user_id": str(user.pk),
                "order_count": len(orders),
                "checkout_id": session.checkout_id if session else None,
            },
        )
        return CheckoutResult(orders=orders, checkout_session=session, voucher_discount=discount)

    @classmethod
    def _resolve_voucher(cls, code: str, user: User, groups: dict, subtotals: dict):
        from vouchers.models import Voucher, normalize_code

        target = Voucher.objects.filter(code=normalize_code(code)).only("organization").first()
        if target is not None and target.organization_id in subtotals:
            org_id = target.organization_id
        else:
            org_id = max(subtotals, key=lambda key: subtotals[key])
        organization = groups[org_id][0].product.organization

        validation = VoucherEngine.validate_voucher(
            code, subtotals[org_id], user=user, organization=organization
        )
        if not validation.valid:
            raise ValidationError(validation.error, error_code=validation.error_code)

        voucher = validation.voucher
        discount = validation.discount_amount
        if voucher.discount_type == DiscountType.FREE_ITEM:
            free_lines = [i for i in groups[org_id] if i.product_id == voucher.free_item_product_id]
            discount = free_lines[0].unit_price if free_lines else Decimal("0.00")
        return voucher, org_id, round2(min(discount, subtotals[org_id]))

    @staticmethod
    def _create_line(order: Order, item: CartItem) -> OrderItem:
        product = item.product
        variant = item.variant
        if product.tracks_inventory:
            updated = Product.all_objects.filter(
                pk=product.pk, inventory__gte=item.quantity
            ).update(inventory=F("inventory") - item.quantity)
            if variant is not None and updated:
                updated = ProductVariant.objects.filter(
                    pk=variant.pk, inventory__gte=item.quantity
                ).update(inventory=F("inventory") - item.quantity)
            if not updated:
                raise ValidationError(
                    f"{product.title} sold out during checkout", error_code="OUT_OF_STOCK"
                )

        label = ""
        if variant is not None:
            label = f"{variant.name} ({variant.size})" if variant.size else variant.name
        return OrderItem.objects.create(
            order=order,
            product=product,
            variant=variant,
            product_title=product.title,
            variant_label=label,
            quantity=item.quantity,
            price=item.unit_price,
        )
