"""
Voucher engine.

VoucherEngine is the leaf of the settlement core:

- validate_voucher(): pure read + compute, returns a VoucherValidation
- compute_discount(): discount for a voucher and order amount
- redeem(): commits a redemption at order-creation time
- issue_refund_voucher(): REFUND voucher issuance primitive
- create_voucher(): promotional voucher creation by managers/admins

VoucherRefundRequestManager exchanges unused SELLER refund vouchers for
cash once the waiting period has passed; system admins review.

Usage:
    from vouchers.services import VoucherEngine

    validation = VoucherEngine.validate_voucher(
        "welcome10", order_amount=Decimal("1000"), user=request.user, organization=org
    )
    if not validation.valid:
        return Response(validation.to_dict(), status=400)
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from audit.models import AuditLog
from audit.services import log_action
from core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from core.helpers import generate_code, round2
from core.services import BaseService
from organizations.permissions import can_manage_organization, is_system_admin
from vouchers.exceptions import (
    DuplicateRefundRequest,
    DuplicateVoucherCode,
    InvalidAmount,
    NotMonetarilyEligible,
    NotRefundVoucher,
    NotVoucherOwner,
    RefundRequestReviewed,
    VoucherAlreadyUsed,
    VoucherRedemptionError,
)
from vouchers.models import Voucher, VoucherRefundRequest, VoucherUsage, normalize_code
from vouchers.states import (
    CancellationInitiator,
    DiscountType,
    VoucherErrorCode,
    VoucherRefundRequestStatus,
)

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any

    from authentication.models import User
    from orders.models import Order
    from organizations.models import Organization

MANUAL_CODE_PATTERN = re.compile(r"^[A-Z0-9_-]{3,30}$")
CODE_GENERATION_ATTEMPTS = 10
ZERO = Decimal("0.00")
CUSTOMER_MESSAGE_MAX_LENGTH = 2000
REVIEW_MESSAGE_MIN_LENGTH = 10
REVIEW_MESSAGE_MAX_LENGTH = 1000
BANK_DETAIL_FIELDS = ("account_name", "account_number", "bank_name")


@dataclass
class VoucherValidation:
    """
    Outcome of validate_voucher().

    Attributes:
        valid: Whether the voucher may be applied
        discount_amount: Computed discount (0 when invalid)
        voucher: The matched voucher, if one exists
        error: Customer-facing message when invalid
        error_code: VoucherErrorCode when invalid
    """

    valid: bool
    discount_amount: Decimal = ZERO
    voucher: Voucher | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def accept(cls, voucher: Voucher, discount_amount: Decimal) -> VoucherValidation:
        return cls(valid=True, discount_amount=discount_amount, voucher=voucher)

    @classmethod
    def reject(
        cls, error_code: str, error: str, voucher: Voucher | None = None
    ) -> VoucherValidation:
        return cls(valid=False, voucher=voucher, error=error, error_code=error_code)

    def to_dict(self) -> dict[str, Any]:
        if self.valid:
            return {
                "valid": True,
                "discount_amount": str(self.discount_amount),
                "voucher": {
                    "id": str(self.voucher.id),
                    "code": self.voucher.code,
                    "name": self.voucher.name,
                    "discount_type": self.voucher.discount_type,
                },
            }
        return {"valid": False, "error": self.error, "error_code": self.error_code}


class VoucherEngine(BaseService):
    """Discount computation, usage-limit enforcement and refund voucher issuance."""

    # ==========================================================================
    # Validation
    # ==========================================================================

    @classmethod
    def validate_voucher(
        cls,
        code: str,
        order_amount: Decimal,
        user: User | None = None,
        organization: Organization | None = None,
        now: datetime | None = None,
    ) -> VoucherValidation:
        """
        Validate a voucher code against an order without mutating anything.

        Checks run in a fixed order and the first failure wins:
        existence, active flag, validity window, organization scope, total
        usage, per-user usage, minimum order, REFUND ownership.
        """
        now = now or timezone.now()
        order_amount = round2(order_amount)

        voucher = (
            Voucher.objects.select_related("organization")
            .filter(code=normalize_code(code))
            .first()
        )
        if voucher is None:
            return VoucherValidation.reject(
                VoucherErrorCode.NOT_FOUND, "Voucher code not found"
            )

        if not voucher.is_active:
            return VoucherValidation.reject(
                VoucherErrorCode.INACTIVE, "This voucher is no longer active", voucher
            )

        if voucher.valid_from and now < voucher.valid_from:
            return VoucherValidation.reject(
                VoucherErrorCode.NOT_STARTED,
                f"This voucher is not valid yet. It starts on {voucher.valid_from:%Y-%m-%d}",
                voucher,
            )
        if voucher.valid_until and now > voucher.valid_until:
            return VoucherValidation.reject(
                VoucherErrorCode.EXPIRED, "This voucher has expired", voucher
            )

        if (
            not voucher.is_refund
            and voucher.organization_id is not None
            and (organization is None or organization.pk != voucher.organization_id)
        ):
            return VoucherValidation.reject(
                VoucherErrorCode.ORGANIZATION_MISMATCH,
                f"This voucher is only valid for {voucher.organization.name}",
                voucher,
            )

        if voucher.usage_limit is not None and voucher.used_count >= voucher.usage_limit:
            return VoucherValidation.reject(
                VoucherErrorCode.USAGE_LIMIT_REACHED,
                "This voucher has reached its usage limit",
                voucher,
            )

        if user is not None and voucher.usage_limit_per_user is not None:
            user_uses = VoucherUsage.objects.filter(voucher=voucher, user=user).count()
            if user_uses >= voucher.usage_limit_per_user:
                return VoucherValidation.reject(
                    VoucherErrorCode.USER_USAGE_LIMIT_REACHED,
                    "You've already used this voucher",
                    voucher,
                )

        if voucher.min_order_amount is not None and order_amount < voucher.min_order_amount:
            return VoucherValidation.reject(
                VoucherErrorCode.MIN_ORDER_NOT_MET,
                f"Minimum order of ₱{voucher.min_order_amount:,.2f} required",
                voucher,
            )

        # Mismatch looks like a usage-limit rejection so codes are not confirmed
        if voucher.is_refund and (user is None or voucher.assigned_to_id != user.pk):
            return VoucherValidation.reject(
                VoucherErrorCode.USER_USAGE_LIMIT_REACHED,
                "This voucher is not assigned to you",
                voucher,
            )

        return VoucherValidation.accept(voucher, cls.compute_discount(voucher, order_amount))

    @staticmethod
    def compute_discount(voucher: Voucher, order_amount: Decimal) -> Decimal:
        """
        Discount for ``voucher`` on ``order_amount``, rounded to two places.

        FREE_ITEM and FREE_SHIPPING are priced by the order pricing logic and
        yield 0 here.
        """
        order_amount = Decimal(order_amount)
        if voucher.discount_type == DiscountType.PERCENTAGE:
            discount = order_amount * voucher.discount_value / Decimal("100")
            if voucher.max_discount_amount is not None:
                discount = min(discount, voucher.max_discount_amount)
            return round2(discount)
        if voucher.discount_type == DiscountType.FIXED_AMOUNT:
            return round2(max(ZERO, min(voucher.discount_value, order_amount)))
        if voucher.discount_type == DiscountType.REFUND:
            return round2(voucher.discount_value)
        return ZERO

    # ==========================================================================
    # Redemption
    # ==========================================================================

    @classmethod
    def redeem(
        cls,
        voucher: Voucher,
        order: Order,
        user: User,
        discount_amount: Decimal,
    ) -> VoucherUsage:
        """
        Commit one redemption.

        The ``used_count`` increment is a conditional UPDATE guarded by
        ``usage_limit``, so two concurrent redemptions of a last remaining use
        cannot both succeed. The per-user limit is backed by a partial unique
        constraint for single-use vouchers.

        Raises:
            VoucherRedemptionError: If a limit was reached in the meantime
        """
        try:
            with transaction.atomic():
                updated = (
                    Voucher.objects.filter(pk=voucher.pk, is_active=True)
                    .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit")))
                    .update(used_count=F("used_count") + 1, updated_at=timezone.now())
                )
                if not updated:
                    raise VoucherRedemptionError(
                        "This voucher has reached its usage limit",
                        error_code=VoucherErrorCode.USAGE_LIMIT_REACHED,
                        details={"voucher_id": str(voucher.pk)},
                    )

                per_user = voucher.usage_limit_per_user
                if per_user is not None and per_user > 1:
                    user_uses = VoucherUsage.objects.filter(voucher=voucher, user=user).count()
                    if user_uses >= per_user:
                        raise VoucherRedemptionError(
                            "You've already used this voucher",
                            error_code=VoucherErrorCode.USER_USAGE_LIMIT_REACHED,
                        )

                usage = VoucherUsage.objects.create(
                    voucher=voucher,
                    order=order,
                    user=user,
                    discount_amount=round2(discount_amount),
                    voucher_snapshot=voucher.snapshot(),
                    single_use=per_user == 1,
                )
        except IntegrityError as exc:
            raise VoucherRedemptionError(
                "You've already used this voucher",
                error_code=VoucherErrorCode.USER_USAGE_LIMIT_REACHED,
                details={"voucher_id": str(voucher.pk)},
            ) from exc

        voucher.refresh_from_db(fields=["used_count"])
        cls.get_logger().info(
            "Voucher redeemed",
            extra={
                "voucher_id": str(voucher.pk),
                "order_id": str(order.pk),
                "discount_amount": str(usage.discount_amount),
            },
        )
        return usage

    # ==========================================================================
    # Issuance
    # ==========================================================================

    @classmethod
    def issue_refund_voucher(
        cls,
        order: Order,
        amount: Decimal,
        assigned_to: User,
        created_by: User | None,
        cancellation_initiator: str,
        refund_request=None,
    ) -> Voucher:
        """
        Issue a single-use, platform-wide REFUND voucher.

        SELLER-initiated vouchers become monetarily eligible after the
        configured delay; CUSTOMER-initiated ones never do through this path.

        Raises:
            InvalidAmount: If amount is not positive
        """
        amount = round2(amount)
        if amount <= 0:
            raise InvalidAmount(
                "Refund voucher amount must be greater than zero",
                details={"order_id": str(order.pk), "amount": str(amount)},
            )
        if cancellation_initiator not in CancellationInitiator.values:
            raise ValidationError(
                f"Unknown cancellation initiator: {cancellation_initiator}",
                error_code="INVALID_INITIATOR",
            )

        now = timezone.now()
        eligible_at = None
        if cancellation_initiator == CancellationInitiator.SELLER:
            eligible_at = now + timedelta(days=settings.SELLER_REFUND_MONETARY_DELAY_DAYS)

        voucher = Voucher.objects.create(
            code=cls._unique_code("REFUND"),
            name=f"Refund Voucher - Order {order.order_number}",
            description="Refund voucher issued for cancelled order",
            discount_type=DiscountType.REFUND,
            discount_value=amount,
            usage_limit=1,
            usage_limit_per_user=1,
            valid_from=now,
            is_active=True,
            assigned_to=assigned_to,
            cancellation_initiator=cancellation_initiator,
            monetary_refund_eligible_at=eligible_at,
            source_order=order,
            source_refund_request=refund_request,
            created_by=created_by,
        )

        log_action(
            "voucher.refund_issued",
            f"Refund voucher {voucher.code} issued for order {order.order_number}",
            actor=created_by,
            organization=order.organization,
            metadata={
                "voucher_id": voucher.id,
                "order_id": order.id,
                "order_number": order.order_number,
                "amount": amount,
                "cancellation_initiator": cancellation_initiator,
            },
        )
        cls.get_logger().info(
            "Refund voucher issued",
            extra={
                "voucher_id": str(voucher.id),
                "order_id": str(order.id),
                "cancellation_initiator": cancellation_initiator,
            },
        )
        return voucher

    @classmethod
    def create_voucher(
        cls,
        actor: User,
        *,
        name: str,
        discount_type: str,
        discount_value: Decimal,
        organization: Organization | None = None,
        code: str | None = None,
        code_prefix: str | None = None,
        description: str = "",
        min_order_amount: Decimal | None = None,
        max_discount_amount: Decimal | None = None,
        usage_limit: int | None = None,
        usage_limit_per_user: int | None = 1,
        valid_from: datetime | None = None,
        valid_until: datetime | None = None,
        is_active: bool = True,
        free_item_product=None,
    ) -> Voucher:
        """
        Create a promotional voucher.

        Organization vouchers require an organization manager; platform-wide
        vouchers require a system admin. REFUND vouchers are only issued
        through issue_refund_voucher().

        Raises:
            PermissionDeniedError, ValidationError, DuplicateVoucherCode
        """
        if organization is not None:
            if not can_manage_organization(actor, organization):
                raise PermissionDeniedError(
                    "You don't have permission to create vouchers for this organization"
                )
        elif not is_system_admin(actor):
            raise PermissionDeniedError("Only system admins can create global vouchers")

        if discount_type == DiscountType.REFUND:
            raise ValidationError(
                "Refund vouchers are issued automatically", error_code="INVALID_DISCOUNT_TYPE"
            )
        if discount_type not in DiscountType.values:
            raise ValidationError(
                f"Unknown discount type: {discount_type}", error_code="INVALID_DISCOUNT_TYPE"
            )

        discount_value = Decimal(discount_value)
        if discount_type == DiscountType.PERCENTAGE and not (0 < discount_value <= 100):
            raise ValidationError(
                "Percentage discount must be between 0 and 100", error_code="INVALID_AMOUNT"
            )
        if discount_type == DiscountType.FIXED_AMOUNT and discount_value <= 0:
            raise ValidationError(
                "Fixed discount amount must be greater than 0", error_code="INVALID_AMOUNT"
            )
        if discount_type == DiscountType.FREE_ITEM and free_item_product is None:
            raise ValidationError(
                "Free item vouchers require a product", error_code="PRODUCT_REQUIRED"
            )

        valid_from = valid_from or timezone.now()
        if valid_until is not None and valid_until <= valid_from:
            raise ValidationError(
                "Valid until date must be after valid from date", error_code="INVALID_WINDOW"
            )

        if code:
            final_code = normalize_code(code)
            if not MANUAL_CODE_PATTERN.match(final_code):
                raise ValidationError(
                    "Voucher code must be 3-30 characters of letters, numbers, '-' or '_'",
                    error_code="INVALID_CODE",
                )
            if Voucher.all_objects.filter(code=final_code).exists():
                raise DuplicateVoucherCode(f"Voucher code {final_code} already exists")
        else:
            prefix = re.sub(r"[^A-Z0-9]", "", normalize_code(code_prefix))[:10] or "VOUCHER"
            final_code = cls._unique_code(prefix)

        with cls.atomic():
            voucher = Voucher.objects.create(
                code=final_code,
                name=name,
                description=description,
                organization=organization,
                discount_type=discount_type,
                discount_value=round2(discount_value),
                min_order_amount=min_order_amount,
                max_discount_amount=max_discount_amount,
                free_item_product=free_item_product,
                usage_limit=usage_limit,
                usage_limit_per_user=usage_limit_per_user,
                valid_from=valid_from,
                valid_until=valid_until,
                is_active=is_active,
                created_by=actor,
            )
            log_action(
                "voucher.created",
                f"Voucher {voucher.code} created",
                actor=actor,
                organization=organization,
                metadata={
                    "voucher_id": voucher.id,
                    "code": voucher.code,
                    "discount_type": discount_type,
                    "discount_value": voucher.discount_value,
                },
            )

        cls.get_logger().info(
            "Voucher created",
            extra={"voucher_id": str(voucher.id), "code": voucher.code},
        )
        return voucher

    @classmethod
    def _unique_code(cls, prefix: str) -> str:
        for _ in range(CODE_GENERATION_ATTEMPTS):
            candidate = generate_code(6, prefix)
            if not Voucher.all_objects.filter(code=candidate).exists():
                return candidate
        raise DuplicateVoucherCode(
            "Could not generate a unique voucher code", details={"prefix": prefix}
        )


class VoucherRefundRequestManager(BaseService):
    """
    Cash refunds for SELLER refund vouchers.

    The assigned customer files a request once the waiting period after
    issuance has passed and the voucher is still unused. System admins
    review it; approval deactivates the voucher so the bank transfer
    replaces it, rejection lets the customer ask again later.
    """

    @classmethod
    def create_refund_request(
        cls,
        voucher: Voucher,
        actor: User,
        customer_message: str | None = None,
        bank_details: dict | None = None,
        now: datetime | None = None,
    ) -> VoucherRefundRequest:
        """
        File a cash refund request for the full voucher value.

        Raises:
            NotFoundError, NotVoucherOwner, NotRefundVoucher,
            NotMonetarilyEligible, VoucherAlreadyUsed,
            DuplicateRefundRequest, ValidationError
        """
        now = now or timezone.now()
        details = {"voucher_id": str(voucher.pk)}
        if voucher.is_deleted:
            raise NotFoundError("Voucher not found", details=details)
        if voucher.assigned_to_id != actor.pk:
            raise NotVoucherOwner(
                "You can only request refunds for your own vouchers", details=details
            )
        if not voucher.is_refund:
            raise NotRefundVoucher(
                "Only refund vouchers are eligible for monetary refund requests",
                details=details,
            )
        cls._check_eligibility(voucher, now, details)

        customer_message = (customer_message or "").strip()
        if len(customer_message) > CUSTOMER_MESSAGE_MAX_LENGTH:
            raise ValidationError(
                f"Message must be at most {CUSTOMER_MESSAGE_MAX_LENGTH} characters",
                error_code="MESSAGE_TOO_LONG",
            )
        bank_details = cls._clean_bank_details(bank_details)

        if VoucherRefundRequest.objects.filter(
            voucher=voucher, status=VoucherRefundRequestStatus.PENDING
        ).exists():
            raise DuplicateRefundRequest(
                "A pending monetary refund request already exists for this voucher",
                details=details,
            )

        try:
            with cls.atomic():
                refund_request = VoucherRefundRequest.objects.create(
                    voucher=voucher,
                    requested_by=actor,
                    amount=voucher.discount_value,
                    customer_message=customer_message,
                    bank_details=bank_details,
                    voucher_info=cls._voucher_info(voucher),
                    customer_info=actor.snapshot(),
                    source_order_info=cls._source_order_info(voucher),
                )
                voucher.monetary_refund_requested_at = now
                voucher.save(update_fields=["monetary_refund_requested_at", "updated_at"])

                log_action(
                    "voucher.refund_requested",
                    f"Monetary refund requested for voucher {voucher.code}",
                    actor=actor,
                    severity=AuditLog.Severity.MEDIUM,
                    metadata={
                        "voucher_refund_request_id": refund_request.id,
                        "voucher_id": voucher.id,
                        "amount": refund_request.amount,
                    },
                )
        except IntegrityError as exc:
            raise DuplicateRefundRequest(
                "A pending monetary refund request already exists for this voucher",
                details=details,
            ) from exc

        cls.get_logger().info(
            "Voucher refund request created",
            extra={"voucher_refund_request_id": str(refund_request.id), "voucher_id": str(voucher.id)},
        )
        return refund_request

    @classmethod
    def approve_refund_request(
        cls,
        refund_request: VoucherRefundRequest,
        actor: User,
        admin_message: str,
    ) -> VoucherRefundRequest:
        """
        Approve a pending request and deactivate the voucher.

        The voucher row is locked so a concurrent redemption either lands
        first (and approval fails) or finds the voucher inactive.

        Raises:
            PermissionDeniedError, RefundRequestReviewed, ValidationError,
            VoucherAlreadyUsed
        """
        admin_message = cls._validate_review(refund_request, actor, admin_message)

        with cls.atomic():
            voucher = Voucher.all_objects.select_for_update().get(pk=refund_request.voucher_id)
            if voucher.used_count > 0:
                raise VoucherAlreadyUsed(
                    "Cannot approve monetary refund for a voucher that has already been used",
                    details={"voucher_id": str(voucher.pk)},
                )

            refund_request.approve()
            refund_request.admin_message = admin_message
            refund_request.reviewed_by = actor
            refund_request.reviewed_at = timezone.now()
            refund_request.save()

            voucher.is_active = False
            voucher.save(update_fields=["is_active", "updated_at"])
            refund_request.voucher = voucher

            log_action(
                "voucher.refund_approved",
                f"Monetary refund approved for voucher {voucher.code}",
                actor=actor,
                severity=AuditLog.Severity.HIGH,
                metadata={
                    "voucher_refund_request_id": refund_request.id,
                    "voucher_id": voucher.id,
                    "amount": refund_request.amount,
                },
            )

        cls.get_logger().info(
            "Voucher refund request approved",
            extra={"voucher_refund_request_id": str(refund_request.id), "voucher_id": str(voucher.id)},
        )
        return refund_request

    @classmethod
    def reject_refund_request(
        cls,
        refund_request: VoucherRefundRequest,
        actor: User,
        admin_message: str,
    ) -> VoucherRefundRequest:
        """
        Reject a pending request. The voucher stays usable and may be
        requested again.

        Raises:
            PermissionDeniedError, RefundRequestReviewed, ValidationError
        """
        admin_message = cls._validate_review(refund_request, actor, admin_message)
        voucher = refund_request.voucher

        with cls.atomic():
            refund_request.reject()
            refund_request.admin_message = admin_message
            refund_request.reviewed_by = actor
            refund_request.reviewed_at = timezone.now()
            refund_request.save()

            voucher.monetary_refund_requested_at = None
            voucher.save(update_fields=["monetary_refund_requested_at", "updated_at"])

            log_action(
                "voucher.refund_rejected",
                f"Monetary refund rejected for voucher {voucher.code}",
                actor=actor,
                severity=AuditLog.Severity.MEDIUM,
                metadata={
                    "voucher_refund_request_id": refund_request.id,
                    "voucher_id": voucher.id,
                },
            )

        cls.get_logger().info(
            "Voucher refund request rejected",
            extra={"voucher_refund_request_id": str(refund_request.id), "voucher_id": str(voucher.id)},
        )
        return refund_request

    # ==========================================================================
    # Internals
    # ==========================================================================

    @staticmethod
    def _check_eligibility(voucher: Voucher, now: datetime, details: dict) -> None:
        if voucher.cancellation_initiator != CancellationInitiator.SELLER:
            raise NotMonetarilyEligible(
                "Monetary refunds are only available for seller-initiated cancellations",
                details=details,
            )
        if voucher.used_count > 0:
            raise VoucherAlreadyUsed("This voucher has already been used", details=details)
        if not voucher.is_active:
            raise NotMonetarilyEligible("This voucher is no longer active", details=details)

        available_at = voucher.monetary_refund_available_at
        if now < available_at:
            days_remaining = math.ceil((available_at - now) / timedelta(days=1))
            raise NotMonetarilyEligible(
                f"Monetary refund will be available in {days_remaining} day(s)",
                details={
                    **details,
                    "available_at": available_at.isoformat(),
                    "days_remaining": days_remaining,
                },
            )

    @staticmethod
    def _clean_bank_details(bank_details: dict | None) -> dict:
        if not bank_details:
            return {}
        cleaned = {key: str(bank_details.get(key) or "").strip() for key in BANK_DETAIL_FIELDS}
        missing = [key for key, value in cleaned.items() if not value]
        if missing:
            raise ValidationError(
                "Bank details must include account name, account number and bank name",
                error_code="INVALID_BANK_DETAILS",
                details={"missing": missing},
            )
        return cleaned

    @staticmethod
    def _validate_review(
        refund_request: VoucherRefundRequest, actor: User, admin_message: str
    ) -> str:
        if not is_system_admin(actor):
            raise PermissionDeniedError(
                "Only system admins can review voucher refund requests"
            )
        if refund_request.status != VoucherRefundRequestStatus.PENDING:
            raise RefundRequestReviewed(
                f"Voucher refund request is already {refund_request.status.lower()}",
                error_code=f"ALREADY_{refund_request.status}",
                details={"voucher_refund_request_id": str(refund_request.pk)},
            )

        admin_message = (admin_message or "").strip()
        if not REVIEW_MESSAGE_MIN_LENGTH <= len(admin_message) <= REVIEW_MESSAGE_MAX_LENGTH:
            raise ValidationError(
                f"Message must be between {REVIEW_MESSAGE_MIN_LENGTH} and "
                f"{REVIEW_MESSAGE_MAX_LENGTH} characters",
                error_code="INVALID_ADMIN_MESSAGE",
            )
        return admin_message

    @staticmethod
    def _voucher_info(voucher: Voucher) -> dict:
        return {
            "code": voucher.code,
            "name": voucher.name,
            "discount_value": str(voucher.discount_value),
            "cancellation_initiator": voucher.cancellation_initiator,
            "created_at": voucher.created_at.isoformat(),
            "monetary_refund_eligible_at": (
                voucher.monetary_refund_eligible_at.isoformat()
                if voucher.monetary_refund_eligible_at
                else None
            ),
        }

    @staticmethod
    def _source_order_info(voucher: Voucher) -> dict:
        order = voucher.source_order
        if order is None:
            return {}
        return {
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "total_amount": str(order.total_amount),
        }
