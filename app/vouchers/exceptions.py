"""
Voucher exceptions.

Validation outcomes are returned as VoucherValidation results; these
exceptions cover mutations (issuance, creation, redemption, cash refund
requests).
"""

from core.exceptions import ConflictError, PermissionDeniedError, ValidationError


class InvalidAmount(ValidationError):
    """Raised when a refund voucher would be issued for a non-positive amount."""

    default_error_code: str = "INVALID_AMOUNT"


class VoucherRedemptionError(ConflictError):
    """
    Raised when committing a redemption loses a race or breaks a limit.

    ``error_code`` carries the VoucherErrorCode that applied.
    """

    default_error_code: str = "USAGE_LIMIT_REACHED"


class DuplicateVoucherCode(ConflictError):
    default_error_code: str = "VOUCHER_CODE_EXISTS"


# =============================================================================
# Cash refund requests
# =============================================================================


class NotVoucherOwner(PermissionDeniedError):
    """Raised when someone other than the assigned customer asks for cash."""

    default_error_code: str = "NOT_OWNER"


class NotRefundVoucher(ValidationError):
    default_error_code: str = "NOT_REFUND_VOUCHER"


class NotMonetarilyEligible(ConflictError):
    """
    Raised when a voucher cannot be exchanged for cash yet, or ever.

    ``details["available_at"]`` is set while the waiting period runs.
    """

    default_error_code: str = "NOT_ELIGIBLE"


class VoucherAlreadyUsed(ConflictError):
    default_error_code: str = "VOUCHER_USED"


class DuplicateRefundRequest(ConflictError):
    """Raised when the voucher already has a PENDING cash refund request."""

    default_error_code: str = "DUPLICATE_PENDING"


class RefundRequestReviewed(ConflictError):
    """``error_code`` is ALREADY_APPROVED or ALREADY_REJECTED."""

    default_error_code: str = "ALREADY_REVIEWED"
