"""
Order exceptions.

All order errors are state conflicts and map to HTTP 409.
"""

from core.exceptions import ConflictError


class InvalidTransition(ConflictError):
    """Raised when a status change skips a step or leaves the chain."""

    default_error_code: str = "INVALID_TRANSITION"


class InvalidPaymentTransition(ConflictError):
    """Raised when a payment-status change is not allowed (e.g. REFUNDED → PAID)."""

    default_error_code: str = "INVALID_PAYMENT_TRANSITION"


class FinalizedOrder(ConflictError):
    """Raised when mutating a DELIVERED or CANCELLED order without override rights."""

    default_error_code: str = "FINALIZED_ORDER"


class StaleOrder(ConflictError):
    """Raised when the order changed since the caller read it."""

    default_error_code: str = "STALE_ORDER"
