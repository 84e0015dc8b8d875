"""
Refund request exceptions.

NotOwner is an authorization failure (403); the rest are state
conflicts (409).
"""

from core.exceptions import ConflictError, PermissionDeniedError


class NotOwner(PermissionDeniedError):
    """Raised when someone other than the order's customer asks for a refund."""

    default_error_code: str = "NOT_OWNER"


class NotPaid(ConflictError):
    default_error_code: str = "NOT_PAID"


class AlreadyDelivered(ConflictError):
    default_error_code: str = "ALREADY_DELIVERED"


class AlreadyCancelled(ConflictError):
    default_error_code: str = "ALREADY_CANCELLED"


class WindowExpired(ConflictError):
    """Raised when the refund window after payment has closed."""

    default_error_code: str = "WINDOW_EXPIRED"


class DuplicatePending(ConflictError):
    """Raised when the order already has a PENDING refund request."""

    default_error_code: str = "DUPLICATE_PENDING"


class AlreadyApproved(ConflictError):
    default_error_code: str = "ALREADY_APPROVED"


class AlreadyRejected(ConflictError):
    default_error_code: str = "ALREADY_REJECTED"
