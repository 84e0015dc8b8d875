"""
Payout exceptions.
"""

from core.exceptions import ConflictError, ValidationError


class InvoiceStateConflict(ConflictError):
    """Raised when an invoice is not in a state that allows the operation."""

    default_error_code: str = "INVOICE_STATE_CONFLICT"


class RevertReasonRequired(ValidationError):
    default_error_code: str = "REASON_REQUIRED"
