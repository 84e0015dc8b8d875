"""
Payment-specific exceptions.

Exception Hierarchy:
    ValidationError
    ├── WebhookSignatureError - Missing, malformed or mismatched signature
    └── InvalidWebhookPayload - Body is not a recognisable gateway event

Usage:
    from payments.exceptions import WebhookSignatureError

    if not hmac.compare_digest(expected, received):
        raise WebhookSignatureError("Invalid signature")
"""

from rest_framework import status

from core.exceptions import ValidationError


class WebhookSignatureError(ValidationError):
    """Raised when a webhook does not carry a valid gateway signature."""

    default_error_code: str = "INVALID_SIGNATURE"
    http_status: int = status.HTTP_401_UNAUTHORIZED


class InvalidWebhookPayload(ValidationError):
    """Raised when a webhook body cannot be adapted to a PaymentEvent."""

    default_error_code: str = "INVALID_WEBHOOK_PAYLOAD"
