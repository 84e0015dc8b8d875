"""
Payment gateway adapters.

Gateway payloads are adapted into PaymentEvent before reaching the
processor, so nothing past this package depends on a gateway's JSON shape.

Usage:
    from payments.adapters import PaymongoAdapter

    event = PaymongoAdapter.parse_event(payload)
"""

from payments.adapters.paymongo_adapter import (
    CHECKOUT_ID_PREFIX,
    PaymentEvent,
    PaymongoAdapter,
)

__all__ = [
    "CHECKOUT_ID_PREFIX",
    "PaymentEvent",
    "PaymongoAdapter",
]
