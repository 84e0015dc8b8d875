"""
PayMongo webhook adapter.

Turns PayMongo event bodies into the gateway-neutral PaymentEvent the
processor works with, and verifies the ``Paymongo-Signature`` header.

Header format:
    t=<unix timestamp>,te=<test mode hmac>,li=<live mode hmac>

The signed payload is ``"{t}.{raw body}"`` hashed with HMAC-SHA256 using
the webhook secret. The live signature wins when present.

Event body (abridged):
    {
        "data": {
            "id": "evt_...",
            "attributes": {
                "type": "checkout_session.payment.paid",
                "data": {"id": "cs_...", "attributes": {...}}
            }
        }
    }

Usage:
    from payments.adapters import PaymongoAdapter

    PaymongoAdapter.verify_signature(request.body, header, settings.PAYMENT_WEBHOOK_SECRET)
    event = PaymongoAdapter.parse_event(json.loads(request.body))
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from core.helpers import from_minor_units
from payments.exceptions import InvalidWebhookPayload, WebhookSignatureError
from payments.states import CHECKOUT_SESSION_PAID

logger = logging.getLogger(__name__)

CHECKOUT_ID_PREFIX = "checkout-"
ORDER_NUMBER_PATTERN = re.compile(r"ORD-[A-Z0-9-]+")


@dataclass(frozen=True)
class PaymentEvent:
    """
    Gateway-neutral view of a payment webhook.

    ``external_id`` is the order number for single-order checkouts or the
    CheckoutSession.checkout_id for grouped ones. Amounts are in minor units.
    """

    event_id: str
    event_type: str
    external_id: str = ""
    amount_minor: int = 0
    fee_minor: int = 0
    net_minor: int = 0
    payment_id: str = ""
    currency: str = "PHP"
    gateway_checkout_id: str = ""
    order_numbers: tuple[str, ...] = ()
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_grouped(self) -> bool:
        return self.external_id.startswith(CHECKOUT_ID_PREFIX)

    @property
    def amount(self) -> Decimal:
        return from_minor_units(self.amount_minor)

    @property
    def fee(self) -> Decimal:
        return from_minor_units(self.fee_minor)


class PaymongoAdapter:
    """Stateless helpers for PayMongo webhook deliveries."""

    @staticmethod
    def parse_signature_header(header: str) -> dict[str, str]:
        parts: dict[str, str] = {}
        for chunk in (header or "").split(","):
            key, sep, value = chunk.strip().partition("=")
            if sep:
                parts[key] = value
        return parts

    @classmethod
    def verify_signature(
        cls,
        body: bytes | str,
        header: str,
        secret: str,
        tolerance_seconds: int = 0,
        now: float | None = None,
    ) -> None:
        """
        Check the HMAC signature of a raw webhook body.

        Args:
            body: Raw request body, exactly as received
            header: Value of the Paymongo-Signature header
            secret: Webhook signing secret
            tolerance_seconds: Maximum signature age; 0 disables the check

        Raises:
            WebhookSignatureError: Missing timestamp or signature, stale
                timestamp, or digest mismatch
        """
        parts = cls.parse_signature_header(header)
        timestamp = parts.get("t")
        received = parts.get("li") or parts.get("te")
        if not timestamp:
            raise WebhookSignatureError("Missing timestamp in signature")
        if not received:
            raise WebhookSignatureError("Missing signature value")

        if tolerance_seconds:
            try:
                age = (now if now is not None else time.time()) - int(timestamp)
            except ValueError as exc:
                raise WebhookSignatureError("Malformed signature timestamp") from exc
            if abs(age) > tolerance_seconds:
                raise WebhookSignatureError(
                    "Signature timestamp outside tolerance",
                    details={"age_seconds": int(age)},
                )

        if isinstance(body, bytes):
            body = body.decode("utf-8")
        expected = hmac.new(
            secret.encode("utf-8"),
            f"{timestamp}.{body}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        if not hmac.compare_digest(expected, received):
            raise WebhookSignatureError("Invalid signature")

    @staticmethod
    def sign(body: bytes | str, secret: str, timestamp: int, live: bool = False) -> str:
        """Build a signature header for ``body``. Used by tests and local tooling."""
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        digest = hmac.new(
            secret.encode("utf-8"), f"{timestamp}.{body}".encode("utf-8"), hashlib.sha256
        ).hexdigest()
        if live:
            return f"t={timestamp},te=,li={digest}"
        return f"t={timestamp},te={digest},li="

    @classmethod
    def parse_event(cls, payload: dict[str, Any]) -> PaymentEvent:
        """
        Adapt a PayMongo event body.

        Checkout events carry the payment under ``attributes.payments[0]``;
        payment events carry it directly. When a payment has no external id
        in its metadata, order numbers in its description are used instead.

        Raises:
            InvalidWebhookPayload: If the body lacks an event id or type
        """
        if not isinstance(payload, dict):
            raise InvalidWebhookPayload("Webhook body must be a JSON object")
        data = payload.get("data") or {}
        event_attributes = data.get("attributes") or {}
        event_id = data.get("id")
        event_type = event_attributes.get("type")
        if not event_id or not event_type:
            raise InvalidWebhookPayload("Webhook is missing event id or type")

        resource = event_attributes.get("data") or {}
        attributes = resource.get("attributes") or {}
        metadata = attributes.get("metadata") or {}

        if event_type == CHECKOUT_SESSION_PAID:
            payments = attributes.get("payments") or []
            payment = payments[0] if payments else {}
            payment_attributes = payment.get("attributes") or {}
            payment_id = payment.get("id") or event_id
            gateway_checkout_id = resource.get("id", "")
            external_id = metadata.get("external_id") or attributes.get("reference_number") or ""
        else:
            payment_attributes = attributes
            payment_id = resource.get("id") or event_id
            gateway_checkout_id = ""
            external_id = metadata.get("external_id") or metadata.get("reference_number") or ""

        amount = int(payment_attributes.get("amount") or 0)
        fee = int(payment_attributes.get("fee") or 0)
        net = payment_attributes.get("net_amount")

        order_numbers: tuple[str, ...] = ()
        if not external_id:
            order_numbers = tuple(
                ORDER_NUMBER_PATTERN.findall(payment_attributes.get("description") or "")
            )
            if len(order_numbers) == 1:
                external_id = order_numbers[0]

        return PaymentEvent(
            event_id=event_id,
            event_type=event_type,
            external_id=external_id,
            amount_minor=amount,
            fee_minor=fee,
            net_minor=int(net) if net is not None else amount - fee,
            payment_id=payment_id,
            currency=payment_attributes.get("currency") or "PHP",
            gateway_checkout_id=gateway_checkout_id,
            order_numbers=order_numbers,
            raw=payload,
        )
