"""
Tests for PaymongoAdapter.

- parse_event for checkout and payment events
- Description fallback when metadata carries no external id
- verify_signature for test-mode, live-mode and tampered bodies
"""

import json

import pytest

from payments.adapters import PaymongoAdapter
from payments.exceptions import InvalidWebhookPayload, WebhookSignatureError
from payments.states import CHECKOUT_SESSION_PAID, PAYMENT_FAILED, PAYMENT_PAID
from payments.tests.factories import paymongo_payload

SECRET = "whsk_unit_secret"


class TestParseEvent:
    """Tests for parse_event()."""

    def test_checkout_session_event(self):
        payload = paymongo_payload(
            CHECKOUT_SESSION_PAID,
            external_id="checkout-abc123def456",
            amount=70000,
            fee=1750,
            payment_id="pay_grouped",
            event_id="evt_grouped",
            checkout_id="cs_grouped",
        )

        event = PaymongoAdapter.parse_event(payload)

        assert event.event_id == "evt_grouped"
        assert event.event_type == CHECKOUT_SESSION_PAID
        assert event.external_id == "checkout-abc123def456"
        assert event.is_grouped
        assert event.amount_minor == 70000
        assert event.fee_minor == 1750
        assert event.net_minor == 68250
        assert event.payment_id == "pay_grouped"
        assert event.gateway_checkout_id == "cs_grouped"
        assert str(event.amount) == "700.00"

    def test_payment_event_uses_resource_as_payment(self):
        payload = paymongo_payload(
            PAYMENT_PAID, external_id="ORD-20250101-ABC123", payment_id="pay_single"
        )

        event = PaymongoAdapter.parse_event(payload)

        assert event.external_id == "ORD-20250101-ABC123"
        assert not event.is_grouped
        assert event.payment_id == "pay_single"
        assert event.gateway_checkout_id == ""

    def test_description_with_one_order_number_becomes_external_id(self):
        payload = paymongo_payload(
            PAYMENT_FAILED, description="Payment for ORD-20250101-ABC123"
        )

        event = PaymongoAdapter.parse_event(payload)

        assert event.external_id == "ORD-20250101-ABC123"

    def test_description_with_several_order_numbers_is_kept_for_lookup(self):
        payload = paymongo_payload(
            PAYMENT_PAID,
            description="Payment for 2 orders: ORD-20250101-AAA111, ORD-20250101-BBB222",
        )

        event = PaymongoAdapter.parse_event(payload)

        assert event.external_id == ""
        assert event.order_numbers == ("ORD-20250101-AAA111", "ORD-20250101-BBB222")

    def test_missing_event_type_raises(self):
        with pytest.raises(InvalidWebhookPayload):
            PaymongoAdapter.parse_event({"data": {"id": "evt_1", "attributes": {}}})

    def test_non_object_body_raises(self):
        with pytest.raises(InvalidWebhookPayload):
            PaymongoAdapter.parse_event(["not", "an", "event"])


class TestVerifySignature:
    """Tests for verify_signature()."""

    body = json.dumps({"data": {"id": "evt_1"}})

    def test_accepts_test_mode_signature(self):
        header = PaymongoAdapter.sign(self.body, SECRET, timestamp=1700000000)

        PaymongoAdapter.verify_signature(self.body, header, SECRET)

    def test_accepts_live_mode_signature(self):
        header = PaymongoAdapter.sign(self.body, SECRET, timestamp=1700000000, live=True)

        PaymongoAdapter.verify_signature(self.body.encode(), header, SECRET)

    def test_rejects_tampered_body(self):
        header = PaymongoAdapter.sign(self.body, SECRET, timestamp=1700000000)

        with pytest.raises(WebhookSignatureError, match="Invalid signature"):
            PaymongoAdapter.verify_signature(self.body + " ", header, SECRET)

    def test_rejects_wrong_secret(self):
        header = PaymongoAdapter.sign(self.body, "another_secret", timestamp=1700000000)

        with pytest.raises(WebhookSignatureError):
            PaymongoAdapter.verify_signature(self.body, header, SECRET)

    def test_rejects_header_without_timestamp(self):
        with pytest.raises(WebhookSignatureError, match="Missing timestamp"):
            PaymongoAdapter.verify_signature(self.body, "te=abc,li=", SECRET)

    def test_rejects_header_without_signature(self):
        with pytest.raises(WebhookSignatureError, match="Missing signature"):
            PaymongoAdapter.verify_signature(self.body, "t=1700000000,te=,li=", SECRET)

    def test_rejects_stale_timestamp_when_tolerance_set(self):
        header = PaymongoAdapter.sign(self.body, SECRET, timestamp=1700000000)

        with pytest.raises(WebhookSignatureError, match="tolerance"):
            PaymongoAdapter.verify_signature(
                self.body, header, SECRET, tolerance_seconds=300, now=1700000000 + 301
            )

    def test_accepts_timestamp_inside_tolerance(self):
        header = PaymongoAdapter.sign(self.body, SECRET, timestamp=1700000000)

        PaymongoAdapter.verify_signature(
            self.body, header, SECRET, tolerance_seconds=300, now=1700000000 + 299
        )
