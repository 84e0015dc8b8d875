"""
Factory Boy factories and payload builders for payment tests.

Usage:
    from payments.tests.factories import PaymentFactory, paymongo_payload

    payload = paymongo_payload("payment.paid", external_id=order.order_number, amount=100000)
"""

from decimal import Decimal

import factory
from django.utils import timezone

from orders.tests.factories import OrderFactory
from payments.models import Payment, WebhookEvent
from payments.states import CHECKOUT_SESSION_PAID, PaymentRecordStatus, ReconciliationStatus


class PaymentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Payment

    order = factory.SubFactory(OrderFactory, paid=True)
    customer = factory.SelfAttribute("order.customer")
    amount = factory.SelfAttribute("order.total_amount")
    processing_fee = Decimal("0.00")
    net_amount = factory.SelfAttribute("amount")
    payment_status = PaymentRecordStatus.VERIFIED
    transaction_id = factory.Sequence(lambda n: f"pay_test_{n}")
    reference_no = factory.LazyAttribute(lambda o: f"PAYMONGO-{o.transaction_id}")
    reconciliation_status = ReconciliationStatus.MATCHED
    payment_date = factory.LazyFunction(timezone.now)


class WebhookEventFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = WebhookEvent

    gateway_event_id = factory.Sequence(lambda n: f"evt_test_{n}")
    event_type = "payment.paid"
    payload = factory.LazyAttribute(
        lambda o: paymongo_payload(o.event_type, event_id=o.gateway_event_id)
    )


def paymongo_payload(
    event_type,
    *,
    external_id="",
    amount=100000,
    fee=2500,
    payment_id="pay_test_123",
    event_id="evt_test_123",
    description="",
    checkout_id="cs_test_123",
):
    """
    Build a PayMongo event body.

    Checkout events nest the payment under the checkout session's
    ``payments`` list; payment events carry it as the resource itself.
    """
    payment_attributes = {
        "amount": amount,
        "fee": fee,
        "net_amount": amount - fee,
        "currency": "PHP",
        "description": description,
        "metadata": {"external_id": external_id} if external_id else {},
    }
    if event_type == CHECKOUT_SESSION_PAID:
        resource = {
            "id": checkout_id,
            "type": "checkout_session",
            "attributes": {
                "reference_number": external_id,
                "metadata": {"external_id": external_id} if external_id else {},
                "payments": [
                    {"id": payment_id, "type": "payment", "attributes": payment_attributes}
                ],
            },
        }
    else:
        resource = {"id": payment_id, "type": "payment", "attributes": payment_attributes}

    return {
        "data": {
            "id": event_id,
            "type": "event",
            "attributes": {
                "type": event_type,
                "livemode": False,
                "data": resource,
            },
        }
    }
