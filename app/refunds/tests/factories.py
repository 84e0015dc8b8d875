"""
Factory Boy factories for refund models.

Usage:
    from refunds.tests.factories import RefundRequestFactory

    pending = RefundRequestFactory(order=paid_order)
"""

import factory

from orders.tests.factories import OrderFactory
from refunds.models import RefundRequest
from refunds.states import RefundReason, RefundRequestStatus


class RefundRequestFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = RefundRequest

    order = factory.SubFactory(OrderFactory, paid=True)
    organization = factory.SelfAttribute("order.organization")
    requested_by = factory.SelfAttribute("order.customer")
    reason = RefundReason.WRONG_SIZE
    customer_message = "The shirt is too small"
    refund_amount = factory.SelfAttribute("order.total_amount")
    status = RefundRequestStatus.PENDING
    order_info = factory.LazyAttribute(lambda o: o.order.snapshot())
