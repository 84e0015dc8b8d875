"""
Factory Boy factories for order models.

Usage:
    from orders.tests.factories import OrderFactory, OrderItemFactory

    order = OrderFactory(payment_status=PaymentStatus.PAID)
    OrderItemFactory(order=order, product=product, quantity=2)
"""

from decimal import Decimal

import factory
from django.utils import timezone

from authentication.tests.factories import UserFactory
from catalog.tests.factories import ProductFactory
from orders.models import Order, OrderItem
from orders.states import OrderStatus, PaymentStatus
from organizations.tests.factories import OrganizationFactory


class OrderFactory(factory.django.DjangoModelFactory):
    """
    Factory for Order.

    Examples:
        pending = OrderFactory()
        paid = OrderFactory(paid=True)
        delivered = OrderFactory(status=OrderStatus.DELIVERED, paid=True)
    """

    class Meta:
        model = Order

    class Params:
        paid = factory.Trait(
            payment_status=PaymentStatus.PAID,
            paid_at=factory.LazyFunction(timezone.now),
            status=OrderStatus.PROCESSING,
        )

    organization = factory.SubFactory(OrganizationFactory)
    customer = factory.SubFactory(UserFactory)
    status = OrderStatus.PENDING
    payment_status = PaymentStatus.PENDING
    total_amount = Decimal("1000.00")
    item_count = 1


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(
        ProductFactory, organization=factory.SelfAttribute("..order.organization")
    )
    product_title = factory.SelfAttribute("product.title")
    quantity = 1
    price = factory.SelfAttribute("product.price")
