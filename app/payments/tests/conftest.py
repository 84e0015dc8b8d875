"""
Fixtures for payment tests.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from authentication.tests.factories import UserFactory
from orders.models import CheckoutSession
from orders.tests.factories import OrderFactory

WEBHOOK_SECRET = "whsk_test_secret"


@pytest.fixture
def webhook_secret(settings):
    settings.PAYMENT_WEBHOOK_SECRET = WEBHOOK_SECRET
    settings.PAYMENT_WEBHOOK_TOLERANCE_SECONDS = 0
    return WEBHOOK_SECRET


@pytest.fixture
def customer(db):
    return UserFactory(email="buyer@example.com", first_name="Ana")


@pytest.fixture
def pending_order(customer):
    return OrderFactory(
        customer=customer,
        total_amount=Decimal("1000.00"),
        customer_info=customer.snapshot(),
    )


def make_grouped_checkout(customer, totals):
    """Create one pending order per total, linked by a CheckoutSession."""
    orders = [
        OrderFactory(customer=customer, total_amount=Decimal(total), customer_info=customer.snapshot())
        for total in totals
    ]
    session = CheckoutSession.objects.create(
        checkout_id=CheckoutSession.generate_checkout_id(),
        customer=customer,
        total_amount=sum((o.total_amount for o in orders), Decimal("0.00")),
        expires_at=timezone.now() + timedelta(hours=24),
    )
    session.orders.set(orders)
    return session


@pytest.fixture
def grouped_checkout(customer):
    return make_grouped_checkout(customer, ["100.00", "200.00", "400.00"])
