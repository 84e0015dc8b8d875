"""
Fixtures for refund tests.

``paid_order`` belongs to ``customer`` and was paid at PAID_AT through a
verified Payment.
"""

from datetime import UTC, datetime

import pytest

from authentication.tests.factories import UserFactory
from orders.tests.factories import OrderFactory
from organizations.tests.factories import OrganizationFactory, OrganizationMemberFactory
from payments.tests.factories import PaymentFactory

PAID_AT = datetime(2025, 3, 10, 9, 0, tzinfo=UTC)
REVIEW_MESSAGE = "Approved after checking the photos"


@pytest.fixture
def organization(db):
    return OrganizationFactory(name="Campus Store")


@pytest.fixture
def org_manager(organization):
    return OrganizationMemberFactory(organization=organization).user


@pytest.fixture
def customer(db):
    return UserFactory(first_name="Ana")


@pytest.fixture
def paid_order(organization, customer):
    order = OrderFactory(organization=organization, customer=customer, paid=True, paid_at=PAID_AT)
    PaymentFactory(order=order, payment_date=PAID_AT)
    return order
