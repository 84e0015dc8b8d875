"""
Fixtures for order tests.
"""

import pytest

from authentication.tests.factories import UserFactory
from catalog.tests.factories import ProductFactory
from orders.tests.factories import OrderFactory, OrderItemFactory
from organizations.tests.factories import OrganizationFactory, OrganizationMemberFactory


@pytest.fixture
def organization(db):
    return OrganizationFactory(name="Campus Store")


@pytest.fixture
def org_manager(organization):
    return OrganizationMemberFactory(organization=organization).user


@pytest.fixture
def customer(db):
    return UserFactory()


@pytest.fixture
def order(organization, customer):
    return OrderFactory(organization=organization, customer=customer)


@pytest.fixture
def stocked_order(organization, customer):
    """Pending order for 2 shirts, leaving 48 of 50 on hand."""
    order = OrderFactory(
        organization=organization, customer=customer, total_amount="500.00", item_count=2
    )
    product = ProductFactory(organization=organization, inventory=48)
    OrderItemFactory(order=order, product=product, quantity=2)
    return order
