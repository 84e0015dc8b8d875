"""
Fixtures for voucher tests.
"""

import pytest

from authentication.tests.factories import UserFactory
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
