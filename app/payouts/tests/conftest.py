"""
Fixtures for payout tests.

Every test uses the Wednesday-to-Tuesday period of 2025-01-01.
"""

from datetime import UTC, datetime

import pytest

from organizations.tests.factories import OrganizationFactory, OrganizationMemberFactory

PERIOD_START = datetime(2025, 1, 1, tzinfo=UTC)
PERIOD_END = datetime(2025, 1, 7, 23, 59, 59, 999999, tzinfo=UTC)
PAID_IN_PERIOD = datetime(2025, 1, 3, 10, 0, tzinfo=UTC)


@pytest.fixture
def period():
    return PERIOD_START, PERIOD_END


@pytest.fixture
def organization(db):
    return OrganizationFactory(name="Campus Store")


@pytest.fixture
def org_manager(organization):
    return OrganizationMemberFactory(organization=organization).user
