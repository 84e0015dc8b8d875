"""
Fixtures for cart tests.
"""

import pytest

from catalog.tests.factories import ProductFactory


@pytest.fixture
def product(db):
    return ProductFactory()
