"""
Test configuration and fixtures for authentication tests.

``user``, ``superuser`` and ``api_client`` come from app/conftest.py.
"""

import pytest
from rest_framework_simplejwt.tokens import RefreshToken


@pytest.fixture
def authenticated_client(api_client, user):
    """APIClient authenticated as ``user`` with a JWT bearer token."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return api_client
