"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.test import override_settings


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_app_settings():
    """
    Drop cached platform settings around each test.

    CRITICAL: app_settings is a process-wide singleton. Without this a rate
    changed in one test would leak into the next.
    """
    from restaurants.config import app_settings

    app_settings.reload()
    yield
    app_settings.reload()


@pytest.fixture(autouse=True)
def in_memory_channel_layer():
    """Every test gets a fresh in-memory channel layer, never Redis."""
    with override_settings(
        CHANNEL_LAYERS={"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}
    ):
        yield


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/menu/restaurants')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def auth_client():
    """
    Build an API client authenticated as the given user.

    Usage:
        def test_protected_endpoint(auth_client, customer):
            client = auth_client(customer)
            response = client.get('/api/wallet')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    from users.capabilities import sign_tokens

    def _client(user):
        client = APIClient()
        tokens = sign_tokens(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        return client

    return _client


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *
