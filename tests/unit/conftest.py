"""
Unit test fixtures. In-memory stores or in-memory SQLite only; no HTTP.
"""
import pytest

from learntrack.services.auth_service import AuthService


@pytest.fixture
def registered(auth_service: AuthService):
    """A freshly registered account and its session token."""
    return auth_service.register("alice@kenbright.com", "Alice", "secret123")
