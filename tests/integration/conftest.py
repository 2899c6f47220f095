"""
Integration test fixtures. Each client gets its own app over a fresh in-memory
SQLite database, with the demo account seeded at startup.
"""
import pytest
from fastapi.testclient import TestClient

from learntrack.config import Settings

INTEGRATION_SECRET = "integration-secret"


def make_settings(**overrides) -> Settings:
    values = dict(environment="test", database_url="sqlite://", jwt_secret=INTEGRATION_SECRET)
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app_settings() -> Settings:
    return make_settings()


@pytest.fixture
def api_client(app_settings):
    """FastAPI TestClient over an in-memory DB."""
    from learntrack.api import create_app

    app = create_app(app_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def guest_headers(api_client: TestClient) -> dict:
    response = api_client.post("/api/auth/guest")
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def user_headers(api_client: TestClient) -> dict:
    response = api_client.post(
        "/api/auth/register",
        json={"email": "learner@kenbright.com", "name": "Learner", "password": "learn123"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def client_factory():
    """Build extra clients with setting overrides; closed at teardown."""
    from learntrack.api import create_app

    opened = []

    def _make(**overrides) -> TestClient:
        client = TestClient(create_app(make_settings(**overrides)))
        client.__enter__()
        opened.append(client)
        return client

    yield _make
    for client in opened:
        client.__exit__(None, None, None)
