import pytest
from fastapi.testclient import TestClient

from gh_wrapped.main import create_app
from gh_wrapped.settings import Settings


@pytest.fixture
def api_client() -> TestClient:
    app = create_app(
        Settings(
            github_client_id="client-id",
            github_client_secret="client-secret",
            base_url="https://wrapped.example.com",
            rate_limit_per_minute=1000,
        )
    )
    with TestClient(app) as test_client:
        yield test_client
