from urllib.parse import parse_qs
from urllib.parse import urlsplit

import pytest
from fastapi.testclient import TestClient

from gh_wrapped.clients.github_client import OAuthExchangeError
from gh_wrapped.services.auth_service import OAuthNotConfiguredError
from gh_wrapped.services.auth_service import build_authorize_url
from gh_wrapped.services.auth_service import safe_redirect_url
from gh_wrapped.settings import Settings


BASE_URL = "https://wrapped.example.com"


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("/wrapped", f"{BASE_URL}/wrapped"),
        (f"{BASE_URL}/wrapped?year=2025", f"{BASE_URL}/wrapped?year=2025"),
        ("https://evil.example.net/wrapped", BASE_URL),
        ("//evil.example.net/wrapped", BASE_URL),
        ("/?callbackUrl=/login?callbackUrl=/wrapped", BASE_URL),
        ("/?error=OAuthCallback", BASE_URL),
        (None, BASE_URL),
        ("", BASE_URL),
    ],
)
def test_safe_redirect_url(target: str | None, expected: str) -> None:
    assert safe_redirect_url(target, BASE_URL) == expected


def test_build_authorize_url_uses_fixed_redirect_uri() -> None:
    settings = Settings(github_client_id="client-id", base_url=BASE_URL)

    url = build_authorize_url(settings, callback_url="/wrapped")

    parts = urlsplit(url)
    query = parse_qs(parts.query)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
        "https://github.com/login/oauth/authorize"
    )
    assert query["client_id"] == ["client-id"]
    assert query["scope"] == ["read:user user:email repo"]
    assert query["redirect_uri"] == [f"{BASE_URL}/api/auth/github/callback"]
    assert query["state"] == [f"{BASE_URL}/wrapped"]


def test_build_authorize_url_requires_client_id() -> None:
    with pytest.raises(OAuthNotConfiguredError):
        build_authorize_url(Settings(github_client_id=None))


def test_login_redirects_to_github(api_client: TestClient) -> None:
    response = api_client.get(
        "/api/auth/github/login?callbackUrl=/wrapped", follow_redirects=False
    )

    assert response.status_code == 307
    assert response.headers["location"].startswith(
        "https://github.com/login/oauth/authorize?"
    )


def test_callback_returns_token_and_login(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    monkeypatch.setattr(
        "gh_wrapped.services.auth_service.exchange_oauth_code",
        lambda **kwargs: "gho_new",
    )
    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_authenticated_user",
        lambda token, api_url: {"id": 1, "login": "octocat"},
    )

    response = api_client.get(
        "/api/auth/github/callback?code=abc&state=https://evil.example.net/"
    )

    assert response.status_code == 200
    assert response.json() == {
        "accessToken": "gho_new",
        "username": "octocat",
        "redirectUrl": BASE_URL,
    }


def test_callback_rejects_github_error(api_client: TestClient) -> None:
    response = api_client.get("/api/auth/github/callback?error=access_denied")

    assert response.status_code == 400
    assert response.json() == {"detail": "GitHub sign-in failed"}


def test_callback_returns_401_when_exchange_fails(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    def fake_exchange(**kwargs):
        raise OAuthExchangeError("bad_verification_code")

    monkeypatch.setattr(
        "gh_wrapped.services.auth_service.exchange_oauth_code", fake_exchange
    )

    response = api_client.get("/api/auth/github/callback?code=stale")

    assert response.status_code == 401
    assert response.json() == {"detail": "GitHub sign-in failed"}
