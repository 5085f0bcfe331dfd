from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient

from payloads import build_payload
from payloads import build_repository
from payloads import build_weeks


AUTH_HEADERS = {"Authorization": "Bearer gho_test"}
STATS_URL = "/api/github/stats?username=octocat"


def fake_stats_payload() -> dict[str, object]:
    return build_payload(
        weeks=build_weeks(date(2025, 1, 3), [1, 3, 0, 11, 2]),
        repositories=[
            build_repository(
                "wrapped",
                4,
                languages=[("Python", 120, "#3572A5")],
                primary_language=("Python", "#3572A5"),
            )
        ],
        totals={"totalCommitContributions": 4},
    )


def github_status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.github.com/graphql")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("GitHub error", request=request, response=response)


def test_read_root_returns_greeting(api_client: TestClient) -> None:
    response = api_client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "GitHub Wrapped"}


def test_health_live_returns_ok(api_client: TestClient) -> None:
    response = api_client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


def test_stats_requires_bearer_token(api_client: TestClient) -> None:
    response = api_client.get("/api/github/stats?username=octocat")

    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}


def test_stats_rejects_non_bearer_scheme(api_client: TestClient) -> None:
    response = api_client.get(
        "/api/github/stats?username=octocat",
        headers={"Authorization": "Basic b2N0bzpjYXQ="},
    )

    assert response.status_code == 401


def test_stats_requires_username(api_client: TestClient) -> None:
    response = api_client.get("/api/github/stats", headers=AUTH_HEADERS)

    assert response.status_code == 400
    assert response.json() == {"detail": "Username is required"}


def test_stats_returns_derived_stats(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    calls: list[dict[str, object]] = []

    def fake_fetch_wrapped_stats(username, token, graphql_url, timeout):
        calls.append(
            {"username": username, "token": token, "graphql_url": graphql_url}
        )
        return fake_stats_payload()

    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_wrapped_stats",
        fake_fetch_wrapped_stats,
    )

    response = api_client.get(STATS_URL, headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert calls == [
        {
            "username": "octocat",
            "token": "gho_test",
            "graphql_url": "https://api.github.com/graphql",
        }
    ]
    body = response.json()
    assert body["username"] == "octocat"
    assert body["totalContributions"] == 17
    assert body["totalCommits"] == 4
    assert body["topRepositories"][0]["name"] == "wrapped"
    assert body["topLanguages"] == [
        {"name": "Python", "color": "#3572A5", "size": 480, "percentage": 100}
    ]
    assert body["streakStats"] == {
        "currentStreak": 2,
        "longestStreak": 2,
        "totalActiveDays": 4,
    }
    assert body["mostProductiveDay"] == "Monday"
    assert body["mostProductiveMonth"] == "January"
    assert len(body["contributionCalendar"]) == 5


def test_stats_returns_404_for_unknown_user(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_wrapped_stats",
        lambda **kwargs: {"user": None},
    )

    response = api_client.get("/api/github/stats?username=ghost", headers=AUTH_HEADERS)

    assert response.status_code == 404
    assert response.json() == {"detail": "GitHub user not found"}


def test_stats_returns_502_for_malformed_payload(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    payload = fake_stats_payload()
    del payload["user"]["contributionsCollection"]["contributionCalendar"]
    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_wrapped_stats",
        lambda **kwargs: payload,
    )

    response = api_client.get(STATS_URL, headers=AUTH_HEADERS)

    assert response.status_code == 502
    assert response.json() == {"detail": "GitHub returned an unexpected payload"}


def test_stats_returns_401_when_github_rejects_token(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    def fake_fetch_wrapped_stats(**kwargs):
        raise github_status_error(401)

    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_wrapped_stats",
        fake_fetch_wrapped_stats,
    )

    response = api_client.get(STATS_URL, headers=AUTH_HEADERS)

    assert response.status_code == 401
    assert response.json() == {"detail": "GitHub token is invalid"}


def test_stats_returns_502_when_github_unavailable(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    def fake_fetch_wrapped_stats(**kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_wrapped_stats",
        fake_fetch_wrapped_stats,
    )

    response = api_client.get(STATS_URL, headers=AUTH_HEADERS)

    assert response.status_code == 502
    assert response.json() == {"detail": "GitHub API request failed"}


def test_stats_me_resolves_token_owner(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    def fake_fetch_authenticated_user(token, api_url):
        assert token == "gho_test"
        return {"id": 1, "login": "octocat"}

    def fake_fetch_wrapped_stats(username, **kwargs):
        assert username == "octocat"
        return fake_stats_payload()

    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_authenticated_user",
        fake_fetch_authenticated_user,
    )
    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_wrapped_stats",
        fake_fetch_wrapped_stats,
    )

    response = api_client.get("/api/github/stats/me", headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json()["username"] == "octocat"


def test_calendar_groups_days_into_weeks(
    monkeypatch: pytest.MonkeyPatch, api_client: TestClient
) -> None:
    monkeypatch.setattr(
        "gh_wrapped.services.stats_service.fetch_wrapped_stats",
        lambda **kwargs: fake_stats_payload(),
    )

    response = api_client.get(
        "/api/github/stats/calendar?username=octocat", headers=AUTH_HEADERS
    )

    assert response.status_code == 200
    assert response.json() == {
        "username": "octocat",
        "total": 17,
        "weeks": [
            {
                "week_start": "2025-01-03",
                "days": [
                    {"date": "2025-01-03", "weekday": 5, "count": 1, "level": 1},
                    {"date": "2025-01-04", "weekday": 6, "count": 3, "level": 2},
                ],
            },
            {
                "week_start": "2025-01-05",
                "days": [
                    {"date": "2025-01-05", "weekday": 0, "count": 0, "level": 0},
                    {"date": "2025-01-06", "weekday": 1, "count": 11, "level": 4},
                    {"date": "2025-01-07", "weekday": 2, "count": 2, "level": 1},
                ],
            },
        ],
    }
