from collections.abc import Mapping
from datetime import datetime
from datetime import UTC
from typing import Any

import httpx


USER_AGENT = "gh-wrapped"

GITHUB_STATS_QUERY = """
query GetUserStats($username: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $username) {
    login
    name
    avatarUrl
    followers {
      totalCount
    }
    repositories(first: 1) {
      totalCount
    }
    contributionsCollection(from: $from, to: $to) {
      totalCommitContributions
      totalPullRequestContributions
      totalPullRequestReviewContributions
      totalIssueContributions
      totalRepositoryContributions
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
            weekday
          }
        }
      }
      commitContributionsByRepository(maxRepositories: 100) {
        repository {
          name
          owner {
            login
          }
          primaryLanguage {
            name
            color
          }
          stargazerCount
          url
          languages(first: 10, orderBy: {field: SIZE, direction: DESC}) {
            edges {
              size
              node {
                name
                color
              }
            }
          }
        }
        contributions {
          totalCount
        }
      }
    }
  }
}
"""


class GitHubGraphQLError(Exception):
    """Raised when GitHub GraphQL answers with errors other than NOT_FOUND."""


class OAuthExchangeError(Exception):
    """Raised when GitHub refuses to exchange an OAuth code for a token."""


def year_window(now: datetime | None = None) -> tuple[str, str]:
    """Return ISO bounds from January 1 of the current year until now."""

    current = now or datetime.now(UTC)
    start = current.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return start.isoformat(), current.isoformat()


def fetch_authenticated_user(token: str, api_url: str) -> dict[str, str | int]:
    """Fetch basic profile data for the token owner from GitHub REST API."""

    response = httpx.get(
        f"{api_url.rstrip('/')}/user",
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        },
        timeout=15.0,
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("GitHub user response is invalid")

    raw_id = payload.get("id")
    raw_login = payload.get("login")
    if not isinstance(raw_id, int) or not isinstance(raw_login, str) or not raw_login:
        raise ValueError("GitHub user response is missing required fields")

    return {"id": raw_id, "login": raw_login}


def fetch_wrapped_stats(
    username: str,
    token: str,
    graphql_url: str,
    now: datetime | None = None,
    timeout: float = 20.0,
) -> Mapping[str, Any]:
    """Fetch this year's contribution data for a user from GitHub GraphQL API.

    Returns the GraphQL `data` object untouched. An unknown login comes
    back as a mapping whose `user` is None.
    """

    if not token:
        raise ValueError("A GitHub token is required for GraphQL requests")

    from_value, to_value = year_window(now)
    variables = {"username": username, "from": from_value, "to": to_value}
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }

    response = httpx.post(
        graphql_url,
        json={"query": GITHUB_STATS_QUERY, "variables": variables},
        headers=headers,
        timeout=timeout,
    )
    response.raise_for_status()

    payload = response.json()
    if not isinstance(payload, Mapping):
        raise GitHubGraphQLError("GitHub GraphQL response is invalid")

    errors = payload.get("errors")
    if errors:
        error_types = {
            error.get("type") for error in errors if isinstance(error, Mapping)
        }
        if error_types != {"NOT_FOUND"}:
            raise GitHubGraphQLError("GitHub GraphQL returned errors")
        return {"user": None}

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise GitHubGraphQLError("GitHub GraphQL data is missing")

    return data


def exchange_oauth_code(
    code: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    token_url: str,
) -> str:
    """Exchange an OAuth authorization code for an access token."""

    response = httpx.post(
        token_url,
        data={
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        },
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        timeout=15.0,
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise OAuthExchangeError("GitHub OAuth response is invalid")

    if payload.get("error"):
        raise OAuthExchangeError(
            str(payload.get("error_description") or payload["error"])
        )

    access_token = payload.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise OAuthExchangeError("GitHub OAuth response has no access token")

    return access_token
