import logging
from collections.abc import Callable
from time import monotonic
from typing import TypeVar

import httpx

from gh_wrapped.clients.github_client import fetch_authenticated_user
from gh_wrapped.clients.github_client import fetch_wrapped_stats
from gh_wrapped.settings import Settings
from gh_wrapped.stats.aggregator import contribution_level
from gh_wrapped.stats.aggregator import group_calendar_weeks
from gh_wrapped.stats.models import DerivedStats
from gh_wrapped.stats.pipeline import derive_stats


logger = logging.getLogger(__name__)

T = TypeVar("T")


class InvalidGitHubTokenError(Exception):
    """Raised when GitHub rejects the provided token."""


class GitHubAPIError(Exception):
    """Raised when GitHub requests fail for non-auth reasons."""


def call_github(request: Callable[[], T]) -> T:
    """Run one upstream call and translate its failures."""

    try:
        return request()
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code in {401, 403}:
            raise InvalidGitHubTokenError from exc
        raise GitHubAPIError from exc
    except Exception as exc:
        raise GitHubAPIError from exc


def resolve_authenticated_login(token: str, settings: Settings) -> str:
    github_user = call_github(
        lambda: fetch_authenticated_user(token, api_url=settings.github_api_url)
    )
    raw_login = github_user.get("login")
    if not isinstance(raw_login, str) or not raw_login:
        raise GitHubAPIError("GitHub user response is invalid")
    return raw_login


def get_wrapped_stats(
    token: str,
    username: str,
    settings: Settings,
    request_id: str | None = None,
) -> DerivedStats:
    """Fetch this year's contributions for username and derive the stats.

    Raises:
        InvalidGitHubTokenError: If GitHub rejects the token.
        GitHubAPIError: If GitHub cannot be reached or fails.
        UserNotFoundError: If GitHub does not know the user.
        MalformedPayloadError: If GitHub returns an unexpected payload.
    """

    context = {"request_id": request_id, "username": username}
    started = monotonic()
    logger.debug("Fetching GitHub stats", extra={"data": context})

    raw_stats = call_github(
        lambda: fetch_wrapped_stats(
            username=username,
            token=token,
            graphql_url=settings.github_graphql_url,
            timeout=settings.http_timeout_seconds,
        )
    )
    user = raw_stats.get("user")
    logger.debug(
        "Raw stats fetched",
        extra={"data": {**context, "has_user": user is not None}},
    )

    stats = derive_stats(raw_stats)

    logger.info(
        "GitHub stats processed",
        extra={
            "data": {
                **context,
                "duration_ms": round((monotonic() - started) * 1000),
                "total_contributions": stats.total_contributions,
                "top_repositories": len(stats.top_repositories),
            }
        },
    )
    return stats


def get_authenticated_user_wrapped_stats(
    token: str,
    settings: Settings,
    request_id: str | None = None,
) -> DerivedStats:
    """Derive wrapped stats for the GitHub user linked to token."""

    username = resolve_authenticated_login(token, settings)
    return get_wrapped_stats(
        token=token, username=username, settings=settings, request_id=request_id
    )


def build_calendar_payload(stats: DerivedStats) -> dict[str, object]:
    """Group the flat calendar into weeks with heatmap levels."""

    weeks = []
    for week in group_calendar_weeks(stats.contribution_calendar):
        weeks.append(
            {
                "week_start": week[0].date,
                "days": [
                    {
                        "date": day.date,
                        "weekday": day.weekday,
                        "count": day.count,
                        "level": contribution_level(day.count),
                    }
                    for day in week
                ],
            }
        )

    return {
        "username": stats.username,
        "total": stats.total_contributions,
        "weeks": weeks,
    }
