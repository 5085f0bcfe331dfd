import logging
from collections.abc import Callable

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials

from gh_wrapped.api.dependencies import get_request_id
from gh_wrapped.api.dependencies import get_settings
from gh_wrapped.api.schemas.heatmap import HeatmapResponse
from gh_wrapped.core.security import bearer_scheme
from gh_wrapped.core.security import extract_bearer_token
from gh_wrapped.services.stats_service import GitHubAPIError
from gh_wrapped.services.stats_service import InvalidGitHubTokenError
from gh_wrapped.services.stats_service import build_calendar_payload
from gh_wrapped.services.stats_service import get_authenticated_user_wrapped_stats
from gh_wrapped.services.stats_service import get_wrapped_stats
from gh_wrapped.settings import Settings
from gh_wrapped.stats.errors import MalformedPayloadError
from gh_wrapped.stats.errors import UserNotFoundError
from gh_wrapped.stats.models import DerivedStats


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/github/stats")


def require_username(username: str | None) -> str:
    if username is None or not username.strip():
        raise HTTPException(status_code=400, detail="Username is required")
    return username.strip()


def run_stats_request(
    load: Callable[[], DerivedStats], request_id: str | None
) -> DerivedStats:
    """Run a stats lookup and map its failures to HTTP errors."""

    try:
        return load()
    except InvalidGitHubTokenError as exc:
        raise HTTPException(status_code=401, detail="GitHub token is invalid") from exc
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail="GitHub user not found") from exc
    except MalformedPayloadError as exc:
        logger.error(
            "Unexpected GitHub stats payload",
            exc_info=exc,
            extra={"data": {"request_id": request_id}},
        )
        raise HTTPException(
            status_code=502, detail="GitHub returned an unexpected payload"
        ) from exc
    except GitHubAPIError as exc:
        logger.error(
            "Failed to fetch GitHub stats",
            exc_info=exc,
            extra={"data": {"request_id": request_id}},
        )
        raise HTTPException(
            status_code=502, detail="GitHub API request failed"
        ) from exc


@router.get("", response_model=DerivedStats)
def get_user_stats(
    username: str | None = Query(default=None),
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    settings: Settings = Depends(get_settings),
    request_id: str | None = Depends(get_request_id),
) -> DerivedStats:
    """Return wrapped stats for username, fetched with the caller's token."""

    token = extract_bearer_token(credentials)
    login = require_username(username)

    return run_stats_request(
        lambda: get_wrapped_stats(
            token=token, username=login, settings=settings, request_id=request_id
        ),
        request_id,
    )


@router.get("/me", response_model=DerivedStats)
def get_authenticated_user_stats(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    settings: Settings = Depends(get_settings),
    request_id: str | None = Depends(get_request_id),
) -> DerivedStats:
    """Return wrapped stats for the GitHub user linked to the token."""

    token = extract_bearer_token(credentials)

    return run_stats_request(
        lambda: get_authenticated_user_wrapped_stats(
            token=token, settings=settings, request_id=request_id
        ),
        request_id,
    )


@router.get("/calendar", response_model=HeatmapResponse)
def get_user_calendar(
    username: str | None = Query(default=None),
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    settings: Settings = Depends(get_settings),
    request_id: str | None = Depends(get_request_id),
) -> dict[str, object]:
    """Return this year's contribution calendar grouped into weeks."""

    token = extract_bearer_token(credentials)
    login = require_username(username)

    stats = run_stats_request(
        lambda: get_wrapped_stats(
            token=token, username=login, settings=settings, request_id=request_id
        ),
        request_id,
    )
    return build_calendar_payload(stats)
