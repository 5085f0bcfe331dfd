import logging

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi.responses import RedirectResponse

from gh_wrapped.api.dependencies import get_settings
from gh_wrapped.api.schemas.auth import SignInResponse
from gh_wrapped.services.auth_service import OAuthLoginError
from gh_wrapped.services.auth_service import OAuthNotConfiguredError
from gh_wrapped.services.auth_service import build_authorize_url
from gh_wrapped.services.auth_service import complete_oauth_login
from gh_wrapped.services.auth_service import safe_redirect_url
from gh_wrapped.services.stats_service import GitHubAPIError
from gh_wrapped.services.stats_service import InvalidGitHubTokenError
from gh_wrapped.settings import Settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth/github")


@router.get("/login")
def github_login(
    callback_url: str | None = Query(default=None, alias="callbackUrl"),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Redirect the browser to the GitHub authorize page."""

    try:
        authorize_url = build_authorize_url(settings, callback_url)
    except OAuthNotConfiguredError as exc:
        raise HTTPException(
            status_code=503, detail="GitHub sign-in is not configured"
        ) from exc

    return RedirectResponse(authorize_url, status_code=307)


@router.get("/callback", response_model=SignInResponse)
def github_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    error: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> SignInResponse:
    """Finish the OAuth flow and hand back the token and login."""

    if error or not code:
        logger.warning(
            "GitHub sign-in was not completed", extra={"data": {"error": error}}
        )
        raise HTTPException(status_code=400, detail="GitHub sign-in failed")

    try:
        access_token, login = complete_oauth_login(code, settings)
    except OAuthNotConfiguredError as exc:
        raise HTTPException(
            status_code=503, detail="GitHub sign-in is not configured"
        ) from exc
    except (OAuthLoginError, InvalidGitHubTokenError) as exc:
        raise HTTPException(status_code=401, detail="GitHub sign-in failed") from exc
    except GitHubAPIError as exc:
        raise HTTPException(
            status_code=502, detail="GitHub API request failed"
        ) from exc

    return SignInResponse(
        access_token=access_token,
        username=login,
        redirect_url=safe_redirect_url(state, settings.base_url),
    )
