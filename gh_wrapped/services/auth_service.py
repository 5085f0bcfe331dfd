import logging
from urllib.parse import parse_qs
from urllib.parse import urlencode
from urllib.parse import urljoin
from urllib.parse import urlsplit

import httpx

from gh_wrapped.clients.github_client import OAuthExchangeError
from gh_wrapped.clients.github_client import exchange_oauth_code
from gh_wrapped.services.stats_service import resolve_authenticated_login
from gh_wrapped.settings import Settings


logger = logging.getLogger(__name__)

OAUTH_SCOPE = "read:user user:email repo"


class OAuthNotConfiguredError(Exception):
    """Raised when the GitHub OAuth client id or secret is missing."""


class OAuthLoginError(Exception):
    """Raised when the OAuth callback cannot be turned into a session."""


def _origin(url: str) -> tuple[str, str]:
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower()


def safe_redirect_url(url: str | None, base_url: str) -> str:
    """Resolve a post-login redirect target, falling back to base_url.

    Cross-origin targets, targets whose `callbackUrl` nests another
    `callbackUrl`, and targets carrying an OAuth `error` are dropped.
    """

    if not url:
        return base_url

    try:
        target = urljoin(base_url, url)
        if _origin(target) != _origin(base_url):
            return base_url

        query = parse_qs(urlsplit(target).query)
    except ValueError:
        return base_url

    callback_urls = query.get("callbackUrl", [])
    if any("callbackUrl=" in callback_url for callback_url in callback_urls):
        return base_url
    if "error" in query:
        return base_url

    return target


def build_authorize_url(settings: Settings, callback_url: str | None = None) -> str:
    """Build the GitHub authorize URL for the sign-in redirect.

    The redirect_uri is always the exact registered callback. The page to
    return to travels in `state` and is sanitised again on the way back.
    """

    if not settings.github_client_id:
        raise OAuthNotConfiguredError("GITHUB_CLIENT_ID is not set")

    params = {
        "client_id": settings.github_client_id,
        "scope": OAUTH_SCOPE,
        "redirect_uri": settings.oauth_redirect_uri,
    }
    if callback_url:
        params["state"] = safe_redirect_url(callback_url, settings.base_url)
    return f"{settings.github_oauth_authorize_url}?{urlencode(params)}"


def complete_oauth_login(code: str, settings: Settings) -> tuple[str, str]:
    """Exchange the callback code and resolve the signed-in login.

    Returns:
        The access token and the GitHub login of its owner.
    """

    if not settings.github_client_id or not settings.github_client_secret:
        raise OAuthNotConfiguredError("GitHub OAuth client is not configured")

    try:
        access_token = exchange_oauth_code(
            code=code,
            client_id=settings.github_client_id,
            client_secret=settings.github_client_secret,
            redirect_uri=settings.oauth_redirect_uri,
            token_url=settings.github_oauth_token_url,
        )
    except (OAuthExchangeError, httpx.HTTPError) as exc:
        raise OAuthLoginError("GitHub OAuth code exchange failed") from exc

    login = resolve_authenticated_login(access_token, settings)
    logger.info("GitHub sign-in completed", extra={"data": {"username": login}})
    return access_token, login
