from fastapi import Request

from gh_wrapped.settings import Settings


def get_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""

    return request.app.state.settings


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)
