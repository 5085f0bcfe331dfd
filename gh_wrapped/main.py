from fastapi import FastAPI

from gh_wrapped.api.routes.auth import router as auth_router
from gh_wrapped.api.routes.health import router as health_router
from gh_wrapped.api.routes.stats import router as stats_router
from gh_wrapped.core.middleware import RequestContextMiddleware
from gh_wrapped.core.middleware import StatsRateLimitMiddleware
from gh_wrapped.core.observability import configure_logging
from gh_wrapped.core.observability import init_sentry
from gh_wrapped.settings import Settings


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the API application from explicit settings."""

    app_settings = app_settings or Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    application = FastAPI(title="GitHub Wrapped")
    application.state.settings = app_settings

    application.add_middleware(
        StatsRateLimitMiddleware,
        requests_per_window=app_settings.rate_limit_per_minute,
        window_seconds=app_settings.rate_limit_window_seconds,
    )
    application.add_middleware(RequestContextMiddleware)

    application.include_router(health_router)
    application.include_router(stats_router)
    application.include_router(auth_router)
    return application


app = create_app()
