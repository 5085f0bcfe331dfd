from pydantic import model_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    github_graphql_url: str = "https://api.github.com/graphql"
    github_api_url: str = "https://api.github.com"
    github_oauth_authorize_url: str = "https://github.com/login/oauth/authorize"
    github_oauth_token_url: str = "https://github.com/login/oauth/access_token"
    github_client_id: str | None = None
    github_client_secret: str | None = None
    base_url: str = "http://localhost:8000"
    http_timeout_seconds: float = 20.0
    environment: str = "development"
    release: str | None = None
    log_level: str | None = None
    sentry_dsn: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @model_validator(mode="after")
    def default_log_level(self) -> "Settings":
        # Debug output only outside production unless set explicitly.
        if not self.log_level:
            self.log_level = "INFO" if self.environment == "production" else "DEBUG"
        self.log_level = self.log_level.upper()
        return self

    @property
    def oauth_redirect_uri(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/auth/github/callback"
