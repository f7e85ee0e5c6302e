from typing import Literal

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    contributions_api_url: str = "https://nulljuju.dev/github_calendar"
    contribution_source: Literal["endpoint", "github"] = "endpoint"
    github_graphql_url: str = "https://api.github.com/graphql"
    github_token: str | None = None
    request_timeout_seconds: float = 20.0
    default_theme_color: str = "#00ff00"
    default_background_color: str = "#121212"
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
