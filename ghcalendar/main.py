from fastapi import FastAPI

from ghcalendar.api.routes.calendar import router as calendar_router
from ghcalendar.core.middleware import CalendarRateLimitMiddleware
from ghcalendar.core.observability import configure_logging
from ghcalendar.core.observability import init_sentry
from ghcalendar.settings import Settings


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the calendar service application."""

    app_settings = app_settings or Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    app = FastAPI(title="github-calendar", version="0.1.0")
    app.state.settings = app_settings
    app.add_middleware(
        CalendarRateLimitMiddleware,
        requests_per_window=app_settings.rate_limit_per_minute,
        window_seconds=app_settings.rate_limit_window_seconds,
    )
    app.include_router(calendar_router)
    return app


app = create_app()
