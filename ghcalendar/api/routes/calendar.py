from collections.abc import AsyncIterator
from datetime import date
from pathlib import Path

import httpx
from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from ghcalendar.api.schemas.calendar import CalendarResponse
from ghcalendar.models import Calendar
from ghcalendar.models import RenderOptions
from ghcalendar.services.calendar_service import ContributionFetchError
from ghcalendar.services.calendar_service import ContributionsNotFoundError
from ghcalendar.services.calendar_service import NoContributionDataError
from ghcalendar.services.calendar_service import get_user_calendar
from ghcalendar.settings import Settings


router = APIRouter()
templates = Jinja2Templates(directory=Path(__file__).resolve().parents[2] / "templates")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_today() -> date:
    """Read the host clock once per request."""

    return date.today()


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds) as client:
        yield client


def get_render_options(
    theme_color: str | None = Query(default=None),
    background_color: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> RenderOptions:
    """Resolve render options from query parameters and configured defaults."""

    try:
        return RenderOptions.with_defaults(
            theme_color=theme_color,
            background_color=background_color,
            default_theme_color=settings.default_theme_color,
            default_background_color=settings.default_background_color,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail="Invalid color option") from exc


async def resolve_calendar(
    username: str,
    options: RenderOptions = Depends(get_render_options),
    today: date = Depends(get_today),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> Calendar:
    normalized_username = username.strip()
    if not normalized_username:
        raise HTTPException(status_code=400, detail="username cannot be empty")

    try:
        return await get_user_calendar(
            username=normalized_username,
            options=options,
            today=today,
            settings=settings,
            client=client,
        )
    except ContributionsNotFoundError as exc:
        raise HTTPException(status_code=404, detail="user not found") from exc
    except NoContributionDataError as exc:
        raise HTTPException(
            status_code=404, detail="No contribution data available"
        ) from exc
    except ContributionFetchError as exc:
        raise HTTPException(
            status_code=502, detail="Contribution data request failed"
        ) from exc


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/calendar/{username}", response_model=CalendarResponse)
async def get_calendar(
    username: str,
    calendar: Calendar = Depends(resolve_calendar),
) -> CalendarResponse:
    """Return the contribution calendar lattice as JSON."""

    return CalendarResponse.from_calendar(username.strip(), calendar)


@router.get("/calendar/{username}/html", response_class=HTMLResponse)
async def get_calendar_page(
    request: Request,
    username: str,
    calendar: Calendar = Depends(resolve_calendar),
) -> HTMLResponse:
    """Render the contribution calendar as an HTML page."""

    return templates.TemplateResponse(
        request,
        "calendar.html",
        {"username": username.strip(), "calendar": calendar},
    )
