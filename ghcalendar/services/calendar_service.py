import logging
from datetime import date

import httpx

from ghcalendar.clients.calendar_api_client import fetch_calendar_records
from ghcalendar.clients.github_client import GitHubUserNotFoundError
from ghcalendar.clients.github_client import fetch_github_contribution_records
from ghcalendar.models import Calendar
from ghcalendar.models import ContributionRecord
from ghcalendar.models import RenderOptions
from ghcalendar.services.calendar_grid import WINDOW_DAYS
from ghcalendar.services.calendar_grid import build_calendar
from ghcalendar.settings import Settings


logger = logging.getLogger(__name__)


class ContributionSourceError(Exception):
    """Base class for failures while loading contribution records."""


class ContributionFetchError(ContributionSourceError):
    """Raised when the contribution source request or payload is unusable."""


class ContributionsNotFoundError(ContributionSourceError):
    """Raised when the contribution source does not know the user."""


class NoContributionDataError(ContributionSourceError):
    """Raised when the contribution source returns an empty dataset."""


async def _fetch_records(
    username: str,
    settings: Settings,
    today: date,
    client: httpx.AsyncClient,
) -> list[ContributionRecord]:
    if settings.contribution_source == "github":
        return await fetch_github_contribution_records(
            username=username,
            token=settings.github_token,
            graphql_url=settings.github_graphql_url,
            today=today,
            client=client,
            window_days=WINDOW_DAYS,
        )
    return await fetch_calendar_records(
        username=username,
        api_url=settings.contributions_api_url,
        client=client,
    )


async def load_contribution_records(
    username: str,
    settings: Settings,
    today: date,
    client: httpx.AsyncClient,
) -> list[ContributionRecord]:
    """Load contribution records for a user from the configured source.

    Raises:
        ContributionsNotFoundError: If the source does not know the user.
        ContributionFetchError: If the request fails or the payload is malformed.
        NoContributionDataError: If the source returns no records.
    """

    try:
        records = await _fetch_records(username, settings, today, client)
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 404:
            logger.warning("No contribution source entry for %s", username)
            raise ContributionsNotFoundError(username) from exc
        logger.error(
            "Contribution source returned HTTP %s for %s",
            exc.response.status_code,
            username,
        )
        raise ContributionFetchError(username) from exc
    except GitHubUserNotFoundError as exc:
        logger.warning("GitHub user %s not found", username)
        raise ContributionsNotFoundError(username) from exc
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Error fetching contribution data for %s: %s", username, exc)
        raise ContributionFetchError(username) from exc

    if not records:
        logger.error("No contribution data available for %s", username)
        raise NoContributionDataError(username)

    logger.info("Loaded %d contribution records for %s", len(records), username)
    return records


async def get_user_calendar(
    username: str,
    options: RenderOptions,
    today: date,
    settings: Settings,
    client: httpx.AsyncClient,
) -> Calendar:
    """Fetch a user's contributions and build their calendar for `today`."""

    records = await load_contribution_records(
        username=username,
        settings=settings,
        today=today,
        client=client,
    )
    return build_calendar(records, options, today)
