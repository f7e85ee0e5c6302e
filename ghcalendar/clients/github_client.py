from collections.abc import Mapping
from datetime import date
from datetime import timedelta
from typing import Any

import httpx

from ghcalendar.clients.records import parse_contribution_record
from ghcalendar.models import ContributionRecord


CONTRIBUTION_CALENDAR_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
    }
  }
}
"""


class GitHubUserNotFoundError(LookupError):
    """Raised when GitHub GraphQL has no user for the requested login."""


async def fetch_github_contribution_records(
    username: str,
    token: str | None,
    graphql_url: str,
    today: date,
    client: httpx.AsyncClient,
    window_days: int = 365,
) -> list[ContributionRecord]:
    """Fetch contribution records for `[today - window_days, today]` from GitHub GraphQL."""

    if not token:
        raise ValueError("GITHUB_TOKEN is required for GraphQL requests")

    from_day = today - timedelta(days=window_days)
    variables = {
        "login": username,
        "from": f"{from_day.isoformat()}T00:00:00Z",
        "to": f"{today.isoformat()}T23:59:59Z",
    }
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "User-Agent": "github-calendar",
    }

    response = await client.post(
        graphql_url,
        json={"query": CONTRIBUTION_CALENDAR_QUERY, "variables": variables},
        headers=headers,
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("GitHub GraphQL response is invalid")

    errors = payload.get("errors")
    if errors:
        if isinstance(errors, list) and any(
            isinstance(error, Mapping) and error.get("type") == "NOT_FOUND"
            for error in errors
        ):
            raise GitHubUserNotFoundError(username)
        raise ValueError("GitHub GraphQL returned errors")

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise ValueError("GitHub GraphQL data is missing")

    user = data.get("user")
    if not isinstance(user, Mapping):
        raise GitHubUserNotFoundError(username)

    collection = user.get("contributionsCollection")
    if not isinstance(collection, Mapping):
        raise ValueError("GitHub contributionsCollection is missing")

    calendar = collection.get("contributionCalendar")
    if not isinstance(calendar, Mapping):
        raise ValueError("GitHub contributionCalendar is missing")

    weeks = calendar.get("weeks")
    if not isinstance(weeks, list):
        raise ValueError("GitHub contribution weeks are missing")

    records: list[ContributionRecord] = []
    for week in weeks:
        if not isinstance(week, Mapping):
            continue
        contribution_days = week.get("contributionDays")
        if not isinstance(contribution_days, list):
            continue
        for item in contribution_days:
            if not isinstance(item, Mapping):
                continue
            record = parse_contribution_record(
                item.get("date"), item.get("contributionCount")
            )
            if record is not None:
                records.append(record)

    return records
