from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from ghcalendar.clients.records import parse_contribution_record
from ghcalendar.models import ContributionRecord


async def fetch_calendar_records(
    username: str,
    api_url: str,
    client: httpx.AsyncClient,
) -> list[ContributionRecord]:
    """Fetch contribution records for a user from the calendar JSON endpoint.

    The endpoint answers with a JSON array of `{date, contributionCount}`
    objects. Items with the wrong shape are skipped.
    """

    response = await client.get(
        f"{api_url.rstrip('/')}/{quote(username, safe='')}",
        headers={
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "User-Agent": "github-calendar",
        },
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, list):
        raise ValueError("Contribution response is not a JSON array")

    records: list[ContributionRecord] = []
    for item in payload:
        if not isinstance(item, Mapping):
            continue
        record = parse_contribution_record(
            item.get("date"), item.get("contributionCount")
        )
        if record is not None:
            records.append(record)

    return records
