from datetime import date

from ghcalendar.models import ContributionRecord


def parse_contribution_record(
    raw_date: object, raw_count: object
) -> ContributionRecord | None:
    """Build a record from raw JSON values, or None when the shape is wrong.

    Only the calendar date part of `raw_date` is used, so timestamps such as
    `2024-03-01T00:00:00Z` match the day `2024-03-01`.

    Raises:
        ValueError: If the count is negative.
    """

    if not isinstance(raw_date, str):
        return None
    if isinstance(raw_count, bool) or not isinstance(raw_count, int):
        return None
    if raw_count < 0:
        raise ValueError(f"Negative contribution count for {raw_date}")

    try:
        parsed_day = date.fromisoformat(raw_date[:10])
    except ValueError:
        return None

    return ContributionRecord(date=parsed_day, contribution_count=raw_count)
