from collections.abc import Iterable
from dataclasses import replace
from datetime import date
from datetime import timedelta

from ghcalendar.models import Calendar
from ghcalendar.models import ContributionRecord
from ghcalendar.models import DayCell
from ghcalendar.models import MonthLabel
from ghcalendar.models import RenderOptions
from ghcalendar.services.colors import CellColor


WINDOW_DAYS = 365
LATTICE_WEEKS = 53
LATTICE_DAYS = 7
LATTICE_SIZE = LATTICE_WEEKS * LATTICE_DAYS
MONTH_LABEL_COUNT = 13
INTENSITY_DIVISOR = 10.0
MARKER_THRESHOLD = 10

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def resolve_origin(today: date) -> date:
    """Return the first lattice day, 365 days before `today`."""

    return today - timedelta(days=WINDOW_DAYS)


def format_day_label(day: date) -> str:
    """Format a short display date such as `Oct 05`."""

    return f"{MONTH_NAMES[day.month - 1]} {day.day:02d}"


def build_month_labels(origin: date) -> tuple[MonthLabel, ...]:
    """Build 13 sequential month labels starting at the origin's month.

    Thirteen labels over-cover the twelve-month span so the trailing
    partial month is always present. Each label also carries the lattice
    column of the month's first day, used to position it above the grid.
    The origin's month is pinned to column 0 unless the next month also
    starts there, in which case it gets no column.
    """

    labels: list[MonthLabel] = []
    for index in range(MONTH_LABEL_COUNT):
        month_offset = origin.month - 1 + index
        month = month_offset % 12 + 1
        first_day = date(origin.year + month_offset // 12, month, 1)

        week = max(0, (first_day - origin).days // LATTICE_DAYS)
        if index == 1 and week == 0:
            labels[0] = replace(labels[0], week=None)

        labels.append(
            MonthLabel(
                index=index,
                month=month,
                name=MONTH_NAMES[month - 1],
                week=week,
            )
        )

    return tuple(labels)


def build_weekday_labels(origin: date) -> tuple[str, ...]:
    """Label each lattice row with the real weekday of its dates."""

    return tuple(
        WEEKDAY_NAMES[(origin + timedelta(days=row)).weekday()]
        for row in range(LATTICE_DAYS)
    )


def index_records(
    records: Iterable[ContributionRecord],
) -> dict[date, ContributionRecord]:
    """Map each date to its record. The first record seen for a date wins."""

    records_by_date: dict[date, ContributionRecord] = {}
    for record in records:
        records_by_date.setdefault(record.date, record)
    return records_by_date


def _build_cell(
    cell_date: date,
    row: int,
    week: int,
    today: date,
    record: ContributionRecord | None,
    options: RenderOptions,
) -> DayCell:
    is_future = cell_date > today
    intensity: float | None = None
    color: CellColor | None = None
    marker = False

    # Future cells stay inert even when a record matches.
    if record is not None and record.contribution_count > 0 and not is_future:
        intensity = record.contribution_count / INTENSITY_DIVISOR
        color = CellColor.from_intensity(options.theme_color, intensity)
        marker = record.contribution_count >= MARKER_THRESHOLD

    return DayCell(
        date=cell_date,
        row=row,
        week=week,
        label=format_day_label(cell_date),
        is_future=is_future,
        record=record,
        intensity=intensity,
        color=color,
        marker=marker,
    )


def build_day_cells(
    records: Iterable[ContributionRecord],
    options: RenderOptions,
    today: date,
) -> tuple[DayCell, ...]:
    """Build the 53x7 lattice of day cells in row-major order.

    Cell `(row, week)` sits at index `row * 53 + week` and holds the date
    `origin + row + 7 * week`. The lattice always has 371 cells and may
    run a few days past `today`; those cells are flagged as future.
    """

    origin = resolve_origin(today)
    records_by_date = index_records(records)

    cells: list[DayCell] = []
    for row in range(LATTICE_DAYS):
        for week in range(LATTICE_WEEKS):
            cell_date = origin + timedelta(days=row + week * LATTICE_DAYS)
            cells.append(
                _build_cell(
                    cell_date=cell_date,
                    row=row,
                    week=week,
                    today=today,
                    record=records_by_date.get(cell_date),
                    options=options,
                )
            )

    return tuple(cells)


def build_calendar(
    records: Iterable[ContributionRecord],
    options: RenderOptions,
    today: date,
) -> Calendar:
    """Resolve the full calendar for a single, fixed `today`."""

    origin = resolve_origin(today)
    return Calendar(
        today=today,
        origin=origin,
        cells=build_day_cells(records, options, today),
        months=build_month_labels(origin),
        weekday_labels=build_weekday_labels(origin),
        options=options,
    )
