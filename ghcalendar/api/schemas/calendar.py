from datetime import date

from pydantic import BaseModel

from ghcalendar.models import Calendar
from ghcalendar.models import DayCell
from ghcalendar.models import MonthLabel


class CalendarDay(BaseModel):
    """Single lattice cell in the calendar response."""

    date: date
    row: int
    week: int
    label: str
    count: int | None
    intensity: float | None
    color: str | None
    is_future: bool
    marker: bool

    @classmethod
    def from_cell(cls, cell: DayCell) -> "CalendarDay":
        return cls(
            date=cell.date,
            row=cell.row,
            week=cell.week,
            label=cell.label,
            count=cell.count,
            intensity=cell.intensity,
            color=cell.color.to_hex() if cell.color else None,
            is_future=cell.is_future,
            marker=cell.marker,
        )


class CalendarMonth(BaseModel):
    """Month label positioned above a lattice column."""

    name: str
    month: int
    week: int | None

    @classmethod
    def from_label(cls, label: MonthLabel) -> "CalendarMonth":
        return cls(name=label.name, month=label.month, week=label.week)


class CalendarResponse(BaseModel):
    """Contribution calendar response payload."""

    username: str
    origin: date
    today: date
    total: int
    theme_color: str
    background_color: str
    weekdays: list[str]
    months: list[CalendarMonth]
    days: list[CalendarDay]

    @classmethod
    def from_calendar(cls, username: str, calendar: Calendar) -> "CalendarResponse":
        return cls(
            username=username,
            origin=calendar.origin,
            today=calendar.today,
            total=calendar.total,
            theme_color=calendar.options.theme_color,
            background_color=calendar.options.background_color,
            weekdays=list(calendar.weekday_labels),
            months=[CalendarMonth.from_label(label) for label in calendar.months],
            days=[CalendarDay.from_cell(cell) for cell in calendar.cells],
        )
