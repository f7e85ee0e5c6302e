from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from ghcalendar.services.colors import BORDER_ALPHA
from ghcalendar.services.colors import CellColor
from ghcalendar.services.colors import normalize_hex_color


DEFAULT_THEME_COLOR = "#00ff00"
DEFAULT_BACKGROUND_COLOR = "#121212"


class ContributionRecord(BaseModel):
    """One externally supplied (date, count) activity data point."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: date
    contribution_count: int = Field(ge=0, alias="contributionCount")


class RenderOptions(BaseModel):
    """Theme and background colors used for one render pass."""

    model_config = ConfigDict(frozen=True)

    theme_color: str = DEFAULT_THEME_COLOR
    background_color: str = DEFAULT_BACKGROUND_COLOR

    @field_validator("theme_color", "background_color")
    @classmethod
    def _normalize_color(cls, value: str) -> str:
        return normalize_hex_color(value)

    @classmethod
    def with_defaults(
        cls,
        theme_color: str | None = None,
        background_color: str | None = None,
        default_theme_color: str = DEFAULT_THEME_COLOR,
        default_background_color: str = DEFAULT_BACKGROUND_COLOR,
    ) -> "RenderOptions":
        """Build options, falling back to defaults for unset or blank values."""

        return cls(
            theme_color=(theme_color or "").strip() or default_theme_color,
            background_color=(background_color or "").strip()
            or default_background_color,
        )

    @property
    def border_color(self) -> CellColor:
        return CellColor(base=self.theme_color, alpha=BORDER_ALPHA)


@dataclass(frozen=True, slots=True)
class DayCell:
    date: date
    row: int
    week: int
    label: str
    is_future: bool
    record: ContributionRecord | None = None
    intensity: float | None = None
    color: CellColor | None = None
    marker: bool = False

    @property
    def count(self) -> int | None:
        if self.record is None:
            return None
        return self.record.contribution_count

    @property
    def tooltip(self) -> str:
        if self.record is None:
            return f"No contributions on {self.label}"
        count = self.record.contribution_count
        noun = "contribution" if count == 1 else "contributions"
        return f"{count} {noun} on {self.label}"


@dataclass(frozen=True, slots=True)
class MonthLabel:
    index: int
    month: int
    name: str
    # Lattice column holding the first day of the month; None when it would
    # share column 0 with the following month.
    week: int | None


@dataclass(frozen=True, slots=True)
class Calendar:
    """Fully resolved lattice for one render pass."""

    today: date
    origin: date
    cells: tuple[DayCell, ...]
    months: tuple[MonthLabel, ...]
    weekday_labels: tuple[str, ...]
    options: RenderOptions

    @property
    def total(self) -> int:
        return sum(
            cell.count or 0 for cell in self.cells if not cell.is_future
        )
