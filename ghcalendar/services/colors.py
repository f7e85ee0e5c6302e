import math
import re
from dataclasses import dataclass


MAX_CHANNEL_VALUE = 255
BORDER_ALPHA = "80"

_HEX_COLOR_PATTERN = re.compile(r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class InvalidIntensity(ValueError):
    """Raised when a negative intensity reaches the color mapper."""


def normalize_hex_color(value: str) -> str:
    """Normalize `#rgb` / `#rrggbb` (leading `#` optional) to lowercase `#rrggbb`.

    Raises:
        ValueError: If the value is not a hex color.
    """

    raw_value = value.strip()
    if not _HEX_COLOR_PATTERN.match(raw_value):
        raise ValueError(f"Invalid hex color: {value!r}")

    digits = raw_value.removeprefix("#").lower()
    if len(digits) == 3:
        digits = "".join(digit * 2 for digit in digits)
    return f"#{digits}"


def intensity_to_hex(intensity: float) -> str:
    """Map an intensity to a two-digit uppercase hex alpha in range 00..FF.

    Values at or above 1.0 saturate to "FF". Halves round up, so 0.5
    becomes "80".

    Raises:
        InvalidIntensity: If the intensity is negative or NaN.
    """

    if math.isnan(intensity) or intensity < 0:
        raise InvalidIntensity(f"Intensity must be non-negative, got {intensity}")
    if intensity >= 1.0:
        return "FF"
    return f"{math.floor(intensity * MAX_CHANNEL_VALUE + 0.5):02X}"


@dataclass(frozen=True, slots=True)
class CellColor:
    """Theme color paired with an alpha channel."""

    base: str
    alpha: str

    @classmethod
    def from_intensity(cls, base: str, intensity: float) -> "CellColor":
        return cls(base=base, alpha=intensity_to_hex(intensity))

    def to_hex(self) -> str:
        return f"{self.base}{self.alpha}"
