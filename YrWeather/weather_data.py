"""Weather domain model - pure data structures independent of any API."""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from condition_catalog import INVALID_CONDITION, text_for


@dataclass(frozen=True)
class Coordinate:
    """Geographic position in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class PlaceLabel:
    """Result of a reverse geocoding lookup."""
    town: str
    country: Optional[str] = None

    @property
    def label(self) -> str:
        if self.country:
            return f"{self.town}, {self.country}"
        return self.town

    def __str__(self) -> str:
        return self.label


class UnitPreference(Enum):
    """Temperature unit selected by the user."""
    CELSIUS = "c"
    FAHRENHEIT = "f"

    @property
    def letter(self) -> str:
        return self.value.upper()

    @classmethod
    def parse(cls, value: Optional[str]) -> "UnitPreference":
        """Parse a stored preference value, falling back to Fahrenheit."""
        if value:
            normalized = value.strip().lower()
            for unit in cls:
                if normalized in (unit.value, unit.name.lower()):
                    return unit
        return DEFAULT_UNITS


DEFAULT_UNITS = UnitPreference.FAHRENHEIT


@dataclass
class WeatherReading:
    """Domain model for a single weather update, independent of display units."""
    temperature: Optional[str] = None  # raw feed value, Celsius
    condition_code: int = INVALID_CONDITION
    later_condition_code: int = INVALID_CONDITION  # forecast slot later today
    forecast_text: Optional[str] = None
    place_label: Optional[str] = None

    @property
    def has_valid_temperature(self) -> bool:
        """Check if the temperature is present and numeric."""
        return self.celsius is not None

    @property
    def celsius(self) -> Optional[float]:
        if self.temperature is None:
            return None
        try:
            value = float(self.temperature)
        except ValueError:
            return None
        return value if math.isfinite(value) else None

    @property
    def condition_text(self) -> str:
        return text_for(self.condition_code)
