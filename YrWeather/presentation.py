"""Presentation logic for the weather widget - pure functions for testability."""
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from condition_catalog import IconCategory, icon_for, text_for
from weather_data import UnitPreference, WeatherReading

NO_DATA = "--"
DEFAULT_CLICK_TARGET = "https://www.google.com/search?q=weather"
LATER_FORECAST_TEMPLATE = "Later: {}"
EXPANDED_TITLE_TEMPLATE = "{} — {}"


@dataclass(frozen=True)
class PresentationPayload:
    """Everything the host surface needs to show one weather update."""
    visible: bool
    status: str
    expanded_title: str
    expanded_body: str
    icon: IconCategory
    click_target: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "visible": self.visible,
            "status": self.status,
            "expanded_title": self.expanded_title,
            "expanded_body": self.expanded_body,
            "icon": self.icon.value,
            "click_target": self.click_target,
        }


def convert_temperature(celsius_text: str, units: UnitPreference) -> Optional[str]:
    """
    Format a feed temperature for the selected unit.

    Fahrenheit values are rounded half-up to a whole degree. Celsius values
    are passed through exactly as the feed sent them.

    Args:
        celsius_text: Temperature as text, in Celsius
        units: Selected unit preference

    Returns:
        Display string without a unit suffix, None if the value can't be shown
    """
    if units is UnitPreference.FAHRENHEIT:
        fahrenheit = float(celsius_text) * 9 / 5 + 32
        if not math.isfinite(fahrenheit):
            return None
        return str(math.floor(fahrenheit + 0.5))
    return celsius_text


def resolve_click_target(configured: Optional[str]) -> str:
    """Use the user's chosen action, or the default weather search."""
    if configured and configured.strip():
        return configured.strip()
    return DEFAULT_CLICK_TARGET


def get_icon(reading: WeatherReading) -> IconCategory:
    """Current condition icon, replaced by rain when rain is expected later today."""
    if icon_for(reading.later_condition_code) is IconCategory.RAIN:
        return IconCategory.RAIN
    return icon_for(reading.condition_code)


def build_expanded_body(reading: WeatherReading) -> str:
    lines = []
    if icon_for(reading.later_condition_code) is IconCategory.RAIN:
        forecast = reading.forecast_text or text_for(reading.later_condition_code)
        lines.append(LATER_FORECAST_TEMPLATE.format(forecast))
    if reading.place_label:
        lines.append(reading.place_label)
    return "\n".join(lines)


def _format_status(reading: WeatherReading, units: UnitPreference) -> str:
    if not reading.has_valid_temperature:
        return NO_DATA
    return convert_temperature(reading.temperature.strip(), units) or NO_DATA


def render(
    reading: WeatherReading,
    units: UnitPreference,
    click_target: Optional[str] = None,
) -> PresentationPayload:
    """
    Build the display payload for a reading.

    Args:
        reading: Parsed weather reading (sentinels allowed)
        units: Unit preference active for this update
        click_target: User-chosen click action, None for the default

    Returns:
        PresentationPayload ready for the host
    """
    status = _format_status(reading, units)

    return PresentationPayload(
        visible=True,
        status=status,
        expanded_title=EXPANDED_TITLE_TEMPLATE.format(
            status + units.letter, reading.condition_text
        ),
        expanded_body=build_expanded_body(reading),
        icon=get_icon(reading),
        click_target=resolve_click_target(click_target),
    )
