"""Widget configuration loaded from the environment (and an optional .env file)."""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from place_resolver import DEFAULT_USER_AGENT
from weather_data import DEFAULT_UNITS, Coordinate, UnitPreference

PREF_WEATHER_UNITS = "YR_WEATHER_UNITS"
PREF_WEATHER_SHORTCUT = "YR_WEATHER_SHORTCUT"


@dataclass(frozen=True)
class WidgetSettings:
    """User preferences and connection settings for one update cycle."""
    units: UnitPreference = DEFAULT_UNITS
    click_target: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout: int = 10
    weather_url: Optional[str] = None
    places_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)


def _float_env(name: str) -> Optional[float]:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid {name}: {exc}") from exc


def load_settings(env_file: Optional[str] = None) -> WidgetSettings:
    load_dotenv(env_file)

    timeout = os.getenv("YR_HTTP_TIMEOUT", "10")
    try:
        timeout_val = int(timeout)
    except ValueError as exc:
        raise SystemExit(f"Invalid YR_HTTP_TIMEOUT: {exc}") from exc

    settings = WidgetSettings(
        units=UnitPreference.parse(os.getenv(PREF_WEATHER_UNITS)),
        click_target=os.getenv(PREF_WEATHER_SHORTCUT) or None,
        user_agent=os.getenv("YR_USER_AGENT", DEFAULT_USER_AGENT),
        timeout=timeout_val,
        weather_url=os.getenv("YR_WEATHER_URL") or None,
        places_url=os.getenv("YR_PLACES_URL") or None,
        latitude=_float_env("YR_WEATHER_LAT"),
        longitude=_float_env("YR_WEATHER_LON"),
    )
    logging.info(
        "Configuration loaded: units=%s lat=%s lon=%s",
        settings.units.value,
        settings.latitude,
        settings.longitude,
    )
    return settings
