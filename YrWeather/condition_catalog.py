"""Lookup tables for yr.no weather symbol numbers.

Symbol reference: http://api.yr.no/weatherapi/weathericon/1.0/documentation
"""
from enum import Enum


class IconCategory(Enum):
    """Icon shown for a weather condition."""
    FOG = "foggy"
    CLOUDY = "cloudy"
    PARTLY_CLOUDY = "partly_cloudy"
    SUNNY = "sunny"
    RAIN = "raining"
    SNOW = "snow"
    CLEAR = "clear"


INVALID_CONDITION = -1
UNKNOWN_CONDITION_TEXT = "NaN"

_ICONS = {
    15: IconCategory.FOG,
    2: IconCategory.CLOUDY,   # light cloud
    4: IconCategory.CLOUDY,   # cloud
    17: IconCategory.CLOUDY,  # light cloud (winter darkness)
    3: IconCategory.PARTLY_CLOUDY,
    1: IconCategory.SUNNY,
    16: IconCategory.SUNNY,   # sun (winter darkness)
    5: IconCategory.RAIN,     # light rain sun
    6: IconCategory.RAIN,     # light rain thunder sun
    9: IconCategory.RAIN,     # light rain
    10: IconCategory.RAIN,    # rain
    11: IconCategory.RAIN,    # rain and thunder
    18: IconCategory.RAIN,    # light rain sun (winter darkness)
    22: IconCategory.RAIN,    # light rain thunder
    7: IconCategory.SNOW,     # sleet sun
    8: IconCategory.SNOW,     # snow sun
    12: IconCategory.SNOW,    # sleet
    13: IconCategory.SNOW,    # snow
    14: IconCategory.SNOW,    # snow thunder
    19: IconCategory.SNOW,    # snow sun (winter darkness)
    20: IconCategory.SNOW,    # sleet sun thunder
    21: IconCategory.SNOW,    # snow sun thunder
    23: IconCategory.SNOW,    # sleet thunder
}

_TEXTS = {
    1: "Sun",
    2: "Light Cloud",
    3: "Partly Cloudy",
    4: "Cloudy",
    5: "Light Rain/Sun",
    6: "Light Rain/Thunder/Sun",
    7: "Sleet and Sun",
    8: "Snow and Sun",
    9: "Light Rain",
    10: "Rain",
    11: "Rain and Thunder",
    12: "Sleet",
    13: "Snow",
    14: "Snow and Thunder",
    15: "Foggy",
    16: "Sun",
    17: "Light Cloud",
    18: "Light Rain and Sun",
    19: "Snow and Sun",
    20: "Sleet/Sun/Thunder",
    21: "Snow/Sun/Thunder",
    22: "Light Rain and Thunder",
    23: "Sleet and Thunder",
}


def icon_for(code: int) -> IconCategory:
    """
    Get the icon category for a condition code.

    Args:
        code: yr.no symbol number (1-23) or INVALID_CONDITION

    Returns:
        IconCategory, CLEAR for anything outside the known table
    """
    return _ICONS.get(code, IconCategory.CLEAR)


def text_for(code: int) -> str:
    """Get the English description for a condition code ("NaN" if unknown)."""
    return _TEXTS.get(code, UNKNOWN_CONDITION_TEXT)


def is_rain(code: int) -> bool:
    return icon_for(code) is IconCategory.RAIN
