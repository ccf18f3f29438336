"""yr.no / met.no locationforecast provider implementation."""
import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone, tzinfo
from typing import Iterable, Optional

import requests

from condition_catalog import INVALID_CONDITION, is_rain, text_for
from feed_parser import START, iter_events
from place_resolver import DEFAULT_USER_AGENT
from weather_data import Coordinate, WeatherReading
from weather_provider import TransportError, WeatherFetcherBase


def parse_feed_time(value: Optional[str], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a feed timestamp ("2024-05-01T12:00:00Z") into an aware datetime in ``tz``."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(tz)


class _ForecastScan:
    """Collects the fields of interest while the feed is being streamed."""

    def __init__(self, tz: Optional[tzinfo]):
        self.tz = tz
        self.temperature: Optional[str] = None
        self.condition_code = INVALID_CONDITION
        self.later_condition_code = INVALID_CONDITION
        self.forecast_text: Optional[str] = None
        self.reference: Optional[datetime] = None
        self.slot_start: Optional[datetime] = None
        self.rain_later = False
        self.past_today = False

    def complete(self) -> bool:
        have_current = self.temperature is not None and self.condition_code != INVALID_CONDITION
        return have_current and (self.rain_later or self.past_today)

    def on_time(self, attrib):
        self.slot_start = parse_feed_time(attrib.get("from"), self.tz)
        if self.slot_start is None:
            return
        if self.reference is None:
            self.reference = self.slot_start
        elif self.slot_start.date() > self.reference.date():
            self.past_today = True

    def on_temperature(self, attrib):
        if self.temperature is None and "value" in attrib:
            self.temperature = attrib["value"]

    def on_symbol(self, attrib):
        try:
            number = int(attrib.get("number", ""))
        except ValueError:
            logging.debug(f"Ignoring symbol without a usable number: {attrib}")
            return

        if self.condition_code == INVALID_CONDITION:
            self.condition_code = number

        if self.rain_later or not self._in_later_slot():
            return
        # Last slot of the day unless a rainy one turns up first
        self.later_condition_code = number
        self.forecast_text = attrib.get("id") or text_for(number)
        if is_rain(number):
            self.rain_later = True

    def _in_later_slot(self) -> bool:
        if self.reference is None or self.slot_start is None:
            return False
        return (
            self.slot_start > self.reference
            and self.slot_start.date() == self.reference.date()
        )

    def to_reading(self) -> WeatherReading:
        return WeatherReading(
            temperature=self.temperature,
            condition_code=self.condition_code,
            later_condition_code=self.later_condition_code,
            forecast_text=self.forecast_text,
        )


class YrWeatherFetcher(WeatherFetcherBase):
    """
    Weather fetcher using the met.no Locationforecast "classic" XML feed.

    Docs: https://api.met.no/weatherapi/locationforecast/2.0/documentation
    The feed is a list of ``<time from=.. to=..>`` slots; point slots carry
    ``<temperature value=..>`` and interval slots carry
    ``<symbol id=.. number=..>``.
    """

    BASE_URL = "https://api.met.no/weatherapi/locationforecast/2.0/classic"

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: int = 10,
        tz: Optional[tzinfo] = None,
        chunk_size: int = 4096,
    ):
        """
        Initialize the fetcher.

        Args:
            base_url: Override of the locationforecast endpoint
            user_agent: User-Agent header (required by the met.no terms of service)
            timeout: HTTP request timeout in seconds
            tz: Timezone that decides what "today" means (None = local time)
            chunk_size: Bytes read from the response per parser feed
        """
        self.base_url = base_url or self.BASE_URL
        self.user_agent = user_agent
        self.timeout = timeout
        self.tz = tz
        self.chunk_size = chunk_size

    def fetch(self, coordinate: Coordinate) -> WeatherReading:
        params = {
            "lat": round(coordinate.latitude, 4),
            "lon": round(coordinate.longitude, 4),
        }
        headers = {"User-Agent": self.user_agent}

        try:
            logging.info(f"Making weather feed request: {self.base_url}")
            logging.debug(f"Request parameters: lat={params['lat']}, lon={params['lon']}")
            response = requests.get(
                self.base_url, params=params, headers=headers, timeout=self.timeout, stream=True
            )
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during weather request: {e}")
            raise TransportError(f"Network error: {e}") from e

        try:
            logging.info(f"Weather feed response status: {response.status_code}")
            if not response.ok:
                logging.error(f"Weather request failed with status {response.status_code}")
                raise TransportError(f"HTTP {response.status_code} from weather feed")
            reading = self._parse(response.iter_content(chunk_size=self.chunk_size))
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error while reading weather feed: {e}")
            raise TransportError(f"Network error: {e}") from e
        except ET.ParseError as e:
            logging.error(f"Failed to parse weather feed: {e}")
            raise TransportError(f"Error parsing weather feed XML: {e}") from e
        finally:
            response.close()

        logging.info(
            f"Parsed weather feed: temperature={reading.temperature}, "
            f"condition={reading.condition_code}, later={reading.later_condition_code}"
        )
        return reading

    def _parse(self, chunks: Iterable[bytes]) -> WeatherReading:
        scan = _ForecastScan(self.tz)
        for event in iter_events(chunks, until=scan.complete):
            if event.event != START:
                continue
            if event.name == "time":
                scan.on_time(event.attrib)
            elif event.name == "temperature":
                scan.on_temperature(event.attrib)
            elif event.name == "symbol":
                scan.on_symbol(event.attrib)
        return scan.to_reading()
