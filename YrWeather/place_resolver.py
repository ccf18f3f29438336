"""Reverse geocoding over the OpenStreetMap Nominatim XML API."""
import logging
import xml.etree.ElementTree as ET
from typing import Iterable, Optional

import requests

from feed_parser import END, iter_events
from weather_data import Coordinate, PlaceLabel
from weather_provider import PlaceNotFound, PlaceResolverBase, TransportError


DEFAULT_USER_AGENT = "yr-weather-widget/1.0"


class NominatimPlaceResolver(PlaceResolverBase):
    """
    Place resolver using the Nominatim reverse geocoding API.

    Docs: https://nominatim.org/release-docs/latest/api/Reverse/
    The XML answer carries the place parts as elements under
    ``<addressparts>``; the first locality element and the first
    ``<country>`` element are used.
    """

    BASE_URL = "https://nominatim.openstreetmap.org/reverse"
    LOCALITY_TAGS = ("city", "town", "village", "municipality")
    COUNTRY_TAG = "country"

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: int = 10,
        lang: str = "en",
        locality_tags: Iterable[str] = LOCALITY_TAGS,
        chunk_size: int = 1024,
    ):
        """
        Initialize the resolver.

        Args:
            base_url: Override of the reverse geocoding endpoint
            user_agent: User-Agent header (Nominatim rejects anonymous clients)
            timeout: HTTP request timeout in seconds
            lang: Preferred language for place names
            locality_tags: Element names accepted as the town name
            chunk_size: Bytes read from the response per parser feed
        """
        self.base_url = base_url or self.BASE_URL
        self.user_agent = user_agent
        self.timeout = timeout
        self.lang = lang
        self.locality_tags = frozenset(locality_tags)
        self.chunk_size = chunk_size

    def resolve(self, coordinate: Coordinate) -> PlaceLabel:
        params = {
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "format": "xml",
            "zoom": 10,
            "accept-language": self.lang,
        }
        headers = {"User-Agent": self.user_agent}

        try:
            logging.info(f"Making place lookup request: {self.base_url}")
            logging.debug(f"Request parameters: lat={coordinate.latitude}, lon={coordinate.longitude}")
            response = requests.get(
                self.base_url, params=params, headers=headers, timeout=self.timeout, stream=True
            )
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during place lookup: {e}")
            raise TransportError(f"Network error: {e}") from e

        try:
            if not response.ok:
                logging.error(f"Place lookup failed with status {response.status_code}")
                raise TransportError(f"HTTP {response.status_code} from place service")
            town, country = self._parse(response.iter_content(chunk_size=self.chunk_size))
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error while reading place response: {e}")
            raise TransportError(f"Network error: {e}") from e
        except ET.ParseError as e:
            logging.error(f"Failed to parse place response: {e}")
            raise TransportError(f"Error parsing location XML response: {e}") from e
        finally:
            response.close()

        if not town:
            logging.warning(f"No locality found for {coordinate.latitude},{coordinate.longitude}")
            raise PlaceNotFound(
                f"No locality for lat={coordinate.latitude} lon={coordinate.longitude}"
            )

        place = PlaceLabel(town=town, country=country or None)
        logging.info(f"Resolved place: {place.label}")
        return place

    def _parse(self, chunks):
        found = {"town": None, "country": None}

        def done():
            return found["town"] is not None and found["country"] is not None

        for event in iter_events(chunks, until=done):
            if event.event != END or not event.text:
                continue
            if event.name in self.locality_tags and found["town"] is None:
                found["town"] = event.text
            elif event.name == self.COUNTRY_TAG and found["country"] is None:
                found["country"] = event.text

        return found["town"], found["country"]
