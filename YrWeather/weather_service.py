"""Weather update cycle: place + weather lookup, rendering and publishing."""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Optional

from location_watch import STALE_LOCATION_SECONDS, LocationFix, LocationSource, WatchHandle
from presentation import PresentationPayload, render
from widget_settings import WidgetSettings
from weather_data import Coordinate, WeatherReading
from weather_provider import (
    PlaceNotFound,
    PlaceResolverBase,
    TransportError,
    WeatherFetcherBase,
)


class WeatherService:
    """
    Service that combines a place resolver and a weather fetcher.

    Every call goes to both providers; nothing is cached and nothing is
    retried. A failure of either provider aborts the whole update.
    """

    def __init__(
        self,
        place_resolver: PlaceResolverBase,
        weather_fetcher: WeatherFetcherBase,
        concurrent: bool = True,
    ):
        """
        Initialize weather service.

        Args:
            place_resolver: Reverse geocoding provider
            weather_fetcher: Weather feed provider
            concurrent: Run both lookups in parallel threads
        """
        self.place_resolver = place_resolver
        self.weather_fetcher = weather_fetcher
        self.concurrent = concurrent

    def get_reading(self, coordinate: Coordinate) -> WeatherReading:
        """
        Look up place and weather for a coordinate.

        Raises:
            TransportError: If either request fails
            PlaceNotFound: If the coordinate has no locality
        """
        if self.concurrent:
            with ThreadPoolExecutor(max_workers=2) as executor:
                place_future = executor.submit(self.place_resolver.resolve, coordinate)
                weather_future = executor.submit(self.weather_fetcher.fetch, coordinate)
                place = place_future.result()
                reading = weather_future.result()
        else:
            place = self.place_resolver.resolve(coordinate)
            reading = self.weather_fetcher.fetch(coordinate)

        return replace(reading, place_label=place.label)

    def update(self, coordinate: Coordinate, settings: WidgetSettings) -> Optional[PresentationPayload]:
        """
        Run one update cycle.

        Returns:
            PresentationPayload, or None if the cycle failed (display should stay unchanged)
        """
        try:
            reading = self.get_reading(coordinate)
        except TransportError as e:
            logging.warning(f"Generic read error while retrieving weather information: {e}")
            return None
        except PlaceNotFound as e:
            logging.warning(f"Invalid location: {e}")
            return None

        payload = render(reading, settings.units, settings.click_target)
        logging.info(f"Weather update: {payload.expanded_title}")
        return payload


class WidgetUpdater:
    """
    Drives update cycles from host refresh events.

    Uses the last known location when it is fresh, otherwise arms a single
    location request. Only one request is outstanding at a time.
    """

    def __init__(
        self,
        service: WeatherService,
        location_source: LocationSource,
        publish: Callable[[PresentationPayload], None],
        is_connected: Callable[[], bool] = lambda: True,
        max_location_age: float = STALE_LOCATION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.service = service
        self.location_source = location_source
        self.publish = publish
        self.is_connected = is_connected
        self.max_location_age = max_location_age
        self.clock = clock
        self._watch: Optional[WatchHandle] = None
        self._settings: Optional[WidgetSettings] = None

    @property
    def watching(self) -> bool:
        return self._watch is not None and self._watch.active

    def on_update_data(self, settings: WidgetSettings) -> None:
        """Handle a refresh request from the host."""
        self.apply_settings(settings)
        if not self.is_connected():
            logging.info("No network connection, skipping weather update")
            return

        last_fix = self.location_source.last_known()
        if last_fix is not None and last_fix.is_fresh(self.max_location_age, now=self.clock()):
            self.update_for_location(last_fix, settings)
            return

        logging.warning("Stale or missing last-known location; requesting single location update.")
        self.cancel_watch()
        self._watch = self.location_source.request_single_update(
            lambda fix: self.update_for_location(fix, self._settings)
        )

    def apply_settings(self, settings: WidgetSettings) -> None:
        """Record changed preferences; a pending location request renders with these."""
        self._settings = settings

    def update_for_location(self, fix: LocationFix, settings: WidgetSettings) -> None:
        payload = self.service.update(fix.coordinate, settings)
        if payload is not None:
            self.publish(payload)

    def cancel_watch(self) -> None:
        if self._watch is not None:
            self._watch.cancel()
            self._watch = None

    def close(self) -> None:
        self.cancel_watch()
