"""Location fixes and single-shot location requests."""
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from weather_data import Coordinate

STALE_LOCATION_SECONDS = 10 * 60


@dataclass(frozen=True)
class LocationFix:
    """A coordinate and the monotonic time it was obtained."""
    coordinate: Coordinate
    timestamp: float

    def is_fresh(self, max_age_seconds: float = STALE_LOCATION_SECONDS, now: Optional[float] = None) -> bool:
        """Check if this fix is younger than max_age_seconds."""
        current_time = time.monotonic() if now is None else now
        return current_time - self.timestamp < max_age_seconds


class WatchHandle:
    """
    Token for one outstanding single-shot location request.

    A handle delivers at most one fix. Once cancelled or delivered it is
    inactive and late fixes are dropped, so a superseded request can never
    trigger an update.
    """

    def __init__(
        self,
        callback: Callable[[LocationFix], None],
        on_release: Optional[Callable[[], None]] = None,
    ):
        self._callback = callback
        self._on_release = on_release
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def _release(self) -> bool:
        with self._lock:
            if not self._active:
                return False
            self._active = False
        if self._on_release is not None:
            self._on_release()
        return True

    def cancel(self) -> bool:
        """Deactivate the request. Returns False if it was already inactive."""
        return self._release()

    def deliver(self, fix: LocationFix) -> bool:
        """Hand a fix to the callback if this handle is still active."""
        if not self._release():
            logging.debug("Dropping location fix for an inactive watch")
            return False
        self._callback(fix)
        return True


class LocationSource(ABC):
    """Abstract location provider supplied by the host."""

    @abstractmethod
    def last_known(self) -> Optional[LocationFix]:
        """Most recent fix, or None if the provider has none."""
        pass

    @abstractmethod
    def request_single_update(self, callback: Callable[[LocationFix], None]) -> WatchHandle:
        """
        Ask for one new fix.

        The returned handle delivers the fix to ``callback`` when it arrives,
        unless it has been cancelled first.
        """
        pass


class StaticLocationSource(LocationSource):
    """Location source for a fixed coordinate (configured hosts, tests)."""

    def __init__(self, coordinate: Coordinate, clock: Callable[[], float] = time.monotonic):
        self.coordinate = coordinate
        self.clock = clock

    def last_known(self) -> Optional[LocationFix]:
        return LocationFix(self.coordinate, self.clock())

    def request_single_update(self, callback: Callable[[LocationFix], None]) -> WatchHandle:
        handle = WatchHandle(callback)
        handle.deliver(LocationFix(self.coordinate, self.clock()))
        return handle
