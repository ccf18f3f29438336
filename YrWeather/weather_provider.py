"""Provider abstractions - allow swapping place and weather services."""
from abc import ABC, abstractmethod

from weather_data import Coordinate, PlaceLabel, WeatherReading


class WeatherProviderError(Exception):
    """Base exception for failures of a place or weather provider."""
    pass


class TransportError(WeatherProviderError):
    """Network, HTTP or malformed document failure."""
    pass


class PlaceNotFound(WeatherProviderError):
    """The place service answered but gave no usable locality name."""
    pass


class PlaceResolverBase(ABC):
    """Abstract base class for reverse geocoding providers."""

    @abstractmethod
    def resolve(self, coordinate: Coordinate) -> PlaceLabel:
        """
        Look up the place name for a coordinate.

        Returns:
            PlaceLabel: Town and country for the coordinate

        Raises:
            PlaceNotFound: If the response has no locality name
            TransportError: If the request or document parsing fails
        """
        pass


class WeatherFetcherBase(ABC):
    """Abstract base class for weather feed providers."""

    @abstractmethod
    def fetch(self, coordinate: Coordinate) -> WeatherReading:
        """
        Fetch current conditions for a coordinate.

        Missing values in the feed are returned as sentinels.

        Returns:
            WeatherReading: Reading without a place label

        Raises:
            TransportError: If the request or document parsing fails
        """
        pass
