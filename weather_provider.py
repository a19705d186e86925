"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod

from errors import WeatherProviderError
from weather_data import WeatherData

__all__ = ["WeatherProviderBase", "WeatherProviderError"]


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_current(self, lat: float, lon: float) -> WeatherData:
        """
        Fetch current weather data for a coordinate.

        Returns:
            WeatherData: Current weather information (never stale)

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass
