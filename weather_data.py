"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass


@dataclass(frozen=True)
class WeatherData:
    """Current conditions at one location, independent of any specific API."""
    temperature: float  # degrees in the provider's configured units
    condition: str  # e.g., "Clear sky", "Light rain"
    humidity: float  # percentage
    stale: bool = False  # True when served from the fallback cache instead of a live fetch
