"""Open-Meteo forecast API provider (no API key required)."""
import logging
from typing import Any, Dict

from api_helper import fetch_json
from errors import FetchError
from weather_data import WeatherData
from weather_provider import WeatherProviderBase, WeatherProviderError

# WMO weather interpretation codes, https://open-meteo.com/en/docs
WMO_CONDITIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def condition_from_code(code: Any) -> str:
    try:
        return WMO_CONDITIONS.get(int(code), "Unknown")
    except (TypeError, ValueError):
        return "Unknown"


class OpenMeteoProvider(WeatherProviderBase):
    """Weather provider using the Open-Meteo ``current`` block."""

    BASE_URL = "https://api.open-meteo.com/v1/forecast"

    def __init__(self, units: str = "metric", timeout: int = 10):
        self.units = units
        self.timeout = timeout

    def _params(self, lat: float, lon: float) -> Dict[str, Any]:
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": "temperature_2m,relative_humidity_2m,weather_code",
            "timezone": "auto",
        }
        if self.units == "imperial":
            params["temperature_unit"] = "fahrenheit"
        return params

    def get_current(self, lat: float, lon: float) -> WeatherData:
        try:
            data = fetch_json(
                self.BASE_URL,
                params=self._params(lat, lon),
                error_message="Failed to fetch weather from Open-Meteo",
                timeout=self.timeout,
            )
        except FetchError as e:
            raise WeatherProviderError(str(e)) from e

        current = data.get("current") if isinstance(data, dict) else None
        if not current:
            logging.error("Open-Meteo response missing 'current' block")
            raise WeatherProviderError("Response missing 'current' block")

        try:
            weather = WeatherData(
                temperature=float(current["temperature_2m"]),
                condition=condition_from_code(current.get("weather_code")),
                humidity=float(current["relative_humidity_2m"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            logging.error(f"Failed to parse Open-Meteo response: {e}")
            raise WeatherProviderError(f"Failed to parse response: {e}") from e

        logging.debug(f"Open-Meteo weather at {lat}, {lon}: {weather}")
        return weather
