"""OpenWeather Current Weather API provider implementation."""
import json
import logging

from api_helper import fetch_json
from errors import FetchError
from weather_data import WeatherData
from weather_provider import WeatherProviderBase, WeatherProviderError


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using OpenWeather Current Weather API.

    Uses the free Current Weather API: https://openweathermap.org/current
    Requires an API key; see ``OpenMeteoProvider`` for a keyless alternative.
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5/weather"

    def __init__(
        self,
        api_key: str,
        units: str = "metric",
        lang: str = "en",
        timeout: int = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            units: Temperature units ("metric", "imperial", or "standard")
            lang: Language code for descriptions (e.g., "en", "de")
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.units = units
        self.lang = lang
        self.timeout = timeout

    def get_current(self, lat: float, lon: float) -> WeatherData:
        """
        Fetch current weather from OpenWeather Current Weather API.

        Raises:
            WeatherProviderError: If the API request fails or the body is malformed
        """
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": self.units,
            "lang": self.lang,
        }

        logging.info(f"Making OpenWeather API request for {lat}, {lon}")
        try:
            data = fetch_json(
                self.BASE_URL,
                params=params,
                error_message="OpenWeather API request failed",
                timeout=self.timeout,
            )
        except FetchError as e:
            raise WeatherProviderError(self._describe_error(e)) from e

        try:
            weather_array = data.get("weather", [])
            if not weather_array:
                logging.error("Response missing 'weather' array")
                raise WeatherProviderError("Response missing 'weather' array")
            weather = weather_array[0]

            main_data = data.get("main", {})
            if not main_data or "temp" not in main_data:
                raise WeatherProviderError("Response missing 'main' block")

            description = weather.get("description") or weather.get("main") or "Unknown"
            weather_data = WeatherData(
                temperature=float(main_data["temp"]),
                condition=description.capitalize(),
                humidity=float(main_data.get("humidity", 0.0)),
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}") from e

        logging.info(f"Parsed weather data: {weather_data.temperature}, {weather_data.condition}")
        return weather_data

    @staticmethod
    def _describe_error(error: FetchError) -> str:
        """Turn a failed fetch into a message, using OpenWeather's error body when present."""
        if error.status_code is None:
            return f"Network error: {error}"
        if error.body is None:
            return f"Failed to parse response: {error}"

        try:
            error_data = json.loads(error.body)
        except ValueError:
            error_data = None
        if not isinstance(error_data, dict):
            # Not a JSON object, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {error.status_code}")
            return f"HTTP {error.status_code}: {error.body[:200]}"

        logging.error(f"OpenWeather API error response: {error_data}")
        cod = error_data.get("cod", error.status_code)
        message = error_data.get("message", "Unknown error")
        parameters = error_data.get("parameters", [])

        error_msg = f"OpenWeather API error {cod}: {message}"
        if parameters:
            error_msg += f" (parameters: {', '.join(parameters)})"
        return error_msg
