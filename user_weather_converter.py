"""Combine users with the current weather at their location."""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from errors import GeocodingError, ValidationError, WeatherProviderError
from geocoding_provider import GeocoderBase
from log_setup import log_success
from user_schemas import (
    User,
    ValidationResult,
    get_full_name,
    get_location_query,
    safe_validate_user,
    validate_user,
    validate_users,
)
from weather_data import WeatherData
from weather_service import WeatherService


@dataclass
class UserWeatherData:
    """
    A user paired with the weather at their location.

    ``weather`` is None exactly when conversion could not complete. ``user``
    is the validated User, or the caller's raw input when it failed validation.
    """
    user: Union[User, Any]
    weather: Optional[WeatherData]


class UserWeatherConverter:
    """
    Turns users into ``UserWeatherData``.

    ``convert`` never raises: a failed validation, geocoding or weather lookup
    degrades to ``weather=None``. Geocoding and weather lookups are made once,
    without retry.
    """

    def __init__(
        self,
        geocoder: GeocoderBase,
        weather: WeatherService,
        max_workers: int = 8,
        logger: Optional[logging.Logger] = None,
    ):
        self.geocoder = geocoder
        self.weather = weather
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)

    def convert(self, user: Any) -> UserWeatherData:
        try:
            validated = validate_user(user)
        except ValidationError as e:
            self.logger.error(f"User validation failed during conversion: {e}")
            return UserWeatherData(user=user, weather=None)

        name = get_full_name(validated)
        try:
            query = get_location_query(validated)
            self.logger.debug(f"Getting coordinates for {name}: {query}")
            coords = self.geocoder.get_coordinates(query)

            self.logger.debug(f"Fetching weather for {name} at {coords.lat}, {coords.lng}")
            weather = self.weather.get_current_weather(coords.lat, coords.lng)
        except (GeocodingError, WeatherProviderError, ValidationError) as e:
            self.logger.warning(f"Weather unavailable for {name} ({e.kind.value}): {e}")
            return UserWeatherData(user=validated, weather=None)
        except Exception:
            self.logger.exception(f"Unexpected error converting {name}")
            return UserWeatherData(user=validated, weather=None)

        log_success(self.logger, f"Converted user data for {name}")
        return UserWeatherData(user=validated, weather=weather)

    def convert_all(self, users: Any) -> List[UserWeatherData]:
        """
        Convert a list of users concurrently; results keep the input order.

        Raises:
            ValidationError: If ``users`` is not a non-empty list of valid users.
                Per-user lookup failures never raise.
        """
        try:
            validated = validate_users(users)
        except ValidationError as e:
            self.logger.error(f"Users list validation failed: {e}")
            raise

        self.logger.info(f"Converting {len(validated)} users to user-weather data")
        workers = max(1, min(self.max_workers, len(validated)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="convert") as pool:
            results = list(pool.map(self.convert, validated))

        succeeded = sum(1 for result in results if result.weather is not None)
        self.logger.info(f"Conversion summary: {succeeded} successful, {len(results) - succeeded} failed")
        return results

    def safe_convert(self, raw: Any) -> ValidationResult[UserWeatherData]:
        """Like ``convert`` but reports an invalid user as a failed result instead of a raw passthrough."""
        checked = safe_validate_user(raw)
        if not checked.success:
            return ValidationResult.fail(checked.issues, checked.subject)
        return ValidationResult.ok(self.convert(checked.value))
