"""Integration tests - hit the real public APIs (disabled by default)."""
import os
import pytest
from cache_store import MemoryCacheStore
from geocoding_provider import OpenMeteoGeocoder
from open_meteo_provider import OpenMeteoProvider
from retry_helper import RetryOptions
from user_service import UserService
from user_weather_converter import UserWeatherConverter
from weather_service import WeatherService

live = pytest.mark.skipif(
    not os.environ.get("RUN_LIVE_TESTS"),
    reason="RUN_LIVE_TESTS not set - skipping integration test"
)


@live
def test_random_user_api_integration():
    service = UserService(MemoryCacheStore(), RetryOptions(max_attempts=2, base_delay=0.5))

    users = service.get_users(3)

    assert len(users) == 3
    # Second call should use cache
    assert service.get_users(2) == users[:2]


@live
def test_user_weather_integration():
    """End to end: fetch users and attach weather from Open-Meteo."""
    users = UserService(MemoryCacheStore()).get_users(2)
    converter = UserWeatherConverter(OpenMeteoGeocoder(), WeatherService(OpenMeteoProvider()))

    results = converter.convert_all(users)

    assert len(results) == 2
    assert all(result.user is not None for result in results)
