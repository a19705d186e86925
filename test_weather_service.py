"""Tests for weather service."""
import pytest
from weather_service import WeatherService
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_data import WeatherData


class MockProvider(WeatherProviderBase):
    """Mock weather provider for testing."""

    def __init__(self, return_data=None, raise_error=None):
        self.return_data = return_data
        self.raise_error = raise_error
        self.calls = []

    @property
    def call_count(self):
        return len(self.calls)

    def get_current(self, lat, lon):
        self.calls.append((lat, lon))
        if self.raise_error:
            raise self.raise_error
        return self.return_data


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def sample_weather():
    """Sample weather data."""
    return WeatherData(temperature=20.0, condition="Clear sky", humidity=60.0)


def test_weather_service_caching(sample_weather):
    """Test that service caches results per coordinate."""
    provider = MockProvider(return_data=sample_weather)
    service = WeatherService(provider, cache_ttl_seconds=60, clock=FakeClock())

    result1 = service.get_current_weather(51.5, -0.12)
    assert provider.call_count == 1
    assert result1.temperature == 20.0
    assert result1.stale is False

    # Second call within TTL should use cache
    result2 = service.get_current_weather(51.5, -0.12)
    assert provider.call_count == 1
    assert result2 == result1


def test_weather_service_separate_coordinates(sample_weather):
    provider = MockProvider(return_data=sample_weather)
    service = WeatherService(provider, clock=FakeClock())

    service.get_current_weather(51.5, -0.12)
    service.get_current_weather(48.85, 2.35)

    assert provider.calls == [(51.5, -0.12), (48.85, 2.35)]


def test_weather_service_cache_expiry(sample_weather):
    """Test that cache expires after TTL."""
    clock = FakeClock()
    provider = MockProvider(return_data=sample_weather)
    service = WeatherService(provider, cache_ttl_seconds=1, clock=clock)

    service.get_current_weather(1.0, 2.0)
    clock.now += 1.1
    service.get_current_weather(1.0, 2.0)

    assert provider.call_count == 2


def test_weather_service_fallback_to_stale_cache(sample_weather):
    """Test that service falls back to the old reading, flagged stale, on failure."""
    clock = FakeClock()
    provider = MockProvider(return_data=sample_weather)
    service = WeatherService(provider, cache_ttl_seconds=1, clock=clock)

    assert service.get_current_weather(1.0, 2.0).stale is False

    provider.raise_error = WeatherProviderError("Network error")
    clock.now += 5

    result = service.get_current_weather(1.0, 2.0)
    assert result.temperature == 20.0
    assert result.stale is True


def test_weather_service_recovers_after_stale(sample_weather):
    clock = FakeClock()
    provider = MockProvider(return_data=sample_weather)
    service = WeatherService(provider, cache_ttl_seconds=1, clock=clock)
    service.get_current_weather(1.0, 2.0)

    provider.raise_error = WeatherProviderError("down")
    clock.now += 5
    assert service.get_current_weather(1.0, 2.0).stale is True

    provider.raise_error = None
    assert service.get_current_weather(1.0, 2.0).stale is False


def test_weather_service_no_cache_on_first_failure():
    """Test that service raises error if no cache exists."""
    provider = MockProvider(raise_error=WeatherProviderError("Network error"))
    service = WeatherService(provider)

    with pytest.raises(WeatherProviderError):
        service.get_current_weather(1.0, 2.0)

    # Single attempt, no retry inside the service
    assert provider.call_count == 1


def test_weather_service_clears_provider_stale_flag(sample_weather):
    provider = MockProvider(return_data=WeatherData(temperature=1.0, condition="x", humidity=2.0, stale=True))
    service = WeatherService(provider)

    assert service.get_current_weather(1.0, 2.0).stale is False


def test_weather_service_clear(sample_weather):
    provider = MockProvider(return_data=sample_weather)
    service = WeatherService(provider, clock=FakeClock())
    service.get_current_weather(1.0, 2.0)

    service.clear()
    service.get_current_weather(1.0, 2.0)

    assert provider.call_count == 2
