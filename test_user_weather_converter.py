"""Tests for the user-weather converter."""
import threading
import pytest
from unittest.mock import Mock
from errors import GeocodingError, ValidationError, WeatherProviderError
from geocoding_provider import GeocoderBase, GeocodingResult
from user_schemas import User
from user_weather_converter import UserWeatherConverter, UserWeatherData
from weather_data import WeatherData


def make_user(city, country="Country"):
    return {
        "name": {"first": "Test", "last": city},
        "location": {"city": city, "country": country},
        "picture": {"large": "https://example.com/p.jpg"},
    }


class FakeGeocoder(GeocoderBase):
    """Resolves known cities; anything else raises GeocodingError."""

    def __init__(self, known):
        self.known = known
        self.queries = []
        self._lock = threading.Lock()

    def get_coordinates(self, query):
        with self._lock:
            self.queries.append(query)
        city = query.split(",")[0]
        if city not in self.known:
            raise GeocodingError(f"No coordinates found for '{query}'")
        return self.known[city]


@pytest.fixture
def geocoder():
    return FakeGeocoder({
        "London": GeocodingResult(lat=51.5, lng=-0.12),
        "Paris": GeocodingResult(lat=48.85, lng=2.35),
        "Oslo": GeocodingResult(lat=59.91, lng=10.75),
    })


@pytest.fixture
def weather():
    service = Mock()
    service.get_current_weather.side_effect = lambda lat, lng: WeatherData(
        temperature=lat, condition="Clear sky", humidity=50.0
    )
    return service


@pytest.fixture
def converter(geocoder, weather):
    return UserWeatherConverter(geocoder, weather)


def test_convert_success(converter, geocoder, weather):
    result = converter.convert(make_user("London", "United Kingdom"))

    assert isinstance(result, UserWeatherData)
    assert isinstance(result.user, User)
    assert result.weather.temperature == 51.5
    assert geocoder.queries == ["London, United Kingdom"]
    weather.get_current_weather.assert_called_once_with(51.5, -0.12)


def test_convert_invalid_user_returns_raw_input(converter, geocoder, weather):
    """Test that an invalid user is passed through untouched, without lookups."""
    raw = {"name": {"first": ""}, "location": {"city": "London"}}

    result = converter.convert(raw)

    assert result.user is raw
    assert result.weather is None
    assert geocoder.queries == []
    weather.get_current_weather.assert_not_called()


def test_convert_geocoding_failure(converter, weather):
    result = converter.convert(make_user("Atlantis"))

    assert isinstance(result.user, User)
    assert result.user.location.city == "Atlantis"
    assert result.weather is None
    weather.get_current_weather.assert_not_called()


def test_convert_weather_failure(converter, weather):
    weather.get_current_weather.side_effect = WeatherProviderError("Network error")

    result = converter.convert(make_user("Paris"))

    assert result.user.location.city == "Paris"
    assert result.weather is None
    # Single attempt, no retry
    assert weather.get_current_weather.call_count == 1


def test_convert_unexpected_error_does_not_raise(converter, weather):
    weather.get_current_weather.side_effect = KeyError("surprise")

    result = converter.convert(make_user("Paris"))

    assert result.weather is None
    assert isinstance(result.user, User)


def test_convert_passes_stale_weather_through(converter, weather):
    stale = WeatherData(temperature=3.0, condition="Fog", humidity=99.0, stale=True)
    weather.get_current_weather.side_effect = None
    weather.get_current_weather.return_value = stale

    assert converter.convert(make_user("Oslo")).weather is stale


def test_convert_all_partial_failure_keeps_order(converter):
    """Test that one failed geocode leaves a None at its index and nothing else."""
    results = converter.convert_all([make_user("London"), make_user("Atlantis"), make_user("Paris")])

    assert len(results) == 3
    assert [r.user.location.city for r in results] == ["London", "Atlantis", "Paris"]
    assert results[0].weather.temperature == 51.5
    assert results[1].weather is None
    assert results[2].weather.temperature == 48.85


def test_convert_all_order_independent_of_completion(geocoder, weather):
    """The first user finishes last; results still follow the input order."""
    release = threading.Event()

    def slow_weather(lat, lng):
        if lat == 51.5:
            release.wait(timeout=5)
        else:
            release.set()
        return WeatherData(temperature=lat, condition="Clear sky", humidity=1.0)

    weather.get_current_weather.side_effect = slow_weather
    converter = UserWeatherConverter(geocoder, weather, max_workers=4)

    results = converter.convert_all([make_user("London"), make_user("Paris")])

    assert [r.weather.temperature for r in results] == [51.5, 48.85]


@pytest.mark.parametrize("users", [[], None, "users", {"results": []}])
def test_convert_all_rejects_bad_list(converter, geocoder, users):
    with pytest.raises(ValidationError):
        converter.convert_all(users)
    assert geocoder.queries == []


def test_convert_all_invalid_element_aborts_batch(converter, geocoder):
    with pytest.raises(ValidationError):
        converter.convert_all([make_user("London"), {"name": {}}])
    assert geocoder.queries == []


def test_safe_convert(converter):
    ok = converter.safe_convert(make_user("London"))
    assert ok.success is True
    assert ok.value.weather is not None

    failed = converter.safe_convert({"name": {"first": "x"}})
    assert failed.success is False
    assert "User validation failed" in failed.error
