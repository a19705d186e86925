"""Weather service with per-coordinate caching and stale fallback."""
import dataclasses
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from weather_data import WeatherData
from weather_provider import WeatherProviderBase, WeatherProviderError

CoordKey = Tuple[float, float]


class WeatherService:
    """
    Service that wraps a weather provider with caching.

    Prevents hammering the API by caching results per coordinate and only
    fetching new data when the cached reading is older than the TTL
    (default: 10 minutes). When the provider fails, the last reading for the
    coordinate is returned with ``stale=True``.

    Each call makes at most one provider request; retrying is left to callers.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache_ttl_seconds: int = 600,  # 10 minutes default
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            cache_ttl_seconds: How long to cache results before fetching new data
            clock: Source of the current time in seconds
            logger: Logger to report to (defaults to this module's logger)
        """
        self.provider = provider
        self.cache_ttl_seconds = cache_ttl_seconds
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

        self._cache: Dict[CoordKey, Tuple[WeatherData, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(lat: float, lng: float) -> CoordKey:
        # ~11 m resolution; nearby geocoder results share a cache slot
        return (round(lat, 4), round(lng, 4))

    def get_current_weather(self, lat: float, lng: float) -> WeatherData:
        """
        Get current weather for a coordinate, using cache if still fresh.

        Returns:
            WeatherData: live or cached reading; ``stale`` is True only when a
            fetch failed and an older reading was served instead

        Raises:
            WeatherProviderError: If the provider fails and nothing is cached
        """
        key = self._key(lat, lng)
        now = self.clock()

        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            data, fetched_at = cached
            cache_age = now - fetched_at
            if cache_age < self.cache_ttl_seconds:
                self.logger.debug(f"Using cached weather for {key} (age: {cache_age:.1f}s)")
                return data
            self.logger.info(f"Cache expired for {key} (age: {cache_age:.1f}s > TTL: {self.cache_ttl_seconds}s)")

        try:
            new_data = self.provider.get_current(lat, lng)
        except WeatherProviderError as e:
            if cached is None:
                self.logger.error(f"Weather fetch failed for {key}, no cache available: {e}")
                raise
            cache_age = now - cached[1]
            self.logger.warning(f"Weather fetch failed for {key}, using stale cache (age: {cache_age:.1f}s): {e}")
            return dataclasses.replace(cached[0], stale=True)

        new_data = dataclasses.replace(new_data, stale=False)
        with self._lock:
            self._cache[key] = (new_data, now)
        self.logger.info(f"Weather fetch successful for {key}: {new_data.temperature}, {new_data.condition}")
        return new_data

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
