"""Resolve a free-text "City, Country" query to coordinates."""
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from api_helper import fetch_json
from errors import FetchError, GeocodingError


@dataclass(frozen=True)
class GeocodingResult:
    lat: float
    lng: float


class GeocoderBase(ABC):
    """Abstract base class for geocoding providers."""

    @abstractmethod
    def get_coordinates(self, query: str) -> GeocodingResult:
        """
        Resolve ``query`` to coordinates.

        Raises:
            GeocodingError: If the query cannot be resolved or the provider fails
        """
        pass


class _Place(BaseModel):
    name: str
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    country: Optional[str] = None
    country_code: Optional[str] = None


class _SearchResponse(BaseModel):
    results: List[_Place] = Field(default_factory=list)


def split_query(query: str) -> Tuple[str, Optional[str]]:
    """Split "City, Country" into its parts. The country part is optional."""
    city, sep, country = query.partition(",")
    return city.strip(), (country.strip() or None) if sep else None


class OpenMeteoGeocoder(GeocoderBase):
    """
    Geocoder backed by the Open-Meteo Geocoding API.

    The API searches by place name only, so the city part of the query is
    sent and the country part is used to pick among the candidates. Resolved
    queries are cached in memory for the lifetime of the instance.
    """

    BASE_URL = "https://geocoding-api.open-meteo.com/v1/search"

    def __init__(
        self,
        candidates: int = 10,
        language: str = "en",
        timeout: int = 10,
        logger: Optional[logging.Logger] = None,
    ):
        self.candidates = candidates
        self.language = language
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._cache: Dict[str, GeocodingResult] = {}
        self._lock = threading.Lock()

    def get_coordinates(self, query: str) -> GeocodingResult:
        normalized = " ".join(query.split()).lower()
        with self._lock:
            cached = self._cache.get(normalized)
        if cached is not None:
            self.logger.debug(f"Geocoding cache hit for '{query}'")
            return cached

        city, country = split_query(query)
        if not city:
            raise GeocodingError(f"Empty location query: '{query}'")

        params = {"name": city, "count": self.candidates, "language": self.language, "format": "json"}
        try:
            raw = fetch_json(self.BASE_URL, params=params,
                             error_message="Geocoding request failed", timeout=self.timeout)
        except FetchError as e:
            raise GeocodingError(str(e)) from e

        if isinstance(raw, dict) and raw.get("error"):
            raise GeocodingError(raw.get("reason", "Geocoding API error"))
        try:
            response = _SearchResponse.model_validate(raw)
        except PydanticValidationError as e:
            raise GeocodingError(f"Malformed geocoding response for '{query}': {e.error_count()} error(s)") from e

        place = self._pick(response.results, country)
        if place is None:
            raise GeocodingError(f"No coordinates found for '{query}'")

        result = GeocodingResult(lat=place.latitude, lng=place.longitude)
        with self._lock:
            self._cache[normalized] = result
        self.logger.info(f"Location: {place.name}, {place.country} -> {result.lat}, {result.lng}")
        return result

    @staticmethod
    def _pick(places: List[_Place], country: Optional[str]) -> Optional[_Place]:
        if not places:
            return None
        if country:
            wanted = country.lower()
            for place in places:
                if wanted in ((place.country or "").lower(), (place.country_code or "").lower()):
                    return place
        return places[0]
