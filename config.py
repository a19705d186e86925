"""Runtime configuration loaded from the environment (and a local .env file)."""
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from errors import ConfigError

T = TypeVar("T")

DEFAULT_API_URL = "https://randomuser.me/api/"
DEFAULT_USER_COUNT = 6
TEMPERATURE_UNITS = {"metric": "C", "imperial": "F"}


@dataclass
class AppConfig:
    api_url: str = DEFAULT_API_URL
    user_count: int = DEFAULT_USER_COUNT
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 5.0
    timeout: float = 10.0
    weather_cache_ttl: int = 600
    weather_api_key: Optional[str] = None
    weather_units: str = "metric"
    weather_lang: str = "en"
    cache_file: str = ".user_cache.json"


def _env(name: str, cast: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc


def load_config(dotenv_path: Optional[str] = None) -> AppConfig:
    """Build an AppConfig from environment variables, reading ``.env`` first."""
    load_dotenv(dotenv_path)
    config = AppConfig(
        api_url=_env("RANDOM_USER_API_URL", str, DEFAULT_API_URL),
        user_count=_env("USER_COUNT", int, DEFAULT_USER_COUNT),
        max_attempts=_env("RETRY_MAX_ATTEMPTS", int, 3),
        base_delay=_env("RETRY_BASE_DELAY", float, 1.0),
        max_delay=_env("RETRY_MAX_DELAY", float, 5.0),
        timeout=_env("HTTP_TIMEOUT", float, 10.0),
        weather_cache_ttl=_env("WEATHER_CACHE_TTL", int, 600),
        weather_api_key=os.getenv("WEATHER_API_KEY") or None,
        weather_units=_env("WEATHER_UNITS", str, "metric"),
        weather_lang=_env("WEATHER_LANG", str, "en"),
        cache_file=_env("CACHE_FILE", str, ".user_cache.json"),
    )
    if config.user_count < 1:
        raise ConfigError("USER_COUNT must be at least 1")
    if config.weather_units not in TEMPERATURE_UNITS:
        raise ConfigError(f"Unsupported WEATHER_UNITS: {config.weather_units}")
    logging.info("Configuration loaded: api=%s count=%s units=%s",
                 config.api_url, config.user_count, config.weather_units)
    return config
