"""Fetch random users, look up the weather where they live and render HTML cards."""
import argparse
import logging
import sys
from typing import List, Optional

from cache_store import CacheStore, JsonFileCacheStore, MemoryCacheStore
from card_renderer import render_page
from config import TEMPERATURE_UNITS, AppConfig, load_config
from errors import ConfigError, FetchError, ValidationError
from geocoding_provider import OpenMeteoGeocoder
from log_setup import setup_logging
from open_meteo_provider import OpenMeteoProvider
from openweather_provider import OpenWeatherProvider
from retry_helper import RetryOptions
from user_service import UserService
from user_weather_converter import UserWeatherConverter
from weather_provider import WeatherProviderBase
from weather_service import WeatherService


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("user-weather")
    parser.add_argument("--count", type=int, help="Number of users to show")
    parser.add_argument("--output", "-o", help="Write the HTML page here instead of stdout")
    parser.add_argument("--cache-file", help="JSON file used as the user cache")
    parser.add_argument("--no-cache", action="store_true", help="Keep the user cache in memory only")
    parser.add_argument("--max-attempts", type=int)
    parser.add_argument("--base-delay", type=float, help="Seconds before the first retry")
    parser.add_argument("--max-delay", type=float, help="Upper bound for retry delays in seconds")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    parser.add_argument("--log-file")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    for arg_name, field_name in (
        ("count", "user_count"),
        ("cache_file", "cache_file"),
        ("max_attempts", "max_attempts"),
        ("base_delay", "base_delay"),
        ("max_delay", "max_delay"),
        ("timeout", "timeout"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            setattr(config, field_name, value)
    if config.user_count < 1:
        raise ConfigError("--count must be at least 1")
    return config


def build_weather_provider(config: AppConfig) -> WeatherProviderBase:
    if config.weather_api_key:
        logging.info("Using OpenWeather provider")
        return OpenWeatherProvider(
            api_key=config.weather_api_key,
            units=config.weather_units,
            lang=config.weather_lang,
            timeout=config.timeout,
        )
    logging.info("Using Open-Meteo provider")
    return OpenMeteoProvider(units=config.weather_units, timeout=config.timeout)


def build_user_service(config: AppConfig, no_cache: bool = False) -> UserService:
    cache: CacheStore = MemoryCacheStore() if no_cache else JsonFileCacheStore(config.cache_file)
    try:
        options = RetryOptions(
            max_attempts=config.max_attempts,
            base_delay=config.base_delay,
            max_delay=config.max_delay,
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid retry settings: {exc}") from exc
    return UserService(cache, options, api_url=config.api_url, timeout=config.timeout)


def build_converter(config: AppConfig) -> UserWeatherConverter:
    weather = WeatherService(build_weather_provider(config), cache_ttl_seconds=config.weather_cache_ttl)
    geocoder = OpenMeteoGeocoder(language=config.weather_lang, timeout=config.timeout)
    return UserWeatherConverter(geocoder, weather)


def write_output(page: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(page)
        logging.info("Wrote %s", output)
    else:
        sys.stdout.write(page)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        config = apply_overrides(load_config(), args)
        service = build_user_service(config, args.no_cache)
    except ConfigError as err:
        logging.error("Configuration error: %s", err)
        return 2

    try:
        users = service.get_users(config.user_count)
    except (FetchError, ValidationError) as err:
        logging.error("Could not load users: %s", err)
        return 1

    results = build_converter(config).convert_all(users)
    write_output(render_page(results, unit=TEMPERATURE_UNITS[config.weather_units]), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
