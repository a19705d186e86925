"""HTML rendering of user-weather cards - pure functions for testability."""
from html import escape
from typing import Iterable, Optional
from urllib.parse import urlparse

from user_schemas import get_full_name, get_location_display, safe_validate_user
from user_weather_converter import UserWeatherData
from weather_data import WeatherData

ERROR_CARD = """<div class="user-card">
  <div class="user-card__header user-card__error">
    <div class="user-card__error-icon">&#9888;</div>
    <h2 class="user-card__name">Error</h2>
    <div class="user-card__location">Invalid user data</div>
  </div>
  <div class="user-card__weather">
    <div class="weather-info weather-error">
      <div class="weather-message">Unable to load user data</div>
    </div>
  </div>
</div>"""

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
<main class="user-grid">
{cards}
</main>
</body>
</html>
"""


def is_https_url(url: str) -> bool:
    return urlparse(url).scheme == "https"


def render_weather_info(weather: Optional[WeatherData], unit: str = "C") -> str:
    """
    Render the weather block of a card.

    None renders as "unavailable"; a stale reading gets the cached-data warning.
    """
    if weather is None:
        return ('<div class="weather-info weather-error">'
                '<div class="weather-message">Weather data unavailable</div></div>')

    stale_class = " weather-stale" if weather.stale else ""
    parts = [
        f'<div class="weather-info{stale_class}">',
        f'<div class="weather-temperature">{weather.temperature:g}&deg;{escape(unit)}</div>',
        f'<div class="weather-condition">{escape(weather.condition)}</div>',
        f'<div class="weather-humidity">Humidity: {weather.humidity:g}%</div>',
    ]
    if weather.stale:
        parts.append('<div class="weather-warning">&#9888; Using cached data</div>')
    parts.append("</div>")
    return "".join(parts)


def render_card(data: UserWeatherData, unit: str = "C") -> str:
    checked = safe_validate_user(data.user)
    if not checked.success:
        return ERROR_CARD

    user = checked.value
    name = escape(get_full_name(user))
    if is_https_url(user.picture.large):
        avatar = f'<img src="{escape(user.picture.large)}" alt="Avatar for {name}" class="user-card__avatar">'
    else:
        avatar = '<div class="user-card__avatar user-card__avatar--missing"></div>'

    return (
        '<div class="user-card">\n'
        '  <div class="user-card__header">\n'
        f"    {avatar}\n"
        f'    <h2 class="user-card__name">{name}</h2>\n'
        f'    <div class="user-card__location">{escape(get_location_display(user))}</div>\n'
        "  </div>\n"
        f'  <div class="user-card__weather">{render_weather_info(data.weather, unit)}</div>\n'
        "</div>"
    )


def render_page(items: Iterable[UserWeatherData], title: str = "Users and their weather", unit: str = "C") -> str:
    cards = "\n".join(render_card(item, unit) for item in items)
    return PAGE_TEMPLATE.format(title=escape(title), cards=cards)
