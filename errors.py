"""Error taxonomy shared by every component.

Each failure raised by this project belongs to exactly one ErrorKind so catch
sites can dispatch on the kind instead of on a library's exception type.
"""
from enum import Enum
from typing import List, NamedTuple, Optional


class ErrorKind(Enum):
    VALIDATION = "validation"
    FETCH = "fetch"
    GEOCODING = "geocoding"
    WEATHER = "weather"
    CONFIG = "config"


class UserWeatherError(Exception):
    """Base class for all errors raised by the user-weather components."""
    kind: ErrorKind


class ValidationIssue(NamedTuple):
    """One failed schema constraint: dotted field path plus message."""
    path: str
    message: str


class ValidationError(UserWeatherError):
    """Untrusted input did not satisfy the schema."""
    kind = ErrorKind.VALIDATION

    def __init__(self, issues: List[ValidationIssue], subject: str = "Data"):
        self.issues = list(issues)
        self.subject = subject
        super().__init__(f"{subject} validation failed: {format_issues(self.issues)}")


class FetchError(UserWeatherError):
    """HTTP request failed: transport error, non-2xx status or undecodable body.

    ``body`` holds the response text of a non-2xx answer, for providers that
    put error details there.
    """
    kind = ErrorKind.FETCH

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(message)


class GeocodingError(UserWeatherError):
    """A location query could not be resolved to coordinates."""
    kind = ErrorKind.GEOCODING


class WeatherProviderError(UserWeatherError):
    """Exception raised when a weather provider fails."""
    kind = ErrorKind.WEATHER


class ConfigError(UserWeatherError):
    """Invalid or missing configuration value."""
    kind = ErrorKind.CONFIG


def format_issues(issues: List[ValidationIssue]) -> str:
    if not issues:
        return "unknown error"
    return "; ".join(f"{issue.path or '<root>'}: {issue.message}" for issue in issues)
