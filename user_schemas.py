"""User schema: validation of untrusted user payloads (API responses and cache reads).

Every public validator comes in two forms:

- ``safe_validate_*`` never raises and returns a ``ValidationResult``.
- ``validate_*`` is ``safe_validate_*(...).unwrap()`` and raises
  ``errors.ValidationError`` carrying the failed field paths.

Validation is all-or-nothing: a ``User`` is only ever produced from input that
satisfies every constraint. String fields are trimmed before the non-empty check.
"""
from dataclasses import dataclass, field
from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    Field,
    Strict,
    StringConstraints,
    TypeAdapter,
)
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError, ValidationIssue, format_issues

T = TypeVar("T")

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _check_absolute_url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Picture URL must be a valid URL") from None
    return value


NonEmptyStr = Annotated[str, Strict(), StringConstraints(strip_whitespace=True, min_length=1)]
UrlStr = Annotated[str, Strict(), StringConstraints(strip_whitespace=True, min_length=1), AfterValidator(_check_absolute_url)]


class UserName(BaseModel):
    first: NonEmptyStr
    last: NonEmptyStr


class UserLocation(BaseModel):
    city: NonEmptyStr
    country: NonEmptyStr


class UserPicture(BaseModel):
    large: UrlStr


class User(BaseModel):
    """A validated user. Extra fields sent by the API are dropped."""
    name: UserName
    location: UserLocation
    picture: UserPicture


class ApiInfo(BaseModel):
    seed: Optional[str] = None
    results: Optional[int] = None
    page: Optional[int] = None
    version: Optional[str] = None


class ApiResponse(BaseModel):
    results: List[User] = Field(min_length=1)
    info: Optional[ApiInfo] = None


_USER_ADAPTER = TypeAdapter(User)
_USERS_ADAPTER = TypeAdapter(Annotated[List[User], Field(min_length=1)])
_API_RESPONSE_ADAPTER = TypeAdapter(ApiResponse)


@dataclass
class ValidationResult(Generic[T]):
    """Tagged outcome of a validation: either a value or the list of issues."""
    success: bool
    value: Optional[T] = None
    issues: List[ValidationIssue] = field(default_factory=list)
    subject: str = "Data"

    @property
    def error(self) -> Optional[str]:
        if self.success:
            return None
        return f"{self.subject} validation failed: {format_issues(self.issues)}"

    def unwrap(self) -> T:
        if not self.success:
            raise ValidationError(self.issues, self.subject)
        return self.value

    @classmethod
    def ok(cls, value: T) -> "ValidationResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, issues: List[ValidationIssue], subject: str = "Data") -> "ValidationResult[T]":
        return cls(success=False, issues=list(issues), subject=subject)


def issues_from_pydantic(exc: PydanticValidationError) -> List[ValidationIssue]:
    """Flatten pydantic's error list into (dotted path, message) pairs."""
    return [
        ValidationIssue(".".join(str(part) for part in err["loc"]), err["msg"])
        for err in exc.errors()
    ]


def _safe_validate(adapter: TypeAdapter, data: Any, subject: str) -> ValidationResult:
    try:
        return ValidationResult.ok(adapter.validate_python(data))
    except PydanticValidationError as exc:
        return ValidationResult.fail(issues_from_pydantic(exc), subject)


def safe_validate_user(data: Any) -> ValidationResult[User]:
    return _safe_validate(_USER_ADAPTER, data, "User")


def safe_validate_users(data: Any) -> ValidationResult[List[User]]:
    """Validate a bare, non-empty list of users (the shape stored in the cache)."""
    return _safe_validate(_USERS_ADAPTER, data, "Users")


def safe_validate_api_response(data: Any) -> ValidationResult[ApiResponse]:
    return _safe_validate(_API_RESPONSE_ADAPTER, data, "API response")


def validate_user(data: Any) -> User:
    return safe_validate_user(data).unwrap()


def validate_users(data: Any) -> List[User]:
    return safe_validate_users(data).unwrap()


def validate_api_response(data: Any) -> ApiResponse:
    return safe_validate_api_response(data).unwrap()


def get_full_name(user: User) -> str:
    return f"{user.name.first} {user.name.last}"


def get_location_display(user: User) -> str:
    return f"{user.location.city}, {user.location.country}"


def get_location_query(user: User) -> str:
    """Free-text query handed to the geocoder."""
    return f"{user.location.city}, {user.location.country}"
