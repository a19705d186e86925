"""User service: validated user lists from cache or the random-user API."""
import logging
import time
from typing import Callable, List, Optional

from api_helper import DEFAULT_TIMEOUT, fetch_json
from cache_store import CACHE_KEYS, CacheStore
from config import DEFAULT_API_URL, DEFAULT_USER_COUNT
from log_setup import log_success
from retry_helper import RetryOptions, retry
from user_schemas import User, safe_validate_users, validate_api_response

USER_FIELDS = "name,location,picture"


class UserService:
    """
    Produces validated users, preferring the cache.

    Cache policy:

    - a cached list that fails validation is removed and treated as a miss;
    - the cache is cleared before every network fetch, so a failed fetch
      leaves no cache behind rather than silently serving old data later;
    - the cache is written only with users that passed validation.
    """

    def __init__(
        self,
        cache: CacheStore,
        retry_options: Optional[RetryOptions] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.cache = cache
        self.retry_options = retry_options or RetryOptions()
        self.api_url = api_url
        self.timeout = timeout
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

    def get_cached_users(self) -> Optional[List[User]]:
        """Return the validated cached users, or None on a miss or a corrupt entry."""
        raw = self.cache.get(CACHE_KEYS.USERS)
        if raw is None:
            return None

        result = safe_validate_users(raw)
        if not result.success:
            self.logger.warning(f"Discarding invalid cached users: {result.error}")
            self.cache.remove(CACHE_KEYS.USERS)
            return None

        self.logger.info(f"Found {len(result.value)} cached users")
        return result.value

    def fetch_fresh_users(self, count: int = DEFAULT_USER_COUNT) -> List[User]:
        """
        Fetch ``count`` users from the API, with retry, and cache them.

        Raises:
            FetchError: If the last attempt failed at the HTTP level
            ValidationError: If the last attempt returned an invalid payload
        """
        self.cache.remove(CACHE_KEYS.USERS)

        def attempt() -> List[User]:
            raw = fetch_json(
                self.api_url,
                params={"results": count, "inc": USER_FIELDS},
                error_message="Failed to fetch users from API",
                timeout=self.timeout,
            )
            return validate_api_response(raw).results

        users = retry(attempt, self.retry_options, "User API with validation",
                      sleep=self.sleep, logger=self.logger)

        self.cache.set(CACHE_KEYS.USERS, [user.model_dump() for user in users])
        log_success(self.logger, f"Fetched and validated {len(users)} fresh users")
        return users

    def get_users(self, count: int = DEFAULT_USER_COUNT) -> List[User]:
        """Return ``count`` users from the cache when it holds enough, else from the API."""
        if count < 1:
            raise ValueError("count must be at least 1")
        self.logger.info(f"Attempting to get {count} users...")

        cached = self.get_cached_users()
        if cached is not None and len(cached) >= count:
            self.logger.info(f"Using {count} of {len(cached)} cached users")
            return cached[:count]

        self.logger.info("Cache insufficient, fetching fresh users from API")
        return self.fetch_fresh_users(count)
