"""Bounded exponential-backoff retry for a single operation."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryOptions:
    """Retry budget. Delays are in seconds."""
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 5.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Delay after failed attempt ``attempt`` (1-based)."""
        return min(self.base_delay * 2 ** (attempt - 1), self.max_delay)


def retry(
    operation: Callable[[], T],
    options: RetryOptions,
    label: str,
    sleep: Callable[[float], None] = time.sleep,
    logger: Optional[logging.Logger] = None,
) -> T:
    """
    Call ``operation`` until it succeeds or ``options.max_attempts`` is used up.

    Every exception is retried regardless of its kind. After the final attempt
    the last exception is re-raised unchanged.

    Args:
        operation: Zero-argument callable to run
        options: Attempt budget and backoff bounds
        label: Human-readable name used in log messages
        sleep: Called with the backoff delay between attempts
        logger: Logger to report attempts to

    Returns:
        Whatever ``operation`` returned on its first successful attempt
    """
    log = logger or _logger
    for attempt in range(1, options.max_attempts + 1):
        try:
            log.debug("%s attempt %s/%s", label, attempt, options.max_attempts)
            return operation()
        except Exception as exc:
            if attempt == options.max_attempts:
                log.error("%s failed after %s attempts: %s", label, options.max_attempts, exc)
                raise
            delay = options.delay_for(attempt)
            log.warning("%s attempt %s failed, retrying in %.2fs: %s", label, attempt, delay, exc)
            sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover
