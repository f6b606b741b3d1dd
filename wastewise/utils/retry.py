"""
Retry policy for calls to unreliable collaborators
Sequential attempts with a pluggable backoff and retryable-error predicate
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

BackoffFn = Callable[[int, BaseException], float]
RetryablePredicate = Callable[[BaseException], bool]


def exponential_backoff(base_delay: float = 1.0) -> BackoffFn:
    """Backoff doubling on each attempt: base, 2*base, 4*base..."""
    def backoff(attempt: int, error: BaseException) -> float:
        return base_delay * (2 ** attempt)
    return backoff


def always_retry(error: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """
    Generic retry-with-backoff wrapper

    Args:
        max_attempts: Total number of attempts, including the first one
        backoff: Maps (zero-based attempt index, error) to a delay in seconds
        retryable: Decides whether an error is worth another attempt
        sleep: Delay function, replaceable in tests
    """
    max_attempts: int = 3
    backoff: BackoffFn = exponential_backoff()
    retryable: RetryablePredicate = always_retry
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run func until it succeeds, a non-retryable error occurs or attempts run out

        Returns:
            Whatever func returns

        Raises:
            The last error raised by func, unchanged
        """
        for attempt in range(self.max_attempts):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Attempt {attempt + 1}/{self.max_attempts} failed: {e}")

                if not self.retryable(e) or attempt == self.max_attempts - 1:
                    raise

                delay = self.backoff(attempt, e)
                logger.warning(f"Retrying in {delay:.1f}s ({attempt + 1}/{self.max_attempts})")
                self.sleep(delay)

        raise AssertionError("retry loop exited without result")
