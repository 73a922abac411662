"""Retry wrapper for rate-limited generative calls.

Retries an async operation with exponential backoff plus jitter while its
failures are classified as rate limiting; any other failure propagates on
first occurrence.
"""

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from chronicle_cache.entities import RetryPolicy
from chronicle_cache.errors import RateLimitedError, RetryDeadlineExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_STATUS = 429
RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "rate limit", "ratelimit", "quota")


def is_rate_limited(error: BaseException) -> bool:
    """Default classification predicate for retryable failures.

    Recognizes ``RateLimitedError``, errors carrying a 429 ``code`` or
    ``status_code`` or a ``RESOURCE_EXHAUSTED`` status (google-genai
    ``APIError``, httpx and FastAPI style errors), and messages that
    mention one of the known rate limit markers.
    """
    if isinstance(error, RateLimitedError):
        return True

    for attr in ("code", "status_code"):
        if getattr(error, attr, None) == RATE_LIMIT_STATUS:
            return True

    status = getattr(error, "status", None)
    if isinstance(status, str) and status.upper() == "RESOURCE_EXHAUSTED":
        return True

    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class RetryingInvoker:
    """Executes async operations under a RetryPolicy.

    The classification predicate, sleep, random source and clock are all
    injectable so tests can run without real delays.

    Example:
        ```python
        invoker = RetryingInvoker(RetryPolicy(max_attempts=4))
        text = await invoker.invoke_with_retry(
            lambda: provider.generate_text(prompt)
        )
        ```
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        is_retryable: Callable[[BaseException], bool] = is_rate_limited,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        random_source: Callable[[float, float], float] = random.uniform,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the invoker.

        Args:
            policy: Backoff configuration. Defaults to RetryPolicy().
            is_retryable: Returns True for failures worth retrying.
            sleep: Coroutine function that waits a number of seconds.
            random_source: Returns a uniform random float in [a, b].
            clock: Monotonic clock in seconds, used for deadlines.
        """
        self._policy = policy or RetryPolicy()
        self._is_retryable = is_retryable
        self._sleep = sleep
        self._random = random_source
        self._clock = clock

    @classmethod
    def create(cls, settings) -> "RetryingInvoker":
        """Factory method building the policy from application settings."""
        return cls(policy=RetryPolicy.from_settings(settings))

    def next_delay_s(self, attempt_index: int) -> float:
        """Backoff in seconds after the failure of ``attempt_index``, jitter included."""
        jitter = self._random(0.0, self._policy.jitter_ms) if self._policy.jitter_ms else 0.0
        return self._policy.backoff_ms(attempt_index, jitter) / 1000

    async def invoke_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        deadline_s: float | None = None,
    ) -> T:
        """Run ``operation`` until it succeeds or may not be retried.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            deadline_s: Optional overall budget in seconds; a backoff that
                would overrun it stops the retries

        Returns:
            The first successful result

        Raises:
            RetryDeadlineExceededError: If the deadline cut retries short
            Exception: The failure of the last attempt, unchanged
        """
        started = self._clock()
        attempt = 0

        while True:
            try:
                return await operation()
            except Exception as error:
                if not self._is_retryable(error):
                    raise

                if not self._policy.has_attempts_left(attempt):
                    logger.warning(
                        "Retry budget exhausted after %d attempt(s): %s",
                        attempt + 1,
                        error,
                    )
                    raise

                delay_s = self.next_delay_s(attempt)
                if deadline_s is not None and (self._clock() - started) + delay_s > deadline_s:
                    logger.warning(
                        "Retry deadline %.3fs reached after %d attempt(s)",
                        deadline_s,
                        attempt + 1,
                    )
                    raise RetryDeadlineExceededError(deadline_s, attempt + 1) from error

                logger.info(
                    "Rate limited on attempt %d/%d, retrying in %.2fs",
                    attempt + 1,
                    self._policy.max_attempts,
                    delay_s,
                )

            await self._sleep(delay_s)
            attempt += 1

    @property
    def policy(self) -> RetryPolicy:
        return self._policy
