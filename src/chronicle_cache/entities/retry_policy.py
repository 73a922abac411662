"""Retry policy value object."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable exponential backoff configuration.

    With the defaults, a call that keeps getting rate limited waits roughly
    1.5s, 3s and 6s (each plus up to 1s of jitter) and fails after the
    fourth attempt.

    Attributes:
        max_attempts: Upper bound on total attempts (first try + retries)
        initial_backoff_ms: Base delay before the first retry
        backoff_multiplier: Growth factor applied per attempt
        jitter_ms: Ceiling of the uniform random delay added to each backoff
    """

    max_attempts: int = 4
    initial_backoff_ms: float = 1500.0
    backoff_multiplier: float = 2.0
    jitter_ms: float = 1000.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_backoff_ms <= 0:
            raise ValueError("initial_backoff_ms must be positive")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be at least 1")
        if self.jitter_ms < 0:
            raise ValueError("jitter_ms must not be negative")

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        """Build a policy from the application settings.

        Args:
            settings: A Settings instance (see chronicle_cache.config)

        Returns:
            RetryPolicy with the configured values
        """
        return cls(
            max_attempts=settings.retry_max_attempts,
            initial_backoff_ms=settings.retry_initial_backoff_ms,
            backoff_multiplier=settings.retry_backoff_multiplier,
            jitter_ms=settings.retry_jitter_ms,
        )

    def backoff_ms(self, attempt_index: int, jitter: float = 0.0) -> float:
        """Compute the delay before the retry that follows ``attempt_index``.

        Args:
            attempt_index: Zero-based index of the attempt that just failed
            jitter: Random addition in milliseconds, expected in [0, jitter_ms]

        Returns:
            Delay in milliseconds
        """
        return self.initial_backoff_ms * self.backoff_multiplier**attempt_index + jitter

    def has_attempts_left(self, attempt_index: int) -> bool:
        """Check whether another attempt may follow ``attempt_index``."""
        return attempt_index < self.max_attempts - 1
