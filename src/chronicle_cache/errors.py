"""Exception hierarchy for the cache, retry and history layers."""


class ChronicleCacheError(Exception):
    """Base class for all chronicle_cache errors."""


class StorageUnavailableError(ChronicleCacheError):
    """Raised by a session store when a read or write cannot be served.

    ResponseCache catches this at its get/set boundary; callers of the
    cache never see it.
    """


class RateLimitedError(ChronicleCacheError):
    """Raised when the generative backend signals throttling or quota exhaustion."""

    status_code = 429


class RetryDeadlineExceededError(ChronicleCacheError, TimeoutError):
    """Raised when the caller-supplied retry deadline would be exceeded."""

    def __init__(self, deadline_s: float, attempts: int) -> None:
        super().__init__(
            f"Retry deadline of {deadline_s:.3f}s exceeded after {attempts} attempt(s)"
        )
        self.deadline_s = deadline_s
        self.attempts = attempts


class InvalidModelResponseError(ChronicleCacheError):
    """Raised when the model returns content that does not match the requested schema."""
