"""Session-scoped response cache.

Memoizes the results of expensive generative calls for a fixed time
window. The cache is a best-effort optimization: storage that is corrupt,
full or unreachable degrades to "always miss" and never fails the caller.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from chronicle_cache.config import settings
from chronicle_cache.entities import CacheEntryEntity, CacheStatistics
from chronicle_cache.protocols import SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

KeyPart = str | bool | int | float | None

KEY_SEPARATOR = ":"
NULL_SENTINEL = "null"
ESCAPE = "\\"

_RESERVED_WORDS = frozenset({NULL_SENTINEL, "true", "false"})


def derive_key(parts: Sequence[KeyPart]) -> str:
    """Build a cache key from an ordered list of scalar parameters.

    Absent values become ``"null"`` and booleans render as
    ``"true"``/``"false"``, so ``["Ancient Rome", "English", False]`` gives
    ``"Ancient Rome:English:false"``.

    String parts are free user text and are escaped so distinct part lists
    always give distinct keys: backslashes and colons get a backslash in
    front, and a string that reads like ``null``, a boolean or a number is
    marked with one leading backslash (``["A", "null"]`` gives ``"A:\\null"``).

    Args:
        parts: Ordered request parameters

    Returns:
        The derived key
    """
    return KEY_SEPARATOR.join(_render_part(part) for part in parts)


def _render_part(part: KeyPart) -> str:
    if part is None:
        return NULL_SENTINEL
    if isinstance(part, bool):
        return "true" if part else "false"
    if isinstance(part, str):
        return _escape_text(part)
    return str(part)


def _escape_text(text: str) -> str:
    escaped = text.replace(ESCAPE, ESCAPE * 2).replace(KEY_SEPARATOR, ESCAPE + KEY_SEPARATOR)
    if _reads_as_scalar(text):
        # escaping only ever emits a backslash before "\" or ":"
        return ESCAPE + escaped
    return escaped


def _reads_as_scalar(text: str) -> bool:
    if text in _RESERVED_WORDS:
        return True
    try:
        float(text)
    except ValueError:
        return False
    return True


class ResponseCache:
    """Expiring key/value cache over a SessionStore.

    Entries are written as ``{"timestamp": <epoch ms>, "data": <payload>}``
    and expire lazily: an entry older than the TTL is removed the next time
    it is read.

    Example:
        ```python
        cache = ResponseCache(store=InMemorySessionStore())

        overview = await cache.with_cache(
            ["civilization", "Ancient Rome", "English", False],
            lambda: invoker.invoke_with_retry(fetch_overview),
            response_type=Civilization,
        )
        ```
    """

    derive_key = staticmethod(derive_key)

    def __init__(
        self,
        store: SessionStore,
        ttl: float | None = None,
        clock: Callable[[], float] = time.time,
        stats: CacheStatistics | None = None,
    ) -> None:
        """Initialize the response cache.

        Args:
            store: Session-scoped key/value storage (required).
            ttl: Entry lifetime in seconds. Defaults to settings.cache_ttl.
            clock: Returns the current time in epoch seconds.
            stats: Counters to update. A private instance is used when omitted.
        """
        self._store = store
        self._ttl = ttl if ttl is not None else settings.cache_ttl
        if self._ttl <= 0:
            raise ValueError("ttl must be positive")
        self._clock = clock
        self._stats = stats if stats is not None else CacheStatistics()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @property
    def ttl_ms(self) -> int:
        return int(self._ttl * 1000)

    def get(self, key: str) -> Any | None:
        """Read a cached value.

        Args:
            key: A key produced by ``derive_key``

        Returns:
            The cached payload, or None if absent, expired or unreadable
        """
        try:
            raw = self._store.get(key)
        except Exception as e:
            self._stats.read_failures += 1
            logger.warning("Cache get error for key %s: %s", key, e)
            return None

        if raw is None:
            return None

        try:
            entry = CacheEntryEntity.from_json(raw)
        except (TypeError, ValueError) as e:
            self._stats.read_failures += 1
            logger.warning("Cache get error for key %s: corrupt entry (%s)", key, e)
            return None

        if entry.is_expired(self._now_ms(), self.ttl_ms):
            self._stats.expirations += 1
            self._discard(key)
            return None

        return entry.data

    def set(self, key: str, value: Any) -> None:
        """Write a value with the current timestamp.

        Failures are logged and swallowed.

        Args:
            key: A key produced by ``derive_key``
            value: JSON-compatible payload or pydantic model
        """
        try:
            entry = CacheEntryEntity(timestamp=self._now_ms(), data=to_jsonable_python(value))
            self._store.set(key, entry.to_json())
        except Exception as e:
            self._stats.write_failures += 1
            logger.warning("Cache set error for key %s: %s", key, e)

    async def with_cache(
        self,
        key_parts: Sequence[KeyPart],
        operation: Callable[[], Awaitable[T]],
        response_type: Any = None,
    ) -> T:
        """Return a cached result or compute, store and return a fresh one.

        ``operation`` is awaited at most once per call and never on a hit.

        Args:
            key_parts: Ordered request parameters used to derive the key
            operation: Zero-argument coroutine factory producing the value
            response_type: Optional type the cached payload is validated into

        Returns:
            The cached or freshly computed value
        """
        key = derive_key(key_parts)
        cached = self.get(key)

        if cached is not None:
            value = self._revive(key, cached, response_type)
            if value is not None:
                self._stats.hits += 1
                logger.debug("[Cache] HIT for key: %s", key)
                return value

        self._stats.misses += 1
        logger.debug("[Cache] MISS for key: %s", key)
        result = await operation()
        self.set(key, result)
        return result

    def clear(self) -> int:
        """Drop every entry of the session.

        Returns:
            Number of entries removed (0 if the store is unavailable)
        """
        try:
            return self._store.clear()
        except Exception as e:
            logger.warning("Cache clear error: %s", e)
            return 0

    def _revive(self, key: str, cached: Any, response_type: Any) -> Any | None:
        if response_type is None:
            return cached
        try:
            return TypeAdapter(response_type).validate_python(cached)
        except ValidationError as e:
            self._stats.read_failures += 1
            logger.warning("Cached payload for key %s no longer matches its type: %s", key, e)
            return None

    def _discard(self, key: str) -> None:
        try:
            self._store.remove(key)
        except Exception as e:
            logger.warning("Cache remove error for key %s: %s", key, e)

    @property
    def ttl(self) -> float:
        """Entry lifetime in seconds."""
        return self._ttl

    @property
    def stats(self) -> CacheStatistics:
        return self._stats

    @property
    def store(self) -> SessionStore:
        """Get the underlying session store (for testing)."""
        return self._store
