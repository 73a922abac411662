"""Redis implementation of SessionStore.

Each browsing session owns a key namespace ``{prefix}:{session_id}:``.
Every write refreshes the key's expiry to the session TTL, so an idle
session disappears on its own without a background sweep.
"""

import logging

import redis

from chronicle_cache.config import get_redis_client, settings
from chronicle_cache.errors import StorageUnavailableError
from chronicle_cache.protocols import is_valid_session_id

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = frozenset("*?[]\\")


def _escape_glob(text: str) -> str:
    """Escape Redis MATCH pattern metacharacters."""
    return "".join("\\" + c if c in _GLOB_SPECIAL else c for c in text)


class RedisSessionStore:
    """Redis-backed session store.

    This class satisfies the SessionStore protocol through structural
    typing - no explicit inheritance needed.

    Redis failures are re-raised as ``StorageUnavailableError`` so the
    response cache can degrade to "always miss".
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        session_id: str = "anonymous",
        key_prefix: str | None = None,
        session_ttl: int | None = None,
    ) -> None:
        """Initialize the Redis session store.

        Args:
            redis_client: Redis client instance. If None, creates default.
            session_id: Identifier of the browsing session.
            key_prefix: Namespace prefix for all keys. Defaults to settings.
            session_ttl: Expiry in seconds applied on every write. Defaults to settings.
        """
        if not is_valid_session_id(session_id):
            raise ValueError(
                f"session_id must be 1-128 letters, digits, '_' or '-', got {session_id!r}"
            )
        self._client = redis_client if redis_client is not None else get_redis_client()
        self._session_id = session_id
        self._prefix = key_prefix or settings.session_key_prefix
        self._session_ttl = session_ttl or settings.session_ttl

    @classmethod
    def create(
        cls,
        session_id: str,
        redis_client: redis.Redis | None = None,
    ) -> "RedisSessionStore":
        """Factory method to create RedisSessionStore with defaults.

        Args:
            session_id: Identifier of the browsing session.
            redis_client: Shared Redis client. If None, creates default.

        Returns:
            Configured RedisSessionStore
        """
        return cls(redis_client=redis_client, session_id=session_id)

    @property
    def namespace(self) -> str:
        """Key prefix shared by every entry of this session."""
        return f"{self._prefix}:{self._session_id}:"

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(self._full_key(key))
        except (redis.RedisError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Redis read failed: {e}") from e

        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise StorageUnavailableError(f"Redis value is not UTF-8 text: {e}") from e
        return value  # type: ignore[return-value]

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._full_key(key), value, ex=self._session_ttl)
        except redis.RedisError as e:
            raise StorageUnavailableError(f"Redis write failed: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._full_key(key))
        except redis.RedisError as e:
            raise StorageUnavailableError(f"Redis delete failed: {e}") from e

    def clear(self) -> int:
        try:
            keys = list(self._client.scan_iter(match=f"{_escape_glob(self.namespace)}*"))
            if not keys:
                return 0
            deleted: int = self._client.delete(*keys)  # type: ignore[assignment]
        except redis.RedisError as e:
            raise StorageUnavailableError(f"Redis clear failed: {e}") from e

        logger.info("Cleared %d entries for session %s", deleted, self._session_id)
        return deleted

    def health_check(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
