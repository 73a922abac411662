"""In-process implementation of SessionStore.

Holds one session's entries in a plain dictionary, plus a registry that
keeps one such store per live session. Suitable for tests,
the offline demo and single-worker deployments where sessions do not
need to survive a restart.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable

from chronicle_cache.config import settings
from chronicle_cache.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """Dictionary-backed session store.

    This class satisfies the SessionStore protocol through structural
    typing - no explicit inheritance needed.

    An optional ``max_entries`` quota makes writes of new keys fail once
    the store is full, the way browser session storage rejects writes
    past its quota. Overwriting an existing key always succeeds.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        """Initialize the store.

        Args:
            max_entries: Maximum number of keys to hold. None means unbounded.
        """
        if max_entries is not None and max_entries < 0:
            raise ValueError("max_entries must not be negative")
        self._items: dict[str, str] = {}
        self._max_entries = max_entries

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        if (
            self._max_entries is not None
            and key not in self._items
            and len(self._items) >= self._max_entries
        ):
            raise StorageUnavailableError(
                f"Session store is full ({self._max_entries} entries)"
            )
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> int:
        count = len(self._items)
        self._items.clear()
        return count

    def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items


class InMemorySessionRegistry:
    """Hands out one InMemorySessionStore per session id.

    A session that goes unused for longer than ``session_ttl`` seconds is
    dropped along with its entries, mirroring the key expiry of the Redis
    store. Idle sessions are evicted whenever any session is looked up.

    Example:
        ```python
        sessions = InMemorySessionRegistry(session_ttl=3600)
        store = sessions("3f2a9c")
        ```
    """

    def __init__(
        self,
        session_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            session_ttl: Idle lifetime of a session in seconds. Defaults to settings.
            clock: Returns the current time in seconds.
            max_entries: Quota passed to every store created.
        """
        self._session_ttl = session_ttl if session_ttl is not None else settings.session_ttl
        if self._session_ttl <= 0:
            raise ValueError("session_ttl must be positive")
        self._clock = clock
        self._max_entries = max_entries
        # least recently used first
        self._sessions: OrderedDict[str, tuple[float, InMemorySessionStore]] = OrderedDict()

    def __call__(self, session_id: str) -> InMemorySessionStore:
        now = self._clock()
        self._evict_idle(now)

        if session_id in self._sessions:
            _, store = self._sessions.pop(session_id)
        else:
            store = InMemorySessionStore(max_entries=self._max_entries)
        self._sessions[session_id] = (now, store)
        return store

    def _evict_idle(self, now: float) -> None:
        while self._sessions:
            session_id, (last_access, _) = next(iter(self._sessions.items()))
            if now - last_access <= self._session_ttl:
                return
            del self._sessions[session_id]
            logger.debug("Dropped idle session %s", session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
