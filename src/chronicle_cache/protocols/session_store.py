"""Session store protocol.

Defines the key/value port the response cache writes through. A session
store holds text values for exactly one browsing session and forgets
them when the session ends.

Implementations can include:
- In-process dictionary (default, tests, single-worker deployments)
- Redis with per-session key prefixes and session expiry
- Any other key/value facility scoped to a session
"""

import re
from typing import Protocol, runtime_checkable

# Session ids end up inside storage keys and key patterns, so they are
# limited to characters with no meaning in either.
SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,128}$"

_SESSION_ID_RE = re.compile(SESSION_ID_PATTERN)


def is_valid_session_id(session_id: str) -> bool:
    """Check that a session id is 1-128 letters, digits, "_" or "-"."""
    return bool(_SESSION_ID_RE.fullmatch(session_id))


@runtime_checkable
class SessionStore(Protocol):
    """Protocol for session-scoped key/value storage.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Implementations signal failures by
    raising ``StorageUnavailableError``.

    Example:
        ```python
        from chronicle_cache.protocols import SessionStore

        store: SessionStore = InMemorySessionStore()
        store: SessionStore = RedisSessionStore(client, session_id="abc")
        ```
    """

    def get(self, key: str) -> str | None:
        """Read the text stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored text, or None if absent
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Write text under a key, overwriting any previous value.

        Args:
            key: The storage key
            value: The text to store
        """
        ...

    def remove(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error.

        Args:
            key: The storage key
        """
        ...

    def clear(self) -> int:
        """Remove every key belonging to the session.

        Returns:
            Number of keys removed
        """
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
