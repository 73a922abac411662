"""Repository layer for data access.

This layer abstracts external dependencies (session storage, the Gemini
API) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (in-memory → Redis, Gemini → fake)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from chronicle_cache.protocols import HistoryProvider, SessionStore

from .gemini_history_provider import GeminiHistoryProvider
from .memory_session_store import InMemorySessionRegistry, InMemorySessionStore
from .redis_session_store import RedisSessionStore

__all__ = [
    "SessionStore",
    "HistoryProvider",
    "InMemorySessionStore",
    "InMemorySessionRegistry",
    "RedisSessionStore",
    "GeminiHistoryProvider",
]
