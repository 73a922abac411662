"""Chronicle Cache - Session response caching and rate-limit retries for history generation.

This package provides a layered architecture around two core primitives:
a time-boxed, session-scoped ResponseCache and a RetryingInvoker that
backs off exponentially on rate-limited calls.

Layers:
    - protocols: Interface contracts (SessionStore, HistoryProvider)
    - repositories: Data access implementations (in-memory, Redis, Gemini)
    - services: Core cache/retry primitives and history orchestration
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts, generation schemas)
    - entities: Domain models (internal)

Usage:
    ```python
    from chronicle_cache.repositories import InMemorySessionStore
    from chronicle_cache.services import ResponseCache, RetryingInvoker

    cache = ResponseCache(store=InMemorySessionStore())
    invoker = RetryingInvoker()

    text = await cache.with_cache(
        ["character", "Ancient Rome", "Julius Caesar", "English", False],
        lambda: invoker.invoke_with_retry(lambda: provider.generate_text(prompt)),
    )
    ```

For HTTP API:
    ```python
    from chronicle_cache.api.app import app
    ```
"""

from chronicle_cache.config import get_redis_client, settings
from chronicle_cache.entities import CacheEntryEntity, CacheStatistics, RetryPolicy
from chronicle_cache.errors import (
    ChronicleCacheError,
    InvalidModelResponseError,
    RateLimitedError,
    RetryDeadlineExceededError,
    StorageUnavailableError,
)
from chronicle_cache.handlers import HistoryHandler
from chronicle_cache.protocols import HistoryProvider, SessionStore
from chronicle_cache.repositories import (
    GeminiHistoryProvider,
    InMemorySessionRegistry,
    InMemorySessionStore,
    RedisSessionStore,
)
from chronicle_cache.services import (
    HistoryService,
    ResponseCache,
    RetryingInvoker,
    derive_key,
    is_rate_limited,
)

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "SessionStore",
    "HistoryProvider",
    # Core services
    "ResponseCache",
    "RetryingInvoker",
    "derive_key",
    "is_rate_limited",
    # Services (business logic)
    "HistoryService",
    # Handlers (HTTP)
    "HistoryHandler",
    # Repositories (data access)
    "InMemorySessionStore",
    "InMemorySessionRegistry",
    "RedisSessionStore",
    "GeminiHistoryProvider",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheStatistics",
    "RetryPolicy",
    # Errors
    "ChronicleCacheError",
    "StorageUnavailableError",
    "RateLimitedError",
    "RetryDeadlineExceededError",
    "InvalidModelResponseError",
]
