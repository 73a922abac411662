"""Service layer for business logic.

This layer contains the caching and retry core plus the history
orchestration built on top of it. Services depend on protocols
(interfaces), not concrete implementations, making them testable and
flexible.

Architecture:
    Handler -> HistoryService -> ResponseCache / RetryingInvoker -> Repository
    (HTTP)  -> (Business)     -> (Core)                          -> (Data Access)

Usage:
    ```python
    from chronicle_cache.services import ResponseCache, RetryingInvoker

    cache = ResponseCache(store=InMemorySessionStore())
    invoker = RetryingInvoker()

    result = await cache.with_cache(
        ["event", "Ancient Rome", "founding-of-rome", None, "English", False],
        lambda: invoker.invoke_with_retry(call_backend),
    )
    ```
"""

from .history_service import HistoryService
from .response_cache import ResponseCache, derive_key
from .retrying_invoker import RetryingInvoker, is_rate_limited

__all__ = [
    "HistoryService",
    "ResponseCache",
    "RetryingInvoker",
    "derive_key",
    "is_rate_limited",
]
