"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing process-wide instances.

Pattern:
    - Provider, invoker, statistics and the session store factory live in
      app.state, created during lifespan
    - Dependency functions retrieve them from request.app.state
    - The response cache and handler are built per request for the
      session named by the X-Session-Id header
"""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Header, Request

from chronicle_cache.config import configure_logging, get_redis_client, settings
from chronicle_cache.entities import CacheStatistics
from chronicle_cache.handlers import HistoryHandler
from chronicle_cache.protocols import SESSION_ID_PATTERN, HistoryProvider, SessionStore
from chronicle_cache.repositories import (
    GeminiHistoryProvider,
    InMemorySessionRegistry,
    RedisSessionStore,
)
from chronicle_cache.services import HistoryService, ResponseCache, RetryingInvoker

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "anonymous"

SessionStoreFactory = Callable[[str], SessionStore]


def create_session_store_factory() -> SessionStoreFactory:
    """Build the factory that hands out one store per browsing session.

    Returns:
        A callable mapping a session id to its SessionStore
    """
    if settings.uses_redis:
        client = get_redis_client()
        return lambda session_id: RedisSessionStore.create(session_id, redis_client=client)

    return InMemorySessionRegistry(session_ttl=settings.session_ttl)


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_history_provider(request: Request) -> HistoryProvider:
    """Dependency injection for the HistoryProvider from app.state."""
    return _from_state(request, "history_provider")


def get_retrying_invoker(request: Request) -> RetryingInvoker:
    """Dependency injection for the RetryingInvoker from app.state."""
    return _from_state(request, "retrying_invoker")


def get_cache_statistics(request: Request) -> CacheStatistics:
    """Dependency injection for the shared CacheStatistics from app.state."""
    return _from_state(request, "cache_statistics")


def get_session_store(
    request: Request,
    session_id: Annotated[
        str, Header(alias="X-Session-Id", pattern=SESSION_ID_PATTERN)
    ] = DEFAULT_SESSION_ID,
) -> SessionStore:
    """Dependency injection for the caller's session store.

    Args:
        request: FastAPI Request object
        session_id: Browsing session identifier from the X-Session-Id header.
            Ids outside SESSION_ID_PATTERN are rejected with 422.

    Returns:
        The SessionStore for that session
    """
    factory: SessionStoreFactory = _from_state(request, "session_store_factory")
    return factory(session_id)


def get_handler(
    provider: Annotated[HistoryProvider, Depends(get_history_provider)],
    invoker: Annotated[RetryingInvoker, Depends(get_retrying_invoker)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    stats: Annotated[CacheStatistics, Depends(get_cache_statistics)],
) -> HistoryHandler:
    """Dependency injection for a session-bound HistoryHandler."""
    cache = ResponseCache(store=store, ttl=settings.cache_ttl, stats=stats)
    service = HistoryService(
        provider=provider,
        cache=cache,
        invoker=invoker,
        retry_deadline_s=settings.retry_deadline_s,
    )
    return HistoryHandler(history_service=service)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes process-wide instances and stores them in app.state:
    1. History provider (Gemini)
    2. Retrying invoker configured from settings
    3. Shared cache statistics
    4. Session store factory (in-memory or Redis)

    Args:
        app: The FastAPI application instance

    Yields:
        None
    """
    configure_logging()

    app.state.history_provider = GeminiHistoryProvider.create()
    app.state.retrying_invoker = RetryingInvoker.create(settings)
    app.state.cache_statistics = CacheStatistics()
    app.state.session_store_factory = create_session_store_factory()

    logger.info(
        "History API ready: store=%s cache_ttl=%ss retry_attempts=%d",
        settings.session_store,
        settings.cache_ttl,
        settings.retry_max_attempts,
    )

    yield

    del app.state.session_store_factory
    del app.state.cache_statistics
    del app.state.retrying_invoker
    del app.state.history_provider
    logger.info("History API shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[HistoryHandler, Depends(get_handler)]
