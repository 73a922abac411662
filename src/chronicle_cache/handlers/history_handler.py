"""HTTP handlers for history operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error translation.
"""

import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import HTTPException, status

from chronicle_cache.dto import (
    CacheClearResponse,
    CacheStatsResponse,
    Civilization,
    CivilizationOption,
    CivilizationRequest,
    DetailsResponse,
    EventDetailsRequest,
    EventMediaRequest,
    HealthCheckResponse,
    ImageRequest,
    ImageResponse,
    MapData,
    MusicParameters,
    SearchRequest,
    SearchResult,
    SubjectDetailsRequest,
)
from chronicle_cache.errors import InvalidModelResponseError, RetryDeadlineExceededError
from chronicle_cache.services import HistoryService, is_rate_limited

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistoryHandler:
    """HTTP handlers for history generation and cache management.

    This handler delegates business logic to HistoryService and handles
    HTTP-specific concerns like:
    - Converting service results to DTOs
    - Mapping failures to status codes

    Failure mapping:
        - rate limited after all retries -> 429
        - retry deadline exceeded -> 504
        - model reply not matching its schema -> 502
        - anything else -> 500
    """

    def __init__(self, history_service: HistoryService) -> None:
        """Initialize the history handler.

        Args:
            history_service: The history service for business logic (required).
        """
        self._history = history_service

    async def _run(self, action: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except RetryDeadlineExceededError as e:
            raise HTTPException(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                detail=f"Failed to {action}: {e}",
            ) from e
        except InvalidModelResponseError as e:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Failed to {action}: {e}",
            ) from e
        except Exception as e:
            if is_rate_limited(e):
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail=f"Failed to {action}: the AI service is busy, please try again shortly",
                ) from e
            logger.exception("Failed to %s", action)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to {action}: {e}",
            ) from e

    async def list_civilizations(self) -> list[CivilizationOption]:
        """Handle GET /civilizations requests."""
        return await self._history.list_civilizations()

    async def civilization_overview(self, request: CivilizationRequest) -> Civilization:
        """Handle POST /civilizations/overview requests."""
        return await self._run(
            "generate civilization overview",
            self._history.fetch_civilization_data(
                request.civilization, request.language, request.kids_mode
            ),
        )

    async def event_details(self, request: EventDetailsRequest) -> DetailsResponse:
        """Handle POST /details/event requests."""
        text = await self._run(
            "describe event",
            self._history.fetch_event_details(
                request.event,
                request.character,
                request.civilization,
                request.language,
                request.kids_mode,
            ),
        )
        return DetailsResponse(text=text)

    async def character_details(self, request: SubjectDetailsRequest) -> DetailsResponse:
        """Handle POST /details/character requests."""
        text = await self._run(
            "describe character",
            self._history.fetch_character_details(
                request.name, request.civilization, request.language, request.kids_mode
            ),
        )
        return DetailsResponse(text=text)

    async def war_details(self, request: SubjectDetailsRequest) -> DetailsResponse:
        """Handle POST /details/war requests."""
        text = await self._run(
            "describe war",
            self._history.fetch_war_details(
                request.name, request.civilization, request.language, request.kids_mode
            ),
        )
        return DetailsResponse(text=text)

    async def topic_details(self, request: SubjectDetailsRequest) -> DetailsResponse:
        """Handle POST /details/topic requests."""
        text = await self._run(
            "describe topic",
            self._history.fetch_topic_details(
                request.name, request.civilization, request.language, request.kids_mode
            ),
        )
        return DetailsResponse(text=text)

    async def map_data(self, request: EventMediaRequest) -> MapData:
        """Handle POST /events/map requests."""
        return await self._run(
            "generate map data",
            self._history.generate_map_data(
                request.event, request.civilization, request.language, request.kids_mode
            ),
        )

    async def music_parameters(self, request: EventMediaRequest) -> MusicParameters:
        """Handle POST /events/music requests."""
        return await self._run(
            "generate music parameters",
            self._history.generate_music_parameters(
                request.event, request.civilization, request.kids_mode
            ),
        )

    async def image(self, request: ImageRequest) -> ImageResponse:
        """Handle POST /images requests."""
        data_uri = await self._run(
            "generate image",
            self._history.generate_image(request.prompt, request.aspect_ratio),
        )
        return ImageResponse(data_uri=data_uri)

    async def search(self, request: SearchRequest) -> list[SearchResult]:
        """Handle POST /search requests."""
        return await self._run(
            "search",
            self._history.global_search(
                request.query, request.civilization, request.language, request.kids_mode
            ),
        )

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /stats requests."""
        cache = self._history.cache
        policy = self._history.invoker.policy
        stats = cache.stats
        return CacheStatsResponse(
            hits=stats.hits,
            misses=stats.misses,
            expirations=stats.expirations,
            read_failures=stats.read_failures,
            write_failures=stats.write_failures,
            hit_rate=stats.hit_rate,
            ttl_seconds=cache.ttl,
            retry_max_attempts=policy.max_attempts,
            retry_initial_backoff_ms=policy.initial_backoff_ms,
        )

    async def clear_cache(self) -> CacheClearResponse:
        """Handle DELETE /cache requests."""
        count = self._history.cache.clear()
        return CacheClearResponse(
            success=True,
            deleted_count=count,
            message="Session cache cleared successfully",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        store_healthy = self._history.cache.store.health_check()
        return HealthCheckResponse(
            status="healthy" if store_healthy else "unhealthy",
            store_healthy=store_healthy,
        )
