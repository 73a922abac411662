"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract and the
structured output expected from the generative backend.

Internal cache bookkeeping uses entities from the entities package.
"""

from .history import (
    AspectRatio,
    Character,
    Civilization,
    CivilizationOption,
    MapData,
    MusicLayer,
    MusicParameters,
    PointOfInterest,
    SearchResult,
    TimelineEvent,
    Topic,
    War,
)
from .requests import (
    CivilizationRequest,
    EventDetailsRequest,
    EventMediaRequest,
    ImageRequest,
    SearchRequest,
    SubjectDetailsRequest,
)
from .responses import (
    CacheClearResponse,
    CacheStatsResponse,
    DetailsResponse,
    HealthCheckResponse,
    ImageResponse,
)

__all__ = [
    # History content
    "AspectRatio",
    "Character",
    "Civilization",
    "CivilizationOption",
    "MapData",
    "MusicLayer",
    "MusicParameters",
    "PointOfInterest",
    "SearchResult",
    "TimelineEvent",
    "Topic",
    "War",
    # Requests
    "CivilizationRequest",
    "EventDetailsRequest",
    "EventMediaRequest",
    "ImageRequest",
    "SearchRequest",
    "SubjectDetailsRequest",
    # Responses
    "CacheClearResponse",
    "CacheStatsResponse",
    "DetailsResponse",
    "HealthCheckResponse",
    "ImageResponse",
]
