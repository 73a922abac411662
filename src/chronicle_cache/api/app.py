from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chronicle_cache.api.dependencies import HandlerDep, lifespan
from chronicle_cache.config import settings
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

app = FastAPI(
    title="Chronicle History API",
    description="Cached, rate-limit aware access to generated history content",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Chronicle History API",
        "version": "0.1.0",
        "description": "Cached, rate-limit aware access to generated history content",
        "endpoints": {
            "civilizations": "/civilizations",
            "details": "/details",
            "events": "/events",
            "images": "/images",
            "search": "/search",
            "cache": "/cache",
            "stats": "/stats",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.get("/civilizations", response_model=list[CivilizationOption])
async def list_civilizations(handler: HandlerDep) -> list[CivilizationOption]:
    """List the civilizations the user can explore."""
    return await handler.list_civilizations()


@app.post("/civilizations/overview", response_model=Civilization)
async def civilization_overview(request: CivilizationRequest, handler: HandlerDep) -> Civilization:
    """Generate (or return the cached) overview of a civilization."""
    return await handler.civilization_overview(request)


@app.post("/details/event", response_model=DetailsResponse)
async def event_details(request: EventDetailsRequest, handler: HandlerDep) -> DetailsResponse:
    """Narrate a timeline event, optionally from a character's perspective."""
    return await handler.event_details(request)


@app.post("/details/character", response_model=DetailsResponse)
async def character_details(request: SubjectDetailsRequest, handler: HandlerDep) -> DetailsResponse:
    """Biography of a key character."""
    return await handler.character_details(request)


@app.post("/details/war", response_model=DetailsResponse)
async def war_details(request: SubjectDetailsRequest, handler: HandlerDep) -> DetailsResponse:
    """Account of a major war."""
    return await handler.war_details(request)


@app.post("/details/topic", response_model=DetailsResponse)
async def topic_details(request: SubjectDetailsRequest, handler: HandlerDep) -> DetailsResponse:
    """Explanation of a cultural topic."""
    return await handler.topic_details(request)


@app.post("/events/map", response_model=MapData)
async def event_map(request: EventMediaRequest, handler: HandlerDep) -> MapData:
    """Geographical setting and points of interest of an event."""
    return await handler.map_data(request)


@app.post("/events/music", response_model=MusicParameters)
async def event_music(request: EventMediaRequest, handler: HandlerDep) -> MusicParameters:
    """Ambient soundscape parameters for an event."""
    return await handler.music_parameters(request)


@app.post("/images", response_model=ImageResponse)
async def generate_image(request: ImageRequest, handler: HandlerDep) -> ImageResponse:
    """Generate an illustration as a data URI."""
    return await handler.image(request)


@app.post("/search", response_model=list[SearchResult])
async def search(request: SearchRequest, handler: HandlerDep) -> list[SearchResult]:
    """Search events, characters, wars and topics of a civilization."""
    return await handler.search(request)


@app.get("/stats", response_model=CacheStatsResponse)
async def get_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get cache statistics and the active retry policy."""
    return await handler.get_stats()


@app.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(handler: HandlerDep) -> CacheClearResponse:
    """Clear every cached response of the caller's session."""
    return await handler.clear_cache()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chronicle_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
