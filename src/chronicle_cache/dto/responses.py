"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class DetailsResponse(BaseModel):
    """Response DTO for narrative text."""

    text: str = Field(..., description="The generated narrative")


class ImageResponse(BaseModel):
    """Response DTO for a generated image."""

    data_uri: str = Field(..., description="JPEG image as a base64 data URI")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache and retry statistics."""

    hits: int = Field(..., ge=0)
    misses: int = Field(..., ge=0)
    expirations: int = Field(..., ge=0)
    read_failures: int = Field(..., ge=0)
    write_failures: int = Field(..., ge=0)
    hit_rate: float = Field(..., ge=0.0, le=1.0)
    ttl_seconds: float = Field(..., description="Time-to-live for cache entries in seconds", gt=0)
    retry_max_attempts: int = Field(..., ge=1)
    retry_initial_backoff_ms: float = Field(..., gt=0)


class CacheClearResponse(BaseModel):
    """Response DTO for clearing a session's cache."""

    success: bool
    deleted_count: int = Field(..., ge=0)
    message: str


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    store_healthy: bool = Field(..., description="Whether the session store is reachable")
