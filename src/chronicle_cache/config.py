import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Session storage
    session_store: str = os.getenv("SESSION_STORE", "memory")  # "memory" or "redis"
    session_ttl: int = int(os.getenv("SESSION_TTL", "86400"))  # 1 day default
    session_key_prefix: str = os.getenv("SESSION_KEY_PREFIX", "chronicle")

    # Response cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "300"))  # 5 minutes default

    # Retry
    retry_max_attempts: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "4"))
    retry_initial_backoff_ms: float = float(os.getenv("RETRY_INITIAL_BACKOFF_MS", "1500"))
    retry_backoff_multiplier: float = float(os.getenv("RETRY_BACKOFF_MULTIPLIER", "2.0"))
    retry_jitter_ms: float = float(os.getenv("RETRY_JITTER_MS", "1000"))
    retry_deadline_s: float | None = _optional_float("RETRY_DEADLINE_S")

    # Gemini
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    gemini_text_model: str = os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
    gemini_image_model: str = os.getenv("GEMINI_IMAGE_MODEL", "imagen-4.0-generate-001")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def uses_redis(self) -> bool:
        """Check if session stores should be backed by Redis.

        Returns:
            True if SESSION_STORE is "redis", False otherwise
        """
        return self.session_store.lower() == "redis"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.session_store.lower() not in ("memory", "redis"):
            raise ValueError(
                f"SESSION_STORE must be 'memory' or 'redis', got {self.session_store!r}"
            )

        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be a positive number of seconds")

        if self.session_ttl <= 0:
            raise ValueError("SESSION_TTL must be a positive number of seconds")

        if self.retry_max_attempts < 1:
            raise ValueError("RETRY_MAX_ATTEMPTS must be at least 1")

        if self.retry_initial_backoff_ms <= 0:
            raise ValueError("RETRY_INITIAL_BACKOFF_MS must be positive")

        if self.retry_deadline_s is not None and self.retry_deadline_s <= 0:
            raise ValueError("RETRY_DEADLINE_S must be positive when set")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
