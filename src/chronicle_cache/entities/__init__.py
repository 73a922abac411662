"""Domain entities for internal representation.

These are plain dataclasses used internally by services and
repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.

Entities should have:
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .cache_entry import CacheEntryEntity
from .cache_stats import CacheStatistics
from .retry_policy import RetryPolicy

__all__ = ["CacheEntryEntity", "CacheStatistics", "RetryPolicy"]
