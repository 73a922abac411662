"""Cache statistics entity."""

from dataclasses import asdict, dataclass


@dataclass
class CacheStatistics:
    """Running counters for response cache lookups.

    Shared by every ResponseCache the HTTP layer builds, so the numbers
    cover all sessions served by the process.
    """

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    read_failures: int = 0
    write_failures: int = 0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from the cache (0.0 when idle)."""
        if self.lookups == 0:
            return 0.0
        return self.hits / self.lookups

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.expirations = 0
        self.read_failures = 0
        self.write_failures = 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["lookups"] = self.lookups
        data["hit_rate"] = self.hit_rate
        return data
