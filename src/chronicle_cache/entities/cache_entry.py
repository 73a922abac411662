"""Cache entry domain entity."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for one memoized response.

    This is the record a session store persists, serialized as the JSON
    text ``{"timestamp": ..., "data": ...}`` under its derived key.

    Attributes:
        timestamp: Epoch milliseconds when the entry was written
        data: The cached payload (any JSON-compatible value)
    """

    timestamp: int
    data: Any

    def age_ms(self, now_ms: int) -> int:
        """Milliseconds elapsed since the entry was written."""
        return now_ms - self.timestamp

    def is_expired(self, now_ms: int, ttl_ms: int) -> bool:
        """Check whether the entry has outlived the TTL.

        An entry is still valid when its age equals the TTL exactly.
        """
        return self.age_ms(now_ms) > ttl_ms

    def to_json(self) -> str:
        """Serialize the entry to its persisted text form.

        Raises:
            TypeError: If ``data`` is not JSON-serializable
            ValueError: If ``data`` contains circular references
        """
        return json.dumps({"timestamp": self.timestamp, "data": self.data})

    @classmethod
    def from_json(cls, raw: str) -> "CacheEntryEntity":
        """Parse a persisted entry.

        Args:
            raw: The text previously produced by ``to_json``

        Returns:
            The parsed entity

        Raises:
            ValueError: If the text is not a well-formed entry record
        """
        record = json.loads(raw)
        if not isinstance(record, dict) or "data" not in record:
            raise ValueError("Cache record must be an object with 'timestamp' and 'data'")

        timestamp = record.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError(f"Cache record has an invalid timestamp: {timestamp!r}")

        return cls(timestamp=int(timestamp), data=record["data"])
