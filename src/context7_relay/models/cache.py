from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class CacheEntry(BaseModel, Generic[T]):
    """A cached payload with its creation time and lifetime (seconds)."""

    model_config = ConfigDict(frozen=True)

    value: T
    created_at: float  # Monotonic clock reading
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl
