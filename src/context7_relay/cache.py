"""In-process TTL cache for resolution and documentation results.

Expired entries are evicted lazily when read (``get``/``has``) and by a
periodic sweep (``run_cleanup_loop``) so that keys written once and never
read again do not accumulate. Correctness only depends on the lazy path.

Contents live for the lifetime of the process; nothing is persisted.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

import structlog

from context7_relay.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

log = structlog.get_logger()

RESOLVE_KEY_PREFIX = "resolve:"
DOCS_KEY_PREFIX = "docs:"

DEFAULT_TTL_SECONDS = 3600.0


def resolve_key(query: str) -> str:
    return f"{RESOLVE_KEY_PREFIX}{query.strip().casefold()}"


def docs_key(library_id: str, topic: str | None, tokens: int) -> str:
    return f"{DOCS_KEY_PREFIX}{library_id}|{topic or ''}|{tokens}"


class Cache:
    """Key/value store with a per-entry time-to-live."""

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._default_ttl = default_ttl
        self._clock = clock

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key``, or ``None`` on miss or expiry."""
        entry = self._live_entry(key)
        if entry is None:
            return None
        log.debug("cache_hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value=value, created_at=self._clock(), ttl=ttl)
        log.debug("cache_set", key=key, ttl=ttl)

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def clear(self) -> None:
        self._entries.clear()
        log.debug("cache_cleared")

    def cleanup(self) -> int:
        """Evict every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            log.debug("cache_cleanup", removed=len(expired))
        return len(expired)

    def get_stats(self) -> dict[str, Any]:
        return {"size": len(self._entries), "keys": list(self._entries)}

    def _live_entry(self, key: str) -> CacheEntry[Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            log.debug("cache_miss_expired", key=key)
            return None
        return entry


async def run_cleanup_loop(cache: Cache, interval: float) -> None:
    """Sweep expired entries every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        removed = cache.cleanup()
        log.info("cache_cleanup_complete", removed=removed, size=cache.get_stats()["size"])
