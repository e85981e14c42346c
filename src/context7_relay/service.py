"""Library resolution and documentation retrieval with tiered fallback.

Every lookup goes cache -> MCP tier -> REST tier, one attempt per tier,
stopping at the first usable result. Tier failures are logged and fall
through; only non-recoverable errors (a malformed library ID) propagate
from inside the chain. When both tiers come up empty the service raises
an exhaustion error carrying the original query.

Concurrent lookups of the same uncached key are not coalesced; each one
queries the upstreams and the last cache write wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import structlog

from context7_relay.cache import docs_key, resolve_key
from context7_relay.errors import Context7RelayError, docs_retrieval_failed, library_not_found
from context7_relay.models.library import parse_library_id

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from context7_relay.cache import Cache
    from context7_relay.config import CacheSettings, DocsSettings
    from context7_relay.models.library import LibraryRecord

log = structlog.get_logger()

T = TypeVar("T")


class PrimaryClient(Protocol):
    async def resolve_library(self, library_name: str) -> LibraryRecord | None: ...

    async def get_library_docs(
        self, library_id: str, topic: str | None = None, tokens: int | None = None
    ) -> str | None: ...


class FallbackClient(Protocol):
    async def search_libraries(self, query: str) -> LibraryRecord | None: ...

    async def get_library_docs(
        self, library_id: str, topic: str | None = None, tokens: int | None = None
    ) -> str | None: ...


class LibraryService:
    def __init__(
        self,
        cache: Cache,
        primary: PrimaryClient,
        fallback: FallbackClient,
        *,
        docs_settings: DocsSettings,
        cache_settings: CacheSettings,
    ) -> None:
        self._cache = cache
        self._primary = primary
        self._fallback = fallback
        self._docs = docs_settings
        self._ttl = cache_settings.ttl_seconds

    async def resolve_library(self, library_name: str) -> LibraryRecord:
        """Resolve a library name to its canonical ``/owner/repo`` record."""
        key = resolve_key(library_name)
        cached = self._cache.get(key)
        if cached is not None:
            log.debug("library_resolved", query=library_name, source="cache")
            return cached

        log.info("resolving_library", query=library_name)

        library = await self._attempt("mcp", self._primary.resolve_library(library_name))
        source = "mcp"
        if library is None:
            library = await self._attempt("api", self._fallback.search_libraries(library_name))
            source = "api"

        if library is None:
            log.error("library_resolution_failed", query=library_name)
            raise library_not_found(library_name)

        self._cache.set(key, library, self._ttl)
        log.info(
            "library_resolved",
            query=library_name,
            source=source,
            library_id=library.id,
            trust_score=library.trust_score,
        )
        return library

    async def get_library_docs(
        self,
        library_id: str,
        topic: str | None = None,
        tokens: int | None = None,
    ) -> str:
        """Fetch documentation text for a canonical library ID.

        The token budget is never below ``docs.min_tokens``, even when the
        caller asks for less.
        """
        parse_library_id(library_id)
        effective_tokens = max(
            tokens if tokens is not None else self._docs.default_tokens,
            self._docs.min_tokens,
        )

        key = docs_key(library_id, topic, effective_tokens)
        cached = self._cache.get(key)
        if cached is not None:
            log.debug("docs_retrieved", library_id=library_id, topic=topic, source="cache")
            return cached

        log.info("fetching_docs", library_id=library_id, topic=topic, tokens=effective_tokens)

        docs = await self._attempt(
            "mcp", self._primary.get_library_docs(library_id, topic, effective_tokens)
        )
        source = "mcp"
        if not docs:
            docs = await self._attempt(
                "api", self._fallback.get_library_docs(library_id, topic, effective_tokens)
            )
            source = "api"

        if not docs:
            log.error("docs_retrieval_failed", library_id=library_id, topic=topic)
            raise docs_retrieval_failed(library_id)

        self._cache.set(key, docs, self._ttl)
        log.info("docs_retrieved", library_id=library_id, source=source, length=len(docs))
        return docs

    def get_stats(self) -> dict[str, Any]:
        return self._cache.get_stats()

    async def _attempt(self, tier: str, call: Awaitable[T | None]) -> T | None:
        """Await one tier call, converting recoverable failures to ``None``."""
        try:
            return await call
        except Context7RelayError as exc:
            if not exc.recoverable:
                raise
            log.warning("tier_failed", tier=tier, code=exc.code, error=exc.message)
        except Exception:
            log.warning("tier_failed", tier=tier, exc_info=True)
        return None
