from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from context7_relay.cache import Cache
from context7_relay.clients import Context7APIClient, Context7MCPClient
from context7_relay.service import LibraryService

if TYPE_CHECKING:
    import httpx

    from context7_relay.config import Settings


@dataclass
class AppState:
    """Process-scoped components shared by every tool call."""

    settings: Settings
    http_client: httpx.AsyncClient
    cache: Cache
    service: LibraryService


def build_state(settings: Settings, http_client: httpx.AsyncClient) -> AppState:
    cache = Cache(default_ttl=settings.cache.ttl_seconds)
    service = LibraryService(
        cache,
        Context7MCPClient(
            http_client,
            settings.upstream,
            default_tokens=settings.docs.default_tokens,
        ),
        Context7APIClient(http_client, settings.upstream),
        docs_settings=settings.docs,
        cache_settings=settings.cache,
    )
    return AppState(settings=settings, http_client=http_client, cache=cache, service=service)
