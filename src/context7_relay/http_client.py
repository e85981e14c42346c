from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from context7_relay import __version__

if TYPE_CHECKING:
    from context7_relay.config import UpstreamSettings

USER_AGENT = f"context7-relay/{__version__}"


def build_http_client(settings: UpstreamSettings | None = None) -> httpx.AsyncClient:
    """Create the AsyncClient shared by both upstream clients."""
    timeout = settings.connection_timeout if settings is not None else 5.0
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )


def auth_headers(api_key: str | None) -> dict[str, str]:
    if not api_key:
        return {}
    return {"Authorization": f"Bearer {api_key}"}
