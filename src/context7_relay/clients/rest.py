"""Client for the Context7 REST API (fallback tier).

Only consulted when the MCP tier produced nothing. Transport failures and
non-success statuses are logged and reported as ``None``; a malformed
library ID is the caller's mistake and is raised instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import ValidationError

from context7_relay.errors import Context7RelayError, ErrorCode
from context7_relay.http_client import auth_headers
from context7_relay.models.library import DEFAULT_DESCRIPTION, LibraryRecord, parse_library_id

if TYPE_CHECKING:
    from context7_relay.config import UpstreamSettings

log = structlog.get_logger()

SEARCH_LIMIT = "1"
DOCS_TYPE = "txt"


class Context7APIClient:
    def __init__(self, client: httpx.AsyncClient, settings: UpstreamSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def _base(self) -> str:
        return self._settings.api_base.rstrip("/")

    async def search_libraries(self, query: str) -> LibraryRecord | None:
        """Return the top search hit for ``query`` as a LibraryRecord."""
        log.debug("api_search_libraries", query=query)
        response = await self._get(f"{self._base}/search", {"q": query, "limit": SEARCH_LIMIT})
        if response is None:
            return None

        try:
            data = response.json()
        except ValueError as exc:
            log.warning("api_invalid_response", query=query, error=str(exc))
            return None

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            log.info("api_no_results", query=query)
            return None

        try:
            library = _record_from_result(results[0], query)
        except (Context7RelayError, ValidationError) as exc:
            log.warning("api_invalid_library_data", query=query, error=str(exc))
            return None

        log.debug("api_library_found", query=query, library_id=library.id)
        return library

    async def get_library_docs(
        self,
        library_id: str,
        topic: str | None = None,
        tokens: int | None = None,
    ) -> str | None:
        owner, repo = parse_library_id(library_id)
        log.debug("api_get_library_docs", library_id=library_id, topic=topic, tokens=tokens)

        params: dict[str, str] = {"type": DOCS_TYPE}
        if topic:
            params["topic"] = topic
        if tokens:
            params["tokens"] = str(tokens)

        response = await self._get(f"{self._base}/{owner}/{repo}", params)
        if response is None:
            return None
        if not response.text:
            log.info("api_empty_docs", library_id=library_id)
            return None

        log.debug("api_docs_retrieved", library_id=library_id, length=len(response.text))
        return response.text

    async def _get(self, url: str, params: dict[str, str]) -> httpx.Response | None:
        try:
            response = await self._client.get(
                url, params=params, headers=auth_headers(self._settings.api_key)
            )
        except httpx.HTTPError as exc:
            log.warning("api_request_failed", url=url, error=str(exc))
            return None

        if not response.is_success:
            log.warning(
                "api_request_failed",
                url=url,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
            return None
        return response


def _record_from_result(result: Any, query: str) -> LibraryRecord:
    if not isinstance(result, dict):
        raise Context7RelayError(ErrorCode.INVALID_LIBRARY_DATA, "Search result is not an object")

    owner = result.get("owner")
    repo = result.get("repo")
    library_id = result.get("id")
    if not library_id:
        if not owner or not repo:
            raise Context7RelayError(
                ErrorCode.INVALID_LIBRARY_DATA,
                "Invalid library data: missing owner or repo",
            )
        library_id = f"/{owner}/{repo}"

    return LibraryRecord(
        id=library_id,
        name=result.get("name") or repo or query,
        description=result.get("description") or DEFAULT_DESCRIPTION,
    )
