"""Client for the Context7 MCP endpoint (primary tier).

Each call is a single JSON-RPC ``tools/call`` POST. The endpoint answers
either with a plain JSON envelope or with a server-sent event stream; for
the latter only the first ``data:`` line is read, since every tool used here
produces exactly one result.

Transport and protocol failures never raise: they are logged and reported
as ``None`` so the service can fall through to the REST tier.
"""

from __future__ import annotations

import itertools
import json
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from context7_relay.http_client import auth_headers
from context7_relay.parsing import parse_candidates, select_best

if TYPE_CHECKING:
    from context7_relay.config import UpstreamSettings
    from context7_relay.models.library import LibraryRecord

log = structlog.get_logger()

SESSION_HEADER = "MCP-Session-Id"
ACCEPT_HEADER = "application/json, text/event-stream"
SSE_DATA_PREFIX = "data: "

TOOL_RESOLVE_LIBRARY_ID = "resolve-library-id"
TOOL_GET_LIBRARY_DOCS = "get-library-docs"


class Context7MCPClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: UpstreamSettings,
        *,
        default_tokens: int = 5000,
    ) -> None:
        self._client = client
        self._settings = settings
        self._default_tokens = default_tokens
        self._request_ids = itertools.count(1)
        self.session_id: str | None = None

    async def resolve_library(self, library_name: str) -> LibraryRecord | None:
        log.debug("mcp_resolve_library", library_name=library_name)
        text = await self._call_tool(TOOL_RESOLVE_LIBRARY_ID, {"libraryName": library_name})
        if text is None:
            return None

        best = select_best(parse_candidates(text, library_name))
        if best is None:
            log.info("mcp_no_candidates", library_name=library_name)
            return None

        log.debug(
            "mcp_library_resolved",
            library_name=library_name,
            library_id=best.id,
            trust_score=best.trust_score,
        )
        return best.to_record()

    async def get_library_docs(
        self,
        library_id: str,
        topic: str | None = None,
        tokens: int | None = None,
    ) -> str | None:
        log.debug("mcp_get_library_docs", library_id=library_id, topic=topic, tokens=tokens)
        arguments: dict[str, Any] = {
            "context7CompatibleLibraryID": library_id,
            "tokens": tokens or self._default_tokens,
        }
        if topic:
            arguments["topic"] = topic
        return await self._call_tool(TOOL_GET_LIBRARY_DOCS, arguments)

    # ------------------------------------------------------------------
    # Wire protocol
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": ACCEPT_HEADER,
            **auth_headers(self._settings.api_key),
        }
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id
        return headers

    async def _call_tool(self, name: str, arguments: dict[str, Any]) -> str | None:
        """Invoke a remote tool and return its first text content block."""
        envelope = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        }
        try:
            response = await self._client.post(
                self._settings.mcp_url, json=envelope, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            log.warning("mcp_call_failed", tool=name, error=str(exc))
            return None

        if not response.is_success:
            log.warning("mcp_call_failed", tool=name, status_code=response.status_code)
            return None

        try:
            payload = _read_payload(response)
        except ValueError as exc:
            log.warning("mcp_invalid_response", tool=name, error=str(exc))
            return None

        session_id = response.headers.get(SESSION_HEADER)
        if session_id:
            self.session_id = session_id

        if payload.get("error"):
            log.warning("mcp_tool_error", tool=name, error=payload["error"])
            return None

        result = payload.get("result")
        if isinstance(result, dict) and result.get("isError"):
            log.warning("mcp_tool_error", tool=name, error=_first_text(payload))
            return None

        text = _first_text(payload)
        if text is None:
            log.info("mcp_empty_result", tool=name)
        return text


def _read_payload(response: httpx.Response) -> dict[str, Any]:
    """Decode the JSON-RPC envelope from a JSON or event-stream body.

    Raises ``ValueError`` when no envelope can be found.
    """
    content_type = response.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        payload = response.json()
    else:
        payload = None
        for line in response.text.splitlines():
            if line.startswith(SSE_DATA_PREFIX):
                payload = json.loads(line[len(SSE_DATA_PREFIX) :])
                break
        if payload is None:
            raise ValueError("No data line found in event stream")

    if not isinstance(payload, dict):
        raise ValueError("Response envelope is not a JSON object")
    return payload


def _first_text(payload: dict[str, Any]) -> str | None:
    result = payload.get("result")
    if not isinstance(result, dict):
        return None
    content = result.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    if not isinstance(text, str) or not text:
        return None
    return text
