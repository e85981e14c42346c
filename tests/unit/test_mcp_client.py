"""Unit tests for context7_relay.clients.mcp."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import respx

from context7_relay.clients.mcp import Context7MCPClient

if TYPE_CHECKING:
    from context7_relay.config import Settings

MCP_URL = "https://mcp.context7.test/mcp"

RESOLVE_TEXT = """Available Libraries (top matches):

- Title: React
- Context7-compatible library ID: /reactjs/react.dev
- Description: Official React documentation
- Code Snippets: 2400
- Trust Score: 3.0
----------
















- Title: React
- Context7-compatible library ID: /facebook/react
- Description: The library for web and native user interfaces
- Code Snippets: 1800
- Trust Score: 7.5
- Versions: v18.3.1, v19.0.0
"""


def _sse(payload: dict[str, Any], session_id: str | None = None) -> httpx.Response:
    headers = {"content-type": "text/event-stream"}
    if session_id:
        headers["MCP-Session-Id"] = session_id
    body = f"event: message\ndata: {json.dumps(payload)}\n\n"
    return httpx.Response(200, text=body, headers=headers)


def _tool_result(text: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": 1, "result": {"content": [{"type": "text", "text": text}]}}


def _client(http_client: httpx.AsyncClient, settings: Settings) -> Context7MCPClient:
    return Context7MCPClient(http_client, settings.upstream, default_tokens=5000)


class TestResolveLibrary:
    async def test_picks_highest_trust_score(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            respx.post(MCP_URL).mock(return_value=_sse(_tool_result(RESOLVE_TEXT)))
            library = await _client(http_client, settings).resolve_library("react")

        assert library is not None
        assert library.id == "/facebook/react"
        assert library.name == "React"
        assert library.trust_score == 7.5
        assert library.code_snippets == 1800
        assert library.versions == ("v18.3.1", "v19.0.0")

    async def test_request_envelope_and_headers(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            route = respx.post(MCP_URL).mock(return_value=_sse(_tool_result(RESOLVE_TEXT)))
            await _client(http_client, settings).resolve_library("react")

        request = route.calls.last.request
        body = json.loads(request.content)
        assert body["jsonrpc"] == "2.0"
        assert body["method"] == "tools/call"
        assert body["params"] == {
            "name": "resolve-library-id",
            "arguments": {"libraryName": "react"},
        }
        assert request.headers["Authorization"] == "Bearer test-key"
        assert "text/event-stream" in request.headers["Accept"]
        assert "MCP-Session-Id" not in request.headers

    async def test_no_candidates_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            respx.post(MCP_URL).mock(return_value=_sse(_tool_result("No libraries found.")))
            assert await _client(http_client, settings).resolve_library("zzz") is None

    async def test_http_error_status_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            respx.post(MCP_URL).mock(return_value=httpx.Response(503))
            assert await _client(http_client, settings).resolve_library("react") is None

    async def test_network_error_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            respx.post(MCP_URL).mock(side_effect=httpx.ConnectError("Connection refused"))
            assert await _client(http_client, settings).resolve_library("react") is None

    async def test_stream_without_data_line_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            respx.post(MCP_URL).mock(
                return_value=httpx.Response(
                    200, text="event: ping\n\n", headers={"content-type": "text/event-stream"}
                )
            )
            assert await _client(http_client, settings).resolve_library("react") is None

    async def test_malformed_data_line_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            respx.post(MCP_URL).mock(
                return_value=httpx.Response(
                    200, text="data: {not json\n\n", headers={"content-type": "text/event-stream"}
                )
            )
            assert await _client(http_client, settings).resolve_library("react") is None

    async def test_json_rpc_error_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        payload = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bad"}}
        with respx.mock:
            respx.post(MCP_URL).mock(return_value=_sse(payload))
            assert await _client(http_client, settings).resolve_library("react") is None

    async def test_tool_error_result_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "isError": True,
                "content": [{"type": "text", "text": "Error: library /x/y does not exist"}],
            },
        }
        with respx.mock:
            respx.post(MCP_URL).mock(return_value=_sse(payload))
            docs = await _client(http_client, settings).get_library_docs("/x/y", None, 1000)
        assert docs is None

    async def test_plain_json_body_accepted(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            respx.post(MCP_URL).mock(
                return_value=httpx.Response(200, json=_tool_result(RESOLVE_TEXT))
            )
            library = await _client(http_client, settings).resolve_library("react")
        assert library is not None
        assert library.id == "/facebook/react"

    async def test_only_first_data_line_used(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        body = (
            f"data: {json.dumps(_tool_result('- Context7-compatible library ID: /first/lib'))}\n\n"
            f"data: {json.dumps(_tool_result('- Context7-compatible library ID: /second/lib'))}\n\n"
        )
        with respx.mock:
            respx.post(MCP_URL).mock(
                return_value=httpx.Response(
                    200, text=body, headers={"content-type": "text/event-stream"}
                )
            )
            library = await _client(http_client, settings).resolve_library("lib")
        assert library is not None
        assert library.id == "/first/lib"


class TestSession:
    async def test_session_id_captured_and_replayed(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        client = _client(http_client, settings)
        with respx.mock:
            route = respx.post(MCP_URL).mock(
                side_effect=[
                    _sse(_tool_result(RESOLVE_TEXT), session_id="session-abc"),
                    _sse(_tool_result("# Docs")),
                ]
            )
            await client.resolve_library("react")
            await client.get_library_docs("/facebook/react")

        assert client.session_id == "session-abc"
        assert "MCP-Session-Id" not in route.calls[0].request.headers
        assert route.calls[1].request.headers["MCP-Session-Id"] == "session-abc"

    async def test_no_auth_header_without_api_key(self, http_client: httpx.AsyncClient) -> None:
        from context7_relay.config import UpstreamSettings

        client = Context7MCPClient(http_client, UpstreamSettings(mcp_url=MCP_URL))
        with respx.mock:
            route = respx.post(MCP_URL).mock(return_value=_sse(_tool_result(RESOLVE_TEXT)))
            await client.resolve_library("react")
        assert "Authorization" not in route.calls.last.request.headers


class TestGetLibraryDocs:
    async def test_returns_text_verbatim(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        docs = "# React\n\nTITLE: useState\nCODE: const [a, setA] = useState(0)"
        with respx.mock:
            route = respx.post(MCP_URL).mock(return_value=_sse(_tool_result(docs)))
            result = await _client(http_client, settings).get_library_docs(
                "/facebook/react", "hooks", 2000
            )

        assert result == docs
        params = json.loads(route.calls.last.request.content)["params"]
        assert params == {
            "name": "get-library-docs",
            "arguments": {
                "context7CompatibleLibraryID": "/facebook/react",
                "topic": "hooks",
                "tokens": 2000,
            },
        }

    async def test_default_tokens_and_no_topic(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        with respx.mock:
            route = respx.post(MCP_URL).mock(return_value=_sse(_tool_result("# Docs")))
            await _client(http_client, settings).get_library_docs("/facebook/react")

        arguments = json.loads(route.calls.last.request.content)["params"]["arguments"]
        assert arguments == {"context7CompatibleLibraryID": "/facebook/react", "tokens": 5000}

    async def test_empty_content_returns_none(
        self, http_client: httpx.AsyncClient, settings: Settings
    ) -> None:
        payload = {"jsonrpc": "2.0", "id": 1, "result": {"content": []}}
        with respx.mock:
            respx.post(MCP_URL).mock(return_value=_sse(payload))
            assert await _client(http_client, settings).get_library_docs("/a/b") is None
