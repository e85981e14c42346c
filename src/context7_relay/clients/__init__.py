from __future__ import annotations

from context7_relay.clients.mcp import Context7MCPClient
from context7_relay.clients.rest import Context7APIClient

__all__ = ["Context7MCPClient", "Context7APIClient"]
