from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from context7_relay.state import AppState

NAME = "get-cache-stats"
DESCRIPTION = "Reports how many resolution and documentation results are cached, with their keys."

INPUT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


async def handle(arguments: dict[str, Any], state: AppState) -> str:
    return json.dumps(state.service.get_stats())
