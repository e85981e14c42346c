from __future__ import annotations

from typing import TYPE_CHECKING, Any

from context7_relay.models.tools import GetLibraryDocsInput
from context7_relay.tools import validate_input

if TYPE_CHECKING:
    from context7_relay.state import AppState

NAME = "get-library-docs"
DESCRIPTION = (
    "Fetches up-to-date documentation for a library using its exact "
    "Context7-compatible library ID (e.g. /vercel/next.js). Use "
    "resolve-library-id first to obtain the ID."
)


async def handle(arguments: dict[str, Any], state: AppState) -> str:
    params = validate_input(GetLibraryDocsInput, arguments)
    return await state.service.get_library_docs(params.library_id, params.topic, params.tokens)
