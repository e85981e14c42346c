from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from context7_relay.models.tools import ResolveLibraryInput
from context7_relay.tools import validate_input

if TYPE_CHECKING:
    from context7_relay.models.library import LibraryRecord
    from context7_relay.state import AppState

log = structlog.get_logger()

NAME = "resolve-library-id"
DESCRIPTION = (
    "Resolves a general library name into a Context7-compatible library ID "
    "(/owner/repo). Call this before get-library-docs unless the user already "
    "supplied an ID in that format."
)


async def handle(arguments: dict[str, Any], state: AppState) -> str:
    params = validate_input(ResolveLibraryInput, arguments)
    library = await state.service.resolve_library(params.library_name)
    return format_library(library)


def format_library(library: LibraryRecord) -> str:
    lines = [
        f"Found library: {library.name}",
        f"Library ID: {library.id}",
        f"Description: {library.description}",
    ]
    if library.trust_score is not None:
        lines.append(f"Trust Score: {library.trust_score:g}")
    if library.code_snippets is not None:
        lines.append(f"Code Snippets: {library.code_snippets}")
    if library.versions:
        lines.append(f"Versions: {', '.join(library.versions)}")
    return "\n".join(lines)
