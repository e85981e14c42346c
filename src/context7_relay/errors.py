"""Error taxonomy shared by the clients, the service and the protocol layer.

Every failure that crosses the service boundary is a ``Context7RelayError``.
``recoverable`` tells the caller whether retrying the same input can help;
the service uses the same flag to decide whether a tier failure falls
through to the next tier or propagates immediately.
"""

from __future__ import annotations

import json
from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_LIBRARY_ID = "INVALID_LIBRARY_ID"
    INVALID_LIBRARY_DATA = "INVALID_LIBRARY_DATA"
    LIBRARY_NOT_FOUND = "LIBRARY_NOT_FOUND"
    DOCS_RETRIEVAL_FAILED = "DOCS_RETRIEVAL_FAILED"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"


class Context7RelayError(Exception):
    def __init__(self, code: ErrorCode, message: str, *, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, object]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class ToolErrorEnvelope(Exception):
    """Raised by tool handlers; ``str()`` is the serialized error payload.

    The protocol server turns any exception escaping a tool handler into an
    ``isError`` result whose text is ``str(exc)``.
    """

    def __init__(self, error: Context7RelayError) -> None:
        super().__init__(error.to_json())
        self.error = error


def invalid_library_id(library_id: str) -> Context7RelayError:
    return Context7RelayError(
        ErrorCode.INVALID_LIBRARY_ID,
        f"Invalid library ID format: {library_id!r}. Expected format: /owner/repo",
        recoverable=False,
    )


def library_not_found(query: str) -> Context7RelayError:
    return Context7RelayError(
        ErrorCode.LIBRARY_NOT_FOUND,
        f'Library not found: "{query}". Try the full library ID format '
        '(e.g. "/facebook/react", "/vercel/next.js") or check the spelling '
        "of the library name. A more specific library name may also help.",
        recoverable=False,
    )


def docs_retrieval_failed(library_id: str) -> Context7RelayError:
    return Context7RelayError(
        ErrorCode.DOCS_RETRIEVAL_FAILED,
        f'Failed to fetch documentation for "{library_id}". '
        'Verify the library ID is correct (format "/owner/repo") and try again.',
        recoverable=False,
    )
