from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator

from context7_relay.errors import invalid_library_id

DEFAULT_DESCRIPTION = "No description available"

_LIBRARY_ID_RE = re.compile(r"^/([^/]+)/([^/]+)$")


def parse_library_id(library_id: str) -> tuple[str, str]:
    """Split a canonical ``/owner/repo`` ID into ``(owner, repo)``.

    Raises a non-recoverable ``INVALID_LIBRARY_ID`` error on any other shape.
    """
    match = _LIBRARY_ID_RE.match(library_id)
    if match is None:
        raise invalid_library_id(library_id)
    return match.group(1), match.group(2)


def is_library_id(value: str) -> bool:
    return _LIBRARY_ID_RE.match(value) is not None


class LibraryRecord(BaseModel):
    """A library resolved to its canonical Context7 ID."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = DEFAULT_DESCRIPTION
    trust_score: float | None = None  # Only reported by the MCP tier
    code_snippets: int | None = None
    versions: tuple[str, ...] | None = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not is_library_id(v):
            raise ValueError(f"Invalid library ID: {v!r}")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return v.strip() or DEFAULT_DESCRIPTION
