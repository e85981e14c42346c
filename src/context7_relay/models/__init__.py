from __future__ import annotations

from context7_relay.models.cache import CacheEntry
from context7_relay.models.library import (
    DEFAULT_DESCRIPTION,
    LibraryRecord,
    is_library_id,
    parse_library_id,
)
from context7_relay.models.tools import GetLibraryDocsInput, ResolveLibraryInput

__all__ = [
    # library
    "DEFAULT_DESCRIPTION",
    "LibraryRecord",
    "is_library_id",
    "parse_library_id",
    # cache
    "CacheEntry",
    # tools
    "ResolveLibraryInput",
    "GetLibraryDocsInput",
]
