"""Extraction of library candidates from ``resolve-library-id`` text output.

The MCP tier answers with a human-readable listing, one block per library::

    - Title: Next.js
    - Context7-compatible library ID: /vercel/next.js
    - Description: The React Framework
    - Code Snippets: 3200
    - Trust Score: 10
    - Versions: v14.3.0, v15.1.8

Block order and spacing are not guaranteed, so every field is looked up in a
window of lines around each ID line instead of by fixed offset.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from context7_relay.models.library import DEFAULT_DESCRIPTION, LibraryRecord, is_library_id

log = structlog.get_logger()

_ID_RE = re.compile(r"Context7-compatible library ID: (.+)")
_TRUST_RE = re.compile(r"Trust Score: ([\d.]+)")
_TITLE_RE = re.compile(r"- Title: (.+)")
_DESCRIPTION_RE = re.compile(r"- Description: (.+)")
_SNIPPETS_RE = re.compile(r"Code Snippets: (\d+)")
_VERSIONS_RE = re.compile(r"Versions: (.+)")

TRUST_WINDOW = 5
DETAIL_WINDOW = 10


@dataclass
class Candidate:
    id: str
    name: str
    description: str
    trust_score: float
    code_snippets: int | None
    versions: list[str]

    def to_record(self) -> LibraryRecord:
        return LibraryRecord(
            id=self.id,
            name=self.name,
            description=self.description,
            trust_score=self.trust_score,
            code_snippets=self.code_snippets,
            versions=tuple(self.versions) if self.versions else None,
        )


def _window(lines: list[str], center: int, radius: int) -> list[str]:
    return lines[max(0, center - radius) : min(len(lines), center + radius)]


def _trust_score(lines: list[str]) -> float:
    for line in lines:
        match = _TRUST_RE.search(line)
        if match:
            try:
                return float(match.group(1))
            except ValueError:
                # "1.2.3" matches the character class but is not a number
                continue
    return 0.0


def parse_candidates(text: str, query: str) -> list[Candidate]:
    """Return every candidate in ``text``, in the order their IDs appear.

    ``query`` is the fallback name for candidates without a title line.
    """
    lines = text.splitlines()
    candidates: list[Candidate] = []

    for i, line in enumerate(lines):
        id_match = _ID_RE.search(line)
        if id_match is None:
            continue
        library_id = id_match.group(1).strip()
        if not is_library_id(library_id):
            log.debug("candidate_skipped", reason="invalid_id", library_id=library_id)
            continue

        name = query
        description = DEFAULT_DESCRIPTION
        code_snippets: int | None = None
        versions: list[str] = []
        for detail in _window(lines, i, DETAIL_WINDOW):
            title = _TITLE_RE.search(detail)
            if title:
                name = title.group(1).strip() or name
            desc = _DESCRIPTION_RE.search(detail)
            if desc:
                description = desc.group(1).strip() or description
            snippets = _SNIPPETS_RE.search(detail)
            if snippets:
                code_snippets = int(snippets.group(1))
            listed = _VERSIONS_RE.search(detail)
            if listed:
                versions.extend(v.strip() for v in listed.group(1).split(", ") if v.strip())

        candidates.append(
            Candidate(
                id=library_id,
                name=name,
                description=description,
                trust_score=_trust_score(_window(lines, i, TRUST_WINDOW)),
                code_snippets=code_snippets,
                versions=versions,
            )
        )

    return candidates


def select_best(candidates: list[Candidate]) -> Candidate | None:
    """Pick the candidate with the highest trust score; ties keep the earliest."""
    best: Candidate | None = None
    for candidate in candidates:
        if best is None or candidate.trust_score > best.trust_score:
            best = candidate
    return best
