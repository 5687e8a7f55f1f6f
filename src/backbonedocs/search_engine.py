# /backbonedocs/search_engine.py
"""
Literal text search across cached chapters.
Counts occurrences per chapter, captures context excerpts, and ranks chapters
by how often the query appears.
"""
from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any

from .config import (
    SEARCH_CONTEXT_CHARS,
    SEARCH_DEFAULT_MAX_EXCERPTS,
    SEARCH_MAX_EXCERPTS_LIMIT,
)
from .observability import get_logger
from .resource_cache import ResourceCache
from .resource_uris import search_uri

ELLIPSIS = "…"
_WHITESPACE_RE = re.compile(r"\s+")
logger = get_logger(__name__)


@dataclass(frozen=True)
class SearchMatch:
    chapter: int
    title: str
    uri: str
    mime_type: str
    occurrences: int
    excerpts: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "chapter": self.chapter,
            "title": self.title,
            "uri": self.uri,
            "mimeType": self.mime_type,
            "occurrences": self.occurrences,
            "excerpts": list(self.excerpts),
        }


def compile_query(query: str, case_sensitive: bool = False) -> re.Pattern:
    """Compiles the query so every character matches literally."""
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(re.escape(query), flags)


def clamp_max_excerpts(value: Any) -> int:
    if value is None:
        return SEARCH_DEFAULT_MAX_EXCERPTS
    try:
        requested = int(value)
    except (TypeError, ValueError, OverflowError):
        # NaN, infinities and non-numeric input fall back to the default cap.
        return SEARCH_DEFAULT_MAX_EXCERPTS
    return max(1, min(SEARCH_MAX_EXCERPTS_LIMIT, requested))


def extract_excerpt(text: str, start: int, end: int, context_chars: int = SEARCH_CONTEXT_CHARS) -> str:
    """Whitespace-normalized window around ``text[start:end]``, with ellipses on truncated edges."""
    window_start = max(0, start - context_chars)
    window_end = min(len(text), end + context_chars)
    snippet = _WHITESPACE_RE.sub(" ", text[window_start:window_end]).strip()
    prefix = ELLIPSIS if window_start > 0 else ""
    suffix = ELLIPSIS if window_end < len(text) else ""
    return f"{prefix}{snippet}{suffix}"


def scan_occurrences(text: str, pattern: re.Pattern, max_excerpts: int) -> tuple[int, list[str]]:
    occurrences = 0
    excerpts: list[str] = []
    pos = 0
    while pos <= len(text):
        match = pattern.search(text, pos)
        if match is None:
            break
        occurrences += 1
        if len(excerpts) < max_excerpts:
            excerpts.append(extract_excerpt(text, match.start(), match.end()))
        # Empty matches would otherwise rescan the same position forever.
        pos = match.end() if match.end() > match.start() else match.start() + 1
    return occurrences, excerpts


class SearchEngine:
    def __init__(self, cache: ResourceCache):
        self.cache = cache

    def search(
        self,
        query: str,
        *,
        case_sensitive: bool = False,
        max_excerpts: int | None = None,
    ) -> list[SearchMatch]:
        """
        Returns one match per chapter containing ``query``.
        Ordered by descending occurrence count, then ascending chapter number.
        """
        q = str(query or "").strip()
        if not q:
            return []

        start = time.perf_counter()
        resources = self.cache.get()
        pattern = compile_query(q, case_sensitive=bool(case_sensitive))
        excerpt_cap = clamp_max_excerpts(max_excerpts)

        matches: list[SearchMatch] = []
        for resource in resources:
            text = resource.text or ""
            if not text:
                continue
            occurrences, excerpts = scan_occurrences(text, pattern, excerpt_cap)
            if occurrences == 0:
                continue
            matches.append(
                SearchMatch(
                    chapter=resource.chapter,
                    title=resource.title,
                    uri=search_uri(resource.chapter),
                    mime_type=resource.mime_type,
                    occurrences=occurrences,
                    excerpts=tuple(excerpts),
                )
            )

        matches.sort(key=lambda m: (-m.occurrences, m.chapter))
        logger.info(
            "search_completed",
            query_chars=len(q),
            case_sensitive=bool(case_sensitive),
            max_excerpts=excerpt_cap,
            chapters_scanned=len(resources),
            chapters_matched=len(matches),
            elapsed_ms=round((time.perf_counter() - start) * 1000.0, 2),
        )
        return matches
