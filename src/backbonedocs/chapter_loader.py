# /backbonedocs/chapter_loader.py
"""
Discovers numbered Markdown chapters in the docs directory.
Filters chapter filenames, orders them by chapter number, and derives titles.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from .config import (
    CHAPTER_FILE_PATTERN,
    CHAPTER_TITLE_FALLBACK,
    DOCS_DIR,
    SKIP_UNREADABLE_CHAPTERS,
)
from .observability import get_logger
from .resource_uris import storage_uri
from .storage_provider import ChapterStore, LocalChapterStore

CHAPTER_FILE_RE = re.compile(CHAPTER_FILE_PATTERN)
_H1_HEADING_RE = re.compile(r"^#\s+(.+)$", flags=re.MULTILINE)
logger = get_logger(__name__)


class ChapterReadError(RuntimeError):
    """Raised when a chapter file matched the naming pattern but could not be read."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Could not read chapter file {filename!r}: {reason}")
        self.filename = filename


@dataclass(frozen=True)
class Chapter:
    number: int
    title: str
    content: str
    filename: str
    uri: str


def parse_chapter_number(filename: str) -> int | None:
    match = CHAPTER_FILE_RE.search(str(filename))
    if not match:
        return None
    return int(match.group(1), 10)


def extract_title(content: str, number: int) -> str:
    """Returns the first top-level heading text, or the fallback label for the chapter."""
    match = _H1_HEADING_RE.search(str(content or "").strip())
    if match:
        return match.group(1).strip()
    return CHAPTER_TITLE_FALLBACK.format(number=number)


def _read_chapter(store: ChapterStore, filename: str) -> str | None:
    try:
        return store.read_text(filename)
    except (OSError, UnicodeDecodeError) as exc:
        if SKIP_UNREADABLE_CHAPTERS:
            logger.warning("chapter_read_skipped", filename=filename, error=str(exc))
            return None
        logger.error("chapter_read_failed", filename=filename, error=str(exc))
        raise ChapterReadError(filename, str(exc)) from exc


def load_chapters(store: ChapterStore | None = None) -> list[Chapter]:
    """Reads every chapter file from the store, ordered by ascending chapter number."""
    store = store or LocalChapterStore(DOCS_DIR)
    if not store.exists():
        logger.warning("chapter_docs_missing", docs_dir=str(store.root))
        return []

    numbered: list[tuple[int, str]] = []
    for filename in store.list_names():
        number = parse_chapter_number(filename)
        if number is None:
            continue
        numbered.append((number, filename))
    # sorted() is stable: equal numbers keep directory listing order.
    numbered = sorted(numbered, key=lambda item: item[0])

    chapters: list[Chapter] = []
    for number, filename in numbered:
        content = _read_chapter(store, filename)
        if content is None:
            continue
        chapters.append(
            Chapter(
                number=number,
                title=extract_title(content, number),
                content=content,
                filename=filename,
                uri=storage_uri(number),
            )
        )

    logger.info("chapters_loaded", docs_dir=str(store.root), count=len(chapters))
    return chapters
