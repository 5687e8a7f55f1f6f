"""
In-memory cache of chapter resources.
Every access reloads from disk, so callers always observe the current directory contents.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .chapter_loader import Chapter, load_chapters
from .config import CHAPTER_MIME_TYPE
from .observability import get_logger

logger = get_logger(__name__)

ChapterLoader = Callable[[], list[Chapter]]


@dataclass(frozen=True)
class CachedResource:
    uri: str
    text: str
    mime_type: str
    title: str
    chapter: int

    @classmethod
    def from_chapter(cls, chapter: Chapter) -> "CachedResource":
        return cls(
            uri=chapter.uri,
            text=chapter.content,
            mime_type=CHAPTER_MIME_TYPE,
            title=chapter.title,
            chapter=chapter.number,
        )

    def to_summary(self) -> dict[str, Any]:
        """Listing shape; the body text is left out to keep listings light."""
        return {
            "uri": self.uri,
            "content": {"mimeType": self.mime_type},
            "metadata": {"title": self.title, "chapter": self.chapter},
        }


class ResourceCache:
    """Owns the most recently loaded chapter resources."""

    def __init__(self, loader: ChapterLoader | None = None):
        self._loader = loader or load_chapters
        self._resources: tuple[CachedResource, ...] = ()

    @property
    def resources(self) -> tuple[CachedResource, ...]:
        """Last loaded snapshot, without touching disk."""
        return self._resources

    def reload(self) -> tuple[CachedResource, ...]:
        chapters = self._loader()
        resources = tuple(CachedResource.from_chapter(chapter) for chapter in chapters)
        # Single assignment: readers holding the old tuple keep a consistent view.
        self._resources = resources
        logger.info("resource_cache_reloaded", count=len(resources))
        return resources

    def get(self) -> tuple[CachedResource, ...]:
        return self.reload()
