"""List/read operations over the chapter resource cache."""
from __future__ import annotations

from typing import Any

from .observability import get_logger
from .resource_cache import ResourceCache
from .resource_uris import search_uri_to_storage_uri

CHAPTER_NOT_FOUND = "Chapter not found"
logger = get_logger(__name__)


class ResourceDirectory:
    def __init__(self, cache: ResourceCache):
        self.cache = cache

    def list_resources(self) -> dict[str, list[dict[str, Any]]]:
        return {"resources": [resource.to_summary() for resource in self.cache.get()]}

    def read_resource(self, uri: str) -> dict[str, str]:
        """
        Resolves a storage URI (``backbone/chapter/<n>``) to its text.
        Unknown URIs produce ``{"error": ...}`` instead of raising.
        """
        resources = self.cache.get()
        resource = next((r for r in resources if r.uri == uri), None)
        if resource is None:
            logger.info("resource_not_found", uri=str(uri))
            return {"error": CHAPTER_NOT_FOUND}
        return {"content": resource.text, "mimeType": resource.mime_type}

    def read_search_resource(self, uri: str) -> dict[str, str]:
        """Reads a chapter addressed by its search-facing URI (``backbone://chapter/<nn>``)."""
        internal_uri = search_uri_to_storage_uri(uri)
        if internal_uri is None:
            logger.info("resource_uri_untranslatable", uri=str(uri))
            return {"error": CHAPTER_NOT_FOUND}
        return self.read_resource(internal_uri)
