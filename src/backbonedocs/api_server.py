"""
FastAPI service layer for the Backbone chapter documents.

Wraps the chapter cache, resource directory and search engine without
modifying core logic. Chapters are also exposed as named resources addressed
by their search-facing URI (backbone://chapter/NN), translated back to the
storage URI on read.

Run with:
    uvicorn backbonedocs.api_server:app --host 0.0.0.0 --port 7557
"""
from __future__ import annotations

import asyncio
import functools
import time
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from .chapter_loader import load_chapters
from .config import DOCS_DIR
from .metrics import metrics_collector
from .observability import get_logger
from .resource_cache import ResourceCache
from .resource_directory import ResourceDirectory
from .resource_uris import SEARCH_URI_PREFIX, resource_name, search_uri
from .search_engine import SearchEngine
from .storage_provider import LocalChapterStore

# ---------------------------------------------------------------------------
# Compile-time constants
# ---------------------------------------------------------------------------

_THREAD_POOL_WORKERS = 4       # Concurrent request workers
_MAX_TOOL_EXCERPTS = 5         # Tighter than the engine cap; keeps tool output short
_RESOURCE_DESCRIPTION = "Backbone Markdown document"
logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------

class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., min_length=2, description="Text to search for")
    case_sensitive: bool | None = Field(default=None, alias="caseSensitive", description="Match letter case")
    max_excerpts: int | None = Field(
        default=None,
        alias="maxExcerpts",
        ge=1,
        le=_MAX_TOOL_EXCERPTS,
        description="Excerpts per chapter",
    )


class SearchMatchModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chapter: int
    title: str
    uri: str
    mime_type: str = Field(alias="mimeType")
    occurrences: int
    excerpts: list[str]


class SearchResponse(BaseModel):
    query: str
    summary: str
    matches: list[SearchMatchModel]


class ChapterResource(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    uri: str
    title: str
    description: str
    mime_type: str = Field(alias="mimeType")


class ChapterContent(BaseModel):
    uri: str
    text: str


# ---------------------------------------------------------------------------
# Application state populated at startup
# ---------------------------------------------------------------------------

_state: dict[str, Any] = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the cache, directory and search engine once at startup."""
    store = LocalChapterStore(DOCS_DIR)
    cache = ResourceCache(functools.partial(load_chapters, store))
    _state["cache"] = cache
    _state["directory"] = ResourceDirectory(cache)
    _state["search"] = SearchEngine(cache)
    # Thread pool for running synchronous core calls off the event loop.
    executor = ThreadPoolExecutor(max_workers=_THREAD_POOL_WORKERS)
    _state["executor"] = executor
    logger.info("api_started", docs_dir=str(DOCS_DIR))

    yield  # Application is running.

    # Shutdown: release resources.
    executor.shutdown(wait=False)
    _state.clear()


app = FastAPI(
    title="Backbone Docs API",
    description="Chapter resources and literal search over the Backbone Markdown docs",
    version="1.0.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _search_summary(query: str, match_count: int) -> str:
    if match_count == 0:
        return f'No matches for "{query}".'
    return f'Matches: {match_count} chapters for "{query}".'


def _registered_chapters() -> list[dict[str, Any]]:
    """One named resource per chapter, keyed by its search-facing URI."""
    listing = _state["directory"].list_resources()
    chapters = []
    for entry in listing["resources"]:
        metadata = entry.get("metadata") or {}
        number = int(metadata["chapter"])
        name = resource_name(number)
        chapters.append(
            {
                "name": name,
                "uri": search_uri(number),
                "title": metadata.get("title") or name,
                "description": _RESOURCE_DESCRIPTION,
                "mimeType": entry["content"]["mimeType"],
            }
        )
    return chapters


async def _run(operation: str, fn, *args, count=len, **kwargs):
    """Runs a synchronous core call in the pool and records request metrics."""
    start = time.perf_counter()
    try:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(_state["executor"], functools.partial(fn, *args, **kwargs))
    except Exception as exc:
        latency_ms = (time.perf_counter() - start) * 1000.0
        metrics_collector.record_request(operation, latency_ms, success=False)
        logger.error("api_request_failed", operation=operation, error=str(exc))
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    latency_ms = (time.perf_counter() - start) * 1000.0
    metrics_collector.record_request(operation, latency_ms, success=True, result_count=count(result))
    return result


def _one(_result) -> int:
    return 1


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/resources")
async def list_resources_endpoint():
    """List chapter resources (storage URIs, no body text)."""
    return await _run(
        "list",
        _state["directory"].list_resources,
        count=lambda listing: len(listing["resources"]),
    )


@app.get("/resources/read")
async def read_resource_endpoint(uri: str = Query(..., description="Storage URI, e.g. backbone/chapter/7")):
    """Read one chapter by storage URI."""
    data = await _run("read", _state["directory"].read_resource, uri, count=_one)
    if "error" in data:
        raise HTTPException(status_code=404, detail=data["error"])
    return data


@app.get("/chapters", response_model=list[ChapterResource], response_model_by_alias=True)
async def list_chapters_endpoint():
    """List chapters as named resources with search-facing URIs."""
    return await _run("chapters", _registered_chapters)


@app.get("/chapters/{chapter}", response_model=ChapterContent)
async def read_chapter_endpoint(chapter: str):
    """Read a chapter through its search-facing URI (backbone://chapter/NN)."""
    uri = f"{SEARCH_URI_PREFIX}{chapter}"
    data = await _run("read", _state["directory"].read_search_resource, uri, count=_one)
    if "error" in data:
        raise HTTPException(status_code=404, detail=data["error"])
    return ChapterContent(uri=uri, text=data["content"])


@app.post("/search", response_model=SearchResponse, response_model_by_alias=True)
async def search_endpoint(request: SearchRequest):
    """Search chapter text and return links to the matching chapters."""
    matches = await _run(
        "search",
        _state["search"].search,
        request.query,
        case_sensitive=bool(request.case_sensitive),
        max_excerpts=request.max_excerpts,
    )
    return SearchResponse(
        query=request.query,
        summary=_search_summary(request.query, len(matches)),
        matches=[SearchMatchModel.model_validate(match.to_dict()) for match in matches],
    )


@app.get("/metrics")
async def metrics_endpoint():
    """Return aggregated service metrics."""
    return metrics_collector.get_summary()
