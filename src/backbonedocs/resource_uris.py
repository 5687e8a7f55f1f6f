"""
Chapter URI helpers.

Two URI forms coexist:
- storage URIs (``backbone/chapter/7``) key the resource cache and the read path;
- search-facing URIs (``backbone://chapter/07``) are returned by search and used
  when chapters are registered as named resources on a transport.
"""
from __future__ import annotations

import re

STORAGE_URI_PREFIX = "backbone/chapter/"
SEARCH_URI_PREFIX = "backbone://chapter/"
RESOURCE_NAME_PREFIX = "backbone-chapter-"

_SEARCH_URI_RE = re.compile(r"^backbone://chapter/(\d{1,2})$")


def storage_uri(number: int) -> str:
    return f"{STORAGE_URI_PREFIX}{int(number)}"


def search_uri(number: int) -> str:
    return f"{SEARCH_URI_PREFIX}{int(number):02d}"


def resource_name(number: int) -> str:
    return f"{RESOURCE_NAME_PREFIX}{int(number):02d}"


def search_uri_to_storage_uri(uri: str) -> str | None:
    """Maps ``backbone://chapter/07`` to ``backbone/chapter/7``; None when the URI is not a chapter link."""
    match = _SEARCH_URI_RE.match(str(uri or "").strip())
    if not match:
        return None
    return storage_uri(int(match.group(1), 10))
