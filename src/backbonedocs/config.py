# /backbonedocs/config.py
"""
Centralized configuration for the Backbone chapter service.
Includes corpus paths, chapter naming rules, search tuning, and logging setup.
"""
import os
from pathlib import Path
from dotenv import load_dotenv
from rich.console import Console
from .observability import configure_logging

# ==============================================================================
# CONSOLE & ENVIRONMENT
# ==============================================================================
console = Console()
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return bool(default)
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return int(default)
    try:
        value = int(raw)
    except ValueError:
        return int(default)
    return max(minimum, value)


# ==============================================================================
# GLOBAL CONFIGURATION
# ==============================================================================
# --- Path Configuration ---
# Docs directory is at ../../docs relative to this file (src/backbonedocs/config.py)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_DATA_DIR = _BASE_DIR / "data"

DOCS_DIR = Path(os.getenv("DOCS_DIR", str(_BASE_DIR / "docs")))
LOG_DIR = Path(os.getenv("LOG_DIR", str(_DATA_DIR / "logs")))
METRICS_DIR = Path(os.getenv("METRICS_DIR", str(LOG_DIR)))

# --- Chapter Discovery ---
CHAPTER_FILE_PATTERN = os.getenv("CHAPTER_FILE_PATTERN", r"Backbone-cap-(\d{2})\.md$")
CHAPTER_TITLE_FALLBACK = os.getenv("CHAPTER_TITLE_FALLBACK", "Chapter {number}")
CHAPTER_MIME_TYPE = "text/markdown"
# False aborts the whole load on the first unreadable chapter file.
SKIP_UNREADABLE_CHAPTERS = _env_bool("SKIP_UNREADABLE_CHAPTERS", False)

# --- Search Tuning ---
SEARCH_CONTEXT_CHARS = _env_int("SEARCH_CONTEXT_CHARS", 60, minimum=0)
SEARCH_MAX_EXCERPTS_LIMIT = _env_int("SEARCH_MAX_EXCERPTS_LIMIT", 10, minimum=1)
SEARCH_DEFAULT_MAX_EXCERPTS = _env_int("SEARCH_DEFAULT_MAX_EXCERPTS", 3, minimum=1)
if SEARCH_DEFAULT_MAX_EXCERPTS > SEARCH_MAX_EXCERPTS_LIMIT:
    SEARCH_DEFAULT_MAX_EXCERPTS = SEARCH_MAX_EXCERPTS_LIMIT

# --- Logging ---
LOG_PATH = Path(os.getenv("LOG_PATH", str(LOG_DIR / "app.log")))
LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
configure_logging(LOG_PATH)
