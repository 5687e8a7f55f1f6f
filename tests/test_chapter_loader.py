import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from backbonedocs import chapter_loader
from backbonedocs.chapter_loader import (
    ChapterReadError,
    extract_title,
    load_chapters,
    parse_chapter_number,
)
from backbonedocs.storage_provider import LocalChapterStore


class _FakeStore:
    """In-memory store that lists names in insertion order."""

    def __init__(self, files: dict[str, str]):
        self.files = dict(files)

    @property
    def root(self) -> Path:
        return Path("memory")

    def exists(self) -> bool:
        return True

    def list_names(self) -> list[str]:
        return list(self.files)

    def read_text(self, name: str) -> str:
        return self.files[name]


class TestChapterLoader(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.store = LocalChapterStore(self.root)

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, name: str, text: str):
        (self.root / name).write_text(text, encoding="utf-8")

    def test_chapters_sorted_ascending_regardless_of_creation_order(self):
        for number in (10, 2, 7, 1):
            self._write(f"Backbone-cap-{number:02d}.md", f"# Chapter body {number}\n")
        chapters = load_chapters(self.store)
        self.assertEqual([c.number for c in chapters], [1, 2, 7, 10])

    def test_non_matching_files_are_ignored(self):
        self._write("Backbone-cap-01.md", "# One\n")
        self._write("Backbone-cap-1.md", "# Not padded\n")
        self._write("Backbone-cap-100.md", "# Three digits\n")
        self._write("Backbone-cap-02.txt", "# Wrong extension\n")
        self._write("notes.md", "# Notes\n")
        (self.root / "Backbone-cap-03.md").mkdir()
        chapters = load_chapters(self.store)
        self.assertEqual([c.filename for c in chapters], ["Backbone-cap-01.md"])

    def test_title_from_first_h1_heading(self):
        self._write("Backbone-cap-04.md", "Preface line\n## Sub heading\n#   Real Title  \n# Second\n")
        chapter = load_chapters(self.store)[0]
        self.assertEqual(chapter.title, "Real Title")

    def test_title_falls_back_to_chapter_label(self):
        self._write("Backbone-cap-05.md", "No headings here.\n## Only a subheading\n")
        chapter = load_chapters(self.store)[0]
        self.assertEqual(chapter.title, "Chapter 5")

    def test_storage_uri_is_not_zero_padded(self):
        self._write("Backbone-cap-07.md", "# Seven\n")
        chapter = load_chapters(self.store)[0]
        self.assertEqual(chapter.uri, "backbone/chapter/7")
        self.assertEqual(chapter.number, 7)

    def test_content_is_raw_file_text(self):
        raw = "# Intro\r\nHello world.\r\n\r\n  indented\n"
        (self.root / "Backbone-cap-01.md").write_bytes(raw.encode("utf-8"))
        chapter = load_chapters(self.store)[0]
        self.assertEqual(chapter.content, raw)
        self.assertEqual(chapter.title, "Intro")

    def test_missing_directory_returns_empty_list(self):
        missing = LocalChapterStore(self.root / "does-not-exist")
        self.assertEqual(load_chapters(missing), [])

    def test_unreadable_chapter_aborts_load_by_default(self):
        self._write("Backbone-cap-01.md", "# Fine\n")
        (self.root / "Backbone-cap-02.md").write_bytes(b"\xff\xfe\xfa not utf-8")
        with self.assertRaises(ChapterReadError) as ctx:
            load_chapters(self.store)
        self.assertEqual(ctx.exception.filename, "Backbone-cap-02.md")
        self.assertIsInstance(ctx.exception.__cause__, UnicodeDecodeError)

    def test_unreadable_chapter_skipped_when_configured(self):
        self._write("Backbone-cap-01.md", "# Fine\n")
        (self.root / "Backbone-cap-02.md").write_bytes(b"\xff\xfe\xfa not utf-8")
        with patch.object(chapter_loader, "SKIP_UNREADABLE_CHAPTERS", True):
            chapters = load_chapters(self.store)
        self.assertEqual([c.number for c in chapters], [1])

    def test_equal_numbers_keep_listing_order(self):
        store = _FakeStore({
            "b-Backbone-cap-03.md": "# Second listed\n",
            "Backbone-cap-01.md": "# First\n",
            "a-Backbone-cap-03.md": "# Third listed\n",
        })
        chapters = load_chapters(store)
        self.assertEqual([c.number for c in chapters], [1, 3, 3])
        self.assertEqual([c.title for c in chapters[1:]], ["Second listed", "Third listed"])

    def test_parse_chapter_number(self):
        self.assertEqual(parse_chapter_number("Backbone-cap-09.md"), 9)
        self.assertEqual(parse_chapter_number("Backbone-cap-42.md"), 42)
        self.assertIsNone(parse_chapter_number("Backbone-cap-9.md"))
        self.assertIsNone(parse_chapter_number("Backbone-cap-09.markdown"))

    def test_extract_title_requires_space_after_hash(self):
        self.assertEqual(extract_title("#NoSpace\n", 3), "Chapter 3")
        self.assertEqual(extract_title("\n\n# Spaced Out\n", 3), "Spaced Out")


if __name__ == "__main__":
    unittest.main()
