import json
import logging
import tempfile
import unittest
from pathlib import Path

from backbonedocs import config
from backbonedocs.config import LOG_PATH
from backbonedocs.metrics import MetricsCollector
from backbonedocs.observability import get_logger


class TestObservability(unittest.TestCase):
    def test_structured_logging_writes_event(self):
        logger = get_logger("tests.observability")
        marker = "backbone_logging_probe"
        logger.info(marker, detail="ok")
        for handler in logging.getLogger().handlers:
            try:
                handler.flush()
            except Exception:
                pass
        self.assertTrue(Path(LOG_PATH).exists())
        content = Path(LOG_PATH).read_text(encoding="utf-8")
        self.assertIn(marker, content)

    def test_missing_docs_dir_is_logged_not_raised(self):
        from backbonedocs.chapter_loader import load_chapters
        from backbonedocs.storage_provider import LocalChapterStore

        with tempfile.TemporaryDirectory() as td:
            missing = Path(td) / "gone"
            self.assertEqual(load_chapters(LocalChapterStore(missing)), [])
        for handler in logging.getLogger().handlers:
            handler.flush()
        content = Path(LOG_PATH).read_text(encoding="utf-8")
        self.assertIn("chapter_docs_missing", content)


class TestConfigHelpers(unittest.TestCase):
    def test_env_int_and_bool_parsing(self):
        import os
        from unittest.mock import patch

        with patch.dict(os.environ, {"X_INT": "abc", "X_NEG": "-3", "X_BOOL": " Yes "}):
            self.assertEqual(config._env_int("X_INT", 5), 5)
            self.assertEqual(config._env_int("X_NEG", 5, minimum=0), 0)
            self.assertTrue(config._env_bool("X_BOOL", False))
            self.assertFalse(config._env_bool("X_MISSING_FLAG", False))

    def test_default_search_tuning(self):
        self.assertLessEqual(config.SEARCH_DEFAULT_MAX_EXCERPTS, config.SEARCH_MAX_EXCERPTS_LIMIT)
        self.assertEqual(config.CHAPTER_MIME_TYPE, "text/markdown")


class TestMetricsCollector(unittest.TestCase):
    def test_summary_and_jsonl_log(self):
        with tempfile.TemporaryDirectory() as td:
            collector = MetricsCollector(log_dir=td)
            collector.record_request("search", 12.0, success=True, result_count=3)
            collector.record_request("search", 4.0, success=True, result_count=1)
            collector.record_request("read", 8.0, success=False)

            summary = collector.get_summary()
            self.assertEqual(summary["throughput"]["total_requests"], 3)
            self.assertEqual(summary["throughput"]["by_operation"], {"search": 2, "read": 1})
            self.assertEqual(summary["latency"]["min_ms"], 4.0)
            self.assertEqual(summary["latency"]["max_ms"], 12.0)
            self.assertEqual(summary["search"]["avg_chapters_matched"], 2.0)
            self.assertEqual(summary["errors"]["count"], 1)

            lines = (Path(td) / "metrics.jsonl").read_text(encoding="utf-8").splitlines()
            self.assertEqual(len(lines), 3)
            self.assertEqual(json.loads(lines[0])["operation"], "search")

    def test_empty_summary(self):
        with tempfile.TemporaryDirectory() as td:
            summary = MetricsCollector(log_dir=td).get_summary()
        self.assertEqual(summary["latency"]["avg_ms"], 0.0)
        self.assertEqual(summary["errors"]["rate_percent"], 0.0)


if __name__ == "__main__":
    unittest.main()
