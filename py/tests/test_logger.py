from __future__ import annotations

import logging
import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(REPO_ROOT / "py" / "src"))

from saferoute.builder import create_route  # noqa: E402
from saferoute.logger import NoOpLogger, StdlibLogger, StructuredLogger, get_logger, set_logger  # noqa: E402
from saferoute.request import build_request  # noqa: E402
from saferoute.testkit import RecordingLogger  # noqa: E402


class TestLogger(unittest.TestCase):
    def tearDown(self) -> None:
        set_logger(None)

    def test_default_logger_is_noop(self) -> None:
        logger = get_logger()
        self.assertIsInstance(logger, NoOpLogger)
        self.assertIsInstance(logger, StructuredLogger)
        self.assertIs(logger.with_fields({"a": 1}), logger)

    def test_set_logger_replaces_and_resets(self) -> None:
        custom = RecordingLogger()
        set_logger(custom)
        self.assertIs(get_logger(), custom)

        set_logger(None)
        self.assertIsInstance(get_logger(), NoOpLogger)

    def test_routes_use_global_logger_when_none_configured(self) -> None:
        recorder = RecordingLogger()
        set_logger(recorder)

        def boom(_req, _args):
            raise RuntimeError("x")

        create_route().handler(boom).invoke(build_request("GET", "/"))
        self.assertEqual(recorder.messages("error"), ["route.unhandled_error"])

    def test_stdlib_logger_forwards_fields(self) -> None:
        base = logging.getLogger("saferoute.tests")
        logger = StdlibLogger(base).with_request_id("r-1").with_field("tenant", "t")
        self.assertIsInstance(logger, StructuredLogger)

        with self.assertLogs("saferoute.tests", level="DEBUG") as captured:
            logger.info("route.hello", {"status": 200})
            logger.warn("route.slow", {"tenant": "override"})
            logger.error("route.failed")
            logger.debug("route.debug")

        levels = [r.levelname for r in captured.records]
        self.assertEqual(levels, ["INFO", "WARNING", "ERROR", "DEBUG"])
        self.assertEqual(captured.records[0].fields, {"request_id": "r-1", "tenant": "t", "status": 200})
        self.assertEqual(captured.records[1].fields["tenant"], "override")

    def test_stdlib_logger_skips_disabled_levels(self) -> None:
        base = logging.getLogger("saferoute.tests.quiet")
        base.setLevel(logging.ERROR)
        self.addCleanup(base.setLevel, logging.NOTSET)
        with self.assertLogs("saferoute.tests.quiet", level="ERROR") as captured:
            StdlibLogger(base).info("ignored")
            StdlibLogger(base).error("kept")
        self.assertEqual([r.getMessage() for r in captured.records], ["kept"])

    def test_stdlib_logger_by_name(self) -> None:
        with self.assertLogs("saferoute", level="INFO") as captured:
            StdlibLogger().info("hello")
        self.assertEqual(captured.records[0].getMessage(), "hello")


if __name__ == "__main__":
    unittest.main()
