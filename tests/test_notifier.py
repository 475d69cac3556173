from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path

from jsonconfig import ConfigStore, LoggingNotifier


class LoggingNotifierTestCase(unittest.TestCase):
    def test_messages_go_to_package_logger(self) -> None:
        notifier = LoggingNotifier()
        with self.assertLogs("jsonconfig", level="WARNING") as captured:
            notifier.warn("section missing")
            notifier.error("save failed")
        self.assertEqual(
            captured.output,
            ["WARNING:jsonconfig:section missing", "ERROR:jsonconfig:save failed"],
        )

    def test_store_uses_logging_notifier_by_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, ConfigStore(
            Path(tmp) / "config.json", dict
        ) as store:
            store.load()
            with self.assertLogs("jsonconfig", level="WARNING") as captured:
                self.assertIsNone(store.get_section("missing", dict))
        self.assertIn("Section 'missing' not found.", captured.output[0])

    def test_custom_logger(self) -> None:
        logger = logging.getLogger("tests.notifier")
        with self.assertLogs(logger, level="ERROR") as captured:
            LoggingNotifier(logger).error("boom")
        self.assertEqual(captured.output, ["ERROR:tests.notifier:boom"])


if __name__ == "__main__":
    unittest.main()
