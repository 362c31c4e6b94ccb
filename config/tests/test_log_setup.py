import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from config.log_setup import LOG_FORMAT, setup_logging
from config.manager import SettingsManager


class TestSetupLogging(unittest.TestCase):
    """Test cases for setup_logging."""

    def setUp(self):
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level

    def tearDown(self):
        for handler in self.root.handlers[:]:
            self.root.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            self.root.addHandler(handler)
        self.root.setLevel(self.saved_level)

    def test_console_only(self):
        logger = setup_logging("warning")

        self.assertIs(logger, self.root)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.handlers[0].level, logging.WARNING)
        self.assertEqual(logger.handlers[0].formatter._fmt, LOG_FORMAT)

    def test_with_log_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "logs" / "jinx.log"

            logger = setup_logging(logging.INFO, log_file=log_file)
            logging.getLogger("jinx.test").debug("written to file")
            for handler in logger.handlers:
                handler.flush()

            self.assertEqual(logger.level, logging.DEBUG)
            self.assertIn("written to file", log_file.read_text())

            for handler in logger.handlers[:]:
                logger.removeHandler(handler)
                handler.close()

    def test_level_defaults_to_log_level_setting(self):
        saved_instance = SettingsManager._instance
        SettingsManager._instance = None
        try:
            with mock.patch.dict(os.environ, {"JINX_LOG_LEVEL": "error"}):
                logger = setup_logging()
        finally:
            SettingsManager._instance = saved_instance

        self.assertEqual(logger.handlers[0].level, logging.ERROR)
        self.assertEqual(logger.level, logging.ERROR)

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logging("chatty")

        self.assertEqual(logger.handlers[0].level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
