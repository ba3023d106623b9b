"""
Test suite for lib/logging_utils.py
"""

import logging
import os
import tempfile
import unittest
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler

from lib.logging_utils import configureLogger, createFileHandler, getLogLevelByStr


class TestLoggingUtils(unittest.TestCase):

    def setUp(self):
        self.tempDir = tempfile.TemporaryDirectory()
        self.localLogger = logging.getLogger("test_logging_utils.local")
        self.localLogger.propagate = False

    def tearDown(self):
        for handler in self.localLogger.handlers[:]:
            self.localLogger.removeHandler(handler)
            handler.close()
        self.tempDir.cleanup()

    def test_get_log_level_by_str(self):
        """Test level names are case insensitive and unknown ones fall back to default"""
        self.assertEqual(getLogLevelByStr("debug"), logging.DEBUG)
        self.assertEqual(getLogLevelByStr("WARNING"), logging.WARNING)
        self.assertIsNone(getLogLevelByStr("loud"))
        self.assertEqual(getLogLevelByStr("loud", logging.INFO), logging.INFO)

    def test_create_file_handler_kinds(self):
        """Test rotation setting selects the handler class"""
        logFile = os.path.join(self.tempDir.name, "x.log")

        handlers = [
            createFileHandler(logFile, {}),
            createFileHandler(logFile, {"rotate": "size", "max-bytes": 1024}),
            createFileHandler(logFile, {"rotate": True}),
        ]
        try:
            self.assertIs(type(handlers[0]), logging.FileHandler)
            self.assertIsInstance(handlers[1], RotatingFileHandler)
            self.assertEqual(handlers[1].maxBytes, 1024)
            self.assertEqual(handlers[1].backupCount, 1)
            self.assertIsInstance(handlers[2], TimedRotatingFileHandler)
        finally:
            for handler in handlers:
                handler.close()

    def test_configure_logger_writes_file(self):
        """Test file sink, level and format from a config section"""
        logFile = os.path.join(self.tempDir.name, "nested", "suite.log")
        configureLogger(self.localLogger, {"level": "WARNING", "file": logFile, "format": "%(levelname)s %(message)s"})

        self.localLogger.info("hidden")
        self.localLogger.warning("visible")
        for handler in self.localLogger.handlers:
            handler.flush()

        with open(logFile, encoding="utf-8") as f:
            self.assertEqual(f.read(), "WARNING visible\n")

    def test_configure_logger_replaces_handlers(self):
        """Test reconfiguring does not duplicate handlers"""
        configureLogger(self.localLogger, {"console": True})
        configureLogger(self.localLogger, {"console": True})

        self.assertEqual(len(self.localLogger.handlers), 1)


if __name__ == "__main__":
    unittest.main()
