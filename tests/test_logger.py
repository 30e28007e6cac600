"""
Tests for the console logger setup
"""

import io
import logging

from authdesk.logger import setup_logger, LOGGER_NAME


class TestSetupLogger:
    def test_one_handler_after_repeated_setup(self):
        name = "AuthDeskTest.repeat"
        setup_logger(name=name)
        logger = setup_logger(name=name)
        assert len(logger.handlers) == 1

    def test_level_by_name_or_number(self):
        name = "AuthDeskTest.level"
        assert setup_logger("debug", name=name).level == logging.DEBUG
        assert setup_logger(logging.WARNING, name=name).level == logging.WARNING
        assert setup_logger("NOPE", name=name).level == logging.INFO

    def test_line_format(self):
        stream = io.StringIO()
        logger = setup_logger("INFO", stream=stream, name="AuthDeskTest.format")
        logger.info("Handled /ping")
        assert stream.getvalue().rstrip().endswith("| INFO | AuthDeskTest.format | Handled /ping")

    def test_uvicorn_access_log_is_quiet(self):
        setup_logger(name="AuthDeskTest.quiet")
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_app_logger_exists(self):
        assert logging.getLogger(LOGGER_NAME).handlers
