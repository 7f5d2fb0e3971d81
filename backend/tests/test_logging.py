"""
Tests for logging setup.
"""

import logging

import pytest

from hotel_scraper.base import Colors
from hotel_scraper.logging_config import ColorStripFormatter, configure_logging


class TestColorStripFormatter:

    def test_strips_ansi_codes(self):
        formatter = ColorStripFormatter("%(message)s")
        record = logging.LogRecord("scraper", logging.INFO, __file__, 1, Colors.green("Found 3 hotels"), None, None)

        assert formatter.format(record) == "Found 3 hotels"


class TestConfigureLogging:

    def test_file_gets_plain_text(self, tmp_path):
        log_file = tmp_path / "logs" / "scraper.log"
        scraper_logger = configure_logging("DEBUG", "%(name)s %(message)s", log_file)

        logging.getLogger("scraper.booking").info(Colors.red("No hotels found on page 3"))
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert scraper_logger.level == logging.DEBUG
        assert "scraper.booking No hotels found on page 3" in log_file.read_text(encoding='utf-8')
        assert "\033[" not in log_file.read_text(encoding='utf-8')

    def test_noisy_loggers_quieted(self):
        configure_logging("DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")
