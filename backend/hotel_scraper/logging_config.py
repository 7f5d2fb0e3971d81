"""
Logging setup for the scraper.

Console output keeps the ANSI colors used by the status lines; the
optional log file gets the same records with the color codes stripped.
"""

import logging
import re
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ('playwright', 'httpx', 'httpcore', 'asyncio')


class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


def configure_logging(
    level: str = "INFO",
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure the 'scraper' logger hierarchy.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        log_format: logging format string
        log_file: Optional file that receives color-stripped records

    Returns:
        The 'scraper' parent logger
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers = []
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(ColorStripFormatter(log_format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=numeric_level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Child loggers (scraper.booking, scraper.manager) inherit from here
    scraper_logger = logging.getLogger('scraper')
    scraper_logger.setLevel(numeric_level)
    return scraper_logger
