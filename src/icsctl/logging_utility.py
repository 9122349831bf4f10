import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from icsctl.exceptions import ConfigurationError

LOGGER_NAME = 'icsctl'

logger = logging.getLogger(LOGGER_NAME)


class ColorFormatter(logging.Formatter):
    """
    Console formatter that colors the level name when stderr is a terminal.
    """
    COLORS = {
        'DEBUG': '\033[94m',    # Blue
        'INFO': '\033[92m',     # Green
        'WARNING': '\033[93m',  # Yellow
        'ERROR': '\033[91m',    # Red
        'CRITICAL': '\033[91m\033[1m',  # Bold Red
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        if not sys.stderr.isatty():
            return super().format(record)

        original_levelname = record.levelname
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{color}{record.levelname:<7}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def setup_logging(debug: bool = False, level: str = 'INFO', log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        debug: Force DEBUG level regardless of ``level``.
        level: Level name used when ``debug`` is off.
        log_file: Also write to this file, rotated at 5 MB with 3 backups.

    Returns:
        The configured logger.

    Raises:
        ConfigurationError: if the log file cannot be created.
    """
    log_level = logging.DEBUG if debug else logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger.setLevel(log_level)
    logger.handlers = []
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColorFormatter('%(levelname)s %(message)s'))
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
        except OSError as e:
            raise ConfigurationError(f"Cannot open log file {log_file}: {e}") from e
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(levelname)s - %(name)s:%(lineno)d - %(message)s')
        )
        logger.addHandler(file_handler)

    return logger
