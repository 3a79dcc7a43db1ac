"""Logging for SinnayBot: JSON lines to a rotating file, plain text to stdout.

The file log carries the structured fields passed to ``log_with_context``
(channel, username, event_type and so on) so chat and OAuth activity can be
filtered after the fact.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE_NAME = "sinnaybot.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# Libraries that log every request or IRC line at INFO
NOISY_LOGGERS = ("httpx", "twitchio", "twitchio.websocket", "uvicorn.access")


def _json_file_handler(log_dir: Path) -> logging.Handler:
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d",
            timestamp=True,
        )
    )
    handler.setLevel(logging.DEBUG)
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    handler.setLevel(level)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Install the file and console handlers on the root logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        log_level: Console level name, e.g. "DEBUG" or "WARNING". The file always gets DEBUG.
        log_dir: Where sinnaybot.log goes. Defaults to ./logs next to the package.

    Returns:
        The root logger
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_json_file_handler(log_dir))
    root_logger.addHandler(_console_handler(level))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Log ``message`` with ``extra_fields`` attached as JSON keys in the file log.

    Example:
        log_with_context(logger, "info", "Replied to chat command", channel="sinnay", event_type="chat_command_reply")
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=extra_fields)
