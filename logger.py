"""
logger.py

Responsibility: Installs the process-wide log handlers (stdout plus an optional
midnight-rotating file) and quiets chatty third-party loggers.
Does NOT: decide what gets logged; every module logs through its own
logging.getLogger(__name__).
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotated log files older than this are removed
DAYS_TO_KEEP = 7

# Libraries that log every request / job run at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler")

# Handlers installed by the last configure_logging() call
_installed: list[logging.Handler] = []


def configure_logging(level: str = "INFO", log_file: str = "", days_to_keep: int = DAYS_TO_KEEP) -> list[logging.Handler]:
    """
    Installs the process-wide log handlers: stdout always, plus a file that
    rotates at midnight when log_file is set. Calling it again replaces the
    handlers from the previous call.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            logging.handlers.TimedRotatingFileHandler(
                log_file, when="midnight", backupCount=days_to_keep, encoding="utf-8"
            )
        )

    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed.append(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handlers
