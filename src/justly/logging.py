"""Logging for the runner itself; recipe output never goes through here."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import os


_configured = False

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
ROOT_LOGGER = "justly"


def _ensure_base_logger() -> None:
    global _configured
    if _configured:
        return
    # Recipe output shares the terminal, so stay quiet unless asked
    level = os.getenv("JUSTLY_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=LOG_FORMAT,
    )
    _configured = True


def get_logger(name: str, log_file: Path | None = None) -> logging.Logger:
    _ensure_base_logger()
    logger = logging.getLogger(name)
    # Do not duplicate handlers if already set
    if log_file and not any(
        isinstance(h, RotatingFileHandler) for h in logger.handlers
    ):
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def configure_logging(verbosity: int = 0, log_file: Path | None = None) -> logging.Logger:
    """Set up the `justly` logger for one CLI run.

    ``-v`` shows plan and step messages, ``-vv`` adds debug detail. A file
    log comes from ``log_file`` or ``JUSTLY_LOG_FILE``.
    """
    if log_file is None and os.getenv("JUSTLY_LOG_FILE"):
        log_file = Path(os.environ["JUSTLY_LOG_FILE"])
    logger = get_logger(ROOT_LOGGER, log_file=log_file)
    if verbosity >= 2:
        logger.setLevel(logging.DEBUG)
    elif verbosity == 1:
        logger.setLevel(logging.INFO)
    return logger
