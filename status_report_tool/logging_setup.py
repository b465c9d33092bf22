"""Logging setup for the converter: console plus a daily rolling file."""
from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import ConverterConfig
from .constants import LOG_FILE_NAME, LOG_RETAINED_FILE_COUNT

_LEVELS = {
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
    "information": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_log_level(name: Optional[str]) -> int:
    return _LEVELS.get(str(name or "").strip().lower(), logging.INFO)


def configure_logging(config: ConverterConfig, logger_name: str = "status_report_tool") -> logging.Logger:
    """Attach console and rotating file handlers to the package logger."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(parse_log_level(config.log_level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    log_dir = Path(config.log_path or ".")
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            when="midnight",
            backupCount=LOG_RETAINED_FILE_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as exc:
        logger.warning("File logging disabled, cannot write to %s: %s", log_dir, exc)
    return logger
