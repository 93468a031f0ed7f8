# layout_engine/logging_config.py
"""Opt-in console logging for the layout engine."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from .config import DEFAULT_CONFIG

_HANDLER_TAG = '_layout_engine_handler'


def setup_logging(
    name: str = 'layout_engine',
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging configuration.

    Safe to call repeatedly: handlers installed by an earlier call are
    replaced, not stacked.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Record format (EngineConfig.log_format if None)
        log_file: Optional path for a rotating file handler

    Returns:
        Configured logger instance
    """
    if level is None:
        level = DEFAULT_CONFIG.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(fmt or DEFAULT_CONFIG.log_format)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_TAG, True)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_TAG, True)
        logger.addHandler(file_handler)

    return logger
