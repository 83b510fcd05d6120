"""Logging setup shared by the manifestrun CLI, service and pipeline stages."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "manifestrun"
CONSOLE_FORMAT = "[manifestrun] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_logger(stage: str | None = None) -> logging.Logger:
    """Return the logger for a pipeline stage, e.g. ``get_logger("graph")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{stage}" if stage else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send manifestrun records to stderr and, when ``log_file`` is set, append them to it.

    The file sink always records DEBUG so a run can be inspected after the fact
    without repeating it in verbose mode.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    console_level = logging.DEBUG if verbose else logging.INFO
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_handler(logging.StreamHandler(), console_level, CONSOLE_FORMAT))
    if log_file is None:
        logger.setLevel(console_level)
        return logger

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.addHandler(
        _handler(logging.FileHandler(log_file, mode="a", encoding="utf-8"), logging.DEBUG, FILE_FORMAT)
    )
    logger.setLevel(logging.DEBUG)
    return logger


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["configure_logging", "get_logger"]
