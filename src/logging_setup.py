"""Logger factory shared by the standings scripts and engine modules."""

from __future__ import annotations

import logging


def setup_logging(name: str | None = None, level: int = logging.INFO) -> logging.Logger:
    """Configure and return a logger with consistent formatting.

    The handler is attached once per logger, so repeated calls only adjust the level.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


__all__ = ["setup_logging"]
