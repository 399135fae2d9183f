"""Logging configuration for DevTask."""

import logging
import sys

from devtask.config import log_level


def setup_logging(level: int | str | None = None) -> logging.Logger:
    """Configure and return the application logger."""
    level = level if level is not None else log_level()
    logger = logging.getLogger("devtask")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)

    return logger


logger = setup_logging()
