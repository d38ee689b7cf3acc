"""Defaults and logging setup for tiny-qsim."""

from __future__ import annotations

import logging
import os

import numpy as np

# Numeric defaults
DEFAULT_PRECISION = np.float64
DEFAULT_EPSILON = 1e-10

# Logging settings
LOG_LEVEL = os.getenv("TINY_QSIM_LOG_LEVEL", "WARNING")
LOG_FORMAT = os.getenv(
    "TINY_QSIM_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Attach a console handler to the ``tiny_qsim`` logger.

    Parameters
    ----------
    level : str, optional
        Log level name (DEBUG, INFO, ...). Defaults to ``LOG_LEVEL``.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    if level is None:
        level = LOG_LEVEL

    logger = logging.getLogger("tiny_qsim")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # One console handler, even if called repeatedly
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setLevel(logger.level)
            return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logger.level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)
    return logger
