"""Logging helpers for gnss_stream.

Library modules log through ``logging.getLogger(__name__)`` and never add
handlers; front ends call :func:`get_logger` once to attach console output.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "gnss_stream", level: int | str = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
