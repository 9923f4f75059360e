"""Debug logger construction for the CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

DEBUG_FORMAT = "[auth-debug] %(asctime)s.%(msecs)03d %(message)s"
DEBUG_DATE_FORMAT = "%H:%M:%S"


def get_debug_logger(enabled: bool, stream: TextIO | None = None) -> logging.Logger:
    """Build a standalone logger for one login flow.

    The logger is not registered with ``logging.getLogger`` so concurrent
    flows (and tests) never share handlers or levels. When disabled it
    discards everything.
    """
    logger = logging.Logger("stackeye.auth.debug")
    if not enabled:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEBUG_FORMAT, DEBUG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger
