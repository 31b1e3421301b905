"""Logging setup for the envload command line."""

from __future__ import annotations

import logging
import sys
from typing import Optional


_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"
_HANDLER_NAME = "envload-stderr"


def setup_logging(level: Optional[int]) -> None:
    """Attach a stderr handler to the ``envload`` logger.

    Logging stays disabled when level is None.
    """
    if level is None:
        return

    logger = logging.getLogger("envload")
    logger.setLevel(level)
    if any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    handler.set_name(_HANDLER_NAME)
    logger.addHandler(handler)
