from __future__ import annotations

import logging
import os
from typing import Mapping, MutableMapping, Optional


logger = logging.getLogger(__name__)


def merge(
    mapping: Mapping[str, str],
    overwrite: bool = False,
    environ: Optional[MutableMapping[str, str]] = None,
) -> None:
    """Apply a parsed mapping to the process environment.

    Existing variables win unless overwrite=True. The set of existing names is
    taken once, before any key is written. Keys the OS refuses (embedded NUL,
    ``=`` in the name) are skipped with a warning.
    """
    target = os.environ if environ is None else environ
    existing = set(target.keys())

    for key, value in mapping.items():
        if overwrite or key not in existing:
            try:
                target[key] = value
            except ValueError as exc:
                logger.warning("Skipping %r: %s", key, exc)
        else:
            logger.debug("Keeping existing value for %s", key)
