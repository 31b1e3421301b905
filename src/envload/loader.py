from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Iterable, MutableMapping, Optional, Union

import httpx

from envload.environ import merge
from envload.parser import ParseResult, parse
from envload.sources import AcquisitionError, read_file, read_stream, read_url


logger = logging.getLogger(__name__)

DEFAULT_DOTENV_FILES = (".env.local", ".env")


def load_stream(stream: IO) -> ParseResult:
    try:
        lines = read_stream(stream)
    except AcquisitionError as exc:
        return ParseResult(error=exc)
    return parse(lines)


def load_file(path: Union[str, Path]) -> ParseResult:
    """Read and parse an env file. Acquisition errors are returned, not raised."""
    try:
        lines = read_file(path)
    except AcquisitionError as exc:
        return ParseResult(error=exc)
    return parse(lines)


def load_url(url: str, client: Optional[httpx.Client] = None) -> ParseResult:
    """Fetch and parse an env file served over HTTP."""
    try:
        lines = read_url(url, client=client)
    except AcquisitionError as exc:
        return ParseResult(error=exc)
    return parse(lines)


def load_dotenv(
    paths: Iterable[Union[str, Path]] = DEFAULT_DOTENV_FILES,
    *,
    override: bool = False,
    environ: Optional[MutableMapping[str, str]] = None,
) -> list[Path]:
    """Load environment variables from dotenv-style files.

    Files are processed in order and missing ones are skipped. Existing
    environment variables win by default; set override=True to replace.
    A file that fails to parse raises before any of its keys are applied.

    Returns the paths that were loaded.
    """
    loaded: list[Path] = []
    for p in paths:
        path = Path(p)
        if not path.is_file():
            logger.debug("Skipping missing env file %s", path)
            continue

        mapping = load_file(path).raise_for_error()
        merge(mapping, overwrite=override, environ=environ)
        logger.debug("Loaded %d keys from %s", len(mapping), path)
        loaded.append(path)
    return loaded
