from __future__ import annotations

import io
import logging
from pathlib import Path
from time import monotonic
from typing import IO, Optional, Union

import httpx

from envload.parser import EnvloadError, split_lines


logger = logging.getLogger(__name__)

URL_TIMEOUT_SECONDS = 60.0


class AcquisitionError(EnvloadError):
    pass


def _decode(data: Union[str, bytes]) -> str:
    if isinstance(data, bytes):
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise AcquisitionError(f"Source is not valid UTF-8: {exc}") from exc
    return data


def read_stream(stream: IO) -> list[str]:
    """Read all lines from a text or binary stream."""
    try:
        data = stream.read()
    except (OSError, io.UnsupportedOperation) as exc:
        raise AcquisitionError(f"Failed to read stream: {exc}") from exc
    return split_lines(_decode(data))


def read_file(path: Union[str, Path]) -> list[str]:
    """Read all lines from a UTF-8 file."""
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise AcquisitionError(f"Failed to read {p}: {exc}") from exc
    logger.debug("Read %d bytes from %s", len(data), p)
    return split_lines(_decode(data))


def read_url(url: str, client: Optional[httpx.Client] = None) -> list[str]:
    """Fetch an env file over HTTP GET, following redirects.

    The whole request, body included, must finish within 60 seconds.
    Transport errors, non-2xx responses and an exceeded deadline are reported
    as AcquisitionError; the body is only parsed after it was fully received.
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(
            timeout=httpx.Timeout(URL_TIMEOUT_SECONDS),
            follow_redirects=True,
        )

    deadline = monotonic() + URL_TIMEOUT_SECONDS
    chunks: list[bytes] = []
    try:
        with client.stream("GET", url, follow_redirects=True) as res:
            res.raise_for_status()
            for chunk in res.iter_bytes():
                chunks.append(chunk)
                if monotonic() > deadline:
                    raise AcquisitionError(
                        f"GET {url} exceeded {URL_TIMEOUT_SECONDS:g}s deadline"
                    )
    except httpx.HTTPStatusError as exc:
        raise AcquisitionError(
            f"GET {url} returned HTTP {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise AcquisitionError(f"GET {url} failed: {exc}") from exc
    finally:
        if owns_client:
            client.close()

    body = b"".join(chunks)
    logger.debug("Fetched %d bytes from %s", len(body), url)
    return split_lines(_decode(body))
