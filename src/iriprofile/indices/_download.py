"""Download IRI index files.

Provides a helper to fetch the latest ``apf107.dat`` / ``ig_rz.dat``.
Network errors are propagated to the caller so that higher-level code
(e.g. :func:`load_cached_indices`) can decide on fallback behaviour.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

IRI_INDICES_URL: str = "https://irimodel.org/indices"
"""Base URL of the index files maintained by the IRI working group."""

APF107_FILENAME: str = "apf107.dat"
"""Daily Ap and F10.7 indices read by ``READAPF107``."""

IG_RZ_FILENAME: str = "ig_rz.dat"
"""Monthly IG12 and Rz12 indices read by ``READ_IG_RZ``."""

INDEX_FILENAMES: tuple[str, ...] = (APF107_FILENAME, IG_RZ_FILENAME)

_DEFAULT_TIMEOUT: float = 120.0
"""Default HTTP timeout in seconds."""


def download_index_file(
    filename: str,
    filepath: str | Path,
    *,
    url: str | None = None,
    timeout: float = _DEFAULT_TIMEOUT,
) -> Path:
    """Download one index file to *filepath*.

    Creates parent directories if they do not exist.

    Args:
        filename: One of :data:`INDEX_FILENAMES`.
        filepath: Destination path for the downloaded file.
        url: URL to fetch.  Defaults to ``{IRI_INDICES_URL}/{filename}``.
        timeout: HTTP timeout in seconds.  Defaults to 120.

    Returns:
        Resolved :class:`~pathlib.Path` to the written file.

    Raises:
        ValueError: If *filename* is not a known index file.
        httpx.HTTPStatusError: If the server returns a non-2xx status.
        httpx.TransportError: On network-level failures (DNS, timeout, etc.).
    """
    if filename not in INDEX_FILENAMES:
        raise ValueError(f"Unknown index file '{filename}'. Expected one of {INDEX_FILENAMES}")
    if url is None:
        url = f"{IRI_INDICES_URL}/{filename}"

    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Downloading %s from %s", filename, url)
    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        response = client.get(url)
        response.raise_for_status()

    filepath.write_text(response.text, encoding="utf-8")
    logger.info("%s written to %s", filename, filepath)
    return filepath.resolve()
