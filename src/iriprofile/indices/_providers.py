"""Locate, validate and refresh the IRI index files.

- :func:`validate_index_files`: check that a data directory holds usable
  ``apf107.dat`` and ``ig_rz.dat`` files.
- :func:`load_apf107`: parse ``apf107.dat`` from a data directory.
- :func:`needs_refresh`: whether a cached file is missing or too old.
- :func:`load_cached_indices`: keep the files in a local cache fresh,
  downloading new copies when stale.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import NamedTuple

import polars as pl

from iriprofile.errors import StartupError
from iriprofile.indices._download import (
    APF107_FILENAME,
    IG_RZ_FILENAME,
    INDEX_FILENAMES,
    download_index_file,
)
from iriprofile.indices._parsers import parse_apf107_file, parse_ig_rz_header
from iriprofile.utils.caching import get_indices_cache_dir

logger = logging.getLogger(__name__)

_DEFAULT_MAX_AGE_DAYS: float = 30.0
"""Default maximum age for cached index files in days."""

_SECONDS_PER_DAY = 86400.0


class IndexFiles(NamedTuple):
    """Paths of the two index files read when the model is primed."""

    apf107: Path
    ig_rz: Path


def validate_index_files(data_dir: str | Path) -> IndexFiles:
    """Check that *data_dir* holds readable, well-formed index files.

    Args:
        data_dir: Directory expected to contain ``apf107.dat`` and
            ``ig_rz.dat``.

    Returns:
        The validated file paths.

    Raises:
        StartupError: If a file is missing, empty, or cannot be parsed.
    """
    data_dir = Path(data_dir)
    files = IndexFiles(apf107=data_dir / APF107_FILENAME, ig_rz=data_dir / IG_RZ_FILENAME)

    for path in files:
        if not path.is_file():
            raise StartupError(f"IRI index file not found: {path}")
        if path.stat().st_size == 0:
            raise StartupError(f"IRI index file is empty: {path}")

    try:
        parse_apf107_file(files.apf107)
        parse_ig_rz_header(files.ig_rz)
    except (OSError, ValueError) as err:
        raise StartupError(f"Corrupt IRI index file in {data_dir}: {err}") from err

    return files


def needs_refresh(path: Path, max_age_days: float) -> bool:
    """Whether an index file is missing or was last written over *max_age_days* ago."""
    try:
        written = path.stat().st_mtime
    except FileNotFoundError:
        return True
    return time.time() - written > max_age_days * _SECONDS_PER_DAY


def load_apf107(data_dir: str | Path) -> pl.DataFrame:
    """Load the daily Ap/F10.7 table from *data_dir*.

    Args:
        data_dir: Directory containing ``apf107.dat``.

    Returns:
        DataFrame as produced by :func:`parse_apf107_file`.
    """
    return parse_apf107_file(Path(data_dir) / APF107_FILENAME)


def load_cached_indices(
    directory: str | Path | None = None,
    *,
    max_age_days: float = _DEFAULT_MAX_AGE_DAYS,
) -> IndexFiles:
    """Ensure fresh index files exist in a local cache directory.

    Each file that is missing or older than *max_age_days* is downloaded.
    When a download fails but an older copy exists, the older copy is kept
    and a warning is logged.

    Args:
        directory: Target directory.  When ``None`` (the default), uses
            ``<cache_dir>/indices``.
        max_age_days: Maximum acceptable age of a cached file in days.
            Defaults to 30.

    Returns:
        The validated file paths.

    Raises:
        StartupError: If a file can neither be downloaded nor found in the
            cache, or the resulting files are corrupt.
    """
    if directory is None:
        directory = get_indices_cache_dir()
    else:
        directory = Path(directory)

    for filename in INDEX_FILENAMES:
        filepath = directory / filename
        if not needs_refresh(filepath, max_age_days):
            continue
        try:
            download_index_file(filename, filepath)
        except Exception as err:
            if not filepath.exists():
                raise StartupError(f"Could not download {filename}: {err}") from err
            logger.warning(
                "Failed to refresh %s; using cached copy at %s.",
                filename,
                filepath,
                exc_info=True,
            )

    return validate_index_files(directory)
