"""Where iriprofile keeps downloaded files.

Everything fetched at run time lives below one cache root:

- ``$IRIPROFILE_CACHE`` when the variable is set,
- ``~/.cache/iriprofile`` otherwise.

The IRI index files go to the ``indices`` subdirectory, which is also the
default data directory handed to the model when ``IRIPROFILE_DATA`` is
unset.
"""

from __future__ import annotations

import os
from pathlib import Path

CACHE_ENV_VAR = "IRIPROFILE_CACHE"
"""Environment variable that overrides the cache root."""

INDICES_SUBDIR = "indices"
"""Cache subdirectory for ``apf107.dat`` and ``ig_rz.dat``."""


def cache_root() -> Path:
    """Return the cache root without creating it."""
    override = os.environ.get(CACHE_ENV_VAR)
    if override is not None:
        return Path(override)
    return Path.home() / ".cache" / "iriprofile"


def get_cache_dir(subdirectory: str | None = None) -> Path:
    """Return a directory below the cache root, creating it if needed.

    Args:
        subdirectory: Name of a directory below the root, or ``None`` for
            the root itself.

    Returns:
        The existing directory.
    """
    directory = cache_root() if subdirectory is None else cache_root() / subdirectory
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_indices_cache_dir() -> Path:
    """Return ``<cache root>/indices``, creating it if needed."""
    return get_cache_dir(INDICES_SUBDIR)
