"""Shared utility functions for iriprofile.

Provides the location of the download cache.
"""

from iriprofile.utils.caching import (
    CACHE_ENV_VAR,
    cache_root,
    get_cache_dir,
    get_indices_cache_dir,
)

__all__ = [
    "CACHE_ENV_VAR",
    "cache_root",
    "get_cache_dir",
    "get_indices_cache_dir",
]
