"""Module-wide configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
when decoding model output into JAX arrays.  The default is
``jnp.float32``, the width of the Fortran ``REAL`` values the model writes.
Switching to ``jnp.float64`` automatically enables JAX's 64-bit mode
(``jax_enable_x64``).

Also resolves the locations of the compiled IRI library and of the
directory holding its coefficient and index files:

- ``IRIPROFILE_LIB``: path to the shared library exporting ``iri_sub_``.
- ``IRIPROFILE_DATA``: directory containing ``apf107.dat``, ``ig_rz.dat``
  and the IRI coefficient files.  Defaults to ``<cache>/indices``.
"""

from __future__ import annotations

import os
from pathlib import Path

import jax
import jax.numpy as jnp

from iriprofile.utils.caching import get_indices_cache_dir

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_LIB_ENV_VAR = "IRIPROFILE_LIB"
_DATA_ENV_VAR = "IRIPROFILE_DATA"

_dtype = jnp.float32


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for decoded model output.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is automatically
    enabled via ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float32``).
    """
    return _dtype


def get_library_path() -> Path | None:
    """Return the IRI shared library path from ``$IRIPROFILE_LIB``.

    Returns:
        The configured path, or ``None`` when the variable is unset.
    """
    env = os.environ.get(_LIB_ENV_VAR)
    if not env:
        return None
    return Path(env)


def get_data_dir() -> Path:
    """Return the directory holding the IRI data files.

    Uses ``$IRIPROFILE_DATA`` when set, otherwise the index cache
    directory.

    Returns:
        Path to the data directory.
    """
    env = os.environ.get(_DATA_ENV_VAR)
    if env:
        return Path(env)
    return get_indices_cache_dir()
