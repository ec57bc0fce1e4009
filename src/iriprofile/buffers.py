"""Fixed-shape output buffers for ``IRI_SUB``.

The Fortran routine writes into two caller-owned arrays:

- ``OUTF(20, 1000)``: one column of 20 parameters per height step.  In
  Fortran's column-major order the 20 parameters of a height step are
  contiguous.  :func:`allocate_height_buffer` allocates exactly that
  layout, and :func:`to_row_major` turns it into a C-ordered
  ``(1000, 20)`` array indexed ``[height_step, parameter]``.
- ``OARR(100)``: scalar outputs.  Some slots double as optional inputs
  and are read as "not provided" when they hold ``-1.0``, so the buffer
  starts out filled with :data:`~iriprofile.constants.SCALAR_SENTINEL`.

These are plain NumPy arrays because the model writes into them in place
through a raw pointer.
"""

from __future__ import annotations

import numpy as np

from iriprofile.constants import (
    MAX_HEIGHT_ROWS,
    NUM_PROFILE_PARAMETERS,
    NUM_SCALARS,
    SCALAR_SENTINEL,
)

BUFFER_DTYPE = np.float32
"""Element type of both buffers (Fortran ``REAL``)."""

NATIVE_HEIGHT_SHAPE: tuple[int, int] = (NUM_PROFILE_PARAMETERS, MAX_HEIGHT_ROWS)
"""Shape of ``OUTF`` as declared in Fortran."""

ROW_MAJOR_HEIGHT_SHAPE: tuple[int, int] = (MAX_HEIGHT_ROWS, NUM_PROFILE_PARAMETERS)
"""Shape of the height buffer after :func:`to_row_major`."""


def allocate_height_buffer() -> np.ndarray:
    """Allocate a zero-filled ``OUTF`` buffer in Fortran layout.

    Returns:
        ``float32`` array of shape ``(20, 1000)`` with ``order="F"``.
    """
    return np.zeros(NATIVE_HEIGHT_SHAPE, dtype=BUFFER_DTYPE, order="F")


def allocate_scalar_buffer() -> np.ndarray:
    """Allocate an ``OARR`` buffer filled with the ``-1.0`` sentinel.

    Returns:
        ``float32`` array of shape ``(100,)``.
    """
    return np.full(NUM_SCALARS, SCALAR_SENTINEL, dtype=BUFFER_DTYPE)


def to_row_major(native: np.ndarray) -> np.ndarray:
    """Transpose a Fortran-layout ``OUTF`` buffer to row-per-height order.

    ``native[j, i]`` (parameter ``j`` at height step ``i``) becomes
    ``result[i, j]``.  The result is a C-contiguous copy, independent of
    *native*.

    Args:
        native: Array of shape ``(20, 1000)``.

    Returns:
        C-contiguous array of shape ``(1000, 20)``.

    Raises:
        ValueError: If *native* does not have the ``OUTF`` shape.
    """
    if native.shape != NATIVE_HEIGHT_SHAPE:
        raise ValueError(
            f"Height buffer must have shape {NATIVE_HEIGHT_SHAPE}, got {native.shape}"
        )
    return np.ascontiguousarray(native.T)


def scalars_all_sentinel(scalars: np.ndarray) -> bool:
    """Return ``True`` if every ``OARR`` slot still holds the sentinel."""
    return bool(np.all(scalars == BUFFER_DTYPE(SCALAR_SENTINEL)))
