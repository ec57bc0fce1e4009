"""CSV rendering of a :class:`~iriprofile.results.ResultTable`.

The report has a ``Height (km)`` column followed by the 20 profile
columns.  Heights are truncated toward zero; parameter values are rounded
half-up, ``floor(v + 0.5)``, so ``2.5 -> 3`` and ``-2.5 -> -2``.

The whole document is built in memory before the sink is touched, so a
failed run never leaves a half-written file behind: if writing fails the
file is removed and :class:`~iriprofile.errors.OutputWriteError` is raised.
"""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import IO

import jax.numpy as jnp
import numpy as np
import polars as pl
from jax import Array
from jax.typing import ArrayLike

from iriprofile.errors import OutputWriteError
from iriprofile.results import HEIGHT_COLUMN, PROFILE_COLUMNS, ResultTable

logger = logging.getLogger(__name__)


def round_half_up(values: ArrayLike) -> Array:
    """Round to the nearest integer, ties toward positive infinity.

    Args:
        values: Values to round.

    Returns:
        ``floor(values + 0.5)``, still floating point.

    Examples:
        ```python
        round_half_up(jnp.array([2.4, 2.5, -2.5]))  # [2., 3., -2.]
        ```
    """
    values = jnp.asarray(values)
    return jnp.floor(values + 0.5)


def height_labels(table: ResultTable) -> np.ndarray:
    """Heights of *table* truncated toward zero, as ``int64``."""
    return np.trunc(np.asarray(table.heights, dtype=np.float64)).astype(np.int64)


def render_frame(table: ResultTable) -> pl.DataFrame:
    """Build the integer report table.

    Args:
        table: Decoded model output.

    Returns:
        DataFrame with ``Height (km)`` and the 20 profile columns, all
        ``Int64``, one row per height in increasing order.
    """
    rounded = np.asarray(round_half_up(table.values)).astype(np.int64)
    data = {HEIGHT_COLUMN: pl.Series(HEIGHT_COLUMN, height_labels(table), dtype=pl.Int64)}
    for j, label in enumerate(PROFILE_COLUMNS):
        data[label] = pl.Series(label, rounded[:, j], dtype=pl.Int64)
    return pl.DataFrame(data)


def render_csv(table: ResultTable) -> str:
    """Render *table* as a comma-separated document with a header row."""
    return render_frame(table).write_csv()


def write_csv(table: ResultTable, sink: str | os.PathLike | IO[str]) -> None:
    """Render *table* and write it to *sink*.

    Args:
        table: Decoded model output.
        sink: Destination path, or an open text stream.  Paths are opened,
            written and closed here; streams are written but left open.

    Raises:
        OutputWriteError: If the sink cannot be opened or written.  A
            partially written path is removed.
    """
    document = render_csv(table)

    if not isinstance(sink, (str, os.PathLike)):
        try:
            sink.write(document)
        except (OSError, ValueError) as err:
            raise OutputWriteError(f"Cannot write report: {err}") from err
        return

    path = Path(sink)
    opened = False
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            opened = True
            f.write(document)
    except OSError as err:
        if opened:
            with contextlib.suppress(OSError):
                path.unlink(missing_ok=True)
        raise OutputWriteError(f"Cannot write report to {path}: {err}") from err

    logger.info("Wrote %d height rows to %s", table.num_rows, path)
