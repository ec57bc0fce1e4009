"""Decoded model output.

- :class:`ResultTable`: the meaningful rows of the height buffer, with
  electron density converted from m^-3 to cm^-3.
- :class:`ScalarReport`: named read-only access to the scalar buffer.

IRI numbers its scalar outputs from 1 (``OARR(1)`` .. ``OARR(100)``).
That numbering lives only in :data:`SCALAR_POSITIONS`; everything else
addresses scalars by name.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
import polars as pl
from jax import Array

from iriprofile.config import get_dtype
from iriprofile.constants import M3_PER_CM3, NUM_PROFILE_PARAMETERS, NUM_SCALARS
from iriprofile.invoker import RawOutput
from iriprofile.request import ModelRequest, height_row_count

PROFILE_COLUMNS: tuple[str, ...] = (
    "Ne (cm^-3)",
    "NmF2 (cm^-3)",
    "HmF2 (km)",
    "TeF2 (K)",
    "NmE (cm^-3)",
    "HmE (km)",
    "TeE (K)",
    "NeE (cm^-3)",
    "B0 (km)",
    "B1",
    "B2",
    "B3",
    "B4",
    "B5",
    "B6",
    "B7",
    "B8",
    "B9",
    "B10",
    "B11",
)
"""Labels of the 20 height-buffer columns, in buffer order."""

HEIGHT_COLUMN = "Height (km)"

DENSITY_COLUMN = 0
"""Height-buffer column holding electron density (converted to cm^-3)."""

SCALAR_POSITIONS: dict[str, int] = {
    "nmf2": 1,
    "hmf2": 2,
    "nmf1": 3,
    "hmf1": 4,
    "nme": 5,
    "hme": 6,
    "nmd": 7,
    "hmd": 8,
    "hhalf": 9,
    "b0": 10,
    "solar_zenith_angle": 23,
    "sun_declination": 24,
    "dip": 25,
    "dip_latitude": 26,
    "modified_dip_latitude": 27,
    "rz12": 33,
    "covington": 34,
    "b1": 35,
    "m3000f2": 36,
    "ig12": 39,
    "f107_daily": 41,
    "f107_81": 46,
}
"""Named scalar outputs and their 1-based ``OARR`` positions."""


def normalize_profile(raw: Array) -> Array:
    """Convert the electron-density column of a height table to cm^-3.

    Column 0 is divided by 1.0e6; all other columns are returned as is.

    Args:
        raw: Height rows, shape ``(n, 20)``, electron density in m^-3.

    Returns:
        Array of the same shape with column 0 in cm^-3.
    """
    return raw.at[:, DENSITY_COLUMN].divide(M3_PER_CM3)


class ResultTable(NamedTuple):
    """Height profile of one model run.

    Attributes:
        heights: Heights [km], ``begin + i * step``, shape ``(n,)``.
        values: Parameters per height, shape ``(n, 20)``, column order
            :data:`PROFILE_COLUMNS`.  Column 0 in cm^-3.
    """

    heights: Array
    values: Array

    @classmethod
    def from_raw(cls, raw: RawOutput | np.ndarray, request: ModelRequest) -> ResultTable:
        """Decode the meaningful rows of a row-major height buffer.

        Rows beyond ``request.num_rows`` are ignored.

        Args:
            raw: Model output, or a row-major ``(1000, 20)`` height buffer.
            request: The request that produced it.

        Returns:
            The decoded table.

        Raises:
            InvalidHeightRange: If the request's height grid is invalid.
        """
        height = raw.height if isinstance(raw, RawOutput) else raw
        num_rows = height_row_count(request.height_begin, request.height_end, request.height_step)
        dtype = get_dtype()
        rows = jnp.asarray(height[:num_rows, :NUM_PROFILE_PARAMETERS], dtype=dtype)
        heights = request.height_begin + jnp.arange(num_rows, dtype=dtype) * request.height_step
        return cls(heights=heights, values=normalize_profile(rows))

    @property
    def num_rows(self) -> int:
        return int(self.values.shape[0])

    def column(self, label: str) -> Array:
        """Return one parameter column by its :data:`PROFILE_COLUMNS` label."""
        try:
            index = PROFILE_COLUMNS.index(label)
        except ValueError:
            raise KeyError(f"Unknown profile column '{label}'") from None
        return self.values[:, index]

    def to_frame(self) -> pl.DataFrame:
        """Return the unrounded table as a DataFrame with labelled columns."""
        values = np.asarray(self.values)
        data = {HEIGHT_COLUMN: np.asarray(self.heights)}
        for j, label in enumerate(PROFILE_COLUMNS):
            data[label] = values[:, j]
        return pl.DataFrame(data)


class ScalarReport:
    """Named view of the ``OARR`` scalar buffer.

    Values stay in the units IRI writes (densities in m^-3).  The report
    keeps its own copy of the buffer.

    Args:
        scalars: Scalar buffer of shape ``(100,)``.

    Raises:
        ValueError: If *scalars* does not have 100 entries.
    """

    def __init__(self, scalars: np.ndarray) -> None:
        scalars = np.array(scalars, copy=True)
        if scalars.shape != (NUM_SCALARS,):
            raise ValueError(f"Scalar buffer must have shape ({NUM_SCALARS},), got {scalars.shape}")
        scalars.flags.writeable = False
        self._scalars = scalars

    @classmethod
    def from_raw(cls, raw: RawOutput) -> ScalarReport:
        return cls(raw.scalars)

    @staticmethod
    def local_index(name: str) -> int:
        """0-based buffer index of a named scalar.

        Raises:
            KeyError: If *name* is not in :data:`SCALAR_POSITIONS`.
        """
        try:
            return SCALAR_POSITIONS[name] - 1
        except KeyError:
            raise KeyError(f"Unknown scalar '{name}'") from None

    def get(self, name: str) -> float:
        """Value of a named scalar in native units."""
        return float(self._scalars[self.local_index(name)])

    def native(self, position: int) -> float:
        """Value at a 1-based ``OARR`` position.

        Raises:
            IndexError: If *position* is outside ``1..100``.
        """
        if not 1 <= position <= NUM_SCALARS:
            raise IndexError(f"OARR position must be in 1..{NUM_SCALARS}, got {position}")
        return float(self._scalars[position - 1])

    def __getitem__(self, name: str) -> float:
        return self.get(name)

    @property
    def nmf2(self) -> float:
        """Peak F2-layer electron density [m^-3]."""
        return self.get("nmf2")

    @property
    def hmf2(self) -> float:
        """F2-layer peak height [km]."""
        return self.get("hmf2")

    @property
    def nme(self) -> float:
        """Peak E-layer electron density [m^-3]."""
        return self.get("nme")

    @property
    def hme(self) -> float:
        """E-layer peak height [km]."""
        return self.get("hme")

    @property
    def b0(self) -> float:
        """Bottomside thickness parameter B0 [km]."""
        return self.get("b0")

    @property
    def b1(self) -> float:
        """Bottomside shape parameter B1."""
        return self.get("b1")

    @property
    def rz12(self) -> float:
        """12-month running mean sunspot number."""
        return self.get("rz12")

    @property
    def covington(self) -> float:
        """Covington solar-flux index."""
        return self.get("covington")

    @property
    def ig12(self) -> float:
        """12-month running mean ionospheric index IG12."""
        return self.get("ig12")

    @property
    def f107_daily(self) -> float:
        """Daily F10.7 solar radio flux."""
        return self.get("f107_daily")

    @property
    def f107_81(self) -> float:
        """81-day running mean F10.7 solar radio flux."""
        return self.get("f107_81")

    def as_dict(self) -> dict[str, float]:
        return {name: self.get(name) for name in SCALAR_POSITIONS}

    def to_frame(self) -> pl.DataFrame:
        """Return one row per named scalar: name, OARR position, value."""
        return pl.DataFrame(
            {
                "name": list(SCALAR_POSITIONS),
                "position": list(SCALAR_POSITIONS.values()),
                "value": [self.get(name) for name in SCALAR_POSITIONS],
            },
            schema={"name": pl.Utf8, "position": pl.Int32, "value": pl.Float64},
        )

    def __repr__(self) -> str:
        return f"ScalarReport(nmf2={self.nmf2:.4e}, hmf2={self.hmf2:.2f}, f107_81={self.f107_81:.2f})"
