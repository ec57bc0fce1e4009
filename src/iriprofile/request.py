"""Scalar inputs for one IRI model call.

:class:`ModelRequest` bundles everything ``IRI_SUB`` reads besides the
switch vector's storage: coordinate mode, position, date, hour and the
height grid.  Construction validates every field, so a request that exists
can always be handed to the model.

Two encodings inherited from IRI are kept verbatim:

- The date is a single integer: ``month * 100 + day``, or the negative
  day of year.  Use :meth:`ModelRequest.from_month_day` or
  :meth:`ModelRequest.from_day_of_year` to pick one.
- The hour is local time in ``[0, 24]``, or universal time plus 25 in
  ``[25, 49]``.  Use :func:`utc_hour` and :func:`local_hour` to build it.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from iriprofile.constants import HOURS_PER_DAY, MAX_HEIGHT_ROWS, UT_HOUR_OFFSET
from iriprofile.errors import InvalidHeightRange, InvalidRequest
from iriprofile.flags import FlagVector


class CoordinateMode(Enum):
    """Coordinate system of the latitude/longitude inputs (IRI ``JMAG``)."""

    GEOGRAPHIC = 0
    GEOMAGNETIC = 1

    def __str__(self) -> str:
        return self.name.lower()


def utc_hour(hour: float) -> float:
    """Encode a universal-time decimal hour for IRI (``hour + 25``)."""
    return hour + UT_HOUR_OFFSET


def local_hour(hour: float) -> float:
    """Encode a local-time decimal hour for IRI (unchanged)."""
    return hour


def height_row_count(begin: float, end: float, step: float) -> int:
    """Number of heights on the grid ``begin, begin + step, ..., <= end``.

    Computed as ``floor((end - begin) / step) + 1`` in single precision,
    the arithmetic ``IRI_SUB`` uses on its ``REAL`` inputs, so the count
    always equals the number of rows the model fills.  With
    ``(100.0, 100.3, 0.1)`` that is 4 rows, not the 3 a double-precision
    division would give.

    Args:
        begin: First height [km].
        end: Last height [km].
        step: Height increment [km].

    Returns:
        Row count, between 1 and 1000.

    Raises:
        InvalidHeightRange: If a bound is not finite, ``step <= 0``,
            ``begin > end``, or the count falls outside ``[1, 1000]``.
    """
    for name, value in (("begin", begin), ("end", end), ("step", step)):
        if not math.isfinite(value):
            raise InvalidHeightRange(f"Height {name} must be finite, got {value}")
    if not step > 0.0:
        raise InvalidHeightRange(f"Height step must be positive, got {step}")
    if begin > end:
        raise InvalidHeightRange(f"Height begin ({begin}) must not exceed height end ({end})")

    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        steps = (np.float32(end) - np.float32(begin)) / np.float32(step)
    if not np.isfinite(steps) or not 0.0 <= steps < MAX_HEIGHT_ROWS:
        raise InvalidHeightRange(
            f"Height grid {begin}..{end} step {step} must have between 1 and "
            f"{MAX_HEIGHT_ROWS} rows"
        )
    return int(steps) + 1


def _check_date(year: int, mmdd: int) -> None:
    if mmdd > 0:
        month, day = divmod(mmdd, 100)
        if not 1 <= month <= 12:
            raise InvalidRequest(f"Month must be in 1..12, got {month} (mmdd={mmdd})")
        days_in_month = calendar.monthrange(year, month)[1]
        if not 1 <= day <= days_in_month:
            raise InvalidRequest(
                f"Day must be in 1..{days_in_month} for {year}-{month:02d}, got {day}"
            )
    elif mmdd < 0:
        days_in_year = 366 if calendar.isleap(year) else 365
        if not 1 <= -mmdd <= days_in_year:
            raise InvalidRequest(f"Day of year must be in 1..{days_in_year}, got {-mmdd}")
    else:
        raise InvalidRequest("Date selector must be month*100+day or a negative day of year")


@dataclass(frozen=True)
class ModelRequest:
    """Validated inputs for one ``IRI_SUB`` call.

    Args:
        latitude: Latitude [deg], in ``[-90, 90]``.
        longitude: Longitude east [deg], in ``[-180, 360)``.  Passed to IRI
            unchanged; both conventions are accepted by the model.
        year: Four-digit year.
        mmdd: ``month * 100 + day`` or ``-day_of_year``.
        hour: Decimal hour, local in ``[0, 24]`` or ``UT + 25``.
        height_begin: First height [km].
        height_end: Last height [km].
        height_step: Height increment [km].
        coordinate_mode: Geographic or geomagnetic coordinates.
        flags: Switch vector (immutable).  Defaults to
            :meth:`FlagVector.default_profile`.

    Raises:
        InvalidRequest: On an out-of-range position, year, date or hour.
        InvalidHeightRange: On an invalid height grid.

    Examples:
        ```python
        request = ModelRequest.from_month_day(
            latitude=37.8, longitude=-75.4, year=2021, month=3, day=3,
            hour=utc_hour(11.0), height_begin=600.0, height_end=800.0,
            height_step=10.0,
        )
        request.num_rows  # 21
        ```
    """

    latitude: float
    longitude: float
    year: int
    mmdd: int
    hour: float
    height_begin: float
    height_end: float
    height_step: float
    coordinate_mode: CoordinateMode = CoordinateMode.GEOGRAPHIC
    flags: FlagVector = field(default_factory=FlagVector.default_profile)

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidRequest(f"Latitude must be in [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude < 360.0:
            raise InvalidRequest(f"Longitude must be in [-180, 360), got {self.longitude}")
        if not 1000 <= self.year <= 9999:
            raise InvalidRequest(f"Year must have four digits, got {self.year}")
        _check_date(self.year, self.mmdd)
        if not (
            0.0 <= self.hour <= HOURS_PER_DAY
            or UT_HOUR_OFFSET <= self.hour <= UT_HOUR_OFFSET + HOURS_PER_DAY
        ):
            raise InvalidRequest(
                f"Hour must be local time in [0, 24] or UT+25 in [25, 49], got {self.hour}"
            )
        if not isinstance(self.coordinate_mode, CoordinateMode):
            raise InvalidRequest(f"Unknown coordinate mode {self.coordinate_mode!r}")
        height_row_count(self.height_begin, self.height_end, self.height_step)
        if not isinstance(self.flags, FlagVector):
            raise InvalidRequest(f"flags must be a FlagVector, got {type(self.flags).__name__}")

    @classmethod
    def from_month_day(
        cls,
        *,
        latitude: float,
        longitude: float,
        year: int,
        month: int,
        day: int,
        hour: float,
        height_begin: float,
        height_end: float,
        height_step: float,
        coordinate_mode: CoordinateMode = CoordinateMode.GEOGRAPHIC,
        flags: FlagVector | None = None,
    ) -> ModelRequest:
        """Build a request dated by calendar month and day."""
        if not 1 <= month <= 12:
            raise InvalidRequest(f"Month must be in 1..12, got {month}")
        if not 1 <= day <= 31:
            raise InvalidRequest(f"Day must be in 1..31, got {day}")
        return cls(
            latitude=latitude,
            longitude=longitude,
            year=year,
            mmdd=month * 100 + day,
            hour=hour,
            height_begin=height_begin,
            height_end=height_end,
            height_step=height_step,
            coordinate_mode=coordinate_mode,
            flags=flags if flags is not None else FlagVector.default_profile(),
        )

    @classmethod
    def from_day_of_year(
        cls,
        *,
        latitude: float,
        longitude: float,
        year: int,
        day_of_year: int,
        hour: float,
        height_begin: float,
        height_end: float,
        height_step: float,
        coordinate_mode: CoordinateMode = CoordinateMode.GEOGRAPHIC,
        flags: FlagVector | None = None,
    ) -> ModelRequest:
        """Build a request dated by day of year (encoded as ``-day_of_year``)."""
        if day_of_year < 1:
            raise InvalidRequest(f"Day of year must be positive, got {day_of_year}")
        return cls(
            latitude=latitude,
            longitude=longitude,
            year=year,
            mmdd=-day_of_year,
            hour=hour,
            height_begin=height_begin,
            height_end=height_end,
            height_step=height_step,
            coordinate_mode=coordinate_mode,
            flags=flags if flags is not None else FlagVector.default_profile(),
        )

    @property
    def num_rows(self) -> int:
        """Number of height steps the model fills."""
        return height_row_count(self.height_begin, self.height_end, self.height_step)

    @property
    def is_universal_time(self) -> bool:
        """Whether :attr:`hour` carries the +25 universal-time marker."""
        return self.hour >= UT_HOUR_OFFSET

    @property
    def decoded_hour(self) -> float:
        """The hour with the universal-time marker removed."""
        if self.is_universal_time:
            return self.hour - UT_HOUR_OFFSET
        return self.hour

    @property
    def uses_day_of_year(self) -> bool:
        return self.mmdd < 0
