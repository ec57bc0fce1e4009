"""Parsers for the IRI index data files.

- ``apf107.dat``: one fixed-width line per day, Fortran format
  ``(3I3,9I3,I3,3F5.1)``: two-digit year, month, day, eight 3-hourly Ap
  values, daily Ap, a sunspot field, then F10.7 daily, 81-day and
  365-day means.
- ``ig_rz.dat``: free-format, comma separated.  The first record is the
  update date (day, month, year), the second the covered range (start
  month, start year, end month, end year), followed by the monthly IG12
  and Rz12 series.
"""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import NamedTuple

import polars as pl

_APF107_MIN_LEN = 54

_AP_COLUMNS: tuple[str, ...] = tuple(f"ap{i}" for i in range(1, 9))


class IgRzHeader(NamedTuple):
    """Leading records of ``ig_rz.dat``.

    Attributes:
        updated: Update date as ``(day, month, year)``.
        start: First covered month as ``(month, year)``.
        end: Last covered month as ``(month, year)``.
    """

    updated: tuple[int, int, int]
    start: tuple[int, int]
    end: tuple[int, int]


def _parse_field(line: str, start: int, end: int) -> str:
    if end > len(line):
        return ""
    return line[start:end].strip()


def _parse_float(line: str, start: int, end: int) -> float:
    field = _parse_field(line, start, end)
    if not field:
        return math.nan
    try:
        return float(field)
    except ValueError:
        return math.nan


def _parse_int(line: str, start: int, end: int) -> int | None:
    field = _parse_field(line, start, end)
    if not field:
        return None
    try:
        return int(field)
    except ValueError:
        return None


def expand_two_digit_year(yy: int) -> int:
    """Expand the two-digit ``apf107.dat`` year (the record starts in 1958)."""
    return 1900 + yy if yy >= 58 else 2000 + yy


def _parse_apf107_line(line: str) -> dict | None:
    """Parse one ``apf107.dat`` record, or return ``None`` if malformed."""
    if len(line) < _APF107_MIN_LEN:
        return None

    yy = _parse_int(line, 0, 3)
    month = _parse_int(line, 3, 6)
    day = _parse_int(line, 6, 9)
    if yy is None or month is None or day is None:
        return None
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None

    row: dict = {"year": expand_two_digit_year(yy), "month": month, "day": day}
    for i, name in enumerate(_AP_COLUMNS):
        row[name] = _parse_float(line, 9 + 3 * i, 12 + 3 * i)
    row["ap_daily"] = _parse_float(line, 33, 36)
    row["f107_daily"] = _parse_float(line, 39, 44)
    row["f107_81"] = _parse_float(line, 44, 49)
    row["f107_365"] = _parse_float(line, 49, 54)
    return row


def parse_apf107_file(filepath: str | Path) -> pl.DataFrame:
    """Parse ``apf107.dat`` into a DataFrame with one row per day.

    Columns: ``year``, ``month``, ``day``, ``ap1`` .. ``ap8``, ``ap_daily``,
    ``f107_daily``, ``f107_81``, ``f107_365``.  Blank numeric fields become
    NaN; malformed lines are skipped.

    Args:
        filepath: Path to ``apf107.dat``.

    Returns:
        DataFrame of daily records in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If no valid records were parsed.
    """
    rows: list[dict] = []
    with open(filepath) as f:
        for line in f:
            row = _parse_apf107_line(line.rstrip("\n"))
            if row is not None:
                rows.append(row)

    if not rows:
        raise ValueError(f"No valid Ap/F10.7 records found in {filepath}")

    schema = {"year": pl.Int32, "month": pl.Int32, "day": pl.Int32}
    schema.update({name: pl.Float64 for name in _AP_COLUMNS})
    schema.update(
        {
            "ap_daily": pl.Float64,
            "f107_daily": pl.Float64,
            "f107_81": pl.Float64,
            "f107_365": pl.Float64,
        }
    )
    return pl.DataFrame(rows, schema=schema)


def _int_record(line: str) -> list[int] | None:
    tokens = [t for t in re.split(r"[,\s]+", line.strip()) if t]
    try:
        return [int(t) for t in tokens]
    except ValueError:
        return None


def parse_ig_rz_header(filepath: str | Path) -> IgRzHeader:
    """Read the update date and covered range of ``ig_rz.dat``.

    Lines that are empty or start with ``#`` are skipped.

    Args:
        filepath: Path to ``ig_rz.dat``.

    Returns:
        The parsed :class:`IgRzHeader`.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the two leading records are missing or malformed.
    """
    records: list[list[int]] = []
    with open(filepath) as f:
        for line in f:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            record = _int_record(stripped)
            if record is None:
                raise ValueError(f"Malformed ig_rz header line in {filepath}: {stripped!r}")
            records.append(record)
            if len(records) == 2:
                break

    if len(records) < 2 or len(records[0]) != 3 or len(records[1]) != 4:
        raise ValueError(f"Missing ig_rz header records in {filepath}")

    day, month, year = records[0]
    start_month, start_year, end_month, end_year = records[1]
    if not (1 <= start_month <= 12 and 1 <= end_month <= 12):
        raise ValueError(f"Invalid ig_rz month range in {filepath}")
    if (start_year, start_month) > (end_year, end_month):
        raise ValueError(f"ig_rz range ends before it starts in {filepath}")

    return IgRzHeader(
        updated=(day, month, year),
        start=(start_month, start_year),
        end=(end_month, end_year),
    )
