# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.12", "iriprofile"]
#
# [tool.uv.sources]
# iriprofile = { path = ".." }
# ///
"""Sweep one location through a day of universal time.

Runs the IRI model once per hour at a fixed location and date, collects the
F2 peak parameters from each run and prints them as a table.  Optionally
writes the height profile of every hour to a directory of CSV reports.

Requires a compiled IRI library (``--library`` or ``IRIPROFILE_LIB``) and a
data directory holding the IRI coefficient and index files.  Index files
can be fetched with ``iriprofile fetch-indices``.

Usage:
    uv run examples/diurnal_sweep.py [OPTIONS]

Examples:
    # Wallops Island, 3 March 2021, hourly
    uv run examples/diurnal_sweep.py --lat 37.8 --lon -75.4 --month 3 --day 3

    # Keep the per-hour profiles
    uv run examples/diurnal_sweep.py --profiles-dir profiles/
"""

import logging
import warnings
from pathlib import Path
from typing import Annotated

import polars as pl
import typer

from iriprofile import (
    M3_PER_CM3,
    IriProfileError,
    ModelInvoker,
    ModelRequest,
    OracleInvocationFailure,
    library_session,
    run_profile,
    utc_hour,
)


def main(
    lat: Annotated[float, typer.Option(help="Latitude [deg]")] = 37.8,
    lon: Annotated[float, typer.Option(help="Longitude east [deg]")] = -75.4,
    year: Annotated[int, typer.Option(help="Four-digit year")] = 2021,
    month: Annotated[int, typer.Option(help="Month")] = 3,
    day: Annotated[int, typer.Option(help="Day of month")] = 3,
    begin: Annotated[float, typer.Option(help="First height [km]")] = 100.0,
    end: Annotated[float, typer.Option(help="Last height [km]")] = 1000.0,
    step: Annotated[float, typer.Option(help="Height step [km]")] = 10.0,
    library: Annotated[Path | None, typer.Option(help="IRI shared library")] = None,
    data_dir: Annotated[Path | None, typer.Option(help="IRI data directory")] = None,
    profiles_dir: Annotated[
        Path | None, typer.Option(help="Write each hour's profile here as CSV")
    ] = None,
) -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        invoker = ModelInvoker(library_session(library, data_dir))
    except IriProfileError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1) from err

    if profiles_dir is not None:
        profiles_dir.mkdir(parents=True, exist_ok=True)

    rows = []
    for hour in range(24):
        request = ModelRequest.from_month_day(
            latitude=lat,
            longitude=lon,
            year=year,
            month=month,
            day=day,
            hour=utc_hour(float(hour)),
            height_begin=begin,
            height_end=end,
            height_step=step,
        )
        sink = profiles_dir / f"profile_{hour:02d}UT.csv" if profiles_dir is not None else None
        with warnings.catch_warnings():
            # Degraded hours are reported in the status column instead.
            warnings.simplefilter("ignore", OracleInvocationFailure)
            result = run_profile(request, sink, invoker=invoker)
        rows.append(
            {
                "hour_ut": hour,
                "nmf2_cm3": result.scalars.nmf2 / M3_PER_CM3,
                "hmf2_km": result.scalars.hmf2,
                "b0_km": result.scalars.b0,
                "status": result.status.value,
            }
        )

    with pl.Config(tbl_rows=24):
        typer.echo(pl.DataFrame(rows))


if __name__ == "__main__":
    typer.run(main)
