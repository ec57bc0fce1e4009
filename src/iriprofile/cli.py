"""Command-line interface.

Usage:
    iriprofile run --lat 37.8 --lon -75.4 --year 2021 --month 3 --day 3 \\
        --hour 11 --begin 600 --end 800 --step 10 --output output.csv
    iriprofile flags
    iriprofile fetch-indices
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from iriprofile.errors import IriProfileError
from iriprofile.flags import DEFAULT_OFF, FLAGS, FlagVector
from iriprofile.indices import load_cached_indices
from iriprofile.invoker import ModelInvoker
from iriprofile.oracle import library_session
from iriprofile.pipeline import run_profile
from iriprofile.request import CoordinateMode, ModelRequest, local_hour, utc_hour
from iriprofile.results import SCALAR_POSITIONS

app = typer.Typer(help="Run the IRI ionosphere model and write height profiles as CSV.")


def _flag_key(key: str) -> int | str:
    return int(key) if key.isdigit() else key


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def run(
    lat: Annotated[float, typer.Option(help="Latitude [deg]")],
    lon: Annotated[float, typer.Option(help="Longitude east [deg]")],
    year: Annotated[int, typer.Option(help="Four-digit year")],
    hour: Annotated[float, typer.Option(help="Decimal hour")],
    begin: Annotated[float, typer.Option(help="First height [km]")],
    end: Annotated[float, typer.Option(help="Last height [km]")],
    step: Annotated[float, typer.Option(help="Height step [km]")],
    month: Annotated[int | None, typer.Option(help="Month (with --day)")] = None,
    day: Annotated[int | None, typer.Option(help="Day of month (with --month)")] = None,
    day_of_year: Annotated[
        int | None, typer.Option(help="Day of year (instead of --month/--day)")
    ] = None,
    utc: Annotated[bool, typer.Option("--utc/--local", help="Interpret --hour as UT or local time")] = True,
    geomagnetic: Annotated[bool, typer.Option(help="Coordinates are geomagnetic")] = False,
    flag_on: Annotated[
        list[str] | None, typer.Option(help="Switch to turn on (name or 1-based index)")
    ] = None,
    flag_off: Annotated[
        list[str] | None, typer.Option(help="Switch to turn off (name or 1-based index)")
    ] = None,
    output: Annotated[Path, typer.Option(help="CSV report path")] = Path("output.csv"),
    library: Annotated[
        Path | None, typer.Option(help="IRI shared library (default: $IRIPROFILE_LIB)")
    ] = None,
    data_dir: Annotated[
        Path | None, typer.Option(help="IRI data directory (default: $IRIPROFILE_DATA)")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Run the model once and write the height profile report."""
    _configure_logging(verbose)
    try:
        changes = {_flag_key(key): True for key in flag_on or []}
        changes.update({_flag_key(key): False for key in flag_off or []})
        flags = FlagVector.default_profile().with_flags(changes)

        common = dict(
            latitude=lat,
            longitude=lon,
            year=year,
            hour=utc_hour(hour) if utc else local_hour(hour),
            height_begin=begin,
            height_end=end,
            height_step=step,
            coordinate_mode=CoordinateMode.GEOMAGNETIC if geomagnetic else CoordinateMode.GEOGRAPHIC,
            flags=flags,
        )
        if day_of_year is not None:
            if month is not None or day is not None:
                raise typer.BadParameter("Use either --day-of-year or --month/--day, not both")
            request = ModelRequest.from_day_of_year(day_of_year=day_of_year, **common)
        elif month is not None and day is not None:
            request = ModelRequest.from_month_day(month=month, day=day, **common)
        else:
            raise typer.BadParameter("A date is required: --month and --day, or --day-of-year")

        session = library_session(library, data_dir)
        result = run_profile(request, output, invoker=ModelInvoker(session))
    except IriProfileError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1) from err

    typer.echo(f"Wrote {result.table.num_rows} rows to {output} (status: {result.status.value})")
    for name, value in result.scalars.as_dict().items():
        typer.echo(f"  OARR({SCALAR_POSITIONS[name]:>2}) {name:<22} {value: .6g}")


@app.command()
def flags() -> None:
    """List the model switches and their default state."""
    for spec in FLAGS:
        state = "off" if spec.name in DEFAULT_OFF else "on "
        typer.echo(f"{spec.index:>2} {state} {spec.name:<28} {spec.on} / {spec.off}")


@app.command("fetch-indices")
def fetch_indices(
    directory: Annotated[
        Path | None, typer.Option(help="Target directory (default: cache directory)")
    ] = None,
    max_age_days: Annotated[float, typer.Option(help="Refresh files older than this")] = 30.0,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Download apf107.dat and ig_rz.dat if missing or stale."""
    _configure_logging(verbose)
    try:
        files = load_cached_indices(directory, max_age_days=max_age_days)
    except IriProfileError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1) from err
    for path in files:
        typer.echo(str(path))


if __name__ == "__main__":
    app()
