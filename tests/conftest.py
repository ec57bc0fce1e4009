from __future__ import annotations

from pathlib import Path

import jax.numpy as jnp
import numpy as np
import pytest

from iriprofile.config import set_dtype
from iriprofile.oracle import OracleSession
from iriprofile.request import ModelRequest

APF107_RECORDS = (
    # yy, mm, dd, ap1..ap8, ap_daily, ir, f107_daily, f107_81, f107_365
    (21, 3, 2, 4, 5, 3, 2, 3, 4, 6, 7, 4, 25, 74.1, 77.3, 76.0),
    (21, 3, 3, 7, 9, 12, 5, 4, 3, 3, 2, 6, 25, 75.2, 77.4, 76.1),
)


def apf107_line(record: tuple) -> str:
    """Format one record with the Fortran layout (3I3,9I3,I3,3F5.1)."""
    ints, floats = record[:13], record[13:]
    return "".join(f"{v:3d}" for v in ints) + "".join(f"{v:5.1f}" for v in floats)


IG_RZ_TEXT = (
    "# IG12 and Rz12 indices\n"
    " 15, 6,2021\n"
    "01,1958,06,2022\n"
    "100.0,101.2,99.8\n"
)


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    Each test gets float64 unless it explicitly overrides it
    (e.g. test_config.py has its own autouse fixture that sets float32).
    """
    set_dtype(jnp.float64)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A data directory holding small but well-formed index files."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "apf107.dat").write_text(
        "\n".join(apf107_line(r) for r in APF107_RECORDS) + "\n", encoding="utf-8"
    )
    (directory / "ig_rz.dat").write_text(IG_RZ_TEXT, encoding="utf-8")
    return directory


class FakeOracle:
    """In-process stand-in for the compiled IRI library.

    Fills ``OUTF`` with ``(parameter + 1) * 1000 + height_step`` and a
    density-like column 0, and sets ``OARR(k) = k`` so every scalar equals
    its 1-based position.  With ``silent=True`` the buffers are left
    untouched.
    """

    def __init__(self, silent: bool = False, fail_priming: bool = False) -> None:
        self.silent = silent
        self.fail_priming = fail_priming
        self.primed: list[str] = []
        self.calls: list[dict] = []

    def read_apf107(self) -> None:
        if self.fail_priming:
            raise OSError("apf107.dat: end of file")
        self.primed.append("apf107")

    def read_ig_rz(self) -> None:
        self.primed.append("ig_rz")

    def iri_sub(self, jf, jmag, lat, lon, year, mmdd, dhour, heibeg, heiend, heistp, outf, oarr):
        self.calls.append(
            {
                "jf": jf.copy(),
                "jmag": jmag,
                "lat": lat,
                "lon": lon,
                "year": year,
                "mmdd": mmdd,
                "dhour": dhour,
                "heights": (heibeg, heiend, heistp),
                "cwd": Path.cwd(),
                "outf_initial": outf.copy(),
                "oarr_initial": oarr.copy(),
            }
        )
        if self.silent:
            return
        # Same REAL arithmetic IRI_SUB uses for its row count.
        n = int((np.float32(heiend) - np.float32(heibeg)) / np.float32(heistp)) + 1
        for i in range(n):
            outf[0, i] = 1.5e11 + 2.5e9 * i
            for j in range(1, outf.shape[0]):
                outf[j, i] = (j + 1) * 1000.0 + i
        oarr[:] = np.arange(1, oarr.shape[0] + 1, dtype=oarr.dtype)


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def session(fake_oracle: FakeOracle, data_dir: Path) -> OracleSession:
    return OracleSession(fake_oracle, data_dir)


@pytest.fixture
def wallops_request() -> ModelRequest:
    """Wallops Island, 2021-03-03 11:00 UT, 600-800 km every 10 km."""
    return ModelRequest(
        latitude=37.8,
        longitude=-75.4,
        year=2021,
        mmdd=303,
        hour=36.0,
        height_begin=600.0,
        height_end=800.0,
        height_step=10.0,
    )
