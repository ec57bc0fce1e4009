"""Tests for the model boundary and session lifecycle."""

from __future__ import annotations

import shutil
import subprocess
import threading
import time
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from conftest import FakeOracle
from iriprofile.buffers import allocate_height_buffer, allocate_scalar_buffer
from iriprofile.errors import StartupError
from iriprofile.flags import FlagVector
from iriprofile.invoker import ModelInvoker
from iriprofile.oracle import (
    OracleSession,
    SessionState,
    SharedLibraryOracle,
    default_session,
    library_session,
)
from iriprofile.request import ModelRequest


def _call(session: OracleSession) -> tuple[np.ndarray, np.ndarray]:
    outf = allocate_height_buffer()
    oarr = allocate_scalar_buffer()
    session.call(
        FlagVector.default_profile().to_native(),
        0, 37.8, -75.4, 2021, 303, 36.0, 600.0, 800.0, 10.0,
        outf, oarr,
    )
    return outf, oarr


class TestSharedLibraryOracle:
    """Tests for loading the compiled library."""

    def test_no_library_configured(self, monkeypatch):
        monkeypatch.delenv("IRIPROFILE_LIB", raising=False)
        with pytest.raises(StartupError, match="IRIPROFILE_LIB"):
            SharedLibraryOracle()

    def test_missing_library(self, tmp_path: Path):
        with pytest.raises(StartupError, match="Cannot load"):
            SharedLibraryOracle(tmp_path / "libiri.so")

    def test_library_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("IRIPROFILE_LIB", str(tmp_path / "libmissing.so"))
        with pytest.raises(StartupError, match="libmissing.so"):
            SharedLibraryOracle()


class TestOracleSession:
    """Tests for OracleSession."""

    def test_starts_uninitialized(self, session: OracleSession, fake_oracle: FakeOracle):
        assert session.state is SessionState.UNINITIALIZED
        assert not session.is_ready
        assert fake_oracle.primed == []

    def test_prime_loads_both_tables_in_order(self, session, fake_oracle):
        session.prime()
        assert session.is_ready
        assert fake_oracle.primed == ["apf107", "ig_rz"]

    def test_prime_once(self, session, fake_oracle):
        session.prime()
        session.prime()
        _call(session)
        _call(session)
        assert fake_oracle.primed == ["apf107", "ig_rz"]
        assert len(fake_oracle.calls) == 2

    def test_call_primes_lazily(self, session, fake_oracle):
        _call(session)
        assert session.is_ready
        assert fake_oracle.primed == ["apf107", "ig_rz"]

    def test_missing_index_file(self, fake_oracle, data_dir: Path):
        (data_dir / "apf107.dat").unlink()
        session = OracleSession(fake_oracle, data_dir)
        with pytest.raises(StartupError):
            session.prime()
        assert fake_oracle.primed == []
        assert not session.is_ready

    def test_validation_can_be_skipped(self, fake_oracle, tmp_path: Path):
        session = OracleSession(fake_oracle, tmp_path, validate_indices=False)
        session.prime()
        assert session.is_ready

    def test_missing_data_dir(self, fake_oracle, tmp_path: Path):
        session = OracleSession(fake_oracle, tmp_path / "nowhere", validate_indices=False)
        with pytest.raises(StartupError):
            session.prime()

    def test_priming_failure(self, data_dir: Path):
        session = OracleSession(FakeOracle(fail_priming=True), data_dir)
        with pytest.raises(StartupError, match="index data"):
            session.prime()
        assert session.state is SessionState.UNINITIALIZED

    def test_call_runs_in_data_dir(self, session, fake_oracle, data_dir: Path):
        before = Path.cwd()
        _call(session)
        assert fake_oracle.calls[0]["cwd"] == data_dir.resolve()
        assert Path.cwd() == before

    def test_call_passes_inputs_through(self, session, fake_oracle):
        outf, oarr = _call(session)
        call = fake_oracle.calls[0]
        assert call["jmag"] == 0
        assert call["year"] == 2021
        assert call["mmdd"] == 303
        assert call["dhour"] == 36.0
        assert call["heights"] == (600.0, 800.0, 10.0)
        assert oarr[0] == 1.0

    def test_calls_are_serialised(self, data_dir: Path):
        active = 0
        peak = 0
        guard = threading.Lock()

        class SlowOracle(FakeOracle):
            def iri_sub(self, *args):
                nonlocal active, peak
                with guard:
                    active += 1
                    peak = max(peak, active)
                time.sleep(0.01)
                super().iri_sub(*args)
                with guard:
                    active -= 1

        session = OracleSession(SlowOracle(), data_dir)
        threads = [threading.Thread(target=_call, args=(session,)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert peak == 1


# ---------------------------------------------------------------------------
# ctypes binding against a compiled stand-in library
# ---------------------------------------------------------------------------

# Mimics IRI_SUB's calling convention: every argument by reference, OUTF
# column-major (20, 1000), REAL arithmetic for the row count.  OUTF(j, i)
# is (j * 1000 + i - 1) and OARR echoes the inputs it was given.
_STAND_IN_SOURCE = r"""
static int primed = 0;

void readapf107_(void) { primed |= 1; }

void read_ig_rz_(void) { primed |= 2; }

void iri_sub_(const int *jf, const int *jmag, const float *alati,
              const float *along, const int *iyyyy, const int *mmdd,
              const float *dhour, const float *heibeg, const float *heiend,
              const float *heistp, float *outf, float *oarr)
{
    int numhei = (int)((*heiend - *heibeg) / *heistp) + 1;
    int i, j, k;
    for (i = 0; i < numhei; i++)
        for (j = 0; j < 20; j++)
            outf[i * 20 + j] = (float)((j + 1) * 1000 + i);
    for (k = 0; k < 50; k++)
        oarr[k] = (float)jf[k];
    oarr[50] = (float)*jmag;
    oarr[51] = (float)*iyyyy;
    oarr[52] = (float)*mmdd;
    oarr[53] = *dhour;
    oarr[54] = *alati;
    oarr[55] = *along;
    oarr[56] = (float)primed;
    oarr[57] = (float)numhei;
}
"""


@pytest.fixture(scope="module")
def stand_in_library(tmp_path_factory) -> Path:
    compiler = shutil.which("cc") or shutil.which("gcc") or shutil.which("clang")
    if compiler is None:
        pytest.skip("no C compiler available")
    directory = tmp_path_factory.mktemp("stand_in")
    source = directory / "iri_stand_in.c"
    source.write_text(_STAND_IN_SOURCE)
    library = directory / "libiri_stand_in.so"
    subprocess.run(
        [compiler, "-shared", "-fPIC", "-o", str(library), str(source)],
        check=True,
        capture_output=True,
    )
    return library


def _stand_in_request(**overrides) -> ModelRequest:
    values = dict(
        latitude=37.8,
        longitude=-75.4,
        year=2021,
        mmdd=303,
        hour=36.0,
        height_begin=600.0,
        height_end=800.0,
        height_step=10.0,
    )
    values.update(overrides)
    return ModelRequest(**values)


class TestCompiledBinding:
    """Tests for SharedLibraryOracle against a compiled library."""

    def test_flags_arrive_in_place(self, stand_in_library, data_dir):
        session = OracleSession(SharedLibraryOracle(stand_in_library), data_dir)
        raw = ModelInvoker(session).invoke(_stand_in_request())
        expected = FlagVector.default_profile().to_native()
        np.testing.assert_array_equal(raw.scalars[:50], expected.astype(np.float32))
        # JF(1) on, JF(21) (ion drift) off in the default profile.
        assert raw.scalars[0] == 1.0
        assert raw.scalars[20] == 0.0

    def test_scalar_inputs_by_reference(self, stand_in_library, data_dir):
        session = OracleSession(SharedLibraryOracle(stand_in_library), data_dir)
        raw = ModelInvoker(session).invoke(_stand_in_request())
        assert raw.scalars[50] == 0.0
        assert raw.scalars[51] == 2021.0
        assert raw.scalars[52] == 303.0
        assert raw.scalars[53] == 36.0
        assert raw.scalars[54] == np.float32(37.8)
        assert raw.scalars[55] == np.float32(-75.4)
        assert np.all(raw.scalars[58:] == -1.0)

    def test_primed_before_call(self, stand_in_library, data_dir):
        session = OracleSession(SharedLibraryOracle(stand_in_library), data_dir)
        raw = ModelInvoker(session).invoke(_stand_in_request())
        assert raw.scalars[56] == 3.0

    def test_height_buffer_column_major(self, stand_in_library, data_dir):
        session = OracleSession(SharedLibraryOracle(stand_in_library), data_dir)
        raw = ModelInvoker(session).invoke(_stand_in_request())
        assert raw.num_rows == 21
        # OUTF(j, i) lands at height[i - 1, j - 1].
        for i in (0, 1, 10, 20):
            for j in (0, 1, 19):
                assert raw.height[i, j] == (j + 1) * 1000 + i
        assert not raw.height[21:].any()

    def test_row_count_matches_library(self, stand_in_library, data_dir):
        session = OracleSession(SharedLibraryOracle(stand_in_library), data_dir)
        request = _stand_in_request(height_begin=100.0, height_end=100.3, height_step=0.1)
        raw = ModelInvoker(session).invoke(request)
        assert raw.scalars[57] == 4.0
        assert raw.num_rows == 4
        assert np.count_nonzero(raw.height[:, 0]) == 4

    def test_rejects_row_major_height_buffer(self, stand_in_library):
        oracle = SharedLibraryOracle(stand_in_library)
        with pytest.raises(ValueError, match="Fortran-ordered"):
            oracle.iri_sub(
                FlagVector().to_native(),
                0, 0.0, 0.0, 2021, 101, 12.0, 100.0, 200.0, 10.0,
                np.zeros((20, 1000), dtype=np.float32),
                allocate_scalar_buffer(),
            )


# ---------------------------------------------------------------------------
# Process-wide sessions
# ---------------------------------------------------------------------------


class TestLibrarySession:
    """Tests for library_session and default_session."""

    @pytest.fixture(autouse=True)
    def _fresh_sessions(self, monkeypatch):
        monkeypatch.setattr("iriprofile.oracle._sessions", {})

    def test_same_pair_same_session(self, data_dir: Path):
        with patch("iriprofile.oracle.SharedLibraryOracle", return_value=FakeOracle()) as mock_cls:
            first = library_session("/opt/iri/libiri.so", data_dir)
            second = library_session(Path("/opt/iri/libiri.so"), str(data_dir))
        assert first is second
        mock_cls.assert_called_once_with(Path("/opt/iri/libiri.so"))

    def test_different_data_dir_new_session(self, data_dir: Path, tmp_path: Path):
        with patch("iriprofile.oracle.SharedLibraryOracle", side_effect=lambda _: FakeOracle()):
            first = library_session("/opt/iri/libiri.so", data_dir)
            second = library_session("/opt/iri/libiri.so", tmp_path)
        assert first is not second
        assert second.data_dir == tmp_path

    def test_primed_once_through_registry(self, data_dir: Path):
        oracle = FakeOracle()
        with patch("iriprofile.oracle.SharedLibraryOracle", return_value=oracle):
            _call(library_session("/opt/iri/libiri.so", data_dir))
            _call(library_session("/opt/iri/libiri.so", data_dir))
        assert oracle.primed == ["apf107", "ig_rz"]
        assert len(oracle.calls) == 2

    def test_default_session_uses_environment(self, monkeypatch, data_dir: Path):
        monkeypatch.setenv("IRIPROFILE_LIB", "/opt/iri/libiri.so")
        monkeypatch.setenv("IRIPROFILE_DATA", str(data_dir))
        with patch("iriprofile.oracle.SharedLibraryOracle", return_value=FakeOracle()) as mock_cls:
            session = default_session()
            assert default_session() is session
        mock_cls.assert_called_once_with(Path("/opt/iri/libiri.so"))
        assert session.data_dir == data_dir

    def test_load_failure_not_cached(self, tmp_path: Path):
        with pytest.raises(StartupError):
            library_session(tmp_path / "libiri.so", tmp_path)
        with pytest.raises(StartupError):
            library_session(tmp_path / "libiri.so", tmp_path)
