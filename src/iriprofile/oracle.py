"""Boundary to the compiled IRI model.

The model is a Fortran library with process-wide state: its index tables
must be loaded once (``READAPF107`` and ``READ_IG_RZ``) before
``IRI_SUB`` can be called, and neither the loading nor the call is
re-entrant.  This module models that contract explicitly:

- :class:`ModelOracle`: the three entry points, as a protocol, so tests
  can substitute an in-process fake.
- :class:`SharedLibraryOracle`: the ``ctypes`` binding to a compiled
  library exporting ``readapf107_``, ``read_ig_rz_`` and ``iri_sub_``.
- :class:`OracleSession`: the one-time priming lifecycle
  (``UNINITIALIZED -> READY``) and the lock that serialises every call.
- :func:`library_session`: the process-wide session for a library and data
  directory; :func:`default_session` is the one for the library named
  by ``IRIPROFILE_LIB``.

The Fortran code opens its coefficient and index files by relative name,
so priming and every call run with the working directory set to the
session's data directory.
"""

from __future__ import annotations

import contextlib
import ctypes
import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Protocol

import numpy as np

from iriprofile.buffers import BUFFER_DTYPE, NATIVE_HEIGHT_SHAPE
from iriprofile.config import get_data_dir, get_library_path
from iriprofile.constants import NUM_FLAGS, NUM_SCALARS
from iriprofile.errors import StartupError
from iriprofile.indices import validate_index_files

logger = logging.getLogger(__name__)

_ORACLE_LOCK = threading.Lock()
"""Serialises all access to model state, including the working directory switch."""


class ModelOracle(Protocol):
    """Entry points of the IRI model.

    ``iri_sub`` writes its results into *outf* and *oarr* in place and
    returns nothing; it has no error channel.
    """

    def read_apf107(self) -> None: ...

    def read_ig_rz(self) -> None: ...

    def iri_sub(
        self,
        jf: np.ndarray,
        jmag: int,
        lat: float,
        lon: float,
        year: int,
        mmdd: int,
        dhour: float,
        heibeg: float,
        heiend: float,
        heistp: float,
        outf: np.ndarray,
        oarr: np.ndarray,
    ) -> None: ...


_c_int_p = ctypes.POINTER(ctypes.c_int)
_c_float_p = ctypes.POINTER(ctypes.c_float)


class SharedLibraryOracle:
    """``ctypes`` binding to a compiled IRI library.

    Args:
        library: Path to the shared library.  Defaults to
            ``$IRIPROFILE_LIB``.

    Raises:
        StartupError: If no path is configured, the library cannot be
            loaded, or a required symbol is missing.
    """

    def __init__(self, library: str | Path | None = None) -> None:
        if library is None:
            library = get_library_path()
        if library is None:
            raise StartupError(
                "No IRI library configured. Pass a path or set IRIPROFILE_LIB."
            )
        self.library = Path(library)
        try:
            self._lib = ctypes.CDLL(str(self.library))
            self._readapf107 = self._lib.readapf107_
            self._read_ig_rz = self._lib.read_ig_rz_
            self._iri_sub = self._lib.iri_sub_
        except (OSError, AttributeError) as err:
            raise StartupError(f"Cannot load IRI library {self.library}: {err}") from err

        self._readapf107.argtypes = []
        self._readapf107.restype = None
        self._read_ig_rz.argtypes = []
        self._read_ig_rz.restype = None
        self._iri_sub.argtypes = [
            _c_int_p,  # JF(50)
            _c_int_p,  # JMAG
            _c_float_p,  # ALATI
            _c_float_p,  # ALONG
            _c_int_p,  # IYYYY
            _c_int_p,  # MMDD
            _c_float_p,  # DHOUR
            _c_float_p,  # HEIBEG
            _c_float_p,  # HEIEND
            _c_float_p,  # HEISTP
            _c_float_p,  # OUTF(20, 1000)
            _c_float_p,  # OARR(100)
        ]
        self._iri_sub.restype = None

    def read_apf107(self) -> None:
        self._readapf107()

    def read_ig_rz(self) -> None:
        self._read_ig_rz()

    def iri_sub(
        self,
        jf: np.ndarray,
        jmag: int,
        lat: float,
        lon: float,
        year: int,
        mmdd: int,
        dhour: float,
        heibeg: float,
        heiend: float,
        heistp: float,
        outf: np.ndarray,
        oarr: np.ndarray,
    ) -> None:
        if jf.dtype != np.int32 or jf.shape != (NUM_FLAGS,) or not jf.flags.c_contiguous:
            raise ValueError(f"jf must be a contiguous int32 array of shape ({NUM_FLAGS},)")
        if (
            outf.dtype != BUFFER_DTYPE
            or outf.shape != NATIVE_HEIGHT_SHAPE
            or not outf.flags.f_contiguous
        ):
            raise ValueError(f"outf must be a Fortran-ordered float32 array of shape {NATIVE_HEIGHT_SHAPE}")
        if oarr.dtype != BUFFER_DTYPE or oarr.shape != (NUM_SCALARS,) or not oarr.flags.c_contiguous:
            raise ValueError(f"oarr must be a contiguous float32 array of shape ({NUM_SCALARS},)")

        self._iri_sub(
            jf.ctypes.data_as(_c_int_p),
            ctypes.byref(ctypes.c_int(jmag)),
            ctypes.byref(ctypes.c_float(lat)),
            ctypes.byref(ctypes.c_float(lon)),
            ctypes.byref(ctypes.c_int(year)),
            ctypes.byref(ctypes.c_int(mmdd)),
            ctypes.byref(ctypes.c_float(dhour)),
            ctypes.byref(ctypes.c_float(heibeg)),
            ctypes.byref(ctypes.c_float(heiend)),
            ctypes.byref(ctypes.c_float(heistp)),
            outf.ctypes.data_as(_c_float_p),
            oarr.ctypes.data_as(_c_float_p),
        )

    def __repr__(self) -> str:
        return f"SharedLibraryOracle({str(self.library)!r})"


class SessionState(Enum):
    """Lifecycle of an :class:`OracleSession`."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class OracleSession:
    """One-time priming and serialised access to a :class:`ModelOracle`.

    Priming validates the index files, then calls ``read_apf107`` and
    ``read_ig_rz`` exactly once.  :meth:`call` primes lazily.

    Args:
        oracle: The model entry points.
        data_dir: Directory holding the IRI data files.  Defaults to
            :func:`~iriprofile.config.get_data_dir`.
        validate_indices: Check ``apf107.dat`` and ``ig_rz.dat`` before
            priming.  Defaults to ``True``.
    """

    def __init__(
        self,
        oracle: ModelOracle,
        data_dir: str | Path | None = None,
        *,
        validate_indices: bool = True,
    ) -> None:
        self.oracle = oracle
        self.data_dir = Path(data_dir) if data_dir is not None else get_data_dir()
        self.validate_indices = validate_indices
        self._state = SessionState.UNINITIALIZED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    def prime(self) -> None:
        """Load the model's index tables.  A no-op once the session is ready.

        Raises:
            StartupError: If the index files are missing or corrupt, the
                data directory does not exist, or the oracle fails while
                loading them.
        """
        with _ORACLE_LOCK:
            if self._state is SessionState.READY:
                return
            if self.validate_indices:
                validate_index_files(self.data_dir)
            logger.info("Priming IRI model with data from %s", self.data_dir)
            try:
                with contextlib.chdir(self.data_dir):
                    self.oracle.read_apf107()
                    self.oracle.read_ig_rz()
            except Exception as err:
                raise StartupError(f"IRI model failed to load its index data: {err}") from err
            self._state = SessionState.READY

    def call(
        self,
        jf: np.ndarray,
        jmag: int,
        lat: float,
        lon: float,
        year: int,
        mmdd: int,
        dhour: float,
        heibeg: float,
        heiend: float,
        heistp: float,
        outf: np.ndarray,
        oarr: np.ndarray,
    ) -> None:
        """Run ``IRI_SUB`` once, priming the session first if needed.

        Blocks until the model returns.  Only one call runs at a time
        across the process.
        """
        self.prime()
        with _ORACLE_LOCK, contextlib.chdir(self.data_dir):
            self.oracle.iri_sub(
                jf, jmag, lat, lon, year, mmdd, dhour, heibeg, heiend, heistp, outf, oarr
            )

    def __repr__(self) -> str:
        return f"OracleSession({self.oracle!r}, data_dir={str(self.data_dir)!r}, state={self._state.value})"


_sessions: dict[tuple[Path | None, Path], OracleSession] = {}
_sessions_lock = threading.Lock()


def library_session(
    library: str | Path | None = None,
    data_dir: str | Path | None = None,
) -> OracleSession:
    """Return the process-wide session for a library and data directory.

    The first call for a given pair loads the library and creates the
    session; later calls return the same session, so the model is primed
    at most once per process no matter how often it is run.

    Args:
        library: Path to the shared library.  Defaults to
            ``$IRIPROFILE_LIB``.
        data_dir: Directory holding the IRI data files.  Defaults to
            :func:`~iriprofile.config.get_data_dir`.

    Raises:
        StartupError: If the library cannot be loaded.
    """
    library = Path(library) if library is not None else get_library_path()
    data_dir = Path(data_dir) if data_dir is not None else get_data_dir()
    key = (library, data_dir)
    with _sessions_lock:
        session = _sessions.get(key)
        if session is None:
            session = OracleSession(SharedLibraryOracle(library), data_dir)
            _sessions[key] = session
        return session


def default_session() -> OracleSession:
    """Return the process-wide session for the configured IRI library.

    Equivalent to :func:`library_session` with ``IRIPROFILE_LIB`` and
    ``IRIPROFILE_DATA``.

    Raises:
        StartupError: If the library cannot be loaded.
    """
    return library_session()
