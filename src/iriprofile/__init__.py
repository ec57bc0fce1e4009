"""
iriprofile drives the International Reference Ionosphere (IRI) model and renders its height profiles as CSV.
"""

from .constants import (
    NUM_FLAGS,
    MAX_HEIGHT_ROWS,
    NUM_PROFILE_PARAMETERS,
    NUM_SCALARS,
    SCALAR_SENTINEL,
    M3_PER_CM3,
    UT_HOUR_OFFSET,
)

from .config import set_dtype, get_dtype

from .errors import (
    IriProfileError,
    InvalidFlagIndex,
    InvalidHeightRange,
    InvalidRequest,
    OutputWriteError,
    StartupError,
    OracleInvocationFailure,
)

from .flags import FlagVector, DEFAULT_OFF, FLAGS

from .request import (
    CoordinateMode,
    ModelRequest,
    utc_hour,
    local_hour,
    height_row_count,
)

from .buffers import (
    allocate_height_buffer,
    allocate_scalar_buffer,
    to_row_major,
)

from .oracle import (
    ModelOracle,
    SharedLibraryOracle,
    OracleSession,
    SessionState,
    default_session,
    library_session,
)

from .invoker import ModelInvoker, OracleStatus, RawOutput

from .results import (
    PROFILE_COLUMNS,
    SCALAR_POSITIONS,
    ResultTable,
    ScalarReport,
)

from .render import round_half_up, render_csv, write_csv

from .pipeline import ProfileRun, run_profile

__all__ = [
    # Constants
    "NUM_FLAGS",
    "MAX_HEIGHT_ROWS",
    "NUM_PROFILE_PARAMETERS",
    "NUM_SCALARS",
    "SCALAR_SENTINEL",
    "M3_PER_CM3",
    "UT_HOUR_OFFSET",
    # Config
    "set_dtype",
    "get_dtype",
    # Errors
    "IriProfileError",
    "InvalidFlagIndex",
    "InvalidHeightRange",
    "InvalidRequest",
    "OutputWriteError",
    "StartupError",
    "OracleInvocationFailure",
    # Flags
    "FlagVector",
    "DEFAULT_OFF",
    "FLAGS",
    # Request
    "CoordinateMode",
    "ModelRequest",
    "utc_hour",
    "local_hour",
    "height_row_count",
    # Buffers
    "allocate_height_buffer",
    "allocate_scalar_buffer",
    "to_row_major",
    # Oracle
    "ModelOracle",
    "SharedLibraryOracle",
    "OracleSession",
    "SessionState",
    "default_session",
    "library_session",
    # Invoker
    "ModelInvoker",
    "OracleStatus",
    "RawOutput",
    # Results
    "PROFILE_COLUMNS",
    "SCALAR_POSITIONS",
    "ResultTable",
    "ScalarReport",
    # Rendering
    "round_half_up",
    "render_csv",
    "write_csv",
    # Pipeline
    "ProfileRun",
    "run_profile",
]
