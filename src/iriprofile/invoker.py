"""Run the IRI model for one :class:`~iriprofile.request.ModelRequest`."""

from __future__ import annotations

import logging
import warnings
from enum import Enum
from typing import NamedTuple

import numpy as np

from iriprofile.buffers import (
    allocate_height_buffer,
    allocate_scalar_buffer,
    scalars_all_sentinel,
    to_row_major,
)
from iriprofile.errors import OracleInvocationFailure
from iriprofile.oracle import OracleSession, default_session
from iriprofile.request import ModelRequest

logger = logging.getLogger(__name__)


class OracleStatus(Enum):
    """Plausibility of the buffers returned by one model call.

    The model has no error channel; these are inferred from the output.
    """

    OK = "ok"
    NO_SCALARS = "no_scalars"
    """Every scalar slot still holds the ``-1.0`` sentinel."""
    NO_PROFILE = "no_profile"
    """Every populated height row is all zeros."""

    @property
    def degraded(self) -> bool:
        return self is not OracleStatus.OK


class RawOutput(NamedTuple):
    """Buffers returned by one model call.

    Attributes:
        height: Row-major height buffer, shape ``(1000, 20)``.  Only the
            first :attr:`num_rows` rows were written by the model.
        scalars: Scalar buffer, shape ``(100,)``, native units.
        num_rows: Number of meaningful height rows.
        status: Plausibility of the output.
    """

    height: np.ndarray
    scalars: np.ndarray
    num_rows: int
    status: OracleStatus


def classify_output(height: np.ndarray, scalars: np.ndarray, num_rows: int) -> OracleStatus:
    """Infer an :class:`OracleStatus` from the returned buffers."""
    if scalars_all_sentinel(scalars):
        return OracleStatus.NO_SCALARS
    if not np.any(height[:num_rows]):
        return OracleStatus.NO_PROFILE
    return OracleStatus.OK


class ModelInvoker:
    """Adapter that feeds a request to the model and collects its buffers.

    Args:
        session: Primed (or primable) oracle session.  Defaults to
            :func:`~iriprofile.oracle.default_session`, resolved on the
            first call.
    """

    def __init__(self, session: OracleSession | None = None) -> None:
        self._session = session

    @property
    def session(self) -> OracleSession:
        if self._session is None:
            self._session = default_session()
        return self._session

    def invoke(self, request: ModelRequest) -> RawOutput:
        """Call ``IRI_SUB`` with *request* and return the raw buffers.

        Apart from the transposition of the height buffer to row-major
        order, the buffers are returned exactly as the model left them.
        Degraded output is logged and reported as an
        :class:`~iriprofile.errors.OracleInvocationFailure` warning; it is
        never raised.

        Args:
            request: Validated model inputs.

        Returns:
            The raw model output.

        Raises:
            StartupError: If the session cannot be primed.
        """
        outf = allocate_height_buffer()
        oarr = allocate_scalar_buffer()
        jf = request.flags.to_native()

        logger.debug(
            "Calling IRI_SUB: lat=%s lon=%s year=%s mmdd=%s hour=%s heights=%s..%s/%s",
            request.latitude,
            request.longitude,
            request.year,
            request.mmdd,
            request.hour,
            request.height_begin,
            request.height_end,
            request.height_step,
        )
        self.session.call(
            jf,
            request.coordinate_mode.value,
            request.latitude,
            request.longitude,
            request.year,
            request.mmdd,
            request.hour,
            request.height_begin,
            request.height_end,
            request.height_step,
            outf,
            oarr,
        )

        height = to_row_major(outf)
        num_rows = request.num_rows
        status = classify_output(height, oarr, num_rows)
        if status.degraded:
            message = f"IRI returned implausible output ({status.value}) for {request}"
            logger.warning(message)
            warnings.warn(message, OracleInvocationFailure, stacklevel=2)

        return RawOutput(height=height, scalars=oarr, num_rows=num_rows, status=status)
