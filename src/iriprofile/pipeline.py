"""End-to-end run: request -> model -> decoded tables -> CSV report."""

from __future__ import annotations

import os
from typing import IO, NamedTuple

from iriprofile.invoker import ModelInvoker, OracleStatus
from iriprofile.render import write_csv
from iriprofile.request import ModelRequest
from iriprofile.results import ResultTable, ScalarReport


class ProfileRun(NamedTuple):
    """Outcome of :func:`run_profile`.

    Attributes:
        table: Decoded height profile.
        scalars: Named scalar outputs.
        status: Plausibility of the model output.  The report is written
            even when this is degraded.
    """

    table: ResultTable
    scalars: ScalarReport
    status: OracleStatus


def run_profile(
    request: ModelRequest,
    sink: str | os.PathLike | IO[str] | None = None,
    *,
    invoker: ModelInvoker | None = None,
) -> ProfileRun:
    """Run the model for *request* and write the CSV report to *sink*.

    The request is validated on construction, so nothing reaches the model
    unless its inputs are valid.  The full table is decoded before the
    sink is opened.

    Args:
        request: Validated model inputs.
        sink: Report destination (path or text stream).  ``None`` skips
            writing.
        invoker: Model adapter.  Defaults to one bound to the process-wide
            session.

    Returns:
        The decoded results.

    Raises:
        StartupError: If the model cannot be loaded or primed.
        OutputWriteError: If the report cannot be written.
    """
    if invoker is None:
        invoker = ModelInvoker()

    raw = invoker.invoke(request)
    table = ResultTable.from_raw(raw, request)
    scalars = ScalarReport.from_raw(raw)

    if sink is not None:
        write_csv(table, sink)

    return ProfileRun(table=table, scalars=scalars, status=raw.status)
