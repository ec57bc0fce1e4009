"""Exception and warning types raised by iriprofile.

Validation errors derive from the matching built-in so callers that only
know ``ValueError`` or ``IndexError`` still catch them. All raised errors
also derive from :class:`IriProfileError`.
"""

from __future__ import annotations


class IriProfileError(Exception):
    """Base class for all iriprofile errors."""


class InvalidFlagIndex(IriProfileError, IndexError):
    """A switch was addressed by an index outside 1..50 or an unknown name."""


class InvalidHeightRange(IriProfileError, ValueError):
    """Height step is not positive, begin exceeds end, or the row count is out of range."""


class InvalidRequest(IriProfileError, ValueError):
    """A scalar model input (position, date, hour) is out of range."""


class OutputWriteError(IriProfileError, OSError):
    """The report sink could not be opened or written."""


class StartupError(IriProfileError, RuntimeError):
    """The model library or its auxiliary data files could not be loaded."""


class OracleInvocationFailure(UserWarning):
    """Warning category for model calls that returned implausible output.

    The Fortran routine has no error channel, so an untouched scalar buffer
    or an all-zero profile is the only evidence of an internal failure.
    This is emitted with :func:`warnings.warn`, never raised.
    """
