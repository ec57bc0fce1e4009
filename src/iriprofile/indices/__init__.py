"""Auxiliary index data read by the IRI model at start-up.

IRI loads daily Ap/F10.7 values from ``apf107.dat`` and monthly IG12/Rz12
values from ``ig_rz.dat`` once per process.  This package downloads,
parses and validates those files.

Typical usage::

    from iriprofile.indices import load_cached_indices, load_apf107
    files = load_cached_indices()
    df = load_apf107(files.apf107.parent)
"""

from iriprofile.indices._download import (
    APF107_FILENAME,
    IG_RZ_FILENAME,
    INDEX_FILENAMES,
    IRI_INDICES_URL,
    download_index_file,
)
from iriprofile.indices._parsers import IgRzHeader, parse_apf107_file, parse_ig_rz_header
from iriprofile.indices._providers import (
    IndexFiles,
    load_apf107,
    load_cached_indices,
    needs_refresh,
    validate_index_files,
)

__all__ = [
    "APF107_FILENAME",
    "IG_RZ_FILENAME",
    "INDEX_FILENAMES",
    "IRI_INDICES_URL",
    "IgRzHeader",
    "IndexFiles",
    "download_index_file",
    "load_apf107",
    "load_cached_indices",
    "needs_refresh",
    "parse_apf107_file",
    "parse_ig_rz_header",
    "validate_index_files",
]
