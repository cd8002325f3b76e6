"""Import of multi-file batches into a single table."""

from gridimport.base import ImportingParserBase, ReadMode, per_file_limit
from gridimport.errors import ImportingError, InvalidArgument, RetrievalError, UnsupportedOperation
from gridimport.grid import merge_grids
from gridimport.job import ImportingFileRecord, ImportingJob, ProjectMetadata

__all__ = [
    "ImportingError",
    "ImportingFileRecord",
    "ImportingJob",
    "ImportingParserBase",
    "InvalidArgument",
    "ProjectMetadata",
    "ReadMode",
    "RetrievalError",
    "UnsupportedOperation",
    "merge_grids",
    "per_file_limit",
]
