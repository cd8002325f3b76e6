"""
Importer which handles the import of multiple files as a single one.

A concrete format importer subclasses ``ImportingParserBase`` with a fixed
``ReadMode`` and implements the one strategy for that mode:

    ReadMode.BYTE_STREAM   -> parse_byte_stream(..., stream, ...)
    ReadMode.DECODED_TEXT  -> parse_text(..., reader, ...)
    ReadMode.REMOTE_URI    -> parse_uri(..., uri, ...)

The base class walks the file records in order, hands each one to the
strategy with the remaining row budget, and merges the per-file tables.
"""

from __future__ import annotations

import io
import logging
from enum import Enum
from typing import IO, Any, Dict, List, Mapping, Protocol, Sequence

import pandas as pd

from gridimport.config import ImportConfig
from gridimport.errors import InvalidArgument, UnsupportedOperation
from gridimport.grid import merge_grids, row_count
from gridimport.job import ImportingFileRecord, ImportingJob, ProjectMetadata
from gridimport.options import FileOptions, resolve_encoding
from gridimport.progress import (
    MultiFileReadingProgress,
    create_multi_file_reading_progress,
    open_and_track_file,
)

logger = logging.getLogger(__name__)


class ReadMode(Enum):
    """How a format importer wants each file handed to it."""

    BYTE_STREAM = "byte_stream"
    DECODED_TEXT = "decoded_text"
    REMOTE_URI = "remote_uri"


class ByteStreamReader(Protocol):
    def parse_byte_stream(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_source: str,
        stream: IO[bytes],
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        ...


class TextReader(Protocol):
    def parse_text(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_source: str,
        reader: IO[str],
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        ...


class URIReader(Protocol):
    def parse_uri(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_source: str,
        uri: str,
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        ...


STRATEGIES = {
    ReadMode.BYTE_STREAM: ByteStreamReader,
    ReadMode.DECODED_TEXT: TextReader,
    ReadMode.REMOTE_URI: URIReader,
}


def strategy_method(mode: ReadMode) -> str:
    """Name of the single method the reader protocol for ``mode`` declares."""
    protocol = STRATEGIES[ReadMode(mode)]
    (name,) = [
        attr for attr, value in vars(protocol).items()
        if callable(value) and not attr.startswith("_")
    ]
    return name


def per_file_limit(limit: int, total_rows: int) -> int:
    """
    Row budget for the next file.

    A negative limit means unlimited and is passed through. Otherwise the
    budget never drops below 1, so a strategy is never handed 0 or a negative
    value it would read as "no limit".
    """
    if limit < 0:
        return limit
    return max(limit - total_rows, 1)


class ImportingParserBase:
    """
    Base class for importers reading one or more files into a single table.

    Subclasses set ``mode`` (or pass it to ``__init__``) and override the
    matching strategy method. The strategy is checked when the importer is
    built; a subclass that decides per call which strategies it supports sets
    ``mode_polymorphic = True`` and the unimplemented ones fail at read time.
    """

    mode: ReadMode | None = None
    mode_polymorphic: bool = False

    def __init__(self, mode: ReadMode | None = None, config: ImportConfig | None = None) -> None:
        mode = mode or type(self).mode
        if mode is None:
            raise InvalidArgument(f"{type(self).__name__} does not declare a read mode")
        self.mode = ReadMode(mode)
        self.config = config or ImportConfig()
        if not self.mode_polymorphic and not self.supports(self.mode):
            raise UnsupportedOperation(
                f"Importer does not support reading in {self.mode.value} mode",
                mode=self.mode,
                format_name=type(self).__name__,
            )

    @classmethod
    def supports(cls, mode: ReadMode) -> bool:
        name = strategy_method(mode)
        return getattr(cls, name) is not getattr(ImportingParserBase, name)

    def create_parser_ui_initialization_data(
        self,
        job: ImportingJob,
        file_records: Sequence[ImportingFileRecord],
        format: str,
    ) -> Dict[str, Any]:
        return {"includeFileSources": len(file_records) > 1}

    def parse(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_records: Sequence[ImportingFileRecord],
        format: str,
        limit: int = -1,
        options: Mapping[str, Any] | None = None,
        progress: MultiFileReadingProgress | None = None,
    ) -> pd.DataFrame:
        """
        Read every file record in order and merge the results.

        Args:
            metadata: Project metadata; receives one options entry per file read.
            job: The importing job. Its ``canceled`` flag is checked before each file.
            file_records: Files of the batch, in import order.
            format: Format name the importer was selected for.
            limit: Maximum rows over the whole batch, negative for no limit.
            options: Import options shared by all files. Not modified.
            progress: Tracker for per-file reads; defaults to one reporting on ``job``.

        Raises:
            InvalidArgument: If no file is given, or the job was canceled
                before the first file was read.
        """
        if not file_records:
            raise InvalidArgument("No file provided")

        if progress is None:
            progress = create_multi_file_reading_progress(job, file_records)
        options = options or {}
        grids: List[pd.DataFrame] = []

        total_rows = 0
        for file_record in file_records:
            if job.canceled:
                logger.info(
                    "Job %s canceled after %d of %d files",
                    job.job_id, len(grids), len(file_records),
                )
                break

            file_limit = per_file_limit(limit, total_rows)
            grid = self.parse_one_file(metadata, job, file_record, file_limit, options, progress)
            grids.append(grid)
            total_rows += row_count(grid)

            if limit > 0 and total_rows >= limit:
                logger.debug("Row limit %d reached after %d files", limit, len(grids))
                break

        if not grids:
            raise InvalidArgument("No grid states provided")

        logger.info(
            "Imported %d rows from %d file(s) as %s",
            total_rows, len(grids), format,
        )
        return merge_grids(grids)

    def parse_one_file(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_record: ImportingFileRecord,
        limit: int,
        options: Mapping[str, Any],
        progress: MultiFileReadingProgress,
    ) -> pd.DataFrame:
        file_source = file_record.get_file_source()
        raw_data_dir = job.get_raw_data_dir()

        progress.start_file(file_source)
        try:
            file_options = self.push_importing_options(metadata, file_source, options)
            logger.debug("Reading %s (mode=%s, limit=%d)", file_source, self.mode.value, limit)

            if self.mode is ReadMode.REMOTE_URI:
                uri = file_record.get_derived_uri(raw_data_dir)
                return self.parse_uri(metadata, job, file_source, uri, limit, file_options)

            file = file_record.get_file(raw_data_dir)
            with open_and_track_file(file_source, file, progress) as stream:
                if self.mode is ReadMode.BYTE_STREAM:
                    return self.parse_byte_stream(metadata, job, file_source, stream, limit, file_options)

                encoding = resolve_encoding(options, file_record, self.config.default_encoding)
                reader = io.TextIOWrapper(stream, encoding=encoding, newline="")
                try:
                    return self.parse_text(metadata, job, file_source, reader, limit, file_options)
                finally:
                    # Leave closing the byte stream to open_and_track_file.
                    if not stream.closed:
                        reader.detach()
        finally:
            progress.end_file(file_source, file_record.get_size(raw_data_dir))

    def push_importing_options(
        self,
        metadata: ProjectMetadata,
        file_source: str,
        options: Mapping[str, Any],
    ) -> FileOptions:
        file_options = FileOptions(options, file_source)
        metadata.append_import_option_metadata(file_options)
        return file_options

    def parse_uri(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_source: str,
        uri: str,
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        """
        Parse one file designated by a URI understood by a distributed reader.

        Args:
            metadata: Project metadata, which the importer may modify.
            job: The importing job.
            file_source: Original path or source of the file ("clipboard", a URL, ...).
            uri: Where to read the data from.
            limit: Maximum number of rows to read, negative for all.
            options: Options for this file, including ``fileSource``.
        """
        raise UnsupportedOperation(
            "Importer does not support reading from a URI",
            mode=ReadMode.REMOTE_URI,
            format_name=type(self).__name__,
        )

    def parse_text(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_source: str,
        reader: IO[str],
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        """Parse one file read from a decoded text stream. See ``parse_uri``."""
        raise UnsupportedOperation(
            "Importer does not support reading from a text reader",
            mode=ReadMode.DECODED_TEXT,
            format_name=type(self).__name__,
        )

    def parse_byte_stream(
        self,
        metadata: ProjectMetadata,
        job: ImportingJob,
        file_source: str,
        stream: IO[bytes],
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        """Parse one file read from a binary stream. See ``parse_uri``."""
        raise UnsupportedOperation(
            "Importer does not support reading from a byte stream",
            mode=ReadMode.BYTE_STREAM,
            format_name=type(self).__name__,
        )
