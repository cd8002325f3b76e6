"""
Read progress for a batch of files.

``JobReadingProgress`` turns per-file byte counts into an overall percentage
on the job. ``open_and_track_file`` opens one file as a buffered binary stream
whose reads are reported to the tracker.
"""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol, Sequence

logger = logging.getLogger(__name__)


class MultiFileReadingProgress(Protocol):
    def start_file(self, file_source: str) -> None:
        ...

    def reading_progress(self, file_source: str, bytes_read: int) -> None:
        ...

    def end_file(self, file_source: str, bytes_read: int) -> None:
        ...


class JobReadingProgress:
    def __init__(self, job, total_size: int) -> None:
        self.job = job
        self.total_size = total_size
        self.total_bytes_read = 0

    def start_file(self, file_source: str) -> None:
        logger.debug("Start reading %s", file_source)
        self.reading_progress(file_source, 0)

    def reading_progress(self, file_source: str, bytes_read: int) -> None:
        if self.total_size == 0:
            percent = -1
        else:
            done = min(self.total_bytes_read + bytes_read, self.total_size)
            percent = int(100 * done / self.total_size)
        self.job.set_progress(percent, f"Reading {file_source}")

    def end_file(self, file_source: str, bytes_read: int) -> None:
        self.total_bytes_read += bytes_read
        logger.debug("Done reading %s (%d bytes)", file_source, bytes_read)


def create_multi_file_reading_progress(job, file_records: Sequence) -> JobReadingProgress:
    total_size = sum(record.get_size(job.get_raw_data_dir()) for record in file_records)
    return JobReadingProgress(job, total_size)


class TrackingStream(io.RawIOBase):
    """Raw binary stream reporting the cumulative byte count of every read."""

    def __init__(self, raw, file_source: str, progress: MultiFileReadingProgress) -> None:
        self._raw = raw
        self.file_source = file_source
        self.progress = progress
        self.bytes_read = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return self._raw.seekable()

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._raw.seek(offset, whence)

    def tell(self) -> int:
        return self._raw.tell()

    def readinto(self, buffer) -> int:
        n = self._raw.readinto(buffer)
        if n:
            self.bytes_read += n
            self.progress.reading_progress(self.file_source, self.bytes_read)
        return n

    def close(self) -> None:
        if not self.closed:
            try:
                self._raw.close()
            finally:
                super().close()


@contextmanager
def open_and_track_file(
    file_source: str, path: Path, progress: MultiFileReadingProgress
) -> Iterator[io.BufferedReader]:
    """
    Open ``path`` for the duration of the block and release it on every exit path.

    A failure to close while another error is already propagating is logged and
    dropped so that the original error reaches the caller.
    """
    stream = io.BufferedReader(TrackingStream(path.open("rb", buffering=0), file_source, progress))
    try:
        yield stream
    except BaseException:
        try:
            stream.close()
        except OSError:
            logger.warning("Failed to close %s after an error", file_source, exc_info=True)
        raise
    else:
        stream.close()
