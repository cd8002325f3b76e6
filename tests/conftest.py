from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd
import pytest

from gridimport.base import ImportingParserBase, ReadMode
from gridimport.job import ImportingFileRecord, ImportingJob, ProjectMetadata


class RecordingProgress:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def start_file(self, file_source: str) -> None:
        self.events.append(("start", file_source))

    def reading_progress(self, file_source: str, bytes_read: int) -> None:
        pass

    def end_file(self, file_source: str, bytes_read: int) -> None:
        self.events.append(("end", file_source, bytes_read))

    def pairs(self) -> list[str]:
        starts = [e[1] for e in self.events if e[0] == "start"]
        ends = [e[1] for e in self.events if e[0] == "end"]
        assert starts == ends
        return starts


class LineImporter(ImportingParserBase):
    """Each line of a file is one row; honours the row limit unless told not to."""

    mode = ReadMode.BYTE_STREAM

    def __init__(self, honour_limit: bool = True, cancel_after: int | None = None, fail_on: str | None = None):
        super().__init__()
        self.honour_limit = honour_limit
        self.cancel_after = cancel_after
        self.fail_on = fail_on
        self.calls: list[tuple[str, int]] = []
        self.streams: list = []
        self.options_seen: list = []

    def parse_byte_stream(self, metadata, job, file_source, stream, limit, options):
        self.calls.append((file_source, limit))
        self.streams.append(stream)
        self.options_seen.append(options)
        if file_source == self.fail_on:
            raise ValueError(f"cannot parse {file_source}")
        lines = stream.read().decode("utf-8").splitlines()
        if self.honour_limit and limit >= 0:
            lines = lines[:limit]
        if self.cancel_after is not None and len(self.calls) == self.cancel_after:
            job.cancel()
        return pd.DataFrame({"value": lines})


def write_batch(raw_dir: Path, row_counts: List[int]) -> List[ImportingFileRecord]:
    raw_dir.mkdir(parents=True, exist_ok=True)
    records = []
    for i, count in enumerate(row_counts):
        name = f"file{i + 1}.txt"
        (raw_dir / name).write_text("".join(f"f{i + 1}-r{r + 1}\n" for r in range(count)), encoding="utf-8")
        records.append(ImportingFileRecord(location=name, file_source=name))
    return records


@pytest.fixture
def raw_dir(tmp_path: Path) -> Path:
    path = tmp_path / "raw"
    path.mkdir()
    return path


@pytest.fixture
def job(raw_dir: Path) -> ImportingJob:
    return ImportingJob(raw_dir, job_id="test-job")


@pytest.fixture
def metadata() -> ProjectMetadata:
    return ProjectMetadata(name="test")


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()
