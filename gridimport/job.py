"""
Import job, file records and project metadata.

A job owns a raw data directory holding the files uploaded or downloaded for
it; each ``ImportingFileRecord`` points at one of them and knows how to resolve
itself to a local path or to a URI that a distributed reader understands.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

from gridimport.common import write_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportingFileRecord:
    location: str
    file_source: str | None = None
    url: str | None = None
    uri: str | None = None
    encoding: str | None = None
    declared_encoding: str | None = None
    size: int | None = None
    format: str | None = None

    def get_file_source(self) -> str:
        """The label shown to users: a path, a URL, or a pseudo-source like "clipboard"."""
        return self.file_source or self.url or self.location

    def get_file(self, raw_data_dir: Path | str) -> Path:
        return Path(raw_data_dir) / self.location

    def get_derived_uri(self, raw_data_dir: Path | str) -> str:
        if self.uri:
            return self.uri
        return self.get_file(raw_data_dir).resolve().as_uri()

    def get_derived_encoding(self) -> str | None:
        for value in (self.declared_encoding, self.encoding):
            if value:
                return value
        return None

    def get_size(self, raw_data_dir: Path | str) -> int:
        if self.size is not None:
            return self.size
        path = self.get_file(raw_data_dir)
        if path.is_file():
            return path.stat().st_size
        return 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ImportingFileRecord":
        size = payload.get("size")
        return cls(
            location=str(payload["location"]),
            file_source=payload.get("fileSource"),
            url=payload.get("url"),
            uri=payload.get("uri"),
            encoding=payload.get("encoding"),
            declared_encoding=payload.get("declaredEncoding"),
            size=int(size) if size is not None else None,
            format=payload.get("format"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "location": self.location,
            "fileSource": self.file_source,
            "url": self.url,
            "uri": self.uri,
            "encoding": self.encoding,
            "declaredEncoding": self.declared_encoding,
            "size": self.size,
            "format": self.format,
        }
        return {key: value for key, value in payload.items() if value is not None}


class ImportingJob:
    """
    One import job. ``canceled`` is polled by the orchestrator between files.
    """

    def __init__(self, raw_data_dir: Path | str, job_id: str | None = None) -> None:
        self.job_id = job_id or uuid.uuid4().hex
        self.raw_data_dir = Path(raw_data_dir)
        self.canceled = False
        self.progress = 0
        self.progress_message = ""

    def get_raw_data_dir(self) -> Path:
        return self.raw_data_dir

    def cancel(self) -> None:
        logger.info("Import job %s canceled", self.job_id)
        self.canceled = True

    def set_progress(self, percent: int, message: str) -> None:
        self.progress = percent
        self.progress_message = message
        logger.debug("Job %s: %s (%s%%)", self.job_id, message, percent)


@dataclass
class ProjectMetadata:
    name: str = ""
    import_option_metadata: List[Dict[str, Any]] = field(default_factory=list)

    def append_import_option_metadata(self, options: Mapping[str, Any]) -> None:
        self.import_option_metadata.append(dict(options))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "importOptionMetadata": [dict(item) for item in self.import_option_metadata],
        }

    def save(self, path: Path) -> None:
        write_json(self.to_dict(), path)
