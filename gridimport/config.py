"""
Import configuration.

Defaults come from the environment so the CLI and long-running callers can be
tuned without code changes:

    GRIDIMPORT_RAW_DIR            job raw data directory     (data/raw)
    GRIDIMPORT_ROW_LIMIT          global row limit, -1 = all (-1)
    GRIDIMPORT_DEFAULT_ENCODING   fallback text encoding     (utf-8)
    GRIDIMPORT_DOWNLOAD_TIMEOUT   URL retrieval timeout, s   (30)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from gridimport.common import getenv

UNLIMITED: int = -1


@dataclass
class ImportConfig:
    raw_data_dir: Path = field(
        default_factory=lambda: Path(getenv("GRIDIMPORT_RAW_DIR", "data/raw"))
    )
    row_limit: int = field(
        default_factory=lambda: int(getenv("GRIDIMPORT_ROW_LIMIT", str(UNLIMITED)))
    )
    default_encoding: str = field(
        default_factory=lambda: getenv("GRIDIMPORT_DEFAULT_ENCODING", "utf-8")
    )
    download_timeout: float = field(
        default_factory=lambda: float(getenv("GRIDIMPORT_DOWNLOAD_TIMEOUT", "30"))
    )
