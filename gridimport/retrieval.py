"""
Download of URL sources into a job's raw data directory.

A downloaded file keeps its URL as the file source label so that provenance
and the optional ``File`` column show where the rows came from.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from gridimport.common import ensure_dirs
from gridimport.errors import RetrievalError
from gridimport.job import ImportingFileRecord

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; gridimport/0.1)"
}

CHUNK_SIZE = 1024 * 1024


def is_url(value: str) -> bool:
    return urlparse(value).scheme in {"http", "https"}


def _local_name(url: str, raw_data_dir: Path) -> str:
    name = unquote(Path(urlparse(url).path).name) or "download"
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name)
    candidate = name
    stem, suffix = Path(name).stem, Path(name).suffix
    n = 1
    while (raw_data_dir / candidate).exists():
        candidate = f"{stem}-{n}{suffix}"
        n += 1
    return candidate


def download_file_record(url: str, raw_data_dir: Path | str, timeout: float = 30) -> ImportingFileRecord:
    """
    Fetch ``url`` into ``raw_data_dir`` and describe it as a file record.

    Raises:
        RetrievalError: On a transport failure or an HTTP error status.
    """
    raw_data_dir = Path(raw_data_dir)
    ensure_dirs(raw_data_dir)
    location = _local_name(url, raw_data_dir)
    target = raw_data_dir / location

    try:
        resp = requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout, stream=True)
    except requests.RequestException as exc:
        raise RetrievalError(f"Could not fetch {url}: {exc}", url=url) from exc

    with resp:
        if resp.status_code >= 400:
            raise RetrievalError(f"Could not fetch {url}", url=url, status_code=resp.status_code)
        size = 0
        try:
            with target.open("wb") as fh:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
                        size += len(chunk)
        except requests.RequestException as exc:
            target.unlink(missing_ok=True)
            raise RetrievalError(f"Download of {url} interrupted: {exc}", url=url) from exc
        charset = None
        if "charset=" in resp.headers.get("Content-Type", ""):
            charset = resp.encoding

    logger.info("Downloaded %s to %s (%d bytes)", url, target, size)
    return ImportingFileRecord(
        location=location,
        file_source=url,
        url=url,
        declared_encoding=charset,
        size=size,
    )
