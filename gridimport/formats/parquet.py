from __future__ import annotations

from typing import Any, Mapping

import pandas as pd

from gridimport.base import ImportingParserBase, ReadMode

from .base import FormatSpec, limit_rows, with_file_source


class ParquetImporter(ImportingParserBase):
    """Reads Parquet straight from the file's URI; no local stream is opened."""

    spec = FormatSpec(
        name="parquet",
        version="0.1.0",
        formats=["binary/parquet"],
        extensions=[".parquet", ".pq"],
    )
    mode = ReadMode.REMOTE_URI

    def parse_uri(
        self,
        metadata,
        job,
        file_source: str,
        uri: str,
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        columns = options.get("columns")
        df = pd.read_parquet(uri, columns=list(columns) if columns else None, engine="pyarrow")
        return with_file_source(limit_rows(df, limit).reset_index(drop=True), file_source, options)
