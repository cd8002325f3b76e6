from __future__ import annotations

from typing import IO, Any, Dict, Mapping, Sequence

import pandas as pd

from gridimport.base import ImportingParserBase, ReadMode
from gridimport.options import get_bool

from .base import FormatSpec, nrows_for, with_file_source


class ExcelImporter(ImportingParserBase):
    spec = FormatSpec(
        name="excel",
        version="0.1.0",
        formats=["binary/xlsx"],
        extensions=[".xlsx", ".xlsm"],
    )
    mode = ReadMode.BYTE_STREAM

    def create_parser_ui_initialization_data(self, job, file_records: Sequence, format: str) -> Dict[str, Any]:
        options = super().create_parser_ui_initialization_data(job, file_records, format)
        options.update({"sheet": 0, "guessCellValueTypes": True})
        return options

    def parse_byte_stream(
        self,
        metadata,
        job,
        file_source: str,
        stream: IO[bytes],
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        sheet = options.get("sheet", 0)
        if sheet is None or isinstance(sheet, (list, tuple)):
            # One table per file; several sheets would need several grids.
            raise ValueError(f"Exactly one sheet must be selected for {file_source}, got {sheet!r}")
        df = pd.read_excel(
            stream,
            sheet_name=sheet,
            nrows=nrows_for(limit),
            dtype=None if get_bool(options, "guessCellValueTypes", True) else str,
            engine="openpyxl",
        )
        return with_file_source(df, file_source, options)
