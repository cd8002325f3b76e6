"""Comma, tab and other single-separator text tables, read with ``pandas.read_csv``."""

from __future__ import annotations

from typing import IO, Any, Dict, Mapping, Sequence

import pandas as pd

from gridimport.base import ImportingParserBase, ReadMode
from gridimport.options import get_bool, get_int, get_string

from .base import FormatSpec, nrows_for, with_file_source


class SeparatorBasedImporter(ImportingParserBase):
    spec = FormatSpec(
        name="separator_based",
        version="0.1.0",
        formats=["text/line-based/*sv", "text/line-based/csv"],
        extensions=[".csv", ".txt"],
    )
    mode = ReadMode.DECODED_TEXT
    default_separator = ","

    def create_parser_ui_initialization_data(self, job, file_records: Sequence, format: str) -> Dict[str, Any]:
        options = super().create_parser_ui_initialization_data(job, file_records, format)
        options.update(
            {
                "separator": self.default_separator,
                "headerLines": 1,
                "skipDataLines": 0,
                "guessCellValueTypes": False,
            }
        )
        return options

    def parse_text(
        self,
        metadata,
        job,
        file_source: str,
        reader: IO[str],
        limit: int,
        options: Mapping[str, Any],
    ) -> pd.DataFrame:
        separator = get_string(options, "separator") or self.default_separator
        has_header = get_int(options, "headerLines", 1) > 0
        skip = max(get_int(options, "skipDataLines", 0), 0)
        guess_types = get_bool(options, "guessCellValueTypes")

        first_data_line = 1 if has_header else 0
        df = pd.read_csv(
            reader,
            sep=separator,
            header=0 if has_header else None,
            skiprows=range(first_data_line, first_data_line + skip) if skip else None,
            nrows=nrows_for(limit),
            dtype=None if guess_types else str,
            keep_default_na=guess_types,
            engine="python" if len(separator) > 1 else "c",
        )
        if not has_header:
            df.columns = [f"Column {i + 1}" for i in range(len(df.columns))]
        return with_file_source(df, file_source, options)


class TsvImporter(SeparatorBasedImporter):
    spec = FormatSpec(
        name="tsv",
        version="0.1.0",
        formats=["text/line-based/tsv"],
        extensions=[".tsv", ".tab"],
    )
    default_separator = "\t"
