"""JSON documents holding a list of records, flattened with ``pandas.json_normalize``."""

from __future__ import annotations

import json
from typing import IO, Any, Dict, List, Mapping, Sequence

import pandas as pd

from gridimport.base import ImportingParserBase, ReadMode
from gridimport.options import get_string

from .base import FormatSpec, with_file_source

RECORD_KEYS = ("records", "data", "rows", "items", "result")


def _records_at(payload: Any, record_path: str | None) -> List[Any]:
    if record_path:
        node = payload
        for key in record_path.split("."):
            if isinstance(node, dict) and key in node:
                node = node[key]
            elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
                node = node[int(key)]
            else:
                raise ValueError(f"Record path {record_path!r} not found in JSON document")
        payload = node

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in RECORD_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
        return [payload]
    raise ValueError(f"Unexpected JSON payload shape: {type(payload).__name__}")


class JsonImporter(ImportingParserBase):
    spec = FormatSpec(
        name="json",
        version="0.1.0",
        formats=["text/json"],
        extensions=[".json"],
    )
    mode = ReadMode.DECODED_TEXT

    def create_parser_ui_initialization_data(self, job, file_records: Sequence, format: str) -> Dict[str, Any]:
        options = super().create_parser_ui_initialization_data(job, file_records, format)
        options["recordPath"] = None
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
        records = _records_at(json.load(reader), get_string(options, "recordPath"))
        if limit >= 0:
            records = records[:limit]
        records = [item if isinstance(item, dict) else {"value": item} for item in records]
        df = pd.json_normalize(records) if records else pd.DataFrame()
        return with_file_source(df, file_source, options)
