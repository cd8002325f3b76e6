from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping

import pandas as pd

from gridimport.options import get_bool

FILE_COLUMN = "File"


@dataclass(frozen=True)
class FormatSpec:
    name: str
    version: str
    formats: List[str]
    extensions: List[str]


def limit_rows(df: pd.DataFrame, limit: int) -> pd.DataFrame:
    if limit < 0 or len(df.index) <= limit:
        return df
    return df.head(limit)


def nrows_for(limit: int) -> int | None:
    return None if limit < 0 else limit


def with_file_source(df: pd.DataFrame, file_source: str, options: Mapping[str, Any]) -> pd.DataFrame:
    if not get_bool(options, "includeFileSources"):
        return df
    out = df.copy()
    if FILE_COLUMN in out.columns:
        out = out.drop(columns=[FILE_COLUMN])
    out.insert(0, FILE_COLUMN, file_source)
    return out
