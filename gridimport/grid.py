"""
Merging of per-file tables into one.

Two tables are combined by taking the union of their columns (the left
table's columns first, then any new ones from the right in their original
order) and stacking the rows. Cells a file has no column for are left NA;
integer and boolean columns move to pandas' nullable dtypes for that so their
values are kept as they were read.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd
from pandas.api.extensions import ExtensionDtype

from gridimport.errors import InvalidArgument


def row_count(grid: pd.DataFrame) -> int:
    return len(grid.index)


def merged_columns(left: pd.DataFrame, right: pd.DataFrame) -> List:
    columns = list(left.columns)
    seen = set(columns)
    for col in right.columns:
        if col not in seen:
            columns.append(col)
            seen.add(col)
    return columns


def _nullable(frame: pd.DataFrame, columns: List) -> pd.DataFrame:
    """Move numpy int and bool columns to pandas' nullable dtypes so they can hold NA."""
    if not columns:
        return frame
    converted = frame[columns].convert_dtypes(
        infer_objects=False,
        convert_string=False,
        convert_floating=False,
    )
    out = frame.copy()
    for col in columns:
        out[col] = converted[col]
    return out


def _align(frame: pd.DataFrame, columns: List, dtypes: Dict) -> pd.DataFrame:
    out = frame.reindex(columns=columns)
    for col in columns:
        if col not in frame.columns and isinstance(dtypes[col], ExtensionDtype):
            out[col] = pd.Series(pd.NA, index=out.index, dtype=dtypes[col])
    return out


def merge_two(left: pd.DataFrame, right: pd.DataFrame) -> pd.DataFrame:
    columns = merged_columns(left, right)
    left_only = [col for col in left.columns if col not in right.columns]
    right_only = [col for col in right.columns if col not in left.columns]
    left = _nullable(left, left_only)
    right = _nullable(right, right_only)

    dtypes = {col: right[col].dtype for col in right.columns}
    dtypes.update({col: left[col].dtype for col in left.columns})
    frames = [
        _align(frame, columns, dtypes)
        for frame in (left, right)
        if len(frame.index)
    ]
    if not frames:
        return pd.DataFrame(columns=columns)
    if len(frames) == 1:
        return frames[0].reset_index(drop=True)
    return pd.concat(frames, ignore_index=True, sort=False)


def merge_grids(grids: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """
    Fold ``grids`` left to right into one table, preserving file and row order.

    Raises:
        InvalidArgument: If ``grids`` is empty.
    """
    if not grids:
        raise InvalidArgument("No grids provided")
    current = grids[0].reset_index(drop=True)
    for grid in grids[1:]:
        current = merge_two(current, grid)
    return current
