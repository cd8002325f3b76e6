"""
Import options.

Options arrive as a plain mapping (decoded from JSON or YAML). The orchestrator
never writes into the caller's mapping: each file gets its own ``FileOptions``
snapshot with ``fileSource`` stamped on it, and that snapshot is what format
importers and the project metadata see.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterator, Mapping

FILE_SOURCE_KEY = "fileSource"
ENCODING_KEY = "encoding"


class FileOptions(Mapping[str, Any]):
    """Read-only view of the batch options plus the label of the file being read."""

    def __init__(self, options: Mapping[str, Any] | None, file_source: str) -> None:
        merged = dict(options or {})
        merged[FILE_SOURCE_KEY] = file_source
        self._data = MappingProxyType(merged)
        self.file_source = file_source

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FileOptions({dict(self._data)!r})"


def get_string(options: Mapping[str, Any] | None, key: str, default: str | None = None) -> str | None:
    if not options:
        return default
    value = options.get(key)
    if isinstance(value, str):
        return value
    return default


def get_int(options: Mapping[str, Any] | None, key: str, default: int) -> int:
    if not options:
        return default
    value = options.get(key)
    if isinstance(value, bool) or value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_bool(options: Mapping[str, Any] | None, key: str, default: bool = False) -> bool:
    if not options:
        return default
    value = options.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return default


def resolve_encoding(options: Mapping[str, Any] | None, record, default: str) -> str:
    """An explicit ``encoding`` option wins; an empty string counts as unset."""
    common = get_string(options, ENCODING_KEY)
    if common:
        return common
    return record.get_derived_encoding() or default
