from pathlib import Path

from .excel import ExcelImporter
from .json_importer import JsonImporter
from .parquet import ParquetImporter
from .separator import SeparatorBasedImporter, TsvImporter

FORMATS = [
    SeparatorBasedImporter,
    TsvImporter,
    JsonImporter,
    ExcelImporter,
    ParquetImporter,
]


def find_importer_for_format(format: str, config=None):
    for importer in FORMATS:
        if format in importer.spec.formats:
            return importer(config=config)
    return None


def format_for_path(path: str | Path) -> str | None:
    suffix = Path(str(path).split("?", 1)[0]).suffix.lower()
    for importer in FORMATS:
        if suffix in importer.spec.extensions:
            return importer.spec.formats[0]
    return None


__all__ = [
    "FORMATS",
    "ExcelImporter",
    "JsonImporter",
    "ParquetImporter",
    "SeparatorBasedImporter",
    "TsvImporter",
    "find_importer_for_format",
    "format_for_path",
]
