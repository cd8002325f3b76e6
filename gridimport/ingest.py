from __future__ import annotations

import argparse
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

from gridimport.common import ensure_dirs, write_parquet
from gridimport.config import ImportConfig
from gridimport.errors import InvalidArgument
from gridimport.formats import find_importer_for_format, format_for_path
from gridimport.job import ImportingFileRecord, ImportingJob, ProjectMetadata
from gridimport.loader import load_options
from gridimport.retrieval import download_file_record, is_url

logger = logging.getLogger(__name__)


def stage_local_file(path: Path, raw_data_dir: Path) -> ImportingFileRecord:
    """Make a local file reachable from the job's raw data directory."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No such file: {path}")
    try:
        location = path.resolve().relative_to(raw_data_dir.resolve()).as_posix()
    except ValueError:
        target = raw_data_dir / path.name
        n = 1
        while target.exists():
            target = raw_data_dir / f"{path.stem}-{n}{path.suffix}"
            n += 1
        shutil.copyfile(path, target)
        location = target.name
    return ImportingFileRecord(location=location, file_source=str(path), size=path.stat().st_size)


def build_file_records(sources: Sequence[str], job: ImportingJob, config: ImportConfig) -> List[ImportingFileRecord]:
    records = []
    for source in sources:
        if is_url(source):
            records.append(download_file_record(source, job.get_raw_data_dir(), timeout=config.download_timeout))
        else:
            records.append(stage_local_file(Path(source), job.get_raw_data_dir()))
    return records


def run_import(
    sources: Sequence[str],
    format: str | None = None,
    limit: int | None = None,
    options: Dict[str, Any] | None = None,
    config: ImportConfig | None = None,
    output_path: Path | None = None,
    metadata_path: Path | None = None,
    project_name: str = "",
) -> pd.DataFrame:
    config = config or ImportConfig()
    if not sources:
        raise InvalidArgument("No file provided")

    format = format or format_for_path(sources[0])
    if format is None:
        raise InvalidArgument(f"Cannot guess the format of {sources[0]}; pass one explicitly")
    importer = find_importer_for_format(format, config=config)
    if importer is None:
        raise InvalidArgument(f"No importer registered for format {format!r}")

    ensure_dirs(config.raw_data_dir)
    job = ImportingJob(config.raw_data_dir)
    metadata = ProjectMetadata(name=project_name)
    records = build_file_records(sources, job, config)

    batch_options = importer.create_parser_ui_initialization_data(job, records, format)
    batch_options.update(options or {})

    df = importer.parse(
        metadata,
        job,
        records,
        format,
        limit=config.row_limit if limit is None else limit,
        options=batch_options,
    )

    if output_path is not None:
        write_parquet(df, Path(output_path))
    if metadata_path is not None:
        metadata.save(Path(metadata_path))
    return df


def main() -> None:
    parser = argparse.ArgumentParser(description="Import one or more files as a single table")
    parser.add_argument("sources", nargs="+", help="local paths or http(s) URLs, in import order")
    parser.add_argument("--format", help="importer format, guessed from the first file extension if omitted")
    parser.add_argument("--limit", type=int, default=None, help="maximum rows over all files, -1 for all")
    parser.add_argument("--options", help="YAML file with import options")
    parser.add_argument("--raw-dir", default=None, help="job raw data directory")
    parser.add_argument("--out", default="data/processed/import.parquet")
    parser.add_argument("--metadata", default="data/manifests/import_metadata.json")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = ImportConfig()
    if args.raw_dir:
        config.raw_data_dir = Path(args.raw_dir)

    df = run_import(
        args.sources,
        format=args.format,
        limit=args.limit,
        options=load_options(args.options),
        config=config,
        output_path=Path(args.out),
        metadata_path=Path(args.metadata),
    )
    print(f"Import complete: {len(df)} rows, {len(df.columns)} columns written to {args.out}")


if __name__ == "__main__":
    main()
