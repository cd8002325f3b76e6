from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
import requests

from gridimport import retrieval
from gridimport.common import read_json
from gridimport.config import ImportConfig
from gridimport.errors import InvalidArgument, RetrievalError
from gridimport.ingest import run_import, stage_local_file
from gridimport.retrieval import download_file_record, is_url


class FakeResponse:
    def __init__(self, body: bytes, status_code: int = 200, content_type: str = "text/csv; charset=ISO-8859-1"):
        self.body = body
        self.status_code = status_code
        self.headers = {"Content-Type": content_type}
        self.encoding = "ISO-8859-1" if "charset=" in content_type else None

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


def make_config(tmp_path: Path) -> ImportConfig:
    return ImportConfig(raw_data_dir=tmp_path / "raw", row_limit=-1, default_encoding="utf-8", download_timeout=5)


class TestRetrieval:
    def test_is_url(self):
        assert is_url("https://example.org/a.csv")
        assert not is_url("data/a.csv")
        assert not is_url("file:///tmp/a.csv")

    def test_download(self, tmp_path: Path, monkeypatch):
        calls = []

        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            return FakeResponse("name\ncafé\n".encode("latin-1"))

        monkeypatch.setattr(retrieval.requests, "get", fake_get)
        record = download_file_record("https://example.org/files/My%20Data.csv", tmp_path, timeout=3)

        assert record.location == "My_Data.csv"
        assert record.file_source == "https://example.org/files/My%20Data.csv"
        assert record.declared_encoding == "ISO-8859-1"
        assert record.size == (tmp_path / "My_Data.csv").stat().st_size
        assert calls[0][1]["timeout"] == 3
        assert calls[0][1]["stream"] is True

    def test_download_does_not_overwrite(self, tmp_path: Path, monkeypatch):
        (tmp_path / "a.csv").write_text("old", encoding="utf-8")
        monkeypatch.setattr(retrieval.requests, "get", lambda url, **kw: FakeResponse(b"new"))
        record = download_file_record("https://example.org/a.csv", tmp_path)
        assert record.location == "a-1.csv"
        assert (tmp_path / "a.csv").read_text(encoding="utf-8") == "old"

    def test_http_error(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(retrieval.requests, "get", lambda url, **kw: FakeResponse(b"", status_code=404))
        with pytest.raises(RetrievalError) as exc_info:
            download_file_record("https://example.org/a.csv", tmp_path)
        assert exc_info.value.status_code == 404

    def test_transport_error(self, tmp_path: Path, monkeypatch):
        def fake_get(url, **kwargs):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(retrieval.requests, "get", fake_get)
        with pytest.raises(RetrievalError, match="refused"):
            download_file_record("https://example.org/a.csv", tmp_path)


class TestRunImport:
    def test_local_files(self, tmp_path: Path):
        a = tmp_path / "a.csv"
        b = tmp_path / "b.csv"
        a.write_text("id,v\n1,x\n2,y\n", encoding="utf-8")
        b.write_text("id,w\n3,z\n", encoding="utf-8")
        out = tmp_path / "out" / "import.parquet"
        meta = tmp_path / "out" / "meta.json"

        df = run_import(
            [str(a), str(b)],
            config=make_config(tmp_path),
            output_path=out,
            metadata_path=meta,
            project_name="demo",
        )

        assert list(df.columns) == ["File", "id", "v", "w"]
        assert df["id"].tolist() == ["1", "2", "3"]
        assert pd.read_parquet(out)["id"].tolist() == ["1", "2", "3"]
        payload = read_json(meta)
        assert payload["name"] == "demo"
        assert [entry["fileSource"] for entry in payload["importOptionMetadata"]] == [str(a), str(b)]
        assert payload["importOptionMetadata"][0]["includeFileSources"] is True

    def test_user_options_override_defaults(self, tmp_path: Path):
        a = tmp_path / "a.csv"
        a.write_text("1;2\n3;4\n", encoding="utf-8")
        df = run_import(
            [str(a)],
            options={"separator": ";", "headerLines": 0},
            limit=1,
            config=make_config(tmp_path),
        )
        assert df.to_dict("records") == [{"Column 1": "1", "Column 2": "2"}]

    def test_url_source(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(
            retrieval.requests, "get",
            lambda url, **kw: FakeResponse('[{"a": 1}, {"a": 2}]'.encode("utf-8"), content_type="application/json"),
        )
        df = run_import(["https://example.org/data.json"], config=make_config(tmp_path))
        assert df["a"].tolist() == [1, 2]

    def test_unknown_format(self, tmp_path: Path):
        a = tmp_path / "a.xyz"
        a.write_text("x", encoding="utf-8")
        with pytest.raises(InvalidArgument):
            run_import([str(a)], config=make_config(tmp_path))
        with pytest.raises(InvalidArgument):
            run_import([str(a)], format="text/xml", config=make_config(tmp_path))

    def test_no_sources(self, tmp_path: Path):
        with pytest.raises(InvalidArgument):
            run_import([], config=make_config(tmp_path))

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            run_import([str(tmp_path / "nope.csv")], config=make_config(tmp_path))


class TestStageLocalFile:
    def test_file_inside_raw_dir_is_not_copied(self, tmp_path: Path):
        raw = tmp_path / "raw"
        raw.mkdir()
        (raw / "a.csv").write_text("x", encoding="utf-8")
        record = stage_local_file(raw / "a.csv", raw)
        assert record.location == "a.csv"
        assert list(raw.iterdir()) == [raw / "a.csv"]

    def test_name_clash_gets_suffix(self, tmp_path: Path):
        raw = tmp_path / "raw"
        raw.mkdir()
        (raw / "a.csv").write_text("old", encoding="utf-8")
        src = tmp_path / "a.csv"
        src.write_text("new", encoding="utf-8")
        record = stage_local_file(src, raw)
        assert record.location == "a-1.csv"
        assert (raw / "a-1.csv").read_text(encoding="utf-8") == "new"
