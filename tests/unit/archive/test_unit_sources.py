# tests/unit/archive/test_unit_sources.py — v1
"""Tests for archive/sources.py — zip and directory inputs."""

from __future__ import annotations

import zipfile

import pytest

from tabgraph.archive.packager import ArchiveError
from tabgraph.archive.sources import (
    DirectoryArchiveSource,
    ZipArchiveSource,
    open_archive_source,
)


class TestOpenArchiveSource:
    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            open_archive_source(tmp_path / "nope.zip")

    def test_directory(self, tmp_path):
        assert isinstance(open_archive_source(tmp_path), DirectoryArchiveSource)

    def test_not_a_zip(self, tmp_path):
        bogus = tmp_path / "bogus.zip"
        bogus.write_text("plain text", encoding="utf-8")
        with pytest.raises(ArchiveError):
            open_archive_source(bogus)


class TestZipArchiveSource:
    def test_entries_and_text(self, tmp_path):
        path = tmp_path / "a.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("node_A.csv", "\ufeffid;name\n1;Zoé\n".encode("utf-8"))
            zf.writestr("sub/", "")

        with ZipArchiveSource(path) as source:
            assert source.kind == "archive"
            assert source.entries() == ["node_A.csv"]
            with source.open_text("node_A.csv") as stream:
                assert stream.read() == "id;name\n1;Zoé\n"


class TestDirectoryArchiveSource:
    def test_regular_files_sorted(self, tmp_path, write_files):
        write_files(tmp_path, {"b.csv": "", "a.csv": ""})
        (tmp_path / "nested").mkdir()

        source = DirectoryArchiveSource(tmp_path)
        assert source.kind == "directory"
        assert source.entries() == ["a.csv", "b.csv"]

    def test_byte_order_mark_dropped(self, tmp_path):
        (tmp_path / "node_A.csv").write_bytes("\ufeffid\n1\n".encode("utf-8"))
        with DirectoryArchiveSource(tmp_path).open_text("node_A.csv") as stream:
            assert stream.readline() == "id\n"
