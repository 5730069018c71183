"""Tests for the script sources."""

from __future__ import annotations

import os

import pytest

from sprocforensic.parsers.block_splitter import BlockSplitter
from sprocforensic.sources import BaseSource, DumpFileSource, TextSource


class TestDumpFileSource:
    """Tests for streaming a dump file from disk."""

    def test_reads_utf16_dump(self, dump_path: str) -> None:
        with DumpFileSource(dump_path) as source:
            lines = list(source.iter_lines())

        assert lines[0].startswith("/****** Object:  Table")
        assert any("SEC_GetUserById" in line for line in lines)

    def test_name_is_file_basename(self, dump_path: str) -> None:
        assert DumpFileSource(dump_path).name == "DatabaseObjects_20250114.sql"

    def test_context_manager_opens_and_closes(self, dump_path: str) -> None:
        source = DumpFileSource(dump_path)
        assert not source.is_open

        with source:
            assert source.is_open
        assert not source.is_open

    def test_iterating_closed_source_raises(self, dump_path: str) -> None:
        with pytest.raises(RuntimeError):
            list(DumpFileSource(dump_path).iter_lines())

    def test_missing_file_raises(self, workdir: str) -> None:
        with pytest.raises(FileNotFoundError):
            DumpFileSource(os.path.join(workdir, "missing.sql")).open()

    def test_crlf_lines_split_into_batches(self, workdir: str) -> None:
        path = os.path.join(workdir, "crlf.sql")
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write("CREATE PROCEDURE dbo.A\r\nAS\r\nSELECT 1\r\nGO\r\nCREATE PROCEDURE dbo.B AS SELECT 2\r\nGO\r\n")

        with DumpFileSource(path, encoding="utf-8") as source:
            blocks = list(BlockSplitter().split_lines(source.iter_lines()))

        assert len(blocks) == 2
        assert blocks[1].start_line == 5


class TestTextSource:
    def test_iterates_lines_with_endings(self) -> None:
        with TextSource("a\nb\n") as source:
            assert list(source.iter_lines()) == ["a\n", "b\n"]

    def test_is_a_base_source(self) -> None:
        source = TextSource("")
        assert isinstance(source, BaseSource)
        assert source.name == "<text>"
