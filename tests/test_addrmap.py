"""
Address Map Parser Unit Tests
=============================

Tests for `file : line -> address` map parsing and its line tolerance.
"""

import pytest

from pdp11_symtab.debuginfo import (
    MapRecord,
    parse_address_map,
    parse_address_map_file,
    parse_map_line,
)
from pdp11_symtab.errors import RecordSkipped, SymbolIOError


class TestParseMapLine:
    """Tests for single map lines."""

    def test_basic(self):
        assert parse_map_line("foo.c : 10 -> 0x64") == MapRecord("foo.c", 10, 100)

    def test_without_prefix(self):
        assert parse_map_line("foo.c:20->C8").address == 200

    def test_lowercase_hex(self):
        assert parse_map_line("foo.c : 1 -> 0xff").address == 255

    def test_extra_whitespace(self):
        record = parse_map_line("\t foo.c   :   30   ->   12c  \n")
        assert record == MapRecord("foo.c", 30, 300)

    def test_address_masked(self):
        assert parse_map_line("foo.c : 1 -> 1FFFF").address == 0xFFFF

    @pytest.mark.parametrize("line", ["", "   ", "\n", "# comment", "  # indented comment"])
    def test_ignored(self, line):
        assert parse_map_line(line) is None

    @pytest.mark.parametrize("line", [
        "foo.c  100",
        "foo.c 10 -> 0x64",
        "foo.c : 10 0x64",
        "foo.c : ten -> 0x64",
        "foo.c : 10 -> zz",
        "foo.c : 10 -> ",
    ])
    def test_rejected(self, line):
        with pytest.raises(RecordSkipped):
            parse_map_line(line, 4)


class TestParseAddressMap:
    """Tests for whole map streams."""

    def test_tolerance(self):
        records = parse_address_map([
            "# comment",
            "",
            "foo.c  100",
            "foo.c : 10 -> 0x64",
            "foo.c : 20 -> 0xC8",
        ])
        assert records == [MapRecord("foo.c", 10, 0x64), MapRecord("foo.c", 20, 0xC8)]

    def test_observer(self, hello_map):
        seen = []
        records = parse_address_map(hello_map.splitlines(), on_record=seen.append)
        assert seen == records
        assert len(records) == 3

    def test_file(self, hello_sources):
        _, address_map = hello_sources
        records = parse_address_map_file(address_map)
        assert [r.address for r in records] == [100, 200, 300]
        assert all(r.filename == "hello.c" for r in records)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SymbolIOError):
            parse_address_map_file(tmp_path / "missing.map")
