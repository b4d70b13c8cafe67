"""
Executable Parser Unit Tests
============================

Test Categories
---------------
1. Magic: recognized magic numbers and their names
2. Header: field decoding, derived offsets, truncation
3. Records: the 8-byte on-disk symbol record
4. Symbol types: type byte names and desc meanings
5. ExecFile: full symbol table parsing and its failure modes
"""

import logging
import struct

import pytest

from pdp11_symtab.aout import (
    ExecFile,
    ExecHeader,
    Magic,
    RawSymbol,
    SymbolType,
    describe_desc,
    magic_name,
    parse_exec,
    parse_exec_file,
    read_exec_header,
)
from pdp11_symtab.config import SymtabConfig
from pdp11_symtab.errors import BadMagicError, FormatError, SymbolIOError


# =============================================================================
# Magic Numbers
# =============================================================================

class TestMagic:
    """Tests for the Magic enumeration."""

    @pytest.mark.parametrize("magic", [0o407, 0o410, 0o411, 0o405, 0o430, 0o431])
    def test_recognized(self, magic):
        assert Magic.is_valid(magic)

    @pytest.mark.parametrize("magic", [0, 0o406, 0o412, 0xFFFF])
    def test_unrecognized(self, magic):
        assert not Magic.is_valid(magic)

    def test_names(self):
        assert magic_name(0o407) == "normal"
        assert magic_name(0o411) == "separated I&D"
        assert magic_name(0o123) == "unknown magic"


# =============================================================================
# Header
# =============================================================================

class TestExecHeader:
    """Tests for header decoding."""

    def test_fields(self):
        data = struct.pack("<8H", 0o410, 2, 3, 4, 8, 0o1000, 1, 0o7)
        header = ExecHeader.from_bytes(data)

        assert header.magic == 0o410
        assert header.text == 2
        assert header.data == 3
        assert header.bss == 4
        assert header.syms == 8
        assert header.entry == 0o1000
        assert header.zp == 1
        assert header.flags == 0o7
        assert header.has_valid_magic

    def test_to_bytes(self):
        data = struct.pack("<8H", 0o407, 1, 2, 3, 4, 5, 6, 7)
        assert ExecHeader.from_bytes(data).to_bytes() == data

    def test_offsets(self):
        header = ExecHeader(magic=0o407, text=2, data=3, bss=0, syms=8, entry=0, zp=1, flags=0)

        assert header.text_offset == 16 + 2
        assert header.data_offset == 16 + 2 + 4
        assert header.symbol_table_offset == 16 + 2 * (1 + 2 + 3 + 1 + 2 + 3)
        assert header.symbol_count == 2
        assert header.string_table_offset == header.symbol_table_offset + 16

    def test_symbol_count_ignores_partial_record(self):
        header = ExecHeader(magic=0o407, text=0, data=0, bss=0, syms=6, entry=0, zp=0, flags=0)
        assert header.symbol_count == 1
        assert header.string_table_offset == 16 + 8

    def test_truncated(self):
        data = struct.pack("<5H", 0o407, 0, 0, 0, 0)
        with pytest.raises(FormatError) as exc_info:
            ExecHeader.from_bytes(data)
        assert exc_info.value.offset == 10
        assert "field 5" in str(exc_info.value)

    def test_describe(self):
        header = ExecHeader(magic=0o407, text=2, data=0, bss=0, syms=8, entry=0, zp=0, flags=0)
        lines = header.describe()
        assert lines[0].startswith("Magic     : 0407")
        assert "normal" in lines[0]
        assert "2 records" in lines[4]


# =============================================================================
# Symbol Records
# =============================================================================

class TestRawSymbol:
    """Tests for the 8-byte symbol record."""

    def test_type_and_desc(self):
        data = struct.pack("<IHH", 12, 0x0C44, 0o144)
        raw = RawSymbol.from_bytes(data, 0)

        assert raw.strx == 12
        assert raw.type == 0x44
        assert raw.desc == 0x0C
        assert raw.value == 0o144

    def test_to_bytes(self):
        raw = RawSymbol(strx=3, type_word=0x0105, value=0xFFFF)
        assert RawSymbol.from_bytes(raw.to_bytes(), 0) == raw

    def test_truncated(self):
        data = struct.pack("<IH", 0, 0x05)
        with pytest.raises(FormatError):
            RawSymbol.from_bytes(data, 0)


# =============================================================================
# Symbol Types
# =============================================================================

class TestSymbolType:
    """Tests for type byte names."""

    @pytest.mark.parametrize("type_byte, name", [
        (0x00, "UNDEFINED"),
        (0x01, "EXTERNAL UNDEFINED"),
        (0x03, "EXTERNAL ABSOLUTE"),
        (0x04, "TEXT"),
        (0x05, "EXTERNAL TEXT"),
        (0x07, "EXTERNAL DATA"),
        (0x08, "BSS"),
        (0x1F, "FN"),
        (0x24, "FUN"),
        (0x44, "SLINE"),
        (0x64, "SO"),
        (0xFE, "UNKNOWN (0xFE)"),
    ])
    def test_get_name(self, type_byte, name):
        assert SymbolType.get_name(type_byte) == name

    def test_is_stab(self):
        assert SymbolType.is_stab(0x24)
        assert SymbolType.is_stab(0x80)
        assert not SymbolType.is_stab(0x05)

    def test_is_external(self):
        assert SymbolType.is_external(0x05)
        assert not SymbolType.is_external(0x04)
        assert not SymbolType.is_external(0x25)

    def test_describe_desc(self):
        assert describe_desc(0x44) == "source line number"
        assert describe_desc(0xC0) == "nesting level"
        assert describe_desc(0x04) == "not used"


# =============================================================================
# ExecFile Parser
# =============================================================================

class TestExecFile:
    """Tests for full symbol table parsing."""

    SYMBOLS = [
        ("main", 0x05, 0, 0o4),
        ("_buf", 0x07, 0, 0o20),
        ("", 0x44, 12, 0o6),
    ]

    def test_parse(self, exec_builder):
        image = exec_builder(symbols=self.SYMBOLS, text=[0] * 8, data=[0] * 4)
        exe = ExecFile.from_bytes(image)

        assert exe.header.symbol_count == 3
        assert [(s.name, s.type, s.desc, s.value) for s in exe.symbols] == self.SYMBOLS

    def test_string_table_order_does_not_matter(self, exec_builder):
        forward = parse_exec(exec_builder(symbols=self.SYMBOLS))
        backward = parse_exec(exec_builder(symbols=self.SYMBOLS, reverse_strings=True))
        assert forward == backward

    def test_segments_and_zero_page_are_skipped(self, exec_builder):
        image = exec_builder(symbols=self.SYMBOLS, zp=[1, 2], text=[3] * 5, data=[4] * 3)
        assert [s.name for s in parse_exec(image)] == ["main", "_buf", ""]

    def test_long_name(self, exec_builder):
        name = "very_long_symbol_" * 6
        symbols = parse_exec(exec_builder(symbols=[(name, 0x04, 0, 0)]))
        assert len(name) > 63
        assert symbols[0].name == name

    def test_name_bounded_by_config(self, exec_builder):
        image = exec_builder(symbols=[("abcdefgh", 0x04, 0, 0)])
        symbols = parse_exec(image, config=SymtabConfig(max_name_length=4))
        assert symbols[0].name == "abcd"

    def test_unterminated_name_stops_at_eof(self, exec_builder):
        image = exec_builder(symbols=[("start", 0x04, 0, 0)])[:-1]
        assert parse_exec(image)[0].name == "start"

    def test_string_offset_past_eof(self, exec_builder):
        image = bytearray(exec_builder(symbols=[("main", 0x05, 0, 4)]))
        struct.pack_into("<I", image, 16, 1000)
        symbols = parse_exec(bytes(image))
        assert symbols[0].name == ""
        assert symbols[0].value == 4

    def test_empty_symbol_table(self, exec_builder):
        assert parse_exec(exec_builder(text=[1, 2])) == []

    def test_truncated_record(self, exec_builder):
        image = exec_builder(symbols=self.SYMBOLS)
        truncated = image[:16 + 8 + 5]
        with pytest.raises(FormatError):
            parse_exec(truncated)

    def test_truncated_header(self):
        with pytest.raises(FormatError):
            parse_exec(b"\x07\x01\x00")

    def test_bad_magic_strict(self, exec_builder):
        image = exec_builder(symbols=self.SYMBOLS, magic=0o123)
        with pytest.raises(BadMagicError) as exc_info:
            parse_exec(image)
        assert exc_info.value.magic == 0o123
        assert isinstance(exc_info.value, FormatError)

    def test_bad_magic_lax(self, exec_builder, caplog):
        image = exec_builder(symbols=self.SYMBOLS, magic=0o123)
        with caplog.at_level(logging.WARNING):
            symbols = parse_exec(image, config=SymtabConfig(strict_magic=False))
        assert len(symbols) == 3
        assert "unknown magic" in caplog.text

    def test_observer(self, exec_builder):
        seen = []
        parse_exec(exec_builder(symbols=self.SYMBOLS), on_record=seen.append)
        assert [s.name for s in seen] == ["main", "_buf", ""]

    def test_observer_not_called_past_truncation(self, exec_builder):
        seen = []
        image = exec_builder(symbols=self.SYMBOLS)[:16 + 8 + 5]
        with pytest.raises(FormatError):
            parse_exec(image, on_record=seen.append)
        assert len(seen) == 1

    def test_symbol_str(self, exec_builder):
        symbol = parse_exec(exec_builder(symbols=[("main", 0x05, 0, 4)]))[0]
        assert "main" in str(symbol)
        assert "EXTERNAL TEXT" in str(symbol)


class TestFileFunctions:
    """Tests for the file-level convenience functions."""

    def test_parse_exec_file(self, write_exec):
        path = write_exec(symbols=[("main", 0x05, 0, 4)])
        symbols = parse_exec_file(path)
        assert symbols[0].name == "main"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SymbolIOError) as exc_info:
            parse_exec_file(tmp_path / "missing.out")
        assert exc_info.value.path == tmp_path / "missing.out"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_read_exec_header_ignores_magic(self, write_exec):
        path = write_exec(magic=0o123, text=[1])
        header = read_exec_header(path)
        assert header.magic == 0o123
        assert not header.has_valid_magic

    def test_error_message_names_file(self, write_exec):
        path = write_exec(magic=0o123)
        with pytest.raises(BadMagicError) as exc_info:
            parse_exec_file(path)
        assert str(path) in str(exc_info.value)
        assert "0123" in str(exc_info.value)
