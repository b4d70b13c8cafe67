"""
Executable Record Definitions
=============================

Data structures for the executable-with-symbols (a.out style) format of
a 16-bit word-addressed machine.

File Layout
-----------
All multi-byte fields are little-endian. Sizes in the header are in
16-bit words.

    +------------------------+  offset 0
    | Header (8 words)       |  magic, text, data, bss, syms, entry, zp, flags
    +------------------------+  16
    | Zero page              |  zp words
    | Text segment           |  text words
    | Data segment           |  data words
    | Zero-page relocations  |  zp words
    | Text relocations       |  text words
    | Data relocations       |  data words
    +------------------------+  16 + 2*(zp + text + data + zp + text + data)
    | Symbol table           |  syms words = (syms*2)/8 records
    +------------------------+
    | String table           |  NUL-terminated names
    +------------------------+

Symbol Record (8 bytes on disk)
-------------------------------
    Bytes 0-3: string table offset (u32)
    Bytes 4-5: type word (low byte = type/binding, high byte = desc)
    Bytes 6-7: value (u16)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union
from pathlib import Path
import struct

from pdp11_symtab.errors import FormatError
from pdp11_symtab.aout.symtypes import SymbolType


HEADER_WORDS = 8
HEADER_SIZE = HEADER_WORDS * 2
SYMBOL_RECORD_SIZE = 8


# =============================================================================
# Enumeration Types
# =============================================================================

class Magic(IntEnum):
    """Recognized executable magic numbers (conventionally written in octal)."""
    NORMAL = 0o407              # Normal executable
    READ_ONLY_TEXT = 0o410      # Read-only text
    SEPARATE_ID = 0o411         # Separated I&D
    READ_ONLY_SHARED = 0o405    # Read-only shareable
    OVERLAY = 0o430             # Auto-overlay (nonseparate)
    OVERLAY_SEPARATE = 0o431    # Auto-overlay (separate)

    @classmethod
    def is_valid(cls, magic: int) -> bool:
        """Check if a magic word is one of the recognized values."""
        return any(magic == member for member in cls)

    def get_description(self) -> str:
        """Get a human-readable description of the magic number."""
        descriptions = {
            Magic.NORMAL: "normal",
            Magic.READ_ONLY_TEXT: "read-only text",
            Magic.SEPARATE_ID: "separated I&D",
            Magic.READ_ONLY_SHARED: "read-only shareable",
            Magic.OVERLAY: "auto-overlay (nonseparate)",
            Magic.OVERLAY_SEPARATE: "auto-overlay (separate)",
        }
        return descriptions[self]


def magic_name(magic: int) -> str:
    """Describe a magic word, including unrecognized ones."""
    if Magic.is_valid(magic):
        return Magic(magic).get_description()
    return "unknown magic"


def read_word(
    data: bytes,
    offset: int,
    path: Optional[Union[str, Path]] = None,
) -> int:
    """
    Read one little-endian 16-bit word, low byte first.

    Raises:
        FormatError: If fewer than two bytes remain at offset
    """
    if offset < 0 or offset + 2 > len(data):
        raise FormatError("unexpected end of file reading word", path=path, offset=offset)
    low = data[offset]
    high = data[offset + 1]
    return (high << 8) | low


# =============================================================================
# Header
# =============================================================================

@dataclass(frozen=True)
class ExecHeader:
    """
    The 16-byte executable header.

    All sizes are in 16-bit words. `syms` is also in words even though it
    describes bytes of symbol data: the symbol table occupies syms*2 bytes.

    Attributes:
        magic: Magic number (see Magic)
        text: Text segment size in words
        data: Data segment size in words
        bss: BSS size in words
        syms: Symbol table size in words
        entry: Entry point address
        zp: Zero page size in words
        flags: Relocation/symbol flags
    """
    magic: int
    text: int
    data: int
    bss: int
    syms: int
    entry: int
    zp: int
    flags: int

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        path: Optional[Union[str, Path]] = None,
    ) -> "ExecHeader":
        """
        Parse the header from the start of a file image.

        Each of the eight words is read individually; running out of data
        on any of them is fatal.

        Raises:
            FormatError: If the header is truncated
        """
        words = []
        for index in range(HEADER_WORDS):
            try:
                words.append(read_word(data, index * 2, path))
            except FormatError:
                raise FormatError(
                    f"truncated header: cannot read field {index}",
                    path=path,
                    offset=index * 2,
                ) from None
        return cls(*words)

    def to_bytes(self) -> bytes:
        """Serialize the header to its 16-byte on-disk form."""
        return struct.pack(
            "<8H",
            self.magic, self.text, self.data, self.bss,
            self.syms, self.entry, self.zp, self.flags,
        )

    @property
    def has_valid_magic(self) -> bool:
        return Magic.is_valid(self.magic)

    @property
    def text_offset(self) -> int:
        """Byte offset of the text segment (after the zero page)."""
        return HEADER_SIZE + 2 * self.zp

    @property
    def data_offset(self) -> int:
        """Byte offset of the data segment."""
        return self.text_offset + 2 * self.text

    @property
    def symbol_table_offset(self) -> int:
        """Byte offset of the first symbol record."""
        return HEADER_SIZE + 2 * (
            self.zp + self.text + self.data + self.zp + self.text + self.data
        )

    @property
    def symbol_count(self) -> int:
        """Number of complete 8-byte symbol records."""
        return (self.syms * 2) // SYMBOL_RECORD_SIZE

    @property
    def string_table_offset(self) -> int:
        """Byte offset of the string table, right after the last symbol record."""
        return self.symbol_table_offset + self.symbol_count * SYMBOL_RECORD_SIZE

    def describe(self) -> list[str]:
        """Header fields as printable lines."""
        return [
            f"Magic     : 0{self.magic:o} (0x{self.magic:04X}, {magic_name(self.magic)})",
            f"Text size : {self.text} words",
            f"Data size : {self.data} words",
            f"BSS size  : {self.bss} words",
            f"Symbols   : {self.syms} words ({self.symbol_count} records)",
            f"Entry     : 0{self.entry:06o}",
            f"Zero page : {self.zp} words",
            f"Flags     : 0{self.flags:06o}",
        ]


# =============================================================================
# Symbol Records
# =============================================================================

@dataclass(frozen=True)
class RawSymbol:
    """
    One symbol record exactly as stored on disk.

    Attributes:
        strx: Offset of the name in the string table
        type_word: Packed type (low byte) and desc (high byte)
        value: Symbol value
    """
    strx: int
    type_word: int
    value: int

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        offset: int,
        path: Optional[Union[str, Path]] = None,
    ) -> "RawSymbol":
        """
        Parse one 8-byte record at offset.

        Raises:
            FormatError: If the record is truncated
        """
        if offset + SYMBOL_RECORD_SIZE > len(data):
            raise FormatError(
                f"truncated symbol record ({len(data) - offset} of "
                f"{SYMBOL_RECORD_SIZE} bytes)",
                path=path,
                offset=offset,
            )
        strx, type_word, value = struct.unpack_from("<IHH", data, offset)
        return cls(strx=strx, type_word=type_word, value=value)

    def to_bytes(self) -> bytes:
        return struct.pack("<IHH", self.strx, self.type_word, self.value)

    @property
    def type(self) -> int:
        return self.type_word & 0xFF

    @property
    def desc(self) -> int:
        return (self.type_word >> 8) & 0xFF


@dataclass(frozen=True)
class ExecSymbol:
    """
    A normalized symbol: name resolved, type word split in two.

    Attributes:
        name: Symbol name from the string table ("" if unreadable)
        type: Type/binding byte (see SymbolType)
        desc: Description byte (line number, register, nesting level...)
        value: Symbol value (address)
    """
    name: str
    type: int
    desc: int
    value: int

    @property
    def type_name(self) -> str:
        return SymbolType.get_name(self.type)

    def __str__(self) -> str:
        return (
            f"{self.name or '(null)':<32} {self.type_name:<20} "
            f"0x{self.type:02x} 0x{self.desc:02x} {self.value:06o}"
        )
