"""
Executable Symbol Table Parser
==============================

Reads the symbol table of an executable-with-symbols file and returns
normalized symbol records.

ExecFile
--------
The ExecFile class reads a whole file image, validates the header and
decodes every symbol record, resolving each name through the string
table. The header is trusted for all later offset arithmetic, so a bad
header, bad magic or truncated record aborts the parse.

Usage Examples
--------------
Reading symbols:
    >>> from pdp11_symtab.aout import parse_exec_file
    >>> for sym in parse_exec_file("hello.out"):
    ...     print(f"{sym.name} = {sym.value:06o}")

Observing records as they are decoded:
    >>> exe = ExecFile.from_file("hello.out", on_record=print)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union
import logging

from pdp11_symtab.config import SymtabConfig, get_default_config
from pdp11_symtab.errors import BadMagicError, SymbolIOError
from pdp11_symtab.aout.records import (
    ExecHeader,
    ExecSymbol,
    RawSymbol,
    SYMBOL_RECORD_SIZE,
    magic_name,
)

# Logger for this module
logger = logging.getLogger(__name__)

RecordObserver = Callable[[ExecSymbol], None]


def read_file_bytes(path: Union[str, Path]) -> bytes:
    """
    Read a whole binary file.

    Raises:
        SymbolIOError: If the file cannot be opened or read
    """
    path = Path(path)
    try:
        return path.read_bytes()
    except OSError as e:
        raise SymbolIOError(path, e.strerror or str(e)) from e


def check_magic(
    header: ExecHeader,
    config: SymtabConfig,
    path: Optional[Union[str, Path]] = None,
) -> None:
    """
    Reject (or, in lax mode, report) an unrecognized magic number.

    Raises:
        BadMagicError: If the magic is unknown and config.strict_magic is set
    """
    if header.has_valid_magic:
        return
    if config.strict_magic:
        raise BadMagicError(header.magic, path=path)
    logger.warning(
        f"{path or '<bytes>'}: unknown magic 0{header.magic:o}, "
        f"trusting header anyway"
    )


# =============================================================================
# Executable File Parser
# =============================================================================

@dataclass
class ExecFile:
    """
    Parser for the symbol table of an executable file.

    Attributes:
        data: The raw file bytes
        path: Source path, used in messages
        config: Parser settings
        on_record: Optional observer called once per decoded symbol
        header: The parsed header
        symbols: Normalized symbols in on-disk order
    """
    # Raw file data (not exposed in repr)
    data: bytes = field(repr=False)

    path: Optional[Path] = None
    config: SymtabConfig = field(default_factory=get_default_config, repr=False)
    on_record: Optional[RecordObserver] = field(default=None, repr=False)

    header: Optional[ExecHeader] = field(default=None, init=False)
    symbols: list[ExecSymbol] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        """Parse the file image after initialization."""
        self._parse()

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        config: Optional[SymtabConfig] = None,
        on_record: Optional[RecordObserver] = None,
    ) -> "ExecFile":
        """
        Create an ExecFile from a file path.

        Raises:
            SymbolIOError: If the file cannot be read
            FormatError: If the header or a symbol record is malformed
        """
        path = Path(path)
        data = read_file_bytes(path)
        return cls(
            data=data,
            path=path,
            config=config or get_default_config(),
            on_record=on_record,
        )

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        config: Optional[SymtabConfig] = None,
        on_record: Optional[RecordObserver] = None,
    ) -> "ExecFile":
        """Create an ExecFile from raw bytes."""
        return cls(data=data, config=config or get_default_config(), on_record=on_record)

    def _parse(self) -> None:
        self.header = ExecHeader.from_bytes(self.data, self.path)
        check_magic(self.header, self.config, self.path)

        logger.debug(
            f"{self.path or '<bytes>'}: magic 0{self.header.magic:o} "
            f"({magic_name(self.header.magic)}), text={self.header.text} "
            f"data={self.header.data} bss={self.header.bss} syms={self.header.syms}"
        )

        if (self.header.syms * 2) % SYMBOL_RECORD_SIZE:
            logger.warning(
                f"{self.path or '<bytes>'}: symbol table size {self.header.syms * 2} "
                f"bytes is not a multiple of {SYMBOL_RECORD_SIZE}; "
                f"ignoring trailing bytes"
            )

        self._parse_symbols()

    def _parse_symbols(self) -> None:
        """
        Decode every symbol record.

        The symbol list is only published once all records decoded, so a
        truncated record leaves no partial result behind.
        """
        offset = self.header.symbol_table_offset
        symbols = []

        for _ in range(self.header.symbol_count):
            raw = RawSymbol.from_bytes(self.data, offset, self.path)
            offset += SYMBOL_RECORD_SIZE

            symbol = ExecSymbol(
                name=self._read_name(raw.strx),
                type=raw.type,
                desc=raw.desc,
                value=raw.value,
            )
            symbols.append(symbol)
            if self.on_record is not None:
                self.on_record(symbol)

        self.symbols = symbols
        logger.debug(f"{self.path or '<bytes>'}: {len(symbols)} symbols")

    def _read_name(self, strx: int) -> str:
        """
        Read a NUL-terminated name from the string table.

        The read stops at the terminator, at end of file or at
        config.max_name_length bytes, whichever comes first. An offset
        past end of file yields an empty name.
        """
        start = self.header.string_table_offset + strx
        if start >= len(self.data):
            logger.debug(f"string offset {strx} is past end of file; using empty name")
            return ""

        limit = min(len(self.data), start + self.config.max_name_length)
        end = self.data.find(b"\x00", start, limit)
        if end < 0:
            end = limit
        return self.data[start:end].decode("latin-1")


# =============================================================================
# Convenience Functions
# =============================================================================

def read_exec_header(path: Union[str, Path]) -> ExecHeader:
    """
    Read only the header of an executable file.

    The magic number is not checked; callers inspecting unknown files
    want to see it.
    """
    return ExecHeader.from_bytes(read_file_bytes(path), path)


def parse_exec(
    data: bytes,
    config: Optional[SymtabConfig] = None,
    on_record: Optional[RecordObserver] = None,
) -> list[ExecSymbol]:
    """
    Parse the symbols of an executable image held in memory.

    Raises:
        FormatError: If the header or a symbol record is malformed
    """
    return ExecFile.from_bytes(data, config=config, on_record=on_record).symbols


def parse_exec_file(
    path: Union[str, Path],
    config: Optional[SymtabConfig] = None,
    on_record: Optional[RecordObserver] = None,
) -> list[ExecSymbol]:
    """
    Parse the symbols of an executable file on disk.

    Raises:
        SymbolIOError: If the file cannot be read
        FormatError: If the header or a symbol record is malformed
    """
    return ExecFile.from_file(path, config=config, on_record=on_record).symbols
