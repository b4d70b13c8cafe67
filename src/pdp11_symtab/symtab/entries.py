"""
Symbol Table Entries
====================

The entry schema shared by every symbol source, and the rules that
classify parser records into entry kinds.

Kind Mapping
------------
Debug directives and stab-typed executable symbols:
    N_FUN            -> FUNCTION
    N_GSYM, N_LSYM   -> VARIABLE (N_LSYM with a 't'/'T' descriptor -> TYPE)
    N_SO             -> FILE
    N_SLINE          -> LINE
    anything else    -> UNKNOWN

Plain executable symbols (type byte masked with N_TYPE):
    N_TEXT           -> FUNCTION
    N_DATA, N_BSS    -> VARIABLE
    anything else    -> UNKNOWN

Address map lines are always LINE entries.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from pdp11_symtab.aout.symtypes import SymbolType, N_TYPE

ADDRESS_MASK = 0xFFFF

# Descriptors that turn an N_LSYM stab into a type definition
_TYPE_DESCRIPTORS = ("t", "T")


class SymbolKind(IntEnum):
    """Classification of a symbol table entry."""
    UNKNOWN = 0
    FUNCTION = 1
    VARIABLE = 2
    FILE = 3        # Region marker or source file record
    LINE = 4        # Address-to-source-line mapping
    TYPE = 5


@dataclass
class SymbolEntry:
    """
    One symbol table entry.

    Attributes:
        filename: Source file, if known
        name: Symbol name, if any
        line: Source line number (0 = none)
        address: 16-bit word address
        kind: Entry classification
    """
    filename: Optional[str] = None
    name: Optional[str] = None
    line: int = 0
    address: int = 0
    kind: SymbolKind = SymbolKind.UNKNOWN

    @property
    def is_line(self) -> bool:
        return self.kind == SymbolKind.LINE

    def __str__(self) -> str:
        return (
            f"{self.kind.name:<8} {self.address:06o} "
            f"{self.filename if self.filename is not None else '(none)'}:{self.line} "
            f"{self.name if self.name is not None else '(none)'}"
        )


def kind_for_stab(type_code: int, descriptor: Optional[str] = None) -> SymbolKind:
    """Classify a debug stab by its type code (and descriptor character)."""
    if type_code == SymbolType.N_FUN:
        return SymbolKind.FUNCTION
    if type_code == SymbolType.N_LSYM and descriptor in _TYPE_DESCRIPTORS:
        return SymbolKind.TYPE
    if type_code in (SymbolType.N_GSYM, SymbolType.N_LSYM):
        return SymbolKind.VARIABLE
    if type_code == SymbolType.N_SO:
        return SymbolKind.FILE
    if type_code == SymbolType.N_SLINE:
        return SymbolKind.LINE
    return SymbolKind.UNKNOWN


def kind_for_exec_symbol(type_byte: int) -> SymbolKind:
    """Classify an executable symbol by its type byte."""
    if SymbolType.is_stab(type_byte):
        return kind_for_stab(type_byte)

    segment = type_byte & N_TYPE
    if segment == SymbolType.N_TEXT:
        return SymbolKind.FUNCTION
    if segment in (SymbolType.N_DATA, SymbolType.N_BSS):
        return SymbolKind.VARIABLE
    return SymbolKind.UNKNOWN
