"""
Executable File Handling
========================

Support for the executable-with-symbols format of a 16-bit,
word-addressed machine (PDP-11 style a.out).

This module provides:
- **ExecFile / parse_exec_file**: decode the symbol table
- **BinaryImage / load_binary**: load text and data segments
- **SymbolType**: symbol type codes and their names
- **Record types**: header and symbol record structures

Quick Start
-----------
    >>> from pdp11_symtab.aout import parse_exec_file, load_binary
    >>> symbols = parse_exec_file("hello.out")
    >>> image = load_binary("hello.out")
    >>> image.entry_point
    0
"""

# =============================================================================
# Public API Exports
# =============================================================================

from pdp11_symtab.aout.symtypes import (
    SymbolType,
    N_EXT,
    N_TYPE,
    N_STAB,
    describe_desc,
)

from pdp11_symtab.aout.records import (
    Magic,
    ExecHeader,
    RawSymbol,
    ExecSymbol,
    HEADER_SIZE,
    SYMBOL_RECORD_SIZE,
    magic_name,
    read_word,
)

from pdp11_symtab.aout.parser import (
    ExecFile,
    parse_exec,
    parse_exec_file,
    read_exec_header,
)

from pdp11_symtab.aout.loader import (
    BinaryImage,
    Segment,
    MemoryWriter,
    TEXT_START,
    load_binary,
)

__all__ = [
    # Type codes
    "SymbolType",
    "N_EXT",
    "N_TYPE",
    "N_STAB",
    "describe_desc",
    # Records
    "Magic",
    "ExecHeader",
    "RawSymbol",
    "ExecSymbol",
    "HEADER_SIZE",
    "SYMBOL_RECORD_SIZE",
    "magic_name",
    "read_word",
    # Parser
    "ExecFile",
    "parse_exec",
    "parse_exec_file",
    "read_exec_header",
    # Loader
    "BinaryImage",
    "Segment",
    "MemoryWriter",
    "TEXT_START",
    "load_binary",
]
