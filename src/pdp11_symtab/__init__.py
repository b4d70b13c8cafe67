"""
pdp11-symtab - Unified Symbol Tables for a 16-bit Debugging Toolchain
=====================================================================

This package builds one queryable symbol table out of the three debug
information sources of a PDP-11 style toolchain:

- **aout**: executable-with-symbols files (header, segments, symbol and
  string tables) and the segment loader
- **debuginfo**: `.stabs`/`.stabn` debug directives and
  `file : line -> address` map files
- **symtab**: the merged table with address/source-line resolution and
  single-step "next line" queries

Quick Start
-----------
Merge all three sources and query them:
    >>> from pdp11_symtab import SymbolTable
    >>> table = SymbolTable()
    >>> table.load_exec("hello.out")
    True
    >>> table.load_directives("hello.s")
    True
    >>> table.load_address_map("hello.map")
    True
    >>> table.get_file(0o144), table.get_line(0o144)
    ('hello.c', 10)

Or use the command-line tool:
    $ pdsym symbols hello.out hello.s hello.map
    $ pdsym lookup hello.s hello.map -a 0x64
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from pdp11_symtab.errors import (
    SymtabError,
    SymbolIOError,
    FormatError,
    BadMagicError,
    AllocationError,
    RecordSkipped,
    StaleIndexError,
)

from pdp11_symtab.config import (
    SymtabConfig,
    get_default_config,
    set_default_config,
)

from pdp11_symtab.aout import (
    Magic,
    ExecHeader,
    ExecSymbol,
    ExecFile,
    SymbolType,
    BinaryImage,
    Segment,
    parse_exec,
    parse_exec_file,
    read_exec_header,
    load_binary,
)

from pdp11_symtab.debuginfo import (
    DirectiveRecord,
    MapRecord,
    parse_directives,
    parse_directive_file,
    parse_address_map,
    parse_address_map_file,
)

from pdp11_symtab.symtab import (
    SymbolEntry,
    SymbolKind,
    SymbolTable,
)

__all__ = [
    "__version__",
    # Errors
    "SymtabError",
    "SymbolIOError",
    "FormatError",
    "BadMagicError",
    "AllocationError",
    "RecordSkipped",
    "StaleIndexError",
    # Configuration
    "SymtabConfig",
    "get_default_config",
    "set_default_config",
    # Executables
    "Magic",
    "ExecHeader",
    "ExecSymbol",
    "ExecFile",
    "SymbolType",
    "BinaryImage",
    "Segment",
    "parse_exec",
    "parse_exec_file",
    "read_exec_header",
    "load_binary",
    # Text debug information
    "DirectiveRecord",
    "MapRecord",
    "parse_directives",
    "parse_directive_file",
    "parse_address_map",
    "parse_address_map_file",
    # Symbol table
    "SymbolEntry",
    "SymbolKind",
    "SymbolTable",
]
