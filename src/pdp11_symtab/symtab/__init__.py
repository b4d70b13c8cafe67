"""
Symbol Table
============

The merge and query engine that combines executable symbols, debug
directives and address maps:

- **SymbolTable**: merge_insert, load_*, lookups and stepping queries
- **SymbolEntry / SymbolKind**: the entry schema
- **kind_for_stab / kind_for_exec_symbol**: record classification
"""

from pdp11_symtab.symtab.entries import (
    ADDRESS_MASK,
    SymbolEntry,
    SymbolKind,
    kind_for_stab,
    kind_for_exec_symbol,
)

from pdp11_symtab.symtab.table import (
    MergeItem,
    SymbolTable,
)

__all__ = [
    "ADDRESS_MASK",
    "SymbolEntry",
    "SymbolKind",
    "kind_for_stab",
    "kind_for_exec_symbol",
    "MergeItem",
    "SymbolTable",
]
