"""
pdp11-symtab Error Hierarchy
============================

This module defines the exception hierarchy for the whole package. All
exceptions inherit from SymtabError, so callers can catch every
package-level failure with a single except clause.

Exception Hierarchy
-------------------
SymtabError (base)
├── SymbolIOError - a file could not be opened or read
├── FormatError - truncated or malformed fixed-layout binary data
│   └── BadMagicError - executable header carries an unknown magic number
├── AllocationError - a merge could not complete
├── RecordSkipped - one malformed text line (dropped, never propagated)
└── StaleIndexError - sorted lookup requested without a current index

Policy
------
Fixed-layout binary data is all-or-nothing: a bad header or a truncated
symbol record aborts the whole executable parse, because every later
offset is computed from the header. Text formats are line-tolerant: a
malformed line raises RecordSkipped inside the line parser, the file
parser logs it and moves on.
"""

from typing import Optional, Union
from pathlib import Path


# =============================================================================
# Base Exception Class
# =============================================================================

class SymtabError(Exception):
    """
    Base exception for all pdp11-symtab errors.

        try:
            records = parse_exec_file("hello.out")
        except SymtabError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# I/O and Format Exceptions
# =============================================================================

class SymbolIOError(SymtabError):
    """
    A symbol source could not be opened or read.

    The underlying OSError is chained as __cause__.

    Attributes:
        path: The file that failed
        reason: Short description of the failure
    """

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: cannot read file: {reason}")


class FormatError(SymtabError):
    """
    Malformed fixed-layout data in an executable file.

    Raised for a truncated header, a truncated symbol record or a
    truncated segment. The byte offset where reading stopped is kept so
    the message can point at it.

    Attributes:
        message: The error description
        path: Source file, when known
        offset: Byte offset of the failing read, when known
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        offset: Optional[int] = None,
    ):
        self.message = message
        self.path = Path(path) if path is not None else None
        self.offset = offset
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format as 'path: offset N: message'."""
        parts = []
        if self.path is not None:
            parts.append(str(self.path))
        if self.offset is not None:
            parts.append(f"offset {self.offset}")
        parts.append(self.message)
        return ": ".join(parts)


class BadMagicError(FormatError):
    """
    The executable header carries an unrecognized magic number.

    Attributes:
        magic: The magic word that was read
    """

    def __init__(self, magic: int, path: Optional[Union[str, Path]] = None):
        self.magic = magic
        super().__init__(
            f"invalid executable magic number 0{magic:o} (0x{magic:04X})",
            path=path,
            offset=0,
        )


# =============================================================================
# Symbol Table Exceptions
# =============================================================================

class AllocationError(SymtabError):
    """
    A merge into the symbol table could not complete.

    The entry being built is never linked into the table, so the table
    holds only complete entries after this error.
    """
    pass


class StaleIndexError(SymtabError):
    """
    A sorted lookup was requested but the address index is missing or
    out of date. Call SymbolTable.build_address_index() after loading.
    """

    def __init__(self) -> None:
        super().__init__(
            "address index is stale; call build_address_index() after "
            "the last load"
        )


# =============================================================================
# Recoverable Line Errors
# =============================================================================

class RecordSkipped(SymtabError):
    """
    One malformed line in a text source.

    Raised by the single-line parsers and caught by the file parsers,
    which log it and continue with the next line.

    Attributes:
        reason: Why the line was rejected
        line_number: 1-based line number, when known
        text: The offending line, when known
    """

    def __init__(
        self,
        reason: str,
        line_number: Optional[int] = None,
        text: Optional[str] = None,
    ):
        self.reason = reason
        self.line_number = line_number
        self.text = text
        if line_number is not None:
            super().__init__(f"line {line_number}: {reason}")
        else:
            super().__init__(reason)
