"""
Debug Directive Parser
======================

Parses the line-oriented debug directives an assembler listing carries
alongside code:

    .stabs "name:descriptor type-info",type_code,other,desc,value
    .stabn type_code,other,desc,value

`.stabs` carries a quoted payload of the form `name:D rest`, where D is
a single descriptor character (F = global function, G = global
variable, t = type name...). `.stabn` carries only the four numbers.

Source File Tracking
--------------------
The parser keeps a running "current source file". A record whose type
code is N_SO sets it to the record's name. Every record, including the
one that sets it, is stamped with the current file.

Tolerance
---------
Lines that are not directives are ignored. A directive line that does
not match the grammar raises RecordSkipped from parse_directive_line;
the stream parser logs it at DEBUG level and continues. Only failing to
open or read the file is fatal.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union
import logging
import re

from pdp11_symtab.errors import RecordSkipped, SymbolIOError
from pdp11_symtab.aout.symtypes import SymbolType

logger = logging.getLogger(__name__)

# Type code that switches the current source file
SOURCE_FILE_CODE = SymbolType.N_SO

_DIRECTIVE_RE = re.compile(r"\s*\.(stabs|stabn)(?![A-Za-z0-9_])")
_INT = r"\s*(-?\d+)\s*"
# Exactly four numbers: no fifth field, no digits glued to the last one
_END = r"(?!\s*[\d,])"
_STABS_NUMBERS_RE = re.compile(r"\s*," + ",".join([_INT] * 4) + _END)
_STABN_NUMBERS_RE = re.compile(r"\s+" + ",".join([_INT] * 4) + _END)


@dataclass
class DirectiveRecord:
    """
    One parsed debug directive.

    Attributes:
        name: Symbol name (text before the colon; "" for .stabn)
        descriptor: Descriptor character after the colon (None for .stabn)
        type_info: Remainder of the payload after the descriptor
        type_code: Stab type code (see SymbolType)
        other: The "other" field, usually 0
        desc: Description field (line number for N_SLINE)
        value: Value field (usually an address)
        filename: Source file current when the record was read
        line_number: 1-based line in the directive stream
    """
    name: str
    descriptor: Optional[str]
    type_info: str
    type_code: int
    other: int
    desc: int
    value: int
    filename: Optional[str] = None
    line_number: int = 0

    @property
    def is_source_file(self) -> bool:
        return self.type_code == SOURCE_FILE_CODE


RecordObserver = Callable[[DirectiveRecord], None]


def is_directive(line: str) -> bool:
    """Check if a line starts (after whitespace) with a debug directive."""
    return _DIRECTIVE_RE.match(line) is not None


def parse_directive_line(line: str, line_number: Optional[int] = None) -> DirectiveRecord:
    """
    Parse a single directive line.

    The returned record has no filename; the stream parser stamps it.

    Raises:
        RecordSkipped: If the line is not a well-formed directive
    """
    match = _DIRECTIVE_RE.match(line)
    if match is None:
        raise RecordSkipped("not a debug directive", line_number, line)

    rest = line[match.end():]

    if match.group(1) == "stabs":
        rest = rest.lstrip()
        if not rest.startswith('"'):
            raise RecordSkipped("missing quoted string", line_number, line)
        close = rest.find('"', 1)
        if close < 0:
            raise RecordSkipped("unterminated string", line_number, line)
        payload = rest[1:close]

        name, colon, type_part = payload.partition(":")
        if not colon:
            raise RecordSkipped(f"no ':' in payload {payload!r}", line_number, line)
        if not type_part:
            raise RecordSkipped(f"no descriptor in payload {payload!r}", line_number, line)
        descriptor = type_part[0]
        type_info = type_part[1:]
        numbers = _STABS_NUMBERS_RE.match(rest, close + 1)
    else:
        name, descriptor, type_info = "", None, ""
        numbers = _STABN_NUMBERS_RE.match(rest)

    if numbers is None:
        raise RecordSkipped("expected type,other,desc,value", line_number, line)

    type_code, other, desc, value = (int(group) for group in numbers.groups())
    return DirectiveRecord(
        name=name,
        descriptor=descriptor,
        type_info=type_info,
        type_code=type_code,
        other=other,
        desc=desc,
        value=value,
        line_number=line_number or 0,
    )


class DirectiveParser:
    """
    Stateful parser for a stream of directive lines.

    Attributes:
        current_file: Source file most recently set by an N_SO record
        records: Records parsed so far, in stream order
        skipped: Number of malformed directive lines dropped
    """

    def __init__(self, on_record: Optional[RecordObserver] = None):
        self.on_record = on_record
        self.current_file: Optional[str] = None
        self.records: list[DirectiveRecord] = []
        self.skipped = 0

    def feed(self, line: str, line_number: int) -> Optional[DirectiveRecord]:
        """
        Parse one line of the stream.

        Returns:
            The record appended, or None if the line was ignored or dropped
        """
        if not is_directive(line):
            return None

        try:
            record = parse_directive_line(line, line_number)
        except RecordSkipped as e:
            self.skipped += 1
            logger.debug(f"skipping directive: {e}")
            return None

        if record.is_source_file:
            self.current_file = record.name
        record.filename = self.current_file

        self.records.append(record)
        if self.on_record is not None:
            self.on_record(record)
        return record

    def feed_lines(self, lines: Iterable[str]) -> list[DirectiveRecord]:
        for line_number, line in enumerate(lines, start=1):
            self.feed(line.rstrip("\r\n"), line_number)
        return self.records


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_directives(
    lines: Iterable[str],
    on_record: Optional[RecordObserver] = None,
) -> list[DirectiveRecord]:
    """Parse directive lines from any iterable of strings."""
    return DirectiveParser(on_record=on_record).feed_lines(lines)


def parse_directive_file(
    path: Union[str, Path],
    on_record: Optional[RecordObserver] = None,
) -> list[DirectiveRecord]:
    """
    Parse a directive file on disk.

    Raises:
        SymbolIOError: If the file cannot be opened or read
    """
    path = Path(path)
    parser = DirectiveParser(on_record=on_record)
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            parser.feed_lines(f)
    except OSError as e:
        raise SymbolIOError(path, e.strerror or str(e)) from e

    logger.debug(
        f"{path}: {len(parser.records)} directives, {parser.skipped} skipped"
    )
    return parser.records
