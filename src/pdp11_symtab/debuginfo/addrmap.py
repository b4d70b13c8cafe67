"""
Address Map Parser
==================

Parses plain-text address maps that tie source lines to addresses:

    # comment
    main.c : 10 -> 0x64
    main.c : 20 -> C8

Whitespace around each token is ignored; the address is hexadecimal with
an optional 0x prefix. Blank lines and lines starting with '#' are
skipped. A line without the colon or the arrow, or with numbers that do
not parse, is dropped. Only failing to open or read the file is fatal.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union
import logging

from pdp11_symtab.errors import RecordSkipped, SymbolIOError

logger = logging.getLogger(__name__)

ARROW = "->"


@dataclass(frozen=True)
class MapRecord:
    """
    One address map line.

    Attributes:
        filename: Source file name
        line: Source line number
        address: 16-bit address
    """
    filename: str
    line: int
    address: int


RecordObserver = Callable[[MapRecord], None]


def parse_map_line(line: str, line_number: Optional[int] = None) -> Optional[MapRecord]:
    """
    Parse one address map line.

    Returns:
        The record, or None for blank and comment lines

    Raises:
        RecordSkipped: If the line does not match 'file : line -> address'
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    filename, colon, rest = text.partition(":")
    if not colon:
        raise RecordSkipped("missing ':'", line_number, line)

    line_part, arrow, address_part = rest.partition(ARROW)
    if not arrow:
        raise RecordSkipped(f"missing '{ARROW}'", line_number, line)

    try:
        line_value = int(line_part.strip(), 10)
        address = int(address_part.strip(), 16)
    except ValueError:
        raise RecordSkipped("bad line number or address", line_number, line) from None

    return MapRecord(filename=filename.strip(), line=line_value, address=address & 0xFFFF)


def parse_address_map(
    lines: Iterable[str],
    on_record: Optional[RecordObserver] = None,
) -> list[MapRecord]:
    """Parse address map lines from any iterable of strings."""
    records = []
    for line_number, line in enumerate(lines, start=1):
        try:
            record = parse_map_line(line, line_number)
        except RecordSkipped as e:
            logger.debug(f"skipping map line: {e}")
            continue
        if record is None:
            continue
        records.append(record)
        if on_record is not None:
            on_record(record)
    return records


def parse_address_map_file(
    path: Union[str, Path],
    on_record: Optional[RecordObserver] = None,
) -> list[MapRecord]:
    """
    Parse an address map file on disk.

    Raises:
        SymbolIOError: If the file cannot be opened or read
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            records = parse_address_map(f, on_record=on_record)
    except OSError as e:
        raise SymbolIOError(path, e.strerror or str(e)) from e

    logger.debug(f"{path}: {len(records)} map entries")
    return records
