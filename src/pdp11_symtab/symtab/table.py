"""
Unified Symbol Table
====================

Merges symbols and line information from executables, debug directives
and address maps into one table, and answers the questions a source-level
debugger asks:

- which entry sits exactly at an address (lookup_by_address)
- which address implements a source line (find_address)
- which file and line an address belongs to (get_file, get_line)
- where execution reaches the next source line (next_line_address)

Merging
-------
merge_insert() is the single dedup point. Entries are keyed by
(address, kind); inserting an existing key only fills fields the existing
entry has empty (None or "" strings, line 0). Populated fields are never
overwritten.

Region Bracketing
-----------------
Records loaded from a parser are grouped by source file. Before the
first record of a file, a FILE entry carrying the filename at address 0
opens the region; after its last record, a FILE entry with an empty
filename closes it. A filename gets at most one opening marker over the
life of the table. Markers are structural and are appended without
dedup, so two regions never collapse into one (address 0, FILE) entry.
A FILE record at address 0 back-fills the marker of its own file.

Sorted Lookups
--------------
The table is kept in insertion order. lookup_by_address() runs a binary
search over an address-sorted view that must be built explicitly with
build_address_index() after the last load; any insert invalidates it.
Equal addresses keep insertion order in the view, so the binary search
and lookup_by_address_linear() always return the same entry.

Example usage:

    >>> table = SymbolTable()
    >>> table.load_directives("hello.s")
    True
    >>> table.load_address_map("hello.map")
    True
    >>> table.find_address("hello.c", 12)
    100
    >>> table.next_line_address(100)
    104

The table has no internal locking; do not read it while a load runs.
"""

from bisect import bisect_left
from operator import attrgetter
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional, Union
import logging

from pdp11_symtab.config import SymtabConfig, get_default_config
from pdp11_symtab.errors import AllocationError, StaleIndexError, SymtabError
from pdp11_symtab.aout.parser import parse_exec_file
from pdp11_symtab.aout.symtypes import SymbolType
from pdp11_symtab.debuginfo.addrmap import parse_address_map_file
from pdp11_symtab.debuginfo.directives import parse_directive_file
from pdp11_symtab.symtab.entries import (
    ADDRESS_MASK,
    SymbolEntry,
    SymbolKind,
    kind_for_exec_symbol,
    kind_for_stab,
)

logger = logging.getLogger(__name__)

# (filename, name, line, address, kind) as handed to merge_insert
MergeItem = tuple[Optional[str], Optional[str], int, int, SymbolKind]

RecordObserver = Callable[[Any], None]

_NO_REGION = object()


class SymbolTable:
    """
    Insertion-ordered symbol table with nearest-match queries.

    Attributes:
        config: Settings passed on to the parsers
        on_record: Optional observer handed to every parser; called once
            per parsed record
        last_error: The error that made the last load_* call fail, or
            None if it succeeded
    """

    def __init__(
        self,
        config: Optional[SymtabConfig] = None,
        on_record: Optional[RecordObserver] = None,
    ):
        self.config = config or get_default_config()
        self.on_record = on_record
        self.last_error: Optional[SymtabError] = None

        self._entries: list[SymbolEntry] = []
        # First entry (insertion order) for each (address, kind)
        self._by_key: dict[tuple[int, SymbolKind], SymbolEntry] = {}
        # Region-begin marker of each filename
        self._regions: dict[str, SymbolEntry] = {}

        self._sorted: Optional[list[SymbolEntry]] = None
        self._sorted_addresses: list[int] = []

    # =========================================================================
    # Container Protocol
    # =========================================================================

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SymbolEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> SymbolEntry:
        return self._entries[index]

    @property
    def entries(self) -> tuple[SymbolEntry, ...]:
        """All entries in insertion order."""
        return tuple(self._entries)

    # =========================================================================
    # Merging
    # =========================================================================

    def merge_insert(
        self,
        filename: Optional[str],
        name: Optional[str],
        line: int,
        address: int,
        kind: SymbolKind,
    ) -> SymbolEntry:
        """
        Insert an entry, or back-fill the entry already holding (address, kind).

        Args:
            filename: Source file, or None
            name: Symbol name, or None
            line: Source line (0 = none)
            address: Address; masked to 16 bits
            kind: Entry kind

        Returns:
            The new or updated entry

        Raises:
            AllocationError: If the entry could not be created
        """
        address &= ADDRESS_MASK
        self._invalidate_index()

        if kind == SymbolKind.FILE and address == 0 and filename in self._regions:
            # A source file record at 0 belongs on its own region's marker
            existing = self._regions[filename]
        else:
            existing = self._by_key.get((address, kind))
        if existing is not None:
            if filename and not existing.filename:
                existing.filename = str(filename)
            if name and not existing.name:
                existing.name = str(name)
            if line and not existing.line:
                existing.line = line
            return existing

        try:
            entry = SymbolEntry(
                filename=str(filename) if filename is not None else None,
                name=str(name) if name is not None else None,
                line=line,
                address=address,
                kind=kind,
            )
        except MemoryError as e:
            raise AllocationError(
                f"cannot allocate entry for address 0{address:o}"
            ) from e
        self._append(entry)
        return entry

    def _append(self, entry: SymbolEntry) -> None:
        self._entries.append(entry)
        self._by_key.setdefault((entry.address, entry.kind), entry)

    def _open_region(self, filename: str) -> bool:
        """Add a region-begin marker unless the filename already has one."""
        # Markers are the one exception to a single entry per (address, kind):
        # every region shares (0, FILE), so they bypass merge_insert.
        if filename in self._regions:
            return False
        self._invalidate_index()
        marker = SymbolEntry(filename=filename, address=0, kind=SymbolKind.FILE)
        self._append(marker)
        self._regions[filename] = marker
        return True

    def _close_region(self) -> None:
        self._invalidate_index()
        self._append(SymbolEntry(filename="", address=0, kind=SymbolKind.FILE))

    def merge_records(
        self,
        items: Iterable[MergeItem],
        default_region: Optional[str] = None,
    ) -> int:
        """
        Merge a normalized record stream, bracketing each file's records.

        A record's region is its filename, or default_region when it has
        none. Records without any region are merged unbracketed.

        Returns:
            Number of records merged
        """
        count = 0
        current: Any = _NO_REGION
        opened = False

        for filename, name, line, address, kind in items:
            region = filename or default_region
            if region != current:
                if opened:
                    self._close_region()
                opened = self._open_region(region) if region else False
                current = region
            self.merge_insert(filename, name, line, address, kind)
            count += 1

        if opened:
            self._close_region()
        return count

    # =========================================================================
    # Loading
    # =========================================================================

    def load_exec(self, path: Union[str, Path]) -> bool:
        """
        Load the symbol table of an executable file.

        An N_SO stab in the symbol table sets the source file of the
        records after it. Records before any N_SO are attributed to a
        region named after the file with its suffix replaced by
        config.source_suffix (hello.out -> hello.s).

        Returns:
            True on success; False with last_error set on failure
        """
        def produce(path: Path) -> tuple[list[MergeItem], Optional[str]]:
            symbols = parse_exec_file(path, config=self.config, on_record=self.on_record)
            items = []
            current_file = None
            for symbol in symbols:
                if symbol.type == SymbolType.N_SO and symbol.name:
                    current_file = symbol.name
                line = 0
                if symbol.type == SymbolType.N_SLINE:
                    line = symbol.desc
                items.append((
                    current_file,
                    symbol.name or None,
                    line,
                    symbol.value,
                    kind_for_exec_symbol(symbol.type),
                ))
            return items, str(path.with_suffix(self.config.source_suffix))

        return self._load(path, produce)

    def load_directives(self, path: Union[str, Path]) -> bool:
        """
        Load a debug directive (.stabs/.stabn) file.

        Returns:
            True on success; False with last_error set on failure
        """
        def produce(path: Path) -> tuple[list[MergeItem], Optional[str]]:
            records = parse_directive_file(path, on_record=self.on_record)
            items = []
            for record in records:
                line = 0
                if record.type_code == SymbolType.N_SLINE:
                    line = record.desc & ADDRESS_MASK
                items.append((
                    record.filename,
                    record.name or None,
                    line,
                    record.value,
                    kind_for_stab(record.type_code, record.descriptor),
                ))
            return items, None

        return self._load(path, produce)

    def load_address_map(self, path: Union[str, Path]) -> bool:
        """
        Load an address map file; every line becomes a LINE entry.

        Returns:
            True on success; False with last_error set on failure
        """
        def produce(path: Path) -> tuple[list[MergeItem], Optional[str]]:
            records = parse_address_map_file(path, on_record=self.on_record)
            items = [
                (record.filename, None, record.line, record.address, SymbolKind.LINE)
                for record in records
            ]
            return items, None

        return self._load(path, produce)

    def load(self, path: Union[str, Path]) -> bool:
        """
        Load a file, choosing the parser from its suffix.

        .s/.S/.stabs -> directives, .map -> address map, anything else ->
        executable.
        """
        suffix = Path(path).suffix.lower()
        if suffix in (".s", ".stabs"):
            return self.load_directives(path)
        if suffix == ".map":
            return self.load_address_map(path)
        return self.load_exec(path)

    def _load(
        self,
        path: Union[str, Path],
        produce: Callable[[Path], tuple[list[MergeItem], Optional[str]]],
    ) -> bool:
        path = Path(path)
        self.last_error = None
        try:
            items, default_region = produce(path)
            try:
                count = self.merge_records(items, default_region)
            except MemoryError as e:
                raise AllocationError(f"out of memory merging records from {path}") from e
        except SymtabError as e:
            self.last_error = e
            logger.error(f"Failed to load symbols from {path}: {e}")
            return False

        logger.info(f"Loaded {count} records from {path} ({len(self)} entries total)")
        return True

    # =========================================================================
    # Exact Lookups
    # =========================================================================

    def build_address_index(self) -> None:
        """Build the address-sorted view used by lookup_by_address()."""
        self._sorted = sorted(self._entries, key=attrgetter("address"))
        self._sorted_addresses = [entry.address for entry in self._sorted]

    def clear_index(self) -> None:
        self._invalidate_index()

    @property
    def index_is_current(self) -> bool:
        return self._sorted is not None

    def _invalidate_index(self) -> None:
        self._sorted = None
        self._sorted_addresses = []

    def lookup_by_address(self, address: int) -> Optional[SymbolEntry]:
        """
        Find the entry at exactly this address with a binary search.

        Among entries sharing the address, the first one inserted wins.

        Raises:
            StaleIndexError: If build_address_index() has not been called
                since the last insert
        """
        if self._sorted is None:
            raise StaleIndexError()
        index = bisect_left(self._sorted_addresses, address)
        if index < len(self._sorted_addresses) and self._sorted_addresses[index] == address:
            return self._sorted[index]
        return None

    def lookup_by_address_linear(self, address: int) -> Optional[SymbolEntry]:
        """Find the first inserted entry at exactly this address by scanning."""
        for entry in self._entries:
            if entry.address == address:
                return entry
        return None

    def lookup_by_name(self, name: str) -> Optional[SymbolEntry]:
        """Find the first inserted entry with this name."""
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    # =========================================================================
    # Source-Level Queries
    # =========================================================================

    @staticmethod
    def is_line_entry(entry: Optional[SymbolEntry]) -> bool:
        return entry is not None and entry.kind == SymbolKind.LINE

    def _line_entries(self) -> Iterator[SymbolEntry]:
        return (entry for entry in self._entries if entry.kind == SymbolKind.LINE)

    def _nearest_line_entry(self, address: int) -> Optional[SymbolEntry]:
        """
        LINE entry closest to an address; the first inserted wins ties.

        Distances are plain integer differences, so addresses near 0 and
        0xFFFF do not wrap around.
        """
        best = None
        best_distance = 0
        for entry in self._line_entries():
            distance = abs(entry.address - address)
            if best is None or distance < best_distance:
                best = entry
                best_distance = distance
        return best

    def find_address(self, filename: str, line: int) -> Optional[int]:
        """
        Address of the LINE entry of a file closest to a line number.

        The file must be known to the table through a FILE entry with
        exactly this filename. Ties go to the first inserted entry.

        Returns:
            The address, or None if the file is unknown or has no lines
        """
        known = any(
            entry.kind == SymbolKind.FILE and entry.filename == filename
            for entry in self._entries
        )
        if not known:
            return None

        best = None
        best_diff = 0
        for entry in self._line_entries():
            if entry.filename != filename:
                continue
            diff = abs(entry.line - line)
            if best is None or diff < best_diff:
                best = entry
                best_diff = diff
        return best.address if best is not None else None

    def get_file(self, address: int) -> Optional[str]:
        """Source file of the LINE entry nearest to an address."""
        entry = self._nearest_line_entry(address)
        return entry.filename if entry is not None else None

    def get_line(self, address: int) -> Optional[int]:
        """Source line of the LINE entry nearest to an address."""
        entry = self._nearest_line_entry(address)
        return entry.line if entry is not None else None

    def next_line_address(self, address: int) -> Optional[int]:
        """
        Address to stop at when stepping to the next source line.

        The current line is the LINE entry nearest to address. The next
        line is, among LINE entries of the same file with a greater line
        number, the one with the lowest address.

        Returns:
            The address, or None when there is no next line
        """
        current = self._nearest_line_entry(address)
        if current is None:
            return None

        best = None
        for entry in self._line_entries():
            if entry.filename != current.filename or entry.line <= current.line:
                continue
            if best is None or entry.address < best.address:
                best = entry
        return best.address if best is not None else None

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def dump(self) -> str:
        """Render every entry, one per line, in insertion order."""
        lines = [f"Symbol Table ({len(self)} entries):"]
        lines.append("-" * 60)
        for index, entry in enumerate(self._entries):
            lines.append(f"[{index:4d}] {entry}")
        return "\n".join(lines)
