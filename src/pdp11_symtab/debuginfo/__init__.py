"""
Text Debug Information
======================

Parsers for the two textual sources of line information:

- **directives**: `.stabs` / `.stabn` debug directives from assembler output
- **addrmap**: `file : line -> address` map files

Both parsers are line-tolerant: a malformed line is dropped and the rest
of the file is still used.
"""

from pdp11_symtab.debuginfo.directives import (
    DirectiveRecord,
    DirectiveParser,
    SOURCE_FILE_CODE,
    is_directive,
    parse_directive_line,
    parse_directives,
    parse_directive_file,
)

from pdp11_symtab.debuginfo.addrmap import (
    MapRecord,
    parse_map_line,
    parse_address_map,
    parse_address_map_file,
)

__all__ = [
    "DirectiveRecord",
    "DirectiveParser",
    "SOURCE_FILE_CODE",
    "is_directive",
    "parse_directive_line",
    "parse_directives",
    "parse_directive_file",
    "MapRecord",
    "parse_map_line",
    "parse_address_map",
    "parse_address_map_file",
]
