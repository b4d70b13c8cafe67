"""
pdsym - Symbol Table Inspector
==============================

Command-line front end for the symbol table. It loads any mix of
executables (.out), debug directive files (.s) and address maps (.map)
into one table and answers queries against it.

Commands
--------
- **header**: Show the header of an executable
- **symbols**: Load files and dump the merged table
- **lookup**: Resolve an address to file, line and next line
- **where**: Resolve a source line to an address
- **segments**: Dump the text and data segments of an executable

Usage Examples
--------------
    $ pdsym header hello.out
    $ pdsym symbols hello.out hello.s hello.map
    $ pdsym lookup hello.s hello.map -a 0x64
    $ pdsym where hello.s hello.map -f hello.c -l 12
    $ pdsym segments hello.out

Addresses accept 0x-prefixed hex, 0-prefixed octal, or decimal.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from pdp11_symtab import __version__
from pdp11_symtab.aout import load_binary, read_exec_header
from pdp11_symtab.cli.errors import ExitCode, handle_cli_exception
from pdp11_symtab.symtab import SymbolTable


# =============================================================================
# Parameter Types and Context
# =============================================================================

class AddressType(click.ParamType):
    """
    Click parameter type for 16-bit addresses.

    Accepts: 0x64 (hex), 0144 (octal), 100 (decimal)
    """
    name = "address"

    def convert(self, value, param, ctx) -> int:
        if isinstance(value, int):
            address = value
        else:
            text = value.strip().lower()
            try:
                if text.startswith("0x"):
                    address = int(text, 16)
                elif text.startswith("0o"):
                    address = int(text, 8)
                elif len(text) > 1 and text.startswith("0"):
                    address = int(text[1:], 8)
                else:
                    address = int(text, 10)
            except ValueError:
                self.fail(f"'{value}' is not a valid address", param, ctx)

        if not 0 <= address <= 0xFFFF:
            self.fail(f"address {value} is outside 0-0xFFFF", param, ctx)
        return address


ADDRESS = AddressType()


class Context:
    """Shared options for all commands."""

    def __init__(self) -> None:
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(name)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def build_table(files: tuple[Path, ...]) -> SymbolTable:
    """Load every file into a fresh table; the first failure is raised."""
    table = SymbolTable()
    for path in files:
        if not table.load(path):
            raise table.last_error
    table.build_address_index()
    return table


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.version_option(__version__, "--version", "-V", prog_name="pdsym")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Inspect PDP-11 executables and query merged symbol tables.

    \b
    Commands:
      header    Show executable header fields
      symbols   Dump the merged symbol table
      lookup    Address -> file, line, next line
      where     File and line -> address
      segments  Dump text and data segments

    \b
    Input files are chosen by suffix:
      .s        .stabs/.stabn debug directives
      .map      file : line -> address maps
      other     executables with symbols
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Header Command
# =============================================================================

@main.command("header")
@click.argument(
    "exec_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def cmd_header(ctx: Context, exec_file: Path) -> None:
    """
    Show the header of an executable.

    \b
    Example:
      pdsym header hello.out
    """
    try:
        header = read_exec_header(exec_file)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    click.echo(f"=== {exec_file.name} ===")
    for line in header.describe():
        click.echo(f"  {line}")
    if not header.has_valid_magic:
        click.echo("warning: unrecognized magic number", err=True)


# =============================================================================
# Symbols Command
# =============================================================================

@main.command("symbols")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-k", "--kind",
    type=click.Choice(["function", "variable", "file", "line", "type", "unknown"]),
    default=None,
    help="Only show entries of this kind",
)
@pass_context
def cmd_symbols(ctx: Context, files: tuple[Path, ...], kind: Optional[str]) -> None:
    """
    Load FILES into one table and dump it.

    \b
    Example:
      pdsym symbols hello.out hello.s hello.map
    """
    try:
        table = build_table(files)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose, "Load")

    if kind is None:
        click.echo(table.dump())
        return

    for entry in table:
        if entry.kind.name.lower() == kind:
            click.echo(str(entry))


# =============================================================================
# Lookup Command
# =============================================================================

@main.command("lookup")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-a", "--address",
    type=ADDRESS,
    required=True,
    help="Address to resolve (0x hex, 0 octal, or decimal)",
)
@pass_context
def cmd_lookup(ctx: Context, files: tuple[Path, ...], address: int) -> None:
    """
    Resolve an address to its symbol, source line and next line.

    \b
    Example:
      pdsym lookup hello.s hello.map -a 0x64
    """
    try:
        table = build_table(files)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose, "Load")

    entry = table.lookup_by_address(address)
    filename = table.get_file(address)
    line = table.get_line(address)
    next_address = table.next_line_address(address)

    click.echo(f"Address : {address:06o} (0x{address:04X})")
    click.echo(f"Symbol  : {entry.name if entry and entry.name else '(none)'}")
    if line is None:
        click.echo("Source  : (no line information)")
        sys.exit(ExitCode.NOT_FOUND)
    click.echo(f"Source  : {filename}:{line}")
    if next_address is None:
        click.echo("Next    : (no next line)")
    else:
        click.echo(f"Next    : {next_address:06o} (0x{next_address:04X})")


# =============================================================================
# Where Command
# =============================================================================

@main.command("where")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("-f", "--file", "source", required=True, help="Source file name")
@click.option("-l", "--line", type=int, required=True, help="Source line number")
@pass_context
def cmd_where(ctx: Context, files: tuple[Path, ...], source: str, line: int) -> None:
    """
    Find the address of a source line.

    \b
    Example:
      pdsym where hello.s hello.map -f hello.c -l 12
    """
    try:
        table = build_table(files)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose, "Load")

    address = table.find_address(source, line)
    if address is None:
        click.echo(f"Error: no address for {source}:{line}", err=True)
        sys.exit(ExitCode.NOT_FOUND)
    click.echo(f"{source}:{line} -> {address:06o} (0x{address:04X})")


# =============================================================================
# Segments Command
# =============================================================================

@main.command("segments")
@click.argument(
    "exec_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def cmd_segments(ctx: Context, exec_file: Path) -> None:
    """
    Dump the text and data segments of an executable in octal.

    \b
    Example:
      pdsym segments hello.out
    """
    try:
        image = load_binary(exec_file)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    click.echo(f"Entry point: {image.entry_point:06o}")
    for segment in image.segments:
        click.echo("")
        click.echo(
            f"{segment.name} (start: {segment.start_address:06o}, "
            f"size: {segment.size} words)"
        )
        words = list(segment.iter_words())
        for i in range(0, len(words), 8):
            chunk = words[i:i + 8]
            values = " ".join(f"{word:06o}" for _, word in chunk)
            click.echo(f"{chunk[0][0]:06o}: {values}")


if __name__ == "__main__":
    main()
