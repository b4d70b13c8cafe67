"""
CLI Error Handling
==================

Consistent error reporting and exit codes for the command-line tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn, Optional

import click

from pdp11_symtab.errors import SymbolIOError, SymtabError


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    LOAD_ERROR = 1       # A symbol source could not be parsed
    INVALID_ARGS = 2     # Invalid arguments or unreadable files
    NOT_FOUND = 3        # Query had no answer
    INTERNAL_ERROR = 4   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: Optional[str] = None,
) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback for internal errors
        error_type: Optional prefix for the message (e.g., "Load")

    Raises:
        SystemExit: Always
    """
    prefix = f"{error_type} error: " if error_type else "Error: "

    if isinstance(error, SymbolIOError):
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, SymtabError):
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.LOAD_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
