"""
pdp11-symtab Command-Line Interface
===================================

- **pdsym**: inspect executables and query merged symbol tables

The tool is a Click-based CLI application with help on every command.
"""

__all__ = ["pdsym"]
