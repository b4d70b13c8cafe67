"""
pdp11-symtab Configuration
==========================

Parser and loader settings. Configuration can come from:
- Default values (defined here)
- Environment variables
- An explicit SymtabConfig passed to a parser or to SymbolTable

Environment variables (all optional):
    PDP11_SYMTAB_STRICT_MAGIC: "0"/"false"/"no" to only warn on bad magic
    PDP11_SYMTAB_MAX_NAME_LENGTH: upper bound for string-table names
    PDP11_SYMTAB_SOURCE_SUFFIX: suffix of the source file an executable
        is attributed to (default ".s")
"""

from dataclasses import dataclass
from typing import Optional
import os


_FALSE_WORDS = ("0", "false", "no", "off")


@dataclass
class SymtabConfig:
    """
    Settings shared by the parsers and the symbol table.

    Attributes:
        strict_magic: Abort the executable parse on an unknown magic
            number (default: True). When False the header is trusted
            anyway and a warning is logged.
        max_name_length: Longest symbol name read from the string table
            before truncation (default: 4096 bytes).
        source_suffix: Suffix replacing the executable's own suffix to
            name the region its symbols are attributed to (default: ".s").
    """

    strict_magic: bool = True
    max_name_length: int = 4096
    source_suffix: str = ".s"

    @classmethod
    def from_env(cls) -> "SymtabConfig":
        """
        Create SymtabConfig from environment variables.

        Invalid values are ignored and the default is kept.
        """
        config = cls()

        if strict := os.environ.get("PDP11_SYMTAB_STRICT_MAGIC"):
            config.strict_magic = strict.strip().lower() not in _FALSE_WORDS

        if max_name := os.environ.get("PDP11_SYMTAB_MAX_NAME_LENGTH"):
            try:
                value = int(max_name)
            except ValueError:
                value = 0
            if value > 0:
                config.max_name_length = value

        if suffix := os.environ.get("PDP11_SYMTAB_SOURCE_SUFFIX"):
            config.source_suffix = suffix if suffix.startswith(".") else f".{suffix}"

        return config


# Global default configuration (can be overridden in tests)
_default_config: Optional[SymtabConfig] = None


def get_default_config() -> SymtabConfig:
    """
    Get the default configuration.

    Created from environment variables on first access. Can be replaced
    with set_default_config().
    """
    global _default_config
    if _default_config is None:
        _default_config = SymtabConfig.from_env()
    return _default_config


def set_default_config(config: Optional[SymtabConfig]) -> None:
    """
    Set the default configuration.

    Passing None makes the next get_default_config() re-read the
    environment.
    """
    global _default_config
    _default_config = config
