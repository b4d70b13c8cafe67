"""
Symbol Type Codes
=================

Type byte values found in executable symbol tables and in debug
directives. The low byte of an on-disk symbol's type word carries one of
these codes; bit 0 (N_EXT) marks an external (global) symbol.

Two families share the byte:

- **Plain symbols** ($00-$1F): the segment the symbol lives in,
  selected with the N_TYPE mask ($1E).
- **Debug stabs** ($20-$FE): any bit of N_STAB ($E0) set. These are the
  same codes the .stabs/.stabn directives carry in their type field.

Reference
---------
- 2.11BSD a.out(5)
- The "stabs" debug format document, sections 2-6 and appendix A/D
"""

from enum import IntEnum


# Bit masks applied to the type byte
N_EXT = 0x01      # External (global) symbol
N_TYPE = 0x1E     # Segment bits of a plain symbol
N_STAB = 0xE0     # Any of these set: debug stab, not a plain symbol


class SymbolType(IntEnum):
    """
    Symbol type codes.

    Plain symbol codes are compared after masking with N_TYPE; stab codes
    are compared against the whole byte.
    """
    # Plain symbols
    N_UNDF = 0x00       # Undefined (or common when value != 0)
    N_ABS = 0x02        # Absolute value, not relocated
    N_TEXT = 0x04       # Text segment (code)
    N_DATA = 0x06       # Initialized data
    N_BSS = 0x08        # Uninitialized data
    N_ZREL = 0x0A       # Zero-page relative
    N_FN = 0x1F         # Source/object file name

    # Debug stabs
    N_GSYM = 0x20       # Global variable
    N_FNAME = 0x22      # Function name (BSD Fortran)
    N_FUN = 0x24        # Function or text-segment static
    N_STSYM = 0x26      # Data segment file-scope variable
    N_LCSYM = 0x28      # BSS segment file-scope variable
    N_MAIN = 0x2A       # Name of main routine
    N_ROSYM = 0x2C      # Read-only data variable
    N_PC = 0x30         # Global symbol (Pascal)
    N_NSYMS = 0x32      # Number of symbols (Ultrix)
    N_NOMAP = 0x34      # No DST map (Ultrix)
    N_MAC_DEFINE = 0x36 # Macro definition
    N_OBJ = 0x38        # Object file (Solaris2)
    N_MAC_UNDEF = 0x3A  # Macro undefinition
    N_OPT = 0x3C        # Debugger options (Solaris2)
    N_RSYM = 0x40       # Register variable
    N_M2C = 0x42        # Modula-2 compilation unit
    N_SLINE = 0x44      # Line number in text segment
    N_DSLINE = 0x46     # Line number in data segment
    N_BSLINE = 0x48     # Line number in bss segment
    N_DEFD = 0x4A       # GNU Modula2 definition module dependency
    N_FLINE = 0x4C      # Function start/body/end line numbers
    N_EHDECL = 0x50     # GNU C++ exception variable
    N_CATCH = 0x54      # GNU C++ catch clause
    N_SSYM = 0x60       # Structure or union element
    N_ENDM = 0x62       # Last stab for module (Solaris2)
    N_SO = 0x64         # Path and name of source file
    N_LSYM = 0x80       # Stack variable or type
    N_BINCL = 0x82      # Beginning of an include file
    N_SOL = 0x84        # Name of include file
    N_PSYM = 0xA0       # Parameter variable
    N_EINCL = 0xA2      # End of an include file
    N_ENTRY = 0xA4      # Alternate entry point
    N_LBRAC = 0xC0      # Beginning of a lexical block
    N_EXCL = 0xC2       # Deleted include file placeholder
    N_SCOPE = 0xC4      # Modula2 scope information (Sun linker)
    N_RBRAC = 0xE0      # End of a lexical block
    N_BCOMM = 0xE2      # Begin named common block
    N_ECOMM = 0xE4      # End named common block
    N_ECOML = 0xE8      # Member of a common block
    N_WITH = 0xEA       # Pascal with statement (Solaris2)
    N_NBTEXT = 0xF0     # Gould non-base registers (text)
    N_NBDATA = 0xF2     # Gould non-base registers (data)
    N_NBBSS = 0xF4      # Gould non-base registers (bss)
    N_NBSTS = 0xF6      # Gould non-base registers
    N_NBLCS = 0xF8      # Gould non-base registers

    @staticmethod
    def is_stab(type_byte: int) -> bool:
        """Check if a type byte is a debug stab rather than a plain symbol."""
        return (type_byte & N_STAB) != 0

    @staticmethod
    def is_external(type_byte: int) -> bool:
        """Check if the external bit is set on a plain symbol."""
        return not SymbolType.is_stab(type_byte) and (type_byte & N_EXT) != 0

    @classmethod
    def get_name(cls, type_byte: int) -> str:
        """
        Get a short human-readable name for a type byte.

        Example:
            >>> SymbolType.get_name(0x05)
            'EXTERNAL TEXT'
            >>> SymbolType.get_name(0x44)
            'SLINE'
        """
        if cls.is_stab(type_byte):
            try:
                return cls(type_byte).name[2:]
            except ValueError:
                return f"UNKNOWN (0x{type_byte:02X})"

        if type_byte == cls.N_FN:
            return "FN"
        prefix = "EXTERNAL " if type_byte & N_EXT else ""
        code = type_byte & ~N_EXT & 0xFF
        if code == cls.N_UNDF:
            return prefix + "UNDEFINED"
        if code == cls.N_ABS:
            return prefix + "ABSOLUTE"
        try:
            return prefix + cls(code).name[2:]
        except ValueError:
            return prefix + f"UNKNOWN (0x{type_byte:02X})"


_DESC_MEANINGS = {
    SymbolType.N_SLINE: "source line number",
    SymbolType.N_PSYM: "register number",
    SymbolType.N_RSYM: "register number",
    SymbolType.N_LSYM: "register number (if register variable)",
    SymbolType.N_LBRAC: "nesting level",
}


def describe_desc(type_byte: int) -> str:
    """Describe what the desc byte means for a given type byte."""
    return _DESC_MEANINGS.get(type_byte & ~N_EXT, "not used")
