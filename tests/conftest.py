"""
Shared Test Fixtures
====================

Builders for executable images and text debug sources, plus a fixture
that pins the default configuration so environment variables on the
test machine cannot change parser behavior.
"""

import struct
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

from pdp11_symtab.config import SymtabConfig, set_default_config


# (name, type byte, desc byte, value)
SymbolSpec = tuple[str, int, int, int]


def build_exec_image(
    symbols: Sequence[SymbolSpec] = (),
    text: Sequence[int] = (),
    data: Sequence[int] = (),
    zp: Sequence[int] = (),
    magic: int = 0o407,
    bss: int = 0,
    entry: int = 0,
    flags: int = 0,
    reverse_strings: bool = False,
) -> bytes:
    """
    Assemble a complete executable image.

    Layout: header, zero page, text, data, zero relocation words for all
    three, symbol records, string table. With reverse_strings the names
    are stored in the string table in the opposite order to the records.
    """
    string_order = list(range(len(symbols)))
    if reverse_strings:
        string_order.reverse()

    strings = bytearray()
    offsets = {}
    for index in string_order:
        offsets[index] = len(strings)
        strings += symbols[index][0].encode("latin-1") + b"\x00"

    records = b"".join(
        struct.pack("<IHH", offsets[i], (type_byte & 0xFF) | ((desc & 0xFF) << 8), value)
        for i, (_, type_byte, desc, value) in enumerate(symbols)
    )

    header = struct.pack(
        "<8H",
        magic, len(text), len(data), bss,
        len(records) // 2, entry, len(zp), flags,
    )
    segments = b"".join(
        struct.pack(f"<{len(words)}H", *words) for words in (zp, text, data)
    )
    relocations = bytes(2 * (len(zp) + len(text) + len(data)))
    return header + segments + relocations + records + bytes(strings)


@pytest.fixture(autouse=True)
def default_config():
    """Run every test against the built-in defaults."""
    config = SymtabConfig()
    set_default_config(config)
    yield config
    set_default_config(None)


@pytest.fixture
def exec_builder() -> Callable[..., bytes]:
    return build_exec_image


@pytest.fixture
def write_exec(tmp_path: Path) -> Callable[..., Path]:
    """Write an executable image to tmp_path and return its path."""

    def write(name: str = "hello.out", image: Optional[bytes] = None, **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(image if image is not None else build_exec_image(**kwargs))
        return path

    return write


@pytest.fixture
def hello_directives() -> str:
    """
    Assembler output for a small C file with debug directives.

    Lines 10, 20 and 30 of hello.c sit at addresses 100, 200 and 300.
    """
    return "\n".join([
        '\t.stabs "hello.c:S",100,0,0,0',
        '\t.stabs "main:F1",36,0,10,100',
        "main:",
        "\tmov r5,-(sp)",
        "\t.stabn 68,0,10,100",
        "\t.stabn 68,0,20,200",
        "\t.stabn 68,0,30,300",
        '\t.stabs "count:G1",32,0,0,400',
        "",
    ])


@pytest.fixture
def hello_map() -> str:
    return "\n".join([
        "# hello.c address map",
        "hello.c : 10 -> 0x64",
        "hello.c : 20 -> 0xC8",
        "hello.c : 30 -> 12C",
        "",
    ])


@pytest.fixture
def hello_sources(tmp_path: Path, hello_directives: str, hello_map: str) -> tuple[Path, Path]:
    """Write hello.s and hello.map; returns (directives, map)."""
    directives = tmp_path / "hello.s"
    directives.write_text(hello_directives)
    address_map = tmp_path / "hello.map"
    address_map.write_text(hello_map)
    return directives, address_map
