"""
Segment Loader
==============

Loads the text and data segments of an executable for inspection.

Memory Map:
    0             .. text-1          Text segment (code)
    text          .. text+data-1     Data segment

Addresses are in 16-bit words, in the single unified address space the
symbol table uses. Segment bytes are kept as little-endian byte pairs,
two per word.

Example usage:

    >>> image = load_binary("hello.out")
    >>> seg = image.segment_for(image.entry_point)
    >>> print(f"entry in {'text' if seg.is_text else 'data'}: {seg.word_at(image.entry_point):06o}")

Streaming into an emulator:

    >>> image.write_to(memory.write)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional, Union
import logging

from pdp11_symtab.config import SymtabConfig, get_default_config
from pdp11_symtab.errors import FormatError
from pdp11_symtab.aout.records import ExecHeader, read_word
from pdp11_symtab.aout.parser import check_magic, read_file_bytes

logger = logging.getLogger(__name__)

# write(address, value) capability of an external memory
MemoryWriter = Callable[[int, int], None]

TEXT_START = 0


@dataclass
class Segment:
    """
    One loaded segment.

    Attributes:
        start_address: First word address of the segment
        size: Size in words
        data: Segment contents, two little-endian bytes per word
        is_text: True for the text (code) segment
    """
    start_address: int
    size: int
    data: bytes = field(repr=False)
    is_text: bool

    @property
    def end_address(self) -> int:
        """One past the last word address."""
        return self.start_address + self.size

    @property
    def name(self) -> str:
        return "TEXT" if self.is_text else "DATA"

    def contains(self, address: int) -> bool:
        return self.start_address <= address < self.end_address

    def word_at(self, address: int) -> int:
        """
        Read the word at an address inside this segment.

        Raises:
            IndexError: If the address is outside the segment
        """
        if not self.contains(address):
            raise IndexError(
                f"address 0{address:o} outside {self.name} segment "
                f"0{self.start_address:o}-0{self.end_address:o}"
            )
        index = (address - self.start_address) * 2
        return self.data[index] | (self.data[index + 1] << 8)

    def iter_words(self) -> Iterator[tuple[int, int]]:
        """Yield (address, word) pairs in address order."""
        for i in range(self.size):
            yield self.start_address + i, self.data[2 * i] | (self.data[2 * i + 1] << 8)


@dataclass
class BinaryImage:
    """
    Text and data segments of an executable plus its entry point.

    Attributes:
        header: The parsed header
        segments: [text, data]
    """
    header: ExecHeader
    segments: list[Segment] = field(default_factory=list)

    @property
    def entry_point(self) -> int:
        return self.header.entry

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        path: Optional[Union[str, Path]] = None,
        config: Optional[SymtabConfig] = None,
    ) -> "BinaryImage":
        """
        Decode the segments of an executable image.

        Raises:
            FormatError: If the header or a segment is truncated
        """
        header = ExecHeader.from_bytes(data, path)
        check_magic(header, config or get_default_config(), path)

        text = _read_segment(data, header.text_offset, header.text, "text", path)
        data_bytes = _read_segment(data, header.data_offset, header.data, "data", path)

        image = cls(
            header=header,
            segments=[
                Segment(start_address=TEXT_START, size=header.text, data=text, is_text=True),
                Segment(
                    start_address=TEXT_START + header.text,
                    size=header.data,
                    data=data_bytes,
                    is_text=False,
                ),
            ],
        )
        logger.debug(
            f"{path or '<bytes>'}: text {header.text} words at 0{TEXT_START:o}, "
            f"data {header.data} words at 0{TEXT_START + header.text:o}, "
            f"entry 0{header.entry:o}"
        )
        return image

    def segment_for(self, address: int) -> Optional[Segment]:
        """Return the segment containing an address, or None."""
        for segment in self.segments:
            if segment.contains(address):
                return segment
        return None

    def write_to(self, write: MemoryWriter) -> int:
        """
        Stream every decoded word into an external memory.

        Args:
            write: Callable taking (address, value)

        Returns:
            Number of words written
        """
        count = 0
        for segment in self.segments:
            for address, word in segment.iter_words():
                write(address, word)
                count += 1
        return count


def _read_segment(
    data: bytes,
    offset: int,
    words: int,
    label: str,
    path: Optional[Union[str, Path]],
) -> bytes:
    """Copy a segment word by word into little-endian byte pairs."""
    out = bytearray()
    for i in range(words):
        try:
            word = read_word(data, offset + 2 * i, path)
        except FormatError:
            raise FormatError(
                f"truncated {label} segment: read {i} of {words} words",
                path=path,
                offset=offset + 2 * i,
            ) from None
        out.append(word & 0xFF)
        out.append((word >> 8) & 0xFF)
    return bytes(out)


def load_binary(
    path: Union[str, Path],
    config: Optional[SymtabConfig] = None,
) -> BinaryImage:
    """
    Load the segments of an executable file.

    Raises:
        SymbolIOError: If the file cannot be read
        FormatError: If the header or a segment is malformed
    """
    path = Path(path)
    return BinaryImage.from_bytes(read_file_bytes(path), path=path, config=config)
