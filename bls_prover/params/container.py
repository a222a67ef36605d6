"""
Section-table container reader/writer (the iden3 binary file layout shared
by ``.zkey``, ``.wtns`` and ``.r1cs``).

    magic:   4 bytes  (ASCII for .wtns/.r1cs, a u32 LE tag for the
                      parameter container)
    version: u32 LE
    nSections: u32 LE
    repeat nSections:
        type: u32 LE
        size: u64 LE
        payload: size bytes

Reading never goes past the end of the buffer: every read is bounds-checked
by ``Cursor`` and a short buffer raises ``TruncationError`` with the absolute
offset, the bytes needed and the bytes available.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

from ..errors import FormatError, MissingSectionError, TruncationError

MAGIC_LEN = 4

Magic = Union[bytes, int]


def magic_bytes(magic: Magic) -> bytes:
    """Raw header bytes for ``magic``; an int is packed as u32 little-endian."""
    if isinstance(magic, int):
        return struct.pack("<I", magic)
    if len(magic) != MAGIC_LEN:
        raise ValueError("magic must be 4 bytes")
    return bytes(magic)


@dataclass(frozen=True)
class Section:
    type: int
    offset: int  # absolute offset of the payload
    size: int


class Cursor:
    """Bounds-checked little-endian reader over a byte buffer."""

    def __init__(self, data: bytes, pos: int = 0, end: Optional[int] = None, *, section: Optional[int] = None):
        self.data = data
        self.pos = pos
        self.end = len(data) if end is None else end
        self.section = section

    @property
    def remaining(self) -> int:
        return self.end - self.pos

    def read(self, n: int) -> bytes:
        if n < 0 or self.pos + n > self.end:
            raise TruncationError(
                offset=self.pos, needed=n, available=max(self.end - self.pos, 0), section=self.section
            )
        out = self.data[self.pos : self.pos + n]
        self.pos += n
        return out

    def skip(self, n: int) -> None:
        self.read(n)

    def u32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.read(8))[0]

    def uint_le(self, n: int) -> int:
        return int.from_bytes(self.read(n), "little")

    def uint_be(self, n: int) -> int:
        return int.from_bytes(self.read(n), "big")


@dataclass(frozen=True)
class Container:
    magic: bytes
    version: int
    sections: Tuple[Section, ...]
    data: bytes

    @property
    def section_types(self) -> Tuple[int, ...]:
        return tuple(s.type for s in self.sections)

    def find_section(self, section_type: int) -> Section:
        for s in self.sections:
            if s.type == section_type:
                return s
        raise MissingSectionError(section_type, present=self.section_types)

    def has_section(self, section_type: int) -> bool:
        return any(s.type == section_type for s in self.sections)

    def reader(self, section_type: int) -> Cursor:
        s = self.find_section(section_type)
        return Cursor(self.data, s.offset, s.offset + s.size, section=s.type)

    def payload(self, section_type: int) -> bytes:
        s = self.find_section(section_type)
        return self.data[s.offset : s.offset + s.size]


def read_container(data: bytes, magic: Magic) -> Container:
    """Parse the header and walk the section table. No payload is interpreted."""
    data = bytes(data)
    expected = magic_bytes(magic)
    cur = Cursor(data)
    head = cur.read(MAGIC_LEN)
    if head != expected:
        if isinstance(magic, int):
            shown = f"0x{magic:08x}, got 0x{struct.unpack('<I', head)[0]:08x}"
        else:
            shown = f"{magic!r}, got {head!r}"
        raise FormatError(
            f"bad magic: expected {shown}",
            offset=0,
            ctx={"expected": expected.hex(), "got": head.hex()},
        )
    version = cur.u32()
    count = cur.u32()

    sections = []
    for _ in range(count):
        header_at = cur.pos
        s_type = cur.u32()
        s_size = cur.u64()
        if s_size > cur.remaining:
            raise TruncationError(
                "section payload runs past end of buffer",
                offset=header_at,
                needed=s_size,
                available=cur.remaining,
                section=s_type,
            )
        sections.append(Section(s_type, cur.pos, s_size))
        cur.skip(s_size)

    return Container(magic=expected, version=version, sections=tuple(sections), data=data)


def write_container(magic: Magic, version: int, sections: Iterable[Tuple[int, bytes]]) -> bytes:
    items: Sequence[Tuple[int, bytes]] = list(sections)
    out = bytearray(magic_bytes(magic))
    out += struct.pack("<II", version, len(items))
    for s_type, payload in items:
        out += struct.pack("<IQ", s_type, len(payload))
        out += payload
    return bytes(out)


__all__ = ["Section", "Cursor", "Container", "Magic", "magic_bytes", "read_container", "write_container", "MAGIC_LEN"]
