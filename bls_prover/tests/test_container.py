"""Section-table container: magic, truncation and section lookup."""

from __future__ import annotations

import struct

import pytest

from bls_prover.errors import FormatError, MissingSectionError, ProverErrorCode, TruncationError
from bls_prover.params.container import Cursor, read_container, write_container
from bls_prover.params.zkey import ZKEY_MAGIC, locate_groth16_section


def _raw(*sections, magic=ZKEY_MAGIC, version=1):
    return write_container(magic, version, list(sections))


def test_section_table_walk():
    data = _raw((1, b"\x01\x00\x00\x00"), (2, b"abcdef"), (7, b""))
    c = read_container(data, ZKEY_MAGIC)
    assert c.version == 1
    assert c.section_types == (1, 2, 7)
    s2 = c.find_section(2)
    assert s2.size == 6
    assert data[s2.offset : s2.offset + s2.size] == b"abcdef"
    assert c.payload(7) == b""


def test_header_layout_is_little_endian():
    data = _raw((2, b"xy"))
    assert struct.unpack_from("<I", data, 0) == (0x7A6B6579,)
    assert data[:4] == b"yekz"
    assert struct.unpack_from("<II", data, 4) == (1, 1)
    assert struct.unpack_from("<IQ", data, 12) == (2, 2)


def test_bad_magic_reports_offset_zero():
    data = _raw((2, b"xx"), magic=b"wtns")
    with pytest.raises(FormatError) as ei:
        read_container(data, ZKEY_MAGIC)
    assert ei.value.code == ProverErrorCode.FORMAT
    assert ei.value.ctx["offset"] == 0


def test_hand_built_little_endian_header_is_accepted():
    data = struct.pack("<III", 0x7A6B6579, 1, 1) + struct.pack("<IQ", 2, 4) + b"abcd"
    s = locate_groth16_section(data)
    assert (s.type, s.offset, s.size) == (2, 24, 4)


def test_ascii_zkey_bytes_are_not_the_magic():
    # "zkey" as raw bytes is the u32 0x79656b7a, not 0x7a6b6579
    data = b"zkey" + struct.pack("<II", 1, 1) + struct.pack("<IQ", 2, 4) + b"abcd"
    with pytest.raises(FormatError) as ei:
        locate_groth16_section(data)
    assert ei.value.ctx["offset"] == 0
    assert "0x7a6b6579" in str(ei.value)


def test_raw_byte_magic_still_supported():
    data = write_container(b"wtns", 2, [(1, b"")])
    assert data[:4] == b"wtns"
    assert read_container(data, b"wtns").section_types == (1,)


def test_short_buffer_is_truncation():
    with pytest.raises(TruncationError):
        read_container(b"zk", ZKEY_MAGIC)


def test_section_past_end_is_truncation():
    data = bytearray(_raw((2, b"abcdef")))
    struct.pack_into("<Q", data, 16, 1000)
    with pytest.raises(TruncationError) as ei:
        read_container(bytes(data), ZKEY_MAGIC)
    assert ei.value.code == ProverErrorCode.TRUNCATED
    assert ei.value.ctx["section"] == 2
    assert ei.value.ctx["needed"] == 1000


def test_truncated_section_header():
    data = _raw((1, b"\x01\x00\x00\x00"), (2, b"abc"))
    with pytest.raises(TruncationError):
        read_container(data[:-10], ZKEY_MAGIC)


def test_missing_groth16_section():
    data = _raw((1, b"\x01\x00\x00\x00"), (3, b""))
    with pytest.raises(MissingSectionError) as ei:
        locate_groth16_section(data)
    assert ei.value.ctx["section"] == 2
    assert ei.value.ctx["present"] == [1, 3]


def test_locate_groth16_section():
    data = _raw((1, b"\x01\x00\x00\x00"), (2, b"payload"))
    s = locate_groth16_section(data)
    assert s.type == 2 and s.size == 7


def test_cursor_bounds():
    cur = Cursor(b"\x01\x00\x00\x00\x02", section=4)
    assert cur.u32() == 1
    assert cur.remaining == 1
    with pytest.raises(TruncationError) as ei:
        cur.u32()
    assert ei.value.ctx["section"] == 4
