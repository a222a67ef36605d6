"""
Canonical compressed proof encoding (128 bytes) and snarkjs proof.json interop.

Layout
------
    A: 32 bytes   x (big-endian) with flags in the top two bits of byte 0
    B: 64 bytes   x_c1 | x_c0 (big-endian) with flags in byte 0
    C: 32 bytes   as A

    flag 0x80  point at infinity (all other bits zero)
    flag 0x40  y is the larger of {y, -y}
               (G1: y > (q-1)/2; G2: (y_c1, y_c0) compared lexicographically)

BN254's q is below 2^254, so the two top bits of a coordinate are always
free. Decoding recovers y from the curve equation and therefore rejects any
x that is not on the curve.

License: MIT
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from ..curve.field import Q, fq2_add, fq2_is_larger, fq2_mul, fq2_neg, fq2_sqrt, fq_is_larger, fq_sqrt
from ..curve.points import AffinePointG1, AffinePointG2, b2_coeffs
from ..errors import FormatError
from ..groth16.keys import Proof
from ..params.vk_json import g1_to_json, g2_to_json, parse_g1, parse_g2

G1_COMPRESSED = 32
G2_COMPRESSED = 64
PROOF_BYTES = 2 * G1_COMPRESSED + G2_COMPRESSED

FLAG_INFINITY = 0x80
FLAG_LARGER = 0x40
_FLAG_MASK = FLAG_INFINITY | FLAG_LARGER


def _split_flags(data: bytes) -> tuple[int, bytes]:
    return data[0] & _FLAG_MASK, bytes([data[0] & ~_FLAG_MASK & 0xFF]) + data[1:]


def _coord(raw: bytes, what: str, offset: int) -> int:
    v = int.from_bytes(raw, "big")
    if v >= Q:
        raise FormatError(f"non-canonical {what} coordinate", offset=offset)
    return v


# --- G1 -------------------------------------------------------------------------


def compress_g1(p: AffinePointG1) -> bytes:
    if p.is_infinity:
        return bytes([FLAG_INFINITY]) + bytes(G1_COMPRESSED - 1)
    out = bytearray(p.x.to_bytes(G1_COMPRESSED, "big"))
    if fq_is_larger(p.y):
        out[0] |= FLAG_LARGER
    return bytes(out)


def decompress_g1(data: bytes, *, offset: int = 0) -> AffinePointG1:
    if len(data) != G1_COMPRESSED:
        raise FormatError(f"compressed G1 must be {G1_COMPRESSED} bytes", offset=offset)
    flags, raw = _split_flags(data)
    if flags & FLAG_INFINITY:
        if flags & FLAG_LARGER or any(raw):
            raise FormatError("malformed infinity encoding", offset=offset)
        return AffinePointG1.infinity()
    x = _coord(raw, "G1 x", offset)
    y = fq_sqrt(x * x * x + 3)
    if y is None:
        raise FormatError("G1 x is not on the curve", offset=offset)
    if fq_is_larger(y) != bool(flags & FLAG_LARGER):
        y = (-y) % Q
    return AffinePointG1(x, y)


# --- G2 -------------------------------------------------------------------------


def compress_g2(p: AffinePointG2) -> bytes:
    if p.is_infinity:
        return bytes([FLAG_INFINITY]) + bytes(G2_COMPRESSED - 1)
    out = bytearray(p.x[1].to_bytes(32, "big") + p.x[0].to_bytes(32, "big"))
    if fq2_is_larger(p.y):
        out[0] |= FLAG_LARGER
    return bytes(out)


def decompress_g2(data: bytes, *, offset: int = 0) -> AffinePointG2:
    if len(data) != G2_COMPRESSED:
        raise FormatError(f"compressed G2 must be {G2_COMPRESSED} bytes", offset=offset)
    flags, raw = _split_flags(data)
    if flags & FLAG_INFINITY:
        if flags & FLAG_LARGER or any(raw):
            raise FormatError("malformed infinity encoding", offset=offset)
        return AffinePointG2.infinity()
    x = (_coord(raw[32:], "G2 x_c0", offset + 32), _coord(raw[:32], "G2 x_c1", offset))
    rhs = fq2_add(fq2_mul(fq2_mul(x, x), x), b2_coeffs())
    y = fq2_sqrt(rhs)
    if y is None:
        raise FormatError("G2 x is not on the curve", offset=offset)
    if fq2_is_larger(y) != bool(flags & FLAG_LARGER):
        y = fq2_neg(y)
    return AffinePointG2(x, y)


# --- proof ----------------------------------------------------------------------


def serialize(proof: Proof) -> bytes:
    return compress_g1(proof.a) + compress_g2(proof.b) + compress_g1(proof.c)


def deserialize(data: bytes) -> Proof:
    data = bytes(data)
    if len(data) != PROOF_BYTES:
        raise FormatError(
            f"proof must be {PROOF_BYTES} bytes, got {len(data)}",
            ctx={"expected": PROOF_BYTES, "got": len(data)},
        )
    return Proof(
        a=decompress_g1(data[:32], offset=0),
        b=decompress_g2(data[32:96], offset=32),
        c=decompress_g1(data[96:], offset=96),
    )


def to_hex(proof: Proof) -> str:
    return serialize(proof).hex()


def from_hex(text: str) -> Proof:
    s = text[2:] if text.startswith(("0x", "0X")) else text
    try:
        raw = bytes.fromhex(s)
    except ValueError as e:
        raise FormatError("proof is not valid hex", field="proof", cause=e) from e
    return deserialize(raw)


# --- snarkjs proof.json -----------------------------------------------------------


def proof_to_snarkjs(proof: Proof) -> Dict[str, Any]:
    return {
        "pi_a": g1_to_json(proof.a),
        "pi_b": g2_to_json(proof.b),
        "pi_c": g1_to_json(proof.c),
        "protocol": "groth16",
        "curve": "bn128",
    }


def proof_from_snarkjs(obj: Mapping[str, Any]) -> Proof:
    """Accepts a flat proof.json or a {"proof": {...}, "publicSignals": [...]} bundle."""
    if isinstance(obj.get("proof"), Mapping):
        obj = obj["proof"]
    for key in ("pi_a", "pi_b", "pi_c"):
        if key not in obj:
            raise FormatError("missing proof field", field=key)
    return Proof(
        a=parse_g1(obj["pi_a"], field="pi_a"),
        b=parse_g2(obj["pi_b"], field="pi_b"),
        c=parse_g1(obj["pi_c"], field="pi_c"),
    )


__all__ = [
    "PROOF_BYTES",
    "compress_g1",
    "decompress_g1",
    "compress_g2",
    "decompress_g2",
    "serialize",
    "deserialize",
    "to_hex",
    "from_hex",
    "proof_to_snarkjs",
    "proof_from_snarkjs",
]
