"""
Affine BN254 points and their raw byte codec.

Layout (uncompressed, big-endian, 32-byte limbs):

    G1: x | y                          (64 bytes)
    G2: x_c0 | x_c1 | y_c0 | y_c1      (128 bytes)  x = x_c0 + x_c1*u

The all-zero encoding is the point at infinity. Decoding does NOT check the
curve equation; use ``is_on_curve()`` where the source is not trusted.
Arithmetic is delegated to ``py_ecc.optimized_bn128`` (projective coords);
``to_py_ecc`` / ``from_py_ecc`` convert at the boundary.

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from py_ecc.optimized_bn128 import FQ, FQ2, Z1, Z2, b, b2, is_inf, is_on_curve, normalize

from ..errors import FormatError
from .field import FIELD_BYTES, Q, Fq2, decode_field_be, encode_field_be

G1_BYTES = 2 * FIELD_BYTES
G2_BYTES = 4 * FIELD_BYTES


def _int(c: Any) -> int:
    # optimized FQ2 keeps int coeffs; reference FQ2 keeps FQ objects
    return int(c.n) if hasattr(c, "n") else int(c)


@dataclass(frozen=True)
class AffinePointG1:
    x: int
    y: int

    @classmethod
    def infinity(cls) -> "AffinePointG1":
        return cls(0, 0)

    @property
    def is_infinity(self) -> bool:
        return self.x == 0 and self.y == 0

    def is_on_curve(self) -> bool:
        return self.is_infinity or bool(is_on_curve(self.to_py_ecc(), b))

    def to_py_ecc(self) -> Tuple[FQ, FQ, FQ]:
        if self.is_infinity:
            return Z1
        return (FQ(self.x), FQ(self.y), FQ.one())

    @classmethod
    def from_py_ecc(cls, pt: Any) -> "AffinePointG1":
        if is_inf(pt):
            return cls.infinity()
        x, y = normalize(pt)
        return cls(_int(x), _int(y))

    def negate(self) -> "AffinePointG1":
        if self.is_infinity:
            return self
        return AffinePointG1(self.x, (-self.y) % Q)

    def to_bytes(self) -> bytes:
        return encode_g1(self)


@dataclass(frozen=True)
class AffinePointG2:
    x: Fq2
    y: Fq2

    @classmethod
    def infinity(cls) -> "AffinePointG2":
        return cls((0, 0), (0, 0))

    @property
    def is_infinity(self) -> bool:
        return self.x == (0, 0) and self.y == (0, 0)

    def is_on_curve(self) -> bool:
        return self.is_infinity or bool(is_on_curve(self.to_py_ecc(), b2))

    def to_py_ecc(self) -> Tuple[FQ2, FQ2, FQ2]:
        if self.is_infinity:
            return Z2
        return (FQ2(list(self.x)), FQ2(list(self.y)), FQ2.one())

    @classmethod
    def from_py_ecc(cls, pt: Any) -> "AffinePointG2":
        if is_inf(pt):
            return cls.infinity()
        x, y = normalize(pt)
        return cls(
            (_int(x.coeffs[0]), _int(x.coeffs[1])),
            (_int(y.coeffs[0]), _int(y.coeffs[1])),
        )

    def to_bytes(self) -> bytes:
        return encode_g2(self)


# --- raw codec -------------------------------------------------------------------


def decode_g1(data: bytes, *, offset: int | None = None) -> AffinePointG1:
    if len(data) != G1_BYTES:
        raise FormatError(f"G1 payload must be {G1_BYTES} bytes, got {len(data)}", offset=offset)
    return AffinePointG1(decode_field_be(data[:32]), decode_field_be(data[32:64]))


def encode_g1(p: AffinePointG1) -> bytes:
    return encode_field_be(p.x) + encode_field_be(p.y)


def decode_g2(data: bytes, *, offset: int | None = None) -> AffinePointG2:
    if len(data) != G2_BYTES:
        raise FormatError(f"G2 payload must be {G2_BYTES} bytes, got {len(data)}", offset=offset)
    limbs = [decode_field_be(data[i : i + 32]) for i in range(0, G2_BYTES, 32)]
    return AffinePointG2((limbs[0], limbs[1]), (limbs[2], limbs[3]))


def encode_g2(p: AffinePointG2) -> bytes:
    return b"".join(encode_field_be(v) for v in (p.x[0], p.x[1], p.y[0], p.y[1]))


# --- convenience ----------------------------------------------------------------


def is_on_curve_g1(p: AffinePointG1) -> bool:
    return p.is_on_curve()


def is_on_curve_g2(p: AffinePointG2) -> bool:
    return p.is_on_curve()


def b2_coeffs() -> Fq2:
    """Twist coefficient b' = 3 / (9 + u) as (c0, c1)."""
    return (_int(b2.coeffs[0]), _int(b2.coeffs[1]))


__all__ = [
    "G1_BYTES",
    "G2_BYTES",
    "AffinePointG1",
    "AffinePointG2",
    "decode_g1",
    "encode_g1",
    "decode_g2",
    "encode_g2",
    "is_on_curve_g1",
    "is_on_curve_g2",
    "b2_coeffs",
]
