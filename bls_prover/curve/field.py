"""
BN254 (alt_bn128) field codec.

Two primes matter here:

- ``Q``: base field modulus; curve coordinates live in F_Q (G1) and F_Q2 (G2).
- ``R``: scalar field modulus (group order); witness values and public
  inputs live in F_R.

Field elements are plain Python ints in canonical range. Byte encodings are
32-byte big-endian. Decimal strings are reduced with the same big-endian
mod-order convention circom/snarkjs use (``int(s) % m``), so a public input
given as a decimal string denotes exactly the scalar the witness generator
sees.

License: MIT
"""

from __future__ import annotations

import re
from typing import Optional, Tuple, Union

from py_ecc.optimized_bn128 import FQ, curve_order

from ..errors import FormatError

Q: int = int(FQ.field_modulus)
R: int = int(curve_order)
FIELD_BYTES = 32

FieldElement = int
Fq2 = Tuple[int, int]  # (c0, c1) meaning c0 + c1*u, u^2 = -1

_DECIMAL_RE = re.compile(r"[0-9]+")


def decode_field_be(data: bytes, modulus: int = Q) -> FieldElement:
    """Big-endian bytes → element mod ``modulus``. Never fails."""
    return int.from_bytes(bytes(data), "big") % modulus


def encode_field_be(value: int) -> bytes:
    """Element → 32-byte big-endian. Exact inverse of decode for canonical values."""
    if value < 0 or value.bit_length() > FIELD_BYTES * 8:
        raise FormatError("field element out of encodable range", ctx={"bits": value.bit_length()})
    return int(value).to_bytes(FIELD_BYTES, "big")


def parse_decimal_field(
    text: Union[str, int], modulus: int = R, *, field: Optional[str] = None
) -> FieldElement:
    """
    Parse an arbitrary-precision base-10 string and reduce it mod ``modulus``.

    Only ASCII digits are accepted (no sign, no whitespace, no 0x prefix);
    anything else is a FormatError naming ``field`` when given.
    """
    if isinstance(text, bool):
        raise FormatError("expected decimal string, got bool", field=field)
    if isinstance(text, int):
        if text < 0:
            raise FormatError("negative field element", field=field)
        return text % modulus
    if not isinstance(text, str) or not _DECIMAL_RE.fullmatch(text):
        raise FormatError(f"not a decimal field element: {str(text)[:80]!r}", field=field)
    return int(text) % modulus


def to_decimal(value: int) -> str:
    return str(int(value))


# --- F_Q square roots ----------------------------------------------------------
# Q ≡ 3 (mod 4), so sqrt(a) = a^((Q+1)/4) when a is a square.


def fq_sqrt(a: int) -> Optional[int]:
    a %= Q
    r = pow(a, (Q + 1) // 4, Q)
    return r if r * r % Q == a else None


def fq_is_larger(y: int) -> bool:
    """True if y is the lexicographically larger of {y, -y}."""
    return y > (Q - 1) // 2


# --- F_Q2 helpers ---------------------------------------------------------------


def fq2_mul(a: Fq2, b: Fq2) -> Fq2:
    a0, a1 = a
    b0, b1 = b
    return ((a0 * b0 - a1 * b1) % Q, (a0 * b1 + a1 * b0) % Q)


def fq2_add(a: Fq2, b: Fq2) -> Fq2:
    return ((a[0] + b[0]) % Q, (a[1] + b[1]) % Q)


def fq2_neg(a: Fq2) -> Fq2:
    return ((-a[0]) % Q, (-a[1]) % Q)


def fq2_sqrt(a: Fq2) -> Optional[Fq2]:
    """
    Square root in F_Q2 via the norm: with n = sqrt(a0^2 + a1^2),
    x0 = sqrt((a0 ± n) / 2) and x1 = a1 / (2 x0). Returns None for non-squares.
    """
    a0, a1 = a[0] % Q, a[1] % Q
    if a1 == 0:
        r = fq_sqrt(a0)
        if r is not None:
            return (r, 0)
        r = fq_sqrt(-a0 % Q)
        return None if r is None else (0, r)

    n = fq_sqrt(a0 * a0 + a1 * a1)
    if n is None:
        return None
    half = pow(2, Q - 2, Q)
    x0 = fq_sqrt((a0 + n) * half)
    if x0 is None or x0 == 0:
        x0 = fq_sqrt((a0 - n) * half)
    if x0 is None or x0 == 0:
        return None
    x1 = a1 * pow(2 * x0, Q - 2, Q) % Q
    root = (x0, x1)
    return root if fq2_mul(root, root) == (a0, a1) else None


def fq2_is_larger(y: Fq2) -> bool:
    """Lexicographic (c1, c0) comparison of y against -y."""
    neg = fq2_neg(y)
    return (y[1], y[0]) > (neg[1], neg[0])


__all__ = [
    "Q",
    "R",
    "FIELD_BYTES",
    "FieldElement",
    "Fq2",
    "decode_field_be",
    "encode_field_be",
    "parse_decimal_field",
    "to_decimal",
    "fq_sqrt",
    "fq_is_larger",
    "fq2_mul",
    "fq2_add",
    "fq2_neg",
    "fq2_sqrt",
    "fq2_is_larger",
]
