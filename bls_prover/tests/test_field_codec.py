"""
Field and point codec tests: 32-byte big-endian field elements, decimal
parsing with mod-r reduction, and the raw G1/G2 encodings.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st
from py_ecc.optimized_bn128 import G1, G2, multiply

from bls_prover.curve import (
    Q,
    R,
    AffinePointG1,
    AffinePointG2,
    decode_field_be,
    decode_g1,
    decode_g2,
    encode_field_be,
    encode_g1,
    encode_g2,
    parse_decimal_field,
)
from bls_prover.curve.field import fq2_mul, fq2_sqrt, fq_sqrt
from bls_prover.errors import FormatError


@given(st.integers(min_value=0, max_value=Q - 1))
def test_field_encode_decode_inverse(v):
    data = encode_field_be(v)
    assert len(data) == 32
    assert decode_field_be(data) == v


def test_decode_reduces_mod_q():
    raw = (Q + 5).to_bytes(32, "big")
    assert decode_field_be(raw) == 5


def test_encode_rejects_negative_and_oversized():
    with pytest.raises(FormatError):
        encode_field_be(-1)
    with pytest.raises(FormatError):
        encode_field_be(1 << 256)


def test_decimal_parse_reduces_mod_r():
    assert parse_decimal_field("123456789") == 123456789
    assert parse_decimal_field(str(R)) == 0
    assert parse_decimal_field(str(R + 7)) == 7


@pytest.mark.parametrize("bad", ["", "-1", "0x10", "12a", " 1", "1.0", "١٢"])
def test_decimal_parse_rejects_non_digits(bad):
    with pytest.raises(FormatError) as ei:
        parse_decimal_field(bad, field="signatureX")
    assert ei.value.ctx["field"] == "signatureX"


def test_decimal_parse_rejects_bool():
    with pytest.raises(FormatError):
        parse_decimal_field(True)


def _g1(k: int) -> AffinePointG1:
    return AffinePointG1.from_py_ecc(multiply(G1, k))


def _g2(k: int) -> AffinePointG2:
    return AffinePointG2.from_py_ecc(multiply(G2, k))


def test_g1_generator_encoding():
    data = encode_g1(_g1(1))
    assert len(data) == 64
    assert data[:32] == (1).to_bytes(32, "big")
    assert data[32:] == (2).to_bytes(32, "big")
    assert decode_g1(data) == _g1(1)


def test_g2_limb_order_is_c0_c1():
    p = _g2(1)
    data = encode_g2(p)
    assert len(data) == 128
    assert int.from_bytes(data[:32], "big") == p.x[0]
    assert int.from_bytes(data[32:64], "big") == p.x[1]
    assert decode_g2(data) == p


def test_point_decode_wrong_length():
    with pytest.raises(FormatError):
        decode_g1(b"\x00" * 63)
    with pytest.raises(FormatError):
        decode_g2(b"\x00" * 127)


def test_on_curve_checks():
    assert _g1(5).is_on_curve()
    assert _g2(5).is_on_curve()
    assert AffinePointG1.infinity().is_on_curve()
    assert not AffinePointG1(1, 3).is_on_curve()
    p = _g2(3)
    assert not AffinePointG2(p.x, (p.y[0], (p.y[1] + 1) % Q)).is_on_curve()


def test_negate_is_additive_inverse():
    p = _g1(11)
    n = p.negate()
    assert n.x == p.x and (n.y + p.y) % Q == 0
    assert AffinePointG1.infinity().negate().is_infinity


@given(st.integers(min_value=1, max_value=Q - 1))
def test_fq_sqrt_of_square(v):
    root = fq_sqrt(v * v)
    assert root is not None
    assert root * root % Q == v * v % Q


@given(st.integers(min_value=0, max_value=Q - 1), st.integers(min_value=1, max_value=Q - 1))
def test_fq2_sqrt_of_square(a, b):
    sq = fq2_mul((a, b), (a, b))
    root = fq2_sqrt(sq)
    assert root is not None
    assert fq2_mul(root, root) == sq
