"""Compressed 128-byte proof encoding and snarkjs proof.json interop."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from py_ecc.optimized_bn128 import G1, G2, multiply

from bls_prover.codec.proof import (
    FLAG_INFINITY,
    FLAG_LARGER,
    PROOF_BYTES,
    compress_g1,
    compress_g2,
    decompress_g1,
    decompress_g2,
    deserialize,
    from_hex,
    proof_from_snarkjs,
    proof_to_snarkjs,
    serialize,
    to_hex,
)
from bls_prover.curve import Q, R, AffinePointG1, AffinePointG2
from bls_prover.errors import FormatError
from bls_prover.groth16 import Proof


def _g1(k):
    return AffinePointG1.from_py_ecc(multiply(G1, k))


def _g2(k):
    return AffinePointG2.from_py_ecc(multiply(G2, k))


def test_serialize_length_and_inverse(proof):
    data = serialize(proof)
    assert len(data) == PROOF_BYTES == 128
    assert deserialize(data) == proof


def test_hex_round_trip(proof):
    text = to_hex(proof)
    assert len(text) == 256
    assert from_hex("0x" + text) == proof


@settings(max_examples=25, deadline=None)
@given(st.integers(min_value=1, max_value=R - 1))
def test_g1_compression(k):
    p = _g1(k)
    assert decompress_g1(compress_g1(p)) == p
    assert decompress_g1(compress_g1(p.negate())) == p.negate()


@settings(max_examples=10, deadline=None)
@given(st.integers(min_value=1, max_value=R - 1))
def test_g2_compression(k):
    p = _g2(k)
    assert decompress_g2(compress_g2(p)) == p


def test_g2_x_order_is_c1_then_c0():
    p = _g2(9)
    raw = compress_g2(p)
    masked = bytes([raw[0] & 0x3F]) + raw[1:]
    assert int.from_bytes(masked[:32], "big") == p.x[1]
    assert int.from_bytes(masked[32:], "big") == p.x[0]


def test_infinity_encoding():
    raw = compress_g1(AffinePointG1.infinity())
    assert raw[0] == FLAG_INFINITY and not any(raw[1:])
    assert decompress_g1(raw).is_infinity
    assert decompress_g2(compress_g2(AffinePointG2.infinity())).is_infinity


@pytest.mark.parametrize("n", [0, 64, 127, 129, 256])
def test_wrong_length_rejected(n):
    with pytest.raises(FormatError):
        deserialize(b"\x00" * n)


def test_bad_infinity_flags_rejected():
    raw = bytes([FLAG_INFINITY | FLAG_LARGER]) + bytes(31)
    with pytest.raises(FormatError):
        decompress_g1(raw)
    raw = bytes([FLAG_INFINITY]) + bytes(30) + b"\x01"
    with pytest.raises(FormatError):
        decompress_g1(raw)


def test_non_canonical_x_rejected():
    raw = bytearray(Q.to_bytes(32, "big"))
    with pytest.raises(FormatError):
        decompress_g1(bytes(raw))


def test_x_not_on_curve_rejected():
    # x^3 + 3 is a non-residue for some small x; find one deterministically
    from bls_prover.curve.field import fq_sqrt

    x = next(x for x in range(1, 100) if fq_sqrt(x**3 + 3) is None)
    with pytest.raises(FormatError):
        decompress_g1(x.to_bytes(32, "big"))


def test_corrupted_proof_bytes(proof):
    data = bytearray(serialize(proof))
    data[96] = FLAG_INFINITY | FLAG_LARGER
    with pytest.raises(FormatError) as ei:
        deserialize(bytes(data))
    assert ei.value.ctx["offset"] == 96


def test_snarkjs_proof_json(proof):
    doc = proof_to_snarkjs(proof)
    assert doc["protocol"] == "groth16"
    assert len(doc["pi_a"]) == 3 and doc["pi_a"][2] == "1"
    assert doc["pi_b"][2] == ["1", "0"]
    assert proof_from_snarkjs(doc) == proof
    assert proof_from_snarkjs({"proof": doc, "publicSignals": ["1"]}) == proof


def test_snarkjs_proof_missing_field(proof):
    doc = proof_to_snarkjs(proof)
    del doc["pi_c"]
    with pytest.raises(FormatError):
        proof_from_snarkjs(doc)


def test_infinity_proof_serializes():
    p = Proof(a=AffinePointG1.infinity(), b=AffinePointG2.infinity(), c=_g1(2))
    assert deserialize(serialize(p)) == p
