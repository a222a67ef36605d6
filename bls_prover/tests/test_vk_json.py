"""snarkjs verification_key.json loader and exporter."""

from __future__ import annotations

import json

import pytest
from py_ecc.optimized_bn128 import G1, G2, multiply

from bls_prover.curve import AffinePointG1, AffinePointG2
from bls_prover.errors import FormatError, LengthMismatchError
from bls_prover.params.vk_json import (
    g1_to_json,
    g2_to_json,
    load_vk_json,
    parse_g1,
    parse_g2,
    vk_from_json,
    vk_to_json,
)


def _g1(k):
    return AffinePointG1.from_py_ecc(multiply(G1, k))


def _g2(k):
    return AffinePointG2.from_py_ecc(multiply(G2, k))


def _doc(n_public=3):
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": n_public,
        "vk_alpha_1": g1_to_json(_g1(2)),
        "vk_beta_2": g2_to_json(_g2(3)),
        "vk_gamma_2": g2_to_json(_g2(1)),
        "vk_delta_2": g2_to_json(_g2(5)),
        "IC": [g1_to_json(_g1(7 + i)) for i in range(n_public + 1)],
    }


def test_snarkjs_three_coordinate_form():
    vk = vk_from_json(_doc())
    assert vk.n_public == 3
    assert vk.alpha_g1 == _g1(2)
    assert vk.beta_g2 == _g2(3)
    assert vk.ic[3] == _g1(10)


def test_two_coordinate_form_accepted():
    p = _g1(4)
    assert parse_g1([str(p.x), str(p.y)]) == p
    q = _g2(4)
    assert parse_g2([[str(q.x[0]), str(q.x[1])], [str(q.y[0]), str(q.y[1])]]) == q


def test_infinity_forms():
    assert parse_g1(["0", "1", "0"]).is_infinity
    assert parse_g2([["0", "0"], ["1", "0"], ["0", "0"]]).is_infinity


@pytest.mark.parametrize(
    "coords",
    [
        ["1"],
        ["1", "2", "3", "4"],
        ["1", "2", "5"],
        "1,2",
        ["1", "0x2"],
        None,
    ],
)
def test_invalid_g1(coords):
    with pytest.raises(FormatError, match="Invalid G1 point|not a decimal"):
        parse_g1(coords, field="vk_alpha_1")


@pytest.mark.parametrize(
    "coords",
    [
        [["1", "2"]],
        [["1", "2"], ["3"]],
        [["1", "2"], ["3", "4"], ["2", "0"]],
        ["1", "2"],
    ],
)
def test_invalid_g2(coords):
    with pytest.raises(FormatError, match="Invalid G2 point"):
        parse_g2(coords, field="vk_beta_2")


def test_ic_length_mismatch():
    doc = _doc()
    doc["IC"] = doc["IC"][:-1]
    with pytest.raises(LengthMismatchError) as ei:
        vk_from_json(doc)
    assert ei.value.ctx["expected"] == 4
    assert ei.value.ctx["got"] == 3


@pytest.mark.parametrize("key", ["vk_alpha_1", "vk_beta_2", "vk_gamma_2", "vk_delta_2", "IC"])
def test_missing_field(key):
    doc = _doc()
    del doc[key]
    with pytest.raises(FormatError) as ei:
        vk_from_json(doc)
    assert ei.value.ctx["field"] == key


def test_wrong_protocol_or_curve():
    doc = _doc()
    doc["protocol"] = "plonk"
    with pytest.raises(FormatError):
        vk_from_json(doc)
    doc = _doc()
    doc["curve"] = "bls12381"
    with pytest.raises(FormatError):
        vk_from_json(doc)


def test_export_round_trip(tmp_path):
    vk = vk_from_json(_doc())
    path = tmp_path / "verification_key.json"
    path.write_text(json.dumps(vk_to_json(vk)), encoding="utf-8")
    assert load_vk_json(path) == vk


def test_malformed_json_text():
    with pytest.raises(FormatError):
        load_vk_json(b"{not json")
