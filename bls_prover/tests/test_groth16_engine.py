"""
Groth16 engine over the reference circuit: completeness, soundness against
altered inputs, state handling and witness validation.
"""

from __future__ import annotations

import random

import pytest

from bls_prover.circuit import ReferenceCircuit
from bls_prover.circuit.reference import WIRE_NAMES
from bls_prover.codec.proof import deserialize, serialize
from bls_prover.curve.field import R
from bls_prover.errors import (
    InvalidWitnessError,
    LengthMismatchError,
    ProverError,
    ProverErrorCode,
    SetupNotPerformedError,
)
from bls_prover.groth16 import Groth16Engine, Proof, Ready, Uninitialized, verify_proof
from bls_prover.groth16.qap import interpolate, poly_eval, quotient_poly
from bls_prover.tests import SAMPLE


def test_reference_circuit_shape(constraint_system):
    assert constraint_system.n_wires == 10
    assert constraint_system.n_public == 3
    assert constraint_system.n_constraints == 4


def test_reference_witness_satisfies(constraint_system, witness):
    assert witness[:6] == [1, 123456789, 1, 2, 3, 4]
    assert constraint_system.validate_witness(witness) == witness


def test_interpolate_hits_domain():
    vals = [5, 0, 17, R - 1]
    p = interpolate(vals)
    assert [poly_eval(p, k) for k in range(1, 5)] == vals


def test_quotient_length(constraint_system, witness):
    assert len(quotient_poly(constraint_system, witness)) == 3


def test_engine_states(constraint_system):
    eng = Groth16Engine()
    assert isinstance(eng.state, Uninitialized)
    assert not eng.is_ready
    eng.setup(constraint_system, rng=random.Random(3))
    assert isinstance(eng.state, Ready)
    with pytest.raises(ProverError) as ei:
        eng.setup(constraint_system)
    assert ei.value.code == ProverErrorCode.ALREADY_SET_UP


def test_prove_before_setup_fails(witness):
    eng = Groth16Engine()
    with pytest.raises(SetupNotPerformedError):
        eng.prove(witness)
    with pytest.raises(SetupNotPerformedError):
        eng.verifying_key


def test_verify_before_setup_fails(proof, public_inputs):
    with pytest.raises(SetupNotPerformedError):
        Groth16Engine().verify(proof, public_inputs)


def test_verifying_key_shape(engine):
    vk = engine.verifying_key
    assert len(vk.gamma_abc_g1) == 4
    vk.check_on_curve()
    engine.proving_key.check_shape()


@pytest.mark.slow
def test_prove_verify_roundtrip(engine, proof, public_inputs):
    assert engine.verify(proof, public_inputs) is True


@pytest.mark.slow
@pytest.mark.parametrize("index", [0, 1, 2])
def test_altered_public_input_rejected(engine, proof, public_inputs, index):
    tampered = list(public_inputs)
    tampered[index] = str((int(tampered[index]) + 1) % R)
    assert engine.verify(proof, tampered) is False


@pytest.mark.slow
def test_swapped_proof_points_rejected(engine, proof, public_inputs):
    bad = Proof(a=proof.c, b=proof.b, c=proof.a)
    assert engine.verify(bad, public_inputs) is False


@pytest.mark.slow
def test_public_inputs_reduced_mod_r(engine, proof, public_inputs):
    shifted = [str(int(public_inputs[0]) + R)] + list(public_inputs[1:])
    assert verify_proof(engine.verifying_key, proof, shifted) is True


def test_public_input_count_mismatch(engine, proof, public_inputs):
    with pytest.raises(LengthMismatchError) as ei:
        engine.verify(proof, public_inputs[:2])
    assert ei.value.ctx == {"expected": 3, "got": 2}
    with pytest.raises(LengthMismatchError):
        engine.verify(proof, public_inputs + ["0"])


@pytest.mark.slow
def test_proofs_are_randomized(engine, witness, public_inputs):
    p1 = engine.prove(witness)
    p2 = engine.prove(witness)
    assert p1 != p2
    for p in (p1, p2):
        assert engine.verify(p, public_inputs) is True
        assert deserialize(serialize(p)) == p


def test_seeded_prover_is_reproducible(engine, witness):
    assert engine.prove(witness, rng=random.Random(5)) == engine.prove(witness, rng=random.Random(5))


def test_unsatisfying_witness_rejected(engine, witness):
    bad = list(witness)
    bad[6] = (bad[6] + 1) % R
    with pytest.raises(InvalidWitnessError) as ei:
        engine.prove(bad)
    assert ei.value.ctx["constraint"] == 0


@pytest.mark.parametrize(
    "mutate, index",
    [
        (lambda w: w.__setitem__(4, R), 4),
        (lambda w: w.__setitem__(5, -1), 5),
        (lambda w: w.__setitem__(2, "1"), 2),
        (lambda w: w.__setitem__(3, True), 3),
        (lambda w: w.__setitem__(0, 2), 0),
    ],
)
def test_malformed_witness_values(engine, witness, mutate, index):
    bad = list(witness)
    mutate(bad)
    with pytest.raises(InvalidWitnessError) as ei:
        engine.prove(bad)
    assert ei.value.ctx["index"] == index
    assert ei.value.ctx["field"] == WIRE_NAMES[index]


def test_wrong_witness_length(engine, witness):
    with pytest.raises(InvalidWitnessError):
        engine.prove(witness[:-1])


def test_reference_circuit_rejects_non_numeric():
    with pytest.raises(InvalidWitnessError) as ei:
        ReferenceCircuit().compute_witness({**SAMPLE, "signatureX": "abc"})
    assert ei.value.ctx["field"] == "signatureX"


def test_reference_circuit_missing_signal():
    signals = dict(SAMPLE)
    del signals["publicKeyY"]
    with pytest.raises(InvalidWitnessError) as ei:
        ReferenceCircuit().compute_witness(signals)
    assert ei.value.ctx["field"] == "publicKeyY"
