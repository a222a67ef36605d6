import os
import random

import pytest

from bls_prover.circuit import ReferenceCircuit
from bls_prover.groth16 import Groth16Engine
from bls_prover.tests import SAMPLE


@pytest.fixture(scope="session")
def reference_circuit():
    return ReferenceCircuit()


@pytest.fixture(scope="session")
def constraint_system(reference_circuit):
    return reference_circuit.derive_constraint_system()


@pytest.fixture(scope="session")
def engine(constraint_system):
    """A Ready engine over the reference circuit; seeded so failures reproduce."""
    eng = Groth16Engine()
    eng.setup(constraint_system, rng=random.Random(1337))
    return eng


@pytest.fixture(scope="session")
def witness(reference_circuit):
    return reference_circuit.compute_witness(SAMPLE)


@pytest.fixture(scope="session")
def public_inputs(witness):
    return [str(v) for v in witness[1:4]]


@pytest.fixture(scope="session")
def proof(engine, witness):
    return engine.prove(witness)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("BLS_PROVER_") and name not in ("BLS_PROVER_TEST_LOG", "BLS_PROVER_VERSION"):
            monkeypatch.delenv(name, raising=False)
