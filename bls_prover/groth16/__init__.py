"""Groth16 proving system over BN254: R1CS/QAP, key types and the setup/prove/verify engine."""

from .engine import Groth16Engine, Ready, Uninitialized, verify_proof
from .keys import Proof, ProvingKey, VerifyingKey
from .r1cs import Constraint, ConstraintSystem, lc

__all__ = [
    "Groth16Engine",
    "Ready",
    "Uninitialized",
    "verify_proof",
    "Proof",
    "ProvingKey",
    "VerifyingKey",
    "Constraint",
    "ConstraintSystem",
    "lc",
]
