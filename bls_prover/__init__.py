"""
bls_prover
==========

Groth16 zero-knowledge proofs, over BN254, that a BLS signature verifies
for a given message hash and public key, without revealing the signature.

    from bls_prover import BLSProver, ProofInputs, config

    prover = BLSProver.from_config(config.load())
    prover.setup()
    result, stats = prover.generate_proof(ProofInputs.create(
        message_hash="123456789", public_key_x="1", public_key_y="2",
        signature_x="3", signature_y="4",
    ))
"""

from .batch import BatchProver
from .codec.artifact import BatchProofResult, ProofResult, ProofStats
from .codec.calldata import Calldata, to_calldata
from .codec.proof import deserialize, serialize
from .errors import (
    BatchProvingError,
    CalldataUnavailableError,
    ExternalToolError,
    FormatError,
    InvalidWitnessError,
    LengthMismatchError,
    MissingSectionError,
    ProverError,
    ProverErrorCode,
    ProvingTimeoutError,
    SetupNotPerformedError,
    TruncationError,
)
from .groth16 import Groth16Engine, Proof, ProvingKey, VerifyingKey
from .inputs import PrivateInputs, ProofInputs, PublicInputs
from .prover import BLSProver
from .version import __version__

__all__ = [
    "__version__",
    "BLSProver",
    "BatchProver",
    "Groth16Engine",
    "Proof",
    "ProvingKey",
    "VerifyingKey",
    "ProofInputs",
    "PublicInputs",
    "PrivateInputs",
    "ProofResult",
    "ProofStats",
    "BatchProofResult",
    "Calldata",
    "to_calldata",
    "serialize",
    "deserialize",
    "ProverError",
    "ProverErrorCode",
    "FormatError",
    "TruncationError",
    "MissingSectionError",
    "LengthMismatchError",
    "InvalidWitnessError",
    "SetupNotPerformedError",
    "ExternalToolError",
    "CalldataUnavailableError",
    "ProvingTimeoutError",
    "BatchProvingError",
]
