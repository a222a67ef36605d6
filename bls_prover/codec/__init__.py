"""Proof codec: compressed proof bytes, on-chain calldata and the persisted artifact."""

from .artifact import (
    BatchProofResult,
    ProofArtifact,
    ProofResult,
    ProofStats,
    read_artifact,
    write_artifact,
)
from .calldata import Calldata, parse_solidity_calldata, to_calldata
from .proof import PROOF_BYTES, deserialize, proof_from_snarkjs, proof_to_snarkjs, serialize

__all__ = [
    "BatchProofResult",
    "ProofArtifact",
    "ProofResult",
    "ProofStats",
    "read_artifact",
    "write_artifact",
    "Calldata",
    "parse_solidity_calldata",
    "to_calldata",
    "PROOF_BYTES",
    "deserialize",
    "serialize",
    "proof_from_snarkjs",
    "proof_to_snarkjs",
]
