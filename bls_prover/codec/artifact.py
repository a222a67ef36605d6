"""
bls_prover.codec.artifact
=========================

Typed result records (msgspec) and the persisted proof artifact.

Artifact file (JSON)
--------------------
{
  "proof": "<256 hex chars: compressed A | B | C>",
  "publicInputs": ["123456789", "1", "2"],
  "stats": {"proving_time_ms": 412.0, "verification_time_ms": 95.1,
            "proof_size_bytes": 128, "num_constraints": 4},
  "calldata": {"a": [...], "b": [[...], [...]], "c": [...], "inputs": [...]},
  "protocol": "groth16",
  "curve": "bn128"
}

``stats`` and ``calldata`` are optional. This is the document ``verify``
re-loads.

License: MIT
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import msgspec

from ..errors import FormatError
from .calldata import Calldata


class ProofStats(msgspec.Struct, frozen=True):
    """Observational metadata; never affects correctness."""

    proving_time_ms: float
    verification_time_ms: float
    proof_size_bytes: int
    num_constraints: int


class ProofResult(msgspec.Struct, frozen=True, omit_defaults=True):
    proof: bytes
    public_inputs: List[str] = msgspec.field(name="publicInputs")
    calldata: Optional[Calldata] = None


class BatchProofResult(msgspec.Struct, frozen=True):
    """
    ``proofs[i]`` answers ``inputs[i]``.

    ``aggregated_calldata`` is the plain concatenation of the individual proof
    bytes. It is NOT a cryptographic aggregate and proves nothing on its own:
    each 128-byte slice must be verified individually.
    """

    proofs: List[ProofResult]
    aggregated_calldata: bytes
    total_proving_time_ms: float

    def split_aggregated(self, width: int = 128) -> List[bytes]:
        data = self.aggregated_calldata
        return [data[i : i + width] for i in range(0, len(data), width)]


class ProofArtifact(msgspec.Struct, frozen=True, omit_defaults=True):
    proof: str
    public_inputs: List[str] = msgspec.field(name="publicInputs")
    stats: Optional[ProofStats] = None
    calldata: Optional[Calldata] = None
    protocol: str = "groth16"
    curve: str = "bn128"

    @classmethod
    def from_result(cls, result: ProofResult, stats: Optional[ProofStats] = None) -> "ProofArtifact":
        return cls(
            proof=result.proof.hex(),
            public_inputs=list(result.public_inputs),
            stats=stats,
            calldata=result.calldata,
        )

    def proof_bytes(self) -> bytes:
        s = self.proof[2:] if self.proof.startswith(("0x", "0X")) else self.proof
        try:
            return bytes.fromhex(s)
        except ValueError as e:
            raise FormatError("artifact proof is not valid hex", field="proof", cause=e) from e

    def to_result(self) -> ProofResult:
        return ProofResult(proof=self.proof_bytes(), public_inputs=list(self.public_inputs), calldata=self.calldata)


_ENCODER = msgspec.json.Encoder()


def encode_artifact(artifact: ProofArtifact) -> bytes:
    return msgspec.json.format(_ENCODER.encode(artifact), indent=2)


def decode_artifact(data: Union[bytes, str]) -> ProofArtifact:
    try:
        return msgspec.json.decode(data, type=ProofArtifact)
    except msgspec.ValidationError as e:
        raise FormatError(f"invalid proof artifact: {e}", cause=e) from e
    except msgspec.DecodeError as e:
        raise FormatError(f"proof artifact is not valid JSON: {e}", cause=e) from e


def write_artifact(
    path: Union[str, Path], result: ProofResult, stats: Optional[ProofStats] = None
) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(encode_artifact(ProofArtifact.from_result(result, stats)) + b"\n")
    return p


def read_artifact(path: Union[str, Path]) -> ProofArtifact:
    return decode_artifact(Path(path).read_bytes())


__all__ = [
    "ProofStats",
    "ProofResult",
    "BatchProofResult",
    "ProofArtifact",
    "encode_artifact",
    "decode_artifact",
    "write_artifact",
    "read_artifact",
]
