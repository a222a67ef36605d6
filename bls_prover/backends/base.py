"""Proving backend interface shared by the native engine and the snarkjs adapter."""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, Tuple, runtime_checkable

from ..codec.calldata import Calldata
from ..groth16.keys import Proof
from ..inputs import ProofInputs


@runtime_checkable
class ProvingBackend(Protocol):
    name: str

    @property
    def num_constraints(self) -> int: ...

    def setup(self) -> None: ...

    def prove(self, inputs: ProofInputs) -> Tuple[Proof, List[str]]:
        """Return the proof and the public inputs it commits to, in circuit order."""
        ...

    def verify(self, proof: Proof, public_inputs: List[str]) -> bool: ...

    def calldata(self, proof: Proof, public_inputs: List[str]) -> Calldata: ...

    def export_verifying_key(self) -> Dict[str, Any]: ...


__all__ = ["ProvingBackend"]
