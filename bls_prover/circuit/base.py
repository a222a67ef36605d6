"""
The circuit collaborator: the two operations the prover needs from a
circuit toolchain but does not implement itself.
"""

from __future__ import annotations

from typing import List, Mapping, Protocol, runtime_checkable

from ..groth16.r1cs import ConstraintSystem


@runtime_checkable
class CircuitCollaborator(Protocol):
    name: str

    def compute_witness(self, signals: Mapping[str, str]) -> List[int]:
        """Full witness vector (wire 0 = 1, then public, then private)."""
        ...

    def derive_constraint_system(self) -> ConstraintSystem:
        """R1CS for self-contained setup."""
        ...


__all__ = ["CircuitCollaborator"]
