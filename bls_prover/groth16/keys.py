"""
Groth16 key and proof value types.

All of them are frozen: keys are produced once (setup or load) and are
read-only afterwards, so a single instance can back concurrent prove/verify
calls.

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..curve.points import AffinePointG1, AffinePointG2
from ..errors import FormatError
from .r1cs import ConstraintSystem


@dataclass(frozen=True)
class VerifyingKey:
    alpha_g1: AffinePointG1
    beta_g2: AffinePointG2
    gamma_g2: AffinePointG2
    delta_g2: AffinePointG2
    gamma_abc_g1: Tuple[AffinePointG1, ...]  # IC; index 0 is the constant term

    @property
    def ic(self) -> Tuple[AffinePointG1, ...]:
        return self.gamma_abc_g1

    @property
    def n_public(self) -> int:
        return len(self.gamma_abc_g1) - 1

    def check_on_curve(self) -> None:
        """Raise FormatError naming the first point that is off its curve."""
        for name in ("alpha_g1", "beta_g2", "gamma_g2", "delta_g2"):
            if not getattr(self, name).is_on_curve():
                raise FormatError("verifying key point not on curve", field=name)
        for i, p in enumerate(self.gamma_abc_g1):
            if not p.is_on_curve():
                raise FormatError("verifying key point not on curve", field=f"IC[{i}]")


@dataclass(frozen=True)
class ProvingKey:
    alpha_g1: AffinePointG1
    beta_g1: AffinePointG1
    beta_g2: AffinePointG2
    delta_g1: AffinePointG1
    delta_g2: AffinePointG2
    a_query: Tuple[AffinePointG1, ...]  # per wire
    b_g1_query: Tuple[AffinePointG1, ...]  # per wire
    b_g2_query: Tuple[AffinePointG2, ...]  # per wire
    h_query: Tuple[AffinePointG1, ...]  # tau^i t(tau) / delta, i < n_constraints - 1
    l_query: Tuple[AffinePointG1, ...]  # private wires only
    constraint_system: ConstraintSystem

    def check_shape(self) -> None:
        cs = self.constraint_system
        expected = {
            "a_query": cs.n_wires,
            "b_g1_query": cs.n_wires,
            "b_g2_query": cs.n_wires,
            "h_query": max(cs.n_constraints - 1, 0),
            "l_query": cs.n_wires - cs.n_public - 1,
        }
        for name, size in expected.items():
            got = len(getattr(self, name))
            if got != size:
                raise FormatError(
                    "proving key query has wrong length",
                    field=name,
                    ctx={"expected": size, "got": got},
                )


@dataclass(frozen=True)
class Proof:
    a: AffinePointG1
    b: AffinePointG2
    c: AffinePointG1


__all__ = ["VerifyingKey", "ProvingKey", "Proof"]
