"""
Rank-1 constraint system over the BN254 scalar field.

Wire layout follows circom: wire 0 is the constant ``1``, wires
``1..n_public`` are the public signals (outputs then public inputs), the rest
are private. Each constraint is ``<a, w> * <b, w> = <c, w>`` with sparse
linear combinations ``{wire_index: coefficient}``.

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..curve.field import R
from ..errors import FormatError, InvalidWitnessError

LinearCombination = Mapping[int, int]


def _lc_eval(lc: LinearCombination, w: Sequence[int]) -> int:
    return sum(coeff * w[idx] for idx, coeff in lc.items()) % R


@dataclass(frozen=True)
class Constraint:
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination

    def is_satisfied(self, w: Sequence[int]) -> bool:
        return _lc_eval(self.a, w) * _lc_eval(self.b, w) % R == _lc_eval(self.c, w)


@dataclass(frozen=True)
class ConstraintSystem:
    n_wires: int
    n_public: int
    constraints: Tuple[Constraint, ...]
    wire_names: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.n_wires < 1 or not 0 <= self.n_public < self.n_wires:
            raise FormatError(
                "inconsistent constraint system sizes",
                ctx={"n_wires": self.n_wires, "n_public": self.n_public},
            )
        if not self.constraints:
            raise FormatError("constraint system has no constraints")
        for k, con in enumerate(self.constraints):
            for lc in (con.a, con.b, con.c):
                for idx in lc:
                    if not 0 <= idx < self.n_wires:
                        raise FormatError(
                            f"constraint {k} references wire {idx} out of range",
                            ctx={"constraint": k, "wire": idx, "n_wires": self.n_wires},
                        )

    @property
    def n_constraints(self) -> int:
        return len(self.constraints)

    def wire_name(self, idx: int) -> Optional[str]:
        return self.wire_names[idx] if idx < len(self.wire_names) else None

    def validate_witness(self, witness: Sequence[int]) -> List[int]:
        """
        Check shape, range and satisfaction. Returns the witness as a list.

        Raises InvalidWitnessError naming the offending index or constraint.
        """
        if not isinstance(witness, (list, tuple)):
            raise InvalidWitnessError("witness must be a sequence of field elements")
        if len(witness) != self.n_wires:
            raise InvalidWitnessError(
                "witness length does not match wire count",
                ctx={"expected": self.n_wires, "got": len(witness)},
            )
        for i, v in enumerate(witness):
            if isinstance(v, bool) or not isinstance(v, int):
                raise InvalidWitnessError("witness value is not an integer", index=i, field=self.wire_name(i))
            if not 0 <= v < R:
                raise InvalidWitnessError("witness value outside scalar field", index=i, field=self.wire_name(i))
        if witness[0] != 1:
            raise InvalidWitnessError("wire 0 must carry the constant 1", index=0, field=self.wire_name(0))
        for k, con in enumerate(self.constraints):
            if not con.is_satisfied(witness):
                raise InvalidWitnessError("constraint not satisfied", ctx={"constraint": k})
        return list(witness)

    def public_inputs(self, witness: Sequence[int]) -> List[int]:
        return list(witness[1 : 1 + self.n_public])

    def to_dict(self) -> Dict[str, object]:
        def _lc(lc: LinearCombination) -> Dict[str, str]:
            return {str(k): str(v) for k, v in sorted(lc.items())}

        return {
            "n_wires": self.n_wires,
            "n_public": self.n_public,
            "constraints": [[_lc(c.a), _lc(c.b), _lc(c.c)] for c in self.constraints],
        }


def lc(*terms: Tuple[int, int]) -> Dict[int, int]:
    """lc((wire, coeff), ...) with coefficients reduced mod R; duplicate wires add up."""
    out: Dict[int, int] = {}
    for idx, coeff in terms:
        out[idx] = (out.get(idx, 0) + coeff) % R
    return {k: v for k, v in out.items() if v}


__all__ = ["Constraint", "ConstraintSystem", "LinearCombination", "lc"]
