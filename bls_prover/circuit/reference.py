"""
In-process stand-in for the BLS verification circuit.

Same interface as the compiled circuit (signals messageHash, publicKeyX,
publicKeyY public; signatureX, signatureY private) so the native backend can
be exercised without node or circom. It ties the five signals together
algebraically but does NOT check a BLS signature; every assignment of the
inputs has a satisfying witness.

Wires
    0 one | 1 messageHash | 2 publicKeyX | 3 publicKeyY |
    4 signatureX | 5 signatureY | 6 t1 | 7 t2 | 8 t3 | 9 out

Constraints
    signatureX * signatureY        = t1
    publicKeyX * signatureX        = t2
    publicKeyY * signatureY        = t3
    (t1 + t2 + t3) * (messageHash + 1) = out
"""

from __future__ import annotations

from typing import List, Mapping

from ..curve.field import R, parse_decimal_field
from ..errors import FormatError, InvalidWitnessError
from ..groth16.r1cs import Constraint, ConstraintSystem, lc
from ..inputs import SIGNAL_NAMES

WIRE_NAMES = (
    "one",
    "messageHash",
    "publicKeyX",
    "publicKeyY",
    "signatureX",
    "signatureY",
    "t1",
    "t2",
    "t3",
    "out",
)
N_PUBLIC = 3


class ReferenceCircuit:
    name = "bls_verify_reference"

    def derive_constraint_system(self) -> ConstraintSystem:
        one, msg, pkx, pky, sigx, sigy, t1, t2, t3, out = range(len(WIRE_NAMES))
        return ConstraintSystem(
            n_wires=len(WIRE_NAMES),
            n_public=N_PUBLIC,
            constraints=(
                Constraint(lc((sigx, 1)), lc((sigy, 1)), lc((t1, 1))),
                Constraint(lc((pkx, 1)), lc((sigx, 1)), lc((t2, 1))),
                Constraint(lc((pky, 1)), lc((sigy, 1)), lc((t3, 1))),
                Constraint(lc((t1, 1), (t2, 1), (t3, 1)), lc((msg, 1), (one, 1)), lc((out, 1))),
            ),
            wire_names=WIRE_NAMES,
        )

    def compute_witness(self, signals: Mapping[str, str]) -> List[int]:
        values = {}
        for name in SIGNAL_NAMES:
            if name not in signals:
                raise InvalidWitnessError("missing circuit input", field=name)
            try:
                values[name] = parse_decimal_field(signals[name], R, field=name)
            except FormatError as e:
                raise InvalidWitnessError("input is not a decimal field element", field=name, cause=e) from e

        msg = values["messageHash"]
        pkx, pky = values["publicKeyX"], values["publicKeyY"]
        sigx, sigy = values["signatureX"], values["signatureY"]
        t1 = sigx * sigy % R
        t2 = pkx * sigx % R
        t3 = pky * sigy % R
        out = (t1 + t2 + t3) * (msg + 1) % R
        return [1, msg, pkx, pky, sigx, sigy, t1, t2, t3, out]


__all__ = ["ReferenceCircuit", "WIRE_NAMES", "N_PUBLIC"]
