"""
BN254 pairing product check on top of ``py_ecc.optimized_bn128``.

    check_pairing_product([(P1, Q1), (P2, Q2), ...]) -> bool

returns True iff prod_i e(P_i, Q_i) == 1 in GT. All Miller loops are run
without the final exponentiation, multiplied together, and exponentiated
once at the end. Pairs with an infinity component contribute the identity.

Inputs must be on their curves; ``py_ecc`` asserts this and we surface it as
a ValueError before any work is done.

License: MIT
"""

from __future__ import annotations

from typing import Iterable, Tuple

from py_ecc.optimized_bn128 import FQ12, final_exponentiate, pairing

from .points import AffinePointG1, AffinePointG2

Pair = Tuple[AffinePointG1, AffinePointG2]


def product_of_pairings(pairs: Iterable[Pair]) -> FQ12:
    acc = FQ12.one()
    for p1, q2 in pairs:
        if p1.is_infinity or q2.is_infinity:
            continue
        if not p1.is_on_curve():
            raise ValueError("G1 point is not on curve")
        if not q2.is_on_curve():
            raise ValueError("G2 point is not on curve")
        # py_ecc expects (Q, P)
        acc = acc * pairing(q2.to_py_ecc(), p1.to_py_ecc(), final_exponentiate=False)
    return final_exponentiate(acc)


def check_pairing_product(pairs: Iterable[Pair]) -> bool:
    return product_of_pairings(pairs) == FQ12.one()


__all__ = [
    "product_of_pairings",
    "check_pairing_product",
]
