"""
R1CS → QAP over F_R on the evaluation domain {1, 2, ..., n}.

Polynomials are lists of coefficients, lowest degree first. Everything is
O(n^2), which is fine for development-size circuits; large circom circuits
go through the snarkjs backend instead.

License: MIT
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..curve.field import R
from ..errors import InvalidWitnessError
from .r1cs import ConstraintSystem

Poly = List[int]


def _inv(x: int) -> int:
    return pow(x % R, R - 2, R)


def poly_trim(p: Poly) -> Poly:
    out = list(p)
    while out and out[-1] == 0:
        out.pop()
    return out


def poly_add(a: Sequence[int], b: Sequence[int]) -> Poly:
    n = max(len(a), len(b))
    return [((a[i] if i < len(a) else 0) + (b[i] if i < len(b) else 0)) % R for i in range(n)]


def poly_sub(a: Sequence[int], b: Sequence[int]) -> Poly:
    return poly_add(a, [(-x) % R for x in b])


def poly_mul(a: Sequence[int], b: Sequence[int]) -> Poly:
    if not a or not b:
        return []
    out = [0] * (len(a) + len(b) - 1)
    for i, x in enumerate(a):
        if x == 0:
            continue
        for j, y in enumerate(b):
            out[i + j] = (out[i + j] + x * y) % R
    return out


def poly_eval(p: Sequence[int], x: int) -> int:
    acc = 0
    for c in reversed(p):
        acc = (acc * x + c) % R
    return acc


def vanishing_poly(n: int) -> Poly:
    """t(x) = (x - 1)(x - 2)...(x - n)"""
    t: Poly = [1]
    for k in range(1, n + 1):
        t = poly_mul(t, [(-k) % R, 1])
    return t


def vanishing_at(x: int, n: int) -> int:
    acc = 1
    for k in range(1, n + 1):
        acc = acc * (x - k) % R
    return acc


def poly_divmod(num: Sequence[int], den: Sequence[int]) -> Tuple[Poly, Poly]:
    num = poly_trim(list(num))
    den = poly_trim(list(den))
    if not den:
        raise ZeroDivisionError("polynomial division by zero")
    if len(num) < len(den):
        return [], num
    inv_lead = _inv(den[-1])
    quot = [0] * (len(num) - len(den) + 1)
    rem = list(num)
    for i in range(len(quot) - 1, -1, -1):
        coeff = rem[i + len(den) - 1] * inv_lead % R
        quot[i] = coeff
        if coeff:
            for j, d in enumerate(den):
                rem[i + j] = (rem[i + j] - coeff * d) % R
    return quot, poly_trim(rem[: len(den) - 1])


def lagrange_basis_at(x: int, n: int) -> List[int]:
    """[L_1(x), ..., L_n(x)] for the domain {1..n}."""
    x %= R
    if 1 <= x <= n:
        return [1 if k == x else 0 for k in range(1, n + 1)]
    t = vanishing_at(x, n)
    out = []
    for k in range(1, n + 1):
        # prod_{j != k} (k - j)
        denom = 1
        for j in range(1, n + 1):
            if j != k:
                denom = denom * (k - j) % R
        out.append(t * _inv((x - k) * denom) % R)
    return out


def interpolate(values: Sequence[int]) -> Poly:
    """Coefficients of the unique p with deg < n and p(k) = values[k-1]."""
    n = len(values)
    t = vanishing_poly(n)
    out = [0] * n
    for k in range(1, n + 1):
        v = values[k - 1] % R
        if v == 0:
            continue
        basis, _ = poly_divmod(t, [(-k) % R, 1])
        scale = v * _inv(poly_eval(basis, k)) % R
        for i, c in enumerate(basis):
            out[i] = (out[i] + scale * c) % R
    return out


def wire_evaluations(cs: ConstraintSystem, x: int) -> Tuple[List[int], List[int], List[int]]:
    """Per-wire u_j(x), v_j(x), w_j(x) at a single point."""
    basis = lagrange_basis_at(x, cs.n_constraints)
    u = [0] * cs.n_wires
    v = [0] * cs.n_wires
    w = [0] * cs.n_wires
    for k, con in enumerate(cs.constraints):
        lk = basis[k]
        if lk == 0:
            continue
        for idx, coeff in con.a.items():
            u[idx] = (u[idx] + coeff * lk) % R
        for idx, coeff in con.b.items():
            v[idx] = (v[idx] + coeff * lk) % R
        for idx, coeff in con.c.items():
            w[idx] = (w[idx] + coeff * lk) % R
    return u, v, w


def quotient_poly(cs: ConstraintSystem, witness: Sequence[int]) -> Poly:
    """
    h(x) = (A(x) B(x) - C(x)) / t(x), padded to n - 1 coefficients.

    A non-zero remainder means the witness does not satisfy the system.
    """
    n = cs.n_constraints
    av, bv, cv = [], [], []
    for con in cs.constraints:
        av.append(sum(c * witness[i] for i, c in con.a.items()) % R)
        bv.append(sum(c * witness[i] for i, c in con.b.items()) % R)
        cv.append(sum(c * witness[i] for i, c in con.c.items()) % R)
    p = poly_sub(poly_mul(interpolate(av), interpolate(bv)), interpolate(cv))
    h, rem = poly_divmod(p, vanishing_poly(n))
    if rem:
        raise InvalidWitnessError("witness does not satisfy the constraint system")
    return h + [0] * (max(n - 1, 0) - len(h))


__all__ = [
    "Poly",
    "poly_add",
    "poly_sub",
    "poly_mul",
    "poly_eval",
    "poly_divmod",
    "vanishing_poly",
    "vanishing_at",
    "lagrange_basis_at",
    "interpolate",
    "wire_evaluations",
    "quotient_poly",
]
