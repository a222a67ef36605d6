"""
Groth16 over BN254: setup, prove, verify.

The engine is an explicit two-state machine:

    Uninitialized --setup(cs)-----------> Ready(pk, vk)
                  --load(pk, vk)-------->
                  --from_parameters()-->

Every operation on an ``Uninitialized`` engine raises
``SetupNotPerformedError``; a second transition out of ``Ready`` is refused.

Public API
----------
- Groth16Engine.setup(cs, rng=None) -> VerifyingKey     (development-only parameters)
- Groth16Engine.load(pk, vk)                              (external parameters)
- Groth16Engine.from_parameters(path, vk_json=None)
- Groth16Engine.prove(witness, rng=None) -> Proof
- Groth16Engine.verify(proof, public_inputs) -> bool
- verify_proof(vk, proof, public_inputs) -> bool          (verify-only callers)

Notes
-----
- Setup samples tau, alpha, beta, gamma, delta inside ``_generate_keys`` only;
  none of them is stored, returned or logged.
- Each ``prove`` draws two fresh blinding scalars (r, s) from an OS-backed
  RNG, so repeated proofs of the same witness differ but all verify.
- ``verify`` checks the input count before any pairing work; a mismatch is
  a LengthMismatchError, never ``False``.
- The pairing identity e(A,B) = e(alpha,beta) e(vk_x,gamma) e(C,delta) is
  checked as a single product with one final exponentiation.

License: MIT
"""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from pathlib import Path
from random import Random
from typing import Any, List, Optional, Sequence, Union

from py_ecc.optimized_bn128 import G1, G2, Z1, Z2, add, multiply

from ..curve.field import R, parse_decimal_field
from ..curve.pairing import check_pairing_product
from ..curve.points import AffinePointG1, AffinePointG2
from ..errors import (
    FormatError,
    LengthMismatchError,
    ProverError,
    ProverErrorCode,
    SetupNotPerformedError,
)
from ..logging import get_logger
from .keys import Proof, ProvingKey, VerifyingKey
from .qap import quotient_poly, vanishing_at, wire_evaluations
from .r1cs import ConstraintSystem

log = get_logger(__name__)


# --- states ---------------------------------------------------------------------


@dataclass(frozen=True)
class Uninitialized:
    pass


@dataclass(frozen=True)
class Ready:
    pk: ProvingKey
    vk: VerifyingKey


EngineState = Union[Uninitialized, Ready]


# --- group helpers --------------------------------------------------------------


def _rand_scalar(rng: Random) -> int:
    return rng.randrange(1, R)


def _lincomb(points: Sequence[Any], scalars: Sequence[int], zero: Any) -> Any:
    acc = zero
    for pt, k in zip(points, scalars):
        k %= R
        if k:
            acc = add(acc, multiply(pt, k))
    return acc


def _g1(k: int) -> AffinePointG1:
    return AffinePointG1.from_py_ecc(multiply(G1, k % R))


def _g2(k: int) -> AffinePointG2:
    return AffinePointG2.from_py_ecc(multiply(G2, k % R))


def _as_scalars(public_inputs: Sequence[Union[int, str]]) -> List[int]:
    out = []
    for i, x in enumerate(public_inputs):
        if isinstance(x, str):
            out.append(parse_decimal_field(x, R, field=f"public_inputs[{i}]"))
        elif isinstance(x, int) and not isinstance(x, bool):
            out.append(x % R)
        else:
            raise FormatError("public input must be int or decimal string", field=f"public_inputs[{i}]")
    return out


# --- setup ----------------------------------------------------------------------


def _generate_keys(cs: ConstraintSystem, rng: Random) -> Ready:
    n = cs.n_constraints
    tau = _rand_scalar(rng)
    while vanishing_at(tau, n) == 0:
        tau = _rand_scalar(rng)
    alpha, beta, gamma, delta = (_rand_scalar(rng) for _ in range(4))
    gamma_inv = pow(gamma, R - 2, R)
    delta_inv = pow(delta, R - 2, R)

    u, v, w = wire_evaluations(cs, tau)
    k = [(beta * u[j] + alpha * v[j] + w[j]) % R for j in range(cs.n_wires)]
    t_tau = vanishing_at(tau, n)

    pk = ProvingKey(
        alpha_g1=_g1(alpha),
        beta_g1=_g1(beta),
        beta_g2=_g2(beta),
        delta_g1=_g1(delta),
        delta_g2=_g2(delta),
        a_query=tuple(_g1(x) for x in u),
        b_g1_query=tuple(_g1(x) for x in v),
        b_g2_query=tuple(_g2(x) for x in v),
        h_query=tuple(_g1(pow(tau, i, R) * t_tau * delta_inv) for i in range(n - 1)),
        l_query=tuple(_g1(k[j] * delta_inv) for j in range(cs.n_public + 1, cs.n_wires)),
        constraint_system=cs,
    )
    vk = VerifyingKey(
        alpha_g1=pk.alpha_g1,
        beta_g2=pk.beta_g2,
        gamma_g2=_g2(gamma),
        delta_g2=pk.delta_g2,
        gamma_abc_g1=tuple(_g1(k[j] * gamma_inv) for j in range(cs.n_public + 1)),
    )
    return Ready(pk=pk, vk=vk)


# --- verify ---------------------------------------------------------------------


def verify_proof(vk: VerifyingKey, proof: Proof, public_inputs: Sequence[Union[int, str]]) -> bool:
    """
    Check a proof against a verifying key. Returns False for a well-formed
    proof that does not verify; raises LengthMismatchError when the input
    count does not match ``len(vk.gamma_abc_g1) - 1``.
    """
    expected = len(vk.gamma_abc_g1) - 1
    if len(public_inputs) != expected:
        raise LengthMismatchError(expected=expected, got=len(public_inputs))
    scalars = _as_scalars(public_inputs)

    if not (proof.a.is_on_curve() and proof.b.is_on_curve() and proof.c.is_on_curve()):
        log.debug("proof point not on curve; rejecting")
        return False

    ic = vk.gamma_abc_g1
    try:
        vk_x = AffinePointG1.from_py_ecc(
            add(ic[0].to_py_ecc(), _lincomb([p.to_py_ecc() for p in ic[1:]], scalars, Z1))
        )
        return check_pairing_product(
            [
                (proof.a, proof.b),
                (vk.alpha_g1.negate(), vk.beta_g2),
                (vk_x.negate(), vk.gamma_g2),
                (proof.c.negate(), vk.delta_g2),
            ]
        )
    except ValueError as e:
        # only reachable with a verifying key that is off-curve
        raise FormatError("verifying key point not on curve", field="vk", cause=e) from e


# --- engine ---------------------------------------------------------------------


class Groth16Engine:
    def __init__(self) -> None:
        self._state: EngineState = Uninitialized()
        self._lock = threading.Lock()

    # state ---------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return isinstance(self._state, Ready)

    def _ready(self, operation: str) -> Ready:
        state = self._state
        if not isinstance(state, Ready):
            raise SetupNotPerformedError(operation)
        return state

    def _transition(self, ready: Ready) -> None:
        with self._lock:
            if isinstance(self._state, Ready):
                raise ProverError.wrap(ProverErrorCode.ALREADY_SET_UP, "engine is already set up")
            self._state = ready

    @property
    def proving_key(self) -> ProvingKey:
        return self._ready("proving_key").pk

    @property
    def verifying_key(self) -> VerifyingKey:
        return self._ready("verifying_key").vk

    # transitions ---------------------------------------------------------

    def setup(self, cs: ConstraintSystem, *, rng: Optional[Random] = None) -> VerifyingKey:
        """
        Self-contained setup from a constraint system. The parameters are for
        development only: they are not the output of a ceremony and cannot
        match an already-deployed verifier.
        """
        if self.is_ready:
            raise ProverError.wrap(ProverErrorCode.ALREADY_SET_UP, "engine is already set up")
        log.warning(
            "running development-only Groth16 setup",
            extra={"n_constraints": cs.n_constraints, "n_wires": cs.n_wires, "n_public": cs.n_public},
        )
        ready = _generate_keys(cs, rng or secrets.SystemRandom())
        self._transition(ready)
        return ready.vk

    def load(self, pk: ProvingKey, vk: VerifyingKey) -> None:
        pk.check_shape()
        if vk.n_public != pk.constraint_system.n_public:
            raise LengthMismatchError(
                "verifying key IC does not match constraint system",
                expected=pk.constraint_system.n_public + 1,
                got=len(vk.gamma_abc_g1),
            )
        self._transition(Ready(pk=pk, vk=vk))
        log.info("loaded Groth16 parameters", extra={"n_public": vk.n_public})

    @classmethod
    def from_parameters(
        cls, params_path: Union[str, Path], vk_json: Optional[Union[str, Path]] = None
    ) -> "Groth16Engine":
        """
        Build a Ready engine from a parameter container. When a snarkjs-format
        verification_key.json is given it must describe the same key.
        """
        from ..params.vk_json import load_vk_json
        from ..params.zkey import load_parameters

        pk, vk = load_parameters(params_path)
        if vk_json is not None:
            external = load_vk_json(vk_json)
            if external != vk:
                raise FormatError(
                    "verification key JSON does not match parameter container",
                    field="vk_json",
                    ctx={"params": str(params_path), "vk_json": str(vk_json)},
                )
        engine = cls()
        engine.load(pk, vk)
        return engine

    # operations ----------------------------------------------------------

    def prove(self, witness: Sequence[int], *, rng: Optional[Random] = None) -> Proof:
        ready = self._ready("prove")
        pk = ready.pk
        cs = pk.constraint_system
        w = cs.validate_witness(witness)
        h = quotient_poly(cs, w)

        rng = rng or secrets.SystemRandom()
        r = _rand_scalar(rng)
        s = _rand_scalar(rng)

        delta1 = pk.delta_g1.to_py_ecc()
        a = add(
            add(pk.alpha_g1.to_py_ecc(), _lincomb([p.to_py_ecc() for p in pk.a_query], w, Z1)),
            multiply(delta1, r),
        )
        b2 = add(
            add(pk.beta_g2.to_py_ecc(), _lincomb([p.to_py_ecc() for p in pk.b_g2_query], w, Z2)),
            multiply(pk.delta_g2.to_py_ecc(), s),
        )
        b1 = add(
            add(pk.beta_g1.to_py_ecc(), _lincomb([p.to_py_ecc() for p in pk.b_g1_query], w, Z1)),
            multiply(delta1, s),
        )
        private = w[cs.n_public + 1 :]
        c = _lincomb([p.to_py_ecc() for p in pk.l_query], private, Z1)
        c = add(c, _lincomb([p.to_py_ecc() for p in pk.h_query], h, Z1))
        c = add(c, multiply(a, s))
        c = add(c, multiply(b1, r))
        c = add(c, multiply(delta1, (-r * s) % R))

        return Proof(
            a=AffinePointG1.from_py_ecc(a),
            b=AffinePointG2.from_py_ecc(b2),
            c=AffinePointG1.from_py_ecc(c),
        )

    def verify(self, proof: Proof, public_inputs: Sequence[Union[int, str]]) -> bool:
        return verify_proof(self._ready("verify").vk, proof, public_inputs)


__all__ = [
    "Groth16Engine",
    "EngineState",
    "Uninitialized",
    "Ready",
    "verify_proof",
]
