"""
Readers for circom's binary outputs, built on the same section-table walker
as the parameter container.

.wtns  (magic "wtns")
    1  header   u32 n8 | prime (n8 bytes LE) | u32 nWitness
    2  values   nWitness x n8 bytes LE

.r1cs  (magic "r1cs")
    1  header   u32 n8 | prime (n8 bytes LE) | u32 nWires | u32 nPubOut |
                u32 nPubIn | u32 nPrvIn | u64 nLabels | u32 nConstraints
    2  constraints, each 3 x LC (u32 nTerms, nTerms x (u32 wire, n8 bytes LE))

Both files must be over the BN254 scalar field.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Union

from ..curve.field import R
from ..errors import FormatError
from ..groth16.r1cs import Constraint, ConstraintSystem
from .container import Container, Cursor, read_container

WTNS_MAGIC = b"wtns"
R1CS_MAGIC = b"r1cs"


def _read_prime(cur: Cursor) -> int:
    n8 = cur.u32()
    at = cur.pos
    prime = cur.uint_le(n8)
    if prime != R:
        raise FormatError(
            "file is not over the BN254 scalar field",
            offset=at,
            section=cur.section,
            ctx={"n8": n8},
        )
    return n8


def read_wtns(data: bytes) -> List[int]:
    container: Container = read_container(data, WTNS_MAGIC)
    head = container.reader(1)
    n8 = _read_prime(head)
    count = head.u32()
    body = container.reader(2)
    values = [body.uint_le(n8) for _ in range(count)]
    for i, v in enumerate(values):
        if v >= R:
            raise FormatError("witness value not reduced", section=2, ctx={"index": i})
    return values


def _read_lc(cur: Cursor, n8: int, n_wires: int) -> Dict[int, int]:
    terms: Dict[int, int] = {}
    for _ in range(cur.u32()):
        at = cur.pos
        wire = cur.u32()
        coeff = cur.uint_le(n8) % R
        if wire >= n_wires:
            raise FormatError("wire index out of range", offset=at, section=cur.section, ctx={"wire": wire})
        terms[wire] = (terms.get(wire, 0) + coeff) % R
    return terms


def read_r1cs(data: bytes) -> ConstraintSystem:
    container = read_container(data, R1CS_MAGIC)
    head = container.reader(1)
    n8 = _read_prime(head)
    n_wires = head.u32()
    n_pub_out = head.u32()
    n_pub_in = head.u32()
    head.u32()  # nPrvIn
    head.u64()  # nLabels
    n_constraints = head.u32()

    body = container.reader(2)
    cons = []
    for _ in range(n_constraints):
        a = _read_lc(body, n8, n_wires)
        b = _read_lc(body, n8, n_wires)
        c = _read_lc(body, n8, n_wires)
        cons.append(Constraint(a, b, c))
    return ConstraintSystem(n_wires=n_wires, n_public=n_pub_out + n_pub_in, constraints=tuple(cons))


def load_wtns(path: Union[str, Path]) -> List[int]:
    return read_wtns(Path(path).read_bytes())


def load_r1cs(path: Union[str, Path]) -> ConstraintSystem:
    return read_r1cs(Path(path).read_bytes())


__all__ = ["WTNS_MAGIC", "R1CS_MAGIC", "read_wtns", "read_r1cs", "load_wtns", "load_r1cs"]
