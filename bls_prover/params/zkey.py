"""
Groth16 proving-parameter container (``.zkey``-shaped).

Section discovery reads the u32 little-endian magic ``0x7a6b6579``, walks the
section table and locates the Groth16 section (type 2), bounds-checking
every step.

Full key extraction is implemented for the layout written by
``write_parameters``, which keeps snarkjs' section numbering but stores
every field element as canonical 32-byte big-endian:

    1  header        u32 prover type (1 = groth16)
    2  groth16       u32 n8q | q | u32 n8r | r | u32 nVars | u32 nPublic |
                     u32 domainSize | alpha1 | beta1 | beta2 | gamma2 |
                     delta1 | delta2
    3  IC            (nPublic + 1) x G1
    4  constraints   u32 count, then per constraint 3 x LC
                     (LC = u32 nTerms, nTerms x (u32 wire, 32-byte coeff))
    5  A             nVars x G1
    6  B1            nVars x G1
    7  B2            nVars x G2
    8  L             (nVars - nPublic - 1) x G1
    9  H             (domainSize - 1) x G1

snarkjs files start with the ASCII bytes ``zkey`` (u32 LE ``0x79656b7a``)
and store ``q``/``r`` little-endian with points in Montgomery form. They are
rejected with a FormatError at the magic check, and the modulus check in
section 2 would refuse them as well. Their verifying key is read
from ``verification_key.json`` instead (see vk_json).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Tuple, TypeVar, Union

from ..curve.field import FIELD_BYTES, Q, R, decode_field_be, encode_field_be
from ..curve.points import G1_BYTES, G2_BYTES, AffinePointG1, AffinePointG2, decode_g1, decode_g2
from ..errors import FormatError
from ..groth16.keys import ProvingKey, VerifyingKey
from ..groth16.r1cs import Constraint, ConstraintSystem
from ..logging import get_logger
from .container import Container, Cursor, Section, read_container, write_container

log = get_logger(__name__)

ZKEY_MAGIC = 0x7a6b6579  # u32 LE at offset 0
ZKEY_VERSION = 1
PROVER_GROTH16 = 1

SECTION_HEADER = 1
SECTION_GROTH16 = 2
SECTION_IC = 3
SECTION_CONSTRAINTS = 4
SECTION_A = 5
SECTION_B1 = 6
SECTION_B2 = 7
SECTION_L = 8
SECTION_H = 9

T = TypeVar("T")


@dataclass(frozen=True)
class Groth16Header:
    n8q: int
    q: int
    n8r: int
    r: int
    n_vars: int
    n_public: int
    domain_size: int
    alpha_g1: AffinePointG1
    beta_g1: AffinePointG1
    beta_g2: AffinePointG2
    gamma_g2: AffinePointG2
    delta_g1: AffinePointG1
    delta_g2: AffinePointG2


# --- discovery ------------------------------------------------------------------


def read_zkey_container(data: bytes) -> Container:
    return read_container(data, ZKEY_MAGIC)


def locate_groth16_section(data: bytes) -> Section:
    """Magic + section walk + lookup of the Groth16 section (type 2)."""
    return read_zkey_container(data).find_section(SECTION_GROTH16)


# --- point readers ----------------------------------------------------------------


def _g1(cur: Cursor, name: str, *, check: bool = True) -> AffinePointG1:
    at = cur.pos
    p = decode_g1(cur.read(G1_BYTES), offset=at)
    if check and not p.is_on_curve():
        raise FormatError("G1 point not on curve", offset=at, section=cur.section, field=name)
    return p


def _g2(cur: Cursor, name: str, *, check: bool = True) -> AffinePointG2:
    at = cur.pos
    p = decode_g2(cur.read(G2_BYTES), offset=at)
    if check and not p.is_on_curve():
        raise FormatError("G2 point not on curve", offset=at, section=cur.section, field=name)
    return p


def _vector(cur: Cursor, count: int, read: Callable[[Cursor, str], T], name: str) -> Tuple[T, ...]:
    out: List[T] = [read(cur, f"{name}[{i}]") for i in range(count)]
    if cur.remaining:
        raise FormatError(
            "trailing bytes in section",
            offset=cur.pos,
            section=cur.section,
            ctx={"trailing": cur.remaining},
        )
    return tuple(out)


def read_groth16_header(container: Container) -> Groth16Header:
    cur = container.reader(SECTION_GROTH16)
    n8q = cur.u32()
    q_at = cur.pos
    q = cur.uint_be(n8q)
    if n8q != FIELD_BYTES or q != Q:
        raise FormatError(
            "unsupported base field encoding (expected 32-byte big-endian BN254 q)",
            offset=q_at,
            section=SECTION_GROTH16,
            ctx={"n8q": n8q},
        )
    n8r = cur.u32()
    r_at = cur.pos
    r = cur.uint_be(n8r)
    if n8r != FIELD_BYTES or r != R:
        raise FormatError(
            "unsupported scalar field encoding (expected 32-byte big-endian BN254 r)",
            offset=r_at,
            section=SECTION_GROTH16,
            ctx={"n8r": n8r},
        )
    n_vars = cur.u32()
    n_public = cur.u32()
    domain_size = cur.u32()
    if not (0 <= n_public < n_vars) or domain_size < 1:
        raise FormatError(
            "inconsistent Groth16 sizes",
            section=SECTION_GROTH16,
            ctx={"n_vars": n_vars, "n_public": n_public, "domain_size": domain_size},
        )
    header = Groth16Header(
        n8q=n8q,
        q=q,
        n8r=n8r,
        r=r,
        n_vars=n_vars,
        n_public=n_public,
        domain_size=domain_size,
        alpha_g1=_g1(cur, "alpha1"),
        beta_g1=_g1(cur, "beta1"),
        beta_g2=_g2(cur, "beta2"),
        gamma_g2=_g2(cur, "gamma2"),
        delta_g1=_g1(cur, "delta1"),
        delta_g2=_g2(cur, "delta2"),
    )
    return header


def _read_lc(cur: Cursor, n_vars: int) -> dict:
    terms = {}
    for _ in range(cur.u32()):
        at = cur.pos
        wire = cur.u32()
        coeff = decode_field_be(cur.read(FIELD_BYTES), R)
        if wire >= n_vars:
            raise FormatError("wire index out of range", offset=at, section=cur.section, ctx={"wire": wire})
        terms[wire] = coeff
    return terms


def _read_constraints(container: Container, header: Groth16Header) -> ConstraintSystem:
    cur = container.reader(SECTION_CONSTRAINTS)
    count = cur.u32()
    if count != header.domain_size:
        raise FormatError(
            "constraint count does not match domain size",
            section=SECTION_CONSTRAINTS,
            ctx={"count": count, "domain_size": header.domain_size},
        )
    cons = []
    for _ in range(count):
        a = _read_lc(cur, header.n_vars)
        b = _read_lc(cur, header.n_vars)
        c = _read_lc(cur, header.n_vars)
        cons.append(Constraint(a, b, c))
    return ConstraintSystem(n_wires=header.n_vars, n_public=header.n_public, constraints=tuple(cons))


# --- full extraction ------------------------------------------------------------


def parse_parameters(data: bytes) -> Tuple[ProvingKey, VerifyingKey]:
    container = read_zkey_container(data)
    hdr = container.reader(SECTION_HEADER)
    prover = hdr.u32()
    if prover != PROVER_GROTH16:
        raise FormatError("not a Groth16 parameter file", section=SECTION_HEADER, ctx={"prover": prover})

    header = read_groth16_header(container)
    n_vars, n_public, domain = header.n_vars, header.n_public, header.domain_size

    ic = _vector(container.reader(SECTION_IC), n_public + 1, _g1, "IC")
    cs = _read_constraints(container, header)
    a_query = _vector(container.reader(SECTION_A), n_vars, _g1, "A")
    b_g1 = _vector(container.reader(SECTION_B1), n_vars, _g1, "B1")
    b_g2 = _vector(container.reader(SECTION_B2), n_vars, _g2, "B2")
    l_query = _vector(container.reader(SECTION_L), n_vars - n_public - 1, _g1, "L")
    h_query = _vector(container.reader(SECTION_H), domain - 1, _g1, "H")

    pk = ProvingKey(
        alpha_g1=header.alpha_g1,
        beta_g1=header.beta_g1,
        beta_g2=header.beta_g2,
        delta_g1=header.delta_g1,
        delta_g2=header.delta_g2,
        a_query=a_query,
        b_g1_query=b_g1,
        b_g2_query=b_g2,
        h_query=h_query,
        l_query=l_query,
        constraint_system=cs,
    )
    vk = VerifyingKey(
        alpha_g1=header.alpha_g1,
        beta_g2=header.beta_g2,
        gamma_g2=header.gamma_g2,
        delta_g2=header.delta_g2,
        gamma_abc_g1=ic,
    )
    return pk, vk


def load_parameters(path: Union[str, Path]) -> Tuple[ProvingKey, VerifyingKey]:
    p = Path(path)
    data = p.read_bytes()
    pk, vk = parse_parameters(data)
    log.info(
        "parameters loaded",
        extra={"path": str(p), "bytes": len(data), "n_public": vk.n_public,
               "n_constraints": pk.constraint_system.n_constraints},
    )
    return pk, vk


# --- writer ---------------------------------------------------------------------


def _u32(v: int) -> bytes:
    return struct.pack("<I", v)


def _lc_bytes(lc) -> bytes:
    out = bytearray(_u32(len(lc)))
    for wire, coeff in sorted(lc.items()):
        out += _u32(wire) + encode_field_be(coeff % R)
    return bytes(out)


def write_parameters(pk: ProvingKey, vk: VerifyingKey) -> bytes:
    cs = pk.constraint_system
    groth16 = b"".join(
        [
            _u32(FIELD_BYTES),
            encode_field_be(Q),
            _u32(FIELD_BYTES),
            encode_field_be(R),
            _u32(cs.n_wires),
            _u32(cs.n_public),
            _u32(cs.n_constraints),
            pk.alpha_g1.to_bytes(),
            pk.beta_g1.to_bytes(),
            pk.beta_g2.to_bytes(),
            vk.gamma_g2.to_bytes(),
            pk.delta_g1.to_bytes(),
            pk.delta_g2.to_bytes(),
        ]
    )
    constraints = _u32(cs.n_constraints) + b"".join(
        _lc_bytes(c.a) + _lc_bytes(c.b) + _lc_bytes(c.c) for c in cs.constraints
    )
    sections = [
        (SECTION_HEADER, _u32(PROVER_GROTH16)),
        (SECTION_GROTH16, groth16),
        (SECTION_IC, b"".join(p.to_bytes() for p in vk.gamma_abc_g1)),
        (SECTION_CONSTRAINTS, constraints),
        (SECTION_A, b"".join(p.to_bytes() for p in pk.a_query)),
        (SECTION_B1, b"".join(p.to_bytes() for p in pk.b_g1_query)),
        (SECTION_B2, b"".join(p.to_bytes() for p in pk.b_g2_query)),
        (SECTION_L, b"".join(p.to_bytes() for p in pk.l_query)),
        (SECTION_H, b"".join(p.to_bytes() for p in pk.h_query)),
    ]
    return write_container(ZKEY_MAGIC, ZKEY_VERSION, sections)


def save_parameters(path: Union[str, Path], pk: ProvingKey, vk: VerifyingKey) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = write_parameters(pk, vk)
    p.write_bytes(data)
    log.info("parameters written", extra={"path": str(p), "bytes": len(data)})
    return p


__all__ = [
    "ZKEY_MAGIC",
    "SECTION_GROTH16",
    "Groth16Header",
    "read_zkey_container",
    "locate_groth16_section",
    "read_groth16_header",
    "parse_parameters",
    "load_parameters",
    "write_parameters",
    "save_parameters",
]
