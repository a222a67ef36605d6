"""
bls_prover.params.vk_json
=========================

Load and export snarkjs Groth16 verifying keys (``verification_key.json``).

Shape
-----
{
  "protocol": "groth16",
  "curve": "bn128",
  "nPublic": 3,
  "vk_alpha_1": ["<x>", "<y>", "1"],
  "vk_beta_2":  [["<x_c0>", "<x_c1>"], ["<y_c0>", "<y_c1>"], ["1", "0"]],
  "vk_gamma_2": ...,
  "vk_delta_2": ...,
  "vk_alphabeta_12": ...,          (ignored)
  "IC": [["<x>", "<y>", "1"], ...] (length nPublic + 1)
}

Coordinates are decimal strings. snarkjs appends the projective ``z`` (``"1"``,
or ``["1","0"]`` for G2); it is accepted and dropped. The point at infinity is
written ``["0","1","0"]``.

No on-curve validation happens at load: the file is trusted to come from the
same toolchain that generated the deployed verifier. Call
``VerifyingKey.check_on_curve()`` when that assumption does not hold.

License: MIT
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..curve.field import Q, parse_decimal_field
from ..curve.points import AffinePointG1, AffinePointG2
from ..errors import FormatError, LengthMismatchError
from ..groth16.keys import VerifyingKey

JsonLike = Union[str, bytes, os.PathLike, Mapping[str, Any]]

SUPPORTED_CURVES = ("bn128", "bn254", "alt_bn128")


def load_json(source: JsonLike) -> Dict[str, Any]:
    """Load a JSON object from a mapping, a path, bytes or JSON text."""
    if isinstance(source, Mapping):
        return dict(source)
    try:
        if isinstance(source, (bytes, bytearray)):
            doc = json.loads(bytes(source).decode("utf-8"))
        elif isinstance(source, os.PathLike) or (isinstance(source, str) and os.path.isfile(source)):
            with open(source, "r", encoding="utf-8") as f:
                doc = json.load(f)
        else:
            doc = json.loads(str(source))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError(f"could not load JSON: {e}", cause=e) from e
    if not isinstance(doc, dict):
        raise FormatError("expected a JSON object at top level")
    return doc


# -----------------------------------------------------------------------------
# Point parsing
# -----------------------------------------------------------------------------


def _coord(x: Any, field: str) -> int:
    return parse_decimal_field(x, Q, field=field)


def parse_g1(coords: Any, *, field: str = "G1") -> AffinePointG1:
    """[x, y] or snarkjs [x, y, z] with z in {"1", "0"} (z = 0 is infinity)."""
    if not isinstance(coords, (list, tuple)) or len(coords) not in (2, 3):
        raise FormatError("Invalid G1 point", field=field)
    if len(coords) == 3:
        z = _coord(coords[2], field)
        if z == 0:
            return AffinePointG1.infinity()
        if z != 1:
            raise FormatError("Invalid G1 point", field=field, ctx={"reason": "non-affine z"})
    return AffinePointG1(_coord(coords[0], field), _coord(coords[1], field))


def parse_g2(coords: Any, *, field: str = "G2") -> AffinePointG2:
    """[[x_c0, x_c1], [y_c0, y_c1]] with an optional snarkjs ["1","0"] / ["0","0"] z row."""
    if not isinstance(coords, (list, tuple)) or len(coords) not in (2, 3):
        raise FormatError("Invalid G2 point", field=field)
    rows = []
    for row in coords:
        if not isinstance(row, (list, tuple)) or len(row) != 2:
            raise FormatError("Invalid G2 point", field=field)
        rows.append((_coord(row[0], field), _coord(row[1], field)))
    if len(rows) == 3:
        if rows[2] == (0, 0):
            return AffinePointG2.infinity()
        if rows[2] != (1, 0):
            raise FormatError("Invalid G2 point", field=field, ctx={"reason": "non-affine z"})
    return AffinePointG2(rows[0], rows[1])


# -----------------------------------------------------------------------------
# Verifying key
# -----------------------------------------------------------------------------


def vk_from_json(doc: Mapping[str, Any]) -> VerifyingKey:
    for key in ("vk_alpha_1", "vk_beta_2", "vk_gamma_2", "vk_delta_2", "IC"):
        if key not in doc:
            raise FormatError("missing verifying key field", field=key)

    protocol = doc.get("protocol", "groth16")
    if protocol != "groth16":
        raise FormatError(f"unsupported protocol {protocol!r}", field="protocol")
    curve = str(doc.get("curve", "bn128")).lower()
    if curve not in SUPPORTED_CURVES:
        raise FormatError(f"unsupported curve {curve!r}", field="curve")

    ic_raw = doc["IC"]
    if not isinstance(ic_raw, list) or not ic_raw:
        raise FormatError("IC must be a non-empty array", field="IC")
    ic = tuple(parse_g1(p, field=f"IC[{i}]") for i, p in enumerate(ic_raw))

    if "nPublic" in doc:
        n_public = doc["nPublic"]
        if isinstance(n_public, bool) or not isinstance(n_public, int) or n_public < 0:
            raise FormatError("nPublic must be a non-negative integer", field="nPublic")
        if len(ic) != n_public + 1:
            raise LengthMismatchError(
                "IC length does not match nPublic + 1",
                expected=n_public + 1,
                got=len(ic),
                ctx={"field": "IC"},
            )

    return VerifyingKey(
        alpha_g1=parse_g1(doc["vk_alpha_1"], field="vk_alpha_1"),
        beta_g2=parse_g2(doc["vk_beta_2"], field="vk_beta_2"),
        gamma_g2=parse_g2(doc["vk_gamma_2"], field="vk_gamma_2"),
        delta_g2=parse_g2(doc["vk_delta_2"], field="vk_delta_2"),
        gamma_abc_g1=ic,
    )


def load_vk_json(source: JsonLike) -> VerifyingKey:
    return vk_from_json(load_json(source))


# -----------------------------------------------------------------------------
# Export
# -----------------------------------------------------------------------------


def g1_to_json(p: AffinePointG1) -> List[str]:
    if p.is_infinity:
        return ["0", "1", "0"]
    return [str(p.x), str(p.y), "1"]


def g2_to_json(p: AffinePointG2) -> List[List[str]]:
    if p.is_infinity:
        return [["0", "0"], ["1", "0"], ["0", "0"]]
    return [
        [str(p.x[0]), str(p.x[1])],
        [str(p.y[0]), str(p.y[1])],
        ["1", "0"],
    ]


def vk_to_json(vk: VerifyingKey) -> Dict[str, Any]:
    """snarkjs-compatible verification_key.json (without vk_alphabeta_12)."""
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": vk.n_public,
        "vk_alpha_1": g1_to_json(vk.alpha_g1),
        "vk_beta_2": g2_to_json(vk.beta_g2),
        "vk_gamma_2": g2_to_json(vk.gamma_g2),
        "vk_delta_2": g2_to_json(vk.delta_g2),
        "IC": [g1_to_json(p) for p in vk.gamma_abc_g1],
    }


def save_vk_json(vk: VerifyingKey, path: Union[str, Path]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(vk_to_json(vk), indent=1) + "\n", encoding="utf-8")
    return p


__all__ = [
    "load_json",
    "parse_g1",
    "parse_g2",
    "vk_from_json",
    "load_vk_json",
    "g1_to_json",
    "g2_to_json",
    "vk_to_json",
    "save_vk_json",
]
