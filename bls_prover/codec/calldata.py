"""
On-chain verifier calldata.

The snarkjs-generated ``Verifier.sol`` takes

    verifyProof(uint[2] a, uint[2][2] b, uint[2] c, uint[N] input)

with the G2 point's extension-field components in ``[c1, c0]`` order, the
reverse of how they are stored here (``x = c0 + c1*u``). That reversal
happens in exactly one place, ``to_calldata``.

``Calldata.to_solidity()`` renders the same text as
``snarkjs zkey export soliditycalldata``; ``parse_solidity_calldata`` reads
that text back. Anything it cannot parse is reported as
CalldataUnavailableError; there is no fallback to placeholder values.

License: MIT
"""

from __future__ import annotations

import json
from typing import Any, List, Sequence, Union

import msgspec

from ..curve.field import R, parse_decimal_field
from ..errors import CalldataUnavailableError, FormatError
from ..groth16.keys import Proof
from ..logging import get_logger

log = get_logger(__name__)


class Calldata(msgspec.Struct, frozen=True):
    """Decimal-string arguments in Verifier.sol order."""

    a: List[str]
    b: List[List[str]]
    c: List[str]
    inputs: List[str]

    def to_solidity(self) -> str:
        def h(x: str) -> str:
            return '"' + p256(int(x)) + '"'

        return (
            f"[{h(self.a[0])}, {h(self.a[1])}],"
            f"[[{h(self.b[0][0])}, {h(self.b[0][1])}],[{h(self.b[1][0])}, {h(self.b[1][1])}]],"
            f"[{h(self.c[0])}, {h(self.c[1])}],"
            f"[{','.join(h(x) for x in self.inputs)}]"
        )

    def as_args(self) -> List[Any]:
        """Integer arguments, ready for a web3 contract call."""
        return [
            [int(x) for x in self.a],
            [[int(x) for x in row] for row in self.b],
            [int(x) for x in self.c],
            [int(x) for x in self.inputs],
        ]


def p256(n: int) -> str:
    """0x-prefixed, zero-padded 32-byte hex (snarkjs' p256)."""
    return "0x" + format(n, "064x")


def to_calldata(proof: Proof, public_inputs: Sequence[Union[int, str]]) -> Calldata:
    """
    Public inputs may be ints or decimal strings. Values outside [0, r) are
    reduced mod r, the same way the witness generator and the verifier treat
    them, and each reduction is logged as a warning naming the input.
    """
    inputs = []
    for i, x in enumerate(public_inputs):
        name = f"public_inputs[{i}]"
        if isinstance(x, str):
            value = parse_decimal_field(x, R, field=name)
            raw = int(x)
        elif isinstance(x, int) and not isinstance(x, bool):
            value, raw = x % R, x
        else:
            raise FormatError("public input must be int or decimal string", field=name)
        if raw != value:
            log.warning(
                "public input outside scalar field, reduced mod r",
                extra={"field": name, "reduced": str(value)},
            )
        inputs.append(str(value))
    b = proof.b
    return Calldata(
        a=[str(proof.a.x), str(proof.a.y)],
        b=[
            [str(b.x[1]), str(b.x[0])],
            [str(b.y[1]), str(b.y[0])],
        ],
        c=[str(proof.c.x), str(proof.c.y)],
        inputs=inputs,
    )


def _hex_list(items: Any, size: int = -1) -> List[str]:
    if not isinstance(items, list) or (size >= 0 and len(items) != size):
        raise ValueError("unexpected shape")
    out = []
    for x in items:
        if not isinstance(x, str) or not x.lower().startswith("0x"):
            raise ValueError("expected 0x-prefixed hex")
        out.append(str(int(x, 16)))
    return out


def parse_solidity_calldata(text: str) -> Calldata:
    """Parse ``snarkjs zkey export soliditycalldata`` output."""
    source = (text or "").strip()
    try:
        parts = json.loads("[" + source + "]")
        if not isinstance(parts, list) or len(parts) != 4:
            raise ValueError("expected four top-level arrays")
        a = _hex_list(parts[0], 2)
        if not isinstance(parts[1], list) or len(parts[1]) != 2:
            raise ValueError("b must be 2x2")
        b = [_hex_list(row, 2) for row in parts[1]]
        c = _hex_list(parts[2], 2)
        inputs = _hex_list(parts[3])
    except (ValueError, TypeError) as e:
        raise CalldataUnavailableError(f"unrecognized calldata text: {e}", source=source) from e
    return Calldata(a=a, b=b, c=c, inputs=inputs)


__all__ = ["Calldata", "p256", "to_calldata", "parse_solidity_calldata"]
