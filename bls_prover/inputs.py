"""
Request-scoped proof inputs for the BLS verification circuit.

Every value is a decimal string denoting a field element. The circuit's
signal names are

    messageHash, publicKeyX, publicKeyY      (public, in this order)
    signatureX, signatureY                   (private)

Reduction hazard
----------------
The witness generator reduces each input modulo the BN254 scalar field r.
A value >= r therefore yields a proof that verifies, but for the reduced
value, which is a different statement than the caller may intend.
``check_reduction`` reports such values. Nothing here rewrites them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Union

import msgspec

from .curve.field import R, parse_decimal_field
from .errors import FormatError, InvalidWitnessError
from .logging import get_logger

log = get_logger(__name__)

PUBLIC_SIGNALS = ("messageHash", "publicKeyX", "publicKeyY")
PRIVATE_SIGNALS = ("signatureX", "signatureY")
SIGNAL_NAMES = PUBLIC_SIGNALS + PRIVATE_SIGNALS

_FIELD_TO_SIGNAL = {
    "message_hash": "messageHash",
    "public_key_x": "publicKeyX",
    "public_key_y": "publicKeyY",
    "signature_x": "signatureX",
    "signature_y": "signatureY",
}


class PublicInputs(msgspec.Struct, frozen=True):
    message_hash: str
    public_key_x: str
    public_key_y: str

    def ordered(self) -> List[str]:
        return [self.message_hash, self.public_key_x, self.public_key_y]


class PrivateInputs(msgspec.Struct, frozen=True):
    signature_x: str
    signature_y: str


class ProofInputs(msgspec.Struct, frozen=True):
    public: PublicInputs
    private: PrivateInputs

    @classmethod
    def create(
        cls,
        *,
        message_hash: str,
        public_key_x: str,
        public_key_y: str,
        signature_x: str,
        signature_y: str,
    ) -> "ProofInputs":
        return cls(
            public=PublicInputs(message_hash, public_key_x, public_key_y),
            private=PrivateInputs(signature_x, signature_y),
        )

    @classmethod
    def from_signals(cls, signals: Mapping[str, object]) -> "ProofInputs":
        missing = [name for name in SIGNAL_NAMES if name not in signals]
        if missing:
            raise FormatError("missing circuit inputs", ctx={"missing": missing})
        v = {name: str(signals[name]) for name in SIGNAL_NAMES}
        return cls.create(
            message_hash=v["messageHash"],
            public_key_x=v["publicKeyX"],
            public_key_y=v["publicKeyY"],
            signature_x=v["signatureX"],
            signature_y=v["signatureY"],
        )

    def _items(self):
        yield "message_hash", self.public.message_hash
        yield "public_key_x", self.public.public_key_x
        yield "public_key_y", self.public.public_key_y
        yield "signature_x", self.private.signature_x
        yield "signature_y", self.private.signature_y

    def to_signals(self) -> Dict[str, str]:
        """
        Circom input document. Each value must be a decimal string; anything
        else is an InvalidWitnessError naming the offending field.
        """
        out: Dict[str, str] = {}
        for name, value in self._items():
            try:
                parse_decimal_field(value, R, field=name)
            except FormatError as e:
                raise InvalidWitnessError("input is not a decimal field element", field=name, cause=e) from e
            out[_FIELD_TO_SIGNAL[name]] = value
        return out

    def public_values(self) -> List[str]:
        return self.public.ordered()


class ReductionHazard(msgspec.Struct, frozen=True):
    field: str
    value: str
    reduced: str


def check_reduction(inputs: ProofInputs, *, warn: bool = True) -> List[ReductionHazard]:
    """Report inputs that are >= r and will be reduced by the witness generator."""
    hazards = []
    for name, value in inputs._items():
        if not (isinstance(value, str) and value.isascii() and value.isdigit()):
            continue
        n = int(value)
        if n >= R:
            hazards.append(ReductionHazard(field=name, value=value, reduced=str(n % R)))
    if warn:
        for h in hazards:
            # public fields only; private values are never logged
            if h.field.startswith(("message", "public")):
                log.warning(
                    "input exceeds scalar field and will be reduced",
                    extra={"field": h.field, "reduced": h.reduced},
                )
            else:
                log.warning("private input exceeds scalar field and will be reduced", extra={"field": h.field})
    return hazards


def load_inputs(source: Union[str, Path, bytes]) -> ProofInputs:
    """
    Read inputs from JSON: either {"public": {...}, "private": {...}} with
    snake_case names, or a flat circom document (messageHash, ...).
    """
    data = Path(source).read_bytes() if isinstance(source, (str, Path)) else source
    try:
        raw = msgspec.json.decode(data)
    except msgspec.DecodeError as e:
        raise FormatError(f"inputs are not valid JSON: {e}", cause=e) from e
    if not isinstance(raw, dict):
        raise FormatError("inputs must be a JSON object")
    if "public" in raw or "private" in raw:
        try:
            return msgspec.convert(raw, type=ProofInputs)
        except msgspec.ValidationError as e:
            raise FormatError(f"invalid inputs: {e}", cause=e) from e
    return ProofInputs.from_signals(raw)


__all__ = [
    "PUBLIC_SIGNALS",
    "PRIVATE_SIGNALS",
    "SIGNAL_NAMES",
    "PublicInputs",
    "PrivateInputs",
    "ProofInputs",
    "ReductionHazard",
    "check_reduction",
    "load_inputs",
]
