"""BN254 field/curve primitives: byte and decimal codecs, affine points, pairing check."""

from .field import Q, R, decode_field_be, encode_field_be, parse_decimal_field
from .pairing import check_pairing_product
from .points import (
    AffinePointG1,
    AffinePointG2,
    decode_g1,
    decode_g2,
    encode_g1,
    encode_g2,
    is_on_curve_g1,
    is_on_curve_g2,
)

__all__ = [
    "Q",
    "R",
    "decode_field_be",
    "encode_field_be",
    "parse_decimal_field",
    "check_pairing_product",
    "AffinePointG1",
    "AffinePointG2",
    "decode_g1",
    "decode_g2",
    "encode_g1",
    "encode_g2",
    "is_on_curve_g1",
    "is_on_curve_g2",
]
