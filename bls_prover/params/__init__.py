"""
Parameter loaders: the binary section-table container (``.zkey``, plus
circom's ``.wtns``/``.r1cs``) and snarkjs ``verification_key.json``.
"""

from .container import Container, Cursor, Section, read_container, write_container
from .vk_json import load_vk_json, parse_g1, parse_g2, save_vk_json, vk_from_json, vk_to_json
from .zkey import (
    ZKEY_MAGIC,
    load_parameters,
    locate_groth16_section,
    parse_parameters,
    save_parameters,
    write_parameters,
)

__all__ = [
    "Container",
    "Cursor",
    "Section",
    "read_container",
    "write_container",
    "load_vk_json",
    "parse_g1",
    "parse_g2",
    "save_vk_json",
    "vk_from_json",
    "vk_to_json",
    "ZKEY_MAGIC",
    "load_parameters",
    "locate_groth16_section",
    "parse_parameters",
    "save_parameters",
    "write_parameters",
]
