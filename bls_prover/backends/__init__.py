"""Proving backends, selected from ``ProverConfig.backend``."""

from .base import ProvingBackend
from .native import NativeBackend
from .snarkjs import SnarkjsBackend


def make_backend(cfg) -> ProvingBackend:
    if cfg.backend == "snarkjs":
        return SnarkjsBackend.from_config(cfg)
    if cfg.backend == "native":
        return NativeBackend.from_config(cfg)
    raise ValueError(f"unknown backend: {cfg.backend!r}")


__all__ = ["ProvingBackend", "NativeBackend", "SnarkjsBackend", "make_backend"]
