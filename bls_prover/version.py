"""
Version information for bls_prover.

- __version__: semantic version (PEP 440 core); overridable at build time
  with the env var BLS_PROVER_VERSION
- runtime_banner(): short human-readable banner for logs and `--version`
"""

from __future__ import annotations

import os
import platform

__version__ = os.getenv("BLS_PROVER_VERSION", "0.1.0")


def runtime_banner() -> str:
    """e.g. 'bls-zk-prover 0.1.0 (CPython 3.12.1, groth16/bn254)'"""
    return (
        f"bls-zk-prover {__version__} "
        f"({platform.python_implementation()} {platform.python_version()}, groth16/bn254)"
    )


__all__ = ["__version__", "runtime_banner"]
