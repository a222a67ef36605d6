"""
bls_prover.tests helpers

Utilities and environment defaults shared by the bls_prover test-suite.

Exports:
- env_flag(name, default=False) -> bool
- configure_test_logging() -> None
- sample_signals(**overrides) -> dict
- sample_inputs(**overrides) -> ProofInputs

Environment toggles:
- BLS_PROVER_TEST_LOG=1   -> enable INFO logging for bls_prover.*
"""

from __future__ import annotations

import logging
import os
from typing import Dict

SAMPLE = {
    "messageHash": "123456789",
    "publicKeyX": "1",
    "publicKeyY": "2",
    "signatureX": "3",
    "signatureY": "4",
}


def env_flag(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def configure_test_logging(level: int | None = None) -> None:
    """Configure basic logging for bls_prover.* loggers when BLS_PROVER_TEST_LOG is set."""
    if level is None:
        level = logging.INFO
    if env_flag("BLS_PROVER_TEST_LOG", False):
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        logging.getLogger("bls_prover").setLevel(level)


def sample_signals(**overrides: str) -> Dict[str, str]:
    out = dict(SAMPLE)
    out.update(overrides)
    return out


def sample_inputs(**overrides: str):
    from bls_prover.inputs import ProofInputs

    return ProofInputs.from_signals(sample_signals(**overrides))


configure_test_logging()

__all__ = [
    "SAMPLE",
    "env_flag",
    "configure_test_logging",
    "sample_signals",
    "sample_inputs",
]
