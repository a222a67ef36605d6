"""
BLSProver: the high-level entry point.

    prover = BLSProver.from_config(config.load())
    prover.setup()
    result, stats = prover.generate_proof(inputs)
    assert prover.verify_proof(result.proof, result.public_inputs)

``generate_proof`` verifies every proof locally before returning it, so a
ProofResult is never handed out for a proof the configured key rejects.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .backends import ProvingBackend, make_backend
from .codec.artifact import ProofResult, ProofStats
from .codec.proof import PROOF_BYTES, deserialize, serialize
from .errors import ProverError, ProverErrorCode, ProvingTimeoutError
from .groth16.keys import Proof
from .inputs import ProofInputs, check_reduction
from .logging import get_logger

log = get_logger(__name__)


def _ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000.0, 3)


class BLSProver:
    def __init__(self, backend: ProvingBackend, *, prove_timeout: Optional[float] = None) -> None:
        self.backend = backend
        self.prove_timeout = prove_timeout

    @classmethod
    def from_config(cls, cfg) -> "BLSProver":
        return cls(make_backend(cfg), prove_timeout=cfg.prove_timeout_s)

    def setup(self) -> None:
        started = time.perf_counter()
        self.backend.setup()
        log.info("prover ready", extra={"backend": self.backend.name, "elapsed_ms": _ms(started)})

    def _prove(self, inputs: ProofInputs) -> Tuple[Proof, List[str]]:
        if self.prove_timeout is None:
            return self.backend.prove(inputs)
        # The worker cannot be interrupted; on timeout it is abandoned and its result discarded.
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="bls-prove")
        try:
            future = pool.submit(self.backend.prove, inputs)
            try:
                return future.result(timeout=self.prove_timeout)
            except FutureTimeout as e:
                raise ProvingTimeoutError(self.prove_timeout) from e
        finally:
            pool.shutdown(wait=False)

    def generate_proof(self, inputs: ProofInputs) -> Tuple[ProofResult, ProofStats]:
        check_reduction(inputs)

        started = time.perf_counter()
        proof, public_inputs = self._prove(inputs)
        proving_ms = _ms(started)

        started = time.perf_counter()
        ok = self.backend.verify(proof, public_inputs)
        verification_ms = _ms(started)
        if not ok:
            raise ProverError.wrap(
                ProverErrorCode.UNKNOWN,
                "freshly generated proof failed local verification",
                ctx={"backend": self.backend.name},
            )

        calldata = self.backend.calldata(proof, public_inputs)
        result = ProofResult(proof=serialize(proof), public_inputs=list(public_inputs), calldata=calldata)
        stats = ProofStats(
            proving_time_ms=proving_ms,
            verification_time_ms=verification_ms,
            proof_size_bytes=PROOF_BYTES,
            num_constraints=self.backend.num_constraints,
        )
        log.info(
            "proof generated",
            extra={"proving_ms": proving_ms, "verification_ms": verification_ms, "public_inputs": public_inputs},
        )
        return result, stats

    def verify_proof(self, proof: bytes, public_inputs: Sequence[str]) -> bool:
        """Deserialize a 128-byte proof and verify it. Malformed bytes raise FormatError."""
        return self.backend.verify(deserialize(proof), [str(x) for x in public_inputs])

    def export_verifying_key(self) -> Dict[str, Any]:
        return self.backend.export_verifying_key()


__all__ = ["BLSProver"]
