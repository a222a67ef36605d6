"""
Sequential batch proving.

Items are proved one after another in input order. The first failure
aborts the batch with BatchProvingError carrying the zero-based index and
the underlying cause; items after it are never attempted and no partial
result is returned.
"""

from __future__ import annotations

import time
from typing import List, Sequence

from .codec.artifact import BatchProofResult, ProofResult
from .errors import BatchProvingError
from .inputs import ProofInputs
from .logging import bind, get_logger, unbind
from .prover import BLSProver

log = get_logger(__name__)


class BatchProver:
    def __init__(self, prover: BLSProver) -> None:
        self.prover = prover

    def prove_batch(self, inputs: Sequence[ProofInputs]) -> BatchProofResult:
        total = len(inputs)
        started = time.perf_counter()
        proofs: List[ProofResult] = []
        for i, item in enumerate(inputs):
            bind(batch_index=i, batch_total=total)
            try:
                log.info("proving batch item")
                result, _stats = self.prover.generate_proof(item)
            except Exception as e:
                log.error("batch item failed", extra={"error": str(e)})
                raise BatchProvingError(i, e, total=total) from e
            finally:
                unbind("batch_index", "batch_total")
            proofs.append(result)

        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 3)
        log.info("batch complete", extra={"count": total, "elapsed_ms": elapsed_ms})
        return BatchProofResult(
            proofs=proofs,
            aggregated_calldata=b"".join(p.proof for p in proofs),
            total_proving_time_ms=elapsed_ms,
        )


__all__ = ["BatchProver"]
