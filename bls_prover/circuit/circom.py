"""
Compiled circom circuit: witness generation through node and the
circom-emitted ``generate_witness.js``, constraint system from ``.r1cs``.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import List, Mapping

from ..errors import ExternalToolError
from ..external import run_tool
from ..groth16.r1cs import ConstraintSystem
from ..logging import get_logger
from ..params.circom_files import load_r1cs, load_wtns

log = get_logger(__name__)


class CircomCircuit:
    name = "bls_verify"

    def __init__(
        self,
        wasm_path: Path,
        witness_script: Path,
        r1cs_path: Path,
        *,
        node: str = "node",
        timeout: float = 120.0,
    ) -> None:
        self.wasm_path = Path(wasm_path)
        self.witness_script = Path(witness_script)
        self.r1cs_path = Path(r1cs_path)
        self.node = node
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg) -> "CircomCircuit":
        return cls(
            cfg.paths.wasm_path,
            cfg.paths.witness_script,
            cfg.paths.r1cs_path,
            node=cfg.tools.node,
            timeout=cfg.tools.timeout_s,
        )

    def compute_witness(self, signals: Mapping[str, str]) -> List[int]:
        with tempfile.TemporaryDirectory(prefix="bls-wtns-") as tmp:
            work = Path(tmp)
            input_json = work / "input.json"
            witness = work / "witness.wtns"
            input_json.write_text(json.dumps(dict(signals)), encoding="utf-8")
            run_tool(
                [self.node, str(self.witness_script), str(self.wasm_path), str(input_json), str(witness)],
                timeout=self.timeout,
            )
            if not witness.exists():
                raise ExternalToolError("witness generator produced no output", tool=self.node)
            values = load_wtns(witness)
        log.debug("witness computed", extra={"n_wires": len(values)})
        return values

    def derive_constraint_system(self) -> ConstraintSystem:
        return load_r1cs(self.r1cs_path)


__all__ = ["CircomCircuit"]
