"""
Backend delegating to the circom/snarkjs toolchain.

    witness      node generate_witness.js <wasm> input.json witness.wtns
    prove        snarkjs groth16 prove <zkey> witness.wtns proof.json public.json
    verify       snarkjs groth16 verify <vk> public.json proof.json
    calldata     snarkjs zkey export soliditycalldata public.json proof.json

Every call works in its own temporary directory, so concurrent callers never
share files. Tool output that cannot be interpreted is an error, never a
placeholder value.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..circuit.circom import CircomCircuit
from ..codec.calldata import Calldata, parse_solidity_calldata
from ..codec.proof import proof_from_snarkjs, proof_to_snarkjs
from ..errors import ExternalToolError, FormatError, LengthMismatchError, SetupNotPerformedError
from ..external import run_tool
from ..groth16.keys import Proof
from ..inputs import ProofInputs
from ..logging import get_logger
from ..params.vk_json import load_json, vk_from_json

log = get_logger(__name__)

VALID_PROOF_MARKER = "OK!"
INVALID_PROOF_MARKER = "Invalid proof"


def _write_json(path: Path, obj: Any) -> Path:
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


class SnarkjsBackend:
    name = "snarkjs"

    def __init__(
        self,
        circuit: CircomCircuit,
        zkey_path: Path,
        vk_path: Path,
        *,
        snarkjs: str = "snarkjs",
        timeout: float = 120.0,
    ) -> None:
        self.circuit = circuit
        self.zkey_path = Path(zkey_path)
        self.vk_path = Path(vk_path)
        self.snarkjs = snarkjs
        self.timeout = timeout
        self._vk_doc: Optional[Dict[str, Any]] = None
        self._num_constraints: Optional[int] = None

    @classmethod
    def from_config(cls, cfg) -> "SnarkjsBackend":
        return cls(
            CircomCircuit.from_config(cfg),
            cfg.paths.zkey_path,
            cfg.paths.vk_path,
            snarkjs=cfg.tools.snarkjs,
            timeout=cfg.tools.timeout_s,
        )

    def _run(self, *args: str, cwd: Path):
        return run_tool([self.snarkjs, *args], timeout=self.timeout, cwd=cwd)

    def _vk(self, operation: str) -> Dict[str, Any]:
        if self._vk_doc is None:
            raise SetupNotPerformedError(operation)
        return self._vk_doc

    @property
    def num_constraints(self) -> int:
        if self._num_constraints is None:
            self._num_constraints = self.circuit.derive_constraint_system().n_constraints
        return self._num_constraints

    def setup(self) -> None:
        """Check that the circuit artifacts exist and load the verification key."""
        for path in (self.circuit.wasm_path, self.circuit.witness_script, self.zkey_path, self.vk_path):
            if not Path(path).exists():
                raise FormatError("circuit artifact not found", field=str(path))
        doc = load_json(self.vk_path)
        vk_from_json(doc)
        self._vk_doc = doc
        log.info("snarkjs backend ready", extra={"zkey": str(self.zkey_path), "n_public": doc["nPublic"]})

    def prove(self, inputs: ProofInputs) -> Tuple[Proof, List[str]]:
        self._vk("prove")
        signals = inputs.to_signals()
        with tempfile.TemporaryDirectory(prefix="bls-snarkjs-") as tmp:
            work = Path(tmp)
            input_json = _write_json(work / "input.json", signals)
            wtns = work / "witness.wtns"
            run_tool(
                [
                    self.circuit.node,
                    str(self.circuit.witness_script),
                    str(self.circuit.wasm_path),
                    str(input_json),
                    str(wtns),
                ],
                timeout=self.timeout,
                cwd=work,
            )
            self._run("groth16", "prove", str(self.zkey_path), str(wtns), "proof.json", "public.json", cwd=work)
            proof = proof_from_snarkjs(load_json(work / "proof.json"))
            try:
                public = json.loads((work / "public.json").read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise FormatError("could not read public.json", field="public.json", cause=e) from e
        if not isinstance(public, list):
            raise FormatError("public.json must be a list", field="public.json")
        return proof, [str(x) for x in public]

    def verify(self, proof: Proof, public_inputs: List[str]) -> bool:
        doc = self._vk("verify")
        expected = len(doc["IC"]) - 1
        if len(public_inputs) != expected:
            raise LengthMismatchError(
                "public input count does not match verification key", expected=expected, got=len(public_inputs)
            )
        with tempfile.TemporaryDirectory(prefix="bls-snarkjs-") as tmp:
            work = Path(tmp)
            _write_json(work / "proof.json", proof_to_snarkjs(proof))
            _write_json(work / "public.json", [str(x) for x in public_inputs])
            try:
                proc = self._run("groth16", "verify", str(self.vk_path), "public.json", "proof.json", cwd=work)
            except ExternalToolError as e:
                # exit status 1 covers both a rejected proof and a broken key or input;
                # only the rejection marker means "invalid"
                if INVALID_PROOF_MARKER not in e.stdout + e.stderr:
                    raise
                log.info("snarkjs rejected proof", extra={"returncode": e.ctx.get("returncode")})
                return False
        if VALID_PROOF_MARKER not in (proc.stdout or ""):
            raise ExternalToolError(
                "snarkjs verify printed no verdict", tool=Path(self.snarkjs).name, stdout=proc.stdout or ""
            )
        return True

    def calldata(self, proof: Proof, public_inputs: List[str]) -> Calldata:
        with tempfile.TemporaryDirectory(prefix="bls-snarkjs-") as tmp:
            work = Path(tmp)
            _write_json(work / "proof.json", proof_to_snarkjs(proof))
            _write_json(work / "public.json", [str(x) for x in public_inputs])
            proc = self._run("zkey", "export", "soliditycalldata", "public.json", "proof.json", cwd=work)
        return parse_solidity_calldata(proc.stdout)

    def export_verifying_key(self) -> Dict[str, Any]:
        return dict(self._vk("export_verifying_key"))


__all__ = ["SnarkjsBackend"]
