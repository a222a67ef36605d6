"""
In-process Groth16 backend.

Parameters come from the native container at ``paths.params_path`` when it
exists. Otherwise the circuit's constraint system is derived and a
development-only setup is run; with ``write_params`` the resulting container
and a snarkjs-format verification_key.json are written next to it so later
runs (and on-chain verifiers generated from that VK) agree.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..circuit import CircuitCollaborator, make_circuit
from ..codec.calldata import Calldata, to_calldata
from ..errors import SetupNotPerformedError
from ..groth16.engine import Groth16Engine
from ..groth16.keys import Proof
from ..inputs import ProofInputs
from ..logging import get_logger
from ..params.vk_json import save_vk_json, vk_to_json
from ..params.zkey import save_parameters

log = get_logger(__name__)


class NativeBackend:
    name = "native"

    def __init__(
        self,
        circuit: CircuitCollaborator,
        *,
        params_path: Optional[Path] = None,
        vk_path: Optional[Path] = None,
        write_params: bool = False,
        engine: Optional[Groth16Engine] = None,
    ) -> None:
        self.circuit = circuit
        self.params_path = Path(params_path) if params_path else None
        self.vk_path = Path(vk_path) if vk_path else None
        self.write_params = write_params
        self.engine = engine or Groth16Engine()

    @classmethod
    def from_config(cls, cfg) -> "NativeBackend":
        return cls(
            make_circuit(cfg),
            params_path=cfg.paths.params_path,
            vk_path=cfg.paths.vk_path,
            write_params=cfg.write_params,
        )

    @property
    def num_constraints(self) -> int:
        return self.engine.proving_key.constraint_system.n_constraints

    def setup(self) -> None:
        if self.params_path is not None and self.params_path.exists():
            vk_json = self.vk_path if self.vk_path is not None and self.vk_path.exists() else None
            self.engine = Groth16Engine.from_parameters(self.params_path, vk_json)
            log.info("parameters loaded", extra={"path": str(self.params_path), "circuit": self.circuit.name})
            return

        cs = self.circuit.derive_constraint_system()
        self.engine.setup(cs)
        if self.write_params and self.params_path is not None:
            save_parameters(self.params_path, self.engine.proving_key, self.engine.verifying_key)
            if self.vk_path is not None:
                save_vk_json(self.engine.verifying_key, self.vk_path)
            log.info(
                "development parameters written",
                extra={"params": str(self.params_path), "vk": str(self.vk_path) if self.vk_path else None},
            )

    def prove(self, inputs: ProofInputs) -> Tuple[Proof, List[str]]:
        if not self.engine.is_ready:
            raise SetupNotPerformedError("prove")
        witness = self.circuit.compute_witness(inputs.to_signals())
        proof = self.engine.prove(witness)
        n_public = self.engine.verifying_key.n_public
        return proof, [str(v) for v in witness[1 : n_public + 1]]

    def verify(self, proof: Proof, public_inputs: List[str]) -> bool:
        return self.engine.verify(proof, public_inputs)

    def calldata(self, proof: Proof, public_inputs: List[str]) -> Calldata:
        return to_calldata(proof, public_inputs)

    def export_verifying_key(self) -> Dict[str, Any]:
        return vk_to_json(self.engine.verifying_key)


__all__ = ["NativeBackend"]
