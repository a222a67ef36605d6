"""Circuit collaborators: the compiled circom circuit and an in-process reference stand-in."""

from .base import CircuitCollaborator
from .circom import CircomCircuit
from .reference import ReferenceCircuit


def make_circuit(cfg) -> CircuitCollaborator:
    if cfg.circuit == "circom":
        return CircomCircuit.from_config(cfg)
    return ReferenceCircuit()


__all__ = ["CircuitCollaborator", "CircomCircuit", "ReferenceCircuit", "make_circuit"]
