"""
bls_prover configuration loader.

Layered config with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (BLS_PROVER_*)
    3) Config file (TOML or JSON)
    4) Built-in defaults (lowest)

Artifact paths follow the circom/snarkjs build layout rooted at `circuit_dir`:

    {circuit_dir}/build/bls_verify_js/bls_verify.wasm
    {circuit_dir}/build/bls_verify_js/generate_witness.js
    {circuit_dir}/build/bls_verify.r1cs
    {circuit_dir}/build/bls_verify_final.zkey
    {circuit_dir}/build/verification_key.json

Any of them may be set explicitly; unset ones are derived from `build_dir`.
"""

from __future__ import annotations

import json
import os
import re
import sys
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

BACKENDS = ("native", "snarkjs")
CIRCUITS = ("reference", "circom")

DEFAULT_CIRCUIT_DIR = "circuits"
DEFAULT_TOOL_TIMEOUT_S = 120.0
CIRCUIT_NAME = "bls_verify"


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smh]?)\s*$", re.IGNORECASE)


def _parse_duration(value: str) -> float:
    """
    Parse a tiny duration language into seconds.
      "30" -> 30s, "250ms" -> 0.25s, "2s", "5m", "1h"
    """
    v = value.strip().lower()
    if v.endswith("ms"):
        return float(v[:-2]) / 1000.0
    m = _DURATION_RE.match(v)
    if not m:
        raise ValueError(f"Invalid duration: {value!r}")
    return float(m.group(1)) * {"": 1, "s": 1, "m": 60, "h": 3600}[m.group(2).lower()]


def _env_duration(name: str) -> Optional[float]:
    v = os.environ.get(name)
    if v is None or v.strip() == "":
        return None
    return _parse_duration(v)


# ------------------------------
# Typed configuration model
# ------------------------------


@dataclass
class CircuitPaths:
    circuit_dir: Path
    build_dir: Path
    wasm_path: Path
    witness_script: Path
    r1cs_path: Path
    zkey_path: Path
    vk_path: Path
    params_path: Path  # native parameter container

    @staticmethod
    def derive(circuit_dir: str | Path, build_dir: str | Path | None = None) -> "CircuitPaths":
        root = _expand(circuit_dir)
        build = _expand(build_dir) if build_dir else root / "build"
        js = build / f"{CIRCUIT_NAME}_js"
        return CircuitPaths(
            circuit_dir=root,
            build_dir=build,
            wasm_path=js / f"{CIRCUIT_NAME}.wasm",
            witness_script=js / "generate_witness.js",
            r1cs_path=build / f"{CIRCUIT_NAME}.r1cs",
            zkey_path=build / f"{CIRCUIT_NAME}_final.zkey",
            vk_path=build / "verification_key.json",
            params_path=build / "bls_prover_params.bin",
        )


@dataclass
class ToolsConfig:
    node: str = "node"
    snarkjs: str = "snarkjs"
    timeout_s: float = DEFAULT_TOOL_TIMEOUT_S


@dataclass
class ProverConfig:
    backend: str = "native"  # "native" | "snarkjs"
    circuit: str = "reference"  # "reference" | "circom" (native backend only)
    paths: CircuitPaths = field(default_factory=lambda: CircuitPaths.derive(DEFAULT_CIRCUIT_DIR))
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    prove_timeout_s: Optional[float] = None
    write_params: bool = True  # persist params + verification_key.json after dev setup
    log_level: str = "INFO"
    log_format: Optional[str] = None  # "json" | "text" | None (auto)
    log_file: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        def _normalize(obj: Any) -> Any:
            if isinstance(obj, Path):
                return str(obj)
            if isinstance(obj, dict):
                return {k: _normalize(v) for k, v in obj.items()}
            return obj

        return _normalize(asdict(self))


# ------------------------------
# File loader (TOML / JSON)
# ------------------------------


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(str(path))
    suffix = path.suffix.lower()
    with path.open("rb") as f:
        if suffix in {".toml", ".tml"}:
            return tomllib.load(f)
        if suffix == ".json":
            return json.load(f)
    raise ValueError(f"Unsupported config format: {suffix}. Use .toml or .json")


def _merge_dict(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Nested dict merge: values in b override a; None in b is ignored."""
    out = dict(a)
    for k, v in b.items():
        if v is None:
            continue
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)
        else:
            out[k] = v
    return out


def _env_layer() -> Dict[str, Any]:
    env = os.environ
    layer: Dict[str, Any] = {"paths": {}, "tools": {}}
    if "BLS_PROVER_BACKEND" in env:
        layer["backend"] = env["BLS_PROVER_BACKEND"].strip().lower()
    if "BLS_PROVER_CIRCUIT" in env:
        layer["circuit"] = env["BLS_PROVER_CIRCUIT"].strip().lower()
    for key, var in (
        ("circuit_dir", "BLS_PROVER_CIRCUIT_DIR"),
        ("build_dir", "BLS_PROVER_BUILD_DIR"),
        ("params_path", "BLS_PROVER_PARAMS"),
        ("zkey_path", "BLS_PROVER_ZKEY"),
        ("vk_path", "BLS_PROVER_VK"),
    ):
        if env.get(var):
            layer["paths"][key] = env[var]
    if env.get("BLS_PROVER_NODE"):
        layer["tools"]["node"] = env["BLS_PROVER_NODE"]
    if env.get("BLS_PROVER_SNARKJS"):
        layer["tools"]["snarkjs"] = env["BLS_PROVER_SNARKJS"]
    layer["tools"]["timeout_s"] = _env_duration("BLS_PROVER_TOOL_TIMEOUT")
    layer["prove_timeout_s"] = _env_duration("BLS_PROVER_PROVE_TIMEOUT")
    if "BLS_PROVER_WRITE_PARAMS" in env:
        layer["write_params"] = env["BLS_PROVER_WRITE_PARAMS"].strip().lower() in {"1", "true", "yes", "on"}
    if env.get("BLS_PROVER_LOG_LEVEL"):
        layer["log_level"] = env["BLS_PROVER_LOG_LEVEL"].strip().upper()
    if env.get("BLS_PROVER_LOG_FORMAT"):
        layer["log_format"] = env["BLS_PROVER_LOG_FORMAT"].strip().lower()
    if env.get("BLS_PROVER_LOG_FILE"):
        layer["log_file"] = env["BLS_PROVER_LOG_FILE"]
    return layer


# ------------------------------
# Main loader
# ------------------------------


def load(config_file: Optional[str | Path] = None, **overrides: Any) -> ProverConfig:
    """
    Load the prover configuration.

    Precedence: overrides > env > file > defaults.

    File keys (TOML/JSON):
      backend, circuit, prove_timeout_s, write_params, log_level, log_format, log_file
      paths: { circuit_dir, build_dir, wasm_path, witness_script, r1cs_path,
               zkey_path, vk_path, params_path }
      tools: { node, snarkjs, timeout_s }

    Overrides use the same shape, e.g. load(backend="snarkjs", paths={"circuit_dir": "c"}).
    """
    base: Dict[str, Any] = {
        "backend": "native",
        "circuit": "reference",
        "paths": {"circuit_dir": DEFAULT_CIRCUIT_DIR},
        "tools": asdict(ToolsConfig()),
        "prove_timeout_s": None,
        "write_params": True,
        "log_level": "INFO",
        "log_format": None,
        "log_file": None,
    }

    if config_file:
        base = _merge_dict(base, _load_file(_expand(config_file)))
    base = _merge_dict(base, _env_layer())
    if overrides:
        base = _merge_dict(base, overrides)

    p = base["paths"]
    derived = CircuitPaths.derive(p["circuit_dir"], p.get("build_dir"))
    for key in ("wasm_path", "witness_script", "r1cs_path", "zkey_path", "vk_path", "params_path"):
        if p.get(key):
            setattr(derived, key, _expand(p[key]))

    cfg = ProverConfig(
        backend=str(base["backend"]).lower(),
        circuit=str(base["circuit"]).lower(),
        paths=derived,
        tools=ToolsConfig(
            node=str(base["tools"]["node"]),
            snarkjs=str(base["tools"]["snarkjs"]),
            timeout_s=float(base["tools"]["timeout_s"]),
        ),
        prove_timeout_s=float(base["prove_timeout_s"]) if base["prove_timeout_s"] is not None else None,
        write_params=bool(base["write_params"]),
        log_level=str(base["log_level"]).upper(),
        log_format=base["log_format"],
        log_file=_expand(base["log_file"]) if base["log_file"] else None,
    )
    _validate_config(cfg)
    return cfg


def _validate_config(cfg: ProverConfig) -> None:
    if cfg.backend not in BACKENDS:
        raise ValueError(f"backend must be one of {BACKENDS}, got {cfg.backend!r}")
    if cfg.circuit not in CIRCUITS:
        raise ValueError(f"circuit must be one of {CIRCUITS}, got {cfg.circuit!r}")
    if cfg.tools.timeout_s <= 0:
        raise ValueError("tools.timeout_s must be positive")
    if cfg.prove_timeout_s is not None and cfg.prove_timeout_s <= 0:
        raise ValueError("prove_timeout_s must be positive")
    if cfg.log_format not in (None, "json", "text"):
        raise ValueError(f"log_format must be json|text, got {cfg.log_format!r}")


# ------------------------------
# CLI helper
# ------------------------------


def main(argv: List[str] | None = None) -> int:
    """
    python -m bls_prover.config [path/to/config.toml]   # print effective config as JSON
    """
    argv = list(argv if argv is not None else sys.argv[1:])
    try:
        cfg = load(argv[0] if argv else None)
    except (OSError, ValueError, tomllib.TOMLDecodeError) as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
