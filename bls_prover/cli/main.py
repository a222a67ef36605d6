"""
bls-prover - command-line front end for the BLS Groth16 prover.

Commands:
  setup       load or generate parameters; optionally export verification_key.json
  prove       prove one input set (or a JSON list of them) and write a proof artifact
  verify      verify a proof artifact against the configured verifying key
  benchmark   time repeated proofs
  inspect     show the section table of a parameter container or a VK summary

Global options:
  --config PATH          TOML/JSON config file (BLS_PROVER_CONFIG)
  --backend TEXT         native | snarkjs
  --circuit TEXT         reference | circom (native backend)
  --circuit-dir PATH     circuit root; build artifacts live under <dir>/build
  --build-dir PATH       override the build directory
  --json                 machine-readable output

Examples:
  bls-prover setup --export-vk build/verification_key.json
  bls-prover prove --message-hash 123456789 --public-key-x 1 --public-key-y 2 \\
      --signature-x 3 --signature-y 4 --out proof.json
  bls-prover verify proof.json
  bls-prover --backend snarkjs --circuit-dir ./circuits prove --inputs input.json
"""

from __future__ import annotations

import json
import statistics
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import msgspec
import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .. import config as config_mod
from ..batch import BatchProver
from ..codec.artifact import ProofArtifact, ProofStats, read_artifact, write_artifact
from ..errors import ProverError, ProverErrorCode, rethrow_as
from ..inputs import ProofInputs, load_inputs
from ..logging import configure_from_config, get_logger, trace_scope
from ..params.container import read_container
from ..params.vk_json import load_json, save_vk_json, vk_from_json
from ..params.zkey import ZKEY_MAGIC
from ..prover import BLSProver
from ..version import __version__, runtime_banner

app = typer.Typer(
    name="bls-prover",
    help="Groth16 proofs of BLS signature verification over BN254",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)
log = get_logger(__name__)

SAMPLE_INPUTS = ProofInputs.create(
    message_hash="123456789",
    public_key_x="1",
    public_key_y="2",
    signature_x="3",
    signature_y="4",
)


class GlobalContext:
    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.overrides: Dict[str, Any] = {}
        self.json_output: bool = False
        self._cfg: Optional[config_mod.ProverConfig] = None

    def config(self) -> config_mod.ProverConfig:
        if self._cfg is None:
            try:
                self._cfg = config_mod.load(self.config_path, **self.overrides)
            except (OSError, ValueError) as e:
                _die(f"config error: {e}")
            configure_from_config(self._cfg)
        return self._cfg


_ctx = GlobalContext()


def _die(msg: str, code: int = 2) -> None:
    err_console.print(f"[bold red]error:[/] {msg}")
    raise typer.Exit(code)


def _fail(e: ProverError) -> None:
    if _ctx.json_output:
        sys.stdout.write(json.dumps({"ok": False, "error": e.to_dict()}) + "\n")
        raise typer.Exit(2)
    _die(str(e))


def _emit_json(obj: Any) -> None:
    sys.stdout.write(msgspec.json.encode(obj).decode() + "\n")


def _ready_prover() -> BLSProver:
    prover = BLSProver.from_config(_ctx.config())
    prover.setup()
    return prover


def _stats_table(title: str, stats: ProofStats) -> Table:
    t = Table(title=title, box=box.SIMPLE_HEAVY, show_header=False)
    t.add_column("Field", style="bold")
    t.add_column("Value")
    t.add_row("proving", f"{stats.proving_time_ms:.1f} ms")
    t.add_row("verification", f"{stats.verification_time_ms:.1f} ms")
    t.add_row("proof size", f"{stats.proof_size_bytes} bytes")
    t.add_row("constraints", str(stats.num_constraints))
    return t


@app.callback()
def main_callback(
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file", envvar="BLS_PROVER_CONFIG"),
    backend: Optional[str] = typer.Option(None, "--backend", help="native | snarkjs"),
    circuit: Optional[str] = typer.Option(None, "--circuit", help="reference | circom"),
    circuit_dir: Optional[Path] = typer.Option(None, "--circuit-dir", help="Circuit root directory"),
    build_dir: Optional[Path] = typer.Option(None, "--build-dir", help="Build directory override"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON instead of human-readable text"),
) -> None:
    """
    Configuration precedence (highest first): flags, BLS_PROVER_* environment
    variables, config file, built-in defaults.
    """
    _ctx.config_path = config
    _ctx.json_output = json_output
    _ctx._cfg = None
    paths: Dict[str, Any] = {}
    if circuit_dir is not None:
        paths["circuit_dir"] = str(circuit_dir)
    if build_dir is not None:
        paths["build_dir"] = str(build_dir)
    _ctx.overrides = {"backend": backend, "circuit": circuit}
    if paths:
        _ctx.overrides["paths"] = paths


@app.command()
def version() -> None:
    """Print the package version and runtime."""
    if _ctx.json_output:
        _emit_json({"version": __version__, "runtime": runtime_banner()})
        return
    console.print(runtime_banner())


@app.command()
def setup(
    export_vk: Optional[Path] = typer.Option(None, "--export-vk", help="Write snarkjs verification_key.json here"),
) -> None:
    """Load parameters (or run development setup) and report the verifying key shape."""
    try:
        prover = _ready_prover()
        vk = prover.export_verifying_key()
        if export_vk is not None:
            save_vk_json(vk_from_json(vk), export_vk)
    except ProverError as e:
        _fail(e)
        return
    cfg = _ctx.config()
    if _ctx.json_output:
        _emit_json({"ok": True, "backend": cfg.backend, "nPublic": vk["nPublic"], "vk": str(export_vk or "")})
        return
    console.print(f"[green]ready[/] backend={cfg.backend} nPublic={vk['nPublic']}")
    if export_vk is not None:
        console.print(f"verification key written to {export_vk}")


def _collect_inputs(
    inputs: Optional[Path],
    message_hash: Optional[str],
    public_key_x: Optional[str],
    public_key_y: Optional[str],
    signature_x: Optional[str],
    signature_y: Optional[str],
) -> ProofInputs:
    if inputs is not None:
        return load_inputs(inputs)
    values = {
        "message_hash": message_hash,
        "public_key_x": public_key_x,
        "public_key_y": public_key_y,
        "signature_x": signature_x,
        "signature_y": signature_y,
    }
    missing = [k.replace("_", "-") for k, v in values.items() if v is None]
    if missing:
        _die("missing inputs: " + ", ".join("--" + m for m in missing) + " (or pass --inputs FILE)")
    return ProofInputs.create(**values)


@app.command()
def prove(
    inputs: Optional[Path] = typer.Option(None, "--inputs", "-i", help="JSON inputs file"),
    message_hash: Optional[str] = typer.Option(None, "--message-hash"),
    public_key_x: Optional[str] = typer.Option(None, "--public-key-x"),
    public_key_y: Optional[str] = typer.Option(None, "--public-key-y"),
    signature_x: Optional[str] = typer.Option(None, "--signature-x"),
    signature_y: Optional[str] = typer.Option(None, "--signature-y"),
    batch: Optional[Path] = typer.Option(None, "--batch", help="JSON list of input objects"),
    out: Path = typer.Option(Path("proof.json"), "--out", "-o", help="Artifact path (batch: directory)"),
) -> None:
    """Generate a proof and write it as a JSON artifact."""
    with trace_scope():
        try:
            if batch is not None:
                _prove_batch(batch, out)
                return
            item = _collect_inputs(inputs, message_hash, public_key_x, public_key_y, signature_x, signature_y)
            prover = _ready_prover()
            result, stats = prover.generate_proof(item)
            path = write_artifact(out, result, stats)
        except ProverError as e:
            _fail(e)
            return

    if _ctx.json_output:
        _emit_json({"ok": True, "artifact": str(path), "proof": result.proof.hex(), "stats": stats})
        return
    console.print(f"[green]proof written[/] {path}")
    console.print(_stats_table("Proof", stats))


def _prove_batch(batch: Path, out_dir: Path) -> None:
    with rethrow_as(ProverErrorCode.FORMAT, msg="cannot read batch file", path=str(batch)):
        docs = json.loads(batch.read_text(encoding="utf-8"))
    if not isinstance(docs, list):
        _die("batch file must contain a JSON list")
    items: List[ProofInputs] = [load_inputs(json.dumps(d).encode()) for d in docs]
    prover = _ready_prover()
    res = BatchProver(prover).prove_batch(items)
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = [write_artifact(out_dir / f"proof_{i}.json", r) for i, r in enumerate(res.proofs)]
    if _ctx.json_output:
        _emit_json({"ok": True, "count": len(paths), "total_proving_time_ms": res.total_proving_time_ms})
        return
    console.print(
        f"[green]{len(paths)} proofs written[/] to {out_dir} in {res.total_proving_time_ms:.1f} ms"
    )


@app.command()
def verify(
    artifact: Path = typer.Argument(..., exists=True, dir_okay=False, help="Proof artifact JSON"),
) -> None:
    """Verify a proof artifact. Exit status 0 if valid, 1 if invalid."""
    try:
        art: ProofArtifact = read_artifact(artifact)
        prover = _ready_prover()
        ok = prover.verify_proof(art.proof_bytes(), art.public_inputs)
    except ProverError as e:
        _fail(e)
        return
    if _ctx.json_output:
        _emit_json({"ok": True, "valid": ok})
    elif ok:
        console.print("[bold green]valid[/]")
    else:
        console.print("[bold red]invalid[/]")
    if not ok:
        raise typer.Exit(1)


@app.command()
def benchmark(
    iterations: int = typer.Option(3, "--iterations", "-n", min=1, help="Number of proofs"),
    inputs: Optional[Path] = typer.Option(None, "--inputs", "-i", help="JSON inputs file (default: sample)"),
) -> None:
    """Prove the same inputs repeatedly and report timings."""
    try:
        item = load_inputs(inputs) if inputs is not None else SAMPLE_INPUTS
        started = time.perf_counter()
        prover = _ready_prover()
        setup_ms = (time.perf_counter() - started) * 1000.0
        runs = [prover.generate_proof(item)[1] for _ in range(iterations)]
    except ProverError as e:
        _fail(e)
        return

    proving = [s.proving_time_ms for s in runs]
    verifying = [s.verification_time_ms for s in runs]
    summary = {
        "iterations": iterations,
        "setup_ms": round(setup_ms, 3),
        "proving_ms_mean": round(statistics.fmean(proving), 3),
        "proving_ms_min": min(proving),
        "proving_ms_max": max(proving),
        "verification_ms_mean": round(statistics.fmean(verifying), 3),
        "num_constraints": runs[0].num_constraints,
    }
    if _ctx.json_output:
        _emit_json(summary)
        return
    t = Table(title="Benchmark", box=box.SIMPLE_HEAVY, show_header=False)
    t.add_column("Metric", style="bold")
    t.add_column("Value")
    for k, v in summary.items():
        t.add_row(k, str(v))
    console.print(t)


@app.command()
def inspect(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Parameter container or verification_key.json"),
) -> None:
    """Show the section table of a parameter container, or summarize a verification key."""
    try:
        if path.suffix.lower() == ".json":
            doc = load_json(path)
            vk = vk_from_json(doc)
            summary = {
                "protocol": doc.get("protocol", "groth16"),
                "curve": doc.get("curve", "bn128"),
                "nPublic": vk.n_public,
                "IC": len(vk.ic),
            }
            if _ctx.json_output:
                _emit_json(summary)
            else:
                for k, v in summary.items():
                    console.print(f"[bold]{k}[/]: {v}")
            return
        with rethrow_as(ProverErrorCode.FORMAT, msg="cannot read parameter file", path=str(path)):
            data = path.read_bytes()
        container = read_container(data, ZKEY_MAGIC)
    except ProverError as e:
        _fail(e)
        return

    rows = [{"type": s.type, "offset": s.offset, "size": s.size} for s in container.sections]
    if _ctx.json_output:
        _emit_json({"version": container.version, "sections": rows})
        return
    t = Table(title=f"{path.name} (version {container.version})", box=box.SIMPLE_HEAVY)
    t.add_column("Type", justify="right")
    t.add_column("Offset", justify="right")
    t.add_column("Size", justify="right")
    for r in rows:
        t.add_row(str(r["type"]), str(r["offset"]), str(r["size"]))
    console.print(t)


def main() -> None:
    """Entry point for the bls-prover CLI."""
    app()


if __name__ == "__main__":
    main()
