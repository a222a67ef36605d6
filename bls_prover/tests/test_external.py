"""
External collaborator boundary: subprocess failure mapping, the circom
.wtns/.r1cs readers, CircomCircuit driven by a stand-in witness script and
the snarkjs verify verdicts from a stand-in snarkjs executable.
"""

from __future__ import annotations

import json
import os
import stat
import struct
import sys

import pytest

from bls_prover.backends.snarkjs import SnarkjsBackend
from bls_prover.circuit import CircomCircuit
from bls_prover.curve.field import R
from bls_prover.errors import ExternalToolError, FormatError, ProverErrorCode
from bls_prover.external import run_tool
from bls_prover.params.circom_files import R1CS_MAGIC, WTNS_MAGIC, read_r1cs, read_wtns
from bls_prover.params.container import write_container
from bls_prover.params.vk_json import save_vk_json
from bls_prover.tests import SAMPLE


def _le(v: int) -> bytes:
    return v.to_bytes(32, "little")


def _wtns(values, prime=R) -> bytes:
    header = struct.pack("<I", 32) + _le(prime) + struct.pack("<I", len(values))
    return write_container(WTNS_MAGIC, 2, [(1, header), (2, b"".join(_le(v) for v in values))])


def _lc(lc) -> bytes:
    out = struct.pack("<I", len(lc))
    for wire, coeff in sorted(lc.items()):
        out += struct.pack("<I", wire) + _le(coeff)
    return out


def _r1cs(cs, n_pub_out=0) -> bytes:
    header = (
        struct.pack("<I", 32)
        + _le(R)
        + struct.pack("<IIII", cs.n_wires, n_pub_out, cs.n_public - n_pub_out, 2)
        + struct.pack("<Q", cs.n_wires)
        + struct.pack("<I", cs.n_constraints)
    )
    body = b"".join(_lc(c.a) + _lc(c.b) + _lc(c.c) for c in cs.constraints)
    return write_container(R1CS_MAGIC, 1, [(1, header), (2, body)])


def test_run_tool_success():
    proc = run_tool([sys.executable, "-c", "print('OK')"], timeout=30)
    assert proc.stdout.strip() == "OK"


def test_run_tool_missing_executable():
    with pytest.raises(ExternalToolError) as ei:
        run_tool(["bls-prover-no-such-tool-xyz", "--version"], timeout=5)
    assert ei.value.code == ProverErrorCode.EXTERNAL_TOOL
    assert ei.value.ctx["tool"] == "bls-prover-no-such-tool-xyz"
    assert "returncode" not in ei.value.ctx


def test_run_tool_nonzero_exit_carries_stderr():
    code = "import sys; sys.stderr.write('constraint 3 failed'); sys.exit(3)"
    with pytest.raises(ExternalToolError) as ei:
        run_tool([sys.executable, "-c", code], timeout=30)
    assert ei.value.ctx["returncode"] == 3
    assert "constraint 3 failed" in ei.value.stderr


def test_run_tool_timeout():
    with pytest.raises(ExternalToolError) as ei:
        run_tool([sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.3)
    assert "timed out" in ei.value.msg


def test_run_tool_empty_argv():
    with pytest.raises(ValueError):
        run_tool([], timeout=1)


def test_read_wtns():
    assert read_wtns(_wtns([1, 2, 3])) == [1, 2, 3]


def test_wtns_wrong_prime():
    with pytest.raises(FormatError):
        read_wtns(_wtns([1], prime=R + 2))


def test_wtns_unreduced_value():
    with pytest.raises(FormatError):
        read_wtns(_wtns([1, R]))


def test_r1cs_round_trip(constraint_system):
    cs = read_r1cs(_r1cs(constraint_system, n_pub_out=1))
    assert cs.n_wires == constraint_system.n_wires
    assert cs.n_public == 3
    assert cs.constraints == constraint_system.constraints


def test_circom_circuit_with_stand_in_generator(tmp_path, constraint_system, witness):
    prebuilt = tmp_path / "prebuilt.wtns"
    prebuilt.write_bytes(_wtns(witness))
    seen = tmp_path / "seen_input.json"
    script = tmp_path / "generate_witness.py"
    script.write_text(
        "import shutil, sys\n"
        f"shutil.copy(sys.argv[2], {str(seen)!r})\n"
        f"shutil.copy({str(prebuilt)!r}, sys.argv[3])\n",
        encoding="utf-8",
    )
    r1cs = tmp_path / "bls_verify.r1cs"
    r1cs.write_bytes(_r1cs(constraint_system))

    circuit = CircomCircuit(tmp_path / "bls_verify.wasm", script, r1cs, node=sys.executable, timeout=30)
    assert circuit.compute_witness(SAMPLE) == witness
    assert json.loads(seen.read_text(encoding="utf-8")) == SAMPLE
    assert circuit.derive_constraint_system().constraints == constraint_system.constraints


def test_circom_circuit_generator_failure(tmp_path):
    script = tmp_path / "generate_witness.py"
    script.write_text("import sys; sys.stderr.write('Error: Assert Failed'); sys.exit(1)\n", encoding="utf-8")
    circuit = CircomCircuit(tmp_path / "x.wasm", script, tmp_path / "x.r1cs", node=sys.executable, timeout=30)
    with pytest.raises(ExternalToolError) as ei:
        circuit.compute_witness(SAMPLE)
    assert "Assert Failed" in ei.value.stderr


posix_only = pytest.mark.skipif(os.name == "nt", reason="stand-in tool needs a shebang")


def _snarkjs_backend(tmp_path, engine, body: str) -> SnarkjsBackend:
    tool = tmp_path / "snarkjs"
    tool.write_text(f"#!{sys.executable}\nimport sys\n{body}\n", encoding="utf-8")
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR)
    for name in ("bls_verify.wasm", "generate_witness.js", "bls_verify.r1cs", "bls_verify_final.zkey"):
        (tmp_path / name).write_bytes(b"")
    vk_path = save_vk_json(engine.verifying_key, tmp_path / "verification_key.json")
    circuit = CircomCircuit(
        tmp_path / "bls_verify.wasm", tmp_path / "generate_witness.js", tmp_path / "bls_verify.r1cs"
    )
    backend = SnarkjsBackend(circuit, tmp_path / "bls_verify_final.zkey", vk_path, snarkjs=str(tool), timeout=30)
    backend.setup()
    return backend


@posix_only
def test_snarkjs_verify_accepts_ok(tmp_path, engine, proof, public_inputs):
    backend = _snarkjs_backend(tmp_path, engine, "print('[INFO]  snarkJS: OK!')")
    assert backend.verify(proof, public_inputs) is True


@posix_only
def test_snarkjs_verify_invalid_proof_is_false(tmp_path, engine, proof, public_inputs):
    backend = _snarkjs_backend(tmp_path, engine, "print('[ERROR] snarkJS: Invalid proof'); sys.exit(1)")
    assert backend.verify(proof, public_inputs) is False


@posix_only
def test_snarkjs_verify_tool_failure_is_an_error(tmp_path, engine, proof, public_inputs):
    body = "sys.stderr.write(\"Error: ENOENT: no such file or directory, open 'verification_key.json'\"); sys.exit(1)"
    backend = _snarkjs_backend(tmp_path, engine, body)
    with pytest.raises(ExternalToolError) as ei:
        backend.verify(proof, public_inputs)
    assert ei.value.ctx["returncode"] == 1
    assert "ENOENT" in ei.value.stderr


@posix_only
def test_snarkjs_verify_without_verdict_is_an_error(tmp_path, engine, proof, public_inputs):
    backend = _snarkjs_backend(tmp_path, engine, "pass")
    with pytest.raises(ExternalToolError):
        backend.verify(proof, public_inputs)
