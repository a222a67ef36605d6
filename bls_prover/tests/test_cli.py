"""End-to-end CLI: setup, prove, verify, inspect on the reference circuit."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from bls_prover.cli.main import app
from bls_prover.codec.artifact import read_artifact
from bls_prover.tests import SAMPLE
from bls_prover.version import __version__

runner = CliRunner()

pytestmark = pytest.mark.slow


def _invoke(build, *args):
    return runner.invoke(app, ["--build-dir", str(build), *args])


@pytest.fixture
def build(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path / "build"


def test_prove_then_verify(build, tmp_path):
    inputs = tmp_path / "input.json"
    inputs.write_text(json.dumps(SAMPLE), encoding="utf-8")
    out = tmp_path / "proof.json"

    res = _invoke(build, "prove", "--inputs", str(inputs), "--out", str(out))
    assert res.exit_code == 0, res.output
    assert (build / "bls_prover_params.bin").exists()
    assert (build / "verification_key.json").exists()

    art = read_artifact(out)
    assert art.public_inputs == ["123456789", "1", "2"]
    assert len(art.proof_bytes()) == 128
    assert art.stats is not None and art.stats.num_constraints == 4

    res = _invoke(build, "verify", str(out))
    assert res.exit_code == 0, res.output
    assert "valid" in res.output


def test_verify_rejects_tampered_inputs(build, tmp_path):
    out = tmp_path / "proof.json"
    res = _invoke(
        build,
        "prove",
        "--message-hash", "42",
        "--public-key-x", "1",
        "--public-key-y", "2",
        "--signature-x", "3",
        "--signature-y", "4",
        "--out", str(out),
    )
    assert res.exit_code == 0, res.output

    doc = json.loads(out.read_text(encoding="utf-8"))
    doc["publicInputs"][0] = "43"
    out.write_text(json.dumps(doc), encoding="utf-8")

    res = _invoke(build, "--json", "verify", str(out))
    assert res.exit_code == 1
    assert json.loads(res.output.strip().splitlines()[-1]) == {"ok": True, "valid": False}


def test_prove_reports_invalid_input(build):
    res = _invoke(
        build,
        "--json",
        "prove",
        "--message-hash", "1",
        "--public-key-x", "1",
        "--public-key-y", "2",
        "--signature-x", "abc",
        "--signature-y", "4",
    )
    assert res.exit_code == 2
    body = json.loads(res.output.strip().splitlines()[-1])
    assert body["ok"] is False
    assert body["error"]["code"] == "INVALID_WITNESS"
    assert body["error"]["ctx"]["field"] == "signature_x"


def test_prove_missing_flags(build):
    res = _invoke(build, "prove", "--message-hash", "1")
    assert res.exit_code == 2


def test_setup_and_inspect(build, tmp_path):
    vk_out = tmp_path / "exported_vk.json"
    res = _invoke(build, "setup", "--export-vk", str(vk_out))
    assert res.exit_code == 0, res.output
    assert json.loads(vk_out.read_text(encoding="utf-8"))["nPublic"] == 3

    res = _invoke(build, "--json", "inspect", str(build / "bls_prover_params.bin"))
    assert res.exit_code == 0, res.output
    table = json.loads(res.output.strip().splitlines()[-1])
    assert [s["type"] for s in table["sections"]] == list(range(1, 10))

    res = _invoke(build, "--json", "inspect", str(vk_out))
    assert json.loads(res.output.strip().splitlines()[-1])["IC"] == 4


def test_inspect_rejects_foreign_file(build, tmp_path):
    junk = tmp_path / "junk.bin"
    junk.write_bytes(b"r1cs" + b"\x00" * 16)
    res = _invoke(build, "inspect", str(junk))
    assert res.exit_code == 2


def test_version():
    res = runner.invoke(app, ["version"])
    assert res.exit_code == 0
    assert res.output.startswith(f"bls-zk-prover {__version__} ")
    assert "groth16/bn254" in res.output


def test_version_json():
    res = runner.invoke(app, ["--json", "version"])
    assert res.exit_code == 0
    doc = json.loads(res.output)
    assert doc["version"] == __version__
    assert doc["runtime"].startswith("bls-zk-prover")
