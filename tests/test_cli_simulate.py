from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path


def _run(script: Path, *args: str) -> subprocess.CompletedProcess:
    cmd = [sys.executable, str(script), *args]
    return subprocess.run(cmd, capture_output=True, text=True)


def test_cli_default_run(simulate_script: Path):
    proc = _run(simulate_script, "--rolls", "600", "--seed", "1")
    assert proc.returncode == 0, proc.stderr
    assert "Face" in proc.stdout
    assert "Rolls: 600" in proc.stdout


def test_cli_dims_with_bubble_json(simulate_script: Path):
    proc = _run(
        simulate_script,
        "--dims", "2", "1", "1",
        "--bubble-radius", "0.2",
        "--bubble-offset", "0", "0.25", "0",
        "--rolls", "300",
        "--seed", "4",
        "--json",
    )
    assert proc.returncode == 0, proc.stderr
    data = json.loads(proc.stdout)
    assert data["mode"] == "dimensions"
    assert data["base_weights"] == [2.0, 1.0, 2.0, 2.0, 1.0, 2.0]
    assert data["bubble"]["enabled"] is True
    assert sum(data["simulation"]["counts"]) == 300


def test_cli_config_file(simulate_script: Path, tmp_path: Path):
    config_path = tmp_path / "die.json"
    config_path.write_text(json.dumps({"weights": [0, 0, 0, 0, 0, 1], "n_rolls": 50}))
    proc = _run(simulate_script, "--config", str(config_path), "--json")
    assert proc.returncode == 0, proc.stderr
    data = json.loads(proc.stdout)
    assert data["simulation"]["counts"] == [0, 0, 0, 0, 0, 50]


def test_cli_rejects_invalid_rolls(simulate_script: Path):
    proc = _run(simulate_script, "--rolls", "0")
    assert proc.returncode != 0
    assert "n must be" in proc.stderr


def test_cli_rejects_weights_and_dims(simulate_script: Path):
    proc = _run(simulate_script, "--weights", "1", "1", "1", "1", "1", "1", "--dims", "1", "1", "1")
    assert proc.returncode != 0


def test_cli_rejects_non_mapping_bubble(simulate_script: Path, tmp_path: Path):
    config_path = tmp_path / "die.json"
    config_path.write_text(json.dumps({"bubble": True}))
    proc = _run(simulate_script, "--config", str(config_path))
    assert proc.returncode == 2
    assert "Traceback" not in proc.stderr
    assert "bubble must be a mapping" in proc.stderr


def test_cli_rejects_top_level_array(simulate_script: Path, tmp_path: Path):
    config_path = tmp_path / "die.json"
    config_path.write_text(json.dumps([1, 2, 3]))
    proc = _run(simulate_script, "--config", str(config_path))
    assert proc.returncode == 2
    assert "Traceback" not in proc.stderr
