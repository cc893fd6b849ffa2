from __future__ import annotations

import json
from pathlib import Path

from dvsim.cli.main import main

SCENARIO = """
name: cli_scenario
nodes: [0, 1, 2, 3]
links:
  - [0, 1, 1]
  - [0, 2, 3]
  - [0, 3, 1]
  - [1, 2, 1]
  - [2, 3, 2]
""".strip()


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_validate_ok(tmp_path, capsys):
    path = _write(tmp_path, SCENARIO)

    assert main(["validate", "--config", str(path)]) == 0
    assert json.loads(capsys.readouterr().out) == {"ok": True}


def test_cli_validate_reports_errors(tmp_path, capsys):
    path = _write(tmp_path, "name: broken\nengine:\n  max_rounds: 0\n")

    assert main(["validate", "--config", str(path)]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is False
    assert "engine.max_rounds must be > 0" in out["errors"]


def test_cli_run_json(tmp_path, capsys):
    path = _write(tmp_path, SCENARIO)

    code = main(["run", "--config", str(path), "--format", "json", "--output-dir", str(tmp_path / "out")])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "converged"
    assert payload["route_tables"]["0"][2] == [2, 2, 1]


def test_cli_run_table_with_round_cap(tmp_path, capsys):
    path = _write(tmp_path, SCENARIO)

    code = main(
        [
            "run",
            "--config",
            str(path),
            "--max-rounds",
            "1",
            "--final-only",
            "--output-dir",
            str(tmp_path / "out"),
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "--- Final routing tables ---" in out
    assert "Max rounds 1 reached without convergence" in out
