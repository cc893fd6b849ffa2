from __future__ import annotations

import json
from pathlib import Path

import pytest

from dvsim.backends import sync
from dvsim.backends.sync import SyncBackend


def build_cfg(tmp_path):
    return {
        "name": "scenario_a",
        "nodes": [0, 1, 2, 3],
        "links": [[0, 1, 1], [0, 2, 3], [0, 3, 1], [1, 2, 1], [2, 3, 2], [3, 9, 1]],
        "engine": {"max_rounds": 10},
        "output_dir": str(tmp_path),
    }


def test_backend_writes_result_files(tmp_path):
    backend = SyncBackend()
    run = backend.run(build_cfg(tmp_path))

    run_dir = Path(tmp_path) / run["run_id"]
    assert (run_dir / "result.json").exists()
    assert (run_dir / "config.effective.json").exists()

    saved = json.loads((run_dir / "result.json").read_text(encoding="utf-8"))
    assert saved["status"] == "converged"
    assert saved["converged_round"] == 2
    assert saved["route_tables"]["0"] == [[0, 0, 0], [1, 1, 1], [2, 2, 1], [3, 1, 3]]
    assert saved["skipped_links"][0]["link"] == [3, 9, 1]
    assert len(saved["topology_edges"]) == 5
    assert saved["round_changes"][-1] == 0

    events = [json.loads(line) for line in (run_dir / "events.jsonl").read_text(encoding="utf-8").splitlines()]
    assert events[0]["event"] == "seeded"
    assert [e["round"] for e in events if e["event"] == "round"] == [1, 2]
    assert events[-1] == {"event": "terminated", "status": "converged", "rounds": 2, "converged_round": 2}
    assert backend.last_result is not None and backend.last_result.converged


def test_backend_runs_are_deterministic(tmp_path):
    cfg = {
        "name": "er",
        "seed": 4,
        "topology": {"type": "er", "n_nodes": 20, "p": 0.1, "max_metric": 5},
        "engine": {"max_rounds": 60, "record_tables": False},
        "output_dir": str(tmp_path),
    }
    backend = SyncBackend()
    run1 = backend.run(cfg)
    run2 = backend.run(cfg)

    assert run1["run_id"] != run2["run_id"]
    assert run1["route_hashes"] == run2["route_hashes"]
    assert run1["route_tables"] == run2["route_tables"]


def test_backend_reports_round_cap(tmp_path):
    cfg = {
        "name": "line",
        "topology": {"type": "line", "n_nodes": 10},
        "engine": {"max_rounds": 3},
        "output_dir": str(tmp_path),
    }
    run = SyncBackend().run(cfg)

    assert run["status"] == "max_rounds_reached"
    assert run["converged_round"] is None
    assert run["rounds_run"] == 3


def test_backend_closes_event_log_when_run_fails(tmp_path, monkeypatch):
    closed = []

    class RecordingLogger(sync.JsonlLogger):
        def close(self):
            closed.append(self._fh is not None)
            super().close()

    monkeypatch.setattr(sync, "JsonlLogger", RecordingLogger)
    cfg = {
        "name": "bad_cap",
        "topology": {"type": "ring", "n_nodes": 4},
        "engine": {"max_rounds": 0},
        "output_dir": str(tmp_path),
    }
    with pytest.raises(ValueError, match="max_rounds"):
        SyncBackend().run(cfg)

    assert closed and closed[0] is True
    assert len(list(tmp_path.glob("bad_cap_*/events.jsonl"))) == 1
