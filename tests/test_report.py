from __future__ import annotations

import pytest

from dvsim.core.metric import INFINITE
from dvsim.core.simulation import run_simulation
from dvsim.core.topology import Topology, build_topology
from dvsim.core.types import RunStatus, SimulationResult
from dvsim.report.tables import format_result, format_summary, format_table, table_rows, tables_payload


def _result(status, converged_round=None, rounds_run=3, max_rounds=10) -> SimulationResult:
    return SimulationResult(
        status=status,
        converged_round=converged_round,
        rounds_run=rounds_run,
        max_rounds=max_rounds,
        final_tables={},
    )


def test_table_rows_render_sentinels_sorted():
    rows = [(2, INFINITE, None), (0, 0, 0), (1, 4, 1)]

    assert table_rows(rows) == [(0, 0, 0), (1, 4, 1), (2, "unreachable", "none")]


def test_tables_payload_uses_string_keys():
    payload = tables_payload({1: [(1, 0, 1)], 0: [(0, 0, 0), (1, INFINITE, None)]})

    assert list(payload) == ["0", "1"]
    assert payload["0"] == [[0, 0, 0], [1, "unreachable", "none"]]


def test_format_table_marks_changed_rows():
    text = format_table("r1", [("r1", 0, "r1"), ("r2", 3, "r2")], changed=["r2"])
    lines = text.splitlines()

    assert lines[0] == "Node r1:"
    assert "Destination" in lines[1] and "Next hop" in lines[1]
    assert lines[2].split() == ["r1", "0", "r1"]
    assert lines[3].split() == ["r2", "3", "r2", "*"]


def test_format_summary_per_status():
    assert format_summary(_result(RunStatus.CONVERGED, 4)) == "Convergence reached after 4 round(s)"
    assert format_summary(_result(RunStatus.MAX_ROUNDS_REACHED)) == "Max rounds 10 reached without convergence"
    assert format_summary(_result(RunStatus.STOPPED, rounds_run=2)) == "Stopped after 2 round(s)"


def test_format_result_lists_every_round():
    result = run_simulation(Topology.line(3), max_rounds=10)
    text = format_result(result)

    assert text.startswith("Initial tables (round 0)")
    assert "--- Round 1 ---" in text
    assert "--- Round 2 ---" in text
    assert "--- Final routing tables ---" in text
    assert text.endswith("Convergence reached after 2 round(s)")

    final_only = format_result(result, rounds=False)
    assert "Round 1" not in final_only


def test_format_result_shows_unreachable_destinations():
    topo = build_topology([0, 1, 2], [(0, 1, 1)])
    result = run_simulation(topo, max_rounds=5, seed_all_destinations=True, record_tables=False)
    text = format_result(result)

    assert "(tables not recorded)" in text
    assert any(line.split() == ["2", "unreachable", "none"] for line in text.splitlines())


def test_tables_payload_rejects_colliding_names():
    with pytest.raises(ValueError, match="collide"):
        tables_payload({1: [(1, 0, 1)], "1": [("1", 0, "1")]})
