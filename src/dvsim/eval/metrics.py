from __future__ import annotations

from typing import Dict

from dvsim.core.convergence import count_hash_changes


def compute_metrics(run: Dict) -> Dict:
    return {
        "run_id": run.get("run_id"),
        "name": run.get("name"),
        "status": run.get("status"),
        "converged_round": run.get("converged_round"),
        "rounds_run": run.get("rounds_run", 0),
        "route_changes": run.get("route_changes", 0),
        "skipped_links": len(run.get("skipped_links", [])),
        "hash_changes": count_hash_changes(run.get("route_hashes", [])),
    }
