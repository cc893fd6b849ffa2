from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List

from dvsim.backends.sync import SyncBackend
from dvsim.utils.io import deep_merge, dump_json


def run_sweep(sweep_cfg: Dict[str, Any], base_cfg: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
    """Run every (topology type, size, repeat) combination and collect convergence rounds."""
    base_cfg = dict(base_cfg or {})
    types = sweep_cfg.get("types", [base_cfg.get("topology", {}).get("type", "ring")])
    sizes = sweep_cfg.get("sizes", [base_cfg.get("topology", {}).get("n_nodes", 8)])
    repeats = int(sweep_cfg.get("repeats", 1))

    backend = SyncBackend()
    outputs: List[Dict[str, Any]] = []

    for tp in types:
        for n in sizes:
            for rep in range(repeats):
                cfg = deep_merge(base_cfg, {"engine": {"record_tables": False}})
                cfg["name"] = f"sweep_{tp}_n{n}_r{rep}"
                topo = dict(cfg.get("topology", {}))
                topo["type"] = tp
                topo["n_nodes"] = int(n)
                if tp == "grid":
                    rows = max(1, math.isqrt(int(n)))
                    topo["rows"] = rows
                    topo["cols"] = math.ceil(int(n) / rows)
                cfg["topology"] = topo
                cfg["seed"] = int(base_cfg.get("seed", 1)) + rep
                out = backend.run(cfg)
                outputs.append(
                    {
                        "run_id": out["run_id"],
                        "type": tp,
                        "n_nodes": len(out["route_tables"]),
                        "repeat": rep,
                        "status": out["status"],
                        "converged_round": out["converged_round"],
                        "route_changes": out["route_changes"],
                    }
                )

    out_path = sweep_cfg.get("summary_out")
    if out_path:
        dump_json(Path(out_path), outputs)
    return outputs
