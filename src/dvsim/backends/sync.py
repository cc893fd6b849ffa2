from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from dvsim.backends.base import Backend
from dvsim.config import SimulationConfig
from dvsim.core.logging import JsonlLogger
from dvsim.core.simulation import run_simulation
from dvsim.core.topology import Topology
from dvsim.core.types import SimulationResult
from dvsim.report.tables import tables_payload
from dvsim.utils.io import dump_json, ensure_dir, now_tag

_log = logging.getLogger("dvsim.backend")


class SyncBackend(Backend):
    """Runs one synchronous-round simulation and writes its result files."""

    def __init__(self) -> None:
        self.last_result: Optional[SimulationResult] = None

    def run(self, config: Dict[str, Any]) -> Dict[str, Any]:
        cfg = SimulationConfig.from_dict(config)
        topology = Topology.from_config(cfg.topology, seed=cfg.seed)
        if topology.skipped_links:
            _log.warning("%d link(s) dropped from %s", len(topology.skipped_links), cfg.name)

        output_dir = ensure_dir(Path(cfg.output_dir))
        run_id = f"{cfg.name}_{now_tag()}"
        run_dir = ensure_dir(output_dir / run_id)
        with JsonlLogger(run_dir / "events.jsonl") as logger:
            result = run_simulation(
                topology,
                max_rounds=cfg.engine.max_rounds,
                infinity=cfg.engine.infinity_metric,
                seed_all_destinations=cfg.engine.seed_all_destinations,
                record_tables=cfg.engine.record_tables,
                workers=cfg.engine.workers,
                logger=logger,
            )
        self.last_result = result

        result_payload = {
            "run_id": run_id,
            "name": cfg.name,
            "seed": cfg.seed,
            "status": result.status.value,
            "converged_round": result.converged_round,
            "rounds_run": result.rounds_run,
            "max_rounds": result.max_rounds,
            "route_hashes": result.route_hashes,
            "route_changes": result.route_changes,
            "round_changes": [r.changed_entries for r in result.rounds[1:]],
            "route_tables": tables_payload(result.final_tables),
            "skipped_links": [{"link": s.raw, "reason": s.reason} for s in topology.skipped_links],
            "topology_edges": [e.__dict__ for e in topology.edge_list()],
        }
        dump_json(run_dir / "result.json", result_payload)
        dump_json(run_dir / "config.effective.json", config)
        _log.info("%s: %s after %d round(s), results in %s", run_id, result.status.value, result.rounds_run, run_dir)

        return result_payload
