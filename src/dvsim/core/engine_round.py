from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from dvsim.core.context import SimulationContext
from dvsim.core.convergence import ConvergenceTracker, hash_tables
from dvsim.core.logging import JsonlLogger
from dvsim.core.routing_table import Advertisement
from dvsim.core.router import Router
from dvsim.core.types import NodeId, RoundRecord, RunStatus, SimulationResult

_log = logging.getLogger("dvsim.engine")


def default_max_rounds(n_nodes: int) -> int:
    if n_nodes <= 0:
        return 1
    max_rounds = n_nodes * 2
    if n_nodes > 1 and max_rounds < 5:
        max_rounds = 5
    return max_rounds


class RoundEngine:
    """Drives synchronous rounds: snapshot every router, then relax every router."""

    def __init__(
        self,
        context: SimulationContext,
        max_rounds: Optional[int] = None,
        logger: JsonlLogger | None = None,
        record_tables: bool = True,
        workers: int = 1,
    ) -> None:
        if max_rounds is None:
            max_rounds = default_max_rounds(len(context.routers))
        if int(max_rounds) <= 0:
            raise ValueError(f"max_rounds must be > 0, got {max_rounds}")
        self.context = context
        self.max_rounds = int(max_rounds)
        self.logger = logger or JsonlLogger(path=None)
        self.record_tables = record_tables
        self.workers = max(1, int(workers))
        self.tracker = ConvergenceTracker()
        self.status = RunStatus.RUNNING
        self.round = 0
        self.rounds: List[RoundRecord] = []
        self._stop_requested = False
        self._record(changed=True, changed_entries=0)
        self.logger.log("seeded", nodes=len(context.routers), max_rounds=self.max_rounds)

    def request_stop(self) -> None:
        """Finish the round in progress, then stop."""
        self._stop_requested = True

    def step(self) -> bool:
        """Run one round and return whether any routing table changed."""
        routers = self.context.routers_sorted()
        snapshots: Dict[NodeId, Advertisement] = {
            r.node_id: r.snapshot_advertisement() for r in routers
        }

        before = self.context.changed_entries()
        if self.workers > 1 and len(routers) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                flags = list(pool.map(lambda r: self._relax_router(r, snapshots), routers))
        else:
            flags = [self._relax_router(r, snapshots) for r in routers]
        any_changed = any(flags)
        changed_entries = self.context.changed_entries() - before

        self.round += 1
        record = self._record(changed=any_changed, changed_entries=changed_entries)
        self.tracker.observe(self.round, any_changed, record.tables_hash)
        self.logger.log(
            "round",
            round=self.round,
            changed=any_changed,
            changed_entries=changed_entries,
            tables_hash=record.tables_hash,
        )
        _log.debug("round %d: changed=%s entries=%d", self.round, any_changed, changed_entries)
        return any_changed

    def run(self) -> SimulationResult:
        while self.status is RunStatus.RUNNING:
            any_changed = self.step()
            if not any_changed:
                self.status = RunStatus.CONVERGED
            elif self._stop_requested:
                self.status = RunStatus.STOPPED
            elif self.round >= self.max_rounds:
                self.status = RunStatus.MAX_ROUNDS_REACHED

        if self.status is RunStatus.CONVERGED:
            _log.info("Convergence reached after %d round(s)", self.round)
        elif self.status is RunStatus.MAX_ROUNDS_REACHED:
            _log.warning("Max rounds %d reached without convergence", self.max_rounds)
        else:
            _log.info("Stopped after %d round(s)", self.round)
        self.logger.log(
            "terminated",
            status=self.status.value,
            rounds=self.round,
            converged_round=self.tracker.converged_round,
        )
        self.logger.close()

        return SimulationResult(
            status=self.status,
            converged_round=self.tracker.converged_round if self.status is RunStatus.CONVERGED else None,
            rounds_run=self.round,
            max_rounds=self.max_rounds,
            final_tables=self.context.tables(),
            rounds=list(self.rounds),
            route_hashes=list(self.tracker.hashes),
            route_changes=self.context.changed_entries(),
        )

    @staticmethod
    def _relax_router(router: Router, snapshots: Dict[NodeId, Advertisement]) -> bool:
        changed = False
        for nbr in router.neighbors():
            advert = snapshots.get(nbr)
            if advert is None:
                continue
            if router.relax(nbr, advert):
                changed = True
        return changed

    def _record(self, changed: bool, changed_entries: int) -> RoundRecord:
        tables = self.context.tables()
        record = RoundRecord(
            round=self.round,
            changed=changed,
            changed_entries=changed_entries,
            tables_hash=hash_tables(tables),
            tables=tables if self.record_tables else {},
        )
        self.rounds.append(record)
        return record
