from __future__ import annotations

from typing import Any, Iterable, Optional

from dvsim.core.context import SimulationContext
from dvsim.core.engine_round import RoundEngine, default_max_rounds
from dvsim.core.logging import JsonlLogger
from dvsim.core.topology import Topology, build_topology
from dvsim.core.types import NodeId, SimulationResult

__all__ = [
    "SimulationResult",
    "build_topology",
    "default_max_rounds",
    "run_simulation",
]


def run_simulation(
    topology: Topology,
    max_rounds: Optional[int] = None,
    *,
    infinity: int | None = None,
    seed_all_destinations: bool = False,
    record_tables: bool = True,
    workers: int = 1,
    logger: JsonlLogger | None = None,
) -> SimulationResult:
    """Seed one router per topology node and run rounds until quiet or capped."""
    context = SimulationContext.from_topology(
        topology,
        infinity=infinity,
        seed_all_destinations=seed_all_destinations,
    )
    engine = RoundEngine(
        context,
        max_rounds=max_rounds,
        logger=logger,
        record_tables=record_tables,
        workers=workers,
    )
    return engine.run()


def simulate(nodes: Iterable[NodeId], links: Iterable[Any], **kwargs: Any) -> SimulationResult:
    return run_simulation(build_topology(nodes, links), **kwargs)
