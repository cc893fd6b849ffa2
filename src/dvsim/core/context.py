from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from dvsim.core.metric import normalize_infinity
from dvsim.core.router import Router
from dvsim.core.topology import Topology
from dvsim.core.types import NodeId, RouteRow, sort_nodes


@dataclass
class SimulationContext:
    """Owns the topology and every router of one run."""

    topology: Topology
    routers: Dict[NodeId, Router] = field(default_factory=dict)

    @classmethod
    def from_topology(
        cls,
        topology: Topology,
        infinity: int | None = None,
        seed_all_destinations: bool = False,
    ) -> "SimulationContext":
        infinity = normalize_infinity(infinity)
        routers: Dict[NodeId, Router] = {}
        for node in topology.nodes():
            router = Router(node, infinity=infinity, seed_all_destinations=seed_all_destinations)
            router.seed(topology)
            routers[node] = router
        return cls(topology=topology, routers=routers)

    def routers_sorted(self) -> List[Router]:
        return [self.routers[n] for n in sort_nodes(self.routers)]

    def tables(self) -> Dict[NodeId, List[RouteRow]]:
        return {r.node_id: r.table.rows() for r in self.routers_sorted()}

    def changed_entries(self) -> int:
        return sum(r.changed_entries for r in self.routers.values())
