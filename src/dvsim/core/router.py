from __future__ import annotations

from typing import Dict, Mapping, Optional

from dvsim.core.metric import INFINITE, normalize_infinity, saturate, saturating_add
from dvsim.core.routing_table import Advertisement, RoutingTable
from dvsim.core.topology import Topology
from dvsim.core.types import Metric, NodeId, sort_nodes


class Router:
    """Distance-vector router that only knows its direct neighbours.

    The router owns one :class:`RoutingTable` and is the only writer to it.
    Neighbour knowledge arrives exclusively as :class:`Advertisement` snapshots.
    """

    def __init__(
        self,
        node_id: NodeId,
        infinity: int | None = None,
        seed_all_destinations: bool = False,
    ) -> None:
        self.node_id = node_id
        self.infinity = normalize_infinity(infinity)
        self.seed_all_destinations = bool(seed_all_destinations)
        self.table = RoutingTable(node_id)
        self._neighbor_costs: Dict[NodeId, Metric] = {}
        self.changed_entries = 0

    def __repr__(self) -> str:
        return f"Router({self.node_id!r}, routes={len(self.table)})"

    @property
    def neighbor_costs(self) -> Dict[NodeId, Metric]:
        return dict(self._neighbor_costs)

    def neighbors(self) -> list:
        return sort_nodes(self._neighbor_costs)

    def cost_to(self, dst: NodeId) -> Metric:
        return self.table.cost(dst)

    def next_hop(self, dst: NodeId) -> Optional[NodeId]:
        return self.table.next_hop(dst)

    def seed(self, topology: Topology) -> None:
        self.table = RoutingTable(self.node_id)
        self._neighbor_costs = {
            nbr: saturate(cost, self.infinity) for nbr, cost in topology.neighbors(self.node_id).items()
        }
        if self.seed_all_destinations:
            for dst in topology.nodes():
                if dst != self.node_id:
                    self.table.set_route(dst, INFINITE, None)
        for nbr in sort_nodes(self._neighbor_costs):
            self.table.set_route(nbr, self._neighbor_costs[nbr], nbr)

    def snapshot_advertisement(self) -> Advertisement:
        return self.table.snapshot()

    def relax(self, neighbor: NodeId, advertisement: Mapping) -> bool:
        """Apply one neighbour's advertisement; return whether any route changed.

        A destination the neighbour reaches through us is ignored for that
        neighbour. A route already going through the neighbour follows the
        neighbour's cost, up or down, since we know of no alternative.
        """
        link_cost = self._neighbor_costs.get(neighbor)
        if link_cost is None:
            return False

        changed = 0
        destinations = set(advertisement) | set(self.table.destinations())
        for dst in sort_nodes(destinations):
            advertised = advertisement.get(dst)
            if advertised is None:
                advertised_cost, advertised_hop = INFINITE, None
            else:
                advertised_cost, advertised_hop = advertised.cost, advertised.next_hop

            if advertised_hop == self.node_id and dst != self.node_id:
                continue

            candidate = saturating_add(link_cost, advertised_cost, self.infinity)
            current = self.table.get(dst)
            current_cost = INFINITE if current is None else current.cost

            if candidate < current_cost:
                self.table.set_route(dst, candidate, neighbor)
                changed += 1
            elif current is not None and current.next_hop == neighbor and candidate != current_cost:
                self.table.set_route(dst, candidate, neighbor)
                changed += 1

        self.changed_entries += changed
        return changed > 0
