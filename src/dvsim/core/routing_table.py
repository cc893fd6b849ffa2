from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from dvsim.core.metric import INFINITE, is_infinite
from dvsim.core.types import Metric, NodeId, RouteRow, sort_nodes


@dataclass(frozen=True)
class RouteEntry:
    destination: NodeId
    cost: Metric
    next_hop: Optional[NodeId]

    @property
    def reachable(self) -> bool:
        return not is_infinite(self.cost)

    def as_row(self) -> RouteRow:
        return (self.destination, self.cost, self.next_hop)


UNREACHABLE_HOP: Optional[NodeId] = None


class Advertisement(Mapping[NodeId, RouteEntry]):
    """Read-only copy of a routing table, taken at the start of a round."""

    __slots__ = ("owner", "_entries")

    def __init__(self, owner: NodeId, entries: Mapping[NodeId, RouteEntry]) -> None:
        self.owner = owner
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, dst: NodeId) -> RouteEntry:
        return self._entries[dst]

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def cost(self, dst: NodeId) -> Metric:
        entry = self._entries.get(dst)
        return INFINITE if entry is None else entry.cost

    def __repr__(self) -> str:
        return f"Advertisement(owner={self.owner!r}, entries={len(self._entries)})"


class RoutingTable:
    """Per-node mapping from destination to its single best route.

    Every write goes through :meth:`set_route`, which enforces
    ``cost == 0 <=> destination == owner <=> next_hop == owner`` and that
    unreachable entries carry no next hop.
    """

    def __init__(self, owner: NodeId) -> None:
        self.owner = owner
        self._routes: Dict[NodeId, RouteEntry] = {}
        self.set_route(owner, 0, owner)

    def __contains__(self, dst: object) -> bool:
        return dst in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def get(self, dst: NodeId) -> Optional[RouteEntry]:
        return self._routes.get(dst)

    def cost(self, dst: NodeId) -> Metric:
        entry = self._routes.get(dst)
        return INFINITE if entry is None else entry.cost

    def next_hop(self, dst: NodeId) -> Optional[NodeId]:
        entry = self._routes.get(dst)
        return None if entry is None else entry.next_hop

    def destinations(self) -> List[NodeId]:
        return sort_nodes(self._routes)

    def set_route(self, dst: NodeId, cost: Metric, next_hop: Optional[NodeId]) -> bool:
        if is_infinite(cost):
            cost, next_hop = INFINITE, UNREACHABLE_HOP
        self._check(dst, cost, next_hop)
        entry = RouteEntry(destination=dst, cost=int(cost), next_hop=next_hop)
        changed = self._routes.get(dst) != entry
        self._routes[dst] = entry
        return changed

    def entries(self) -> List[RouteEntry]:
        return [self._routes[dst] for dst in self.destinations()]

    def rows(self) -> List[RouteRow]:
        return [entry.as_row() for entry in self.entries()]

    def snapshot(self) -> Advertisement:
        return Advertisement(self.owner, self._routes)

    def _check(self, dst: NodeId, cost: Metric, next_hop: Optional[NodeId]) -> None:
        if cost < 0:
            raise ValueError(f"negative cost {cost} for {dst!r}")
        is_self = dst == self.owner
        if (cost == 0) != is_self or (next_hop == self.owner) != is_self:
            raise ValueError(
                f"route {dst!r} cost={cost} next_hop={next_hop!r} breaks the self-route invariant "
                f"of node {self.owner!r}"
            )
        if not is_infinite(cost) and next_hop is None:
            raise ValueError(f"reachable route to {dst!r} needs a next hop")
