from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple

NodeId = Hashable
Metric = int
RouteRow = Tuple[NodeId, Metric, Optional[NodeId]]


def node_sort_key(node: NodeId) -> Tuple[str, Any]:
    return (type(node).__name__, node)


def sort_nodes(nodes: Iterable[NodeId]) -> List[NodeId]:
    return sorted(nodes, key=node_sort_key)


class RunStatus(str, Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    MAX_ROUNDS_REACHED = "max_rounds_reached"
    STOPPED = "stopped"

    @property
    def terminal(self) -> bool:
        return self is not RunStatus.RUNNING


@dataclass(frozen=True)
class Link:
    u: NodeId
    v: NodeId
    cost: Metric = 1


@dataclass(frozen=True)
class SkippedLink:
    raw: Any
    reason: str


@dataclass
class RoundRecord:
    round: int
    changed: bool
    changed_entries: int
    tables_hash: str
    tables: Dict[NodeId, List[RouteRow]] = field(default_factory=dict)


@dataclass
class SimulationResult:
    status: RunStatus
    converged_round: Optional[int]
    rounds_run: int
    max_rounds: int
    final_tables: Dict[NodeId, List[RouteRow]]
    rounds: List[RoundRecord] = field(default_factory=list)
    route_hashes: List[str] = field(default_factory=list)
    route_changes: int = 0

    @property
    def converged(self) -> bool:
        return self.status is RunStatus.CONVERGED

    def table(self, node: NodeId) -> Dict[NodeId, Tuple[Metric, Optional[NodeId]]]:
        return {dst: (cost, hop) for dst, cost, hop in self.final_tables[node]}
