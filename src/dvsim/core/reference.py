from __future__ import annotations

import heapq
from itertools import count
from typing import Dict, List, Tuple

from dvsim.core.metric import is_infinite
from dvsim.core.topology import Topology
from dvsim.core.types import Metric, NodeId, SimulationResult, sort_nodes


def shortest_distances(topology: Topology, start: NodeId) -> Dict[NodeId, Metric]:
    """Plain Dijkstra from ``start``; unreachable nodes are absent."""
    distances: Dict[NodeId, Metric] = {start: 0}
    tie = count()
    pq: List[Tuple[Metric, int, NodeId]] = [(0, next(tie), start)]
    while pq:
        dist_u, _, u = heapq.heappop(pq)
        if dist_u > distances.get(u, dist_u):
            continue
        for v in sort_nodes(topology.neighbors(u)):
            nd = dist_u + int(topology.metric(u, v) or 0)
            if v not in distances or nd < distances[v]:
                distances[v] = nd
                heapq.heappush(pq, (nd, next(tie), v))
    return distances


def all_pairs_shortest(topology: Topology) -> Dict[NodeId, Dict[NodeId, Metric]]:
    return {node: shortest_distances(topology, node) for node in topology.nodes()}


def verify_against_reference(result: SimulationResult, topology: Topology) -> List[str]:
    """Compare converged route costs with Dijkstra; return human-readable mismatches."""
    errors: List[str] = []
    reference = all_pairs_shortest(topology)
    for node in topology.nodes():
        expected = reference[node]
        table = result.table(node)
        for dst in topology.nodes():
            want = expected.get(dst)
            got = table.get(dst)
            got_cost = None if got is None or is_infinite(got[0]) else got[0]
            if want != got_cost:
                errors.append(f"{node!r}->{dst!r}: expected {want}, got {got_cost}")
    return errors
