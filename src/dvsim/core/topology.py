from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from dvsim.core.types import Link, Metric, NodeId, SkippedLink, node_sort_key, sort_nodes

_log = logging.getLogger("dvsim.topology")


class TopologyError(ValueError):
    pass


@dataclass
class Edge:
    u: NodeId
    v: NodeId
    metric: Metric


class Topology:
    """Static set of nodes and bidirectional weighted links.

    Built once through :func:`build_topology` (or one of the generators) and
    frozen afterwards; every read accessor returns a copy.
    """

    def __init__(self) -> None:
        self._adj: Dict[NodeId, Dict[NodeId, Metric]] = {}
        self._frozen = False
        self.skipped_links: List[SkippedLink] = []

    def __len__(self) -> int:
        return len(self._adj)

    def __contains__(self, node: object) -> bool:
        return node in self._adj

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Topology":
        self._frozen = True
        return self

    def add_node(self, node: NodeId) -> None:
        self._check_mutable()
        self._adj.setdefault(node, {})

    def add_link(self, u: NodeId, v: NodeId, metric: Metric = 1) -> None:
        self._check_mutable()
        if u not in self._adj or v not in self._adj:
            raise TopologyError(f"link {u!r}-{v!r} references an unknown node")
        self._adj[u][v] = int(metric)
        self._adj[v][u] = int(metric)

    def nodes(self) -> List[NodeId]:
        return sort_nodes(self._adj.keys())

    def neighbors(self, node: NodeId) -> Dict[NodeId, Metric]:
        return dict(self._adj.get(node, {}))

    def has_link(self, u: NodeId, v: NodeId) -> bool:
        return v in self._adj.get(u, {})

    def metric(self, u: NodeId, v: NodeId) -> Optional[Metric]:
        return self._adj.get(u, {}).get(v)

    def edge_list(self) -> List[Edge]:
        edges: List[Edge] = []
        seen: set[Tuple[NodeId, NodeId]] = set()
        for u in self.nodes():
            for v, m in self._adj[u].items():
                a, b = sorted((u, v), key=node_sort_key)
                if (a, b) in seen:
                    continue
                seen.add((a, b))
                edges.append(Edge(u=a, v=b, metric=m))
        return sorted(edges, key=lambda e: (node_sort_key(e.u), node_sort_key(e.v)))

    def snapshot(self) -> Dict[NodeId, Dict[NodeId, Metric]]:
        return {n: dict(nei) for n, nei in self._adj.items()}

    def _check_mutable(self) -> None:
        if self._frozen:
            raise TopologyError("topology is frozen")

    @classmethod
    def line(cls, n_nodes: int, metric: int = 1) -> "Topology":
        links = [(i, i + 1, metric) for i in range(n_nodes - 1)]
        return build_topology(range(max(0, n_nodes)), links)

    @classmethod
    def ring(cls, n_nodes: int, metric: int = 1) -> "Topology":
        if n_nodes < 3:
            return cls.line(n_nodes, metric)
        links = [(i, (i + 1) % n_nodes, metric) for i in range(n_nodes)]
        return build_topology(range(n_nodes), links)

    @classmethod
    def star(cls, n_nodes: int, metric: int = 1, center: int = 0) -> "Topology":
        n_nodes = max(0, n_nodes)
        center = max(0, min(center, n_nodes - 1))
        links = [(center, i, metric) for i in range(n_nodes) if i != center]
        return build_topology(range(n_nodes), links)

    @classmethod
    def fullmesh(cls, n_nodes: int, metric: int = 1) -> "Topology":
        links = [(u, v, metric) for u in range(n_nodes) for v in range(u + 1, n_nodes)]
        return build_topology(range(max(0, n_nodes)), links)

    @classmethod
    def grid(cls, rows: int, cols: int, metric: int = 1) -> "Topology":
        def idx(r: int, c: int) -> int:
            return r * cols + c

        links = []
        for r in range(rows):
            for c in range(cols):
                if c + 1 < cols:
                    links.append((idx(r, c), idx(r, c + 1), metric))
                if r + 1 < rows:
                    links.append((idx(r, c), idx(r + 1, c), metric))
        return build_topology(range(max(0, rows * cols)), links)

    @classmethod
    def er(
        cls,
        n_nodes: int,
        p: float,
        metric: int = 1,
        seed: int = 0,
        max_metric: int | None = None,
    ) -> "Topology":
        """Erdos-Renyi graph; every node gets at least one link to a lower id.

        With ``max_metric`` set, link costs are drawn uniformly from
        ``[metric, max_metric]``.
        """
        rng = random.Random(seed)

        def cost() -> int:
            if max_metric is None:
                return metric
            return rng.randint(metric, max_metric)

        links: List[Tuple[int, int, int]] = []
        degree = [0] * max(0, n_nodes)
        for u in range(n_nodes):
            for v in range(u + 1, n_nodes):
                if rng.random() <= p:
                    links.append((u, v, cost()))
                    degree[u] += 1
                    degree[v] += 1
        for u in range(1, n_nodes):
            if degree[u] == 0:
                v = rng.randrange(0, u)
                links.append((u, v, cost()))
                degree[u] += 1
                degree[v] += 1
        return build_topology(range(max(0, n_nodes)), links)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any], seed: int = 0) -> "Topology":
        if "nodes" in cfg or "routers" in cfg:
            nodes = cfg.get("nodes", cfg.get("routers")) or []
            return build_topology(nodes, cfg.get("links") or [])
        tp = cfg.get("type", "ring")
        metric = int(cfg.get("default_metric", 1))
        if tp == "line":
            return cls.line(int(cfg.get("n_nodes", 8)), metric)
        if tp == "ring":
            return cls.ring(int(cfg.get("n_nodes", 8)), metric)
        if tp == "star":
            return cls.star(int(cfg.get("n_nodes", 8)), metric, int(cfg.get("center", 0)))
        if tp == "fullmesh":
            return cls.fullmesh(int(cfg.get("n_nodes", 8)), metric)
        if tp == "grid":
            return cls.grid(int(cfg.get("rows", 4)), int(cfg.get("cols", 4)), metric)
        if tp == "er":
            max_metric = cfg.get("max_metric")
            return cls.er(
                int(cfg.get("n_nodes", 40)),
                float(cfg.get("p", 0.05)),
                metric,
                seed=seed,
                max_metric=int(max_metric) if max_metric is not None else None,
            )
        raise ValueError(f"Unsupported topology type: {tp}")


def parse_link(raw: Any) -> Link:
    """Accept ``(u, v[, cost])`` sequences or ``{u, v, cost|metric}`` / ``{from, to}`` mappings."""
    if isinstance(raw, Link):
        return raw
    if isinstance(raw, Mapping):
        if "from" in raw or "to" in raw:
            u, v = raw["from"], raw["to"]
        else:
            u, v = raw["u"], raw["v"]
        cost = raw.get("cost", raw.get("metric", 1))
        return Link(u=u, v=v, cost=_as_cost(cost))
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) == 2:
            return Link(u=raw[0], v=raw[1], cost=1)
        if len(raw) == 3:
            return Link(u=raw[0], v=raw[1], cost=_as_cost(raw[2]))
    raise TopologyError(f"cannot parse link {raw!r}")


def _as_cost(value: Any) -> int:
    if isinstance(value, bool):
        raise TopologyError(f"invalid link cost {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise TopologyError(f"link cost must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise TopologyError(f"invalid link cost {value!r}") from exc


def build_topology(nodes: Iterable[NodeId], links: Iterable[Any]) -> Topology:
    """Build a frozen topology, dropping (and logging) every invalid link."""
    topo = Topology()
    for node in nodes:
        topo.add_node(node)

    for raw in links:
        try:
            link = parse_link(raw)
        except (KeyError, TopologyError) as exc:
            _skip(topo, raw, f"malformed link: {exc}")
            continue
        missing = [n for n in (link.u, link.v) if n not in topo]
        if missing:
            _skip(topo, raw, f"unknown node(s) {', '.join(repr(n) for n in missing)}")
            continue
        if link.u == link.v:
            _skip(topo, raw, "self loop")
            continue
        if link.cost <= 0:
            _skip(topo, raw, f"non-positive cost {link.cost}")
            continue
        current = topo.metric(link.u, link.v)
        if current is not None:
            _log.warning("Duplicate link %r-%r, keeping cost %d", link.u, link.v, min(current, link.cost))
            if link.cost >= current:
                continue
        topo.add_link(link.u, link.v, link.cost)

    return topo.freeze()


def _skip(topo: Topology, raw: Any, reason: str) -> None:
    _log.warning("Skipping invalid link %r: %s", raw, reason)
    topo.skipped_links.append(SkippedLink(raw=raw, reason=reason))
