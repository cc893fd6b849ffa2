from __future__ import annotations

import hashlib
import json
from typing import Dict, List, Mapping, Optional, Sequence

from dvsim.core.types import NodeId, RouteRow, node_sort_key


def _key(node: NodeId) -> str:
    return f"{type(node).__name__}:{node}"


def hash_tables(tables: Mapping[NodeId, Sequence[RouteRow]]) -> str:
    normalized: dict[str, dict[str, list]] = {}
    for node in sorted(tables, key=node_sort_key):
        rows = normalized.setdefault(_key(node), {})
        for dst, cost, hop in tables[node]:
            rows[_key(dst)] = [int(cost), None if hop is None else _key(hop)]
    payload = json.dumps(normalized, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ConvergenceTracker:
    """Tracks per-round change flags; converged on the first quiet round."""

    def __init__(self) -> None:
        self.converged_round: Optional[int] = None
        self.hashes: List[str] = []
        self.quiet_rounds = 0

    def observe(self, round_no: int, any_changed: bool, tables_hash: str) -> bool:
        self.hashes.append(tables_hash)
        if any_changed:
            self.quiet_rounds = 0
            return False
        self.quiet_rounds += 1
        if self.converged_round is None:
            self.converged_round = round_no
        return True


def count_hash_changes(hashes: Sequence[str]) -> int:
    if not hashes:
        return 0
    changes = 0
    prev = hashes[0]
    for h in hashes[1:]:
        if h != prev:
            changes += 1
        prev = h
    return changes


def diff_tables(
    before: Mapping[NodeId, Sequence[RouteRow]],
    after: Mapping[NodeId, Sequence[RouteRow]],
) -> Dict[NodeId, List[NodeId]]:
    """Destinations whose row differs between two table snapshots, per node."""
    out: Dict[NodeId, List[NodeId]] = {}
    for node in sorted(set(before) | set(after), key=node_sort_key):
        old = {row[0]: row for row in before.get(node, [])}
        new = {row[0]: row for row in after.get(node, [])}
        changed = [d for d in sorted(set(old) | set(new), key=node_sort_key) if old.get(d) != new.get(d)]
        if changed:
            out[node] = changed
    return out
