from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from dvsim.core.convergence import diff_tables
from dvsim.core.metric import is_infinite
from dvsim.core.types import NodeId, RoundRecord, RouteRow, RunStatus, SimulationResult, node_sort_key

UNREACHABLE = "unreachable"
NO_HOP = "none"

DisplayRow = Tuple[NodeId, Any, Any]


def table_rows(rows: Iterable[RouteRow]) -> List[DisplayRow]:
    """Rows sorted by destination with sentinels replaced for display."""
    out: List[DisplayRow] = []
    for dst, cost, hop in sorted(rows, key=lambda r: node_sort_key(r[0])):
        if is_infinite(cost):
            out.append((dst, UNREACHABLE, NO_HOP))
        else:
            out.append((dst, cost, NO_HOP if hop is None else hop))
    return out


def tables_payload(tables: Mapping[NodeId, Sequence[RouteRow]]) -> Dict[str, List[List[Any]]]:
    """JSON-ready tables keyed by node name; ids must not share a string form."""
    payload: Dict[str, List[List[Any]]] = {}
    for node in sorted(tables, key=node_sort_key):
        key = str(node)
        if key in payload:
            raise ValueError(f"node ids {key!r} collide once written as JSON keys")
        payload[key] = [list(row) for row in table_rows(tables[node])]
    return payload


def format_table(node: NodeId, rows: Iterable[RouteRow], changed: Iterable[NodeId] = ()) -> str:
    marked = set(changed)
    display = table_rows(rows)
    width = max([len("Destination")] + [len(str(d)) for d, _, _ in display])
    hop_width = max([len("Next hop")] + [len(str(h)) for _, _, h in display])
    lines = [
        f"Node {node}:",
        f"  {'Destination':<{width}}  {'Cost':<11}  {'Next hop':<{hop_width}}",
    ]
    for dst, cost, hop in display:
        mark = " *" if dst in marked else ""
        lines.append(f"  {str(dst):<{width}}  {str(cost):<11}  {str(hop):<{hop_width}}{mark}".rstrip())
    return "\n".join(lines)


def format_tables(tables: Mapping[NodeId, Sequence[RouteRow]], changed: Mapping[NodeId, List[NodeId]] | None = None) -> str:
    changed = changed or {}
    return "\n\n".join(
        format_table(node, tables[node], changed.get(node, ()))
        for node in sorted(tables, key=node_sort_key)
    )


def format_round(record: RoundRecord, previous: RoundRecord | None = None) -> str:
    title = "Initial tables (round 0)" if record.round == 0 else f"--- Round {record.round} ---"
    changed = diff_tables(previous.tables, record.tables) if previous is not None else {}
    body = format_tables(record.tables, changed) if record.tables else "(tables not recorded)"
    return f"{title}\n{body}"


def format_summary(result: SimulationResult) -> str:
    if result.status is RunStatus.CONVERGED:
        return f"Convergence reached after {result.converged_round} round(s)"
    if result.status is RunStatus.MAX_ROUNDS_REACHED:
        return f"Max rounds {result.max_rounds} reached without convergence"
    return f"Stopped after {result.rounds_run} round(s)"


def format_result(result: SimulationResult, rounds: bool = True) -> str:
    parts: List[str] = []
    if rounds:
        previous = None
        for record in result.rounds:
            parts.append(format_round(record, previous))
            previous = record
    parts.append("--- Final routing tables ---\n" + format_tables(result.final_tables))
    parts.append(format_summary(result))
    return "\n\n".join(parts)
