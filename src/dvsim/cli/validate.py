from __future__ import annotations

from typing import Any, Dict

_TOPOLOGY_TYPES = {"line", "ring", "star", "fullmesh", "grid", "er"}


def validate_config(cfg: Dict[str, Any]) -> list[str]:
    errors: list[str] = []

    has_nodes = "nodes" in cfg or "routers" in cfg
    if not has_nodes and "topology" not in cfg:
        errors.append("Missing 'nodes' (or 'routers') list or 'topology' config")

    if has_nodes:
        nodes = cfg.get("nodes", cfg.get("routers"))
        if not isinstance(nodes, list):
            errors.append("'nodes' must be a list")
        elif len(set(map(repr, nodes))) != len(nodes):
            errors.append("'nodes' contains duplicate identities")
        elif len(set(map(str, nodes))) != len(nodes):
            errors.append("'nodes' contains identities with the same name, e.g. 1 and '1'")
        links = cfg.get("links", [])
        if links is not None and not isinstance(links, list):
            errors.append("'links' must be a list")
    elif "topology" in cfg:
        topo = cfg.get("topology")
        if not isinstance(topo, dict):
            errors.append("'topology' must be a dict")
        elif "nodes" not in topo and topo.get("type", "ring") not in _TOPOLOGY_TYPES:
            errors.append(f"topology.type must be one of {sorted(_TOPOLOGY_TYPES)}")

    engine = cfg.get("engine", {})
    if engine is not None and not isinstance(engine, dict):
        errors.append("'engine' must be a dict")
    elif engine:
        if engine.get("max_rounds") is not None and _as_int(engine["max_rounds"]) <= 0:
            errors.append("engine.max_rounds must be > 0")
        if "infinity_metric" in engine and _as_int(engine["infinity_metric"]) <= 0:
            errors.append("engine.infinity_metric must be > 0")
        if "workers" in engine and _as_int(engine["workers"]) <= 0:
            errors.append("engine.workers must be > 0")
        for key in ("seed_all_destinations", "record_tables"):
            if key in engine and not isinstance(engine[key], bool):
                errors.append(f"engine.{key} must be a boolean")

    return errors


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
