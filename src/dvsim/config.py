from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from dvsim.core.metric import INFINITE


@dataclass(frozen=True)
class EngineConfig:
    max_rounds: Optional[int] = None
    infinity_metric: int = INFINITE
    seed_all_destinations: bool = False
    record_tables: bool = True
    workers: int = 1

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "EngineConfig":
        raw = dict(raw or {})
        max_rounds = raw.get("max_rounds")
        return cls(
            max_rounds=int(max_rounds) if max_rounds is not None else None,
            infinity_metric=int(raw.get("infinity_metric", INFINITE)),
            seed_all_destinations=_flag(raw, "seed_all_destinations", False),
            record_tables=_flag(raw, "record_tables", True),
            workers=int(raw.get("workers", 1)),
        )


@dataclass(frozen=True)
class SimulationConfig:
    name: str
    topology: Dict[str, Any]
    engine: EngineConfig
    seed: int = 0
    output_dir: str = "results/runs"

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SimulationConfig":
        return cls(
            name=str(raw.get("name", "run")),
            topology=topology_section(raw),
            engine=EngineConfig.from_dict(raw.get("engine")),
            seed=int(raw.get("seed", 0)),
            output_dir=str(raw.get("output_dir", "results/runs")),
        )


def topology_section(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Explicit ``nodes``/``routers`` + ``links`` at top level win over a ``topology`` block."""
    nodes = raw.get("nodes", raw.get("routers"))
    if nodes is not None:
        return {"nodes": list(nodes), "links": list(raw.get("links") or [])}
    return dict(raw.get("topology") or {})


def _flag(raw: Mapping[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"engine.{key} must be a boolean, got {value!r}")
    return value
