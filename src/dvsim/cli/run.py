from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from dvsim.backends.sync import SyncBackend
from dvsim.cli.validate import validate_config
from dvsim.utils.io import deep_merge, load_config_file


def load_effective_config(config_path: str | Path) -> Dict[str, Any]:
    cfg_path = Path(config_path).resolve()
    parts = cfg_path.parts
    if "configs" in parts:
        cfg_idx = parts.index("configs")
        root = Path(*parts[:cfg_idx]) if cfg_idx > 0 else Path("/")
    else:
        root = cfg_path.parent
    defaults_path = root / "configs" / "defaults.yaml"

    cfg: Dict[str, Any] = {}
    if defaults_path.exists() and defaults_path != cfg_path:
        cfg = load_config_file(defaults_path)

    exp = load_config_file(cfg_path)
    if "nodes" in exp or "routers" in exp:
        cfg.pop("topology", None)
    return deep_merge(cfg, exp)


def run_config(cfg: Dict[str, Any], backend: SyncBackend | None = None) -> Dict[str, Any]:
    errors = validate_config(cfg)
    if errors:
        raise ValueError("Invalid config: " + "; ".join(errors))
    return (backend or SyncBackend()).run(cfg)

