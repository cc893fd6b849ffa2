from __future__ import annotations

import csv
import json
from pathlib import Path

from dvsim.eval.metrics import compute_metrics

FIELDS = [
    "run_id",
    "name",
    "status",
    "converged_round",
    "rounds_run",
    "route_changes",
    "skipped_links",
    "hash_changes",
]


def summarize_runs(runs_dir: str, out_csv: str) -> int:
    runs_path = Path(runs_dir)
    rows = []
    for result_file in sorted(runs_path.rglob("result.json")):
        with result_file.open("r", encoding="utf-8") as f:
            run = json.load(f)
        rows.append(compute_metrics(run))

    out_path = Path(out_csv)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return len(rows)
