from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional

from dvsim.backends.sync import SyncBackend
from dvsim.cli.run import load_effective_config, run_config
from dvsim.cli.validate import validate_config
from dvsim.report.tables import format_result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dvsim", description="Distance-vector routing convergence simulator")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Run a simulation from a YAML/JSON config")
    p_run.add_argument("--config", required=True)
    p_run.add_argument("--format", choices=["json", "table"], default="table")
    p_run.add_argument("--max-rounds", type=int, default=None, help="Override engine.max_rounds")
    p_run.add_argument("--output-dir", default=None, help="Override output_dir")
    p_run.add_argument("--final-only", action="store_true", help="Only print the final tables")

    p_validate = sub.add_parser("validate", help="Validate a config file")
    p_validate.add_argument("--config", required=True)

    p_sum = sub.add_parser("summarize", help="Summarize run results into CSV")
    p_sum.add_argument("--runs", required=True, help="Directory containing run folders")
    p_sum.add_argument("--out", required=True, help="Output CSV path")

    p_sweep = sub.add_parser("sweep", help="Run a parameter sweep over topology types and sizes")
    p_sweep.add_argument("--config", required=True, help="Sweep config with types/sizes/repeats")

    p_plot = sub.add_parser("plot", help="Plot converged rounds from a summary CSV")
    p_plot.add_argument("--in", dest="input_csv", required=True)
    p_plot.add_argument("--out", dest="out_png", required=True)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "run":
        cfg = load_effective_config(args.config)
        if args.max_rounds is not None:
            cfg.setdefault("engine", {})["max_rounds"] = args.max_rounds
        if args.output_dir is not None:
            cfg["output_dir"] = args.output_dir
        backend = SyncBackend()
        payload = run_config(cfg, backend=backend)
        if args.format == "json":
            print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
        else:
            print(format_result(backend.last_result, rounds=not args.final_only))
        return 0

    if args.cmd == "validate":
        errors = validate_config(load_effective_config(args.config))
        if errors:
            print(json.dumps({"ok": False, "errors": errors}, ensure_ascii=False, indent=2))
            return 1
        print(json.dumps({"ok": True}, ensure_ascii=False, indent=2))
        return 0

    if args.cmd == "summarize":
        from dvsim.eval.summarize import summarize_runs

        summarize_runs(args.runs, args.out)
        return 0

    if args.cmd == "sweep":
        from dvsim.eval.sweep import run_sweep
        from dvsim.utils.io import load_config_file

        outputs = run_sweep(load_config_file(args.config), load_effective_config(args.config))
        print(json.dumps(outputs, indent=2, ensure_ascii=False))
        return 0

    if args.cmd == "plot":
        from dvsim.eval.plot import plot_summary

        plot_summary(args.input_csv, args.out_png)
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
