from __future__ import annotations

from pathlib import Path


def plot_summary(input_csv: str, out_png: str) -> None:
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import pandas as pd
        import seaborn as sns
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("pandas, seaborn and matplotlib are required for plotting (pip install dvsim[plot])") from exc

    df = pd.read_csv(input_csv)
    # Non-converged runs are drawn at the number of rounds they ran.
    df["rounds"] = df["converged_round"].fillna(df["rounds_run"]).astype(int)

    plt.figure(figsize=(10, 4))
    sns.barplot(x="run_id", y="rounds", hue="status", data=df, dodge=False)
    plt.xticks(rotation=75, fontsize=8)
    plt.xlabel("Run")
    plt.ylabel("Rounds to convergence")
    plt.legend(title="Status")
    plt.tight_layout()
    Path(out_png).parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_png, dpi=150)
    plt.close()
