from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

ALGORITHM_NAMES = {
    "thorup_mincost": "Thorup best-of-N",
    "thorup_sample": "Thorup sampling",
    "random_k": "Random k",
}

METRICS = ["cost", "num_centers", "max_distance", "runtime_sec"]


def _format_mean_std(mean_val: float | None, std_val: float | None, precision: int = 3) -> str:
    if mean_val is None or std_val is None or np.isnan(mean_val):
        return "N/A"
    if np.isnan(std_val):
        std_val = 0.0
    fmt = f"{{:.{precision}f}} ± {{:.{precision}f}}"
    return fmt.format(mean_val, std_val)


def _load_raw(raw_root: Path) -> pd.DataFrame:
    parts: List[pd.DataFrame] = []
    parquet_files = sorted(raw_root.glob("*.parquet"))
    if not parquet_files:
        raise FileNotFoundError(
            f"No Parquet files found under {raw_root}. "
            f"Make sure experiments completed successfully and generated result files."
        )
    logger.info(f"Loading {len(parquet_files)} result files from {raw_root}")
    for p in parquet_files:
        try:
            parts.append(pd.read_parquet(p))
        except Exception as exc:
            logger.warning(f"Failed to load {p}: {exc}")
            continue
    if not parts:
        raise FileNotFoundError(f"Could not load any Parquet files from {raw_root}")
    return pd.concat(parts, ignore_index=True)


def _aggregate(df: pd.DataFrame) -> pd.DataFrame:
    group_cols = ["graph_id", "algorithm", "k"]

    agg = df.groupby(group_cols, dropna=False)[METRICS].agg(["mean", "std"])
    agg.columns = [f"{m}_{stat}" for m, stat in agg.columns]
    agg = agg.reset_index()

    # Cost relative to the cheapest algorithm on the same (graph, k).
    best = agg.groupby(["graph_id", "k"])["cost_mean"].transform("min")
    agg["cost_ratio"] = agg["cost_mean"] / best.replace(0.0, np.nan)
    return agg


def _create_algorithm_comparison_table(summary: pd.DataFrame) -> pd.DataFrame:
    """Compare algorithms aggregated over all graphs and k."""
    rows = []
    for alg in sorted(summary["algorithm"].unique()):
        alg_data = summary[summary["algorithm"] == alg]
        rows.append(
            {
                "Algorithm": ALGORITHM_NAMES.get(alg, alg),
                "Cost ratio": f"{float(alg_data['cost_ratio'].mean()):.3f}",
                "Centers": _format_mean_std(
                    float(alg_data["num_centers_mean"].mean()),
                    float(alg_data["num_centers_std"].mean()),
                    precision=1,
                ),
                "Runtime (s)": _format_mean_std(
                    float(alg_data["runtime_sec_mean"].mean()),
                    float(alg_data["runtime_sec_std"].mean()),
                    precision=4,
                ),
            }
        )
    return pd.DataFrame(rows)


def _create_k_table(summary: pd.DataFrame) -> pd.DataFrame:
    """Cost ratio and center count per target k for each algorithm."""
    rows = []
    for k in sorted(summary["k"].unique()):
        k_data = summary[summary["k"] == k]
        row: Dict[str, object] = {"k": int(k)}
        for alg in sorted(k_data["algorithm"].unique()):
            alg_data = k_data[k_data["algorithm"] == alg]
            label = ALGORITHM_NAMES.get(alg, alg)
            row[f"{label} ratio"] = f"{float(alg_data['cost_ratio'].mean()):.3f}"
            row[f"{label} centers"] = f"{float(alg_data['num_centers_mean'].mean()):.1f}"
        rows.append(row)
    return pd.DataFrame(rows)


def _save_table_artifacts(summary: pd.DataFrame, output_root: Path) -> None:
    output_root.mkdir(parents=True, exist_ok=True)

    summary.to_parquet(output_root / "summary.parquet", index=False)
    summary.to_csv(output_root / "summary.csv", index=False)

    tables = {
        "table_algorithm_comparison": _create_algorithm_comparison_table(summary),
        "table_k_comparison": _create_k_table(summary),
    }
    for name, table in tables.items():
        latex = table.to_latex(index=False, escape=False, float_format=None)
        latex = latex.replace(" ± ", " $\\pm$ ")
        (output_root / f"{name}.tex").write_text(latex, encoding="utf-8")
        table.to_csv(output_root / f"{name}.csv", index=False)

    txt_lines = [
        "Concise summary tables for the Thorup k-median study.\n",
        "Tables:\n",
        "- table_algorithm_comparison: algorithms aggregated over all graphs and k\n",
        "- table_k_comparison: cost ratio and center count per target k\n",
    ]
    (output_root / "summary.txt").write_text("".join(txt_lines), encoding="utf-8")

    meta: Dict = {
        "tables": list(tables),
        "description": "Aggregated experimental results for the Thorup k-median study.",
    }
    (output_root / "summary.json").write_text(json.dumps(meta, indent=2), encoding="utf-8")


def _plot_and_describe(
    summary: pd.DataFrame,
    output_root: Path,
    metric: str,
    ylabel: str,
) -> None:
    """Create a grouped bar plot of ``metric`` per k and algorithm, plus text/JSON sidecars."""
    plot_df = summary.groupby(["algorithm", "k"], dropna=False)[metric].mean().reset_index()

    fig, ax = plt.subplots(figsize=(8, 4))
    ks = sorted(plot_df["k"].unique())
    algorithms = plot_df["algorithm"].unique()
    x = np.arange(len(ks))
    width = 0.8 / max(len(algorithms), 1)

    for i, alg in enumerate(algorithms):
        sub = plot_df[plot_df["algorithm"] == alg]
        heights = [sub[sub["k"] == k][metric].mean() for k in ks]
        ax.bar(x + i * width, heights, width=width, label=ALGORITHM_NAMES.get(alg, alg))

    ax.set_xticks(x + width * (len(algorithms) - 1) / 2)
    ax.set_xticklabels([str(k) for k in ks])
    ax.set_xlabel("k")
    ax.set_ylabel(ylabel)
    ax.set_title(f"{ylabel} by k and algorithm")
    ax.legend()
    fig.tight_layout()

    fname = f"{metric}_by_k"
    img_path = output_root / f"{fname}.png"
    fig.savefig(img_path, dpi=200)
    plt.close(fig)

    description = (
        f"Bar chart of {metric} (averaged over graphs and repetitions) for each target k, "
        f"one bar per algorithm. Lower is better."
    )
    (output_root / f"{fname}.txt").write_text(description, encoding="utf-8")

    meta = {
        "figure": img_path.name,
        "metric": metric,
        "ylabel": ylabel,
        "group_by": ["algorithm", "k"],
        "description": description,
    }
    (output_root / f"{fname}.json").write_text(json.dumps(meta, indent=2), encoding="utf-8")


def summarize(raw_root: Path, output_root: Path) -> pd.DataFrame:
    raw_df = _load_raw(raw_root)
    summary = _aggregate(raw_df)
    _save_table_artifacts(summary, output_root)

    _plot_and_describe(summary, output_root, metric="cost_ratio", ylabel="Cost / best cost")
    _plot_and_describe(summary, output_root, metric="num_centers_mean", ylabel="Centers")
    _plot_and_describe(summary, output_root, metric="runtime_sec_mean", ylabel="Runtime (s)")
    return summary


def main(argv: List[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    parser = argparse.ArgumentParser(description="Aggregate Thorup k-median experiment results.")
    parser.add_argument(
        "--raw",
        type=Path,
        required=True,
        help="Directory containing raw Parquet logs.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Directory for summary tables and plots.",
    )

    args = parser.parse_args(argv)
    summarize(args.raw, args.output)


if __name__ == "__main__":
    main()
