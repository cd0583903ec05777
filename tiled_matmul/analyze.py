#!/usr/bin/env python3
"""Plot throughput of tiled matmul runs from the runner's CSV output."""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib


def _configure_matplotlib() -> None:
    """Select a non-interactive backend for headless environments."""

    matplotlib.use("Agg")


_configure_matplotlib()

import matplotlib.pyplot as plt  # noqa: E402  (after backend selection)
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

REQUIRED_COLUMNS = {"benchmark", "N", "M", "L", "kernel_sec", "total_sec"}

METRIC_ORDER = [
    ("kernel_gflops", "GFLOP/s excluding data xfer"),
    ("total_gflops", "GFLOP/s including data xfer"),
]


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create bar plots of kernel-only and end-to-end throughput per matrix shape."
    )
    parser.add_argument(
        "--csv",
        type=Path,
        default=Path("tiled_matmul_results.csv"),
        help="Path to the CSV file produced by `tiled-matmul --mode multi_run_timing`",
    )
    parser.add_argument(
        "--outdir",
        type=Path,
        default=Path("tiled_matmul_plots"),
        help="Directory where the bar chart images will be saved",
    )
    return parser.parse_args(argv)


def safe_gflops(flops: pd.Series, seconds: pd.Series) -> pd.Series:
    return (
        flops.div(seconds)
        .div(1e9)
        .replace([np.inf, -np.inf], np.nan)
    )


def load_results(csv_path: Path) -> pd.DataFrame:
    df = pd.read_csv(csv_path, na_values=["NA", "nan", ""], keep_default_na=True)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        missing_cols = ", ".join(sorted(missing))
        raise ValueError(f"CSV file is missing required columns: {missing_cols}")

    df = df.dropna(subset=["kernel_sec", "total_sec"]).copy()  # Ignore rows without a timing result

    for col in ("N", "M", "L"):
        df[col] = df[col].astype(int)
    df["kernel_sec"] = df["kernel_sec"].astype(float)
    df["total_sec"] = df["total_sec"].astype(float)

    flops = 2.0 * df["N"] * df["M"] * df["L"]
    df["kernel_gflops"] = safe_gflops(flops, df["kernel_sec"])
    df["total_gflops"] = safe_gflops(flops, df["total_sec"])
    df["shape"] = df["N"].astype(str) + "x" + df["M"].astype(str) + "x" + df["L"].astype(str)
    return df


def aggregate_shapes(df: pd.DataFrame) -> pd.DataFrame:
    grouped = df.groupby(["benchmark", "shape", "N", "M", "L"], sort=False)[
        ["kernel_sec", "total_sec", "kernel_gflops", "total_gflops"]
    ].mean()
    return grouped.reset_index()


def plot_throughput(df: pd.DataFrame, outdir: Path) -> int:
    if df.empty:
        return 0

    outdir.mkdir(parents=True, exist_ok=True)
    data = df.sort_values(["N", "M", "L"])

    plot_count = 0
    for metric, title in METRIC_ORDER:
        width = max(6.0, 0.6 * data["shape"].nunique())
        fig, ax = plt.subplots(figsize=(width, 4.5))
        sns.barplot(data=data, x="shape", y=metric, hue="benchmark", ax=ax)
        ax.set_title(title)
        ax.set_xlabel("N x M x L")
        ax.set_ylabel("GFLOP/s (higher is better)")
        ax.tick_params(axis="x", labelrotation=30)
        ax.grid(axis="y", linestyle="--", alpha=0.2)

        fig.tight_layout()
        fig.savefig(outdir / f"{metric}.png", dpi=150)
        plt.close(fig)
        plot_count += 1

    return plot_count


def print_best_configuration(df: pd.DataFrame) -> None:
    data = df.dropna(subset=["kernel_gflops"])
    if data.empty:
        return

    best_row = data.loc[data["kernel_gflops"].idxmax()]
    print(
        f"Fastest kernel: {best_row['kernel_gflops']:.3f} GFLOP/s "
        f"({best_row['benchmark']}, {best_row['shape']})"
    )


def main(argv=None) -> None:
    args = _parse_args(argv)
    results = load_results(args.csv)
    aggregated = aggregate_shapes(results)
    plot_total = plot_throughput(aggregated, args.outdir)
    print(f"Wrote {plot_total} bar chart(s) to {args.outdir.resolve()}")
    print_best_configuration(aggregated)


if __name__ == "__main__":
    main()
