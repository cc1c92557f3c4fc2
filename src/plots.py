"""Utility to generate figures from the MVA population sweep."""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate plots from sweep results.")
    parser.add_argument(
        "--results",
        type=Path,
        default=Path("outputs/sweep_mva.csv"),
        help="Per-population CSV produced by src.sweep.",
    )
    parser.add_argument(
        "--stations",
        type=Path,
        default=Path("outputs/sweep_stations.csv"),
        help="Per-station CSV produced by src.sweep.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=Path("reports"),
        help="Directory where PNG files will be saved.",
    )
    return parser.parse_args()


def load_results(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")
    df = pd.read_csv(path)
    if df.empty:
        raise ValueError("Results file is empty. Run the sweep first.")
    return df


def plot_throughput(df: pd.DataFrame, out: Path) -> None:
    knee = float(df["knee"].iloc[0])
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(df["n"], df["throughput"], marker=".", label="X(N) MVA")
    ax.plot(df["n"], df["throughput_upper"], linestyle="--", color="gray", label="Cota asintotica")
    if knee <= df["n"].max():
        ax.axvline(knee, color="black", linestyle=":", label=f"N* = {knee:.2f}")
    ax.set_xlabel("N")
    ax.set_ylabel("Throughput")
    ax.set_title("Throughput vs. poblacion")
    ax.legend()
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_response(df: pd.DataFrame, out: Path) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(df["n"], df["system_response"], marker=".", label="R(N) MVA")
    ax.plot(df["n"], df["response_lower"], linestyle="--", color="gray", label="Cota asintotica")
    ax.set_xlabel("N")
    ax.set_ylabel("Tiempo de respuesta")
    ax.set_title("Tiempo de respuesta del sistema vs. poblacion")
    ax.legend()
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_station_residence(stations: pd.DataFrame, out: Path) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(stations["station"], stations["residence"], color="#4c72b0", label="Residencia")
    ax2 = ax.twinx()
    ax2.plot(stations["station"], stations["utilization"], color="black", marker="s", label="Utilizacion")
    ax2.set_ylim(0, 1.05)
    ax.set_xlabel("Estacion")
    ax.set_ylabel("R_k(N)")
    ax2.set_ylabel("U_k(N)")
    lines, labels = ax.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax.legend(lines + lines2, labels + labels2, loc="upper right")
    ax.set_title("Residencia y utilizacion por estacion")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def main() -> None:
    args = parse_args()
    df = load_results(args.results)
    stations = load_results(args.stations)

    args.reports_dir.mkdir(parents=True, exist_ok=True)

    plot_throughput(df, args.reports_dir / "throughput_vs_n.png")
    plot_response(df, args.reports_dir / "respuesta_vs_n.png")
    plot_station_residence(stations, args.reports_dir / "residencia_estaciones.png")

    print(f"Figuras guardadas en {args.reports_dir.resolve()}")


if __name__ == "__main__":
    main()
