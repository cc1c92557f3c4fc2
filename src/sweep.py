"""Population sweep of Exact MVA, cross-checked against closed network simulation."""

from __future__ import annotations

import argparse
import math
from pathlib import Path
from typing import Iterable, List

import matplotlib.pyplot as plt
import pandas as pd
from tqdm import tqdm, trange

try:
    from mva import (
        ClosedNetworkParams,
        MVAError,
        MVAParams,
        MVAResult,
        asymptotic_bounds,
        compare,
        generate_random,
        get_params,
        list_scenarios,
        read_demands,
        relative_error,
        run_closed_network,
    )
    from mva import exact, parallel
except ModuleNotFoundError:  # pragma: no cover
    from .mva import (
        ClosedNetworkParams,
        MVAError,
        MVAParams,
        MVAResult,
        asymptotic_bounds,
        compare,
        generate_random,
        get_params,
        list_scenarios,
        read_demands,
        relative_error,
        run_closed_network,
    )
    from .mva import exact, parallel


def parse_population_list(spec: str, max_population: int) -> List[int]:
    values = []
    for chunk in spec.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            n = int(chunk)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"Invalid population '{chunk}'.") from exc
        if n < 1 or n > max_population:
            raise argparse.ArgumentTypeError(
                f"Every simulated population must be within 1..{max_population}."
            )
        values.append(n)
    return sorted(set(values))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sweep MVA metrics over populations 1..N.")
    parser.add_argument(
        "--scenario",
        type=str,
        choices=list(list_scenarios()),
        help="Named network shortcut.",
    )
    parser.add_argument("--demands", type=Path, help="File with comma-separated demands.")
    parser.add_argument("--stations", type=int, default=8, help="Stations for random demands.")
    parser.add_argument("--seed", type=int, default=123, help="Base random seed.")
    parser.add_argument("--jobs", type=int, default=50, help="Largest population N.")
    parser.add_argument("--think", type=float, default=None, help="Think time Z.")
    parser.add_argument("--workers", type=int, default=None, help="Threads for the concurrent engine.")
    parser.add_argument(
        "--sim-populations",
        type=str,
        default="",
        help='Comma-separated populations to simulate (e.g. "1,5,10"); empty disables simulation.',
    )
    parser.add_argument("--warmup", type=float, default=1_000.0, help="Simulation warm-up time.")
    parser.add_argument("--horizon", type=float, default=20_000.0, help="Simulation horizon.")
    parser.add_argument("--replications", type=int, default=10, help="Replications per population.")
    parser.add_argument(
        "--results-out",
        type=Path,
        default=Path("outputs/sweep_mva.csv"),
        help="CSV with throughput and response time per population.",
    )
    parser.add_argument(
        "--stations-out",
        type=Path,
        default=Path("outputs/sweep_stations.csv"),
        help="CSV with per-station metrics at the largest population.",
    )
    parser.add_argument(
        "--summary-out",
        type=Path,
        default=Path("outputs/sweep_validation.csv"),
        help="CSV with simulation vs. MVA statistics per simulated population.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=Path("reports"),
        help="Directory where the validation figure will be written.",
    )
    return parser.parse_args()


def resolve_params(args: argparse.Namespace) -> MVAParams:
    if args.scenario:
        return get_params(args.scenario, population=args.jobs, think_time=args.think)
    if args.demands:
        demands = read_demands(args.demands)
    else:
        demands = generate_random(args.stations, seed=args.seed)
    think = 0.0 if args.think is None else args.think
    return MVAParams(demands=demands, population=args.jobs, think_time=think)


def population_table(result: MVAResult) -> pd.DataFrame:
    """One row per population with MVA metrics and the asymptotic bounds."""
    bounds = asymptotic_bounds(result.demands, result.think_time)
    rows = []
    for n in range(1, result.population + 1):
        residence = result.residence_history[n - 1]
        rows.append(
            {
                "n": n,
                "throughput": float(result.throughput_history[n - 1]),
                "system_response": float(residence.sum()),
                "throughput_upper": bounds.throughput_upper(n),
                "response_lower": bounds.response_lower(n),
                "bottleneck": bounds.bottleneck,
                "knee": bounds.knee,
                "think_time": result.think_time,
            }
        )
    return pd.DataFrame(rows)


def station_table(result: MVAResult) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "station": range(result.num_stations),
            "demand": result.demands,
            "residence": result.residence,
            "queue_length": result.queue_lengths(),
            "utilization": result.utilizations(),
        }
    )


def run_replications_for_population(
    params: MVAParams, population: int, args: argparse.Namespace
) -> Iterable[dict[str, float]]:
    for rep in trange(args.replications, desc=f"N={population}", unit="rep"):
        sim_params = ClosedNetworkParams(
            demands=params.demands,
            population=population,
            think_time=params.think_time,
            seed=args.seed + rep,
            warmup=args.warmup,
            horizon=args.horizon,
        )
        yield run_closed_network(sim_params).as_dict()


def summarize_by_population(df: pd.DataFrame, mva_table: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for n, group in df.groupby("population"):
        mva_row = mva_table[mva_table["n"] == n].iloc[0]
        row = {"population": int(n), "replications": len(group)}
        for column in ("throughput", "system_response", "little_error"):
            series = group[column]
            mean = float(series.mean())
            std = float(series.std(ddof=1)) if len(series) > 1 else 0.0
            row[f"{column}_mean"] = mean
            row[f"{column}_ci95"] = 1.96 * std / math.sqrt(len(series)) if len(series) > 1 else 0.0
        row["throughput_mva"] = float(mva_row["throughput"])
        row["system_response_mva"] = float(mva_row["system_response"])
        row["throughput_rel_err"] = relative_error(row["throughput_mean"], row["throughput_mva"])
        row["system_response_rel_err"] = relative_error(
            row["system_response_mean"], row["system_response_mva"]
        )
        rows.append(row)
    return pd.DataFrame(rows).sort_values("population")


def plot_validation(summary: pd.DataFrame, mva_table: pd.DataFrame, reports_dir: Path) -> None:
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(mva_table["n"], mva_table["throughput"], label="MVA")
    ax.errorbar(
        summary["population"],
        summary["throughput_mean"],
        yerr=summary["throughput_ci95"],
        fmt="o",
        capsize=5,
        label="Simulacion (IC95)",
    )
    ax.set_xlabel("N")
    ax.set_ylabel("X(N)")
    ax.set_title("Throughput: MVA vs. simulacion")
    ax.legend()
    fig.tight_layout()
    fig.savefig(reports_dir / "validacion_throughput.png", dpi=150)
    plt.close(fig)


def main() -> None:
    args = parse_args()
    if args.jobs < 1:
        raise SystemExit("--jobs must be >= 1 for a sweep.")
    try:
        params = resolve_params(args)
        result = exact.run(params, record_history=True)
        concurrent = parallel.run(params, workers=args.workers)
    except MVAError as exc:
        raise SystemExit(f"Error: {exc}") from exc
    sim_populations = parse_population_list(args.sim_populations, params.population)

    verdict = compare(result.residence, concurrent.residence)
    if not verdict.passed:
        raise SystemExit(f"Los motores no coinciden.\n{verdict.describe()}")

    mva_table = population_table(result)
    args.results_out.parent.mkdir(parents=True, exist_ok=True)
    args.stations_out.parent.mkdir(parents=True, exist_ok=True)
    mva_table.to_csv(args.results_out, index=False)
    station_table(result).to_csv(args.stations_out, index=False)
    print(f"Barrido MVA: {args.results_out.resolve()}")
    print(f"Metricas por estacion: {args.stations_out.resolve()}")

    if not sim_populations:
        return

    all_results = []
    for n in tqdm(sim_populations, desc="Poblaciones", unit="N"):
        all_results.extend(run_replications_for_population(params, n, args))

    results_df = pd.DataFrame(all_results)
    summary_df = summarize_by_population(results_df, mva_table)
    args.summary_out.parent.mkdir(parents=True, exist_ok=True)
    summary_df.to_csv(args.summary_out, index=False)

    args.reports_dir.mkdir(parents=True, exist_ok=True)
    plot_validation(summary_df, mva_table, args.reports_dir)

    print(f"Resumen de validacion: {args.summary_out.resolve()}")
    print(f"Grafico guardado en {args.reports_dir.resolve()}")


if __name__ == "__main__":
    main()
