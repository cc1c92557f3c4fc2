"""Command line interface to run both Exact MVA engines and compare them."""

from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Tuple

import numpy as np

try:
    from mva import (
        DEFAULT_TOLERANCE,
        MVAError,
        MVAParams,
        MVAResult,
        compare,
        generate_random,
        get_params,
        list_scenarios,
        read_demands,
        write_residences,
    )
    from mva import exact, parallel
except ModuleNotFoundError:  # pragma: no cover - fallback when executed as package
    from .mva import (
        DEFAULT_TOLERANCE,
        MVAError,
        MVAParams,
        MVAResult,
        compare,
        generate_random,
        get_params,
        list_scenarios,
        read_demands,
        write_residences,
    )
    from .mva import exact, parallel

NUM_STATIONS_DEFAULT = 512
NUM_JOBS_DEFAULT = 60_000
THINK_TIME_DEFAULT = 0.0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run sequential and concurrent Exact MVA on a closed network.",
        epilog=(
            "In the demands file, values are separated by commas. Without --demands "
            "or --scenario, random demands are generated from --seed."
        ),
    )
    parser.add_argument("-n", "--jobs", type=int, default=NUM_JOBS_DEFAULT, help="Number of jobs N.")
    parser.add_argument(
        "-z",
        "--think",
        type=float,
        default=None,
        help=f"Think time Z (default: the scenario's, else {THINK_TIME_DEFAULT:g}).",
    )
    parser.add_argument("-d", "--demands", type=Path, help="File with comma-separated demands.")
    parser.add_argument(
        "-k",
        "--stations",
        type=int,
        default=NUM_STATIONS_DEFAULT,
        help="Number of stations for random demands (ignored with --demands).",
    )
    parser.add_argument(
        "--scenario",
        type=str,
        choices=list(list_scenarios()),
        help="Named network shortcut instead of a demands file.",
    )
    parser.add_argument("--seed", type=int, default=123, help="Seed for random demands.")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads for the concurrent engine (default: CPU count).",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=DEFAULT_TOLERANCE,
        help="Maximum accepted difference between the two residence vectors.",
    )
    parser.add_argument(
        "--outputs",
        type=Path,
        default=Path("outputs/residences.txt"),
        help="Path where both residence vectors will be written.",
    )
    return parser.parse_args(argv)


def resolve_params(args: argparse.Namespace) -> Tuple[MVAParams, str]:
    """Return the validated run parameters and a label of where demands came from."""
    if args.scenario and args.demands:
        raise SystemExit("Use either --scenario or --demands, not both.")

    if args.scenario:
        params = get_params(args.scenario, population=args.jobs, think_time=args.think)
        return params, f"scenario {args.scenario}"

    if args.demands:
        try:
            demands = read_demands(args.demands)
        except FileNotFoundError as exc:
            raise SystemExit(str(exc)) from exc
        source = str(args.demands)
    else:
        demands = generate_random(args.stations, seed=args.seed)
        source = f"random (seed={args.seed})"
    think = THINK_TIME_DEFAULT if args.think is None else args.think
    return MVAParams(demands=demands, population=args.jobs, think_time=think), source


def report(label: str, result: MVAResult, elapsed: float) -> None:
    print(f"\n{label}:")
    print(f"  tiempo (s)         : {elapsed:>12.6f}")
    print(f"  throughput global  : {result.throughput:>12.6f}")
    print(f"  tiempo de respuesta: {result.system_response:>12.6f}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        params, source = resolve_params(args)

        start = time.perf_counter()
        sequential = exact.run(params)
        seq_elapsed = time.perf_counter() - start

        start = time.perf_counter()
        concurrent = parallel.run(params, workers=args.workers)
        mt_elapsed = time.perf_counter() - start

        verdict = compare(sequential.residence, concurrent.residence, tolerance=args.tolerance)
    except MVAError as exc:
        raise SystemExit(f"Error: {exc}") from exc

    workers = args.workers or parallel.default_workers()
    print(f"Red cerrada: K={params.num_stations} estaciones, N={params.population}, Z={params.think_time:g}")
    print(f"  demandas: {source}")
    report("Ejecucion secuencial", sequential, seq_elapsed)
    report(f"Ejecucion concurrente ({min(workers, params.num_stations)} hilos)", concurrent, mt_elapsed)
    if mt_elapsed > 0:
        print(f"\nSpeedup: {seq_elapsed / mt_elapsed:.3f}x")

    print("\nVerificacion:")
    print(verdict.describe())

    path = write_residences(args.outputs, [sequential.residence, concurrent.residence])
    print(f"\nTiempos de residencia guardados en {path.resolve()}")
    bottleneck = int(np.argmax(sequential.residence))
    print(f"Estacion con mayor residencia: {bottleneck}")
    return 0 if verdict.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
