"""Sequential Exact Mean Value Analysis for closed single-class networks."""

from __future__ import annotations

import numpy as np

from .errors import DegenerateNetworkError
from .params import DemandLike, MVAParams, MVAResult, StepState


def advance(state: StepState, demands: np.ndarray, think_time: float) -> StepState:
    """
    Evaluate population ``state.population + 1`` from the committed previous step.

    Q_k(n) = X(n-1) R_k(n-1), R_k(n) = D_k (1 + Q_k(n)) and
    X(n) = n / (Z + sum_k R_k(n)). The total is reduced with ``numpy.sum`` over
    the station axis, so a given input always yields the same bits.

    Raises:
        DegenerateNetworkError: when Z + sum_k R_k(n) is zero.
    """
    n = state.population + 1
    queue = state.throughput * state.residence
    residence = demands * (1.0 + queue)
    denom = think_time + float(np.sum(residence))
    if denom == 0.0:
        raise DegenerateNetworkError(n)
    residence.setflags(write=False)
    return StepState(population=n, residence=residence, throughput=n / denom)


def run(params: MVAParams, record_history: bool = False) -> MVAResult:
    """Fold :func:`advance` over populations 1..N for already validated params."""
    n_target = params.population
    state = StepState.initial(params.num_stations)
    throughput_history = np.zeros(n_target, dtype=np.float64) if record_history else None
    residence_history = (
        np.zeros((n_target, params.num_stations), dtype=np.float64) if record_history else None
    )

    for _ in range(n_target):
        state = advance(state, params.demands, params.think_time)
        if record_history:
            throughput_history[state.population - 1] = state.throughput
            residence_history[state.population - 1] = state.residence

    return MVAResult(
        demands=params.demands,
        population=n_target,
        think_time=params.think_time,
        residence=np.array(state.residence),
        throughput=state.throughput,
        throughput_history=throughput_history,
        residence_history=residence_history,
    )


def exact_mva(
    demands: DemandLike,
    population: int,
    think_time: float = 0.0,
    record_history: bool = False,
) -> MVAResult:
    """
    Run the sequential recurrence from 1 job up to ``population`` jobs.

    A population of zero returns a zero residence vector and zero throughput.

    Raises:
        InvalidInputError: negative/non-finite demands or think time, empty
            demand vector, negative or non-integer population.
        DegenerateNetworkError: think time and every demand are zero.
    """
    params = MVAParams(demands=demands, population=population, think_time=think_time)
    return run(params, record_history=record_history)


def compute_residence_times(
    demands: DemandLike, target_population: int, think_time: float = 0.0
) -> np.ndarray:
    """Return the residence time vector R_k(N), in the order of ``demands``."""
    return exact_mva(demands, target_population, think_time).residence
