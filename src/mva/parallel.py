"""Barrier-synchronised Exact MVA that splits every population step across threads."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional

import numpy as np

from .errors import DegenerateNetworkError, InvalidInputError
from .params import DemandLike, MVAParams, MVAResult


def default_workers() -> int:
    """Size of the worker pool when the caller does not choose one."""
    return os.cpu_count() or 1


def station_slices(num_stations: int, workers: int) -> List[slice]:
    """
    Partition stations 0..K-1 into contiguous, non-empty slices.

    The partition only depends on ``num_stations`` and ``workers`` (capped at
    ``num_stations``); the first ``K % workers`` slices hold one extra station.
    """
    if num_stations < 1:
        raise InvalidInputError("At least one station is required.")
    if workers < 1:
        raise InvalidInputError("The worker pool needs at least one worker.")
    workers = min(workers, num_stations)
    base, extra = divmod(num_stations, workers)
    slices = []
    start = 0
    for index in range(workers):
        stop = start + base + (1 if index < extra else 0)
        slices.append(slice(start, stop))
        start = stop
    return slices


class BarrierRun:
    """
    Shared state of one concurrent run.

    Each worker owns one slice of ``residence`` and one cell of ``partials``.
    Per population step every worker updates its slice from the published
    throughput, stores its partial sum and waits on ``barrier``. The barrier
    action runs in a single thread after all workers arrived: it reduces the
    partials in worker order and publishes X(n). Workers are released only
    after the publication, which is the start of step n+1.
    """

    def __init__(self, params: MVAParams, slices: List[slice], record_history: bool = False):
        self.params = params
        self.slices = slices
        self.residence = np.zeros(params.num_stations, dtype=np.float64)
        self.partials = np.zeros(len(slices), dtype=np.float64)
        self.population = 0
        self.throughput = 0.0
        self.error: Optional[DegenerateNetworkError] = None
        self.throughput_history = None
        self.residence_history = None
        if record_history:
            self.throughput_history = np.zeros(params.population, dtype=np.float64)
            self.residence_history = np.zeros(
                (params.population, params.num_stations), dtype=np.float64
            )
        self.barrier = threading.Barrier(len(slices), action=self._publish)

    def _publish(self) -> None:
        n = self.population + 1
        total = 0.0
        for partial in self.partials:
            total += float(partial)
        denom = self.params.think_time + total
        if denom == 0.0:
            # Workers see the error after release and stop before step n+1.
            self.error = DegenerateNetworkError(n)
            return
        self.throughput = n / denom
        self.population = n
        if self.throughput_history is not None:
            self.throughput_history[n - 1] = self.throughput
            self.residence_history[n - 1] = self.residence

    def worker(self, index: int) -> None:
        window = self.slices[index]
        demands = self.params.demands[window]
        residence = self.residence[window]
        for _ in range(self.params.population):
            queue = self.throughput * residence
            np.multiply(demands, 1.0 + queue, out=residence)
            self.partials[index] = np.sum(residence)
            self.barrier.wait()
            if self.error is not None:
                return

    def guarded(self, index: int) -> None:
        """Run :meth:`worker`, breaking the barrier if it fails."""
        try:
            self.worker(index)
        except BaseException:
            # Release the other workers instead of leaving them parked forever.
            self.barrier.abort()
            raise


def run(
    params: MVAParams, workers: Optional[int] = None, record_history: bool = False
) -> MVAResult:
    """Run the concurrent recurrence for already validated params."""
    if workers is None:
        workers = default_workers()
    slices = station_slices(params.num_stations, workers)

    if params.population == 0:
        return MVAResult(
            demands=params.demands,
            population=0,
            think_time=params.think_time,
            residence=np.zeros(params.num_stations, dtype=np.float64),
            throughput=0.0,
            throughput_history=np.zeros(0, dtype=np.float64) if record_history else None,
            residence_history=(
                np.zeros((0, params.num_stations), dtype=np.float64) if record_history else None
            ),
        )

    shared = BarrierRun(params, slices, record_history=record_history)
    # The pool must be exactly as large as the barrier party count.
    with ThreadPoolExecutor(max_workers=len(slices), thread_name_prefix="mva-worker") as pool:
        futures = [pool.submit(shared.guarded, index) for index in range(len(slices))]
        wait(futures)

    failures = [f.exception() for f in futures if f.exception() is not None]
    if failures:
        root = next(
            (exc for exc in failures if not isinstance(exc, threading.BrokenBarrierError)),
            failures[0],
        )
        raise root
    if shared.error is not None:
        raise shared.error

    return MVAResult(
        demands=params.demands,
        population=params.population,
        think_time=params.think_time,
        residence=shared.residence,
        throughput=shared.throughput,
        throughput_history=shared.throughput_history,
        residence_history=shared.residence_history,
    )


def exact_mva_mt(
    demands: DemandLike,
    population: int,
    think_time: float = 0.0,
    workers: Optional[int] = None,
    record_history: bool = False,
) -> MVAResult:
    """
    Run the recurrence with the per-station update spread over ``workers`` threads.

    Same semantics and errors as :func:`mva.exact.exact_mva`. Results agree with
    the sequential engine within floating point tolerance, not bit for bit,
    because the station total is reduced per slice first.
    """
    params = MVAParams(demands=demands, population=population, think_time=think_time)
    return run(params, workers=workers, record_history=record_history)


def compute_residence_times_mt(
    demands: DemandLike,
    target_population: int,
    think_time: float = 0.0,
    workers: Optional[int] = None,
) -> np.ndarray:
    """Concurrent counterpart of :func:`mva.exact.compute_residence_times`."""
    return exact_mva_mt(demands, target_population, think_time, workers=workers).residence
