"""Tests for the barrier-synchronised concurrent engine."""

import math

import numpy as np
import pytest

from mva import parallel
from mva.compare import compare
from mva.errors import DegenerateNetworkError, InvalidInputError
from mva.exact import exact_mva
from mva.params import MVAParams
from mva.parallel import compute_residence_times_mt, exact_mva_mt, station_slices


def test_station_slices_are_contiguous_and_cover_every_station():
    slices = station_slices(10, 3)
    assert [(s.start, s.stop) for s in slices] == [(0, 4), (4, 7), (7, 10)]


def test_station_slices_cap_workers_at_station_count():
    slices = station_slices(3, 8)
    assert len(slices) == 3
    assert all(s.stop - s.start == 1 for s in slices)


def test_station_slices_reject_empty_pool():
    with pytest.raises(InvalidInputError):
        station_slices(4, 0)


def test_two_station_worked_example():
    residence = compute_residence_times_mt([1.0, 1.0], 2, workers=2)
    np.testing.assert_allclose(residence, [1.5, 1.5], atol=1e-9)


def test_single_station_saturates_immediately():
    result = exact_mva_mt([1.0], population=10, workers=4, record_history=True)
    np.testing.assert_allclose(result.throughput_history, np.ones(10))


@pytest.mark.parametrize(
    "stations, population, workers",
    [(1, 5, 1), (7, 50, 3), (33, 200, 4), (100, 300, 8), (257, 150, 5)],
)
def test_agrees_with_sequential_engine(stations, population, workers):
    rng = np.random.default_rng(stations)
    demands = rng.random(stations) * 0.8
    think = float(rng.random() * 2)
    sequential = exact_mva(demands, population, think)
    concurrent = exact_mva_mt(demands, population, think, workers=workers)
    verdict = compare(sequential.residence, concurrent.residence, 1e-3)
    assert verdict.failing_count == 0
    assert math.isclose(sequential.throughput, concurrent.throughput, rel_tol=1e-9)


def test_history_matches_sequential_engine():
    demands = [0.3, 0.1, 0.25, 0.4, 0.05]
    sequential = exact_mva(demands, 20, 1.0, record_history=True)
    concurrent = exact_mva_mt(demands, 20, 1.0, workers=2, record_history=True)
    np.testing.assert_allclose(concurrent.residence_history, sequential.residence_history, rtol=1e-12)
    np.testing.assert_allclose(concurrent.throughput_history, sequential.throughput_history, rtol=1e-12)


def test_zero_population_returns_zero_vector():
    result = exact_mva_mt([0.2, 0.4, 0.1], population=0, workers=2)
    np.testing.assert_array_equal(result.residence, np.zeros(3))
    assert result.throughput == 0.0


def test_degenerate_network_raises_for_concurrent_engine():
    with pytest.raises(DegenerateNetworkError) as info:
        exact_mva_mt([0.0, 0.0], population=5, workers=2)
    assert info.value.population == 1


def test_invalid_inputs_raise_before_starting_workers():
    with pytest.raises(InvalidInputError):
        exact_mva_mt([0.5, -0.1], population=3, workers=2)


def test_worker_failure_propagates_without_deadlock(monkeypatch):
    params = MVAParams(demands=[0.1, 0.2, 0.3, 0.4], population=10)
    original = parallel.BarrierRun.worker

    def flaky(self, index):
        if index == 1:
            raise RuntimeError("worker crashed")
        return original(self, index)

    monkeypatch.setattr(parallel.BarrierRun, "worker", flaky)
    with pytest.raises(RuntimeError, match="worker crashed"):
        parallel.run(params, workers=4)


def test_same_worker_count_reproduces_bit_for_bit():
    demands = np.random.default_rng(21).random(53) * 0.8
    first = exact_mva_mt(demands, 400, 0.7, workers=5)
    second = exact_mva_mt(demands, 400, 0.7, workers=5)
    np.testing.assert_array_equal(first.residence, second.residence)
    assert first.throughput == second.throughput


def test_equal_demands_give_equal_residences_with_uneven_slices():
    result = exact_mva_mt([0.35] * 7, population=25, think_time=1.0, workers=3, record_history=True)
    for row in result.residence_history:
        assert np.all(row == row[0])


def test_history_is_only_kept_on_request():
    result = exact_mva_mt([0.2, 0.3, 0.1], population=30, workers=2)
    assert result.throughput_history is None
    assert result.residence_history is None
