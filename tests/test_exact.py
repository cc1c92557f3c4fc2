"""Unit tests for the sequential Exact MVA engine."""

import math

import numpy as np
import pytest

from mva.errors import DegenerateNetworkError, InvalidInputError
from mva.exact import advance, compute_residence_times, exact_mva
from mva.params import StepState


def test_two_station_worked_example():
    result = exact_mva([1.0, 1.0], population=2, record_history=True)
    np.testing.assert_allclose(result.residence_history[0], [1.0, 1.0], atol=1e-12)
    assert math.isclose(result.throughput_history[0], 0.5)
    np.testing.assert_allclose(result.residence, [1.5, 1.5], atol=1e-9)
    assert math.isclose(result.throughput, 2.0 / 3.0, rel_tol=1e-12)


def test_single_station_saturates_immediately():
    result = exact_mva([1.0], population=25, record_history=True)
    np.testing.assert_allclose(result.throughput_history, np.ones(25))
    assert math.isclose(result.residence[0], 25.0)


def test_recurrence_holds_at_every_population():
    demands = np.array([0.3, 0.05, 0.7, 0.0, 0.21])
    think = 1.5
    result = exact_mva(demands, population=30, think_time=think, record_history=True)
    prev_r = np.zeros_like(demands)
    prev_x = 0.0
    for n in range(1, 31):
        r = result.residence_history[n - 1]
        x = result.throughput_history[n - 1]
        np.testing.assert_allclose(r, demands * (1 + prev_x * prev_r), rtol=1e-12)
        assert math.isclose(x, n / (think + r.sum()), rel_tol=1e-12)
        prev_r, prev_x = r, x


def test_residence_is_monotone_without_think_time():
    rng = np.random.default_rng(7)
    demands = rng.random(12)
    result = exact_mva(demands, population=40, record_history=True)
    steps = np.diff(result.residence_history, axis=0)
    assert np.all(steps >= -1e-12)


def test_equal_demands_give_equal_residences():
    result = exact_mva([0.4] * 6, population=15, think_time=2.0, record_history=True)
    for row in result.residence_history:
        assert np.all(row == row[0])


def test_zero_population_returns_zero_vector():
    result = exact_mva([0.5, 0.2], population=0)
    np.testing.assert_array_equal(result.residence, [0.0, 0.0])
    assert result.throughput == 0.0
    assert result.throughput_history is None


def test_results_are_reproducible_bit_for_bit():
    demands = np.random.default_rng(3).random(64) * 0.8
    first = compute_residence_times(demands, 200, 0.5)
    second = compute_residence_times(demands, 200, 0.5)
    np.testing.assert_array_equal(first, second)


def test_think_time_lowers_throughput():
    without = exact_mva([0.2, 0.3], population=5)
    with_think = exact_mva([0.2, 0.3], population=5, think_time=4.0)
    assert with_think.throughput < without.throughput


def test_derived_metrics_follow_littles_law():
    result = exact_mva([0.2, 0.5, 0.1], population=8, think_time=1.0)
    queues = result.queue_lengths()
    think_jobs = result.throughput * result.think_time
    assert math.isclose(queues.sum() + think_jobs, 8.0, rel_tol=1e-9)
    assert np.all(result.utilizations() <= 1.0 + 1e-12)
    assert math.isclose(result.as_dict()["system_response"], result.residence.sum())


def test_advance_from_initial_state():
    state = advance(StepState.initial(2), np.array([1.0, 3.0]), 0.0)
    assert state.population == 1
    np.testing.assert_array_equal(state.residence, [1.0, 3.0])
    assert math.isclose(state.throughput, 0.25)


def test_degenerate_network_raises_at_first_population():
    with pytest.raises(DegenerateNetworkError) as info:
        exact_mva([0.0, 0.0], population=3)
    assert info.value.population == 1


def test_zero_demands_with_think_time_are_not_degenerate():
    result = exact_mva([0.0, 0.0], population=3, think_time=2.0)
    np.testing.assert_array_equal(result.residence, [0.0, 0.0])
    assert math.isclose(result.throughput, 1.5)


@pytest.mark.parametrize(
    "demands, population, think",
    [
        ([0.1, -0.2], 3, 0.0),
        ([], 3, 0.0),
        ([0.1, float("nan")], 3, 0.0),
        ([0.1], -1, 0.0),
        ([0.1], 2.5, 0.0),
        ([0.1], 3, -1.0),
    ],
)
def test_invalid_inputs_raise(demands, population, think):
    with pytest.raises(InvalidInputError):
        exact_mva(demands, population=population, think_time=think)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        compute_residence_times([-1.0], 1)


def test_history_is_only_kept_on_request():
    result = exact_mva([0.2, 0.3], population=50)
    assert result.throughput_history is None
    assert result.residence_history is None
    recorded = exact_mva([0.2, 0.3], population=50, record_history=True)
    assert recorded.throughput_history.shape == (50,)
    assert math.isclose(recorded.throughput_history[-1], result.throughput)
