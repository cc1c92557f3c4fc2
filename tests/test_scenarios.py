"""Tests for the named network presets."""

import pytest

from mva.exact import exact_mva
from mva.scenarios import SCENARIOS, get_params, list_scenarios


def test_list_scenarios_is_sorted():
    assert list(list_scenarios()) == sorted(SCENARIOS)


def test_get_params_uses_scenario_think_time():
    params = get_params("interactive", population=10)
    assert params.think_time == 5.0
    assert params.num_stations == 3
    assert get_params("INTERACTIVE", population=10, think_time=0.0).think_time == 0.0


def test_unknown_scenario_raises():
    with pytest.raises(KeyError):
        get_params("nope", population=1)


def test_bottleneck_scenario_saturates_at_bottleneck_rate():
    params = get_params("bottleneck", population=200)
    result = exact_mva(params.demands, params.population, params.think_time)
    assert result.throughput == pytest.approx(2.0, rel=1e-3)
