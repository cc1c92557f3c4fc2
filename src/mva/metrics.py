"""Derived performance metrics and asymptotic bounds for closed networks."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Mapping

import numpy as np

from .errors import DegenerateNetworkError
from .params import DemandLike, validate_demands, validate_population, validate_think_time


@dataclass(frozen=True)
class AsymptoticBounds:
    """Balanced-job-independent bounds of a closed single-class network."""

    total_demand: float
    max_demand: float
    bottleneck: int
    think_time: float

    @property
    def knee(self) -> float:
        """Population N* where the light- and heavy-load throughput bounds meet."""
        if self.max_demand == 0:
            return float("inf")
        return (self.total_demand + self.think_time) / self.max_demand

    def throughput_upper(self, n: int) -> float:
        """X(n) <= min(n / (D + Z), 1 / Dmax)."""
        light = n / (self.total_demand + self.think_time)
        if self.max_demand == 0:
            return light
        return min(light, 1.0 / self.max_demand)

    def response_lower(self, n: int) -> float:
        """sum_k R_k(n) >= max(D, n Dmax - Z)."""
        return max(self.total_demand, n * self.max_demand - self.think_time)

    def as_dict(self) -> Mapping[str, float]:
        payload = dict(asdict(self))
        payload["knee"] = self.knee
        return payload


def asymptotic_bounds(demands: DemandLike, think_time: float = 0.0) -> AsymptoticBounds:
    """
    Compute total demand, bottleneck demand and the knee of the network.

    Raises:
        DegenerateNetworkError: when think time and every demand are zero.
    """
    values = validate_demands(demands)
    z = validate_think_time(think_time)
    total = float(np.sum(values))
    if total + z == 0:
        raise DegenerateNetworkError(1)
    bottleneck = int(np.argmax(values))
    return AsymptoticBounds(
        total_demand=total,
        max_demand=float(values[bottleneck]),
        bottleneck=bottleneck,
        think_time=z,
    )


def system_response_time(residence: DemandLike) -> float:
    """Sum of the per-station residence times."""
    return float(np.sum(np.asarray(residence, dtype=np.float64)))


def throughput_from_residences(
    residence: DemandLike, population: int, think_time: float = 0.0
) -> float:
    """X(N) = N / (Z + sum_k R_k(N)); zero for an empty network population."""
    n = validate_population(population)
    z = validate_think_time(think_time)
    if n == 0:
        return 0.0
    denom = z + system_response_time(residence)
    if denom == 0:
        raise DegenerateNetworkError(n)
    return n / denom


def relative_error(sim_value: float, reference_value: float) -> float:
    """Return |sim-ref| / ref guarding division by zero."""
    if reference_value == 0:
        return 0.0 if sim_value == 0 else float("inf")
    return abs(sim_value - reference_value) / abs(reference_value)
