"""Parameter objects and per-step state shared by both MVA engines."""

from __future__ import annotations

import math
import operator
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Union

import numpy as np

from .errors import InvalidInputError

DemandLike = Union[Sequence[float], np.ndarray]


def validate_demands(demands: DemandLike) -> np.ndarray:
    """
    Return a read-only float64 copy of the demand vector.

    Raises:
        InvalidInputError: if the vector is empty, not one-dimensional, or holds
            a negative, NaN or infinite entry.
    """
    try:
        values = np.array(demands, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("Service demands must be numeric.") from exc
    if values.ndim != 1:
        raise InvalidInputError("Service demands must be a one-dimensional sequence.")
    if values.size == 0:
        raise InvalidInputError("At least one station (demand) is required.")
    if not np.all(np.isfinite(values)):
        raise InvalidInputError("Service demands must be finite.")
    if np.any(values < 0):
        station = int(np.flatnonzero(values < 0)[0])
        raise InvalidInputError(f"Service demand of station {station} is negative.")
    values.setflags(write=False)
    return values


def validate_population(population: int) -> int:
    """Return the population as a plain int, rejecting negative or non-integer values."""
    if isinstance(population, bool):
        raise InvalidInputError("Population must be an integer, not a boolean.")
    try:
        n = operator.index(population)
    except TypeError as exc:
        raise InvalidInputError(f"Population must be an integer, got {population!r}.") from exc
    if n < 0:
        raise InvalidInputError("Population must be non-negative.")
    return n


def validate_think_time(think_time: float) -> float:
    try:
        z = float(think_time)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("Think time must be numeric.") from exc
    if not math.isfinite(z) or z < 0:
        raise InvalidInputError("Think time must be finite and non-negative.")
    return z


@dataclass(frozen=True)
class MVAParams:
    """Validated inputs of one engine run."""

    demands: np.ndarray
    population: int
    think_time: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "demands", validate_demands(self.demands))
        object.__setattr__(self, "population", validate_population(self.population))
        object.__setattr__(self, "think_time", validate_think_time(self.think_time))

    @property
    def num_stations(self) -> int:
        return int(self.demands.size)


@dataclass(frozen=True)
class StepState:
    """Committed residence times and throughput after one population step."""

    population: int
    residence: np.ndarray
    throughput: float

    @classmethod
    def initial(cls, num_stations: int) -> "StepState":
        """State at population 0: no queues, no throughput."""
        residence = np.zeros(num_stations, dtype=np.float64)
        residence.setflags(write=False)
        return cls(population=0, residence=residence, throughput=0.0)


@dataclass
class MVAResult:
    """Outputs of an engine run at the target population."""

    demands: np.ndarray
    population: int
    think_time: float
    residence: np.ndarray
    throughput: float
    throughput_history: Optional[np.ndarray] = field(default=None, repr=False)
    residence_history: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def num_stations(self) -> int:
        return int(self.residence.size)

    @property
    def system_response(self) -> float:
        """Total residence time across stations (think time excluded)."""
        return float(np.sum(self.residence))

    def queue_lengths(self) -> np.ndarray:
        """Mean number of jobs per station, X(N) * R_k(N) (Little's law)."""
        return self.throughput * self.residence

    def utilizations(self) -> np.ndarray:
        """Per-station utilization X(N) * D_k."""
        return self.throughput * self.demands

    def as_dict(self) -> Dict[str, float]:
        return {
            "population": self.population,
            "think_time": self.think_time,
            "num_stations": self.num_stations,
            "throughput": self.throughput,
            "system_response": self.system_response,
        }
