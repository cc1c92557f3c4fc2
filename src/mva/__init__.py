"""Exact Mean Value Analysis for closed single-class queueing networks."""

from .closed_sim import ClosedNetworkParams, ClosedSimResult, run_closed_network
from .compare import DEFAULT_TOLERANCE, ComparisonVerdict, compare
from .demands import generate_random, parse_demands, read_demands, write_residences
from .errors import DegenerateNetworkError, InvalidInputError, MVAError, SizeMismatchError
from .exact import advance, compute_residence_times, exact_mva
from .metrics import (
    AsymptoticBounds,
    asymptotic_bounds,
    relative_error,
    system_response_time,
    throughput_from_residences,
)
from .parallel import compute_residence_times_mt, default_workers, exact_mva_mt, station_slices
from .params import MVAParams, MVAResult, StepState
from .scenarios import Scenario, get_params, list_scenarios

__all__ = [
    "AsymptoticBounds",
    "ClosedNetworkParams",
    "ClosedSimResult",
    "ComparisonVerdict",
    "DEFAULT_TOLERANCE",
    "DegenerateNetworkError",
    "InvalidInputError",
    "MVAError",
    "MVAParams",
    "MVAResult",
    "Scenario",
    "SizeMismatchError",
    "StepState",
    "advance",
    "asymptotic_bounds",
    "compare",
    "compute_residence_times",
    "compute_residence_times_mt",
    "default_workers",
    "exact_mva",
    "exact_mva_mt",
    "generate_random",
    "get_params",
    "list_scenarios",
    "parse_demands",
    "read_demands",
    "relative_error",
    "run_closed_network",
    "station_slices",
    "system_response_time",
    "throughput_from_residences",
    "write_residences",
]
