"""Pre-defined closed networks with different demand profiles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .params import MVAParams


@dataclass(frozen=True)
class Scenario:
    name: str
    demands: Tuple[float, ...]
    think_time: float = 0.0


SCENARIOS: Dict[str, Scenario] = {
    # four identical stations, N* = 4
    "balanced": Scenario(name="balanced", demands=(0.2, 0.2, 0.2, 0.2)),
    # one station dominates, saturates at X = 1/0.5 early
    "bottleneck": Scenario(name="bottleneck", demands=(0.5, 0.1, 0.1, 0.05)),
    # interactive system: terminals think 5 time units between requests
    "interactive": Scenario(name="interactive", demands=(0.3, 0.12, 0.08), think_time=5.0),
}


def list_scenarios() -> Iterable[str]:
    """Return available scenario identifiers."""
    return sorted(SCENARIOS.keys())


def get_params(name: str, population: int, think_time: Optional[float] = None) -> MVAParams:
    """Return `MVAParams` for a named scenario, optionally overriding its think time."""
    key = name.lower()
    if key not in SCENARIOS:
        raise KeyError(f"Scenario '{name}' is not defined. Available: {list_scenarios()}")
    scenario = SCENARIOS[key]
    return MVAParams(
        demands=scenario.demands,
        population=population,
        think_time=scenario.think_time if think_time is None else think_time,
    )
