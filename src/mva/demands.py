"""Demand vectors from files or a seeded generator, and residence time output."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

import numpy as np

from .errors import InvalidInputError
from .params import DemandLike, validate_demands

PathLike = Union[str, Path]

RANDOM_SCALE = 0.8


def parse_demands(text: str) -> np.ndarray:
    """
    Parse comma-separated service demands.

    Line breaks count as separators and empty chunks (e.g. a trailing comma)
    are ignored.

    Raises:
        InvalidInputError: when a chunk is not a number or the result is not a
            valid demand vector.
    """
    values = []
    for chunk in text.replace("\n", ",").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            values.append(float(chunk))
        except ValueError as exc:
            raise InvalidInputError(f"Demands file has wrong format: '{chunk}'.") from exc
    if not values:
        raise InvalidInputError("Demands file has wrong format: no values found.")
    return validate_demands(values)


def read_demands(path: PathLike) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Demands file not found: {path}")
    return parse_demands(path.read_text(encoding="utf-8"))


def generate_random(num_stations: int, seed: int, scale: float = RANDOM_SCALE) -> np.ndarray:
    """Draw ``num_stations`` demands uniformly in [0, scale) from an explicit seed."""
    if num_stations < 1:
        raise InvalidInputError("Number of stations must be >= 1.")
    if scale <= 0:
        raise InvalidInputError("Demand scale must be strictly positive.")
    rng = np.random.default_rng(seed=seed)
    return validate_demands(rng.random(num_stations) * scale)


def format_residences(values: DemandLike, per_line: int = 10) -> str:
    """Render values followed by a comma, breaking the line every ``per_line`` values."""
    if per_line < 1:
        raise InvalidInputError("per_line must be >= 1.")
    parts = []
    for i, value in enumerate(np.asarray(values, dtype=np.float64), start=1):
        parts.append(f"{value:g},")
        if i % per_line == 0:
            parts.append("\n")
    return "".join(parts)


def write_residences(path: PathLike, vectors: Iterable[DemandLike], per_line: int = 10) -> Path:
    """Write each residence vector as a block, blocks separated by a blank line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    blocks = [format_residences(v, per_line=per_line).rstrip("\n") for v in vectors]
    path.write_text("\n\n".join(blocks) + "\n", encoding="utf-8")
    return path
