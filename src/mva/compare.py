"""Agreement check between two residence time vectors."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np

from .errors import InvalidInputError, SizeMismatchError
from .params import DemandLike

DEFAULT_TOLERANCE = 1e-3


@dataclass(frozen=True)
class ComparisonVerdict:
    """Number of entries beyond tolerance and the largest absolute gap."""

    failing_count: int
    max_abs_difference: float
    tolerance: float = DEFAULT_TOLERANCE

    @property
    def passed(self) -> bool:
        return self.failing_count == 0

    def describe(self) -> str:
        """Human readable diagnostic, one line per fact."""
        if self.passed:
            head = "Arrays are (almost) equal."
        else:
            head = (
                f"ATTENTION: residences with difference greater than {self.tolerance:g}: "
                f"{self.failing_count}"
            )
        return f"{head}\nMax difference: {self.max_abs_difference:g}"

    def as_dict(self) -> Dict[str, float]:
        payload = asdict(self)
        payload["passed"] = self.passed
        return payload


def compare(a: DemandLike, b: DemandLike, tolerance: float = DEFAULT_TOLERANCE) -> ComparisonVerdict:
    """
    Compare ``a`` and ``b`` entry by entry.

    An entry fails when ``|a_i - b_i| > tolerance`` or the gap is not finite.
    Inputs are never modified.

    Raises:
        SizeMismatchError: if the vectors have different lengths.
        InvalidInputError: if a vector is not one-dimensional or the tolerance
            is negative or not finite.
    """
    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    if left.ndim != 1 or right.ndim != 1:
        raise InvalidInputError("Residence vectors must be one-dimensional.")
    if left.size != right.size:
        raise SizeMismatchError(left.size, right.size)
    if not np.isfinite(tolerance) or tolerance < 0:
        raise InvalidInputError("Tolerance must be finite and non-negative.")

    if left.size == 0:
        return ComparisonVerdict(failing_count=0, max_abs_difference=0.0, tolerance=tolerance)

    diff = np.abs(left - right)
    # NaN or infinite gaps always fail.
    failing = ~np.isfinite(diff) | (diff > tolerance)
    return ComparisonVerdict(
        failing_count=int(np.count_nonzero(failing)),
        max_abs_difference=float(np.max(diff)),
        tolerance=float(tolerance),
    )
