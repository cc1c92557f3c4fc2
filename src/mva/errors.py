"""Exception hierarchy shared by the MVA engines and the comparator."""

from __future__ import annotations


class MVAError(Exception):
    """Base class for every error raised by the MVA package."""


class InvalidInputError(MVAError, ValueError):
    """Raised when demands, population, think time or options are out of domain."""


class DegenerateNetworkError(MVAError, ZeroDivisionError):
    """Raised when the throughput denominator Z + sum(R) evaluates to zero."""

    def __init__(self, population: int):
        self.population = population
        super().__init__(
            f"Degenerate network at population {population}: think time and "
            "every service demand are zero, throughput is undefined."
        )


class SizeMismatchError(MVAError, ValueError):
    """Raised when two residence vectors of different length are compared."""

    def __init__(self, len_a: int, len_b: int):
        self.len_a = len_a
        self.len_b = len_b
        super().__init__(f"Arrays to be compared have different sizes: {len_a} != {len_b}.")
