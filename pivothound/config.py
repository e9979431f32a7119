"""Numerical settings shared by the pivot engine and the phase coordinator."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SimplexConfig:
    """Tolerances and limits for a solve.

    Attributes:
        tol: Values within this distance of zero count as zero in the
            optimality test and the ratio test.
        max_iter: Maximum number of pivots per phase.
        big_m: Penalty on artificial variables for the Big-M method.
        feasibility_tol: Largest artificial sum (Two-Phase) or basic
            artificial value (Big-M) still considered feasible.
    """

    tol: float = 1e-9
    max_iter: int = 100
    big_m: float = 1e5
    feasibility_tol: float = 1e-5

    def __post_init__(self) -> None:
        if self.tol < 0 or self.feasibility_tol < 0:
            raise ValueError("Tolerances must be non-negative")
        if self.max_iter < 0:
            raise ValueError("max_iter must be non-negative")
        if self.big_m <= 0:
            raise ValueError("big_m must be positive")

    def replace(self, **changes) -> SimplexConfig:
        """Return a copy with some settings changed."""
        return replace(self, **changes)


DEFAULT_CONFIG = SimplexConfig()
