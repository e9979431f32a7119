"""Common types and enums used across the package."""

from __future__ import annotations

from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

import numpy as np


class Sense(Enum):
    """Sense for optimization."""

    MIN = "min"
    MAX = "max"

    @classmethod
    def parse(cls, value: "Sense | str") -> Sense:
        if isinstance(value, Sense):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown optimization sense: {value!r}") from None


class Relation(Enum):
    """Relation between the left- and right-hand side of a constraint."""

    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    EQUAL = "="

    @classmethod
    def parse(cls, value: "Relation | str") -> Relation:
        if isinstance(value, Relation):
            return value
        symbol = str(value).strip().replace("≤", "<=").replace("≥", ">=")
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"Unknown constraint relation: {value!r}") from None

    @property
    def mirrored(self) -> Relation:
        """Relation obtained after multiplying both sides by -1."""
        if self == Relation.LESS_EQUAL:
            return Relation.GREATER_EQUAL
        if self == Relation.GREATER_EQUAL:
            return Relation.LESS_EQUAL
        return Relation.EQUAL


class Method(Enum):
    """Strategy used to obtain the initial basic feasible solution."""

    STANDARD = "standard"
    BIG_M = "bigM"
    TWO_PHASE = "twoPhase"

    @classmethod
    def parse(cls, value: "Method | str") -> Method:
        if isinstance(value, Method):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            raise ValueError(f"Unknown simplex method: {value!r}") from None

    @property
    def uses_artificials(self) -> bool:
        return self != Method.STANDARD


class PhaseType(Enum):
    """Phase a pivot step belongs to."""

    NONE = 0  # Single run (Standard, Big-M)
    PHASE1 = 1  # Two-Phase auxiliary problem
    PHASE2 = 2  # Two-Phase original objective


class SimplexStatus(Enum):
    """Termination status of the simplex algorithm."""

    OPTIMAL = "Optimal"
    INFEASIBLE = "Infeasible"
    UNBOUNDED = "Unbounded"


class SimplexStep(NamedTuple):
    """Snapshot of the tableau right before a pivot."""

    phase: PhaseType
    tableau: np.ndarray  # Read-only copy of the tableau before the pivot
    pivot_row: int  # Tableau row (1..m)
    pivot_col: int  # Tableau column of the entering variable
    entering_var: int  # Variable index entering the basis
    leaving_var: int  # Variable index leaving the basis
    basic_vars: np.ndarray  # Read-only copy of the basis before the pivot
    description: str


class SimplexResult(NamedTuple):
    """Outcome of a full solve, with the trace of every pivot performed."""

    status: SimplexStatus
    steps: Tuple[SimplexStep, ...]  # Steps of every phase, in order
    final_tableau: np.ndarray
    final_basis: np.ndarray
    solution: Optional[np.ndarray]  # Decision variable values (None unless optimal)
    optimal_value: Optional[float]  # Objective in the original sense (None unless optimal)
    variable_names: List[str]
    method: Method
    converged: bool  # False if a phase stopped on the iteration cap

    @property
    def iterations(self) -> int:
        """Number of pivots performed across all phases."""
        return len(self.steps)
