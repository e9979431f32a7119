"""Dense simplex tableau and the row operations performed on it.

Layout of ``data`` for a problem with m constraints and N variable columns:

    row 0       objective row   [r_0 ... r_{N-1} | z]
    rows 1..m   constraint rows [a_i0 ... a_i,N-1 | b_i]

Row 0 stores ``z - sum_j c_j x_j = 0`` so a negative entry marks a variable
that improves the (maximization) objective when it enters the basis.
"""

from __future__ import annotations

from typing import List, Sequence, TypeVar

import numpy as np
from numpy.typing import NDArray

from pivothound.core.basis import Basis
from pivothound.core.problem import StandardForm
from pivothound.types import Method

T = TypeVar("T", bound=np.floating)


class Tableau(object):
    """Objective row, constraint rows and the basis that keeps them canonical."""

    def __init__(
        self,
        data: NDArray[T],
        basis: Basis,
        variable_names: List[str],
        art_cols: Sequence[int] = (),
    ) -> None:
        self.data = data
        self.basis = basis
        self.variable_names = variable_names
        self.art_cols = np.asarray(art_cols, dtype=np.int_)

    def __repr__(self) -> str:
        return f"Tableau(shape={self.data.shape}, basis={self.basis!r})"

    @classmethod
    def from_standard_form(cls, problem: StandardForm, big_m: float = 1e5) -> Tableau:
        """Lay out a standard form problem as its initial tableau.

        The objective row depends on the method:
        - Standard: -c on the decision columns
        - Big-M: -c on the decision columns, +M on the artificial columns
        - Two-Phase: +1 on the artificial columns (phase 1 objective)

        The objective row is then put in canonical form with respect to the
        initial basis.
        """
        m, n_cols = problem.A.shape
        data = np.zeros((m + 1, n_cols + 1))
        data[1:, :n_cols] = problem.A
        data[1:, -1] = problem.b

        tableau = cls(
            data=data,
            basis=problem.basis.copy(),
            variable_names=list(problem.variable_names),
            art_cols=problem.art_cols,
        )
        if problem.method == Method.TWO_PHASE:
            tableau.set_artificial_objective()
            return tableau

        data[0, : problem.n] = -problem.c
        if problem.method == Method.BIG_M:
            data[0, problem.art_cols] = big_m
        tableau.canonicalize()
        return tableau

    def copy(self) -> Tableau:
        return Tableau(
            data=self.data.copy(),
            basis=self.basis.copy(),
            variable_names=list(self.variable_names),
            art_cols=self.art_cols.copy(),
        )

    @property
    def num_vars(self) -> int:
        """Number of variable columns (the rhs column excluded)."""
        return self.data.shape[1] - 1

    @property
    def objective_row(self) -> NDArray[T]:
        return self.data[0, :-1]

    @property
    def rhs(self) -> NDArray[T]:
        """Right-hand side of the constraint rows."""
        return self.data[1:, -1]

    @property
    def objective_value(self) -> float:
        """Value of the maximization objective at the current basic solution."""
        return float(self.data[0, -1])

    @property
    def basic_solution(self) -> NDArray[T]:
        """Value of every variable column at the current basic solution."""
        x = np.zeros(self.num_vars)
        x[self.basis.indices] = self.rhs
        return x

    def is_artificial(self, var: int) -> bool:
        return bool(np.any(self.art_cols == var))

    def canonicalize(self) -> None:
        """Eliminate every basic column from the objective row."""
        for row, var in enumerate(self.basis.indices, start=1):
            factor = self.data[0, var]
            if factor != 0.0:
                self.data[0, :] -= factor * self.data[row, :]

    def set_objective(self, c: NDArray[T]) -> None:
        """Replace the objective row with maximize c^T x over the decision columns."""
        self.data[0, :] = 0.0
        self.data[0, : len(c)] = -np.asarray(c, dtype=float)
        self.canonicalize()

    def set_artificial_objective(self) -> None:
        """Replace the objective row with minimize the sum of artificial variables."""
        self.data[0, :] = 0.0
        self.data[0, self.art_cols] = 1.0
        self.canonicalize()

    def pivot(self, row: int, col: int) -> None:
        """Gauss-Jordan pivot on ``data[row, col]``; ``col`` becomes basic in ``row``."""
        self.data[row, :] /= self.data[row, col]
        for i in range(self.data.shape[0]):
            if i == row:
                continue
            factor = self.data[i, col]
            if factor != 0.0:
                self.data[i, :] -= factor * self.data[row, :]
        self.basis[row - 1] = col
