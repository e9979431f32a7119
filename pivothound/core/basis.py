from __future__ import annotations

from typing import Optional, Sequence, Tuple, TypeVar, Union

import numpy as np
from numpy.typing import NDArray

T = TypeVar("T", bound=np.floating)


class InvalidBasisError(Exception):
    """Raised when a basis is invalid."""

    pass


class Basis:
    """Basic variable of every constraint row of a tableau.

    ``indices[i]`` is the variable that is basic in tableau row ``i + 1``
    (row 0 is the objective row).
    """

    def __init__(self, indices: Union[NDArray[np.int_], Sequence[int]]):
        """Initialize a basis with the given variable indices."""
        if not isinstance(indices, np.ndarray):
            indices = np.asarray(indices, dtype=np.int_)
        self.indices = indices

    def __repr__(self) -> str:
        """Return a string representation of the basis."""
        return f"Basis(indices={self.indices})"

    def copy(self) -> Basis:
        """Create a copy of the basis."""
        return Basis(indices=self.indices.copy())

    @property
    def m(self) -> int:
        """Number of constraints (size of basis)."""
        return len(self.indices)

    def __getitem__(self, row: int) -> int:
        return int(self.indices[row])

    def __setitem__(self, row: int, var: int) -> None:
        self.indices[row] = var

    def is_valid(self, tableau: NDArray[T], tol: float = 1e-9) -> bool:
        """Check that the basis puts the tableau in canonical form.

        Every basic column must be a unit vector: 1 in its own constraint row
        and 0 in every other row, the objective row included.
        """
        rows, cols = tableau.shape
        if self.m != rows - 1:
            return False
        if len(np.unique(self.indices)) != self.m:
            return False
        if np.any(self.indices < 0) or np.any(self.indices >= cols - 1):
            return False

        # Empty basis is trivially canonical
        if self.m == 0:
            return True

        expected = np.zeros((rows, self.m))
        expected[np.arange(1, rows), np.arange(self.m)] = 1.0
        return bool(np.allclose(tableau[:, self.indices], expected, rtol=0.0, atol=tol))

    def validate(self, tableau: NDArray[T], tol: float = 1e-9) -> None:
        """Raise if the basis does not match the tableau."""
        if not self.is_valid(tableau, tol):
            raise InvalidBasisError(f"{self!r} is not a canonical basis for the tableau")

    @classmethod
    def from_standard_form(
        cls,
        m: int,
        slack_indices: Optional[Tuple[NDArray[np.int_], NDArray[np.int_]]] = None,
        art_indices: Optional[Tuple[NDArray[np.int_], NDArray[np.int_]]] = None,
    ) -> Basis:
        """Create the initial basis of a standard form problem.

        Strategy:
        1. Use the slack variable of a row when it has a +1 slack (<= rows)
        2. Use the artificial variable for the remaining rows (>= and = rows)
        """
        basis_indices = np.full(m, -1, dtype=np.int_)

        if art_indices is not None:
            art_rows, art_cols = art_indices
            basis_indices[art_rows] = art_cols

        # Surplus columns of >= rows carry -1 and are not usable as basic
        if slack_indices is not None:
            slack_rows, slack_cols = slack_indices
            free_rows = basis_indices[slack_rows] < 0
            basis_indices[slack_rows[free_rows]] = slack_cols[free_rows]

        if np.any(basis_indices < 0):
            missing = np.nonzero(basis_indices < 0)[0] + 1
            raise InvalidBasisError(f"No initial basic variable for rows {missing.tolist()}")

        basis = cls(indices=basis_indices)
        if len(np.unique(basis.indices)) != basis.m:
            raise InvalidBasisError("Initial basis has duplicate variables")
        return basis
