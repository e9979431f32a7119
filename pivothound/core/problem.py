from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np
from numpy.typing import NDArray

from pivothound.core.basis import Basis
from pivothound.types import Method, Relation, Sense

T = TypeVar("T", bound=np.floating)

logger = logging.getLogger(__name__)


class UnsupportedConstraintError(ValueError):
    """Raised when the chosen method cannot build an initial basis for a problem."""

    pass


class LPProblem(object):
    """A linear program over non-negative variables.

    optimize    c^T x
    subject to  A[i] x  (<= | >= | =)  b[i]   for every row i
                x >= 0
    """

    def __init__(
        self,
        c: Union[NDArray[T], Sequence[float]],
        A: Union[NDArray[T], Sequence[Sequence[float]]],
        b: Union[NDArray[T], Sequence[float]],
        relations: Optional[Sequence[Union[Relation, str]]] = None,
        sense: Union[Sense, str] = Sense.MAX,
    ) -> None:
        """
        Note: Constraints default to <= when no relations are given.
        """
        self.sense = Sense.parse(sense)
        self._c = np.asarray(c, dtype=float).reshape(-1)
        self.A = np.asarray(A, dtype=float)
        self.b = np.asarray(b, dtype=float).reshape(-1)
        if relations is None:
            relations = [Relation.LESS_EQUAL] * len(self.b)
        self.relations = [Relation.parse(rel) for rel in relations]
        self._check()

    def _check(self) -> None:
        if self.n < 1:
            raise ValueError("Problem needs at least one variable")
        if self.m < 1:
            raise ValueError("Problem needs at least one constraint")
        if self.A.shape != (self.m, self.n):
            raise ValueError(
                f"Constraint matrix has shape {self.A.shape}, expected {(self.m, self.n)}"
            )
        if len(self.relations) != self.m:
            raise ValueError(f"Expected {self.m} relations, got {len(self.relations)}")
        for name, values in [("c", self._c), ("A", self.A), ("b", self.b)]:
            if not np.all(np.isfinite(values)):
                raise ValueError(f"Coefficients in {name} must be finite")

    def __repr__(self) -> str:
        """Return a string that could be used to recreate the object."""
        relations = [rel.value for rel in self.relations]
        return (
            f"LPProblem(c={self._c!r}, A={self.A!r}, b={self.b!r}, "
            f"relations={relations!r}, sense={self.sense!r})"
        )

    @classmethod
    def from_rows(
        cls,
        sense: Union[Sense, str],
        num_vars: int,
        num_constraints: int,
        objective: Sequence[float],
        constraints: Sequence[Sequence[float]],
        relations: Optional[Sequence[Union[Relation, str]]] = None,
    ) -> LPProblem:
        """Build a problem from rows laid out as ``[a_1, ..., a_n, rhs]``."""
        if len(objective) != num_vars:
            raise ValueError(f"Expected {num_vars} objective coefficients, got {len(objective)}")
        if len(constraints) != num_constraints:
            raise ValueError(f"Expected {num_constraints} constraint rows, got {len(constraints)}")
        for i, row in enumerate(constraints, start=1):
            if len(row) != num_vars + 1:
                raise ValueError(
                    f"Constraint row {i} needs {num_vars} coefficients and a rhs, "
                    f"got {len(row)} entries"
                )
        if relations is not None and len(relations) != num_constraints:
            raise ValueError(f"Expected {num_constraints} relations, got {len(relations)}")

        rows = np.asarray(constraints, dtype=float).reshape(num_constraints, num_vars + 1)
        return cls(
            c=list(objective),
            A=rows[:, :num_vars],
            b=rows[:, num_vars],
            relations=None if relations is None else list(relations),
            sense=sense,
        )

    @property
    def obj_factor(self) -> float:
        return -1 if self.sense == Sense.MIN else 1

    @property
    def c(self) -> NDArray[T]:
        """Objective coefficients of the equivalent maximization problem."""
        return self.obj_factor * self._c

    @property
    def n(self) -> int:
        """Number of variables in the problem."""
        return len(self._c)

    @property
    def m(self) -> int:
        """Number of constraints in the problem."""
        return len(self.b)

    def _normalized_rows(
        self, method: Method
    ) -> Tuple[NDArray[T], NDArray[T], List[Relation]]:
        """Rewrite rows so the method can start from a basic feasible solution.

        Standard flips every >= row into a <= row and then requires b >= 0.
        Big-M and Two-Phase flip every row with b < 0 and mirror its relation.
        """
        A = self.A.copy()
        b = self.b.copy()
        relations = list(self.relations)

        if method == Method.STANDARD:
            for i, rel in enumerate(relations):
                if rel == Relation.EQUAL:
                    raise UnsupportedConstraintError(
                        f"Constraint {i + 1} is an equality; use the Big-M or Two-Phase method"
                    )
                if rel == Relation.GREATER_EQUAL:
                    A[i], b[i] = -A[i], -b[i]
                    relations[i] = Relation.LESS_EQUAL
                if b[i] < 0:
                    raise UnsupportedConstraintError(
                        f"Constraint {i + 1} has a negative right-hand side in <= form; "
                        "use the Big-M or Two-Phase method"
                    )
            return A, b, relations

        for i in np.nonzero(b < 0)[0]:
            A[i], b[i] = -A[i], -b[i]
            relations[i] = relations[i].mirrored
        return A, b, relations

    def to_standard_form(self, method: Union[Method, str] = Method.STANDARD) -> StandardForm:
        """Convert the problem to the augmented form used to build the tableau.

        Variables in standard form:
        1. Original variables (x1, x2, ...)
        2. Slack (+1, <= rows) and surplus (-1, >= rows) variables in row order
        3. Artificial variables (+1, >= and = rows) in row order, Big-M and
           Two-Phase only
        """
        method = Method.parse(method)
        A, b, relations = self._normalized_rows(method)

        slack_rows = [i for i, rel in enumerate(relations) if rel != Relation.EQUAL]
        if method.uses_artificials:
            art_rows = [i for i, rel in enumerate(relations) if rel != Relation.LESS_EQUAL]
        else:
            art_rows = []

        n_slack = len(slack_rows)
        n_art = len(art_rows)
        total_cols = self.n + n_slack + n_art

        A_ext = np.zeros((self.m, total_cols))
        A_ext[:, : self.n] = A

        slack_indices = None
        if n_slack > 0:
            rows = np.array(slack_rows, dtype=np.int_)
            cols = np.arange(self.n, self.n + n_slack)
            signs = np.array(
                [-1.0 if relations[i] == Relation.GREATER_EQUAL else 1.0 for i in slack_rows]
            )
            A_ext[rows, cols] = signs
            slack_indices = (rows, cols)

        art_indices = None
        if n_art > 0:
            rows = np.array(art_rows, dtype=np.int_)
            cols = np.arange(self.n + n_slack, total_cols)
            A_ext[rows, cols] = 1.0
            art_indices = (rows, cols)

        variable_names = (
            [f"x{j + 1}" for j in range(self.n)]
            + [f"s{k + 1}" for k in range(n_slack)]
            + [f"a{k + 1}" for k in range(n_art)]
        )
        logger.debug(
            "Standard form for %s: %d decision, %d slack/surplus, %d artificial columns",
            method.value,
            self.n,
            n_slack,
            n_art,
        )

        return StandardForm(
            c=self.c,
            A=A_ext,
            b=b,
            basis=Basis.from_standard_form(self.m, slack_indices, art_indices),
            method=method,
            parent=self,
            art_indices=art_indices,
            slack_indices=slack_indices,
            variable_names=variable_names,
        )


class StandardForm(object):
    """A linear program in augmented form, ready to be laid out as a tableau."""

    def __init__(
        self,
        c: NDArray[T],
        A: NDArray[T],
        b: NDArray[T],
        basis: Basis,
        method: Method,
        parent: LPProblem,
        art_indices: Optional[Tuple[NDArray[np.int_], NDArray[np.int_]]],
        slack_indices: Optional[Tuple[NDArray[np.int_], NDArray[np.int_]]],
        variable_names: List[str],
    ) -> None:
        self.c = c
        self.A = A
        self.b = b
        self.basis = basis
        self.method = method
        self.parent = parent
        self.art_indices = art_indices
        self.slack_indices = slack_indices
        self.variable_names = variable_names

    def __repr__(self) -> str:
        """Return a string that could be used to recreate the object."""
        args = [
            f"c={self.c!r}",
            f"A={self.A!r}",
            f"b={self.b!r}",
            f"basis={self.basis!r}",
            f"method={self.method!r}",
            f"parent={self.parent!r}",
            f"art_indices={self.art_indices!r}",
            f"slack_indices={self.slack_indices!r}",
            f"variable_names={self.variable_names!r}",
        ]
        return f"StandardForm({', '.join(args)})"

    @property
    def n(self) -> int:
        """Number of decision variables."""
        return len(self.c)

    @property
    def m(self) -> int:
        """Number of constraints."""
        return len(self.b)

    @property
    def n_slack(self) -> int:
        return 0 if self.slack_indices is None else len(self.slack_indices[1])

    @property
    def n_art(self) -> int:
        return 0 if self.art_indices is None else len(self.art_indices[1])

    @property
    def art_cols(self) -> NDArray[np.int_]:
        """Column indices of the artificial variables."""
        if self.art_indices is None:
            return np.zeros(0, dtype=np.int_)
        return self.art_indices[1]
