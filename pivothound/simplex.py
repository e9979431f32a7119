"""Implementation of the tabular simplex method with a full pivot trace.

Every problem is solved as a maximization. The tableau keeps the objective
row in front of the constraint rows:

    max c^T x
    s.t. A x (<= | >= | =) b
         x >= 0

Three strategies provide the initial basic feasible solution:
- Standard: slack variables only, valid when every row is <= with b >= 0
  (>= rows are negated first)
- Big-M: artificial variables penalized by a large constant M in the objective
- Two-Phase: Phase 1 minimizes the sum of artificial variables, Phase 2
  optimizes the original objective starting from the Phase 1 basis

Every pivot is recorded as an immutable SimplexStep holding the tableau as it
was right before the pivot.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np
from numpy.typing import NDArray

from pivothound.config import DEFAULT_CONFIG, SimplexConfig
from pivothound.core.problem import LPProblem, StandardForm
from pivothound.core.tableau import Tableau
from pivothound.types import (
    Method,
    PhaseType,
    Relation,
    Sense,
    SimplexResult,
    SimplexStatus,
    SimplexStep,
)

T = TypeVar("T", bound=np.floating)

logger = logging.getLogger(__name__)


class PhaseOutcome(NamedTuple):
    """Result of a single run of the pivot engine."""

    status: SimplexStatus  # OPTIMAL or UNBOUNDED
    tableau: Tableau  # Tableau at termination, owned by the caller
    steps: List[SimplexStep]
    converged: bool  # False if the run stopped on the iteration cap


def _frozen(array: NDArray) -> NDArray:
    snapshot = array.copy()
    snapshot.flags.writeable = False
    return snapshot


class TableauSimplexSolver:
    """Primal simplex iterations on a dense tableau.

    The solver works on its own copy of the tableau, so the caller's tableau
    is never modified. Columns listed in ``blocked`` never enter the basis.
    """

    def __init__(
        self,
        tableau: Tableau,
        config: SimplexConfig = DEFAULT_CONFIG,
        phase: PhaseType = PhaseType.NONE,
        blocked: Optional[Sequence[int]] = None,
    ):
        """Initialize solver with a tableau in canonical form."""
        self.tableau = tableau.copy()
        self.config = config
        self.tableau.basis.validate(self.tableau.data, config.feasibility_tol)
        self.phase = phase
        self.blocked = np.asarray(blocked if blocked is not None else [], dtype=np.int_)
        self.steps: List[SimplexStep] = []

    @property
    def tol(self) -> float:
        return self.config.tol

    @property
    def entering_variable(self) -> Optional[int]:
        """Select entering variable with most negative objective row entry.

        Ties go to the lowest column index.
        """
        row = self.tableau.objective_row.copy()
        row[self.blocked] = np.inf
        col = int(np.argmin(row))
        if row[col] >= -self.tol:
            return None
        return col

    def leaving_row(self, col: int) -> Optional[int]:
        """Select the pivot row of an entering column using the minimum ratio test.

        Only rows with a positive entry in the column take part. Ties go to
        the lowest row. Returns a tableau row (1..m), or None when no row
        limits the entering variable (the problem is unbounded).
        """
        column = self.tableau.data[1:, col]
        eligible = column > self.tol
        if not np.any(eligible):
            return None

        ratios = np.full_like(column, np.inf)
        ratios[eligible] = self.tableau.rhs[eligible] / column[eligible]
        return int(np.argmin(ratios)) + 1

    def pivot(self, row: int, col: int) -> SimplexStep:
        """Record a snapshot of the tableau, then pivot on ``(row, col)``."""
        names = self.tableau.variable_names
        leaving = self.tableau.basis[row - 1]
        step = SimplexStep(
            phase=self.phase,
            tableau=_frozen(self.tableau.data),
            pivot_row=row,
            pivot_col=col,
            entering_var=col,
            leaving_var=leaving,
            basic_vars=_frozen(self.tableau.basis.indices),
            description=(
                f"Pivot on row {row}, col {col} (Enter {names[col]}, Leave {names[leaving]})"
            ),
        )
        self.steps.append(step)
        logger.debug(step.description)
        self.tableau.pivot(row, col)
        return step

    def solve(self) -> PhaseOutcome:
        """Pivot until no entering variable is left or the problem is unbounded."""
        for _ in range(self.config.max_iter):
            col = self.entering_variable
            if col is None:
                logger.info(
                    "Phase %s optimal after %d pivots", self.phase.name, len(self.steps)
                )
                return PhaseOutcome(SimplexStatus.OPTIMAL, self.tableau, self.steps, True)

            row = self.leaving_row(col)
            if row is None:
                logger.warning(
                    "Problem is unbounded: no row limits %s", self.tableau.variable_names[col]
                )
                return PhaseOutcome(SimplexStatus.UNBOUNDED, self.tableau, self.steps, True)

            self.pivot(row, col)

        # The iteration cap ends the phase as if it were optimal
        converged = self.entering_variable is None
        if not converged:
            logger.warning("Maximum iterations (%d) reached", self.config.max_iter)
        return PhaseOutcome(SimplexStatus.OPTIMAL, self.tableau, self.steps, converged)

    def drive_out_artificials(self) -> None:
        """Pivot artificial variables that stayed basic at zero out of the basis.

        Each one is replaced by the first non-artificial column with a non-zero
        entry in its row. A row without such a column is redundant and keeps
        its artificial variable, which stays at zero.
        """
        for row, var in enumerate(self.tableau.basis.indices.copy(), start=1):
            if not self.tableau.is_artificial(var):
                continue
            entries = self.tableau.data[row, :-1].copy()
            entries[self.tableau.art_cols] = 0.0
            candidates = np.nonzero(np.abs(entries) > self.tol)[0]
            if len(candidates) == 0:
                logger.info("Row %d is redundant; keeping artificial basic at zero", row)
                continue
            self.pivot(row, int(candidates[0]))


def run_phase(
    tableau: Tableau,
    config: SimplexConfig = DEFAULT_CONFIG,
    phase: PhaseType = PhaseType.NONE,
    blocked: Optional[Sequence[int]] = None,
) -> PhaseOutcome:
    """Run the pivot engine on a copy of ``tableau``."""
    return TableauSimplexSolver(tableau, config, phase, blocked).solve()


def _result(
    problem: StandardForm,
    status: SimplexStatus,
    tableau: Tableau,
    steps: List[SimplexStep],
    converged: bool = True,
) -> SimplexResult:
    """Package the final tableau into a result in terms of the original problem."""
    solution = None
    value = None
    if status == SimplexStatus.OPTIMAL:
        solution = tableau.basic_solution[: problem.n]
        value = problem.parent.obj_factor * tableau.objective_value
        logger.info("Found optimal solution: %s", solution)
        logger.info("Optimal objective value: %f", value)

    return SimplexResult(
        status=status,
        steps=tuple(steps),
        final_tableau=tableau.data.copy(),
        final_basis=tableau.basis.indices.copy(),
        solution=solution,
        optimal_value=value,
        variable_names=list(tableau.variable_names),
        method=problem.method,
        converged=converged,
    )


def solve_standard(problem: StandardForm, config: SimplexConfig = DEFAULT_CONFIG) -> SimplexResult:
    """Solve with slack variables as the initial basis."""
    tableau = Tableau.from_standard_form(problem)
    outcome = run_phase(tableau, config)
    return _result(problem, outcome.status, outcome.tableau, outcome.steps, outcome.converged)


def solve_big_m(problem: StandardForm, config: SimplexConfig = DEFAULT_CONFIG) -> SimplexResult:
    """Solve with artificial variables penalized by M in a single run.

    An artificial variable that is still basic at a positive value once the
    run is optimal means the constraints cannot be satisfied.

    A run that stops unbounded while an artificial variable is still basic at
    a positive value may hide an empty feasible region, because the penalty
    never acts on a column that no row limits. A Phase 1 run on the same
    problem then decides between Unbounded and Infeasible.
    """
    tableau = Tableau.from_standard_form(problem, big_m=config.big_m)
    outcome = run_phase(tableau, config)
    final = outcome.tableau
    x = final.basic_solution
    artificials_positive = bool(np.any(x[final.art_cols] > config.feasibility_tol))

    if outcome.status == SimplexStatus.UNBOUNDED and artificials_positive:
        check = tableau.copy()
        check.set_artificial_objective()
        feasible, phase1 = solve_phase1(check, config)
        if not feasible:
            logger.warning("Problem is infeasible: Phase 1 check leaves artificials positive")
            return _result(
                problem,
                SimplexStatus.INFEASIBLE,
                phase1.tableau,
                outcome.steps + phase1.steps,
                outcome.converged and phase1.converged,
            )

    if outcome.status != SimplexStatus.OPTIMAL:
        return _result(problem, outcome.status, final, outcome.steps, outcome.converged)

    if artificials_positive:
        logger.warning("Problem is infeasible: artificial variables remain positive")
        return _result(
            problem, SimplexStatus.INFEASIBLE, final, outcome.steps, outcome.converged
        )
    return _result(problem, SimplexStatus.OPTIMAL, final, outcome.steps, outcome.converged)


def solve_phase1(
    tableau: Tableau, config: SimplexConfig = DEFAULT_CONFIG
) -> Tuple[bool, PhaseOutcome]:
    """Solve Phase 1 to find an initial feasible basis.

    Phase 1 maximizes minus the sum of artificial variables. The problem is
    feasible only if that sum reaches zero (within ``feasibility_tol``).
    Returns (is_feasible, outcome). On success the artificial variables have
    been driven out of the basis wherever possible.
    """
    solver = TableauSimplexSolver(tableau, config, PhaseType.PHASE1)
    outcome = solver.solve()
    if outcome.status != SimplexStatus.OPTIMAL:
        return False, outcome

    is_feasible = abs(outcome.tableau.objective_value) <= config.feasibility_tol
    if is_feasible:
        solver.drive_out_artificials()
        outcome = outcome._replace(tableau=solver.tableau, steps=solver.steps)
    return is_feasible, outcome


def solve_phase2(
    tableau: Tableau, c: NDArray[T], config: SimplexConfig = DEFAULT_CONFIG
) -> PhaseOutcome:
    """Solve Phase 2 from the Phase 1 basis; artificial columns may not re-enter."""
    phase2 = tableau.copy()
    phase2.set_objective(c)
    return run_phase(phase2, config, PhaseType.PHASE2, blocked=phase2.art_cols)


def solve_two_phase(
    problem: StandardForm, config: SimplexConfig = DEFAULT_CONFIG
) -> SimplexResult:
    """Solve with the two-phase method.

    Phase 1: Find initial feasible solution
    - Objective is the sum of artificial variables
    - Problem is infeasible if the optimal sum is not zero

    Phase 2: Solve original problem
    - Restores the original objective on the Phase 1 tableau
    - Keeps artificial variables out of the basis
    """
    tableau = Tableau.from_standard_form(problem)

    if problem.n_art == 0:
        logger.info("No artificial variables - solving Phase 2 directly")
        outcome = solve_phase2(tableau, problem.c, config)
        return _result(problem, outcome.status, outcome.tableau, outcome.steps, outcome.converged)

    feasible, phase1 = solve_phase1(tableau, config)
    if phase1.status == SimplexStatus.UNBOUNDED:
        return _result(problem, phase1.status, phase1.tableau, phase1.steps, phase1.converged)
    if not feasible:
        logger.warning("Problem is infeasible")
        return _result(
            problem, SimplexStatus.INFEASIBLE, phase1.tableau, phase1.steps, phase1.converged
        )

    logger.info("Converting to Phase 2")
    phase2 = solve_phase2(phase1.tableau, problem.c, config)
    return _result(
        problem,
        phase2.status,
        phase2.tableau,
        phase1.steps + phase2.steps,
        phase1.converged and phase2.converged,
    )


_SOLVERS = {
    Method.STANDARD: solve_standard,
    Method.BIG_M: solve_big_m,
    Method.TWO_PHASE: solve_two_phase,
}


def solve_lp(
    problem: LPProblem,
    method: Union[Method, str] = Method.STANDARD,
    config: Optional[SimplexConfig] = None,
) -> SimplexResult:
    """Solve a linear program with the chosen initialization method."""
    method = Method.parse(method)
    std_problem = problem.to_standard_form(method)
    return _SOLVERS[method](std_problem, config or DEFAULT_CONFIG)


def solve_simplex(
    sense: Union[Sense, str],
    num_vars: int,
    num_constraints: int,
    objective: Sequence[float],
    constraints: Sequence[Sequence[float]],
    relations: Optional[Sequence[Union[Relation, str]]] = None,
    method: Union[Method, str] = Method.STANDARD,
    config: Optional[SimplexConfig] = None,
) -> SimplexResult:
    """Solve a linear program given row by row.

    Args:
        sense: "max" or "min"
        num_vars: Number of decision variables n
        num_constraints: Number of constraints m
        objective: The n objective coefficients
        constraints: m rows laid out as [a_1, ..., a_n, rhs]
        relations: One of "<=", ">=", "=" per row (all "<=" when omitted)
        method: "standard", "bigM" or "twoPhase"
        config: Tolerances and limits (defaults when omitted)

    Returns:
        SimplexResult with the status, every pivot step, the final tableau
        and basis, and the solution when one was found.
    """
    problem = LPProblem.from_rows(
        sense, num_vars, num_constraints, objective, constraints, relations
    )
    return solve_lp(problem, method, config)
