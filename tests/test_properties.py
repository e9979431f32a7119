"""Property based tests on randomly generated bounded problems.

Every generated problem has strictly positive constraint coefficients and a
non-negative right-hand side, so the origin is feasible and the region is
bounded.
"""

import numpy as np
from hypothesis import given
from hypothesis import strategies as st

from pivothound.core import LPProblem
from pivothound.simplex import solve_lp
from pivothound.types import Method, Sense, SimplexStatus

coefficients = st.integers(min_value=1, max_value=9).map(float)
costs = st.integers(min_value=-9, max_value=9).map(float)
rhs_values = st.integers(min_value=0, max_value=30).map(float)


@st.composite
def bounded_problems(draw, max_vars: int = 4, max_constraints: int = 4):
    """Strategy generating (c, A, b) for max c^T x s.t. A x <= b, x >= 0."""
    n = draw(st.integers(min_value=1, max_value=max_vars))
    m = draw(st.integers(min_value=1, max_value=max_constraints))
    c = draw(st.lists(costs, min_size=n, max_size=n))
    A = draw(st.lists(st.lists(coefficients, min_size=n, max_size=n), min_size=m, max_size=m))
    b = draw(st.lists(rhs_values, min_size=m, max_size=m))
    return np.array(c), np.array(A), np.array(b)


@given(bounded_problems())
def test_bounded_problems_are_optimal(data) -> None:
    """Test termination on feasible bounded problems.

    Tests: status, step count within the cap
    """
    c, A, b = data
    result = solve_lp(LPProblem(c=c, A=A, b=b))

    assert result.status == SimplexStatus.OPTIMAL
    assert result.iterations <= 100


@given(bounded_problems(), st.sampled_from(list(Method)))
def test_solution_round_trip(data, method: Method) -> None:
    """Test substituting the solution back into the problem.

    Tests: objective value, constraint satisfaction, non-negativity
    """
    c, A, b = data
    result = solve_lp(LPProblem(c=c, A=A, b=b), method)
    x = result.solution

    assert result.status == SimplexStatus.OPTIMAL
    np.testing.assert_allclose(c @ x, result.optimal_value, atol=1e-6)
    assert np.all(A @ x <= b + 1e-6)
    assert np.all(x >= -1e-9)


@given(bounded_problems(), st.sampled_from(list(Method)))
def test_canonical_form_after_every_pivot(data, method: Method) -> None:
    """Test that every recorded tableau is canonical for its basis."""
    c, A, b = data
    result = solve_lp(LPProblem(c=c, A=A, b=b), method)

    snapshots = [(step.tableau, step.basic_vars) for step in result.steps]
    snapshots.append((result.final_tableau, result.final_basis))
    for tableau, basis in snapshots:
        m = tableau.shape[0] - 1
        expected = np.zeros((m + 1, m))
        expected[np.arange(1, m + 1), np.arange(m)] = 1.0
        np.testing.assert_allclose(tableau[:, basis], expected, atol=1e-6)


@given(bounded_problems(), st.sampled_from(list(Method)))
def test_solve_is_idempotent(data, method: Method) -> None:
    """Test that solving twice gives the same trace and answer."""
    c, A, b = data
    problem = LPProblem(c=c, A=A, b=b)

    first = solve_lp(problem, method)
    second = solve_lp(problem, method)

    assert first.iterations == second.iterations
    for a, b_step in zip(first.steps, second.steps):
        np.testing.assert_array_equal(a.tableau, b_step.tableau)
        np.testing.assert_array_equal(a.basic_vars, b_step.basic_vars)
    np.testing.assert_array_equal(first.final_basis, second.final_basis)
    assert first.optimal_value == second.optimal_value


@given(bounded_problems(), st.sampled_from(list(Method)))
def test_min_max_duality(data, method: Method) -> None:
    """Test that min c^T x and max -c^T x share solutions with negated values."""
    c, A, b = data

    minimized = solve_lp(LPProblem(c=c, A=A, b=b, sense=Sense.MIN), method)
    maximized = solve_lp(LPProblem(c=-c, A=A, b=b, sense=Sense.MAX), method)

    np.testing.assert_array_equal(minimized.solution, maximized.solution)
    assert minimized.optimal_value == -maximized.optimal_value


@given(bounded_problems(max_vars=3, max_constraints=3))
def test_methods_agree_with_lower_bound_rows(data) -> None:
    """Test Big-M and Two-Phase on problems with an extra >= row.

    Adding sum(x) >= 0 never changes the optimum but forces artificial
    variables into the initial basis.
    """
    c, A, b = data
    n = len(c)
    A_ext = np.vstack([A, np.ones((1, n))])
    b_ext = np.append(b, 0.0)
    relations = ["<="] * len(b) + [">="]

    base = solve_lp(LPProblem(c=c, A=A, b=b))
    big_m = solve_lp(LPProblem(c=c, A=A_ext, b=b_ext, relations=relations), Method.BIG_M)
    two_phase = solve_lp(
        LPProblem(c=c, A=A_ext, b=b_ext, relations=relations), Method.TWO_PHASE
    )

    assert big_m.status == SimplexStatus.OPTIMAL
    assert two_phase.status == SimplexStatus.OPTIMAL
    np.testing.assert_allclose(big_m.optimal_value, base.optimal_value, atol=1e-6)
    np.testing.assert_allclose(two_phase.optimal_value, base.optimal_value, atol=1e-6)
