from pivothound.config import SimplexConfig
from pivothound.core import LPProblem, UnsupportedConstraintError
from pivothound.simplex import solve_lp, solve_simplex
from pivothound.types import Method, Relation, Sense, SimplexResult, SimplexStatus, SimplexStep

__all__ = [
    "LPProblem",
    "Method",
    "Relation",
    "Sense",
    "SimplexConfig",
    "SimplexResult",
    "SimplexStatus",
    "SimplexStep",
    "UnsupportedConstraintError",
    "solve_lp",
    "solve_simplex",
]
