from pivothound.core.basis import Basis, InvalidBasisError
from pivothound.core.problem import LPProblem, StandardForm, UnsupportedConstraintError
from pivothound.core.tableau import Tableau

__all__ = [
    "Basis",
    "InvalidBasisError",
    "LPProblem",
    "StandardForm",
    "Tableau",
    "UnsupportedConstraintError",
]
