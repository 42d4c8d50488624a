"""
Exceptions raised at the input boundary and by the optimizer.

The process model, constraint set and impact evaluator never raise; they
return possibly infeasible or non-finite values and leave the decision to
the optimizer.
"""

from typing import Dict, Optional


class InputValidationError(ValueError):
    """Malformed user input, initial guess or bounds. Never silently clamped."""


class NumericalDegeneracyError(ArithmeticError):
    """Non-finite value (NaN/Inf) met while evaluating the model."""

    def __init__(self, message: str, x=None, values: Optional[Dict[str, float]] = None):
        super().__init__(message)
        self.x = x
        self.values = values or {}


class InfeasibleConstraintError(RuntimeError):
    """
    No point satisfying all constraints within tolerance was found.

    Carries the best infeasible result so the caller can still report it.
    """

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result

    @property
    def max_violation(self) -> float:
        if self.result is None:
            return float('nan')
        return self.result.max_violation
