"""
Constraint Set

Residuals of the engineering constraints for one operating point.

Convention:
  g(x) <= 0  inequality satisfied
  h(x) == 0  equality satisfied
"""

from typing import Tuple

import numpy as np

from .config import Bounds
from .process import DecisionVariables, DerivedState, ProcessParameters

INEQUALITY_NAMES = (
    'phi >= phi_min',
    'phi <= phi_max',
    'p >= p_min',
    'p <= p_max',
    'waste powder >= 0',
    'Ti sponge >= 0',
    'TiCl4 >= 0',
    'Ti slag >= 0',
    'ilmenite >= 0',
    'beta >= beta_min',
)

EQUALITY_NAMES = (
    'TiO2 = TiCl4 / alpha_CR',
    'ilmenite = slag / alpha_SM',
    'TiCl4 = sponge / alpha_RD',
)


class ConstraintSet:
    """
    Ten inequalities and three equalities on (phi, p, beta) and the derived state.

    The bound inequalities repeat the box bounds that are also handed to the
    solver, and the equalities restate mass ratios the process model already
    applies. Both stay explicit so the constraint model does not depend on
    what a particular solver enforces.
    """

    n_inequalities = len(INEQUALITY_NAMES)
    n_equalities = len(EQUALITY_NAMES)

    def __init__(self, bounds: Bounds = None):
        self.bounds = bounds if bounds is not None else Bounds()

    def inequalities(self, x: DecisionVariables, derived: DerivedState) -> np.ndarray:
        phi_lo, phi_hi = self.bounds.phi
        p_lo, p_hi = self.bounds.p
        beta_lo = self.bounds.beta[0]
        return np.array([
            phi_lo - x.phi,
            x.phi - phi_hi,
            p_lo - x.p,
            x.p - p_hi,
            -derived.m_waste_powder,
            -derived.m_ti_sponge,
            -derived.m_ticl4,
            -derived.m_ti_slag,
            -derived.m_ilmenite,
            beta_lo - x.beta,
        ], dtype=float)

    def equalities(self, derived: DerivedState, params: ProcessParameters) -> np.ndarray:
        with np.errstate(all='ignore'):
            return np.array([
                derived.m_tio2 - np.float64(derived.m_ticl4) / params.alpha_CR,
                derived.m_ilmenite - np.float64(derived.m_ti_slag) / params.alpha_SM,
                derived.m_ticl4 - np.float64(derived.m_ti_sponge) / params.alpha_RD,
            ], dtype=float)

    def evaluate(self, x: DecisionVariables, derived: DerivedState,
                 params: ProcessParameters) -> Tuple[np.ndarray, np.ndarray]:
        """
        Returns:
            (inequalities, equalities) residual arrays of length 10 and 3
        """
        return self.inequalities(x, derived), self.equalities(derived, params)

    def max_violation(self, x: DecisionVariables, derived: DerivedState,
                      params: ProcessParameters) -> float:
        """Largest constraint violation, 0.0 when every constraint holds. NaN propagates."""
        g, h = self.evaluate(x, derived, params)
        return float(np.max(np.concatenate([np.maximum(g, 0.0), np.abs(h)])))

    def is_feasible(self, x: DecisionVariables, derived: DerivedState,
                    params: ProcessParameters, tol: float = 1e-6) -> bool:
        return self.max_violation(x, derived, params) <= tol
