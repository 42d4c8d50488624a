"""
SQP Optimizer

Drives (phi, p, beta) toward a feasible, impact-minimal operating point with
scipy's SLSQP. Gradients are forward finite differences with a fixed
absolute step (`SolverOptions.finite_difference_step`).

The search only guarantees a local optimum from the given start.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np
from scipy.optimize import minimize

from .config import Bounds, SolverOptions
from .errors import InfeasibleConstraintError, InputValidationError, NumericalDegeneracyError
from .process import DecisionVariables, DerivedState, VARIABLE_NAMES

logger = logging.getLogger(__name__)

ModelFn = Callable[[DecisionVariables], DerivedState]
ConstraintFn = Callable[[DecisionVariables, DerivedState], Tuple[np.ndarray, np.ndarray]]
ObjectiveFn = Callable[[DerivedState], float]

# SLSQP exit modes
_SLSQP_SUCCESS = 0
_SLSQP_INCOMPATIBLE = 4
_SLSQP_ITERATION_LIMIT = 9


class ConvergenceStatus(str, Enum):
    """
    Termination reason of a search.

    INFEASIBLE_START covers every search that ends without a feasible point
    from the given start: incompatible linearized constraints, or a point the
    solver accepted as converged that still violates the constraints. The
    result message says which, and whether the start itself was feasible.
    """
    CONVERGED = 'Converged'
    MAX_ITERATIONS_REACHED = 'MaxIterationsReached'
    MAX_EVALUATIONS_REACHED = 'MaxEvaluationsReached'
    INFEASIBLE_START = 'InfeasibleStart'
    NUMERICAL_FAILURE = 'NumericalFailure'


@dataclass
class OptimizationResult:
    """Final iterate of a search, kept whatever the termination reason."""
    x: DecisionVariables
    fun: float
    status: ConvergenceStatus
    message: str
    inequalities: np.ndarray
    equalities: np.ndarray
    constraint_tolerance: float
    n_iterations: int = 0
    n_evaluations: int = 0
    history: List[np.ndarray] = field(default_factory=list)

    @property
    def max_violation(self) -> float:
        viol = np.concatenate([np.maximum(self.inequalities, 0.0), np.abs(self.equalities)])
        return float(np.max(viol))

    @property
    def feasible(self) -> bool:
        return self.max_violation <= self.constraint_tolerance

    @property
    def success(self) -> bool:
        return self.status is ConvergenceStatus.CONVERGED

    def require_feasible(self) -> 'OptimizationResult':
        """Raise InfeasibleConstraintError unless the iterate meets every constraint."""
        if not self.feasible:
            raise InfeasibleConstraintError(
                f"No feasible point found (max violation {self.max_violation:.3e} "
                f"> tolerance {self.constraint_tolerance:.1e}, status {self.status.value})",
                result=self,
            )
        return self


class _EvaluationBudgetExhausted(Exception):
    pass


# =============================================================================
# Input Checks
# =============================================================================

def validate_start(initial, bounds: Bounds) -> np.ndarray:
    """
    Check the initial guess against the bounds; boundary values are accepted.

    Raises:
        InputValidationError: wrong dimension, non-finite entries, inverted
            bounds, or a start outside [lower, upper]
    """
    if isinstance(initial, DecisionVariables):
        x0 = initial.as_array()
    else:
        try:
            x0 = np.asarray(initial, dtype=float)
        except (TypeError, ValueError) as e:
            raise InputValidationError(f"Initial guess is not numeric: {initial!r}") from e
    if x0.shape != (len(VARIABLE_NAMES),):
        raise InputValidationError(
            f"Initial guess must have {len(VARIABLE_NAMES)} entries {VARIABLE_NAMES}, got shape {x0.shape}"
        )
    if not np.all(np.isfinite(x0)):
        raise InputValidationError(f"Initial guess contains non-finite values: {x0}")

    lower, upper = bounds.lower, bounds.upper
    if lower.shape != x0.shape or upper.shape != x0.shape:
        raise InputValidationError("Bounds must have one (lower, upper) pair per variable")
    if not (np.all(np.isfinite(lower)) and np.all(np.isfinite(upper))):
        raise InputValidationError("Bounds must be finite")
    for name, lo, hi, val in zip(VARIABLE_NAMES, lower, upper, x0):
        if lo > hi:
            raise InputValidationError(f"Bounds for {name} are inverted: [{lo}, {hi}]")
        if not (lo <= val <= hi):
            raise InputValidationError(f"Initial {name}={val} outside bounds [{lo}, {hi}]")
    return x0


# =============================================================================
# Optimizer
# =============================================================================

class SQPOptimizer:
    """
    Bounded, constrained local minimization over the three decision variables.

    The model, constraint and objective callables are pure; every evaluation
    recomputes the derived state from scratch.
    """

    def __init__(self, options: Optional[SolverOptions] = None):
        self.options = options if options is not None else SolverOptions()
        self._reset()

    def _reset(self):
        self.n_evaluations = 0
        self.history = []

    def _point(self, x: np.ndarray, bounds: Bounds) -> DecisionVariables:
        return DecisionVariables.from_array(np.clip(x, bounds.lower, bounds.upper))

    def _objective(self, x, bounds, model, objective):
        if self.n_evaluations >= self.options.max_evaluations:
            raise _EvaluationBudgetExhausted()
        self.n_evaluations += 1

        point = self._point(x, bounds)
        value = float(objective(model(point)))
        if not np.isfinite(value):
            raise NumericalDegeneracyError(f"Objective is {value} at {point}", x=point)
        return value

    def _inequalities(self, x, bounds, model, constraints):
        point = self._point(x, bounds)
        g, h = constraints(point, model(point))
        if not (np.all(np.isfinite(g)) and np.all(np.isfinite(h))):
            raise NumericalDegeneracyError(f"Non-finite constraint residual at {point}", x=point)
        if np.max(np.abs(h)) > self.options.constraint_tolerance:
            raise NumericalDegeneracyError(
                f"Mass-ratio identities violated at {point}: {h}", x=point,
            )
        # scipy convention is fun(x) >= 0
        return -np.asarray(g, dtype=float)

    def _last_iterate(self, x0, bounds):
        if not self.history:
            return x0
        return np.clip(self.history[-1], bounds.lower, bounds.upper)

    def _callback(self, xk):
        # raw iterate as proposed by SLSQP, not clipped
        x = np.array(xk, dtype=float)
        self.history.append(x)
        logger.debug("iter %d: phi=%.6g p=%.6g beta=%.6g",
                     len(self.history), x[0], x[1], x[2])

    def solve(self, initial, bounds: Bounds, model: ModelFn, constraints: ConstraintFn,
              objective: ObjectiveFn) -> OptimizationResult:
        """
        Minimize `objective(model(x))` subject to `constraints(x, model(x))`.

        Args:
            initial: DecisionVariables or 3-sequence, within bounds
            bounds: Inclusive box bounds
            model: x -> DerivedState
            constraints: (x, derived) -> (g, h), g <= 0 and h == 0 when satisfied
            objective: derived -> impact value

        Returns:
            OptimizationResult with the last iterate, whether or not the
            search converged

        Raises:
            InputValidationError: invalid initial guess or bounds
        """
        x0 = validate_start(initial, bounds)
        self._reset()
        opts = self.options

        start = DecisionVariables.from_array(x0)
        g0, _ = constraints(start, model(start))
        start_violation = float(np.max(np.maximum(g0, 0.0)))
        if start_violation > opts.constraint_tolerance:
            logger.warning("Initial guess violates constraints by %.3e", start_violation)

        scipy_constraints = [{
            'type': 'ineq',
            'fun': self._inequalities,
            'args': (bounds, model, constraints),
        }]

        status = None
        message = ''
        n_iterations = 0
        try:
            res = minimize(
                self._objective,
                x0,
                args=(bounds, model, objective),
                method='SLSQP',
                bounds=bounds.as_pairs(),
                constraints=scipy_constraints,
                callback=self._callback,
                options={
                    'maxiter': opts.max_iterations,
                    'ftol': opts.ftol,
                    'eps': opts.finite_difference_step,
                    'disp': False,
                },
            )
            x_final = np.clip(res.x, bounds.lower, bounds.upper)
            n_iterations = int(res.nit)
            message = str(res.message)
            if res.status == _SLSQP_SUCCESS:
                status = ConvergenceStatus.CONVERGED
            elif res.status == _SLSQP_ITERATION_LIMIT:
                status = ConvergenceStatus.MAX_ITERATIONS_REACHED
            elif res.status == _SLSQP_INCOMPATIBLE:
                status = ConvergenceStatus.INFEASIBLE_START
            else:
                status = ConvergenceStatus.NUMERICAL_FAILURE
        except _EvaluationBudgetExhausted:
            x_final = self._last_iterate(x0, bounds)
            n_iterations = len(self.history)
            status = ConvergenceStatus.MAX_EVALUATIONS_REACHED
            message = f"Function evaluation budget of {opts.max_evaluations} exhausted"
        except NumericalDegeneracyError as e:
            x_final = self._last_iterate(x0, bounds)
            n_iterations = len(self.history)
            status = ConvergenceStatus.NUMERICAL_FAILURE
            message = str(e)

        result = self._finish(x_final, bounds, model, constraints, objective,
                              status, message, n_iterations, start_violation)

        if result.status is not ConvergenceStatus.CONVERGED:
            logger.warning("Search ended with status %s: %s", result.status.value, result.message)
        else:
            logger.info("Converged in %d iterations / %d evaluations, objective %.6g",
                        result.n_iterations, result.n_evaluations, result.fun)
        return result

    def _finish(self, x_final, bounds, model, constraints, objective,
                status, message, n_iterations, start_violation=0.0) -> OptimizationResult:
        point = DecisionVariables.from_array(x_final)
        derived = model(point)
        g, h = constraints(point, derived)
        fun = float(objective(derived))

        result = OptimizationResult(
            x=point,
            fun=fun,
            status=status,
            message=message,
            inequalities=np.asarray(g, dtype=float),
            equalities=np.asarray(h, dtype=float),
            constraint_tolerance=self.options.constraint_tolerance,
            n_iterations=n_iterations,
            n_evaluations=self.n_evaluations,
            history=list(self.history),
        )

        if not np.isfinite(fun) or not np.isfinite(result.max_violation):
            result.status = ConvergenceStatus.NUMERICAL_FAILURE
        elif status is ConvergenceStatus.CONVERGED and not result.feasible:
            result.status = ConvergenceStatus.INFEASIBLE_START
            if start_violation <= self.options.constraint_tolerance:
                origin = "search started from a feasible point"
            else:
                origin = f"initial guess violated constraints by {start_violation:.3e}"
            result.message = (f"{message}; reported as converged but the final iterate "
                              f"violates constraints by {result.max_violation:.3e} "
                              f"({origin})")
        return result


def solve(initial, bounds: Bounds, model: ModelFn, constraints: ConstraintFn,
          objective: ObjectiveFn, options: Optional[SolverOptions] = None) -> OptimizationResult:
    """Functional shortcut for `SQPOptimizer(options).solve(...)`."""
    return SQPOptimizer(options).solve(initial, bounds, model, constraints, objective)
