"""
Optimization Pipeline

Wires the process model, constraint set, impact evaluator and optimizer
together for one set of user inputs.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from . import impact, process
from .coefficients import REGIONS, lookup
from .config import RunConfig
from .constraints import ConstraintSet
from .errors import NumericalDegeneracyError
from .impact import ImpactBreakdown
from .inputs import validate_inputs
from .optimizer import OptimizationResult, SQPOptimizer
from .process import DecisionVariables, DerivedState, ProcessParameters

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Everything a report needs about one optimization run."""
    params: ProcessParameters
    coefficients: Mapping[str, float]
    initial: DecisionVariables
    initial_objective: float
    result: OptimizationResult
    derived: DerivedState
    breakdown: ImpactBreakdown

    @property
    def optimum(self) -> DecisionVariables:
        return self.result.x

    @property
    def objective(self) -> float:
        return self.result.fun

    @property
    def improvement(self) -> float:
        """Relative reduction of the impact versus the initial guess."""
        if self.initial_objective == 0:
            return 0.0
        return 1.0 - self.result.fun / self.initial_objective

    def check_finite(self) -> 'RunResult':
        """Raise NumericalDegeneracyError if any reported quantity is NaN/Inf."""
        values = dict(self.derived.as_dict())
        values.update({f'impact.{k}': v for k, v in self.breakdown.as_dict().items()})
        values['objective'] = self.result.fun
        bad = {k: v for k, v in values.items() if not math.isfinite(v)}
        if bad:
            raise NumericalDegeneracyError(
                f"Non-finite values in the final state: {sorted(bad)}",
                x=self.result.x, values=bad,
            )
        return self


def build_problem(params: ProcessParameters, coeffs: Mapping[str, float],
                  constraint_set: ConstraintSet):
    """The (model, constraints, objective) callables handed to the optimizer."""

    def model(x):
        return process.evaluate(x, params)

    def constraints(x, derived):
        return constraint_set.evaluate(x, derived, params)

    def objective(derived):
        total, _ = impact.evaluate(derived, coeffs, params)
        return total

    return model, constraints, objective


def run_optimization(final_powder_mass, impact_category, region, target_diameter,
                     config: Optional[RunConfig] = None, strict: bool = False) -> RunResult:
    """
    Find the impact-minimal operating point for one set of user inputs.

    Args:
        final_powder_mass: Sieved powder to produce [kg]
        impact_category: Category code, e.g. 'GW'
        region: 'EU' or 'CN'
        target_diameter: Target median particle diameter [um]
        config: Initial guess, bounds, solver options, process overrides
        strict: Raise InfeasibleConstraintError when the final point is infeasible

    Returns:
        RunResult; non-converged searches are returned too, tagged by status
    """
    if config is None:
        config = RunConfig()

    inputs = validate_inputs(final_powder_mass, impact_category, region, target_diameter)
    params = config.process_parameters(
        final_powder_mass=inputs.final_powder_mass,
        target_diameter=inputs.target_diameter,
        impact_category=inputs.impact_category,
        region=inputs.region,
    )
    coeffs = lookup(params.impact_category, params.region)
    constraint_set = ConstraintSet(config.bounds)
    model, constraints, objective = build_problem(params, coeffs, constraint_set)

    logger.info("Optimizing %s impact in %s for %.4g kg of %.4g um powder",
                params.impact_category, params.region,
                params.final_powder_mass, params.target_diameter)

    optimizer = SQPOptimizer(config.solver)
    result = optimizer.solve(config.initial, config.bounds, model, constraints, objective)

    initial_objective = objective(model(config.initial))
    derived = model(result.x)
    _, breakdown = impact.evaluate(derived, coeffs, params)

    run = RunResult(
        params=params,
        coefficients=coeffs,
        initial=config.initial,
        initial_objective=float(initial_objective),
        result=result,
        derived=derived,
        breakdown=breakdown,
    )
    if strict:
        result.require_feasible()
    return run


def compare_regions(final_powder_mass, impact_category, target_diameter,
                    config: Optional[RunConfig] = None) -> Dict[str, RunResult]:
    """Optimize the same inputs once per region."""
    return {
        region: run_optimization(final_powder_mass, impact_category, region,
                                 target_diameter, config=config)
        for region in REGIONS
    }
