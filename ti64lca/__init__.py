"""
Ti6Al4V Powder LCA Optimization Package

This package provides:
- Mass/energy balance of Ti6Al4V powder production (Kroll route + gas atomization)
- Engineering constraints on the operating point
- LCA impact evaluation per production stage
- SQP search for the impact-minimal (phi, p, beta)
"""

from .process import DecisionVariables, DerivedState, ProcessParameters
from .config import Bounds, RunConfig, SolverOptions, build_config
from .constraints import ConstraintSet
from .impact import ImpactBreakdown
from .coefficients import CATEGORIES, REGIONS, lookup
from .errors import InfeasibleConstraintError, InputValidationError, NumericalDegeneracyError
from .optimizer import ConvergenceStatus, OptimizationResult, SQPOptimizer, solve
from .pipeline import RunResult, compare_regions, run_optimization

__all__ = [
    # Process model
    'ProcessParameters',
    'DecisionVariables',
    'DerivedState',
    # Configuration
    'Bounds',
    'SolverOptions',
    'RunConfig',
    'build_config',
    # Constraints and impact
    'ConstraintSet',
    'ImpactBreakdown',
    'CATEGORIES',
    'REGIONS',
    'lookup',
    # Optimizer
    'SQPOptimizer',
    'solve',
    'ConvergenceStatus',
    'OptimizationResult',
    # Pipeline
    'RunResult',
    'run_optimization',
    'compare_regions',
    # Errors
    'InputValidationError',
    'InfeasibleConstraintError',
    'NumericalDegeneracyError',
]
