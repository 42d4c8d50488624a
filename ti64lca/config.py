"""
Run Configuration

Defaults for the initial guess, the variable bounds and the solver options,
plus the JSON / command-line override layer:

    defaults -> JSON file -> command-line flags   (later wins)
"""

import json
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np

from .errors import InputValidationError
from .process import DecisionVariables, ProcessParameters, VARIABLE_NAMES

DEFAULT_INITIAL = DecisionVariables(phi=0.06, p=6.0, beta=0.86)


@dataclass(frozen=True)
class Bounds:
    """Inclusive box bounds on (phi, p, beta)."""
    phi: Tuple[float, float] = (0.05, 0.10)
    p: Tuple[float, float] = (5.5, 7.0)
    beta: Tuple[float, float] = (0.75, 0.90)

    @property
    def lower(self) -> np.ndarray:
        return np.array([self.phi[0], self.p[0], self.beta[0]], dtype=float)

    @property
    def upper(self) -> np.ndarray:
        return np.array([self.phi[1], self.p[1], self.beta[1]], dtype=float)

    def as_pairs(self):
        """[(lo, hi), ...] in variable order, the form scipy expects."""
        return [tuple(map(float, getattr(self, name))) for name in VARIABLE_NAMES]

    def contains(self, x) -> bool:
        x = np.asarray(x, dtype=float)
        return bool(np.all(x >= self.lower) and np.all(x <= self.upper))


@dataclass
class SolverOptions:
    """
    Termination settings of the SQP search.

    `finite_difference_step` is the absolute forward-difference step used for
    every gradient; it is kept fixed so runs stay comparable.
    """
    max_evaluations: int = 10000
    max_iterations: int = 5000
    constraint_tolerance: float = 1e-6
    ftol: float = 1e-9
    finite_difference_step: float = 1.4901161193847656e-08


@dataclass
class RunConfig:
    """Everything besides the user inputs that one optimization run needs."""
    initial: DecisionVariables = DEFAULT_INITIAL
    bounds: Bounds = field(default_factory=Bounds)
    solver: SolverOptions = field(default_factory=SolverOptions)
    process_overrides: Dict[str, float] = field(default_factory=dict)

    def process_parameters(self, final_powder_mass, target_diameter,
                           impact_category, region) -> ProcessParameters:
        return ProcessParameters(
            final_powder_mass=final_powder_mass,
            target_diameter=target_diameter,
            impact_category=impact_category,
            region=region,
            **self.process_overrides,
        )


# =============================================================================
# Override Layer
# =============================================================================

_PROCESS_DEFAULTS = {
    f.name: f.default for f in fields(ProcessParameters)
    if f.name not in ('final_powder_mass', 'target_diameter', 'impact_category', 'region')
}
_PROCESS_FIELDS = set(_PROCESS_DEFAULTS)
_SOLVER_FIELDS = {f.name for f in fields(SolverOptions)}


def _number(value, name, kind=float):
    try:
        number = kind(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise InputValidationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise InputValidationError(f"{name} must be finite, got {value!r}")
    return number


def _triple(value, name):
    if isinstance(value, (str, bytes)) or not hasattr(value, "__len__") or len(value) != 3:
        raise InputValidationError(f"{name} must be a list of 3 numbers, got {value!r}")
    return tuple(_number(v, name) for v in value)


def _pair(value, name):
    try:
        lo, hi = value
        return float(lo), float(hi)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"Bound for {name} must be a [lower, upper] pair, got {value!r}") from e


def build_config(json_overrides: Optional[dict] = None,
                 cli_overrides: Optional[dict] = None) -> RunConfig:
    """
    Build a RunConfig from defaults, then JSON overrides, then CLI overrides.

    Both override dicts use the JSON layout:
        {"initial": {"phi": .., "p": .., "beta": ..},
         "bounds": {"phi": [lo, hi], ...},
         "solver": {"max_iterations": .., ...},
         "process": {"alpha_SM": .., ...}}
    CLI values that are None are ignored.
    """
    merged = {'initial': {}, 'bounds': {}, 'solver': {}, 'process': {}}
    for source in (json_overrides or {}, cli_overrides or {}):
        unknown = set(source) - set(merged)
        if unknown:
            raise InputValidationError(f"Unknown configuration sections: {sorted(unknown)}")
        for section, values in source.items():
            if values is not None and not isinstance(values, dict):
                raise InputValidationError(f"Configuration section {section!r} must be an object")
            merged[section].update({k: v for k, v in (values or {}).items() if v is not None})

    initial_values = {name: getattr(DEFAULT_INITIAL, name) for name in VARIABLE_NAMES}
    for key, val in merged['initial'].items():
        if key not in initial_values:
            raise InputValidationError(f"Unknown decision variable {key!r}")
        initial_values[key] = _number(val, f"initial.{key}")

    bound_values = {name: getattr(Bounds(), name) for name in VARIABLE_NAMES}
    for key, val in merged['bounds'].items():
        if key not in bound_values:
            raise InputValidationError(f"Unknown decision variable {key!r}")
        bound_values[key] = _pair(val, key)

    solver = SolverOptions()
    for key, val in merged['solver'].items():
        if key not in _SOLVER_FIELDS:
            raise InputValidationError(f"Unknown solver option {key!r}")
        setattr(solver, key, _number(val, f"solver.{key}", type(getattr(solver, key))))

    process = {}
    for key, val in merged['process'].items():
        if key not in _PROCESS_FIELDS:
            raise InputValidationError(f"Unknown process parameter {key!r}")
        if isinstance(_PROCESS_DEFAULTS[key], tuple):
            process[key] = _triple(val, f"process.{key}")
        else:
            process[key] = _number(val, f"process.{key}")

    return RunConfig(
        initial=DecisionVariables(**initial_values),
        bounds=Bounds(**bound_values),
        solver=solver,
        process_overrides=process,
    )


def load_json_config(path) -> dict:
    """Read a JSON configuration file (see `build_config` for the layout)."""
    path = Path(path)
    with path.open('r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise InputValidationError(f"{path}: configuration must be a JSON object")
    return data
