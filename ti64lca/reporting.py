"""
Result Reporting

Plain-text report of an optimization run and a bar chart of the per-stage
impact breakdown.
"""

import math
from pathlib import Path
from typing import Dict, List

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

from .coefficients import category_label
from .constraints import EQUALITY_NAMES, INEQUALITY_NAMES
from .impact import STAGE_LABELS
from .optimizer import ConvergenceStatus

plt.rcParams.update({
    'font.size': 10,
    'axes.labelsize': 11,
    'axes.titlesize': 12,
    'figure.dpi': 150,
    'savefig.dpi': 150,
    'axes.grid': True,
    'grid.alpha': 0.3,
})

_DERIVED_ROWS = [
    ('d50', 'Median particle diameter d50', 'um'),
    ('eta', 'Atomization yield', '-'),
    ('argon_consumption', 'Argon specific consumption', 'kg/kg'),
    ('m_atomized_powder', 'Atomized powder', 'kg'),
    ('m_waste_powder', 'Waste powder', 'kg'),
    ('m_ti64_ingot', 'Ti64 ingot', 'kg'),
    ('m_ti_sponge', 'Ti sponge', 'kg'),
    ('m_aluminum', 'Aluminum', 'kg'),
    ('m_vanadium', 'Vanadium', 'kg'),
    ('m_ticl4', 'TiCl4', 'kg'),
    ('m_tio2', 'TiO2', 'kg'),
    ('m_ti_slag', 'Ti slag', 'kg'),
    ('m_ilmenite', 'Ilmenite', 'kg'),
    ('e_smelting', 'Smelting energy', 'kWh/kg'),
    ('e_chlorination', 'Chlorination energy', 'kWh/kg'),
    ('e_remelting', 'Remelting energy', 'kWh/kg'),
    ('e_atomization_melt', 'Atomization melt energy', 'kWh/kg'),
    ('e_atomization_compression', 'Atomization compression energy', 'kWh/kg'),
]


def _fmt(value, spec='.4g') -> str:
    if value is None or not math.isfinite(value):
        return 'n/a (non-finite)'
    return format(value, spec)


def format_report(run) -> str:
    """Render one RunResult as text. Works for every termination status."""
    params = run.params
    result = run.result
    unit = category_label(params.impact_category)
    lines: List[str] = []

    lines.append("=" * 64)
    lines.append("Ti6Al4V Powder: Environmentally Optimal Operating Point")
    lines.append("=" * 64)
    lines.append(f"  Final powder mass:   {_fmt(params.final_powder_mass)} kg")
    lines.append(f"  Target diameter:     {_fmt(params.target_diameter)} um")
    lines.append(f"  Impact category:     {params.impact_category} ({unit})")
    lines.append(f"  Region:              {params.region}")

    lines.append("")
    lines.append(f"Solver status: {result.status.value}")
    if result.status is not ConvergenceStatus.CONVERGED:
        lines.append("  ⚠ Not converged: values below are the last iterate found.")
    if result.message:
        lines.append(f"  {result.message}")
    lines.append(f"  Iterations: {result.n_iterations}   Evaluations: {result.n_evaluations}")
    lines.append(f"  Max constraint violation: {_fmt(result.max_violation, '.3e')}"
                 f" ({'feasible' if result.feasible else 'INFEASIBLE'})")

    lines.append("")
    lines.append("Decision variables        initial      optimum")
    lines.append(f"  Electrode diameter [m]  {run.initial.phi:<12.5g} {_fmt(run.optimum.phi, '.5g')}")
    lines.append(f"  Pressure [MPa]          {run.initial.p:<12.5g} {_fmt(run.optimum.p, '.5g')}")
    lines.append(f"  TiO2 fraction [-]       {run.initial.beta:<12.5g} {_fmt(run.optimum.beta, '.5g')}")

    lines.append("")
    lines.append("Derived state")
    derived = run.derived.as_dict()
    for key, label, u in _DERIVED_ROWS:
        lines.append(f"  {label:<32} {_fmt(derived[key]):>16} {u}")

    lines.append("")
    lines.append(f"Impact breakdown [{unit}]")
    shares = run.breakdown.shares()
    for key, value in run.breakdown.as_dict().items():
        lines.append(f"  {STAGE_LABELS[key]:<28} {_fmt(value, '.5g'):>14}"
                     f"   {_fmt(100 * shares[key], '5.1f')} %")
    lines.append(f"  {'Total':<28} {_fmt(run.objective, '.5g'):>14}")
    lines.append(f"  Initial guess total: {_fmt(run.initial_objective, '.5g')}"
                 f"  (reduction {_fmt(100 * run.improvement, '.2f')} %)")

    violated = [(name, g) for name, g in zip(INEQUALITY_NAMES, result.inequalities)
                if not g <= result.constraint_tolerance]
    violated += [(name, h) for name, h in zip(EQUALITY_NAMES, result.equalities)
                 if not abs(h) <= result.constraint_tolerance]
    if violated:
        lines.append("")
        lines.append("Violated constraints")
        for name, value in violated:
            lines.append(f"  {name:<28} residual {_fmt(value, '.3e')}")

    return "\n".join(lines)


def format_comparison(runs: Dict[str, object]) -> str:
    """Side-by-side totals of several runs keyed by label (e.g. region)."""
    lines = ["Region comparison", "-" * 64,
             f"  {'':<8} {'phi [m]':>9} {'p [MPa]':>9} {'beta':>7} {'total':>14}  status"]
    for label, run in runs.items():
        x = run.optimum
        lines.append(f"  {label:<8} {x.phi:>9.4f} {x.p:>9.3f} {x.beta:>7.3f} "
                     f"{_fmt(run.objective, '.5g'):>14}  {run.result.status.value}")
    return "\n".join(lines)


def plot_breakdown(run, save_path='impact_breakdown.png') -> Path:
    """
    Save a horizontal bar chart of the per-stage impact.

    Args:
        run: RunResult
        save_path: Output PNG path; parent directories are created

    Returns:
        Path of the written file
    """
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    items = run.breakdown.as_dict()
    labels = [STAGE_LABELS[k] for k in items]
    values = [v if math.isfinite(v) else 0.0 for v in items.values()]

    fig, ax = plt.subplots(figsize=(8, 4.5))
    ax.barh(labels, values, color='tab:blue', alpha=0.8)
    ax.invert_yaxis()
    ax.set_xlabel(category_label(run.params.impact_category))
    ax.set_title(f"Impact per stage: {run.params.impact_category}, {run.params.region} "
                 f"({run.result.status.value})")
    fig.tight_layout()
    fig.savefig(save_path)
    plt.close(fig)
    return save_path
