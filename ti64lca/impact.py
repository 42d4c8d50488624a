"""
Impact Evaluator

Turns a derived state and one resolved coefficient row into the total LCA
impact and its split over the eight production stages.
"""

from dataclasses import dataclass, fields
from typing import Mapping, Tuple

import numpy as np

from .process import DerivedState, ProcessParameters

STAGE_LABELS = {
    'mineral_extraction': 'Mineral extraction',
    'smelting': 'Smelting',
    'chlorination': 'Chlorination',
    'reduction_distillation': 'Reduction / distillation',
    'compaction_sintering': 'Compaction + sintering',
    'remelting': 'Remelting',
    'atomization': 'Atomization',
    'powder_sieving': 'Powder sieving',
}


@dataclass(frozen=True)
class ImpactBreakdown:
    """Impact contribution of each production stage, in category units."""
    mineral_extraction: float
    smelting: float
    chlorination: float
    reduction_distillation: float
    compaction_sintering: float
    remelting: float
    atomization: float
    powder_sieving: float

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def total(self) -> float:
        return float(sum(self.as_dict().values()))

    def shares(self) -> dict:
        """Fraction of the total per stage (NaN when the total is zero)."""
        total = self.total
        with np.errstate(all='ignore'):
            return {k: float(np.float64(v) / total) for k, v in self.as_dict().items()}


def evaluate(derived: DerivedState, coeffs: Mapping[str, float],
             params: ProcessParameters) -> Tuple[float, ImpactBreakdown]:
    """
    Total impact and per-stage breakdown.

    Args:
        derived: Mass/energy balance of the operating point
        coeffs: Resolved coefficient row (flow -> impact per unit)
        params: Specific consumptions of the stages

    Returns:
        (total, breakdown); the total is the sum of the eight stages
    """
    c = coeffs
    elec = c['electricity']

    mineral_extraction = derived.m_ilmenite * c['ilmenite']

    smelting = derived.m_ilmenite * (
        derived.e_smelting * elec
        + params.smelting_pitch * c['petroleum_pitch']
        + params.smelting_coke * c['petroleum_coke']
        + params.smelting_raw_coal * c['raw_coal']
        + params.smelting_crude_oil * c['crude_oil']
        + params.smelting_graphite * c['graphite']
        + params.smelting_sodium_oleate * c['sodium_oleate']
    )

    chlorination = derived.m_ti_slag * (
        derived.e_chlorination * elec
        + params.chlorination_natural_gas * c['natural_gas']
        + params.chlorination_fresh_water * c['fresh_water']
        + params.chlorination_coke * c['petroleum_coke']
        + params.chlorination_sodium_hydroxide * c['sodium_hydroxide']
        + params.chlorination_chlorine * c['chlorine']
        + params.chlorination_raw_coal * c['raw_coal']
        + params.chlorination_crude_oil * c['crude_oil']
    )

    reduction_distillation = derived.m_ticl4 * (
        params.reduction_electricity * elec
        + params.reduction_magnesium * c['magnesium']
    )

    compaction_sintering = (
        derived.m_ti64_ingot * params.compaction_electricity * elec
        + derived.m_aluminum * c['aluminum']
        + derived.m_vanadium * c['vanadium']
    )

    remelting = derived.m_ti64_ingot * derived.e_remelting * elec

    atomization = derived.m_ti64_ingot * (
        (derived.e_atomization_melt + derived.e_atomization_compression) * elec
        + (1.0 - params.argon_recycling) * derived.argon_consumption * c['argon']
    )

    powder_sieving = derived.m_atomized_powder * params.sieving_electricity * elec

    breakdown = ImpactBreakdown(
        mineral_extraction=mineral_extraction,
        smelting=smelting,
        chlorination=chlorination,
        reduction_distillation=reduction_distillation,
        compaction_sintering=compaction_sintering,
        remelting=remelting,
        atomization=atomization,
        powder_sieving=powder_sieving,
    )
    return breakdown.total, breakdown
