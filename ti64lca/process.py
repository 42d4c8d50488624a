"""
Process Model for Ti6Al4V Powder Production (Kroll route + gas atomization)

Mass and energy balance of the production chain, from ilmenite ore to sieved
powder:

1. Mineral extraction (ilmenite)
2. Smelting (ilmenite -> TiO2 slag)
3. Chlorination (slag -> TiCl4)
4. Reduction / distillation (TiCl4 -> Ti sponge, Kroll)
5. Compaction + sintering (sponge + Al + V -> electrode)
6. Remelting (electrode -> Ti64 ingot)
7. Gas atomization (ingot -> powder, argon)
8. Powder sieving

The free operating variables are the electrode diameter phi [m], the
atomization pressure p [MPa] and the TiO2 content of the slag beta [-].
Everything else is derived from them by `evaluate`.
"""

from dataclasses import dataclass, fields
from typing import Tuple

import numpy as np

# =============================================================================
# Constants
# =============================================================================

# Universal gas constant [J/(mol·K)]
R = 8.314

# Argon molar mass [kg/mol]
M_ARGON = 0.039948

# Alloy composition of Ti6Al4V, mass of Al and V per unit mass of Ti
AL_FRACTION = 0.0638
V_FRACTION = 0.0426

# Empirical argon consumption fit: mm_Ar = A * exp(-B * phi)  [kg Ar / kg metal]
ARGON_FIT_A = 448.82
ARGON_FIT_B = 30.61

# Atomization yield: eta = ETA_MAX * exp(-ETA_DECAY * |d50 - d_target|)
ETA_MAX = 0.8
ETA_DECAY = 0.02

# Linear pressure correction of d50, referenced to 5.5 MPa [um/MPa]
D50_PRESSURE_SLOPE = 40.0
D50_PRESSURE_REF = 5.5

# Compression exponent, ~ (gamma - 1) / gamma
COMPRESSION_EXPONENT = 0.4

J_PER_KWH = 3.6e6

VARIABLE_NAMES = ('phi', 'p', 'beta')


# =============================================================================
# Data Records
# =============================================================================

@dataclass(frozen=True)
class ProcessParameters:
    """
    Fixed parameters of one optimization run.

    Physical constants default to the values of the reference plant; the two
    user inputs and the two selectors must always be given.
    """
    final_powder_mass: float        # Target mass of sieved powder [kg]
    target_diameter: float          # Target median particle diameter [um]
    impact_category: str = 'GW'     # One of the 17 impact category codes
    region: str = 'EU'              # 'EU' or 'CN'

    # ─── Stage mass ratios ───
    alpha_SM: float = 0.56          # Slag per ilmenite [kg/kg]
    alpha_CR: float = 2.26          # TiCl4 per TiO2 [kg/kg]
    alpha_RD: float = 0.245         # Ti sponge per TiCl4 [kg/kg]

    # ─── Atomization (Lubanska-type droplet size) ───
    nu_melt: float = 1.27e-6        # Kinematic viscosity of the melt [m²/s]
    nu_gas: float = 1.42e-5         # Kinematic viscosity of argon [m²/s]
    weber: float = 8000.0           # Weber number [-]
    kd: float = 0.30                # Empirical droplet constant [-]

    # ─── Argon compression ───
    argon_temperature: float = 298.15   # [K]
    reference_pressure: float = 0.101325  # [MPa]
    argon_recycling: float = 0.9        # Recycled fraction of argon [-]

    # ─── Specific energy regressions [kWh/kg] ───
    # smelting, per kg ilmenite: a*beta^2 + b*beta + c
    smelting_energy: Tuple[float, float, float] = (4.2, -5.6, 3.1)
    # chlorination, per kg slag: a*beta^2 + b*beta + c
    chlorination_energy: Tuple[float, float, float] = (2.0, -4.4, 3.0)
    # remelting, per kg ingot: a*phi^2 + b*phi + c
    remelting_energy: Tuple[float, float, float] = (150.0, -30.0, 3.0)
    # atomization melting, per kg ingot: a*phi^2 + b*phi + c
    atomization_melt_energy: Tuple[float, float, float] = (200.0, -25.0, 2.5)

    # ─── Fixed specific electricity [kWh/kg] ───
    reduction_electricity: float = 8.5      # per kg TiCl4
    compaction_electricity: float = 1.2     # per kg ingot
    sieving_electricity: float = 0.05       # per kg atomized powder

    # ─── Smelting consumptions [kg / kg ilmenite] ───
    smelting_pitch: float = 0.012
    smelting_coke: float = 0.085
    smelting_raw_coal: float = 0.025
    smelting_crude_oil: float = 0.010
    smelting_graphite: float = 0.004
    smelting_sodium_oleate: float = 0.0008

    # ─── Chlorination consumptions [kg / kg slag] ───
    chlorination_natural_gas: float = 0.05
    chlorination_fresh_water: float = 2.5
    chlorination_coke: float = 0.30
    chlorination_sodium_hydroxide: float = 0.06
    chlorination_chlorine: float = 0.12
    chlorination_raw_coal: float = 0.02
    chlorination_crude_oil: float = 0.01

    # ─── Reduction consumption [kg Mg / kg TiCl4] ───
    reduction_magnesium: float = 0.03


@dataclass(frozen=True)
class DecisionVariables:
    """Free operating point (phi [m], p [MPa], beta [-])."""
    phi: float
    p: float
    beta: float

    def as_array(self) -> np.ndarray:
        return np.array([self.phi, self.p, self.beta], dtype=float)

    @classmethod
    def from_array(cls, x) -> 'DecisionVariables':
        return cls(float(x[0]), float(x[1]), float(x[2]))


@dataclass(frozen=True)
class DerivedState:
    """All quantities derived from one (phi, p, beta) triple. Masses in kg."""
    argon_consumption: float            # kg Ar per kg metal
    d50: float                          # um
    eta: float                          # atomization yield
    m_atomized_powder: float
    m_waste_powder: float
    m_ti64_ingot: float
    m_ti_sponge: float
    m_aluminum: float
    m_vanadium: float
    m_ticl4: float
    m_tio2: float
    m_ti_slag: float
    m_ilmenite: float
    e_smelting: float                   # kWh / kg ilmenite
    e_chlorination: float               # kWh / kg slag
    e_remelting: float                  # kWh / kg ingot
    e_atomization_melt: float           # kWh / kg ingot
    e_atomization_compression: float    # kWh / kg ingot

    def as_dict(self) -> dict:
        return {f.name: float(getattr(self, f.name)) for f in fields(self)}

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(list(self.as_dict().values()))))


# =============================================================================
# Empirical Correlations
# =============================================================================

def quadratic(coeffs, x):
    a, b, c = coeffs
    return a * x**2 + b * x + c


def argon_consumption(phi):
    """Specific argon consumption [kg Ar / kg metal], decays with electrode diameter."""
    return ARGON_FIT_A * np.exp(-ARGON_FIT_B * phi)


def median_diameter(phi, p, argon, params: ProcessParameters):
    """
    Median particle diameter d50 [um].

    Lubanska-type correlation on the electrode diameter, followed by a
    linear pressure correction referenced to 5.5 MPa.
    """
    factor = (params.nu_melt / (params.nu_gas * params.weber)) * (1.0 + 1.0 / argon)
    d50_raw = params.kd * phi * np.sqrt(factor) * 1e6
    return d50_raw - D50_PRESSURE_SLOPE * (p - D50_PRESSURE_REF)


def atomization_yield(d50, target_diameter):
    """Fraction of atomized powder within specification; 0.8 when d50 hits the target."""
    return ETA_MAX * np.exp(-ETA_DECAY * np.abs(d50 - target_diameter))


def compression_energy(argon, p, params: ProcessParameters):
    """
    Energy to compress the argon used per kg of metal [kWh/kg].

    E = m_Ar * (R*T/M) * ((p/p_ref)^0.4 - 1) / 0.4
    """
    specific_work = (R * params.argon_temperature / M_ARGON) \
        * ((p / params.reference_pressure) ** COMPRESSION_EXPONENT - 1.0) \
        / COMPRESSION_EXPONENT
    return argon * specific_work / J_PER_KWH


# =============================================================================
# Mass and Energy Balance
# =============================================================================

def evaluate(x: DecisionVariables, params: ProcessParameters) -> DerivedState:
    """
    Compute the full derived state for one operating point.

    Defined for any real input: outside the physical range the result may
    contain negative, infinite or NaN entries, which the constraint set and
    the optimizer deal with. Never raises.

    Parameters:
    -----------
    x : DecisionVariables - Operating point (phi, p, beta)
    params : ProcessParameters - Fixed run parameters

    Returns:
    --------
    DerivedState
    """
    with np.errstate(all='ignore'):
        phi = np.float64(x.phi)
        p = np.float64(x.p)
        beta = np.float64(x.beta)
        m_final = np.float64(params.final_powder_mass)

        # Atomization
        argon = argon_consumption(phi)
        d50 = median_diameter(phi, p, argon, params)
        eta = atomization_yield(d50, params.target_diameter)

        # Backward propagation from the powder yield
        m_atomized = m_final / eta
        m_waste = m_atomized - m_final
        m_ingot = m_atomized

        # Alloy split
        m_sponge = (m_ingot - m_waste) / (1.0 + AL_FRACTION + V_FRACTION)
        m_aluminum = AL_FRACTION * m_sponge
        m_vanadium = V_FRACTION * m_sponge

        # Upstream Kroll chain
        m_ticl4 = m_sponge / params.alpha_RD
        m_tio2 = m_ticl4 / params.alpha_CR
        m_slag = m_tio2 / beta
        m_ilmenite = m_slag / params.alpha_SM

        # Specific energies
        e_smelting = quadratic(params.smelting_energy, beta)
        e_chlorination = quadratic(params.chlorination_energy, beta)
        e_remelting = quadratic(params.remelting_energy, phi)
        e_melt = quadratic(params.atomization_melt_energy, phi)
        e_compression = compression_energy(argon, p, params)

    return DerivedState(
        argon_consumption=float(argon),
        d50=float(d50),
        eta=float(eta),
        m_atomized_powder=float(m_atomized),
        m_waste_powder=float(m_waste),
        m_ti64_ingot=float(m_ingot),
        m_ti_sponge=float(m_sponge),
        m_aluminum=float(m_aluminum),
        m_vanadium=float(m_vanadium),
        m_ticl4=float(m_ticl4),
        m_tio2=float(m_tio2),
        m_ti_slag=float(m_slag),
        m_ilmenite=float(m_ilmenite),
        e_smelting=float(e_smelting),
        e_chlorination=float(e_chlorination),
        e_remelting=float(e_remelting),
        e_atomization_melt=float(e_melt),
        e_atomization_compression=float(e_compression),
    )
