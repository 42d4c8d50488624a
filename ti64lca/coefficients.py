"""
LCA Impact Coefficients

Per-unit characterization factors (ReCiPe 2016 midpoint, hierarchist
perspective) for every material and energy flow of the production chain.

Layout: category -> 'global' | region -> flow -> coefficient.
Flows under 'global' are world-average inventories and ignore the region;
the regional block holds the grid/utility dependent flows.

Units: per kg of material, per kWh of electricity.
"""

from types import MappingProxyType
from typing import Mapping

from .errors import InputValidationError

REGIONS = ('EU', 'CN')

GLOBAL_FLOWS = (
    'ilmenite',
    'petroleum_pitch',
    'petroleum_coke',
    'raw_coal',
    'crude_oil',
    'graphite',
    'sodium_oleate',
    'magnesium',
    'aluminum',
    'vanadium',
    'argon',
)

REGIONAL_FLOWS = (
    'electricity',
    'natural_gas',
    'fresh_water',
    'sodium_hydroxide',
    'chlorine',
)

FLOWS = GLOBAL_FLOWS + REGIONAL_FLOWS

# flow -> impact per unit, one (category, region) pair resolved
ImpactCoefficientRow = Mapping[str, float]

# code -> (name, unit)
CATEGORIES = {
    'TA': ('Terrestrial acidification', 'kg SO2 eq'),
    'GW': ('Global warming', 'kg CO2 eq'),
    'FET': ('Freshwater ecotoxicity', 'kg 1,4-DCB'),
    'MET': ('Marine ecotoxicity', 'kg 1,4-DCB'),
    'TET': ('Terrestrial ecotoxicity', 'kg 1,4-DCB'),
    'FF': ('Fossil resource scarcity', 'kg oil eq'),
    'ME': ('Marine eutrophication', 'kg N eq'),
    'HTPc': ('Human carcinogenic toxicity', 'kg 1,4-DCB'),
    'HTPnc': ('Human non-carcinogenic toxicity', 'kg 1,4-DCB'),
    'IR': ('Ionizing radiation', 'kBq Co-60 eq'),
    'LO': ('Land use', 'm2a crop eq'),
    'SO': ('Mineral resource scarcity', 'kg Cu eq'),
    'OD': ('Stratospheric ozone depletion', 'kg CFC11 eq'),
    'PMF': ('Fine particulate matter formation', 'kg PM2.5 eq'),
    'HOF': ('Ozone formation, human health', 'kg NOx eq'),
    'EOF': ('Ozone formation, terrestrial ecosystems', 'kg NOx eq'),
    'WC': ('Water consumption', 'm3'),
}


# =============================================================================
# Coefficient Table
# =============================================================================

IMPACT_COEFFICIENTS = {
    'TA': {
        'global': {
            'ilmenite': 1.1e-3, 'petroleum_pitch': 3.5e-3, 'petroleum_coke': 2.8e-3,
            'raw_coal': 1.2e-3, 'crude_oil': 3.1e-3, 'graphite': 2.1e-2,
            'sodium_oleate': 1.1e-2, 'magnesium': 1.9e-1, 'aluminum': 6.2e-2,
            'vanadium': 4.1e-1, 'argon': 1.2e-3,
        },
        'EU': {
            'electricity': 1.1e-3, 'natural_gas': 1.2e-3, 'fresh_water': 1.9e-6,
            'sodium_hydroxide': 4.1e-3, 'chlorine': 4.3e-3,
        },
        'CN': {
            'electricity': 5.2e-3, 'natural_gas': 1.6e-3, 'fresh_water': 3.1e-6,
            'sodium_hydroxide': 7.8e-3, 'chlorine': 8.1e-3,
        },
    },
    'GW': {
        'global': {
            'ilmenite': 0.12, 'petroleum_pitch': 0.55, 'petroleum_coke': 0.50,
            'raw_coal': 0.25, 'crude_oil': 0.45, 'graphite': 4.9,
            'sodium_oleate': 2.1, 'magnesium': 27.0, 'aluminum': 11.6,
            'vanadium': 33.0, 'argon': 0.35,
        },
        'EU': {
            'electricity': 0.33, 'natural_gas': 0.62, 'fresh_water': 4.0e-4,
            'sodium_hydroxide': 1.15, 'chlorine': 1.20,
        },
        'CN': {
            'electricity': 0.98, 'natural_gas': 0.71, 'fresh_water': 6.0e-4,
            'sodium_hydroxide': 1.65, 'chlorine': 1.75,
        },
    },
    'FET': {
        'global': {
            'ilmenite': 6.5e-3, 'petroleum_pitch': 9.0e-3, 'petroleum_coke': 8.2e-3,
            'raw_coal': 1.1e-2, 'crude_oil': 7.1e-3, 'graphite': 9.5e-2,
            'sodium_oleate': 5.4e-2, 'magnesium': 0.62, 'aluminum': 0.58,
            'vanadium': 2.9, 'argon': 5.1e-3,
        },
        'EU': {
            'electricity': 8.2e-3, 'natural_gas': 2.1e-3, 'fresh_water': 9.0e-6,
            'sodium_hydroxide': 3.1e-2, 'chlorine': 3.2e-2,
        },
        'CN': {
            'electricity': 1.4e-2, 'natural_gas': 2.9e-3, 'fresh_water': 1.4e-5,
            'sodium_hydroxide': 4.7e-2, 'chlorine': 4.9e-2,
        },
    },
    'MET': {
        'global': {
            'ilmenite': 8.6e-3, 'petroleum_pitch': 1.18e-2, 'petroleum_coke': 1.07e-2,
            'raw_coal': 1.46e-2, 'crude_oil': 9.4e-3, 'graphite': 0.126,
            'sodium_oleate': 7.1e-2, 'magnesium': 0.82, 'aluminum': 0.77,
            'vanadium': 3.8, 'argon': 6.8e-3,
        },
        'EU': {
            'electricity': 1.08e-2, 'natural_gas': 2.8e-3, 'fresh_water': 1.2e-5,
            'sodium_hydroxide': 4.1e-2, 'chlorine': 4.3e-2,
        },
        'CN': {
            'electricity': 1.85e-2, 'natural_gas': 3.9e-3, 'fresh_water': 1.9e-5,
            'sodium_hydroxide': 6.2e-2, 'chlorine': 6.5e-2,
        },
    },
    'TET': {
        'global': {
            'ilmenite': 0.85, 'petroleum_pitch': 0.92, 'petroleum_coke': 0.88,
            'raw_coal': 0.64, 'crude_oil': 0.95, 'graphite': 9.8,
            'sodium_oleate': 6.1, 'magnesium': 48.0, 'aluminum': 36.5,
            'vanadium': 190.0, 'argon': 0.71,
        },
        'EU': {
            'electricity': 0.62, 'natural_gas': 0.21, 'fresh_water': 1.1e-3,
            'sodium_hydroxide': 2.4, 'chlorine': 2.5,
        },
        'CN': {
            'electricity': 1.05, 'natural_gas': 0.29, 'fresh_water': 1.6e-3,
            'sodium_hydroxide': 3.6, 'chlorine': 3.8,
        },
    },
    'FF': {
        'global': {
            'ilmenite': 3.5e-2, 'petroleum_pitch': 0.93, 'petroleum_coke': 0.89,
            'raw_coal': 0.52, 'crude_oil': 1.08, 'graphite': 1.55,
            'sodium_oleate': 0.61, 'magnesium': 8.9, 'aluminum': 2.95,
            'vanadium': 6.4, 'argon': 9.5e-2,
        },
        'EU': {
            'electricity': 7.1e-2, 'natural_gas': 1.12, 'fresh_water': 9.5e-5,
            'sodium_hydroxide': 0.33, 'chlorine': 0.35,
        },
        'CN': {
            'electricity': 0.215, 'natural_gas': 1.15, 'fresh_water': 1.3e-4,
            'sodium_hydroxide': 0.46, 'chlorine': 0.48,
        },
    },
    'ME': {
        'global': {
            'ilmenite': 1.1e-5, 'petroleum_pitch': 1.9e-5, 'petroleum_coke': 1.7e-5,
            'raw_coal': 2.6e-5, 'crude_oil': 1.5e-5, 'graphite': 2.3e-4,
            'sodium_oleate': 9.0e-4, 'magnesium': 1.4e-3, 'aluminum': 6.2e-4,
            'vanadium': 3.3e-3, 'argon': 1.0e-5,
        },
        'EU': {
            'electricity': 1.2e-5, 'natural_gas': 2.1e-6, 'fresh_water': 1.1e-8,
            'sodium_hydroxide': 5.4e-5, 'chlorine': 5.7e-5,
        },
        'CN': {
            'electricity': 2.3e-5, 'natural_gas': 3.0e-6, 'fresh_water': 1.6e-8,
            'sodium_hydroxide': 8.8e-5, 'chlorine': 9.2e-5,
        },
    },
    'HTPc': {
        'global': {
            'ilmenite': 5.2e-3, 'petroleum_pitch': 9.8e-3, 'petroleum_coke': 9.1e-3,
            'raw_coal': 6.1e-3, 'crude_oil': 7.4e-3, 'graphite': 0.12,
            'sodium_oleate': 3.6e-2, 'magnesium': 1.35, 'aluminum': 0.91,
            'vanadium': 6.8, 'argon': 9.4e-3,
        },
        'EU': {
            'electricity': 8.7e-3, 'natural_gas': 1.3e-3, 'fresh_water': 1.2e-5,
            'sodium_hydroxide': 5.2e-2, 'chlorine': 5.5e-2,
        },
        'CN': {
            'electricity': 1.62e-2, 'natural_gas': 1.9e-3, 'fresh_water': 1.8e-5,
            'sodium_hydroxide': 7.9e-2, 'chlorine': 8.3e-2,
        },
    },
    'HTPnc': {
        'global': {
            'ilmenite': 9.4e-2, 'petroleum_pitch': 0.17, 'petroleum_coke': 0.15,
            'raw_coal': 0.22, 'crude_oil': 0.13, 'graphite': 1.9,
            'sodium_oleate': 1.45, 'magnesium': 11.8, 'aluminum': 9.6,
            'vanadium': 71.0, 'argon': 0.105,
        },
        'EU': {
            'electricity': 0.155, 'natural_gas': 3.4e-2, 'fresh_water': 2.1e-4,
            'sodium_hydroxide': 0.71, 'chlorine': 0.74,
        },
        'CN': {
            'electricity': 0.286, 'natural_gas': 4.6e-2, 'fresh_water': 3.2e-4,
            'sodium_hydroxide': 1.08, 'chlorine': 1.12,
        },
    },
    'IR': {
        'global': {
            'ilmenite': 4.2e-3, 'petroleum_pitch': 6.5e-3, 'petroleum_coke': 6.1e-3,
            'raw_coal': 2.4e-3, 'crude_oil': 7.1e-3, 'graphite': 0.21,
            'sodium_oleate': 8.2e-2, 'magnesium': 0.66, 'aluminum': 0.74,
            'vanadium': 1.9, 'argon': 5.8e-2,
        },
        'EU': {
            'electricity': 0.121, 'natural_gas': 3.1e-3, 'fresh_water': 3.3e-5,
            'sodium_hydroxide': 0.145, 'chlorine': 0.152,
        },
        'CN': {
            'electricity': 3.5e-2, 'natural_gas': 2.4e-3, 'fresh_water': 1.6e-5,
            'sodium_hydroxide': 6.1e-2, 'chlorine': 6.4e-2,
        },
    },
    'LO': {
        'global': {
            'ilmenite': 8.9e-3, 'petroleum_pitch': 4.2e-3, 'petroleum_coke': 3.9e-3,
            'raw_coal': 6.1e-3, 'crude_oil': 2.7e-3, 'graphite': 4.1e-2,
            'sodium_oleate': 1.35, 'magnesium': 0.31, 'aluminum': 0.26,
            'vanadium': 1.12, 'argon': 4.3e-3,
        },
        'EU': {
            'electricity': 6.4e-3, 'natural_gas': 1.1e-3, 'fresh_water': 2.4e-6,
            'sodium_hydroxide': 2.1e-2, 'chlorine': 2.2e-2,
        },
        'CN': {
            'electricity': 9.8e-3, 'natural_gas': 1.4e-3, 'fresh_water': 3.7e-6,
            'sodium_hydroxide': 3.1e-2, 'chlorine': 3.3e-2,
        },
    },
    'SO': {
        'global': {
            'ilmenite': 7.1e-3, 'petroleum_pitch': 1.1e-3, 'petroleum_coke': 1.0e-3,
            'raw_coal': 4.0e-4, 'crude_oil': 1.2e-3, 'graphite': 9.5e-3,
            'sodium_oleate': 4.8e-3, 'magnesium': 8.2e-2, 'aluminum': 3.6e-2,
            'vanadium': 0.41, 'argon': 9.0e-4,
        },
        'EU': {
            'electricity': 1.2e-3, 'natural_gas': 2.0e-4, 'fresh_water': 1.1e-6,
            'sodium_hydroxide': 4.7e-3, 'chlorine': 4.9e-3,
        },
        'CN': {
            'electricity': 1.9e-3, 'natural_gas': 3.0e-4, 'fresh_water': 1.6e-6,
            'sodium_hydroxide': 6.8e-3, 'chlorine': 7.1e-3,
        },
    },
    'OD': {
        'global': {
            'ilmenite': 5.4e-8, 'petroleum_pitch': 2.9e-7, 'petroleum_coke': 2.7e-7,
            'raw_coal': 9.0e-8, 'crude_oil': 3.1e-7, 'graphite': 2.3e-6,
            'sodium_oleate': 9.8e-6, 'magnesium': 1.1e-5, 'aluminum': 6.1e-6,
            'vanadium': 1.9e-5, 'argon': 1.6e-7,
        },
        'EU': {
            'electricity': 1.5e-7, 'natural_gas': 2.2e-7, 'fresh_water': 3.0e-10,
            'sodium_hydroxide': 5.2e-7, 'chlorine': 5.5e-7,
        },
        'CN': {
            'electricity': 3.4e-7, 'natural_gas': 2.6e-7, 'fresh_water': 4.1e-10,
            'sodium_hydroxide': 7.9e-7, 'chlorine': 8.3e-7,
        },
    },
    'PMF': {
        'global': {
            'ilmenite': 5.1e-4, 'petroleum_pitch': 1.1e-3, 'petroleum_coke': 9.8e-4,
            'raw_coal': 6.0e-4, 'crude_oil': 1.1e-3, 'graphite': 8.2e-3,
            'sodium_oleate': 4.0e-3, 'magnesium': 6.1e-2, 'aluminum': 2.2e-2,
            'vanadium': 0.14, 'argon': 4.5e-4,
        },
        'EU': {
            'electricity': 3.6e-4, 'natural_gas': 2.9e-4, 'fresh_water': 6.5e-7,
            'sodium_hydroxide': 1.4e-3, 'chlorine': 1.5e-3,
        },
        'CN': {
            'electricity': 1.55e-3, 'natural_gas': 4.1e-4, 'fresh_water': 1.0e-6,
            'sodium_hydroxide': 2.6e-3, 'chlorine': 2.7e-3,
        },
    },
    'HOF': {
        'global': {
            'ilmenite': 1.3e-3, 'petroleum_pitch': 2.1e-3, 'petroleum_coke': 1.9e-3,
            'raw_coal': 9.0e-4, 'crude_oil': 2.4e-3, 'graphite': 1.1e-2,
            'sodium_oleate': 6.5e-3, 'magnesium': 7.2e-2, 'aluminum': 3.1e-2,
            'vanadium': 0.16, 'argon': 7.6e-4,
        },
        'EU': {
            'electricity': 6.4e-4, 'natural_gas': 9.5e-4, 'fresh_water': 1.2e-6,
            'sodium_hydroxide': 2.6e-3, 'chlorine': 2.7e-3,
        },
        'CN': {
            'electricity': 2.1e-3, 'natural_gas': 1.1e-3, 'fresh_water': 1.8e-6,
            'sodium_hydroxide': 4.1e-3, 'chlorine': 4.3e-3,
        },
    },
    'EOF': {
        'global': {
            'ilmenite': 1.35e-3, 'petroleum_pitch': 2.2e-3, 'petroleum_coke': 2.0e-3,
            'raw_coal': 9.3e-4, 'crude_oil': 2.5e-3, 'graphite': 1.14e-2,
            'sodium_oleate': 6.8e-3, 'magnesium': 7.4e-2, 'aluminum': 3.2e-2,
            'vanadium': 0.165, 'argon': 7.9e-4,
        },
        'EU': {
            'electricity': 6.6e-4, 'natural_gas': 9.8e-4, 'fresh_water': 1.25e-6,
            'sodium_hydroxide': 2.7e-3, 'chlorine': 2.8e-3,
        },
        'CN': {
            'electricity': 2.2e-3, 'natural_gas': 1.15e-3, 'fresh_water': 1.9e-6,
            'sodium_hydroxide': 4.2e-3, 'chlorine': 4.45e-3,
        },
    },
    'WC': {
        'global': {
            'ilmenite': 6.5e-4, 'petroleum_pitch': 1.9e-3, 'petroleum_coke': 1.7e-3,
            'raw_coal': 4.2e-4, 'crude_oil': 1.1e-3, 'graphite': 2.1e-2,
            'sodium_oleate': 9.5e-2, 'magnesium': 0.19, 'aluminum': 0.12,
            'vanadium': 0.41, 'argon': 3.6e-3,
        },
        'EU': {
            'electricity': 2.5e-3, 'natural_gas': 2.4e-4, 'fresh_water': 1.0e-3,
            'sodium_hydroxide': 9.8e-3, 'chlorine': 1.02e-2,
        },
        'CN': {
            'electricity': 3.4e-3, 'natural_gas': 3.1e-4, 'fresh_water': 1.0e-3,
            'sodium_hydroxide': 1.25e-2, 'chlorine': 1.31e-2,
        },
    },
}


# =============================================================================
# Lookup
# =============================================================================

def category_label(category: str) -> str:
    """Human-readable 'Name [unit]' for a category code."""
    name, unit = CATEGORIES[category]
    return f"{name} [{unit}]"


def missing_flows(table=IMPACT_COEFFICIENTS):
    """
    List (category, block, flow) triples absent from a coefficient table.

    An empty list means every category can be evaluated in every region.
    """
    missing = []
    for category in CATEGORIES:
        blocks = table.get(category, {})
        for flow in GLOBAL_FLOWS:
            if flow not in blocks.get('global', {}):
                missing.append((category, 'global', flow))
        for region in REGIONS:
            for flow in REGIONAL_FLOWS:
                if flow not in blocks.get(region, {}):
                    missing.append((category, region, flow))
    return missing


def lookup(category: str, region: str, table=IMPACT_COEFFICIENTS) -> ImpactCoefficientRow:
    """
    Resolve the coefficient row for one (category, region) pair.

    Global flows are taken from the 'global' block, regional ones from the
    region's block. The returned mapping is read-only.
    """
    if category not in CATEGORIES:
        raise InputValidationError(
            f"Unknown impact category {category!r}; expected one of {', '.join(CATEGORIES)}"
        )
    if region not in REGIONS:
        raise InputValidationError(
            f"Unknown region {region!r}; expected one of {', '.join(REGIONS)}"
        )

    blocks = table[category]
    row = {}
    for flow in GLOBAL_FLOWS:
        row[flow] = float(blocks['global'][flow])
    for flow in REGIONAL_FLOWS:
        row[flow] = float(blocks[region][flow])
    return MappingProxyType(row)
