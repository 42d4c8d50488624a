"""
Pytest configuration: add project root to sys.path
so 'from ti64lca.xxx import ...' works without installing.
"""
import os
import sys

import pytest

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from ti64lca.coefficients import lookup  # noqa: E402
from ti64lca.config import DEFAULT_INITIAL, Bounds  # noqa: E402
from ti64lca.constraints import ConstraintSet  # noqa: E402
from ti64lca.process import DecisionVariables, ProcessParameters  # noqa: E402


@pytest.fixture
def params():
    return ProcessParameters(final_powder_mass=1.0, target_diameter=45.0,
                             impact_category='GW', region='EU')


@pytest.fixture
def initial():
    return DEFAULT_INITIAL


@pytest.fixture
def bounds():
    return Bounds()


@pytest.fixture
def constraint_set(bounds):
    return ConstraintSet(bounds)


@pytest.fixture
def gw_eu():
    return lookup('GW', 'EU')


@pytest.fixture
def grid_points():
    """Operating points spanning the default box."""
    return [
        DecisionVariables(phi, p, beta)
        for phi in (0.05, 0.065, 0.08, 0.10)
        for p in (5.5, 6.25, 7.0)
        for beta in (0.75, 0.8, 0.86, 0.9)
    ]
