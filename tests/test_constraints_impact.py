"""
Constraint set, impact evaluator and coefficient table tests
"""
import math

import numpy as np
import pytest

from ti64lca import impact
from ti64lca.coefficients import (
    CATEGORIES,
    FLOWS,
    GLOBAL_FLOWS,
    IMPACT_COEFFICIENTS,
    REGIONAL_FLOWS,
    REGIONS,
    category_label,
    lookup,
    missing_flows,
)
from ti64lca.errors import InputValidationError
from ti64lca.process import DecisionVariables, evaluate


# ══════════════════════════════════════════════════════════════
#  constraints.py tests
# ══════════════════════════════════════════════════════════════

class TestConstraintSet:
    def test_sizes(self, constraint_set, params, initial):
        g, h = constraint_set.evaluate(initial, evaluate(initial, params), params)
        assert g.shape == (10,)
        assert h.shape == (3,)

    def test_default_start_is_feasible(self, constraint_set, params, initial):
        derived = evaluate(initial, params)
        g, _ = constraint_set.evaluate(initial, derived, params)
        assert np.all(g <= 0)
        assert constraint_set.is_feasible(initial, derived, params)

    def test_equalities_vanish_everywhere(self, constraint_set, params, grid_points):
        outside = [DecisionVariables(0.2, 9.0, 0.5), DecisionVariables(0.01, 1.0, 1.2)]
        for x in grid_points + outside:
            _, h = constraint_set.evaluate(x, evaluate(x, params), params)
            assert np.all(np.abs(h) <= 1e-12)

    def test_phi_above_bound(self, constraint_set, params):
        x = DecisionVariables(0.12, 6.0, 0.86)
        g, _ = constraint_set.evaluate(x, evaluate(x, params), params)
        assert g[1] == pytest.approx(0.02)
        assert g[0] < 0

    def test_pressure_below_bound(self, constraint_set, params):
        x = DecisionVariables(0.06, 5.0, 0.86)
        g, _ = constraint_set.evaluate(x, evaluate(x, params), params)
        assert g[2] == pytest.approx(0.5)

    def test_beta_below_bound(self, constraint_set, params):
        x = DecisionVariables(0.06, 6.0, 0.7)
        derived = evaluate(x, params)
        g, _ = constraint_set.evaluate(x, derived, params)
        assert g[9] == pytest.approx(0.05)
        assert constraint_set.max_violation(x, derived, params) == pytest.approx(0.05)

    def test_negative_slag_is_flagged(self, constraint_set, params):
        x = DecisionVariables(0.06, 6.0, -0.5)
        g, _ = constraint_set.evaluate(x, evaluate(x, params), params)
        assert g[7] > 0
        assert g[8] > 0

    def test_mass_rows_negative_inside_box(self, constraint_set, params, grid_points):
        for x in grid_points:
            g, _ = constraint_set.evaluate(x, evaluate(x, params), params)
            assert np.all(g[5:9] < 0)
            assert g[4] <= 0


# ══════════════════════════════════════════════════════════════
#  impact.py tests
# ══════════════════════════════════════════════════════════════

class TestImpactEvaluator:
    def test_breakdown_sums_to_total(self, params, gw_eu, grid_points):
        for x in grid_points:
            total, breakdown = impact.evaluate(evaluate(x, params), gw_eu, params)
            parts = sum(breakdown.as_dict().values())
            assert parts == pytest.approx(total, rel=1e-9)

    def test_stages_non_negative(self, params, grid_points):
        for category in CATEGORIES:
            for region in REGIONS:
                coeffs = lookup(category, region)
                for x in grid_points[::7]:
                    _, breakdown = impact.evaluate(evaluate(x, params), coeffs, params)
                    assert all(v >= 0 for v in breakdown.as_dict().values())

    def test_deterministic(self, params, initial, gw_eu):
        derived = evaluate(initial, params)
        assert impact.evaluate(derived, gw_eu, params) == impact.evaluate(derived, gw_eu, params)

    def test_zero_coefficients_give_zero(self, params, initial):
        zeros = {flow: 0.0 for flow in FLOWS}
        total, _ = impact.evaluate(evaluate(initial, params), zeros, params)
        assert total == 0.0

    def test_electricity_only(self, params, initial):
        coeffs = {flow: 0.0 for flow in FLOWS}
        coeffs['electricity'] = 1.0
        d = evaluate(initial, params)
        _, b = impact.evaluate(d, coeffs, params)
        assert b.mineral_extraction == 0.0
        assert b.remelting == pytest.approx(d.m_ti64_ingot * d.e_remelting)
        assert b.powder_sieving == pytest.approx(d.m_atomized_powder * params.sieving_electricity)
        assert b.reduction_distillation == pytest.approx(d.m_ticl4 * params.reduction_electricity)
        assert b.atomization == pytest.approx(
            d.m_ti64_ingot * (d.e_atomization_melt + d.e_atomization_compression))

    def test_argon_term(self, params, initial):
        coeffs = {flow: 0.0 for flow in FLOWS}
        coeffs['argon'] = 2.0
        d = evaluate(initial, params)
        _, b = impact.evaluate(d, coeffs, params)
        expected = d.m_ti64_ingot * (1 - params.argon_recycling) * d.argon_consumption * 2.0
        assert b.atomization == pytest.approx(expected)

    def test_alloying_elements_in_compaction(self, params, initial):
        coeffs = {flow: 0.0 for flow in FLOWS}
        coeffs['aluminum'] = 1.0
        coeffs['vanadium'] = 10.0
        d = evaluate(initial, params)
        _, b = impact.evaluate(d, coeffs, params)
        assert b.compaction_sintering == pytest.approx(d.m_aluminum + 10 * d.m_vanadium)

    def test_shares_sum_to_one(self, params, initial, gw_eu):
        _, b = impact.evaluate(evaluate(initial, params), gw_eu, params)
        assert sum(b.shares().values()) == pytest.approx(1.0)

    def test_non_finite_state_does_not_raise(self, params, gw_eu):
        d = evaluate(DecisionVariables(0.06, 6.0, 0.0), params)
        total, _ = impact.evaluate(d, gw_eu, params)
        assert not math.isfinite(total)


# ══════════════════════════════════════════════════════════════
#  coefficients.py tests
# ══════════════════════════════════════════════════════════════

class TestCoefficientTable:
    def test_table_is_complete(self):
        assert missing_flows() == []
        assert set(IMPACT_COEFFICIENTS) == set(CATEGORIES)
        assert len(CATEGORIES) == 17

    def test_all_coefficients_non_negative(self):
        for category in CATEGORIES:
            for region in REGIONS:
                assert all(v >= 0 for v in lookup(category, region).values())

    def test_row_covers_every_flow(self):
        assert set(lookup('GW', 'CN')) == set(FLOWS)

    def test_global_flows_ignore_region(self):
        eu, cn = lookup('TA', 'EU'), lookup('TA', 'CN')
        for flow in GLOBAL_FLOWS:
            assert eu[flow] == cn[flow]

    def test_regional_flows_follow_region(self):
        eu, cn = lookup('GW', 'EU'), lookup('GW', 'CN')
        assert cn['electricity'] > eu['electricity']
        assert all(flow in eu for flow in REGIONAL_FLOWS)

    def test_row_is_read_only(self, gw_eu):
        with pytest.raises(TypeError):
            gw_eu['electricity'] = 0.0

    @pytest.mark.parametrize("category,region", [('XX', 'EU'), ('GW', 'US'), ('gw', 'EU')])
    def test_unknown_keys_rejected(self, category, region):
        with pytest.raises(InputValidationError):
            lookup(category, region)

    def test_incomplete_table_reported(self):
        table = {'GW': {'global': {}, 'EU': {}, 'CN': {}}}
        missing = missing_flows(table)
        assert ('GW', 'global', 'ilmenite') in missing
        assert ('TA', 'EU', 'electricity') in missing

    def test_category_label(self):
        assert category_label('GW') == 'Global warming [kg CO2 eq]'
