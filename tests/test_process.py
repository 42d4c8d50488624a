"""
Process model tests: correlations, mass chain, purity, totality
"""
import math
from dataclasses import FrozenInstanceError, replace

import pytest

from ti64lca.process import (
    AL_FRACTION,
    V_FRACTION,
    DecisionVariables,
    ProcessParameters,
    argon_consumption,
    atomization_yield,
    evaluate,
)


class TestCorrelations:
    def test_argon_consumption_at_zero_diameter(self):
        assert argon_consumption(0.0) == pytest.approx(448.82)

    def test_argon_consumption_decays(self):
        assert argon_consumption(0.10) < argon_consumption(0.05)

    def test_d50_matches_closed_form(self, params, initial):
        argon = 448.82 * math.exp(-30.61 * 0.06)
        factor = (1.27e-6 / (1.42e-5 * 8000.0)) * (1 + 1 / argon)
        expected = 0.30 * 0.06 * math.sqrt(factor) * 1e6 - 40 * (6.0 - 5.5)

        derived = evaluate(initial, params)
        assert derived.argon_consumption == pytest.approx(argon, rel=1e-12)
        assert derived.d50 == pytest.approx(expected, rel=1e-12)

    def test_pressure_correction_is_linear(self, params):
        low = evaluate(DecisionVariables(0.06, 5.5, 0.86), params)
        high = evaluate(DecisionVariables(0.06, 6.5, 0.86), params)
        assert low.d50 - high.d50 == pytest.approx(40.0)

    def test_yield_peaks_at_target(self):
        assert atomization_yield(45.0, 45.0) == 0.8

    def test_compression_energy_grows_with_pressure(self, params):
        low = evaluate(DecisionVariables(0.06, 5.5, 0.86), params)
        high = evaluate(DecisionVariables(0.06, 7.0, 0.86), params)
        assert high.e_atomization_compression > low.e_atomization_compression > 0


class TestMassChain:
    def test_upstream_masses_positive_over_box(self, params, grid_points):
        for x in grid_points:
            d = evaluate(x, params)
            assert d.m_ilmenite > 0
            assert d.m_ti_slag > 0
            assert d.m_ticl4 > 0
            assert d.m_ti_sponge > 0

    def test_ingot_equals_atomized_powder(self, params, initial):
        d = evaluate(initial, params)
        assert d.m_ti64_ingot == d.m_atomized_powder
        assert d.m_atomized_powder - d.m_waste_powder == pytest.approx(1.0)

    def test_alloy_split(self, params, initial):
        d = evaluate(initial, params)
        assert d.m_ti_sponge * (1 + AL_FRACTION + V_FRACTION) == pytest.approx(
            d.m_ti64_ingot - d.m_waste_powder)
        assert d.m_aluminum == pytest.approx(AL_FRACTION * d.m_ti_sponge)
        assert d.m_vanadium == pytest.approx(V_FRACTION * d.m_ti_sponge)

    def test_stage_ratios(self, params, initial):
        d = evaluate(initial, params)
        assert d.m_ticl4 == pytest.approx(d.m_ti_sponge / params.alpha_RD)
        assert d.m_tio2 == pytest.approx(d.m_ticl4 / params.alpha_CR)
        assert d.m_ti_slag == pytest.approx(d.m_tio2 / initial.beta)
        assert d.m_ilmenite == pytest.approx(d.m_ti_slag / params.alpha_SM)

    def test_higher_beta_needs_less_ilmenite(self, params):
        low = evaluate(DecisionVariables(0.06, 6.0, 0.75), params)
        high = evaluate(DecisionVariables(0.06, 6.0, 0.90), params)
        assert high.m_ilmenite < low.m_ilmenite

    def test_scales_with_final_mass(self, params, initial):
        single = evaluate(initial, params)
        double = evaluate(initial, replace(params, final_powder_mass=2.0))
        assert double.m_ilmenite == pytest.approx(2 * single.m_ilmenite)


class TestYieldMonotonicity:
    def test_farther_target_lowers_yield(self, params, initial):
        d50 = evaluate(initial, params).d50
        previous = None
        for offset in (0.0, 2.0, 5.0, 10.0, 25.0):
            d = evaluate(initial, replace(params, target_diameter=d50 + offset))
            if previous is not None:
                assert d.eta < previous.eta
                assert d.m_atomized_powder > previous.m_atomized_powder
                assert d.m_waste_powder > previous.m_waste_powder
            previous = d

    def test_target_at_initial_d50_gives_max_yield(self, params, initial):
        d50 = evaluate(initial, params).d50
        on_target = evaluate(initial, replace(params, target_diameter=d50))
        assert on_target.eta == pytest.approx(0.8, abs=1e-12)
        for delta in (-5.0, -1.0, 1.0, 5.0):
            nearby = evaluate(initial, replace(params, target_diameter=d50 + delta))
            assert nearby.m_waste_powder > on_target.m_waste_powder

    def test_yield_never_exceeds_cap(self, params, grid_points):
        for x in grid_points:
            assert evaluate(x, params).eta <= 0.8


class TestPurityAndTotality:
    def test_repeated_evaluation_is_identical(self, params, initial):
        assert evaluate(initial, params) == evaluate(initial, params)

    def test_zero_beta_does_not_raise(self, params):
        d = evaluate(DecisionVariables(0.06, 6.0, 0.0), params)
        assert math.isinf(d.m_ti_slag)
        assert not d.is_finite()

    def test_extreme_diameter_does_not_raise(self, params):
        d = evaluate(DecisionVariables(-100.0, 6.0, 0.86), params)
        assert math.isinf(d.argon_consumption)

    def test_negative_pressure_does_not_raise(self, params):
        d = evaluate(DecisionVariables(0.06, -1.0, 0.86), params)
        assert math.isnan(d.e_atomization_compression)

    def test_finite_inside_box(self, params, grid_points):
        assert all(evaluate(x, params).is_finite() for x in grid_points)


class TestDecisionVariables:
    def test_array_round_trip(self):
        x = DecisionVariables(0.07, 6.5, 0.8)
        assert DecisionVariables.from_array(x.as_array()) == x

    def test_parameters_are_frozen(self, params):
        with pytest.raises(FrozenInstanceError):
            params.alpha_SM = 0.6

    def test_unknown_parameter_rejected(self, params):
        with pytest.raises(TypeError):
            replace(params, not_a_field=1.0)

    def test_defaults(self):
        p = ProcessParameters(final_powder_mass=1.0, target_diameter=45.0)
        assert (p.impact_category, p.region) == ('GW', 'EU')
