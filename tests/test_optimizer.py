"""
SQP optimizer tests: termination statuses, start validation, and the
powder problem itself
"""
import numpy as np
import pytest

from ti64lca.config import Bounds, SolverOptions
from ti64lca.errors import InfeasibleConstraintError, InputValidationError
from scipy.optimize import OptimizeResult

from ti64lca import optimizer as optimizer_module
from ti64lca.optimizer import ConvergenceStatus, SQPOptimizer, solve, validate_start
from ti64lca.pipeline import build_problem
from ti64lca.process import DecisionVariables


# ══════════════════════════════════════════════════════════════
#  Toy problems on the decision-variable box
# ══════════════════════════════════════════════════════════════

TARGET = np.array([0.07, 6.5, 0.8])
SCALE = np.array([1e4, 1.0, 1e2])


def identity_model(x):
    return x


def bowl(x):
    return float(np.sum(SCALE * (x.as_array() - TARGET) ** 2))


def box_only(x, derived):
    return np.array([-1.0]), np.zeros(3)


def always_violated(x, derived):
    return np.array([1.0]), np.zeros(3)


def broken_identity(x, derived):
    return np.array([-1.0]), np.array([1.0, 0.0, 0.0])


def nan_objective(x):
    return float('nan')


def outside_bowl(x):
    return float(np.sum(SCALE * (x.as_array() - np.array([0.2, 9.0, 0.5])) ** 2))


def phi_cap(x, derived):
    return np.array([x.phi - 0.055]), np.zeros(3)


def within(bounds, x, tol=1e-12):
    x = np.asarray(x, dtype=float)
    return bool(np.all(x >= bounds.lower - tol) and np.all(x <= bounds.upper + tol))


class TestTerminationStatus:
    def test_quadratic_converges(self, bounds, initial):
        result = solve(initial, bounds, identity_model, box_only, bowl)
        assert result.status is ConvergenceStatus.CONVERGED
        assert result.success
        assert result.feasible
        np.testing.assert_allclose(result.x.as_array(), TARGET, atol=1e-4)
        assert result.fun < bowl(initial)

    def test_infeasible_problem_is_reported(self, bounds, initial):
        result = solve(initial, bounds, identity_model, always_violated, bowl)
        assert result.status is not ConvergenceStatus.CONVERGED
        assert not result.feasible
        assert result.max_violation == pytest.approx(1.0)
        with pytest.raises(InfeasibleConstraintError) as info:
            result.require_feasible()
        assert info.value.result is result
        assert info.value.max_violation == pytest.approx(1.0)

    def test_violated_identity_is_numerical_failure(self, bounds, initial):
        result = solve(initial, bounds, identity_model, broken_identity, bowl)
        assert result.status is ConvergenceStatus.NUMERICAL_FAILURE
        assert result.x == initial

    def test_nan_objective_is_numerical_failure(self, bounds, initial):
        result = solve(initial, bounds, identity_model, box_only, nan_objective)
        assert result.status is ConvergenceStatus.NUMERICAL_FAILURE
        assert not result.success

    def test_evaluation_budget(self, bounds, initial):
        options = SolverOptions(max_evaluations=3)
        result = solve(initial, bounds, identity_model, box_only, bowl, options=options)
        assert result.status is ConvergenceStatus.MAX_EVALUATIONS_REACHED
        assert result.n_evaluations == 3
        assert bounds.contains(result.x.as_array())

    def test_iteration_limit(self, params, gw_eu, constraint_set, bounds, initial):
        model, constraints, objective = build_problem(params, gw_eu, constraint_set)
        options = SolverOptions(max_iterations=1)
        result = solve(initial, bounds, model, constraints, objective, options=options)
        assert result.status is ConvergenceStatus.MAX_ITERATIONS_REACHED
        assert result.n_iterations <= 1

    def test_history_stays_in_bounds(self, bounds, initial):
        optimizer = SQPOptimizer()
        result = optimizer.solve(initial, bounds, identity_model, box_only, bowl)
        assert result.history
        assert all(within(bounds, x) for x in result.history)

    def test_iterates_stay_in_bounds_when_minimum_is_outside(self, bounds, initial):
        result = solve(initial, bounds, identity_model, box_only, outside_bowl)
        assert result.history
        assert all(within(bounds, x) for x in result.history)
        np.testing.assert_allclose(result.x.as_array(), [0.10, 7.0, 0.75], atol=1e-6)

    def test_converged_but_infeasible_is_explained(self, bounds, monkeypatch):
        def fake_minimize(fun, x0, **kwargs):
            return OptimizeResult(x=np.array([0.08, 6.0, 0.86]), status=0, nit=4,
                                  message="Optimization terminated successfully")

        monkeypatch.setattr(optimizer_module, "minimize", fake_minimize)
        start = DecisionVariables(0.05, 6.0, 0.86)
        result = solve(start, bounds, identity_model, phi_cap, bowl)
        assert result.status is ConvergenceStatus.INFEASIBLE_START
        assert "reported as converged" in result.message
        assert "started from a feasible point" in result.message
        assert result.max_violation == pytest.approx(0.025)

    def test_optimizer_is_reusable(self, bounds, initial):
        optimizer = SQPOptimizer()
        first = optimizer.solve(initial, bounds, identity_model, box_only, bowl)
        second = optimizer.solve(initial, bounds, identity_model, box_only, bowl)
        assert first.n_evaluations == second.n_evaluations
        assert first.x == second.x


# ══════════════════════════════════════════════════════════════
#  Start validation
# ══════════════════════════════════════════════════════════════

class TestValidateStart:
    def test_accepts_boundary_values(self, bounds):
        x0 = validate_start(DecisionVariables(0.05, 7.0, 0.75), bounds)
        np.testing.assert_array_equal(x0, [0.05, 7.0, 0.75])

    @pytest.mark.parametrize("initial", [
        [0.06, 6.0],
        [0.06, 6.0, 0.86, 1.0],
        [0.06, float('nan'), 0.86],
        [0.04, 6.0, 0.86],
        [0.06, 6.0, 0.95],
        ['a', 6.0, 0.86],
    ])
    def test_rejects_bad_start(self, bounds, initial):
        with pytest.raises(InputValidationError):
            validate_start(initial, bounds)

    def test_rejects_inverted_bounds(self):
        with pytest.raises(InputValidationError):
            validate_start([0.06, 6.0, 0.86], Bounds(p=(7.0, 5.5)))

    def test_solve_raises_before_searching(self, bounds):
        with pytest.raises(InputValidationError):
            solve([0.2, 6.0, 0.86], bounds, identity_model, box_only, bowl)


# ══════════════════════════════════════════════════════════════
#  Powder problem
# ══════════════════════════════════════════════════════════════

class TestPowderProblem:
    def test_default_scenario(self, params, gw_eu, constraint_set, bounds, initial):
        model, constraints, objective = build_problem(params, gw_eu, constraint_set)
        result = solve(initial, bounds, model, constraints, objective)

        assert result.status is ConvergenceStatus.CONVERGED
        assert np.all(result.inequalities <= 1e-6)
        assert np.all(np.abs(result.equalities) <= 1e-6)
        assert np.isfinite(result.fun)
        assert result.fun < objective(model(initial))
        assert bounds.contains(result.x.as_array())
        assert result.history
        assert all(within(bounds, x) for x in result.history)

    def test_start_on_lower_bound(self, params, gw_eu, constraint_set, bounds):
        model, constraints, objective = build_problem(params, gw_eu, constraint_set)
        start = DecisionVariables(0.05, 6.0, 0.86)
        result = solve(start, bounds, model, constraints, objective)

        assert np.isfinite(result.fun)
        assert result.feasible
        assert all(within(bounds, x) for x in result.history)
