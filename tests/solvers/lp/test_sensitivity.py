import math

import pytest

from lpkit.builders.bulk import from_arrays
from lpkit.domain.schema import Relation, SensitivityPolicy
from lpkit.solvers.lp.build import build_lp
from lpkit.solvers.lp.sensitivity import (
    _cost_ratio_test,
    _nonbasic_cost_range,
    _nonbasic_side,
    _rhs_ratio_test,
    _slack_rhs_range,
    analyze_basis,
)
from tests.model_factory import ModelFactory


def _analyze(model, var_labels, con_labels):
    built = build_lp(model, "GLOP")
    built.solver.Solve()
    return analyze_basis(model, built, SensitivityPolicy.RELAXATION, var_labels, con_labels)


class TestAnalyzeBasis:
    """
    Product mix: max 3x + 5y  s.t.  x <= 4,  2y <= 12,  3x + 2y <= 18.
    Optimum x = 2, y = 6, z = 36; textbook duals (0, 1.5, 1).
    """

    def test_duals(self):
        analysis = _analyze(ModelFactory.product_mix(), ["x", "y"], ["p1", "p2", "p3"])

        assert analysis is not None
        assert analysis.duals == {
            "p1": pytest.approx(0.0, abs=1e-9),
            "p2": pytest.approx(1.5),
            "p3": pytest.approx(1.0),
        }
        assert analysis.reduced_costs == {
            "x": pytest.approx(0.0, abs=1e-9),
            "y": pytest.approx(0.0, abs=1e-9),
        }

    def test_objective_ranges(self):
        analysis = _analyze(ModelFactory.product_mix(), ["x", "y"], ["p1", "p2", "p3"])
        ranges = analysis.sensitivity.objective

        assert ranges["x"].lower == pytest.approx(0.0, abs=1e-9)
        assert ranges["x"].upper == pytest.approx(7.5)
        assert ranges["y"].lower == pytest.approx(2.0)
        assert ranges["y"].upper == math.inf

    def test_rhs_ranges(self):
        analysis = _analyze(ModelFactory.product_mix(), ["x", "y"], ["p1", "p2", "p3"])
        rhs = analysis.sensitivity.rhs

        assert rhs["p1"].lower == pytest.approx(2.0)
        assert rhs["p1"].upper == math.inf
        assert rhs["p2"].lower == pytest.approx(6.0)
        assert rhs["p2"].upper == pytest.approx(18.0)
        assert rhs["p3"].lower == pytest.approx(12.0)
        assert rhs["p3"].upper == pytest.approx(24.0)

    def test_ranges_contain_current_values(self):
        model = ModelFactory.worked_example()
        analysis = _analyze(model, ModelFactory.WORKED_NAMES, ["c0", "c1", "c2", "c3"])

        assert analysis.sensitivity.policy == SensitivityPolicy.RELAXATION
        for label, coef in zip(ModelFactory.WORKED_NAMES, model.objective):
            r = analysis.sensitivity.objective[label]
            assert r.lower - 1e-9 <= coef <= r.upper + 1e-9
        for k, con in enumerate(model.constraints):
            r = analysis.sensitivity.rhs[f"c{k}"]
            assert r.lower - 1e-9 <= con.rhs <= r.upper + 1e-9

    def test_nonbasic_variable_range_uses_reduced_cost(self):
        # min x + 2y  s.t.  x + y >= 1  -> y stays at 0 while its cost >= 1
        model = from_arrays([1, 2], [[1, 1]], [">="], [1])
        analysis = _analyze(model, ["x", "y"], ["cover"])

        assert analysis.reduced_costs["y"] == pytest.approx(1.0)
        assert analysis.sensitivity.objective["y"].lower == pytest.approx(1.0)
        assert analysis.sensitivity.objective["y"].upper == math.inf
        assert analysis.duals["cover"] == pytest.approx(1.0)

    def test_model_without_constraints(self):
        model = from_arrays([1, 1], [], [], [])
        analysis = _analyze(model, ["a", "b"], [])

        assert analysis.duals == {}
        assert analysis.sensitivity.rhs == {}
        assert analysis.sensitivity.objective["a"].lower == pytest.approx(0.0, abs=1e-9)
        assert analysis.sensitivity.objective["a"].upper == math.inf


class TestRangingHelpers:
    @pytest.mark.parametrize(
        "v, lb, ub, expected",
        [
            (1.0, 1.0, 1.0, "fixed"),
            (0.0, -math.inf, math.inf, "free"),
            (0.0, 0.0, math.inf, "lower"),
            (3.0, -math.inf, 3.0, "upper"),
            (9.0, 0.0, 10.0, "upper"),
            (1.0, 0.0, 10.0, "lower"),
        ],
    )
    def test_nonbasic_side(self, v, lb, ub, expected):
        assert _nonbasic_side(v, lb, ub) == expected

    def test_nonbasic_cost_range(self):
        assert _nonbasic_cost_range(2.0, 0.5, "lower") == (1.5, math.inf)
        assert _nonbasic_cost_range(2.0, -0.5, "upper") == (-math.inf, 2.5)
        assert _nonbasic_cost_range(2.0, 0.0, "fixed") == (-math.inf, math.inf)

    def test_cost_ratio_test(self):
        # at lower with alpha > 0 caps the increase; at upper with alpha > 0 caps the decrease
        lo, hi = _cost_ratio_test([2.0, 1.0], [4.0, -3.0], ["lower", "upper"], 1e-9)
        assert (lo, hi) == (-3.0, 2.0)

    def test_cost_ratio_test_ignores_fixed_and_tiny_alpha(self):
        assert _cost_ratio_test([5.0, 1e-12], [1.0, 1.0], ["fixed", "lower"], 1e-9) == (
            -math.inf,
            math.inf,
        )

    def test_rhs_ratio_test(self):
        value = [2.0, 6.0]
        lb = [0.0, 0.0]
        ub = [math.inf, 10.0]
        # basic 0 decreases by delta, basic 1 increases by delta
        lo, hi = _rhs_ratio_test([-1.0, 1.0], [0, 1], value, lb, ub, 1e-9)
        assert (lo, hi) == (-6.0, 2.0)

    def test_slack_rhs_range(self):
        assert _slack_rhs_range(Relation.LE, 10.0, 4.0) == (4.0, math.inf)
        assert _slack_rhs_range(Relation.GE, 1.0, 4.0) == (-math.inf, 4.0)
        assert _slack_rhs_range(Relation.EQ, 3.0, 3.0) == (3.0, 3.0)
