from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from ortools.linear_solver import pywraplp

from lpkit.domain.schema import Model, Range, Relation, Sense, Sensitivity, SensitivityPolicy
from lpkit.solvers.lp.build import LPBuild

logger = logging.getLogger(__name__)

_AT_LOWER = "lower"
_AT_UPPER = "upper"
_FIXED = "fixed"
_FREE = "free"


@dataclass
class BasisAnalysis:
    duals: Dict[str, float]  # constraint label -> d(objective)/d(rhs)
    reduced_costs: Dict[str, float]  # variable label -> reduced cost
    sensitivity: Sensitivity


def analyze_basis(
    model: Model,
    built: LPBuild,
    policy: SensitivityPolicy,
    variable_labels: List[str],
    constraint_labels: List[str],
    tol: float = 1e-9,
) -> Optional[BasisAnalysis]:
    """
    Dual prices, reduced costs and ranging from the optimal basis of an
    already solved continuous build.

    Works on the bounded form  [A  -I] [x; s] = 0,  lb <= (x, s) <= ub,
    where s holds the row activities, with the objective turned into a
    minimization. Returns None when the backend exposes no usable basis.
    """
    n, m = model.n, model.m
    A = np.array([con.coefficients for con in model.constraints], dtype=float).reshape(m, n)
    M = np.hstack([A, -np.eye(m)])

    sign = 1.0 if model.sense == Sense.MIN else -1.0
    c = np.asarray(model.objective, dtype=float)
    cost = np.concatenate([sign * c, np.zeros(m)])

    x = np.array([v.solution_value() for v in built.variables], dtype=float)
    value = np.concatenate([x, A @ x])
    lb = np.array(
        [v.lb() for v in built.variables] + [ct.lb() for ct in built.constraints], dtype=float
    )
    ub = np.array(
        [v.ub() for v in built.variables] + [ct.ub() for ct in built.constraints], dtype=float
    )

    is_basic = [v.basis_status() == pywraplp.Solver.BASIC for v in built.variables]
    is_basic += [ct.basis_status() == pywraplp.Solver.BASIC for ct in built.constraints]
    basic = [k for k, b in enumerate(is_basic) if b]
    nonbasic = [k for k, b in enumerate(is_basic) if not b]

    if len(basic) != m:
        logger.warning(
            "Backend reported %d basic columns for %d rows; skipping sensitivity.",
            len(basic),
            m,
        )
        return None

    if m > 0:
        try:
            Binv = np.linalg.inv(M[:, basic])
        except np.linalg.LinAlgError:
            logger.warning("Basis matrix is singular; skipping sensitivity.")
            return None
        y = Binv.T @ cost[basic]
    else:
        Binv = np.zeros((0, 0))
        y = np.zeros(0)

    d = cost - M.T @ y
    d[basic] = 0.0

    side = {k: _nonbasic_side(value[k], lb[k], ub[k]) for k in nonbasic}
    position = {k: p for p, k in enumerate(basic)}

    # Objective ranging
    objective_ranges: Dict[str, Range] = {}
    for j, label in enumerate(variable_labels):
        if j in position:
            alpha = Binv[position[j]] @ M[:, nonbasic] if nonbasic else np.zeros(0)
            lo, hi = _cost_ratio_test(
                alpha, [d[k] for k in nonbasic], [side[k] for k in nonbasic], tol
            )
            lo_c, hi_c = cost[j] + lo, cost[j] + hi
        else:
            lo_c, hi_c = _nonbasic_cost_range(cost[j], d[j], side[j])

        if sign < 0:
            lo_c, hi_c = -hi_c, -lo_c
        objective_ranges[label] = Range(lower=_clean(lo_c), upper=_clean(hi_c))

    # RHS ranging
    rhs_ranges: Dict[str, Range] = {}
    for i, (label, con) in enumerate(zip(constraint_labels, model.constraints)):
        k = n + i
        if k in position:
            lo_b, hi_b = _slack_rhs_range(con.relation, con.rhs, value[k])
        else:
            beta = Binv[:, i]
            lo, hi = _rhs_ratio_test(beta, basic, value, lb, ub, tol)
            lo_b, hi_b = con.rhs + lo, con.rhs + hi
        rhs_ranges[label] = Range(lower=_clean(lo_b), upper=_clean(hi_b))

    duals = {label: _clean(sign * y[i]) for i, label in enumerate(constraint_labels)}
    reduced_costs = {label: _clean(sign * d[j]) for j, label in enumerate(variable_labels)}

    return BasisAnalysis(
        duals=duals,
        reduced_costs=reduced_costs,
        sensitivity=Sensitivity(policy=policy, objective=objective_ranges, rhs=rhs_ranges),
    )


def _nonbasic_side(v: float, lb: float, ub: float) -> str:
    if lb == ub:
        return _FIXED
    if math.isinf(lb) and math.isinf(ub):
        return _FREE
    if math.isinf(ub):
        return _AT_LOWER
    if math.isinf(lb):
        return _AT_UPPER
    return _AT_LOWER if abs(v - lb) <= abs(v - ub) else _AT_UPPER


def _nonbasic_cost_range(cost: float, reduced: float, side: str) -> tuple:
    # A nonbasic column stays out of the basis while its reduced cost keeps its sign.
    if side == _AT_LOWER:
        return cost - max(reduced, 0.0), math.inf
    if side == _AT_UPPER:
        return -math.inf, cost - min(reduced, 0.0)
    if side == _FIXED:
        return -math.inf, math.inf
    return cost, cost


def _cost_ratio_test(alpha, reduced: List[float], sides: List[str], tol: float) -> tuple:
    """Allowed shift delta of a basic cost: d_k - delta * alpha_k keeps its sign for all nonbasic k."""
    lo, hi = -math.inf, math.inf
    for a, dk, sd in zip(alpha, reduced, sides):
        if abs(a) <= tol or sd == _FIXED:
            continue
        ratio = dk / a
        if sd == _FREE:
            lo, hi = max(lo, 0.0), min(hi, 0.0)
        elif (sd == _AT_LOWER) == (a > 0):
            hi = min(hi, ratio)
        else:
            lo = max(lo, ratio)
    return min(lo, 0.0), max(hi, 0.0)


def _rhs_ratio_test(beta, basic: List[int], value, lb, ub, tol: float) -> tuple:
    """Allowed shift delta of a binding rhs: basic values move by delta * beta and must stay in bounds."""
    lo, hi = -math.inf, math.inf
    for b, q in zip(beta, basic):
        if abs(b) <= tol:
            continue
        to_upper = (ub[q] - value[q]) / b
        to_lower = (lb[q] - value[q]) / b
        if b > 0:
            hi, lo = min(hi, to_upper), max(lo, to_lower)
        else:
            hi, lo = min(hi, to_lower), max(lo, to_upper)
    return min(lo, 0.0), max(hi, 0.0)


def _slack_rhs_range(relation: Relation, rhs: float, activity: float) -> tuple:
    """
    Range of a row whose slack is basic. Shifting the rhs moves only the
    slack's bound, never the basic values, so the row may move until it
    meets the current activity.

    An equality row only has a basic slack in a degenerate basis (the slack
    sits on its fixed bound). Any shift changes the basis there, so the
    range collapses to [rhs, rhs].
    """
    if relation == Relation.LE:
        return min(activity, rhs), math.inf
    if relation == Relation.GE:
        return -math.inf, max(activity, rhs)
    return rhs, rhs


def _clean(v: float) -> float:
    return 0.0 if abs(v) < 1e-12 else float(v)
