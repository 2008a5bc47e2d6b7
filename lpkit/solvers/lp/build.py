from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ortools.linear_solver import pywraplp

from lpkit.core.errors import SolverUnavailable
from lpkit.domain.schema import Model, Relation, Sense, VarType


@dataclass
class LPBuild:
    solver: pywraplp.Solver
    variables: List[pywraplp.Variable]  # position j -> x[j]
    constraints: List[pywraplp.Constraint]  # position i -> row i
    relaxed: bool  # integrality dropped for this build


def row_bounds(relation: Relation, rhs: float) -> Tuple[float, float]:
    """Row activity bounds (lb, ub) for `a.x <relation> rhs`."""
    if relation == Relation.LE:
        return -math.inf, rhs
    if relation == Relation.GE:
        return rhs, math.inf
    return rhs, rhs


def backend_available(backend: str) -> bool:
    """True when OR-Tools can create `backend` in this process."""
    return pywraplp.Solver.CreateSolver(backend) is not None


def build_lp(
    model: Model,
    backend: str,
    relax: bool = False,
    fixed: Optional[Dict[int, float]] = None,
    time_limit_ms: Optional[int] = None,
) -> LPBuild:
    """
    Translate a Model into a fresh OR-Tools solver instance.

    relax: create every variable continuous.
    fixed: position -> value; those variables get lb = ub = value.
    """
    s = pywraplp.Solver.CreateSolver(backend)
    if s is None:
        raise SolverUnavailable(f"Failed to create OR-Tools {backend} solver.")

    if time_limit_ms is not None:
        s.SetTimeLimit(int(time_limit_ms))

    inf = s.infinity()
    fixed = fixed or {}

    def _clip(v: float) -> float:
        if v == math.inf:
            return inf
        if v == -math.inf:
            return -inf
        return v

    # Variables: x[j] in [lower, upper], integer unless relaxed
    xs: List[pywraplp.Variable] = []
    for j, var in enumerate(model.variables):
        lb, ub = _clip(var.lower), _clip(var.upper)
        if j in fixed:
            lb = ub = float(fixed[j])
        if var.vtype == VarType.INTEGER and not relax:
            xs.append(s.IntVar(lb, ub, f"x[{j}]"))
        else:
            xs.append(s.NumVar(lb, ub, f"x[{j}]"))

    # Rows: lb <= a.x <= ub
    rows: List[pywraplp.Constraint] = []
    for i, con in enumerate(model.constraints):
        lb, ub = row_bounds(con.relation, con.rhs)
        ct = s.Constraint(_clip(lb), _clip(ub), f"c[{i}]")
        for j, a in enumerate(con.coefficients):
            if a != 0.0:
                ct.SetCoefficient(xs[j], a)
        rows.append(ct)

    # Objective
    objective = s.Objective()
    for j, c in enumerate(model.objective):
        if c != 0.0:
            objective.SetCoefficient(xs[j], c)
    if model.sense == Sense.MAX:
        objective.SetMaximization()
    else:
        objective.SetMinimization()

    return LPBuild(
        solver=s,
        variables=xs,
        constraints=rows,
        relaxed=relax or not model.is_mip,
    )
