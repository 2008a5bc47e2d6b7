from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ortools.linear_solver import pywraplp

from lpkit.domain.schema import Model, Solution, SolutionStatus, VarType
from lpkit.solvers.lp.build import LPBuild

logger = logging.getLogger(__name__)

# OR-Tools returns an int status code; this alias makes typing intent explicit.
_LpStatus = int

# FEASIBLE means "not proven optimal" (e.g. a MIP stopped at a time limit); it
# is reported as solver_error, never as optimal.
_STATUS_MAP: Dict[_LpStatus, SolutionStatus] = {
    pywraplp.Solver.OPTIMAL: SolutionStatus.OPTIMAL,
    pywraplp.Solver.INFEASIBLE: SolutionStatus.INFEASIBLE,
    pywraplp.Solver.UNBOUNDED: SolutionStatus.UNBOUNDED,
}


def map_status(status_code: int) -> SolutionStatus:
    return _STATUS_MAP.get(status_code, SolutionStatus.SOLVER_ERROR)


def extract_solution(
    model: Model,
    built: LPBuild,
    variable_labels: List[str],
    eps: float = 1e-6,
) -> Solution:
    """
    Solve `built` and normalize the outcome into a Solution carrying primal
    values and the objective. Duals and sensitivity are attached separately.
    """
    s = built.solver
    status_code = solve_built(built)
    result_status = map_status(status_code)

    logger.debug("Backend returned status code %s (%s).", status_code, result_status.value)

    if result_status != SolutionStatus.OPTIMAL:
        return empty_result(result_status, status_code)

    values: Dict[str, float] = {}
    for j, (label, var) in enumerate(zip(variable_labels, built.variables)):
        v = var.solution_value()
        if not built.relaxed and model.variables[j].vtype == VarType.INTEGER:
            v = _snap_integer(v, eps)
        values[label] = _clean(v)

    return Solution(
        status=SolutionStatus.OPTIMAL,
        values=values,
        objective_value=_clean(s.Objective().Value()),
        raw_status=status_code,
    )


def solve_built(built: LPBuild) -> int:
    """
    Run the backend. GLOP presolve reports "infeasible or unbounded" as
    INFEASIBLE, so a continuous build that comes back INFEASIBLE is solved
    again without presolve to tell the two apart.
    """
    s = built.solver
    status_code = s.Solve()
    if status_code == pywraplp.Solver.INFEASIBLE and built.relaxed:
        params = pywraplp.MPSolverParameters()
        params.SetIntegerParam(params.PRESOLVE, params.PRESOLVE_OFF)
        status_code = s.Solve(params)
        logger.debug("Re-solved without presolve: status code %s.", status_code)
    return status_code


def status_message(status_code: int) -> str:
    if status_code == pywraplp.Solver.INFEASIBLE:
        return "Model is infeasible."
    if status_code == pywraplp.Solver.UNBOUNDED:
        return "Model is unbounded."
    if status_code == pywraplp.Solver.FEASIBLE:
        return "Solver found a feasible point but did not prove optimality."
    if status_code == pywraplp.Solver.MODEL_INVALID:
        return "Model is invalid (NaN/Inf coefficients or malformed constraints)."
    if status_code == pywraplp.Solver.NOT_SOLVED:
        return "Model not solved (solver did not run or stopped early)."
    if status_code == pywraplp.Solver.ABNORMAL:
        return "Solver ended abnormally."
    return f"Unknown solver status: {status_code}"


def empty_result(status: SolutionStatus, status_code: Optional[int]) -> Solution:
    return Solution(
        status=status,
        raw_status=status_code,
        message=status_message(status_code) if status_code is not None else None,
    )


def _snap_integer(v: float, eps: float) -> float:
    r = round(v)
    return float(r) if abs(v - r) <= eps else v


def _clean(v: float) -> float:
    # Backends report -0.0 and 1e-15 noise for zero.
    return 0.0 if abs(v) < 1e-12 else float(v)
