from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ortools.linear_solver import pywraplp

from lpkit.domain.schema import (
    Model,
    SensitivityPolicy,
    Solution,
    SolutionStatus,
    SolveOptions,
    VarType,
)
from lpkit.domain.validate import resolve_names
from lpkit.solvers.lp.build import build_lp
from lpkit.solvers.lp.extract import extract_solution
from lpkit.solvers.lp.sensitivity import BasisAnalysis, analyze_basis

logger = logging.getLogger(__name__)


def solve_model(
    model: Model,
    options: Optional[SolveOptions] = None,
    variable_names: Optional[Sequence[str]] = None,
    constraint_names: Optional[Sequence[str]] = None,
) -> Solution:
    """
    Solve `model` on a fresh backend instance and return a normalized Solution.

    Infeasible, unbounded and failed solves come back as Solution.status
    values, never as exceptions. Structural problems with the names raise
    ModelError before the backend is touched.
    """
    opts = options or SolveOptions()
    var_labels = resolve_names(variable_names, model.n, "x", "variable")
    con_labels = resolve_names(constraint_names, model.m, "c", "constraint")

    backend = opts.mip_backend if model.is_mip else opts.lp_backend
    logger.info("Solving model n=%d m=%d with %s.", model.n, model.m, backend)

    built = build_lp(model, backend, time_limit_ms=opts.time_limit_ms)
    solution = extract_solution(model, built, var_labels)

    logger.info("Solve finished with status '%s'.", solution.status.value)

    if solution.status != SolutionStatus.OPTIMAL:
        return solution
    if not (opts.compute_duals or opts.compute_sensitivity):
        return solution

    if model.is_mip:
        analysis = _analyze_integer_model(model, solution, opts, var_labels, con_labels)
    else:
        analysis = analyze_basis(model, built, opts.sensitivity_policy, var_labels, con_labels)

    if analysis is None:
        return solution

    return solution.model_copy(
        update={
            "duals": analysis.duals if opts.compute_duals else None,
            "reduced_costs": analysis.reduced_costs if opts.compute_duals else None,
            "sensitivity": analysis.sensitivity if opts.compute_sensitivity else None,
        }
    )


def _analyze_integer_model(
    model: Model,
    solution: Solution,
    opts: SolveOptions,
    var_labels: List[str],
    con_labels: List[str],
) -> Optional[BasisAnalysis]:
    """
    Integer duals and ranges are only defined against an LP:
    - relaxation: the continuous relaxation of the whole model;
    - fixed_incumbent: the LP left after fixing integer variables at the
      incumbent values.
    """
    assert solution.values is not None

    fixed = None
    if opts.sensitivity_policy == SensitivityPolicy.FIXED_INCUMBENT:
        fixed = {
            j: solution.values[var_labels[j]]
            for j, var in enumerate(model.variables)
            if var.vtype == VarType.INTEGER
        }

    lp = build_lp(model, opts.lp_backend, relax=True, fixed=fixed, time_limit_ms=opts.time_limit_ms)
    status_code = lp.solver.Solve()
    if status_code != pywraplp.Solver.OPTIMAL:
        logger.warning(
            "Sensitivity LP (%s) ended with status %s; duals and ranges omitted.",
            opts.sensitivity_policy.value,
            status_code,
        )
        return None

    return analyze_basis(model, lp, opts.sensitivity_policy, var_labels, con_labels)
