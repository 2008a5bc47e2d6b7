from fastapi import APIRouter, Request

from lpkit.builders.bulk import from_arrays
from lpkit.domain.schema import SolveOptions, SolveRequest, Solution
from lpkit.solvers.lp.solver import solve_model

router = APIRouter(tags=["solve"])


@router.post("/solve", response_model=Solution)
def solve(req: SolveRequest, request: Request) -> Solution:
    p = req.problem
    model = from_arrays(
        p.objective,
        p.matrix,
        p.relations,
        p.rhs,
        sense=p.sense,
        integers=p.integers,
        all_integer=p.all_integer,
        lower=p.lower,
        upper=p.upper,
    )

    options = req.options or default_options(request)
    return solve_model(
        model,
        options,
        variable_names=req.variable_names,
        constraint_names=req.constraint_names,
    )


def default_options(request: Request) -> SolveOptions:
    settings = request.app.state.settings
    return SolveOptions(
        lp_backend=settings.lp_backend,
        mip_backend=settings.mip_backend,
        sensitivity_policy=settings.sensitivity_policy,
    )
