from __future__ import annotations

import math
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from lpkit.core.errors import InfeasibleProblem, SolverFault, UnboundedProblem


class Sense(str, Enum):
    MIN = "min"
    MAX = "max"


class Relation(str, Enum):
    LE = "<="
    GE = ">="
    EQ = "=="


class VarType(str, Enum):
    CONTINUOUS = "continuous"
    INTEGER = "integer"


class SolutionStatus(str, Enum):
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    SOLVER_ERROR = "solver_error"


class SensitivityPolicy(str, Enum):
    # Duals/ranges of the continuous relaxation (integrality ignored).
    RELAXATION = "relaxation"
    # Duals/ranges of the LP left after fixing integer variables at the incumbent.
    FIXED_INCUMBENT = "fixed_incumbent"


class StrictBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class FrozenModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


# ----------------------------
# Model
# ----------------------------


class Variable(FrozenModel):
    vtype: VarType = VarType.CONTINUOUS
    lower: float = 0.0
    upper: float = math.inf

    @model_validator(mode="after")
    def _check_bounds(self) -> "Variable":
        if math.isnan(self.lower) or math.isnan(self.upper):
            raise ValueError("Variable bounds must not be NaN.")
        if self.lower > self.upper:
            raise ValueError(
                f"Variable lower bound {self.lower} exceeds upper bound {self.upper}."
            )
        return self


class Constraint(FrozenModel):
    coefficients: Tuple[float, ...]
    relation: Relation
    rhs: float

    @field_validator("coefficients")
    @classmethod
    def _finite_coefficients(cls, v: Tuple[float, ...]) -> Tuple[float, ...]:
        if not all(math.isfinite(a) for a in v):
            raise ValueError("Constraint coefficients must be finite.")
        return v

    @field_validator("rhs")
    @classmethod
    def _finite_rhs(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("Constraint rhs must be finite.")
        return v


class Model(FrozenModel):
    """
    Immutable LP/MILP model:

        min|max  objective . x
        s.t.     constraints[i].coefficients . x  (<=|>=|==)  constraints[i].rhs
                 variables[j].lower <= x[j] <= variables[j].upper
                 x[j] integer where variables[j].vtype == integer

    Variables and constraints are identified by position only; names are
    attached when a Solution is produced.
    """

    variables: Tuple[Variable, ...]
    objective: Tuple[float, ...]
    sense: Sense = Sense.MIN
    constraints: Tuple[Constraint, ...] = ()

    @model_validator(mode="after")
    def _check_dimensions(self) -> "Model":
        n = len(self.variables)
        if n == 0:
            raise ValueError("Model must have at least one variable.")
        if len(self.objective) != n:
            raise ValueError(
                f"Objective has {len(self.objective)} coefficients, expected {n}."
            )
        if not all(math.isfinite(c) for c in self.objective):
            raise ValueError("Objective coefficients must be finite.")
        for i, row in enumerate(self.constraints):
            if len(row.coefficients) != n:
                raise ValueError(
                    f"Constraint {i} has {len(row.coefficients)} coefficients, expected {n}."
                )
        return self

    @property
    def n(self) -> int:
        return len(self.variables)

    @property
    def m(self) -> int:
        return len(self.constraints)

    @property
    def integer_indices(self) -> List[int]:
        return [j for j, v in enumerate(self.variables) if v.vtype == VarType.INTEGER]

    @property
    def is_mip(self) -> bool:
        return any(v.vtype == VarType.INTEGER for v in self.variables)


# ----------------------------
# Solve options / Solution
# ----------------------------


class SolveOptions(StrictBaseModel):
    lp_backend: str = "GLOP"
    mip_backend: str = "SCIP"
    compute_duals: bool = True
    compute_sensitivity: bool = True
    sensitivity_policy: SensitivityPolicy = SensitivityPolicy.RELAXATION
    time_limit_ms: Optional[int] = Field(default=None, gt=0)


class Range(StrictBaseModel):
    lower: float
    upper: float


class Sensitivity(StrictBaseModel):
    policy: SensitivityPolicy
    objective: Dict[str, Range] = Field(default_factory=dict)
    rhs: Dict[str, Range] = Field(default_factory=dict)


class Solution(StrictBaseModel):
    status: SolutionStatus
    values: Optional[Dict[str, float]] = None
    objective_value: Optional[float] = None
    duals: Optional[Dict[str, float]] = None
    reduced_costs: Optional[Dict[str, float]] = None
    sensitivity: Optional[Sensitivity] = None

    raw_status: Optional[int] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _check_fields_match_status(self) -> "Solution":
        if self.status == SolutionStatus.OPTIMAL:
            if self.values is None or self.objective_value is None:
                raise ValueError("Optimal solution requires 'values' and 'objective_value'.")
            return self

        populated = [
            name
            for name in ("values", "objective_value", "duals", "reduced_costs", "sensitivity")
            if getattr(self, name) is not None
        ]
        if populated:
            raise ValueError(
                f"Status '{self.status.value}' forbids fields: {', '.join(populated)}."
            )
        if self.status == SolutionStatus.SOLVER_ERROR and self.raw_status is None:
            raise ValueError("Status 'solver_error' requires 'raw_status'.")
        return self

    @property
    def is_optimal(self) -> bool:
        return self.status == SolutionStatus.OPTIMAL

    def raise_for_status(self) -> "Solution":
        if self.status == SolutionStatus.INFEASIBLE:
            raise InfeasibleProblem(self.message or "Model is infeasible.", self.raw_status)
        if self.status == SolutionStatus.UNBOUNDED:
            raise UnboundedProblem(self.message or "Model is unbounded.", self.raw_status)
        if self.status == SolutionStatus.SOLVER_ERROR:
            raise SolverFault(self.message or "Solver failed.", self.raw_status)
        return self


# ----------------------------
# API payloads
# ----------------------------


class BulkProblem(StrictBaseModel):
    """Matrix-form problem, mirroring lpkit.builders.bulk.from_arrays."""

    objective: List[float]
    matrix: List[List[float]] = Field(default_factory=list)
    relations: List[str] = Field(default_factory=list)
    rhs: List[float] = Field(default_factory=list)
    sense: str = "min"

    integers: List[int] = Field(default_factory=list)
    all_integer: bool = False
    # None entries mean "unbounded on that side".
    lower: Optional[List[Optional[float]]] = None
    upper: Optional[List[Optional[float]]] = None


class SolveRequest(StrictBaseModel):
    problem: BulkProblem
    variable_names: Optional[List[str]] = None
    constraint_names: Optional[List[str]] = None
    options: Optional[SolveOptions] = None
