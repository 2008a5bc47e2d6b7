from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple, Union

from lpkit.core.errors import BuilderStateError, DimensionMismatch
from lpkit.domain.normalize import normalize_relation, normalize_sense, normalize_vtype
from lpkit.domain.schema import Constraint, Model, Relation, Sense, Variable, VarType
from lpkit.domain.validate import (
    as_vector,
    require_finite,
    validate_bounds,
    validate_index,
    validate_row,
)


class IncrementalBuilder:
    """
    Row-at-a-time Model construction.

    `rows` is only a capacity hint: more constraints than declared may be
    appended. `columns` fixes the number of variables. Not thread-safe; a
    single writer is assumed.

        b = IncrementalBuilder(rows=2, columns=2)
        b.set_objective([3, 5], sense="max")
        b.add_constraint([1, 0], "<=", 4)
        b.add_constraint([3, 2], "<=", 18)
        model = b.build()
    """

    def __init__(self, rows: int, columns: int) -> None:
        if rows < 0:
            raise DimensionMismatch(f"Row hint must be >= 0, got {rows}.")
        if columns < 1:
            raise DimensionMismatch(f"Model needs at least one column, got {columns}.")

        self.rows_hint = rows
        self.n = columns

        self._objective: Optional[Tuple[float, ...]] = None
        self._sense: Sense = Sense.MIN
        self._constraints: List[Constraint] = []
        self._vtypes: List[VarType] = [VarType.CONTINUOUS] * columns
        self._lower: List[float] = [0.0] * columns
        self._upper: List[float] = [math.inf] * columns

    @property
    def m(self) -> int:
        return len(self._constraints)

    def set_objective(
        self, coefficients: Iterable[float], sense: Union[str, Sense] = Sense.MIN
    ) -> None:
        if self._objective is not None:
            raise BuilderStateError("Objective has already been set.")

        obj = as_vector(coefficients, "objective")
        if len(obj) != self.n:
            raise DimensionMismatch(
                f"Objective has {len(obj)} coefficients, expected {self.n}."
            )
        require_finite(obj, "objective")
        model_sense = normalize_sense(sense)

        self._objective = tuple(obj)
        self._sense = model_sense

    def add_constraint(
        self,
        coefficients: Iterable[float],
        relation: Union[str, Relation],
        rhs: float,
    ) -> int:
        """Appends one row and returns its index (first row added is 0)."""
        row = as_vector(coefficients, "coefficients")
        validate_row(row, self.n, self.m)
        require_finite(row, "coefficients")
        rel = normalize_relation(relation)
        b = float(rhs)
        require_finite([b], "rhs")

        self._constraints.append(Constraint(coefficients=tuple(row), relation=rel, rhs=b))
        return len(self._constraints) - 1

    def set_type(self, index: int, vtype: Union[str, VarType]) -> None:
        validate_index(index, self.n)
        self._vtypes[index] = normalize_vtype(vtype)

    def set_integer(self, *indices: int) -> None:
        for j in indices:
            self.set_type(j, VarType.INTEGER)

    def set_bounds(
        self,
        index: int,
        lower: Optional[float] = 0.0,
        upper: Optional[float] = math.inf,
    ) -> None:
        """Overwrites both bounds of one variable; None means unbounded on that side."""
        validate_index(index, self.n)
        lo = -math.inf if lower is None else float(lower)
        up = math.inf if upper is None else float(upper)
        validate_bounds(lo, up, index)
        self._lower[index] = lo
        self._upper[index] = up

    def build(self) -> Model:
        if self._objective is None:
            raise BuilderStateError("set_objective() must be called before build().")

        variables = tuple(
            Variable(vtype=t, lower=lo, upper=up)
            for t, lo, up in zip(self._vtypes, self._lower, self._upper)
        )
        return Model(
            variables=variables,
            objective=self._objective,
            sense=self._sense,
            constraints=tuple(self._constraints),
        )
