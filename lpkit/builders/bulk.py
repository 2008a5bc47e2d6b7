from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Union

from lpkit.core.errors import ShapeMismatch
from lpkit.domain.normalize import normalize_relation, normalize_sense
from lpkit.domain.schema import Constraint, Model, Relation, Sense, Variable, VarType
from lpkit.domain.validate import (
    as_vector,
    require_finite,
    validate_bounds,
    validate_bulk_shapes,
)

BoundVector = Optional[Sequence[Optional[float]]]


def from_arrays(
    objective: Iterable[float],
    matrix: Iterable[Iterable[float]],
    relations: Iterable[Union[str, Relation]],
    rhs: Iterable[float],
    sense: Union[str, Sense] = Sense.MIN,
    integers: Iterable[int] = (),
    all_integer: bool = False,
    lower: BoundVector = None,
    upper: BoundVector = None,
) -> Model:
    """
    One-shot construction of a Model from matrix form.

    Every input is checked before the Model is created, so a failure leaves
    nothing behind. Raises ShapeMismatch when the objective, matrix rows,
    relations, rhs or bound vectors disagree in length.

    `lower`/`upper` default to 0 and +inf; a None entry means unbounded on
    that side. `integers` lists the (0-based) integer variables; `all_integer`
    marks every variable integer.
    """
    obj = as_vector(objective, "objective")
    rows = [as_vector(row, f"matrix[{i}]") for i, row in enumerate(matrix)]
    rel_list = list(relations)
    rhs_vec = as_vector(rhs, "rhs")

    validate_bulk_shapes(obj, rows, rel_list, rhs_vec)
    n = len(obj)

    require_finite(obj, "objective")
    for i, row in enumerate(rows):
        require_finite(row, f"matrix[{i}]")
    require_finite(rhs_vec, "rhs")

    rels = [normalize_relation(r) for r in rel_list]
    model_sense = normalize_sense(sense)

    lows = _bound_vector(lower, n, "lower", default=0.0, missing=-math.inf)
    ups = _bound_vector(upper, n, "upper", default=math.inf, missing=math.inf)

    int_set = set()
    for j in integers:
        j = int(j)
        if not 0 <= j < n:
            raise ShapeMismatch(f"Integer index {j} out of range for {n} variables.")
        int_set.add(j)

    for j in range(n):
        validate_bounds(lows[j], ups[j], j)

    variables = tuple(
        Variable(
            vtype=VarType.INTEGER if (all_integer or j in int_set) else VarType.CONTINUOUS,
            lower=lows[j],
            upper=ups[j],
        )
        for j in range(n)
    )
    constraints = tuple(
        Constraint(coefficients=tuple(row), relation=rel, rhs=b)
        for row, rel, b in zip(rows, rels, rhs_vec)
    )
    return Model(
        variables=variables,
        objective=tuple(obj),
        sense=model_sense,
        constraints=constraints,
    )


def _bound_vector(
    values: BoundVector, n: int, what: str, default: float, missing: float
) -> List[float]:
    if values is None:
        return [default] * n
    out = [missing if v is None else float(v) for v in values]
    if len(out) != n:
        raise ShapeMismatch(f"'{what}' has length {len(out)}, expected {n}.")
    return out
