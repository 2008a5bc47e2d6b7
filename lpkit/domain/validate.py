from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

from lpkit.core.errors import BoundsError, DimensionMismatch, ModelError, ShapeMismatch


def as_vector(values: Iterable[float], what: str) -> List[float]:
    """Copy a sequence (list, tuple, numpy array, ...) into a list of floats."""
    try:
        return [float(v) for v in values]
    except (TypeError, ValueError) as exc:
        raise ModelError(f"{what} must contain only numbers: {exc}") from exc


def require_finite(values: Sequence[float], what: str) -> None:
    for k, v in enumerate(values):
        if not math.isfinite(v):
            raise ModelError(f"{what}[{k}] must be finite, got {v}.")


def validate_row(row: Sequence[float], n: int, index: int) -> None:
    if len(row) != n:
        raise DimensionMismatch(
            f"Constraint {index} has {len(row)} coefficients, expected {n}."
        )


def validate_index(j: int, n: int) -> None:
    if not 0 <= j < n:
        raise DimensionMismatch(f"Variable index {j} out of range for {n} variables.")


def validate_bounds(lower: float, upper: float, j: int) -> None:
    if math.isnan(lower) or math.isnan(upper):
        raise BoundsError(f"Variable {j} has a NaN bound.")
    if lower > upper:
        raise BoundsError(
            f"Variable {j} lower bound {lower} exceeds upper bound {upper}."
        )


def validate_bulk_shapes(
    objective: Sequence[float],
    matrix: Sequence[Sequence[float]],
    relations: Sequence[object],
    rhs: Sequence[float],
) -> None:
    n = len(objective)
    if n == 0:
        raise ShapeMismatch("Objective must have at least one coefficient.")

    m = len(matrix)
    if len(relations) != m:
        raise ShapeMismatch(
            f"Matrix has {m} rows but {len(relations)} relations were given."
        )
    if len(rhs) != m:
        raise ShapeMismatch(f"Matrix has {m} rows but rhs has length {len(rhs)}.")

    for i, row in enumerate(matrix):
        if len(row) != n:
            raise ShapeMismatch(
                f"Matrix row {i} has length {len(row)}, expected {n} (objective length)."
            )


def resolve_names(
    names: Optional[Sequence[str]], count: int, prefix: str, what: str
) -> List[str]:
    """
    Human-readable labels for variables/constraints.
    Defaults to prefix + position ("x0", "x1", ... / "c0", "c1", ...).
    """
    if names is None:
        return [f"{prefix}{k}" for k in range(count)]

    labels = [str(name) for name in names]
    if len(labels) != count:
        raise DimensionMismatch(f"Expected {count} {what} names, got {len(labels)}.")
    if len(set(labels)) != len(labels):
        raise ShapeMismatch(f"Duplicate {what} names found.")
    return labels
