from __future__ import annotations

from typing import Optional


class ModelError(ValueError):
    """Malformed model input, rejected before any backend is called."""


class ShapeMismatch(ModelError):
    """Bulk input vectors/matrix disagree in shape (or names are malformed)."""


class DimensionMismatch(ModelError):
    """A row or vector does not match the declared number of variables."""


class BoundsError(ModelError):
    """Variable bounds are contradictory (lower > upper) or NaN."""


class BuilderStateError(ModelError):
    """Incremental builder used out of order."""


class SolverUnavailable(RuntimeError):
    """The requested OR-Tools backend could not be created."""


class SolveError(RuntimeError):
    """Non-optimal solve outcome, raised only on request via Solution.raise_for_status()."""

    def __init__(self, message: str, raw_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.raw_status = raw_status


class InfeasibleProblem(SolveError):
    pass


class UnboundedProblem(SolveError):
    pass


class SolverFault(SolveError):
    """Backend returned an error or unrecognized status code."""
