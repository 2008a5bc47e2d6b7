import math

import pytest

from lpkit.builders.incremental import IncrementalBuilder
from lpkit.core.errors import BoundsError, BuilderStateError, DimensionMismatch
from lpkit.domain.schema import Relation, Sense, VarType


def _builder() -> IncrementalBuilder:
    b = IncrementalBuilder(rows=2, columns=2)
    b.set_objective([3, 5], sense="max")
    return b


class TestIncrementalBuilder:
    def test_constraint_indices_follow_insertion_order(self):
        b = _builder()
        assert b.add_constraint([1, 0], "<=", 4) == 0
        assert b.add_constraint([0, 2], "<=", 12) == 1
        assert b.add_constraint([3, 2], "<=", 18) == 2

        model = b.build()
        assert model.sense == Sense.MAX
        assert [c.rhs for c in model.constraints] == [4.0, 12.0, 18.0]

    def test_row_hint_is_not_a_limit(self):
        b = IncrementalBuilder(rows=0, columns=1)
        b.set_objective([1])
        for k in range(5):
            b.add_constraint([1], ">=", k)
        assert b.m == 5
        assert b.build().m == 5

    def test_add_constraint_wrong_length(self):
        b = _builder()
        b.add_constraint([1, 1], "<=", 1)
        with pytest.raises(DimensionMismatch, match="Constraint 1 has 3 coefficients, expected 2"):
            b.add_constraint([1, 1, 1], "<=", 1)
        # failed call leaves the builder unchanged
        assert b.m == 1

    def test_objective_wrong_length(self):
        b = IncrementalBuilder(rows=0, columns=3)
        with pytest.raises(DimensionMismatch):
            b.set_objective([1, 2])

    def test_objective_set_twice(self):
        b = _builder()
        with pytest.raises(BuilderStateError, match="already been set"):
            b.set_objective([1, 1])

    def test_build_without_objective(self):
        b = IncrementalBuilder(rows=1, columns=2)
        b.add_constraint([1, 1], "<=", 1)
        with pytest.raises(BuilderStateError, match="set_objective"):
            b.build()

    @pytest.mark.parametrize("rows, columns", [(-1, 2), (0, 0)])
    def test_invalid_dimensions(self, rows, columns):
        with pytest.raises(DimensionMismatch):
            IncrementalBuilder(rows=rows, columns=columns)

    def test_set_type_is_idempotent_overwrite(self):
        b = _builder()
        b.set_type(0, "integer")
        b.set_type(0, "integer")
        assert b.build().variables[0].vtype == VarType.INTEGER

        b.set_type(0, VarType.CONTINUOUS)
        assert b.build().variables[0].vtype == VarType.CONTINUOUS

    def test_set_bounds_overwrites(self):
        b = _builder()
        b.set_bounds(1, 1, 10)
        b.set_bounds(1, 2, 3)
        v = b.build().variables[1]
        assert (v.lower, v.upper) == (2.0, 3.0)

        b.set_bounds(1, None, None)
        v = b.build().variables[1]
        assert (v.lower, v.upper) == (-math.inf, math.inf)

    def test_set_bounds_rejects_contradiction(self):
        b = _builder()
        with pytest.raises(BoundsError):
            b.set_bounds(0, 5, 1)

    def test_index_out_of_range(self):
        b = _builder()
        with pytest.raises(DimensionMismatch):
            b.set_type(2, "integer")
        with pytest.raises(DimensionMismatch):
            b.set_bounds(-1, 0, 1)

    def test_built_models_are_independent(self):
        b = _builder()
        b.add_constraint([1, 0], "<=", 4)
        first = b.build()
        b.add_constraint([0, 1], "=", 2)
        second = b.build()

        assert first.m == 1
        assert second.m == 2
        assert second.constraints[1].relation == Relation.EQ
