from __future__ import annotations

from typing import Union

from lpkit.core.errors import ModelError
from lpkit.domain.schema import Relation, Sense, VarType

_RELATIONS = {
    "<=": Relation.LE,
    "<": Relation.LE,
    "≤": Relation.LE,
    "le": Relation.LE,
    ">=": Relation.GE,
    ">": Relation.GE,
    "≥": Relation.GE,
    "ge": Relation.GE,
    "==": Relation.EQ,
    "=": Relation.EQ,
    "eq": Relation.EQ,
}

_SENSES = {
    "min": Sense.MIN,
    "minimize": Sense.MIN,
    "minimise": Sense.MIN,
    "max": Sense.MAX,
    "maximize": Sense.MAX,
    "maximise": Sense.MAX,
}

_VTYPES = {
    "continuous": VarType.CONTINUOUS,
    "cont": VarType.CONTINUOUS,
    "real": VarType.CONTINUOUS,
    "integer": VarType.INTEGER,
    "int": VarType.INTEGER,
}


def normalize_relation(op: Union[str, Relation]) -> Relation:
    """
    Accepts the usual spellings of a row relation ('<', '≤', '=', 'ge', ...).
    Strict and non-strict inequalities are treated alike, as LP solvers do.
    """
    if isinstance(op, Relation):
        return op
    key = str(op).strip().lower()
    if key not in _RELATIONS:
        raise ModelError(f"Unsupported constraint relation: {op!r}")
    return _RELATIONS[key]


def normalize_sense(sense: Union[str, Sense]) -> Sense:
    if isinstance(sense, Sense):
        return sense
    key = str(sense).strip().lower()
    if key not in _SENSES:
        raise ModelError(f"Unsupported optimization sense: {sense!r}")
    return _SENSES[key]


def normalize_vtype(vtype: Union[str, VarType]) -> VarType:
    if isinstance(vtype, VarType):
        return vtype
    key = str(vtype).strip().lower()
    if key not in _VTYPES:
        raise ModelError(f"Unsupported variable type: {vtype!r}")
    return _VTYPES[key]
