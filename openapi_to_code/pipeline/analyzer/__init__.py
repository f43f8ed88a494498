"""
Analyzer module.

Contains reference resolution, tuple variant lifting and tuple
linearization.
"""

from __future__ import annotations

from .reference_resolver import ReferenceResolver, ResolvedRef, check_references, is_const_enum, is_ref_union
from .tuple_fields import (
    FlattenEnd,
    FlattenStart,
    LiteralField,
    NormalField,
    TupleField,
    build_tuple_fields,
    normal_fields,
)
from .variant_lifter import ConflictPolicy, LiftRecord, lift_tuple_variants

__all__ = [
    "ReferenceResolver",
    "ResolvedRef",
    "check_references",
    "is_const_enum",
    "is_ref_union",
    "ConflictPolicy",
    "LiftRecord",
    "lift_tuple_variants",
    "TupleField",
    "NormalField",
    "LiteralField",
    "FlattenStart",
    "FlattenEnd",
    "build_tuple_fields",
    "normal_fields",
]
