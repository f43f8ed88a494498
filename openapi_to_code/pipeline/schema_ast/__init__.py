"""
Schema AST module.

Contains the schema algebra node definitions and the strict parser.
"""

from __future__ import annotations

from .nodes import (
    AnyNode,
    AnyOfNode,
    ArrayListNode,
    ArrayTupleNode,
    BooleanNode,
    ConstNode,
    NumberNode,
    ObjectNode,
    RefNode,
    SchemaNode,
    SchemaSpec,
    StringNode,
)
from .parser import SCHEMA_REF_PREFIX, SchemaParser

__all__ = [
    "SchemaNode",
    "AnyOfNode",
    "ObjectNode",
    "ArrayListNode",
    "ArrayTupleNode",
    "StringNode",
    "NumberNode",
    "BooleanNode",
    "ConstNode",
    "RefNode",
    "AnyNode",
    "SchemaSpec",
    "SchemaParser",
    "SCHEMA_REF_PREFIX",
]
