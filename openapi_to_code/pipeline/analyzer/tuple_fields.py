"""
Tuple linearization.

Turns the prefix items of a tuple schema into an ordered field list that
renderers walk twice: once for the members and constructor parameters of
the generated type (``NormalField`` only), and once for the serializer,
which must reproduce every position of the wire array.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..schema_ast.nodes import ArrayTupleNode, ConstNode, SchemaNode


@dataclass(frozen=True)
class NormalField:
    """A value slot that becomes a member of the generated type."""

    name: str
    schema: SchemaNode


@dataclass(frozen=True)
class LiteralField:
    """A fixed string emitted verbatim at its position when serializing."""

    value: str


@dataclass(frozen=True)
class FlattenStart:
    """Opens a nested array in the serialized form."""


@dataclass(frozen=True)
class FlattenEnd:
    """Closes the nested array opened by the matching FlattenStart."""


TupleField = Union[NormalField, LiteralField, FlattenStart, FlattenEnd]


def build_tuple_fields(prefix_items: tuple[SchemaNode, ...] | list[SchemaNode]) -> list[TupleField]:
    """
    Linearize tuple prefix items.

    Unnamed value slots are called ``f<position>``. Positions count every
    item, consts and flattened tuples included, so a field keeps its name
    when a sibling is flattened.

    Args:
        prefix_items: The tuple's prefix items

    Returns:
        Ordered list of tuple fields
    """
    fields: list[TupleField] = []
    _build_tuple_fields(fields, [0], prefix_items)
    return fields


def _build_tuple_fields(out: list[TupleField], position: list[int], prefix_items) -> None:
    for item in prefix_items:
        if isinstance(item, ConstNode):
            out.append(LiteralField(item.value))
        elif isinstance(item, ArrayTupleNode) and item.flatten:
            out.append(FlattenStart())
            _build_tuple_fields(out, position, item.prefix_items)
            out.append(FlattenEnd())
        else:
            name = item.title if item.title is not None else f"f{position[0]}"
            out.append(NormalField(name=name, schema=item))
        position[0] += 1


def normal_fields(fields: list[TupleField]) -> list[NormalField]:
    """The fields that become members and constructor parameters, in order."""
    return [f for f in fields if isinstance(f, NormalField)]
