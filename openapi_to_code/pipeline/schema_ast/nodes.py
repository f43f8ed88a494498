"""
Schema algebra node definitions.

A closed set of ten node shapes. Anything in the source document that does
not fit one of them is rejected by the parser, so downstream phases can
match on the node class alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SchemaNode:
    """Base class for all schema nodes."""

    # Explicit name hint, used when a name cannot be derived structurally
    title: str | None = None

    description: str | None = None


@dataclass(frozen=True)
class AnyOfNode(SchemaNode):
    """A sum type over its alternatives."""

    variants: tuple[SchemaNode, ...] = ()


@dataclass(frozen=True)
class ObjectNode(SchemaNode):
    """A record. Only single-property wrappers are renderable."""

    properties: dict[str, SchemaNode] = field(default_factory=dict)
    required: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArrayListNode(SchemaNode):
    """A homogeneous variable-length sequence."""

    items: SchemaNode | None = None


@dataclass(frozen=True)
class ArrayTupleNode(SchemaNode):
    """A fixed-length heterogeneous sequence."""

    prefix_items: tuple[SchemaNode, ...] = ()
    additional_items: bool = True

    # Vendor extensions
    variant_name: str | None = None
    drop_on_conflict: bool = False
    flatten: bool = False


@dataclass(frozen=True)
class StringNode(SchemaNode):
    pass


@dataclass(frozen=True)
class NumberNode(SchemaNode):
    """A number. ``width`` is the bit width hint (32 or 64, None means 64)."""

    width: int | None = None


@dataclass(frozen=True)
class BooleanNode(SchemaNode):
    pass


@dataclass(frozen=True)
class ConstNode(SchemaNode):
    """A single literal string. Only valid inside an anyOf or a tuple."""

    value: str = ""


@dataclass(frozen=True)
class RefNode(SchemaNode):
    """A reference to another top-level schema, by bare name."""

    target: str = ""


@dataclass(frozen=True)
class AnyNode(SchemaNode):
    """An untyped value."""


@dataclass
class SchemaSpec:
    """The parsed document.

    ``managed_schemas`` holds every schema the generator owns, keyed by name.
    ``unmanaged_schemas`` holds the names of schemas outside the prefix
    whitelist that are still referenced, directly or transitively, from a
    managed schema.
    """

    managed_schemas: dict[str, SchemaNode] = field(default_factory=dict)
    unmanaged_schemas: frozenset[str] = frozenset()

    def sorted_names(self) -> list[str]:
        return sorted(self.managed_schemas)


def iter_ref_targets(node: SchemaNode):
    """Yield the target name of every Ref nested anywhere inside ``node``."""
    if isinstance(node, RefNode):
        yield node.target
    elif isinstance(node, AnyOfNode):
        for variant in node.variants:
            yield from iter_ref_targets(variant)
    elif isinstance(node, ObjectNode):
        for prop in node.properties.values():
            yield from iter_ref_targets(prop)
    elif isinstance(node, ArrayListNode):
        if node.items is not None:
            yield from iter_ref_targets(node.items)
    elif isinstance(node, ArrayTupleNode):
        for item in node.prefix_items:
            yield from iter_ref_targets(item)
