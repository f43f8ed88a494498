"""
Reference resolver for Ref nodes.

Resolves Ref targets against the schema set handed to a renderer: managed
schemas (including lifted ones) and unmanaged names.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import SchemaReferenceError
from ..schema_ast.nodes import AnyOfNode, ConstNode, RefNode, SchemaNode, SchemaSpec, iter_ref_targets


@dataclass
class ResolvedRef:
    """A resolved Ref."""

    target_name: str = ""
    target_node: SchemaNode | None = None  # None for unmanaged targets
    is_unmanaged: bool = False


class ReferenceResolver:
    """Resolves Ref nodes to their definitions."""

    def __init__(self, spec: SchemaSpec):
        self.spec = spec

    def resolve(self, ref_node: RefNode) -> ResolvedRef:
        """
        Resolve a Ref node to its target.

        Raises:
            SchemaReferenceError: If the target is neither managed nor unmanaged
        """
        target = ref_node.target
        if target in self.spec.managed_schemas:
            return ResolvedRef(target_name=target, target_node=self.spec.managed_schemas[target])
        if target in self.spec.unmanaged_schemas:
            return ResolvedRef(target_name=target, is_unmanaged=True)
        raise SchemaReferenceError(f"unresolved reference to schema {target!r}")

    def union_members(self, variants: tuple[SchemaNode, ...]) -> list[str]:
        """
        Flatten an all-Ref anyOf into the names of its concrete members.

        Referenced schemas that are themselves all-Ref anyOfs are expanded in
        place, recursively. Order follows first appearance; duplicates are
        dropped.
        """
        members: list[str] = []
        self._collect_union_members(variants, members, set())
        return members

    def _collect_union_members(self, variants, members: list[str], visiting: set[str]) -> None:
        for variant in variants:
            resolved = self.resolve(variant)
            node = resolved.target_node
            if is_ref_union(node):
                if resolved.target_name in visiting:
                    raise SchemaReferenceError(f"cyclic union through schema {resolved.target_name!r}")
                visiting.add(resolved.target_name)
                self._collect_union_members(node.variants, members, visiting)
                visiting.discard(resolved.target_name)
            elif resolved.target_name not in members:
                members.append(resolved.target_name)


def is_ref_union(node: SchemaNode | None) -> bool:
    """True for an anyOf whose alternatives are all Refs."""
    return isinstance(node, AnyOfNode) and all(isinstance(v, RefNode) for v in node.variants)


def is_const_enum(node: SchemaNode | None) -> bool:
    """True for an anyOf whose alternatives are all Consts."""
    return isinstance(node, AnyOfNode) and all(isinstance(v, ConstNode) for v in node.variants)


def check_references(spec: SchemaSpec) -> None:
    """Resolve every Ref in the spec, failing on the first dangling one."""
    resolver = ReferenceResolver(spec)
    for name in spec.sorted_names():
        for target in iter_ref_targets(spec.managed_schemas[name]):
            try:
                resolver.resolve(RefNode(target=target))
            except SchemaReferenceError as e:
                raise SchemaReferenceError(f"schema {name!r} has a dangling reference") from e
