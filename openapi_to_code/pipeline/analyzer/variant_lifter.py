"""
Tuple variant lifting.

Targets without native sum types can only render an anyOf whose
alternatives are all references. This pass gives every tuple alternative of
a top-level anyOf its own named schema and replaces the alternative with a
reference to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from ..errors import SchemaNamingError
from ..schema_ast.nodes import AnyOfNode, ArrayTupleNode, ConstNode, RefNode, SchemaNode, SchemaSpec

logger = logging.getLogger(__name__)


class ConflictPolicy(Enum):
    """What to do when two lifted tuples derive the same name."""

    # Remove alternatives flagged drop-on-conflict before lifting
    DROP = "drop"
    # Keep everything, disambiguating with numeric suffixes 2, 3, ...
    APPEND_SUFFIX = "append_suffix"


@dataclass(frozen=True)
class LiftRecord:
    """One tuple alternative extracted into a top-level schema."""

    parent: str
    name: str
    title: str
    schema: ArrayTupleNode


def lift_tuple_variants(spec: SchemaSpec, policy: ConflictPolicy) -> tuple[SchemaSpec, list[LiftRecord]]:
    """
    Extract the tuple alternatives of top-level anyOf schemas.

    The input spec is left untouched.

    Args:
        spec: The parsed spec
        policy: Conflict policy

    Returns:
        The new spec (original schemas, rewritten anyOfs and lifted tuples)
        and the list of lifts that were applied

    Raises:
        SchemaNamingError: If two lifts collide under the Drop policy, or a
            lifted name collides with a pre-existing schema
    """
    rewritten: dict[str, SchemaNode] = {}
    records: list[LiftRecord] = []
    lifted_names: set[str] = set()

    for parent in spec.sorted_names():
        schema = spec.managed_schemas[parent]
        if not isinstance(schema, AnyOfNode):
            rewritten[parent] = schema
            continue

        variants = list(schema.variants)
        if policy is ConflictPolicy.DROP:
            kept = [v for v in variants if not (isinstance(v, ArrayTupleNode) and v.drop_on_conflict)]
            if len(kept) != len(variants):
                logger.debug("dropped %d variant(s) of %s", len(variants) - len(kept), parent)
            variants = kept

        new_variants: list[SchemaNode] = []
        for variant in variants:
            record = _lift_variant(parent, variant, policy, lifted_names)
            if record is None:
                new_variants.append(variant)
                continue
            lifted_names.add(record.name)
            records.append(record)
            new_variants.append(RefNode(target=record.name, title=record.title))

        rewritten[parent] = replace(schema, variants=tuple(new_variants))

    for record in records:
        if record.name in rewritten or record.name in spec.unmanaged_schemas:
            raise SchemaNamingError(f"extraction of array tuples from anyOf failed: duplicate schema name: {record.name}")
        rewritten[record.name] = record.schema

    logger.info("lifted %d tuple variant(s) with policy %s", len(records), policy.value)
    return SchemaSpec(managed_schemas=rewritten, unmanaged_schemas=spec.unmanaged_schemas), records


def _lift_variant(
    parent: str,
    variant: SchemaNode,
    policy: ConflictPolicy,
    lifted_names: set[str],
) -> LiftRecord | None:
    if not isinstance(variant, ArrayTupleNode):
        return None

    consts = [item.value for item in variant.prefix_items if isinstance(item, ConstNode)]
    if len(consts) != 1:
        # Left inline; rendering the parent anyOf will fail
        logger.debug("tuple variant of %s has %d discriminants, not lifting", parent, len(consts))
        return None
    discriminant = consts[0]

    title = f"{parent}{discriminant}"
    name = f"{parent}{variant.variant_name}" if variant.variant_name is not None else title

    if policy is ConflictPolicy.APPEND_SUFFIX:
        candidate = name
        suffix = 2
        while candidate in lifted_names:
            candidate = f"{name}{suffix}"
            suffix += 1
        name = candidate
    elif name in lifted_names:
        raise SchemaNamingError(f"extraction of array tuples from anyOf failed: duplicate schema name: {name}")

    logger.debug("lifting tuple variant %s of %s", name, parent)
    return LiftRecord(parent=parent, name=name, title=title, schema=variant)
