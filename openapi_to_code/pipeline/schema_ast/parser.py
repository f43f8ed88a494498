"""
Strict OpenAPI schema parser that builds the schema algebra.

Phase 1 of the pipeline. The source document is treated as a whitelist:
every node must match exactly one permitted shape, carry only that shape's
fields, and use the expected type tag. Nothing is coerced.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..errors import SchemaParseError, SchemaReferenceError
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
    iter_ref_targets,
)

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"

DEFAULT_VENDOR_PREFIX = "x-turbopuffer"

# Fields every shape except Ref may carry
_COMMON_FIELDS = frozenset({"description", "title"})


def strip_schema_ref_prefix(ref: str) -> str:
    """Turn ``#/components/schemas/Name`` into ``Name``."""
    if not ref.startswith(SCHEMA_REF_PREFIX):
        raise SchemaReferenceError(f"unsupported $ref {ref!r}: must start with {SCHEMA_REF_PREFIX!r}")
    return ref[len(SCHEMA_REF_PREFIX) :]


class SchemaParser:
    """Parses ``components.schemas`` of an OpenAPI document into a SchemaSpec."""

    def __init__(self, name_prefixes: Iterable[str], vendor_prefix: str = DEFAULT_VENDOR_PREFIX):
        """
        Initialize the parser.

        Args:
            name_prefixes: Schemas whose name starts with one of these are managed
            vendor_prefix: Prefix of the vendor extension fields (e.g. ``x-turbopuffer``)
        """
        self.name_prefixes = tuple(name_prefixes)
        self.variant_name_key = f"{vendor_prefix}-variant-name"
        self.drop_on_conflict_key = f"{vendor_prefix}-variant-drop-on-conflict"
        self.flatten_key = f"{vendor_prefix}-flatten"
        self.width_key = f"{vendor_prefix}-width"

    def parse(self, document: Any) -> SchemaSpec:
        """
        Parse a whole document.

        Args:
            document: The decoded OpenAPI document

        Returns:
            SchemaSpec with the managed schemas and the referenced unmanaged names
        """
        schemas = self.locate_schemas(document)

        managed: dict[str, SchemaNode] = {}
        for name, raw in schemas.items():
            if not isinstance(name, str):
                raise SchemaParseError(f"schema name {name!r} is not a string")
            if not self.is_managed(name):
                continue
            try:
                managed[name] = self.parse_node(raw, f"{SCHEMA_REF_PREFIX}{name}")
            except (SchemaParseError, SchemaReferenceError) as e:
                raise type(e)(f"failed to parse schema {name!r}") from e

        unmanaged = self._compute_unmanaged(schemas, managed)
        logger.info("parsed %d managed and %d unmanaged schemas", len(managed), len(unmanaged))
        return SchemaSpec(managed_schemas=managed, unmanaged_schemas=unmanaged)

    def is_managed(self, name: str) -> bool:
        return any(name.startswith(prefix) for prefix in self.name_prefixes)

    @staticmethod
    def locate_schemas(document: Any) -> Mapping[Any, Any]:
        """Return ``components.schemas``, failing if it is absent or not a mapping."""
        if not isinstance(document, Mapping):
            raise SchemaParseError("document root is not a mapping")
        components = document.get("components")
        if not isinstance(components, Mapping):
            raise SchemaParseError("no schemas found in OpenAPI spec: missing `components` mapping")
        schemas = components.get("schemas")
        if not isinstance(schemas, Mapping):
            raise SchemaParseError("no schemas found in OpenAPI spec: `components.schemas` is missing or not a mapping")
        return schemas

    # Node parsing

    def parse_node(self, raw: Any, path: str) -> SchemaNode:
        """
        Parse a single schema node recursively.

        Args:
            raw: The raw schema value
            path: Location of the node (for error messages)

        Returns:
            The matching SchemaNode subclass
        """
        if not isinstance(raw, Mapping):
            raise SchemaParseError(f"{path}: expected a schema mapping, got {type(raw).__name__}")

        if "anyOf" in raw:
            return self._parse_any_of(raw, path)
        if "$ref" in raw:
            return self._parse_ref(raw, path)
        if "const" in raw:
            return self._parse_const(raw, path)
        if "type" in raw:
            type_tag = raw["type"]
            if type_tag == "object":
                return self._parse_object(raw, path)
            if type_tag == "array":
                if "prefixItems" in raw:
                    return self._parse_array_tuple(raw, path)
                return self._parse_array_list(raw, path)
            if type_tag == "string":
                self._check_fields(raw, _COMMON_FIELDS | {"type"}, path)
                return StringNode(**self._common(raw, path))
            if type_tag == "boolean":
                self._check_fields(raw, _COMMON_FIELDS | {"type"}, path)
                return BooleanNode(**self._common(raw, path))
            if type_tag == "number":
                return self._parse_number(raw, path)
            raise SchemaParseError(f"{path}: unsupported type tag {type_tag!r}")
        return self._parse_any(raw, path)

    def _parse_any_of(self, raw: Mapping[str, Any], path: str) -> AnyOfNode:
        self._check_fields(raw, _COMMON_FIELDS | {"anyOf"}, path)
        variants = self._require_list(raw, "anyOf", path)
        return AnyOfNode(
            variants=tuple(self.parse_node(v, f"{path}/anyOf/{i}") for i, v in enumerate(variants)),
            **self._common(raw, path),
        )

    def _parse_ref(self, raw: Mapping[str, Any], path: str) -> RefNode:
        self._check_fields(raw, {"$ref", "title"}, path)
        ref = raw["$ref"]
        if not isinstance(ref, str):
            raise SchemaParseError(f"{path}: `$ref` must be a string")
        try:
            target = strip_schema_ref_prefix(ref)
        except SchemaReferenceError as e:
            raise SchemaReferenceError(f"{path}: invalid reference") from e
        return RefNode(target=target, title=self._optional_str(raw, "title", path))

    def _parse_const(self, raw: Mapping[str, Any], path: str) -> ConstNode:
        self._check_fields(raw, _COMMON_FIELDS | {"const"}, path)
        value = raw["const"]
        if not isinstance(value, str):
            raise SchemaParseError(f"{path}: only string consts are supported, got {value!r}")
        return ConstNode(value=value, **self._common(raw, path))

    def _parse_object(self, raw: Mapping[str, Any], path: str) -> ObjectNode:
        self._check_fields(raw, _COMMON_FIELDS | {"type", "properties", "required"}, path)
        if "properties" not in raw:
            raise SchemaParseError(f"{path}: object schema is missing `properties`")
        properties = raw["properties"]
        if not isinstance(properties, Mapping):
            raise SchemaParseError(f"{path}: `properties` must be a mapping")
        required = raw.get("required", [])
        if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
            raise SchemaParseError(f"{path}: `required` must be a list of strings")
        parsed = {}
        for prop_name, prop_schema in properties.items():
            if not isinstance(prop_name, str):
                raise SchemaParseError(f"{path}: property name {prop_name!r} is not a string")
            parsed[prop_name] = self.parse_node(prop_schema, f"{path}/properties/{prop_name}")
        return ObjectNode(properties=parsed, required=tuple(required), **self._common(raw, path))

    def _parse_array_list(self, raw: Mapping[str, Any], path: str) -> ArrayListNode:
        self._check_fields(raw, _COMMON_FIELDS | {"type", "items"}, path)
        if "items" not in raw:
            raise SchemaParseError(f"{path}: array schema needs either `items` or `prefixItems`")
        return ArrayListNode(items=self.parse_node(raw["items"], f"{path}/items"), **self._common(raw, path))

    def _parse_array_tuple(self, raw: Mapping[str, Any], path: str) -> ArrayTupleNode:
        allowed = _COMMON_FIELDS | {
            "type",
            "prefixItems",
            "additionalItems",
            self.variant_name_key,
            self.drop_on_conflict_key,
            self.flatten_key,
        }
        self._check_fields(raw, allowed, path)
        prefix_items = self._require_list(raw, "prefixItems", path)
        return ArrayTupleNode(
            prefix_items=tuple(self.parse_node(item, f"{path}/prefixItems/{i}") for i, item in enumerate(prefix_items)),
            # Stainless ignores `additionalItems`, so it is the spelling used
            # to close a tuple; an unclosed tuple cannot be rendered.
            additional_items=self._optional_bool(raw, "additionalItems", True, path),
            variant_name=self._optional_str(raw, self.variant_name_key, path),
            drop_on_conflict=self._optional_bool(raw, self.drop_on_conflict_key, False, path),
            flatten=self._optional_bool(raw, self.flatten_key, False, path),
            **self._common(raw, path),
        )

    def _parse_number(self, raw: Mapping[str, Any], path: str) -> NumberNode:
        self._check_fields(raw, _COMMON_FIELDS | {"type", self.width_key}, path)
        width = raw.get(self.width_key)
        if width is not None and (isinstance(width, bool) or not isinstance(width, int)):
            raise SchemaParseError(f"{path}: `{self.width_key}` must be an integer")
        return NumberNode(width=width, **self._common(raw, path))

    def _parse_any(self, raw: Mapping[str, Any], path: str) -> AnyNode:
        self._check_fields(raw, _COMMON_FIELDS | {"x-stainless-any"}, path)
        if "x-stainless-any" in raw and raw["x-stainless-any"] is not True:
            raise SchemaParseError(f"{path}: `x-stainless-any` must be true, got {raw['x-stainless-any']!r}")
        return AnyNode(**self._common(raw, path))

    # Field helpers

    @staticmethod
    def _check_fields(raw: Mapping[str, Any], allowed: Iterable[str], path: str) -> None:
        unknown = [key for key in raw if key not in allowed]
        if unknown:
            names = ", ".join(repr(k) for k in unknown)
            raise SchemaParseError(f"{path}: unknown field(s) {names}")

    def _common(self, raw: Mapping[str, Any], path: str) -> dict[str, str | None]:
        return {
            "title": self._optional_str(raw, "title", path),
            "description": self._optional_str(raw, "description", path),
        }

    @staticmethod
    def _optional_str(raw: Mapping[str, Any], key: str, path: str) -> str | None:
        value = raw.get(key)
        if value is not None and not isinstance(value, str):
            raise SchemaParseError(f"{path}: `{key}` must be a string")
        return value

    @staticmethod
    def _optional_bool(raw: Mapping[str, Any], key: str, default: bool, path: str) -> bool:
        value = raw.get(key, default)
        if not isinstance(value, bool):
            raise SchemaParseError(f"{path}: `{key}` must be a boolean")
        return value

    @staticmethod
    def _require_list(raw: Mapping[str, Any], key: str, path: str) -> list[Any]:
        value = raw[key]
        if not isinstance(value, list):
            raise SchemaParseError(f"{path}: `{key}` must be a list")
        return value

    # Reference closure

    def _compute_unmanaged(self, schemas: Mapping[Any, Any], managed: dict[str, SchemaNode]) -> frozenset[str]:
        """Collect every non-managed schema reachable by reference from a managed one."""
        reachable: set[str] = set()
        pending = [target for node in managed.values() for target in iter_ref_targets(node)]
        while pending:
            target = pending.pop()
            if target in reachable:
                continue
            if target not in schemas:
                raise SchemaReferenceError(f"reference to unknown schema {target!r}")
            reachable.add(target)
            if target not in managed:
                # Unmanaged schemas are not whitelisted, so walk their raw form
                pending.extend(_raw_ref_targets(schemas[target]))
        unmanaged = frozenset(reachable - managed.keys())
        for name in sorted(unmanaged):
            logger.debug("retaining unmanaged schema %s", name)
        return unmanaged


def _raw_ref_targets(raw: Any):
    """Yield local schema reference targets found anywhere in a raw schema value."""
    if isinstance(raw, Mapping):
        ref = raw.get("$ref")
        if isinstance(ref, str) and ref.startswith(SCHEMA_REF_PREFIX):
            yield ref[len(SCHEMA_REF_PREFIX) :]
        for value in raw.values():
            yield from _raw_ref_targets(value)
    elif isinstance(raw, list):
        for value in raw:
            yield from _raw_ref_targets(value)
