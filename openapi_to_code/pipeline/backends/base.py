"""
Base class for code generation backends.

Implements the rendering contract shared by every target: which schema
shapes become which kind of declaration, which shapes are rejected, and the
order in which tuple positions are serialized. Subclasses only supply the
target's spelling of types, identifiers and serializer elements, plus the
Jinja2 templates the declarations are rendered with.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ...utils import capitalize_first, escape_keyword
from ..analyzer.reference_resolver import ReferenceResolver, is_const_enum, is_ref_union
from ..analyzer.tuple_fields import FlattenEnd, FlattenStart, LiteralField, NormalField, TupleField, build_tuple_fields
from ..analyzer.variant_lifter import ConflictPolicy
from ..config import CodeGeneratorConfig
from ..errors import CodegenError, RenderError, SchemaNamingError, UnsupportedSchemaError
from ..schema_ast.nodes import (
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

logger = logging.getLogger(__name__)


def string_literal(value: str) -> str:
    """Quote a string; JSON string syntax is valid in every supported target."""
    return json.dumps(value)


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Type mapping from scalar schema kinds to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # One indentation level in the generated code
    INDENT: str = "    "

    # Text between two top-level declarations
    DECLARATION_SEPARATOR: str = "\n"

    # Reserved words that cannot be used as identifiers
    KEYWORDS: frozenset[str] = frozenset()

    # Names of generated methods that a member must not shadow
    RESERVED_MEMBERS: frozenset[str] = frozenset()

    # Policy used when the config does not set one
    CONFLICT_POLICY: ConflictPolicy = ConflictPolicy.APPEND_SUFFIX

    # Whether unions map to a native union type. When False, a marker
    # capability is implemented by every transitively referenced type.
    NATIVE_UNIONS: bool = True

    # Whether enum member constants live in the same namespace as type names
    ENUM_MEMBERS_ARE_GLOBAL: bool = True

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self.spec: SchemaSpec | None = None
        self.resolver: ReferenceResolver | None = None
        self.global_names: set[str] = set()
        self.needs_serializer = False
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )
        self.jinja_env.filters["literal"] = string_literal
        self.jinja_env.globals["indent"] = self.INDENT
        self.jinja_env.globals["comment_prefix"] = self._get_comment_prefix()

        ext = self.FILE_EXTENSION
        self.prefix_template = self.jinja_env.get_template(f"prefix.{ext}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{ext}.jinja2")
        self.union_template = self.jinja_env.get_template(f"union.{ext}.jinja2")
        self.wrapper_template = self.jinja_env.get_template(f"wrapper.{ext}.jinja2")
        self.tuple_template = self.jinja_env.get_template(f"tuple.{ext}.jinja2")
        self.alias_template = self.jinja_env.get_template(f"alias.{ext}.jinja2")

    def _get_comment_prefix(self) -> str:
        """Get the comment prefix for the language."""
        return "#" if self.TEMPLATE_LANG == "python" else "//"

    def generate(self, spec: SchemaSpec, generation_comment: str = "") -> str:
        """
        Generate code for every managed schema of a lifted spec.

        Args:
            spec: The spec, after variant lifting
            generation_comment: Command line recorded in the file header

        Returns:
            Generated code as a string

        Raises:
            RenderError: Wrapping the first failure, naming the schema
        """
        self.spec = spec
        self.resolver = ReferenceResolver(spec)
        self.global_names = set(spec.managed_schemas) | set(spec.unmanaged_schemas)
        self.needs_serializer = False

        declarations = []
        for name in spec.sorted_names():
            logger.debug("rendering %s", name)
            try:
                declarations.append(self.render_declaration(name, spec.managed_schemas[name]))
            except CodegenError as e:
                raise RenderError(f"failed to render schema {name!r}") from e

        prefix = self.prefix_template.render(self._prepare_prefix_context(generation_comment))
        return prefix + self.DECLARATION_SEPARATOR.join(declarations)

    def _prepare_prefix_context(self, generation_comment: str) -> dict[str, Any]:
        return {
            "add_generation_comment": self.config.add_generation_comment,
            "generation_comment": generation_comment,
            "needs_serializer": self.needs_serializer,
            "unmanaged": sorted(self.spec.unmanaged_schemas),
            "config": self.config,
        }

    # Declaration dispatch

    def render_declaration(self, name: str, schema: SchemaNode) -> str:
        """Render one top-level schema."""
        if isinstance(schema, AnyOfNode):
            if not schema.variants:
                raise UnsupportedSchemaError("anyOf without alternatives unsupported")
            if is_const_enum(schema):
                return self.enum_template.render(self._prepare_enum_context(name, schema))
            if is_ref_union(schema):
                return self.union_template.render(self._prepare_union_context(name, schema))
            raise UnsupportedSchemaError("unsupported anyOf: alternatives must be all consts or all references (tuple variants need exactly one const)")

        if isinstance(schema, ObjectNode):
            self.needs_serializer = True
            return self.wrapper_template.render(self._prepare_wrapper_context(name, schema))

        if isinstance(schema, ArrayTupleNode):
            if schema.additional_items:
                raise UnsupportedSchemaError("tuple-type arrays with `additionalItems: true` unsupported")
            self.needs_serializer = True
            return self.tuple_template.render(self._prepare_tuple_context(name, schema))

        if isinstance(schema, ConstNode):
            raise UnsupportedSchemaError("const in unsupported position")

        return self.alias_template.render(
            name=name,
            description=self._comment_lines(schema),
            type=self.translate_alias_type(schema),
        )

    def _prepare_enum_context(self, name: str, schema: AnyOfNode) -> dict[str, Any]:
        members = []
        local_names: set[str] = set()
        for variant in schema.variants:
            member_name = variant.title if variant.title is not None else f"{name}{capitalize_first(variant.value)}"
            member_name = escape_keyword(member_name, self.KEYWORDS)
            if member_name in local_names:
                raise SchemaNamingError(f"duplicate enum member name: {member_name}")
            local_names.add(member_name)
            if self.ENUM_MEMBERS_ARE_GLOBAL:
                if member_name in self.global_names:
                    raise SchemaNamingError(f"enum member {member_name} collides with another declaration")
                self.global_names.add(member_name)
            members.append({"name": member_name, "value": variant.value})
        return {"name": name, "description": self._comment_lines(schema), "members": members}

    def _prepare_union_context(self, name: str, schema: AnyOfNode) -> dict[str, Any]:
        if self.NATIVE_UNIONS:
            members = [self.resolver.resolve(v).target_name for v in schema.variants]
        else:
            members = self.resolver.union_members(schema.variants)
        return {
            "name": name,
            "description": self._comment_lines(schema),
            "members": [{"name": m, "type": self.reference_type(m)} for m in members],
        }

    def _prepare_wrapper_context(self, name: str, schema: ObjectNode) -> dict[str, Any]:
        if len(schema.properties) != 1 or len(schema.required) != 1:
            raise UnsupportedSchemaError("object schemas only supported with a single required property")
        ((wire_name, prop_schema),) = schema.properties.items()
        if wire_name not in schema.required:
            raise UnsupportedSchemaError("object schemas only supported with a single required property")

        field_name = self.property_identifier(wire_name)
        return {
            "name": name,
            "description": self._comment_lines(schema),
            "wire_name": wire_name,
            "field": {
                "name": field_name,
                "param": self.parameter_identifier(field_name),
                "type": self.translate_type(prop_schema),
            },
        }

    def _prepare_tuple_context(self, name: str, schema: ArrayTupleNode) -> dict[str, Any]:
        fields = build_tuple_fields(schema.prefix_items)
        members = []
        identifiers: dict[int, str] = {}
        params: set[str] = set()
        for index, field in enumerate(fields):
            if not isinstance(field, NormalField):
                continue
            identifier = self.member_identifier(field.name)
            if identifier in identifiers.values():
                raise SchemaNamingError(f"duplicate tuple field name: {identifier}")
            identifiers[index] = identifier
            # Parameter names can collide where member names do not (Go lowercases them)
            param = self.parameter_identifier(identifier)
            if param in params:
                raise SchemaNamingError(f"duplicate tuple parameter name: {param}")
            params.add(param)
            members.append(
                {
                    "name": identifier,
                    "param": param,
                    "type": self.translate_type(field.schema),
                }
            )
        return {
            "name": name,
            "description": self._comment_lines(schema),
            "members": members,
            "serializer": self.serializer_lines(fields, identifiers),
        }

    def serializer_lines(self, fields: list[TupleField], identifiers: dict[int, str]) -> list[str]:
        """
        Lines of the serialized array literal, one per element.

        Nested arrays for flattened ranges are indented one level deeper than
        their opening line. Indentation is relative to the outer array.
        """
        lines = []
        depth = 0
        for index, field in enumerate(fields):
            if isinstance(field, LiteralField):
                lines.append(self.INDENT * depth + self.literal_element(field.value))
            elif isinstance(field, FlattenStart):
                lines.append(self.INDENT * depth + self.open_nested_array())
                depth += 1
            elif isinstance(field, FlattenEnd):
                depth -= 1
                lines.append(self.INDENT * depth + self.close_nested_array())
            else:
                lines.append(self.INDENT * depth + self.field_element(identifiers[index]))
        return lines

    # Types

    def translate_type(self, schema: SchemaNode) -> str:
        """
        Translate a schema in a nested position (field, item) to a type string.

        Raises:
            UnsupportedSchemaError: For shapes only valid as top-level declarations
        """
        if isinstance(schema, AnyOfNode):
            raise UnsupportedSchemaError("anyOf in unsupported position")
        if isinstance(schema, ObjectNode):
            raise UnsupportedSchemaError("object schema in unsupported position")
        if isinstance(schema, ArrayTupleNode):
            raise UnsupportedSchemaError("tuple-type arrays in unsupported position")
        if isinstance(schema, ConstNode):
            raise UnsupportedSchemaError("const in unsupported position")
        if isinstance(schema, ArrayListNode):
            return self.list_type(self.translate_type(schema.items))
        if isinstance(schema, StringNode):
            return self.TYPE_MAP["string"]
        if isinstance(schema, BooleanNode):
            return self.TYPE_MAP["boolean"]
        if isinstance(schema, NumberNode):
            return self.number_type(schema.width)
        if isinstance(schema, RefNode):
            return self.reference_type(self.resolver.resolve(schema).target_name)
        if isinstance(schema, AnyNode):
            return self.TYPE_MAP["any"]
        raise UnsupportedSchemaError(f"unknown schema node {type(schema).__name__}")

    def translate_alias_type(self, schema: SchemaNode) -> str:
        """Type string on the right-hand side of a top-level alias."""
        return self.translate_type(schema)

    def number_type(self, width: int | None) -> str:
        if width == 32:
            return self.TYPE_MAP["number32"]
        if width is None or width == 64:
            return self.TYPE_MAP["number"]
        raise UnsupportedSchemaError(f"unsupported number width: {width}")

    def reference_type(self, name: str) -> str:
        return name

    @abstractmethod
    def list_type(self, item_type: str) -> str:
        """Homogeneous sequence of ``item_type``."""

    # Identifiers

    @abstractmethod
    def property_identifier(self, wire_name: str) -> str:
        """Member name of an object wrapper's single field."""

    def parameter_identifier(self, member_name: str) -> str:
        """Constructor parameter name for a member."""
        return member_name

    def member_identifier(self, name: str) -> str:
        """Escape a member name that is a keyword or a generated method name."""
        return escape_keyword(name, self.KEYWORDS | self.RESERVED_MEMBERS)

    # Serializer elements

    @abstractmethod
    def literal_element(self, value: str) -> str:
        """Array element for a fixed literal."""

    @abstractmethod
    def field_element(self, member_name: str) -> str:
        """Array element for a member value."""

    @abstractmethod
    def open_nested_array(self) -> str:
        """Line opening a nested array."""

    @abstractmethod
    def close_nested_array(self) -> str:
        """Line closing a nested array."""

    def _comment_lines(self, schema: SchemaNode) -> list[str]:
        if not schema.description:
            return []
        return [line.rstrip() for line in schema.description.strip().splitlines()]
