"""
Python code generation backend.

Generates frozen dataclasses with a ``to_json`` method for wrappers and
tuples, ``str`` enums for const unions, and native ``Union`` aliases.
"""

from __future__ import annotations

import keyword
from typing import Any

from ...utils import SIGILS
from ..analyzer.variant_lifter import ConflictPolicy
from ..schema_ast.nodes import AnyOfNode, SchemaNode
from .base import CodeBackend, string_literal

PYTHON_KEYWORDS = frozenset(keyword.kwlist)


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"
    DECLARATION_SEPARATOR = "\n\n"

    TYPE_MAP = {
        "string": "str",
        "boolean": "bool",
        "number": "float",
        "number32": "float",
        "any": "Any",
    }

    KEYWORDS = PYTHON_KEYWORDS

    RESERVED_MEMBERS = frozenset({"to_json"})

    CONFLICT_POLICY = ConflictPolicy.APPEND_SUFFIX

    # Enum members are scoped to their class
    ENUM_MEMBERS_ARE_GLOBAL = False

    def __init__(self, config):
        super().__init__(config)
        # Quote references in expressions evaluated at import time
        self._quote_refs = False

    def translate_alias_type(self, schema: SchemaNode) -> str:
        self._quote_refs = True
        try:
            return super().translate_alias_type(schema)
        finally:
            self._quote_refs = False

    def _prepare_union_context(self, name: str, schema: AnyOfNode) -> dict[str, Any]:
        self._quote_refs = True
        try:
            return super()._prepare_union_context(name, schema)
        finally:
            self._quote_refs = False

    def reference_type(self, name: str) -> str:
        return f'"{name}"' if self._quote_refs else name

    def list_type(self, item_type: str) -> str:
        return f"list[{item_type}]"

    def property_identifier(self, wire_name: str) -> str:
        return self.member_identifier(wire_name.lstrip(SIGILS))

    def literal_element(self, value: str) -> str:
        return f"{string_literal(value)},"

    def field_element(self, member_name: str) -> str:
        return f"_to_json(self.{member_name}),"

    def open_nested_array(self) -> str:
        return "["

    def close_nested_array(self) -> str:
        return "],"
