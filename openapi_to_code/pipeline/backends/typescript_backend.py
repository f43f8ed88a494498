"""
TypeScript code generation backend.

Unions map to native union types. Wrappers and tuples become classes with
a positional constructor and a ``toJSON`` method, which ``JSON.stringify``
calls to produce the wire shape.
"""

from __future__ import annotations

from ...utils import lower_camel_case, snake_to_camel_case
from ..analyzer.variant_lifter import ConflictPolicy
from .base import CodeBackend, string_literal

TYPESCRIPT_KEYWORDS = frozenset(
    {
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "interface",
        "let",
        "new",
        "null",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "static",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
    }
)


class TypeScriptBackend(CodeBackend):
    """TypeScript code generation backend."""

    TEMPLATE_LANG = "typescript"
    FILE_EXTENSION = "ts"
    INDENT = "  "

    TYPE_MAP = {
        "string": "string",
        "boolean": "boolean",
        "number": "number",
        "number32": "number",
        "any": "unknown",
    }

    KEYWORDS = TYPESCRIPT_KEYWORDS

    RESERVED_MEMBERS = frozenset({"toJSON"})

    CONFLICT_POLICY = ConflictPolicy.APPEND_SUFFIX

    def list_type(self, item_type: str) -> str:
        return f"{item_type}[]"

    def property_identifier(self, wire_name: str) -> str:
        return self.member_identifier(lower_camel_case(snake_to_camel_case(wire_name)))

    def literal_element(self, value: str) -> str:
        return f"{string_literal(value)},"

    def field_element(self, member_name: str) -> str:
        return f"this.{member_name},"

    def open_nested_array(self) -> str:
        return "["

    def close_nested_array(self) -> str:
        return "],"
