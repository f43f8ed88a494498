"""
Go code generation backend.

Go has neither sum types nor tuples. Unions become sealed interfaces that
every member type implements, and tuples become structs with a
constructor function and a ``MarshalJSON`` method that rebuilds the array.
"""

from __future__ import annotations

from ...utils import escape_keyword, lower_camel_case, snake_to_camel_case
from ..analyzer.variant_lifter import ConflictPolicy
from .base import CodeBackend, string_literal

GO_KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)


class GoBackend(CodeBackend):
    """Go code generation backend."""

    TEMPLATE_LANG = "go"
    FILE_EXTENSION = "go"
    INDENT = "\t"

    TYPE_MAP = {
        "string": "string",
        "boolean": "bool",
        "number": "float64",
        "number32": "float32",
        "any": "any",
    }

    KEYWORDS = GO_KEYWORDS

    RESERVED_MEMBERS = frozenset({"MarshalJSON"})

    # Alternate tuple orderings cannot be told apart once named
    CONFLICT_POLICY = ConflictPolicy.DROP

    NATIVE_UNIONS = False

    def list_type(self, item_type: str) -> str:
        return f"[]{item_type}"

    def property_identifier(self, wire_name: str) -> str:
        return self.member_identifier(snake_to_camel_case(wire_name))

    def parameter_identifier(self, member_name: str) -> str:
        return escape_keyword(lower_camel_case(member_name), self.KEYWORDS)

    def literal_element(self, value: str) -> str:
        return f"{string_literal(value)},"

    def field_element(self, member_name: str) -> str:
        return f"v.{member_name},"

    def open_nested_array(self) -> str:
        return "[]any{"

    def close_nested_array(self) -> str:
        return "},"
