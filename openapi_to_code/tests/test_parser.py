"""
Tests for the strict schema parser and the unmanaged reference closure.
"""

from __future__ import annotations

import json

import pytest
from conftest import TEST_DATA_DIR, make_document

from openapi_to_code.pipeline import errors
from openapi_to_code.pipeline.errors import SchemaParseError, SchemaReferenceError, format_error_chain
from openapi_to_code.pipeline.schema_ast import (
    AnyNode,
    AnyOfNode,
    ArrayListNode,
    ArrayTupleNode,
    BooleanNode,
    ConstNode,
    NumberNode,
    ObjectNode,
    RefNode,
    SchemaParser,
    StringNode,
)
from openapi_to_code.pipeline.schema_ast.parser import strip_schema_ref_prefix


def load_parse_error_cases():
    with open(TEST_DATA_DIR / "parse_errors.json") as f:
        return json.load(f)


def parse(schemas: dict, prefixes=("Expr",)):
    return SchemaParser(prefixes).parse(make_document(schemas))


@pytest.mark.parametrize("case", load_parse_error_cases(), ids=lambda c: c["description"])
def test_rejects_malformed_schema(case):
    with pytest.raises(getattr(errors, case["error"])) as excinfo:
        parse({"ExprTest": case["schema"]})

    chain = format_error_chain(excinfo.value)
    assert chain.startswith("failed to parse schema 'ExprTest'")
    assert case["message"] in chain


class TestShapes:
    """Each whitelisted shape parses to its node class."""

    def test_scalars(self):
        spec = parse(
            {
                "ExprString": {"type": "string", "description": "text"},
                "ExprBool": {"type": "boolean"},
                "ExprNumber": {"type": "number"},
                "ExprFloat": {"type": "number", "x-turbopuffer-width": 32},
            }
        )
        assert spec.managed_schemas["ExprString"] == StringNode(description="text")
        assert spec.managed_schemas["ExprBool"] == BooleanNode()
        assert spec.managed_schemas["ExprNumber"] == NumberNode(width=None)
        assert spec.managed_schemas["ExprFloat"] == NumberNode(width=32)

    def test_any(self):
        spec = parse({"ExprA": {}, "ExprB": {"x-stainless-any": True, "title": "Anything"}})
        assert spec.managed_schemas["ExprA"] == AnyNode()
        assert spec.managed_schemas["ExprB"] == AnyNode(title="Anything")

    def test_any_of_with_consts(self):
        spec = parse({"ExprMode": {"anyOf": [{"const": "a"}, {"const": "b", "title": "ModeB"}]}})
        assert spec.managed_schemas["ExprMode"] == AnyOfNode(
            variants=(ConstNode(value="a"), ConstNode(value="b", title="ModeB"))
        )

    def test_object(self):
        spec = parse(
            {
                "ExprWrap": {
                    "type": "object",
                    "properties": {"$not": {"$ref": "#/components/schemas/ExprMode"}},
                    "required": ["$not"],
                },
                "ExprMode": {"type": "string"},
            }
        )
        node = spec.managed_schemas["ExprWrap"]
        assert isinstance(node, ObjectNode)
        assert node.properties == {"$not": RefNode(target="ExprMode")}
        assert node.required == ("$not",)

    def test_object_required_defaults_to_empty(self):
        spec = parse({"ExprWrap": {"type": "object", "properties": {"a": {"type": "string"}}}})
        assert spec.managed_schemas["ExprWrap"].required == ()

    def test_array_list(self):
        spec = parse({"ExprList": {"type": "array", "items": {"type": "number"}}})
        assert spec.managed_schemas["ExprList"] == ArrayListNode(items=NumberNode())

    def test_array_tuple(self):
        spec = parse(
            {
                "ExprPair": {
                    "type": "array",
                    "additionalItems": False,
                    "x-turbopuffer-variant-name": "Pair",
                    "x-turbopuffer-variant-drop-on-conflict": True,
                    "prefixItems": [
                        {"const": "Pair"},
                        {
                            "type": "array",
                            "x-turbopuffer-flatten": True,
                            "prefixItems": [{"type": "string"}],
                        },
                    ],
                }
            }
        )
        node = spec.managed_schemas["ExprPair"]
        assert isinstance(node, ArrayTupleNode)
        assert node.additional_items is False
        assert node.variant_name == "Pair"
        assert node.drop_on_conflict is True
        assert node.flatten is False
        assert node.prefix_items[0] == ConstNode(value="Pair")
        assert node.prefix_items[1].flatten is True

    def test_additional_items_defaults_to_true(self):
        spec = parse({"ExprTuple": {"type": "array", "prefixItems": [{"type": "string"}]}})
        assert spec.managed_schemas["ExprTuple"].additional_items is True

    def test_empty_any_of_parses(self):
        spec = parse({"ExprNothing": {"anyOf": []}})
        assert spec.managed_schemas["ExprNothing"] == AnyOfNode(variants=())

    def test_ref_keeps_title(self):
        spec = parse(
            {
                "ExprTuple": {
                    "type": "array",
                    "additionalItems": False,
                    "prefixItems": [{"$ref": "#/components/schemas/ExprName", "title": "attr"}],
                },
                "ExprName": {"type": "string"},
            }
        )
        assert spec.managed_schemas["ExprTuple"].prefix_items == (RefNode(target="ExprName", title="attr"),)

    def test_custom_vendor_prefix(self):
        parser = SchemaParser(["Expr"], vendor_prefix="x-acme")
        spec = parser.parse(make_document({"ExprNum": {"type": "number", "x-acme-width": 32}}))
        assert spec.managed_schemas["ExprNum"] == NumberNode(width=32)

        with pytest.raises(SchemaParseError):
            parser.parse(make_document({"ExprNum": {"type": "number", "x-turbopuffer-width": 32}}))


class TestDocument:
    def test_missing_components(self):
        with pytest.raises(SchemaParseError, match="no schemas found"):
            SchemaParser(["Expr"]).parse({"openapi": "3.1.0"})

    def test_missing_schemas(self):
        with pytest.raises(SchemaParseError, match="no schemas found"):
            SchemaParser(["Expr"]).parse({"components": {"responses": {}}})

    def test_root_not_a_mapping(self):
        with pytest.raises(SchemaParseError, match="document root"):
            SchemaParser(["Expr"]).parse(["components"])

    def test_only_prefixed_schemas_are_managed(self):
        spec = parse(
            {
                "ExprA": {"type": "string"},
                "Other": {"type": "string"},
                "Expression": {"type": "string"},
            }
        )
        assert spec.sorted_names() == ["ExprA", "Expression"]
        assert spec.unmanaged_schemas == frozenset()

    def test_unmanaged_schemas_are_not_parsed_strictly(self):
        spec = parse({"ExprA": {"type": "string"}, "Other": {"type": "integer", "format": "int64"}})
        assert spec.sorted_names() == ["ExprA"]


class TestReferenceClosure:
    """Unmanaged schemas referenced from managed ones are retained."""

    def test_test_document(self, document):
        spec = SchemaParser(["Aggregate", "Expr", "Filter", "RankBy"]).parse(document)
        assert spec.unmanaged_schemas == frozenset({"AttributeName", "Vector"})
        assert "Unused" not in spec.managed_schemas

    def test_transitive_references(self):
        spec = parse(
            {
                "ExprA": {"$ref": "#/components/schemas/B"},
                "B": {"type": "object", "properties": {"c": {"$ref": "#/components/schemas/C"}}},
                "C": {"anyOf": [{"$ref": "#/components/schemas/D"}]},
                "D": {"type": "string"},
                "E": {"$ref": "#/components/schemas/D"},
            }
        )
        assert spec.unmanaged_schemas == frozenset({"B", "C", "D"})

    def test_reference_through_managed_schema(self):
        spec = parse(
            {
                "ExprA": {"$ref": "#/components/schemas/ExprB"},
                "ExprB": {"type": "array", "items": {"$ref": "#/components/schemas/C"}},
                "C": {"type": "string"},
            }
        )
        assert spec.unmanaged_schemas == frozenset({"C"})

    def test_reference_cycle(self):
        spec = parse(
            {
                "ExprA": {"$ref": "#/components/schemas/B"},
                "B": {"type": "array", "items": {"$ref": "#/components/schemas/B"}},
            }
        )
        assert spec.unmanaged_schemas == frozenset({"B"})

    def test_unknown_reference(self):
        with pytest.raises(SchemaReferenceError, match="'Missing'"):
            parse({"ExprA": {"$ref": "#/components/schemas/Missing"}})

    def test_unknown_reference_from_unmanaged_schema(self):
        with pytest.raises(SchemaReferenceError, match="'Missing'"):
            parse(
                {
                    "ExprA": {"$ref": "#/components/schemas/B"},
                    "B": {"items": {"$ref": "#/components/schemas/Missing"}},
                }
            )


def test_strip_schema_ref_prefix():
    assert strip_schema_ref_prefix("#/components/schemas/Foo") == "Foo"
    with pytest.raises(SchemaReferenceError):
        strip_schema_ref_prefix("other.yaml#/Foo")


if __name__ == "__main__":
    pytest.main([__file__])
