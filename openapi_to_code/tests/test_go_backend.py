"""
Tests for the Go backend.
"""

from __future__ import annotations

import pytest
from conftest import generate, make_document

from openapi_to_code.pipeline import CodeGeneratorConfig, PipelineGenerator
from openapi_to_code.pipeline.errors import RenderError, SchemaNamingError, format_error_chain
from openapi_to_code.pipeline.writer import validate_brackets


@pytest.fixture
def go_code(document):
    return generate(document, "go")


class TestGoDocument:
    """Rendering the sample document."""

    def test_header(self, go_code):
        assert go_code.startswith(
            "package turbopuffer\n"
            "\n"
            'import shimjson "github.com/turbopuffer/turbopuffer-go/internal/encoding/json"\n'
            "\n"
            "type AggregateFunction string\n"
        )

    def test_declarations_are_sorted(self, go_code):
        names = [
            "type AggregateFunction ",
            "type ExprScale ",
            "type ExprVector ",
            "type ExprWeight ",
            "type Filter ",
            "type FilterAttr ",
            "type FilterAttrEq ",
            "type FilterAttrInRange ",
            "type FilterNot ",
            "type RankByText ",
        ]
        positions = [go_code.index(name) for name in names]
        assert positions == sorted(positions)

    def test_unmanaged_schemas_are_not_rendered(self, go_code):
        assert "type AttributeName" not in go_code
        assert "type Vector" not in go_code
        assert "Unused" not in go_code

    def test_enum(self, go_code):
        expected = (
            "type AggregateFunction string\n"
            "\n"
            "const (\n"
            '\tAggregateFunctionCount AggregateFunction = "Count"\n'
            '\tAggregateFunctionTotal AggregateFunction = "Sum"\n'
            ")\n"
        )
        assert expected in go_code

    def test_aliases(self, go_code):
        assert "type ExprScale float32\n" in go_code
        assert "type ExprWeight float64\n" in go_code
        assert "type ExprVector Vector\n" in go_code

    def test_sealed_union_with_description(self, go_code):
        expected = (
            "// A filter expression.\n"
            "//\n"
            "// Either a negation or an attribute comparison.\n"
            "type Filter interface {\n"
            "\tsealed_Filter()\n"
            "}\n"
            "\n"
            "func (v FilterNot) sealed_Filter() {}\n"
            "func (v FilterAttrEq) sealed_Filter() {}\n"
            "func (v FilterAttrInRange) sealed_Filter() {}\n"
        )
        assert expected in go_code

    def test_lifted_union(self, go_code):
        expected = (
            "type FilterAttr interface {\n"
            "\tsealed_FilterAttr()\n"
            "}\n"
            "\n"
            "func (v FilterAttrEq) sealed_FilterAttr() {}\n"
            "func (v FilterAttrInRange) sealed_FilterAttr() {}\n"
        )
        assert expected in go_code
        # The flagged ordering is dropped rather than suffixed
        assert "FilterAttrEq2" not in go_code

    def test_tuple(self, go_code):
        expected = (
            "type FilterAttrEq struct {\n"
            "\tattr AttributeName\n"
            "\tf2 any\n"
            "}\n"
            "\n"
            "func NewFilterAttrEq(\n"
            "\tattr AttributeName,\n"
            "\tf2 any,\n"
            ") FilterAttrEq {\n"
            "\treturn FilterAttrEq{\n"
            "\t\tattr: attr,\n"
            "\t\tf2: f2,\n"
            "\t}\n"
            "}\n"
            "\n"
            "func (v FilterAttrEq) MarshalJSON() ([]byte, error) {\n"
            "\treturn shimjson.Marshal([]any{\n"
            "\t\tv.attr,\n"
            '\t\t"Eq",\n'
            "\t\tv.f2,\n"
            "\t})\n"
            "}\n"
        )
        assert expected in go_code

    def test_tuple_with_flattened_range(self, go_code):
        expected = (
            "func (v FilterAttrInRange) MarshalJSON() ([]byte, error) {\n"
            "\treturn shimjson.Marshal([]any{\n"
            "\t\tv.attr,\n"
            '\t\t"In",\n'
            "\t\t[]any{\n"
            "\t\t\tv.lo,\n"
            "\t\t\tv.hi,\n"
            "\t\t},\n"
            "\t})\n"
            "}\n"
        )
        assert expected in go_code
        assert "func NewFilterAttrInRange(\n\tattr AttributeName,\n\tlo float64,\n\thi float64,\n)" in go_code

    def test_wrapper(self, go_code):
        expected = (
            "// Negates a filter.\n"
            "type FilterNot struct {\n"
            "\tNot Filter\n"
            "}\n"
            "\n"
            "func NewFilterNot(\n"
            "\tnot Filter,\n"
            ") FilterNot {\n"
            "\treturn FilterNot{\n"
            "\t\tNot: not,\n"
            "\t}\n"
            "}\n"
            "\n"
            "func (v FilterNot) MarshalJSON() ([]byte, error) {\n"
            "\treturn shimjson.Marshal(map[string]any{\n"
            '\t\t"$not": v.Not,\n'
            "\t})\n"
            "}\n"
        )
        assert expected in go_code

    def test_wrapper_with_list(self, go_code):
        assert "type RankByText struct {\n\tRankBy []string\n}" in go_code
        assert "func NewRankByText(\n\trankBy []string,\n)" in go_code
        assert '\t\t"rank_by": v.RankBy,\n' in go_code

    def test_balanced(self, go_code):
        validate_brackets(go_code)


class TestGoRendering:
    def test_enum_member_names(self):
        code = generate(make_document({"ExprMode": {"anyOf": [{"const": "a"}, {"const": "b"}, {"const": "c"}]}}), "go")
        assert '\tExprModeA ExprMode = "a"\n' in code
        assert '\tExprModeB ExprMode = "b"\n' in code
        assert '\tExprModeC ExprMode = "c"\n' in code

    def test_enum_member_collides_with_schema(self):
        document = make_document(
            {
                "ExprMode": {"anyOf": [{"const": "A"}]},
                "ExprModeA": {"type": "string"},
            }
        )
        with pytest.raises(RenderError) as excinfo:
            generate(document, "go")
        assert isinstance(excinfo.value.__cause__, SchemaNamingError)

    def test_number_widths(self):
        document = make_document(
            {
                "Expr32": {"type": "number", "x-turbopuffer-width": 32},
                "Expr64": {"type": "number", "x-turbopuffer-width": 64},
                "ExprDefault": {"type": "number"},
            }
        )
        code = generate(document, "go")
        assert "type Expr32 float32\n" in code
        assert "type Expr64 float64\n" in code
        assert "type ExprDefault float64\n" in code

    def test_unsupported_width(self):
        document = make_document({"ExprHalf": {"type": "number", "x-turbopuffer-width": 16}})
        with pytest.raises(RenderError) as excinfo:
            generate(document, "go")
        assert format_error_chain(excinfo.value) == (
            "failed to render schema 'ExprHalf': unsupported number width: 16"
        )

    def test_no_serializer_import_without_structs(self):
        code = generate(make_document({"ExprName": {"type": "string"}}), "go")
        assert code == "package turbopuffer\n\ntype ExprName string\n"

    def test_parameter_names_differing_only_in_case(self):
        document = make_document(
            {
                "ExprPair": {
                    "type": "array",
                    "additionalItems": False,
                    "prefixItems": [{"type": "string", "title": "Value"}, {"type": "string", "title": "value"}],
                }
            }
        )
        with pytest.raises(RenderError) as excinfo:
            generate(document, "go")
        assert isinstance(excinfo.value.__cause__, SchemaNamingError)
        assert format_error_chain(excinfo.value) == (
            "failed to render schema 'ExprPair': duplicate tuple parameter name: value"
        )

    def test_member_named_like_serializer_is_escaped(self):
        document = make_document(
            {
                "ExprPair": {
                    "type": "array",
                    "additionalItems": False,
                    "prefixItems": [{"const": "x"}, {"type": "string", "title": "MarshalJSON"}],
                },
                "ExprWrap": {
                    "type": "object",
                    "properties": {"marshal_j_s_o_n": {"type": "string"}},
                    "required": ["marshal_j_s_o_n"],
                },
            }
        )
        code = generate(document, "go")
        assert "type ExprPair struct {\n\tMarshalJSON_ string\n}" in code
        assert "\t\tv.MarshalJSON_,\n" in code
        assert "type ExprWrap struct {\n\tMarshalJSON_ string\n}" in code
        validate_brackets(code)

    def test_keyword_members_are_escaped(self):
        document = make_document(
            {
                "ExprTyped": {
                    "type": "object",
                    "properties": {"type": {"type": "string"}},
                    "required": ["type"],
                },
                "ExprPair": {
                    "type": "array",
                    "additionalItems": False,
                    "prefixItems": [{"type": "string", "title": "func"}],
                },
            }
        )
        code = generate(document, "go")
        # Exported field names cannot collide, parameter names can
        assert "\tType string\n" in code
        assert "\ttype_ string,\n" in code
        assert "\tfunc_ string\n" in code
        assert "\t\tv.func_,\n" in code

    def test_generation_comment(self):
        config = CodeGeneratorConfig(go_package="models")
        generator = PipelineGenerator(
            make_document({"ExprName": {"type": "string"}}), config, "go", "openapi_to_code go"
        )
        assert generator.generate().startswith(
            "// Code generated by openapi_to_code. DO NOT EDIT.\n"
            "// Command: openapi_to_code go\n"
            "\n"
            "package models\n"
        )

    def test_custom_json_import(self, document):
        code = generate(document, "go", go_json_import="encoding/json")
        assert 'import shimjson "encoding/json"\n' in code

    def test_conflict_policy_override(self, document):
        code = generate(document, "go", conflict_policy="append_suffix")
        assert "func (v FilterAttrEq2) sealed_FilterAttr() {}\n" in code
        assert "func NewFilterAttrEq2(\n\tattr AttributeName,\n\tf2 any,\n)" in code


if __name__ == "__main__":
    pytest.main([__file__])
