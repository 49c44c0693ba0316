"""Tests for converting ESTree dictionaries into expression nodes."""

import pytest

from safemdx.errors import EvaluationError
from safemdx.expressions import UNDEFINED, evaluate, from_estree, import_declarations, spread_argument
from safemdx.expressions.nodes import (
    ImportDefaultSpecifier,
    ImportSpecifier,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXText,
    Literal,
    ObjectExpression,
    OpaqueExpression,
)


def _literal(value: object) -> dict:
    return {"type": "Literal", "value": value, "raw": repr(value)}


def _program(expression: dict) -> dict:
    return {
        "type": "Program",
        "sourceType": "module",
        "body": [{"type": "ExpressionStatement", "expression": expression}],
    }


class TestExpressions:
    def test_program_unwraps_single_statement(self) -> None:
        assert from_estree(_program(_literal(3))) == Literal(value=3, raw="3")

    def test_program_with_several_statements_is_opaque(self) -> None:
        program = _program(_literal(1))
        program["body"] = program["body"] * 2
        assert from_estree(program) == OpaqueExpression("Program")

    def test_binary_evaluates(self) -> None:
        node = from_estree(
            {"type": "BinaryExpression", "operator": "*", "left": _literal(6), "right": _literal(7)}
        )
        assert evaluate(node) == 42

    def test_object_with_spread(self) -> None:
        node = from_estree(
            {
                "type": "ObjectExpression",
                "properties": [
                    {
                        "type": "Property",
                        "kind": "init",
                        "key": {"type": "Identifier", "name": "a"},
                        "value": _literal(1),
                        "computed": False,
                        "shorthand": False,
                        "method": False,
                    },
                    {"type": "SpreadElement", "argument": {"type": "ObjectExpression", "properties": []}},
                ],
            }
        )
        assert isinstance(node, ObjectExpression)
        assert evaluate(node) == {"a": 1}

    def test_chain_expression_is_transparent(self) -> None:
        node = from_estree(
            {
                "type": "ChainExpression",
                "expression": {
                    "type": "MemberExpression",
                    "object": _literal(None),
                    "property": {"type": "Identifier", "name": "x"},
                    "computed": False,
                    "optional": True,
                },
            }
        )
        assert evaluate(node) is UNDEFINED

    @pytest.mark.parametrize(
        ("estree", "kind"),
        [
            ({"type": "NewExpression", "callee": {"type": "Identifier", "name": "Date"}}, "NewExpression"),
            ({"type": "Literal", "value": None, "raw": "/a/", "regex": {"pattern": "a", "flags": ""}}, "RegExpLiteral"),
            ({"type": "AssignmentExpression", "operator": "="}, "AssignmentExpression"),
        ],
    )
    def test_unknown_types_keep_their_name(self, estree: dict, kind: str) -> None:
        node = from_estree(estree)
        assert node == OpaqueExpression(kind)
        with pytest.raises(EvaluationError, match=f"{kind} is not supported"):
            evaluate(node)


class TestSpreadAndImports:
    def test_spread_argument_unwraps_object_program(self) -> None:
        argument = {"type": "ObjectExpression", "properties": []}
        program = _program(
            {"type": "ObjectExpression", "properties": [{"type": "SpreadElement", "argument": argument}]}
        )
        assert spread_argument(program) == ObjectExpression(properties=())

    def test_import_declarations(self) -> None:
        program = {
            "type": "Program",
            "body": [
                {
                    "type": "ImportDeclaration",
                    "source": {"type": "Literal", "value": "https://esm.sh/ui"},
                    "specifiers": [
                        {"type": "ImportDefaultSpecifier", "local": {"type": "Identifier", "name": "Ui"}},
                        {
                            "type": "ImportSpecifier",
                            "local": {"type": "Identifier", "name": "Tile"},
                            "imported": {"type": "Identifier", "name": "Card"},
                        },
                    ],
                }
            ],
        }
        (declaration,) = import_declarations(program) or ()
        assert declaration.source == "https://esm.sh/ui"
        assert declaration.specifiers == (
            ImportDefaultSpecifier(local="Ui"),
            ImportSpecifier(local="Tile", imported="Card"),
        )

    def test_non_import_statement_yields_none(self) -> None:
        assert import_declarations(_program(_literal(1))) is None


class TestJsx:
    def test_element_with_attributes_and_children(self) -> None:
        node = from_estree(
            {
                "type": "JSXElement",
                "openingElement": {
                    "type": "JSXOpeningElement",
                    "name": {"type": "JSXIdentifier", "name": "Card"},
                    "attributes": [
                        {
                            "type": "JSXAttribute",
                            "name": {"type": "JSXIdentifier", "name": "title"},
                            "value": {"type": "Literal", "value": "Hi", "raw": '"Hi"'},
                        },
                        {
                            "type": "JSXAttribute",
                            "name": {"type": "JSXIdentifier", "name": "count"},
                            "value": {"type": "JSXExpressionContainer", "expression": _literal(2)},
                        },
                    ],
                    "selfClosing": False,
                },
                "children": [
                    {"type": "JSXText", "value": "body"},
                    {"type": "JSXExpressionContainer", "expression": {"type": "JSXEmptyExpression"}},
                ],
            }
        )
        assert isinstance(node, JSXElement)
        assert node.name == "Card"
        assert node.attributes[0] == JSXAttribute(name="title", value=Literal(value="Hi", raw='"Hi"'))
        assert node.attributes[1] == JSXAttribute(
            name="count", value=JSXExpressionContainer(expression=Literal(value=2, raw="2"))
        )
        assert node.children == (JSXText(value="body"), JSXExpressionContainer(expression=None))

    def test_member_name(self) -> None:
        node = from_estree(
            {
                "type": "JSXElement",
                "openingElement": {
                    "name": {
                        "type": "JSXMemberExpression",
                        "object": {"type": "JSXIdentifier", "name": "ui"},
                        "property": {"type": "JSXIdentifier", "name": "Card"},
                    },
                    "attributes": [],
                    "selfClosing": True,
                },
                "children": [],
            }
        )
        assert isinstance(node, JSXElement)
        assert node.name == "ui.Card"
        assert node.self_closing

    def test_fragment_has_no_name(self) -> None:
        node = from_estree({"type": "JSXFragment", "children": []})
        assert isinstance(node, JSXElement)
        assert node.name is None
