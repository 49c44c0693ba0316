"""Tests for the restricted expression parser."""

import pytest

from safemdx.errors import ExpressionSyntaxError
from safemdx.expressions import parse_expression, parse_module, parse_spread
from safemdx.expressions.nodes import (
    ArrayExpression,
    ArrowFunctionExpression,
    BinaryExpression,
    CallExpression,
    ConditionalExpression,
    Identifier,
    ImportDefaultSpecifier,
    ImportNamespaceSpecifier,
    ImportSpecifier,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXText,
    Literal,
    LogicalExpression,
    MemberExpression,
    ObjectExpression,
    Property,
    SpreadElement,
    TemplateLiteral,
    UnaryExpression,
)


class TestLiterals:
    def test_integer(self) -> None:
        assert parse_expression("42") == Literal(value=42, raw="42")

    def test_float(self) -> None:
        node = parse_expression("1.5")
        assert isinstance(node, Literal)
        assert node.value == 1.5

    def test_hex(self) -> None:
        node = parse_expression("0x10")
        assert isinstance(node, Literal)
        assert node.value == 16

    def test_strings_with_escapes(self) -> None:
        node = parse_expression(r"'it\'s'")
        assert isinstance(node, Literal)
        assert node.value == "it's"

    def test_keywords_are_literals(self) -> None:
        assert parse_expression("true") == Literal(value=True, raw="true")
        assert parse_expression("null") == Literal(value=None, raw="null")

    def test_undefined_is_identifier(self) -> None:
        assert parse_expression("undefined") == Identifier("undefined")

    def test_template(self) -> None:
        node = parse_expression("`a${1}b`")
        assert isinstance(node, TemplateLiteral)
        assert [q.cooked for q in node.quasis] == ["a", "b"]
        assert node.expressions == (Literal(value=1, raw="1"),)


class TestOperators:
    def test_precedence(self) -> None:
        node = parse_expression("1 + 2 * 3")
        assert isinstance(node, BinaryExpression)
        assert node.operator == "+"
        assert isinstance(node.right, BinaryExpression)
        assert node.right.operator == "*"

    def test_exponent_is_right_associative(self) -> None:
        node = parse_expression("2 ** 3 ** 2")
        assert isinstance(node, BinaryExpression)
        assert isinstance(node.right, BinaryExpression)

    def test_logical(self) -> None:
        node = parse_expression("a ?? b")
        assert isinstance(node, LogicalExpression)
        assert node.operator == "??"

    def test_unary_keywords(self) -> None:
        node = parse_expression("typeof 1")
        assert isinstance(node, UnaryExpression)
        assert node.operator == "typeof"

    def test_conditional(self) -> None:
        assert isinstance(parse_expression("1 ? 2 : 3"), ConditionalExpression)

    def test_parenthesized(self) -> None:
        node = parse_expression("(1 + 2) * 3")
        assert isinstance(node, BinaryExpression)
        assert node.operator == "*"


class TestCollections:
    def test_array_with_hole_and_spread(self) -> None:
        node = parse_expression("[1, , ...x]")
        assert isinstance(node, ArrayExpression)
        assert node.elements[1] is None
        assert isinstance(node.elements[2], SpreadElement)

    def test_object_forms(self) -> None:
        node = parse_expression("{a: 1, 'b': 2, [c]: 3, d, ...e}")
        assert isinstance(node, ObjectExpression)
        first, second, third, fourth, fifth = node.properties
        assert isinstance(first, Property) and first.key == Identifier("a")
        assert isinstance(second, Property) and isinstance(second.key, Literal)
        assert isinstance(third, Property) and third.computed
        assert isinstance(fourth, Property) and fourth.shorthand
        assert isinstance(fifth, SpreadElement)

    def test_member_and_call(self) -> None:
        node = parse_expression("Math.max(5, 10)")
        assert isinstance(node, CallExpression)
        assert isinstance(node.callee, MemberExpression)
        assert len(node.arguments) == 2

    def test_optional_chain(self) -> None:
        node = parse_expression("a?.b")
        assert isinstance(node, MemberExpression)
        assert node.optional


class TestArrowsAndJsx:
    def test_arrow_with_block_body(self) -> None:
        node = parse_expression("(event) => { go(event) }")
        assert node == ArrowFunctionExpression(params=("event",), body="go(event)")

    def test_arrow_with_expression_body(self) -> None:
        node = parse_expression("x => x + 1")
        assert isinstance(node, ArrowFunctionExpression)
        assert node.body == "return x + 1"

    def test_jsx_element(self) -> None:
        node = parse_expression('<Card title="Hi" count={2} hidden>text<Icon /></Card>')
        assert isinstance(node, JSXElement)
        assert node.name == "Card"
        title, count, hidden = node.attributes
        assert isinstance(title, JSXAttribute) and title.value == Literal(value="Hi", raw='"Hi"')
        assert isinstance(count, JSXAttribute) and isinstance(count.value, JSXExpressionContainer)
        assert isinstance(hidden, JSXAttribute) and hidden.value is None
        assert node.children[0] == JSXText(value="text")
        assert isinstance(node.children[1], JSXElement)

    def test_jsx_fragment(self) -> None:
        node = parse_expression("<>hi</>")
        assert isinstance(node, JSXElement)
        assert node.name is None

    def test_mismatched_closing_tag(self) -> None:
        with pytest.raises(ExpressionSyntaxError):
            parse_expression("<A>x</B>")


class TestRejections:
    @pytest.mark.parametrize(
        "source",
        ["a = 1", "x++", "new Foo()", "function () {}", "1 +", "{a: 1", "tag`x`", ")"],
    )
    def test_syntax_errors(self, source: str) -> None:
        with pytest.raises(ExpressionSyntaxError):
            parse_expression(source)

    def test_error_carries_offset(self) -> None:
        with pytest.raises(ExpressionSyntaxError) as info:
            parse_expression("1 + )")
        assert info.value.offset == 4


class TestSpread:
    def test_spread_argument(self) -> None:
        node = parse_spread("...{a: 1}")
        assert isinstance(node, ObjectExpression)

    def test_spread_requires_dots(self) -> None:
        with pytest.raises(ExpressionSyntaxError):
            parse_spread("{a: 1}")


class TestModule:
    def test_default_and_named_imports(self) -> None:
        (declaration,) = parse_module('import Btn, { Card as Tile, Note } from "https://esm.sh/ui"')
        assert declaration.source == "https://esm.sh/ui"
        assert declaration.specifiers == (
            ImportDefaultSpecifier(local="Btn"),
            ImportSpecifier(local="Tile", imported="Card"),
            ImportSpecifier(local="Note", imported="Note"),
        )

    def test_namespace_import(self) -> None:
        (declaration,) = parse_module("import * as ui from 'https://esm.sh/ui';")
        assert declaration.specifiers == (ImportNamespaceSpecifier(local="ui"),)

    def test_several_statements(self) -> None:
        declarations = parse_module("import A from 'https://a.dev'\nimport B from 'https://b.dev'")
        assert [d.source for d in declarations] == ["https://a.dev", "https://b.dev"]

    def test_non_import_statement(self) -> None:
        with pytest.raises(ExpressionSyntaxError):
            parse_module("export const x = 1")
