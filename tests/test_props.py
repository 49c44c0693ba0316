"""Tests for attribute assembly of component invocations."""

from safemdx.diagnostics import Diagnostic
from safemdx.expressions import UNDEFINED, parse_expression
from safemdx.location import SourceLocation
from safemdx.nodes import AttributeValueExpression, JsxAttribute, JsxElement, JsxSpreadAttribute
from safemdx.props import PropsBuilder, export_value, spread_entries

LOC = SourceLocation(lineno=4, col_offset=1)


def _element(*attributes: JsxAttribute | JsxSpreadAttribute) -> JsxElement:
    return JsxElement(LOC, (), name="Card", attributes=attributes)


def _expr(source: str) -> AttributeValueExpression:
    return AttributeValueExpression(source=source)


def _build(element: JsxElement, **kwargs: object) -> tuple[dict, list[Diagnostic]]:
    diagnostics: list[Diagnostic] = []
    props = PropsBuilder(diagnostics.append, **kwargs).build(element)  # type: ignore[arg-type]
    return props, diagnostics


class TestLiteralAttributes:
    def test_strings_and_bare_attributes(self) -> None:
        props, diagnostics = _build(_element(JsxAttribute("title", "Hi"), JsxAttribute("open")))
        assert props == {"title": "Hi", "open": True}
        assert diagnostics == []

    def test_shortcut_sources_skip_the_evaluator(self) -> None:
        props, _ = _build(
            _element(
                JsxAttribute("a", _expr("true")),
                JsxAttribute("b", _expr(" false ")),
                JsxAttribute("c", _expr("null")),
                JsxAttribute("d", _expr("undefined")),
            )
        )
        assert props == {"a": True, "b": False, "c": None, "d": None}


class TestExpressionAttributes:
    def test_evaluated_value(self) -> None:
        props, diagnostics = _build(_element(JsxAttribute("items", _expr("[1, 2, 3]"))))
        assert props == {"items": [1, 2, 3]}
        assert diagnostics == []

    def test_pre_parsed_expression_is_used(self) -> None:
        value = AttributeValueExpression(source="ignored", expression=parse_expression("2 * 21"))
        props, _ = _build(_element(JsxAttribute("n", value)))
        assert props == {"n": 42}

    def test_undefined_becomes_none(self) -> None:
        props, _ = _build(_element(JsxAttribute("x", _expr("{a: undefined, b: [undefined]}"))))
        assert props == {"x": {"a": None, "b": [None]}}

    def test_failure_drops_only_that_attribute(self) -> None:
        props, diagnostics = _build(
            _element(
                JsxAttribute("title", "Hi"),
                JsxAttribute("value", _expr("Math.max(5,10)")),
                JsxAttribute("count", _expr("2")),
            )
        )
        assert props == {"title": "Hi", "count": 2}
        assert diagnostics == [
            Diagnostic(
                "Failed to evaluate expression attribute: value={Math.max(5,10)}. "
                "CallExpression is not supported",
                line=4,
            )
        ]

    def test_syntax_error_is_reported(self) -> None:
        props, diagnostics = _build(_element(JsxAttribute("x", _expr("1 +"))))
        assert props == {}
        assert len(diagnostics) == 1
        assert diagnostics[0].message.startswith("Failed to evaluate expression attribute: x={1 +}.")

    def test_evaluation_disabled(self) -> None:
        props, diagnostics = _build(
            _element(JsxAttribute("x", _expr("1 + 1")), JsxAttribute("y", _expr("true"))),
            evaluate_expressions=False,
        )
        assert props == {"y": True}
        assert diagnostics == [Diagnostic("Expressions in jsx prop not evaluated: (x={1 + 1})", line=4)]

    def test_jsx_value_goes_through_renderer(self) -> None:
        props, _ = _build(
            _element(JsxAttribute("icon", _expr("<Star />"))),
            jsx=lambda element: f"rendered {element.name}",
        )
        assert props == {"icon": "rendered Star"}

    def test_jsx_value_dropped_when_renderer_declines(self) -> None:
        props, diagnostics = _build(_element(JsxAttribute("icon", _expr("<Star />"))), jsx=lambda element: None)
        assert props == {}
        assert diagnostics == []


class TestSpreads:
    def test_spread_merges_in_order(self) -> None:
        props, diagnostics = _build(
            _element(
                JsxAttribute("a", "first"),
                JsxSpreadAttribute("...{a: 'spread', b: 2}"),
                JsxAttribute("b", "last"),
            )
        )
        assert props == {"a": "spread", "b": "last"}
        assert diagnostics == []

    def test_array_spread_uses_indices(self) -> None:
        props, _ = _build(_element(JsxSpreadAttribute("...['x', 'y']")))
        assert props == {"0": "x", "1": "y"}

    def test_failed_spread_reports_collapsed_snippet(self) -> None:
        props, diagnostics = _build(_element(JsxSpreadAttribute("...{\n  a: f()\n}")))
        assert props == {}
        assert diagnostics == [
            Diagnostic(
                "Failed to evaluate expression attribute: ...{ a: f() }. CallExpression is not supported",
                line=4,
            )
        ]

    def test_spread_with_evaluation_disabled(self) -> None:
        _, diagnostics = _build(_element(JsxSpreadAttribute("...{a: 1}")), evaluate_expressions=False)
        assert diagnostics == [Diagnostic("Expressions in jsx props are not supported (...{a: 1})", line=4)]


class TestHelpers:
    def test_export_value(self) -> None:
        assert export_value(UNDEFINED) is None
        assert export_value([1, {"a": UNDEFINED}]) == [1, {"a": None}]

    def test_spread_entries(self) -> None:
        assert spread_entries({"a": 1}) == [("a", 1)]
        assert spread_entries("ab") == [("0", "a"), ("1", "b")]
        assert spread_entries(5) == []
        assert spread_entries(None) == []

    def test_collect_keeps_duplicates(self) -> None:
        diagnostics: list[Diagnostic] = []
        pairs = PropsBuilder(diagnostics.append).collect(
            _element(JsxAttribute("a", "1"), JsxAttribute("a", "2"))
        )
        assert pairs == [("a", "1"), ("a", "2")]
