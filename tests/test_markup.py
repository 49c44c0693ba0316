"""Tests for raw markup normalization and HTML attribute conversion."""

import pytest

from safemdx.location import SourceLocation
from safemdx.markup import (
    MarkupOptions,
    camelize,
    convert_attribute,
    convert_attribute_name,
    event_handler_expression,
    html_tag_name_converter,
    parse_markup,
    parse_style,
)
from safemdx.markup.attributes import attribute_value
from safemdx.expressions.nodes import ArrowFunctionExpression, Identifier, ObjectExpression
from safemdx.nodes import AttributeValueExpression, JsxAttribute, JsxElement, Node, RenderMode, Text


def _element(nodes: list[Node], index: int = 0) -> JsxElement:
    node = nodes[index]
    assert isinstance(node, JsxElement)
    return node


class TestParseMarkup:
    def test_custom_tag_with_template_attribute(self) -> None:
        nodes = parse_markup('<page url="{{x}}">Test</page>')
        assert len(nodes) == 1
        page = _element(nodes)
        assert page.name == "page"
        assert page.attributes == (JsxAttribute("url", "{{x}}"),)
        assert page.children == (Text(SourceLocation.unknown(), value="Test"),)
        assert page.mode is RenderMode.INLINE

    def test_blank_input(self) -> None:
        assert parse_markup("") == []
        assert parse_markup("  \n ") == []

    def test_nested_elements_and_text(self) -> None:
        nodes = parse_markup("<p>Hello <b>world</b>!</p>")
        paragraph = _element(nodes)
        assert paragraph.name == "p"
        assert [getattr(child, "value", None) for child in paragraph.children] == ["Hello ", None, "!"]
        assert _element(list(paragraph.children), 1).name == "b"

    def test_comments_and_doctype_are_dropped(self) -> None:
        nodes = parse_markup("<!doctype html><!-- note --><br>")
        assert [_element(nodes).name] == ["br"]
        assert len(nodes) == 1

    def test_unmatched_closing_tag_is_ignored(self) -> None:
        assert parse_markup("text</div>") == [Text(SourceLocation.unknown(), value="text")]

    def test_unclosed_tag_keeps_following_content(self) -> None:
        element = _element(parse_markup("<em>open"))
        assert element.children == (Text(SourceLocation.unknown(), value="open"),)

    def test_tag_names_are_lowercased(self) -> None:
        assert _element(parse_markup("<DIV>x</DIV>")).name == "div"

    def test_location_is_applied(self) -> None:
        location = SourceLocation(lineno=7, col_offset=1)
        element = _element(parse_markup("<span>x</span>", MarkupOptions(location=location)))
        assert element.location == location
        assert element.children[0].location == location

    def test_empty_tag_name_splices_children(self) -> None:
        options = MarkupOptions(convert_tag_name=html_tag_name_converter)
        nodes = parse_markup("<widget><b>x</b> y</widget>", options)
        assert _element(nodes).name == "b"
        assert nodes[1] == Text(SourceLocation.unknown(), value=" y")

    def test_attribute_value_hook_sees_tag(self) -> None:
        seen: list[tuple[str, str, str]] = []

        def convert(name: str, value: str, tag_name: str) -> str:
            seen.append((name, value, tag_name))
            return value.upper()

        element = _element(parse_markup('<a href="x">y</a>', MarkupOptions(convert_attribute_value=convert)))
        assert seen == [("href", "x", "a")]
        assert element.attributes == (JsxAttribute("href", "X"),)

    def test_class_attribute_is_a_single_string(self) -> None:
        element = _element(parse_markup('<div class="a  b">x</div>'))
        assert element.attributes == (JsxAttribute("className", "a  b"),)


class TestTextParsing:
    def test_text_goes_through_document_parser(self) -> None:
        location = SourceLocation.unknown()

        def as_document(source: str) -> list[Node]:
            return [Text(location, value=f"md:{source}")]

        options = MarkupOptions(parse_as_document=as_document, text_to_markdown=str.strip)
        element = _element(parse_markup("<p> hi </p>", options))
        assert element.children == (Text(location, value="md:hi"),)

    def test_blank_text_skips_document_parser(self) -> None:
        def as_document(source: str) -> list[Node]:
            raise AssertionError("should not be called")

        nodes = parse_markup("<p>a</p> <p>b</p>", MarkupOptions(parse_as_document=lambda s: []))
        assert [getattr(n, "name", None) for n in nodes] == ["p", None, "p"]
        assert nodes[1] == Text(SourceLocation.unknown(), value=" ")
        parse_markup("<p> </p>", MarkupOptions(parse_as_document=as_document))

    def test_parser_failure_keeps_text(self) -> None:
        failures: list[tuple[Exception, str]] = []

        def broken(source: str) -> list[Node]:
            raise ValueError("bad")

        options = MarkupOptions(parse_as_document=broken, on_error=lambda exc, text: failures.append((exc, text)))
        element = _element(parse_markup("<p>keep me</p>", options))
        assert element.children == (Text(SourceLocation.unknown(), value="keep me"),)
        assert [text for _, text in failures] == ["keep me"]
        assert isinstance(failures[0][0], ValueError)


class TestAttributeNames:
    @pytest.mark.parametrize(
        ("html", "prop"),
        [
            ("class", "className"),
            ("for", "htmlFor"),
            ("onclick", "onClick"),
            ("tabindex", "tabIndex"),
            ("readonly", "readOnly"),
            ("viewbox", "viewBox"),
            ("stroke-width", "strokeWidth"),
            ("xlink:href", "xlinkHref"),
            ("data-id", "data-id"),
            ("aria-label", "aria-label"),
        ],
    )
    def test_conversion(self, html: str, prop: str) -> None:
        assert convert_attribute_name(html) == prop

    def test_camelize(self) -> None:
        assert camelize("font-size") == "fontSize"
        assert camelize("--brand-color") == "--brand-color"


class TestAttributeValues:
    def test_literal_boolean(self) -> None:
        attribute = convert_attribute("checked", "")
        assert isinstance(attribute.value, AttributeValueExpression)
        assert attribute.value.source == "true"
        assert attribute_value(attribute) is True
        assert attribute_value(convert_attribute("disabled", "disabled")) is True
        assert attribute_value(convert_attribute("hidden", "false")) is False

    def test_other_empty_attribute_is_bare(self) -> None:
        assert convert_attribute("download", "") == JsxAttribute("download", None)

    def test_numbers(self) -> None:
        assert attribute_value(convert_attribute("tabindex", "-1")) == -1
        assert attribute_value(convert_attribute("width", "1.5")) == 1.5
        assert convert_attribute("width", "100%") == JsxAttribute("width", "100%")

    def test_style(self) -> None:
        attribute = convert_attribute("style", "color: red; margin-top: 4px")
        assert isinstance(attribute.value, AttributeValueExpression)
        assert isinstance(attribute.value.expression, ObjectExpression)
        assert attribute.value.source == '{"color": "red", "marginTop": 4}'

    def test_style_without_declarations_stays_a_string(self) -> None:
        assert convert_attribute("style", "red") == JsxAttribute("style", "red")

    def test_parse_style(self) -> None:
        assert parse_style("color: red; font-size: 12px; line-height: 20px") == {
            "color": "red",
            "fontSize": 12,
            "lineHeight": "20px",
        }
        assert parse_style("-ms-transform: none; --gap: 2px; broken") == {"msTransform": "none", "--gap": "2px"}
        assert parse_style("width: 1.5px") == {"width": 1.5}


class TestEventHandlers:
    def test_bare_call_becomes_reference(self) -> None:
        value = event_handler_expression("toggle()")
        assert value == AttributeValueExpression(source="toggle", expression=Identifier("toggle"))

    def test_statements_are_wrapped(self) -> None:
        value = event_handler_expression("a(); b(1)")
        assert value.source == "(event) => { a(); b(1) }"
        assert value.expression == ArrowFunctionExpression(params=("event",), body="a(); b(1)")

    def test_unparseable_code_gets_placeholder(self) -> None:
        value = event_handler_expression("if (x) { y = 1 }")
        assert value.source == '() => { /* fix me: "if (x) { y = 1 }" */ }'

    def test_convert_attribute_uses_handler(self) -> None:
        attribute = convert_attribute("onclick", "go()")
        assert attribute.name == "onClick"
        assert attribute.value == AttributeValueExpression(source="go", expression=Identifier("go"))

    def test_blank_handler_is_bare(self) -> None:
        assert convert_attribute("onclick", "") == JsxAttribute("onClick", None)
