"""Tests for the AST visitor, transform and search utilities."""

import dataclasses

import pytest

from safemdx.location import SourceLocation
from safemdx.nodes import (
    Definition,
    Emphasis,
    Heading,
    Html,
    JsxElement,
    Node,
    Paragraph,
    RenderMode,
    Root,
    Text,
)
from safemdx.visitor import BaseVisitor, find_first, iter_breadth_first, transform, visit_method_name

LOC = SourceLocation(lineno=1, col_offset=0)


def _text(value: str) -> Text:
    return Text(location=LOC, value=value)


def _doc() -> Root:
    return Root(
        location=LOC,
        children=(
            Heading(location=LOC, children=(_text("Title"),), depth=1),
            Paragraph(
                location=LOC,
                children=(
                    _text("a "),
                    Emphasis(location=LOC, children=(_text("b"),)),
                    JsxElement(location=LOC, children=(), name="Badge", mode=RenderMode.INLINE),
                ),
            ),
            JsxElement(location=LOC, children=(Html(location=LOC, value="<i>x</i>"),), name="Card"),
        ),
    )


class TestVisitMethodName:
    @pytest.mark.parametrize(
        ("kind", "method"),
        [
            ("text", "visit_text"),
            ("listItem", "visit_list_item"),
            ("mdxJsxFlowElement", "visit_mdx_jsx_flow_element"),
            ("mdxjsEsm", "visit_mdxjs_esm"),
        ],
    )
    def test_snake_case(self, kind: str, method: str) -> None:
        assert visit_method_name(kind) == method


class TestBaseVisitor:
    def test_dispatch_by_kind(self) -> None:
        class Collector(BaseVisitor[None]):
            def __init__(self) -> None:
                self.flow: list[str] = []
                self.inline: list[str] = []
                self.texts: list[str] = []

            def visit_mdx_jsx_flow_element(self, node: JsxElement) -> None:
                self.flow.append(node.name or "")

            def visit_mdx_jsx_text_element(self, node: JsxElement) -> None:
                self.inline.append(node.name or "")

            def visit_text(self, node: Text) -> None:
                self.texts.append(node.value)

        collector = Collector()
        collector.visit(_doc())
        assert collector.flow == ["Card"]
        assert collector.inline == ["Badge"]
        assert collector.texts == ["Title", "a ", "b"]

    def test_visit_default(self) -> None:
        class KindCounter(BaseVisitor[None]):
            def __init__(self) -> None:
                self.kinds: list[str] = []

            def visit_default(self, node: Node) -> None:
                self.kinds.append(node.kind)

        counter = KindCounter()
        counter.visit(_doc())
        assert counter.kinds[:3] == ["root", "heading", "text"]
        assert "html" in counter.kinds


class TestTransform:
    def test_identity_returns_same_tree(self) -> None:
        doc = _doc()
        assert transform(doc, lambda node: node) is doc

    def test_remove_nodes(self) -> None:
        result = transform(_doc(), lambda node: None if isinstance(node, Html) else node)
        card = result.children[2]
        assert isinstance(card, JsxElement)
        assert card.children == ()

    def test_splice_nodes(self) -> None:
        def split(node: Node) -> Node | tuple[Node, ...]:
            if isinstance(node, Text) and node.value == "a ":
                return (_text("a"), _text(" "))
            return node

        paragraph = transform(_doc(), split).children[1]
        assert isinstance(paragraph, Paragraph)
        assert [getattr(c, "value", None) for c in paragraph.children[:2]] == ["a", " "]

    def test_bottom_up(self) -> None:
        seen: list[str] = []

        def record(node: Node) -> Node:
            seen.append(node.kind)
            return node

        transform(_doc(), record)
        assert seen.index("text") < seen.index("heading")
        assert seen[-1] == "root"

    def test_rewrite_keeps_untouched_siblings(self) -> None:
        doc = _doc()

        def bump(node: Node) -> Node:
            if isinstance(node, Heading):
                return dataclasses.replace(node, depth=2)
            return node

        result = transform(doc, bump)
        assert result.children[0].depth == 2  # type: ignore[attr-defined]
        assert result.children[1] is doc.children[1]
        assert doc.children[0].depth == 1  # type: ignore[attr-defined]

    def test_removing_root_fails(self) -> None:
        with pytest.raises(TypeError, match="cannot remove root"):
            transform(_doc(), lambda node: None if isinstance(node, Root) else node)


class TestSearch:
    def test_breadth_first_order(self) -> None:
        kinds = [node.kind for node in iter_breadth_first(_doc())]
        assert kinds[:4] == ["root", "heading", "paragraph", "mdxJsxFlowElement"]

    def test_find_first(self) -> None:
        doc = Root(
            location=LOC,
            children=(
                Paragraph(location=LOC, children=(_text("x"),)),
                Definition(location=LOC, identifier="a", url="https://one.dev"),
                Definition(location=LOC, identifier="a", url="https://two.dev"),
            ),
        )
        found = find_first(doc, Definition, lambda d: d.identifier == "a")
        assert found is not None
        assert found.url == "https://one.dev"
        assert find_first(doc, Definition, lambda d: d.identifier == "b") is None
