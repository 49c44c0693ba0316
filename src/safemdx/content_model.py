"""Content-model classification for component invocations.

A component invocation can be written inline (inside running text) or as a
block of its own, and upstream parsers decide based on source layout alone.
:func:`classify` rewrites every :class:`~safemdx.nodes.JsxElement` so its
render mode agrees with what it contains and where it sits:

1. a block-level tag name forces block mode
2. a child that is not phrasing content forces block mode
3. inside a phrasing container the element is inline
4. inside a flow container the element is block
5. anywhere else the existing mode is kept

Rules 1 and 2 are computed bottom-up (a child component counts as phrasing
unless it is itself forced to block), rules 3 and 4 top-down from the
parent's final mode. The pass is a pure rewrite: untouched subtrees are
returned as the same objects, and classifying a classified tree changes
nothing.

:func:`unravel_paragraphs` lifts components and expressions out of
paragraphs that contain nothing else, so that ``<Card />`` on its own line
is not wrapped in ``<p>``.

"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from safemdx.nodes import (
    JsxElement,
    MdxFlowExpression,
    MdxTextExpression,
    Node,
    Paragraph,
    Parent,
    RenderMode,
    Root,
    Text,
)
from safemdx.visitor import TransformResult, transform

# Parents that require phrasing children
PHRASING_CONTAINERS: frozenset[str] = frozenset(
    (
        "paragraph",
        "heading",
        "emphasis",
        "strong",
        "delete",
        "link",
        "linkReference",
        "tableCell",
        "mdxJsxTextElement",
    )
)

# Parents that expect flow children
FLOW_CONTAINERS: frozenset[str] = frozenset(
    ("root", "listItem", "blockquote", "footnoteDefinition", "mdxJsxFlowElement")
)

PHRASING_KINDS: frozenset[str] = frozenset(
    (
        "text",
        "emphasis",
        "strong",
        "delete",
        "html",
        "image",
        "imageReference",
        "inlineCode",
        "link",
        "linkReference",
        "break",
        "mdxJsxTextElement",
    )
)

# Compared against the lowercased component name
BLOCK_LEVEL_TAGS: frozenset[str] = frozenset(
    (
        "div",
        "p",
        "blockquote",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "ul",
        "ol",
        "li",
        "pre",
        "hr",
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "th",
        "td",
        "section",
        "article",
        "aside",
        "nav",
        "header",
        "footer",
        "main",
        "figure",
        "figcaption",
        # block-level custom components
        "callout",
        "columns",
        "column",
        "page",
        "database",
        "data-source",
        "audio",
        "video",
        "file",
        "pdf",
        "embed",
        "synced_block",
        "synced_block_reference",
        "meeting-notes",
        "summary",
        "notes",
        "transcript",
        "table_of_contents",
        "unknown",
        "image",
    )
)

_HTML_WHITESPACE = " \t\n\f\r"


def is_phrasing(node: Node) -> bool:
    """True for node kinds allowed inside phrasing containers."""
    return node.kind in PHRASING_KINDS


def has_block_tag(element: JsxElement) -> bool:
    return element.name is not None and element.name.lower() in BLOCK_LEVEL_TAGS


class _Classifier:
    __slots__ = ("_forced",)

    def __init__(self) -> None:
        self._forced: dict[int, bool] = {}

    def forced_block(self, element: JsxElement) -> bool:
        key = id(element)
        cached = self._forced.get(key)
        if cached is None:
            cached = has_block_tag(element) or any(
                self.forced_block(child) if isinstance(child, JsxElement) else not is_phrasing(child)
                for child in element.children
            )
            self._forced[key] = cached
        return cached

    def rewrite(self, node: Node, parent_kind: str | None) -> Node:
        if isinstance(node, JsxElement):
            if self.forced_block(node):
                mode = RenderMode.BLOCK
            elif parent_kind in PHRASING_CONTAINERS:
                mode = RenderMode.INLINE
            elif parent_kind in FLOW_CONTAINERS:
                mode = RenderMode.BLOCK
            else:
                mode = node.mode
            child_kind = "mdxJsxFlowElement" if mode is RenderMode.BLOCK else "mdxJsxTextElement"
            children = self.rewrite_all(node.children, child_kind)
            if mode is node.mode and children is node.children:
                return node
            return dataclasses.replace(node, mode=mode, children=children)

        if isinstance(node, Parent):
            children = self.rewrite_all(node.children, node.kind)
            if children is not node.children:
                return dataclasses.replace(node, children=children)
        return node

    def rewrite_all(self, nodes: tuple[Node, ...], parent_kind: str | None) -> tuple[Node, ...]:
        rewritten = tuple(self.rewrite(child, parent_kind) for child in nodes)
        if all(a is b for a, b in zip(rewritten, nodes, strict=True)):
            return nodes
        return rewritten


def classify(root: Root) -> Root:
    """Assign every component invocation a render mode consistent with its
    content and context. Returns a new tree; the input is not modified."""
    result = _Classifier().rewrite(root, None)
    assert isinstance(result, Root)
    return result


def classify_nodes(nodes: Sequence[Node], parent_kind: str | None) -> tuple[Node, ...]:
    """Classify nodes that are about to be placed under a parent of
    ``parent_kind`` (used for markup converted at render time)."""
    return _Classifier().rewrite_all(tuple(nodes), parent_kind)


def _is_blank(node: Node) -> bool:
    return isinstance(node, Text) and not node.value.strip(_HTML_WHITESPACE)


def _unravel(node: Node) -> TransformResult:
    if not isinstance(node, Paragraph):
        return node
    lifted = [
        child
        for child in node.children
        if (isinstance(child, JsxElement) and child.mode is RenderMode.INLINE)
        or isinstance(child, MdxTextExpression)
    ]
    if not lifted or not all(
        _is_blank(child) or any(child is item for item in lifted) for child in node.children
    ):
        return node

    replacement: list[Node] = []
    for child in lifted:
        if isinstance(child, JsxElement):
            replacement.append(dataclasses.replace(child, mode=RenderMode.BLOCK))
        else:
            assert isinstance(child, MdxTextExpression)
            replacement.append(
                MdxFlowExpression(
                    location=child.location,
                    value=child.value,
                    expression=child.expression,
                    properties=child.properties,
                )
            )
    return tuple(replacement)


def unravel_paragraphs(root: Root) -> Root:
    """Replace paragraphs holding only components, text expressions and
    whitespace with their (block-mode) contents."""
    return transform(root, _unravel)
