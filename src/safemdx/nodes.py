"""Typed document AST nodes for safemdx.

The node set mirrors mdast plus the MDX extensions (JSX elements, inline and
flow expressions, ESM imports). All nodes are frozen dataclasses with slots,
so rewrites such as the content-model pass produce new trees and the input
document is never mutated.

Node Hierarchy:
Node (base)
├── Parent (nodes with children)
│   ├── Root
│   ├── Heading, Paragraph, BlockQuote
│   ├── List, ListItem
│   ├── Table, TableRow, TableCell
│   ├── FootnoteDefinition
│   ├── Emphasis, Strong, Delete
│   ├── Link, LinkReference
│   └── JsxElement
└── Leaf
    ├── Text, InlineCode, Code, Html
    ├── Image, ImageReference, Break, ThematicBreak
    ├── Definition, FootnoteReference, FrontMatter
    ├── EsmImport, MdxFlowExpression, MdxTextExpression
    └── UnknownNode

Every node kind has a ``kind`` matching the mdast ``type`` string, which is
what the serializer reads and writes and what error messages cite.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Literal

from safemdx.expressions.nodes import Expression, ImportDeclaration
from safemdx.location import SourceLocation

EMPTY_PROPERTIES: Mapping[str, Any] = MappingProxyType({})


class RenderMode(Enum):
    """Whether a component invocation sits in running text or in flow."""

    INLINE = "inline"
    BLOCK = "block"


# =============================================================================
# Base Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all document nodes.

    ``properties`` holds extra element properties supplied by upstream
    plugins (mdast ``data.hProperties``); the walker merges them into the
    props of the element it produces.

    """

    kind: ClassVar[str] = "node"

    location: SourceLocation
    properties: Mapping[str, Any] = field(default=EMPTY_PROPERTIES, kw_only=True, hash=False)


@dataclass(frozen=True, slots=True)
class Parent(Node):
    """Node with an ordered sequence of children."""

    children: tuple[Node, ...]


# =============================================================================
# Flow Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Root(Parent):
    """Document root."""

    kind: ClassVar[str] = "root"


@dataclass(frozen=True, slots=True)
class Heading(Parent):
    """Heading.

    Markdown: ## Title
    Element: <h2>Title</h2>

    """

    kind: ClassVar[str] = "heading"

    depth: int = 1


@dataclass(frozen=True, slots=True)
class Paragraph(Parent):
    kind: ClassVar[str] = "paragraph"


@dataclass(frozen=True, slots=True)
class BlockQuote(Parent):
    kind: ClassVar[str] = "blockquote"


@dataclass(frozen=True, slots=True)
class List(Parent):
    """Ordered or bullet list. ``start`` only applies to ordered lists."""

    kind: ClassVar[str] = "list"

    ordered: bool = False
    start: int | None = None
    spread: bool = False


@dataclass(frozen=True, slots=True)
class ListItem(Parent):
    """List item. ``checked`` is None for plain items, a bool for task items."""

    kind: ClassVar[str] = "listItem"

    checked: bool | None = None
    spread: bool = False


@dataclass(frozen=True, slots=True)
class Table(Parent):
    """GFM table. The first row is the header row."""

    kind: ClassVar[str] = "table"

    align: tuple[Literal["left", "center", "right"] | None, ...] = ()


@dataclass(frozen=True, slots=True)
class TableRow(Parent):
    kind: ClassVar[str] = "tableRow"


@dataclass(frozen=True, slots=True)
class TableCell(Parent):
    kind: ClassVar[str] = "tableCell"


@dataclass(frozen=True, slots=True)
class FootnoteDefinition(Parent):
    kind: ClassVar[str] = "footnoteDefinition"

    identifier: str = ""
    label: str | None = None


@dataclass(frozen=True, slots=True)
class Code(Node):
    """Fenced or indented code block.

    Markdown: ```python\\nprint(1)\\n```
    Element: <pre><code className="language-python">print(1)</code></pre>

    """

    kind: ClassVar[str] = "code"

    value: str
    lang: str | None = None
    meta: str | None = None


@dataclass(frozen=True, slots=True)
class ThematicBreak(Node):
    kind: ClassVar[str] = "thematicBreak"


@dataclass(frozen=True, slots=True)
class Html(Node):
    """Raw markup fragment, normalized into components at render time."""

    kind: ClassVar[str] = "html"

    value: str


@dataclass(frozen=True, slots=True)
class Definition(Node):
    """Link reference definition: ``[id]: url "title"``."""

    kind: ClassVar[str] = "definition"

    identifier: str
    url: str
    label: str | None = None
    title: str | None = None


@dataclass(frozen=True, slots=True)
class FrontMatter(Node):
    """YAML or TOML front matter block."""

    value: str
    format: Literal["yaml", "toml"] = "yaml"

    @property
    def kind(self) -> str:  # type: ignore[override]
        return self.format


@dataclass(frozen=True, slots=True)
class EsmImport(Node):
    """Module statements block (``import X from "..."``).

    ``declarations`` is None when the upstream parser attached no program;
    the import validator then parses ``value`` itself.

    """

    kind: ClassVar[str] = "mdxjsEsm"

    value: str
    declarations: tuple[ImportDeclaration, ...] | None = None


@dataclass(frozen=True, slots=True)
class MdxFlowExpression(Node):
    """Expression on its own line: ``{1 + 1}``."""

    kind: ClassVar[str] = "mdxFlowExpression"

    value: str
    expression: Expression | None = None


# =============================================================================
# Phrasing Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    kind: ClassVar[str] = "text"

    value: str


@dataclass(frozen=True, slots=True)
class Emphasis(Parent):
    kind: ClassVar[str] = "emphasis"


@dataclass(frozen=True, slots=True)
class Strong(Parent):
    kind: ClassVar[str] = "strong"


@dataclass(frozen=True, slots=True)
class Delete(Parent):
    """Strikethrough: ``~~text~~``."""

    kind: ClassVar[str] = "delete"


@dataclass(frozen=True, slots=True)
class Link(Parent):
    kind: ClassVar[str] = "link"

    url: str = ""
    title: str | None = None


@dataclass(frozen=True, slots=True)
class LinkReference(Parent):
    """Reference-style link: ``[text][id]``, resolved against definitions."""

    kind: ClassVar[str] = "linkReference"

    identifier: str = ""
    label: str | None = None
    reference_type: Literal["shortcut", "collapsed", "full"] = "full"


@dataclass(frozen=True, slots=True)
class Image(Node):
    kind: ClassVar[str] = "image"

    url: str
    alt: str | None = None
    title: str | None = None


@dataclass(frozen=True, slots=True)
class ImageReference(Node):
    kind: ClassVar[str] = "imageReference"

    identifier: str
    alt: str | None = None
    label: str | None = None
    reference_type: Literal["shortcut", "collapsed", "full"] = "full"


@dataclass(frozen=True, slots=True)
class InlineCode(Node):
    kind: ClassVar[str] = "inlineCode"

    value: str


@dataclass(frozen=True, slots=True)
class Break(Node):
    """Hard line break."""

    kind: ClassVar[str] = "break"


@dataclass(frozen=True, slots=True)
class FootnoteReference(Node):
    kind: ClassVar[str] = "footnoteReference"

    identifier: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class MdxTextExpression(Node):
    """Expression inside running text: ``a {1 + 1} b``."""

    kind: ClassVar[str] = "mdxTextExpression"

    value: str
    expression: Expression | None = None


# =============================================================================
# Component Invocations
# =============================================================================


@dataclass(frozen=True, slots=True)
class AttributeValueExpression:
    """Attribute value given as an expression: ``name={source}``.

    ``expression`` is the pre-parsed tree when the upstream parser supplied
    one; otherwise the evaluator parses ``source``.

    """

    source: str
    expression: Expression | None = None


@dataclass(frozen=True, slots=True)
class JsxAttribute:
    """Named attribute. A ``None`` value is a bare boolean attribute."""

    name: str
    value: str | int | float | AttributeValueExpression | None = None


@dataclass(frozen=True, slots=True)
class JsxSpreadAttribute:
    """Spread attribute ``{...source}``; ``source`` includes the dots."""

    source: str
    expression: Expression | None = None


type Attribute = JsxAttribute | JsxSpreadAttribute


@dataclass(frozen=True, slots=True)
class JsxElement(Parent):
    """Component invocation: ``<Name a="1">children</Name>``.

    ``name`` is None for fragments (``<>...</>``) and may be a dotted
    path (``Foo.Bar``). ``mode`` distinguishes text elements (inside running
    text) from flow elements (on their own lines).

    """

    name: str | None = None
    attributes: tuple[Attribute, ...] = ()
    mode: RenderMode = RenderMode.BLOCK

    @property
    def kind(self) -> str:  # type: ignore[override]
        return "mdxJsxTextElement" if self.mode is RenderMode.INLINE else "mdxJsxFlowElement"


@dataclass(frozen=True, slots=True)
class UnknownNode(Node):
    """Node of a kind safemdx does not handle, kept so it can be reported."""

    node_type: str
    raw: Mapping[str, Any] = field(default=EMPTY_PROPERTIES, hash=False)

    @property
    def kind(self) -> str:  # type: ignore[override]
        return self.node_type


# PEP 695 type aliases
type Phrasing = (
    Text
    | Emphasis
    | Strong
    | Delete
    | Html
    | Image
    | ImageReference
    | InlineCode
    | Link
    | LinkReference
    | Break
    | FootnoteReference
    | MdxTextExpression
    | JsxElement
)

type Flow = (
    Heading
    | Paragraph
    | BlockQuote
    | List
    | ListItem
    | Table
    | TableRow
    | TableCell
    | Code
    | ThematicBreak
    | Html
    | Definition
    | FootnoteDefinition
    | FrontMatter
    | EsmImport
    | MdxFlowExpression
    | JsxElement
)


def node_line(node: Node) -> int | None:
    """Source line of a node, None for synthetic nodes."""
    return node.location.lineno if node.location.known else None
