"""mdast serialization: JSON round-trip between mdast dicts and typed nodes.

Converts the JSON trees that remark / remark-mdx emit (``type``,
``position``, kind-specific fields, ``data.estree`` programs for
expressions) into typed, frozen safemdx nodes, and back.

Unknown ``type`` values are kept as :class:`~safemdx.nodes.UnknownNode`
so that the walker can report them instead of silently dropping content.

Example:
    from safemdx.serialization import from_json, to_json

    root = from_json(mdast_json)
    assert from_json(to_json(root)) == root

Thread Safety:
    All functions are pure, safe to call from any thread.

"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from safemdx.expressions import from_estree, import_declarations, spread_argument
from safemdx.expressions.nodes import Expression
from safemdx.location import SourceLocation
from safemdx.nodes import (
    EMPTY_PROPERTIES,
    Attribute,
    AttributeValueExpression,
    BlockQuote,
    Break,
    Code,
    Definition,
    Delete,
    Emphasis,
    EsmImport,
    FootnoteDefinition,
    FootnoteReference,
    FrontMatter,
    Heading,
    Html,
    Image,
    ImageReference,
    InlineCode,
    JsxAttribute,
    JsxElement,
    JsxSpreadAttribute,
    Link,
    LinkReference,
    List,
    ListItem,
    MdxFlowExpression,
    MdxTextExpression,
    Node,
    Paragraph,
    Parent,
    RenderMode,
    Root,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    UnknownNode,
)
from safemdx.utils.logger import get_logger

logger = get_logger(__name__)

type NodeDict = Mapping[str, Any]
type Builder = Callable[[NodeDict, SourceLocation, Mapping[str, Any]], Node]


def _children(data: NodeDict) -> tuple[Node, ...]:
    return tuple(from_dict(child) for child in data.get("children") or ())


def _estree(data: NodeDict, convert: Callable[[Any], Any] = from_estree) -> Any:
    """Convert ``data.estree`` if present, None when absent or malformed."""
    program = (data.get("data") or {}).get("estree")
    if not program:
        return None
    try:
        return convert(program)
    except (KeyError, TypeError, AttributeError) as exc:
        logger.debug("Ignoring malformed estree on %s: %s", data.get("type"), exc)
        return None


def _attribute(data: NodeDict) -> Attribute:
    if data.get("type") == "mdxJsxExpressionAttribute":
        expression: Expression | None = _estree(data, spread_argument)
        return JsxSpreadAttribute(source=str(data.get("value", "")), expression=expression)
    value = data.get("value")
    if isinstance(value, Mapping):
        return JsxAttribute(
            name=str(data.get("name", "")),
            value=AttributeValueExpression(source=str(value.get("value", "")), expression=_estree(value)),
        )
    return JsxAttribute(name=str(data.get("name", "")), value=value)


def _jsx(mode: RenderMode) -> Builder:
    def build(data: NodeDict, loc: SourceLocation, props: Mapping[str, Any]) -> Node:
        return JsxElement(
            location=loc,
            children=_children(data),
            name=data.get("name"),
            attributes=tuple(_attribute(a) for a in data.get("attributes") or ()),
            mode=mode,
            properties=props,
        )

    return build


def _parent(cls: type[Parent]) -> Builder:
    def build(data: NodeDict, loc: SourceLocation, props: Mapping[str, Any]) -> Node:
        return cls(location=loc, children=_children(data), properties=props)

    return build


# Registry of mdast type names to node builders
_BUILDERS: dict[str, Builder] = {
    "root": _parent(Root),
    "paragraph": _parent(Paragraph),
    "blockquote": _parent(BlockQuote),
    "tableRow": _parent(TableRow),
    "tableCell": _parent(TableCell),
    "emphasis": _parent(Emphasis),
    "strong": _parent(Strong),
    "delete": _parent(Delete),
    "heading": lambda d, loc, p: Heading(
        location=loc, children=_children(d), depth=d.get("depth", 1), properties=p
    ),
    "list": lambda d, loc, p: List(
        location=loc,
        children=_children(d),
        ordered=bool(d.get("ordered")),
        start=d.get("start"),
        spread=bool(d.get("spread")),
        properties=p,
    ),
    "listItem": lambda d, loc, p: ListItem(
        location=loc,
        children=_children(d),
        checked=d.get("checked"),
        spread=bool(d.get("spread")),
        properties=p,
    ),
    "table": lambda d, loc, p: Table(
        location=loc, children=_children(d), align=tuple(d.get("align") or ()), properties=p
    ),
    "footnoteDefinition": lambda d, loc, p: FootnoteDefinition(
        location=loc,
        children=_children(d),
        identifier=d.get("identifier", ""),
        label=d.get("label"),
        properties=p,
    ),
    "link": lambda d, loc, p: Link(
        location=loc, children=_children(d), url=d.get("url", ""), title=d.get("title"), properties=p
    ),
    "linkReference": lambda d, loc, p: LinkReference(
        location=loc,
        children=_children(d),
        identifier=d.get("identifier", ""),
        label=d.get("label"),
        reference_type=d.get("referenceType", "full"),
        properties=p,
    ),
    "code": lambda d, loc, p: Code(
        location=loc, value=d.get("value", ""), lang=d.get("lang"), meta=d.get("meta"), properties=p
    ),
    "thematicBreak": lambda d, loc, p: ThematicBreak(location=loc, properties=p),
    "html": lambda d, loc, p: Html(location=loc, value=d.get("value", ""), properties=p),
    "definition": lambda d, loc, p: Definition(
        location=loc,
        identifier=d.get("identifier", ""),
        url=d.get("url", ""),
        label=d.get("label"),
        title=d.get("title"),
        properties=p,
    ),
    "yaml": lambda d, loc, p: FrontMatter(location=loc, value=d.get("value", ""), format="yaml", properties=p),
    "toml": lambda d, loc, p: FrontMatter(location=loc, value=d.get("value", ""), format="toml", properties=p),
    "mdxjsEsm": lambda d, loc, p: EsmImport(
        location=loc,
        value=d.get("value", ""),
        declarations=_estree(d, import_declarations),
        properties=p,
    ),
    "mdxFlowExpression": lambda d, loc, p: MdxFlowExpression(
        location=loc, value=d.get("value", ""), expression=_estree(d), properties=p
    ),
    "mdxTextExpression": lambda d, loc, p: MdxTextExpression(
        location=loc, value=d.get("value", ""), expression=_estree(d), properties=p
    ),
    "text": lambda d, loc, p: Text(location=loc, value=d.get("value", ""), properties=p),
    "image": lambda d, loc, p: Image(
        location=loc, url=d.get("url", ""), alt=d.get("alt"), title=d.get("title"), properties=p
    ),
    "imageReference": lambda d, loc, p: ImageReference(
        location=loc,
        identifier=d.get("identifier", ""),
        alt=d.get("alt"),
        label=d.get("label"),
        reference_type=d.get("referenceType", "full"),
        properties=p,
    ),
    "inlineCode": lambda d, loc, p: InlineCode(location=loc, value=d.get("value", ""), properties=p),
    "break": lambda d, loc, p: Break(location=loc, properties=p),
    "footnoteReference": lambda d, loc, p: FootnoteReference(
        location=loc, identifier=d.get("identifier", ""), label=d.get("label"), properties=p
    ),
    "mdxJsxFlowElement": _jsx(RenderMode.BLOCK),
    "mdxJsxTextElement": _jsx(RenderMode.INLINE),
}


def from_dict(data: NodeDict) -> Node:
    """Reconstruct a typed node from an mdast dict.

    Args:
        data: mdast node (``{"type": ..., "position": ..., ...}``)

    Returns:
        Typed node; :class:`UnknownNode` for unrecognized types.

    Raises:
        ValueError: If ``type`` is missing.

    """
    type_name = data.get("type")
    if not isinstance(type_name, str):
        msg = "Missing 'type' field in mdast node"
        raise ValueError(msg)

    loc = SourceLocation.from_position(data.get("position"))
    h_properties = (data.get("data") or {}).get("hProperties")
    props = MappingProxyType(dict(h_properties)) if h_properties else EMPTY_PROPERTIES

    builder = _BUILDERS.get(type_name)
    if builder is None:
        return UnknownNode(location=loc, node_type=type_name, raw=MappingProxyType(dict(data)))
    return builder(data, loc, props)


def from_json(data: str) -> Root:
    """Deserialize an mdast root from a JSON string.

    Raises:
        ValueError: If the JSON doesn't represent a root node.

    """
    node = from_dict(json.loads(data))
    if not isinstance(node, Root):
        msg = f"Expected root, got {node.kind!r}"
        raise ValueError(msg)
    return node


# =============================================================================
# Typed nodes -> mdast dicts
# =============================================================================

# Node attribute -> mdast key, for the scalar fields each kind carries
_FIELD_KEYS: dict[str, str] = {
    "depth": "depth",
    "ordered": "ordered",
    "start": "start",
    "spread": "spread",
    "checked": "checked",
    "value": "value",
    "lang": "lang",
    "meta": "meta",
    "identifier": "identifier",
    "label": "label",
    "url": "url",
    "title": "title",
    "alt": "alt",
    "reference_type": "referenceType",
}


def _attribute_to_dict(attribute: Attribute) -> dict[str, Any]:
    if isinstance(attribute, JsxSpreadAttribute):
        return {"type": "mdxJsxExpressionAttribute", "value": attribute.source}
    value = attribute.value
    if isinstance(value, AttributeValueExpression):
        serialized: Any = {"type": "mdxJsxAttributeValueExpression", "value": value.source}
    elif isinstance(value, bool):
        serialized = {"type": "mdxJsxAttributeValueExpression", "value": "true" if value else "false"}
    elif isinstance(value, int | float):
        serialized = {"type": "mdxJsxAttributeValueExpression", "value": repr(value)}
    else:
        serialized = value
    return {"type": "mdxJsxAttribute", "name": attribute.name, "value": serialized}


def to_dict(node: Node) -> dict[str, Any]:
    """Convert a typed node to an mdast-shaped dict.

    Positions are included for located nodes. Parsed expression trees
    (``data.estree``) are not serialized; the source text is kept instead.

    """
    if isinstance(node, UnknownNode):
        return dict(node.raw) or {"type": node.node_type}

    result: dict[str, Any] = {"type": node.kind}
    for attr, key in _FIELD_KEYS.items():
        if hasattr(node, attr):
            result[key] = getattr(node, attr)
    if isinstance(node, Table):
        result["align"] = list(node.align)
    if isinstance(node, JsxElement):
        result["name"] = node.name
        result["attributes"] = [_attribute_to_dict(a) for a in node.attributes]
    if isinstance(node, Parent):
        result["children"] = [to_dict(child) for child in node.children]
    if node.properties:
        result["data"] = {"hProperties": dict(node.properties)}
    position = node.location.to_position()
    if position is not None:
        result["position"] = position
    return result


def to_json(root: Root, *, indent: int | None = None) -> str:
    """Serialize a root to an mdast JSON string (sorted keys)."""
    return json.dumps(to_dict(root), sort_keys=True, indent=indent)
