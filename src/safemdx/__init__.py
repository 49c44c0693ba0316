"""
safemdx: Safe MDX rendering for Python

Renders MDX document trees (markdown mixed with component invocations and
inline expressions) into UI element trees without executing any code.
Components come from a fixed capability map, expressions are evaluated by a
restricted evaluator, and imports only resolve to validated HTTPS modules.

Quick Start:
    >>> from safemdx import render
    >>> mdast = {
    ...     "type": "root",
    ...     "children": [
    ...         {"type": "paragraph", "children": [{"type": "text", "value": "Hello"}]},
    ...     ],
    ... }
    >>> result = render(mdast)
    >>> result.element.children.type
    'p'
    >>> result.diagnostics
    ()

Components:
    >>> result = render(mdast_with_card, components={"Card": Card})
    >>> for diagnostic in result.diagnostics:
    ...     print(diagnostic.line, diagnostic.message)

Streaming:
    >>> from safemdx import complete_tags
    >>> complete_tags("<Card><Note>Hel")
    '<Card><Note></Note></Card>'
"""

from collections.abc import Mapping
from typing import Any

from safemdx.capabilities import NATIVE_TAGS, build_capability_map, resolve_capability
from safemdx.config import (
    DEFAULT_CONFIG,
    RenderConfig,
    get_render_config,
    render_config_context,
    reset_render_config,
    set_render_config,
)
from safemdx.content_model import classify, is_phrasing, unravel_paragraphs
from safemdx.diagnostics import Diagnostic
from safemdx.elements import FRAGMENT, CreateElement, DeferredComponent, Element, create_element
from safemdx.errors import (
    ConfigError,
    EvaluationError,
    ExpressionSyntaxError,
    SafeMdxError,
    UnrecognizedNodeError,
)
from safemdx.expressions import UNDEFINED, evaluate, parse_expression
from safemdx.imports import ExternalReference, ImportMap, extract_component_info, is_trusted_url
from safemdx.location import SourceLocation
from safemdx.markup import MarkupOptions, html_tag_name_converter, parse_markup
from safemdx.nodes import (
    AttributeValueExpression,
    JsxAttribute,
    JsxElement,
    JsxSpreadAttribute,
    Node,
    RenderMode,
    Root,
)
from safemdx.schema import PropsValidator, PydanticPropsSchema, SchemaIssue
from safemdx.serialization import from_dict, from_json, to_dict, to_json
from safemdx.streaming import complete_tags
from safemdx.visitor import BaseVisitor, transform
from safemdx.walker import USE_DEFAULT, MdxWalker, RenderNode, RenderResult, UseDefault

__version__ = "0.1.0"


def render(
    document: Node | Mapping[str, Any] | str,
    *,
    components: Mapping[str, Any] | None = None,
    render_node: RenderNode | None = None,
    props_schema: Mapping[str, Any] | None = None,
    create_element: CreateElement = create_element,
    config: RenderConfig | None = None,
) -> RenderResult:
    """Render a document into an element tree.

    Args:
        document: A typed node tree, an mdast dict, or mdast JSON text
        components: Caller components merged over the native tags
        render_node: Per-node override hook (see :class:`MdxWalker`)
        props_schema: Validators keyed by component name; pydantic models
            are accepted directly
        create_element: Construction primitive ``(type, props, *children)``
        config: Render options (defaults to the context's config)

    Returns:
        RenderResult with the element tree, diagnostics and accepted imports

    Raises:
        UnrecognizedNodeError: The tree holds a node kind with no handling
        ValueError: ``document`` is a dict or JSON text that is not a node
    """
    if isinstance(document, str):
        document = from_json(document)
    elif isinstance(document, Mapping):
        document = from_dict(document)
    return MdxWalker(
        document,
        components=components,
        render_node=render_node,
        props_schema=props_schema,
        create_element=create_element,
        config=config,
    ).run()


__all__ = [  # noqa: RUF022 - grouped by category for maintainability
    # Version
    "__version__",
    # Core API
    "render",
    "MdxWalker",
    "RenderResult",
    "RenderNode",
    "USE_DEFAULT",
    "UseDefault",
    "complete_tags",
    # Configuration
    "DEFAULT_CONFIG",
    "RenderConfig",
    "get_render_config",
    "render_config_context",
    "reset_render_config",
    "set_render_config",
    # Elements
    "FRAGMENT",
    "CreateElement",
    "DeferredComponent",
    "Element",
    "create_element",
    # Capabilities
    "NATIVE_TAGS",
    "build_capability_map",
    "resolve_capability",
    # Props schema
    "PropsValidator",
    "PydanticPropsSchema",
    "SchemaIssue",
    # Document tree
    "AttributeValueExpression",
    "JsxAttribute",
    "JsxElement",
    "JsxSpreadAttribute",
    "Node",
    "RenderMode",
    "Root",
    "SourceLocation",
    "BaseVisitor",
    "transform",
    "classify",
    "is_phrasing",
    "unravel_paragraphs",
    # Serialization
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
    # Expressions
    "UNDEFINED",
    "evaluate",
    "parse_expression",
    # Imports
    "ExternalReference",
    "ImportMap",
    "extract_component_info",
    "is_trusted_url",
    # Markup
    "MarkupOptions",
    "html_tag_name_converter",
    "parse_markup",
    # Diagnostics and errors
    "Diagnostic",
    "SafeMdxError",
    "ConfigError",
    "EvaluationError",
    "ExpressionSyntaxError",
    "UnrecognizedNodeError",
]
