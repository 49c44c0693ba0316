"""Tree walker: document nodes to output elements.

The walker is the interpreter core. It visits a document tree once and, for
every node, either asks the construction primitive for an element or
produces nothing. Nothing in the document is executed: component names are
looked up in a fixed capability map, attribute expressions go through the
restricted evaluator, and imports only ever yield deferred references to
validated HTTPS modules.

Recoverable problems (unknown components, failed expressions, rejected
imports, schema violations) become :class:`~safemdx.diagnostics.Diagnostic`
values and the walk continues; only node kinds the walker does not know raise
(:class:`~safemdx.errors.UnrecognizedNodeError`).

Example:
    >>> from safemdx.location import SourceLocation
    >>> from safemdx.nodes import Paragraph, Root, Text
    >>> loc = SourceLocation.unknown()
    >>> doc = Root(location=loc, children=(Paragraph(location=loc, children=(Text(location=loc, value="hi"),)),))
    >>> render(doc).element.children
    Element(type='p', props=mappingproxy({}), children='hi')

Thread Safety:
All per-run state lives in a context object created by each ``run()`` call.
A walker instance may be reused sequentially; use one walker per thread.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from pydantic import BaseModel

from safemdx.capabilities import build_capability_map, resolve_capability
from safemdx.config import RenderConfig, get_render_config
from safemdx.content_model import classify, classify_nodes, unravel_paragraphs
from safemdx.diagnostics import Diagnostic
from safemdx.elements import FRAGMENT, CreateElement, DeferredComponent, create_element, normalize_children
from safemdx.errors import EvaluationError, ExpressionSyntaxError, UnrecognizedNodeError
from safemdx.expressions import UNDEFINED, evaluate, parse_expression
from safemdx.expressions.nodes import JSXElement, JSXExpressionContainer, JSXText, Literal
from safemdx.imports import ImportMap, extract_component_info, parse_imports
from safemdx.markup import MarkupOptions, parse_markup
from safemdx.nodes import (
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
    JsxElement,
    Link,
    LinkReference,
    List,
    ListItem,
    MdxFlowExpression,
    MdxTextExpression,
    Node,
    Paragraph,
    Parent,
    Root,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    node_line,
)
from safemdx.props import PropsBuilder, export_value
from safemdx.schema import PropsSchema, as_validator, issue_message, run_validator
from safemdx.utils.logger import get_logger
from safemdx.visitor import BaseVisitor, find_first

logger = get_logger(__name__)

LINE_NUMBER_PROP: Final = "data-markdown-line"


class UseDefault:
    """Sentinel returned by a ``render_node`` hook to fall back to the
    built-in handling of a node."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "USE_DEFAULT"


USE_DEFAULT: Final = UseDefault()

type Recurse = Callable[[Node], Any]
type RenderNode = Callable[[Node, Recurse], Any]


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Outcome of one walker run.

    Attributes:
        element: The output tree (None when nothing was produced)
        diagnostics: Recoverable problems, in the order they were found
        imports: External references accepted during the run
    """

    element: Any
    diagnostics: tuple[Diagnostic, ...]
    imports: ImportMap


@dataclass(slots=True)
class _RunContext:
    """Per-run mutable state."""

    root: Node
    diagnostics: list[Diagnostic] = field(default_factory=list)
    imports: dict[str, str] = field(default_factory=dict)

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)


class _ImportCollector(BaseVisitor[None]):
    """Gathers accepted import bindings from every module block."""

    def __init__(self, ctx: _RunContext) -> None:
        self._ctx = ctx

    def visit_mdxjs_esm(self, node: EsmImport) -> None:
        self._ctx.imports.update(parse_imports(node, self._ctx.report))


def _is_renderable(value: Any) -> bool:
    return value is not None and value is not UNDEFINED and not isinstance(value, bool) and value != ""


def _outputs(value: Any) -> list[Any]:
    """Flatten a produced value into zero or more children."""
    if isinstance(value, list | tuple):
        outputs: list[Any] = []
        for item in value:
            outputs.extend(_outputs(item))
        return outputs
    return [value] if _is_renderable(value) else []


class MdxWalker:
    """Render a document tree into output elements.

    Args:
        document: Root node (or any single node) to render
        components: Caller components, merged over the native tags; nested
            mappings allow dotted names such as ``Docs.Note``
        render_node: Hook consulted for every node before the built-in
            handling; return :data:`USE_DEFAULT` to fall through. ``None`` is
            a valid override and renders nothing.
        props_schema: Validators keyed by component invocation name (pydantic
            models are wrapped automatically)
        create_element: Construction primitive ``(type, props, *children)``
        config: Render options; defaults to the config active in the current
            context

    """

    __slots__ = (
        "_document",
        "_capabilities",
        "_render_node",
        "_schemas",
        "_create_element",
        "_config",
        "_last_context",
    )

    def __init__(
        self,
        document: Node,
        *,
        components: Mapping[str, Any] | None = None,
        render_node: RenderNode | None = None,
        props_schema: Mapping[str, PropsSchema | type[BaseModel]] | None = None,
        create_element: CreateElement = create_element,
        config: RenderConfig | None = None,
    ) -> None:
        self._document = document
        self._capabilities = build_capability_map(components)
        self._render_node = render_node
        self._schemas = {name: as_validator(schema) for name, schema in (props_schema or {}).items()}
        self._create_element = create_element
        self._config = config if config is not None else get_render_config()
        self._last_context: _RunContext | None = None

    @property
    def config(self) -> RenderConfig:
        return self._config

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """Diagnostics of the most recent run (empty before the first)."""
        if self._last_context is None:
            return []
        return list(self._last_context.diagnostics)

    def run(self) -> RenderResult:
        """Render the document.

        Raises:
            UnrecognizedNodeError: A node kind with no defined handling
        """
        config = self._config
        tree = self._document
        if isinstance(tree, Root):
            if config.unravel_paragraphs:
                tree = unravel_paragraphs(tree)
            if config.normalize_content_model:
                tree = classify(tree)
        elif config.normalize_content_model:
            (tree,) = classify_nodes((tree,), None)

        ctx = _RunContext(root=tree)
        self._last_context = ctx
        if config.allow_esm_imports:
            _ImportCollector(ctx).visit(tree)

        element = normalize_children(self._render(tree, ctx, None))
        return RenderResult(
            element=element,
            diagnostics=tuple(ctx.diagnostics),
            imports=ImportMap(ctx.imports),
        )

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _render(self, node: Node, ctx: _RunContext, parent_kind: str | None) -> list[Any]:
        if self._render_node is not None:
            result = self._render_node(
                node, lambda child: normalize_children(self._render(child, ctx, node.kind))
            )
            if result is not USE_DEFAULT:
                return _outputs(result)

        match node:
            case Root():
                if node.properties:
                    return [self._element(self._tag("div"), node, None, self._children(node, ctx))]
                return [self._create_element(FRAGMENT, None, *self._children(node, ctx))]
            case Heading():
                tag = self._capabilities.get(f"h{node.depth}") or f"h{node.depth}"
                return [self._element(tag, node, None, self._children(node, ctx))]
            case Paragraph():
                return [self._element(self._tag("p"), node, None, self._children(node, ctx))]
            case BlockQuote():
                return [self._element(self._tag("blockquote"), node, None, self._children(node, ctx))]
            case ThematicBreak():
                return [self._element(self._tag("hr"), node)]
            case Code():
                return self._render_code(node)
            case List():
                if node.ordered:
                    base = {"start": node.start} if node.start is not None else None
                    return [self._element(self._tag("ol"), node, base, self._children(node, ctx))]
                return [self._element(self._tag("ul"), node, None, self._children(node, ctx))]
            case ListItem():
                base = {"data-checked": node.checked} if node.checked is not None else None
                return [self._element(self._tag("li"), node, base, self._children(node, ctx))]
            case Text():
                if not node.value:
                    return []
                if node.properties:
                    return [self._element(self._tag("span"), node, None, [node.value])]
                return [node.value]
            case Image():
                base = {"src": node.url or "", "alt": node.alt or "", "title": node.title or ""}
                return [self._element(self._tag("img"), node, base)]
            case Link():
                base = {"href": node.url or "", "title": node.title or ""}
                return [self._element(self._tag("a"), node, base, self._children(node, ctx))]
            case LinkReference():
                return [self._render_link_reference(node, ctx)]
            case Strong():
                return [self._element(self._tag("strong"), node, None, self._children(node, ctx))]
            case Emphasis():
                return [self._element(self._tag("em"), node, None, self._children(node, ctx))]
            case Delete():
                return [self._element(self._tag("del"), node, None, self._children(node, ctx))]
            case InlineCode():
                if not node.value:
                    return []
                return [self._element(self._tag("code"), node, None, [node.value])]
            case Break():
                return [self._element(self._tag("br"), node)]
            case Table():
                return [self._render_table(node, ctx)]
            case TableRow():
                return [self._element(self._tag("tr"), node, {"className": ""}, self._children(node, ctx))]
            case TableCell():
                return [self._element(self._tag("td"), node, {"className": ""}, self._children(node, ctx))]
            case Html():
                return self._render_html(node, ctx, parent_kind)
            case JsxElement():
                return self._render_jsx(node, ctx)
            case MdxFlowExpression() | MdxTextExpression():
                return self._render_expression(node, ctx)
            case (
                Definition()
                | FootnoteDefinition()
                | FootnoteReference()
                | ImageReference()
                | FrontMatter()
                | EsmImport()
            ):
                return []
            case _:
                raise UnrecognizedNodeError(node.kind, node.location)

    def _children(self, node: Parent, ctx: _RunContext) -> list[Any]:
        outputs: list[Any] = []
        for child in node.children:
            outputs.extend(self._render(child, ctx, node.kind))
        return outputs

    # =========================================================================
    # Element construction
    # =========================================================================

    def _tag(self, name: str) -> Any:
        return self._capabilities.get(name, name)

    def _props(self, node: Node, base: Mapping[str, Any] | None) -> dict[str, Any]:
        """Base props, then upstream element properties, then the line number."""
        props = {**(base or {}), **node.properties}
        if self._config.add_line_numbers:
            line = node_line(node)
            if line:
                props[LINE_NUMBER_PROP] = line
        return props

    def _element(
        self,
        tag: Any,
        node: Node,
        base: Mapping[str, Any] | None = None,
        children: list[Any] | None = None,
    ) -> Any:
        return self._create_element(tag, self._props(node, base), *(children or ()))

    # =========================================================================
    # Node kinds
    # =========================================================================

    def _render_code(self, node: Code) -> list[Any]:
        if not node.value:
            return []
        code_props = {"className": f"language-{node.lang}"} if node.lang else {}
        code = self._create_element(self._tag("code"), code_props, node.value)
        return [self._element(self._tag("pre"), node, None, [code])]

    def _render_table(self, node: Table, ctx: _RunContext) -> Any:
        rows = self._children(node, ctx)
        sections: list[Any] = []
        if rows:
            sections.append(self._create_element(self._tag("thead"), None, rows[0]))
        if len(rows) > 1:
            sections.append(self._create_element(self._tag("tbody"), None, *rows[1:]))
        return self._element(self._tag("table"), node, None, sections)

    def _render_link_reference(self, node: LinkReference, ctx: _RunContext) -> Any:
        # First matching definition in breadth-first order wins, as in CommonMark
        definition = find_first(ctx.root, Definition, lambda d: d.identifier == node.identifier)
        base = {"href": "", "title": ""}
        if definition is not None:
            base = {"href": definition.url or "", "title": definition.title or ""}
        return self._element(self._tag("a"), node, base, self._children(node, ctx))

    def _render_html(self, node: Html, ctx: _RunContext, parent_kind: str | None) -> list[Any]:
        if not node.value:
            return []
        options = MarkupOptions(location=node.location)
        if self._config.markup_tag_converter is not None:
            options = MarkupOptions(convert_tag_name=self._config.markup_tag_converter, location=node.location)
        nodes = parse_markup(node.value, options)
        if self._config.normalize_content_model:
            nodes = list(classify_nodes(nodes, parent_kind))
        outputs: list[Any] = []
        for child in nodes:
            outputs.extend(self._render(child, ctx, parent_kind))
        return outputs

    def _render_expression(self, node: MdxFlowExpression | MdxTextExpression, ctx: _RunContext) -> list[Any]:
        if not node.value or not self._config.evaluate_expressions:
            return []
        line = node_line(node)
        try:
            expression = node.expression or parse_expression(node.value)
            result = evaluate(expression, jsx=lambda element: self._render_jsx_value(element, ctx, line))
        except (ExpressionSyntaxError, EvaluationError) as exc:
            logger.debug("Expression {%s} not evaluated: %s", node.value, exc)
            ctx.report(Diagnostic(f"Failed to evaluate expression: {node.value}. {exc}", line=line))
            return []
        return _outputs(export_value(result))

    # =========================================================================
    # Component invocations
    # =========================================================================

    def _external(self, name: str, ctx: _RunContext) -> DeferredComponent | None:
        if not self._config.allow_esm_imports or name not in ctx.imports:
            return None
        reference = extract_component_info(ctx.imports[name])
        return DeferredComponent(url=reference.url, export_name=reference.export_name)

    def _props_builder(self, ctx: _RunContext, line: int | None) -> PropsBuilder:
        return PropsBuilder(
            ctx.report,
            jsx=lambda element: self._render_jsx_value(element, ctx, line),
            evaluate_expressions=self._config.evaluate_expressions,
        )

    def _render_jsx(self, node: JsxElement, ctx: _RunContext) -> list[Any]:
        if node.name is None:
            return [self._create_element(FRAGMENT, None, *self._children(node, ctx))]

        line = node_line(node)
        deferred = self._external(node.name, ctx)
        if deferred is not None:
            props = self._props_builder(ctx, line).build(node)
            props.update(import_url=deferred.url, component_name=deferred.export_name)
            return [self._element(deferred, node, props, self._children(node, ctx))]

        capability = resolve_capability(self._capabilities, node.name)
        if capability is None:
            logger.debug("Unsupported component %r at line %s", node.name, line)
            ctx.report(Diagnostic(f"Unsupported jsx component {node.name}", line=line))
            return []

        props = self._props_builder(ctx, line).build(node)
        self._validate(node.name, props, line, ctx)
        return [self._element(capability, node, props, self._children(node, ctx))]

    def _validate(self, name: str, props: Mapping[str, Any], line: int | None, ctx: _RunContext) -> None:
        validator = self._schemas.get(name)
        if validator is None:
            return
        for issue in run_validator(validator, props):
            ctx.report(Diagnostic(issue_message(name, issue), line=line, schema_path=issue.dotted_path or None))

    def _render_jsx_value(self, element: JSXElement, ctx: _RunContext, line: int | None) -> Any:
        """Render a JSX element found inside an expression (attribute value or
        inline expression). Only literal props and text or element children
        are kept. Returns None when the element cannot be rendered."""
        if not element.name:
            ctx.report(Diagnostic("JSX element missing component name", line=line))
            return None

        deferred = self._external(element.name, ctx)
        capability = deferred if deferred is not None else resolve_capability(self._capabilities, element.name)
        if capability is None:
            logger.debug("Unsupported component %r in attribute at line %s", element.name, line)
            ctx.report(Diagnostic(f"Unsupported jsx component {element.name} in attribute", line=line))
            return None

        props: dict[str, Any] = {}
        for attribute in element.attributes:
            match getattr(attribute, "value", UNDEFINED):
                case None:
                    props[attribute.name] = True
                case Literal(value=value) | JSXExpressionContainer(expression=Literal(value=value)):
                    props[attribute.name] = value
                case _:
                    logger.debug("Skipped non-literal prop on <%s>", element.name)
        if deferred is not None:
            props.update(import_url=deferred.url, component_name=deferred.export_name)

        children: list[Any] = []
        for child in element.children:
            match child:
                case JSXText(value=value):
                    children.append(value)
                case JSXElement():
                    rendered = self._render_jsx_value(child, ctx, line)
                    if rendered is not None:
                        children.append(rendered)
        return self._create_element(capability, props, *children)


def render(
    document: Node,
    *,
    components: Mapping[str, Any] | None = None,
    render_node: RenderNode | None = None,
    props_schema: Mapping[str, PropsSchema | type[BaseModel]] | None = None,
    create_element: CreateElement = create_element,
    config: RenderConfig | None = None,
) -> RenderResult:
    """Render a document tree in one call. See :class:`MdxWalker`."""
    return MdxWalker(
        document,
        components=components,
        render_node=render_node,
        props_schema=props_schema,
        create_element=create_element,
        config=config,
    ).run()
