"""Typed restricted-expression AST.

Nodes mirror the ESTree shapes that MDX parsers attach to attribute values
(``data.estree``), reduced to what the evaluator, the markup normalizer and
the import validator need. All nodes are frozen dataclasses with slots, so
trees can be shared freely and matched with ``match`` statements.

The ``type`` property returns the ESTree type name (the class name), which is
what error messages cite: ``"CallExpression is not supported"``.

Node Hierarchy:
Expression (base)
├── Literal, Identifier, TemplateLiteral
├── ArrayExpression, ObjectExpression (Property, SpreadElement)
├── UnaryExpression, BinaryExpression, LogicalExpression
├── ConditionalExpression, MemberExpression, CallExpression
├── ArrowFunctionExpression (placeholder, never evaluated)
├── OpaqueExpression (foreign node types, never evaluated)
└── JSXElement (JSXAttribute, JSXSpreadAttribute, JSXText,
    JSXExpressionContainer)

ImportDeclaration (ImportDefaultSpecifier, ImportSpecifier,
ImportNamespaceSpecifier)

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Expression:
    """Base class for expression nodes."""

    @property
    def type(self) -> str:
        """ESTree node type name."""
        return type(self).__name__


@dataclass(frozen=True, slots=True)
class Literal(Expression):
    """String, number, boolean or null literal."""

    value: str | int | float | bool | None
    raw: str | None = None


@dataclass(frozen=True, slots=True)
class Identifier(Expression):
    """Bare name. Only ``undefined`` is ever evaluated."""

    name: str


@dataclass(frozen=True, slots=True)
class TemplateElement(Expression):
    """Static chunk of a template literal."""

    cooked: str
    raw: str
    tail: bool = False


@dataclass(frozen=True, slots=True)
class TemplateLiteral(Expression):
    """Template literal: ``quasis[0] ${expressions[0]} quasis[1] ...``."""

    quasis: tuple[TemplateElement, ...]
    expressions: tuple[Expression, ...]


@dataclass(frozen=True, slots=True)
class SpreadElement(Expression):
    """``...argument`` inside arrays, objects and call arguments."""

    argument: Expression


@dataclass(frozen=True, slots=True)
class ArrayExpression(Expression):
    """Array literal. ``None`` elements are holes (``[1, , 2]``)."""

    elements: tuple[Expression | None, ...]


@dataclass(frozen=True, slots=True)
class Property(Expression):
    """Object literal entry."""

    key: Expression
    value: Expression
    computed: bool = False
    shorthand: bool = False


@dataclass(frozen=True, slots=True)
class ObjectExpression(Expression):
    """Object literal."""

    properties: tuple[Property | SpreadElement, ...]


@dataclass(frozen=True, slots=True)
class UnaryExpression(Expression):
    """Prefix operator: ``! - + ~ typeof void delete``."""

    operator: str
    argument: Expression


@dataclass(frozen=True, slots=True)
class BinaryExpression(Expression):
    """Arithmetic, comparison, equality, bitwise and ``in`` operators."""

    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True, slots=True)
class LogicalExpression(Expression):
    """Short-circuit operators: ``&& || ??``."""

    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True, slots=True)
class ConditionalExpression(Expression):
    """Ternary ``test ? consequent : alternate``."""

    test: Expression
    consequent: Expression
    alternate: Expression


@dataclass(frozen=True, slots=True)
class MemberExpression(Expression):
    """Property access: ``obj.prop``, ``obj[prop]``, ``obj?.prop``."""

    obj: Expression
    prop: Expression
    computed: bool = False
    optional: bool = False


@dataclass(frozen=True, slots=True)
class CallExpression(Expression):
    """Function call. Parsed so it can be rejected, never evaluated."""

    callee: Expression
    arguments: tuple[Expression, ...]
    optional: bool = False


@dataclass(frozen=True, slots=True)
class ArrowFunctionExpression(Expression):
    """Arrow function placeholder.

    ``body`` keeps the source text of the function body. Produced for event
    handler attributes of raw markup; the evaluator always rejects it.
    """

    params: tuple[str, ...]
    body: str


# =============================================================================
# JSX
# =============================================================================


@dataclass(frozen=True, slots=True)
class JSXText(Expression):
    """Raw text between JSX tags."""

    value: str


@dataclass(frozen=True, slots=True)
class JSXExpressionContainer(Expression):
    """``{expression}`` inside JSX. ``None`` for empty containers."""

    expression: Expression | None


@dataclass(frozen=True, slots=True)
class JSXAttribute(Expression):
    """``name``, ``name="value"`` or ``name={expression}``."""

    name: str
    value: Literal | JSXExpressionContainer | JSXElement | None = None


@dataclass(frozen=True, slots=True)
class JSXSpreadAttribute(Expression):
    """``{...argument}`` in a JSX opening tag."""

    argument: Expression


@dataclass(frozen=True, slots=True)
class JSXElement(Expression):
    """JSX element used as an expression value.

    ``name`` is ``None`` for fragments (``<>...</>``). Member names such as
    ``Foo.Bar`` are kept as a dotted string.
    """

    name: str | None
    attributes: tuple[JSXAttribute | JSXSpreadAttribute, ...] = ()
    children: tuple[JSXText | JSXExpressionContainer | JSXElement, ...] = ()
    self_closing: bool = False


# =============================================================================
# Module statements
# =============================================================================


@dataclass(frozen=True, slots=True)
class ImportDefaultSpecifier(Expression):
    """``import local from "..."``."""

    local: str


@dataclass(frozen=True, slots=True)
class ImportSpecifier(Expression):
    """``import { imported as local } from "..."``."""

    local: str
    imported: str


@dataclass(frozen=True, slots=True)
class ImportNamespaceSpecifier(Expression):
    """``import * as local from "..."``."""

    local: str


type ImportSpecifierNode = ImportDefaultSpecifier | ImportSpecifier | ImportNamespaceSpecifier


@dataclass(frozen=True, slots=True)
class ImportDeclaration(Expression):
    """A single ``import`` statement."""

    source: str
    specifiers: tuple[ImportSpecifierNode, ...] = ()


@dataclass(frozen=True, slots=True)
class OpaqueExpression(Expression):
    """Any ESTree node outside the grammar, kept by type name only.

    Produced when converting externally parsed trees (``new``, ``function``,
    regular expressions...) so that evaluation fails with the real type name.
    """

    kind: str

    @property
    def type(self) -> str:
        return self.kind
