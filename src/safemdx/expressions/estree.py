"""Conversion of ESTree dictionaries into typed expression nodes.

MDX parsers attach ESTree programs to expression-bearing mdast nodes
(``data.estree``). This module turns those JSON-shaped programs into the
frozen nodes of :mod:`safemdx.expressions.nodes` so that already-parsed
trees never need to be re-parsed from source.

ESTree types outside the supported grammar become
:class:`~safemdx.expressions.nodes.OpaqueExpression` and are rejected by the
evaluator with their original type name.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from safemdx.expressions.nodes import (
    ArrayExpression,
    ArrowFunctionExpression,
    BinaryExpression,
    CallExpression,
    ConditionalExpression,
    Expression,
    Identifier,
    ImportDeclaration,
    ImportDefaultSpecifier,
    ImportNamespaceSpecifier,
    ImportSpecifier,
    ImportSpecifierNode,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXSpreadAttribute,
    JSXText,
    Literal,
    LogicalExpression,
    MemberExpression,
    ObjectExpression,
    OpaqueExpression,
    Property,
    SpreadElement,
    TemplateElement,
    TemplateLiteral,
    UnaryExpression,
)

type EstreeNode = Mapping[str, Any]


def from_estree(node: EstreeNode) -> Expression:
    """Convert an ESTree expression (or a single-expression program)."""
    match node.get("type"):
        case "Program":
            statements = [s for s in node.get("body", ()) if s.get("type") != "EmptyStatement"]
            if len(statements) != 1:
                return OpaqueExpression("Program")
            return from_estree(statements[0])
        case "ExpressionStatement":
            return from_estree(node["expression"])
        case "ChainExpression" | "ParenthesizedExpression":
            return from_estree(node["expression"])
        case "Literal":
            if "regex" in node:
                return OpaqueExpression("RegExpLiteral")
            if "bigint" in node:
                return OpaqueExpression("BigIntLiteral")
            return Literal(value=node.get("value"), raw=node.get("raw"))
        case "Identifier":
            return Identifier(node["name"])
        case "TemplateLiteral":
            quasis = tuple(
                TemplateElement(
                    cooked=q["value"].get("cooked") or "",
                    raw=q["value"].get("raw", ""),
                    tail=bool(q.get("tail")),
                )
                for q in node["quasis"]
            )
            return TemplateLiteral(
                quasis=quasis, expressions=tuple(from_estree(e) for e in node["expressions"])
            )
        case "ArrayExpression":
            return ArrayExpression(
                elements=tuple(None if e is None else from_estree(e) for e in node["elements"])
            )
        case "ObjectExpression":
            return ObjectExpression(properties=tuple(_property(p) for p in node["properties"]))
        case "SpreadElement":
            return SpreadElement(argument=from_estree(node["argument"]))
        case "UnaryExpression":
            return UnaryExpression(operator=node["operator"], argument=from_estree(node["argument"]))
        case "BinaryExpression":
            return BinaryExpression(
                operator=node["operator"],
                left=from_estree(node["left"]),
                right=from_estree(node["right"]),
            )
        case "LogicalExpression":
            return LogicalExpression(
                operator=node["operator"],
                left=from_estree(node["left"]),
                right=from_estree(node["right"]),
            )
        case "ConditionalExpression":
            return ConditionalExpression(
                test=from_estree(node["test"]),
                consequent=from_estree(node["consequent"]),
                alternate=from_estree(node["alternate"]),
            )
        case "MemberExpression":
            return MemberExpression(
                obj=from_estree(node["object"]),
                prop=from_estree(node["property"]),
                computed=bool(node.get("computed")),
                optional=bool(node.get("optional")),
            )
        case "CallExpression":
            return CallExpression(
                callee=from_estree(node["callee"]),
                arguments=tuple(from_estree(a) for a in node.get("arguments", ())),
                optional=bool(node.get("optional")),
            )
        case "ArrowFunctionExpression":
            params = tuple(p.get("name", "") for p in node.get("params", ()))
            return ArrowFunctionExpression(params=params, body="")
        case "JSXElement" | "JSXFragment":
            return _jsx_element(node)
        case kind:
            return OpaqueExpression(str(kind))


def spread_argument(node: EstreeNode) -> Expression:
    """Extract the argument of a spread attribute program.

    MDX stores ``{...props}`` as a program whose single statement is the
    object expression ``({...props})``.
    """
    expression = from_estree(node)
    if isinstance(expression, ObjectExpression) and len(expression.properties) == 1:
        spread = expression.properties[0]
        if isinstance(spread, SpreadElement):
            return spread.argument
    return expression


def import_declarations(program: EstreeNode) -> tuple[ImportDeclaration, ...] | None:
    """Convert the import statements of an ESM program.

    Returns ``None`` when the program contains anything other than imports,
    leaving the caller to report the statement.
    """
    declarations: list[ImportDeclaration] = []
    for statement in program.get("body", ()):
        if statement.get("type") != "ImportDeclaration":
            return None
        specifiers: list[ImportSpecifierNode] = []
        for specifier in statement.get("specifiers", ()):
            local = specifier["local"]["name"]
            match specifier.get("type"):
                case "ImportDefaultSpecifier":
                    specifiers.append(ImportDefaultSpecifier(local=local))
                case "ImportNamespaceSpecifier":
                    specifiers.append(ImportNamespaceSpecifier(local=local))
                case _:
                    imported = specifier["imported"]
                    name = imported.get("name", imported.get("value"))
                    specifiers.append(ImportSpecifier(local=local, imported=str(name)))
        declarations.append(
            ImportDeclaration(source=str(statement["source"]["value"]), specifiers=tuple(specifiers))
        )
    return tuple(declarations)


def _property(node: EstreeNode) -> Property | SpreadElement:
    if node.get("type") == "SpreadElement":
        return SpreadElement(argument=from_estree(node["argument"]))
    if node.get("kind", "init") != "init" or node.get("method"):
        # getters, setters and methods are functions
        return Property(
            key=from_estree(node["key"]), value=OpaqueExpression("FunctionExpression")
        )
    return Property(
        key=from_estree(node["key"]),
        value=from_estree(node["value"]),
        computed=bool(node.get("computed")),
        shorthand=bool(node.get("shorthand")),
    )


def _jsx_name(node: EstreeNode | None) -> str | None:
    if node is None:
        return None
    match node.get("type"):
        case "JSXIdentifier":
            return str(node["name"])
        case "JSXMemberExpression":
            return f"{_jsx_name(node['object'])}.{_jsx_name(node['property'])}"
        case "JSXNamespacedName":
            return f"{_jsx_name(node['namespace'])}:{_jsx_name(node['name'])}"
    return None


def _jsx_element(node: EstreeNode) -> JSXElement:
    opening = node.get("openingElement") or {}
    attributes: list[JSXAttribute | JSXSpreadAttribute] = []
    for attr in opening.get("attributes", ()):
        if attr.get("type") == "JSXSpreadAttribute":
            attributes.append(JSXSpreadAttribute(argument=from_estree(attr["argument"])))
            continue
        value = attr.get("value")
        converted: Literal | JSXExpressionContainer | JSXElement | None
        match value:
            case None:
                converted = None
            case {"type": "Literal"}:
                converted = Literal(value=value.get("value"), raw=value.get("raw"))
            case {"type": "JSXExpressionContainer"}:
                converted = _container(value)
            case _:
                converted = _jsx_element(value)
        attributes.append(JSXAttribute(name=_jsx_name(attr["name"]) or "", value=converted))

    children: list[JSXText | JSXExpressionContainer | JSXElement] = []
    for child in node.get("children", ()):
        match child.get("type"):
            case "JSXText":
                children.append(JSXText(value=child.get("value", "")))
            case "JSXExpressionContainer":
                children.append(_container(child))
            case "JSXElement" | "JSXFragment":
                children.append(_jsx_element(child))
    return JSXElement(
        name=_jsx_name(opening.get("name")),
        attributes=tuple(attributes),
        children=tuple(children),
        self_closing=bool(opening.get("selfClosing")),
    )


def _container(node: EstreeNode) -> JSXExpressionContainer:
    expression = node.get("expression") or {}
    if expression.get("type") == "JSXEmptyExpression":
        return JSXExpressionContainer(expression=None)
    return JSXExpressionContainer(expression=from_estree(expression))
