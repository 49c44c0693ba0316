"""Restricted JavaScript expressions: parsing and evaluation.

Public API:
    parse_expression: Parse an attribute or inline expression
    parse_spread: Parse a spread attribute (``...expr``)
    parse_module: Parse ``import`` statements
    evaluate: Evaluate a parsed expression with JavaScript semantics
    from_estree: Convert an ESTree dictionary into typed nodes
    UNDEFINED: The ``undefined`` value

"""

from safemdx.expressions.estree import from_estree, import_declarations, spread_argument
from safemdx.expressions.evaluator import Evaluator, evaluate
from safemdx.expressions.nodes import (
    ArrowFunctionExpression,
    Expression,
    Identifier,
    ImportDeclaration,
    JSXElement,
    Literal,
    ObjectExpression,
)
from safemdx.expressions.parser import parse_expression, parse_module, parse_spread
from safemdx.expressions.values import (
    UNDEFINED,
    is_nullish,
    is_truthy,
    js_typeof,
    to_js_string,
)

__all__ = [
    "UNDEFINED",
    "ArrowFunctionExpression",
    "Evaluator",
    "Expression",
    "Identifier",
    "ImportDeclaration",
    "JSXElement",
    "Literal",
    "ObjectExpression",
    "evaluate",
    "from_estree",
    "import_declarations",
    "is_nullish",
    "is_truthy",
    "js_typeof",
    "parse_expression",
    "parse_module",
    "parse_spread",
    "spread_argument",
    "to_js_string",
]
