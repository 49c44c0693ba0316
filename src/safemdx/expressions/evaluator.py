"""Evaluator for the restricted expression grammar.

Evaluates literal/operator expressions with JavaScript semantics and rejects
everything that could run code: calls, free identifiers, functions. There is
no scope and no host object access, so the only values an expression can
produce are the ones spelled out in its own literals.

Example:
    >>> evaluate(parse_expression("{a: 1, ...{b: [1, 2].length}}"))
    {'a': 1, 'b': 2}
    >>> evaluate(parse_expression("Math.max(5, 10)"))
    Traceback (most recent call last):
    EvaluationError: CallExpression is not supported

Thread Safety:
Pure functions over immutable nodes; safe to call from any thread.

"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from safemdx.errors import EvaluationError
from safemdx.expressions.nodes import (
    ArrayExpression,
    BinaryExpression,
    ConditionalExpression,
    Expression,
    Identifier,
    JSXElement,
    Literal,
    LogicalExpression,
    MemberExpression,
    ObjectExpression,
    Property,
    SpreadElement,
    TemplateLiteral,
    UnaryExpression,
)
from safemdx.expressions.values import (
    UNDEFINED,
    is_nullish,
    is_truthy,
    js_typeof,
    loose_equals,
    normalize_number,
    property_key,
    strict_equals,
    to_int32,
    to_js_string,
    to_number,
    to_primitive,
    to_uint32,
)

type JsxHandler = Callable[[JSXElement], Any]

# Keyword identifiers that evaluate to constants
KEYWORD_VALUES: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": UNDEFINED,
}


class Evaluator:
    """Evaluates restricted expression trees.

    Args:
        jsx: Optional callback that turns a JSX element appearing inside an
            expression into a value (the walker renders it). Without it, JSX
            elements are unsupported.
    """

    __slots__ = ("_jsx",)

    def __init__(self, jsx: JsxHandler | None = None) -> None:
        self._jsx = jsx

    def evaluate(self, node: Expression) -> Any:
        match node:
            case Literal(value=value):
                return value
            case Identifier(name=name):
                if name in KEYWORD_VALUES:
                    return KEYWORD_VALUES[name]
                raise EvaluationError.unsupported(node.type)
            case TemplateLiteral(quasis=quasis, expressions=expressions):
                parts: list[str] = []
                for i, quasi in enumerate(quasis):
                    parts.append(quasi.cooked)
                    if i < len(expressions):
                        parts.append(to_js_string(self.evaluate(expressions[i])))
                return "".join(parts)
            case ArrayExpression(elements=elements):
                return self._array(elements)
            case ObjectExpression(properties=properties):
                return self._object(properties)
            case UnaryExpression(operator=operator, argument=argument):
                return self._unary(operator, argument, node)
            case BinaryExpression(operator=operator, left=left, right=right):
                return binary_operation(operator, self.evaluate(left), self.evaluate(right))
            case LogicalExpression(operator=operator, left=left, right=right):
                value = self.evaluate(left)
                if operator == "&&":
                    return self.evaluate(right) if is_truthy(value) else value
                if operator == "||":
                    return value if is_truthy(value) else self.evaluate(right)
                return self.evaluate(right) if is_nullish(value) else value
            case ConditionalExpression(test=test, consequent=consequent, alternate=alternate):
                if is_truthy(self.evaluate(test)):
                    return self.evaluate(consequent)
                return self.evaluate(alternate)
            case MemberExpression():
                return self._member(node)
            case JSXElement():
                if self._jsx is None:
                    raise EvaluationError.unsupported(node.type)
                return self._jsx(node)
            case _:
                raise EvaluationError.unsupported(node.type)

    def _array(self, elements: tuple[Expression | None, ...]) -> list[Any]:
        result: list[Any] = []
        for element in elements:
            if element is None:
                result.append(UNDEFINED)
            elif isinstance(element, SpreadElement):
                value = self.evaluate(element.argument)
                if isinstance(value, list):
                    result.extend(value)
                elif isinstance(value, str):
                    result.extend(value)
                else:
                    raise EvaluationError(f"{to_js_string(value)} is not iterable")
            else:
                result.append(self.evaluate(element))
        return result

    def _object(self, properties: tuple[Property | SpreadElement, ...]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for prop in properties:
            if isinstance(prop, SpreadElement):
                value = self.evaluate(prop.argument)
                if isinstance(value, dict):
                    result.update(value)
                elif isinstance(value, list | str):
                    result.update((str(i), item) for i, item in enumerate(value))
                continue
            if prop.computed:
                key = property_key(self.evaluate(prop.key))
            elif isinstance(prop.key, Identifier):
                key = prop.key.name
            elif isinstance(prop.key, Literal):
                key = property_key(prop.key.value)
            else:
                raise EvaluationError.unsupported(prop.key.type)
            if prop.shorthand:
                # {a} reads a free variable
                raise EvaluationError.unsupported("Identifier")
            result[key] = self.evaluate(prop.value)
        return result

    def _unary(self, operator: str, argument: Expression, node: UnaryExpression) -> Any:
        if operator == "typeof":
            return js_typeof(self.evaluate(argument))
        if operator == "delete":
            raise EvaluationError.unsupported(f"{node.type} (delete)")
        value = self.evaluate(argument)
        match operator:
            case "!":
                return not is_truthy(value)
            case "-":
                number = to_number(value)
                # -0 keeps its sign so 1 / -0 is -Infinity
                return -number if number != 0 else -float(number)
            case "+":
                return to_number(value)
            case "~":
                return ~to_int32(value)
            case "void":
                return UNDEFINED
        raise EvaluationError.unsupported(f"{node.type} ({operator})")

    def _member(self, node: MemberExpression) -> Any:
        target = self.evaluate(node.obj)
        if is_nullish(target):
            if node.optional:
                return UNDEFINED
            key = self._member_key(node)
            raise EvaluationError(
                f"Cannot read properties of {to_js_string(target)} (reading '{key}')"
            )
        return get_property(target, self._member_key(node))

    def _member_key(self, node: MemberExpression) -> str:
        if node.computed:
            return property_key(self.evaluate(node.prop))
        if isinstance(node.prop, Identifier):
            return node.prop.name
        raise EvaluationError.unsupported(node.prop.type)


def array_index(key: str) -> int | None:
    """Return ``key`` as an array index when it is one in canonical form.

    Only ASCII digits without leading zeros qualify, so ``"01"`` and ``"²"``
    are ordinary property names.
    """
    if key.isascii() and key.isdigit() and (key == "0" or not key.startswith("0")):
        return int(key)
    return None


def get_property(target: Any, key: str) -> Any:
    """Read an own data property. Never returns functions or prototype members."""
    if isinstance(target, dict):
        return target.get(key, UNDEFINED)
    if isinstance(target, list | str):
        if key == "length":
            return len(target)
        index = array_index(key)
        if index is not None and index < len(target):
            return target[index]
    return UNDEFINED


def binary_operation(operator: str, left: Any, right: Any) -> Any:
    """Apply a binary operator with JavaScript semantics."""
    match operator:
        case "+":
            left, right = to_primitive(left), to_primitive(right)
            if isinstance(left, str) or isinstance(right, str):
                return to_js_string(left) + to_js_string(right)
            return _arithmetic(operator, to_number(left), to_number(right))
        case "-" | "*" | "/" | "%" | "**":
            return _arithmetic(operator, to_number(left), to_number(right))
        case "===":
            return strict_equals(left, right)
        case "!==":
            return not strict_equals(left, right)
        case "==":
            return loose_equals(left, right)
        case "!=":
            return not loose_equals(left, right)
        case "<" | ">" | "<=" | ">=":
            return _compare(operator, to_primitive(left), to_primitive(right))
        case "&":
            return to_int32(left) & to_int32(right)
        case "|":
            return to_int32(to_int32(left) | to_int32(right))
        case "^":
            return to_int32(to_int32(left) ^ to_int32(right))
        case "<<":
            return to_int32(to_int32(left) << (to_uint32(right) & 31))
        case ">>":
            return to_int32(left) >> (to_uint32(right) & 31)
        case ">>>":
            return to_uint32(left) >> (to_uint32(right) & 31)
        case "in":
            if isinstance(right, dict):
                return property_key(left) in right
            if isinstance(right, list):
                key = property_key(left)
                index = array_index(key)
                return key == "length" or (index is not None and index < len(right))
            raise EvaluationError(
                f"Cannot use 'in' operator to search for '{to_js_string(left)}' in {to_js_string(right)}"
            )
    raise EvaluationError.unsupported(f"BinaryExpression ({operator})")


def _arithmetic(operator: str, left: int | float, right: int | float) -> int | float:
    both_int = isinstance(left, int) and isinstance(right, int)
    match operator:
        case "+":
            return normalize_number(left + right)
        case "-":
            return normalize_number(left - right)
        case "*":
            if both_int:
                product = left * right
                if product == 0 and (left < 0 or right < 0):
                    return -0.0
                return normalize_number(product)
            return _float_op(lambda: float(left) * float(right))
        case "/":
            if right == 0:
                if left == 0 or (isinstance(left, float) and math.isnan(left)):
                    return math.nan
                negative = (left < 0) != (math.copysign(1, right) < 0)
                return -math.inf if negative else math.inf
            if both_int and left != 0 and left % right == 0:
                return normalize_number(left // right)
            return left / right
        case "%":
            if right == 0 or (isinstance(left, float) and math.isinf(left)):
                return math.nan
            if isinstance(right, float) and math.isinf(right):
                return left
            if both_int:
                return int(math.fmod(left, right))
            return math.fmod(left, right)
        case "**":
            if both_int and right >= 0 and abs(left) <= 2**26 and right <= 64:
                return normalize_number(left**right)
            if left == 0 and right < 0:
                odd = float(right).is_integer() and int(right) % 2 == 1
                return -math.inf if odd and math.copysign(1, left) < 0 else math.inf
            return _float_op(lambda: math.pow(float(left), float(right)))
    raise EvaluationError.unsupported(f"BinaryExpression ({operator})")


def _float_op(fn: Callable[[], float]) -> float:
    try:
        return fn()
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def _compare(operator: str, left: Any, right: Any) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        a: Any = left
        b: Any = right
    else:
        a, b = to_number(left), to_number(right)
        if (isinstance(a, float) and math.isnan(a)) or (isinstance(b, float) and math.isnan(b)):
            return False
    match operator:
        case "<":
            return a < b
        case ">":
            return a > b
        case "<=":
            return a <= b
        case _:
            return a >= b


def evaluate(node: Expression, *, jsx: JsxHandler | None = None) -> Any:
    """Evaluate a restricted expression tree.

    Args:
        node: Parsed expression
        jsx: Optional handler for JSX elements appearing as values

    Returns:
        The resulting value (see :mod:`safemdx.expressions.values`)

    Raises:
        EvaluationError: If the tree contains an unsupported construct
    """
    return Evaluator(jsx).evaluate(node)
