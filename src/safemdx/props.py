"""Attribute assembly for component invocations.

Turns the ordered attribute list of a :class:`~safemdx.nodes.JsxElement`
into ``(name, value)`` pairs. Literal values pass through, expression values
go through the restricted evaluator, spreads merge the entries of the object
they evaluate to. Every failure produces exactly one diagnostic and drops
only the offending attribute; siblings keep going.

Pairs keep declaration order, so ``dict(pairs)`` gives later declarations
precedence over earlier ones (including spread entries).

"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from safemdx.diagnostics import Diagnostic, collapse_snippet
from safemdx.errors import EvaluationError, ExpressionSyntaxError
from safemdx.expressions import (
    UNDEFINED,
    Expression,
    JSXElement,
    evaluate,
    parse_expression,
    parse_spread,
)
from safemdx.nodes import AttributeValueExpression, JsxAttribute, JsxElement, node_line
from safemdx.utils.logger import get_logger

logger = get_logger(__name__)

type JsxRenderer = Callable[[JSXElement], Any]

# Expression sources that never need the evaluator
SHORTCUT_VALUES: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}


def export_value(value: Any) -> Any:
    """Replace ``undefined`` with None, recursively, for use as a prop."""
    if value is UNDEFINED:
        return None
    if isinstance(value, list):
        return [export_value(item) for item in value]
    if isinstance(value, dict):
        return {key: export_value(item) for key, item in value.items()}
    return value


def spread_entries(value: Any) -> list[tuple[str, Any]]:
    """Own enumerable entries of a spread value (objects, arrays, strings)."""
    if isinstance(value, dict):
        return list(value.items())
    if isinstance(value, list | str):
        return [(str(i), item) for i, item in enumerate(value)]
    return []


class PropsBuilder:
    """Collects the props of component invocations for one walker run.

    Args:
        on_error: Receives diagnostics
        jsx: Renders JSX elements found in attribute values; returns None when
            the element could not be rendered (it reports its own diagnostic)
        evaluate_expressions: When False, expression attributes are reported
            and skipped instead of evaluated

    """

    __slots__ = ("_on_error", "_jsx", "_evaluate_expressions")

    def __init__(
        self,
        on_error: Callable[[Diagnostic], None],
        *,
        jsx: JsxRenderer | None = None,
        evaluate_expressions: bool = True,
    ) -> None:
        self._on_error = on_error
        self._jsx = jsx
        self._evaluate_expressions = evaluate_expressions

    def collect(self, element: JsxElement) -> list[tuple[str, Any]]:
        """Ordered ``(name, value)`` pairs for an element's attributes."""
        line = node_line(element)
        pairs: list[tuple[str, Any]] = []
        for attribute in element.attributes:
            if isinstance(attribute, JsxAttribute):
                self._attribute(attribute, line, pairs)
            else:
                self._spread(attribute.source, attribute.expression, line, pairs)
        return pairs

    def build(self, element: JsxElement) -> dict[str, Any]:
        return dict(self.collect(element))

    def _attribute(self, attribute: JsxAttribute, line: int | None, pairs: list[tuple[str, Any]]) -> None:
        name, value = attribute.name, attribute.value
        if value is None:
            pairs.append((name, True))
            return
        if not isinstance(value, AttributeValueExpression):
            pairs.append((name, value))
            return

        source = value.source
        if source.strip() in SHORTCUT_VALUES:
            pairs.append((name, SHORTCUT_VALUES[source.strip()]))
            return
        if not self._evaluate_expressions:
            self._on_error(Diagnostic(f"Expressions in jsx prop not evaluated: ({name}={{{source}}})", line=line))
            return

        try:
            expression = value.expression or parse_expression(source)
            if isinstance(expression, JSXElement) and self._jsx is not None:
                rendered = self._jsx(expression)
                if rendered is not None:
                    pairs.append((name, rendered))
                return
            result = evaluate(expression, jsx=self._jsx)
        except (ExpressionSyntaxError, EvaluationError) as exc:
            logger.debug("Attribute %s={%s} not evaluated: %s", name, source, exc)
            self._on_error(
                Diagnostic(f"Failed to evaluate expression attribute: {name}={{{source}}}. {exc}", line=line)
            )
            return
        pairs.append((name, export_value(result)))

    def _spread(
        self,
        source: str,
        expression: Expression | None,
        line: int | None,
        pairs: list[tuple[str, Any]],
    ) -> None:
        snippet = collapse_snippet(source)
        if not self._evaluate_expressions:
            self._on_error(Diagnostic(f"Expressions in jsx props are not supported ({snippet})", line=line))
            return
        try:
            argument = expression or parse_spread(source)
            result = evaluate(argument, jsx=self._jsx)
        except (ExpressionSyntaxError, EvaluationError) as exc:
            logger.debug("Spread %s not evaluated: %s", snippet, exc)
            self._on_error(Diagnostic(f"Failed to evaluate expression attribute: {snippet}. {exc}", line=line))
            return
        pairs.extend((key, export_value(item)) for key, item in spread_entries(result))
