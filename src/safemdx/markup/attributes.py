"""HTML attribute to component prop conversion.

Static tables (built once at import) plus the per-attribute conversion used
by the markup normalizer: name remapping, boolean and numeric coercion,
style-string parsing and event-handler placeholders.

Example:
    >>> convert_attribute_name("class"), convert_attribute_name("onclick")
    ('className', 'onClick')
    >>> convert_attribute_name("stroke-width"), convert_attribute_name("tabindex")
    ('strokeWidth', 'tabIndex')

"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Final

from safemdx.errors import ExpressionSyntaxError
from safemdx.expressions import parse_expression
from safemdx.expressions.nodes import (
    ArrowFunctionExpression,
    Identifier,
    Literal,
    ObjectExpression,
    Property,
)
from safemdx.expressions.values import is_number, string_to_number
from safemdx.nodes import AttributeValueExpression, JsxAttribute

RENAMED_ATTRIBUTES: Final[dict[str, str]] = {
    "class": "className",
    "for": "htmlFor",
    "accept-charset": "acceptCharset",
    "http-equiv": "httpEquiv",
}

EVENT_HANDLER_ATTRIBUTES: Final[tuple[str, ...]] = (
    "onAbort",
    "onAnimationEnd",
    "onAnimationIteration",
    "onAnimationStart",
    "onBlur",
    "onCanPlay",
    "onCanPlayThrough",
    "onChange",
    "onClick",
    "onContextMenu",
    "onCopy",
    "onCut",
    "onDoubleClick",
    "onDrag",
    "onDragEnd",
    "onDragEnter",
    "onDragLeave",
    "onDragOver",
    "onDragStart",
    "onDrop",
    "onDurationChange",
    "onEnded",
    "onError",
    "onFocus",
    "onInput",
    "onInvalid",
    "onKeyDown",
    "onKeyPress",
    "onKeyUp",
    "onLoad",
    "onLoadedData",
    "onLoadedMetadata",
    "onLoadStart",
    "onMouseDown",
    "onMouseEnter",
    "onMouseLeave",
    "onMouseMove",
    "onMouseOut",
    "onMouseOver",
    "onMouseUp",
    "onPaste",
    "onPause",
    "onPlay",
    "onPlaying",
    "onPointerCancel",
    "onPointerDown",
    "onPointerEnter",
    "onPointerLeave",
    "onPointerMove",
    "onPointerOut",
    "onPointerOver",
    "onPointerUp",
    "onProgress",
    "onReset",
    "onScroll",
    "onSeeked",
    "onSeeking",
    "onSelect",
    "onSubmit",
    "onTimeUpdate",
    "onToggle",
    "onTouchCancel",
    "onTouchEnd",
    "onTouchMove",
    "onTouchStart",
    "onTransitionEnd",
    "onVolumeChange",
    "onWaiting",
    "onWheel",
)

# Props whose names are camelCase while HTML spells them lowercase
LOWERCASED_ATTRIBUTES: Final[tuple[str, ...]] = (
    "accessKey",
    "allowFullScreen",
    "autoCapitalize",
    "autoComplete",
    "autoCorrect",
    "autoFocus",
    "autoPlay",
    "autoSave",
    "cellPadding",
    "cellSpacing",
    "charSet",
    "classID",
    "colSpan",
    "contentEditable",
    "contextMenu",
    "controlsList",
    "crossOrigin",
    "dateTime",
    "encType",
    "enterKeyHint",
    "formAction",
    "formEncType",
    "formMethod",
    "formNoValidate",
    "formTarget",
    "frameBorder",
    "hrefLang",
    "inputMode",
    "itemID",
    "itemProp",
    "itemRef",
    "itemScope",
    "itemType",
    "marginHeight",
    "marginWidth",
    "maxLength",
    "mediaGroup",
    "minLength",
    "noModule",
    "noValidate",
    "playsInline",
    "radioGroup",
    "readOnly",
    "referrerPolicy",
    "rowSpan",
    "spellCheck",
    "srcDoc",
    "srcLang",
    "srcSet",
    "tabIndex",
    "useMap",
    # SVG
    "attributeName",
    "baseFrequency",
    "calcMode",
    "clipPathUnits",
    "diffuseConstant",
    "filterUnits",
    "gradientTransform",
    "gradientUnits",
    "kernelMatrix",
    "keyPoints",
    "keySplines",
    "keyTimes",
    "lengthAdjust",
    "markerHeight",
    "markerUnits",
    "markerWidth",
    "maskContentUnits",
    "maskUnits",
    "numOctaves",
    "pathLength",
    "patternContentUnits",
    "patternTransform",
    "patternUnits",
    "preserveAspectRatio",
    "primitiveUnits",
    "refX",
    "refY",
    "repeatCount",
    "repeatDur",
    "specularExponent",
    "spreadMethod",
    "startOffset",
    "stdDeviation",
    "surfaceScale",
    "tableValues",
    "textLength",
    "viewBox",
)

# SVG attributes spelled with dashes or colons, camelized as props
SVG_CAMELIZED_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    (
        "alignment-baseline",
        "clip-path",
        "clip-rule",
        "color-interpolation-filters",
        "dominant-baseline",
        "fill-opacity",
        "fill-rule",
        "flood-color",
        "flood-opacity",
        "font-family",
        "font-size",
        "font-style",
        "font-weight",
        "image-rendering",
        "letter-spacing",
        "lighting-color",
        "marker-end",
        "marker-mid",
        "marker-start",
        "pointer-events",
        "shape-rendering",
        "stop-color",
        "stop-opacity",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-opacity",
        "stroke-width",
        "text-anchor",
        "text-decoration",
        "text-rendering",
        "vector-effect",
        "word-spacing",
        "xlink:actuate",
        "xlink:href",
        "xlink:role",
        "xlink:show",
        "xlink:title",
        "xlink:type",
        "xml:base",
        "xml:lang",
        "xml:space",
        "xmlns:xlink",
    )
)

# Boolean attributes that keep an explicit boolean expression value
LITERAL_BOOLEAN_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    (
        "allowFullScreen",
        "async",
        "autoFocus",
        "autoPlay",
        "checked",
        "controls",
        "default",
        "defer",
        "disabled",
        "formNoValidate",
        "hidden",
        "itemScope",
        "loop",
        "multiple",
        "muted",
        "noValidate",
        "open",
        "playsInline",
        "readOnly",
        "required",
        "reversed",
        "selected",
        "value",
        # SVG
        "externalResourcesRequired",
        "preserveAlpha",
    )
)

NUMBER_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    (
        "tabIndex",
        "cols",
        "rows",
        "size",
        "span",
        "colSpan",
        "rowSpan",
        "border",
        "start",
        "width",
        "height",
        "maxLength",
        "minLength",
    )
)

# Style properties whose px values are kept as strings
STYLE_DONT_STRIP_PX: Final[frozenset[str]] = frozenset(
    (
        "animationIterationCount",
        "columnCount",
        "fillOpacity",
        "flex",
        "flexGrow",
        "flexShrink",
        "fontWeight",
        "gridColumn",
        "gridRow",
        "lineClamp",
        "lineHeight",
        "opacity",
        "order",
        "orphans",
        "strokeOpacity",
        "tabSize",
        "widows",
        "zIndex",
        "zoom",
    )
)

_EVENT_HANDLERS_BY_LOWER: Final = {name.lower(): name for name in EVENT_HANDLER_ATTRIBUTES}
_LOWERCASED_BY_LOWER: Final = {name.lower(): name for name in LOWERCASED_ATTRIBUTES}
_EVENT_HANDLER_SET: Final = frozenset(EVENT_HANDLER_ATTRIBUTES)

_CAMELIZE = re.compile(r"[-:]([a-z])")
_CSS_VARIABLE = re.compile(r"^--\w+")
_PX_VALUE = re.compile(r"^(-?\d+(?:\.\d+)?)px$")
_BARE_CALL = re.compile(r"^\s*([A-Za-z_$][\w$]*)\s*\(\s*\)\s*;?\s*$")


def camelize(name: str) -> str:
    """kebab-case or colon:case to camelCase; custom properties unchanged."""
    if _CSS_VARIABLE.match(name):
        return name
    return _CAMELIZE.sub(lambda m: m.group(1).upper(), name)


def convert_attribute_name(name: str) -> str:
    """Map an HTML attribute name to its component prop name."""
    if name in RENAMED_ATTRIBUTES:
        return RENAMED_ATTRIBUTES[name]
    if name in _EVENT_HANDLERS_BY_LOWER:
        return _EVENT_HANDLERS_BY_LOWER[name]
    if name in _LOWERCASED_BY_LOWER:
        return _LOWERCASED_BY_LOWER[name]
    if name in SVG_CAMELIZED_ATTRIBUTES:
        return camelize(name)
    return name


def _style_property(name: str) -> str:
    if name.startswith("--"):
        return name
    if name.startswith("-ms-"):
        name = name[1:]
    return camelize(name.lower())


def parse_style(style: str) -> dict[str, str | int | float]:
    """Parse an inline style string into a props-style mapping.

    Example:
        >>> parse_style("color: red; font-size: 12px; line-height: 20px")
        {'color': 'red', 'fontSize': 12, 'lineHeight': '20px'}
        >>> parse_style("--brand-color: #f00; -webkit-transition: none")
        {'--brand-color': '#f00', 'WebkitTransition': 'none'}

    """
    result: dict[str, str | int | float] = {}
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        name, value = name.strip(), value.strip()
        if not sep or not name:
            continue
        key = _style_property(name)
        if key.startswith("--"):
            result[key] = value
            continue
        px = _PX_VALUE.match(value)
        if px and key not in STYLE_DONT_STRIP_PX:
            number = float(px.group(1))
            result[key] = int(number) if number.is_integer() and "." not in px.group(1) else number
        else:
            result[key] = value
    return result


def style_expression(style: dict[str, str | int | float]) -> AttributeValueExpression:
    """Object-literal expression for a parsed style mapping."""
    properties = tuple(
        Property(key=Literal(value=key, raw=json.dumps(key)), value=Literal(value=value, raw=json.dumps(value)))
        for key, value in style.items()
    )
    return AttributeValueExpression(
        source=json.dumps(style, ensure_ascii=False),
        expression=ObjectExpression(properties=properties),
    )


def _handler_body_parses(body: str) -> bool:
    statements = [statement.strip() for statement in body.split(";")]
    try:
        for statement in statements:
            if statement:
                parse_expression(statement)
    except ExpressionSyntaxError:
        return False
    return True


def event_handler_expression(value: str) -> AttributeValueExpression:
    """Placeholder expression for an inline event handler.

    ``doThing()`` becomes a reference to ``doThing``; other code is wrapped
    in ``(event) => { ... }``, or a "fix me" function when it does not
    parse. Never raises.

    Example:
        >>> event_handler_expression("toggle()").source
        'toggle'
        >>> event_handler_expression("a(); b(1)").source
        '(event) => { a(); b(1) }'

    """
    bare = _BARE_CALL.match(value)
    if bare:
        name = bare.group(1)
        return AttributeValueExpression(source=name, expression=Identifier(name))
    body = value.strip()
    if _handler_body_parses(body):
        return AttributeValueExpression(
            source=f"(event) => {{ {body} }}",
            expression=ArrowFunctionExpression(params=("event",), body=body),
        )
    placeholder = f"/* fix me: {json.dumps(body, ensure_ascii=False)} */"
    return AttributeValueExpression(
        source=f"() => {{ {placeholder} }}",
        expression=ArrowFunctionExpression(params=(), body=placeholder),
    )


def _finite_number(value: str) -> int | float | None:
    number = string_to_number(value)
    if not is_number(number) or (isinstance(number, float) and not math.isfinite(number)):
        return None
    return number


def _boolean_expression(flag: bool) -> AttributeValueExpression:
    text = "true" if flag else "false"
    return AttributeValueExpression(source=text, expression=Literal(value=flag, raw=text))


def convert_attribute(html_name: str, value: str) -> JsxAttribute:
    """Convert one (already value-converted) HTML attribute to a prop.

    Args:
        html_name: Attribute name as written in the markup (lowercase)
        value: Attribute value
    """
    name = convert_attribute_name(html_name)

    if name in _EVENT_HANDLER_SET and value.strip():
        return JsxAttribute(name=name, value=event_handler_expression(value))

    if value in ("", "true") or value == html_name:
        if name in LITERAL_BOOLEAN_ATTRIBUTES:
            return JsxAttribute(name=name, value=_boolean_expression(True))
        return JsxAttribute(name=name, value=None)
    if value == "false" and name in LITERAL_BOOLEAN_ATTRIBUTES:
        return JsxAttribute(name=name, value=_boolean_expression(False))

    if name in NUMBER_ATTRIBUTES:
        number = _finite_number(value)
        if number is not None:
            return JsxAttribute(
                name=name,
                value=AttributeValueExpression(source=value, expression=Literal(value=number, raw=value)),
            )

    if name == "style" and ":" in value:
        style = parse_style(value)
        if style:
            return JsxAttribute(name=name, value=style_expression(style))

    return JsxAttribute(name=name, value=value)


def attribute_value(attribute: JsxAttribute) -> Any:
    """Literal value of a converted attribute, for inspection and tests."""
    value = attribute.value
    if isinstance(value, AttributeValueExpression) and isinstance(value.expression, Literal):
        return value.expression.value
    return value
