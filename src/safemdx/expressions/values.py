"""JavaScript value semantics on Python values.

Mapping used throughout safemdx:

=============  ======================
JavaScript     Python
=============  ======================
null           ``None``
undefined      :data:`UNDEFINED`
boolean        ``bool``
number         ``int`` / ``float``
string         ``str``
array          ``list``
object         ``dict[str, Any]``
=============  ======================

Anything else (for example an element produced from a JSX attribute value)
is treated as an opaque object.

"""

from __future__ import annotations

import math
import re
from typing import Any, Final

MAX_SAFE_INTEGER: Final = 2**53 - 1

# StrWhiteSpaceChar: WhiteSpace and LineTerminator
_JS_WHITESPACE: Final = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)
_DECIMAL_LITERAL: Final = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class _Undefined:
    """Singleton standing in for JavaScript ``undefined``."""

    __slots__ = ()
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Final = _Undefined()


def is_nullish(value: Any) -> bool:
    return value is None or value is UNDEFINED


def is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def normalize_number(value: int | float) -> int | float:
    """Collapse results into the range a JavaScript number can represent.

    Integers stay exact inside the safe-integer range; larger magnitudes turn
    into floats (or infinities).
    """
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) > MAX_SAFE_INTEGER:
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    return value


def is_truthy(value: Any) -> bool:
    """JavaScript ToBoolean."""
    if value is None or value is UNDEFINED or value is False:
        return False
    if is_number(value):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


def js_typeof(value: Any) -> str:
    """JavaScript ``typeof`` operator."""
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def number_to_string(value: int | float) -> str:
    """Format a number the way JavaScript's ``String(n)`` does."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        text = repr(value)
        if "e" in text:
            mantissa, exponent = text.split("e")
            sign = "-" if exponent.startswith("-") else "+"
            text = f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"
        return text
    return str(value)


def to_js_string(value: Any) -> str:
    """JavaScript ToString (arrays joined with commas, objects opaque)."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return number_to_string(value)
    if isinstance(value, list):
        return ",".join("" if is_nullish(item) else to_js_string(item) for item in value)
    return "[object Object]"


def string_to_number(text: str) -> int | float:
    """JavaScript ``Number(string)``: decimal, ``0x``/``0o``/``0b`` or ``Infinity``."""
    stripped = text.strip(_JS_WHITESPACE)
    if stripped == "":
        return 0
    if not stripped.isascii() or "_" in stripped:
        return math.nan
    signed = stripped[0] in "+-"
    body = stripped[1:] if signed else stripped
    if body == "Infinity":
        return -math.inf if stripped.startswith("-") else math.inf
    if body[:2].lower() in ("0x", "0o", "0b"):
        if signed:
            return math.nan
        try:
            return normalize_number(int(stripped, 0))
        except ValueError:
            return math.nan
    if not _DECIMAL_LITERAL.fullmatch(stripped):
        return math.nan
    number = float(stripped)
    if number == 0:
        return -0.0 if stripped.startswith("-") else 0
    if number.is_integer() and "." not in stripped and "e" not in stripped.lower():
        return normalize_number(int(number))
    return number


def to_number(value: Any) -> int | float:
    """JavaScript ToNumber."""
    if isinstance(value, bool):
        return 1 if value else 0
    if is_number(value):
        return value
    if value is None:
        return 0
    if value is UNDEFINED:
        return math.nan
    if isinstance(value, str):
        return string_to_number(value)
    if isinstance(value, list):
        return string_to_number(to_js_string(value))
    return math.nan


def to_int32(value: Any) -> int:
    number = to_number(value)
    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            return 0
        number = int(number)
    number &= 0xFFFFFFFF
    return number - 0x100000000 if number >= 0x80000000 else number


def to_uint32(value: Any) -> int:
    return to_int32(value) & 0xFFFFFFFF


def to_primitive(value: Any) -> Any:
    """ToPrimitive with the default hint: arrays and objects become strings."""
    if isinstance(value, list | dict) or not (
        value is None or value is UNDEFINED or isinstance(value, bool | int | float | str)
    ):
        return to_js_string(value)
    return value


def property_key(value: Any) -> str:
    """ToPropertyKey: every object key is a string."""
    return to_js_string(value)


def strict_equals(left: Any, right: Any) -> bool:
    """JavaScript ``===``."""
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if is_nullish(left) or is_nullish(right):
        return left is right
    return left is right


def loose_equals(left: Any, right: Any) -> bool:
    """JavaScript ``==``."""
    if is_nullish(left) or is_nullish(right):
        return is_nullish(left) and is_nullish(right)
    if js_typeof(left) == js_typeof(right):
        return strict_equals(left, right)
    if isinstance(left, bool):
        return loose_equals(to_number(left), right)
    if isinstance(right, bool):
        return loose_equals(left, to_number(right))
    if is_number(left) and isinstance(right, str):
        return left == to_number(right)
    if isinstance(left, str) and is_number(right):
        return to_number(left) == right
    if isinstance(left, list | dict):
        return loose_equals(to_primitive(left), right)
    if isinstance(right, list | dict):
        return loose_equals(left, to_primitive(right))
    return False
