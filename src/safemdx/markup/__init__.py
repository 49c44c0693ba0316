"""Raw markup conversion.

Public API:
    parse_markup: Convert an HTML fragment into document nodes
    MarkupOptions: Conversion hooks (tag names, attribute values, text)
    convert_attribute_name: HTML attribute name to prop name
    html_tag_name_converter: Keep only standard HTML elements

"""

from safemdx.markup.attributes import (
    camelize,
    convert_attribute,
    convert_attribute_name,
    event_handler_expression,
    parse_style,
)
from safemdx.markup.normalizer import DEFAULT_MARKUP_OPTIONS, MarkupOptions, parse_markup
from safemdx.markup.valid_elements import VALID_HTML_ELEMENTS, html_tag_name_converter

__all__ = [
    "DEFAULT_MARKUP_OPTIONS",
    "VALID_HTML_ELEMENTS",
    "MarkupOptions",
    "camelize",
    "convert_attribute",
    "convert_attribute_name",
    "event_handler_expression",
    "html_tag_name_converter",
    "parse_markup",
    "parse_style",
]
