"""Standard HTML element names, for filtering converted markup.

Pass :func:`html_tag_name_converter` as ``convert_tag_name`` (or as the
``markup_tag_converter`` config option) to keep only real HTML elements;
unknown tags are then dropped and their content spliced into the parent.

Example:
    >>> html_tag_name_converter("DIV"), html_tag_name_converter("page")
    ('div', '')

"""

from __future__ import annotations

from typing import Final

VALID_HTML_ELEMENTS: Final[frozenset[str]] = frozenset(
    (
        # Document metadata
        "base",
        "head",
        "link",
        "meta",
        "style",
        "title",
        # Content sectioning
        "address",
        "article",
        "aside",
        "footer",
        "header",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "main",
        "nav",
        "section",
        # Text content
        "blockquote",
        "dd",
        "div",
        "dl",
        "dt",
        "figcaption",
        "figure",
        "hr",
        "li",
        "ol",
        "p",
        "pre",
        "ul",
        # Inline text semantics
        "a",
        "abbr",
        "b",
        "bdi",
        "bdo",
        "br",
        "cite",
        "code",
        "data",
        "dfn",
        "em",
        "i",
        "kbd",
        "mark",
        "q",
        "rp",
        "rt",
        "ruby",
        "s",
        "samp",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "time",
        "u",
        "var",
        "wbr",
        # Image and multimedia
        "area",
        "audio",
        "img",
        "map",
        "track",
        "video",
        # Embedded content
        "embed",
        "iframe",
        "object",
        "param",
        "picture",
        "portal",
        "source",
        # SVG and MathML
        "svg",
        "math",
        "path",
        # Scripting
        "canvas",
        "noscript",
        "script",
        # Edits
        "del",
        "ins",
        # Tables
        "caption",
        "col",
        "colgroup",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        # Forms
        "button",
        "datalist",
        "fieldset",
        "form",
        "input",
        "label",
        "legend",
        "meter",
        "optgroup",
        "option",
        "output",
        "progress",
        "select",
        "textarea",
        # Interactive
        "details",
        "dialog",
        "menu",
        "summary",
        # Web components
        "slot",
        "template",
    )
)


def html_tag_name_converter(tag_name: str) -> str:
    """Lowercased name for valid HTML elements, ``""`` otherwise."""
    lowered = tag_name.lower()
    return lowered if lowered in VALID_HTML_ELEMENTS else ""
