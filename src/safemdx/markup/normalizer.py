"""Raw markup to document nodes.

Raw HTML embedded in a document (``html`` nodes) is re-parsed with
BeautifulSoup's ``html.parser`` backend and converted into the same node
types the rest of the pipeline understands: elements become inline
:class:`~safemdx.nodes.JsxElement` invocations, text becomes
:class:`~safemdx.nodes.Text` (or, when a document parser is supplied, the
nodes it produces). Comments, doctypes, CDATA sections and processing
instructions are dropped.

The parser is forgiving: an unmatched closing tag produces nothing and an
unmatched opening tag keeps whatever follows it as children.

Example:
    >>> [node.name for node in parse_markup('<div class="x">hi</div>')]
    ['div']

Thread Safety:
Stateless. Each call builds its own soup.

"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from safemdx.location import SourceLocation
from safemdx.markup.attributes import convert_attribute
from safemdx.nodes import JsxElement, Node, RenderMode, Text
from safemdx.utils.logger import get_logger

logger = get_logger(__name__)

type ConvertTagName = Callable[[str], str]
type ConvertAttributeValue = Callable[[str, str, str], str]
type TextToMarkdown = Callable[[str], str]
type ParseAsDocument = Callable[[str], Sequence[Node]]
type OnMarkupError = Callable[[Exception, str], None]


def default_convert_tag_name(tag_name: str) -> str:
    return tag_name.lower()


def default_convert_attribute_value(name: str, value: str, tag_name: str) -> str:
    return value


@dataclass(frozen=True, slots=True)
class MarkupOptions:
    """Hooks for :func:`parse_markup`.

    Attributes:
        convert_tag_name: Maps a tag name to a component name; ``""`` drops
            the element and keeps its children
        convert_attribute_value: ``(name, value, tag_name) -> value``, applied
            before attribute conversion
        parse_as_document: Parses non-blank text into document nodes
            (typically inline markdown); None keeps text as-is
        text_to_markdown: Rewrites text before ``parse_as_document``
        on_error: Receives ``parse_as_document`` failures with the text that
            failed; failures are logged when absent
        location: Location given to every produced node
    """

    convert_tag_name: ConvertTagName = default_convert_tag_name
    convert_attribute_value: ConvertAttributeValue = default_convert_attribute_value
    parse_as_document: ParseAsDocument | None = None
    text_to_markdown: TextToMarkdown | None = None
    on_error: OnMarkupError | None = None
    location: SourceLocation = field(default_factory=SourceLocation.unknown)


DEFAULT_MARKUP_OPTIONS = MarkupOptions()


class _Converter:
    __slots__ = ("_options",)

    def __init__(self, options: MarkupOptions) -> None:
        self._options = options

    def convert(self, element: PageElement) -> list[Node]:
        if isinstance(element, Tag):
            return self._tag(element)
        if isinstance(element, PreformattedString):
            # comments, doctypes, CDATA, processing instructions
            return []
        if isinstance(element, NavigableString):
            return self._text(str(element))
        return []

    def convert_all(self, elements: Sequence[PageElement]) -> list[Node]:
        nodes: list[Node] = []
        for element in elements:
            nodes.extend(self.convert(element))
        return nodes

    def _tag(self, tag: Tag) -> list[Node]:
        options = self._options
        children = tuple(self.convert_all(list(tag.children)))
        name = options.convert_tag_name(tag.name)
        if not name:
            return list(children)

        attributes = tuple(
            convert_attribute(attr, options.convert_attribute_value(attr, _attribute_text(value), tag.name))
            for attr, value in tag.attrs.items()
        )
        return [
            JsxElement(
                location=options.location,
                name=name,
                attributes=attributes,
                children=children,
                mode=RenderMode.INLINE,
            )
        ]

    def _text(self, value: str) -> list[Node]:
        options = self._options
        if options.parse_as_document is None or not value.strip():
            return [Text(location=options.location, value=value)]

        try:
            source = options.text_to_markdown(value) if options.text_to_markdown else value
            return list(options.parse_as_document(source))
        except Exception as exc:
            # User callbacks may raise anything; the text survives unparsed.
            if options.on_error is not None:
                options.on_error(exc, value)
            else:
                logger.debug("Failed to parse markdown in markup text %r: %s", value, exc)
        return [Text(location=options.location, value=value)]


def _attribute_text(value: str | list[str] | None) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return value


def parse_markup(html: str, options: MarkupOptions = DEFAULT_MARKUP_OPTIONS) -> list[Node]:
    """Convert a raw markup fragment into document nodes.

    Args:
        html: Markup source; surrounding whitespace is ignored
        options: Conversion hooks

    Returns:
        Top-level nodes of the fragment, in source order
    """
    source = html.strip()
    if not source:
        return []
    soup = BeautifulSoup(source, "html.parser", multi_valued_attributes=None)
    return _Converter(options).convert_all(list(soup.children))
