"""Component capability map: which names a document may invoke.

A capability is whatever the element construction primitive accepts as an
element type: a tag name string for native elements, or a caller supplied
component. The map is built once per walker run from the caller's
components merged over :data:`NATIVE_TAGS`, and is read-only afterwards.

Dot-path names (``Docs.Callout``) are resolved through nested mappings.
Resolution fails closed: a missing segment anywhere yields ``None``, never a
partially resolved value.

Thread Safety:
Capability maps are read-only ``MappingProxyType`` views.

"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

# Native element names, each mapped to itself
NATIVE_TAGS: tuple[str, ...] = (
    "blockquote",
    "strong",
    "em",
    "del",
    "hr",
    "a",
    "b",
    "br",
    "button",
    "div",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "head",
    "iframe",
    "img",
    "input",
    "label",
    "li",
    "link",
    "ol",
    "p",
    "path",
    "picture",
    "script",
    "section",
    "source",
    "span",
    "sub",
    "sup",
    "svg",
    "table",
    "tbody",
    "td",
    "tfoot",
    "th",
    "thead",
    "tr",
    "ul",
    "video",
    "code",
    "pre",
    "figure",
    "canvas",
    "details",
    "dl",
    "dt",
    "dd",
    "fieldset",
    "footer",
    "header",
    "legend",
    "main",
    "mark",
    "nav",
    "progress",
    "summary",
    "time",
    "figcaption",
)

_NATIVE_MAP: Mapping[str, Any] = MappingProxyType({tag: tag for tag in NATIVE_TAGS})


def build_capability_map(components: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    """Merge caller components over the native tags.

    Caller entries override natives of the same name. Nested mappings are
    kept as-is so that dot-path names can be resolved through them.

    Returns:
        Read-only mapping for one walker run
    """
    if not components:
        return _NATIVE_MAP
    return MappingProxyType({**_NATIVE_MAP, **components})


def resolve_capability(capabilities: Mapping[str, Any], name: str) -> Any | None:
    """Resolve a (possibly dotted) component name.

    Segments are stripped and empty segments dropped, so ``"Foo. Bar"``
    resolves like ``"Foo.Bar"``. Only mappings are traversed: a segment
    under a non-mapping value is a miss.

    Example:
        >>> caps = build_capability_map({"Docs": {"Note": "aside"}})
        >>> resolve_capability(caps, "Docs.Note")
        'aside'
        >>> resolve_capability(caps, "Docs.Missing") is None
        True

    """
    segments = [segment.strip() for segment in name.split(".")]
    segments = [segment for segment in segments if segment]
    if not segments:
        return None
    current: Any = capabilities
    for segment in segments:
        if not isinstance(current, Mapping) or segment not in current:
            return None
        current = current[segment]
    return current
