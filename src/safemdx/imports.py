"""External-reference validation for ``import`` statements.

Documents may bind component names to modules hosted elsewhere::

    import Button from "https://esm.sh/btn"
    import { Card as Tile } from "https://esm.sh/ui"

Only absolute ``https`` URLs are accepted. Accepted bindings map the local
name to a location string, ``url`` for default imports and
``url#exportName`` for named ones; :func:`extract_component_info` splits a
location back into an :class:`ExternalReference`. Namespace imports bind
nothing.

Thread Safety:
All functions are pure. :class:`ImportMap` is read-only once built.

"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final
from urllib.parse import urlsplit

from safemdx.diagnostics import Diagnostic
from safemdx.errors import ExpressionSyntaxError
from safemdx.expressions import parse_module
from safemdx.expressions.nodes import ImportDefaultSpecifier, ImportSpecifier
from safemdx.nodes import EsmImport, node_line
from safemdx.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EXPORT: Final = "default"


@dataclass(frozen=True, slots=True)
class ExternalReference:
    """Validated pointer to a module export."""

    url: str
    export_name: str = DEFAULT_EXPORT


def is_trusted_url(url: str) -> bool:
    """True for absolute URLs using the ``https`` scheme.

    Example:
        >>> is_trusted_url("https://esm.sh/btn")
        True
        >>> is_trusted_url("http://esm.sh/btn"), is_trusted_url("./btn")
        (False, False)

    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme.lower() == "https" and bool(parts.netloc)


def parse_imports(node: EsmImport, on_error: Callable[[Diagnostic], None]) -> dict[str, str]:
    """Validate the import statements of one module block.

    Args:
        node: The ``mdxjsEsm`` node
        on_error: Receives one diagnostic per rejected statement

    Returns:
        Local binding name -> location string, for accepted statements only
    """
    line = node_line(node)
    declarations = node.declarations
    if declarations is None:
        try:
            declarations = parse_module(node.value)
        except ExpressionSyntaxError as exc:
            on_error(Diagnostic(f"Failed to parse ESM import: {exc}", line=line))
            return {}

    bindings: dict[str, str] = {}
    for declaration in declarations:
        url = declaration.source
        if not is_trusted_url(url):
            logger.debug("Rejected import from %r", url)
            on_error(
                Diagnostic(
                    f'Invalid import URL: "{url}". Only HTTPS URLs are allowed for security reasons.',
                    line=line,
                )
            )
            continue
        for specifier in declaration.specifiers:
            match specifier:
                case ImportDefaultSpecifier(local=local):
                    bindings[local] = url
                case ImportSpecifier(local=local, imported=imported):
                    bindings[local] = f"{url}#{imported}"
    return bindings


def extract_component_info(location: str) -> ExternalReference:
    """Split a location string on its first ``#``.

    Example:
        >>> extract_component_info("https://esm.sh/ui#Card")
        ExternalReference(url='https://esm.sh/ui', export_name='Card')
        >>> extract_component_info("https://esm.sh/btn").export_name
        'default'

    """
    url, sep, export_name = location.partition("#")
    if not sep:
        return ExternalReference(url=url)
    return ExternalReference(url=url, export_name=export_name or DEFAULT_EXPORT)


class ImportMap(Mapping[str, ExternalReference]):
    """Read-only view of the accepted external references of one run."""

    __slots__ = ("_locations",)

    def __init__(self, locations: Mapping[str, str] | None = None) -> None:
        self._locations: Mapping[str, str] = MappingProxyType(dict(locations or {}))

    @property
    def size(self) -> int:
        return len(self._locations)

    @property
    def locations(self) -> Mapping[str, str]:
        """Raw ``name -> url[#export]`` strings."""
        return self._locations

    def __getitem__(self, name: str) -> ExternalReference:
        return extract_component_info(self._locations[name])

    def __iter__(self) -> Iterator[str]:
        return iter(self._locations)

    def __len__(self) -> int:
        return len(self._locations)

    def __repr__(self) -> str:
        return f"ImportMap({dict(self._locations)!r})"
