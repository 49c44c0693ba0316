"""Output element tree produced by the walker.

The walker never builds output objects itself; it calls a construction
primitive with ``(type, props, *children)``. :func:`create_element` is the
default primitive and builds :class:`Element` values. Integrators targeting a
real UI runtime pass their own.

Thread Safety:
Elements are frozen; their props mappings are read-only views.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Protocol


class _Fragment:
    """Sentinel element type for fragments (children without a wrapper)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "FRAGMENT"


FRAGMENT: Final = _Fragment()


@dataclass(frozen=True, slots=True)
class DeferredComponent:
    """Capability standing for a component loaded from an external module.

    Produced for components bound through validated ``import`` statements.
    Loading the module is left to the integrator; the element props also
    carry ``import_url`` and ``component_name``.

    """

    url: str
    export_name: str = "default"


@dataclass(frozen=True, slots=True)
class Element:
    """A constructed output element.

    Attributes:
        type: Tag name, component capability, :data:`FRAGMENT` or a
            :class:`DeferredComponent`
        props: Element properties
        children: None, a single child, or a tuple of children

    """

    type: Any
    props: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), hash=False)
    children: Any = None

    def iter_children(self) -> tuple[Any, ...]:
        """Children as a tuple, whatever their stored shape."""
        if self.children is None:
            return ()
        if isinstance(self.children, tuple):
            return self.children
        return (self.children,)


class ElementFactory(Protocol):
    """Construction primitive: ``(type, props, *children) -> element``."""

    def __call__(self, type: Any, props: Mapping[str, Any] | None, /, *children: Any) -> Any: ...


def normalize_children(children: tuple[Any, ...] | list[Any]) -> Any:
    """Empty -> None, single -> the child, several -> tuple."""
    if not children:
        return None
    if len(children) == 1:
        return children[0]
    return tuple(children)


def create_element(type: Any, props: Mapping[str, Any] | None = None, /, *children: Any) -> Element:
    """Default construction primitive.

    Example:
        >>> create_element("p", None, "hello")
        Element(type='p', props=mappingproxy({}), children='hello')

    """
    return Element(
        type=type,
        props=MappingProxyType(dict(props or {})),
        children=normalize_children(children),
    )


type CreateElement = ElementFactory | Callable[..., Any]
