"""ContextVar-based render configuration for safemdx.

Provides thread-local configuration using Python's ContextVars (PEP 567).
A walker reads the config passed to it explicitly, falling back to the one
active in the current context.

Thread Safety:
    ContextVars are thread-local. Each thread has independent storage,
    so no locks are needed.

Usage:
    from safemdx.config import RenderConfig, render_config_context

    with render_config_context(RenderConfig(add_line_numbers=True)):
        result = render(root, components=components)

"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from typing import Any

from safemdx.errors import ConfigError


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Immutable render configuration.

    Attributes:
        allow_esm_imports: Validate ``import`` statements and let components
            resolve to HTTPS module references. When False, import blocks
            are ignored.
        add_line_numbers: Add a ``data-markdown-line`` prop to every
            element produced from a positioned node.
        evaluate_expressions: Evaluate expression attribute values. When
            False every expression attribute is reported and skipped, and
            inline or flow expressions render nothing.
        unravel_paragraphs: Lift components and expressions out of
            paragraphs that contain nothing else.
        normalize_content_model: Run the content-model classifier before
            rendering.
        markup_tag_converter: Tag-name converter for raw markup
            (lowercase name in, component name or ``""`` out).

    """

    allow_esm_imports: bool = False
    add_line_numbers: bool = False
    evaluate_expressions: bool = True
    unravel_paragraphs: bool = False
    normalize_content_model: bool = True
    markup_tag_converter: Callable[[str], str] | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "markup_tag_converter":
                if value is not None and not callable(value):
                    raise ConfigError(f"{f.name} must be callable, got {type(value).__name__}")
            elif not isinstance(value, bool):
                raise ConfigError(f"{f.name} must be a bool, got {type(value).__name__}")

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> RenderConfig:
        """Create RenderConfig from a dictionary.

        Only includes keys that are valid RenderConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = RenderConfig.from_dict({
            ...     "add_line_numbers": True,
            ...     "unknown_key": "ignored",
            ... })
            >>> config.add_line_numbers
            True

        Raises:
            ConfigError: If a known key has a value of the wrong type.

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
DEFAULT_CONFIG: RenderConfig = RenderConfig()

_render_config: ContextVar[RenderConfig] = ContextVar(
    "render_config",
    default=DEFAULT_CONFIG,
)


def get_render_config() -> RenderConfig:
    """Get the render configuration active in the current context."""
    return _render_config.get()


def set_render_config(config: RenderConfig) -> None:
    """Set render configuration for the current context."""
    _render_config.set(config)


def reset_render_config() -> None:
    """Reset to :data:`DEFAULT_CONFIG`."""
    _render_config.set(DEFAULT_CONFIG)


@contextmanager
def render_config_context(config: RenderConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    """
    previous = _render_config.get()
    _render_config.set(config)
    try:
        yield
    finally:
        _render_config.set(previous)


__all__ = [
    "DEFAULT_CONFIG",
    "RenderConfig",
    "get_render_config",
    "render_config_context",
    "reset_render_config",
    "set_render_config",
]
