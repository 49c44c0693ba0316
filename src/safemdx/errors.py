"""Exception classes for safemdx.

Recoverable problems found while rendering a document are reported as
:class:`~safemdx.diagnostics.Diagnostic` entries, not exceptions. The
exceptions below are raised internally (and caught by the walker) except for
:class:`UnrecognizedNodeError`, which is the single fatal condition that
escapes ``run()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from safemdx.location import SourceLocation


class SafeMdxError(Exception):
    """Base exception for all safemdx errors.

    Subclass this for specific error categories.
    """

    pass


class ExpressionSyntaxError(SafeMdxError):
    """Restricted expression source could not be parsed.

    Raised by the expression tokenizer and parser.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        """Initialize syntax error.

        Args:
            message: Error description
            offset: Character offset in the expression source (optional)
        """
        self.message = message
        self.offset = offset
        location = f" (at offset {offset})" if offset is not None else ""
        super().__init__(f"{message}{location}")


class EvaluationError(SafeMdxError):
    """Expression contains a construct outside the restricted grammar.

    The canonical message is ``"<NodeType> is not supported"``.
    """

    def __init__(self, message: str, node_type: str | None = None) -> None:
        self.node_type = node_type
        super().__init__(message)

    @classmethod
    def unsupported(cls, node_type: str) -> EvaluationError:
        """Build the error for an unsupported expression node type."""
        return cls(f"{node_type} is not supported", node_type=node_type)


class UnrecognizedNodeError(SafeMdxError):
    """A document node kind with no defined handling reached the walker.

    Fatal: indicates the upstream parser produced structure this interpreter
    was never designed to handle.
    """

    def __init__(self, kind: str, location: SourceLocation | None = None) -> None:
        """Initialize unrecognized node error.

        Args:
            kind: The node kind (mdast ``type``) that was not handled
            location: Where the node came from (optional)
        """
        self.kind = kind
        self.location = location
        where = f" at {location}" if location is not None and location.known else ""
        super().__init__(f"cannot convert node of type {kind!r}{where}")


class ConfigError(SafeMdxError):
    """Invalid render configuration value."""

    pass
