"""Diagnostics reported while rendering a document.

Diagnostics are plain data: an append-only list owned by one walker run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_NEWLINES = re.compile(r"\n+")
_SPACES = re.compile(r" +")


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A recoverable problem found in the document.

    Attributes:
        message: Human readable description
        line: 1-indexed source line of the offending node (optional)
        schema_path: Dotted path of the failing prop for schema violations
    """

    message: str
    line: int | None = None
    schema_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict, omitting unset fields."""
        result: dict[str, Any] = {"message": self.message}
        if self.line is not None:
            result["line"] = self.line
        if self.schema_path is not None:
            result["schemaPath"] = self.schema_path
        return result


def collapse_snippet(source: str) -> str:
    """Collapse newlines and repeated spaces so a snippet fits one line.

    Example:
        >>> collapse_snippet("...{\\n  spread: true\\n}")
        '...{ spread: true }'
    """
    return _SPACES.sub(" ", _NEWLINES.sub(" ", source))
