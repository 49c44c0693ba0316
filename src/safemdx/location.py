"""Source location tracking for diagnostics and line-number instrumentation.

Provides SourceLocation dataclass for tracking positions in source text.
Every document node carries one, mirroring the ``position`` object that
mdast parsers attach to their nodes.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source span of a document node.

    Lines and columns are 1-indexed, offsets are 0-indexed positions in the
    source buffer (the same convention as unist ``position`` points).

    Attributes:
        lineno: Starting line number (1-indexed, 0 when unknown)
        col_offset: Starting column (1-indexed)
        offset: Absolute start offset in source buffer
        end_offset: Absolute end offset in source buffer
        end_lineno: Ending line number (optional)
        end_col_offset: Ending column (optional)

    Examples:
            >>> loc = SourceLocation(lineno=3, col_offset=1, offset=20, end_offset=31)
            >>> str(loc)
            '3:1'
            >>> loc.slice("x" * 40)
            'xxxxxxxxxxx'

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    end_lineno: int | None = None
    end_col_offset: int | None = None

    def __str__(self) -> str:
        """Format location for messages, e.g. ``"10:5"``."""
        return f"{self.lineno}:{self.col_offset}"

    @property
    def known(self) -> bool:
        """True when the location points into real source text."""
        return self.lineno > 0

    def slice(self, source: str) -> str:
        """Return the source text covered by this span ("" when unknown)."""
        if not self.known or self.end_offset <= self.offset:
            return ""
        return source[self.offset : self.end_offset]

    def contains(self, other: SourceLocation) -> bool:
        """Check that ``other`` lies inside this span (offset based)."""
        return self.offset <= other.offset and other.end_offset <= self.end_offset

    @classmethod
    def unknown(cls) -> SourceLocation:
        """Create an unknown/placeholder location.

        Use for nodes created synthetically, e.g. by the markup normalizer.
        """
        return cls(lineno=0, col_offset=0)

    @classmethod
    def from_position(cls, position: Mapping[str, Any] | None) -> SourceLocation:
        """Build a location from a unist ``position`` mapping.

        Args:
            position: ``{"start": {line, column, offset}, "end": {...}}`` or None

        Returns:
            SourceLocation, ``unknown()`` when the position is missing
        """
        if not position:
            return cls.unknown()
        start = position.get("start") or {}
        end = position.get("end") or {}
        return cls(
            lineno=start.get("line") or 0,
            col_offset=start.get("column") or 0,
            offset=start.get("offset") or 0,
            end_offset=end.get("offset") or 0,
            end_lineno=end.get("line"),
            end_col_offset=end.get("column"),
        )

    def to_position(self) -> dict[str, Any] | None:
        """Inverse of :meth:`from_position` (None for unknown locations)."""
        if not self.known:
            return None
        return {
            "start": {"line": self.lineno, "column": self.col_offset, "offset": self.offset},
            "end": {
                "line": self.end_lineno,
                "column": self.end_col_offset,
                "offset": self.end_offset,
            },
        }
