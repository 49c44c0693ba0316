"""On-demand tokenizer for the restricted expression grammar.

The parser pulls tokens one at a time. Template literals and JSX need
context-sensitive scanning, so the lexer also exposes character-level helpers
(``read_template_chunk``, ``read_jsx_text``, ``read_jsx_name``) that the parser
calls when it knows it is inside those constructs.

Thread Safety:
Lexer instances are single-use. Create one per source string.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from safemdx.errors import ExpressionSyntaxError


class TokenKind(Enum):
    """Token kinds produced by the expression lexer."""

    EOF = auto()
    NUMBER = auto()
    STRING = auto()
    NAME = auto()
    PUNCT = auto()
    TEMPLATE_START = auto()  # opening backtick


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed token with its source span."""

    kind: TokenKind
    value: str | int | float
    start: int
    end: int

    def is_punct(self, *values: str) -> bool:
        return self.kind is TokenKind.PUNCT and self.value in values

    def is_name(self, *values: str) -> bool:
        return self.kind is TokenKind.NAME and (not values or self.value in values)


# Longest first so that greedy matching works
PUNCTUATORS: tuple[str, ...] = (
    ">>>=",
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    ">>=",
    ">>>",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "**",
    "<<",
    ">>",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    ";",
    ",",
    "<",
    ">",
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "!",
    "~",
    "?",
    ":",
    ".",
    "=",
    "@",
    "#",
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_MAX_SAFE_INTEGER = 2**53 - 1


def _is_name_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_name_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class Lexer:
    """Pull-based tokenizer over an expression source string."""

    __slots__ = ("_source", "_length", "pos", "_peeked")

    def __init__(self, source: str) -> None:
        self._source = source
        self._length = len(source)
        self.pos = 0
        self._peeked: Token | None = None

    @property
    def source(self) -> str:
        return self._source

    # =========================================================================
    # Token interface
    # =========================================================================

    def peek(self) -> Token:
        """Return the next token without consuming it."""
        if self._peeked is None:
            self._peeked = self._scan()
        return self._peeked

    def next(self) -> Token:
        """Consume and return the next token."""
        token = self.peek()
        self._peeked = None
        self.pos = token.end
        return token

    def reset(self, pos: int) -> None:
        """Rewind (or advance) to an absolute position."""
        self.pos = pos
        self._peeked = None

    def error(self, message: str, offset: int | None = None) -> ExpressionSyntaxError:
        return ExpressionSyntaxError(message, self.pos if offset is None else offset)

    # =========================================================================
    # Character interface (template literals and JSX)
    # =========================================================================

    def skip_whitespace(self) -> None:
        """Skip whitespace and comments from the current position."""
        self._peeked = None
        self.pos = self._skip_trivia(self.pos)

    def peek_char(self) -> str:
        return self._source[self.pos] if self.pos < self._length else ""

    def startswith(self, text: str) -> bool:
        return self._source.startswith(text, self.pos)

    def eat_char(self, ch: str) -> bool:
        """Consume ``ch`` at the current position if present."""
        self._peeked = None
        if self._source.startswith(ch, self.pos):
            self.pos += len(ch)
            return True
        return False

    def expect_char(self, ch: str) -> None:
        if not self.eat_char(ch):
            found = self.peek_char() or "end of input"
            raise self.error(f"Expected {ch!r} but found {found!r}")

    def read_template_chunk(self) -> tuple[str, str, bool]:
        """Read template text up to the next substitution or closing backtick.

        Returns:
            (cooked, raw, tail) where tail is True when the chunk ended the
            literal (closing backtick consumed) and False when it stopped at
            ``${`` (also consumed).
        """
        self._peeked = None
        start = self.pos
        cooked: list[str] = []
        src = self._source
        i = self.pos
        while i < self._length:
            ch = src[i]
            if ch == "`":
                self.pos = i + 1
                return "".join(cooked), src[start:i], True
            if ch == "$" and src.startswith("${", i):
                self.pos = i + 2
                return "".join(cooked), src[start:i], False
            if ch == "\\":
                value, i = self._read_escape(i)
                cooked.append(value)
                continue
            cooked.append(ch)
            i += 1
        raise self.error("Unterminated template literal", start)

    def read_jsx_text(self) -> str:
        """Read raw JSX text until ``<`` or ``{``."""
        self._peeked = None
        start = self.pos
        i = start
        while i < self._length and self._source[i] not in "<{":
            i += 1
        self.pos = i
        return self._source[start:i]

    def read_jsx_name(self) -> str:
        """Read a JSX element or attribute name (dashes, dots and colons allowed)."""
        self._peeked = None
        start = self.pos
        i = start
        if i >= self._length or not _is_name_start(self._source[i]):
            raise self.error("Expected JSX name")
        while i < self._length and (_is_name_part(self._source[i]) or self._source[i] in "-.:"):
            i += 1
        self.pos = i
        return self._source[start:i]

    # =========================================================================
    # Scanning
    # =========================================================================

    def _skip_trivia(self, i: int) -> int:
        src = self._source
        while i < self._length:
            ch = src[i]
            if ch.isspace():
                i += 1
            elif src.startswith("//", i):
                end = src.find("\n", i)
                i = self._length if end == -1 else end + 1
            elif src.startswith("/*", i):
                end = src.find("*/", i + 2)
                if end == -1:
                    raise self.error("Unterminated comment", i)
                i = end + 2
            else:
                break
        return i

    def _scan(self) -> Token:
        i = self._skip_trivia(self.pos)
        if i >= self._length:
            return Token(TokenKind.EOF, "", i, i)

        ch = self._source[i]
        if ch.isdigit() or (ch == "." and i + 1 < self._length and self._source[i + 1].isdigit()):
            return self._scan_number(i)
        if ch in "'\"":
            return self._scan_string(i)
        if ch == "`":
            return Token(TokenKind.TEMPLATE_START, "`", i, i + 1)
        if _is_name_start(ch):
            end = i + 1
            while end < self._length and _is_name_part(self._source[end]):
                end += 1
            return Token(TokenKind.NAME, self._source[i:end], i, end)
        for punct in PUNCTUATORS:
            if self._source.startswith(punct, i):
                # "?." followed by a digit is a ternary, not optional chaining
                if punct == "?." and i + 2 < self._length and self._source[i + 2].isdigit():
                    continue
                return Token(TokenKind.PUNCT, punct, i, i + len(punct))
        raise self.error(f"Unexpected character {ch!r}", i)

    def _scan_number(self, start: int) -> Token:
        src = self._source
        i = start
        if src.startswith(("0x", "0X", "0b", "0B", "0o", "0O"), i):
            base = {"x": 16, "b": 2, "o": 8}[src[i + 1].lower()]
            i += 2
            digits_start = i
            while i < self._length and (src[i].isalnum() or src[i] == "_"):
                i += 1
            digits = src[digits_start:i].replace("_", "")
            try:
                value: int | float = int(digits, base)
            except ValueError:
                raise self.error(f"Invalid number {src[start:i]!r}", start) from None
            return Token(TokenKind.NUMBER, _normalize_number(value), start, i)

        is_float = False
        while i < self._length and (src[i].isdigit() or src[i] == "_"):
            i += 1
        if i < self._length and src[i] == ".":
            is_float = True
            i += 1
            while i < self._length and (src[i].isdigit() or src[i] == "_"):
                i += 1
        if i < self._length and src[i] in "eE":
            j = i + 1
            if j < self._length and src[j] in "+-":
                j += 1
            if j < self._length and src[j].isdigit():
                is_float = True
                i = j
                while i < self._length and src[i].isdigit():
                    i += 1
        if i < self._length and _is_name_start(src[i]):
            raise self.error(f"Invalid number {src[start : i + 1]!r}", start)

        text = src[start:i].replace("_", "")
        value = float(text) if is_float else int(text)
        return Token(TokenKind.NUMBER, _normalize_number(value), start, i)

    def _scan_string(self, start: int) -> Token:
        quote = self._source[start]
        i = start + 1
        parts: list[str] = []
        while i < self._length:
            ch = self._source[i]
            if ch == quote:
                return Token(TokenKind.STRING, "".join(parts), start, i + 1)
            if ch == "\n":
                break
            if ch == "\\":
                value, i = self._read_escape(i)
                parts.append(value)
                continue
            parts.append(ch)
            i += 1
        raise self.error("Unterminated string literal", start)

    def _read_escape(self, i: int) -> tuple[str, int]:
        """Decode the escape sequence starting at the backslash at ``i``."""
        src = self._source
        if i + 1 >= self._length:
            raise self.error("Unterminated escape sequence", i)
        ch = src[i + 1]
        if ch in _SIMPLE_ESCAPES and not (ch == "0" and i + 2 < self._length and src[i + 2].isdigit()):
            return _SIMPLE_ESCAPES[ch], i + 2
        if ch == "x":
            return self._hex_escape(i, i + 2, 2), i + 4
        if ch == "u":
            if src.startswith("{", i + 2):
                end = src.find("}", i + 3)
                if end == -1:
                    raise self.error("Invalid unicode escape", i)
                return self._hex_escape(i, i + 3, end - i - 3), end + 1
            return self._hex_escape(i, i + 2, 4), i + 6
        if ch == "\r" and src.startswith("\r\n", i + 1):
            return "", i + 3
        if ch in "\n\r\u2028\u2029":
            return "", i + 2
        return ch, i + 2

    def _hex_escape(self, at: int, start: int, length: int) -> str:
        digits = self._source[start : start + length]
        try:
            if len(digits) != length or not digits:
                raise ValueError(digits)
            return chr(int(digits, 16))
        except (ValueError, OverflowError):
            raise self.error("Invalid escape sequence", at) from None


def _normalize_number(value: int | float) -> int | float:
    """Keep integers exact only inside the safe-integer range."""
    if isinstance(value, int) and abs(value) > _MAX_SAFE_INTEGER:
        try:
            return float(value)
        except OverflowError:
            return float("inf")
    return value
