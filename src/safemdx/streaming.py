"""Partial-tag balancing for streamed documents.

Text generated incrementally can stop in the middle of a component
(``<Card><Note>Hel``). :func:`complete_tags` closes whatever is still open
so that the upstream parser accepts the prefix.

The tag grammar is deliberately minimal (``<name ...>``, ``</name>``,
``<name .../>``) and closing tags are not checked against the opening name:
a closing tag pops whatever is on top of the stack.

Example:
    >>> complete_tags("<Card><Note>Hel")
    '<Card><Note></Note></Card>'
    >>> complete_tags("<a>x</a>")
    '<a>x</a>'

"""

from __future__ import annotations

import re

TAG_PATTERN = re.compile(r"<(/?)([a-zA-Z][a-zA-Z0-9]*)\s*([^>]*?)(/)?>")


def complete_tags(text: str) -> str:
    """Return ``text`` up to its last complete tag plus synthetic closers.

    Blank input yields ``""``. Text after the last complete tag (including a
    partially written tag) is dropped.
    """
    if not text.strip():
        return ""

    stack: list[str] = []
    end = 0
    for match in TAG_PATTERN.finditer(text):
        closing, name, _attributes, self_closing = match.groups()
        if self_closing:
            pass
        elif closing:
            if stack:
                stack.pop()
        else:
            stack.append(name)
        end = match.end()

    return text[:end] + "".join(f"</{name}>" for name in reversed(stack))
