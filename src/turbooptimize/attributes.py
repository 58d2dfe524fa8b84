"""Attribute lookups over a token stream.

The import scanner, the preload planner and the CSS injection all need the
same thing after seeing a ``tag_open`` token: the attributes of that tag.
These helpers consume the stream up to the end of the current tag and never
look past it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .tokens import TokenKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .tokens import Token


def unquote(value: str) -> str:
    """Strip the canonical double quotes the tokenizer wraps values in."""
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def read_tag_attributes(tokens: Iterator[Token]) -> dict[str, str | None]:
    """Consume the rest of the current tag and return its attributes.

    Boolean attributes map to ``None``. When an attribute is repeated the
    first occurrence wins, as in HTML.
    """
    attrs: dict[str, str | None] = {}
    pending = None
    for token in tokens:
        kind = token.kind
        if kind in TokenKind.TAG_TERMINATORS:
            break
        if kind == TokenKind.ATTR_NAME:
            pending = token.value if token.value not in attrs else None
            if pending is not None:
                attrs[pending] = None
        elif kind == TokenKind.ATTR_VALUE:
            if pending is not None:
                attrs[pending] = unquote(token.value)
            pending = None
    return attrs


def find_attribute_value(tokens: Iterator[Token], name: str) -> str | None:
    """Return the value of ``name`` on the current tag, if it has one."""
    return read_tag_attributes(tokens).get(name)
