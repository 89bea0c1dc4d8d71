"""Forward and backward token search over a token sequence."""

from __future__ import annotations

from collections.abc import Collection, Sequence

from docsniff.tokens import Token, TokenType


def _matches(
    tok: Token,
    types: Collection[TokenType],
    exclude: bool,
    value: str | None,
) -> bool:
    found = tok.type in types
    if exclude:
        return not found
    return found and (value is None or tok.content == value)


def find_previous(
    tokens: Sequence[Token],
    types: TokenType | Collection[TokenType],
    start: int,
    end: int | None = None,
    exclude: bool = False,
    value: str | None = None,
) -> int | None:
    """Return the index of the nearest token at or before *start* that matches.

    With ``exclude=True`` the search returns the first token whose type is NOT in
    *types*. The search stops at *end* (inclusive, default 0). Returns None when
    nothing matches or *start* is out of range.
    """
    if isinstance(types, TokenType):
        types = (types,)
    if start < 0 or start >= len(tokens):
        return None
    stop = 0 if end is None else max(end, 0)
    for i in range(start, stop - 1, -1):
        if _matches(tokens[i], types, exclude, value):
            return i
    return None


def find_next(
    tokens: Sequence[Token],
    types: TokenType | Collection[TokenType],
    start: int,
    end: int | None = None,
    exclude: bool = False,
    value: str | None = None,
) -> int | None:
    """Return the index of the nearest token at or after *start* that matches.

    The search stops before *end* (exclusive, default the end of the stream).
    """
    if isinstance(types, TokenType):
        types = (types,)
    if start < 0:
        return None
    stop = len(tokens) if end is None else min(end, len(tokens))
    for i in range(start, stop):
        if _matches(tokens[i], types, exclude, value):
            return i
    return None
