"""--debug token stream dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from docsniff.tokens import Token

_LINKS = (
    ("scope_opener", "scope"),
    ("parenthesis_opener", "parens"),
    ("bracket_opener", "brackets"),
)


def dump_tokens(tokens: tuple[Token, ...], *, file: TextIO = sys.stderr) -> None:
    """Print one line per token: index, position, type, content and pairings."""
    width = len(str(len(tokens)))
    for i, tok in enumerate(tokens):
        file.write(f"{i:>{width}} {tok.line}:{tok.column} {tok.type.name} {tok.content!r}")
        file.write(_links(tok))
        file.write("\n")


def _links(tok: Token) -> str:
    parts = []
    for field, label in _LINKS:
        opener = getattr(tok, field)
        if opener is not None:
            closer = getattr(tok, field.replace("opener", "closer"))
            parts.append(f"{label}={opener}..{closer}")
    if tok.comment_opener is not None:
        parts.append(f"opener={tok.comment_opener}")
    if tok.comment_closer is not None:
        parts.append(f"closer={tok.comment_closer}")
    if tok.comment_tags:
        parts.append("tags=" + ",".join(str(t) for t in tok.comment_tags))
    if not parts:
        return ""
    return "  [" + " ".join(parts) + "]"
