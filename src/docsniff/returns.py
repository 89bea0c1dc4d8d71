"""Detecting whether a function body returns a value."""

from __future__ import annotations

from collections.abc import Sequence

from docsniff.errors import TokenStreamError
from docsniff.files import SourceFile
from docsniff.tokens import Token, TokenType


def is_matching_return(tokens: Sequence[Token], return_ptr: int) -> bool:
    """Return True if the return statement at *return_ptr* returns something.

    A bare ``return;`` does not.
    """
    i = return_ptr + 1
    while i < len(tokens) and tokens[i].type == TokenType.WHITESPACE:
        i += 1
    if i >= len(tokens):
        return False
    return tokens[i].type != TokenType.SEMICOLON


def has_matching_return(file: SourceFile, stack_ptr: int) -> bool:
    """Return True if the function body has a value-returning return statement.

    Returns inside nested anonymous functions belong to those functions and are
    skipped. Functions without a body never match.
    """
    tokens = file.tokens
    func = tokens[stack_ptr]
    if func.scope_opener is None or func.scope_closer is None:
        return False

    start = file.find_next(TokenType.OPEN_CURLY_BRACKET, stack_ptr, func.scope_closer)
    if start is None:
        raise TokenStreamError("function scope has no opening brace", stack_ptr)

    i = start
    while i < func.scope_closer:
        tok = tokens[i]
        if tok.type == TokenType.CLOSURE:
            if tok.scope_closer is None:
                raise TokenStreamError("closure has no body", i)
            i = tok.scope_closer + 1
            continue
        if tok.type == TokenType.RETURN and is_matching_return(tokens, i):
            return True
        i += 1
    return False
